# petvolunteer/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from flask import Flask, jsonify, redirect
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials, firestore

# - 설정
from petvolunteer.core.config import config_by_name
from petvolunteer.core.session import LoginRequired

# - API 블루프린트
from petvolunteer.api.shell.routes import shell_bp
from petvolunteer.api.auth.routes import auth_bp
from petvolunteer.api.volunteer.routes import volunteer_bp
from petvolunteer.api.restaurants.routes import restaurants_bp
from petvolunteer.api.community.routes import community_bp
from petvolunteer.api.attendance.routes import attendance_bp
from petvolunteer.api.mypage.routes import mypage_bp
from petvolunteer.api.uploads.routes import uploads_bp

# - 서비스 모듈
from petvolunteer.services.table_service import TableClient
from petvolunteer.services.storage_service import StorageService
from petvolunteer.api.auth.services import AuthService
from petvolunteer.api.volunteer.services import VolunteerService
from petvolunteer.api.restaurants.services import RestaurantService
from petvolunteer.api.community.services import CommunityService
from petvolunteer.api.attendance.services import AttendanceService
from petvolunteer.api.mypage.services import MyPageService


def create_app(config_name=None, db=None, bucket=None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' | 'testing' | 'production' (기본값: FLASK_ENV)
    :param db: Firestore 클라이언트. 주어지면 firebase_admin 초기화를 건너뜁니다.
    :param bucket: Storage 버킷 객체. 주어지면 그대로 사용합니다.
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    if not app.config.get('JWT_SECRET_KEY'):
        raise ValueError("JWT_SECRET_KEY 환경 변수가 설정되지 않았습니다.")

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    jwt_manager = JWTManager(app)

    if db is None:
        if not firebase_admin._apps:
            cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
            if not cred_path or not os.path.exists(cred_path):
                raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
            cred = credentials.Certificate(cred_path)
            firebase_admin.initialize_app(cred, {
                'storageBucket': app.config['FIREBASE_STORAGE_BUCKET']
            })
        db = firestore.client()

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 5-1. 다른 서비스의 기반이 되는 공용 서비스 먼저 생성
    table_client = TableClient(db)
    app.services['table'] = table_client

    try:
        storage_instance = StorageService()
        storage_instance.init_app(app, bucket=bucket)
        app.services['storage'] = storage_instance
        logging.info("Storage service initialized successfully")
    except Exception as e:
        logging.error(f"Failed to initialize storage service: {e}")
        raise

    # 5-2. 화면별 도메인 서비스
    app.services['auth'] = AuthService(table_client)
    app.services['volunteer'] = VolunteerService(
        table_client,
        default_max_participants=app.config['DEFAULT_MAX_PARTICIPANTS'],
    )
    app.services['restaurants'] = RestaurantService(table_client)
    app.services['community'] = CommunityService(table_client)
    app.services['attendance'] = AttendanceService(table_client)
    app.services['mypage'] = MyPageService(table_client)

    # - 로그아웃된 토큰 거부
    @jwt_manager.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return app.services['auth'].is_token_revoked(jwt_payload)

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(shell_bp)
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(volunteer_bp, url_prefix='/api/volunteer')
    app.register_blueprint(restaurants_bp, url_prefix='/api/restaurants')
    app.register_blueprint(community_bp, url_prefix='/api/community')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')
    app.register_blueprint(mypage_bp, url_prefix='/api/mypage')
    app.register_blueprint(uploads_bp, url_prefix='/api/uploads')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(LoginRequired)
    def handle_login_required(err):
        response = {"error_code": "LOGIN_REQUIRED", "message": str(err), "redirect": err.redirect_to}
        return jsonify(response), 401

    @app.errorhandler(404)
    def handle_not_found(err):
        # 알 수 없는 경로는 스플래시 화면으로 보냅니다.
        return redirect('/')

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        if isinstance(err, HTTPException):
            return err
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
