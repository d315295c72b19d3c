# petvolunteer/api/auth/routes.py

import logging
import jwt
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    jwt_required,
    get_jwt_identity,
)
from marshmallow import ValidationError

from petvolunteer.api.auth.schemas import SignupSchema, LoginSchema, LogoutRequestSchema, UserResponseSchema
from petvolunteer.api.auth.services import SignupError, DuplicateUsernameError
from petvolunteer.services.table_service import StoreError

auth_bp = Blueprint('auth_bp', __name__)


def _issue_tokens(session):
    """로그인된 세션을 다음 요청에서 복원할 수 있도록 토큰으로 발급합니다."""
    identity = session.user_id
    return {
        "access_token": create_access_token(identity=identity),
        "refresh_token": create_refresh_token(identity=identity),
        "user": UserResponseSchema().dump(session.user),
    }


@auth_bp.route('/signup', methods=['POST'])
def signup():
    """회원가입 후 바로 로그인 상태(토큰 발급)로 전환합니다."""
    auth_service = current_app.services['auth']
    try:
        data = SignupSchema().load(request.get_json())
        session = auth_service.signup_and_login(data['username'], data['password'], data['password_confirm'], data['nickname'])
        return jsonify(_issue_tokens(session)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except SignupError as e:
        return jsonify({"error_code": "INVALID_SIGNUP", "message": str(e)}), 400
    except DuplicateUsernameError as e:
        return jsonify({"error_code": "USERNAME_TAKEN", "message": str(e)}), 409
    except StoreError as e:
        logging.error(f"회원가입 중 저장소 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "SIGNUP_FAILED", "message": "회원가입 중 오류가 발생했습니다."}), 500


@auth_bp.route('/login', methods=['POST'])
def login():
    """아이디/비밀번호로 로그인합니다."""
    auth_service = current_app.services['auth']
    try:
        data = LoginSchema().load(request.get_json())
        session = auth_service.login(data['username'], data['password'])
        if session is None:
            return jsonify({"error_code": "INVALID_CREDENTIALS", "message": "아이디 또는 비밀번호가 올바르지 않습니다."}), 401
        logging.info(f"로그인 성공 (user_id: {session.user_id})")
        return jsonify(_issue_tokens(session)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except StoreError as e:
        logging.error(f"로그인 중 저장소 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "LOGIN_FAILED", "message": "로그인 중 오류가 발생했습니다."}), 500


@auth_bp.route('/me', methods=['GET'])
@jwt_required(optional=True)
def me():
    """현재 세션의 사용자 정보를 반환합니다. 비로그인 상태면 user는 null입니다."""
    session = current_app.services['auth'].current_session()
    user = UserResponseSchema().dump(session.user) if session.user else None
    return jsonify({"is_authenticated": session.is_authenticated, "user": user}), 200


# --- 토큰 재발급 엔드포인트 ---
@auth_bp.route('/token/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh_token():
    """유효한 Refresh Token으로 새로운 Access Token을 발급합니다."""
    current_user_id = get_jwt_identity()
    new_access_token = create_access_token(identity=current_user_id)
    return jsonify(access_token=new_access_token), 200


# --- 로그아웃 엔드포인트 ---
@auth_bp.route('/logout', methods=['POST'])
def logout():
    """로그아웃. 전달받은 Access/Refresh 토큰을 무효화 목록에 추가합니다."""
    auth_service = current_app.services['auth']
    try:
        data = LogoutRequestSchema().load(request.get_json())
        secret_key = current_app.config['JWT_SECRET_KEY']
        algorithm = current_app.config.get('JWT_ALGORITHM', 'HS256')

        # 만료된 토큰도 로그아웃할 수 있도록 만료 검사는 생략합니다.
        decoded_access = jwt.decode(data['access_token'], secret_key, algorithms=[algorithm], options={"verify_exp": False})
        decoded_refresh = jwt.decode(data['refresh_token'], secret_key, algorithms=[algorithm], options={"verify_exp": False})

        auth_service.logout_user(
            decoded_access['jti'], decoded_access['exp'],
            decoded_refresh['jti'], decoded_refresh['exp'],
        )
        return jsonify({"message": "로그아웃 되었습니다."}), 200

    except ValidationError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": e.messages}), 400
    except jwt.PyJWTError as e:
        logging.error(f"JWT 해독 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INVALID_TOKEN", "message": "유효하지 않은 토큰입니다."}), 422
    except StoreError as e:
        logging.error(f"로그아웃 처리 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "LOGOUT_FAILED", "message": "로그아웃 처리 중 오류가 발생했습니다."}), 500
