# petvolunteer/api/mypage/routes.py
import logging
from flask import Blueprint, jsonify, current_app
from flask_jwt_extended import jwt_required

from petvolunteer.api.auth.schemas import UserResponseSchema
from petvolunteer.services.table_service import StoreError

mypage_bp = Blueprint('mypage_bp', __name__)


@mypage_bp.route('', methods=['GET'])
@jwt_required(optional=True)
def get_mypage():
    """[로그인 필요] 프로필과 이번 달 출석, 봉사활동 참여, 작성 글 수."""
    session = current_app.services['auth'].current_session()
    try:
        stats = current_app.services['mypage'].get_stats(session)
    except StoreError as e:
        logging.error(f"마이페이지 조회 중 오류 발생 (user_id: {session.user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "MYPAGE_FETCH_FAILED", "message": "정보를 불러오는 중 오류가 발생했습니다."}), 500

    stats["profile"] = UserResponseSchema().dump(stats["profile"])
    return jsonify(stats), 200
