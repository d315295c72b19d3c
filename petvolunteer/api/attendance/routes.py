# petvolunteer/api/attendance/routes.py
import logging
from flask import Blueprint, jsonify, current_app
from flask_jwt_extended import jwt_required

from petvolunteer.api.attendance.schemas import AttendanceEntrySchema
from petvolunteer.services.table_service import StoreError
from petvolunteer.utils.datetime_utils import DateTimeUtils

attendance_bp = Blueprint('attendance_bp', __name__)


def _board_payload(board):
    return {
        "today": board.today,
        "today_label": DateTimeUtils.format_full_date(board.today),
        "entries": AttendanceEntrySchema(many=True).dump(board.entries),
        "entry_count": len(board.entries),
        "checked_in": board.has_checked_in,
        "monthly_count": board.monthly_count,
    }


@attendance_bp.route('', methods=['GET'])
@jwt_required(optional=True)
def get_attendance():
    """오늘 출석 현황. 로그인 상태이면 본인의 출석 여부와 이번 달 출석 횟수를 포함합니다."""
    session = current_app.services['auth'].current_session()
    board = current_app.services['attendance'].get_board(session)
    return jsonify(_board_payload(board)), 200


@attendance_bp.route('', methods=['POST'])
@jwt_required(optional=True)
def check_in():
    """오늘 출석 체크. 이미 출석한 경우에도 200과 checked_in: true를 반환합니다."""
    session = current_app.services['auth'].current_session()
    try:
        board = current_app.services['attendance'].check_in(session)
        return jsonify(_board_payload(board)), 200
    except StoreError as e:
        logging.error(f"출석 체크 중 오류 발생 (user_id: {session.user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "CHECK_IN_FAILED", "message": "출석 체크 중 오류가 발생했습니다."}), 500
