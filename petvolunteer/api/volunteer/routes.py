# petvolunteer/api/volunteer/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from petvolunteer.api.base import CONFIRMATION_REQUIRED, RecordNotFound, is_confirmed
from petvolunteer.api.volunteer.schemas import (
    ParticipantSchema,
    VolunteerDetailResponseSchema,
    VolunteerPostCreateSchema,
    VolunteerPostResponseSchema,
    VolunteerPostUpdateSchema,
)
from petvolunteer.core.membership import CapacityReached, ParticipationState
from petvolunteer.services.table_service import StoreError

volunteer_bp = Blueprint('volunteer_bp', __name__)

EMPTY_MESSAGE = "아직 등록된 봉사활동이 없어요"


def _detail_payload(participation, session):
    return {
        "post": VolunteerDetailResponseSchema().dump(participation.post),
        "participants": ParticipantSchema(many=True).dump(participation.participants),
        "participant_count": len(participation.participants),
        "is_participating": participation.state == ParticipationState.JOINED,
        "can_join": participation.can_join,
        "is_full": participation.is_full,
        "is_author": session.is_author(participation.post),
    }


@volunteer_bp.route('', methods=['GET'])
@jwt_required(optional=True)
def list_posts():
    """홈 화면: 봉사활동 모집 글 목록 (최신순)."""
    session = current_app.services['auth'].current_session()
    listing = current_app.services['volunteer'].fetch_listing(session)
    response = {
        "posts": VolunteerPostResponseSchema(many=True).dump(listing.records),
        "empty_message": EMPTY_MESSAGE if listing.is_empty else None,
        "can_write": session.is_authenticated,
    }
    if listing.error is not None:
        response["error"] = "봉사활동 목록을 불러오는 중 오류가 발생했습니다."
    return jsonify(response), 200


@volunteer_bp.route('', methods=['POST'])
@jwt_required(optional=True)
def create_post():
    """봉사활동 모집 글을 작성합니다."""
    session = current_app.services['auth'].current_session()
    volunteer_service = current_app.services['volunteer']
    try:
        data = VolunteerPostCreateSchema().load(request.get_json())
        new_post = volunteer_service.create_post(session, data)
        return jsonify(VolunteerPostResponseSchema().dump(new_post)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except StoreError as e:
        logging.error(f"봉사활동 글 작성 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "POST_CREATION_FAILED", "message": "글 작성 중 오류가 발생했습니다."}), 500


@volunteer_bp.route('/<string:post_id>', methods=['GET'])
@jwt_required(optional=True)
def get_post(post_id: str):
    """상세 화면: 게시글, 참여자 목록, 현재 사용자의 참여 여부."""
    session = current_app.services['auth'].current_session()
    participation = current_app.services['volunteer'].get_detail(post_id, session)
    if participation is None:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": "게시글을 찾을 수 없습니다."}), 404
    return jsonify(_detail_payload(participation, session)), 200


@volunteer_bp.route('/<string:post_id>', methods=['PATCH'])
@jwt_required(optional=True)
def update_post(post_id: str):
    """[작성자 전용] 봉사활동 글을 수정합니다."""
    session = current_app.services['auth'].current_session()
    volunteer_service = current_app.services['volunteer']
    try:
        data = VolunteerPostUpdateSchema().load(request.get_json())
        updated = volunteer_service.update_post(post_id, session, data)
        return jsonify(VolunteerPostResponseSchema().dump(updated)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except RecordNotFound as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except StoreError as e:
        logging.error(f"봉사활동 글 수정 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "POST_UPDATE_FAILED", "message": "수정 중 오류가 발생했습니다."}), 500


@volunteer_bp.route('/<string:post_id>', methods=['DELETE'])
@jwt_required(optional=True)
def delete_post(post_id: str):
    """[작성자 전용] 봉사활동 글과 참여 신청 내역을 삭제합니다. ?confirm=true 필요."""
    session = current_app.services['auth'].current_session()
    volunteer_service = current_app.services['volunteer']
    try:
        if not volunteer_service.delete(post_id, session, confirmed=is_confirmed(request.args)):
            return jsonify(CONFIRMATION_REQUIRED), 400
        return jsonify({"message": "삭제되었습니다.", "redirect": "/home"}), 200
    except RecordNotFound as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except StoreError as e:
        logging.error(f"봉사활동 글 삭제 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "DELETE_FAILED", "message": "삭제 중 오류가 발생했습니다."}), 500


@volunteer_bp.route('/<string:post_id>/like', methods=['POST'])
@jwt_required(optional=True)
def like_post(post_id: str):
    """좋아요 수를 1 올립니다. 같은 사용자가 여러 번 누를 수 있습니다."""
    session = current_app.services['auth'].current_session()
    try:
        post = current_app.services['volunteer'].like(post_id, session)
        return jsonify(VolunteerPostResponseSchema().dump(post)), 200
    except RecordNotFound as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404
    except StoreError as e:
        logging.error(f"좋아요 처리 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "LIKE_FAILED", "message": "좋아요 처리 중 오류가 발생했습니다."}), 500


@volunteer_bp.route('/<string:post_id>/participants', methods=['POST'])
@jwt_required(optional=True)
def join(post_id: str):
    """봉사활동 참여 신청. 모집 인원이 가득 차면 409."""
    session = current_app.services['auth'].current_session()
    try:
        participation = current_app.services['volunteer'].join(post_id, session)
        return jsonify(_detail_payload(participation, session)), 200
    except RecordNotFound as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404
    except CapacityReached as e:
        return jsonify({"error_code": "CAPACITY_FULL", "message": str(e)}), 409
    except StoreError as e:
        logging.error(f"참여 신청 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "PARTICIPATION_FAILED", "message": "참여 처리 중 오류가 발생했습니다."}), 500


@volunteer_bp.route('/<string:post_id>/participants', methods=['DELETE'])
@jwt_required(optional=True)
def cancel(post_id: str):
    """봉사활동 참여 취소."""
    session = current_app.services['auth'].current_session()
    try:
        participation = current_app.services['volunteer'].cancel(post_id, session)
        return jsonify(_detail_payload(participation, session)), 200
    except RecordNotFound as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404
    except StoreError as e:
        logging.error(f"참여 취소 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "PARTICIPATION_FAILED", "message": "참여 처리 중 오류가 발생했습니다."}), 500
