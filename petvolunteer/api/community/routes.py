# petvolunteer/api/community/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from petvolunteer.api.base import CONFIRMATION_REQUIRED, RecordNotFound, is_confirmed
from petvolunteer.api.community.schemas import PostCreateSchema, PostResponseSchema
from petvolunteer.services.table_service import StoreError

community_bp = Blueprint('community_bp', __name__)


@community_bp.route('/posts', methods=['GET'])
@jwt_required(optional=True)
def list_posts():
    session = current_app.services['auth'].current_session()
    listing = current_app.services['community'].fetch_posts(session)
    response = {
        "posts": PostResponseSchema(many=True).dump(listing.records),
        "empty_message": "아직 작성된 글이 없어요" if listing.is_empty else None,
    }
    if listing.error is not None:
        response["error"] = "게시글을 불러오는 중 오류가 발생했습니다."
    return jsonify(response), 200


@community_bp.route('/posts', methods=['POST'])
@jwt_required(optional=True)
def create_post():
    """커뮤니티 글을 작성합니다. 해시태그는 정리된 뒤 저장됩니다."""
    session = current_app.services['auth'].current_session()
    try:
        data = PostCreateSchema().load(request.get_json())
        created = current_app.services['community'].create_post(session, data)
        return jsonify(PostResponseSchema().dump(created)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except StoreError as e:
        logging.error(f"커뮤니티 글 작성 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "POST_CREATION_FAILED", "message": "글 작성 중 오류가 발생했습니다."}), 500


@community_bp.route('/posts/<string:post_id>/like', methods=['POST'])
@jwt_required(optional=True)
def like_post(post_id: str):
    session = current_app.services['auth'].current_session()
    try:
        post = current_app.services['community'].like(post_id, session)
        return jsonify(PostResponseSchema().dump(post)), 200
    except RecordNotFound as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404
    except StoreError as e:
        logging.error(f"좋아요 처리 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "LIKE_FAILED", "message": "좋아요 처리 중 오류가 발생했습니다."}), 500


@community_bp.route('/posts/<string:post_id>', methods=['DELETE'])
@jwt_required(optional=True)
def delete_post(post_id: str):
    """[작성자 전용] 커뮤니티 글을 삭제합니다. ?confirm=true 필요."""
    session = current_app.services['auth'].current_session()
    try:
        if not current_app.services['community'].delete(post_id, session, confirmed=is_confirmed(request.args)):
            return jsonify(CONFIRMATION_REQUIRED), 400
        return jsonify({"message": "삭제되었습니다."}), 200
    except RecordNotFound as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except StoreError as e:
        logging.error(f"커뮤니티 글 삭제 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "DELETE_FAILED", "message": "삭제 중 오류가 발생했습니다."}), 500
