# petvolunteer/api/uploads/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required

from petvolunteer.core.attachment import (
    IMAGE_FOLDERS,
    ImageAttachment,
    ImageFile,
    ImageUploadError,
    ImageValidationError,
)

uploads_bp = Blueprint('uploads_bp', __name__)


@uploads_bp.route('/images', methods=['POST'])
@jwt_required(optional=True)
def upload_image():
    """
    [로그인 필요] 글쓰기 화면의 이미지 첨부.
    multipart/form-data의 'file'과 'kind'(volunteer, restaurants, posts)를 받아
    공개 URL과 미리보기(data URL)를 반환합니다.
    """
    current_app.services['auth'].current_session().require_user()

    kind = request.form.get('kind', '')
    if kind not in IMAGE_FOLDERS:
        return jsonify({"error_code": "INVALID_KIND", "message": f"kind는 {', '.join(IMAGE_FOLDERS)} 중 하나여야 합니다."}), 400

    uploaded = request.files.get('file')
    if uploaded is None or not uploaded.filename:
        return jsonify({"error_code": "FILE_REQUIRED", "message": "업로드할 파일이 필요합니다."}), 400

    image = ImageFile(
        filename=uploaded.filename,
        content_type=uploaded.mimetype or None,
        data=uploaded.read(),
    )
    attachment = ImageAttachment(
        current_app.services['storage'],
        kind,
        max_bytes=current_app.config['IMAGE_MAX_BYTES'],
        cache_control=current_app.config['IMAGE_CACHE_CONTROL'],
    )
    try:
        image_url = attachment.select(image)
        return jsonify({"image_url": image_url, "preview": attachment.preview}), 201
    except ImageValidationError as e:
        return jsonify({"error_code": "INVALID_IMAGE", "message": str(e)}), 400
    except ImageUploadError as e:
        logging.error(f"이미지 업로드 API 실패 (kind: {kind}): {e}")
        return jsonify({"error_code": "UPLOAD_FAILED", "message": str(e)}), 500
