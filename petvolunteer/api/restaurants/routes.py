# petvolunteer/api/restaurants/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from petvolunteer.api.base import CONFIRMATION_REQUIRED, RecordNotFound, is_confirmed
from petvolunteer.api.restaurants.schemas import RestaurantCreateSchema, RestaurantResponseSchema
from petvolunteer.models.restaurant import ALL_REGIONS
from petvolunteer.services.table_service import StoreError

restaurants_bp = Blueprint('restaurants_bp', __name__)


@restaurants_bp.route('', methods=['GET'])
@jwt_required(optional=True)
def list_restaurants():
    """식당 목록. ?region=서울 처럼 지역을 지정할 수 있습니다 (기본값 '전체')."""
    restaurant_service = current_app.services['restaurants']
    region = request.args.get('region', ALL_REGIONS)
    if region not in restaurant_service.get_regions():
        return jsonify({"error_code": "INVALID_REGION", "message": "지원하지 않는 지역입니다."}), 400

    session = current_app.services['auth'].current_session()
    listing = restaurant_service.fetch_by_region(session, region)
    response = {
        "region": region,
        "restaurants": RestaurantResponseSchema(many=True).dump(listing.records),
        "empty_message": "등록된 식당이 없어요" if listing.is_empty else None,
    }
    if listing.error is not None:
        response["error"] = "식당 목록을 불러오는 중 오류가 발생했습니다."
    return jsonify(response), 200


@restaurants_bp.route('/regions', methods=['GET'])
def list_regions():
    return jsonify({"regions": current_app.services['restaurants'].get_regions()}), 200


@restaurants_bp.route('', methods=['POST'])
@jwt_required(optional=True)
def create_restaurant():
    """반려동물 동반 가능 식당을 등록합니다."""
    session = current_app.services['auth'].current_session()
    try:
        data = RestaurantCreateSchema().load(request.get_json())
        created = current_app.services['restaurants'].create_restaurant(session, data)
        return jsonify(RestaurantResponseSchema().dump(created)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except StoreError as e:
        logging.error(f"식당 등록 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "RESTAURANT_CREATION_FAILED", "message": "식당 등록 중 오류가 발생했습니다."}), 500


@restaurants_bp.route('/<string:restaurant_id>/like', methods=['POST'])
@jwt_required(optional=True)
def like_restaurant(restaurant_id: str):
    session = current_app.services['auth'].current_session()
    try:
        restaurant = current_app.services['restaurants'].like(restaurant_id, session)
        return jsonify(RestaurantResponseSchema().dump(restaurant)), 200
    except RecordNotFound as e:
        return jsonify({"error_code": "RESTAURANT_NOT_FOUND", "message": str(e)}), 404
    except StoreError as e:
        logging.error(f"좋아요 처리 중 오류 발생 (restaurant_id: {restaurant_id}): {e}", exc_info=True)
        return jsonify({"error_code": "LIKE_FAILED", "message": "좋아요 처리 중 오류가 발생했습니다."}), 500


@restaurants_bp.route('/<string:restaurant_id>', methods=['DELETE'])
@jwt_required(optional=True)
def delete_restaurant(restaurant_id: str):
    """[작성자 전용] 식당 정보를 삭제합니다. ?confirm=true 필요."""
    session = current_app.services['auth'].current_session()
    try:
        if not current_app.services['restaurants'].delete(restaurant_id, session, confirmed=is_confirmed(request.args)):
            return jsonify(CONFIRMATION_REQUIRED), 400
        return jsonify({"message": "삭제되었습니다."}), 200
    except RecordNotFound as e:
        return jsonify({"error_code": "RESTAURANT_NOT_FOUND", "message": str(e)}), 404
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except StoreError as e:
        logging.error(f"식당 삭제 중 오류 발생 (restaurant_id: {restaurant_id}): {e}", exc_info=True)
        return jsonify({"error_code": "DELETE_FAILED", "message": "삭제 중 오류가 발생했습니다."}), 500
