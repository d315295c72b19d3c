# petvolunteer/api/restaurants/services.py
import logging
from dataclasses import asdict
from typing import Any, Dict, List

from petvolunteer.api.base import BaseListingService
from petvolunteer.core.listing import Listing
from petvolunteer.core.session import Session
from petvolunteer.models.restaurant import Restaurant, ALL_REGIONS, REGIONS


class RestaurantService(BaseListingService):
    """반려동물 동반 가능 식당 목록/작성/좋아요/삭제를 담당하는 서비스 클래스."""
    table = 'restaurants'
    not_found_message = "식당 정보를 찾을 수 없습니다."

    def fetch_by_region(self, session: Session, region: str = ALL_REGIONS) -> Listing:
        """지역 필터('전체'이면 필터 없음)를 적용해 최신순으로 조회합니다."""
        filters = [] if not region or region == ALL_REGIONS else [('region', '==', region)]
        return self.fetch_listing(session, filters)

    @staticmethod
    def get_regions() -> List[str]:
        return [ALL_REGIONS] + list(REGIONS)

    def create_restaurant(self, session: Session, data: Dict[str, Any]) -> Dict[str, Any]:
        user = session.require_user()
        restaurant = Restaurant(
            name=data['name'],
            region=data['region'],
            author_id=user['id'],
            address=data.get('address') or None,
            content=data.get('content') or None,
            image_url=data.get('image_url') or None,
        )
        created = self.table_client.insert(self.table, [asdict(restaurant)])[0]
        logging.info(f"식당 등록 (restaurant_id: {created['id']}, region: {created['region']})")
        return created
