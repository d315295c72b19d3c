# petvolunteer/api/volunteer/services.py
import logging
from dataclasses import asdict
from typing import Any, Dict, Optional

from petvolunteer.api.base import BaseListingService
from petvolunteer.core.listing import Cascade
from petvolunteer.core.membership import VolunteerParticipation
from petvolunteer.core.session import Session
from petvolunteer.models.volunteer import VolunteerPost, DEFAULT_MAX_PARTICIPANTS
from petvolunteer.services.table_service import StoreError, TableClient


class VolunteerService(BaseListingService):
    """
    봉사활동 모집 게시글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    목록(홈), 상세, 작성/수정, 좋아요, 참여 신청/취소, 삭제를 처리합니다.
    """
    table = 'volunteer_posts'
    cascade = (Cascade('volunteer_participants', 'volunteer_post_id'),)

    def __init__(self, table_client: TableClient, default_max_participants: int = DEFAULT_MAX_PARTICIPANTS):
        super().__init__(table_client)
        self.default_max_participants = default_max_participants

    def get_detail(self, post_id: str, session: Session) -> Optional[VolunteerParticipation]:
        """게시글과 참여자 목록을 함께 조회합니다. 없거나 조회에 실패하면 None."""
        try:
            listing = self.load_record(post_id, session)
            return VolunteerParticipation.load(self.table_client, listing.find(post_id), session)
        except (ValueError, StoreError) as e:
            logging.error(f"봉사활동 상세 조회 실패 (post_id: {post_id}): {e}")
            return None

    def create_post(self, session: Session, data: Dict[str, Any]) -> Dict[str, Any]:
        user = session.require_user()
        new_post = VolunteerPost(
            title=data['title'],
            content=data['content'],
            author_id=user['id'],
            shelter_name=data.get('shelter_name'),
            shelter_location=data.get('shelter_location'),
            volunteer_date=_date_string(data.get('volunteer_date')),
            volunteer_time=data.get('volunteer_time'),
            max_participants=data.get('max_participants') or self.default_max_participants,
            image_url=data.get('image_url') or None,
        )
        created = self.table_client.insert(self.table, [asdict(new_post)])[0]
        logging.info(f"봉사활동 게시글 작성 (post_id: {created['id']}, author_id: {user['id']})")
        return created

    def update_post(self, post_id: str, session: Session, data: Dict[str, Any]) -> Dict[str, Any]:
        """작성자 본인만 수정할 수 있습니다. 전달된 필드만 반영합니다."""
        session.require_user()
        listing = self.load_record(post_id, session)
        self._require_author(listing.find(post_id), session)

        changes = dict(data)
        if 'volunteer_date' in changes:
            changes['volunteer_date'] = _date_string(changes['volunteer_date'])
        if 'image_url' in changes:
            changes['image_url'] = changes['image_url'] or None
        if not changes:
            return listing.find(post_id)

        self.table_client.update(self.table, changes, [('id', '==', post_id)])
        logging.info(f"봉사활동 게시글 수정 (post_id: {post_id}, fields: {sorted(changes)})")
        return {**listing.find(post_id), **changes}

    def join(self, post_id: str, session: Session) -> VolunteerParticipation:
        participation = self._participation(post_id, session)
        participation.join()
        return participation

    def cancel(self, post_id: str, session: Session) -> VolunteerParticipation:
        participation = self._participation(post_id, session)
        participation.cancel()
        return participation

    def _participation(self, post_id: str, session: Session) -> VolunteerParticipation:
        session.require_user()
        listing = self.load_record(post_id, session)
        return VolunteerParticipation.load(self.table_client, listing.find(post_id), session)


def _date_string(value) -> Optional[str]:
    if not value:
        return None
    return value.isoformat() if hasattr(value, 'isoformat') else str(value)
