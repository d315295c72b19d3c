# petvolunteer/api/base.py
"""
목록 화면 서비스의 기본 클래스.
봉사활동/식당/커뮤니티 화면이 공통으로 쓰는 조회, 좋아요, 삭제 흐름을 제공합니다.
"""

import logging
from typing import Any, Dict, Optional, Sequence, Tuple

from petvolunteer.core.listing import AUTHOR_JOIN, Cascade, Listing, ListingQuery
from petvolunteer.core.session import Session
from petvolunteer.services.table_service import Filter, Join, TableClient

logger = logging.getLogger(__name__)


class RecordNotFound(ValueError):
    """요청한 레코드가 없을 때 발생합니다."""


class BaseListingService:
    """
    하위 클래스는 table, related_join, cascade, not_found_message를 지정합니다.
    """
    table: str = ''
    related_join: Optional[Join] = AUTHOR_JOIN
    cascade: Tuple[Cascade, ...] = ()
    not_found_message = "게시글을 찾을 수 없습니다."

    def __init__(self, table_client: TableClient):
        self.table_client = table_client

    def fetch_listing(self, session: Session, filters: Sequence[Filter] = ()) -> Listing:
        """최신순 목록을 조회합니다. 조회 실패 시 listing.error에 오류가 남고 목록은 비어 있습니다."""
        listing = Listing(self.table_client, ListingQuery(self.table, filters=tuple(filters), join=self.related_join), session)
        listing.fetch()
        return listing

    def load_record(self, record_id: str, session: Session) -> Listing:
        """레코드 하나만 담은 목록을 조회합니다."""
        listing = Listing(
            self.table_client,
            ListingQuery(self.table, filters=(('id', '==', record_id),), join=self.related_join),
            session,
        )
        listing.fetch()
        if listing.error is not None:
            raise listing.error
        if listing.is_empty:
            raise RecordNotFound(self.not_found_message)
        return listing

    def like(self, record_id: str, session: Session) -> Dict[str, Any]:
        """좋아요 카운터를 1 올리고 반영된 레코드를 반환합니다."""
        session.require_user()
        listing = self.load_record(record_id, session)
        listing.like(record_id)
        return listing.find(record_id)

    def delete(self, record_id: str, session: Session, confirmed: bool) -> bool:
        """
        작성자 본인만 삭제할 수 있습니다. 확인(confirmed)이 없으면 아무 것도 하지 않고 False.
        """
        session.require_user()
        listing = self.load_record(record_id, session)
        if not listing.can_delete(listing.find(record_id)):
            logger.warning(f"작성자가 아닌 사용자의 삭제 시도 (table: {self.table}, id: {record_id}, user_id: {session.user_id})")
            raise PermissionError("삭제 권한이 없습니다.")
        return listing.remove(record_id, confirmed=confirmed, cascade=self.cascade)

    def _require_author(self, record: Dict[str, Any], session: Session, action: str = "수정") -> None:
        if not session.is_author(record):
            raise PermissionError(f"{action} 권한이 없습니다.")


def is_confirmed(args) -> bool:
    """삭제 요청의 확인 여부 (?confirm=true)."""
    return str(args.get('confirm', '')).lower() in ('true', '1', 'yes')


CONFIRMATION_REQUIRED = {"error_code": "CONFIRMATION_REQUIRED", "message": "정말 삭제하시겠습니까?"}
