# petvolunteer/core/listing.py
"""
목록 화면 공통 데이터 흐름: 조회 -> 표시 -> 변경 -> 로컬 상태 반영.

변경(좋아요, 삭제)은 원격 쓰기가 성공한 뒤 로컬 목록에 바로 반영하며,
다시 조회해서 확인하지 않습니다. 좋아요 카운터는 로컬에 들고 있는 값에
1을 더해 그대로 쓰기 때문에, 같은 값을 본 두 화면이 동시에 누르면
한 번만 증가한 것처럼 보일 수 있습니다 (lost update, 허용된 동작).
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from petvolunteer.core.session import Session
from petvolunteer.services.table_service import Filter, Join, StoreError, TableClient

AUTHOR_JOIN = Join('author', 'author_id', 'users', ('nickname', 'profile_image_url'))


@dataclass(frozen=True)
class ListingQuery:
    """목록 조회 조건: 테이블, 필터, 조인, 정렬."""
    table: str
    filters: Sequence[Filter] = ()
    join: Optional[Join] = None
    order_by: Optional[str] = 'created_at'
    descending: bool = True


@dataclass(frozen=True)
class Cascade:
    """부모 행 삭제 전에 함께 지울 자식 행 (table.foreign_key == 부모 id)."""
    table: str
    foreign_key: str


class Listing:
    """한 화면이 들고 있는 목록 상태와 그 위의 변경 동작."""

    def __init__(self, table_client: TableClient, query: ListingQuery, session: Optional[Session] = None):
        self.client = table_client
        self.query = query
        self.session = session or Session()
        self.records: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None

    @property
    def is_empty(self) -> bool:
        return not self.records

    def fetch(self) -> List[Dict[str, Any]]:
        """
        목록을 조회합니다. 실패하면 로그만 남기고 이전 상태를 그대로 둡니다.
        """
        try:
            rows = self.client.select(
                self.query.table,
                filters=self.query.filters,
                join=self.query.join,
                order_by=self.query.order_by,
                descending=self.query.descending,
            )
        except StoreError as e:
            logging.error(f"목록 조회 실패 (table: {self.query.table}): {e}")
            self.error = e
            return self.records

        self.error = None
        self.records = rows
        return self.records

    def find(self, record_id: str) -> Optional[Dict[str, Any]]:
        return next((r for r in self.records if r.get('id') == record_id), None)

    def like(self, record_id: str, counter: str = 'likes_count') -> int:
        """
        로컬 값 + 1을 원격에 쓰고, 성공하면 로컬 레코드를 교체합니다.
        사용자별 좋아요 기록은 없으며 같은 사용자가 여러 번 누를 수 있습니다.
        """
        self.session.require_user()
        record = self.find(record_id)
        if record is None:
            raise ValueError("좋아요를 누를 항목을 찾을 수 없습니다.")

        next_count = (record.get(counter) or 0) + 1
        try:
            self.client.update(self.query.table, {counter: next_count}, [('id', '==', record_id)])
        except StoreError as e:
            logging.error(f"좋아요 반영 실패 (table: {self.query.table}, id: {record_id}): {e}")
            raise

        self._replace(record_id, {counter: next_count})
        return next_count

    def can_delete(self, record: Optional[Dict[str, Any]]) -> bool:
        """삭제 버튼 노출 여부. 작성자 본인에게만 보입니다."""
        return self.session.is_author(record)

    def remove(self, record_id: str, confirmed: bool = False, cascade: Sequence[Cascade] = ()) -> bool:
        """
        확인을 거친 경우에만 레코드를 삭제하고 로컬 목록에서 제거합니다.

        cascade에 지정된 자식 행을 먼저 지우고 부모를 지웁니다. 자식 또는 부모
        삭제가 실패하면 그때까지 지운 자식 행을 다시 넣어 되돌립니다.
        작성자 검사는 하지 않습니다.
        """
        if not confirmed:
            return False

        removed_children = []
        try:
            for child in cascade:
                try:
                    rows = self.client.delete(child.table, [(child.foreign_key, '==', record_id)])
                except StoreError as e:
                    removed_children.append((child.table, e.rows))
                    raise
                removed_children.append((child.table, rows))

            self.client.delete(self.query.table, [('id', '==', record_id)])
        except StoreError as e:
            logging.error(f"삭제 실패, 연관 행을 복구합니다 (table: {self.query.table}, id: {record_id}): {e}")
            for table, rows in removed_children:
                if rows:
                    self.client.insert(table, rows)
            raise

        self.records = [r for r in self.records if r.get('id') != record_id]
        logging.info(f"삭제 완료 (table: {self.query.table}, id: {record_id})")
        return True

    def _replace(self, record_id: str, changes: Dict[str, Any]) -> None:
        self.records = [
            {**r, **changes} if r.get('id') == record_id else r
            for r in self.records
        ]
