# petvolunteer/services/table_service.py
"""
원격 저장소(Cloud Firestore)를 테이블처럼 다루는 범용 클라이언트.

모든 화면은 이 클라이언트를 통해 조회/삽입/수정/삭제를 수행합니다.
여러 호출을 하나의 트랜잭션으로 묶지 않으며, 재시도도 하지 않습니다.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from petvolunteer.utils import DateTimeUtils

# 고유 제약 위반 코드 (PostgreSQL unique_violation과 동일한 값)
UNIQUE_VIOLATION = '23505'

# (컬럼, 연산자, 값) 형태의 조회 조건
Filter = Tuple[str, str, Any]

# 테이블별 고유 키. 문서 ID를 키 값으로 만들어 같은 조합의 행이 두 번 생기지 않게 합니다.
UNIQUE_KEYS = {
    'attendance': ('user_id', 'attendance_date'),
}


class StoreError(Exception):
    """
    원격 저장소 호출 실패. code에 저장소 오류 코드가 담깁니다.
    rows에는 실패 전에 이미 반영된 행이 담깁니다 (삭제 도중 실패한 경우의 복구용).
    """

    def __init__(self, message: str, code: Optional[str] = None, rows: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.code = code
        self.rows = rows or []


@dataclass(frozen=True)
class Join:
    """
    외래 키로 연결된 행을 함께 가져오기 위한 조인 정의.
    예) Join('author', 'author_id', 'users', ('nickname', 'profile_image_url'))
    """
    alias: str
    foreign_key: str
    table: str
    columns: Tuple[str, ...]


class TableClient:
    """Firestore 컬렉션을 테이블 단위 CRUD로 노출하는 클라이언트."""

    def __init__(self, db, unique_keys: Optional[Dict[str, Tuple[str, ...]]] = None):
        self.db = db
        self.unique_keys = dict(UNIQUE_KEYS if unique_keys is None else unique_keys)

    # --- 조회 ---

    def select(self, table: str, filters: Sequence[Filter] = (), join: Optional[Join] = None,
               order_by: Optional[str] = None, descending: bool = False,
               count_only: bool = False, limit: Optional[int] = None):
        """
        조건에 맞는 행을 정렬된 리스트로 반환합니다.

        :param filters: (컬럼, 연산자, 값) 조건 목록. 모두 AND로 결합됩니다.
        :param join: 외래 키로 연결된 행을 row[alias]에 포함시킬 조인 정의
        :param count_only: True이면 행 대신 개수(int)만 반환합니다.
        """
        try:
            if count_only:
                query = self._build_query(table, filters)
                return query.count().get()[0][0].value

            query = self._build_query(table, filters, order_by, descending)
            if limit:
                query = query.limit(limit)
            rows = [self._to_row(doc) for doc in query.stream()]
            if join:
                self._attach_related(rows, join)
            return rows
        except google_exceptions.GoogleAPIError as e:
            logging.error(f"테이블 조회 실패 (table: {table}, filters: {filters}): {e}", exc_info=True)
            raise self._wrap(e) from e

    def select_one(self, table: str, filters: Sequence[Filter], join: Optional[Join] = None) -> Optional[Dict[str, Any]]:
        rows = self.select(table, filters, join=join, limit=1)
        return rows[0] if rows else None

    # --- 변경 ---

    def insert(self, table: str, rows: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        행을 삽입하고 삽입된 행(id, created_at 포함)을 반환합니다.
        고유 키가 있는 테이블에서 중복이 발생하면 StoreError(code='23505')를 던집니다.
        """
        collection = self.db.collection(table)
        inserted = []
        for row in rows:
            data = DateTimeUtils.for_firestore(dict(row))
            if not data.get('created_at'):
                data['created_at'] = DateTimeUtils.now()
            data['id'] = data.get('id') or self._document_id(table, data)
            try:
                collection.document(data['id']).create(data)
            except google_exceptions.GoogleAPIError as e:
                logging.error(f"행 삽입 실패 (table: {table}, id: {data['id']}): {e}", exc_info=True)
                raise self._wrap(e) from e
            inserted.append(data)
        return inserted

    def update(self, table: str, values: Dict[str, Any], filters: Sequence[Filter]) -> List[Dict[str, Any]]:
        """조건에 맞는 모든 행에 values를 반영하고 반영된 행을 반환합니다."""
        data = DateTimeUtils.for_firestore(dict(values))
        try:
            updated = []
            for doc in self._build_query(table, filters).stream():
                doc.reference.update(data)
                row = self._to_row(doc)
                row.update(data)
                updated.append(row)
            return updated
        except google_exceptions.GoogleAPIError as e:
            logging.error(f"행 수정 실패 (table: {table}, filters: {filters}): {e}", exc_info=True)
            raise self._wrap(e) from e

    def delete(self, table: str, filters: Sequence[Filter]) -> List[Dict[str, Any]]:
        """
        조건에 맞는 모든 행을 삭제하고, 삭제된 행을 반환합니다 (복구용).
        도중에 실패하면 그때까지 삭제된 행을 StoreError.rows에 담아 던집니다.
        """
        deleted = []
        try:
            for doc in self._build_query(table, filters).stream():
                row = self._to_row(doc)
                doc.reference.delete()
                deleted.append(row)
            return deleted
        except google_exceptions.GoogleAPIError as e:
            logging.error(f"행 삭제 실패 (table: {table}, filters: {filters}): {e}", exc_info=True)
            error = self._wrap(e)
            error.rows = deleted
            raise error from e

    # --- 내부 헬퍼 ---

    def _build_query(self, table: str, filters: Sequence[Filter], order_by: Optional[str] = None, descending: bool = False):
        query = self.db.collection(table)
        for column, op, value in filters:
            query = query.where(column, op, value)
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        return query

    def _attach_related(self, rows: List[Dict[str, Any]], join: Join) -> None:
        related_ref = self.db.collection(join.table)
        cache: Dict[str, Optional[Dict[str, Any]]] = {}
        for row in rows:
            key = row.get(join.foreign_key)
            if key is None:
                row[join.alias] = None
                continue
            if key not in cache:
                snapshot = related_ref.document(str(key)).get()
                cache[key] = snapshot.to_dict() if snapshot.exists else None
            related = cache[key]
            row[join.alias] = {column: related.get(column) for column in join.columns} if related else None

    def _document_id(self, table: str, data: Dict[str, Any]) -> str:
        key_columns = self.unique_keys.get(table)
        if key_columns:
            return '_'.join(str(data[column]) for column in key_columns)
        return str(uuid.uuid4())

    @staticmethod
    def _to_row(doc) -> Dict[str, Any]:
        row = DateTimeUtils.from_firestore(doc.to_dict() or {})
        row.setdefault('id', doc.id)
        return row

    @staticmethod
    def _wrap(error: google_exceptions.GoogleAPIError) -> StoreError:
        if isinstance(error, google_exceptions.Conflict):
            return StoreError(str(error), code=UNIQUE_VIOLATION)
        code = getattr(error, 'code', None)
        return StoreError(str(error), code=str(code) if code is not None else None)
