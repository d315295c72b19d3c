# conftest.py
"""
테스트 공용 픽스처.

실제 Firebase 대신 메모리에서 동작하는 Firestore/Storage 대역을 사용합니다.
대역은 TableClient와 StorageService가 호출하는 API만 흉내 냅니다.
"""
import copy
import itertools

import pytest
from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from petvolunteer import create_app
from petvolunteer.services.table_service import TableClient


# =====================================================================================
# Firestore 대역
# =====================================================================================
_OPERATORS = {
    '==': lambda a, b: a == b,
    '!=': lambda a, b: a != b,
    '<': lambda a, b: a is not None and a < b,
    '<=': lambda a, b: a is not None and a <= b,
    '>': lambda a, b: a is not None and a > b,
    '>=': lambda a, b: a is not None and a >= b,
    'in': lambda a, b: a in b,
    'array_contains': lambda a, b: isinstance(a, list) and b in a,
}


class FakeDB:
    def __init__(self):
        self.tables = {}
        self._failures = {}
        self.calls = []

    def collection(self, name):
        return FakeQuery(self, name)

    def fail_next(self, op, table, error=None, after=0):
        """
        (op, table) 호출 한 번을 실패시킵니다. op: create | update | delete | stream
        after만큼의 호출은 성공시킨 뒤 실패합니다 (여러 행 삭제 도중 실패 등).
        """
        self._failures[(op, table)] = [error or google_exceptions.ServiceUnavailable(f"{op} {table} 실패"), after]

    def check(self, op, table):
        self.calls.append((op, table))
        failure = self._failures.get((op, table))
        if failure is None:
            return
        if failure[1] > 0:
            failure[1] -= 1
            return
        del self._failures[(op, table)]
        raise failure[0]

    def rows(self, table):
        return [copy.deepcopy(data) for data in self.tables.get(table, {}).values()]


class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, db, table, doc_id):
        self.db = db
        self.table = table
        self.id = doc_id

    def _store(self):
        return self.db.tables.setdefault(self.table, {})

    def create(self, data):
        self.db.check('create', self.table)
        if self.id in self._store():
            raise google_exceptions.AlreadyExists(f"Document already exists: {self.table}/{self.id}")
        self._store()[self.id] = copy.deepcopy(data)

    def get(self):
        return FakeSnapshot(self, self._store().get(self.id))

    def update(self, data):
        self.db.check('update', self.table)
        if self.id not in self._store():
            raise google_exceptions.NotFound(f"No document to update: {self.table}/{self.id}")
        self._store()[self.id].update(copy.deepcopy(data))

    def delete(self):
        self.db.check('delete', self.table)
        self._store().pop(self.id, None)


class FakeAggregate:
    def __init__(self, value):
        self.value = value


class FakeCountQuery:
    def __init__(self, query):
        self.query = query

    def get(self):
        return [[FakeAggregate(len(self.query._matching()))]]


class FakeQuery:
    def __init__(self, db, table, filters=(), orders=(), limit_count=None):
        self.db = db
        self.table = table
        self.filters = tuple(filters)
        self.orders = tuple(orders)
        self.limit_count = limit_count

    def document(self, doc_id):
        return FakeDocument(self.db, self.table, doc_id)

    def where(self, field, op, value):
        return FakeQuery(self.db, self.table, self.filters + ((field, op, value),), self.orders, self.limit_count)

    def order_by(self, field, direction=firestore.Query.ASCENDING):
        return FakeQuery(self.db, self.table, self.filters, self.orders + ((field, direction),), self.limit_count)

    def limit(self, count):
        return FakeQuery(self.db, self.table, self.filters, self.orders, count)

    def count(self):
        return FakeCountQuery(self)

    def _matching(self):
        store = self.db.tables.get(self.table, {})
        items = [
            (doc_id, data) for doc_id, data in store.items()
            if all(_OPERATORS[op](data.get(field), value) for field, op, value in self.filters)
        ]
        for field, direction in reversed(self.orders):
            items.sort(
                key=lambda item: (item[1].get(field) is None, item[1].get(field)),
                reverse=direction == firestore.Query.DESCENDING,
            )
        if self.limit_count:
            items = items[:self.limit_count]
        return items

    def stream(self):
        self.db.check('stream', self.table)
        return iter([
            FakeSnapshot(FakeDocument(self.db, self.table, doc_id), data)
            for doc_id, data in self._matching()
        ])


# =====================================================================================
# Storage 대역
# =====================================================================================
class FakeBlob:
    def __init__(self, bucket, name):
        self.bucket = bucket
        self.name = name
        self.cache_control = None
        self.content_type = None
        self.public = False

    def upload_from_string(self, data, content_type=None, if_generation_match=None):
        if self.bucket.fail_upload is not None:
            error, self.bucket.fail_upload = self.bucket.fail_upload, None
            raise error
        if if_generation_match == 0 and self.name in self.bucket.files:
            raise google_exceptions.PreconditionFailed(f"Object already exists: {self.name}")
        self.content_type = content_type
        self.bucket.files[self.name] = {
            'data': data,
            'content_type': content_type,
            'cache_control': self.cache_control,
            'public': False,
        }

    def exists(self):
        return self.name in self.bucket.files

    def make_public(self):
        self.bucket.files[self.name]['public'] = True
        self.public = True

    @property
    def public_url(self):
        return f"https://storage.googleapis.com/{self.bucket.name}/{self.name}"


class FakeBucket:
    def __init__(self, name='test-bucket'):
        self.name = name
        self.files = {}
        self.fail_upload = None

    def blob(self, name):
        return FakeBlob(self, name)


# =====================================================================================
# 픽스처
# =====================================================================================
@pytest.fixture
def fake_db():
    return FakeDB()


@pytest.fixture
def fake_bucket():
    return FakeBucket()


@pytest.fixture
def table_client(fake_db):
    return TableClient(fake_db)


@pytest.fixture
def app(fake_db, fake_bucket):
    return create_app('testing', db=fake_db, bucket=fake_bucket)


@pytest.fixture
def client(app):
    return app.test_client()


_usernames = itertools.count(1)


@pytest.fixture
def signup(client):
    """
    회원가입 후 {"user", "access_token", "refresh_token", "headers"}를 반환하는 헬퍼.
    """
    def _signup(username=None, nickname=None, password='1234'):
        username = username or f"user{next(_usernames)}"
        response = client.post('/api/auth/signup', json={
            'username': username,
            'password': password,
            'password_confirm': password,
            'nickname': nickname or username,
        })
        assert response.status_code == 201, response.get_json()
        body = response.get_json()
        body['headers'] = {'Authorization': f"Bearer {body['access_token']}"}
        return body

    return _signup
