# petvolunteer/services/test_table_service.py
"""
TableClient 테스트 (메모리 Firestore 대역 사용)

사용법: python -m pytest petvolunteer/services/test_table_service.py -v
"""

import pytest
from datetime import datetime, timezone
from google.api_core.exceptions import RetryError

from petvolunteer.services.table_service import Join, StoreError, UNIQUE_VIOLATION


def _at(minute):
    return datetime(2024, 3, 5, 10, minute, tzinfo=timezone.utc)


def test_insert_assigns_id_and_created_at(table_client):
    row = table_client.insert('posts', [{'content': '안녕하세요', 'author_id': 'u1'}])[0]

    assert row['id']
    assert row['created_at'].tzinfo == timezone.utc
    assert table_client.select_one('posts', [('id', '==', row['id'])])['content'] == '안녕하세요'


def test_select_filters_and_orders(table_client):
    table_client.insert('restaurants', [
        {'name': 'A', 'region': '서울', 'created_at': _at(1)},
        {'name': 'B', 'region': '부산', 'created_at': _at(2)},
        {'name': 'C', 'region': '서울', 'created_at': _at(3)},
    ])

    latest_first = table_client.select('restaurants', order_by='created_at', descending=True)
    seoul = table_client.select('restaurants', filters=[('region', '==', '서울')], order_by='created_at')

    assert [r['name'] for r in latest_first] == ['C', 'B', 'A']
    assert [r['name'] for r in seoul] == ['A', 'C']


def test_select_join_attaches_related_columns(table_client):
    table_client.insert('users', [{'id': 'u1', 'username': 'alice', 'password': '1234', 'nickname': 'Alice'}])
    table_client.insert('posts', [
        {'content': '글', 'author_id': 'u1'},
        {'content': '탈퇴한 작성자', 'author_id': 'ghost'},
    ])

    rows = table_client.select('posts', join=Join('author', 'author_id', 'users', ('nickname', 'profile_image_url')))
    by_content = {r['content']: r for r in rows}

    assert by_content['글']['author'] == {'nickname': 'Alice', 'profile_image_url': None}
    assert by_content['탈퇴한 작성자']['author'] is None


def test_count_only(table_client):
    table_client.insert('volunteer_participants', [
        {'volunteer_post_id': 'p1', 'user_id': 'u1'},
        {'volunteer_post_id': 'p2', 'user_id': 'u1'},
        {'volunteer_post_id': 'p2', 'user_id': 'u2'},
    ])

    assert table_client.select('volunteer_participants', filters=[('user_id', '==', 'u1')], count_only=True) == 2


def test_unique_key_violation(table_client, fake_db):
    """같은 (user_id, attendance_date) 조합은 한 번만 저장됩니다."""
    table_client.insert('attendance', [{'user_id': 'u1', 'attendance_date': '2024-03-05'}])

    with pytest.raises(StoreError) as exc_info:
        table_client.insert('attendance', [{'user_id': 'u1', 'attendance_date': '2024-03-05'}])

    assert exc_info.value.code == UNIQUE_VIOLATION
    assert len(fake_db.rows('attendance')) == 1


def test_update_returns_merged_rows(table_client):
    post = table_client.insert('posts', [{'content': '글', 'likes_count': 0}])[0]

    updated = table_client.update('posts', {'likes_count': 1}, [('id', '==', post['id'])])

    assert [r['likes_count'] for r in updated] == [1]
    assert table_client.select_one('posts', [('id', '==', post['id'])])['likes_count'] == 1


def test_delete_returns_deleted_rows(table_client, fake_db):
    table_client.insert('volunteer_participants', [
        {'volunteer_post_id': 'p1', 'user_id': 'u1'},
        {'volunteer_post_id': 'p1', 'user_id': 'u2'},
        {'volunteer_post_id': 'p2', 'user_id': 'u1'},
    ])

    deleted = table_client.delete('volunteer_participants', [('volunteer_post_id', '==', 'p1')])

    assert sorted(r['user_id'] for r in deleted) == ['u1', 'u2']
    assert [r['volunteer_post_id'] for r in fake_db.rows('volunteer_participants')] == ['p2']


def test_store_failure_is_wrapped(table_client, fake_db):
    fake_db.fail_next('stream', 'posts')

    with pytest.raises(StoreError) as exc_info:
        table_client.select('posts')

    assert exc_info.value.code != UNIQUE_VIOLATION


def test_retry_deadline_is_wrapped(table_client, fake_db):
    """재시도 중 기한 초과(RetryError)도 StoreError로 감쌉니다."""
    fake_db.fail_next('stream', 'restaurants', RetryError("deadline exceeded", cause=None))

    with pytest.raises(StoreError) as exc_info:
        table_client.select('restaurants')

    assert exc_info.value.code is None


def test_delete_failure_reports_rows_already_deleted(table_client, fake_db):
    table_client.insert('volunteer_participants', [
        {'volunteer_post_id': 'p1', 'user_id': 'u1'},
        {'volunteer_post_id': 'p1', 'user_id': 'u2'},
    ])
    fake_db.fail_next('delete', 'volunteer_participants', after=1)

    with pytest.raises(StoreError) as exc_info:
        table_client.delete('volunteer_participants', [('volunteer_post_id', '==', 'p1')])

    assert len(exc_info.value.rows) == 1
    assert len(fake_db.rows('volunteer_participants')) == 1
    assert fake_db.rows('volunteer_participants')[0]['user_id'] != exc_info.value.rows[0]['user_id']
