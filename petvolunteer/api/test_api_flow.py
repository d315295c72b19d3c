# petvolunteer/api/test_api_flow.py
"""
HTTP API 통합 테스트 (메모리 Firestore/Storage 대역 사용)

사용법: python -m pytest petvolunteer/api/test_api_flow.py -v
"""

import io

import pytest


# --- 인증 ---

def test_signup_login_and_me(client, signup):
    alice = signup('alice', 'Alice')
    assert alice['user']['nickname'] == 'Alice'
    assert 'password' not in alice['user']
    assert alice['user']['profile_image_url'].startswith('https://api.dicebear.com/')

    response = client.post('/api/auth/login', json={'username': 'alice', 'password': '1234'})
    assert response.status_code == 200
    token = response.get_json()['access_token']

    me = client.get('/api/auth/me', headers={'Authorization': f"Bearer {token}"}).get_json()
    assert me['is_authenticated'] is True
    assert me['user']['username'] == 'alice'

    assert client.get('/api/auth/me').get_json() == {'is_authenticated': False, 'user': None}


@pytest.mark.parametrize('payload, error_code, status', [
    ({'password': '1234', 'password_confirm': '4321'}, 'INVALID_SIGNUP', 400),
    ({'password': '12', 'password_confirm': '12'}, 'INVALID_SIGNUP', 400),
    ({'password': '1234', 'password_confirm': '1234', 'nickname': ''}, 'VALIDATION_ERROR', 400),
])
def test_signup_rejects_invalid_input(client, payload, error_code, status):
    body = {'username': 'bob', 'nickname': 'Bob', **payload}

    response = client.post('/api/auth/signup', json=body)

    assert response.status_code == status
    assert response.get_json()['error_code'] == error_code


def test_signup_duplicate_username(client, signup):
    signup('alice', 'Alice')

    response = client.post('/api/auth/signup', json={
        'username': 'alice', 'password': '5678', 'password_confirm': '5678', 'nickname': 'Other',
    })

    assert response.status_code == 409
    assert response.get_json()['error_code'] == 'USERNAME_TAKEN'


def test_login_with_wrong_password(client, signup):
    signup('alice', 'Alice')

    response = client.post('/api/auth/login', json={'username': 'alice', 'password': 'wrong'})

    assert response.status_code == 401
    assert response.get_json()['error_code'] == 'INVALID_CREDENTIALS'


def test_refresh_and_logout(client, signup):
    alice = signup('alice', 'Alice')

    refreshed = client.post('/api/auth/token/refresh', headers={'Authorization': f"Bearer {alice['refresh_token']}"})
    assert refreshed.status_code == 200
    assert refreshed.get_json()['access_token']

    response = client.post('/api/auth/logout', json={
        'access_token': alice['access_token'], 'refresh_token': alice['refresh_token'],
    })
    assert response.status_code == 200

    # 로그아웃된 토큰은 더 이상 사용할 수 없습니다.
    assert client.get('/api/auth/me', headers=alice['headers']).status_code == 401


# --- 봉사활동 ---

def _create_volunteer(client, headers, **overrides):
    body = {
        'title': '주말 산책 봉사',
        'content': '보호소 강아지들과 산책해요',
        'shelter_name': '행복보호소',
        'volunteer_date': '2024-03-05',
        'volunteer_time': '14:30:00',
        'max_participants': 2,
        **overrides,
    }
    response = client.post('/api/volunteer', json=body, headers=headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def test_volunteer_capacity_scenario(client, signup):
    """모집 인원 2명: 두 명 참여 후 세 번째는 거절, 한 명 취소 후 인원 1명."""
    alice = signup('alice', 'Alice')
    bob = signup('bob', 'Bob')
    carol = signup('carol', 'Carol')
    dave = signup('dave', 'Dave')

    post = _create_volunteer(client, alice['headers'])
    assert post['participants_label'] == '0/2명'
    assert post['date_label'] == '3월 5일'
    assert post['time_label'] == '14:30'
    url = f"/api/volunteer/{post['id']}/participants"

    assert client.post(url, headers=bob['headers']).status_code == 200
    joined = client.post(url, headers=carol['headers']).get_json()
    assert joined['is_full'] is True
    assert joined['participant_count'] == 2
    assert [p['user']['nickname'] for p in joined['participants']] == ['Bob', 'Carol']

    rejected = client.post(url, headers=dave['headers'])
    assert rejected.status_code == 409
    assert rejected.get_json()['error_code'] == 'CAPACITY_FULL'

    cancelled = client.delete(url, headers=bob['headers']).get_json()
    assert cancelled['is_participating'] is False
    assert cancelled['post']['current_participants'] == 1

    detail = client.get(f"/api/volunteer/{post['id']}", headers=dave['headers']).get_json()
    assert detail['post']['current_participants'] == 1
    assert detail['post']['date_label'] == '2024년 3월 5일'
    assert detail['can_join'] is True
    assert detail['is_author'] is False


def test_volunteer_listing_and_like(client, signup):
    alice = signup('alice', 'Alice')
    assert client.get('/api/volunteer').get_json()['empty_message'] == '아직 등록된 봉사활동이 없어요'

    post = _create_volunteer(client, alice['headers'], max_participants=None, volunteer_time=None, shelter_name=None)
    listing = client.get('/api/volunteer').get_json()
    [listed] = listing['posts']
    assert listed['author']['nickname'] == 'Alice'
    assert listed['participants_label'] == '0/10명'
    assert listed['time_label'] == '미정'
    assert listed['shelter_label'] == '보호소'
    assert listing['can_write'] is False

    like_url = f"/api/volunteer/{post['id']}/like"
    assert client.post(like_url, headers=alice['headers']).get_json()['likes_count'] == 1
    assert client.post(like_url, headers=alice['headers']).get_json()['likes_count'] == 2

    response = client.post(like_url)
    assert response.status_code == 401
    assert response.get_json() == {
        'error_code': 'LOGIN_REQUIRED', 'message': '로그인이 필요합니다.', 'redirect': '/login',
    }


def test_volunteer_listing_fetch_failure(client, fake_db):
    fake_db.fail_next('stream', 'volunteer_posts')

    response = client.get('/api/volunteer')

    assert response.status_code == 200
    assert response.get_json()['posts'] == []
    assert 'error' in response.get_json()


def test_volunteer_edit_and_delete_by_author_only(client, signup, fake_db):
    alice = signup('alice', 'Alice')
    bob = signup('bob', 'Bob')
    post = _create_volunteer(client, alice['headers'])
    client.post(f"/api/volunteer/{post['id']}/participants", headers=bob['headers'])
    post_url = f"/api/volunteer/{post['id']}"

    assert client.patch(post_url, json={'title': '수정'}, headers=bob['headers']).status_code == 403
    updated = client.patch(post_url, json={'title': '수정된 제목'}, headers=alice['headers'])
    assert updated.status_code == 200
    assert updated.get_json()['title'] == '수정된 제목'

    assert client.delete(f"{post_url}?confirm=true", headers=bob['headers']).status_code == 403
    unconfirmed = client.delete(post_url, headers=alice['headers'])
    assert unconfirmed.status_code == 400
    assert unconfirmed.get_json()['error_code'] == 'CONFIRMATION_REQUIRED'

    assert client.delete(f"{post_url}?confirm=true", headers=alice['headers']).status_code == 200
    assert client.get(post_url).status_code == 404
    assert fake_db.rows('volunteer_participants') == []


def test_volunteer_delete_rolls_back_when_participant_delete_fails(client, signup, fake_db):
    alice = signup('alice', 'Alice')
    post = _create_volunteer(client, alice['headers'])
    url = f"/api/volunteer/{post['id']}/participants"
    for user in (signup('bob', 'Bob'), signup('carol', 'Carol')):
        assert client.post(url, headers=user['headers']).status_code == 200
    fake_db.fail_next('delete', 'volunteer_participants', after=1)

    response = client.delete(f"/api/volunteer/{post['id']}?confirm=true", headers=alice['headers'])

    assert response.status_code == 500
    assert response.get_json()['error_code'] == 'DELETE_FAILED'
    detail = client.get(f"/api/volunteer/{post['id']}").get_json()
    assert [p['user']['nickname'] for p in detail['participants']] == ['Bob', 'Carol']


def test_volunteer_create_requires_login(client):
    response = client.post('/api/volunteer', json={'title': '제목', 'content': '내용'})

    assert response.status_code == 401
    assert response.get_json()['redirect'] == '/login'


# --- 식당 ---

def test_restaurants_region_filter(client, signup):
    alice = signup('alice', 'Alice')
    for name, region in (('멍멍카페', '서울'), ('바다식당', '부산')):
        response = client.post('/api/restaurants', json={'name': name, 'region': region}, headers=alice['headers'])
        assert response.status_code == 201

    assert len(client.get('/api/restaurants').get_json()['restaurants']) == 2
    seoul = client.get('/api/restaurants', query_string={'region': '서울'}).get_json()
    assert [r['name'] for r in seoul['restaurants']] == ['멍멍카페']
    empty = client.get('/api/restaurants', query_string={'region': '제주'}).get_json()
    assert empty['restaurants'] == [] and empty['empty_message']

    assert client.get('/api/restaurants', query_string={'region': '도쿄'}).status_code == 400
    invalid = client.post('/api/restaurants', json={'name': 'X', 'region': '도쿄'}, headers=alice['headers'])
    assert invalid.get_json()['error_code'] == 'VALIDATION_ERROR'

    regions = client.get('/api/restaurants/regions').get_json()['regions']
    assert regions[0] == '전체' and '창원' in regions


def test_restaurant_like_and_delete(client, signup):
    alice = signup('alice', 'Alice')
    created = client.post('/api/restaurants', json={'name': '멍멍카페', 'region': '서울'}, headers=alice['headers']).get_json()

    assert client.post(f"/api/restaurants/{created['id']}/like", headers=alice['headers']).get_json()['likes_count'] == 1
    assert client.post('/api/restaurants/missing/like', headers=alice['headers']).status_code == 404
    assert client.delete(f"/api/restaurants/{created['id']}?confirm=true", headers=alice['headers']).status_code == 200
    assert client.get('/api/restaurants').get_json()['restaurants'] == []


# --- 커뮤니티 ---

def test_community_post_hashtags_and_label(client, signup):
    alice = signup('alice', 'Alice')

    created = client.post('/api/community/posts', json={
        'content': '오늘 산책 다녀왔어요',
        'hashtags': ['  산책 ', '#산책', '', '입양'],
    }, headers=alice['headers'])
    assert created.status_code == 201
    assert created.get_json()['hashtags'] == ['산책', '입양']

    no_tags = client.post('/api/community/posts', json={'content': '태그 없음', 'hashtags': []}, headers=alice['headers'])
    assert no_tags.get_json()['hashtags'] is None

    posts = client.get('/api/community/posts').get_json()['posts']
    assert {p['content'] for p in posts} == {'오늘 산책 다녀왔어요', '태그 없음'}
    assert all(p['created_label'] == '방금 전' for p in posts)
    assert all(p['category'] == 'community' for p in posts)


def test_community_delete_by_other_user(client, signup):
    alice = signup('alice', 'Alice')
    bob = signup('bob', 'Bob')
    post = client.post('/api/community/posts', json={'content': '글'}, headers=alice['headers']).get_json()

    response = client.delete(f"/api/community/posts/{post['id']}?confirm=true", headers=bob['headers'])

    assert response.status_code == 403
    assert len(client.get('/api/community/posts').get_json()['posts']) == 1


# --- 출석 / 마이페이지 ---

def test_attendance_check_in_once_per_day(client, signup):
    alice = signup('alice', 'Alice')

    assert client.get('/api/attendance').get_json()['checked_in'] is False
    assert client.post('/api/attendance').status_code == 401

    first = client.post('/api/attendance', headers=alice['headers']).get_json()
    assert first['checked_in'] is True
    assert first['monthly_count'] == 1
    assert first['entries'][0]['user']['nickname'] == 'Alice'
    assert first['entries'][0]['time_label'].startswith(('오전', '오후'))

    second = client.post('/api/attendance', headers=alice['headers'])
    assert second.status_code == 200
    assert second.get_json()['checked_in'] is True
    assert second.get_json()['entry_count'] == 1


def test_mypage_stats(client, signup):
    alice = signup('alice', 'Alice')
    bob = signup('bob', 'Bob')
    post = _create_volunteer(client, alice['headers'])
    client.post(f"/api/volunteer/{post['id']}/participants", headers=bob['headers'])
    client.post('/api/attendance', headers=bob['headers'])
    client.post('/api/community/posts', json={'content': '글'}, headers=bob['headers'])

    stats = client.get('/api/mypage', headers=bob['headers']).get_json()

    assert stats['profile']['nickname'] == 'Bob'
    assert 'password' not in stats['profile']
    assert stats['monthly_attendance'] == 1
    assert stats['volunteer_count'] == 1
    assert stats['post_count'] == 1
    assert client.get('/api/mypage').status_code == 401


# --- 이미지 업로드 ---

def _upload(client, headers, kind='posts', filename='dog.png', mimetype='image/png', data=b'png-bytes'):
    return client.post(
        '/api/uploads/images',
        data={'kind': kind, 'file': (io.BytesIO(data), filename, mimetype)},
        headers=headers,
        content_type='multipart/form-data',
    )


def test_upload_image(client, signup, fake_bucket):
    alice = signup('alice', 'Alice')

    response = _upload(client, alice['headers'])

    assert response.status_code == 201
    body = response.get_json()
    [path] = fake_bucket.files
    assert path.startswith('posts/') and path.endswith('.png')
    assert body['image_url'].endswith(path)
    assert body['preview'].startswith('data:image/png;base64,')


def test_upload_image_errors(client, signup, fake_bucket):
    alice = signup('alice', 'Alice')

    assert _upload(client, {}).status_code == 401
    assert _upload(client, alice['headers'], kind='avatars').get_json()['error_code'] == 'INVALID_KIND'
    invalid = _upload(client, alice['headers'], filename='notes.txt', mimetype='text/plain')
    assert invalid.status_code == 400
    assert invalid.get_json()['message'] == '이미지 파일만 업로드 가능합니다.'

    fake_bucket.fail_upload = RuntimeError("network down")
    failed = _upload(client, alice['headers'])
    assert failed.status_code == 500
    assert failed.get_json() == {'error_code': 'UPLOAD_FAILED', 'message': '이미지 업로드 오류: network down'}


def test_upload_rejects_file_without_content_type(client, signup, fake_bucket):
    """Content-Type 헤더가 없는 파일 파트는 이미지로 취급하지 않습니다."""
    alice = signup('alice', 'Alice')
    boundary = 'petvolunteerboundary'
    body = (
        f"--{boundary}\r\n"
        'Content-Disposition: form-data; name="kind"\r\n\r\n'
        "posts\r\n"
        f"--{boundary}\r\n"
        'Content-Disposition: form-data; name="file"; filename="payload.bin"\r\n\r\n'
        "not an image\r\n"
        f"--{boundary}--\r\n"
    ).encode('utf-8')

    response = client.post(
        '/api/uploads/images',
        data=body,
        headers=alice['headers'],
        content_type=f"multipart/form-data; boundary={boundary}",
    )

    assert response.status_code == 400
    assert response.get_json()['error_code'] == 'INVALID_IMAGE'
    assert fake_bucket.files == {}


# --- 앱 셸 ---

def test_splash_and_unknown_path(client):
    splash = client.get('/').get_json()
    assert splash['next'] == '/home'
    assert splash['routes']['volunteer_detail'] == '/volunteer/<id>'

    response = client.get('/no/such/page')
    assert response.status_code == 302
    assert response.headers['Location'].endswith('/')
