# petvolunteer/api/auth/services.py
import logging
import random
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from petvolunteer.core.session import Session
from petvolunteer.models.user import User
from petvolunteer.services.table_service import TableClient
from petvolunteer.utils.datetime_utils import DateTimeUtils

MIN_PASSWORD_LENGTH = 4
AVATAR_URL = "https://api.dicebear.com/7.x/adventurer/svg?seed={seed}"


class SignupError(ValueError):
    """회원가입 입력 오류 (비밀번호 불일치, 길이 부족)."""


class DuplicateUsernameError(ValueError):
    """이미 사용 중인 아이디로 가입을 시도한 경우."""


class AuthService:
    """
    아이디/비밀번호 인증과 세션 복원을 담당합니다.
    비밀번호는 평문으로 저장/비교합니다 (기존 서비스 동작 유지).
    """

    def __init__(self, table_client: TableClient):
        self.table = table_client

    def signup(self, username: str, password: str, password_confirm: str, nickname: str) -> Dict[str, Any]:
        """새 사용자를 만들고 생성된 사용자 행을 반환합니다."""
        if password != password_confirm:
            raise SignupError("비밀번호가 일치하지 않습니다.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise SignupError(f"비밀번호는 최소 {MIN_PASSWORD_LENGTH}자 이상이어야 합니다.")

        # 아이디 중복 확인 (저장소 차원의 고유 제약은 없음)
        if self.table.select_one('users', [('username', '==', username)]):
            raise DuplicateUsernameError("이미 사용 중인 아이디입니다.")

        new_user = User(
            username=username,
            password=password,
            nickname=nickname,
            profile_image_url=AVATAR_URL.format(seed=random.randint(0, 999)),
        )
        created = self.table.insert('users', [asdict(new_user)])[0]
        logging.info(f"회원가입 완료 (user_id: {created['id']}, username: {username})")
        return created

    def authenticate(self, username: str, password: str) -> Optional[Dict[str, Any]]:
        """아이디와 비밀번호가 모두 일치하는 사용자를 찾습니다."""
        return self.table.select_one('users', [
            ('username', '==', username),
            ('password', '==', password),
        ])

    def login(self, username: str, password: str) -> Optional[Session]:
        """인증에 성공하면 로그인된 세션을, 실패하면 None을 반환합니다."""
        user = self.authenticate(username, password)
        if user is None:
            return None
        session = Session()
        session.login(user)
        return session

    def signup_and_login(self, username: str, password: str, password_confirm: str, nickname: str) -> Session:
        """회원가입 후 바로 로그인된 세션을 반환합니다."""
        session = Session()
        session.login(self.signup(username, password, password_confirm, nickname))
        return session

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self.table.select_one('users', [('id', '==', user_id)])

    def current_session(self) -> Session:
        """
        요청의 JWT로부터 세션을 복원합니다.
        토큰이 없거나 사용자를 찾을 수 없으면 비로그인 세션입니다.
        """
        def _load_user():
            verify_jwt_in_request(optional=True)
            identity = get_jwt_identity()
            return self.get_user(identity) if identity else None

        return Session.restore(_load_user)

    # --- Blocklist 관련 로직 ---
    def add_token_to_blocklist(self, jti: str, expires: datetime):
        """전달받은 토큰의 jti를 만료 시간과 함께 저장합니다."""
        self.table.insert('revoked_tokens', [{
            'jti': jti,
            'revoked_at': DateTimeUtils.now(),
            'expires_at': expires,
        }])

    def is_token_revoked(self, jwt_payload: dict) -> bool:
        """jti를 이용해 해당 토큰이 무효화 목록에 있는지 확인합니다."""
        jti = jwt_payload['jti']
        return self.table.select_one('revoked_tokens', [('jti', '==', jti)]) is not None

    def logout_user(self, access_jti: str, access_exp: int, refresh_jti: str, refresh_exp: int):
        """Access 토큰과 Refresh 토큰을 모두 Blocklist에 추가합니다."""
        self.add_token_to_blocklist(access_jti, datetime.fromtimestamp(access_exp, tz=timezone.utc))
        self.add_token_to_blocklist(refresh_jti, datetime.fromtimestamp(refresh_exp, tz=timezone.utc))
        logging.info(f"사용자 로그아웃 처리 완료. JTI: {access_jti[:8]}..., {refresh_jti[:8]}...")
