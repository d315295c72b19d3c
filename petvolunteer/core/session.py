# petvolunteer/core/session.py
"""
로그인 세션.

현재 로그인한 사용자를 담는 객체이며, 각 화면(서비스)은 이 객체를
인자로 받아 사용합니다. 요청마다 저장된 자격 증명(JWT)으로부터 복원됩니다.
"""
import logging
from typing import Any, Callable, Dict, Optional

LOGIN_PATH = '/login'


class LoginRequired(Exception):
    """로그인이 필요한 동작을 비로그인 상태로 시도했을 때 발생합니다."""

    def __init__(self, message: str = "로그인이 필요합니다.", redirect_to: str = LOGIN_PATH):
        super().__init__(message)
        self.redirect_to = redirect_to


class Session:

    def __init__(self, user: Optional[Dict[str, Any]] = None):
        self._user = user

    @classmethod
    def restore(cls, loader: Callable[[], Optional[Dict[str, Any]]]) -> 'Session':
        """
        저장소에서 사용자를 읽어 세션을 복원합니다.
        복원에 실패하면 비로그인 세션을 반환합니다.
        """
        try:
            return cls(loader())
        except Exception as e:
            logging.warning(f"세션 복원 실패, 비로그인 상태로 진행합니다: {e}")
            return cls()

    def login(self, user: Dict[str, Any]) -> None:
        """AuthService.login/signup_and_login이 인증된 사용자로 세션을 채울 때 사용합니다."""
        self._user = user

    def logout(self) -> None:
        """
        프로세스 안의 세션만 비웁니다.
        HTTP 로그아웃은 토큰을 Blocklist에 넣는 방식이라 이 메서드를 거치지 않습니다.
        """
        self._user = None

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return self._user

    @property
    def user_id(self) -> Optional[str]:
        return self._user.get('id') if self._user else None

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def require_user(self) -> Dict[str, Any]:
        if self._user is None:
            raise LoginRequired()
        return self._user

    def is_author(self, record: Optional[Dict[str, Any]], column: str = 'author_id') -> bool:
        """레코드 작성자와 현재 사용자가 같은지 확인합니다 (화면 표시용)."""
        if not record or not self.is_authenticated:
            return False
        return record.get(column) == self.user_id
