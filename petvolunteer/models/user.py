# petvolunteer/models/user.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

@dataclass
class User:
    """
    'users' 테이블의 행 구조를 정의하는 데이터클래스.
    비밀번호는 평문으로 저장/비교됩니다 (원래 서비스 동작 유지).
    """
    username: str
    password: str
    nickname: str
    profile_image_url: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
