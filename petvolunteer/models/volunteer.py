# petvolunteer/models/volunteer.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

DEFAULT_MAX_PARTICIPANTS = 10

@dataclass
class VolunteerPost:
    """
    'volunteer_posts' 테이블의 행 구조.
    current_participants, likes_count는 비정규화된 카운터입니다.
    """
    title: str
    content: str
    author_id: str
    shelter_name: Optional[str] = None
    shelter_location: Optional[str] = None
    volunteer_date: Optional[str] = None   # YYYY-MM-DD
    volunteer_time: Optional[str] = None   # HH:MM 또는 HH:MM:SS
    max_participants: int = DEFAULT_MAX_PARTICIPANTS
    current_participants: int = 0
    likes_count: int = 0
    image_url: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

@dataclass
class VolunteerParticipant:
    """봉사활동 참여 신청 행 (사용자 <-> 봉사활동 게시글)."""
    volunteer_post_id: str
    user_id: str
    id: Optional[str] = None
    created_at: Optional[datetime] = None
