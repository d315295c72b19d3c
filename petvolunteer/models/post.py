# petvolunteer/models/post.py
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

COMMUNITY_CATEGORY = 'community'

@dataclass
class Post:
    """
    'posts' 테이블의 행 구조 (커뮤니티 게시글).
    해시태그가 없으면 빈 리스트 대신 None으로 저장합니다.
    """
    content: str
    author_id: str
    title: Optional[str] = None
    hashtags: Optional[List[str]] = None
    likes_count: int = 0
    image_url: Optional[str] = None
    category: str = COMMUNITY_CATEGORY
    id: Optional[str] = None
    created_at: Optional[datetime] = None
