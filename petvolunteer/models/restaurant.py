# petvolunteer/models/restaurant.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

ALL_REGIONS = '전체'
REGIONS = ['서울', '경기도', '인천', '부산', '대구', '울산', '대전', '광주', '창원', '제주']

@dataclass
class Restaurant:
    """'restaurants' 테이블의 행 구조 (반려동물 동반 가능 식당)."""
    name: str
    region: str
    author_id: str
    address: Optional[str] = None
    content: Optional[str] = None
    likes_count: int = 0
    image_url: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
