# petvolunteer/api/community/services.py
import logging
from dataclasses import asdict
from typing import Any, Dict, Iterable, List, Optional

from petvolunteer.api.base import BaseListingService
from petvolunteer.core.listing import Listing
from petvolunteer.core.session import Session
from petvolunteer.models.post import Post, COMMUNITY_CATEGORY


def normalize_hashtags(tags: Optional[Iterable[str]]) -> Optional[List[str]]:
    """
    해시태그 목록을 정리합니다.
    앞뒤 공백과 '#'을 제거하고, 빈 값과 중복을 빼며 입력 순서를 유지합니다.
    남는 태그가 없으면 None을 반환합니다.
    """
    normalized: List[str] = []
    for tag in tags or []:
        cleaned = str(tag).strip().lstrip('#').strip()
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
    return normalized or None


class CommunityService(BaseListingService):
    """커뮤니티 게시글(category='community') 목록/작성/좋아요/삭제."""
    table = 'posts'

    def fetch_posts(self, session: Session) -> Listing:
        return self.fetch_listing(session, [('category', '==', COMMUNITY_CATEGORY)])

    def create_post(self, session: Session, data: Dict[str, Any]) -> Dict[str, Any]:
        user = session.require_user()
        post = Post(
            content=data['content'],
            author_id=user['id'],
            title=data.get('title') or None,
            hashtags=normalize_hashtags(data.get('hashtags')),
            image_url=data.get('image_url') or None,
        )
        created = self.table_client.insert(self.table, [asdict(post)])[0]
        logging.info(f"커뮤니티 게시글 작성 (post_id: {created['id']}, author_id: {user['id']})")
        return created
