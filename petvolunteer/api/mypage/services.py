# petvolunteer/api/mypage/services.py
from typing import Any, Dict

from petvolunteer.core.membership import monthly_attendance_count
from petvolunteer.core.session import Session
from petvolunteer.services.table_service import TableClient
from petvolunteer.utils.datetime_utils import DateTimeUtils


class MyPageService:
    """마이페이지: 프로필과 활동 통계 (모두 개수만 조회)."""

    def __init__(self, table_client: TableClient):
        self.table_client = table_client

    def get_stats(self, session: Session, today=None) -> Dict[str, Any]:
        user = session.require_user()
        today_str = DateTimeUtils.to_date_string(today or DateTimeUtils.today())
        return {
            "profile": user,
            "monthly_attendance": monthly_attendance_count(self.table_client, user['id'], today_str),
            "volunteer_count": self.table_client.select(
                'volunteer_participants', filters=[('user_id', '==', user['id'])], count_only=True,
            ),
            "post_count": self.table_client.select(
                'posts', filters=[('author_id', '==', user['id'])], count_only=True,
            ),
        }
