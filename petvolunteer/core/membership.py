# petvolunteer/core/membership.py
"""
참여/출석 상태 전환.

- 봉사활동 참여: NOT_JOINED <-> JOINED. 참여 행 쓰기와 게시글 카운터 쓰기를
  순서대로 수행하고, 두 번째 쓰기가 실패하면 첫 번째 쓰기를 되돌립니다.
- 출석 체크: NOT_CHECKED_IN -> CHECKED_IN. 오늘(UTC) 하루에 한 번, 되돌릴 수 없습니다.
"""
import logging
from dataclasses import asdict
from enum import Enum
from typing import Any, Dict, List, Optional

from petvolunteer.core.session import Session
from petvolunteer.models.attendance import Attendance
from petvolunteer.models.volunteer import DEFAULT_MAX_PARTICIPANTS, VolunteerParticipant
from petvolunteer.services.table_service import Join, StoreError, TableClient, UNIQUE_VIOLATION
from petvolunteer.utils.datetime_utils import DateTimeUtils

USER_JOIN = Join('user', 'user_id', 'users', ('nickname', 'profile_image_url'))


class CapacityReached(Exception):
    """모집 인원이 가득 찬 봉사활동에 참여를 시도했을 때 발생합니다."""


class ParticipationState(Enum):
    NOT_JOINED = 'NOT_JOINED'
    JOINED = 'JOINED'


class AttendanceState(Enum):
    NOT_CHECKED_IN = 'NOT_CHECKED_IN'
    CHECKED_IN = 'CHECKED_IN'


class VolunteerParticipation:
    """한 사용자와 한 봉사활동 게시글 사이의 참여 상태."""

    def __init__(self, table_client: TableClient, post: Dict[str, Any], session: Session,
                 participants: Optional[List[Dict[str, Any]]] = None):
        self.client = table_client
        self.post = post
        self.session = session
        self.participants = list(participants or [])

    @classmethod
    def load(cls, table_client: TableClient, post: Dict[str, Any], session: Session) -> 'VolunteerParticipation':
        """게시글의 참여자 목록(사용자 정보 포함)을 조회해 상태를 만듭니다."""
        participants = table_client.select(
            'volunteer_participants',
            filters=[('volunteer_post_id', '==', post['id'])],
            join=USER_JOIN,
            order_by='created_at',
        )
        return cls(table_client, post, session, participants)

    @property
    def current(self) -> int:
        return self.post.get('current_participants') or 0

    @property
    def capacity(self) -> int:
        return self.post.get('max_participants') or DEFAULT_MAX_PARTICIPANTS

    @property
    def is_full(self) -> bool:
        return self.current >= self.capacity

    @property
    def state(self) -> ParticipationState:
        user_id = self.session.user_id
        if user_id and any(p.get('user_id') == user_id for p in self.participants):
            return ParticipationState.JOINED
        return ParticipationState.NOT_JOINED

    @property
    def can_join(self) -> bool:
        """참여 버튼 활성화 여부. 이미 참여 중이면 취소 버튼으로 항상 활성화됩니다."""
        return self.state == ParticipationState.JOINED or not self.is_full

    def toggle(self) -> ParticipationState:
        if self.state == ParticipationState.JOINED:
            return self.cancel()
        return self.join()

    def join(self) -> ParticipationState:
        user = self.session.require_user()
        if self.state == ParticipationState.JOINED:
            return self.state
        if self.is_full:
            raise CapacityReached("모집 인원이 마감되었습니다.")

        post_id = self.post['id']
        inserted = self.client.insert('volunteer_participants', [
            asdict(VolunteerParticipant(volunteer_post_id=post_id, user_id=user['id']))
        ])
        next_count = self.current + 1
        try:
            self._write_counter(next_count)
        except StoreError:
            logging.warning(f"참여 인원 반영 실패, 참여 신청을 되돌립니다 (post_id: {post_id}, user_id: {user['id']})")
            self.client.delete('volunteer_participants', [('id', '==', inserted[0]['id'])])
            raise

        self.participants.append({
            **inserted[0],
            'user': {'nickname': user.get('nickname'), 'profile_image_url': user.get('profile_image_url')},
        })
        self.post = {**self.post, 'current_participants': next_count}
        logging.info(f"봉사활동 참여 (post_id: {post_id}, user_id: {user['id']}, 인원: {next_count}/{self.capacity})")
        return self.state

    def cancel(self) -> ParticipationState:
        user = self.session.require_user()
        if self.state == ParticipationState.NOT_JOINED:
            return self.state

        post_id = self.post['id']
        removed = self.client.delete('volunteer_participants', [
            ('volunteer_post_id', '==', post_id),
            ('user_id', '==', user['id']),
        ])
        next_count = max((self.post.get('current_participants') or 1) - 1, 0)
        try:
            self._write_counter(next_count)
        except StoreError:
            logging.warning(f"참여 인원 반영 실패, 참여 취소를 되돌립니다 (post_id: {post_id}, user_id: {user['id']})")
            if removed:
                self.client.insert('volunteer_participants', removed)
            raise

        self.participants = [p for p in self.participants if p.get('user_id') != user['id']]
        self.post = {**self.post, 'current_participants': next_count}
        logging.info(f"봉사활동 참여 취소 (post_id: {post_id}, user_id: {user['id']}, 인원: {next_count}/{self.capacity})")
        return self.state

    def _write_counter(self, value: int) -> None:
        self.client.update('volunteer_posts', {'current_participants': value}, [('id', '==', self.post['id'])])


class AttendanceBoard:
    """오늘의 출석 현황과 현재 사용자의 출석 체크 상태."""

    def __init__(self, table_client: TableClient, session: Session, today=None):
        self.client = table_client
        self.session = session
        self.today = DateTimeUtils.to_date_string(today or DateTimeUtils.today())
        self.entries: List[Dict[str, Any]] = []
        self.monthly_count = 0
        self.state = AttendanceState.NOT_CHECKED_IN

    @property
    def has_checked_in(self) -> bool:
        return self.state == AttendanceState.CHECKED_IN

    def fetch(self) -> List[Dict[str, Any]]:
        """오늘 출석 목록(먼저 출석한 순)과 현재 사용자의 이번 달 출석 횟수를 조회합니다."""
        try:
            self.entries = self.client.select(
                'attendance',
                filters=[('attendance_date', '==', self.today)],
                join=USER_JOIN,
                order_by='created_at',
            )
            user_id = self.session.user_id
            if user_id:
                if any(e.get('user_id') == user_id for e in self.entries):
                    self.state = AttendanceState.CHECKED_IN
                self.monthly_count = monthly_attendance_count(self.client, user_id, self.today)
        except StoreError as e:
            logging.error(f"출석 현황 조회 실패 (date: {self.today}): {e}")
        return self.entries

    def check_in(self) -> bool:
        """
        오늘 출석을 기록합니다. 새로 기록되면 True를 반환합니다.
        이미 출석한 경우(고유 키 충돌 포함)는 오류 없이 CHECKED_IN 상태가 됩니다.
        """
        user = self.session.require_user()
        if self.has_checked_in:
            return False

        try:
            inserted = self.client.insert('attendance', [
                asdict(Attendance(user_id=user['id'], attendance_date=self.today))
            ])
        except StoreError as e:
            if e.code == UNIQUE_VIOLATION:
                logging.info(f"이미 출석한 사용자입니다 (user_id: {user['id']}, date: {self.today})")
                self.state = AttendanceState.CHECKED_IN
                return False
            raise

        self.state = AttendanceState.CHECKED_IN
        self.monthly_count += 1
        self.entries.append({
            **inserted[0],
            'user': {'nickname': user.get('nickname'), 'profile_image_url': user.get('profile_image_url')},
        })
        return True


def monthly_attendance_count(table_client: TableClient, user_id: str, today: str) -> int:
    """이번 달 1일부터의 출석 횟수."""
    first_day = DateTimeUtils.start_of_month(DateTimeUtils.parse_date_string(today))
    return table_client.select(
        'attendance',
        filters=[
            ('user_id', '==', user_id),
            ('attendance_date', '>=', DateTimeUtils.to_date_string(first_day)),
        ],
        count_only=True,
    )
