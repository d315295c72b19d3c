# petvolunteer/api/attendance/services.py
import logging

from petvolunteer.core.membership import AttendanceBoard
from petvolunteer.core.session import Session
from petvolunteer.services.table_service import TableClient


class AttendanceService:
    """출석 체크 화면: 오늘 출석 현황 조회와 출석 체크."""

    def __init__(self, table_client: TableClient):
        self.table_client = table_client

    def get_board(self, session: Session, today=None) -> AttendanceBoard:
        board = AttendanceBoard(self.table_client, session, today=today)
        board.fetch()
        return board

    def check_in(self, session: Session, today=None) -> AttendanceBoard:
        """
        오늘 출석을 기록합니다. 이미 출석했다면 오류 없이 현재 상태를 돌려줍니다.
        """
        session.require_user()
        board = self.get_board(session, today=today)
        if board.check_in():
            logging.info(f"출석 체크 완료 (user_id: {session.user_id}, date: {board.today})")
        return board
