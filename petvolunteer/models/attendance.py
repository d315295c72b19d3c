# petvolunteer/models/attendance.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

@dataclass
class Attendance:
    """
    'attendance' 테이블의 행 구조.
    (user_id, attendance_date) 조합은 하루에 한 번만 존재할 수 있습니다.
    """
    user_id: str
    attendance_date: str  # YYYY-MM-DD (UTC)
    id: Optional[str] = None
    created_at: Optional[datetime] = None
