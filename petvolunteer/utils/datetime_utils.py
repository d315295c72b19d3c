# petvolunteer/utils/datetime_utils.py
"""
프로젝트 전체에서 일관된 시간/날짜 처리를 위한 유틸리티 모듈

- 저장은 모두 UTC 기준 (출석 날짜도 UTC 달력 기준)
- 화면 표시용 라벨은 한국 시간(KST) 기준
"""

import logging
from datetime import datetime, date, timezone, timedelta, time
from typing import Any, Optional, Union
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)

# 화면 표시용 timezone
KST = timezone(timedelta(hours=9))


class DateTimeUtils:
    """시간/날짜 처리를 위한 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(timezone.utc)

    @staticmethod
    def today() -> date:
        """오늘 날짜(UTC)를 반환"""
        return datetime.now(timezone.utc).date()

    @staticmethod
    def start_of_month(d: Optional[date] = None) -> date:
        """해당 월의 1일을 반환"""
        d = d or DateTimeUtils.today()
        return d.replace(day=1)

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 포맷 문자열을 UTC datetime 객체로 파싱

        지원 포맷:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+09:00
        - 2024-01-15T10:30:00
        """
        try:
            if not iso_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")

            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt.astimezone(timezone.utc)

        except Exception as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")

    @staticmethod
    def parse_date_string(date_string: str) -> date:
        """
        날짜 문자열을 date 객체로 파싱

        지원 포맷:
        - 2024-01-15
        - 2024/01/15
        """
        try:
            if not date_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")
            return dateutil_parser.parse(date_string).date()
        except Exception as e:
            logger.error(f"날짜 문자열 파싱 실패: {date_string} - {e}")
            raise ValueError(f"잘못된 날짜 형식입니다: {date_string}")

    @staticmethod
    def to_date_string(d: date) -> str:
        """date 객체를 YYYY-MM-DD 형식 문자열로 변환"""
        return d.strftime('%Y-%m-%d')

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Firestore 저장을 위해 날짜/시간 필드를 변환

        변환 규칙:
        - date -> datetime (00:00:00 UTC)
        - timezone-naive datetime -> timezone-aware datetime (UTC)
        - dict/list 내부 재귀적 변환
        """
        if isinstance(obj, date) and not isinstance(obj, datetime):
            return datetime.combine(obj, time.min).replace(tzinfo=timezone.utc)
        elif isinstance(obj, datetime):
            if obj.tzinfo is None:
                return obj.replace(tzinfo=timezone.utc)
            return obj.astimezone(timezone.utc)
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DateTimeUtils.for_firestore(item) for item in obj]
        return obj

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Firestore에서 읽은 데이터의 datetime 필드를 UTC timezone-aware로 변환합니다.
        변환 실패 시 원본 객체를 그대로 반환합니다.
        """
        try:
            if isinstance(obj, datetime):
                if obj.tzinfo is None:
                    return obj.replace(tzinfo=timezone.utc)
                return obj.astimezone(timezone.utc)
            elif isinstance(obj, dict):
                return {k: DateTimeUtils.from_firestore(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [DateTimeUtils.from_firestore(item) for item in obj]
            return obj
        except Exception as e:
            logger.error(f"Firestore 읽기 변환 실패: {obj} ({type(obj)}) - {e}")
            return obj

    # --- 화면 표시용 라벨 ---

    @staticmethod
    def _as_date(value: Union[str, date, datetime, None]) -> Optional[date]:
        if not value:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return DateTimeUtils.parse_date_string(value)
        except ValueError:
            return None

    @staticmethod
    def format_month_day(value: Union[str, date, datetime, None]) -> str:
        """'3월 5일' 형식. 값이 없으면 빈 문자열."""
        d = DateTimeUtils._as_date(value)
        if d is None:
            return ''
        return f"{d.month}월 {d.day}일"

    @staticmethod
    def format_full_date(value: Union[str, date, datetime, None]) -> str:
        """'2024년 3월 5일' 형식."""
        d = DateTimeUtils._as_date(value)
        if d is None:
            return ''
        return f"{d.year}년 {d.month}월 {d.day}일"

    @staticmethod
    def format_time_label(value: Optional[str]) -> str:
        """'14:30:00' -> '14:30', 값이 없으면 '미정'."""
        if not value:
            return '미정'
        return value[:5]

    @staticmethod
    def format_clock_time(dt: Union[datetime, str, None]) -> str:
        """출석 시각 표시용. KST 기준 '오전 09:05' 형식."""
        if not dt:
            return ''
        if isinstance(dt, str):
            dt = DateTimeUtils.parse_iso_datetime(dt)
        elif dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        local = dt.astimezone(KST)
        meridiem = '오전' if local.hour < 12 else '오후'
        hour = local.hour % 12 or 12
        return f"{meridiem} {hour:02d}:{local.minute:02d}"

    @staticmethod
    def format_relative(dt: Union[datetime, str, None], now: Optional[datetime] = None) -> str:
        """
        커뮤니티 게시글 작성 시각을 상대 시간으로 표시합니다.

        1분 미만 '방금 전', 1시간 미만 'N분 전', 하루 미만 'N시간 전',
        일주일 미만 'N일 전', 그 이후는 'M/D'.
        """
        if not dt:
            return ''
        if isinstance(dt, str):
            dt = DateTimeUtils.parse_iso_datetime(dt)
        elif dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        now = now or DateTimeUtils.now()

        seconds = (now - dt).total_seconds()
        minutes = int(seconds // 60)
        hours = int(seconds // 3600)
        days = int(seconds // 86400)

        if minutes < 1:
            return '방금 전'
        if minutes < 60:
            return f"{minutes}분 전"
        if hours < 24:
            return f"{hours}시간 전"
        if days < 7:
            return f"{days}일 전"
        local = dt.astimezone(KST)
        return f"{local.month}/{local.day}"

