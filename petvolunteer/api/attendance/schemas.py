# petvolunteer/api/attendance/schemas.py
from marshmallow import Schema, fields

from petvolunteer.api.volunteer.schemas import AuthorSchema
from petvolunteer.utils.datetime_utils import DateTimeUtils


class AttendanceEntrySchema(Schema):
    """오늘 출석 목록의 한 줄"""
    id = fields.Str()
    user_id = fields.Str()
    user = fields.Nested(AuthorSchema, allow_none=True)
    attendance_date = fields.Str()
    created_at = fields.DateTime()
    time_label = fields.Method("get_time_label")

    def get_time_label(self, obj):
        return DateTimeUtils.format_clock_time(obj.get('created_at'))
