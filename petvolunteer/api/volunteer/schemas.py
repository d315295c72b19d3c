# petvolunteer/api/volunteer/schemas.py
from marshmallow import Schema, fields, validate

from petvolunteer.models.volunteer import DEFAULT_MAX_PARTICIPANTS
from petvolunteer.utils.datetime_utils import DateTimeUtils


# --- 재사용을 위한 중첩 스키마 ---
class AuthorSchema(Schema):
    """목록/상세 응답에 포함될 작성자 정보"""
    nickname = fields.Str(allow_none=True)
    profile_image_url = fields.Str(allow_none=True)


class ParticipantSchema(Schema):
    """봉사활동 참여자 정보"""
    id = fields.Str()
    user_id = fields.Str()
    user = fields.Nested(AuthorSchema, allow_none=True)
    created_at = fields.DateTime()


# --- API 요청 스키마 ---
class VolunteerPostCreateSchema(Schema):
    """POST /api/volunteer 요청 본문"""
    title = fields.Str(required=True, validate=validate.Length(min=1))
    content = fields.Str(required=True, validate=validate.Length(min=1))
    shelter_name = fields.Str(allow_none=True)
    shelter_location = fields.Str(allow_none=True)
    volunteer_date = fields.Date(allow_none=True)
    volunteer_time = fields.Str(allow_none=True)
    max_participants = fields.Int(allow_none=True, validate=validate.Range(min=1))
    image_url = fields.Str(allow_none=True)


class VolunteerPostUpdateSchema(Schema):
    """PATCH /api/volunteer/<id> 요청 본문 (부분 수정)"""
    title = fields.Str(validate=validate.Length(min=1))
    content = fields.Str(validate=validate.Length(min=1))
    shelter_name = fields.Str(allow_none=True)
    shelter_location = fields.Str(allow_none=True)
    volunteer_date = fields.Date(allow_none=True)
    volunteer_time = fields.Str(allow_none=True)
    max_participants = fields.Int(validate=validate.Range(min=1))
    image_url = fields.Str(allow_none=True)


# --- API 응답 스키마 ---
class VolunteerPostResponseSchema(Schema):
    """봉사활동 게시글 응답. 화면 표시용 라벨을 함께 내려줍니다."""
    id = fields.Str(dump_only=True)
    title = fields.Str()
    content = fields.Str()
    shelter_name = fields.Str(allow_none=True)
    shelter_location = fields.Str(allow_none=True)
    volunteer_date = fields.Str(allow_none=True)
    volunteer_time = fields.Str(allow_none=True)
    max_participants = fields.Int()
    current_participants = fields.Int()
    likes_count = fields.Int()
    image_url = fields.Str(allow_none=True)
    author_id = fields.Str()
    author = fields.Nested(AuthorSchema, allow_none=True)
    created_at = fields.DateTime()

    shelter_label = fields.Method("get_shelter_label")
    date_label = fields.Method("get_date_label")
    time_label = fields.Method("get_time_label")
    participants_label = fields.Method("get_participants_label")
    is_full = fields.Method("get_is_full")

    def get_shelter_label(self, obj):
        return obj.get('shelter_name') or '보호소'

    def get_date_label(self, obj):
        return DateTimeUtils.format_month_day(obj.get('volunteer_date'))

    def get_time_label(self, obj):
        return DateTimeUtils.format_time_label(obj.get('volunteer_time'))

    def get_participants_label(self, obj):
        current = obj.get('current_participants') or 0
        capacity = obj.get('max_participants') or DEFAULT_MAX_PARTICIPANTS
        return f"{current}/{capacity}명"

    def get_is_full(self, obj):
        return (obj.get('current_participants') or 0) >= (obj.get('max_participants') or DEFAULT_MAX_PARTICIPANTS)


class VolunteerDetailResponseSchema(VolunteerPostResponseSchema):
    """상세 화면은 연도를 포함한 날짜를 표시합니다."""

    def get_date_label(self, obj):
        return DateTimeUtils.format_full_date(obj.get('volunteer_date'))
