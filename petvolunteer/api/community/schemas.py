# petvolunteer/api/community/schemas.py
from marshmallow import Schema, fields, validate

from petvolunteer.api.volunteer.schemas import AuthorSchema
from petvolunteer.utils.datetime_utils import DateTimeUtils


class PostCreateSchema(Schema):
    """POST /api/community/posts 요청 본문"""
    title = fields.Str(allow_none=True)
    content = fields.Str(required=True, validate=validate.Length(min=1))
    hashtags = fields.List(fields.Str(), allow_none=True)
    image_url = fields.Str(allow_none=True)


class PostResponseSchema(Schema):
    id = fields.Str(dump_only=True)
    title = fields.Str(allow_none=True)
    content = fields.Str()
    hashtags = fields.List(fields.Str(), allow_none=True)
    likes_count = fields.Int()
    image_url = fields.Str(allow_none=True)
    category = fields.Str()
    author_id = fields.Str()
    author = fields.Nested(AuthorSchema, allow_none=True)
    created_at = fields.DateTime()
    created_label = fields.Method("get_created_label")

    def get_created_label(self, obj):
        """'방금 전', 'N분 전' 형태의 작성 시각"""
        if not obj.get('created_at'):
            return None
        return DateTimeUtils.format_relative(obj['created_at'])
