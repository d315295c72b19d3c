# petvolunteer/api/restaurants/schemas.py
from marshmallow import Schema, fields, validate

from petvolunteer.api.volunteer.schemas import AuthorSchema
from petvolunteer.models.restaurant import REGIONS


class RestaurantCreateSchema(Schema):
    """POST /api/restaurants 요청 본문"""
    name = fields.Str(required=True, validate=validate.Length(min=1))
    region = fields.Str(required=True, validate=validate.OneOf(REGIONS))
    address = fields.Str(allow_none=True)
    content = fields.Str(allow_none=True)
    image_url = fields.Str(allow_none=True)


class RestaurantResponseSchema(Schema):
    id = fields.Str(dump_only=True)
    name = fields.Str()
    region = fields.Str()
    address = fields.Str(allow_none=True)
    content = fields.Str(allow_none=True)
    likes_count = fields.Int()
    image_url = fields.Str(allow_none=True)
    author_id = fields.Str()
    author = fields.Nested(AuthorSchema, allow_none=True)
    created_at = fields.DateTime()
