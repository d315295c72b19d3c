# petvolunteer/api/auth/schemas.py
from marshmallow import Schema, fields, validate

_required = {"required": "필수 항목입니다."}


class SignupSchema(Schema):
    """회원가입 요청 본문"""
    username = fields.Str(required=True, validate=validate.Length(min=1), error_messages=_required)
    password = fields.Str(required=True, validate=validate.Length(min=1), error_messages=_required)
    password_confirm = fields.Str(required=True, error_messages=_required)
    nickname = fields.Str(required=True, validate=validate.Length(min=1), error_messages=_required)


class LoginSchema(Schema):
    """로그인 요청 본문"""
    username = fields.Str(required=True, validate=validate.Length(min=1), error_messages=_required)
    password = fields.Str(required=True, validate=validate.Length(min=1), error_messages=_required)


class LogoutRequestSchema(Schema):
    """로그아웃 요청의 유효성을 검사하는 스키마"""
    access_token = fields.Str(required=True)
    refresh_token = fields.Str(required=True)


class UserResponseSchema(Schema):
    """
    사용자 정보 응답. 비밀번호는 절대 포함하지 않습니다.
    """
    id = fields.Str(dump_only=True)
    username = fields.Str()
    nickname = fields.Str()
    profile_image_url = fields.Str(allow_none=True)
