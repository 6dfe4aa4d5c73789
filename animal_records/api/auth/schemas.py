# animal_records/api/auth/schemas.py
from marshmallow import Schema, fields


class SessionRequestSchema(Schema):
    """POST /api/auth/session 요청 스키마. 클라이언트가 Firebase Auth에서 받은 ID 토큰."""
    id_token = fields.Str(required=True, error_messages={"required": "ID 토큰(id_token)은 필수입니다."})


class SessionResponseSchema(Schema):
    access_token = fields.Str()
    refresh_token = fields.Str()
    user_id = fields.Str()
    display_name = fields.Str(allow_none=True)
    email = fields.Str(allow_none=True)
