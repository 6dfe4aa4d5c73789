# animal_records/api/audit_logs/schemas.py
from datetime import date, datetime

from marshmallow import Schema, fields, validate

from animal_records.api.animals.schemas import WEIGHT_UNITS
from animal_records.api.health_updates.schemas import HEALTH_UPDATE_TYPES
from animal_records.search.projections import TIMELINE_FILTERS, TIME_RANGES


def _json_value(value):
    """날짜 값은 ISO 문자열로, 나머지는 그대로 내보냅니다."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class FieldChangeSchema(Schema):
    field = fields.Str()
    old_value = fields.Function(lambda change: _json_value(change.get('old_value')))
    new_value = fields.Function(lambda change: _json_value(change.get('new_value')))


class AuditLogResponseSchema(Schema):
    id = fields.Str(dump_only=True)
    animal_id = fields.Str()
    user_id = fields.Str()
    user_name = fields.Str(allow_none=True)
    user_email = fields.Str(allow_none=True)
    action = fields.Str()
    entity_type = fields.Str()
    entity_id = fields.Str()
    summary = fields.Str()
    changes = fields.List(fields.Nested(FieldChangeSchema))
    metadata = fields.Dict()
    timestamp = fields.DateTime(allow_none=True)


class TimelineQuerySchema(Schema):
    """GET /api/animals/<animal_id>/timeline 쿼리 파라미터."""
    filter = fields.Str(load_default='all', validate=validate.OneOf(list(TIMELINE_FILTERS) + HEALTH_UPDATE_TYPES))


class TimelineEntrySchema(Schema):
    id = fields.Str()
    type = fields.Str()
    date = fields.DateTime()
    item = fields.Dict()


class WeightQuerySchema(Schema):
    """GET /api/animals/<animal_id>/weights 쿼리 파라미터. unit을 생략하면 가장 많이 쓰인 단위."""
    unit = fields.Str(validate=validate.OneOf(WEIGHT_UNITS))
    range = fields.Str(load_default='all', validate=validate.OneOf(list(TIME_RANGES)))


class WeightPointSchema(Schema):
    date = fields.Date()
    weight = fields.Float()
    unit = fields.Str()
    health_update_id = fields.Str()
    notes = fields.Str(allow_none=True)
