# animal_records/api/health_updates/schemas.py
from marshmallow import EXCLUDE, Schema, fields, validate, validates_schema, ValidationError, pre_load

from animal_records.api.animals.schemas import WEIGHT_UNITS, HEIGHT_UNITS
from animal_records.api.media.schemas import MediaResponseSchema
from animal_records.models.health_update import HealthUpdateType
from animal_records.models.media import MediaCategory, MediaType

HEALTH_UPDATE_TYPES = [e.value for e in HealthUpdateType]


class HealthUpdateMediaSchema(Schema):
    """건강 기록에 첨부되는 미디어 메타데이터 (미디어 업로드 API 응답을 그대로 전달)."""
    class Meta:
        # 업로드 응답의 kind, animal_id는 서버가 다시 채웁니다.
        unknown = EXCLUDE

    id = fields.Str(required=True)
    type = fields.Str(required=True, validate=validate.OneOf([e.value for e in MediaType]))
    file_name = fields.Str(required=True)
    original_name = fields.Str(required=True)
    file_size = fields.Int(required=True, validate=validate.Range(min=0))
    mime_type = fields.Str(required=True)
    url = fields.Str(required=True)
    storage_path = fields.Str(required=True)
    category = fields.Str(load_default=MediaCategory.OTHER.value,
                          validate=validate.OneOf([e.value for e in MediaCategory]))
    uploaded_by = fields.Str(required=True)
    uploaded_at = fields.DateTime(required=True)
    caption = fields.Str(allow_none=True)
    tags = fields.List(fields.Str(), load_default=list)
    health_update_id = fields.Str(allow_none=True)


class _HealthUpdateFields(Schema):
    type = fields.Str(validate=validate.OneOf(HEALTH_UPDATE_TYPES))
    description = fields.Str(allow_none=True)
    weight = fields.Float(allow_none=True, validate=validate.Range(min=0, min_inclusive=False))
    weight_unit = fields.Str(allow_none=True, validate=validate.OneOf(WEIGHT_UNITS))
    height = fields.Float(allow_none=True, validate=validate.Range(min=0, min_inclusive=False))
    height_unit = fields.Str(allow_none=True, validate=validate.OneOf(HEIGHT_UNITS))
    veterinarian = fields.Str(allow_none=True)
    cost = fields.Float(allow_none=True, validate=validate.Range(min=0))
    next_due_date = fields.Date(format="%Y-%m-%d", allow_none=True)
    tags = fields.List(fields.Str())

    @pre_load
    def normalize_tags(self, data, **kwargs):
        """'a, b' 형태의 태그 문자열을 리스트로 변환하고 빈 태그를 제거합니다."""
        if not isinstance(data, dict):
            return data
        processed_data = dict(data)
        tags = processed_data.get('tags')
        if isinstance(tags, str):
            processed_data['tags'] = [t.strip() for t in tags.split(',') if t.strip()]
        elif isinstance(tags, list):
            processed_data['tags'] = [t.strip() for t in tags if isinstance(t, str) and t.strip()]
        return processed_data


class HealthUpdateCreateSchema(_HealthUpdateFields):
    """POST /api/animals/<animal_id>/health-updates 요청 스키마."""
    title = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    date = fields.Date(required=True, format="%Y-%m-%d")
    type = fields.Str(load_default=HealthUpdateType.GENERAL.value, validate=validate.OneOf(HEALTH_UPDATE_TYPES))
    tags = fields.List(fields.Str(), load_default=list)
    media = fields.List(fields.Nested(HealthUpdateMediaSchema), load_default=list)

    @validates_schema
    def validate_measurements(self, data, **kwargs):
        if data.get('weight') is not None and not data.get('weight_unit'):
            raise ValidationError('체중 단위를 함께 입력해야 합니다.', 'weight_unit')
        if data.get('height') is not None and not data.get('height_unit'):
            raise ValidationError('키(체고) 단위를 함께 입력해야 합니다.', 'height_unit')


class HealthUpdateUpdateSchema(_HealthUpdateFields):
    """PATCH 부분 업데이트 스키마. 첨부 미디어는 미디어 API로 관리합니다."""
    title = fields.Str(validate=validate.Length(min=1, max=100))
    date = fields.Date(format="%Y-%m-%d")


class HealthUpdateResponseSchema(Schema):
    id = fields.Str(dump_only=True)
    animal_id = fields.Str(dump_only=True)
    created_by = fields.Str(dump_only=True)
    title = fields.Str()
    date = fields.Date()
    type = fields.Str()
    description = fields.Str(allow_none=True)
    weight = fields.Float(allow_none=True)
    weight_unit = fields.Str(allow_none=True)
    height = fields.Float(allow_none=True)
    height_unit = fields.Str(allow_none=True)
    veterinarian = fields.Str(allow_none=True)
    cost = fields.Float(allow_none=True)
    next_due_date = fields.Date(allow_none=True)
    tags = fields.List(fields.Str())
    media = fields.List(fields.Nested(MediaResponseSchema))
    is_recently_edited = fields.Bool()
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)
