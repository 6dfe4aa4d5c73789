# animal_records/api/media/schemas.py
from marshmallow import Schema, fields, validate, pre_load

from animal_records.models.media import MediaCategory


class MediaUploadFormSchema(Schema):
    """
    POST /api/animals/<animal_id>/media (multipart/form-data)의 파일 외 필드.
    health_update_id가 있으면 건강 기록 첨부로, 없으면 갤러리 항목으로 저장됩니다.
    'temp_'로 시작하는 ID는 아직 저장되지 않은 건강 기록용 임시 업로드입니다.
    """
    caption = fields.Str(allow_none=True, validate=validate.Length(max=200))
    tags = fields.List(fields.Str(), load_default=list)
    category = fields.Str(validate=validate.OneOf([e.value for e in MediaCategory]))
    health_update_id = fields.Str(validate=validate.Length(min=1))

    @pre_load
    def preprocess_form(self, data, **kwargs):
        """폼 데이터(ImmutableMultiDict)를 일반 딕셔너리로 바꾸고 태그 문자열을 리스트로 변환합니다."""
        processed_data = {key: data.get(key) for key in data.keys()}
        tags = processed_data.get('tags')
        if isinstance(tags, str):
            processed_data['tags'] = [t.strip() for t in tags.split(',') if t.strip()]
        for key in ('caption', 'category', 'health_update_id'):
            if processed_data.get(key) == '':
                processed_data.pop(key)
        return processed_data


class MediaDeleteQuerySchema(Schema):
    health_update_id = fields.Str(validate=validate.Length(min=1))


class MediaResponseSchema(Schema):
    id = fields.Str(dump_only=True)
    kind = fields.Str()
    animal_id = fields.Str()
    health_update_id = fields.Str(allow_none=True)
    type = fields.Str()
    file_name = fields.Str()
    original_name = fields.Str()
    file_size = fields.Int()
    mime_type = fields.Str()
    url = fields.Str()
    storage_path = fields.Str()
    category = fields.Str()
    uploaded_by = fields.Str()
    uploaded_at = fields.DateTime()
    caption = fields.Str(allow_none=True)
    tags = fields.List(fields.Str())
