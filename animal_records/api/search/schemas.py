# animal_records/api/search/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError, pre_load

from animal_records.search.engine import RESULT_TYPES


class SearchQuerySchema(Schema):
    """
    GET /api/search, GET /api/animals/<animal_id>/search 쿼리 파라미터 검증 스키마.
    """
    q = fields.Str(load_default='')
    types = fields.List(fields.Str(validate=validate.OneOf(RESULT_TYPES)))
    start_date = fields.Date(format="%Y-%m-%d")
    end_date = fields.Date(format="%Y-%m-%d")

    @pre_load
    def preprocess_data(self, data, **kwargs):
        """쿼리 파라미터 전처리."""
        # ImmutableMultiDict를 수정 가능한 딕셔너리로 변환
        processed_data = {key: data.get(key) for key in data.keys()}

        # types 문자열을 리스트로 변환 (예: "animal,media")
        if isinstance(processed_data.get('types'), str):
            processed_data['types'] = [t.strip() for t in processed_data['types'].split(',') if t.strip()]
        for key in ('start_date', 'end_date'):
            if processed_data.get(key) == '':
                processed_data.pop(key)
        return processed_data

    @validates_schema
    def validate_date_range(self, data, **kwargs):
        start, end = data.get('start_date'), data.get('end_date')
        if start and end and start > end:
            raise ValidationError('시작일은 종료일보다 늦을 수 없습니다.', 'start_date')


class SearchResultSchema(Schema):
    id = fields.Str()
    type = fields.Str()
    title = fields.Str()
    description = fields.Str()
    date = fields.DateTime(allow_none=True)
    relevance = fields.Int()
    matched_fields = fields.List(fields.Str())
    animal_id = fields.Str(allow_none=True)
    animal_name = fields.Str(allow_none=True)
    source = fields.Dict()
