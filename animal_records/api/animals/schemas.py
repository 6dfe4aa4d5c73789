# animal_records/api/animals/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from animal_records.models.animal import AnimalSex, AnimalSpecies, HeightUnit, WeightUnit

SPECIES = [e.value for e in AnimalSpecies]
SEXES = [e.value for e in AnimalSex]
WEIGHT_UNITS = [e.value for e in WeightUnit]
HEIGHT_UNITS = [e.value for e in HeightUnit]


def _validate_measurements(data):
    """측정값과 단위는 함께 입력되어야 합니다."""
    if data.get('weight') is not None and not data.get('weight_unit'):
        raise ValidationError('체중 단위를 함께 입력해야 합니다.', 'weight_unit')
    if data.get('height') is not None and not data.get('height_unit'):
        raise ValidationError('키(체고) 단위를 함께 입력해야 합니다.', 'height_unit')


def _validate_dates(data):
    born, died = data.get('date_of_birth'), data.get('date_of_death')
    if born and died and died < born:
        raise ValidationError('사망일은 생년월일보다 빠를 수 없습니다.', 'date_of_death')


class AnimalCreateSchema(Schema):
    """POST /api/animals/ 반려동물 등록 요청 스키마."""
    name = fields.Str(required=True, validate=validate.Length(min=1, max=50))
    species = fields.Str(required=True, validate=validate.OneOf(SPECIES))
    sex = fields.Str(required=True, validate=validate.OneOf(SEXES))
    date_of_birth = fields.Date(required=True, format="%Y-%m-%d")
    date_of_death = fields.Date(format="%Y-%m-%d", allow_none=True)
    breed = fields.Str(allow_none=True, validate=validate.Length(max=50))
    color = fields.Str(allow_none=True)
    markings = fields.Str(allow_none=True)
    microchip_number = fields.Str(allow_none=True)
    registration_number = fields.Str(allow_none=True)
    profile_picture = fields.Str(allow_none=True)
    notes = fields.Str(allow_none=True)
    weight = fields.Float(allow_none=True, validate=validate.Range(min=0, min_inclusive=False))
    weight_unit = fields.Str(allow_none=True, validate=validate.OneOf(WEIGHT_UNITS))
    height = fields.Float(allow_none=True, validate=validate.Range(min=0, min_inclusive=False))
    height_unit = fields.Str(allow_none=True, validate=validate.OneOf(HEIGHT_UNITS))

    @validates_schema
    def validate_measurements(self, data, **kwargs):
        _validate_measurements(data)
        _validate_dates(data)


class AnimalUpdateSchema(Schema):
    """
    PATCH /api/animals/<animal_id> 부분 업데이트 스키마.
    요청에 없는 필드는 결과에서도 빠지므로 저장소 계층에 '미설정'으로 전달됩니다.
    null을 보내면 해당 필드를 비웁니다.
    """
    name = fields.Str(validate=validate.Length(min=1, max=50))
    species = fields.Str(validate=validate.OneOf(SPECIES))
    sex = fields.Str(validate=validate.OneOf(SEXES))
    date_of_birth = fields.Date(format="%Y-%m-%d")
    date_of_death = fields.Date(format="%Y-%m-%d", allow_none=True)
    breed = fields.Str(allow_none=True, validate=validate.Length(max=50))
    color = fields.Str(allow_none=True)
    markings = fields.Str(allow_none=True)
    microchip_number = fields.Str(allow_none=True)
    registration_number = fields.Str(allow_none=True)
    profile_picture = fields.Str(allow_none=True)
    notes = fields.Str(allow_none=True)
    weight = fields.Float(allow_none=True, validate=validate.Range(min=0, min_inclusive=False))
    weight_unit = fields.Str(allow_none=True, validate=validate.OneOf(WEIGHT_UNITS))
    height = fields.Float(allow_none=True, validate=validate.Range(min=0, min_inclusive=False))
    height_unit = fields.Str(allow_none=True, validate=validate.OneOf(HEIGHT_UNITS))

    @validates_schema
    def validate_dates(self, data, **kwargs):
        _validate_dates(data)


class AnimalResponseSchema(Schema):
    """반려동물 프로필 응답 스키마."""
    id = fields.Str(dump_only=True)
    owner_id = fields.Str(dump_only=True)
    name = fields.Str()
    species = fields.Str()
    sex = fields.Str()
    date_of_birth = fields.Date()
    date_of_death = fields.Date(allow_none=True)
    breed = fields.Str(allow_none=True)
    color = fields.Str(allow_none=True)
    markings = fields.Str(allow_none=True)
    microchip_number = fields.Str(allow_none=True)
    registration_number = fields.Str(allow_none=True)
    profile_picture = fields.Str(allow_none=True)
    notes = fields.Str(allow_none=True)
    weight = fields.Float(allow_none=True)
    weight_unit = fields.Str(allow_none=True)
    height = fields.Float(allow_none=True)
    height_unit = fields.Str(allow_none=True)
    is_deceased = fields.Bool()
    age_years = fields.Int()
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)
