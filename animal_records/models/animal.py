# animal_records/models/animal.py
from dataclasses import dataclass, fields
from datetime import date, datetime
from enum import Enum
from typing import Optional, Dict, Any, ClassVar, Tuple, Type
import logging

from animal_records.utils.datetime_utils import DateTimeUtils


class AnimalSpecies(Enum):
    HORSE = "horse"
    DOG = "dog"
    CAT = "cat"
    PIG = "pig"
    GOAT = "goat"
    LLAMA = "llama"
    ALPACA = "alpaca"
    FERRET = "ferret"
    PARROT = "parrot"
    BIRD_OF_PREY = "bird-of-prey"
    CHICKEN = "chicken"
    RABBIT = "rabbit"
    SHEEP = "sheep"
    COW = "cow"
    OTHER = "other"


class AnimalSex(Enum):
    MALE = "male"
    FEMALE = "female"


class WeightUnit(Enum):
    KG = "kg"
    LBS = "lbs"


class HeightUnit(Enum):
    CM = "cm"
    INCHES = "inches"
    HANDS = "hands"


def to_enum(enum_cls: Type[Enum], value: Any, default: Optional[Enum] = None) -> Optional[Enum]:
    """문자열로 저장된 Enum 값을 Enum 멤버로 변환합니다. 알 수 없는 값은 default로 대체합니다."""
    if value is None or isinstance(value, enum_cls):
        return value if value is not None else default
    try:
        return enum_cls(value)
    except ValueError:
        logging.warning(f"Invalid {enum_cls.__name__} value '{value}'. Falling back to {default}.")
        return default


def enum_value(value: Any) -> Any:
    """Enum 멤버면 저장용 문자열 값을, 아니면 원래 값을 반환합니다."""
    return value.value if isinstance(value, Enum) else value


@dataclass
class Animal:
    """
    Firestore 'animals' 컬렉션 문서 구조.
    반려동물 프로필(정체성, 신체 정보, 프로필 이미지)을 관리하며,
    데이터베이스와의 상호 변환 로직을 포함합니다.
    """
    id: str
    owner_id: str
    name: str
    species: AnimalSpecies
    sex: AnimalSex
    date_of_birth: date
    date_of_death: Optional[date] = None
    breed: Optional[str] = None
    color: Optional[str] = None
    markings: Optional[str] = None
    microchip_number: Optional[str] = None
    registration_number: Optional[str] = None
    profile_picture: Optional[str] = None
    notes: Optional[str] = None
    weight: Optional[float] = None
    weight_unit: Optional[WeightUnit] = None
    height: Optional[float] = None
    height_unit: Optional[HeightUnit] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # 날짜만 의미가 있는 필드 (UTC 자정 timestamp로 저장되고 date로 복원)
    DATE_FIELDS: ClassVar[Tuple[str, ...]] = ('date_of_birth', 'date_of_death')
    DATETIME_FIELDS: ClassVar[Tuple[str, ...]] = ('created_at', 'updated_at')

    @property
    def is_deceased(self) -> bool:
        return self.date_of_death is not None

    @property
    def age_years(self) -> int:
        return DateTimeUtils.age_in_years(self.date_of_birth, until=self.date_of_death)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Animal":
        """
        Firestore에서 받은 딕셔너리로부터 Animal 인스턴스를 생성합니다.
        문자열로 저장된 Enum 값과 Timestamp를 Python 객체로 변환합니다.
        """
        known = {f.name for f in fields(cls)}
        processed_data = {k: v for k, v in data.items() if k in known}

        processed_data['species'] = to_enum(AnimalSpecies, processed_data.get('species'), AnimalSpecies.OTHER)
        processed_data['sex'] = to_enum(AnimalSex, processed_data.get('sex'), AnimalSex.MALE)
        processed_data['weight_unit'] = to_enum(WeightUnit, processed_data.get('weight_unit'))
        processed_data['height_unit'] = to_enum(HeightUnit, processed_data.get('height_unit'))

        for name in cls.DATE_FIELDS:
            processed_data[name] = DateTimeUtils.to_date(processed_data.get(name))
        for name in cls.DATETIME_FIELDS:
            processed_data[name] = DateTimeUtils.from_firestore(processed_data.get(name))

        return cls(**processed_data)

    def to_dict(self) -> Dict[str, Any]:
        """Enum을 문자열 값으로 바꾼 평탄한 딕셔너리를 반환합니다."""
        return {f.name: enum_value(getattr(self, f.name)) for f in fields(self)}
