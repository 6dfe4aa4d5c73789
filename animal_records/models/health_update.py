# animal_records/models/health_update.py
from dataclasses import dataclass, field, fields
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional, List, Dict, Any, ClassVar, Tuple

from animal_records.models.animal import WeightUnit, HeightUnit, to_enum, enum_value
from animal_records.models.media import HealthUpdateMedia
from animal_records.utils.datetime_utils import DateTimeUtils

# 생성 직후 곧바로 이어지는 후속 쓰기(미디어 ID 보정 등)는 '수정됨'으로 보지 않습니다.
RECENT_EDIT_GRACE = timedelta(seconds=60)


class HealthUpdateType(Enum):
    GENERAL = "general"
    VACCINATION = "vaccination"
    CHECKUP = "checkup"
    TREATMENT = "treatment"
    SURGERY = "surgery"
    MEDICATION = "medication"
    OTHER = "other"


@dataclass
class HealthUpdate:
    """
    Firestore 'health_updates' 컬렉션 문서 구조.
    하나의 Animal에 속하는 시계열 건강 기록(측정값, 진료/비용 정보, 태그, 첨부 미디어).
    """
    id: str
    animal_id: str
    created_by: str
    title: str
    date: date
    type: HealthUpdateType = HealthUpdateType.GENERAL
    description: Optional[str] = None
    weight: Optional[float] = None
    weight_unit: Optional[WeightUnit] = None
    height: Optional[float] = None
    height_unit: Optional[HeightUnit] = None
    veterinarian: Optional[str] = None
    cost: Optional[float] = None
    next_due_date: Optional[date] = None
    tags: List[str] = field(default_factory=list)
    media: List[HealthUpdateMedia] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    DATE_FIELDS: ClassVar[Tuple[str, ...]] = ('date', 'next_due_date')
    DATETIME_FIELDS: ClassVar[Tuple[str, ...]] = ('created_at', 'updated_at')

    @property
    def is_recently_edited(self) -> bool:
        """생성 시각과 구분되는 수정 시각이 있으면 UI에서 '수정됨'으로 표시합니다."""
        if not self.created_at or not self.updated_at:
            return False
        return self.updated_at - self.created_at > RECENT_EDIT_GRACE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HealthUpdate":
        known = {f.name for f in fields(cls)}
        processed_data = {k: v for k, v in data.items() if k in known}

        processed_data['type'] = to_enum(HealthUpdateType, processed_data.get('type'), HealthUpdateType.GENERAL)
        processed_data['weight_unit'] = to_enum(WeightUnit, processed_data.get('weight_unit'))
        processed_data['height_unit'] = to_enum(HeightUnit, processed_data.get('height_unit'))

        for name in cls.DATE_FIELDS:
            processed_data[name] = DateTimeUtils.to_date(processed_data.get(name))
        for name in cls.DATETIME_FIELDS:
            processed_data[name] = DateTimeUtils.from_firestore(processed_data.get(name))

        processed_data['tags'] = list(processed_data.get('tags') or [])
        processed_data['media'] = [
            item if isinstance(item, HealthUpdateMedia) else HealthUpdateMedia.from_dict(item)
            for item in (processed_data.get('media') or [])
        ]
        return cls(**processed_data)

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: enum_value(getattr(self, f.name)) for f in fields(self)}
        data['tags'] = list(self.tags)
        data['media'] = [m.to_dict() for m in self.media]
        return data
