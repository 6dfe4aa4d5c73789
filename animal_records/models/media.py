# animal_records/models/media.py
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any, ClassVar, Tuple, Union

from animal_records.models.animal import to_enum, enum_value
from animal_records.utils.datetime_utils import DateTimeUtils

# Storage 경로 규칙
ANIMAL_MEDIA_ROOT = 'animal-media'
HEALTH_UPDATE_MEDIA_ROOT = 'health-update-media'

# 아직 저장되지 않은 건강 기록에 첨부할 파일은 이 접두사의 임시 ID로 업로드됩니다.
TEMP_HEALTH_UPDATE_PREFIX = 'temp_'


def build_storage_path(user_id: str, animal_id: str, file_name: str, health_update_id: Optional[str] = None) -> str:
    if health_update_id:
        return f"{HEALTH_UPDATE_MEDIA_ROOT}/{user_id}/{animal_id}/{health_update_id}/{file_name}"
    return f"{ANIMAL_MEDIA_ROOT}/{user_id}/{animal_id}/{file_name}"


class MediaKind(Enum):
    """미디어가 어디에 속하는지 나타내는 명시적 구분값."""
    ANIMAL = "animal"                # 반려동물 갤러리 항목 ('animal_media' 컬렉션)
    HEALTH_UPDATE = "health_update"  # 건강 기록에 내장된 첨부 파일


class MediaType(Enum):
    PHOTO = "photo"
    VIDEO = "video"
    DOCUMENT = "document"


class MediaCategory(Enum):
    GALLERY = "gallery"
    MEDICAL = "medical"
    XRAY = "xray"
    DOCUMENT = "document"
    OTHER = "other"


@dataclass
class Media:
    """
    업로드된 파일의 메타데이터. 실제 바이너리는 Storage의 storage_path에 있습니다.
    """
    id: str
    animal_id: str
    type: MediaType
    file_name: str
    original_name: str
    file_size: int
    mime_type: str
    url: str
    storage_path: str
    category: MediaCategory
    uploaded_by: str
    uploaded_at: datetime
    caption: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    kind: ClassVar[MediaKind]
    DATETIME_FIELDS: ClassVar[Tuple[str, ...]] = ('uploaded_at',)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Media":
        known = {f.name for f in fields(cls)}
        processed_data = {k: v for k, v in data.items() if k in known}
        processed_data['type'] = to_enum(MediaType, processed_data.get('type'), MediaType.DOCUMENT)
        processed_data['category'] = to_enum(MediaCategory, processed_data.get('category'), MediaCategory.OTHER)
        processed_data['uploaded_at'] = DateTimeUtils.from_firestore(processed_data.get('uploaded_at'))
        if processed_data.get('tags') is None:
            processed_data['tags'] = []
        return cls(**processed_data)

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: enum_value(getattr(self, f.name)) for f in fields(self)}
        data['tags'] = list(self.tags)
        data['kind'] = self.kind.value
        return data


@dataclass
class AnimalMedia(Media):
    """반려동물 갤러리에 직접 연결된 미디어."""
    kind: ClassVar[MediaKind] = MediaKind.ANIMAL


@dataclass
class HealthUpdateMedia(Media):
    """건강 기록(HealthUpdate)에 첨부된 미디어. 소속 기록의 ID를 역참조로 가집니다."""
    health_update_id: Optional[str] = None

    kind: ClassVar[MediaKind] = MediaKind.HEALTH_UPDATE


AnyMedia = Union[AnimalMedia, HealthUpdateMedia]

_MEDIA_CLASSES = {
    MediaKind.ANIMAL: AnimalMedia,
    MediaKind.HEALTH_UPDATE: HealthUpdateMedia,
}


def media_from_dict(data: Dict[str, Any]) -> AnyMedia:
    """'kind' 값으로 알맞은 미디어 클래스를 골라 인스턴스를 만듭니다."""
    kind = to_enum(MediaKind, data.get('kind'))
    if kind is None:
        raise ValueError(f"미디어 구분값(kind)이 올바르지 않습니다: {data.get('kind')!r}")
    return _MEDIA_CLASSES[kind].from_dict(data)
