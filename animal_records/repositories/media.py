# animal_records/repositories/media.py
from typing import Any, Dict, List

from animal_records.models.media import AnimalMedia, MediaKind, media_from_dict
from animal_records.repositories.base import MutableRepository


class AnimalMediaRepository(MutableRepository[AnimalMedia]):
    """반려동물 갤러리 미디어('animal_media')의 메타데이터 저장소. 파일 자체는 다루지 않습니다."""
    collection = 'animal_media'
    model = AnimalMedia
    update_stamp = None
    immutable_fields = ('id', 'animal_id', 'uploaded_by', 'uploaded_at', 'storage_path')

    def from_document(self, data: Dict[str, Any]) -> AnimalMedia:
        media = media_from_dict(data)
        if media.kind is not MediaKind.ANIMAL:
            raise ValueError(f"갤러리 컬렉션에 잘못된 미디어가 있습니다: {data.get('id')}")
        return media

    def list_for_animal(self, animal_id: str) -> List[AnimalMedia]:
        return self.list_by('animal_id', animal_id)
