# animal_records/repositories/animals.py
import logging
from typing import Any, Dict, List, Optional

from animal_records.models.animal import Animal
from animal_records.models.media import ANIMAL_MEDIA_ROOT
from animal_records.repositories.base import MutableRepository
from animal_records.services.backend import owned_storage_path

logger = logging.getLogger(__name__)


class AnimalRepository(MutableRepository[Animal]):
    collection = 'animals'
    model = Animal
    create_stamps = ('created_at', 'updated_at')

    def list_for_owner(self, owner_id: str) -> List[Animal]:
        return self.list_by('owner_id', owner_id)

    def update(self, doc_id: str, patch: Dict[str, Any],
               previous_profile_picture: Optional[str] = None,
               owner_id: Optional[str] = None) -> Dict[str, Any]:
        """
        프로필을 부분 업데이트합니다.
        프로필 이미지가 바뀌면 이전 이미지 파일 삭제를 시도합니다 (실패해도 업데이트는 유지).
        이전 이미지가 owner_id의 갤러리 경로 아래에 있을 때만 삭제합니다.
        """
        cleaned = super().update(doc_id, patch)

        if (
            previous_profile_picture
            and owner_id
            and 'profile_picture' in cleaned
            and cleaned['profile_picture'] != previous_profile_picture
        ):
            self._delete_previous_image(doc_id, owner_id, previous_profile_picture)
        return cleaned

    def _delete_previous_image(self, animal_id: str, owner_id: str, image_url: str) -> None:
        path = owned_storage_path(self.backend.blobs, image_url, f"{ANIMAL_MEDIA_ROOT}/{owner_id}/")
        if not path:
            logger.warning(f"Skipped deleting old profile picture for animal {animal_id}: not owned by {owner_id}")
            return
        try:
            self.backend.blobs.delete(path)
            logger.info(f"Old profile picture deleted for animal {animal_id}")
        except Exception as e:
            # 정리 실패는 기록만 합니다. 고아 파일이 남을 수 있습니다.
            logger.error(f"Error deleting old profile picture for animal {animal_id}: {e}")
