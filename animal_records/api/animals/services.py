# animal_records/api/animals/services.py
import logging
from typing import Dict, Any, List, Optional

from animal_records.audit.trail import AuditTrail
from animal_records.core.errors import NOT_FOUND_OR_FORBIDDEN
from animal_records.models.animal import Animal
from animal_records.models.media import ANIMAL_MEDIA_ROOT
from animal_records.models.user import CurrentUser
from animal_records.repositories.animals import AnimalRepository
from animal_records.services.backend import BlobStore, owned_storage_path
from animal_records.utils.datetime_utils import DateTimeUtils


class AnimalService:
    """반려동물 프로필의 조회/등록/수정/삭제와 소유권 확인, 변경 이력 기록을 담당하는 서비스."""

    def __init__(self, animal_repository: AnimalRepository, blob_store: BlobStore, audit_trail: AuditTrail):
        self.animals = animal_repository
        self.blobs = blob_store
        self.audit = audit_trail
        logging.info("AnimalService initialized with dependencies.")

    def get_owned_animal(self, animal_id: str, user_id: str) -> Animal:
        """
        소유자가 맞는 경우에만 반려동물을 반환합니다.
        문서가 없거나 소유자가 다르면 같은 메시지의 PermissionError를 발생시킵니다.
        """
        animal = self.animals.get(animal_id)
        if not animal or animal.owner_id != user_id:
            raise PermissionError(NOT_FOUND_OR_FORBIDDEN)
        return animal

    def check_profile_picture(self, user_id: str, url: Optional[str]) -> None:
        """프로필 이미지는 요청자 본인의 갤러리 경로에 올린 파일만 허용합니다. 아니면 ValueError."""
        if url and not owned_storage_path(self.blobs, url, f"{ANIMAL_MEDIA_ROOT}/{user_id}/"):
            raise ValueError("프로필 이미지는 본인이 업로드한 파일이어야 합니다.")

    def list_animals(self, user_id: str) -> List[Animal]:
        """소유자의 반려동물 목록 (최근 등록 순)."""
        animals = self.animals.list_for_owner(user_id)
        return sorted(
            animals,
            key=lambda a: (a.created_at or DateTimeUtils.to_utc_datetime(a.date_of_birth), a.id),
            reverse=True,
        )

    def create_animal(self, user: CurrentUser, data: Dict[str, Any]) -> Animal:
        """반려동물을 등록하고 'Created <이름>' 감사 로그를 남깁니다."""
        self.check_profile_picture(user.uid, data.get('profile_picture'))
        animal = Animal.from_dict({**data, 'id': '', 'owner_id': user.uid})
        self.animals.create(animal)
        logging.info(f"Animal {animal.id} created for owner {user.uid}")

        self.audit.record_creation(animal.id, user, animal.name)
        return animal

    def update_animal(self, animal_id: str, user: CurrentUser, patch: Dict[str, Any]) -> Animal:
        """
        프로필을 부분 업데이트합니다.
        저장 후 변경된 필드가 있으면 감사 로그를 남기며, 감사 로그 실패는 수정 결과에 영향을 주지 않습니다.
        """
        before = self.get_owned_animal(animal_id, user.uid)
        self.check_profile_picture(user.uid, patch.get('profile_picture'))
        self.animals.update(
            animal_id, patch, previous_profile_picture=before.profile_picture, owner_id=before.owner_id,
        )
        logging.info(f"Animal profile updated for {animal_id} with fields: {list(patch.keys())}")

        self.audit.record_update(animal_id, user, before, patch)

        updated = self.animals.get(animal_id)
        if not updated:
            raise PermissionError(NOT_FOUND_OR_FORBIDDEN)
        return updated

    def delete_animal(self, animal_id: str, user: CurrentUser) -> None:
        """
        반려동물 문서만 삭제합니다.
        건강 기록, 미디어, 감사 로그는 자동으로 삭제되지 않습니다.
        """
        animal = self.get_owned_animal(animal_id, user.uid)
        self.animals.delete(animal_id)
        logging.info(f"Animal {animal_id} deleted by owner {user.uid}")

        self.audit.record_deletion(animal_id, user, animal.name)

    @staticmethod
    def animal_to_dict(animal: Animal) -> Dict[str, Any]:
        """응답 스키마에 넘길 딕셔너리 (Enum 값 문자열화, 파생 필드 포함)."""
        animal_dict = animal.to_dict()
        animal_dict['is_deceased'] = animal.is_deceased
        animal_dict['age_years'] = animal.age_years
        return animal_dict
