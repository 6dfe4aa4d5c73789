# animal_records/api/health_updates/services.py
import logging
from dataclasses import replace
from typing import Dict, Any, List

from animal_records.api.animals.services import AnimalService
from animal_records.audit.trail import AuditTrail
from animal_records.core.errors import NOT_FOUND_OR_FORBIDDEN
from animal_records.models.audit_log import AuditAction, AuditEntityType
from animal_records.models.health_update import HealthUpdate
from animal_records.models.media import HEALTH_UPDATE_MEDIA_ROOT, TEMP_HEALTH_UPDATE_PREFIX, HealthUpdateMedia
from animal_records.models.user import CurrentUser
from animal_records.repositories.health_updates import HealthUpdateRepository
from animal_records.services.backend import BlobStore, owned_storage_path


class HealthUpdateService:
    """반려동물별 건강 기록(체중/키 측정, 진료, 비용, 첨부 미디어) 관리를 전담하는 서비스."""

    def __init__(self, animal_service: AnimalService, health_update_repository: HealthUpdateRepository,
                 blob_store: BlobStore, audit_trail: AuditTrail):
        self.animal_service = animal_service
        self.health_updates = health_update_repository
        self.blobs = blob_store
        self.audit = audit_trail

    def get_owned_health_update(self, animal_id: str, health_update_id: str, user_id: str) -> HealthUpdate:
        """반려동물 소유권과 기록의 소속을 함께 확인합니다."""
        self.animal_service.get_owned_animal(animal_id, user_id)
        update = self.health_updates.get(health_update_id)
        if not update or update.animal_id != animal_id:
            raise PermissionError(NOT_FOUND_OR_FORBIDDEN)
        return update

    def list_health_updates(self, animal_id: str, user_id: str) -> List[HealthUpdate]:
        """건강 기록 목록 (기록일 최신순, 같은 날은 작성 시각 최신순)."""
        self.animal_service.get_owned_animal(animal_id, user_id)
        updates = self.health_updates.list_for_animal(animal_id)
        return sorted(
            updates,
            key=lambda u: (u.date, u.created_at.timestamp() if u.created_at else 0, u.id),
            reverse=True,
        )

    def create_health_update(self, animal_id: str, user: CurrentUser, data: Dict[str, Any]) -> HealthUpdate:
        """
        건강 기록을 생성합니다.
        1. 기록 저장 (첨부 미디어는 임시 ID로 업로드된 상태)
        2. 첨부 미디어의 health_update_id를 실제 ID로 보정하는 두 번째 쓰기
        3. 'health_added' 감사 로그 기록 (실패해도 기록은 유지)
        """
        self.animal_service.get_owned_animal(animal_id, user.uid)

        media = [self._staged_media(animal_id, user, item) for item in data.get('media', [])]
        update = HealthUpdate.from_dict({
            **data, 'media': media, 'id': '', 'animal_id': animal_id, 'created_by': user.uid,
        })
        self.health_updates.create(update)
        logging.info(f"Health update {update.id} created for animal {animal_id}")

        if update.media:
            update.media = [replace(m, health_update_id=update.id) for m in update.media]
            self.health_updates.update(update.id, {'media': update.media})
            logging.info(f"Linked {len(update.media)} media items to health update {update.id}")

        self.audit.record_event(
            animal_id, user, AuditAction.HEALTH_ADDED, AuditEntityType.HEALTH_UPDATE,
            entity_id=update.id,
            summary=f"Added health update: {update.title}",
            metadata={
                'type': update.type.value,
                'has_weight': update.weight is not None,
                'has_height': update.height is not None,
                'has_vet': bool(update.veterinarian),
                'has_cost': update.cost is not None,
            },
        )
        return self.health_updates.get(update.id) or update

    def _staged_media(self, animal_id: str, user: CurrentUser, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        임시 ID로 업로드된 본인 파일만 첨부로 받아들입니다.
        url, uploaded_by, animal_id는 클라이언트 값 대신 서버가 다시 채웁니다.
        """
        prefix = f"{HEALTH_UPDATE_MEDIA_ROOT}/{user.uid}/{animal_id}/{TEMP_HEALTH_UPDATE_PREFIX}"
        path = owned_storage_path(self.blobs, item['storage_path'], prefix)
        if item.get('uploaded_by') != user.uid or path != item['storage_path']:
            logging.warning(f"Rejected staged media {item.get('id')} for animal {animal_id} from {user.uid}")
            raise ValueError("첨부 미디어는 이 기록을 위해 본인이 업로드한 파일이어야 합니다.")
        return {**item, 'animal_id': animal_id, 'uploaded_by': user.uid, 'url': self.blobs.public_url(path)}

    def update_health_update(self, animal_id: str, health_update_id: str, user: CurrentUser,
                             patch: Dict[str, Any]) -> HealthUpdate:
        """건강 기록을 부분 업데이트하고 변경 필드가 있으면 'health_updated' 감사 로그를 남깁니다."""
        before = self.get_owned_health_update(animal_id, health_update_id, user.uid)
        self.health_updates.update(health_update_id, patch)
        logging.info(f"Health update {health_update_id} updated with fields: {list(patch.keys())}")

        self.audit.record_update(
            animal_id, user, before, patch,
            entity_type=AuditEntityType.HEALTH_UPDATE,
            entity_id=health_update_id,
            action=AuditAction.HEALTH_UPDATED,
        )
        updated = self.health_updates.get(health_update_id)
        if not updated:
            raise PermissionError(NOT_FOUND_OR_FORBIDDEN)
        return updated

    def delete_health_update(self, animal_id: str, health_update_id: str, user: CurrentUser) -> None:
        """건강 기록 문서만 삭제합니다. 반려동물과 다른 기록에는 영향이 없습니다."""
        update = self.get_owned_health_update(animal_id, health_update_id, user.uid)
        self.health_updates.delete(health_update_id)
        logging.info(f"Health update {health_update_id} deleted from animal {animal_id}")

        self.audit.record_deletion(
            animal_id, user, f"health update: {update.title}",
            entity_type=AuditEntityType.HEALTH_UPDATE,
            entity_id=health_update_id,
            action=AuditAction.HEALTH_DELETED,
        )

    def attach_media(self, update: HealthUpdate, media: HealthUpdateMedia) -> HealthUpdate:
        """이미 저장된 건강 기록의 첨부 목록에 미디어를 추가합니다."""
        update.media = [*update.media, media]
        self.health_updates.update(update.id, {'media': update.media})
        return update

    def detach_media(self, update: HealthUpdate, media_id: str) -> HealthUpdate:
        update.media = [m for m in update.media if m.id != media_id]
        self.health_updates.update(update.id, {'media': update.media})
        return update

    @staticmethod
    def health_update_to_dict(update: HealthUpdate) -> Dict[str, Any]:
        update_dict = update.to_dict()
        update_dict['is_recently_edited'] = update.is_recently_edited
        return update_dict
