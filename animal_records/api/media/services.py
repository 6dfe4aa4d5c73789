# animal_records/api/media/services.py
import logging
import uuid
from typing import BinaryIO, List, Optional

from animal_records.api.animals.services import AnimalService
from animal_records.api.health_updates.services import HealthUpdateService
from animal_records.audit.trail import AuditTrail
from animal_records.core.errors import NOT_FOUND_OR_FORBIDDEN
from animal_records.models.audit_log import AuditAction, AuditEntityType
from animal_records.models.media import (
    TEMP_HEALTH_UPDATE_PREFIX,
    AnimalMedia,
    AnyMedia,
    HealthUpdateMedia,
    MediaCategory,
    MediaType,
    build_storage_path,
)
from animal_records.models.user import CurrentUser
from animal_records.repositories.media import AnimalMediaRepository
from animal_records.search.projections import collect_media
from animal_records.services.backend import BlobStore, ProgressCallback
from animal_records.utils.datetime_utils import DateTimeUtils

ACCEPTED_MIME_TYPES = {
    MediaType.PHOTO: ('image/jpeg', 'image/jpg', 'image/png', 'image/webp', 'image/gif'),
    MediaType.VIDEO: ('video/mp4', 'video/webm', 'video/ogg', 'video/quicktime'),
    MediaType.DOCUMENT: (
        'application/pdf',
        'application/msword',
        'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
        'text/plain',
    ),
}


def classify_media(mime_type: str) -> Optional[MediaType]:
    for media_type, mime_types in ACCEPTED_MIME_TYPES.items():
        if mime_type in mime_types:
            return media_type
    return None


class MediaService:
    """
    반려동물 갤러리와 건강 기록 첨부 파일의 업로드/조회/삭제를 담당하는 서비스.
    파일은 BlobStore에, 메타데이터는 'animal_media' 컬렉션 또는 건강 기록 문서에 저장됩니다.
    """

    def __init__(self, animal_service: AnimalService, health_update_service: HealthUpdateService,
                 media_repository: AnimalMediaRepository, blob_store: BlobStore, audit_trail: AuditTrail,
                 max_file_size: int):
        self.animal_service = animal_service
        self.health_update_service = health_update_service
        self.media = media_repository
        self.blobs = blob_store
        self.audit = audit_trail
        self.max_file_size = max_file_size

    def validate_file(self, mime_type: str, size: int) -> MediaType:
        """지원하는 형식과 크기인지 확인하고 미디어 종류를 반환합니다."""
        media_type = classify_media(mime_type)
        if media_type is None:
            accepted = ', '.join(t.value for t in ACCEPTED_MIME_TYPES)
            raise ValueError(f"지원하지 않는 파일 형식입니다 ({mime_type}). 허용 종류: {accepted}")
        if size <= 0:
            raise ValueError("빈 파일은 업로드할 수 없습니다.")
        if size > self.max_file_size:
            raise ValueError(f"파일이 너무 큽니다. 최대 크기: {self.max_file_size // (1024 * 1024)}MB")
        return media_type

    def list_media(self, animal_id: str, user_id: str) -> List[AnyMedia]:
        """갤러리 미디어와 건강 기록 첨부 미디어를 합친 목록 (최신 업로드 순)."""
        updates = self.health_update_service.list_health_updates(animal_id, user_id)
        return collect_media(self.media.list_for_animal(animal_id), updates)

    def upload_media(self, animal_id: str, user: CurrentUser, stream: BinaryIO, original_name: str,
                     mime_type: str, size: int, caption: Optional[str] = None,
                     tags: Optional[List[str]] = None, category: Optional[str] = None,
                     health_update_id: Optional[str] = None,
                     on_progress: Optional[ProgressCallback] = None) -> AnyMedia:
        """
        파일을 업로드하고 메타데이터를 저장합니다.
        - health_update_id 없음: 갤러리 항목으로 'animal_media'에 저장
        - 저장된 건강 기록 ID: 해당 기록의 첨부 목록에 추가
        - 임시 ID('temp_...'): 파일만 업로드하고 메타데이터는 반환만 합니다 (건강 기록 생성 요청에 포함)
        업로드 취소는 지원하지 않습니다.
        """
        self.animal_service.get_owned_animal(animal_id, user.uid)
        target = None
        if health_update_id and not health_update_id.startswith(TEMP_HEALTH_UPDATE_PREFIX):
            target = self.health_update_service.get_owned_health_update(animal_id, health_update_id, user.uid)

        media_type = self.validate_file(mime_type, size)
        file_id = str(uuid.uuid4())
        extension = original_name.rsplit('.', 1)[-1].lower() if '.' in original_name else ''
        file_name = f"{file_id}.{extension}" if extension else file_id
        storage_path = build_storage_path(user.uid, animal_id, file_name, health_update_id)

        url = self.blobs.upload(storage_path, stream, size, mime_type, on_progress)
        logging.info(f"Media uploaded to {storage_path} ({size} bytes)")

        common = dict(
            id=file_id, animal_id=animal_id, type=media_type, file_name=file_name,
            original_name=original_name, file_size=size, mime_type=mime_type, url=url,
            storage_path=storage_path, uploaded_by=user.uid, uploaded_at=DateTimeUtils.now(),
            caption=caption, tags=list(tags or []),
        )

        if health_update_id:
            media = HealthUpdateMedia(
                **common,
                category=MediaCategory(category) if category else MediaCategory.OTHER,
                health_update_id=health_update_id,
            )
            if target is None:
                return media
            self.health_update_service.attach_media(target, media)
        else:
            media = AnimalMedia(**common, category=MediaCategory(category) if category else MediaCategory.GALLERY)
            try:
                self.media.create(media)
            except Exception:
                self._delete_blob_quietly(storage_path)
                raise

        self.audit.record_event(
            animal_id, user, AuditAction.MEDIA_ADDED, AuditEntityType.MEDIA,
            entity_id=media.id,
            summary=f"Added media: {original_name}",
            metadata={'type': media_type.value, 'kind': media.kind.value, 'category': media.category.value},
        )
        return media

    def delete_media(self, animal_id: str, media_id: str, user: CurrentUser,
                     health_update_id: Optional[str] = None) -> None:
        """
        파일과 메타데이터를 함께 삭제합니다.
        파일 삭제 실패는 로그만 남기고 메타데이터 삭제는 계속 진행합니다.
        """
        if health_update_id:
            update = self.health_update_service.get_owned_health_update(animal_id, health_update_id, user.uid)
            media = next((m for m in update.media if m.id == media_id), None)
            if media is None:
                raise PermissionError(NOT_FOUND_OR_FORBIDDEN)
            self._delete_blob_quietly(media.storage_path)
            self.health_update_service.detach_media(update, media_id)
        else:
            self.animal_service.get_owned_animal(animal_id, user.uid)
            media = self.media.get(media_id)
            if not media or media.animal_id != animal_id:
                raise PermissionError(NOT_FOUND_OR_FORBIDDEN)
            self._delete_blob_quietly(media.storage_path)
            self.media.delete(media_id)

        logging.info(f"Media {media_id} deleted from animal {animal_id}")
        self.audit.record_event(
            animal_id, user, AuditAction.MEDIA_DELETED, AuditEntityType.MEDIA,
            entity_id=media_id,
            summary=f"Deleted media: {media.original_name}",
        )

    def _delete_blob_quietly(self, storage_path: str) -> None:
        try:
            self.blobs.delete(storage_path)
        except Exception as e:
            logging.error(f"Error deleting media file {storage_path}: {e}")
