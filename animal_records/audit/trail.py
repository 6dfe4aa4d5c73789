# animal_records/audit/trail.py
import logging
from typing import Any, Dict, List, Mapping, Optional

from animal_records.audit.diff import compute_changes, summarize_changes
from animal_records.models.audit_log import AuditAction, AuditEntityType, AuditLog, FieldChange
from animal_records.models.user import CurrentUser
from animal_records.repositories.audit_logs import AuditLogRepository

logger = logging.getLogger(__name__)


class AuditTrail:
    """
    감사 로그 기록기.
    모든 기록은 '시도하고, 실패하면 로그만 남기고, 재시도하지 않는' 방식입니다.
    감사 로그 저장에 실패해도 본 작업(엔티티 쓰기)은 되돌리지 않습니다.
    """

    def __init__(self, repository: AuditLogRepository):
        self.repository = repository

    def record_update(
        self,
        animal_id: str,
        user: CurrentUser,
        before: Any,
        patch: Mapping[str, Any],
        entity_type: AuditEntityType = AuditEntityType.ANIMAL,
        entity_id: Optional[str] = None,
        action: AuditAction = AuditAction.UPDATED,
    ) -> Optional[AuditLog]:
        """변경된 필드가 있을 때만 로그 1건을 추가합니다. 변경이 없으면 아무것도 쓰지 않습니다."""
        changes = compute_changes(before, patch)
        if not changes:
            logger.info(f"No field changes for {entity_type.value} {entity_id or animal_id}; audit skipped")
            return None

        return self.record_event(
            animal_id, user, action, entity_type,
            entity_id=entity_id or animal_id,
            summary=summarize_changes(changes),
            changes=changes,
        )

    def record_creation(
        self,
        animal_id: str,
        user: CurrentUser,
        name: str,
        entity_type: AuditEntityType = AuditEntityType.ANIMAL,
        entity_id: Optional[str] = None,
        action: AuditAction = AuditAction.CREATED,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[AuditLog]:
        return self.record_event(
            animal_id, user, action, entity_type,
            entity_id=entity_id or animal_id,
            summary=f"Created {name}",
            metadata=metadata,
        )

    def record_deletion(
        self,
        animal_id: str,
        user: CurrentUser,
        name: str,
        entity_type: AuditEntityType = AuditEntityType.ANIMAL,
        entity_id: Optional[str] = None,
        action: AuditAction = AuditAction.DELETED,
    ) -> Optional[AuditLog]:
        return self.record_event(
            animal_id, user, action, entity_type,
            entity_id=entity_id or animal_id,
            summary=f"Deleted {name}",
        )

    def record_event(
        self,
        animal_id: str,
        user: CurrentUser,
        action: AuditAction,
        entity_type: AuditEntityType,
        entity_id: str,
        summary: str,
        changes: Optional[List[FieldChange]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[AuditLog]:
        log = AuditLog(
            id='',
            animal_id=animal_id,
            user_id=user.uid,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            summary=summary,
            user_name=user.display_name,
            user_email=user.email,
            changes=list(changes or []),
            metadata=dict(metadata or {}),
        )
        try:
            self.repository.create(log)
        except Exception as e:
            logger.error(f"Failed to write audit log ({action.value}) for animal {animal_id}: {e}", exc_info=True)
            return None

        logger.info(f"Audit log {log.id} written: {summary}")
        return log
