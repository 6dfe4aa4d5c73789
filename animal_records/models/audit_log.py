# animal_records/models/audit_log.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any, ClassVar, Tuple

from animal_records.models.animal import Animal, to_enum, enum_value
from animal_records.models.health_update import HealthUpdate
from animal_records.utils.datetime_utils import DateTimeUtils


class AuditAction(Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    HEALTH_ADDED = "health_added"
    HEALTH_UPDATED = "health_updated"
    HEALTH_DELETED = "health_deleted"
    MEDIA_ADDED = "media_added"
    MEDIA_DELETED = "media_deleted"


class AuditEntityType(Enum):
    ANIMAL = "animal"
    HEALTH_UPDATE = "health_update"
    MEDIA = "media"


# 엔티티 종류별 날짜 전용 필드
DATE_ONLY_FIELDS = {
    AuditEntityType.ANIMAL: Animal.DATE_FIELDS,
    AuditEntityType.HEALTH_UPDATE: HealthUpdate.DATE_FIELDS,
}


@dataclass
class FieldChange:
    """한 필드의 변경 내역 (field, old_value, new_value)."""
    field: str
    old_value: Any = None
    new_value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {'field': self.field, 'old_value': self.old_value, 'new_value': self.new_value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], date_only: bool = False) -> "FieldChange":
        """date_only이면 UTC 자정 timestamp로 저장된 값을 date로 되돌립니다."""
        def restore(value):
            value = DateTimeUtils.from_firestore(value)
            if date_only and isinstance(value, datetime):
                return DateTimeUtils.to_date(value)
            return value

        return cls(field=data['field'], old_value=restore(data.get('old_value')), new_value=restore(data.get('new_value')))


@dataclass
class AuditLog:
    """
    Firestore 'audit_logs' 컬렉션 문서 구조.
    Animal 또는 하위 엔티티의 상태 변화 1건을 기록하는 추가 전용(append-only) 로그.
    한 번 생성되면 수정/삭제되지 않습니다.
    """
    id: str
    animal_id: str
    user_id: str
    action: AuditAction
    entity_type: AuditEntityType
    entity_id: str
    summary: str
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    changes: List[FieldChange] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: Optional[datetime] = None

    DATETIME_FIELDS: ClassVar[Tuple[str, ...]] = ('timestamp',)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditLog":
        entity_type = to_enum(AuditEntityType, data.get('entity_type'), AuditEntityType.ANIMAL)
        date_only = DATE_ONLY_FIELDS.get(entity_type, ())
        return cls(
            id=data['id'],
            animal_id=data['animal_id'],
            user_id=data['user_id'],
            action=to_enum(AuditAction, data.get('action'), AuditAction.UPDATED),
            entity_type=entity_type,
            entity_id=data['entity_id'],
            summary=data.get('summary', ''),
            user_name=data.get('user_name'),
            user_email=data.get('user_email'),
            changes=[
                FieldChange.from_dict(c, date_only=c.get('field') in date_only)
                for c in (data.get('changes') or [])
            ],
            metadata=dict(data.get('metadata') or {}),
            timestamp=DateTimeUtils.from_firestore(data.get('timestamp')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'animal_id': self.animal_id,
            'user_id': self.user_id,
            'action': enum_value(self.action),
            'entity_type': enum_value(self.entity_type),
            'entity_id': self.entity_id,
            'summary': self.summary,
            'user_name': self.user_name,
            'user_email': self.user_email,
            'changes': [c.to_dict() for c in self.changes],
            'metadata': dict(self.metadata),
            'timestamp': self.timestamp,
        }
