# animal_records/repositories/audit_logs.py
from typing import List

from animal_records.models.audit_log import AuditLog
from animal_records.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):
    """감사 로그는 추가 전용입니다. 수정/삭제 메서드를 제공하지 않습니다."""
    collection = 'audit_logs'
    model = AuditLog
    create_stamps = ('timestamp',)

    def list_for_animal(self, animal_id: str) -> List[AuditLog]:
        return self.list_by('animal_id', animal_id)
