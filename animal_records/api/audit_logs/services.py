# animal_records/api/audit_logs/services.py
from typing import Dict, Any, List, Optional

from animal_records.api.animals.services import AnimalService
from animal_records.api.health_updates.services import HealthUpdateService
from animal_records.models.animal import WeightUnit
from animal_records.models.audit_log import AuditLog
from animal_records.repositories.audit_logs import AuditLogRepository
from animal_records.search.projections import (
    TimelineEntry,
    WeightPoint,
    build_timeline,
    summarize_weights,
    weight_series,
)


class ActivityService:
    """변경 이력, 활동 타임라인, 체중 추이처럼 여러 기록을 모아 보여주는 읽기 전용 서비스."""

    def __init__(self, animal_service: AnimalService, health_update_service: HealthUpdateService,
                 audit_log_repository: AuditLogRepository):
        self.animal_service = animal_service
        self.health_update_service = health_update_service
        self.audit_logs = audit_log_repository

    def list_audit_logs(self, animal_id: str, user_id: str) -> List[AuditLog]:
        """감사 로그 목록 (최신순)."""
        self.animal_service.get_owned_animal(animal_id, user_id)
        logs = self.audit_logs.list_for_animal(animal_id)
        return sorted(logs, key=lambda log: (log.timestamp.timestamp() if log.timestamp else 0, log.id), reverse=True)

    def timeline(self, animal_id: str, user_id: str, kind: str = 'all') -> List[TimelineEntry]:
        updates = self.health_update_service.list_health_updates(animal_id, user_id)
        return build_timeline(updates, self.audit_logs.list_for_animal(animal_id), kind)

    def weights(self, animal_id: str, user_id: str, unit: Optional[str] = None,
                time_range: str = 'all') -> Dict[str, Any]:
        updates = self.health_update_service.list_health_updates(animal_id, user_id)
        points: List[WeightPoint] = weight_series(
            updates, unit=WeightUnit(unit) if unit else None, time_range=time_range,
        )
        return {'points': points, 'summary': summarize_weights(points)}
