# animal_records/repositories/__init__.py
from .animals import AnimalRepository
from .audit_logs import AuditLogRepository
from .health_updates import HealthUpdateRepository
from .media import AnimalMediaRepository

__all__ = [
    'AnimalRepository',
    'AuditLogRepository',
    'HealthUpdateRepository',
    'AnimalMediaRepository',
]
