# animal_records/repositories/health_updates.py
from typing import List

from animal_records.models.health_update import HealthUpdate
from animal_records.repositories.base import MutableRepository


class HealthUpdateRepository(MutableRepository[HealthUpdate]):
    collection = 'health_updates'
    model = HealthUpdate
    create_stamps = ('created_at', 'updated_at')
    immutable_fields = ('id', 'animal_id', 'created_by', 'created_at')

    def list_for_animal(self, animal_id: str) -> List[HealthUpdate]:
        return self.list_by('animal_id', animal_id)
