# animal_records/search/loader.py
import concurrent.futures
import logging
from typing import List, Tuple

from animal_records.models.animal import Animal
from animal_records.models.audit_log import AuditLog
from animal_records.models.health_update import HealthUpdate
from animal_records.models.media import AnyMedia
from animal_records.repositories import (
    AnimalMediaRepository,
    AnimalRepository,
    AuditLogRepository,
    HealthUpdateRepository,
)
from animal_records.search.engine import RecordSet
from animal_records.search.projections import collect_media

logger = logging.getLogger(__name__)

AnimalRecords = Tuple[List[HealthUpdate], List[AnyMedia], List[AuditLog]]


class RecordLoader:
    """
    검색/집계용 기록 묶음을 불러옵니다.
    서로 독립적인 조회(건강 기록, 갤러리 미디어, 감사 로그)는 스레드 풀에서 동시에 실행하고
    모두 끝난 뒤에 결과를 합칩니다.
    """

    def __init__(
        self,
        animals: AnimalRepository,
        health_updates: HealthUpdateRepository,
        media: AnimalMediaRepository,
        audit_logs: AuditLogRepository,
        max_workers: int = 4,
    ):
        self.animals = animals
        self.health_updates = health_updates
        self.media = media
        self.audit_logs = audit_logs
        self.max_workers = max_workers

    def _fetch_animal_records(self, executor: concurrent.futures.Executor, animal_id: str) -> AnimalRecords:
        updates_future = executor.submit(self.health_updates.list_for_animal, animal_id)
        gallery_future = executor.submit(self.media.list_for_animal, animal_id)
        logs_future = executor.submit(self.audit_logs.list_for_animal, animal_id)

        updates = updates_future.result()
        media = collect_media(gallery_future.result(), updates)
        return updates, media, logs_future.result()

    def load_for_animal(self, animal: Animal) -> RecordSet:
        """한 마리의 기록을 불러옵니다. 조회 실패는 그대로 전파됩니다."""
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            updates, media, logs = self._fetch_animal_records(executor, animal.id)
        return RecordSet(animals=[animal], health_updates=updates, media=media, audit_logs=logs)

    def load_for_owner(self, owner_id: str) -> RecordSet:
        """
        소유자의 모든 반려동물과 각 반려동물의 기록을 불러옵니다 (대시보드 검색 범위).
        특정 반려동물의 하위 기록 조회가 실패하면 로그를 남기고 나머지 데이터로 계속합니다.
        """
        animals = self.animals.list_for_owner(owner_id)
        records = RecordSet(animals=animals)

        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            for animal in animals:
                try:
                    updates, media, logs = self._fetch_animal_records(executor, animal.id)
                except Exception as e:
                    logger.error(f"Failed to load records for animal {animal.id}: {e}", exc_info=True)
                    continue
                records.health_updates.extend(updates)
                records.media.extend(media)
                records.audit_logs.extend(logs)

        logger.info(
            f"Loaded dashboard records for owner {owner_id}: {len(animals)} animals, "
            f"{len(records.health_updates)} health updates, {len(records.media)} media, "
            f"{len(records.audit_logs)} audit logs"
        )
        return records
