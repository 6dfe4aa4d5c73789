# animal_records/api/search/services.py
import logging
from datetime import date
from typing import Iterable, List, Optional

from animal_records.api.animals.services import AnimalService
from animal_records.search.engine import SearchResult, search_records
from animal_records.search.loader import RecordLoader


class SearchService:
    """반려동물 한 마리 또는 소유자 전체(대시보드) 범위의 통합 검색."""

    def __init__(self, animal_service: AnimalService, record_loader: RecordLoader):
        self.animal_service = animal_service
        self.loader = record_loader

    def search_animal(self, animal_id: str, user_id: str, query: str,
                      types: Optional[Iterable[str]] = None,
                      start_date: Optional[date] = None, end_date: Optional[date] = None) -> List[SearchResult]:
        animal = self.animal_service.get_owned_animal(animal_id, user_id)
        if not query.strip():
            return []
        records = self.loader.load_for_animal(animal)
        results = search_records(query, records, types=types, date_from=start_date, date_to=end_date)
        logging.info(f"Animal search '{query}' on {animal_id}: {len(results)} results")
        return results

    def search_dashboard(self, user_id: str, query: str,
                         types: Optional[Iterable[str]] = None,
                         start_date: Optional[date] = None, end_date: Optional[date] = None) -> List[SearchResult]:
        if not query.strip():
            return []
        records = self.loader.load_for_owner(user_id)
        results = search_records(query, records, types=types, date_from=start_date, date_to=end_date)
        logging.info(f"Dashboard search '{query}' for user {user_id}: {len(results)} results")
        return results
