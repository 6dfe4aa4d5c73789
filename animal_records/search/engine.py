# animal_records/search/engine.py
"""
메모리에 올린 한 사용자의 기록(반려동물, 건강 기록, 미디어, 감사 로그)에 대한 전체 텍스트 검색.

색인 없이 매 요청마다 전체를 다시 훑습니다. 데이터가 한 사용자 분량으로 작다는 전제입니다.
결과는 관련도 내림차순, 날짜 내림차순, 결과 ID 오름차순으로 정렬되어 항상 같은 순서를 가집니다.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from animal_records.models.animal import Animal
from animal_records.models.audit_log import AuditLog
from animal_records.models.health_update import HealthUpdate
from animal_records.models.media import AnyMedia
from animal_records.utils.datetime_utils import DateTimeUtils

RESULT_TYPES = ('animal', 'health_update', 'media', 'audit_log')

# (대표 필드, 대표 필드 일치 점수, 그 외 필드 일치 점수)
RELEVANCE = {
    'animal': ('name', 10, 5),
    'health_update': ('title', 8, 6),
    'media': ('caption', 7, 5),
    'audit_log': ('summary', 6, 4),
}

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class RecordSet:
    """검색/집계 대상이 되는 기록 묶음 (한 마리 또는 대시보드 전체)."""
    animals: List[Animal] = field(default_factory=list)
    health_updates: List[HealthUpdate] = field(default_factory=list)
    media: List[AnyMedia] = field(default_factory=list)
    audit_logs: List[AuditLog] = field(default_factory=list)

    def animal_names(self) -> Dict[str, str]:
        return {animal.id: animal.name for animal in self.animals}


@dataclass
class SearchResult:
    id: str
    type: str
    title: str
    description: str
    date: Optional[datetime]
    relevance: int
    matched_fields: List[str]
    source: Any
    animal_id: Optional[str] = None
    animal_name: Optional[str] = None


def _text(value: Any) -> Optional[str]:
    """검색용 문자열. 값이 없으면 None (검색 대상에서 제외)."""
    if value is None or value == '' or value == []:
        return None
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        return f"{value:g}"
    if isinstance(value, (list, tuple)):
        return ' '.join(str(item) for item in value)
    return str(value)


def _matched(query: str, candidates: Sequence[Tuple[str, Any]]) -> List[str]:
    matched = []
    for name, value in candidates:
        text = _text(value)
        if text is not None and query in text.lower():
            matched.append(name)
    return matched


def _relevance(result_type: str, matched_fields: List[str]) -> int:
    primary, primary_score, other_score = RELEVANCE[result_type]
    return primary_score if primary in matched_fields else other_score


def _as_datetime(value: Union[date, datetime, None]) -> Optional[datetime]:
    if value is None:
        return None
    return DateTimeUtils.to_utc_datetime(value)


def _search_animals(query: str, animals: Iterable[Animal]) -> List[SearchResult]:
    results = []
    for animal in animals:
        matched = _matched(query, [
            ('name', animal.name),
            ('species', animal.species),
            ('breed', animal.breed),
            ('color', animal.color),
            ('markings', animal.markings),
            ('notes', animal.notes),
            ('microchip', animal.microchip_number),
            ('registration', animal.registration_number),
            ('sex', animal.sex),
        ])
        if not matched:
            continue
        species = _text(animal.species)
        results.append(SearchResult(
            id=f"animal_{animal.id}",
            type='animal',
            title=animal.name,
            description=f"{species} - {animal.breed}" if animal.breed else species,
            date=_as_datetime(animal.created_at),
            relevance=_relevance('animal', matched),
            matched_fields=matched,
            source=animal,
            animal_id=animal.id,
            animal_name=animal.name,
        ))
    return results


def _search_health_updates(query: str, updates: Iterable[HealthUpdate]) -> List[SearchResult]:
    results = []
    for update in updates:
        matched = _matched(query, [
            ('title', update.title),
            ('description', update.description),
            ('tags', update.tags),
            ('veterinarian', update.veterinarian),
            ('weight', update.weight),
            ('height', update.height),
        ])
        if not matched:
            continue
        results.append(SearchResult(
            id=f"health_{update.id}",
            type='health_update',
            title=update.title,
            description=update.description or f"{_text(update.type)} update",
            date=_as_datetime(update.date),
            relevance=_relevance('health_update', matched),
            matched_fields=matched,
            source=update,
            animal_id=update.animal_id,
        ))
    return results


def _search_media(query: str, media: Iterable[AnyMedia]) -> List[SearchResult]:
    results = []
    for item in media:
        matched = _matched(query, [
            ('filename', item.file_name),
            ('originalName', item.original_name),
            ('caption', item.caption),
            ('tags', item.tags),
            ('category', item.category),
        ])
        if not matched:
            continue
        results.append(SearchResult(
            id=f"media_{item.id}",
            type='media',
            title=item.caption or item.original_name,
            description=f"{_text(item.type)} - {_text(item.category)}",
            date=_as_datetime(item.uploaded_at),
            relevance=_relevance('media', matched),
            matched_fields=matched,
            source=item,
            animal_id=item.animal_id,
        ))
    return results


def _search_audit_logs(query: str, logs: Iterable[AuditLog]) -> List[SearchResult]:
    results = []
    for log in logs:
        matched = _matched(query, [
            ('summary', log.summary),
            ('userName', log.user_name),
            ('userEmail', log.user_email),
            ('action', log.action),
            ('entityType', log.entity_type),
        ])
        if not matched:
            continue
        results.append(SearchResult(
            id=f"audit_{log.id}",
            type='audit_log',
            title=log.summary,
            description=f"{_text(log.action)} by {log.user_name or log.user_email}",
            date=_as_datetime(log.timestamp),
            relevance=_relevance('audit_log', matched),
            matched_fields=matched,
            source=log,
            animal_id=log.animal_id,
        ))
    return results


def _lower_bound(value: Union[date, datetime, None]) -> Optional[datetime]:
    return None if value is None else DateTimeUtils.to_utc_datetime(value)


def _upper_bound(value: Union[date, datetime, None]) -> Optional[datetime]:
    """날짜만 주어진 종료 경계는 그날 하루 전체를 포함합니다."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return DateTimeUtils.to_utc_datetime(value)
    return DateTimeUtils.to_utc_datetime(value) + timedelta(days=1) - timedelta(microseconds=1)


def _in_range(result: SearchResult, start: Optional[datetime], end: Optional[datetime]) -> bool:
    if result.date is None:
        return start is None and end is None
    if start and result.date < start:
        return False
    if end and result.date > end:
        return False
    return True


def _sort_key(result: SearchResult):
    moment = result.date or _EPOCH
    return (-result.relevance, -(moment - _EPOCH).total_seconds(), result.id)


def search_records(
    query: str,
    records: RecordSet,
    types: Optional[Iterable[str]] = None,
    date_from: Union[date, datetime, None] = None,
    date_to: Union[date, datetime, None] = None,
) -> List[SearchResult]:
    """
    기록 묶음에서 query를 대소문자 구분 없이 부분 일치로 찾습니다.

    Args:
        query: 검색어. 공백뿐이면 빈 목록을 반환
        records: 검색 대상 기록 묶음
        types: 결과 종류 필터 (RESULT_TYPES 중 일부). None이면 전체
        date_from, date_to: 포함 범위 날짜 필터. 관련도 계산 후, 정렬 전에 적용
    """
    if not query or not query.strip():
        return []
    needle = query.strip().lower()
    active = set(RESULT_TYPES if types is None else types)

    results: List[SearchResult] = []
    if 'animal' in active:
        results.extend(_search_animals(needle, records.animals))
    if 'health_update' in active:
        results.extend(_search_health_updates(needle, records.health_updates))
    if 'media' in active:
        results.extend(_search_media(needle, records.media))
    if 'audit_log' in active:
        results.extend(_search_audit_logs(needle, records.audit_logs))

    names = records.animal_names()
    for result in results:
        if result.animal_name is None:
            result.animal_name = names.get(result.animal_id)

    if date_from is not None or date_to is not None:
        start, end = _lower_bound(date_from), _upper_bound(date_to)
        results = [result for result in results if _in_range(result, start, end)]

    return sorted(results, key=_sort_key)
