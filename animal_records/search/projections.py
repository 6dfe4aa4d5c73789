# animal_records/search/projections.py
"""한 마리의 기록을 화면용으로 재구성하는 함수들 (미디어 모음, 활동 타임라인, 체중 추이)."""

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from dateutil.relativedelta import relativedelta

from animal_records.models.animal import WeightUnit
from animal_records.models.audit_log import AuditEntityType, AuditLog
from animal_records.models.health_update import HealthUpdate
from animal_records.models.media import AnimalMedia, AnyMedia
from animal_records.utils.datetime_utils import DateTimeUtils

KG_TO_LBS = 2.20462

TIMELINE_FILTERS = ('all', 'health_updates', 'profile_changes')

# 체중 추이 조회 기간
TIME_RANGES = {
    'all': None,
    '1year': relativedelta(years=1),
    '6months': relativedelta(months=6),
    '3months': relativedelta(months=3),
}


@dataclass
class TimelineEntry:
    id: str
    type: str
    date: datetime
    item: Union[HealthUpdate, AuditLog]


@dataclass
class WeightPoint:
    date: date
    weight: float
    unit: WeightUnit
    health_update_id: str
    notes: Optional[str] = None


def _sort_moment(value: Union[date, datetime, None]) -> datetime:
    if value is None:
        return DateTimeUtils.to_utc_datetime(date.min)
    return DateTimeUtils.to_utc_datetime(value)


def collect_media(gallery: Iterable[AnimalMedia], health_updates: Iterable[HealthUpdate]) -> List[AnyMedia]:
    """갤러리 미디어와 건강 기록에 첨부된 미디어를 합쳐 최신 업로드 순으로 반환합니다."""
    items: List[AnyMedia] = list(gallery)
    for update in health_updates:
        items.extend(update.media)
    return sorted(items, key=lambda m: (_sort_moment(m.uploaded_at), m.id), reverse=True)


def _matches_filter(entry: TimelineEntry, kind: str) -> bool:
    if kind == 'all':
        return True
    if kind == 'health_updates':
        return entry.type == 'health_update'
    if kind == 'profile_changes':
        # 건강 기록/미디어 관련 로그는 제외하고 프로필 변경만 남깁니다.
        return entry.type == 'audit_log' and entry.item.entity_type is AuditEntityType.ANIMAL
    # 그 밖의 값은 건강 기록 종류(vaccination 등)로 해석합니다.
    return entry.type == 'health_update' and entry.item.type.value == kind


def build_timeline(
    health_updates: Iterable[HealthUpdate],
    audit_logs: Iterable[AuditLog],
    kind: str = 'all',
) -> List[TimelineEntry]:
    """
    건강 기록과 감사 로그를 하나의 활동 타임라인으로 합칩니다 (최신순).

    kind: 'all', 'health_updates', 'profile_changes' 또는 건강 기록 종류 값
    """
    entries = [
        TimelineEntry(id=f"health_{u.id}", type='health_update', date=_sort_moment(u.date), item=u)
        for u in health_updates
    ]
    entries.extend(
        TimelineEntry(id=f"audit_{log.id}", type='audit_log', date=_sort_moment(log.timestamp), item=log)
        for log in audit_logs
    )
    entries = [entry for entry in entries if _matches_filter(entry, kind)]
    return sorted(entries, key=lambda e: (e.date, e.id), reverse=True)


def convert_weight(weight: float, from_unit: WeightUnit, to_unit: WeightUnit) -> float:
    """kg <-> lbs 변환 후 소수점 첫째 자리로 반올림합니다."""
    if from_unit is to_unit:
        converted = weight
    elif to_unit is WeightUnit.LBS:
        converted = weight * KG_TO_LBS
    else:
        converted = weight / KG_TO_LBS
    return round(converted, 1)


def _most_common_unit(updates: List[HealthUpdate]) -> WeightUnit:
    counts = Counter(u.weight_unit for u in updates)
    # 동률이면 먼저 나온 단위를 사용합니다.
    return counts.most_common(1)[0][0]


def weight_series(
    health_updates: Iterable[HealthUpdate],
    unit: Optional[WeightUnit] = None,
    time_range: str = 'all',
    today: Optional[date] = None,
) -> List[WeightPoint]:
    """
    단위가 기록된 체중 측정값을 날짜 오름차순으로 반환합니다.
    unit을 지정하지 않으면 가장 많이 쓰인 단위로 통일합니다.
    """
    if time_range not in TIME_RANGES:
        raise ValueError(f"지원하지 않는 기간입니다: {time_range}")

    measured = sorted(
        (u for u in health_updates if u.weight and u.weight_unit),
        key=lambda u: (u.date, u.id),
    )
    if not measured:
        return []

    window = TIME_RANGES[time_range]
    if window is not None:
        cutoff = (today or DateTimeUtils.today()) - window
        measured = [u for u in measured if u.date >= cutoff]
        if not measured:
            return []

    target = unit or _most_common_unit(measured)
    return [
        WeightPoint(
            date=u.date,
            weight=convert_weight(u.weight, u.weight_unit, target),
            unit=target,
            health_update_id=u.id,
            notes=u.description,
        )
        for u in measured
    ]


def summarize_weights(points: List[WeightPoint]) -> Dict[str, Any]:
    """현재/이전/최소/최대/평균 체중과 변화량."""
    if not points:
        return {}
    weights = [p.weight for p in points]
    summary: Dict[str, Any] = {
        'current': weights[-1],
        'min': min(weights),
        'max': max(weights),
        'average': round(sum(weights) / len(weights), 1),
        'unit': points[-1].unit.value,
    }
    if len(weights) > 1:
        summary['previous'] = weights[-2]
        summary['change'] = round(weights[-1] - weights[-2], 1)
    return summary
