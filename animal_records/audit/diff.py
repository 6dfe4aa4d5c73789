# animal_records/audit/diff.py
"""
변경 이력(감사 로그)용 필드 단위 비교.

수정 전 엔티티와 부분 업데이트 데이터를 비교해 바뀐 필드만 골라냅니다.
- None과 미설정(marshmallow.missing)은 '값 없음'으로 같게 취급합니다. 빈 문자열은 값입니다.
- 날짜 필드는 문자열로 들어와도 파싱한 뒤 epoch 값으로 비교합니다.
- 그 밖의 필드는 값 동등성(==)으로 비교합니다.
순수 함수이므로 같은 입력에 대해 항상 같은 결과를 돌려줍니다.
"""

from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Union

from marshmallow import missing

from animal_records.models.audit_log import FieldChange
from animal_records.utils.datetime_utils import DateTimeUtils

# 비교 대상에서 제외하는 관리용 필드
IGNORED_FIELDS = ('id', 'created_at', 'updated_at')


def is_unset(value: Any) -> bool:
    return value is None or value is missing


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    return value


def values_equal(old: Any, new: Any, is_date: bool = False) -> bool:
    """타입을 고려한 동등성 비교."""
    if is_unset(old) or is_unset(new):
        return is_unset(old) and is_unset(new)
    if is_date and '' not in (old, new):
        return DateTimeUtils.to_timestamp_ms(old) == DateTimeUtils.to_timestamp_ms(new)
    return _plain(old) == _plain(new)


def _as_mapping(entity: Union[Mapping[str, Any], Any]) -> Mapping[str, Any]:
    if isinstance(entity, Mapping):
        return entity
    return entity.to_dict()


def _date_fields_of(entity: Any) -> tuple:
    model = type(entity)
    return tuple(getattr(model, 'DATE_FIELDS', ())) + tuple(getattr(model, 'DATETIME_FIELDS', ()))


def _normalize_date(value: Any) -> Any:
    """문자열로 들어온 날짜는 비교와 기록을 위해 date/datetime으로 바꿉니다."""
    if not isinstance(value, str) or not value:
        return value
    parsed = DateTimeUtils.parse_iso_datetime(value)
    # 시간 정보가 없는 'YYYY-MM-DD' 형식은 date로 남깁니다.
    return parsed.date() if len(value) == 10 else parsed


def compute_changes(
    before: Union[Mapping[str, Any], Any],
    patch: Mapping[str, Any],
    date_fields: Optional[Iterable[str]] = None,
) -> List[FieldChange]:
    """
    patch에 들어있는(설정된) 키마다 before의 값과 비교해 달라진 필드 목록을 반환합니다.
    결과 순서는 patch의 키 순서를 따릅니다.

    Args:
        before: 수정 전 엔티티 (모델 객체 또는 딕셔너리)
        patch: 부분 업데이트 데이터
        date_fields: 날짜로 비교할 필드 이름들. 생략하면 모델의 DATE_FIELDS/DATETIME_FIELDS를 사용
    """
    if date_fields is None:
        date_fields = _date_fields_of(before)
    date_fields = set(date_fields)
    previous = _as_mapping(before)

    changes = []
    for field_name, new_value in patch.items():
        if new_value is missing or field_name in IGNORED_FIELDS:
            continue

        is_date = field_name in date_fields
        if is_date:
            new_value = _normalize_date(new_value)
        old_value = previous.get(field_name)

        if values_equal(old_value, new_value, is_date=is_date):
            continue

        changes.append(FieldChange(
            field=field_name,
            old_value=None if is_unset(old_value) else _plain(old_value),
            new_value=None if is_unset(new_value) else _plain(new_value),
        ))
    return changes


def summarize_changes(changes: List[FieldChange]) -> str:
    """'Updated color, breed' 형태의 요약문을 만듭니다."""
    if not changes:
        return ''
    return 'Updated ' + ', '.join(change.field for change in changes)
