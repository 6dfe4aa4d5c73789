# animal_records/utils/datetime_utils.py
"""
프로젝트 전체에서 일관된 시간/날짜 처리를 위한 중앙화된 유틸리티 모듈

이 모듈의 목적:
1. 모든 시간 관련 작업을 표준화
2. Firestore Timestamp 호환성 보장
3. Timezone 처리 일관성 확보 (백엔드는 UTC로 통일)
4. ISO 포맷 파싱/생성 통일
"""

import logging
from datetime import datetime, date, timezone, time
from typing import Union, Any, Optional
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)


class DateTimeUtils:
    """시간/날짜 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(timezone.utc)

    @staticmethod
    def today() -> date:
        """오늘 날짜를 반환"""
        return datetime.now(timezone.utc).date()

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 포맷 문자열을 UTC datetime 객체로 파싱

        지원 포맷:
        - 2024-01-15
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+09:00
        - 2024-01-15T10:30:00.123456Z
        """
        try:
            if not iso_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")

            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)

            # timezone-naive인 경우 UTC로 가정
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)

            return dt.astimezone(timezone.utc)

        except Exception as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")

    @staticmethod
    def parse_date_string(date_string: str) -> date:
        """
        날짜 문자열을 date 객체로 파싱

        지원 포맷:
        - 2024-01-15
        - 2024/01/15
        - 01-15-2024
        """
        try:
            if not date_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")
            return dateutil_parser.parse(date_string).date()
        except Exception as e:
            logger.error(f"날짜 문자열 파싱 실패: {date_string} - {e}")
            raise ValueError(f"잘못된 날짜 형식입니다: {date_string}")

    @staticmethod
    def to_utc_datetime(value: Union[date, datetime, str]) -> datetime:
        """
        date / datetime / ISO 문자열을 비교 가능한 UTC datetime으로 정규화합니다.
        date는 해당 일자의 00:00:00 UTC로 변환됩니다.
        """
        if isinstance(value, str):
            return DateTimeUtils.parse_iso_datetime(value)
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc)
        if isinstance(value, date):
            return datetime.combine(value, time.min).replace(tzinfo=timezone.utc)
        raise ValueError(f"datetime으로 변환할 수 없는 값입니다: {value!r}")

    @staticmethod
    def to_date(value: Any) -> Optional[date]:
        """
        Firestore에서 읽은 timestamp / datetime / 문자열을 date로 변환합니다.
        date 전용 필드(생년월일 등)를 읽을 때 사용합니다.
        """
        if value is None:
            return None
        if isinstance(value, datetime):
            return DateTimeUtils.to_utc_datetime(value).date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            return DateTimeUtils.parse_date_string(value)
        return DateTimeUtils.from_firestore(value).date()

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Firestore 저장을 위해 객체의 날짜/시간 필드를 변환

        변환 규칙:
        - date -> datetime (00:00:00 UTC)
        - timezone-naive datetime -> timezone-aware datetime (UTC)
        - dict/list 내부 재귀적 변환
        """
        try:
            if isinstance(obj, datetime):
                if obj.tzinfo is None:
                    return obj.replace(tzinfo=timezone.utc)
                return obj.astimezone(timezone.utc)

            elif isinstance(obj, date):
                return datetime.combine(obj, time.min).replace(tzinfo=timezone.utc)

            elif isinstance(obj, dict):
                return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}

            elif isinstance(obj, list):
                return [DateTimeUtils.for_firestore(item) for item in obj]

            return obj

        except Exception as e:
            logger.error(f"Firestore 변환 실패: {obj} ({type(obj)}) - {e}")
            raise ValueError(f"Firestore 호환 형식으로 변환할 수 없습니다: {obj}")

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Firestore에서 읽은 데이터의 datetime 필드를 적절히 변환

        변환 규칙:
        - datetime(DatetimeWithNanoseconds 포함) -> UTC datetime (마이크로초 보존)
        - 그 밖의 timestamp 객체 -> timezone-aware datetime (UTC)
        - dict/list 내부 재귀적 변환
        """
        try:
            # DatetimeWithNanoseconds는 datetime의 하위 클래스이므로 먼저 처리해야
            # float 변환으로 인한 마이크로초 손실이 없습니다.
            if isinstance(obj, datetime):
                if obj.tzinfo is None:
                    return obj.replace(tzinfo=timezone.utc)
                return datetime(
                    obj.year, obj.month, obj.day, obj.hour, obj.minute, obj.second,
                    obj.microsecond, tzinfo=obj.tzinfo,
                ).astimezone(timezone.utc)

            elif hasattr(obj, 'timestamp') and callable(obj.timestamp):
                return datetime.fromtimestamp(obj.timestamp(), tz=timezone.utc)

            elif isinstance(obj, dict):
                return {k: DateTimeUtils.from_firestore(v) for k, v in obj.items()}

            elif isinstance(obj, list):
                return [DateTimeUtils.from_firestore(item) for item in obj]

            return obj

        except Exception as e:
            logger.error(f"Firestore 읽기 변환 실패: {obj} ({type(obj)}) - {e}")
            # 변환 실패 시 원본 객체 반환 (로그만 남김)
            return obj

    @staticmethod
    def to_timestamp_ms(value: Union[date, datetime, str]) -> int:
        """date / datetime / ISO 문자열을 Unix timestamp(밀리초)로 변환"""
        try:
            dt = DateTimeUtils.to_utc_datetime(value)
            return int(dt.timestamp() * 1000)
        except Exception as e:
            logger.error(f"timestamp_ms 변환 실패: {value} - {e}")
            raise ValueError(f"timestamp로 변환할 수 없습니다: {value}")

    @staticmethod
    def age_in_years(birthdate: date, until: Optional[date] = None) -> int:
        """생년월일로부터 나이(만 나이)를 계산. 사망일이 있으면 사망일 기준."""
        until = until or DateTimeUtils.today()
        years = until.year - birthdate.year
        if (until.month, until.day) < (birthdate.month, birthdate.day):
            years -= 1
        return max(0, years)
