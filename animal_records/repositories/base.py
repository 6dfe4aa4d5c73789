# animal_records/repositories/base.py
"""
도메인 엔티티 <-> 백엔드 문서 변환을 담당하는 저장소 계층의 기본 클래스.
백엔드의 저장 형식(Timestamp, 필드 구성)을 아는 유일한 계층입니다.
"""

import logging
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from marshmallow import missing

from animal_records.core.errors import PersistenceError
from animal_records.services.backend import BackendClient
from animal_records.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)

T = TypeVar('T')


def strip_unset(data: Dict[str, Any]) -> Dict[str, Any]:
    """값이 설정되지 않은(marshmallow.missing) 키를 제거합니다. 백엔드는 이런 값을 거부합니다."""
    return {key: value for key, value in data.items() if value is not missing}


def to_plain(value: Any) -> Any:
    """Enum과 모델 객체(to_dict 보유)를 저장 가능한 기본 타입으로 풀어냅니다."""
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    if isinstance(value, list):
        return [to_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: to_plain(item) for key, item in value.items()}
    return value


class BaseRepository(Generic[T]):
    """생성, 단건 조회, 단일 등호 조건 목록 조회를 제공합니다."""

    collection: str = None
    model: Type[T] = None
    # 생성 시 현재 시각으로 채우는 필드
    create_stamps: Tuple[str, ...] = ()

    def __init__(self, backend: BackendClient):
        self.backend = backend
        self.documents = backend.documents

    # ------------------------------------------------------------------
    # 변환
    # ------------------------------------------------------------------
    def to_document(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """엔티티 딕셔너리를 Firestore 저장 형식으로 변환합니다 (id 제외, date -> UTC Timestamp)."""
        document = {key: value for key, value in strip_unset(data).items() if key != 'id'}
        return DateTimeUtils.for_firestore(document)

    def from_document(self, data: Dict[str, Any]) -> T:
        return self.model.from_dict(data)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------
    def create(self, entity: T) -> str:
        """
        엔티티를 저장하고 백엔드가 생성한 ID를 반환합니다.
        생성/수정 시각을 기록하며, 전달된 엔티티 객체에도 ID와 시각을 반영합니다.
        """
        now = DateTimeUtils.now()
        data = entity.to_dict()
        for name in self.create_stamps:
            data[name] = now

        try:
            doc_id = self.documents.add(self.collection, self.to_document(data))
        except Exception as e:
            logger.error(f"Document create failed (collection: {self.collection}): {e}", exc_info=True)
            raise PersistenceError(f"저장에 실패했습니다: {e}", operation='create', collection=self.collection) from e

        entity.id = doc_id
        for name in self.create_stamps:
            setattr(entity, name, now)
        return doc_id

    def get(self, doc_id: str) -> Optional[T]:
        """문서를 조회해 엔티티로 반환합니다. 문서가 없으면 None (오류 아님)."""
        try:
            data = self.documents.get(self.collection, doc_id)
        except Exception as e:
            logger.error(f"Document read failed ({self.collection}/{doc_id}): {e}", exc_info=True)
            raise PersistenceError(f"조회에 실패했습니다: {e}", operation='get', collection=self.collection) from e

        if data is None:
            return None
        return self.from_document(data)

    def list_by(self, field: str, value: Any) -> List[T]:
        """
        field == value 조건 하나로 목록을 조회합니다.
        백엔드 정렬 순서는 보장되지 않으므로 순서가 필요한 호출자는 직접 정렬해야 합니다.
        """
        try:
            rows = self.documents.where_equal(self.collection, field, value)
        except Exception as e:
            logger.error(f"Document query failed ({self.collection} where {field} == {value}): {e}", exc_info=True)
            raise PersistenceError(f"목록 조회에 실패했습니다: {e}", operation='list', collection=self.collection) from e
        return [self.from_document(row) for row in rows]


class MutableRepository(BaseRepository[T]):
    """부분 업데이트와 삭제를 추가로 제공합니다."""

    update_stamp: Optional[str] = 'updated_at'
    immutable_fields: Tuple[str, ...] = ('id', 'created_at')

    def normalize_patch(self, patch: Dict[str, Any]) -> Dict[str, Any]:
        """
        부분 업데이트 데이터를 정리합니다.
        - 미설정 값과 변경 불가 필드 제거
        - 문자열로 들어온 날짜/시각 필드를 date/datetime으로 변환
        """
        cleaned = {
            key: to_plain(value) for key, value in strip_unset(patch).items()
            if key not in self.immutable_fields
        }
        for name in getattr(self.model, 'DATE_FIELDS', ()):
            if isinstance(cleaned.get(name), str):
                cleaned[name] = DateTimeUtils.parse_date_string(cleaned[name])
        for name in getattr(self.model, 'DATETIME_FIELDS', ()):
            if isinstance(cleaned.get(name), str):
                cleaned[name] = DateTimeUtils.parse_iso_datetime(cleaned[name])
        return cleaned

    def update(self, doc_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        """
        전달된 필드만 병합 저장합니다. 전달되지 않은 필드는 변경되지 않습니다.
        실제로 전송한 필드(Python 값 기준)를 반환합니다.
        """
        cleaned = self.normalize_patch(patch)
        if self.update_stamp:
            cleaned[self.update_stamp] = DateTimeUtils.now()

        try:
            self.documents.update(self.collection, doc_id, self.to_document(cleaned))
        except Exception as e:
            logger.error(f"Document update failed ({self.collection}/{doc_id}): {e}", exc_info=True)
            raise PersistenceError(f"수정에 실패했습니다: {e}", operation='update', collection=self.collection) from e

        logger.info(f"Document updated ({self.collection}/{doc_id}) with fields: {list(cleaned.keys())}")
        return cleaned

    def delete(self, doc_id: str) -> None:
        """문서만 삭제합니다. 하위 엔티티나 파일은 함께 삭제되지 않습니다."""
        try:
            self.documents.delete(self.collection, doc_id)
        except Exception as e:
            logger.error(f"Document delete failed ({self.collection}/{doc_id}): {e}", exc_info=True)
            raise PersistenceError(f"삭제에 실패했습니다: {e}", operation='delete', collection=self.collection) from e
