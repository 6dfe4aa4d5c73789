# animal_records/services/memory_backend.py
"""
프로세스 내부에서만 동작하는 백엔드 구현 (로컬 개발 및 테스트용).

Firestore/Storage와 같은 계약을 따르며, Firestore가 거부하는 값(date 객체,
직렬화할 수 없는 객체 등)은 똑같이 거부해 변환 누락을 조기에 드러냅니다.
"""
import copy
import logging
import uuid
from datetime import date, datetime
from typing import Any, BinaryIO, Dict, List, Optional, Tuple
from urllib.parse import quote

from animal_records.models.user import CurrentUser
from animal_records.services.backend import (
    BackendClient,
    ProgressCallback,
    storage_path_from_url,
)

_SCALAR_TYPES = (type(None), bool, int, float, str, bytes)
READ_CHUNK_SIZE = 64 * 1024


def _validate_value(value: Any, path: str) -> None:
    """Firestore가 저장할 수 있는 타입인지 재귀적으로 확인합니다."""
    if isinstance(value, datetime):
        return
    if isinstance(value, date):
        raise TypeError(f"'{path}': date 객체는 저장할 수 없습니다. datetime으로 변환해야 합니다.")
    if isinstance(value, _SCALAR_TYPES):
        return
    if isinstance(value, dict):
        for key, item in value.items():
            _validate_value(item, f"{path}.{key}")
        return
    if isinstance(value, list):
        for index, item in enumerate(value):
            _validate_value(item, f"{path}[{index}]")
        return
    raise TypeError(f"'{path}': 지원하지 않는 값입니다 ({type(value).__name__})")


class InMemoryDocumentStore:
    """컬렉션별 딕셔너리에 문서를 보관합니다. 읽기/쓰기 시 깊은 복사를 사용합니다."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        # 테스트에서 실제로 전송된 쓰기 요청을 확인할 수 있도록 기록합니다.
        self.writes: List[Tuple[str, str, str, Dict[str, Any]]] = []

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self.collections.setdefault(name, {})

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        _validate_value(data, collection)
        doc_id = uuid.uuid4().hex[:20]
        self._collection(collection)[doc_id] = copy.deepcopy(data)
        self.writes.append(('add', collection, doc_id, copy.deepcopy(data)))
        return doc_id

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        data = self._collection(collection).get(doc_id)
        if data is None:
            return None
        result = copy.deepcopy(data)
        result['id'] = doc_id
        return result

    def where_equal(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        return [
            {**copy.deepcopy(data), 'id': doc_id}
            for doc_id, data in self._collection(collection).items()
            if data.get(field) == value
        ]

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        _validate_value(data, collection)
        documents = self._collection(collection)
        if doc_id not in documents:
            raise LookupError(f"No document to update: {collection}/{doc_id}")
        documents[doc_id].update(copy.deepcopy(data))
        self.writes.append(('update', collection, doc_id, copy.deepcopy(data)))

    def delete(self, collection: str, doc_id: str) -> None:
        self._collection(collection).pop(doc_id, None)
        self.writes.append(('delete', collection, doc_id, {}))


class InMemoryBlobStore:
    """경로별로 바이트와 MIME 타입을 보관하는 파일 저장소."""

    def __init__(self, bucket_name: str):
        self.bucket_name = bucket_name
        self.blobs: Dict[str, Tuple[bytes, str]] = {}

    def upload(self, path: str, stream: BinaryIO, size: int, content_type: str,
               on_progress: Optional[ProgressCallback] = None) -> str:
        received = bytearray()
        while True:
            chunk = stream.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            received.extend(chunk)
            if on_progress and size:
                on_progress(min(1.0, len(received) / size))
        self.blobs[path] = (bytes(received), content_type)
        return self.public_url(path)

    def delete(self, path_or_url: str) -> None:
        path = self.path_from_url(path_or_url)
        if path not in self.blobs:
            raise FileNotFoundError(f"파일을 찾을 수 없습니다: {path}")
        del self.blobs[path]

    def path_from_url(self, path_or_url: str) -> str:
        return storage_path_from_url(path_or_url, self.bucket_name)

    def public_url(self, path: str) -> str:
        return f"https://storage.googleapis.com/{self.bucket_name}/{quote(path)}"


class InMemoryIdentityProvider:
    """미리 등록된 토큰만 유효한 것으로 인정합니다."""

    def __init__(self):
        self.tokens: Dict[str, CurrentUser] = {}

    def register(self, token: str, user: CurrentUser) -> None:
        self.tokens[token] = user

    def verify_token(self, token: str) -> CurrentUser:
        user = self.tokens.get(token)
        if user is None:
            raise PermissionError("유효하지 않거나 만료된 인증 토큰입니다.")
        return user


def create_memory_backend(bucket_name: str = 'local-bucket') -> BackendClient:
    logging.info(f"Using in-memory backend (bucket: {bucket_name})")
    return BackendClient(
        documents=InMemoryDocumentStore(),
        blobs=InMemoryBlobStore(bucket_name),
        identity=InMemoryIdentityProvider(),
    )
