# animal_records/services/backend.py
"""
외부 백엔드(문서 DB, 파일 저장소, 인증 제공자)에 대한 좁은 계약.

애플리케이션은 BackendClient 하나를 create_app에서 생성해 각 저장소(repository)에
주입합니다. 실서비스는 Firebase 구현을, 테스트는 인메모리 구현을 사용합니다.
"""
import logging
from dataclasses import dataclass
from typing import Any, BinaryIO, Callable, Dict, List, Optional, Protocol
from urllib.parse import unquote, urlparse

from flask import Flask

from animal_records.models.user import CurrentUser

# 업로드 진행률 콜백: 0.0 ~ 1.0 사이의 전송 비율을 전달받습니다.
ProgressCallback = Callable[[float], None]


class DocumentStore(Protocol):
    def add(self, collection: str, data: Dict[str, Any]) -> str: ...

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]: ...

    def where_equal(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]: ...

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None: ...

    def delete(self, collection: str, doc_id: str) -> None: ...


class BlobStore(Protocol):
    def upload(self, path: str, stream: BinaryIO, size: int, content_type: str,
               on_progress: Optional[ProgressCallback] = None) -> str: ...

    def delete(self, path_or_url: str) -> None: ...

    def path_from_url(self, path_or_url: str) -> str: ...

    def public_url(self, path: str) -> str: ...


class IdentityProvider(Protocol):
    def verify_token(self, token: str) -> CurrentUser: ...


@dataclass
class BackendClient:
    """주입 가능한 백엔드 클라이언트 묶음."""
    documents: DocumentStore
    blobs: BlobStore
    identity: IdentityProvider


def storage_path_from_url(path_or_url: str, bucket_name: str) -> str:
    """
    Storage 공개 URL 또는 Firebase 다운로드 URL에서 버킷 내부 경로를 추출합니다.
    이미 경로가 주어지면 그대로 반환합니다.

    - https://storage.googleapis.com/<bucket>/<path>
    - https://firebasestorage.googleapis.com/v0/b/<bucket>/o/<url-encoded path>?alt=media&token=...
    - gs://<bucket>/<path>
    """
    if '://' not in path_or_url:
        return path_or_url.lstrip('/')

    parsed = urlparse(path_or_url)
    if parsed.scheme == 'gs':
        return unquote(parsed.path.lstrip('/'))

    path = parsed.path
    marker = f"/b/{bucket_name}/o/"
    if marker in path:
        return unquote(path.split(marker, 1)[1])

    prefix = f"/{bucket_name}/"
    if path.startswith(prefix):
        return unquote(path[len(prefix):])

    raise ValueError(f"버킷 '{bucket_name}'의 URL이 아닙니다: {path_or_url}")


def owned_storage_path(blobs: BlobStore, path_or_url: str, prefix: str) -> Optional[str]:
    """
    URL이 이 버킷의 prefix 아래 파일을 가리키면 그 경로를, 아니면 None을 반환합니다.
    다른 사용자의 파일을 삭제하거나 연결하지 못하도록 클라이언트가 보낸 URL에 사용합니다.
    """
    try:
        path = blobs.path_from_url(path_or_url)
    except ValueError:
        return None
    if not path.startswith(prefix) or '..' in path.split('/'):
        return None
    return path


def build_backend(app: Flask) -> BackendClient:
    """설정(BACKEND)에 따라 Firebase 또는 인메모리 백엔드를 생성합니다."""
    backend_name = app.config.get('BACKEND', 'firebase')

    if backend_name == 'memory':
        from animal_records.services.memory_backend import create_memory_backend
        backend = create_memory_backend(app.config.get('FIREBASE_STORAGE_BUCKET') or 'local-bucket')
    elif backend_name == 'firebase':
        from animal_records.services.firestore_service import FirestoreDocumentStore
        from animal_records.services.storage_service import StorageService
        from animal_records.services.identity_service import FirebaseIdentityProvider

        storage_service = StorageService()
        storage_service.init_app(app)
        backend = BackendClient(
            documents=FirestoreDocumentStore(),
            blobs=storage_service,
            identity=FirebaseIdentityProvider(),
        )
    else:
        raise ValueError(f"지원하지 않는 BACKEND 설정입니다: {backend_name}")

    logging.info(f"Backend client initialized ({backend_name})")
    return backend
