# animal_records/services/storage_service.py
import logging
from typing import BinaryIO, Optional

from flask import Flask
from firebase_admin import storage

from animal_records.services.backend import ProgressCallback, storage_path_from_url

# 재개 가능(resumable) 업로드의 청크 크기. 256KB의 배수여야 합니다.
UPLOAD_CHUNK_SIZE = 256 * 1024 * 4


class ProgressReader:
    """
    파일 객체를 감싸서 읽힌 바이트 수만큼 진행률 콜백을 호출합니다.
    업로드 라이브러리가 청크 단위로 read()를 호출할 때마다 전송 비율이 갱신됩니다.
    """

    def __init__(self, stream: BinaryIO, size: int, on_progress: Optional[ProgressCallback] = None):
        self._stream = stream
        self._size = size
        self._on_progress = on_progress
        self._sent = 0

    def read(self, size: int = -1) -> bytes:
        chunk = self._stream.read(size)
        if chunk:
            self._sent += len(chunk)
            if self._on_progress and self._size:
                self._on_progress(min(1.0, self._sent / self._size))
        return chunk

    def tell(self) -> int:
        return self._stream.tell()

    def seek(self, offset: int, whence: int = 0) -> int:
        position = self._stream.seek(offset, whence)
        self._sent = self._stream.tell()
        return position


class StorageService:
    """
    Firebase Storage 관련 로직을 담당하는 서비스 클래스입니다.
    경로 기반 업로드(진행률 콜백 포함), 장기 조회 URL 발급, 경로/URL 기반 삭제를 제공합니다.
    """

    def __init__(self):
        """
        클래스 인스턴스 생성 시 버킷을 None으로 초기화합니다.
        실제 버킷 객체는 init_app 메서드를 통해 주입됩니다.
        """
        self.bucket = None
        self.bucket_name = None

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 Storage 버킷을 설정합니다.

        :param app: Flask 애플리케이션 객체
        """
        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET 설정이 .env 또는 설정 파일에 필요합니다.")

        self.bucket = storage.bucket(bucket_name)
        self.bucket_name = bucket_name
        logging.info("StorageService: Firebase Storage 서비스가 성공적으로 초기화되었습니다.")

    def _require_bucket(self):
        if not self.bucket:
            raise RuntimeError("StorageService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")

    def upload(self, path: str, stream: BinaryIO, size: int, content_type: str,
               on_progress: Optional[ProgressCallback] = None) -> str:
        """
        파일을 지정된 경로에 업로드하고 공개 URL을 반환합니다.

        :param path: 버킷 내부 저장 경로
        :param stream: 업로드할 파일 스트림
        :param size: 파일 크기 (바이트)
        :param content_type: MIME 타입 (예: "image/jpeg")
        :param on_progress: 전송 비율(0.0~1.0)을 받는 콜백
        :return: 장기적으로 접근 가능한 공개 URL
        """
        self._require_bucket()
        blob = self.bucket.blob(path)
        blob.chunk_size = UPLOAD_CHUNK_SIZE

        reader = ProgressReader(stream, size, on_progress)
        blob.upload_from_file(reader, size=size, content_type=content_type)

        try:
            blob.make_public()
            return blob.public_url
        except Exception as e:
            logging.error(f"파일 공개 전환 실패 ({path}): {e}", exc_info=True)
            raise

    def delete(self, path_or_url: str) -> None:
        """경로 또는 URL로 지정된 파일을 삭제합니다. 파일이 없으면 FileNotFoundError."""
        self._require_bucket()
        path = self.path_from_url(path_or_url)
        blob = self.bucket.blob(path)

        if not blob.exists():
            raise FileNotFoundError(f"파일을 찾을 수 없습니다: {path}")
        blob.delete()
        logging.info(f"Storage 파일 삭제 완료: {path}")

    def path_from_url(self, path_or_url: str) -> str:
        return storage_path_from_url(path_or_url, self.bucket_name)

    def public_url(self, path: str) -> str:
        self._require_bucket()
        return self.bucket.blob(path).public_url
