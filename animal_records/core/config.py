# animal_records/core/config.py

import os # 'os' 모듈: 환경 변수를 읽기 위해 사용합니다.


class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # JWT 토큰 서명에 사용하는 비밀 키입니다. .env 파일에 정의된 값을 읽어옵니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    # Firebase Storage 버킷 이름 (예: my-project.appspot.com)
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET')
    # 백엔드 구현 선택: 'firebase' (실서비스) 또는 'memory' (로컬 개발/테스트)
    BACKEND = os.getenv('BACKEND', 'firebase')
    # 업로드 허용 최대 파일 크기 (바이트). 기본 50MB.
    MAX_MEDIA_SIZE = int(os.getenv('MAX_MEDIA_SIZE', 50 * 1024 * 1024))
    # Flask가 요청 본문 크기를 제한하도록 약간의 여유를 둡니다.
    MAX_CONTENT_LENGTH = MAX_MEDIA_SIZE + 1024 * 1024
    # 레코드 병렬 조회에 사용할 스레드 수
    RECORD_FETCH_WORKERS = int(os.getenv('RECORD_FETCH_WORKERS', 4))


class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True
    # 개발용 Firebase 프로젝트에 연결하기 위한 서비스 계정 키 파일 경로
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH')


class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다. 외부 서비스 대신 인메모리 백엔드를 사용합니다."""
    TESTING = True
    DEBUG = False
    BACKEND = 'memory'
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'testing-secret-key-with-enough-length-for-hs256')
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET', 'test-bucket')
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    MAX_MEDIA_SIZE = 1024 * 1024
    MAX_CONTENT_LENGTH = MAX_MEDIA_SIZE * 2


class ProductionConfig(Config):
    """운영 환경 설정 클래스입니다."""
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')


# config_by_name: FLASK_ENV 값과 설정 클래스를 매핑합니다. create_app에서 사용됩니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig,
)
