# animal_records/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from flask import Flask, jsonify
from marshmallow import ValidationError
from flask_jwt_extended import JWTManager
from werkzeug.exceptions import HTTPException
import firebase_admin
from firebase_admin import credentials

# - 설정
from animal_records.core.config import config_by_name

# - API 블루프린트
from animal_records.api.auth.routes import auth_bp
from animal_records.api.animals.routes import animals_bp
from animal_records.api.health_updates.routes import health_updates_bp
from animal_records.api.media.routes import media_bp
from animal_records.api.audit_logs.routes import audit_logs_bp
from animal_records.api.search.routes import search_bp

# - 저장소 및 서비스 모듈
from animal_records.services.backend import BackendClient, build_backend
from animal_records.repositories import (
    AnimalRepository,
    AuditLogRepository,
    HealthUpdateRepository,
    AnimalMediaRepository,
)
from animal_records.audit.trail import AuditTrail
from animal_records.search.loader import RecordLoader
from animal_records.api.animals.services import AnimalService
from animal_records.api.health_updates.services import HealthUpdateService
from animal_records.api.media.services import MediaService
from animal_records.api.audit_logs.services import ActivityService
from animal_records.api.search.services import SearchService


def _init_firebase(app: Flask):
    if firebase_admin._apps:
        return
    cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
    if not cred_path or not os.path.exists(cred_path):
        raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
    cred = credentials.Certificate(cred_path)
    firebase_admin.initialize_app(cred, {
        'storageBucket': app.config['FIREBASE_STORAGE_BUCKET']
    })


def create_app(config_name: str = None, backend: BackendClient = None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' / 'testing' / 'production'. 생략하면 FLASK_ENV 사용
    :param backend: 이미 만들어진 백엔드 클라이언트 (테스트에서 인메모리 백엔드를 주입할 때 사용)
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    JWTManager(app)

    if backend is None:
        if app.config.get('BACKEND') == 'firebase':
            _init_firebase(app)
        backend = build_backend(app)

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}
    app.services['backend'] = backend

    # 5-1. 백엔드 클라이언트를 공유하는 저장소 계층
    animal_repository = AnimalRepository(backend)
    health_update_repository = HealthUpdateRepository(backend)
    media_repository = AnimalMediaRepository(backend)
    audit_log_repository = AuditLogRepository(backend)
    audit_trail = AuditTrail(audit_log_repository)

    # 5-2. 다른 서비스를 주입받아야 하는 도메인 서비스 생성
    app.services['animals'] = AnimalService(animal_repository, backend.blobs, audit_trail)
    app.services['health_updates'] = HealthUpdateService(
        animal_service=app.services['animals'],
        health_update_repository=health_update_repository,
        blob_store=backend.blobs,
        audit_trail=audit_trail,
    )
    app.services['media'] = MediaService(
        animal_service=app.services['animals'],
        health_update_service=app.services['health_updates'],
        media_repository=media_repository,
        blob_store=backend.blobs,
        audit_trail=audit_trail,
        max_file_size=app.config['MAX_MEDIA_SIZE'],
    )
    app.services['activity'] = ActivityService(
        animal_service=app.services['animals'],
        health_update_service=app.services['health_updates'],
        audit_log_repository=audit_log_repository,
    )
    app.services['search'] = SearchService(
        animal_service=app.services['animals'],
        record_loader=RecordLoader(
            animal_repository, health_update_repository, media_repository, audit_log_repository,
            max_workers=app.config['RECORD_FETCH_WORKERS'],
        ),
    )
    logging.info("Domain services initialized successfully")

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(animals_bp, url_prefix='/api/animals')

    # - 반려동물 하위 리소스 (/api/animals/<animal_id>/...)
    app.register_blueprint(health_updates_bp, url_prefix='/api/animals')
    app.register_blueprint(media_bp, url_prefix='/api/animals')
    app.register_blueprint(audit_logs_bp, url_prefix='/api/animals')

    # - 통합 검색 (/api/search, /api/animals/<animal_id>/search)
    app.register_blueprint(search_bp, url_prefix='/api')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 404, 405, 413 등 HTTP 예외는 원래 상태 코드를 유지합니다.
        if isinstance(err, HTTPException):
            return jsonify({"error_code": err.name.upper().replace(' ', '_'), "message": err.description}), err.code
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
