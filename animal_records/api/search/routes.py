# animal_records/api/search/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from animal_records.api.animals.schemas import AnimalResponseSchema
from animal_records.api.animals.services import AnimalService
from animal_records.api.audit_logs.schemas import AuditLogResponseSchema
from animal_records.api.health_updates.schemas import HealthUpdateResponseSchema
from animal_records.api.health_updates.services import HealthUpdateService
from animal_records.api.media.schemas import MediaResponseSchema
from .schemas import SearchQuerySchema, SearchResultSchema

search_bp = Blueprint('search_bp', __name__)


def _source_to_dict(result) -> dict:
    """결과 종류별 응답 스키마로 원본 엔티티를 직렬화합니다."""
    if result.type == 'animal':
        return AnimalResponseSchema().dump(AnimalService.animal_to_dict(result.source))
    if result.type == 'health_update':
        return HealthUpdateResponseSchema().dump(HealthUpdateService.health_update_to_dict(result.source))
    if result.type == 'media':
        return MediaResponseSchema().dump(result.source.to_dict())
    return AuditLogResponseSchema().dump(result.source.to_dict())


def _dump_results(results) -> list:
    payload = [
        {
            "id": r.id, "type": r.type, "title": r.title, "description": r.description,
            "date": r.date, "relevance": r.relevance, "matched_fields": r.matched_fields,
            "animal_id": r.animal_id, "animal_name": r.animal_name,
            "source": _source_to_dict(r),
        }
        for r in results
    ]
    return SearchResultSchema(many=True).dump(payload)


@search_bp.route('/search', methods=['GET'])
@jwt_required()
def search_dashboard():
    """로그인한 사용자의 모든 반려동물 기록을 통합 검색합니다."""
    search_service = current_app.services['search']
    try:
        query = SearchQuerySchema().load(request.args)
        results = search_service.search_dashboard(
            get_jwt_identity(), query['q'], query.get('types'), query.get('start_date'), query.get('end_date'),
        )
        return jsonify({"query": query['q'], "results": _dump_results(results)}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Dashboard search API error: {e}", exc_info=True)
        return jsonify({"error_code": "SEARCH_FAILED", "message": "검색 중 오류가 발생했습니다."}), 500


@search_bp.route('/animals/<string:animal_id>/search', methods=['GET'])
@jwt_required()
def search_animal(animal_id: str):
    """[소유자 전용] 한 마리의 프로필, 건강 기록, 미디어, 변경 이력을 통합 검색합니다."""
    search_service = current_app.services['search']
    try:
        query = SearchQuerySchema().load(request.args)
        results = search_service.search_animal(
            animal_id, get_jwt_identity(), query['q'], query.get('types'),
            query.get('start_date'), query.get('end_date'),
        )
        return jsonify({"query": query['q'], "results": _dump_results(results)}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN_OR_NOT_FOUND", "message": str(e)}), 403
    except Exception as e:
        logging.error(f"Animal search API error (animal_id: {animal_id}): {e}", exc_info=True)
        return jsonify({"error_code": "SEARCH_FAILED", "message": "검색 중 오류가 발생했습니다."}), 500
