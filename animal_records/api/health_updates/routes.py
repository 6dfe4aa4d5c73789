# animal_records/api/health_updates/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from animal_records.core.errors import PersistenceError
from animal_records.core.security import current_user
from .schemas import HealthUpdateCreateSchema, HealthUpdateUpdateSchema, HealthUpdateResponseSchema

health_updates_bp = Blueprint('health_updates_bp', __name__)


@health_updates_bp.route('/<string:animal_id>/health-updates', methods=['GET'])
@jwt_required()
def list_health_updates(animal_id: str):
    """[소유자 전용] 건강 기록 목록을 조회합니다."""
    service = current_app.services['health_updates']
    try:
        updates = service.list_health_updates(animal_id, get_jwt_identity())
        payload = [service.health_update_to_dict(u) for u in updates]
        return jsonify({"health_updates": HealthUpdateResponseSchema(many=True).dump(payload)}), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN_OR_NOT_FOUND", "message": str(e)}), 403
    except Exception as e:
        logging.error(f"List health updates API error (animal_id: {animal_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "건강 기록 조회 중 오류가 발생했습니다."}), 500


@health_updates_bp.route('/<string:animal_id>/health-updates', methods=['POST'])
@jwt_required()
def create_health_update(animal_id: str):
    """[소유자 전용] 건강 기록을 추가합니다."""
    service = current_app.services['health_updates']
    try:
        validated_data = HealthUpdateCreateSchema().load(request.get_json() or {})
        update = service.create_health_update(animal_id, current_user(), validated_data)
        return jsonify(HealthUpdateResponseSchema().dump(service.health_update_to_dict(update))), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "INVALID_MEDIA", "message": str(e)}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN_OR_NOT_FOUND", "message": str(e)}), 403
    except PersistenceError as e:
        return jsonify({"error_code": "HEALTH_UPDATE_CREATE_FAILED", "message": str(e)}), 500
    except Exception as e:
        logging.error(f"Create health update API error (animal_id: {animal_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "건강 기록 저장 중 오류가 발생했습니다."}), 500


@health_updates_bp.route('/<string:animal_id>/health-updates/<string:health_update_id>', methods=['PATCH'])
@jwt_required()
def update_health_update(animal_id: str, health_update_id: str):
    """[소유자 전용] 건강 기록을 부분 업데이트합니다."""
    service = current_app.services['health_updates']
    try:
        patch = HealthUpdateUpdateSchema().load(request.get_json() or {})
        update = service.update_health_update(animal_id, health_update_id, current_user(), patch)
        return jsonify(HealthUpdateResponseSchema().dump(service.health_update_to_dict(update))), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN_OR_NOT_FOUND", "message": str(e)}), 403
    except PersistenceError as e:
        return jsonify({"error_code": "UPDATE_FAILED", "message": str(e)}), 500
    except Exception as e:
        logging.error(f"Update health update API error ({health_update_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "건강 기록 수정 중 오류가 발생했습니다."}), 500


@health_updates_bp.route('/<string:animal_id>/health-updates/<string:health_update_id>', methods=['DELETE'])
@jwt_required()
def delete_health_update(animal_id: str, health_update_id: str):
    """[소유자 전용] 건강 기록을 삭제합니다."""
    service = current_app.services['health_updates']
    try:
        service.delete_health_update(animal_id, health_update_id, current_user())
        return '', 204
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN_OR_NOT_FOUND", "message": str(e)}), 403
    except PersistenceError as e:
        return jsonify({"error_code": "DELETE_FAILED", "message": str(e)}), 500
    except Exception as e:
        logging.error(f"Delete health update API error ({health_update_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "건강 기록 삭제 중 오류가 발생했습니다."}), 500
