# animal_records/api/audit_logs/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from animal_records.api.health_updates.schemas import HealthUpdateResponseSchema

from .schemas import (
    AuditLogResponseSchema,
    TimelineQuerySchema,
    TimelineEntrySchema,
    WeightQuerySchema,
    WeightPointSchema,
)

audit_logs_bp = Blueprint('audit_logs_bp', __name__)


def _timeline_item_to_dict(entry) -> dict:
    if entry.type == 'audit_log':
        item = AuditLogResponseSchema().dump(entry.item.to_dict())
    else:
        service = current_app.services['health_updates']
        item = HealthUpdateResponseSchema().dump(service.health_update_to_dict(entry.item))
    return {"id": entry.id, "type": entry.type, "date": entry.date, "item": item}


@audit_logs_bp.route('/<string:animal_id>/audit-logs', methods=['GET'])
@jwt_required()
def list_audit_logs(animal_id: str):
    """[소유자 전용] 변경 이력을 최신순으로 조회합니다."""
    activity_service = current_app.services['activity']
    try:
        logs = activity_service.list_audit_logs(animal_id, get_jwt_identity())
        payload = [log.to_dict() for log in logs]
        return jsonify({"audit_logs": AuditLogResponseSchema(many=True).dump(payload)}), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN_OR_NOT_FOUND", "message": str(e)}), 403
    except Exception as e:
        logging.error(f"List audit logs API error (animal_id: {animal_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "변경 이력 조회 중 오류가 발생했습니다."}), 500


@audit_logs_bp.route('/<string:animal_id>/timeline', methods=['GET'])
@jwt_required()
def get_timeline(animal_id: str):
    """[소유자 전용] 건강 기록과 변경 이력을 합친 활동 타임라인 (최신순)."""
    activity_service = current_app.services['activity']
    try:
        query = TimelineQuerySchema().load(request.args.to_dict())
        entries = activity_service.timeline(animal_id, get_jwt_identity(), query['filter'])
        payload = [_timeline_item_to_dict(entry) for entry in entries]
        return jsonify({"timeline": TimelineEntrySchema(many=True).dump(payload)}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN_OR_NOT_FOUND", "message": str(e)}), 403
    except Exception as e:
        logging.error(f"Timeline API error (animal_id: {animal_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "타임라인 조회 중 오류가 발생했습니다."}), 500


@audit_logs_bp.route('/<string:animal_id>/weights', methods=['GET'])
@jwt_required()
def get_weights(animal_id: str):
    """[소유자 전용] 건강 기록에서 추출한 체중 추이 (날짜 오름차순)."""
    activity_service = current_app.services['activity']
    try:
        query = WeightQuerySchema().load(request.args.to_dict())
        result = activity_service.weights(animal_id, get_jwt_identity(), query.get('unit'), query['range'])
        points = [
            {"date": p.date, "weight": p.weight, "unit": p.unit.value,
             "health_update_id": p.health_update_id, "notes": p.notes}
            for p in result['points']
        ]
        return jsonify({"points": WeightPointSchema(many=True).dump(points), "summary": result['summary']}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN_OR_NOT_FOUND", "message": str(e)}), 403
    except Exception as e:
        logging.error(f"Weights API error (animal_id: {animal_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "체중 기록 조회 중 오류가 발생했습니다."}), 500
