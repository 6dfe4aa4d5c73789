# animal_records/api/animals/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from animal_records.core.errors import PersistenceError
from animal_records.core.security import current_user
from .schemas import AnimalCreateSchema, AnimalUpdateSchema, AnimalResponseSchema

animals_bp = Blueprint('animals_bp', __name__)


@animals_bp.route('/', methods=['GET'])
@jwt_required()
def list_animals():
    """로그인한 사용자의 반려동물 목록을 조회합니다."""
    animal_service = current_app.services['animals']
    try:
        animals = animal_service.list_animals(get_jwt_identity())
        payload = [animal_service.animal_to_dict(a) for a in animals]
        return jsonify({"animals": AnimalResponseSchema(many=True).dump(payload)}), 200
    except PersistenceError as e:
        logging.error(f"List animals API error: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": str(e)}), 500


@animals_bp.route('/', methods=['POST'])
@jwt_required()
def create_animal():
    """반려동물 등록 API."""
    animal_service = current_app.services['animals']
    try:
        validated_data = AnimalCreateSchema().load(request.get_json() or {})
        animal = animal_service.create_animal(current_user(), validated_data)
        return jsonify(AnimalResponseSchema().dump(animal_service.animal_to_dict(animal))), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "INVALID_PROFILE_PICTURE", "message": str(e)}), 400
    except PersistenceError as e:
        return jsonify({"error_code": "ANIMAL_CREATE_FAILED", "message": str(e)}), 500
    except Exception as e:
        logging.error(f"Animal registration API error: {e}", exc_info=True)
        return jsonify({"error_code": "ANIMAL_CREATE_FAILED", "message": "반려동물 등록 중 오류가 발생했습니다."}), 500


@animals_bp.route('/<string:animal_id>', methods=['GET'])
@jwt_required()
def get_animal(animal_id: str):
    """[소유자 전용] 반려동물 프로필을 조회합니다."""
    animal_service = current_app.services['animals']
    try:
        animal = animal_service.get_owned_animal(animal_id, get_jwt_identity())
        return jsonify(AnimalResponseSchema().dump(animal_service.animal_to_dict(animal))), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN_OR_NOT_FOUND", "message": str(e)}), 403
    except Exception as e:
        logging.error(f"Get animal API error (animal_id: {animal_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "프로필 조회 중 오류가 발생했습니다."}), 500


@animals_bp.route('/<string:animal_id>', methods=['PATCH'])
@jwt_required()
def update_animal(animal_id: str):
    """[소유자 전용] 반려동물 프로필을 부분 업데이트합니다."""
    animal_service = current_app.services['animals']
    try:
        patch = AnimalUpdateSchema().load(request.get_json() or {})
        animal = animal_service.update_animal(animal_id, current_user(), patch)
        return jsonify(AnimalResponseSchema().dump(animal_service.animal_to_dict(animal))), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "INVALID_PROFILE_PICTURE", "message": str(e)}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN_OR_NOT_FOUND", "message": str(e)}), 403
    except PersistenceError as e:
        return jsonify({"error_code": "UPDATE_FAILED", "message": str(e)}), 500
    except Exception as e:
        logging.error(f"Update animal API error (animal_id: {animal_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "프로필 수정 중 오류가 발생했습니다."}), 500


@animals_bp.route('/<string:animal_id>', methods=['DELETE'])
@jwt_required()
def delete_animal(animal_id: str):
    """[소유자 전용] 반려동물을 삭제합니다. 하위 기록은 함께 삭제되지 않습니다."""
    animal_service = current_app.services['animals']
    try:
        animal_service.delete_animal(animal_id, current_user())
        return '', 204
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN_OR_NOT_FOUND", "message": str(e)}), 403
    except PersistenceError as e:
        return jsonify({"error_code": "DELETE_FAILED", "message": str(e)}), 500
    except Exception as e:
        logging.error(f"Delete animal API error (animal_id: {animal_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "삭제 중 오류가 발생했습니다."}), 500
