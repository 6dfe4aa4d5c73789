# animal_records/api/media/routes.py
import logging
import os
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from animal_records.core.errors import PersistenceError
from animal_records.core.security import current_user
from .schemas import MediaUploadFormSchema, MediaDeleteQuerySchema, MediaResponseSchema

media_bp = Blueprint('media_bp', __name__)


def _progress_logger(file_name: str):
    """업로드 진행률을 25% 단위로 기록하는 콜백을 만듭니다."""
    reported = {'step': 0}

    def on_progress(fraction: float):
        step = int(fraction * 4)
        if step > reported['step']:
            reported['step'] = step
            logging.info(f"Uploading {file_name}: {step * 25}%")
    return on_progress


@media_bp.route('/<string:animal_id>/media', methods=['GET'])
@jwt_required()
def list_media(animal_id: str):
    """[소유자 전용] 갤러리와 건강 기록 첨부 미디어를 모두 조회합니다."""
    media_service = current_app.services['media']
    try:
        items = media_service.list_media(animal_id, get_jwt_identity())
        return jsonify({"media": MediaResponseSchema(many=True).dump([m.to_dict() for m in items])}), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN_OR_NOT_FOUND", "message": str(e)}), 403
    except Exception as e:
        logging.error(f"List media API error (animal_id: {animal_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "미디어 조회 중 오류가 발생했습니다."}), 500


@media_bp.route('/<string:animal_id>/media', methods=['POST'])
@jwt_required()
def upload_media(animal_id: str):
    """[소유자 전용] 미디어 파일을 업로드합니다 (multipart/form-data, 'file' 필드)."""
    media_service = current_app.services['media']
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": {"file": ["업로드할 파일(file)이 필요합니다."]}}), 400

    try:
        form = MediaUploadFormSchema().load(request.form)

        stream = upload.stream
        stream.seek(0, os.SEEK_END)
        size = stream.tell()
        stream.seek(0)

        media = media_service.upload_media(
            animal_id, current_user(), stream,
            original_name=upload.filename,
            mime_type=upload.mimetype,
            size=size,
            caption=form.get('caption'),
            tags=form.get('tags'),
            category=form.get('category'),
            health_update_id=form.get('health_update_id'),
            on_progress=_progress_logger(upload.filename),
        )
        return jsonify(MediaResponseSchema().dump(media.to_dict())), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "INVALID_FILE", "message": str(e)}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN_OR_NOT_FOUND", "message": str(e)}), 403
    except PersistenceError as e:
        return jsonify({"error_code": "UPLOAD_FAILED", "message": str(e)}), 500
    except Exception as e:
        logging.error(f"Media upload API error (animal_id: {animal_id}): {e}", exc_info=True)
        return jsonify({"error_code": "UPLOAD_FAILED", "message": "파일 업로드 중 오류가 발생했습니다."}), 500


@media_bp.route('/<string:animal_id>/media/<string:media_id>', methods=['DELETE'])
@jwt_required()
def delete_media(animal_id: str, media_id: str):
    """[소유자 전용] 미디어 파일과 메타데이터를 삭제합니다. 건강 기록 첨부는 ?health_update_id=로 지정합니다."""
    media_service = current_app.services['media']
    try:
        query = MediaDeleteQuerySchema().load(request.args.to_dict())
        media_service.delete_media(animal_id, media_id, current_user(), query.get('health_update_id'))
        return '', 204
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN_OR_NOT_FOUND", "message": str(e)}), 403
    except PersistenceError as e:
        return jsonify({"error_code": "DELETE_FAILED", "message": str(e)}), 500
    except Exception as e:
        logging.error(f"Delete media API error ({media_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "미디어 삭제 중 오류가 발생했습니다."}), 500
