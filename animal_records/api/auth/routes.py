# animal_records/api/auth/routes.py

import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from animal_records.core.security import current_user, issue_access_token, issue_refresh_token
from .schemas import SessionRequestSchema, SessionResponseSchema

auth_bp = Blueprint('auth_bp', __name__)


@auth_bp.route('/session', methods=['POST'])
def create_session():
    """외부 인증 제공자의 ID 토큰을 검증하고 이 서비스의 JWT로 교환합니다."""
    identity = current_app.services['backend'].identity
    try:
        validated_data = SessionRequestSchema().load(request.get_json() or {})
        user = identity.verify_token(validated_data['id_token'])

        response = {
            "access_token": issue_access_token(user),
            "refresh_token": issue_refresh_token(user),
            "user_id": user.uid,
            "display_name": user.display_name,
            "email": user.email,
        }
        logging.info(f"Session issued for user {user.uid}")
        return jsonify(SessionResponseSchema().dump(response)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "INVALID_ID_TOKEN", "message": str(e)}), 401
    except Exception as e:
        logging.error(f"세션 발급 중 예외 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부 오류가 발생했습니다."}), 500


# --- 토큰 재발급 엔드포인트 ---
@auth_bp.route('/token/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh_token():
    """유효한 Refresh Token으로 새로운 Access Token을 발급합니다 (이름/이메일 클레임 유지)."""
    return jsonify(access_token=issue_access_token(current_user())), 200
