# animal_records/services/identity_service.py
import logging

from firebase_admin import auth as firebase_auth

from animal_records.models.user import CurrentUser


class FirebaseIdentityProvider:
    """Firebase Auth가 발급한 ID 토큰을 검증해 사용자 식별 정보를 돌려줍니다."""

    def verify_token(self, token: str) -> CurrentUser:
        try:
            decoded = firebase_auth.verify_id_token(token)
        except (firebase_auth.InvalidIdTokenError, ValueError) as e:
            logging.warning(f"ID 토큰 검증 실패: {e}")
            raise PermissionError("유효하지 않거나 만료된 인증 토큰입니다.")

        return CurrentUser(
            uid=decoded['uid'],
            display_name=decoded.get('name'),
            email=decoded.get('email'),
        )
