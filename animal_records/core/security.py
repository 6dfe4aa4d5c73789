# animal_records/core/security.py
from typing import Any, Dict

from flask_jwt_extended import create_access_token, create_refresh_token, get_jwt, get_jwt_identity

from animal_records.models.user import CurrentUser


def _identity_claims(user: CurrentUser) -> Dict[str, Any]:
    claims = {}
    if user.display_name:
        claims['name'] = user.display_name
    if user.email:
        claims['email'] = user.email
    return claims


def issue_access_token(user: CurrentUser) -> str:
    """식별 정보를 JWT로 발급합니다. identity는 uid, 표시 이름/이메일은 추가 클레임으로 담습니다."""
    return create_access_token(identity=user.uid, additional_claims=_identity_claims(user))


def issue_refresh_token(user: CurrentUser) -> str:
    return create_refresh_token(identity=user.uid, additional_claims=_identity_claims(user))


def current_user() -> CurrentUser:
    """
    @jwt_required()로 검증된 요청에서 현재 사용자 정보를 복원합니다.
    반드시 jwt_required 데코레이터가 적용된 뷰 안에서 호출해야 합니다.
    """
    claims = get_jwt()
    return CurrentUser(
        uid=get_jwt_identity(),
        display_name=claims.get('name'),
        email=claims.get('email'),
    )
