# animal_records/models/user.py
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CurrentUser:
    """
    외부 인증 제공자가 발급한 사용자 식별 정보.
    이 서비스는 읽기만 하며 세션을 관리하지 않습니다.
    """
    uid: str
    display_name: Optional[str] = None
    email: Optional[str] = None
