"""
인증 토큰

HS256 JWT. sub = 사용자 ID (문자열), exp = 만료 시각.
서명 키는 secrets.yaml의 web.secret_key.
"""

from datetime import timedelta
from typing import Any

import jwt

from core.utils.timezone import now_utc

ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = timedelta(days=7)


class AuthError(Exception):
    """토큰 검증 실패"""

    pass


def create_access_token(
    user_id: int,
    secret_key: str,
    expires_in: timedelta = DEFAULT_TOKEN_TTL,
) -> str:
    """사용자 ID로 액세스 토큰 생성"""
    issued_at = now_utc()
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + expires_in,
    }
    return jwt.encode(payload, secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str, secret_key: str) -> int:
    """토큰 검증 후 사용자 ID 반환

    Raises:
        AuthError: 서명 불일치, 만료, sub 누락/형식 오류
    """
    try:
        payload = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise AuthError("토큰이 만료되었습니다") from e
    except jwt.InvalidTokenError as e:
        raise AuthError(f"유효하지 않은 토큰: {e}") from e

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise AuthError("토큰에 사용자 정보가 없습니다") from e
