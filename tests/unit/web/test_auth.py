"""
인증 토큰 테스트
"""

from datetime import timedelta

import jwt
import pytest

from web.auth import ALGORITHM, AuthError, create_access_token, decode_access_token


SECRET = "unit_test_secret_key_0123456789abcdef"


class TestAccessToken:
    """HS256 액세스 토큰"""

    def test_round_trip(self) -> None:
        token = create_access_token(7, SECRET)
        assert decode_access_token(token, SECRET) == 7

    def test_wrong_secret(self) -> None:
        token = create_access_token(7, SECRET)
        with pytest.raises(AuthError):
            decode_access_token(token, "another_secret_key_0123456789abcdef")

    def test_expired(self) -> None:
        token = create_access_token(7, SECRET, expires_in=timedelta(seconds=-1))
        with pytest.raises(AuthError, match="만료"):
            decode_access_token(token, SECRET)

    def test_garbage(self) -> None:
        with pytest.raises(AuthError):
            decode_access_token("not-a-token", SECRET)

    def test_missing_sub(self) -> None:
        token = jwt.encode({"foo": "bar"}, SECRET, algorithm=ALGORITHM)
        with pytest.raises(AuthError):
            decode_access_token(token, SECRET)

    def test_non_numeric_sub(self) -> None:
        token = jwt.encode({"sub": "ana"}, SECRET, algorithm=ALGORITHM)
        with pytest.raises(AuthError):
            decode_access_token(token, SECRET)
