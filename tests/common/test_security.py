# tests/common/test_security.py
"""
Тесты хэширования паролей и JWT.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from src.common.exceptions import InvalidCredentialsError
from src.common.security import (
    PASSWORD_RESET_PURPOSE,
    create_access_token,
    create_reset_token,
    decode_token,
    dummy_hash,
    hash_password,
    verify_password,
)

SECRET = "security-test-secret"


class TestPasswords:
    def test_hash_is_not_plaintext(self) -> None:
        hashed = hash_password("hunter22", rounds=4)
        assert hashed != "hunter22"
        assert hashed.startswith("$2")

    def test_verify_matches(self) -> None:
        hashed = hash_password("hunter22", rounds=4)
        assert verify_password("hunter22", hashed) is True
        assert verify_password("hunter23", hashed) is False

    def test_verify_without_hash_is_false(self) -> None:
        """Неизвестный аккаунт: проверка идёт против фиктивного хэша и не проходит."""
        assert verify_password("carpool-dummy-password", None) is False

    def test_verify_garbage_hash_is_false(self) -> None:
        assert verify_password("hunter22", "not-a-bcrypt-hash") is False

    def test_dummy_hash_uses_requested_cost(self) -> None:
        assert dummy_hash(4).startswith("$2b$04$")
        assert dummy_hash(5).startswith("$2b$05$")
        assert dummy_hash(4) is dummy_hash(4)

    def test_verify_without_hash_checks_dummy_of_same_cost(self) -> None:
        dummy_hash.cache_clear()
        assert verify_password("carpool-dummy-password", None, rounds=4) is False
        assert dummy_hash.cache_info().currsize == 1
        assert dummy_hash(4).startswith("$2b$04$")


class TestAccessToken:
    def test_round_trip(self) -> None:
        token = create_access_token("user-1", "driver", SECRET, expires_minutes=5)
        payload = decode_token(token, SECRET)
        assert payload["sub"] == "user-1"
        assert payload["role"] == "driver"

    def test_wrong_secret(self) -> None:
        token = create_access_token("user-1", "driver", SECRET)
        with pytest.raises(InvalidCredentialsError):
            decode_token(token, "other-secret")

    def test_expired(self) -> None:
        past = datetime.now(timezone.utc) - timedelta(minutes=10)
        token = jwt.encode(
            {"sub": "user-1", "purpose": "access", "iat": past, "exp": past + timedelta(minutes=1)},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(InvalidCredentialsError):
            decode_token(token, SECRET)

    def test_reset_token_is_not_access_token(self) -> None:
        token, _ = create_reset_token("user-1", SECRET)
        with pytest.raises(InvalidCredentialsError):
            decode_token(token, SECRET)

    def test_empty_secret_refused(self) -> None:
        with pytest.raises(RuntimeError):
            create_access_token("user-1", "passenger", "")


class TestResetToken:
    def test_carries_jti(self) -> None:
        token, jti = create_reset_token("user-1", SECRET, expires_seconds=60)
        payload = decode_token(token, SECRET, purpose=PASSWORD_RESET_PURPOSE)
        assert payload["jti"] == jti
        assert payload["sub"] == "user-1"

    def test_unique_jti(self) -> None:
        _, first = create_reset_token("user-1", SECRET)
        _, second = create_reset_token("user-1", SECRET)
        assert first != second
