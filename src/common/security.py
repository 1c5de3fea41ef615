# src/common/security.py
"""
Хэширование паролей (bcrypt) и выпуск/проверка токенов (JWT).
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

import bcrypt
import jwt

from src.common.exceptions import InvalidCredentialsError

ACCESS_TOKEN_PURPOSE = "access"
PASSWORD_RESET_PURPOSE = "password_reset"


def hash_password(password: str, rounds: int = 10) -> str:
    """Возвращает bcrypt-хэш пароля."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


@lru_cache(maxsize=None)
def dummy_hash(rounds: int = 10) -> str:
    """Фиктивный хэш той же стоимости, что и настоящие: выравнивает время проверки."""
    return hash_password("carpool-dummy-password", rounds=rounds)


def verify_password(password: str, password_hash: str | None, rounds: int = 10) -> bool:
    """
    Сверяет пароль с хэшем.
    Если хэша нет, проверка всё равно выполняется против фиктивного хэша
    стоимости rounds (должна совпадать с BCRYPT_ROUNDS).
    """
    candidate = password_hash or dummy_hash(rounds)
    try:
        matched = bcrypt.checkpw(password.encode("utf-8"), candidate.encode("utf-8"))
    except ValueError:
        return False
    return matched and password_hash is not None


def _encode(payload: dict[str, Any], secret: str, algorithm: str) -> str:
    if not secret:
        raise RuntimeError("JWT_SECRET не задан")
    return jwt.encode(payload, secret, algorithm=algorithm)


def create_access_token(
    user_id: str,
    role: str,
    secret: str,
    algorithm: str = "HS256",
    expires_minutes: int = 1440,
) -> str:
    """Выпускает токен доступа."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "role": role,
        "purpose": ACCESS_TOKEN_PURPOSE,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    return _encode(payload, secret, algorithm)


def create_reset_token(
    user_id: str,
    secret: str,
    algorithm: str = "HS256",
    expires_seconds: int = 3600,
) -> tuple[str, str]:
    """
    Выпускает одноразовый токен сброса пароля.

    Returns:
        (token, jti)
    """
    now = datetime.now(timezone.utc)
    jti = uuid.uuid4().hex
    payload = {
        "sub": str(user_id),
        "purpose": PASSWORD_RESET_PURPOSE,
        "jti": jti,
        "iat": now,
        "exp": now + timedelta(seconds=expires_seconds),
    }
    return _encode(payload, secret, algorithm), jti


def decode_token(
    token: str,
    secret: str,
    algorithm: str = "HS256",
    purpose: str = ACCESS_TOKEN_PURPOSE,
) -> dict[str, Any]:
    """
    Проверяет подпись, срок действия и назначение токена.

    Raises:
        InvalidCredentialsError: токен недействителен
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.PyJWTError as e:
        raise InvalidCredentialsError("Invalid or expired token") from e

    if payload.get("purpose") != purpose or not payload.get("sub"):
        raise InvalidCredentialsError("Invalid or expired token")
    return payload
