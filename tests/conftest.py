# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import json
import os
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("DB_PASSWORD", "test_password")
os.environ.setdefault("REDIS_PASSWORD", "")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")

from src.config.loader import (  # noqa: E402
    EarningsSettings,
    FareSettings,
    RedisTTLSettings,
    SecuritySettings,
    Settings,
)


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Путь к файлу конфигурации."""
    return project_root / "config" / "config.json"


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Мок конфигурации для тестов."""
    return {
        "PROJECT_NAME": "carpool_test",
        "VERSION": "1.0.0-test",
        "DEBUG": True,
        "LOG_LEVEL": "DEBUG",
        "ENVIRONMENT": "test",
        "API_HOST": "127.0.0.1",
        "API_PORT": 3100,
        "CORS_ORIGINS": ["http://localhost:5173"],
        "LOG_TO_FILE": False,
        "LOG_FILE_PATH": "logs/test.log",
        "LOG_FORMAT": "json",
        "DB_HOST": "localhost",
        "DB_PORT": 5432,
        "DB_NAME": "carpool_test",
        "DB_USER": "postgres",
        "DB_PASSWORD": "test_password",
        "DB_MIN_POOL_SIZE": 2,
        "DB_MAX_POOL_SIZE": 5,
        "REDIS_HOST": "localhost",
        "REDIS_PORT": 6379,
        "REDIS_DB": 1,
        "REDIS_NAMESPACE": "carpool_test",
        "PASSWORD_RESET_TTL": 600,
        "JWT_SECRET": "",
        "JWT_ALGORITHM": "HS256",
        "JWT_EXPIRATION_MINUTES": 30,
        "BCRYPT_ROUNDS": 4,
        "PASSWORD_RESET_URL": "https://carpool.test/resetpassword",
        "FARE_SURGE_MAX": 2.5,
        "FARE_TOLERANCE": 0.01,
        "CURRENCY": "EUR",
        "PLATFORM_COMMISSION_PERCENT": 20.0,
    }


@pytest.fixture
def temp_config_file(tmp_path: Path, mock_config: dict[str, Any]) -> Path:
    """Создаёт временный файл конфигурации."""
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(mock_config, ensure_ascii=False, indent=2))
    return config_file


@pytest.fixture
def settings() -> Settings:
    """Настройки с быстрым bcrypt и известным секретом JWT."""
    return Settings(
        security=SecuritySettings(
            JWT_SECRET="unit-test-secret",
            JWT_EXPIRATION_MINUTES=30,
            BCRYPT_ROUNDS=4,
            PASSWORD_RESET_URL="https://carpool.test/resetpassword",
        ),
        redis_ttl=RedisTTLSettings(PASSWORD_RESET_TTL=600),
        fares=FareSettings(FARE_SURGE_MAX=3.0, FARE_TOLERANCE=0.01, CURRENCY="USD"),
        earnings=EarningsSettings(PLATFORM_COMMISSION_PERCENT=15.0),
    )


# =============================================================================
# ФИКСТУРЫ ИНФРАСТРУКТУРЫ (МОКИ)
# =============================================================================

@pytest.fixture
def mock_conn() -> AsyncMock:
    """Мок соединения asyncpg."""
    conn = AsyncMock()
    conn.fetchrow = AsyncMock(return_value=None)
    conn.fetch = AsyncMock(return_value=[])
    conn.execute = AsyncMock(return_value="UPDATE 1")
    conn.fetchval = AsyncMock(return_value=None)
    return conn


@pytest.fixture
def mock_db(mock_conn: AsyncMock) -> MagicMock:
    """Мок DatabaseManager: acquire() и transaction() отдают mock_conn."""
    @asynccontextmanager
    async def _connection():
        yield mock_conn

    db = MagicMock()
    db.acquire = _connection
    db.transaction = _connection
    return db


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Мок клиента Redis."""
    redis = AsyncMock()
    redis.set = AsyncMock(return_value=True)
    redis.store_reset_token = AsyncMock(return_value=True)
    redis.consume_reset_token = AsyncMock(return_value=None)
    return redis


# =============================================================================
# ФИКСТУРЫ ДАННЫХ
# =============================================================================

@pytest.fixture
def user_row() -> Callable[..., dict[str, Any]]:
    """Фабрика строки таблицы users."""
    def _make(**overrides: Any) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        row = {
            "id": uuid4(),
            "name": "Test Passenger",
            "email": "passenger@example.com",
            "phone_number": "4915112345678",
            "password_hash": None,
            "role": "passenger",
            "license_number": None,
            "driver_status": None,
            "vehicle_id": None,
            "vehicle_make": None,
            "vehicle_model": None,
            "vehicle_year": None,
            "vehicle_color": None,
            "vehicle_plate": None,
            "created_at": now,
            "updated_at": now,
        }
        row.update(overrides)
        return row
    return _make


@pytest.fixture
def driver_row(user_row: Callable[..., dict[str, Any]]) -> Callable[..., dict[str, Any]]:
    """Фабрика строки водителя."""
    def _make(**overrides: Any) -> dict[str, Any]:
        data = {
            "name": "Test Driver",
            "email": "driver@example.com",
            "role": "driver",
            "license_number": "DL-12345",
            "driver_status": "approved",
            "vehicle_id": uuid4(),
        }
        data.update(overrides)
        return user_row(**data)
    return _make


@pytest.fixture
def ride_row() -> Callable[..., dict[str, Any]]:
    """Фабрика строки поездки (как её возвращает RideRepository.get_ride)."""
    def _make(**overrides: Any) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        row = {
            "id": uuid4(),
            "driver_id": None,
            "passenger_id": None,
            "vehicle_id": None,
            "driver_name": None,
            "driver_email": None,
            "driver_phone": None,
            "passenger_name": None,
            "passenger_email": None,
            "passenger_phone": None,
            "pickup_address": "Hauptbahnhof, Hamburg",
            "pickup_lat": 53.5530,
            "pickup_lon": 10.0067,
            "dropoff_address": "Flughafen, Hamburg",
            "dropoff_lat": 53.6304,
            "dropoff_lon": 9.9882,
            "departure_time": now + timedelta(hours=2),
            "total_seats": 3,
            "available_seats": 3,
            "estimated_distance": 12.4,
            "estimated_duration": 25.0,
            "actual_distance": None,
            "actual_duration": None,
            "fare_base": Decimal("10.00"),
            "fare_distance": Decimal("5.00"),
            "fare_time": Decimal("2.50"),
            "fare_surge": Decimal("1.20"),
            "fare_total": Decimal("21.00"),
            "status": "pending",
            "payment_method": "cash",
            "payment_status": "pending",
            "payment_transaction_id": None,
            "notes": None,
            "created_at": now,
            "updated_at": now,
        }
        row.update(overrides)
        return row
    return _make


@pytest.fixture
def new_id() -> Callable[[], UUID]:
    return uuid4
