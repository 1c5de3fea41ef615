# tests/config/test_loader.py
"""
Тесты для модуля загрузки конфигурации.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from src.config.loader import (
    DatabaseSettings,
    RedisSettings,
    SecuritySettings,
    Settings,
    get_config_path,
    get_project_root,
    load_config_json,
)


class TestGetProjectRoot:
    """Тесты для функции get_project_root."""

    def test_returns_path_object(self) -> None:
        assert isinstance(get_project_root(), Path)

    def test_root_contains_src_and_config(self) -> None:
        root = get_project_root()
        assert (root / "src").exists()
        assert (root / "config").exists()

    def test_root_contains_schema(self) -> None:
        """Схема БД лежит в migrations/init.sql."""
        assert (get_project_root() / "migrations" / "init.sql").exists()


class TestLoadConfigJson:
    """Тесты для функции load_config_json."""

    def test_config_path(self) -> None:
        path = get_config_path()
        assert path.name == "config.json"
        assert path.parent.name == "config"

    def test_contains_required_keys(self) -> None:
        config = load_config_json()
        for key in ("PROJECT_NAME", "VERSION", "JWT_ALGORITHM", "FARE_SURGE_MAX", "PLATFORM_COMMISSION_PERCENT"):
            assert key in config, f"Отсутствует ключ: {key}"

    def test_raises_file_not_found(self, tmp_path: Path) -> None:
        with patch("src.config.loader.get_config_path") as mock_path:
            mock_path.return_value = tmp_path / "nonexistent.json"
            with pytest.raises(FileNotFoundError):
                load_config_json()

    def test_explicit_path(self, temp_config_file: Path) -> None:
        config = load_config_json(temp_config_file)
        assert config["PROJECT_NAME"] == "carpool_test"


class TestSettingsFromConfigJson:
    """Сборка Settings из файла."""

    def test_sections_filled(self, temp_config_file: Path) -> None:
        settings = Settings.from_config_json(temp_config_file)

        assert settings.system.PROJECT_NAME == "carpool_test"
        assert settings.fares.FARE_SURGE_MAX == 2.5
        assert settings.fares.CURRENCY == "EUR"
        assert settings.earnings.PLATFORM_COMMISSION_PERCENT == 20.0
        assert settings.redis_ttl.PASSWORD_RESET_TTL == 600
        assert settings.security.BCRYPT_ROUNDS == 4

    def test_comment_keys_ignored(self, tmp_path: Path, mock_config: dict[str, Any]) -> None:
        import json

        mock_config["_comment_fares"] = "Тарифы"
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps(mock_config))

        settings = Settings.from_config_json(config_file)
        assert settings.fares.FARE_TOLERANCE == 0.01

    def test_env_overrides_api_port(self, temp_config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("API_PORT", "4321")
        settings = Settings.from_config_json(temp_config_file)
        assert settings.deployment.API_PORT == 4321


class TestSecrets:
    """Секреты берутся из окружения."""

    def test_jwt_secret_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("JWT_SECRET", "from-env")
        assert SecuritySettings(JWT_SECRET="").JWT_SECRET == "from-env"

    def test_jwt_secret_from_value_without_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("JWT_SECRET", raising=False)
        assert SecuritySettings(JWT_SECRET="inline").JWT_SECRET == "inline"

    def test_db_password_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PASSWORD", "s3cret")
        assert DatabaseSettings(DB_PASSWORD="").DB_PASSWORD == "s3cret"


class TestConnectionStrings:
    def test_database_dsn(self) -> None:
        db = DatabaseSettings(DB_USER="u", DB_PASSWORD="p", DB_HOST="h", DB_PORT=5433, DB_NAME="carpool")
        assert db.dsn == "postgresql://u:p@h:5433/carpool"

    def test_redis_url_without_password(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("REDIS_PASSWORD", raising=False)
        redis = RedisSettings(REDIS_HOST="r", REDIS_PORT=6380, REDIS_DB=2, REDIS_PASSWORD="")
        assert redis.url == "redis://r:6380/2"

    def test_redis_url_with_password(self) -> None:
        redis = RedisSettings(REDIS_HOST="r", REDIS_PASSWORD="pw")
        assert redis.url == "redis://:pw@r:6379/0"
