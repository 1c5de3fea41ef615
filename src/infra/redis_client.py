# src/infra/redis_client.py
"""
Клиент Redis.
Хранит короткоживущие ключи (одноразовые токены сброса пароля).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import redis.asyncio as redis

from src.common.constants import TypeMsg
from src.common.logger import get_logger, log_error, log_info

if TYPE_CHECKING:
    from src.config.loader import Settings

logger = get_logger("redis")

RESET_TOKEN_PREFIX = "password_reset"


class RedisClient:
    """
    Асинхронный клиент Redis с пространством имён ключей.
    Singleton: одно подключение на процесс.
    """

    _instance: RedisClient | None = None
    _client: redis.Redis | None = None

    def __new__(cls) -> RedisClient:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if hasattr(self, "_initialized"):
            return
        self._initialized = True
        self._client = None
        self._namespace = "carpool"

    @property
    def client(self) -> redis.Redis:
        """Возвращает клиент Redis."""
        if self._client is None:
            raise RuntimeError("Redis клиент не инициализирован. Вызовите connect() сначала.")
        return self._client

    def _make_key(self, key: str) -> str:
        """Добавляет namespace к ключу."""
        return f"{self._namespace}:{key}"

    async def connect(
        self,
        url: str,
        max_connections: int = 50,
        namespace: str = "carpool",
    ) -> None:
        """
        Подключается к Redis и проверяет соединение.

        Args:
            url: URL Redis
            max_connections: Максимальное количество соединений
            namespace: Префикс всех ключей
        """
        if self._client is not None:
            return

        self._namespace = namespace

        await log_info("Подключение к Redis...", type_msg=TypeMsg.INFO)

        self._client = redis.from_url(
            url,
            max_connections=max_connections,
            decode_responses=True,
        )
        await self._client.ping()

        await log_info("Подключение к Redis установлено", type_msg=TypeMsg.INFO)

    async def disconnect(self) -> None:
        """Закрывает соединение с Redis."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            await log_info("Соединение с Redis закрыто", type_msg=TypeMsg.INFO)

    # =========================================================================
    # БАЗОВЫЕ ОПЕРАЦИИ
    # =========================================================================

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """
        Устанавливает значение.

        Args:
            key: Ключ
            value: Значение
            ttl: Время жизни в секундах
        """
        return await self.client.set(self._make_key(key), value, ex=ttl)

    # =========================================================================
    # ТОКЕНЫ СБРОСА ПАРОЛЯ
    # =========================================================================

    async def store_reset_token(self, jti: str, user_id: str, ttl: int) -> bool:
        """Запоминает jti выданного токена сброса на время его жизни."""
        return await self.set(f"{RESET_TOKEN_PREFIX}:{jti}", user_id, ttl=ttl)

    async def consume_reset_token(self, jti: str) -> str | None:
        """
        Атомарно забирает jti: повторный вызов вернёт None.

        Returns:
            user_id, для которого выдан токен, или None
        """
        return await self.client.getdel(self._make_key(f"{RESET_TOKEN_PREFIX}:{jti}"))

    async def health_check(self) -> bool:
        """True, если Redis отвечает на PING."""
        try:
            return await self.client.ping()
        except Exception as e:
            await log_error(f"Health check Redis failed: {e}")
            return False


def get_redis() -> RedisClient:
    """Возвращает глобальный экземпляр RedisClient."""
    return RedisClient()


async def init_redis(settings: "Settings") -> None:
    """Подключается к Redis по настройкам."""
    redis_client = get_redis()
    await redis_client.connect(
        url=settings.redis.url,
        max_connections=settings.redis.REDIS_MAX_CONNECTIONS,
        namespace=settings.redis.REDIS_NAMESPACE,
    )
    await log_info(
        f"Redis подключён: {settings.redis.REDIS_HOST}:{settings.redis.REDIS_PORT}/{settings.redis.REDIS_DB}",
        type_msg=TypeMsg.INFO,
    )


async def close_redis() -> None:
    """Закрывает подключение к Redis."""
    redis_client = get_redis()
    await redis_client.disconnect()
