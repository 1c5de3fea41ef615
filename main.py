#!/usr/bin/env python3
# main.py
"""
Точка входа carpool API.

Режимы:
    api        — HTTP API через uvicorn (по умолчанию)
    create_db  — создать базу данных, если её нет
    migrate    — применить migrations/init.sql и выйти
"""

from __future__ import annotations

import asyncio
import sys

import asyncpg
import uvicorn

from src.common.constants import TypeMsg
from src.common.logger import log_error, log_info, setup_logging
from src.config import settings
from src.infra.database import close_db, init_db

MODES = ("api", "create_db", "migrate")


async def create_database() -> None:
    """Создаёт базу DB_NAME через системную БД postgres."""
    db_name = settings.database.DB_NAME
    sys_conn = await asyncpg.connect(
        user=settings.database.DB_USER,
        password=settings.database.DB_PASSWORD,
        host=settings.database.DB_HOST,
        port=settings.database.DB_PORT,
        database="postgres",
    )
    try:
        exists = await sys_conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", db_name)
        if exists:
            await log_info(f"База {db_name} уже существует", type_msg=TypeMsg.INFO)
            return
        # Имя базы нельзя передать параметром
        await sys_conn.execute(f'CREATE DATABASE "{db_name}"')
        await log_info(f"База {db_name} создана", type_msg=TypeMsg.INFO)
    finally:
        await sys_conn.close()


async def migrate() -> None:
    """Применяет схему (init_db выполняет migrations/init.sql под advisory lock)."""
    await init_db(settings)
    await close_db()
    await log_info("Схема применена", type_msg=TypeMsg.INFO)


async def run_api() -> None:
    await log_info(
        f"Carpool API v{settings.system.VERSION} на "
        f"{settings.deployment.API_HOST}:{settings.deployment.API_PORT}",
        type_msg=TypeMsg.INFO,
    )
    config = uvicorn.Config(
        "src.services.api.app:app",
        host=settings.deployment.API_HOST,
        port=settings.deployment.API_PORT,
        reload=False,
        log_level="debug" if settings.system.DEBUG else "info",
    )
    server = uvicorn.Server(config)
    await server.serve()


async def main(mode: str = "api") -> None:
    setup_logging()
    try:
        if mode == "create_db":
            await create_database()
        elif mode == "migrate":
            await migrate()
        else:
            await run_api()
    except (OSError, asyncpg.PostgresError) as e:
        await log_error(f"Запуск в режиме '{mode}' не удался: {e}")
        sys.exit(1)


def print_usage() -> None:
    print(__doc__)


if __name__ == "__main__":
    mode = "api"
    if len(sys.argv) > 1:
        arg = sys.argv[1].lower()
        if arg in ("--help", "-h"):
            print_usage()
            sys.exit(0)
        if arg not in MODES:
            print(f"Неизвестный режим: {arg}")
            print_usage()
            sys.exit(2)
        mode = arg

    try:
        asyncio.run(main(mode))
    except KeyboardInterrupt:
        pass
