# src/services/api/app.py
"""
FastAPI приложение carpool API.

Все роутеры подключаются под /api/v1. Ошибки домена (AppError)
превращаются в единый конверт {"success": false, "message", "error_code", "details"}.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.common.constants import TypeMsg
from src.common.exceptions import AppError, InternalError, ValidationFailedError
from src.common.logger import log_error, log_info, setup_logging
from src.config.loader import Settings, get_settings
from src.infra.database import close_db, get_db, init_db
from src.infra.redis_client import close_redis, get_redis, init_redis
from src.services.accounts.routes import auth_router, users_router
from src.services.bookings.routes import router as bookings_router
from src.services.drivers.routes import router as drivers_router
from src.services.messages.routes import router as messages_router
from src.services.payments.routes import earnings_router, payments_router
from src.services.ratings.routes import router as ratings_router
from src.services.rides.routes import router as rides_router
from src.services.vehicles.routes import router as vehicles_router
from src.shared.models.common import ErrorResponse, HealthStatus

API_PREFIX = "/api/v1"


# =============================================================================
# LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Жизненный цикл приложения."""
    settings: Settings = app.state.settings
    setup_logging()
    await log_info("Carpool API запускается...", type_msg=TypeMsg.INFO)

    await init_db(settings)
    await init_redis(settings)

    yield

    await close_redis()
    await close_db()
    await log_info("Carpool API остановлен", type_msg=TypeMsg.INFO)


# =============================================================================
# ОБРАБОТЧИКИ ОШИБОК
# =============================================================================

def error_response(error: AppError) -> JSONResponse:
    body = ErrorResponse(**error.to_dict())
    return JSONResponse(status_code=error.status_code, content=jsonable_encoder(body))


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        await log_error(f"{request.method} {request.url.path}: {exc.message}")
    return error_response(exc)


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    errors = exc.errors() if isinstance(exc, (RequestValidationError, ValidationError)) else []
    # Значения полей не возвращаем: там может быть пароль
    details = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in errors
    ]
    return error_response(ValidationFailedError("Request validation failed", details=details))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    await log_error(
        f"Необработанная ошибка {request.method} {request.url.path}: {exc!r}",
        exc_info=True,
    )
    return error_response(InternalError())


# =============================================================================
# ПРИЛОЖЕНИЕ
# =============================================================================

def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Собирает приложение.

    Args:
        settings: Настройки; по умолчанию загружаются из config.json
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Carpool API",
        description="Совместные поездки: поездки, бронирования, платежи, рейтинги",
        version=settings.system.VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.deployment.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    for router in (
        auth_router,
        users_router,
        drivers_router,
        vehicles_router,
        rides_router,
        bookings_router,
        payments_router,
        earnings_router,
        ratings_router,
        messages_router,
    ):
        app.include_router(router, prefix=API_PREFIX)

    @app.get("/health", response_model=HealthStatus, tags=["Health"])
    async def health_check() -> HealthStatus:
        """Проверка здоровья сервиса."""
        deps = {
            "postgres": "healthy" if await get_db().health_check() else "unhealthy",
            "redis": "healthy" if await get_redis().health_check() else "unhealthy",
        }
        overall = "healthy" if all(v == "healthy" for v in deps.values()) else "degraded"
        return HealthStatus(
            service="carpool_api",
            status=overall,
            version=settings.system.VERSION,
            dependencies=deps,
        )

    return app


app = create_app()
