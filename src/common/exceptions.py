# src/common/exceptions.py
"""
Иерархия прикладных ошибок.
Сервисы выбрасывают их, HTTP-шлюз преобразует в ответ с кодом статуса.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Базовая прикладная ошибка."""

    code: str = "APP_ERROR"
    status_code: int = 400
    default_message: str = "Application error"

    def __init__(self, message: str | None = None, details: Any = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Тело ответа об ошибке."""
        return {
            "success": False,
            "message": self.message,
            "error_code": self.code,
            "details": self.details,
        }


# =============================================================================
# ОТСУТСТВУЮЩИЕ СУЩНОСТИ
# =============================================================================

class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class RideNotFoundError(NotFoundError):
    code = "RIDE_NOT_FOUND"
    default_message = "Ride not found"


class BookingNotFoundError(NotFoundError):
    code = "BOOKING_NOT_FOUND"
    default_message = "Booking not found"


# =============================================================================
# ЖИЗНЕННЫЙ ЦИКЛ И ВМЕСТИМОСТЬ
# =============================================================================

class InvalidTransitionError(AppError):
    code = "INVALID_TRANSITION"
    status_code = 409
    default_message = "Status transition is not allowed"


class NoSeatsAvailableError(AppError):
    code = "NO_SEATS_AVAILABLE"
    status_code = 409
    default_message = "No seats available"


# =============================================================================
# НАРУШЕНИЯ УНИКАЛЬНОСТИ
# =============================================================================

class DuplicateEmailError(AppError):
    code = "DUPLICATE_EMAIL"
    status_code = 409
    default_message = "User with this email already exists"


class DuplicateLicenseError(AppError):
    code = "DUPLICATE_LICENSE"
    status_code = 409
    default_message = "Driver with this license number already exists"


class DuplicatePlateError(AppError):
    code = "DUPLICATE_PLATE"
    status_code = 409
    default_message = "Vehicle with this license plate already exists"


class DuplicateRatingError(AppError):
    code = "DUPLICATE_RATING"
    status_code = 409
    default_message = "This ride has already been rated"


# =============================================================================
# АУТЕНТИФИКАЦИЯ И ВАЛИДАЦИЯ
# =============================================================================

class InvalidCredentialsError(AppError):
    code = "INVALID_CREDENTIALS"
    status_code = 401
    default_message = "Invalid email or password"


class ForbiddenError(AppError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "Access denied"


class ValidationFailedError(AppError):
    code = "VALIDATION_FAILED"
    status_code = 422
    default_message = "Validation failed"


class InvalidScoreError(ValidationFailedError):
    code = "INVALID_SCORE"
    default_message = "Score must be between 1 and 5"


class UserHasActiveRidesError(AppError):
    code = "USER_HAS_ACTIVE_RIDES"
    status_code = 409
    default_message = "User has active rides or bookings"


class InternalError(AppError):
    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal server error"
