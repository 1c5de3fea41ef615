# tests/common/test_exceptions.py
"""
Тесты иерархии прикладных ошибок.
"""

from __future__ import annotations

import pytest

from src.common.exceptions import (
    AppError,
    BookingNotFoundError,
    DuplicateEmailError,
    DuplicateRatingError,
    ForbiddenError,
    InternalError,
    InvalidCredentialsError,
    InvalidScoreError,
    InvalidTransitionError,
    NoSeatsAvailableError,
    NotFoundError,
    RideNotFoundError,
    UserHasActiveRidesError,
    ValidationFailedError,
)


@pytest.mark.parametrize(
    "error_cls, code, status",
    [
        (NotFoundError, "NOT_FOUND", 404),
        (RideNotFoundError, "RIDE_NOT_FOUND", 404),
        (BookingNotFoundError, "BOOKING_NOT_FOUND", 404),
        (InvalidTransitionError, "INVALID_TRANSITION", 409),
        (NoSeatsAvailableError, "NO_SEATS_AVAILABLE", 409),
        (DuplicateEmailError, "DUPLICATE_EMAIL", 409),
        (DuplicateRatingError, "DUPLICATE_RATING", 409),
        (InvalidCredentialsError, "INVALID_CREDENTIALS", 401),
        (ForbiddenError, "FORBIDDEN", 403),
        (ValidationFailedError, "VALIDATION_FAILED", 422),
        (InvalidScoreError, "INVALID_SCORE", 422),
        (UserHasActiveRidesError, "USER_HAS_ACTIVE_RIDES", 409),
        (InternalError, "INTERNAL_ERROR", 500),
    ],
)
def test_codes_and_statuses(error_cls: type[AppError], code: str, status: int) -> None:
    error = error_cls()
    assert error.code == code
    assert error.status_code == status
    assert error.message


def test_to_dict_envelope() -> None:
    error = ValidationFailedError("Bad fare", details={"field": "fare.total"})
    assert error.to_dict() == {
        "success": False,
        "message": "Bad fare",
        "error_code": "VALIDATION_FAILED",
        "details": {"field": "fare.total"},
    }


def test_specific_not_found_is_not_found() -> None:
    assert isinstance(RideNotFoundError(), NotFoundError)
    assert isinstance(InvalidScoreError(), ValidationFailedError)
