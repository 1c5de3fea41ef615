# src/shared/models/__init__.py
"""
Общие DTO и Pydantic-модели сервисов.
"""

from src.shared.models.common import (
    ApiResponse,
    ErrorResponse,
    HealthStatus,
    PaginatedResponse,
    PaginationParams,
)
from src.shared.models.enums import (
    BookingStatus,
    DriverStatus,
    RideStatus,
    UserRole,
)
from src.shared.models.user_dto import UserDTO
from src.shared.models.vehicle_dto import VehicleDTO
from src.shared.models.ride_dto import RideDTO, FareDTO
from src.shared.models.booking_dto import BookingDTO
from src.shared.models.payment_dto import PaymentDTO
from src.shared.models.earning_dto import EarningDTO
from src.shared.models.rating_dto import RatingDTO
from src.shared.models.message_dto import MessageDTO

__all__ = [
    # Common
    "ApiResponse",
    "ErrorResponse",
    "HealthStatus",
    "PaginatedResponse",
    "PaginationParams",
    # Enums
    "BookingStatus",
    "DriverStatus",
    "RideStatus",
    "UserRole",
    # Entities
    "UserDTO",
    "VehicleDTO",
    "RideDTO",
    "FareDTO",
    "BookingDTO",
    "PaymentDTO",
    "EarningDTO",
    "RatingDTO",
    "MessageDTO",
]
