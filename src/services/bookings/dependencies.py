from fastapi import Request
from src.infra.database import DatabaseManager
from src.services.bookings.repository import BookingRepository
from src.services.bookings.service import BookingService
from src.services.rides.dependencies import get_ride_repository


def get_booking_repository(request: Request) -> BookingRepository:
    return BookingRepository(DatabaseManager())


def get_booking_service(request: Request) -> BookingService:
    return BookingService(get_booking_repository(request), get_ride_repository(request))
