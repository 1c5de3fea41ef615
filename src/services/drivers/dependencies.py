from fastapi import Request
from src.services.accounts.dependencies import get_account_service
from src.services.drivers.service import DriverService
from src.services.rides.dependencies import get_earnings_recorder, get_ride_repository
from src.services.vehicles.dependencies import get_vehicle_service


def get_driver_service(request: Request) -> DriverService:
    return DriverService(
        get_account_service(request),
        get_vehicle_service(request),
        get_ride_repository(request),
        get_earnings_recorder(request),
    )
