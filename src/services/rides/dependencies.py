from fastapi import Request
from src.infra.database import DatabaseManager
from src.services.accounts.dependencies import get_settings
from src.services.accounts.repository import UserRepository
from src.services.payments.earnings import EarningsRecorder
from src.services.payments.earnings_repository import EarningsRepository
from src.services.rides.fares import FareCalculator
from src.services.rides.repository import RideRepository
from src.services.rides.service import RideService


def get_ride_repository(request: Request) -> RideRepository:
    return RideRepository(DatabaseManager())


def get_earnings_recorder(request: Request) -> EarningsRecorder:
    db = DatabaseManager()
    return EarningsRecorder(EarningsRepository(db), get_ride_repository(request), get_settings(request))


def get_ride_service(request: Request) -> RideService:
    settings = get_settings(request)
    return RideService(
        get_ride_repository(request),
        UserRepository(DatabaseManager()),
        get_earnings_recorder(request),
        FareCalculator(settings.fares),
    )
