from fastapi import Request
from src.infra.database import DatabaseManager
from src.services.accounts.repository import UserRepository
from src.services.vehicles.repository import VehicleRepository
from src.services.vehicles.service import VehicleService


def get_vehicle_repository(request: Request) -> VehicleRepository:
    return VehicleRepository(DatabaseManager())


def get_vehicle_service(request: Request) -> VehicleService:
    repository = get_vehicle_repository(request)
    return VehicleService(repository, UserRepository(DatabaseManager()))
