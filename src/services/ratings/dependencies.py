from fastapi import Request
from src.infra.database import DatabaseManager
from src.services.ratings.repository import RatingRepository
from src.services.ratings.service import RatingService
from src.services.rides.dependencies import get_ride_repository


def get_rating_service(request: Request) -> RatingService:
    return RatingService(RatingRepository(DatabaseManager()), get_ride_repository(request))
