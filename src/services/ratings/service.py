from typing import List, Optional
from uuid import UUID

from src.common.constants import MAX_RATING_SCORE, MIN_RATING_SCORE
from src.common.exceptions import InvalidScoreError, NotFoundError, ValidationFailedError
from src.common.logger import log_info
from src.services.ratings.repository import RatingRepository
from src.services.rides.repository import RideRepository
from src.services.rides.service import brief_from_row
from src.shared.models.rating_dto import RatingDTO, UserRatingsDTO


def rating_from_row(data: dict) -> RatingDTO:
    return RatingDTO(
        id=data["id"],
        rater_id=data["rater_id"],
        ratee_id=data["ratee_id"],
        ride_id=data["ride_id"],
        score=data["score"],
        review=data.get("review"),
        created_at=data["created_at"],
        rater=brief_from_row(data, "rater"),
    )


class RatingService:
    def __init__(self, repository: RatingRepository, ride_repository: RideRepository):
        self.repository = repository
        self.ride_repository = ride_repository

    async def submit(
        self,
        rater_id: UUID,
        ratee_id: UUID,
        ride_id: UUID,
        score: int,
        review: Optional[str] = None,
    ) -> RatingDTO:
        if not MIN_RATING_SCORE <= score <= MAX_RATING_SCORE:
            raise InvalidScoreError(
                f"Score must be between {MIN_RATING_SCORE} and {MAX_RATING_SCORE}",
                details={"score": score},
            )
        if rater_id == ratee_id:
            raise ValidationFailedError("Users cannot rate themselves")
        if await self.ride_repository.get_ride_status(ride_id) is None:
            raise NotFoundError("Ride not found")

        rating_id = await self.repository.create_rating(rater_id, ratee_id, ride_id, score, review)
        await log_info(f"User {rater_id} rated {ratee_id} with {score} for ride {ride_id}")
        return rating_from_row(await self.repository.get_rating(rating_id))

    async def list_for(self, user_id: UUID) -> List[RatingDTO]:
        rows = await self.repository.get_ratings_for(user_id)
        return [rating_from_row(row) for row in rows]

    async def average_for(self, user_id: UUID) -> Optional[float]:
        """Mean score, or None when the user has no ratings yet."""
        data = await self.repository.get_average_for(user_id)
        if not data["count"]:
            return None
        return round(float(data["average"]), 2)

    async def get_user_ratings(self, user_id: UUID) -> UserRatingsDTO:
        ratings = await self.list_for(user_id)
        return UserRatingsDTO(
            user_id=user_id,
            average=await self.average_for(user_id),
            count=len(ratings),
            ratings=ratings,
        )
