from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field
from src.shared.models.user_dto import UserBriefDTO


class RatingDTO(BaseModel):
    id: UUID
    rater_id: UUID
    ratee_id: UUID
    ride_id: UUID
    score: int
    review: Optional[str] = None
    created_at: datetime

    rater: Optional[UserBriefDTO] = None

    class Config:
        from_attributes = True


class SubmitRatingRequest(BaseModel):
    ratee_id: UUID
    ride_id: UUID
    # Диапазон проверяется сервисом (InvalidScore)
    score: int
    review: Optional[str] = Field(default=None, max_length=1000)


class UserRatingsDTO(BaseModel):
    user_id: UUID
    average: Optional[float] = None
    count: int = 0
    ratings: List[RatingDTO] = Field(default_factory=list)
