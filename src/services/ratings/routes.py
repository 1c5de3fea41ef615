from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.services.accounts.dependencies import get_current_user
from src.services.ratings.dependencies import get_rating_service
from src.services.ratings.service import RatingService
from src.shared.models.common import ApiResponse
from src.shared.models.rating_dto import RatingDTO, SubmitRatingRequest, UserRatingsDTO
from src.shared.models.user_dto import UserDTO

router = APIRouter(prefix="/ratings", tags=["Ratings"])


@router.post("/", response_model=ApiResponse[RatingDTO], status_code=status.HTTP_201_CREATED)
async def submit_rating(
    request: SubmitRatingRequest,
    current_user: UserDTO = Depends(get_current_user),
    service: RatingService = Depends(get_rating_service)
):
    rating = await service.submit(
        current_user.id,
        request.ratee_id,
        request.ride_id,
        request.score,
        request.review,
    )
    return ApiResponse(message="Rating submitted", data=rating)


@router.get("/user/{user_id}", response_model=ApiResponse[UserRatingsDTO])
async def get_user_ratings(
    user_id: UUID,
    _: UserDTO = Depends(get_current_user),
    service: RatingService = Depends(get_rating_service)
):
    ratings = await service.get_user_ratings(user_id)
    return ApiResponse(message="Ratings fetched successfully", data=ratings)
