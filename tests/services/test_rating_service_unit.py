from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import asyncpg
import pytest

from src.common.exceptions import (
    DuplicateRatingError,
    InvalidScoreError,
    NotFoundError,
    ValidationFailedError,
)
from src.services.ratings.repository import RatingRepository
from src.services.ratings.service import RatingService


@pytest.fixture
def ids():
    return {"passenger": uuid4(), "driver": uuid4(), "ride": uuid4(), "rating": uuid4()}


@pytest.fixture
def ride_repo():
    repo = AsyncMock()
    repo.get_ride_status.return_value = "completed"
    return repo


@pytest.fixture
def rating_row(ids):
    return {
        "id": ids["rating"],
        "rater_id": ids["passenger"],
        "ratee_id": ids["driver"],
        "ride_id": ids["ride"],
        "score": 5,
        "review": "great",
        "created_at": datetime.now(timezone.utc),
        "rater_name": "Test Passenger",
        "rater_email": "passenger@example.com",
        "rater_phone": None,
    }


@pytest.mark.asyncio
async def test_second_identical_rating_is_duplicate(mock_db, mock_conn, ride_repo, ids, rating_row):
    mock_conn.fetchval = AsyncMock(side_effect=[ids["rating"], asyncpg.UniqueViolationError("duplicate key")])
    mock_conn.fetchrow = AsyncMock(return_value=rating_row)
    service = RatingService(RatingRepository(mock_db), ride_repo)

    rating = await service.submit(ids["passenger"], ids["driver"], ids["ride"], 5, "great")
    assert rating.score == 5
    assert rating.rater.name == "Test Passenger"

    with pytest.raises(DuplicateRatingError):
        await service.submit(ids["passenger"], ids["driver"], ids["ride"], 5, "great")


@pytest.mark.parametrize("score", [0, 6, -1])
@pytest.mark.asyncio
async def test_score_out_of_range(ride_repo, ids, score):
    repository = AsyncMock()
    service = RatingService(repository, ride_repo)

    with pytest.raises(InvalidScoreError):
        await service.submit(ids["passenger"], ids["driver"], ids["ride"], score)
    repository.create_rating.assert_not_called()


@pytest.mark.asyncio
async def test_self_rating_is_rejected(ride_repo, ids):
    with pytest.raises(ValidationFailedError):
        await RatingService(AsyncMock(), ride_repo).submit(ids["driver"], ids["driver"], ids["ride"], 4)


@pytest.mark.asyncio
async def test_rating_for_unknown_ride(ride_repo, ids):
    ride_repo.get_ride_status.return_value = None

    with pytest.raises(NotFoundError):
        await RatingService(AsyncMock(), ride_repo).submit(ids["passenger"], ids["driver"], ids["ride"], 4)


@pytest.mark.asyncio
async def test_unknown_ratee_maps_to_not_found(mock_db, mock_conn, ride_repo, ids):
    mock_conn.fetchval = AsyncMock(side_effect=asyncpg.ForeignKeyViolationError("fk"))

    with pytest.raises(NotFoundError):
        await RatingService(RatingRepository(mock_db), ride_repo).submit(
            ids["passenger"], ids["driver"], ids["ride"], 3
        )


@pytest.mark.asyncio
async def test_user_ratings_average(ride_repo, ids, rating_row):
    repository = AsyncMock()
    repository.get_ratings_for.return_value = [rating_row, {**rating_row, "id": uuid4(), "score": 4}]
    repository.get_average_for.return_value = {"average": 4.5, "count": 2}

    result = await RatingService(repository, ride_repo).get_user_ratings(ids["driver"])

    assert result.count == 2
    assert result.average == 4.5


@pytest.mark.asyncio
async def test_average_without_ratings_is_none(ride_repo, ids):
    repository = AsyncMock()
    repository.get_average_for.return_value = {"average": None, "count": 0}

    assert await RatingService(repository, ride_repo).average_for(ids["driver"]) is None
