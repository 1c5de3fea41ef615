from typing import List, Optional
from uuid import UUID

import asyncpg

from src.common.exceptions import DuplicateRatingError, NotFoundError
from src.infra.database import DatabaseManager

RATING_SELECT = """
    SELECT rt.*,
           u.name AS rater_name, u.email AS rater_email, u.phone_number AS rater_phone
    FROM ratings rt
    LEFT JOIN users u ON u.id = rt.rater_id
"""


class RatingRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def create_rating(
        self,
        rater_id: UUID,
        ratee_id: UUID,
        ride_id: UUID,
        score: int,
        review: Optional[str],
    ) -> UUID:
        query = """
            INSERT INTO ratings (rater_id, ratee_id, ride_id, score, review)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING id
        """
        try:
            async with self.db.acquire() as conn:
                return await conn.fetchval(query, rater_id, ratee_id, ride_id, score, review)
        except asyncpg.UniqueViolationError as e:
            raise DuplicateRatingError() from e
        except asyncpg.ForeignKeyViolationError as e:
            raise NotFoundError("Ride or user not found") from e

    async def get_rating(self, rating_id: UUID) -> Optional[dict]:
        async with self.db.acquire() as conn:
            row = await conn.fetchrow(f"{RATING_SELECT} WHERE rt.id = $1", rating_id)
            return dict(row) if row else None

    async def get_ratings_for(self, user_id: UUID) -> List[dict]:
        query = f"{RATING_SELECT} WHERE rt.ratee_id = $1 ORDER BY rt.created_at DESC"
        async with self.db.acquire() as conn:
            rows = await conn.fetch(query, user_id)
            return [dict(row) for row in rows]

    async def get_average_for(self, user_id: UUID) -> dict:
        query = "SELECT AVG(score) AS average, COUNT(*) AS count FROM ratings WHERE ratee_id = $1"
        async with self.db.acquire() as conn:
            row = await conn.fetchrow(query, user_id)
            return dict(row)
