from typing import List, Optional
from uuid import UUID

import asyncpg

from src.common.exceptions import NotFoundError
from src.infra.database import DatabaseManager

MESSAGE_SELECT = """
    SELECT m.*,
           u.name AS sender_name, u.email AS sender_email, u.phone_number AS sender_phone
    FROM messages m
    LEFT JOIN users u ON u.id = m.sender_id
"""


class MessageRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def create_message(self, ride_id: UUID, sender_id: UUID, message: str) -> UUID:
        query = "INSERT INTO messages (ride_id, sender_id, message) VALUES ($1, $2, $3) RETURNING id"
        try:
            async with self.db.acquire() as conn:
                return await conn.fetchval(query, ride_id, sender_id, message)
        except asyncpg.ForeignKeyViolationError as e:
            raise NotFoundError("Ride not found") from e

    async def get_message(self, message_id: UUID) -> Optional[dict]:
        async with self.db.acquire() as conn:
            row = await conn.fetchrow(f"{MESSAGE_SELECT} WHERE m.id = $1", message_id)
            return dict(row) if row else None

    async def get_messages_by_ride(self, ride_id: UUID) -> List[dict]:
        query = f"{MESSAGE_SELECT} WHERE m.ride_id = $1 ORDER BY m.created_at ASC, m.id"
        async with self.db.acquire() as conn:
            rows = await conn.fetch(query, ride_id)
            return [dict(row) for row in rows]
