from typing import Optional, List
from uuid import UUID

import asyncpg

from src.common.exceptions import DuplicateEmailError, DuplicateLicenseError
from src.infra.database import DatabaseManager, constraint_of

USER_COLUMNS = {"name", "email", "phone_number", "driver_status", "vehicle_id",
                "vehicle_make", "vehicle_model", "vehicle_year", "vehicle_color", "vehicle_plate"}


def _raise_duplicate(error: asyncpg.UniqueViolationError) -> None:
    if constraint_of(error) == "users_license_number_key":
        raise DuplicateLicenseError() from error
    raise DuplicateEmailError() from error


class UserRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def create_user(self, user_data: dict) -> dict:
        """Inserts a user row; the caller supplies an already hashed password."""
        cols = ", ".join(user_data.keys())
        placeholders = ", ".join(f"${i + 1}" for i in range(len(user_data)))
        query = f"INSERT INTO users ({cols}) VALUES ({placeholders}) RETURNING *"
        try:
            async with self.db.acquire() as conn:
                row = await conn.fetchrow(query, *user_data.values())
        except asyncpg.UniqueViolationError as e:
            _raise_duplicate(e)
        return dict(row)

    async def get_user_by_id(self, user_id: UUID) -> Optional[dict]:
        async with self.db.acquire() as conn:
            row = await conn.fetchrow("SELECT * FROM users WHERE id = $1", user_id)
            return dict(row) if row else None

    async def get_user_by_email(self, email: str) -> Optional[dict]:
        async with self.db.acquire() as conn:
            row = await conn.fetchrow("SELECT * FROM users WHERE email = $1", email)
            return dict(row) if row else None

    async def get_all_users(self, limit: int, offset: int) -> List[dict]:
        query = "SELECT * FROM users ORDER BY created_at DESC LIMIT $1 OFFSET $2"
        async with self.db.acquire() as conn:
            rows = await conn.fetch(query, limit, offset)
            return [dict(row) for row in rows]

    async def count_users(self) -> int:
        async with self.db.acquire() as conn:
            return await conn.fetchval("SELECT COUNT(*) FROM users")

    async def update_user(self, user_id: UUID, fields: dict) -> Optional[dict]:
        """Updates whitelisted profile columns. Role and password never pass through here."""
        fields = {k: v for k, v in fields.items() if k in USER_COLUMNS}
        if not fields:
            return await self.get_user_by_id(user_id)

        assignments = ", ".join(f"{col} = ${i + 2}" for i, col in enumerate(fields))
        query = f"""
            UPDATE users SET {assignments}, updated_at = NOW()
            WHERE id = $1
            RETURNING *
        """
        try:
            async with self.db.acquire() as conn:
                row = await conn.fetchrow(query, user_id, *fields.values())
        except asyncpg.UniqueViolationError as e:
            _raise_duplicate(e)
        return dict(row) if row else None

    async def update_password(self, user_id: UUID, password_hash: str) -> bool:
        query = "UPDATE users SET password_hash = $2, updated_at = NOW() WHERE id = $1"
        async with self.db.acquire() as conn:
            result = await conn.execute(query, user_id, password_hash)
            return result == "UPDATE 1"

    async def set_driver_status(self, user_id: UUID, status: str) -> Optional[dict]:
        query = """
            UPDATE users SET driver_status = $2, updated_at = NOW()
            WHERE id = $1 AND role = 'driver'
            RETURNING *
        """
        async with self.db.acquire() as conn:
            row = await conn.fetchrow(query, user_id, status)
            return dict(row) if row else None

    async def has_active_involvement(self, user_id: UUID) -> bool:
        """True while the user drives, rides or holds a live booking on a non-terminal ride."""
        query = """
            SELECT EXISTS (
                SELECT 1 FROM rides
                WHERE (driver_id = $1 OR passenger_id = $1)
                  AND status NOT IN ('completed', 'cancelled', 'rejected')
            ) OR EXISTS (
                SELECT 1 FROM bookings b
                JOIN rides r ON r.id = b.ride_id
                WHERE b.passenger_id = $1
                  AND b.status <> 'cancelled'
                  AND r.status NOT IN ('completed', 'cancelled', 'rejected')
            )
        """
        async with self.db.acquire() as conn:
            return await conn.fetchval(query, user_id)

    async def delete_user(self, user_id: UUID) -> bool:
        async with self.db.acquire() as conn:
            result = await conn.execute("DELETE FROM users WHERE id = $1", user_id)
            return result == "DELETE 1"
