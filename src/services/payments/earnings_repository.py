from datetime import datetime
from typing import List, Optional
from uuid import UUID

import asyncpg

from src.infra.database import DatabaseManager


class EarningsRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def insert_earning(
        self,
        earning_data: dict,
        conn: Optional[asyncpg.Connection] = None,
    ) -> Optional[dict]:
        """
        Inserts the earning unless the ride already has one.
        With conn the insert joins the caller's transaction.
        Returns None when the unique ride_id constraint absorbed the insert.
        """
        cols = ", ".join(earning_data.keys())
        placeholders = ", ".join(f"${i + 1}" for i in range(len(earning_data)))
        query = f"""
            INSERT INTO earnings ({cols}) VALUES ({placeholders})
            ON CONFLICT (ride_id) DO NOTHING
            RETURNING *
        """
        if conn is not None:
            row = await conn.fetchrow(query, *earning_data.values())
        else:
            async with self.db.acquire() as conn:
                row = await conn.fetchrow(query, *earning_data.values())
        return dict(row) if row else None

    async def get_by_ride(
        self,
        ride_id: UUID,
        conn: Optional[asyncpg.Connection] = None,
    ) -> Optional[dict]:
        query = "SELECT * FROM earnings WHERE ride_id = $1"
        if conn is not None:
            row = await conn.fetchrow(query, ride_id)
        else:
            async with self.db.acquire() as conn:
                row = await conn.fetchrow(query, ride_id)
        return dict(row) if row else None

    async def get_by_driver(self, driver_id: UUID, since: Optional[datetime] = None) -> List[dict]:
        query = """
            SELECT * FROM earnings
            WHERE driver_id = $1 AND ($2::timestamptz IS NULL OR created_at >= $2)
            ORDER BY created_at DESC
        """
        async with self.db.acquire() as conn:
            rows = await conn.fetch(query, driver_id, since)
            return [dict(row) for row in rows]

    async def get_summary(self, driver_id: UUID) -> dict:
        query = """
            SELECT COALESCE(SUM(amount), 0) AS total_earnings,
                   COUNT(*) AS total_rides,
                   COALESCE(AVG(amount), 0) AS average_earning
            FROM earnings
            WHERE driver_id = $1
        """
        async with self.db.acquire() as conn:
            row = await conn.fetchrow(query, driver_id)
            return dict(row)

    async def get_daily_net(self, driver_id: UUID, since: datetime) -> List[dict]:
        query = """
            SELECT (created_at AT TIME ZONE 'UTC')::date AS day,
                   SUM(net_earnings) AS net_earnings
            FROM earnings
            WHERE driver_id = $1 AND created_at >= $2
            GROUP BY day
            ORDER BY day
        """
        async with self.db.acquire() as conn:
            rows = await conn.fetch(query, driver_id, since)
            return [dict(row) for row in rows]
