from datetime import datetime
from typing import Any, Awaitable, Callable, List, Optional, Sequence
from uuid import UUID

import asyncpg

from src.infra.database import DatabaseManager

RIDE_SELECT = """
    SELECT r.*,
           d.name AS driver_name, d.email AS driver_email, d.phone_number AS driver_phone,
           p.name AS passenger_name, p.email AS passenger_email, p.phone_number AS passenger_phone
    FROM rides r
    LEFT JOIN users d ON d.id = r.driver_id
    LEFT JOIN users p ON p.id = r.passenger_id
"""

EDITABLE_COLUMNS = {
    "pickup_address", "pickup_lat", "pickup_lon",
    "dropoff_address", "dropoff_lat", "dropoff_lon",
    "departure_time", "estimated_distance", "estimated_duration",
    "actual_distance", "actual_duration", "notes", "payment_method",
}

# (conn, ride row) -> ..., awaited inside the transition transaction
SwapHook = Callable[[asyncpg.Connection, dict], Awaitable[Any]]

INSERT_EVENT = """
    INSERT INTO ride_events (ride_id, type, actor_id, lat, lon, reason)
    VALUES ($1, $2, $3, $4, $5, $6)
"""


class RideRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def create_ride(self, ride_data: dict, actor_id: Optional[UUID]) -> UUID:
        """Inserts a pending ride together with its 'requested' event."""
        cols = ", ".join(ride_data.keys())
        placeholders = ", ".join(f"${i + 1}" for i in range(len(ride_data)))
        query = f"INSERT INTO rides ({cols}) VALUES ({placeholders}) RETURNING id"

        async with self.db.transaction() as conn:
            ride_id = await conn.fetchval(query, *ride_data.values())
            await conn.execute(INSERT_EVENT, ride_id, "requested", actor_id, None, None, None)
        return ride_id

    async def get_ride(self, ride_id: UUID) -> Optional[dict]:
        async with self.db.acquire() as conn:
            row = await conn.fetchrow(f"{RIDE_SELECT} WHERE r.id = $1", ride_id)
            return dict(row) if row else None

    async def get_ride_status(self, ride_id: UUID) -> Optional[str]:
        async with self.db.acquire() as conn:
            return await conn.fetchval("SELECT status FROM rides WHERE id = $1", ride_id)

    async def get_all_rides(self, limit: int, offset: int) -> List[dict]:
        query = f"{RIDE_SELECT} ORDER BY r.created_at DESC LIMIT $1 OFFSET $2"
        async with self.db.acquire() as conn:
            rows = await conn.fetch(query, limit, offset)
            return [dict(row) for row in rows]

    async def count_rides(self) -> int:
        async with self.db.acquire() as conn:
            return await conn.fetchval("SELECT COUNT(*) FROM rides")

    async def get_rides_by_driver(
        self,
        driver_id: UUID,
        status: Optional[str],
        limit: int,
        offset: int,
    ) -> List[dict]:
        query = f"""
            {RIDE_SELECT}
            WHERE r.driver_id = $1 AND ($2::text IS NULL OR r.status = $2)
            ORDER BY r.created_at DESC
            LIMIT $3 OFFSET $4
        """
        async with self.db.acquire() as conn:
            rows = await conn.fetch(query, driver_id, status, limit, offset)
            return [dict(row) for row in rows]

    async def count_rides_by_driver(self, driver_id: UUID, status: Optional[str]) -> int:
        query = "SELECT COUNT(*) FROM rides WHERE driver_id = $1 AND ($2::text IS NULL OR status = $2)"
        async with self.db.acquire() as conn:
            return await conn.fetchval(query, driver_id, status)

    async def get_driver_stats(self, driver_id: UUID) -> dict:
        query = """
            SELECT COUNT(*) AS total_rides,
                   COUNT(*) FILTER (WHERE status = 'completed') AS completed_rides,
                   COUNT(*) FILTER (WHERE status = 'cancelled') AS cancelled_rides,
                   COALESCE(SUM(fare_total) FILTER (WHERE status = 'completed'), 0) AS total_earnings
            FROM rides WHERE driver_id = $1
        """
        async with self.db.acquire() as conn:
            row = await conn.fetchrow(query, driver_id)
            return dict(row)

    async def get_available_rides(self, now: datetime, limit: int, offset: int) -> List[dict]:
        query = f"""
            {RIDE_SELECT}
            WHERE r.status = 'pending' AND r.departure_time > $1 AND r.available_seats > 0
            ORDER BY r.departure_time ASC
            LIMIT $2 OFFSET $3
        """
        async with self.db.acquire() as conn:
            rows = await conn.fetch(query, now, limit, offset)
            return [dict(row) for row in rows]

    async def count_available_rides(self, now: datetime) -> int:
        query = """
            SELECT COUNT(*) FROM rides
            WHERE status = 'pending' AND departure_time > $1 AND available_seats > 0
        """
        async with self.db.acquire() as conn:
            return await conn.fetchval(query, now)

    async def get_events(self, ride_id: UUID) -> List[dict]:
        query = "SELECT * FROM ride_events WHERE ride_id = $1 ORDER BY id ASC"
        async with self.db.acquire() as conn:
            rows = await conn.fetch(query, ride_id)
            return [dict(row) for row in rows]

    async def transition(
        self,
        ride_id: UUID,
        expected: Sequence[str],
        new_status: str,
        event_type: str,
        actor_id: Optional[UUID] = None,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        reason: Optional[str] = None,
        driver_id: Optional[UUID] = None,
        vehicle_id: Optional[UUID] = None,
        cancel_bookings: bool = False,
        on_swap: Optional[SwapHook] = None,
    ) -> bool:
        """
        Compare-and-swap on status plus the event append, in one transaction.
        on_swap runs on the same connection with the updated row; if it raises,
        the whole transition is rolled back.
        Returns False when the ride is absent or no longer in an expected status.
        """
        query = """
            UPDATE rides SET
                status = $3,
                driver_id = COALESCE($4, driver_id),
                vehicle_id = COALESCE(vehicle_id, $5),
                updated_at = NOW()
            WHERE id = $1 AND status = ANY($2::text[])
            RETURNING *
        """
        async with self.db.transaction() as conn:
            updated = await conn.fetchrow(query, ride_id, list(expected), new_status, driver_id, vehicle_id)
            if updated is None:
                return False
            await conn.execute(INSERT_EVENT, ride_id, event_type, actor_id, lat, lon, reason)
            if cancel_bookings:
                await conn.execute(
                    "UPDATE bookings SET status = 'cancelled' WHERE ride_id = $1 AND status <> 'cancelled'",
                    ride_id,
                )
            if on_swap is not None:
                await on_swap(conn, dict(updated))
        return True

    async def update_ride(self, ride_id: UUID, fields: dict) -> bool:
        fields = {k: v for k, v in fields.items() if k in EDITABLE_COLUMNS}
        if not fields:
            return await self.get_ride_status(ride_id) is not None

        assignments = ", ".join(f"{col} = ${i + 2}" for i, col in enumerate(fields))
        query = f"UPDATE rides SET {assignments}, updated_at = NOW() WHERE id = $1 RETURNING id"
        async with self.db.acquire() as conn:
            return await conn.fetchval(query, ride_id, *fields.values()) is not None

    async def delete_ride(self, ride_id: UUID, deletable: Sequence[str]) -> bool:
        query = "DELETE FROM rides WHERE id = $1 AND status = ANY($2::text[]) RETURNING id"
        async with self.db.acquire() as conn:
            return await conn.fetchval(query, ride_id, list(deletable)) is not None
