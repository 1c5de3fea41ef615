from typing import List, Optional, Sequence
from uuid import UUID

from src.infra.database import DatabaseManager

BOOKING_SELECT = """
    SELECT b.*,
           r.pickup_address, r.pickup_lat, r.pickup_lon,
           r.dropoff_address, r.dropoff_lat, r.dropoff_lon,
           r.departure_time, r.status AS ride_status, r.fare_total, r.driver_id,
           d.name AS driver_name, d.email AS driver_email, d.phone_number AS driver_phone,
           p.name AS passenger_name, p.email AS passenger_email, p.phone_number AS passenger_phone
    FROM bookings b
    JOIN rides r ON r.id = b.ride_id
    LEFT JOIN users d ON d.id = r.driver_id
    LEFT JOIN users p ON p.id = b.passenger_id
"""

# One seat, only while the ride is open and not full
TAKE_SEAT = """
    UPDATE rides SET available_seats = available_seats - 1, updated_at = NOW()
    WHERE id = $1 AND available_seats > 0 AND status IN ('pending', 'accepted')
    RETURNING id
"""

RESTORE_SEAT = """
    UPDATE rides SET available_seats = LEAST(available_seats + 1, total_seats), updated_at = NOW()
    WHERE id = $1
"""


class BookingRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def book_seat(self, ride_id: UUID, passenger_id: UUID) -> Optional[UUID]:
        """
        Takes a seat and inserts a confirmed booking in one transaction.
        Returns None when the conditional seat update matched nothing.
        """
        async with self.db.transaction() as conn:
            taken = await conn.fetchval(TAKE_SEAT, ride_id)
            if taken is None:
                return None
            return await conn.fetchval(
                "INSERT INTO bookings (passenger_id, ride_id, status) VALUES ($1, $2, 'confirmed') RETURNING id",
                passenger_id, ride_id,
            )

    async def get_booking(self, booking_id: UUID) -> Optional[dict]:
        async with self.db.acquire() as conn:
            row = await conn.fetchrow(f"{BOOKING_SELECT} WHERE b.id = $1", booking_id)
            return dict(row) if row else None

    async def get_bookings_by_passenger(self, passenger_id: UUID) -> List[dict]:
        query = f"{BOOKING_SELECT} WHERE b.passenger_id = $1 ORDER BY b.booking_time DESC"
        async with self.db.acquire() as conn:
            rows = await conn.fetch(query, passenger_id)
            return [dict(row) for row in rows]

    async def update_status(
        self,
        booking_id: UUID,
        expected: Sequence[str],
        new_status: str,
        take_seat: bool = False,
        restore_seat: bool = False,
    ) -> Optional[bool]:
        """
        Status change with the matching seat adjustment in one transaction.
        The booking row is locked first so concurrent changes serialize.

        Returns:
            True on success, False when a seat was required but the ride is
            full or closed, None when the booking is absent or not in `expected`.
        """
        async with self.db.transaction() as conn:
            row = await conn.fetchrow(
                "SELECT ride_id, status FROM bookings WHERE id = $1 FOR UPDATE",
                booking_id,
            )
            if row is None or row["status"] not in expected:
                return None
            if take_seat and await conn.fetchval(TAKE_SEAT, row["ride_id"]) is None:
                return False
            await conn.execute("UPDATE bookings SET status = $2 WHERE id = $1", booking_id, new_status)
            if restore_seat:
                await conn.execute(RESTORE_SEAT, row["ride_id"])
            return True
