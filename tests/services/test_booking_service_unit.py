import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from src.common.exceptions import (
    BookingNotFoundError,
    InvalidTransitionError,
    NoSeatsAvailableError,
    RideNotFoundError,
    ValidationFailedError,
)
from src.services.bookings.repository import TAKE_SEAT, BookingRepository
from src.services.bookings.service import BookingService
from src.shared.models.enums import BookingStatus


class InMemoryBookings:
    """
    Mirrors the repository contract: the seat check and the decrement happen
    with no await in between, like the single conditional UPDATE in Postgres.
    """

    def __init__(self, ride_id, seats, ride_status="pending"):
        self.ride_id = ride_id
        self.total_seats = seats
        self.seats = seats
        self.ride_status = ride_status
        self.bookings = {}

    async def book_seat(self, ride_id, passenger_id):
        await asyncio.sleep(0)
        if ride_id != self.ride_id or self.seats <= 0 or self.ride_status not in ("pending", "accepted"):
            return None
        self.seats -= 1
        booking_id = uuid4()
        self.bookings[booking_id] = {
            "id": booking_id,
            "passenger_id": passenger_id,
            "ride_id": ride_id,
            "status": "confirmed",
            "payment_status": False,
            "booking_time": datetime.now(timezone.utc),
        }
        return booking_id

    async def get_booking(self, booking_id):
        row = self.bookings.get(booking_id)
        return dict(row) if row else None

    async def get_bookings_by_passenger(self, passenger_id):
        return [dict(b) for b in self.bookings.values() if b["passenger_id"] == passenger_id]

    async def update_status(self, booking_id, expected, new_status, take_seat=False, restore_seat=False):
        row = self.bookings.get(booking_id)
        if row is None or row["status"] not in expected:
            return None
        if take_seat:
            if self.seats <= 0:
                return False
            self.seats -= 1
        if restore_seat:
            self.seats = min(self.seats + 1, self.total_seats)
        row["status"] = new_status
        return True

    async def get_ride_status(self, ride_id):
        return self.ride_status if ride_id == self.ride_id else None


def service_for(store):
    return BookingService(store, store)


@pytest.mark.asyncio
async def test_two_passengers_race_for_last_seat():
    store = InMemoryBookings(uuid4(), seats=1)
    service = service_for(store)

    results = await asyncio.gather(
        service.book(store.ride_id, uuid4()),
        service.book(store.ride_id, uuid4()),
        return_exceptions=True,
    )

    booked = [r for r in results if not isinstance(r, Exception)]
    failed = [r for r in results if isinstance(r, Exception)]
    assert len(booked) == 1
    assert booked[0].status == BookingStatus.CONFIRMED
    assert len(failed) == 1
    assert isinstance(failed[0], NoSeatsAvailableError)
    assert store.seats == 0


@pytest.mark.asyncio
async def test_concurrent_bookings_never_exceed_capacity():
    store = InMemoryBookings(uuid4(), seats=3)
    service = service_for(store)

    results = await asyncio.gather(
        *(service.book(store.ride_id, uuid4()) for _ in range(10)),
        return_exceptions=True,
    )

    assert sum(1 for r in results if not isinstance(r, Exception)) == 3
    assert all(isinstance(r, NoSeatsAvailableError) for r in results if isinstance(r, Exception))
    assert store.seats == 0


@pytest.mark.asyncio
async def test_book_missing_ride():
    store = InMemoryBookings(uuid4(), seats=2)

    with pytest.raises(RideNotFoundError):
        await service_for(store).book(uuid4(), uuid4())


@pytest.mark.asyncio
async def test_book_ride_that_already_started():
    store = InMemoryBookings(uuid4(), seats=2, ride_status="in-progress")

    with pytest.raises(ValidationFailedError) as exc:
        await service_for(store).book(store.ride_id, uuid4())
    assert exc.value.details == {"status": "in-progress"}
    assert store.seats == 2


@pytest.mark.asyncio
async def test_cancel_confirmed_booking_restores_seat():
    store = InMemoryBookings(uuid4(), seats=1)
    service = service_for(store)
    booking = await service.book(store.ride_id, uuid4())

    cancelled = await service.update_status(booking.id, BookingStatus.CANCELLED)

    assert cancelled.status == BookingStatus.CANCELLED
    assert store.seats == 1


@pytest.mark.asyncio
async def test_cancelled_booking_is_final():
    store = InMemoryBookings(uuid4(), seats=1)
    service = service_for(store)
    booking = await service.book(store.ride_id, uuid4())
    await service.update_status(booking.id, BookingStatus.CANCELLED)

    with pytest.raises(InvalidTransitionError):
        await service.update_status(booking.id, BookingStatus.CONFIRMED)


@pytest.mark.asyncio
async def test_confirm_pending_booking_on_full_ride():
    store = InMemoryBookings(uuid4(), seats=0)
    booking_id = uuid4()
    store.bookings[booking_id] = {
        "id": booking_id,
        "passenger_id": uuid4(),
        "ride_id": store.ride_id,
        "status": "pending",
        "payment_status": False,
        "booking_time": datetime.now(timezone.utc),
    }

    with pytest.raises(NoSeatsAvailableError):
        await service_for(store).update_status(booking_id, BookingStatus.CONFIRMED)
    assert store.bookings[booking_id]["status"] == "pending"


@pytest.mark.asyncio
async def test_unknown_booking():
    with pytest.raises(BookingNotFoundError):
        await service_for(InMemoryBookings(uuid4(), seats=1)).get_booking(uuid4())


@pytest.mark.asyncio
async def test_repository_skips_insert_when_no_seat_taken(mock_db, mock_conn):
    mock_conn.fetchval = AsyncMock(return_value=None)

    result = await BookingRepository(mock_db).book_seat(uuid4(), uuid4())

    assert result is None
    mock_conn.fetchval.assert_awaited_once()
    assert mock_conn.fetchval.call_args.args[0] == TAKE_SEAT


@pytest.mark.asyncio
async def test_repository_inserts_confirmed_booking(mock_db, mock_conn):
    ride_id, passenger_id, booking_id = uuid4(), uuid4(), uuid4()
    mock_conn.fetchval = AsyncMock(side_effect=[ride_id, booking_id])

    result = await BookingRepository(mock_db).book_seat(ride_id, passenger_id)

    assert result == booking_id
    insert = mock_conn.fetchval.call_args_list[1]
    assert "'confirmed'" in insert.args[0]
    assert insert.args[1:] == (passenger_id, ride_id)
