from typing import Dict, List, Tuple
from uuid import UUID

from src.common.exceptions import (
    BookingNotFoundError,
    InvalidTransitionError,
    NoSeatsAvailableError,
    RideNotFoundError,
    ValidationFailedError,
)
from src.common.logger import log_info
from src.services.bookings.repository import BookingRepository
from src.services.rides.repository import RideRepository
from src.services.rides.service import brief_from_row
from src.shared.models.booking_dto import BookedRideDTO, BookingDTO
from src.shared.models.enums import BookingStatus, RideStatus
from src.shared.models.location_dto import LocationDTO

BOOKABLE_RIDE_STATUSES = (RideStatus.PENDING.value, RideStatus.ACCEPTED.value)

BOOKING_TRANSITIONS: Dict[BookingStatus, Tuple[BookingStatus, ...]] = {
    BookingStatus.PENDING: (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
    BookingStatus.CONFIRMED: (BookingStatus.CANCELLED,),
    BookingStatus.CANCELLED: (),
}


def booking_from_row(data: dict) -> BookingDTO:
    ride = None
    if data.get("pickup_address") is not None:
        ride = BookedRideDTO(
            id=data["ride_id"],
            pickup=LocationDTO(
                address=data["pickup_address"],
                lat=data["pickup_lat"],
                lon=data["pickup_lon"],
            ),
            dropoff=LocationDTO(
                address=data["dropoff_address"],
                lat=data["dropoff_lat"],
                lon=data["dropoff_lon"],
            ),
            departure_time=data.get("departure_time"),
            status=data["ride_status"],
            fare_total=float(data.get("fare_total") or 0),
            driver=brief_from_row(data, "driver"),
        )
    return BookingDTO(
        id=data["id"],
        passenger_id=data["passenger_id"],
        ride_id=data["ride_id"],
        status=data["status"],
        payment_status=data.get("payment_status", False),
        booking_time=data["booking_time"],
        ride=ride,
        passenger=brief_from_row(data, "passenger"),
    )


class BookingService:
    def __init__(self, repository: BookingRepository, ride_repository: RideRepository):
        self.repository = repository
        self.ride_repository = ride_repository

    async def book(self, ride_id: UUID, passenger_id: UUID) -> BookingDTO:
        """
        Reserve one seat on a ride.

        The seat decrement is a single conditional update, so concurrent
        bookings can never take more seats than the ride has.
        """
        booking_id = await self.repository.book_seat(ride_id, passenger_id)
        if booking_id is None:
            status = await self.ride_repository.get_ride_status(ride_id)
            if status is None:
                raise RideNotFoundError()
            if status not in BOOKABLE_RIDE_STATUSES:
                raise ValidationFailedError(
                    "Ride is not open for booking",
                    details={"status": status},
                )
            raise NoSeatsAvailableError()

        await log_info(f"Passenger {passenger_id} booked a seat on ride {ride_id}")
        return await self.get_booking(booking_id)

    async def get_booking(self, booking_id: UUID) -> BookingDTO:
        data = await self.repository.get_booking(booking_id)
        if not data:
            raise BookingNotFoundError()
        return booking_from_row(data)

    async def get_bookings_by_passenger(self, passenger_id: UUID) -> List[BookingDTO]:
        rows = await self.repository.get_bookings_by_passenger(passenger_id)
        return [booking_from_row(row) for row in rows]

    async def update_status(self, booking_id: UUID, new_status: BookingStatus) -> BookingDTO:
        current = await self.get_booking(booking_id)
        if new_status not in BOOKING_TRANSITIONS[current.status]:
            raise InvalidTransitionError(
                f"Cannot change booking from {current.status.value} to {new_status.value}"
            )

        result = await self.repository.update_status(
            booking_id,
            expected=[current.status.value],
            new_status=new_status.value,
            take_seat=current.status == BookingStatus.PENDING and new_status == BookingStatus.CONFIRMED,
            restore_seat=current.status == BookingStatus.CONFIRMED and new_status == BookingStatus.CANCELLED,
        )
        if result is None:
            # Lost a race with another status change
            raise InvalidTransitionError("Booking status changed concurrently")
        if result is False:
            raise NoSeatsAvailableError()

        await log_info(f"Booking {booking_id}: {current.status.value} -> {new_status.value}")
        return await self.get_booking(booking_id)
