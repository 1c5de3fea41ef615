from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel
from src.shared.models.enums import BookingStatus, RideStatus
from src.shared.models.location_dto import LocationDTO
from src.shared.models.user_dto import UserBriefDTO


class BookedRideDTO(BaseModel):
    id: UUID
    pickup: LocationDTO
    dropoff: LocationDTO
    departure_time: Optional[datetime] = None
    status: RideStatus
    fare_total: float = 0.0
    driver: Optional[UserBriefDTO] = None


class BookingDTO(BaseModel):
    id: UUID
    passenger_id: UUID
    ride_id: UUID
    status: BookingStatus = BookingStatus.PENDING
    payment_status: bool = False
    booking_time: datetime

    ride: Optional[BookedRideDTO] = None
    passenger: Optional[UserBriefDTO] = None

    class Config:
        from_attributes = True


class CreateBookingRequest(BaseModel):
    ride_id: UUID


class UpdateBookingStatusRequest(BaseModel):
    status: BookingStatus
