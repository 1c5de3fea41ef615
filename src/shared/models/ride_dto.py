from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field
from src.shared.models.enums import (
    AdvanceEvent,
    RideEventType,
    RidePaymentMethod,
    RidePaymentStatus,
    RideStatus,
)
from src.shared.models.location_dto import LocationDTO, PointDTO
from src.shared.models.user_dto import UserBriefDTO


class FareDTO(BaseModel):
    base: float = 0.0
    distance: float = 0.0
    time: float = 0.0
    surge: float = 1.0
    total: float = 0.0


class FareInputs(BaseModel):
    base: float = Field(ge=0)
    distance: float = Field(default=0.0, ge=0)
    time: float = Field(default=0.0, ge=0)
    surge: float = Field(default=1.0, ge=1)
    total: Optional[float] = Field(default=None, ge=0)


class RidePaymentDTO(BaseModel):
    method: RidePaymentMethod = RidePaymentMethod.CASH
    status: RidePaymentStatus = RidePaymentStatus.PENDING
    transaction_id: Optional[str] = None


class RideDTO(BaseModel):
    id: UUID
    driver_id: Optional[UUID] = None
    passenger_id: Optional[UUID] = None
    vehicle_id: Optional[UUID] = None

    driver: Optional[UserBriefDTO] = None
    passenger: Optional[UserBriefDTO] = None

    pickup: LocationDTO
    dropoff: LocationDTO

    departure_time: Optional[datetime] = None
    total_seats: int = 1
    available_seats: int = 1

    estimated_distance: Optional[float] = None
    estimated_duration: Optional[float] = None
    actual_distance: Optional[float] = None
    actual_duration: Optional[float] = None

    fare: FareDTO
    status: RideStatus = RideStatus.PENDING
    payment: RidePaymentDTO = Field(default_factory=RidePaymentDTO)
    notes: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RideEventDTO(BaseModel):
    id: int
    ride_id: UUID
    type: RideEventType
    actor_id: Optional[UUID] = None
    location: Optional[PointDTO] = None
    reason: Optional[str] = None
    created_at: datetime


class CreateRideRequest(BaseModel):
    driver_id: Optional[UUID] = None
    passenger_id: Optional[UUID] = None
    vehicle_id: Optional[UUID] = None
    pickup: LocationDTO
    dropoff: LocationDTO
    fare: FareInputs
    total_seats: int = Field(default=1, ge=1, le=8)
    departure_time: Optional[datetime] = None
    estimated_distance: Optional[float] = Field(default=None, ge=0)
    estimated_duration: Optional[float] = Field(default=None, ge=0)
    payment_method: RidePaymentMethod = RidePaymentMethod.CASH
    notes: Optional[str] = Field(default=None, max_length=1000)


class UpdateRideRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    pickup: Optional[LocationDTO] = None
    dropoff: Optional[LocationDTO] = None
    departure_time: Optional[datetime] = None
    estimated_distance: Optional[float] = Field(default=None, ge=0)
    estimated_duration: Optional[float] = Field(default=None, ge=0)
    actual_distance: Optional[float] = Field(default=None, ge=0)
    actual_duration: Optional[float] = Field(default=None, ge=0)
    payment_method: Optional[RidePaymentMethod] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


class AdvanceRideRequest(BaseModel):
    event: AdvanceEvent
    location: Optional[PointDTO] = None


class CancelRideRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)
