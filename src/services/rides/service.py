from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from src.common.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    RideNotFoundError,
    ValidationFailedError,
)
from src.common.logger import log_info, log_warning
from src.services.accounts.repository import UserRepository
from src.services.payments.earnings import EarningsRecorder
from src.services.rides.fares import FareCalculator, money
from src.services.rides.repository import RideRepository
from src.services.rides.state_machine import RideStateMachine
from src.shared.models.common import PaginatedResponse, PaginationParams
from src.shared.models.enums import AdvanceEvent, RideStatus, UserRole
from src.shared.models.location_dto import LocationDTO, PointDTO
from src.shared.models.ride_dto import (
    CreateRideRequest,
    FareDTO,
    RideDTO,
    RideEventDTO,
    RidePaymentDTO,
    UpdateRideRequest,
)
from src.shared.models.user_dto import UserBriefDTO

DELETABLE_STATUSES = (RideStatus.PENDING.value, RideStatus.CANCELLED.value, RideStatus.REJECTED.value)
OPEN_STATUSES = [s.value for s in RideStatus if s not in RideStateMachine.TERMINAL_STATES]


def brief_from_row(data: dict, prefix: str) -> Optional[UserBriefDTO]:
    user_id = data.get(f"{prefix}_id")
    name = data.get(f"{prefix}_name")
    if user_id is None or name is None:
        return None
    return UserBriefDTO(
        id=user_id,
        name=name,
        email=data.get(f"{prefix}_email"),
        phone_number=data.get(f"{prefix}_phone"),
    )


def ride_from_row(data: dict) -> RideDTO:
    return RideDTO(
        id=data["id"],
        driver_id=data.get("driver_id"),
        passenger_id=data.get("passenger_id"),
        vehicle_id=data.get("vehicle_id"),
        driver=brief_from_row(data, "driver"),
        passenger=brief_from_row(data, "passenger"),
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
        total_seats=data["total_seats"],
        available_seats=data["available_seats"],
        estimated_distance=data.get("estimated_distance"),
        estimated_duration=data.get("estimated_duration"),
        actual_distance=data.get("actual_distance"),
        actual_duration=data.get("actual_duration"),
        fare=FareDTO(
            base=data["fare_base"],
            distance=data["fare_distance"],
            time=data["fare_time"],
            surge=data["fare_surge"],
            total=data["fare_total"],
        ),
        status=data["status"],
        payment=RidePaymentDTO(
            method=data.get("payment_method") or "cash",
            status=data.get("payment_status") or "pending",
            transaction_id=data.get("payment_transaction_id"),
        ),
        notes=data.get("notes"),
        created_at=data["created_at"],
        updated_at=data["updated_at"],
    )


def event_from_row(data: dict) -> RideEventDTO:
    location = None
    if data.get("lat") is not None and data.get("lon") is not None:
        location = PointDTO(lat=data["lat"], lon=data["lon"])
    return RideEventDTO(
        id=data["id"],
        ride_id=data["ride_id"],
        type=data["type"],
        actor_id=data.get("actor_id"),
        location=location,
        reason=data.get("reason"),
        created_at=data["created_at"],
    )


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class RideService:
    def __init__(
        self,
        repository: RideRepository,
        user_repository: UserRepository,
        earnings_recorder: EarningsRecorder,
        fare_calculator: FareCalculator,
    ):
        self.repository = repository
        self.user_repository = user_repository
        self.earnings_recorder = earnings_recorder
        self.fare_calculator = fare_calculator

    async def _require_user(self, user_id: UUID, role: Optional[UserRole], label: str) -> dict:
        user = await self.user_repository.get_user_by_id(user_id)
        if not user or (role is not None and user["role"] != role.value):
            raise NotFoundError(f"{label} not found")
        return user

    async def create_ride(self, request: CreateRideRequest, actor_id: Optional[UUID] = None) -> RideDTO:
        """Creates a pending ride with a validated fare and a 'requested' event."""
        if request.driver_id is None and request.passenger_id is None:
            raise ValidationFailedError("A ride needs a driver or a passenger")

        vehicle_id = request.vehicle_id
        if request.driver_id is not None:
            driver = await self._require_user(request.driver_id, UserRole.DRIVER, "Driver")
            vehicle_id = vehicle_id or driver.get("vehicle_id")
        if request.passenger_id is not None:
            await self._require_user(request.passenger_id, None, "Passenger")

        fare = self.fare_calculator.resolve(request.fare)

        ride_data = {
            "driver_id": request.driver_id,
            "passenger_id": request.passenger_id,
            "vehicle_id": vehicle_id,
            "pickup_address": request.pickup.address,
            "pickup_lat": request.pickup.lat,
            "pickup_lon": request.pickup.lon,
            "dropoff_address": request.dropoff.address,
            "dropoff_lat": request.dropoff.lat,
            "dropoff_lon": request.dropoff.lon,
            "departure_time": _as_utc(request.departure_time),
            "total_seats": request.total_seats,
            "available_seats": request.total_seats,
            "estimated_distance": request.estimated_distance,
            "estimated_duration": request.estimated_duration,
            "fare_base": money(fare.base),
            "fare_distance": money(fare.distance),
            "fare_time": money(fare.time),
            "fare_surge": money(fare.surge),
            "fare_total": money(fare.total),
            "status": RideStatus.PENDING.value,
            "payment_method": request.payment_method.value,
            "notes": request.notes,
        }
        ride_id = await self.repository.create_ride(ride_data, actor_id)
        await log_info(f"Ride {ride_id} created, fare total {fare.total}")
        return await self.get_ride(ride_id)

    async def get_ride(self, ride_id: UUID) -> RideDTO:
        data = await self.repository.get_ride(ride_id)
        if not data:
            raise RideNotFoundError()
        return ride_from_row(data)

    async def get_all_rides(self, pagination: PaginationParams) -> PaginatedResponse[RideDTO]:
        rows = await self.repository.get_all_rides(limit=pagination.limit, offset=pagination.offset)
        total = await self.repository.count_rides()
        return PaginatedResponse[RideDTO].create(
            items=[ride_from_row(row) for row in rows],
            total=total,
            pagination=pagination,
        )

    async def get_rides_by_driver(
        self,
        driver_id: UUID,
        pagination: PaginationParams,
        status: Optional[RideStatus] = None,
    ) -> PaginatedResponse[RideDTO]:
        status_value = status.value if status else None
        rows = await self.repository.get_rides_by_driver(
            driver_id, status_value, limit=pagination.limit, offset=pagination.offset
        )
        total = await self.repository.count_rides_by_driver(driver_id, status_value)
        return PaginatedResponse[RideDTO].create(
            items=[ride_from_row(row) for row in rows],
            total=total,
            pagination=pagination,
        )

    async def get_available_rides(self, pagination: PaginationParams) -> PaginatedResponse[RideDTO]:
        """Pending rides with seats left and a departure still ahead."""
        now = datetime.now(timezone.utc)
        rows = await self.repository.get_available_rides(now, limit=pagination.limit, offset=pagination.offset)
        total = await self.repository.count_available_rides(now)
        return PaginatedResponse[RideDTO].create(
            items=[ride_from_row(row) for row in rows],
            total=total,
            pagination=pagination,
        )

    async def get_events(self, ride_id: UUID) -> List[RideEventDTO]:
        if await self.repository.get_ride_status(ride_id) is None:
            raise RideNotFoundError()
        rows = await self.repository.get_events(ride_id)
        return [event_from_row(row) for row in rows]

    async def _raise_failed_swap(self, ride_id: UUID, action: str) -> None:
        """A lost compare-and-swap: tell a missing ride apart from a wrong status."""
        current = await self.repository.get_ride_status(ride_id)
        if current is None:
            raise RideNotFoundError()
        await log_warning(f"Rejected '{action}' on ride {ride_id} in status '{current}'")
        raise InvalidTransitionError(
            f"Cannot {action} a ride in status '{current}'",
            details={"status": current},
        )

    async def _decide_pending(self, ride_id: UUID, driver_id: UUID, new_status: RideStatus) -> RideDTO:
        ride = await self.repository.get_ride(ride_id)
        if not ride:
            raise RideNotFoundError()
        driver = await self._require_user(driver_id, UserRole.DRIVER, "Driver")
        if ride["driver_id"] is not None and ride["driver_id"] != driver_id:
            raise InvalidTransitionError("Ride is assigned to another driver")

        action = "accept" if new_status == RideStatus.ACCEPTED else "reject"
        swapped = await self.repository.transition(
            ride_id,
            expected=[RideStatus.PENDING.value],
            new_status=new_status.value,
            event_type=RideStateMachine.event_for(new_status).value,
            actor_id=driver_id,
            driver_id=driver_id if new_status == RideStatus.ACCEPTED else None,
            vehicle_id=driver.get("vehicle_id") if new_status == RideStatus.ACCEPTED else None,
            cancel_bookings=new_status == RideStatus.REJECTED,
        )
        if not swapped:
            await self._raise_failed_swap(ride_id, action)

        await log_info(f"Ride {ride_id} {new_status.value} by driver {driver_id}")
        return await self.get_ride(ride_id)

    async def accept_ride(self, ride_id: UUID, driver_id: UUID) -> RideDTO:
        """pending -> accepted"""
        return await self._decide_pending(ride_id, driver_id, RideStatus.ACCEPTED)

    async def reject_ride(self, ride_id: UUID, driver_id: UUID) -> RideDTO:
        """pending -> rejected"""
        return await self._decide_pending(ride_id, driver_id, RideStatus.REJECTED)

    async def advance_ride(
        self,
        ride_id: UUID,
        event: AdvanceEvent,
        location: Optional[PointDTO] = None,
        actor_id: Optional[UUID] = None,
    ) -> RideDTO:
        """
        accepted -> arrived -> in-progress -> completed, one step per event.
        Entering completed records the driver's earning in the same transaction.
        """
        source, target = RideStateMachine.advance_step(event)
        on_swap = None
        if target == RideStatus.COMPLETED:
            on_swap = self._record_completion_earning
        swapped = await self.repository.transition(
            ride_id,
            expected=[source.value],
            new_status=target.value,
            event_type=RideStateMachine.event_for(target).value,
            actor_id=actor_id,
            lat=location.lat if location else None,
            lon=location.lon if location else None,
            on_swap=on_swap,
        )
        if not swapped:
            await self._raise_failed_swap(ride_id, f"apply '{AdvanceEvent(event).value}' to")

        ride = await self.repository.get_ride(ride_id)
        await log_info(f"Ride {ride_id} moved to {target.value}")
        return ride_from_row(ride)

    async def _record_completion_earning(self, conn, ride: dict) -> None:
        await self.earnings_recorder.record_for_completed_ride(ride, conn=conn)

    async def cancel_ride(
        self,
        ride_id: UUID,
        actor_id: Optional[UUID] = None,
        reason: Optional[str] = None,
    ) -> RideDTO:
        """Any non-terminal status -> cancelled; live bookings are cancelled with it."""
        swapped = await self.repository.transition(
            ride_id,
            expected=OPEN_STATUSES,
            new_status=RideStatus.CANCELLED.value,
            event_type=RideStateMachine.event_for(RideStatus.CANCELLED).value,
            actor_id=actor_id,
            reason=reason,
            cancel_bookings=True,
        )
        if not swapped:
            await self._raise_failed_swap(ride_id, "cancel")

        await log_info(f"Ride {ride_id} cancelled")
        return await self.get_ride(ride_id)

    async def update_ride(self, ride_id: UUID, patch: UpdateRideRequest) -> RideDTO:
        fields = patch.model_dump(exclude_unset=True)
        columns = {}
        for side in ("pickup", "dropoff"):
            location = fields.pop(side, None)
            if location:
                columns[f"{side}_address"] = location["address"]
                columns[f"{side}_lat"] = location["lat"]
                columns[f"{side}_lon"] = location["lon"]
        if fields.get("departure_time") is not None:
            fields["departure_time"] = _as_utc(fields["departure_time"])
        # NOT NULL column: an explicit null leaves it unchanged
        if fields.get("payment_method") is not None:
            fields["payment_method"] = str(fields["payment_method"])
        else:
            fields.pop("payment_method", None)
        columns.update(fields)

        if not await self.repository.update_ride(ride_id, columns):
            raise RideNotFoundError()
        await log_info(f"Ride {ride_id} updated fields {sorted(columns)}")
        return await self.get_ride(ride_id)

    async def delete_ride(self, ride_id: UUID) -> None:
        """Only pending, cancelled or rejected rides can be removed."""
        if not await self.repository.delete_ride(ride_id, DELETABLE_STATUSES):
            await self._raise_failed_swap(ride_id, "delete")
        await log_info(f"Ride {ride_id} deleted")
