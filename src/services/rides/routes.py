from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.common.exceptions import ForbiddenError
from src.services.accounts.dependencies import get_current_user, require_driver
from src.services.rides.dependencies import get_ride_service
from src.services.rides.service import RideService
from src.shared.models.common import ApiResponse, PaginatedResponse, PaginationParams
from src.shared.models.enums import RideStatus, UserRole
from src.shared.models.ride_dto import (
    AdvanceRideRequest,
    CancelRideRequest,
    CreateRideRequest,
    RideDTO,
    RideEventDTO,
    UpdateRideRequest,
)
from src.shared.models.user_dto import UserDTO

router = APIRouter(prefix="/rides", tags=["Rides"])


def ensure_participant(ride: RideDTO, user: UserDTO, driver_only: bool = False) -> None:
    if user.role == UserRole.ADMIN:
        return
    if ride.driver_id == user.id:
        return
    if not driver_only and ride.passenger_id == user.id:
        return
    raise ForbiddenError("Not a participant of this ride")


@router.post("/", response_model=ApiResponse[RideDTO], status_code=status.HTTP_201_CREATED)
async def create_ride(
    request: CreateRideRequest,
    current_user: UserDTO = Depends(get_current_user),
    service: RideService = Depends(get_ride_service)
):
    # Without explicit parties the caller takes the seat matching their role
    if request.driver_id is None and request.passenger_id is None:
        if current_user.role == UserRole.DRIVER:
            request.driver_id = current_user.id
        else:
            request.passenger_id = current_user.id
    ride = await service.create_ride(request, actor_id=current_user.id)
    return ApiResponse(message="Ride created successfully", data=ride)


@router.get("/", response_model=ApiResponse[PaginatedResponse[RideDTO]])
async def get_all_rides(
    pagination: PaginationParams = Depends(),
    _: UserDTO = Depends(get_current_user),
    service: RideService = Depends(get_ride_service)
):
    page = await service.get_all_rides(pagination)
    return ApiResponse(message="Rides fetched successfully", data=page)


@router.get("/available", response_model=ApiResponse[PaginatedResponse[RideDTO]])
async def get_available_rides(
    pagination: PaginationParams = Depends(),
    service: RideService = Depends(get_ride_service)
):
    page = await service.get_available_rides(pagination)
    return ApiResponse(message="Available rides fetched successfully", data=page)


@router.get("/driver/{driver_id}", response_model=ApiResponse[PaginatedResponse[RideDTO]])
async def get_rides_by_driver(
    driver_id: UUID,
    status: Optional[RideStatus] = None,
    pagination: PaginationParams = Depends(),
    _: UserDTO = Depends(get_current_user),
    service: RideService = Depends(get_ride_service)
):
    page = await service.get_rides_by_driver(driver_id, pagination, status=status)
    return ApiResponse(message="Driver rides fetched successfully", data=page)


@router.get("/{ride_id}", response_model=ApiResponse[RideDTO])
async def get_ride(
    ride_id: UUID,
    _: UserDTO = Depends(get_current_user),
    service: RideService = Depends(get_ride_service)
):
    ride = await service.get_ride(ride_id)
    return ApiResponse(message="Ride fetched successfully", data=ride)


@router.get("/{ride_id}/events", response_model=ApiResponse[List[RideEventDTO]])
async def get_ride_events(
    ride_id: UUID,
    _: UserDTO = Depends(get_current_user),
    service: RideService = Depends(get_ride_service)
):
    events = await service.get_events(ride_id)
    return ApiResponse(message="Ride events fetched successfully", data=events)


@router.post("/{ride_id}/accept", response_model=ApiResponse[RideDTO])
async def accept_ride(
    ride_id: UUID,
    current_user: UserDTO = Depends(require_driver),
    service: RideService = Depends(get_ride_service)
):
    ride = await service.accept_ride(ride_id, current_user.id)
    return ApiResponse(message="Ride accepted successfully", data=ride)


@router.post("/{ride_id}/reject", response_model=ApiResponse[RideDTO])
async def reject_ride(
    ride_id: UUID,
    current_user: UserDTO = Depends(require_driver),
    service: RideService = Depends(get_ride_service)
):
    ride = await service.reject_ride(ride_id, current_user.id)
    return ApiResponse(message="Ride rejected", data=ride)


@router.post("/{ride_id}/advance", response_model=ApiResponse[RideDTO])
async def advance_ride(
    ride_id: UUID,
    request: AdvanceRideRequest,
    current_user: UserDTO = Depends(require_driver),
    service: RideService = Depends(get_ride_service)
):
    ensure_participant(await service.get_ride(ride_id), current_user, driver_only=True)
    ride = await service.advance_ride(ride_id, request.event, request.location, actor_id=current_user.id)
    return ApiResponse(message=f"Ride status is now {ride.status.value}", data=ride)


@router.post("/{ride_id}/cancel", response_model=ApiResponse[RideDTO])
async def cancel_ride(
    ride_id: UUID,
    request: CancelRideRequest,
    current_user: UserDTO = Depends(get_current_user),
    service: RideService = Depends(get_ride_service)
):
    ensure_participant(await service.get_ride(ride_id), current_user)
    ride = await service.cancel_ride(ride_id, actor_id=current_user.id, reason=request.reason)
    return ApiResponse(message="Ride cancelled", data=ride)


@router.patch("/{ride_id}", response_model=ApiResponse[RideDTO])
async def update_ride(
    ride_id: UUID,
    request: UpdateRideRequest,
    current_user: UserDTO = Depends(get_current_user),
    service: RideService = Depends(get_ride_service)
):
    ensure_participant(await service.get_ride(ride_id), current_user)
    ride = await service.update_ride(ride_id, request)
    return ApiResponse(message="Ride updated successfully", data=ride)


@router.delete("/{ride_id}", response_model=ApiResponse[None])
async def delete_ride(
    ride_id: UUID,
    current_user: UserDTO = Depends(get_current_user),
    service: RideService = Depends(get_ride_service)
):
    ensure_participant(await service.get_ride(ride_id), current_user)
    await service.delete_ride(ride_id)
    return ApiResponse(message="Ride deleted successfully")
