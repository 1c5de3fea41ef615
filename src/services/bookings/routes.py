from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.common.exceptions import ForbiddenError
from src.services.accounts.dependencies import get_current_user
from src.services.bookings.dependencies import get_booking_service
from src.services.bookings.service import BookingService
from src.shared.models.booking_dto import BookingDTO, CreateBookingRequest, UpdateBookingStatusRequest
from src.shared.models.common import ApiResponse
from src.shared.models.enums import UserRole
from src.shared.models.user_dto import UserDTO

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("/", response_model=ApiResponse[BookingDTO], status_code=status.HTTP_201_CREATED)
async def book_ride(
    request: CreateBookingRequest,
    current_user: UserDTO = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service)
):
    booking = await service.book(request.ride_id, current_user.id)
    return ApiResponse(message="Ride booked successfully", data=booking)


@router.get("/me", response_model=ApiResponse[List[BookingDTO]])
async def get_my_bookings(
    current_user: UserDTO = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service)
):
    bookings = await service.get_bookings_by_passenger(current_user.id)
    return ApiResponse(message="Bookings fetched successfully", data=bookings)


@router.get("/passenger/{passenger_id}", response_model=ApiResponse[List[BookingDTO]])
async def get_passenger_bookings(
    passenger_id: UUID,
    current_user: UserDTO = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service)
):
    if current_user.role != UserRole.ADMIN and current_user.id != passenger_id:
        raise ForbiddenError()
    bookings = await service.get_bookings_by_passenger(passenger_id)
    return ApiResponse(message="Bookings fetched successfully", data=bookings)


@router.patch("/{booking_id}/status", response_model=ApiResponse[BookingDTO])
async def update_booking_status(
    booking_id: UUID,
    request: UpdateBookingStatusRequest,
    current_user: UserDTO = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service)
):
    booking = await service.get_booking(booking_id)
    if current_user.role != UserRole.ADMIN and booking.passenger_id != current_user.id:
        raise ForbiddenError("Not the owner of this booking")
    booking = await service.update_status(booking_id, request.status)
    return ApiResponse(message="Booking status updated", data=booking)
