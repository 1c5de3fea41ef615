from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.services.accounts.dependencies import get_current_user, require_driver
from src.services.vehicles.dependencies import get_vehicle_service
from src.services.vehicles.service import VehicleService
from src.shared.models.common import ApiResponse
from src.shared.models.enums import UserRole
from src.shared.models.user_dto import UserDTO
from src.shared.models.vehicle_dto import CreateVehicleRequest, UpdateVehicleRequest, VehicleDTO

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


@router.post("/", response_model=ApiResponse[VehicleDTO], status_code=status.HTTP_201_CREATED)
async def register_vehicle(
    request: CreateVehicleRequest,
    current_user: UserDTO = Depends(require_driver),
    service: VehicleService = Depends(get_vehicle_service)
):
    vehicle = await service.register_vehicle(current_user.id, request)
    return ApiResponse(message="Vehicle registered successfully", data=vehicle)


@router.get("/me", response_model=ApiResponse[VehicleDTO])
async def get_my_vehicle(
    current_user: UserDTO = Depends(require_driver),
    service: VehicleService = Depends(get_vehicle_service)
):
    vehicle = await service.get_vehicle_by_driver(current_user.id)
    return ApiResponse(message="Vehicle fetched successfully", data=vehicle)


@router.get("/driver/{driver_id}", response_model=ApiResponse[VehicleDTO])
async def get_driver_vehicle(
    driver_id: UUID,
    _: UserDTO = Depends(get_current_user),
    service: VehicleService = Depends(get_vehicle_service)
):
    vehicle = await service.get_vehicle_by_driver(driver_id)
    return ApiResponse(message="Vehicle fetched successfully", data=vehicle)


@router.get("/{vehicle_id}", response_model=ApiResponse[VehicleDTO])
async def get_vehicle(
    vehicle_id: UUID,
    _: UserDTO = Depends(get_current_user),
    service: VehicleService = Depends(get_vehicle_service)
):
    vehicle = await service.get_vehicle(vehicle_id)
    return ApiResponse(message="Vehicle fetched successfully", data=vehicle)


@router.patch("/{vehicle_id}", response_model=ApiResponse[VehicleDTO])
async def update_vehicle(
    vehicle_id: UUID,
    request: UpdateVehicleRequest,
    current_user: UserDTO = Depends(require_driver),
    service: VehicleService = Depends(get_vehicle_service)
):
    owner = None if current_user.role == UserRole.ADMIN else current_user.id
    vehicle = await service.update_vehicle(vehicle_id, request, driver_id=owner)
    return ApiResponse(message="Vehicle updated successfully", data=vehicle)


@router.delete("/{vehicle_id}", response_model=ApiResponse[None])
async def delete_vehicle(
    vehicle_id: UUID,
    current_user: UserDTO = Depends(require_driver),
    service: VehicleService = Depends(get_vehicle_service)
):
    await service.delete_vehicle(vehicle_id, current_user.id)
    return ApiResponse(message="Vehicle deleted successfully")
