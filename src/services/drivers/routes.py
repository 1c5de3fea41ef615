from uuid import UUID

from fastapi import APIRouter, Depends

from src.common.exceptions import ForbiddenError
from src.services.accounts.dependencies import get_account_service, get_current_user, require_driver
from src.services.accounts.service import AccountService
from src.services.drivers.dependencies import get_driver_service
from src.services.drivers.service import DriverService
from src.shared.models.common import ApiResponse
from src.shared.models.driver_dto import DriverDashboardDTO
from src.shared.models.enums import UserRole
from src.shared.models.user_dto import UserDTO

router = APIRouter(prefix="/drivers", tags=["Drivers"])


@router.get("/dashboard", response_model=ApiResponse[DriverDashboardDTO])
async def get_my_dashboard(
    current_user: UserDTO = Depends(require_driver),
    service: DriverService = Depends(get_driver_service)
):
    dashboard = await service.dashboard(current_user.id)
    return ApiResponse(message="Dashboard fetched successfully", data=dashboard)


@router.get("/{driver_id}/dashboard", response_model=ApiResponse[DriverDashboardDTO])
async def get_driver_dashboard(
    driver_id: UUID,
    current_user: UserDTO = Depends(require_driver),
    service: DriverService = Depends(get_driver_service)
):
    if current_user.role != UserRole.ADMIN and current_user.id != driver_id:
        raise ForbiddenError()
    dashboard = await service.dashboard(driver_id)
    return ApiResponse(message="Dashboard fetched successfully", data=dashboard)


@router.get("/{driver_id}", response_model=ApiResponse[UserDTO])
async def get_driver_profile(
    driver_id: UUID,
    _: UserDTO = Depends(get_current_user),
    service: AccountService = Depends(get_account_service)
):
    driver = await service.get_driver_profile(driver_id)
    return ApiResponse(message="Driver fetched successfully", data=driver)
