from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.common.exceptions import ForbiddenError
from src.services.accounts.dependencies import get_account_service, get_current_user, require_admin
from src.services.accounts.service import AccountService
from src.shared.models.common import ApiResponse, PaginatedResponse, PaginationParams
from src.shared.models.enums import UserRole
from src.shared.models.user_dto import (
    DriverStatusUpdateRequest,
    LoginRequest,
    PasswordResetConfirm,
    PasswordResetRequest,
    RegisterDriverRequest,
    RegisterUserRequest,
    SessionDTO,
    UpdateUserRequest,
    UserDTO,
)

auth_router = APIRouter(prefix="/auth", tags=["Auth"])
users_router = APIRouter(prefix="/users", tags=["Users"])


def ensure_self_or_admin(current_user: UserDTO, user_id: UUID) -> None:
    if current_user.id != user_id and current_user.role != UserRole.ADMIN:
        raise ForbiddenError()


@auth_router.post("/signup", response_model=ApiResponse[UserDTO], status_code=status.HTTP_201_CREATED)
async def signup(
    request: RegisterUserRequest,
    service: AccountService = Depends(get_account_service)
):
    user = await service.register(request)
    return ApiResponse(message="User registered successfully", data=user)


@auth_router.post("/driver/signup", response_model=ApiResponse[UserDTO], status_code=status.HTTP_201_CREATED)
async def driver_signup(
    request: RegisterDriverRequest,
    service: AccountService = Depends(get_account_service)
):
    user = await service.register_driver(request)
    return ApiResponse(message="Driver registered successfully", data=user)


@auth_router.post("/login", response_model=ApiResponse[SessionDTO])
async def login(
    request: LoginRequest,
    service: AccountService = Depends(get_account_service)
):
    session = await service.authenticate(request.email, request.password)
    return ApiResponse(message="Login successful", data=session)


@auth_router.post("/driver/login", response_model=ApiResponse[SessionDTO])
async def driver_login(
    request: LoginRequest,
    service: AccountService = Depends(get_account_service)
):
    session = await service.authenticate(request.email, request.password, role=UserRole.DRIVER)
    return ApiResponse(message="Login successful", data=session)


@auth_router.get("/me", response_model=ApiResponse[UserDTO])
async def get_profile(current_user: UserDTO = Depends(get_current_user)):
    return ApiResponse(message="Profile fetched successfully", data=current_user)


@auth_router.patch("/me", response_model=ApiResponse[UserDTO])
async def update_profile(
    request: UpdateUserRequest,
    current_user: UserDTO = Depends(get_current_user),
    service: AccountService = Depends(get_account_service)
):
    user = await service.update_user(current_user.id, request)
    return ApiResponse(message="Profile updated successfully", data=user)


@auth_router.post("/password/forgot", response_model=ApiResponse[None])
async def forgot_password(
    request: PasswordResetRequest,
    service: AccountService = Depends(get_account_service)
):
    message = await service.request_password_reset(request.email)
    return ApiResponse(message=message)


@auth_router.post("/password/reset", response_model=ApiResponse[None])
async def reset_password(
    request: PasswordResetConfirm,
    service: AccountService = Depends(get_account_service)
):
    await service.confirm_password_reset(request.token, request.new_password)
    return ApiResponse(message="Password has been reset")


@users_router.get("/", response_model=ApiResponse[PaginatedResponse[UserDTO]])
async def get_all_users(
    pagination: PaginationParams = Depends(),
    _: UserDTO = Depends(require_admin),
    service: AccountService = Depends(get_account_service)
):
    page = await service.get_all_users(pagination)
    return ApiResponse(message="Users fetched successfully", data=page)


@users_router.get("/{user_id}", response_model=ApiResponse[UserDTO])
async def get_user(
    user_id: UUID,
    _: UserDTO = Depends(get_current_user),
    service: AccountService = Depends(get_account_service)
):
    user = await service.get_user(user_id)
    return ApiResponse(message="User fetched successfully", data=user)


@users_router.patch("/{user_id}", response_model=ApiResponse[UserDTO])
async def update_user(
    user_id: UUID,
    request: UpdateUserRequest,
    current_user: UserDTO = Depends(get_current_user),
    service: AccountService = Depends(get_account_service)
):
    ensure_self_or_admin(current_user, user_id)
    user = await service.update_user(user_id, request)
    return ApiResponse(message="User updated successfully", data=user)


@users_router.delete("/{user_id}", response_model=ApiResponse[None])
async def delete_user(
    user_id: UUID,
    current_user: UserDTO = Depends(get_current_user),
    service: AccountService = Depends(get_account_service)
):
    ensure_self_or_admin(current_user, user_id)
    await service.delete_user(user_id)
    return ApiResponse(message="User deleted successfully")


@users_router.patch("/{user_id}/driver-status", response_model=ApiResponse[UserDTO])
async def set_driver_status(
    user_id: UUID,
    request: DriverStatusUpdateRequest,
    _: UserDTO = Depends(require_admin),
    service: AccountService = Depends(get_account_service)
):
    user = await service.set_driver_status(user_id, request.status)
    return ApiResponse(message="Driver status updated", data=user)
