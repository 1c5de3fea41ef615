from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID
from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field
from src.shared.models.enums import DriverStatus, UserRole

PHONE_PATTERN = r"^\d{10,15}$"


def _normalize_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


NormalizedEmail = Annotated[EmailStr, BeforeValidator(_normalize_email)]


class VehicleSummaryDTO(BaseModel):
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    color: Optional[str] = None
    plate: Optional[str] = None


class DriverDetailsDTO(BaseModel):
    license_number: Optional[str] = None
    vehicle: Optional[VehicleSummaryDTO] = None
    status: DriverStatus = DriverStatus.PENDING_VERIFICATION


class UserDTO(BaseModel):
    id: UUID
    name: str
    email: str
    phone_number: str
    role: UserRole = UserRole.PASSENGER
    driver_details: Optional[DriverDetailsDTO] = None
    vehicle_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserBriefDTO(BaseModel):
    """Участник поездки в развёрнутых ссылках."""
    id: UUID
    name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None


class RegisterUserRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: NormalizedEmail
    phone_number: str = Field(pattern=PHONE_PATTERN)
    password: str = Field(min_length=6, max_length=72)


class RegisterDriverRequest(RegisterUserRequest):
    license_number: str = Field(min_length=1, max_length=50)
    vehicle: Optional[VehicleSummaryDTO] = None


class LoginRequest(BaseModel):
    email: NormalizedEmail
    password: str = Field(min_length=1)


class SessionDTO(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserDTO


class UpdateUserRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[NormalizedEmail] = None
    phone_number: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    # Принимается только для явного отказа
    role: Optional[UserRole] = None


class PasswordResetRequest(BaseModel):
    email: NormalizedEmail


class PasswordResetConfirm(BaseModel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=72)


class DriverStatusUpdateRequest(BaseModel):
    status: DriverStatus
