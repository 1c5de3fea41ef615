from datetime import date, datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from src.shared.models.enums import VehicleType

MIN_VEHICLE_YEAR = 1990


def max_vehicle_year() -> int:
    return datetime.now().year + 1


class RegistrationDTO(BaseModel):
    number: Optional[str] = None
    expiry_date: Optional[date] = None
    document_url: Optional[str] = None


class InsuranceDTO(BaseModel):
    provider: Optional[str] = None
    policy_number: Optional[str] = None
    expiry_date: Optional[date] = None
    document_url: Optional[str] = None


class VehicleDTO(BaseModel):
    id: UUID
    driver_id: UUID
    make: str
    model: str
    year: int
    color: str
    license_plate: str
    vehicle_type: VehicleType = VehicleType.SEDAN
    is_active: bool = True
    registration: RegistrationDTO = Field(default_factory=RegistrationDTO)
    insurance: InsuranceDTO = Field(default_factory=InsuranceDTO)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class _VehicleFields(BaseModel):
    @field_validator("license_plate", mode="before", check_fields=False)
    @classmethod
    def normalize_plate(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @model_validator(mode="after")
    def check_year(self):
        year = getattr(self, "year", None)
        if year is not None and not (MIN_VEHICLE_YEAR <= year <= max_vehicle_year()):
            raise ValueError(f"year must be between {MIN_VEHICLE_YEAR} and {max_vehicle_year()}")
        return self


class CreateVehicleRequest(_VehicleFields):
    make: str = Field(min_length=1, max_length=50)
    model: str = Field(min_length=1, max_length=50)
    year: int
    color: str = Field(min_length=1, max_length=30)
    license_plate: str = Field(min_length=1, max_length=20)
    vehicle_type: VehicleType = VehicleType.SEDAN
    registration: Optional[RegistrationDTO] = None
    insurance: Optional[InsuranceDTO] = None


class UpdateVehicleRequest(_VehicleFields):
    model_config = ConfigDict(extra="forbid")

    make: Optional[str] = Field(default=None, min_length=1, max_length=50)
    model: Optional[str] = Field(default=None, min_length=1, max_length=50)
    year: Optional[int] = None
    color: Optional[str] = Field(default=None, min_length=1, max_length=30)
    license_plate: Optional[str] = Field(default=None, min_length=1, max_length=20)
    vehicle_type: Optional[VehicleType] = None
    registration: Optional[RegistrationDTO] = None
    insurance: Optional[InsuranceDTO] = None
