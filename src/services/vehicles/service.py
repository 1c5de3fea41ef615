from typing import Optional
from uuid import UUID

from src.common.exceptions import NotFoundError
from src.common.logger import log_info
from src.services.accounts.repository import UserRepository
from src.services.vehicles.repository import VehicleRepository
from src.shared.models.enums import UserRole
from src.shared.models.vehicle_dto import (
    CreateVehicleRequest,
    InsuranceDTO,
    RegistrationDTO,
    UpdateVehicleRequest,
    VehicleDTO,
)


def _flatten(data: dict) -> dict:
    """Turns registration/insurance sub-documents into column values."""
    registration = data.pop("registration", None)
    insurance = data.pop("insurance", None)
    if registration is not None:
        data["registration_number"] = registration.get("number")
        data["registration_expiry"] = registration.get("expiry_date")
        data["registration_document_url"] = registration.get("document_url")
    if insurance is not None:
        data["insurance_provider"] = insurance.get("provider")
        data["insurance_policy_number"] = insurance.get("policy_number")
        data["insurance_expiry"] = insurance.get("expiry_date")
        data["insurance_document_url"] = insurance.get("document_url")
    if data.get("vehicle_type") is not None:
        data["vehicle_type"] = str(data["vehicle_type"])
    return data


def vehicle_from_row(data: dict) -> VehicleDTO:
    return VehicleDTO(
        id=data["id"],
        driver_id=data["driver_id"],
        make=data["make"],
        model=data["model"],
        year=data["year"],
        color=data["color"],
        license_plate=data["license_plate"],
        vehicle_type=data["vehicle_type"],
        is_active=data["is_active"],
        registration=RegistrationDTO(
            number=data.get("registration_number"),
            expiry_date=data.get("registration_expiry"),
            document_url=data.get("registration_document_url"),
        ),
        insurance=InsuranceDTO(
            provider=data.get("insurance_provider"),
            policy_number=data.get("insurance_policy_number"),
            expiry_date=data.get("insurance_expiry"),
            document_url=data.get("insurance_document_url"),
        ),
        created_at=data["created_at"],
        updated_at=data["updated_at"],
    )


class VehicleService:
    def __init__(self, repository: VehicleRepository, user_repository: UserRepository):
        self.repository = repository
        self.user_repository = user_repository

    async def register_vehicle(self, driver_id: UUID, request: CreateVehicleRequest) -> VehicleDTO:
        driver = await self.user_repository.get_user_by_id(driver_id)
        if not driver or driver["role"] != UserRole.DRIVER.value:
            raise NotFoundError("Driver not found")

        row = await self.repository.create_vehicle(driver_id, _flatten(request.model_dump()))
        await log_info(f"Vehicle {row['id']} registered for driver {driver_id}")
        return vehicle_from_row(row)

    async def get_vehicle(self, vehicle_id: UUID) -> VehicleDTO:
        row = await self.repository.get_vehicle(vehicle_id)
        if not row:
            raise NotFoundError("Vehicle not found")
        return vehicle_from_row(row)

    async def get_vehicle_by_driver(self, driver_id: UUID) -> VehicleDTO:
        row = await self.repository.get_vehicle_by_driver(driver_id)
        if not row:
            raise NotFoundError("No vehicle found for this driver")
        return vehicle_from_row(row)

    async def update_vehicle(
        self,
        vehicle_id: UUID,
        patch: UpdateVehicleRequest,
        driver_id: Optional[UUID] = None,
    ) -> VehicleDTO:
        """Applies a partial update; with driver_id set, only the owner's vehicle matches."""
        if driver_id is not None:
            current = await self.repository.get_vehicle(vehicle_id)
            if not current or current["driver_id"] != driver_id:
                raise NotFoundError("Vehicle not found")

        fields = _flatten(patch.model_dump(exclude_unset=True))
        fields = {k: v for k, v in fields.items() if v is not None or k.startswith(("registration_", "insurance_"))}
        row = await self.repository.update_vehicle(vehicle_id, fields)
        if not row:
            raise NotFoundError("Vehicle not found")
        await log_info(f"Vehicle {vehicle_id} updated")
        return vehicle_from_row(row)

    async def delete_vehicle(self, vehicle_id: UUID, driver_id: UUID) -> None:
        if not await self.repository.delete_vehicle(vehicle_id, driver_id):
            raise NotFoundError("Vehicle not found")
        await log_info(f"Vehicle {vehicle_id} deleted by driver {driver_id}")
