import asyncio
from typing import Awaitable, Callable, Optional
from uuid import UUID

from src.common.exceptions import (
    InvalidCredentialsError,
    NotFoundError,
    UserHasActiveRidesError,
    ValidationFailedError,
)
from src.common.logger import log_info, log_warning
from src.common.security import (
    PASSWORD_RESET_PURPOSE,
    create_access_token,
    create_reset_token,
    decode_token,
    hash_password,
    verify_password,
)
from src.config.loader import Settings
from src.infra.redis_client import RedisClient
from src.services.accounts.repository import UserRepository
from src.shared.models.common import PaginatedResponse, PaginationParams
from src.shared.models.enums import DriverStatus, UserRole
from src.shared.models.user_dto import (
    DriverDetailsDTO,
    RegisterDriverRequest,
    RegisterUserRequest,
    SessionDTO,
    UpdateUserRequest,
    UserDTO,
    VehicleSummaryDTO,
)

RESET_REQUESTED_MESSAGE = "If an account with that email exists, a password reset link has been sent"

ResetLinkSender = Callable[[str, str], Awaitable[None]]


async def log_reset_link(email: str, link: str) -> None:
    """Default sender: delivery is external, only the fact is logged."""
    await log_info("Password reset link generated", extra={"email_domain": email.split("@")[-1]})


def user_from_row(data: dict) -> UserDTO:
    driver_details = None
    if data.get("role") == UserRole.DRIVER.value:
        vehicle = None
        if data.get("vehicle_plate") or data.get("vehicle_make"):
            vehicle = VehicleSummaryDTO(
                make=data.get("vehicle_make"),
                model=data.get("vehicle_model"),
                year=data.get("vehicle_year"),
                color=data.get("vehicle_color"),
                plate=data.get("vehicle_plate"),
            )
        driver_details = DriverDetailsDTO(
            license_number=data.get("license_number"),
            vehicle=vehicle,
            status=data.get("driver_status") or DriverStatus.PENDING_VERIFICATION,
        )

    return UserDTO(
        id=data["id"],
        name=data["name"],
        email=data["email"],
        phone_number=data["phone_number"],
        role=data["role"],
        driver_details=driver_details,
        vehicle_id=data.get("vehicle_id"),
        created_at=data["created_at"],
        updated_at=data["updated_at"],
    )


class AccountService:
    def __init__(
        self,
        repository: UserRepository,
        redis: RedisClient,
        settings: Settings,
        reset_link_sender: Optional[ResetLinkSender] = None,
    ):
        self.repository = repository
        self.redis = redis
        self.settings = settings
        self.reset_link_sender = reset_link_sender or log_reset_link

    async def _hash(self, password: str) -> str:
        return await asyncio.to_thread(hash_password, password, self.settings.security.BCRYPT_ROUNDS)

    async def register(self, request: RegisterUserRequest, role: UserRole = UserRole.PASSENGER) -> UserDTO:
        """Creates a passenger (or admin-seeded) account."""
        user_data = {
            "name": request.name.strip(),
            "email": request.email,
            "phone_number": request.phone_number,
            "password_hash": await self._hash(request.password),
            "role": role.value,
        }
        row = await self.repository.create_user(user_data)
        await log_info(f"Registered user {row['id']} with role {role.value}")
        return user_from_row(row)

    async def register_driver(self, request: RegisterDriverRequest) -> UserDTO:
        """Creates a driver account awaiting verification."""
        user_data = {
            "name": request.name.strip(),
            "email": request.email,
            "phone_number": request.phone_number,
            "password_hash": await self._hash(request.password),
            "role": UserRole.DRIVER.value,
            "license_number": request.license_number.strip(),
            "driver_status": DriverStatus.PENDING_VERIFICATION.value,
        }
        if request.vehicle:
            user_data.update({
                "vehicle_make": request.vehicle.make,
                "vehicle_model": request.vehicle.model,
                "vehicle_year": request.vehicle.year,
                "vehicle_color": request.vehicle.color,
                "vehicle_plate": request.vehicle.plate.strip().upper() if request.vehicle.plate else None,
            })
        row = await self.repository.create_user(user_data)
        await log_info(f"Registered driver {row['id']}")
        return user_from_row(row)

    async def authenticate(self, email: str, password: str, role: Optional[UserRole] = None) -> SessionDTO:
        """
        Verifies credentials and issues an access token.

        The password check runs even for unknown emails, so both failure
        modes cost the same and answer with the same error.
        """
        row = await self.repository.get_user_by_email(email.strip().lower())
        password_hash = row["password_hash"] if row else None

        matched = await asyncio.to_thread(
            verify_password, password, password_hash, self.settings.security.BCRYPT_ROUNDS
        )
        if not matched or (role is not None and row["role"] != role.value):
            await log_warning("Failed login attempt")
            raise InvalidCredentialsError()

        security = self.settings.security
        token = create_access_token(
            user_id=str(row["id"]),
            role=row["role"],
            secret=security.JWT_SECRET,
            algorithm=security.JWT_ALGORITHM,
            expires_minutes=security.JWT_EXPIRATION_MINUTES,
        )
        await log_info(f"User {row['id']} logged in")
        return SessionDTO(
            access_token=token,
            expires_in=security.JWT_EXPIRATION_MINUTES * 60,
            user=user_from_row(row),
        )

    async def resolve_token(self, token: str) -> UserDTO:
        """Maps a bearer token to its (still existing) user."""
        security = self.settings.security
        payload = decode_token(token, security.JWT_SECRET, security.JWT_ALGORITHM)
        try:
            user_id = UUID(payload["sub"])
        except ValueError as e:
            raise InvalidCredentialsError("Invalid or expired token") from e
        row = await self.repository.get_user_by_id(user_id)
        if not row:
            raise InvalidCredentialsError("Invalid or expired token")
        return user_from_row(row)

    async def get_user(self, user_id: UUID) -> UserDTO:
        row = await self.repository.get_user_by_id(user_id)
        if not row:
            raise NotFoundError("User not found")
        return user_from_row(row)

    async def get_all_users(self, pagination: PaginationParams) -> PaginatedResponse[UserDTO]:
        rows = await self.repository.get_all_users(limit=pagination.limit, offset=pagination.offset)
        total = await self.repository.count_users()
        return PaginatedResponse[UserDTO].create(
            items=[user_from_row(row) for row in rows],
            total=total,
            pagination=pagination,
        )

    async def update_user(self, user_id: UUID, patch: UpdateUserRequest) -> UserDTO:
        fields = patch.model_dump(exclude_unset=True)
        if "role" in fields:
            raise ValidationFailedError("Role cannot be changed", details={"field": "role"})
        if "name" in fields and fields["name"] is not None:
            fields["name"] = fields["name"].strip()
        fields = {k: v for k, v in fields.items() if v is not None}

        row = await self.repository.update_user(user_id, fields)
        if not row:
            raise NotFoundError("User not found")
        await log_info(f"User {user_id} updated profile fields {sorted(fields)}")
        return user_from_row(row)

    async def delete_user(self, user_id: UUID) -> None:
        if not await self.repository.get_user_by_id(user_id):
            raise NotFoundError("User not found")
        if await self.repository.has_active_involvement(user_id):
            raise UserHasActiveRidesError()
        if not await self.repository.delete_user(user_id):
            raise NotFoundError("User not found")
        await log_info(f"User {user_id} deleted")

    async def request_password_reset(self, email: str) -> str:
        """Always answers the same message whether or not the account exists."""
        row = await self.repository.get_user_by_email(email.strip().lower())
        if row:
            security = self.settings.security
            ttl = self.settings.redis_ttl.PASSWORD_RESET_TTL
            token, jti = create_reset_token(
                user_id=str(row["id"]),
                secret=security.JWT_SECRET,
                algorithm=security.JWT_ALGORITHM,
                expires_seconds=ttl,
            )
            await self.redis.store_reset_token(jti, str(row["id"]), ttl)
            link = f"{security.PASSWORD_RESET_URL.rstrip('/')}/{token}"
            await self.reset_link_sender(row["email"], link)
        return RESET_REQUESTED_MESSAGE

    async def confirm_password_reset(self, token: str, new_password: str) -> None:
        security = self.settings.security
        payload = decode_token(
            token,
            security.JWT_SECRET,
            security.JWT_ALGORITHM,
            purpose=PASSWORD_RESET_PURPOSE,
        )
        jti = payload.get("jti")
        if not jti:
            raise InvalidCredentialsError("Invalid or expired token")

        owner = await self.redis.consume_reset_token(jti)
        if owner is None or owner != payload["sub"]:
            raise InvalidCredentialsError("Invalid or expired token")

        updated = await self.repository.update_password(UUID(payload["sub"]), await self._hash(new_password))
        if not updated:
            raise InvalidCredentialsError("Invalid or expired token")
        await log_info(f"Password reset completed for user {payload['sub']}")

    async def set_driver_status(self, user_id: UUID, status: DriverStatus) -> UserDTO:
        row = await self.repository.set_driver_status(user_id, status.value)
        if not row:
            raise NotFoundError("Driver not found")
        await log_info(f"Driver {user_id} status set to {status.value}")
        return user_from_row(row)

    async def get_driver_profile(self, user_id: UUID) -> UserDTO:
        row = await self.repository.get_user_by_id(user_id)
        if not row or row["role"] != UserRole.DRIVER.value:
            raise NotFoundError("Driver not found")
        return user_from_row(row)
