from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import asyncpg
import pytest
from pydantic import ValidationError

from src.common.exceptions import DuplicatePlateError, NotFoundError
from src.services.vehicles.repository import VehicleRepository
from src.services.vehicles.service import VehicleService
from src.shared.models.vehicle_dto import CreateVehicleRequest


def vehicle_row(driver_id, **overrides):
    now = datetime.now(timezone.utc)
    row = {
        "id": uuid4(),
        "driver_id": driver_id,
        "make": "VW",
        "model": "Golf",
        "year": 2020,
        "color": "blue",
        "license_plate": "HH-AB 123",
        "vehicle_type": "sedan",
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


def request(**overrides):
    data = {"make": "VW", "model": "Golf", "year": 2020, "color": "blue", "license_plate": " hh-ab 123 "}
    data.update(overrides)
    return CreateVehicleRequest(**data)


@pytest.fixture
def driver(driver_row):
    return driver_row()


@pytest.fixture
def users(driver):
    repository = AsyncMock()
    repository.get_user_by_id.return_value = driver
    return repository


def test_plate_is_normalized():
    assert request().license_plate == "HH-AB 123"


@pytest.mark.parametrize("year", [1989, datetime.now().year + 2])
def test_year_out_of_range(year):
    with pytest.raises(ValidationError):
        request(year=year)


@pytest.mark.asyncio
async def test_register_deactivates_previous_and_syncs_user(mock_db, mock_conn, users, driver):
    mock_conn.fetchrow = AsyncMock(return_value=vehicle_row(driver["id"]))
    service = VehicleService(VehicleRepository(mock_db), users)

    vehicle = await service.register_vehicle(driver["id"], request())

    assert vehicle.license_plate == "HH-AB 123"
    assert vehicle.is_active is True
    statements = [call.args[0] for call in mock_conn.execute.call_args_list]
    assert "is_active = FALSE" in statements[0]
    assert "UPDATE users" in statements[1]


@pytest.mark.asyncio
async def test_duplicate_plate(mock_db, mock_conn, users, driver):
    mock_conn.fetchrow = AsyncMock(side_effect=asyncpg.UniqueViolationError("duplicate key"))

    with pytest.raises(DuplicatePlateError):
        await VehicleService(VehicleRepository(mock_db), users).register_vehicle(driver["id"], request())


@pytest.mark.asyncio
async def test_register_for_passenger_is_rejected(users, user_row):
    users.get_user_by_id.return_value = user_row()
    repository = AsyncMock()

    with pytest.raises(NotFoundError):
        await VehicleService(repository, users).register_vehicle(uuid4(), request())
    repository.create_vehicle.assert_not_called()


@pytest.mark.asyncio
async def test_delete_someone_elses_vehicle(users):
    repository = AsyncMock()
    repository.delete_vehicle.return_value = False

    with pytest.raises(NotFoundError):
        await VehicleService(repository, users).delete_vehicle(uuid4(), uuid4())
