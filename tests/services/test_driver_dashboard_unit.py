from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from src.common.exceptions import NotFoundError
from src.services.drivers.service import DriverService
from src.services.messages.service import MessageService
from src.shared.models.earning_dto import DailyEarningDTO


@pytest.fixture
def ride_repo():
    repo = AsyncMock()
    repo.get_driver_stats.return_value = {
        "total_rides": 4,
        "completed_rides": 3,
        "cancelled_rides": 1,
        "total_earnings": Decimal("63.00"),
    }
    repo.get_ride_status.return_value = "accepted"
    return repo


@pytest.fixture
def dashboard_service(ride_repo, ride_row):
    accounts = AsyncMock()
    vehicles = AsyncMock()
    vehicles.get_vehicle_by_driver.side_effect = NotFoundError("Vehicle not found")
    ride_repo.get_rides_by_driver.return_value = [ride_row(status="completed")]
    earnings = AsyncMock()
    earnings.daily_net_earnings.return_value = [DailyEarningDTO(day=date.today(), net_earnings=17.85)]
    return DriverService(accounts, vehicles, ride_repo, earnings)


@pytest.mark.asyncio
async def test_dashboard_without_vehicle(dashboard_service, ride_repo):
    driver_id = uuid4()

    dashboard = await dashboard_service.dashboard(driver_id)

    assert dashboard.vehicle is None
    assert dashboard.stats.totalRides == 4
    assert dashboard.stats.completedRides == 3
    assert dashboard.stats.totalEarnings == 63.0
    assert len(dashboard.recent_rides) == 1
    assert dashboard.earnings_chart[0].net_earnings == 17.85
    ride_repo.get_rides_by_driver.assert_awaited_once_with(driver_id, None, 5, 0)


@pytest.mark.asyncio
async def test_dashboard_for_non_driver(dashboard_service):
    dashboard_service.account_service.get_driver_profile.side_effect = NotFoundError("Driver not found")

    with pytest.raises(NotFoundError):
        await dashboard_service.dashboard(uuid4())


@pytest.mark.asyncio
async def test_messages_listed_for_existing_ride(ride_repo):
    ride_id, sender_id = uuid4(), uuid4()
    repository = AsyncMock()
    repository.get_messages_by_ride.return_value = [
        {
            "id": uuid4(),
            "ride_id": ride_id,
            "sender_id": sender_id,
            "message": "At the main entrance",
            "created_at": datetime.now(timezone.utc),
            "sender_name": "Test Driver",
            "sender_email": None,
            "sender_phone": None,
        }
    ]

    messages = await MessageService(repository, ride_repo).list(ride_id)

    assert messages[0].message == "At the main entrance"
    assert messages[0].sender.name == "Test Driver"


@pytest.mark.asyncio
async def test_message_to_unknown_ride(ride_repo):
    ride_repo.get_ride_status.return_value = None
    repository = AsyncMock()

    with pytest.raises(NotFoundError):
        await MessageService(repository, ride_repo).send(uuid4(), uuid4(), "hello")
    repository.create_message.assert_not_called()
