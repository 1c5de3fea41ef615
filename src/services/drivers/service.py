from uuid import UUID

from src.common.constants import DASHBOARD_EARNINGS_DAYS, DASHBOARD_RECENT_RIDES
from src.common.exceptions import NotFoundError
from src.services.accounts.service import AccountService
from src.services.payments.earnings import EarningsRecorder
from src.services.rides.fares import money
from src.services.rides.repository import RideRepository
from src.services.rides.service import ride_from_row
from src.services.vehicles.service import VehicleService
from src.shared.models.driver_dto import DriverDashboardDTO, DriverStatsDTO


class DriverService:
    """Read-side aggregation for the driver dashboard."""

    def __init__(
        self,
        account_service: AccountService,
        vehicle_service: VehicleService,
        ride_repository: RideRepository,
        earnings_recorder: EarningsRecorder,
    ):
        self.account_service = account_service
        self.vehicle_service = vehicle_service
        self.ride_repository = ride_repository
        self.earnings_recorder = earnings_recorder

    async def dashboard(self, driver_id: UUID) -> DriverDashboardDTO:
        await self.account_service.get_driver_profile(driver_id)

        try:
            vehicle = await self.vehicle_service.get_vehicle_by_driver(driver_id)
        except NotFoundError:
            vehicle = None

        stats = await self.ride_repository.get_driver_stats(driver_id)
        recent = await self.ride_repository.get_rides_by_driver(
            driver_id, None, DASHBOARD_RECENT_RIDES, 0
        )
        chart = await self.earnings_recorder.daily_net_earnings(driver_id, DASHBOARD_EARNINGS_DAYS)

        return DriverDashboardDTO(
            vehicle=vehicle,
            stats=DriverStatsDTO(
                totalRides=stats["total_rides"],
                completedRides=stats["completed_rides"],
                cancelledRides=stats["cancelled_rides"],
                totalEarnings=float(money(stats["total_earnings"])),
            ),
            recent_rides=[ride_from_row(row) for row in recent],
            earnings_chart=chart,
        )
