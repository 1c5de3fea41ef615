from typing import List, Optional
from pydantic import BaseModel, Field
from src.shared.models.earning_dto import DailyEarningDTO
from src.shared.models.ride_dto import RideDTO
from src.shared.models.vehicle_dto import VehicleDTO


class DriverStatsDTO(BaseModel):
    totalRides: int = 0
    completedRides: int = 0
    cancelledRides: int = 0
    totalEarnings: float = 0.0


class DriverDashboardDTO(BaseModel):
    vehicle: Optional[VehicleDTO] = None
    stats: DriverStatsDTO = Field(default_factory=DriverStatsDTO)
    recent_rides: List[RideDTO] = Field(default_factory=list)
    earnings_chart: List[DailyEarningDTO] = Field(default_factory=list)
