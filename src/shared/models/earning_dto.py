from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field
from src.shared.models.enums import EarningPaymentMethod, EarningPaymentStatus, EarningsPeriod


class DeductionDTO(BaseModel):
    reason: str = Field(min_length=1, max_length=200)
    amount: float = Field(ge=0)


class EarningDTO(BaseModel):
    id: UUID
    driver_id: Optional[UUID] = None
    ride_id: UUID
    amount: float
    currency: str = "USD"
    payment_method: EarningPaymentMethod = EarningPaymentMethod.CASH
    payment_status: EarningPaymentStatus = EarningPaymentStatus.PENDING
    commission: float = 0.0
    tip: float = 0.0
    deductions: List[DeductionDTO] = Field(default_factory=list)
    net_earnings: float
    transaction_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RecordEarningRequest(BaseModel):
    ride_id: UUID
    amount: float = Field(ge=0)
    payment_method: EarningPaymentMethod = EarningPaymentMethod.CASH
    payment_status: EarningPaymentStatus = EarningPaymentStatus.PENDING
    commission: float = Field(default=0.0, ge=0)
    tip: float = Field(default=0.0, ge=0)
    deductions: List[DeductionDTO] = Field(default_factory=list)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    transaction_id: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=500)


class EarningsSummaryDTO(BaseModel):
    totalEarnings: float = 0.0
    totalRides: int = 0
    averageEarning: float = 0.0


class DriverEarningsDTO(BaseModel):
    period: Optional[EarningsPeriod] = None
    total_net_earnings: float = 0.0
    earnings: List[EarningDTO] = Field(default_factory=list)


class DailyEarningDTO(BaseModel):
    day: date
    net_earnings: float = 0.0
