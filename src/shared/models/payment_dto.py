from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field
from src.shared.models.enums import PaymentMethod, PaymentStatus


class PaymentDTO(BaseModel):
    id: UUID
    booking_id: Optional[UUID] = None
    passenger_id: Optional[UUID] = None
    method: PaymentMethod
    amount: float
    status: PaymentStatus
    transaction_id: str
    transaction_time: datetime

    class Config:
        from_attributes = True


class CreatePaymentRequest(BaseModel):
    booking_id: UUID
    method: PaymentMethod
    amount: float = Field(gt=0)
