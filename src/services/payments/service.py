# src/services/payments/service.py
"""
Бизнес-логика платежей по бронированиям.
"""

from __future__ import annotations

import uuid
from typing import Optional
from uuid import UUID

from src.common.exceptions import BookingNotFoundError
from src.common.logger import log_info, log_warning
from src.services.payments.repository import PaymentRepository
from src.services.rides.fares import money
from src.shared.models.enums import PaymentMethod, PaymentStatus
from src.shared.models.payment_dto import PaymentDTO


def payment_from_row(data: dict) -> PaymentDTO:
    return PaymentDTO(
        id=data["id"],
        booking_id=data.get("booking_id"),
        passenger_id=data.get("passenger_id"),
        method=data["method"],
        amount=float(data["amount"]),
        status=data["status"],
        transaction_id=data["transaction_id"],
        transaction_time=data["transaction_time"],
    )


class PaymentService:
    """
    Сервис платежей.

    Ответственности:
    - Оплата бронирования (атомарно с флагом оплаты)
    - История платежей пассажира
    """

    def __init__(self, repository: PaymentRepository) -> None:
        self.repository = repository

    async def pay(
        self,
        booking_id: UUID,
        method: PaymentMethod,
        amount: float,
        payer_id: Optional[UUID] = None,
    ) -> PaymentDTO:
        """
        Оплатить бронирование.

        Args:
            payer_id: Плательщик; None для администратора (без проверки владельца)

        Raises:
            BookingNotFoundError: бронирования нет
            ForbiddenError: бронирование другого пассажира
        """
        transaction_id = str(uuid.uuid4())
        row = await self.repository.record_payment(
            booking_id,
            method.value,
            money(amount),
            transaction_id,
            payer_id=payer_id,
        )
        if row is None:
            raise BookingNotFoundError()

        payment = payment_from_row(row)
        if payment.status == PaymentStatus.FAILED:
            await log_warning(f"Payment {transaction_id} failed: booking {booking_id} is cancelled")
        else:
            await log_info(f"Payment {transaction_id} for booking {booking_id} succeeded")
        return payment

    async def history(self, user_id: UUID) -> list[PaymentDTO]:
        rows = await self.repository.get_history(user_id)
        return [payment_from_row(row) for row in rows]
