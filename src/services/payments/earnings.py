# src/services/payments/earnings.py
"""
Учёт заработка водителей.
Ровно одна запись на завершённую поездку (уникальный ride_id + ON CONFLICT DO NOTHING).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID

import asyncpg

from src.common.constants import DASHBOARD_EARNINGS_DAYS
from src.common.exceptions import (
    ForbiddenError,
    InvalidTransitionError,
    RideNotFoundError,
    ValidationFailedError,
)
from src.common.logger import log_info
from src.config.loader import Settings
from src.services.payments.earnings_repository import EarningsRepository
from src.services.rides.fares import money
from src.services.rides.repository import RideRepository
from src.shared.models.earning_dto import (
    DailyEarningDTO,
    DeductionDTO,
    DriverEarningsDTO,
    EarningDTO,
    EarningsSummaryDTO,
    RecordEarningRequest,
)
from src.shared.models.enums import (
    EarningPaymentMethod,
    EarningPaymentStatus,
    EarningsPeriod,
    RidePaymentMethod,
    RideStatus,
)

# Способ оплаты поездки -> способ получения заработка
PAYOUT_METHODS = {
    RidePaymentMethod.CASH.value: EarningPaymentMethod.CASH,
    RidePaymentMethod.CARD.value: EarningPaymentMethod.CREDIT_CARD,
    RidePaymentMethod.WALLET.value: EarningPaymentMethod.WALLET,
    RidePaymentMethod.VOUCHER.value: EarningPaymentMethod.WALLET,
}

PERIOD_DAYS = {
    EarningsPeriod.WEEK: 7,
    EarningsPeriod.MONTH: 30,
}


def net_earnings(amount, commission, deductions, tip) -> Decimal:
    """amount - commission - sum(deductions) + tip, в центах."""
    total_deductions = sum((money(d.amount) for d in deductions), Decimal("0"))
    return money(amount) - money(commission) - total_deductions + money(tip)


def earning_from_row(data: dict) -> EarningDTO:
    return EarningDTO(**{k: v for k, v in data.items() if k in EarningDTO.model_fields})


class EarningsRecorder:
    """
    Запись и агрегирование заработка.

    Ответственности:
    - запись заработка по завершённой поездке (идемпотентно)
    - автоматическая запись при завершении поездки
    - выборки и сводка по водителю
    """

    def __init__(
        self,
        repository: EarningsRepository,
        ride_repository: RideRepository,
        settings: Settings,
    ) -> None:
        self.repository = repository
        self.ride_repository = ride_repository
        self.settings = settings

    async def record_earning(
        self,
        request: RecordEarningRequest,
        driver_id: Optional[UUID] = None,
    ) -> EarningDTO:
        """
        Записывает заработок по поездке.

        Args:
            request: Суммы и способ оплаты
            driver_id: Если задан, поездка должна принадлежать этому водителю

        Raises:
            RideNotFoundError: поездки нет
            InvalidTransitionError: поездка не завершена
            ValidationFailedError: нет водителя или отрицательный итог
        """
        ride = await self.ride_repository.get_ride(request.ride_id)
        if not ride:
            raise RideNotFoundError()
        if driver_id is not None and ride["driver_id"] != driver_id:
            raise ForbiddenError("Ride belongs to another driver")
        if ride["status"] != RideStatus.COMPLETED.value:
            raise InvalidTransitionError("Earnings can only be recorded for completed rides")
        if ride["driver_id"] is None:
            raise ValidationFailedError("Ride has no driver")

        net = net_earnings(request.amount, request.commission, request.deductions, request.tip)
        if net < 0:
            raise ValidationFailedError(
                "Net earnings cannot be negative",
                details={"net_earnings": float(net)},
            )

        return await self._insert_once(
            ride_id=request.ride_id,
            driver_id=ride["driver_id"],
            amount=money(request.amount),
            commission=money(request.commission),
            tip=money(request.tip),
            deductions=request.deductions,
            net=net,
            payment_method=request.payment_method,
            payment_status=request.payment_status,
            currency=request.currency or self.settings.fares.CURRENCY,
            transaction_id=request.transaction_id,
            notes=request.notes,
        )

    async def record_for_completed_ride(
        self,
        ride: dict,
        conn: Optional[asyncpg.Connection] = None,
    ) -> EarningDTO:
        """
        Автоматическая запись при переходе поездки в completed.

        Args:
            ride: Строка поездки (нужны id, driver_id, fare_total, payment_method)
            conn: Соединение транзакции перехода; ошибка вставки откатывает переход
        """
        amount = money(ride["fare_total"])
        percent = Decimal(str(self.settings.earnings.PLATFORM_COMMISSION_PERCENT))
        commission = money(amount * percent / Decimal("100"))

        return await self._insert_once(
            ride_id=ride["id"],
            driver_id=ride["driver_id"],
            amount=amount,
            commission=commission,
            tip=money(0),
            deductions=[],
            net=amount - commission,
            payment_method=PAYOUT_METHODS.get(ride.get("payment_method"), EarningPaymentMethod.CASH),
            payment_status=EarningPaymentStatus.PENDING,
            currency=self.settings.fares.CURRENCY,
            transaction_id=None,
            notes=None,
            conn=conn,
        )

    async def _insert_once(
        self,
        *,
        ride_id: UUID,
        driver_id: UUID,
        amount: Decimal,
        commission: Decimal,
        tip: Decimal,
        deductions: list[DeductionDTO],
        net: Decimal,
        payment_method: EarningPaymentMethod,
        payment_status: EarningPaymentStatus,
        currency: str,
        transaction_id: Optional[str],
        notes: Optional[str],
        conn: Optional[asyncpg.Connection] = None,
    ) -> EarningDTO:
        row = await self.repository.insert_earning({
            "driver_id": driver_id,
            "ride_id": ride_id,
            "amount": amount,
            "currency": currency.upper(),
            "payment_method": str(payment_method),
            "payment_status": str(payment_status),
            "commission": commission,
            "tip": tip,
            "deductions": [{"reason": d.reason, "amount": float(money(d.amount))} for d in deductions],
            "net_earnings": net,
            "transaction_id": transaction_id,
            "notes": notes,
        }, conn=conn)
        if row is None:
            existing = await self.repository.get_by_ride(ride_id, conn=conn)
            await log_info(f"Earning for ride {ride_id} already recorded")
            return earning_from_row(existing)

        await log_info(f"Recorded earning {row['id']} for ride {ride_id}: net {net}")
        return earning_from_row(row)

    async def get_driver_earnings(
        self,
        driver_id: UUID,
        period: Optional[EarningsPeriod] = None,
    ) -> DriverEarningsDTO:
        since = None
        if period is not None:
            since = datetime.now(timezone.utc) - timedelta(days=PERIOD_DAYS[period])

        rows = await self.repository.get_by_driver(driver_id, since)
        earnings = [earning_from_row(row) for row in rows]
        total = sum((money(e.net_earnings) for e in earnings), Decimal("0"))
        return DriverEarningsDTO(
            period=period,
            total_net_earnings=float(total),
            earnings=earnings,
        )

    async def summary(self, driver_id: UUID) -> EarningsSummaryDTO:
        data = await self.repository.get_summary(driver_id)
        return EarningsSummaryDTO(
            totalEarnings=float(money(data["total_earnings"])),
            totalRides=data["total_rides"],
            averageEarning=float(money(data["average_earning"])),
        )

    async def daily_net_earnings(
        self,
        driver_id: UUID,
        days: int = DASHBOARD_EARNINGS_DAYS,
    ) -> list[DailyEarningDTO]:
        """Чистый заработок по дням за последние `days` дней (пустые дни = 0)."""
        today = datetime.now(timezone.utc).date()
        first_day = today - timedelta(days=days - 1)
        since = datetime.combine(first_day, datetime.min.time(), tzinfo=timezone.utc)

        rows = await self.repository.get_daily_net(driver_id, since)
        by_day = {row["day"]: row["net_earnings"] for row in rows}
        return [
            DailyEarningDTO(
                day=first_day + timedelta(days=i),
                net_earnings=float(money(by_day.get(first_day + timedelta(days=i), 0))),
            )
            for i in range(days)
        ]
