# src/services/payments/repository.py
"""
Репозиторий платежей по бронированиям (PostgreSQL).
Таблицы: payments, bookings
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from src.common.exceptions import ForbiddenError
from src.infra.database import DatabaseManager


class PaymentRepository:
    """Репозиторий платежей."""

    def __init__(self, db: DatabaseManager) -> None:
        self.db = db

    async def record_payment(
        self,
        booking_id: UUID,
        method: str,
        amount,
        transaction_id: str,
        payer_id: Optional[UUID] = None,
    ) -> Optional[dict]:
        """
        Записать платёж по бронированию.

        Бронирование блокируется на время транзакции. Для отменённого
        бронирования платёж сохраняется со статусом failed, флаг оплаты
        не меняется. Иначе статус success и payment_status = true.
        Платёж хранит пассажира и переживает удаление бронирования.

        Args:
            payer_id: Если задан, бронирование должно принадлежать ему

        Returns:
            Строка платежа или None, если бронирования нет

        Raises:
            ForbiddenError: бронирование другого пассажира
        """
        async with self.db.transaction() as conn:
            booking = await conn.fetchrow(
                "SELECT status, passenger_id FROM bookings WHERE id = $1 FOR UPDATE",
                booking_id,
            )
            if booking is None:
                return None
            if payer_id is not None and booking["passenger_id"] != payer_id:
                raise ForbiddenError("Not the owner of this booking")

            status = "failed" if booking["status"] == "cancelled" else "success"
            row = await conn.fetchrow(
                """
                INSERT INTO payments (booking_id, passenger_id, method, amount, status, transaction_id)
                VALUES ($1, $2, $3, $4, $5, $6)
                RETURNING *
                """,
                booking_id, booking["passenger_id"], method, amount, status, transaction_id,
            )
            if status == "success":
                await conn.execute(
                    "UPDATE bookings SET payment_status = TRUE WHERE id = $1",
                    booking_id,
                )
            return dict(row)

    async def get_history(self, user_id: UUID) -> list[dict]:
        """Платежи пассажира, новые первыми (включая платежи удалённых бронирований)."""
        query = """
            SELECT * FROM payments
            WHERE passenger_id = $1
            ORDER BY transaction_time DESC
        """
        async with self.db.acquire() as conn:
            rows = await conn.fetch(query, user_id)
            return [dict(row) for row in rows]
