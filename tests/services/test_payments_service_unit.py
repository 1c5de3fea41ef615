from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from src.common.exceptions import BookingNotFoundError, ForbiddenError
from src.config.loader import get_project_root
from src.services.payments.repository import PaymentRepository
from src.services.payments.service import PaymentService
from src.shared.models.enums import PaymentMethod, PaymentStatus


def payment_row(booking_id, status, **overrides):
    row = {
        "id": uuid4(),
        "booking_id": booking_id,
        "passenger_id": uuid4(),
        "method": "card",
        "amount": Decimal("12.50"),
        "status": status,
        "transaction_id": "tx-1",
        "transaction_time": datetime.now(timezone.utc),
    }
    row.update(overrides)
    return row


def booking_lock_row(status, passenger_id=None):
    return {"status": status, "passenger_id": passenger_id or uuid4()}


@pytest.mark.asyncio
async def test_pay_confirmed_booking_marks_it_paid(mock_db, mock_conn):
    booking_id, passenger_id = uuid4(), uuid4()
    mock_conn.fetchrow = AsyncMock(side_effect=[
        booking_lock_row("confirmed", passenger_id),
        payment_row(booking_id, "success", passenger_id=passenger_id),
    ])
    service = PaymentService(PaymentRepository(mock_db))

    payment = await service.pay(booking_id, PaymentMethod.CARD, 12.5, payer_id=passenger_id)

    assert payment.status == PaymentStatus.SUCCESS
    assert payment.amount == 12.5
    assert payment.passenger_id == passenger_id
    insert_args = mock_conn.fetchrow.call_args.args
    assert insert_args[1:6] == (booking_id, passenger_id, "card", Decimal("12.50"), "success")
    mock_conn.execute.assert_awaited_once()
    assert "payment_status = TRUE" in mock_conn.execute.call_args.args[0]


@pytest.mark.asyncio
async def test_pay_cancelled_booking_is_recorded_as_failed(mock_db, mock_conn):
    booking_id = uuid4()
    mock_conn.fetchrow = AsyncMock(side_effect=[
        booking_lock_row("cancelled"),
        payment_row(booking_id, "failed"),
    ])
    service = PaymentService(PaymentRepository(mock_db))

    payment = await service.pay(booking_id, PaymentMethod.CASH, 12.5)

    assert payment.status == PaymentStatus.FAILED
    assert mock_conn.fetchrow.call_args.args[5] == "failed"
    mock_conn.execute.assert_not_called()


@pytest.mark.asyncio
async def test_pay_unknown_booking(mock_db, mock_conn):
    mock_conn.fetchrow = AsyncMock(return_value=None)

    with pytest.raises(BookingNotFoundError):
        await PaymentService(PaymentRepository(mock_db)).pay(uuid4(), PaymentMethod.WALLET, 5)
    mock_conn.fetchrow.assert_awaited_once()


@pytest.mark.asyncio
async def test_pay_someone_elses_booking_is_forbidden(mock_db, mock_conn):
    mock_conn.fetchrow = AsyncMock(return_value=booking_lock_row("confirmed"))

    with pytest.raises(ForbiddenError):
        await PaymentService(PaymentRepository(mock_db)).pay(
            uuid4(), PaymentMethod.CARD, 10, payer_id=uuid4()
        )
    mock_conn.fetchrow.assert_awaited_once()
    mock_conn.execute.assert_not_called()


@pytest.mark.asyncio
async def test_admin_pays_without_owner_check(mock_db, mock_conn):
    booking_id = uuid4()
    mock_conn.fetchrow = AsyncMock(side_effect=[
        booking_lock_row("confirmed"),
        payment_row(booking_id, "success"),
    ])

    payment = await PaymentService(PaymentRepository(mock_db)).pay(booking_id, PaymentMethod.CARD, 10)

    assert payment.status == PaymentStatus.SUCCESS


@pytest.mark.asyncio
async def test_each_payment_gets_its_own_transaction_id():
    repository = AsyncMock()
    booking_id = uuid4()
    repository.record_payment.return_value = payment_row(booking_id, "success")
    service = PaymentService(repository)

    await service.pay(booking_id, PaymentMethod.CARD, 10)
    await service.pay(booking_id, PaymentMethod.CARD, 10)

    first, second = (call.args[3] for call in repository.record_payment.call_args_list)
    assert first != second


@pytest.mark.asyncio
async def test_history_reads_payments_by_passenger(mock_db, mock_conn):
    passenger_id = uuid4()
    mock_conn.fetch = AsyncMock(return_value=[
        payment_row(uuid4(), "success", passenger_id=passenger_id),
        payment_row(None, "failed", passenger_id=passenger_id, transaction_id="tx-2"),
    ])

    history = await PaymentService(PaymentRepository(mock_db)).history(passenger_id)

    assert [p.status for p in history] == [PaymentStatus.SUCCESS, PaymentStatus.FAILED]
    # the booking of the second payment was deleted with its ride
    assert history[1].booking_id is None
    query, user_id = mock_conn.fetch.call_args.args
    assert "JOIN bookings" not in query
    assert user_id == passenger_id


def test_payments_survive_booking_and_ride_deletion():
    schema_sql = (get_project_root() / "migrations" / "init.sql").read_text(encoding="utf-8")
    payments = schema_sql.split("CREATE TABLE IF NOT EXISTS payments", 1)[1].split(");", 1)[0]
    assert "REFERENCES bookings(id) ON DELETE SET NULL" in payments
    assert "ON DELETE CASCADE" not in payments
