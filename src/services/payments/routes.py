from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.services.accounts.dependencies import get_current_user, require_driver
from src.services.accounts.routes import ensure_self_or_admin
from src.services.payments.dependencies import get_earnings_recorder, get_payment_service
from src.services.payments.earnings import EarningsRecorder
from src.services.payments.service import PaymentService
from src.shared.models.common import ApiResponse
from src.shared.models.earning_dto import (
    DriverEarningsDTO,
    EarningDTO,
    EarningsSummaryDTO,
    RecordEarningRequest,
)
from src.shared.models.enums import EarningsPeriod, UserRole
from src.shared.models.payment_dto import CreatePaymentRequest, PaymentDTO
from src.shared.models.user_dto import UserDTO

payments_router = APIRouter(prefix="/payments", tags=["Payments"])
earnings_router = APIRouter(prefix="/earnings", tags=["Earnings"])


@payments_router.post("/", response_model=ApiResponse[PaymentDTO], status_code=status.HTTP_201_CREATED)
async def create_payment(
    request: CreatePaymentRequest,
    current_user: UserDTO = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
):
    payer_id = None if current_user.role == UserRole.ADMIN else current_user.id
    payment = await service.pay(request.booking_id, request.method, request.amount, payer_id=payer_id)
    return ApiResponse(message=f"Payment {payment.status.value}", data=payment)


@payments_router.get("/me", response_model=ApiResponse[List[PaymentDTO]])
async def get_my_payments(
    current_user: UserDTO = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
):
    payments = await service.history(current_user.id)
    return ApiResponse(message="Payment history fetched successfully", data=payments)


@payments_router.get("/history/{user_id}", response_model=ApiResponse[List[PaymentDTO]])
async def get_payment_history(
    user_id: UUID,
    current_user: UserDTO = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
):
    ensure_self_or_admin(current_user, user_id)
    payments = await service.history(user_id)
    return ApiResponse(message="Payment history fetched successfully", data=payments)


@earnings_router.post("/", response_model=ApiResponse[EarningDTO], status_code=status.HTTP_201_CREATED)
async def record_earning(
    request: RecordEarningRequest,
    current_user: UserDTO = Depends(require_driver),
    recorder: EarningsRecorder = Depends(get_earnings_recorder)
):
    driver_id = None if current_user.role == UserRole.ADMIN else current_user.id
    earning = await recorder.record_earning(request, driver_id=driver_id)
    return ApiResponse(message="Earning recorded", data=earning)


@earnings_router.get("/driver/{driver_id}", response_model=ApiResponse[DriverEarningsDTO])
async def get_driver_earnings(
    driver_id: UUID,
    period: Optional[EarningsPeriod] = None,
    current_user: UserDTO = Depends(get_current_user),
    recorder: EarningsRecorder = Depends(get_earnings_recorder)
):
    ensure_self_or_admin(current_user, driver_id)
    earnings = await recorder.get_driver_earnings(driver_id, period)
    return ApiResponse(message="Earnings fetched successfully", data=earnings)


@earnings_router.get("/driver/{driver_id}/summary", response_model=ApiResponse[EarningsSummaryDTO])
async def get_earnings_summary(
    driver_id: UUID,
    current_user: UserDTO = Depends(get_current_user),
    recorder: EarningsRecorder = Depends(get_earnings_recorder)
):
    ensure_self_or_admin(current_user, driver_id)
    summary = await recorder.summary(driver_id)
    return ApiResponse(message="Earnings summary fetched successfully", data=summary)
