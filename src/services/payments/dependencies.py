# src/services/payments/dependencies.py
"""
Dependency Injection для платежей и заработка.
"""

from fastapi import Request

from src.infra.database import DatabaseManager
from src.services.payments.repository import PaymentRepository
from src.services.payments.service import PaymentService
from src.services.rides.dependencies import get_earnings_recorder


def get_payment_repository(request: Request) -> PaymentRepository:
    return PaymentRepository(DatabaseManager())


def get_payment_service(request: Request) -> PaymentService:
    return PaymentService(get_payment_repository(request))


__all__ = ["get_payment_service", "get_earnings_recorder"]
