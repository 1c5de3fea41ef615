from enum import Enum


class UserRole(str, Enum):
    """Роли пользователей."""
    PASSENGER = "passenger"
    DRIVER = "driver"
    ADMIN = "admin"

    def __str__(self) -> str:
        return self.value


class DriverStatus(str, Enum):
    """Статусы проверки водителя администратором."""
    PENDING_VERIFICATION = "pending_verification"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"

    def __str__(self) -> str:
        return self.value


class VehicleType(str, Enum):
    """Типы автомобилей."""
    SEDAN = "sedan"
    SUV = "suv"
    VAN = "van"
    LUXURY = "luxury"
    ELECTRIC = "electric"

    def __str__(self) -> str:
        return self.value


class RideStatus(str, Enum):
    """Статусы поездки."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    ARRIVED = "arrived"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"

    def __str__(self) -> str:
        return self.value


class RideEventType(str, Enum):
    """Типы записей журнала поездки."""
    REQUESTED = "requested"
    ACCEPTED = "accepted"
    ARRIVED = "arrived"
    STARTED = "started"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"

    def __str__(self) -> str:
        return self.value


class AdvanceEvent(str, Enum):
    """События продвижения принятой поездки."""
    ARRIVED = "arrived"
    STARTED = "started"
    COMPLETED = "completed"

    def __str__(self) -> str:
        return self.value


class RidePaymentMethod(str, Enum):
    """Способ оплаты поездки."""
    CASH = "cash"
    CARD = "card"
    WALLET = "wallet"
    VOUCHER = "voucher"

    def __str__(self) -> str:
        return self.value


class RidePaymentStatus(str, Enum):
    """Статус оплаты поездки."""
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class BookingStatus(str, Enum):
    """Статусы бронирования места."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


class PaymentMethod(str, Enum):
    """Способы оплаты бронирования."""
    CASH = "cash"
    CARD = "card"
    WALLET = "wallet"

    def __str__(self) -> str:
        return self.value


class PaymentStatus(str, Enum):
    """Результат платежа."""
    SUCCESS = "success"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class EarningPaymentMethod(str, Enum):
    """Способ получения заработка водителем."""
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    MOBILE_PAYMENT = "mobile_payment"
    WALLET = "wallet"

    def __str__(self) -> str:
        return self.value


class EarningPaymentStatus(str, Enum):
    """Статус выплаты заработка."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"

    def __str__(self) -> str:
        return self.value


class EarningsPeriod(str, Enum):
    """Период выборки заработка."""
    WEEK = "week"
    MONTH = "month"

    def __str__(self) -> str:
        return self.value
