from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from src.common.exceptions import ValidationFailedError
from src.config.loader import FareSettings
from src.shared.models.ride_dto import FareDTO, FareInputs

CENT = Decimal("0.01")


def money(value) -> Decimal:
    """Rounds to cents, half up, the way fares and earnings are stored."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


class FareCalculator:
    """
    total = (base + distance + time) * surge, rounded to cents.
    A declared total must match within FARE_TOLERANCE.
    """

    def __init__(self, settings: FareSettings):
        self.settings = settings

    def compute_total(self, base: float, distance: float, time: float, surge: float) -> Decimal:
        subtotal = Decimal(str(base)) + Decimal(str(distance)) + Decimal(str(time))
        return money(subtotal * Decimal(str(surge)))

    def resolve(self, inputs: FareInputs) -> FareDTO:
        """
        Validates fare inputs and returns the full breakdown.

        Raises:
            ValidationFailedError: surge out of range or declared total diverges
        """
        if not (1 <= inputs.surge <= self.settings.FARE_SURGE_MAX):
            raise ValidationFailedError(
                f"Surge multiplier must be between 1 and {self.settings.FARE_SURGE_MAX}",
                details={"field": "fare.surge", "value": inputs.surge},
            )

        computed = self.compute_total(inputs.base, inputs.distance, inputs.time, inputs.surge)
        declared: Optional[float] = inputs.total
        if declared is not None:
            tolerance = Decimal(str(self.settings.FARE_TOLERANCE))
            if abs(Decimal(str(declared)) - computed) > tolerance:
                raise ValidationFailedError(
                    "Fare total does not match (base + distance + time) * surge",
                    details={"declared": declared, "computed": float(computed)},
                )

        return FareDTO(
            base=inputs.base,
            distance=inputs.distance,
            time=inputs.time,
            surge=inputs.surge,
            total=float(computed),
        )
