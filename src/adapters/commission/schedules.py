from dataclasses import dataclass
from typing import Optional

from ...ports.commission import CommissionPort


class ZeroCommission(CommissionPort):
    """Commission-free schedule, mostly for research runs."""

    def cost(self, quantity: int, price: float) -> float:
        return 0.0


@dataclass(frozen=True)
class PerContractCommission(CommissionPort):
    """Broker schedule charging a flat rate per contract.

    The charge is never below ``minimum`` and, when ``maximum_percent`` is set,
    never above that percentage of the trade value.
    """

    rate: float
    minimum: float = 0.0
    maximum_percent: Optional[float] = None

    def __post_init__(self) -> None:
        if self.rate < 0 or self.minimum < 0:
            raise ValueError("Commission rate and minimum must be non-negative")
        if self.maximum_percent is not None and self.maximum_percent < 0:
            raise ValueError("Commission maximum_percent must be non-negative")

    def cost(self, quantity: int, price: float) -> float:
        commission = max(self.minimum, self.rate * quantity)
        if self.maximum_percent is not None:
            commission = min(commission, quantity * price * self.maximum_percent / 100)
        return commission
