from abc import ABC, abstractmethod


class CommissionPort(ABC):
    """Abstract commission schedule queried on every fill."""

    @abstractmethod
    def cost(self, quantity: int, price: float) -> float:
        """Return the non-negative commission for ``quantity`` contracts at ``price``."""
        raise NotImplementedError
