from dataclasses import dataclass
from typing import Optional

from .models import TradeUpdate


@dataclass(frozen=True)
class TradeUpdateEvent:
    strategy_id: str
    quantity: int
    average_fill_price: float
    resulting_position: int
    timestamp: int
    mark_price: Optional[float] = None

    def to_update(self) -> TradeUpdate:
        return TradeUpdate(
            quantity=self.quantity,
            average_fill_price=self.average_fill_price,
            resulting_position=self.resulting_position,
            timestamp=self.timestamp,
        )
