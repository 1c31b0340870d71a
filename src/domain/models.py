from dataclasses import dataclass
from typing import Literal, Optional


SessionMode = Literal["BACKTEST", "OPTIMIZATION", "FORWARD_TEST", "TRADE"]

SESSION_MODES: frozenset[str] = frozenset({"BACKTEST", "OPTIMIZATION", "FORWARD_TEST", "TRADE"})


def records_history(mode: SessionMode) -> bool:
    """Only historical replays feed the net profit chart."""
    return mode == "BACKTEST"


@dataclass(frozen=True)
class TradeUpdate:
    """A single fill applied to a strategy position.

    ``timestamp`` is in milliseconds since the epoch.
    """

    quantity: int
    average_fill_price: float
    resulting_position: int
    timestamp: int


@dataclass(frozen=True)
class RunningStatistics:
    """Cumulative trade and portfolio statistics for one strategy session."""

    trades: int = 0
    profitable_trades: int = 0
    long_trades: int = 0
    short_trades: int = 0
    gross_profit: float = 0.0
    gross_loss: float = 0.0
    trade_commission: float = 0.0
    total_commission: float = 0.0
    total_bought: float = 0.0
    total_sold: float = 0.0
    position: int = 0
    position_value: float = 0.0
    trade_profit: float = 0.0
    net_profit_as_of_previous_trade: float = 0.0
    peak_net_profit: float = 0.0
    max_drawdown: float = 0.0
    sum_trade_profit: float = 0.0
    sum_trade_profit_squared: float = 0.0
    time_in_market: int = 0
    time_in_market_start: Optional[int] = None
    last_timestamp: Optional[int] = None
    is_completed_trade: bool = False

    @property
    def unprofitable_trades(self) -> int:
        return self.trades - self.profitable_trades
