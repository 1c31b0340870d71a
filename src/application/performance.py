"""Streaming performance accounting for a single strategy.

``apply_update`` is a pure transition ``(stats, update) -> stats'``;
``PerformanceAccumulator`` owns the current statistics and the chart series
and is the object strategies and display code talk to.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Optional, Tuple

from ..domain import metrics
from ..domain.chart import ChartPoint, ChartSeries
from ..domain.metrics import PerformanceSummary
from ..domain.models import RunningStatistics, SessionMode, TradeUpdate, records_history
from ..infrastructure.logging import get_logger
from ..ports.commission import CommissionPort

logger = get_logger(__name__)


class InvalidTradeUpdate(ValueError):
    """Raised when an update would corrupt the running statistics."""


def _is_valid_price(price: float) -> bool:
    return math.isfinite(price) and price > 0


def validate_update(stats: RunningStatistics, update: TradeUpdate) -> None:
    if update.quantity == 0:
        raise InvalidTradeUpdate("Trade quantity must be non-zero")
    if not _is_valid_price(update.average_fill_price):
        raise InvalidTradeUpdate(f"Average fill price must be positive, got {update.average_fill_price}")
    if stats.last_timestamp is not None and update.timestamp < stats.last_timestamp:
        raise InvalidTradeUpdate(
            f"Update at {update.timestamp} arrived after update at {stats.last_timestamp}"
        )


def is_completed_trade(previous_position: int, position: int) -> bool:
    """A trade completes whenever exposure is reduced toward or through zero."""

    if previous_position > 0:
        return position < previous_position
    if previous_position < 0:
        return position > previous_position
    return False


def revalue(stats: RunningStatistics, price: float, multiplier: int) -> RunningStatistics:
    """Mark the open position to ``price``."""

    return replace(stats, position_value=stats.position * price * multiplier)


def apply_update(
    stats: RunningStatistics,
    update: TradeUpdate,
    commission: CommissionPort,
    multiplier: int = 1,
) -> RunningStatistics:
    """Return the statistics that result from applying ``update``.

    ``stats`` itself is never modified, so a failing commission model leaves
    the caller's state intact.
    """

    validate_update(stats, update)
    position = update.resulting_position
    timestamp = update.timestamp

    time_in_market = stats.time_in_market
    time_in_market_start = stats.time_in_market_start
    if position != 0:
        if time_in_market_start is None:
            time_in_market_start = timestamp
    elif time_in_market_start is not None:
        time_in_market += timestamp - time_in_market_start
        time_in_market_start = None

    quantity = abs(update.quantity)
    trade_amount = quantity * update.average_fill_price * multiplier
    total_bought = stats.total_bought
    total_sold = stats.total_sold
    if update.quantity > 0:
        total_bought += trade_amount
    else:
        total_sold += trade_amount

    trade_commission = commission.cost(quantity, update.average_fill_price)
    total_commission = stats.total_commission + trade_commission

    updated = replace(
        stats,
        time_in_market=time_in_market,
        time_in_market_start=time_in_market_start,
        total_bought=total_bought,
        total_sold=total_sold,
        trade_commission=trade_commission,
        total_commission=total_commission,
        position=position,
        last_timestamp=timestamp,
        is_completed_trade=is_completed_trade(stats.position, position),
    )
    updated = revalue(updated, update.average_fill_price, multiplier)
    if not updated.is_completed_trade:
        return updated

    net_profit = metrics.net_profit(updated)
    peak_net_profit = max(updated.peak_net_profit, net_profit)
    trade_profit = net_profit - updated.net_profit_as_of_previous_trade
    profitable = trade_profit >= 0
    return replace(
        updated,
        trades=updated.trades + 1,
        long_trades=updated.long_trades + (1 if stats.position > 0 else 0),
        short_trades=updated.short_trades + (1 if stats.position < 0 else 0),
        peak_net_profit=peak_net_profit,
        max_drawdown=max(updated.max_drawdown, peak_net_profit - net_profit),
        trade_profit=trade_profit,
        net_profit_as_of_previous_trade=net_profit,
        sum_trade_profit=updated.sum_trade_profit + trade_profit,
        sum_trade_profit_squared=updated.sum_trade_profit_squared + trade_profit * trade_profit,
        profitable_trades=updated.profitable_trades + (1 if profitable else 0),
        gross_profit=updated.gross_profit + (trade_profit if profitable else 0.0),
        gross_loss=updated.gross_loss + (0.0 if profitable else -trade_profit),
    )


class PerformanceAccumulator:
    """Tracks the performance of one strategy from its stream of fills.

    Not safe for concurrent writers: deliver updates from a single task, in
    timestamp order. Getters compute from one statistics object, which is
    replaced atomically on every update.
    """

    def __init__(
        self,
        commission: CommissionPort,
        multiplier: int = 1,
        mode: SessionMode = "BACKTEST",
        record_history: Optional[bool] = None,
    ) -> None:
        if multiplier < 1:
            raise ValueError("Contract multiplier must be at least 1")
        self.commission = commission
        self.multiplier = multiplier
        self.mode = mode
        self.record_history = records_history(mode) if record_history is None else record_history
        self._stats = RunningStatistics()
        self._chart = ChartSeries()

    def apply_update(self, update: TradeUpdate, mark_price: Optional[float] = None) -> RunningStatistics:
        """Fold a fill into the statistics, optionally marking to ``mark_price`` afterwards."""

        if mark_price is not None and not _is_valid_price(mark_price):
            logger.warning("trade_update_rejected", reason="mark_price", mark_price=mark_price)
            raise InvalidTradeUpdate(f"Mark price must be positive, got {mark_price}")
        try:
            stats = apply_update(self._stats, update, self.commission, self.multiplier)
        except InvalidTradeUpdate as exc:
            logger.warning("trade_update_rejected", reason=str(exc), timestamp=update.timestamp)
            raise
        if mark_price is not None:
            stats = revalue(stats, mark_price, self.multiplier)

        if self.record_history:
            self._chart.append(ChartPoint(update.timestamp, stats.net_profit_as_of_previous_trade))
        self._stats = stats

        if stats.is_completed_trade:
            logger.debug(
                "trade_completed",
                trade_profit=stats.trade_profit,
                trades=stats.trades,
                net_profit=stats.net_profit_as_of_previous_trade,
                max_drawdown=stats.max_drawdown,
            )
        return stats

    def mark_to_market(self, price: float) -> None:
        """Revalue the open position at the latest market price."""

        if not _is_valid_price(price):
            raise InvalidTradeUpdate(f"Mark price must be positive, got {price}")
        self._stats = revalue(self._stats, price, self.multiplier)

    @property
    def statistics(self) -> RunningStatistics:
        return self._stats

    def get_chart_series(self) -> Tuple[ChartPoint, ...]:
        """Return an immutable snapshot of the recorded net profit history."""

        return self._chart.snapshot()

    @property
    def chart(self) -> ChartSeries:
        return self._chart

    def get_position(self) -> int:
        return self._stats.position

    def get_trades(self) -> int:
        return self._stats.trades

    def get_profitable_trades(self) -> int:
        return self._stats.profitable_trades

    def get_unprofitable_trades(self) -> int:
        return self._stats.unprofitable_trades

    def get_is_completed_trade(self) -> bool:
        return self._stats.is_completed_trade

    def get_trade_profit(self) -> float:
        return self._stats.trade_profit

    def get_trade_commission(self) -> float:
        return self._stats.trade_commission

    def get_total_commission(self) -> float:
        return self._stats.total_commission

    def get_gross_profit(self) -> float:
        return self._stats.gross_profit

    def get_gross_loss(self) -> float:
        return self._stats.gross_loss

    def get_peak_net_profit(self) -> float:
        return self._stats.peak_net_profit

    def get_max_drawdown(self) -> float:
        return self._stats.max_drawdown

    def get_net_profit(self) -> float:
        return metrics.net_profit(self._stats)

    def get_percent_profitable(self) -> float:
        return metrics.percent_profitable(self._stats)

    def get_average_profit_per_trade(self) -> float:
        return metrics.average_profit_per_trade(self._stats)

    def get_profit_factor(self) -> float:
        return metrics.profit_factor(self._stats)

    def get_bias(self) -> float:
        return metrics.bias(self._stats)

    def get_average_duration_minutes(self) -> float:
        return metrics.average_duration_minutes(self._stats)

    def get_kelly_criterion(self) -> float:
        return metrics.kelly_criterion(self._stats)

    def get_performance_index(self) -> float:
        return metrics.performance_index(self._stats)

    def get_cpi(self) -> float:
        return metrics.composite_performance_index(self._stats)

    def summary(self) -> PerformanceSummary:
        return metrics.summarize(self._stats)
