"""Derived performance metrics computed from running statistics.

Every function here is pure and cheap: metrics are recomputed on each read
and never cached, so they always reflect the latest applied update.
Degenerate inputs (no trades, zero variance, no losses) resolve to 0 or
infinity rather than raising.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .models import RunningStatistics


def net_profit(stats: RunningStatistics) -> float:
    """Return realized plus open P&L net of all commissions."""

    return stats.total_sold - stats.total_bought + stats.position_value - stats.total_commission


def percent_profitable(stats: RunningStatistics) -> float:
    if stats.trades == 0:
        return 0.0
    return 100.0 * stats.profitable_trades / stats.trades


def average_profit_per_trade(stats: RunningStatistics) -> float:
    if stats.trades == 0:
        return 0.0
    return net_profit(stats) / stats.trades


def profit_factor(stats: RunningStatistics) -> float:
    """Return gross profit over gross loss, infinite when nothing was lost."""

    if stats.gross_profit <= 0:
        return 0.0
    if stats.gross_loss == 0:
        return math.inf
    return stats.gross_profit / stats.gross_loss


def bias(stats: RunningStatistics) -> float:
    """Return the long/short skew of completed trades in percent."""

    if stats.trades == 0:
        return 0.0
    return 100.0 * (stats.long_trades - stats.short_trades) / stats.trades


def average_duration_minutes(stats: RunningStatistics) -> float:
    if stats.trades == 0:
        return 0.0
    return stats.time_in_market / (stats.trades * 60_000)


def kelly_criterion(stats: RunningStatistics) -> float:
    """Return the Kelly fraction in percent.

    A strategy that never lost scores 100; one that never won scores 0.
    """

    if stats.profitable_trades == 0:
        return 0.0
    unprofitable = stats.unprofitable_trades
    if unprofitable == 0:
        return 100.0

    average_win = stats.gross_profit / stats.profitable_trades
    average_loss = stats.gross_loss / unprofitable
    win_loss_ratio = average_win / average_loss
    probability_of_win = stats.profitable_trades / stats.trades
    if win_loss_ratio == 0:
        # only break-even wins: nothing offsets the losses
        return -math.inf
    return 100.0 * (probability_of_win - (1 - probability_of_win) / win_loss_ratio)


def performance_index(stats: RunningStatistics) -> float:
    """Return a Sharpe-like score of per-trade profits.

    sqrt(trades) * average profit per trade / standard deviation of trade
    profit, infinite when every trade made exactly the same amount.
    """

    trades = stats.trades
    if trades == 0:
        return 0.0
    # round-off can push the variance term slightly below zero
    variance_term = max(0.0, trades * stats.sum_trade_profit_squared - stats.sum_trade_profit**2)
    std_dev = math.sqrt(variance_term) / trades
    if std_dev == 0:
        return math.inf
    return math.sqrt(trades) * average_profit_per_trade(stats) / std_dev


def composite_performance_index(stats: RunningStatistics) -> float:
    """Return the CPI used to rank strategies against each other."""

    cpi = performance_index(stats) * profit_factor(stats) * kelly_criterion(stats) * net_profit(stats)
    return cpi / 100_000


@dataclass(frozen=True)
class PerformanceSummary:
    """Point-in-time copy of every metric, for display and ranking."""

    trades: int
    profitable_trades: int
    unprofitable_trades: int
    long_trades: int
    short_trades: int
    net_profit: float
    gross_profit: float
    gross_loss: float
    total_commission: float
    peak_net_profit: float
    max_drawdown: float
    percent_profitable: float
    average_profit_per_trade: float
    profit_factor: float
    bias: float
    average_duration_minutes: float
    kelly_criterion: float
    performance_index: float
    composite_performance_index: float


def summarize(stats: RunningStatistics) -> PerformanceSummary:
    return PerformanceSummary(
        trades=stats.trades,
        profitable_trades=stats.profitable_trades,
        unprofitable_trades=stats.unprofitable_trades,
        long_trades=stats.long_trades,
        short_trades=stats.short_trades,
        net_profit=net_profit(stats),
        gross_profit=stats.gross_profit,
        gross_loss=stats.gross_loss,
        total_commission=stats.total_commission,
        peak_net_profit=stats.peak_net_profit,
        max_drawdown=stats.max_drawdown,
        percent_profitable=percent_profitable(stats),
        average_profit_per_trade=average_profit_per_trade(stats),
        profit_factor=profit_factor(stats),
        bias=bias(stats),
        average_duration_minutes=average_duration_minutes(stats),
        kelly_criterion=kelly_criterion(stats),
        performance_index=performance_index(stats),
        composite_performance_index=composite_performance_index(stats),
    )
