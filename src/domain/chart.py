from dataclasses import dataclass
from typing import List, Optional, Tuple


class ChartOrderError(ValueError):
    """Raised when a chart point would break time ordering."""


@dataclass(frozen=True)
class ChartPoint:
    """Net profit observed at a timestamp (milliseconds)."""

    timestamp: int
    net_profit: float


@dataclass(frozen=True)
class ChartBar:
    """OHLC aggregate of net profit over one fixed-width time bucket."""

    timestamp: int
    open: float
    high: float
    low: float
    close: float


class ChartSeries:
    """Append-only net profit history for a strategy session."""

    def __init__(self) -> None:
        self._points: List[ChartPoint] = []

    def append(self, point: ChartPoint) -> None:
        if self._points and point.timestamp < self._points[-1].timestamp:
            raise ChartOrderError(
                f"Chart point at {point.timestamp} precedes last point at {self._points[-1].timestamp}"
            )
        self._points.append(point)

    def snapshot(self) -> Tuple[ChartPoint, ...]:
        """Return an immutable copy of the points recorded so far."""

        return tuple(self._points)

    def to_bars(self, bar_size_ms: int) -> List[ChartBar]:
        """Aggregate points into bars, each stamped with its bucket start."""

        if bar_size_ms <= 0:
            raise ValueError("bar_size_ms must be positive")
        bars: List[ChartBar] = []
        current: Optional[ChartBar] = None
        for point in self.snapshot():
            bucket = point.timestamp - point.timestamp % bar_size_ms
            if current is not None and current.timestamp == bucket:
                current = ChartBar(
                    timestamp=bucket,
                    open=current.open,
                    high=max(current.high, point.net_profit),
                    low=min(current.low, point.net_profit),
                    close=point.net_profit,
                )
                continue
            if current is not None:
                bars.append(current)
            current = ChartBar(
                timestamp=bucket,
                open=point.net_profit,
                high=point.net_profit,
                low=point.net_profit,
                close=point.net_profit,
            )
        if current is not None:
            bars.append(current)
        return bars

    def __len__(self) -> int:
        return len(self._points)
