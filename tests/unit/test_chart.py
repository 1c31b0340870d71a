import pytest

from src.adapters.commission.schedules import ZeroCommission
from src.application.performance import PerformanceAccumulator
from src.domain.chart import ChartBar, ChartOrderError, ChartPoint, ChartSeries
from src.domain.models import TradeUpdate, records_history


FILLS = [
    TradeUpdate(10, 100.0, 10, 1_000),
    TradeUpdate(-10, 110.0, 0, 2_000),
    TradeUpdate(-5, 110.0, -5, 3_000),
]


def test_backtest_records_every_update_in_order():
    acc = PerformanceAccumulator(ZeroCommission(), mode="BACKTEST")
    for update in FILLS:
        acc.apply_update(update)

    series = acc.get_chart_series()
    assert [p.timestamp for p in series] == [1_000, 2_000, 3_000]
    assert [p.net_profit for p in series] == pytest.approx([0.0, 100.0, 100.0])


@pytest.mark.parametrize("mode", ["OPTIMIZATION", "FORWARD_TEST", "TRADE"])
def test_live_modes_do_not_record(mode):
    acc = PerformanceAccumulator(ZeroCommission(), mode=mode)
    for update in FILLS:
        acc.apply_update(update)

    assert acc.get_chart_series() == ()
    assert not records_history(mode)


def test_explicit_record_flag_overrides_mode():
    acc = PerformanceAccumulator(ZeroCommission(), mode="TRADE", record_history=True)
    acc.apply_update(FILLS[0])

    assert len(acc.chart) == 1


def test_snapshot_is_not_affected_by_later_updates():
    acc = PerformanceAccumulator(ZeroCommission())
    acc.apply_update(FILLS[0])
    snapshot = acc.get_chart_series()
    acc.apply_update(FILLS[1])

    assert len(snapshot) == 1
    assert len(acc.get_chart_series()) == 2


def test_series_rejects_out_of_order_points():
    series = ChartSeries()
    series.append(ChartPoint(10, 1.0))
    with pytest.raises(ChartOrderError):
        series.append(ChartPoint(5, 2.0))


def test_to_bars_aggregates_by_bucket():
    series = ChartSeries()
    for timestamp, value in [(0, 0.0), (30_000, 10.0), (60_000, 5.0), (61_000, -5.0), (150_000, 20.0)]:
        series.append(ChartPoint(timestamp, value))

    assert series.to_bars(60_000) == [
        ChartBar(timestamp=0, open=0.0, high=10.0, low=0.0, close=10.0),
        ChartBar(timestamp=60_000, open=5.0, high=5.0, low=-5.0, close=-5.0),
        ChartBar(timestamp=120_000, open=20.0, high=20.0, low=20.0, close=20.0),
    ]
    with pytest.raises(ValueError):
        series.to_bars(0)
