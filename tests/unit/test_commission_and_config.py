import pytest

from src.adapters.commission.schedules import PerContractCommission, ZeroCommission
from src.application.performance import PerformanceAccumulator
from src.config import build_commission, build_components, load_settings
from src.infrastructure.logging import configure_logging

CONFIG_ENV = (
    "PERF_MULTIPLIER",
    "PERF_MODE",
    "COMMISSION_RATE",
    "COMMISSION_MINIMUM",
    "COMMISSION_MAXIMUM_PERCENT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in CONFIG_ENV:
        monkeypatch.delenv(key, raising=False)


def test_per_contract_commission_rate_and_minimum():
    commission = PerContractCommission(rate=0.005, minimum=1.0)
    assert commission.cost(100, 50.0) == pytest.approx(1.0)
    assert commission.cost(1000, 50.0) == pytest.approx(5.0)


def test_per_contract_commission_capped_by_trade_value():
    commission = PerContractCommission(rate=0.005, minimum=1.0, maximum_percent=0.5)
    assert commission.cost(10, 2.0) == pytest.approx(0.1)


def test_commission_rejects_negative_parameters():
    with pytest.raises(ValueError):
        PerContractCommission(rate=-1.0)
    with pytest.raises(ValueError):
        PerContractCommission(rate=1.0, maximum_percent=-0.1)


def test_zero_commission():
    assert ZeroCommission().cost(10, 100.0) == 0.0


def test_defaults_without_file_or_env(tmp_path):
    settings = load_settings(tmp_path / "missing.toml")
    assert settings.performance.multiplier == 1
    assert settings.performance.mode == "BACKTEST"
    assert settings.commission.maximum_percent is None
    assert isinstance(build_commission(settings.commission), ZeroCommission)


def test_file_settings_with_env_override(tmp_path, monkeypatch):
    settings_path = tmp_path / "settings.toml"
    settings_path.write_text(
        '[performance]\nmultiplier = 50\nmode = "trade"\n\n[commission]\nrate = 2.4\nmaximum_percent = 0.5\n'
    )
    monkeypatch.setenv("COMMISSION_MINIMUM", "2.4")

    settings = load_settings(settings_path)
    assert settings.performance.multiplier == 50
    assert settings.performance.mode == "TRADE"
    assert settings.commission.rate == pytest.approx(2.4)
    assert settings.commission.minimum == pytest.approx(2.4)
    assert settings.commission.maximum_percent == pytest.approx(0.5)
    assert isinstance(build_commission(settings.commission), PerContractCommission)


@pytest.mark.parametrize(
    "key,value", [("PERF_MODE", "paper"), ("PERF_MULTIPLIER", "0"), ("LOG_LEVEL", "VERBOSE")]
)
def test_invalid_settings_rejected(tmp_path, monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(ValueError):
        load_settings(tmp_path / "missing.toml")


def test_build_components_creates_fresh_accumulators(tmp_path, monkeypatch):
    monkeypatch.setenv("PERF_MULTIPLIER", "5")
    components = build_components(load_settings(tmp_path / "missing.toml"))

    first = components["new_accumulator"]()
    second = components["new_accumulator"]()
    assert isinstance(first, PerformanceAccumulator)
    assert first is not second
    assert first.multiplier == 5
    assert first.commission is components["commission"]


def test_log_level_is_case_insensitive(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert load_settings(tmp_path / "missing.toml").logging.level == "DEBUG"


def test_configure_logging_rejects_unknown_level():
    with pytest.raises(ValueError):
        configure_logging("VERBOSE")
