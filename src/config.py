import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import tomllib

from .adapters.commission.schedules import PerContractCommission, ZeroCommission
from .adapters.trade_feed.replay import ReplayFeed
from .application.engine import PartitionedEngine
from .application.performance import PerformanceAccumulator
from .domain.models import SESSION_MODES, SessionMode
from .ports.commission import CommissionPort
from .ports.trade_feed import TradeFeedPort


DEFAULT_SETTINGS_PATH = Path("config/settings.toml")
LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


@dataclass
class PerformanceSettings:
    multiplier: int
    mode: SessionMode


@dataclass
class CommissionSettings:
    rate: float
    minimum: float
    maximum_percent: Optional[float]


@dataclass
class LoggingSettings:
    level: str


@dataclass
class Settings:
    performance: PerformanceSettings
    commission: CommissionSettings
    logging: LoggingSettings


def load_settings(settings_path: Path = DEFAULT_SETTINGS_PATH) -> Settings:
    """Load configuration from environment with optional config file defaults."""

    file_settings = _load_file_settings(settings_path)

    mode = _config_value("PERF_MODE", file_settings, "performance", "mode", "BACKTEST").upper()
    if mode not in SESSION_MODES:
        raise ValueError(f"Unknown session mode {mode!r}")
    multiplier = int(_config_value("PERF_MULTIPLIER", file_settings, "performance", "multiplier", "1"))
    if multiplier < 1:
        raise ValueError("Contract multiplier must be at least 1")
    level = _config_value("LOG_LEVEL", file_settings, "logging", "level", "INFO").upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}")
    maximum_percent = _config_value(
        "COMMISSION_MAXIMUM_PERCENT", file_settings, "commission", "maximum_percent", ""
    )

    return Settings(
        performance=PerformanceSettings(multiplier=multiplier, mode=mode),  # type: ignore[arg-type]
        commission=CommissionSettings(
            rate=float(_config_value("COMMISSION_RATE", file_settings, "commission", "rate", "0.0")),
            minimum=float(_config_value("COMMISSION_MINIMUM", file_settings, "commission", "minimum", "0.0")),
            maximum_percent=float(maximum_percent) if maximum_percent else None,
        ),
        logging=LoggingSettings(
            level=level,
        ),
    )


def _load_file_settings(settings_path: Path) -> Dict[str, Any]:
    if not settings_path.exists():
        return {}

    with settings_path.open("rb") as settings_file:
        return tomllib.load(settings_file)


def _config_value(
    env_key: str, settings: Dict[str, Any], section: str, key: str, default: str
) -> str:
    if env_key in os.environ:
        return os.environ[env_key]

    section_data = settings.get(section, {})
    return str(section_data.get(key, default))


def build_commission(settings: CommissionSettings) -> CommissionPort:
    if settings.rate == 0 and settings.minimum == 0:
        return ZeroCommission()
    return PerContractCommission(
        rate=settings.rate,
        minimum=settings.minimum,
        maximum_percent=settings.maximum_percent,
    )


def build_components(settings: Optional[Settings] = None) -> dict:
    """Construct all platform components for wiring in main.py."""

    settings = settings or load_settings()
    commission = build_commission(settings.commission)
    engine = PartitionedEngine()
    feed: TradeFeedPort = ReplayFeed()

    def accumulator_factory() -> PerformanceAccumulator:
        return PerformanceAccumulator(
            commission=commission,
            multiplier=settings.performance.multiplier,
            mode=settings.performance.mode,
        )

    return {
        "settings": settings,
        "commission": commission,
        "engine": engine,
        "feed": feed,
        "new_accumulator": accumulator_factory,
    }
