import asyncio
from dataclasses import asdict
from typing import Dict

from src import config
from src.adapters.trade_feed.replay import ReplayFeed
from src.application.engine import PartitionedEngine
from src.application.performance import InvalidTradeUpdate, PerformanceAccumulator
from src.domain.events import TradeUpdateEvent
from src.infrastructure.logging import configure_logging, get_logger

logger = get_logger(__name__)

STRATEGY_IDS = ("breakout", "mean-reversion")


async def run() -> Dict[str, PerformanceAccumulator]:
    components = config.build_components()
    configure_logging(components["settings"].logging.level)
    engine: PartitionedEngine = components["engine"]
    feed: ReplayFeed = components["feed"]
    accumulators = {strategy_id: components["new_accumulator"]() for strategy_id in STRATEGY_IDS}

    async def on_update(event: TradeUpdateEvent) -> None:
        accumulator = accumulators[event.strategy_id]
        try:
            accumulator.apply_update(event.to_update(), mark_price=event.mark_price)
        except InvalidTradeUpdate as exc:
            logger.error("trade_update_skipped", strategy_id=event.strategy_id, error=str(exc))

    for strategy_id in STRATEGY_IDS:
        engine.register_handler(strategy_id, on_update)
    await feed.subscribe(engine.enqueue)

    feed_task = asyncio.create_task(feed.start())

    await feed.emit(TradeUpdateEvent("breakout", 10, 100.0, 10, 60_000))
    await feed.emit(TradeUpdateEvent("mean-reversion", -5, 50.0, -5, 60_000))
    await feed.emit(TradeUpdateEvent("breakout", -10, 110.0, 0, 180_000))
    await feed.emit(TradeUpdateEvent("mean-reversion", 5, 52.0, 0, 240_000))
    await feed.emit(TradeUpdateEvent("breakout", -10, 108.0, -10, 300_000))
    await feed.emit(TradeUpdateEvent("breakout", 10, 103.0, 0, 420_000))
    await feed.join()
    await engine.drain()

    feed.stop()
    feed_task.cancel()
    try:
        await feed_task
    except asyncio.CancelledError:
        pass
    engine.stop()

    for strategy_id, accumulator in accumulators.items():
        logger.info("strategy_performance", strategy_id=strategy_id, **asdict(accumulator.summary()))
    return accumulators


if __name__ == "__main__":
    asyncio.run(run())
