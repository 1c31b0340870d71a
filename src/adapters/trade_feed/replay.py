import asyncio
from typing import Awaitable, Callable, Iterable, List

from ...domain.events import TradeUpdateEvent
from ...infrastructure.logging import get_logger
from ...ports.trade_feed import TradeFeedPort

logger = get_logger(__name__)


class ReplayFeed(TradeFeedPort):
    """In-memory feed that replays recorded updates in arrival order."""

    def __init__(self, events: Iterable[TradeUpdateEvent] = ()) -> None:
        self._handlers: List[Callable[[TradeUpdateEvent], Awaitable[None]]] = []
        self._queue: asyncio.Queue[TradeUpdateEvent] = asyncio.Queue()
        self._running = False
        for event in events:
            self._queue.put_nowait(event)

    async def subscribe(self, handler: Callable[[TradeUpdateEvent], Awaitable[None]]) -> None:
        self._handlers.append(handler)

    async def start(self) -> None:
        self._running = True
        while self._running:
            event = await self._queue.get()
            for handler in list(self._handlers):
                try:
                    await handler(event)
                except Exception:
                    logger.exception("update_handler_failed", strategy_id=event.strategy_id, timestamp=event.timestamp)
            self._queue.task_done()

    async def emit(self, event: TradeUpdateEvent) -> None:
        """Inject an update (used in tests and live bridging)."""
        await self._queue.put(event)

    async def join(self) -> None:
        """Wait until every queued update has been delivered."""
        await self._queue.join()

    def stop(self) -> None:
        self._running = False
