import asyncio
from collections import defaultdict
from typing import Awaitable, Callable, DefaultDict, Dict

from ..domain.events import TradeUpdateEvent
from ..infrastructure.logging import get_logger

logger = get_logger(__name__)


class PartitionedEngine:
    """Routes updates to strategy specific workers to maintain ordering.

    Each strategy gets exactly one worker, so its accumulator sees a single
    writer receiving updates in the order they were enqueued.
    """

    def __init__(self) -> None:
        self._queues: DefaultDict[str, asyncio.Queue[TradeUpdateEvent]] = defaultdict(asyncio.Queue)
        self._workers: Dict[str, asyncio.Task[None]] = {}
        self._handlers: Dict[str, Callable[[TradeUpdateEvent], Awaitable[None]]] = {}

    def register_handler(self, strategy_id: str, handler: Callable[[TradeUpdateEvent], Awaitable[None]]) -> None:
        self._handlers[strategy_id] = handler
        if strategy_id not in self._workers:
            self._workers[strategy_id] = asyncio.create_task(self._worker(strategy_id))

    async def enqueue(self, event: TradeUpdateEvent) -> None:
        await self._queues[event.strategy_id].put(event)

    async def drain(self) -> None:
        """Wait until every enqueued update has been handled."""
        for queue in list(self._queues.values()):
            await queue.join()

    def stop(self) -> None:
        for worker in self._workers.values():
            worker.cancel()
        self._workers.clear()

    async def _worker(self, strategy_id: str) -> None:
        queue = self._queues[strategy_id]
        handler = self._handlers[strategy_id]
        while True:
            event = await queue.get()
            try:
                await handler(event)
            except Exception:
                logger.exception("update_handler_failed", strategy_id=strategy_id, timestamp=event.timestamp)
            finally:
                queue.task_done()
