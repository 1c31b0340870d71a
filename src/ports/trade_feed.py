from abc import ABC, abstractmethod
from typing import Awaitable, Callable

from ..domain.events import TradeUpdateEvent


class TradeFeedPort(ABC):
    """Abstract source of fill/position updates for strategies."""

    @abstractmethod
    async def subscribe(self, handler: Callable[[TradeUpdateEvent], Awaitable[None]]) -> None:
        raise NotImplementedError

    @abstractmethod
    async def start(self) -> None:
        raise NotImplementedError
