"""
Event primitives for property and object notifications.

Provides:
- Signal: synchronous observer used for change notifications
- AsyncSignal: observer whose subscribers may be coroutines and are awaited in order

Usage:
    changed = Signal("Name.Change")
    changed.connect(on_change)
    changed.emit(sender, args)

    async_changed = AsyncSignal("Name.AsyncChange")
    async_changed.connect(on_change_async)
    await async_changed.emit(sender, args)
"""
import inspect
from typing import Callable, List

from loguru import logger


class Signal:
    """
    A simple observer pattern implementation (Synchronous).
    Allows subscribers to connect to this signal and receive notifications.
    """
    def __init__(self, name: str = "Signal"):
        self.name = name
        self._subscribers: List[Callable] = []

    def connect(self, callback: Callable):
        """Connect a callback function to this signal."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def disconnect(self, callback: Callable):
        """Disconnect a callback function from this signal."""
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def emit(self, *args, **kwargs):
        """Broadcast arguments to all subscribers synchronously."""
        # subscribers may disconnect themselves while being notified
        for sub in list(self._subscribers):
            try:
                sub(*args, **kwargs)
            except Exception as e:
                logger.error(f"Signal '{self.name}' error in subscriber '{sub}': {e}")


class AsyncSignal(Signal):
    """
    Signal that awaits coroutine subscribers.

    Plain callables are invoked directly; coroutine functions are awaited
    one after another, so that all listeners have completed when ``emit`` returns.
    """

    async def emit(self, *args, **kwargs):
        """Broadcast arguments to all subscribers and await async ones."""
        for sub in list(self._subscribers):
            try:
                if inspect.iscoroutinefunction(sub):
                    await sub(*args, **kwargs)
                else:
                    res = sub(*args, **kwargs)
                    if inspect.isawaitable(res):
                        await res
            except Exception as e:
                logger.error(f"Signal '{self.name}' error in async subscriber '{sub}': {e}")
