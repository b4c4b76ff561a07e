"""Keyed debounce timers on the asyncio event loop"""

import asyncio
from typing import Callable, Dict, Optional

from studio.logger import get_logger

logger = get_logger(__name__)


class Debouncer:
    """
    One cancellable delayed callback per key.

    Scheduling a key that already has a pending callback cancels it first, so a
    burst of calls runs only the last callback once the key has been quiet for
    `delay` seconds. Different keys never affect each other.
    """

    def __init__(self, delay: float, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.delay = delay
        self._loop = loop
        self._handles: Dict[str, asyncio.TimerHandle] = {}
        self._callbacks: Dict[str, Callable[[], None]] = {}

    def schedule(self, key: str, callback: Callable[[], None]):
        self.cancel(key)
        loop = self._loop or asyncio.get_running_loop()
        self._callbacks[key] = callback
        self._handles[key] = loop.call_later(self.delay, self._fire, key)

    def cancel(self, key: str) -> bool:
        handle = self._handles.pop(key, None)
        self._callbacks.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self):
        keys = list(self._handles)
        for key in keys:
            self.cancel(key)
        if keys:
            logger.debug(f"Cancelled {len(keys)} pending timer(s)")

    def flush(self, key: str) -> bool:
        """Run a pending callback now instead of waiting for its timer"""
        callback = self._callbacks.get(key)
        if callback is None:
            return False
        self.cancel(key)
        callback()
        return True

    def flush_all(self):
        for key in list(self._callbacks):
            self.flush(key)

    def is_pending(self, key: str) -> bool:
        return key in self._handles

    def _fire(self, key: str):
        self._handles.pop(key, None)
        callback = self._callbacks.pop(key, None)
        if callback is not None:
            callback()
