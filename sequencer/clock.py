"""
Clock for driving sequencer timelines.
Emits (delta, elapsed) ticks to subscribers, either stepped manually by the
host or from an asyncio frame loop.
"""

import asyncio
import itertools
import logging
import time
from typing import Callable, Dict, Optional

logger = logging.getLogger('clock')

TickCallback = Callable[[float, float], None]


class Clock:
    """
    Shared tick source for timelines and animations.

    Times are in milliseconds. Subscribers receive (delta, elapsed) where
    elapsed is the total time delivered since the clock was created. A
    clock never re-enters its own step: calling advance() or tick() from
    inside a subscriber raises RuntimeError.
    """

    def __init__(self, fps: float = 60.0, time_fn: Callable[[], float] = time.perf_counter):
        if fps <= 0:
            raise ValueError(f"fps must be positive, got: {fps}")
        self.fps = fps
        self._time_fn = time_fn
        self._subscribers: Dict[int, TickCallback] = {}
        self._handles = itertools.count(1)
        self._elapsed: float = 0.0
        self._last_time: Optional[float] = None
        self._stepping = False
        self._running = False

    @property
    def elapsed(self) -> float:
        return self._elapsed

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def running(self) -> bool:
        return self._running

    def subscribe(self, callback: TickCallback) -> int:
        """
        Register a tick callback.

        Returns:
            Handle to pass to unsubscribe()
        """
        handle = next(self._handles)
        self._subscribers[handle] = callback
        return handle

    def unsubscribe(self, handle: Optional[int]) -> bool:
        """Remove a subscription. Unknown handles are ignored."""
        if handle is None:
            return False
        return self._subscribers.pop(handle, None) is not None

    def advance(self, delta: float):
        """
        Deliver one tick of delta milliseconds to all subscribers.

        Subscribers are called in subscription order. The subscriber set is
        snapshotted first: callbacks subscribed during this step get their
        first tick on the next step, and callbacks unsubscribed during this
        step are not called.
        """
        if self._stepping:
            raise RuntimeError("Clock re-entered while delivering a tick")

        self._stepping = True
        try:
            self._elapsed += delta
            for handle, callback in list(self._subscribers.items()):
                if handle in self._subscribers:
                    callback(delta, self._elapsed)
        finally:
            self._stepping = False

    def tick(self) -> float:
        """
        Advance by the real time passed since the previous tick.

        The first tick after construction or reset() only takes a time
        sample and delivers nothing, so the first delivered delta is real.

        Returns:
            The delta delivered, in milliseconds
        """
        now = self._time_fn()
        if self._last_time is None:
            self._last_time = now
            return 0.0

        delta = (now - self._last_time) * 1000
        self._last_time = now
        self.advance(delta)
        return delta

    def reset(self):
        """Forget the last real-time sample so the next tick() starts fresh."""
        self._last_time = None

    async def run(self, fps: Optional[float] = None):
        """
        Tick from an asyncio loop until stop() is called or nothing is subscribed.

        Args:
            fps: Frame rate override for this run
        """
        interval = 1.0 / (fps or self.fps)
        self._running = True
        self.reset()
        logger.info(f"Clock running at {1.0 / interval:.1f} fps")
        try:
            while self._running and self._subscribers:
                self.tick()
                await asyncio.sleep(interval)
        finally:
            self._running = False
            logger.info(f"Clock stopped after {self._elapsed:.1f}ms")

    def stop(self):
        """Stop a running run() loop after its current frame."""
        self._running = False
