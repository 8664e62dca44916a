"""
Render scheduler: turns bursts of container size-change notifications into at
most one render per frame, per container.

Per container the subscription is either Idle or Pending(handle). A
notification while Idle requests a frame; notifications while Pending only
update the latest size. When the frame fires the render runs once with the
most recent size and the state returns to Idle.
"""

import asyncio
import itertools
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Union

from chartkit.log import get_logger

logger = get_logger(__name__)

Size = Tuple[float, float]
RenderFn = Callable[[Optional[Size]], None]
Unsubscribe = Callable[[], None]
Observe = Callable[[Any, Callable[[Optional[Size]], None]], Unsubscribe]


# --- Frame clocks ---

class AsyncioFrameClock:
    """Frame boundaries on the running asyncio loop, one every 1/fps seconds."""

    def __init__(self, fps: int = 60, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.interval = 1.0 / fps
        self._loop = loop

    def request_frame(self, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(self.interval, callback)

    def cancel_frame(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


class ManualFrameClock:
    """
    Frame boundaries driven by explicit tick() calls. Used by the streamlit
    host (one tick per script run) and by tests.
    """

    def __init__(self):
        self._pending: Dict[int, Callable[[], None]] = {}
        self._ids = itertools.count(1)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def tick(self) -> int:
        """Fire every callback queued before this tick. Returns how many ran."""
        due, self._pending = self._pending, {}
        for callback in due.values():
            callback()
        return len(due)


# --- Subscription state ---

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Pending:
    handle: Any


State = Union[Idle, Pending]
IDLE = Idle()


class RenderSubscription:
    def __init__(self, container, render: RenderFn, clock, unsubscribe: Optional[Unsubscribe] = None):
        self.container = container
        self._render = render
        self._clock = clock
        self._unsubscribe = unsubscribe
        self._latest_size: Optional[Size] = None
        self.state: State = IDLE
        self.disposed = False

    def notify(self, size: Optional[Size] = None) -> None:
        if self.disposed:
            return
        if size is not None:
            self._latest_size = size
        if isinstance(self.state, Idle):
            self.state = Pending(self._clock.request_frame(self._on_frame))
            logger.debug(f"Render scheduled for {self._name}")

    # Redraw without a size change (e.g. after data arrives)
    request = notify

    def _on_frame(self) -> None:
        if self.disposed:
            return
        try:
            self._render(self._latest_size)
        finally:
            self.state = IDLE

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if isinstance(self.state, Pending):
            self._clock.cancel_frame(self.state.handle)
            logger.debug(f"Cancelled pending render for {self._name}")
        self.state = IDLE

    @property
    def _name(self) -> str:
        return getattr(self.container, "selector", repr(self.container))


class RenderScheduler:
    """
    Args:
        clock: request_frame(cb) -> handle / cancel_frame(handle).
        observe: observe(container, cb) -> unsubscribe; cb receives the new
            size (or None when only "size may have changed" is known).
    """

    def __init__(self, clock, observe: Observe):
        self.clock = clock
        self.observe = observe

    def watch(self, container, render: RenderFn) -> RenderSubscription:
        subscription = RenderSubscription(container, render, self.clock)
        subscription._unsubscribe = self.observe(container, subscription.notify)
        return subscription
