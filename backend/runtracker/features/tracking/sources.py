"""
Sensor sources and subscription handles.

Every subscription returns a SensorHandle. The holder releases it with
close(); a handle releases its listener exactly once no matter how often
it is closed.

Sources:
- PushPositionSource / PushMotionSource: fed in-process (by the HTTP API
  or by tests) through push() / fail()
- IntervalTicker: asyncio task firing every `interval` seconds
- ManualTicker: fired explicitly with tick(), for tests and replays
"""

import asyncio
import itertools
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

from .models import GeoSample, IssueKind, MotionSample

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PositionError:
    """Event on the position source's error channel."""
    kind: IssueKind
    message: str
    at_ms: int = 0


class SensorHandle:
    """
    Ownership token for one live subscription.

    Usage:
        handle = source.subscribe(on_sample)
        ...
        handle.close()
    """

    def __init__(self, name: str, release: Callable[[], None]):
        self.name = name
        self._release: Optional[Callable[[], None]] = release

    @property
    def active(self) -> bool:
        return self._release is not None

    def close(self) -> None:
        """Release the subscription. Safe to call repeatedly."""
        release, self._release = self._release, None
        if release is not None:
            release()
            logger.debug(f"Released sensor handle: {self.name}")

    def _expire(self) -> None:
        """Mark released by the source side (platform dropped the watch)."""
        self._release = None

    def __repr__(self):
        state = "active" if self.active else "released"
        return f"<SensorHandle {self.name} ({state})>"


# =============================================================================
# Abstract sources
# =============================================================================

class PositionSource(ABC):
    """Stream of location fixes with an error channel."""

    @property
    @abstractmethod
    def available(self) -> bool:
        """Whether the platform offers location at all."""

    @abstractmethod
    def subscribe(
        self,
        on_sample: Callable[[GeoSample], None],
        on_error: Optional[Callable[[PositionError], None]] = None
    ) -> SensorHandle:
        """Start receiving fixes."""


class MotionSource(ABC):
    """Stream of accelerometer readings (gravity included)."""

    @abstractmethod
    def subscribe(self, on_sample: Callable[[MotionSample], None]) -> SensorHandle:
        """Start receiving readings."""


class Ticker(ABC):
    """Periodic clock used for elapsed time."""

    @abstractmethod
    def subscribe(self, on_tick: Callable[[], None]) -> SensorHandle:
        """Start ticking."""


class PermissionGate(ABC):
    """Platform permission prompt for the motion sensor."""

    @abstractmethod
    async def request(self) -> bool:
        """Return True when access is granted."""


# =============================================================================
# Push sources (in-process)
# =============================================================================

@dataclass
class _Listener(Generic[T]):
    on_sample: Callable[[T], None]
    on_error: Optional[Callable[[PositionError], None]]
    handle: SensorHandle


class _PushSource(Generic[T]):
    """Fan-out of pushed samples to live listeners."""

    def __init__(self, name: str):
        self.name = name
        self._listeners: Dict[int, _Listener[T]] = {}
        self._ids = itertools.count(1)

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    def _add_listener(
        self,
        on_sample: Callable[[T], None],
        on_error: Optional[Callable[[PositionError], None]] = None
    ) -> SensorHandle:
        listener_id = next(self._ids)
        handle = SensorHandle(
            f"{self.name}#{listener_id}",
            lambda: self._listeners.pop(listener_id, None)
        )
        self._listeners[listener_id] = _Listener(on_sample, on_error, handle)
        return handle

    def push(self, sample: T) -> None:
        """Deliver a sample to every live listener."""
        for listener in list(self._listeners.values()):
            if listener.handle.active:
                listener.on_sample(sample)

    def drop_listeners(self) -> None:
        """Platform-side teardown: every handle becomes inactive."""
        for listener in self._listeners.values():
            listener.handle._expire()
        self._listeners.clear()


class PushPositionSource(_PushSource[GeoSample], PositionSource):
    """Position source fed by push() and fail()."""

    def __init__(self, available: bool = True):
        super().__init__("position")
        self._available = available

    @property
    def available(self) -> bool:
        return self._available

    def set_available(self, available: bool) -> None:
        self._available = available

    def subscribe(self, on_sample, on_error=None) -> SensorHandle:
        return self._add_listener(on_sample, on_error)

    def fail(self, error: PositionError) -> None:
        """Deliver an error-channel event to every live listener."""
        for listener in list(self._listeners.values()):
            if listener.handle.active and listener.on_error is not None:
                listener.on_error(error)


class PushMotionSource(_PushSource[MotionSample], MotionSource):
    """Motion source fed by push()."""

    def __init__(self):
        super().__init__("motion")

    def subscribe(self, on_sample) -> SensorHandle:
        return self._add_listener(on_sample)


# =============================================================================
# Tickers
# =============================================================================

class IntervalTicker(Ticker):
    """
    asyncio-based periodic ticker.

    subscribe() must be called with a running event loop. Closing the
    handle cancels the task.
    """

    def __init__(self, interval: float = 1.0):
        self.interval = interval

    def subscribe(self, on_tick: Callable[[], None]) -> SensorHandle:
        task = asyncio.get_running_loop().create_task(self._run(on_tick))
        return SensorHandle("ticker", task.cancel)

    async def _run(self, on_tick: Callable[[], None]) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                on_tick()
            except Exception as e:
                logger.error(f"Tick callback error: {e}")


class ManualTicker(Ticker):
    """Ticker driven explicitly with tick()."""

    def __init__(self):
        self._callbacks: Dict[int, Callable[[], None]] = {}
        self._ids = itertools.count(1)

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def subscribe(self, on_tick: Callable[[], None]) -> SensorHandle:
        tick_id = next(self._ids)
        self._callbacks[tick_id] = on_tick
        return SensorHandle(
            f"manual-ticker#{tick_id}",
            lambda: self._callbacks.pop(tick_id, None)
        )

    def tick(self, times: int = 1) -> None:
        for _ in range(times):
            for callback in list(self._callbacks.values()):
                callback()


# =============================================================================
# Permission
# =============================================================================

class StaticPermissionGate(PermissionGate):
    """Permission answer known up front (reported by the device)."""

    def __init__(self, granted: bool = True):
        self.granted = granted
        self.requests = 0

    async def request(self) -> bool:
        self.requests += 1
        return self.granted
