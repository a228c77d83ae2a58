"""
Live position tracking.
The tracker keeps only the latest sample; listeners see every sample in
arrival order. Detaching is explicit: stop() must be called when the owning
view goes away.
"""
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional

from pinna.core.logger import logs
from pinna.models.places_model import Position

PositionCallback = Callable[[Position], None]


class TrackerState(str, Enum):
    UNINITIALIZED = "UNINITIALIZED"
    PERMISSION_REQUESTED = "PERMISSION_REQUESTED"
    DENIED = "DENIED"
    ACTIVE = "ACTIVE"
    STOPPED = "STOPPED"


class AccessResult(str, Enum):
    GRANTED = "GRANTED"
    DENIED = "DENIED"


class Subscription:
    """Detachable handle. remove() is safe to call more than once."""

    def __init__(self, on_remove: Callable[[], None]):
        self._on_remove = on_remove
        self.active = True

    def remove(self) -> None:
        if not self.active:
            return
        self.active = False
        self._on_remove()


class LocationProvider(ABC):
    """Device location feed"""

    @abstractmethod
    async def request_permission(self) -> bool:
        pass

    @abstractmethod
    async def current_position(self) -> Optional[Position]:
        pass

    @abstractmethod
    async def watch(self, callback: PositionCallback) -> Subscription:
        """Start pushing samples to callback until the subscription is removed"""
        pass


class PushLocationProvider(LocationProvider):
    """Feed whose samples are pushed in by the client (e.g. over HTTP)."""

    def __init__(self, permission_granted: bool = True):
        self.permission_granted = permission_granted
        self._watchers: list[PositionCallback] = []
        self._last: Optional[Position] = None

    async def request_permission(self) -> bool:
        return self.permission_granted

    async def current_position(self) -> Optional[Position]:
        return self._last

    async def watch(self, callback: PositionCallback) -> Subscription:
        self._watchers.append(callback)
        return Subscription(lambda: self._watchers.remove(callback))

    @property
    def watcher_count(self) -> int:
        return len(self._watchers)

    def push(self, position: Position) -> None:
        self._last = position
        for callback in list(self._watchers):
            callback(position)


class PositionTracker:
    def __init__(self, provider: LocationProvider):
        self.provider = provider
        self.state = TrackerState.UNINITIALIZED
        self._latest: Optional[Position] = None
        self._listeners: list[PositionCallback] = []
        self._feed: Optional[Subscription] = None

    async def request_access(self) -> AccessResult:
        if self.state == TrackerState.DENIED:
            return AccessResult.DENIED
        if self.state == TrackerState.ACTIVE:
            return AccessResult.GRANTED

        self.state = TrackerState.PERMISSION_REQUESTED
        try:
            granted = await self.provider.request_permission()
        except Exception as e:
            logs.log(logging.ERROR, f"Location permission request failed: {str(e)}")
            granted = False

        if not granted:
            self.state = TrackerState.DENIED
            logs.log(logging.WARNING, "Location permission denied, distances will be unknown")
            return AccessResult.DENIED

        self.state = TrackerState.ACTIVE
        return AccessResult.GRANTED

    async def start(self) -> bool:
        """Requests access if needed and subscribes to the feed. Returns False when denied."""
        if await self.request_access() == AccessResult.DENIED:
            return False
        if self._feed is not None:
            return True

        try:
            first = await self.provider.current_position()
        except Exception as e:
            logs.log(logging.WARNING, f"Could not read current position: {str(e)}")
            first = None
        if first is not None:
            self._handle_sample(first)

        self._feed = await self.provider.watch(self._handle_sample)
        logs.log(logging.INFO, "Position tracking started")
        return True

    def latest(self) -> Optional[Position]:
        return self._latest

    def on_update(self, callback: PositionCallback) -> Subscription:
        self._listeners.append(callback)
        return Subscription(lambda: self._discard_listener(callback))

    def _discard_listener(self, callback: PositionCallback) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _handle_sample(self, position: Position) -> None:
        if self.state != TrackerState.ACTIVE:
            return
        self._latest = position
        for callback in list(self._listeners):
            try:
                callback(position)
            except Exception as e:
                logs.log(logging.ERROR, f"Position listener failed: {str(e)}")

    def stop(self) -> None:
        if self._feed is not None:
            self._feed.remove()
            self._feed = None
            logs.log(logging.INFO, "Position tracking stopped")
        self._listeners.clear()
        if self.state == TrackerState.ACTIVE:
            self.state = TrackerState.STOPPED
