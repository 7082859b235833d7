"""
Push-based channels used to feed frames in and publish control states out.
"""
import logging
from typing import Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ChannelSubscription:
    """Handle for one registered callback."""

    def __init__(self, channel: "Channel", callback: Callable):
        self._channel = channel
        self._callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._channel._remove(self._callback)
            self.active = False


class Channel(Generic[T]):
    """
    Synchronous callback registry.

    publish() calls every subscriber in registration order before returning,
    so values are delivered strictly in the order they were published.
    Subscribers only see values published after they subscribed; the most
    recent value is available through `value`.
    """

    def __init__(self, initial: Optional[T] = None):
        self._callbacks: List[Callable[[T], None]] = []
        self._value: Optional[T] = initial

    @property
    def value(self) -> Optional[T]:
        return self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def subscribe(self, callback: Callable[[T], None]) -> ChannelSubscription:
        self._callbacks.append(callback)
        return ChannelSubscription(self, callback)

    def publish(self, value: T) -> None:
        self._value = value
        # Copy so callbacks may unsubscribe while being notified
        for callback in list(self._callbacks):
            callback(value)

    def _remove(self, callback: Callable) -> None:
        try:
            self._callbacks.remove(callback)
        except ValueError:
            logger.debug("Callback already removed from channel")
