"""Thread-safe observable value holder shared by the state containers."""
import threading
import logging
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
Subscriber = Callable[[T], None]


class StateContainer(Generic[T]):
    def __init__(self, initial: T):
        self._lock = threading.Lock()
        self._value = initial
        self._subscribers: List[Subscriber] = []

    def get(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value
            subscribers = list(self._subscribers)
        # Callbacks run outside the lock so they may read or update the container
        for callback in subscribers:
            callback(value)

    def update(self, fn: Callable[[T], T]) -> T:
        """Apply fn to the current value and store the result"""
        with self._lock:
            value = fn(self._value)
            self._value = value
            subscribers = list(self._subscribers)
        for callback in subscribers:
            callback(value)
        return value

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register callback for every later update; returns an unsubscribe function"""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe
