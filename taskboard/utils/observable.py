"""
Replay-latest observable value

One producer publishes complete values with ``set``; any number of consumers
``subscribe`` and immediately receive the current value, then every later one.
Derived values (``map``) are recomputed from the source on every publish and
cannot be set from outside.
"""

from typing import Callable, Generic, List, TypeVar
from taskboard.utils.logger import logger

T = TypeVar("T")
U = TypeVar("U")

Unsubscribe = Callable[[], None]


class ObservableValue(Generic[T]):
    """Single-producer, multi-consumer value holder"""

    def __init__(self, initial: T, name: str = "value"):
        self.name = name
        self._value = initial
        self._subscribers: List[Callable[[T], None]] = []
        self.logger = logger

    @property
    def value(self) -> T:
        """Current value (treat as read-only)"""
        return self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        """
        Register a consumer and replay the current value to it

        Args:
            callback: Called with every published value

        Returns:
            Function that removes the consumer (safe to call twice)
        """
        self._subscribers.append(callback)
        self._notify(callback, self._value)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def set(self, value: T) -> None:
        """Publish a new value to every consumer"""
        self._value = value
        # Copy: consumers may unsubscribe while being notified
        for callback in list(self._subscribers):
            self._notify(callback, value)

    def map(self, transform: Callable[[T], U], name: str = "") -> "DerivedValue[U]":
        """
        Create a value derived from this one

        Args:
            transform: Pure function of the source value
            name: Name used in log messages

        Returns:
            Observable recomputed on every publish of the source
        """
        derived: DerivedValue[U] = DerivedValue(transform(self._value), name or f"{self.name}.map")
        # Not subscribe(): the initial value is already computed above
        callback = lambda value: derived._publish(transform(value))  # noqa: E731
        self._subscribers.append(callback)
        derived._detach = lambda: self._subscribers.remove(callback) if callback in self._subscribers else None
        return derived

    def _notify(self, callback: Callable[[T], None], value: T) -> None:
        try:
            callback(value)
        except Exception as e:
            self.logger.error(f"[Observable:{self.name}] Subscriber failed: {e}", exc_info=True)


class DerivedValue(ObservableValue[T]):
    """Observable computed from another observable"""

    def __init__(self, initial: T, name: str = "derived"):
        super().__init__(initial, name)
        self._detach: Callable[[], None] = lambda: None

    def set(self, value: T) -> None:
        raise TypeError(f"Derived value '{self.name}' cannot be set directly")

    def detach(self) -> None:
        """Stop following the source value"""
        self._detach()

    def _publish(self, value: T) -> None:
        super().set(value)
