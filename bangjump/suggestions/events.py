"""
Input events consumed by the suggestion controller, and a simple in-process
event source that UI code can feed them into.
"""

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Callable


class Key(str, Enum):
    """Keys the suggestion surface reacts to. Anything else is ignored."""
    DOWN = "ArrowDown"
    UP = "ArrowUp"
    TAB = "Tab"
    ENTER = "Enter"
    ESCAPE = "Escape"


@dataclass(frozen=True)
class TextChanged:
    """The input text or cursor position changed."""
    text: str
    cursor: int


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class PointerHover:
    """Pointer entered the candidate at index."""
    index: int


@dataclass(frozen=True)
class PointerLeave:
    index: int


@dataclass(frozen=True)
class PointerClick:
    """Candidate at index was clicked."""
    index: int


@dataclass(frozen=True)
class OutsideClick:
    """Click landed outside both the input and the suggestion surface."""


@dataclass(frozen=True)
class Dismiss:
    pass


@dataclass(frozen=True)
class Resize:
    """Viewport was resized."""


EventHandler = Callable[[object], object]


class EventSource:
    """
    Fan-out of input events to subscribers.

    subscribe() returns an unsubscribe callable; calling it more than once
    is harmless.
    """

    def __init__(self):
        self._subscribers: dict[int, EventHandler] = {}
        self._ids = itertools.count(1)

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        subscription = next(self._ids)
        self._subscribers[subscription] = handler
        return lambda: self._subscribers.pop(subscription, None)

    def emit(self, event) -> bool:
        """
        Deliver an event to every subscriber.

        Returns:
            True if any subscriber consumed the event
        """
        consumed = False
        for handler in list(self._subscribers.values()):
            if handler(event):
                consumed = True
        return consumed

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
