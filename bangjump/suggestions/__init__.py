"""
Suggestions package - Autocomplete for partially typed bangs.

The session module is a pure state machine; the controller owns a session,
talks to the background worker, and calls back into the UI.
"""

from .controller import SuggestionController
from .events import (
    Dismiss,
    EventSource,
    Key,
    KeyPressed,
    OutsideClick,
    PointerClick,
    PointerHover,
    PointerLeave,
    Resize,
    TextChanged,
)
from .session import SuggestionSession, SuggestionState, step, trigger_fragment

__all__ = [
    "SuggestionController",
    "SuggestionSession",
    "SuggestionState",
    "step",
    "trigger_fragment",
    "EventSource",
    "Key",
    "KeyPressed",
    "TextChanged",
    "PointerHover",
    "PointerLeave",
    "PointerClick",
    "OutsideClick",
    "Dismiss",
    "Resize",
]
