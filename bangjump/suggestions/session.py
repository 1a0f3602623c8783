"""
Suggestion Session - Pure state machine for the bang suggestion surface.

States:
  CLOSED      surface hidden (initial and terminal state)
  PROMPTING   surface shown, prefix typed but no trigger text yet
  LISTING     candidates shown
  NAVIGATING  keyboard moving through candidates

step(session, event) never mutates anything: it returns the next session
plus the effects the controller should carry out (fire callbacks, request
matches). Passing through CLOSED always discards the session.

While a match request is in flight (awaiting), the previous candidates stay
on screen but cannot be navigated, hovered or picked: they belong to an
older fragment.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from bangjump.search.bangs import BangDefinition
from bangjump.suggestions.events import (
    Dismiss,
    Key,
    KeyPressed,
    OutsideClick,
    PointerClick,
    PointerHover,
    PointerLeave,
    Resize,
    TextChanged,
)


class SuggestionState(str, Enum):
    CLOSED = "closed"
    PROMPTING = "prompting"
    LISTING = "listing"
    NAVIGATING = "navigating"


@dataclass(frozen=True)
class SuggestionSession:
    raw_query: str = ""
    candidates: tuple[BangDefinition, ...] = ()
    selected_index: int = -1
    state: SuggestionState = SuggestionState.CLOSED
    keyboard_navigation: bool = False
    awaiting: bool = False

    @property
    def is_open(self) -> bool:
        return self.state != SuggestionState.CLOSED

    @property
    def selected(self) -> Optional[BangDefinition]:
        if 0 <= self.selected_index < len(self.candidates):
            return self.candidates[self.selected_index]
        return None


CLOSED_SESSION = SuggestionSession()


# Effects

@dataclass(frozen=True)
class OpenStateChanged:
    is_open: bool


@dataclass(frozen=True)
class CandidatesChanged:
    candidates: tuple[BangDefinition, ...]
    selected_index: int


@dataclass(frozen=True)
class Selection:
    trigger: str


@dataclass(frozen=True)
class RequestMatch:
    partial_trigger: str


@dataclass(frozen=True)
class Reposition:
    pass


@dataclass(frozen=True)
class CandidatesReady:
    """Matcher results for the controller's latest request."""
    request_id: int
    candidates: tuple[BangDefinition, ...]


@dataclass(frozen=True)
class Transition:
    session: SuggestionSession
    effects: tuple = field(default_factory=tuple)
    consumed: bool = False


def trigger_fragment(text: str, cursor: int, prefix: str = "!") -> Optional[str]:
    """
    Partial trigger under the cursor.

    Returns the text between the last bang prefix before the cursor and the
    cursor, or None if there is no bang being typed there (no prefix
    starting a word, or whitespace after it).

    Example:
        trigger_fragment("rust !g", 7)    → "g"
        trigger_fragment("rust !", 6)     → ""
        trigger_fragment("!g rust", 7)    → None
    """
    cursor = max(0, min(cursor, len(text)))
    before = text[:cursor]
    start = before.rfind(prefix)
    if start < 0:
        return None
    if start > 0 and not before[start - 1].isspace():
        return None

    fragment = before[start + len(prefix):]
    if any(ch.isspace() for ch in fragment):
        return None
    return fragment


def _close(session: SuggestionSession, consumed: bool = False) -> Transition:
    if not session.is_open:
        return Transition(CLOSED_SESSION, consumed=consumed)
    return Transition(CLOSED_SESSION, (OpenStateChanged(False),), consumed)


def _pickable(session: SuggestionSession, index: int) -> bool:
    return session.is_open and not session.awaiting and 0 <= index < len(session.candidates)


def _select(session: SuggestionSession, index: int) -> Transition:
    trigger = session.candidates[index].trigger
    effects = (Selection(trigger),) + _close(session).effects
    return Transition(CLOSED_SESSION, effects, consumed=True)


def _on_text_changed(session: SuggestionSession, event: TextChanged, prefix: str) -> Transition:
    fragment = trigger_fragment(event.text, event.cursor, prefix)

    if fragment is None:
        return _close(session)

    opening = () if session.is_open else (OpenStateChanged(True),)

    if session.is_open and fragment == session.raw_query:
        return Transition(session)

    if not fragment:
        prompting = SuggestionSession(state=SuggestionState.PROMPTING)
        return Transition(prompting, opening + (CandidatesChanged((), -1),))

    # Keep the old candidates on screen until the new ones arrive
    state = SuggestionState.LISTING if session.candidates else SuggestionState.PROMPTING
    waiting = replace(
        session if session.is_open else CLOSED_SESSION,
        raw_query=fragment,
        selected_index=-1,
        keyboard_navigation=False,
        state=state,
        awaiting=True,
    )
    effects = opening
    if session.selected_index >= 0:
        effects += (CandidatesChanged(waiting.candidates, -1),)
    return Transition(waiting, effects + (RequestMatch(fragment),))


def _on_candidates(session: SuggestionSession, event: CandidatesReady) -> Transition:
    if not session.awaiting:
        return Transition(session)

    listing = replace(
        session,
        candidates=tuple(event.candidates),
        selected_index=-1,
        keyboard_navigation=False,
        state=SuggestionState.LISTING,
        awaiting=False,
    )
    return Transition(listing, (CandidatesChanged(listing.candidates, -1),))


def _navigate(session: SuggestionSession, delta: int) -> Transition:
    count = len(session.candidates)
    if session.awaiting or not count:
        return Transition(session)
    if session.state not in (SuggestionState.LISTING, SuggestionState.NAVIGATING):
        return Transition(session)

    if session.selected_index < 0:
        index = 0 if delta > 0 else count - 1
    else:
        index = (session.selected_index + delta) % count

    navigating = replace(
        session,
        selected_index=index,
        keyboard_navigation=True,
        state=SuggestionState.NAVIGATING,
    )
    return Transition(navigating, (CandidatesChanged(session.candidates, index),), consumed=True)


def _on_key(session: SuggestionSession, key: str) -> Transition:
    if not session.is_open:
        return Transition(session)

    if key == Key.DOWN:
        return _navigate(session, 1)
    if key == Key.UP:
        return _navigate(session, -1)

    if key == Key.TAB:
        if session.awaiting:
            return Transition(session)
        if session.selected is not None:
            return _select(session, session.selected_index)
        if session.candidates:
            return _select(session, 0)
        return Transition(session)

    if key == Key.ENTER:
        if session.selected is not None:
            return _select(session, session.selected_index)
        # Nothing picked: close and let the form submit the query
        return _close(session)

    if key == Key.ESCAPE:
        return _close(session, consumed=True)

    return Transition(session)


def step(
    session: SuggestionSession,
    event,
    prefix: str = "!",
    fixed_position: bool = False,
) -> Transition:
    """
    Compute the next session for an input event.

    Args:
        session: Current session
        event: Input event (see suggestions.events) or CandidatesReady
        prefix: Bang-prefix character
        fixed_position: Surface uses fixed positioning (repositions on resize)

    Returns:
        Transition with the new session, effects, and whether the event
        was consumed (the UI should suppress its default action)
    """
    if isinstance(event, TextChanged):
        return _on_text_changed(session, event, prefix)

    if isinstance(event, CandidatesReady):
        return _on_candidates(session, event)

    if isinstance(event, KeyPressed):
        return _on_key(session, event.key)

    if isinstance(event, PointerHover):
        if not _pickable(session, event.index):
            return Transition(session)
        hovered = replace(
            session,
            selected_index=event.index,
            keyboard_navigation=False,
            state=SuggestionState.LISTING,
        )
        return Transition(hovered, (CandidatesChanged(session.candidates, event.index),))

    if isinstance(event, PointerLeave):
        if session.keyboard_navigation or session.selected_index != event.index:
            return Transition(session)
        left = replace(session, selected_index=-1)
        return Transition(left, (CandidatesChanged(session.candidates, -1),))

    if isinstance(event, PointerClick):
        if not _pickable(session, event.index):
            return Transition(session)
        return _select(session, event.index)

    if isinstance(event, (OutsideClick, Dismiss)):
        return _close(session)

    if isinstance(event, Resize):
        if session.is_open and fixed_position:
            return Transition(session, (Reposition(),))
        return Transition(session)

    return Transition(session)
