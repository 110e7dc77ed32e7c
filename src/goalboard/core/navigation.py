"""
Navigable query state.

The selected main goal lives in one optional query parameter
(``mainGoalId`` by default). This module resolves that parameter into a
NavigationSelection and provides HistoryNavigator, an in-memory back stack
with the two write modes the dashboard needs:

- ``push``: user picked a goal; back/forward revisit earlier selections.
- ``replace``: server-driven correction; no new history entry.

Example:
    >>> nav = HistoryNavigator()
    >>> resolve_selection(nav.query)
    Representative()
    >>> nav.push({"mainGoalId": "42"})
    >>> resolve_selection(nav.query)
    Specific(goal_id=42)
    >>> nav.back()
    True
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol, Union
from urllib.parse import parse_qs, urlencode

logger = logging.getLogger(__name__)

DEFAULT_GOAL_PARAM = "mainGoalId"

QueryState = dict[str, str]
QueryListener = Callable[[QueryState], None]


@dataclass(frozen=True)
class Specific:
    """A specific main goal was requested."""

    goal_id: int


@dataclass(frozen=True)
class Representative:
    """No goal id in the query: ask the service for its representative goal."""


REPRESENTATIVE = Representative()

NavigationSelection = Union[Specific, Representative]


def parse_query_string(query: str) -> QueryState:
    """Parse ``?a=1&b=2`` (leading ``?`` optional); first value wins per key."""
    parsed = parse_qs(query.lstrip("?"), keep_blank_values=True)
    return {key: values[0] for key, values in parsed.items() if values}


def _first_value(value: str | Sequence[str] | None) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return value[0] if value else None


def parse_goal_id(raw: str | None) -> int | None:
    """
    Parse a goal id parameter value.

    Integer strings (``"42"``, ``" 7 "``, ``"-3"``) and integral decimals
    (``"42.0"``) parse; empty, non-numeric, non-finite and fractional values
    return None.
    """
    if raw is None:
        return None
    text = raw.strip()
    if not text or "_" in text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    return int(number)


def resolve_selection(
    query: Mapping[str, str | Sequence[str]] | str | None,
    param: str = DEFAULT_GOAL_PARAM,
) -> NavigationSelection:
    """
    Resolve the navigation selection from query state.

    Args:
        query: Query mapping (values may be lists, as from ``parse_qs``) or a
            raw query string
        param: Name of the goal id parameter

    Returns:
        Specific(goal_id) for a valid integer id, otherwise REPRESENTATIVE
    """
    if query is None:
        return REPRESENTATIVE
    if isinstance(query, str):
        query = parse_query_string(query)
    goal_id = parse_goal_id(_first_value(query.get(param)))
    if goal_id is None:
        return REPRESENTATIVE
    return Specific(goal_id)


def with_goal(query: Mapping[str, str], goal_id: int, param: str = DEFAULT_GOAL_PARAM) -> QueryState:
    """Copy of ``query`` with the goal parameter set."""
    updated = dict(query)
    updated[param] = str(goal_id)
    return updated


def without_param(query: Mapping[str, str], param: str = DEFAULT_GOAL_PARAM) -> QueryState:
    """Copy of ``query`` with ``param`` removed."""
    return {key: value for key, value in query.items() if key != param}


class Navigator(Protocol):
    """What the dashboard controller needs from navigable query state."""

    @property
    def query(self) -> QueryState: ...

    def push(self, params: Mapping[str, str]) -> None: ...

    def replace(self, params: Mapping[str, str]) -> None: ...

    def subscribe(self, listener: QueryListener) -> Callable[[], None]: ...


class HistoryNavigator:
    """
    In-memory navigation history.

    Keeps a list of query-state entries and a cursor. Listeners are called
    with the new query after every push, replace, back or forward.
    """

    def __init__(self, initial: Mapping[str, str] | str | None = None) -> None:
        if isinstance(initial, str):
            first = parse_query_string(initial)
        else:
            first = dict(initial or {})
        self._entries: list[QueryState] = [first]
        self._index = 0
        self._listeners: list[QueryListener] = []

    @property
    def query(self) -> QueryState:
        """Current query state (a copy)."""
        return dict(self._entries[self._index])

    @property
    def length(self) -> int:
        """Number of history entries."""
        return len(self._entries)

    @property
    def index(self) -> int:
        """Position of the current entry."""
        return self._index

    def query_string(self) -> str:
        """Current query state encoded as ``a=1&b=2``."""
        return urlencode(self._entries[self._index])

    def push(self, params: Mapping[str, str]) -> None:
        """Add a new entry after the current one, dropping forward entries."""
        del self._entries[self._index + 1:]
        self._entries.append(dict(params))
        self._index += 1
        logger.debug("push %s (history length %d)", dict(params), len(self._entries))
        self._notify()

    def replace(self, params: Mapping[str, str]) -> None:
        """Overwrite the current entry without growing the history."""
        self._entries[self._index] = dict(params)
        logger.debug("replace %s", dict(params))
        self._notify()

    def back(self) -> bool:
        """Move to the previous entry; False if already at the first."""
        if self._index == 0:
            return False
        self._index -= 1
        self._notify()
        return True

    def forward(self) -> bool:
        """Move to the next entry; False if already at the last."""
        if self._index >= len(self._entries) - 1:
            return False
        self._index += 1
        self._notify()
        return True

    def subscribe(self, listener: QueryListener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        query = self.query
        for listener in list(self._listeners):
            listener(dict(query))


__all__ = [
    "DEFAULT_GOAL_PARAM",
    "HistoryNavigator",
    "NavigationSelection",
    "Navigator",
    "QueryState",
    "REPRESENTATIVE",
    "Representative",
    "Specific",
    "parse_goal_id",
    "parse_query_string",
    "resolve_selection",
    "with_goal",
    "without_param",
]
