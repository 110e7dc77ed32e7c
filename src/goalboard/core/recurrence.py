"""
Weekly recurrence mapping.

Converts between the absolute calendar dates on which a recurring action was
checked and the weekday indices shown in a Monday..Sunday row
(Monday=0 ... Sunday=6, the same numbering as ``date.weekday()``).

Going from indices back to dates always lands in the week that contains
"today": a weekday checked on a different day keeps its weekday identity,
not its original date.

Example:
    >>> from datetime import date
    >>> today = date(2024, 1, 3)  # Wednesday
    >>> indices = dates_to_weekday_indices(["2024-01-01"])
    >>> sorted(indices)
    [0]
    >>> sorted(weekday_indices_to_dates(toggle_index(indices, 2), today))
    ['2024-01-01', '2024-01-03']
"""

from collections.abc import Callable, Iterable
from datetime import date, datetime, timedelta

WEEKDAY_COUNT = 7

# Short names accepted wherever a weekday is typed in by a user
WEEKDAY_NAMES = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

TodayAnchor = Callable[[], date]


def _check_index(index: int) -> int:
    if isinstance(index, bool) or not isinstance(index, int):
        raise ValueError(f"Weekday index must be an int in [0, 6], got {index!r}")
    if not 0 <= index < WEEKDAY_COUNT:
        raise ValueError(f"Weekday index must be in [0, 6], got {index}")
    return index


def parse_iso_date(value: str | date) -> date:
    """
    Parse a ``YYYY-MM-DD`` string (or pass a date through).

    A trailing time component (``2024-01-01T09:30:00``) is ignored.

    Raises:
        ValueError: If the string is not an ISO calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if "T" in text:
        text = text.split("T", 1)[0]
    return date.fromisoformat(text)


def dates_to_weekday_indices(dates: Iterable[str | date]) -> frozenset[int]:
    """
    Weekday indices of the given dates.

    Args:
        dates: ISO date strings or date objects

    Returns:
        Set of distinct weekday indices (empty for no dates)

    Raises:
        TypeError: If dates is None
        ValueError: If a string isn't an ISO calendar date
    """
    if dates is None:
        raise TypeError("dates must be an iterable of dates, not None")
    return frozenset(parse_iso_date(d).weekday() for d in dates)


def weekday_indices_to_dates(indices: Iterable[int], today: date) -> frozenset[str]:
    """
    Dates of the given weekdays within the week containing ``today``.

    Each index ``i`` maps to ``today + (i - today.weekday())`` days.

    Raises:
        ValueError: If an index is outside [0, 6]
    """
    today_index = today.weekday()
    return frozenset(
        (today + timedelta(days=_check_index(i) - today_index)).isoformat()
        for i in indices
    )


def toggle_index(indices: Iterable[int], index: int) -> frozenset[int]:
    """
    Remove ``index`` if present, otherwise add it.

    Toggling the same index twice returns the original set.

    Raises:
        ValueError: If index is outside [0, 6]
    """
    current = frozenset(indices)
    _check_index(index)
    if index in current:
        return current - {index}
    return current | {index}


def parse_weekday(value: str) -> int:
    """
    Parse a user-typed weekday: ``0``-``6`` or a name (``mon``, ``Monday``...).

    Raises:
        ValueError: If the value names no weekday
    """
    text = value.strip().lower()
    if text.isdigit():
        return _check_index(int(text))
    for i, name in enumerate(WEEKDAY_NAMES):
        if text[:3] == name and len(text) >= 3:
            return i
    raise ValueError(f"Unknown weekday: {value!r}")


def live_today() -> date:
    """The local date at the moment of the call."""
    return date.today()


class FrozenToday:
    """
    A today anchor fixed for the lifetime of a session.

    Avoids toggles drifting into the next week when a session spans
    midnight between Sunday and Monday.
    """

    def __init__(self, day: date | None = None) -> None:
        self.day = day if day is not None else date.today()

    def __call__(self) -> date:
        return self.day

    def __repr__(self) -> str:
        return f"FrozenToday({self.day.isoformat()})"


def make_today_anchor(policy: str) -> TodayAnchor:
    """
    Build a today anchor from the ``calendar.anchor`` config value.

    Args:
        policy: "live" (read the clock on every call) or "session" (freeze now)

    Raises:
        ValueError: For an unknown policy
    """
    if policy == "live":
        return live_today
    if policy == "session":
        return FrozenToday()
    raise ValueError(f"Unknown today anchor policy: {policy!r}")


__all__ = [
    "FrozenToday",
    "TodayAnchor",
    "WEEKDAY_COUNT",
    "WEEKDAY_NAMES",
    "dates_to_weekday_indices",
    "live_today",
    "make_today_anchor",
    "parse_iso_date",
    "parse_weekday",
    "toggle_index",
    "weekday_indices_to_dates",
]
