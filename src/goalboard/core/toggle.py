"""
Weekday toggle controller.

One ToggleController per recurring action. It owns the weekday set shown in
the action's Monday..Sunday row:

- ``reconcile()`` recomputes the set from upstream checked dates, always
  overwriting whatever was shown locally.
- ``on_toggle()`` flips one weekday, shows the result immediately, turns the
  new set into dates of the current week and hands them to the persistence
  callback as a background task.

The persistence callback reports a PersistResult. With the ``keep`` policy a
failed save leaves the optimistic set on screen; with ``revert`` the set goes
back to what it was before the toggle, unless a newer toggle or a
reconciliation has replaced it in the meantime.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from goalboard.core.exceptions import PersistenceError
from goalboard.core.home.models import RecurringAction
from goalboard.core.recurrence import (
    TodayAnchor,
    dates_to_weekday_indices,
    live_today,
    toggle_index,
    weekday_indices_to_dates,
)

logger = logging.getLogger(__name__)


class PersistFailurePolicy(str, Enum):
    """What a failed save does to the optimistic weekday set."""

    KEEP = "keep"
    REVERT = "revert"


@dataclass(frozen=True)
class PersistResult:
    """Outcome of saving the checked dates of one recurring action."""

    action_id: int
    dates: frozenset[str]
    ok: bool
    error: PersistenceError | None = None

    @classmethod
    def success(cls, action_id: int, dates: Iterable[str]) -> PersistResult:
        return cls(action_id=action_id, dates=frozenset(dates), ok=True)

    @classmethod
    def failure(
        cls, action_id: int, dates: Iterable[str], error: PersistenceError
    ) -> PersistResult:
        return cls(action_id=action_id, dates=frozenset(dates), ok=False, error=error)


PersistCallback = Callable[[int, frozenset[str]], Awaitable[PersistResult]]


class ToggleController:
    """
    Local weekday state for one recurring action.

    Attributes:
        action: The upstream action last reconciled with
        last_result: Result of the most recent completed save, if any
    """

    def __init__(
        self,
        action: RecurringAction,
        persist: PersistCallback,
        *,
        today: TodayAnchor = live_today,
        on_persist_failure: PersistFailurePolicy | str = PersistFailurePolicy.KEEP,
    ) -> None:
        """
        Initialize from an upstream action.

        Args:
            action: Recurring action whose checked dates seed the weekday set
            persist: Async callback saving ``(action_id, dates)``
            today: Today anchor used when turning weekdays into dates
            on_persist_failure: "keep" or "revert"
        """
        self.action = action
        self.persist = persist
        self.today = today
        self.on_persist_failure = PersistFailurePolicy(on_persist_failure)
        self.last_result: PersistResult | None = None

        self._checked_days = dates_to_weekday_indices(action.checked_dates)
        # Bumped on every local change; a revert only applies to its own toggle
        self._revision = 0
        self._pending: set[asyncio.Task[PersistResult]] = set()

    @property
    def action_id(self) -> int:
        return self.action.id

    @property
    def checked_days(self) -> frozenset[int]:
        """Weekday indices currently shown as checked."""
        return self._checked_days

    def is_checked(self, index: int) -> bool:
        return index in self._checked_days

    def reconcile(self, checked_dates: Iterable[str]) -> frozenset[int]:
        """
        Replace the local weekday set with one derived from upstream dates.

        Full overwrite: local toggles that upstream doesn't reflect are lost.
        """
        self._checked_days = dates_to_weekday_indices(checked_dates)
        self._revision += 1
        return self._checked_days

    def update(self, action: RecurringAction) -> frozenset[int]:
        """Adopt a new upstream copy of the action and reconcile with it."""
        self.action = action
        return self.reconcile(action.checked_dates)

    def on_toggle(self, index: int) -> asyncio.Task[PersistResult]:
        """
        Flip one weekday and save the resulting dates in the background.

        The local set changes before this returns. The returned task can be
        ignored (fire-and-forget) or awaited for the PersistResult.

        Raises:
            ValueError: If index is outside [0, 6]
            RuntimeError: If no event loop is running
        """
        previous = self._checked_days
        next_days = toggle_index(previous, index)
        self._checked_days = next_days
        self._revision += 1
        revision = self._revision

        next_dates = weekday_indices_to_dates(next_days, self.today())
        logger.debug(
            "Action %d: toggled weekday %d -> days=%s dates=%s",
            self.action_id,
            index,
            sorted(next_days),
            sorted(next_dates),
        )

        task = asyncio.get_running_loop().create_task(
            self._persist(next_dates, previous, revision)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait for all pending saves."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _persist(
        self,
        dates: frozenset[str],
        previous: frozenset[int],
        revision: int,
    ) -> PersistResult:
        try:
            result = await self.persist(self.action_id, dates)
        except Exception as e:
            logger.exception("Persistence callback raised for action %d", self.action_id)
            error = PersistenceError(self.action_id, f"Saving checked dates failed: {e}")
            error.__cause__ = e
            result = PersistResult.failure(self.action_id, dates, error)

        self.last_result = result
        if result.ok:
            return result

        logger.warning(
            "Saving checked dates for action %d failed: %s", self.action_id, result.error
        )
        if self.on_persist_failure == PersistFailurePolicy.REVERT:
            if revision == self._revision:
                self._checked_days = previous
                self._revision += 1
            else:
                logger.debug(
                    "Action %d changed since the failed toggle; not reverting", self.action_id
                )
        return result


__all__ = [
    "PersistCallback",
    "PersistFailurePolicy",
    "PersistResult",
    "ToggleController",
]
