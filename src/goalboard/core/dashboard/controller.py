"""
Dashboard data controller.

Keeps the dashboard snapshot in sync with the goal selected in the query
state:

1. Every selection change (and ``start()``) enters LOADING and issues a
   fetch tagged with the next generation token.
2. A response without a main goal gives READY(empty); if a specific goal was
   requested, the goal parameter is removed with a *replace* navigation.
   That correction is a selection change, so the representative goal is
   fetched next, and the corrected fetch's task resolves with its result.
3. A response with a main goal gives READY with the new snapshot.
4. A failed fetch gives ERROR with a DashboardLoadError and no snapshot.
5. Results whose token is not the latest are dropped without a transition,
   so overlapping requests can complete in any order.
6. ``refetch()`` repeats step 1 for the current selection.

Nothing retries on its own; a new attempt needs a selection change or a
``refetch()``. Pending requests are never cancelled, only ignored.

Example:
    >>> nav = HistoryNavigator("mainGoalId=3")
    >>> controller = DashboardDataController(client, nav)
    >>> await controller.start()
    >>> controller.state.snapshot.main_goal.id
    3
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

from goalboard.core.dashboard.models import DashboardState, DashboardStatus
from goalboard.core.exceptions import DashboardLoadError, GoalboardError
from goalboard.core.home.models import DashboardSnapshot
from goalboard.core.navigation import (
    DEFAULT_GOAL_PARAM,
    NavigationSelection,
    Navigator,
    QueryState,
    Specific,
    resolve_selection,
    with_goal,
    without_param,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[DashboardState], None]


class DashboardSource(Protocol):
    """Anything that can fetch a dashboard snapshot (HomeApiClient in production)."""

    async def get_home(self, goal_id: int | None = None) -> DashboardSnapshot | None: ...


class DashboardDataController:
    """
    URL-driven dashboard loader with generation-token race protection.

    Must be started from inside a running event loop; fetches run as tasks on
    that loop. All state changes happen on the loop between awaits, so no
    locking is needed.
    """

    def __init__(
        self,
        source: DashboardSource,
        navigator: Navigator,
        *,
        goal_param: str = DEFAULT_GOAL_PARAM,
    ) -> None:
        """
        Initialize the controller.

        Args:
            source: Dashboard snapshot source
            navigator: Navigable query state holding the goal parameter
            goal_param: Name of the goal id query parameter
        """
        self.source = source
        self.navigator = navigator
        self.goal_param = goal_param

        self._state = DashboardState()
        self._selection: NavigationSelection | None = None
        self._generation = 0
        self._pending: set[asyncio.Task[DashboardState]] = set()
        self._latest: asyncio.Task[DashboardState] | None = None
        self._listeners: list[StateListener] = []
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def state(self) -> DashboardState:
        """Current visible state."""
        return self._state

    @property
    def selection(self) -> NavigationSelection | None:
        """Selection the latest request was issued for (None before start)."""
        return self._selection

    @property
    def generation(self) -> int:
        """Token of the most recently issued request."""
        return self._generation

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener called after every state transition.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> asyncio.Task[DashboardState]:
        """
        Resolve the initial selection, start following navigation, and fetch.

        Returns:
            The task of the initial fetch

        Raises:
            RuntimeError: If already started or no event loop is running
        """
        if self._unsubscribe is not None:
            raise RuntimeError("Dashboard controller already started")
        self._unsubscribe = self.navigator.subscribe(self._on_query_changed)
        self._selection = resolve_selection(self.navigator.query, self.goal_param)
        return self._issue()

    def refetch(self) -> asyncio.Task[DashboardState]:
        """
        Fetch again for the current selection.

        Raises:
            RuntimeError: If the controller hasn't been started
        """
        if self._selection is None:
            raise RuntimeError("Dashboard controller not started")
        return self._issue()

    def select_goal(self, goal_id: int) -> None:
        """Select a goal by pushing a new navigation entry."""
        self.navigator.push(with_goal(self.navigator.query, goal_id, self.goal_param))

    async def wait_idle(self) -> DashboardState:
        """Wait until no fetch is pending, including ones issued meanwhile."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        return self._state

    def close(self) -> None:
        """
        Stop following navigation.

        Pending fetches still complete but their results are dropped.
        """
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._generation += 1

    def _on_query_changed(self, query: QueryState) -> None:
        selection = resolve_selection(query, self.goal_param)
        if selection == self._selection:
            return
        logger.debug("Selection changed: %s -> %s", self._selection, selection)
        self._selection = selection
        self._issue()

    def _issue(self) -> asyncio.Task[DashboardState]:
        selection = self._selection
        if selection is None:
            raise RuntimeError("Dashboard controller not started")
        self._generation += 1
        generation = self._generation

        self._set_state(
            DashboardState(
                status=DashboardStatus.LOADING,
                selection=selection,
                snapshot=self._state.snapshot,
                error=None,
                generation=generation,
            )
        )

        task = asyncio.get_running_loop().create_task(self._load(generation, selection))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        self._latest = task
        return task

    async def _load(self, generation: int, selection: NavigationSelection) -> DashboardState:
        goal_id = selection.goal_id if isinstance(selection, Specific) else None

        try:
            snapshot = await self.source.get_home(goal_id)
        except Exception as e:
            if not self._is_current(generation):
                return self._state
            if isinstance(e, GoalboardError):
                logger.warning("Dashboard load failed for goal %s: %s", goal_id, e)
            else:
                logger.exception("Unexpected error loading dashboard for goal %s", goal_id)
            error = DashboardLoadError(goal_id=goal_id, cause=str(e))
            error.__cause__ = e
            self._set_state(
                DashboardState(
                    status=DashboardStatus.ERROR,
                    selection=selection,
                    snapshot=None,
                    error=error,
                    generation=generation,
                )
            )
            return self._state

        if not self._is_current(generation):
            return self._state

        self._set_state(
            DashboardState(
                status=DashboardStatus.READY,
                selection=selection,
                snapshot=snapshot,
                error=None,
                generation=generation,
            )
        )

        if snapshot is None and isinstance(selection, Specific):
            logger.info("No main goal %d on the server; clearing it from the URL", goal_id)
            self.navigator.replace(without_param(self.navigator.query, self.goal_param))
            # The replace issued the representative fetch; settle with its result
            follow_up = self._latest
            if follow_up is not None and follow_up is not asyncio.current_task():
                return await follow_up

        return self._state

    def _is_current(self, generation: int) -> bool:
        if generation == self._generation:
            return True
        logger.debug(
            "Dropping stale dashboard result (token %d, latest %d)",
            generation,
            self._generation,
        )
        return False

    def _set_state(self, state: DashboardState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)


__all__ = ["DashboardDataController", "DashboardSource", "StateListener"]
