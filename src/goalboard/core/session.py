"""
Home session: the home screen's wiring of loaders and controllers.

A HomeSession

- loads the goal list and the dashboard concurrently at start (a goal list
  failure never blocks the dashboard),
- keeps one ToggleController per sub-goal of the current snapshot and
  reconciles each of them with every new snapshot,
- saves toggled weekdays through the home service and refetches the
  dashboard after a successful save,
- selects goals by pushing navigation entries.

Example:
    >>> async with HomeApiClient.from_config(config.api) as client:
    ...     session = HomeSession(client, HistoryNavigator(), config=config)
    ...     state = await session.start()
    ...     result = await session.toggle(state.snapshot.sub_goals[0].id, 2)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Protocol

from goalboard.core.config.models import GoalboardConfig
from goalboard.core.dashboard import DashboardDataController, DashboardState
from goalboard.core.exceptions import GoalboardError, GoalListLoadError, PersistenceError
from goalboard.core.goals import GoalListLoader
from goalboard.core.home.models import DashboardSnapshot, Goal
from goalboard.core.navigation import Navigator
from goalboard.core.recurrence import TodayAnchor, make_today_anchor
from goalboard.core.toggle import PersistResult, ToggleController

logger = logging.getLogger(__name__)


class HomeService(Protocol):
    """The remote operations a home session needs (HomeApiClient)."""

    async def list_main_goals(self) -> list[Goal]: ...

    async def get_home(self, goal_id: int | None = None) -> DashboardSnapshot | None: ...

    async def update_checked_dates(self, action_id: int, dates: Iterable[str]) -> None: ...


class HomeSession:
    """
    Goal list, dashboard and per-action toggles for one home screen.

    Attributes:
        goal_loader: Loader for the selectable goals
        dashboard: Dashboard data controller following ``navigator``
        toggles: Toggle controllers keyed by recurring action id
    """

    def __init__(
        self,
        service: HomeService,
        navigator: Navigator,
        *,
        config: GoalboardConfig | None = None,
        today: TodayAnchor | None = None,
    ) -> None:
        self.config = config or GoalboardConfig()
        self.service = service
        self.navigator = navigator
        self.today = today or make_today_anchor(self.config.calendar.anchor)

        self.goal_loader = GoalListLoader(service)
        self.dashboard = DashboardDataController(
            service, navigator, goal_param=self.config.api.goal_query_param
        )
        self.toggles: dict[int, ToggleController] = {}
        self._unsubscribe = self.dashboard.subscribe(self._on_dashboard_state)

    @property
    def goals(self) -> list[Goal]:
        return self.goal_loader.goals

    @property
    def goal_error(self) -> GoalListLoadError | None:
        return self.goal_loader.error

    @property
    def state(self) -> DashboardState:
        return self.dashboard.state

    async def start(self) -> DashboardState:
        """
        Load the goal list and the dashboard for the current navigation state.

        Returns:
            Dashboard state once every fetch issued so far has settled
        """
        goals_task = asyncio.get_running_loop().create_task(self.goal_loader.load())
        self.dashboard.start()
        await asyncio.gather(goals_task, self.dashboard.wait_idle())
        return self.dashboard.state

    async def refetch(self) -> DashboardState:
        """Refetch the dashboard for the current selection and wait for it."""
        self.dashboard.refetch()
        return await self.dashboard.wait_idle()

    async def select_goal(self, goal_id: int) -> DashboardState:
        """Push a goal selection and wait for the dashboard to load it."""
        self.dashboard.select_goal(goal_id)
        return await self.dashboard.wait_idle()

    def toggle(self, action_id: int, weekday: int) -> asyncio.Task[PersistResult]:
        """
        Toggle one weekday of a sub-goal.

        Raises:
            ValueError: If no sub-goal with ``action_id`` is on the dashboard,
                or the weekday is outside [0, 6]
        """
        controller = self.toggles.get(action_id)
        if controller is None:
            raise ValueError(f"Unknown recurring action: {action_id}")
        return controller.on_toggle(weekday)

    async def update_checked_dates(
        self, action_id: int, dates: frozenset[str]
    ) -> PersistResult:
        """
        Persistence callback for the toggle controllers.

        Saves through the home service; on success refetches the dashboard
        (when ``toggle.refetch_after_persist`` is on) so every toggle
        controller is reconciled with what the server stored.
        """
        try:
            await self.service.update_checked_dates(action_id, dates)
        except GoalboardError as e:
            error = PersistenceError(action_id, f"Saving checked dates failed: {e}")
            error.__cause__ = e
            return PersistResult.failure(action_id, dates, error)

        result = PersistResult.success(action_id, dates)
        if self.config.toggle.refetch_after_persist:
            await self.refetch()
        return result

    async def aclose(self) -> None:
        """Wait for pending saves, then stop following navigation."""
        for controller in list(self.toggles.values()):
            await controller.wait_idle()
        self._unsubscribe()
        self.dashboard.close()

    def _on_dashboard_state(self, state: DashboardState) -> None:
        if state.is_loading:
            return
        snapshot = state.snapshot if state.is_ready else None
        if snapshot is None:
            self.toggles.clear()
            return

        current_ids: set[int] = set()
        for action in snapshot.sub_goals:
            current_ids.add(action.id)
            controller = self.toggles.get(action.id)
            if controller is None:
                self.toggles[action.id] = ToggleController(
                    action,
                    self.update_checked_dates,
                    today=self.today,
                    on_persist_failure=self.config.toggle.on_persist_failure,
                )
            else:
                controller.update(action)

        for action_id in set(self.toggles) - current_ids:
            logger.debug("Sub-goal %d left the dashboard; dropping its toggles", action_id)
            del self.toggles[action_id]


__all__ = ["HomeService", "HomeSession"]
