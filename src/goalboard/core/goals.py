"""
Goal list loading.

Loads the selectable main goals once per session. A failure is stored on
the loader as a GoalListLoadError instead of propagating, so the dashboard
keeps rendering; the two share no state.
"""

import logging
from typing import Protocol

from goalboard.core.exceptions import GoalboardError, GoalListLoadError
from goalboard.core.home.models import Goal

logger = logging.getLogger(__name__)


class GoalSource(Protocol):
    """Anything that can list main goals (HomeApiClient in production)."""

    async def list_main_goals(self) -> list[Goal]: ...


class GoalListLoader:
    """
    Fetches the list of selectable goals.

    Attributes:
        goals: Goals from the last successful load (empty until then)
        error: GoalListLoadError from the last failed load, else None
    """

    def __init__(self, source: GoalSource) -> None:
        self.source = source
        self.goals: list[Goal] = []
        self.error: GoalListLoadError | None = None
        self.loaded = False

    async def load(self) -> list[Goal]:
        """
        Fetch the goal list.

        Returns:
            The goals, or an empty list if loading failed (see ``error``)
        """
        self.error = None
        try:
            goals = await self.source.list_main_goals()
        except Exception as e:
            if isinstance(e, GoalboardError):
                logger.warning("Goal list load failed: %s", e)
            else:
                logger.exception("Unexpected error loading goal list")
            self._fail(e)
            return []

        self.goals = list(goals)
        self.loaded = True
        logger.debug("Loaded %d goals", len(self.goals))
        return list(self.goals)

    def _fail(self, cause: Exception) -> None:
        error = GoalListLoadError(cause=str(cause))
        error.__cause__ = cause
        self.error = error
        self.goals = []


__all__ = ["GoalListLoader", "GoalSource"]
