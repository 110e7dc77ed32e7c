"""
Dashboard controller state.
"""

from dataclasses import dataclass
from enum import Enum

from goalboard.core.exceptions import DashboardLoadError
from goalboard.core.home.models import DashboardSnapshot
from goalboard.core.navigation import REPRESENTATIVE, NavigationSelection


class DashboardStatus(str, Enum):
    """Dashboard load status."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class DashboardState:
    """
    Immutable view of the dashboard controller.

    READY with ``snapshot=None`` is the empty state: the service has no main
    goal for the selection. In ERROR the snapshot is always None; stale data
    is never shown next to an error. ``generation`` is the token of the
    request this state belongs to.
    """

    status: DashboardStatus = DashboardStatus.IDLE
    selection: NavigationSelection = REPRESENTATIVE
    snapshot: DashboardSnapshot | None = None
    error: DashboardLoadError | None = None
    generation: int = 0

    @property
    def is_loading(self) -> bool:
        return self.status == DashboardStatus.LOADING

    @property
    def is_ready(self) -> bool:
        return self.status == DashboardStatus.READY

    @property
    def is_empty(self) -> bool:
        """Ready, but there is no main goal to show."""
        return self.status == DashboardStatus.READY and self.snapshot is None

    @property
    def has_error(self) -> bool:
        return self.status == DashboardStatus.ERROR


__all__ = ["DashboardState", "DashboardStatus"]
