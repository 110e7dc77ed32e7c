"""
Dashboard data controller and its state model.
"""

from .controller import DashboardDataController, DashboardSource
from .models import DashboardState, DashboardStatus

__all__ = [
    "DashboardDataController",
    "DashboardSource",
    "DashboardState",
    "DashboardStatus",
]
