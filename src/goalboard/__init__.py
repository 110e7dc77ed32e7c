"""
Goalboard - weekly goal dashboard client

Keeps a goal dashboard in sync with the selected main goal and turns weekday
check-offs into the calendar dates stored by the home service.
"""

__version__ = "0.1.0"

# Re-export core models for convenience
from goalboard.core.config.models import GoalboardConfig
from goalboard.core.home.models import DashboardSnapshot, Goal, RecurringAction

__all__ = ["DashboardSnapshot", "Goal", "GoalboardConfig", "RecurringAction", "__version__"]
