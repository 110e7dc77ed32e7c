"""
Home service read model and HTTP client.
"""

from .client import HomeApiClient
from .models import DashboardSnapshot, Goal, RecurringAction, parse_snapshot

__all__ = [
    "DashboardSnapshot",
    "Goal",
    "HomeApiClient",
    "RecurringAction",
    "parse_snapshot",
]
