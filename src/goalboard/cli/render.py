"""
Rich renderables for the goalboard CLI.
"""

from rich.markup import escape
from rich.table import Table

from goalboard.core.home.models import DashboardSnapshot, Goal
from goalboard.core.toggle import ToggleController

DAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
CHECKED = "■"
UNCHECKED = "□"


def format_achievement(value: float) -> str:
    return f"{value:g}%"


def goals_table(goals: list[Goal], current_id: int | None = None) -> Table:
    """Table of selectable goals; the current goal is marked with '*'."""
    table = Table(title="Main goals")
    table.add_column("", width=1)
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Name")
    table.add_column("Last week", justify="right")
    table.add_column("This week", justify="right")

    for goal in goals:
        table.add_row(
            "*" if goal.id == current_id else "",
            str(goal.id),
            escape(goal.name),
            format_achievement(goal.last_achievement),
            format_achievement(goal.this_achievement),
        )
    return table


def weekday_cells(checked_days: frozenset[int]) -> list[str]:
    return [CHECKED if i in checked_days else UNCHECKED for i in range(len(DAY_LABELS))]


def actions_table(
    snapshot: DashboardSnapshot,
    toggles: dict[int, ToggleController],
) -> Table:
    """
    One row per sub-goal with its weekday checks.

    Weekday state comes from the toggle controllers, so it shows what a
    user would see after local toggles.
    """
    table = Table(title=escape(snapshot.main_goal.name))
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Action")
    table.add_column("Target", justify="right")
    for label in DAY_LABELS:
        table.add_column(label, justify="center")

    for action in snapshot.sub_goals:
        controller = toggles.get(action.id)
        checked = controller.checked_days if controller is not None else frozenset()
        table.add_row(
            str(action.id),
            escape(action.title),
            f"{action.target_count}x",
            *weekday_cells(checked),
        )
    return table


__all__ = [
    "DAY_LABELS",
    "actions_table",
    "format_achievement",
    "goals_table",
    "weekday_cells",
]
