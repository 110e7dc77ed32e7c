"""
Standardized error handling and exit codes for the goalboard CLI.
"""

from enum import IntEnum

from rich.console import Console
from rich.markup import escape

from goalboard.core.exceptions import GoalboardError

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for goalboard commands."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Load or save failed."""

    USER_ERROR = 2
    """Configuration or input error (actionable by user)."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Example:
        >>> print_error(
        ...     "Could not load the dashboard",
        ...     reason="[/api/home] HTTP 503",
        ...     solution="goalboard home --goal 3",
        ... )
    """
    console.print(f"[red]Error:[/red] {escape(problem)}")

    if reason:
        console.print(f"[dim]{escape(reason)}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}")


def print_goalboard_error(problem: str, error: GoalboardError, debug: bool = False) -> None:
    """
    Print a goalboard error, including its context and cause in debug mode.
    """
    cause = error.__cause__
    reason = str(cause) if cause is not None else str(error)
    print_error(problem, reason=reason)
    if debug and error.context:
        for key, value in error.context.items():
            console.print(f"  [cyan]{key}:[/cyan] {escape(str(value))}")


__all__ = ["ExitCode", "console", "print_error", "print_goalboard_error"]
