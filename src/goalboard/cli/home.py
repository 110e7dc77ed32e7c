"""
Goalboard CLI - home screen commands.

- ``goals``: list the selectable main goals
- ``home``: show the dashboard for a goal (or the representative goal)
- ``check``: toggle one weekday of a sub-goal and save it
"""

import asyncio
import logging

import typer
from pydantic import ValidationError
from rich.markup import escape

from goalboard.cli.errors import ExitCode, console, print_error, print_goalboard_error
from goalboard.cli.render import actions_table, format_achievement, goals_table
from goalboard.core.config import GoalboardConfig, load_config
from goalboard.core.goals import GoalListLoader
from goalboard.core.home.client import HomeApiClient
from goalboard.core.navigation import HistoryNavigator, Representative
from goalboard.core.recurrence import parse_weekday
from goalboard.core.session import HomeSession
from goalboard.core.toggle import PersistResult

logger = logging.getLogger(__name__)


def _is_debug(ctx: typer.Context) -> bool:
    return bool(ctx.obj.get("debug", False)) if ctx.obj else False


def _load_config() -> GoalboardConfig:
    try:
        return load_config()
    except ValidationError as e:
        print_error(
            "Invalid configuration",
            reason=str(e),
            solution="check .goalboard.json and ~/.config/goalboard/config.json",
        )
        raise typer.Exit(ExitCode.USER_ERROR)


def _navigator(config: GoalboardConfig, goal: int | None) -> HistoryNavigator:
    if goal is None:
        return HistoryNavigator()
    return HistoryNavigator({config.api.goal_query_param: str(goal)})


def _print_dashboard(session: HomeSession, requested_goal: int | None, debug: bool) -> None:
    """Print the session's dashboard state; exits with 1 on a load error."""
    state = session.state

    if state.has_error and state.error is not None:
        print_goalboard_error("Could not load the dashboard", state.error, debug)
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if session.goal_error is not None:
        console.print("[yellow]Warning:[/yellow] could not load the goal list")

    if requested_goal is not None and isinstance(session.dashboard.selection, Representative):
        console.print(
            f"[dim]Goal {requested_goal} was not found; showing the representative goal.[/dim]"
        )

    snapshot = state.snapshot
    if snapshot is None:
        console.print("[bold]No main goal yet.[/bold]")
        console.print("[dim]Create your first main goal to start tracking.[/dim]")
        return

    goal = snapshot.main_goal
    console.print(
        f"[bold]{escape(goal.name)}[/bold] [dim](#{goal.id})[/dim]  "
        f"last week {format_achievement(goal.last_achievement)}, "
        f"this week {format_achievement(goal.this_achievement)}"
    )
    if len(session.goals) > 1:
        console.print(goals_table(session.goals, current_id=goal.id))
    console.print(actions_table(snapshot, session.toggles))


def goals(ctx: typer.Context) -> None:
    """
    List the selectable main goals.
    """
    config = _load_config()

    async def run() -> GoalListLoader:
        async with HomeApiClient.from_config(config.api) as client:
            loader = GoalListLoader(client)
            await loader.load()
            return loader

    loader = asyncio.run(run())

    if loader.error is not None:
        print_goalboard_error("Could not load the goal list", loader.error, _is_debug(ctx))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if not loader.goals:
        console.print("[dim]No main goals yet.[/dim]")
        return

    console.print(goals_table(loader.goals))


def home(
    ctx: typer.Context,
    goal: int | None = typer.Option(
        None,
        "--goal",
        "-g",
        help="Main goal id (default: the representative goal)",
    ),
) -> None:
    """
    Show the dashboard for a main goal.

    Examples:
        goalboard home              # Representative goal
        goalboard home --goal 3     # Goal 3
    """
    config = _load_config()

    async def run() -> HomeSession:
        async with HomeApiClient.from_config(config.api) as client:
            session = HomeSession(client, _navigator(config, goal), config=config)
            await session.start()
            await session.aclose()
            return session

    session = asyncio.run(run())
    _print_dashboard(session, goal, _is_debug(ctx))


def check(
    ctx: typer.Context,
    action_id: int = typer.Argument(..., help="Sub-goal (recurring action) id"),
    day: str = typer.Argument(..., help="Weekday: 0-6 or mon..sun"),
    goal: int | None = typer.Option(
        None,
        "--goal",
        "-g",
        help="Main goal id (default: the representative goal)",
    ),
) -> None:
    """
    Toggle one weekday of a sub-goal for the current week and save it.

    Examples:
        goalboard check 12 wed
        goalboard check 12 0 --goal 3
    """
    debug = _is_debug(ctx)
    try:
        weekday = parse_weekday(day)
    except ValueError as e:
        print_error(str(e), solution="use 0-6 or a weekday name such as mon, tue, sun")
        raise typer.Exit(ExitCode.USER_ERROR)

    config = _load_config()

    async def run() -> tuple[HomeSession, PersistResult | None]:
        async with HomeApiClient.from_config(config.api) as client:
            session = HomeSession(client, _navigator(config, goal), config=config)
            state = await session.start()
            result = None
            if state.is_ready and action_id in session.toggles:
                result = await session.toggle(action_id, weekday)
            await session.aclose()
            return session, result

    session, result = asyncio.run(run())

    if result is None:
        if session.state.has_error:
            _print_dashboard(session, goal, debug)
        print_error(
            f"No sub-goal {action_id} on this dashboard",
            solution="goalboard home" + (f" --goal {goal}" if goal is not None else ""),
        )
        raise typer.Exit(ExitCode.USER_ERROR)

    if not result.ok and result.error is not None:
        print_goalboard_error(f"Could not save sub-goal {action_id}", result.error, debug)
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    logger.debug("Saved action %d dates %s", action_id, sorted(result.dates))
    _print_dashboard(session, goal, debug)


__all__ = ["check", "goals", "home"]
