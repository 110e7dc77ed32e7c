"""
Goalboard CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer

from goalboard import __version__
from goalboard.cli import home
from goalboard.cli.errors import console
from goalboard.core.config.env import load_layered_env

app = typer.Typer(
    name="goalboard",
    help="Weekly goal dashboard in your terminal",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for goalboard commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    Goalboard - track a main goal and its weekly sub-goals.

    Quick Start:
        goalboard goals              # List your main goals
        goalboard home               # Dashboard for the representative goal
        goalboard home --goal 3      # Dashboard for goal 3
        goalboard check 12 wed       # Toggle Wednesday for sub-goal 12

    Configuration:
        .goalboard.json, ~/.config/goalboard/config.json, GOALBOARD_* env vars
    """
    setup_logging(debug)
    # Precedence: OS env > project .env > user .env
    load_layered_env()
    ctx.obj = {"debug": debug}


app.command(name="goals")(home.goals)
app.command(name="home")(home.home)
app.command(name="check")(home.check)


@app.command()
def version() -> None:
    """Show goalboard version."""
    console.print(f"goalboard version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
