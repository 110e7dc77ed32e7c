"""
Pytest configuration and shared fixtures.

Provides sample wire payloads, a scriptable in-memory home service, and
helpers for driving the event loop in controller tests.
"""

import asyncio
from collections.abc import Callable, Iterable
from datetime import date
from typing import Any

import pytest

from goalboard.core.config import clear_cache
from goalboard.core.home.models import DashboardSnapshot, Goal
from goalboard.core.recurrence import FrozenToday

# Wednesday; its week runs 2024-01-01 (Mon) .. 2024-01-07 (Sun)
WEDNESDAY = date(2024, 1, 3)


# ==============================================================================
# Payload Builders
# ==============================================================================


def goal_payload(goal_id: int, name: str | None = None, last: float = 50, this: float = 75) -> dict[str, Any]:
    return {
        "id": goal_id,
        "name": name or f"Goal {goal_id}",
        "lastAchievement": last,
        "thisAchievement": this,
    }


def action_payload(
    action_id: int,
    checked: Iterable[str] = (),
    title: str | None = None,
) -> dict[str, Any]:
    return {
        "dailyActionId": action_id,
        "dailyActionTitle": title or f"Action {action_id}",
        "dailyActionTargetNum": 3,
        "dailyActionContent": "Every morning",
        "checkedDate": list(checked),
        "color": "bg-green-400",
    }


def home_payload(goal_id: int | None, actions: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    """The ``data`` object of a home response; goal_id None means no main goal."""
    if goal_id is None:
        return {"mainGoal": None, "subGoals": [], "progress": None}
    return {
        "mainGoal": goal_payload(goal_id),
        "subGoals": actions or [],
        "progress": {"weeks": [[1, 0, 1]]},
    }


def make_snapshot(goal_id: int, actions: list[dict[str, Any]] | None = None) -> DashboardSnapshot:
    return DashboardSnapshot.model_validate(home_payload(goal_id, actions))


async def settle(rounds: int = 10) -> None:
    """Let ready tasks on the loop run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


# ==============================================================================
# Fake Home Service
# ==============================================================================


class FakeHomeService:
    """
    In-memory home service.

    ``snapshots`` maps a requested goal id (None for the representative goal)
    to a snapshot, None (no main goal) or an exception to raise. A gate
    registered with ``gate(goal_id)`` holds that request until released.
    Saved dates are written back into every stored snapshot, passed through
    ``normalize`` first when one is set.
    """

    def __init__(
        self,
        snapshots: dict[int | None, Any] | None = None,
        goals: list[Goal] | None = None,
    ) -> None:
        self.snapshots: dict[int | None, Any] = snapshots or {}
        self.goals = goals or []
        self.goals_error: Exception | None = None
        self.save_error: Exception | None = None
        self.normalize: Callable[[frozenset[str]], frozenset[str]] | None = None
        self.home_calls: list[int | None] = []
        self.saved: list[tuple[int, frozenset[str]]] = []
        self.gates: dict[int | None, asyncio.Event] = {}

    def gate(self, goal_id: int | None) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[goal_id] = event
        return event

    async def list_main_goals(self) -> list[Goal]:
        if self.goals_error is not None:
            raise self.goals_error
        return list(self.goals)

    async def get_home(self, goal_id: int | None = None) -> DashboardSnapshot | None:
        self.home_calls.append(goal_id)
        gate = self.gates.get(goal_id)
        if gate is not None:
            await gate.wait()
        result = self.snapshots.get(goal_id)
        if isinstance(result, Exception):
            raise result
        return result

    async def update_checked_dates(self, action_id: int, dates: Iterable[str]) -> None:
        if self.save_error is not None:
            raise self.save_error
        saved = frozenset(dates)
        self.saved.append((action_id, saved))
        if self.normalize is not None:
            saved = self.normalize(saved)
        for key, snapshot in list(self.snapshots.items()):
            if not isinstance(snapshot, DashboardSnapshot):
                continue
            sub_goals = tuple(
                action.model_copy(update={"checked_dates": saved})
                if action.id == action_id
                else action
                for action in snapshot.sub_goals
            )
            self.snapshots[key] = snapshot.model_copy(update={"sub_goals": sub_goals})


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture
def today():
    """Today anchor frozen on a Wednesday."""
    return FrozenToday(WEDNESDAY)


@pytest.fixture
def service():
    return FakeHomeService()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user/project config and GOALBOARD_* env out of tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in (
        "GOALBOARD_API_URL",
        "GOALBOARD_API_TIMEOUT",
        "GOALBOARD_DATE_ANCHOR",
        "GOALBOARD_ON_PERSIST_FAILURE",
        "GOALBOARD_API_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_cache()
    yield
    clear_cache()
