"""
Tests for the goal list loader.
"""

import logging

import pytest
from conftest import FakeHomeService

from goalboard.core.exceptions import GoalListLoadError, NetworkError
from goalboard.core.goals import GoalListLoader
from goalboard.core.home.models import Goal


def make_goals() -> list[Goal]:
    return [
        Goal(id=1, name="Run a marathon", last_achievement=40, this_achievement=60),
        Goal(id=2, name="Read more", last_achievement=0, this_achievement=10),
    ]


class TestGoalListLoader:
    """Tests for GoalListLoader.load()."""

    @pytest.mark.asyncio
    async def test_load_success(self) -> None:
        loader = GoalListLoader(FakeHomeService(goals=make_goals()))

        goals = await loader.load()

        assert [g.id for g in goals] == [1, 2]
        assert loader.goals == goals
        assert loader.error is None
        assert loader.loaded

    @pytest.mark.asyncio
    async def test_empty_list(self) -> None:
        loader = GoalListLoader(FakeHomeService())
        assert await loader.load() == []
        assert loader.loaded
        assert loader.error is None

    @pytest.mark.asyncio
    async def test_failure_is_stored_not_raised(self, caplog) -> None:
        service = FakeHomeService(goals=make_goals())
        cause = NetworkError("/api/home/main-goals", "HTTP 500", status_code=500)
        service.goals_error = cause
        loader = GoalListLoader(service)

        with caplog.at_level(logging.WARNING, logger="goalboard.core.goals"):
            goals = await loader.load()

        assert goals == []
        assert loader.goals == []
        assert not loader.loaded
        assert isinstance(loader.error, GoalListLoadError)
        assert loader.error.__cause__ is cause
        assert "HTTP 500" in loader.error.context["cause"]
        assert "Goal list load failed" in caplog.text

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_stored(self) -> None:
        service = FakeHomeService()
        service.goals_error = KeyError("id")
        loader = GoalListLoader(service)

        assert await loader.load() == []
        assert isinstance(loader.error, GoalListLoadError)
        assert isinstance(loader.error.__cause__, KeyError)

    @pytest.mark.asyncio
    async def test_reload_clears_previous_error(self) -> None:
        service = FakeHomeService(goals=make_goals())
        service.goals_error = NetworkError("/api/home/main-goals", "down")
        loader = GoalListLoader(service)
        await loader.load()
        assert loader.error is not None

        service.goals_error = None
        await loader.load()

        assert loader.error is None
        assert len(loader.goals) == 2

    @pytest.mark.asyncio
    async def test_failure_after_success_clears_goals(self) -> None:
        service = FakeHomeService(goals=make_goals())
        loader = GoalListLoader(service)
        await loader.load()

        service.goals_error = NetworkError("/api/home/main-goals", "down")
        await loader.load()

        assert loader.goals == []
        assert loader.error is not None
