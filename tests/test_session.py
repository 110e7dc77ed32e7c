"""
Tests for HomeSession wiring: goal list, dashboard and per-action toggles.
"""

import httpx
import pytest
from conftest import (
    WEDNESDAY,
    FakeHomeService,
    action_payload,
    goal_payload,
    home_payload,
    make_snapshot,
)

from goalboard.core.config.models import GoalboardConfig, ToggleConfig
from goalboard.core.exceptions import GoalListLoadError, NetworkError, ParseError, PersistenceError
from goalboard.core.home import HomeApiClient
from goalboard.core.home.models import Goal
from goalboard.core.navigation import REPRESENTATIVE, HistoryNavigator, Specific
from goalboard.core.recurrence import FrozenToday, live_today
from goalboard.core.session import HomeSession


def two_goal_service() -> FakeHomeService:
    return FakeHomeService(
        {
            None: make_snapshot(1, [action_payload(10, ["2024-01-01"])]),
            1: make_snapshot(1, [action_payload(10, ["2024-01-01"])]),
            2: make_snapshot(2, [action_payload(20), action_payload(21, ["2024-01-05"])]),
        },
        goals=[Goal.model_validate(goal_payload(1)), Goal.model_validate(goal_payload(2))],
    )


class TestStart:
    """Tests for HomeSession.start()."""

    @pytest.mark.asyncio
    async def test_loads_goals_and_dashboard(self, today):
        """Test goals and dashboard both load and toggles are built."""
        session = HomeSession(two_goal_service(), HistoryNavigator(), today=today)

        state = await session.start()

        assert state.is_ready
        assert [g.id for g in session.goals] == [1, 2]
        assert session.goal_error is None
        assert set(session.toggles) == {10}
        assert session.toggles[10].checked_days == {0}

    @pytest.mark.asyncio
    async def test_goal_list_failure_does_not_block_dashboard(self, today):
        """Test a failed goal list leaves the dashboard usable."""
        service = two_goal_service()
        service.goals_error = NetworkError("/api/home/main-goals", "HTTP 500", status_code=500)
        session = HomeSession(service, HistoryNavigator("mainGoalId=2"), today=today)

        state = await session.start()

        assert isinstance(session.goal_error, GoalListLoadError)
        assert session.goals == []
        assert state.is_ready
        assert state.snapshot.main_goal.id == 2
        assert set(session.toggles) == {20, 21}

    @pytest.mark.asyncio
    async def test_dashboard_failure_leaves_goal_list(self, today):
        """Test a failed dashboard still shows the goal list."""
        service = two_goal_service()
        service.snapshots[None] = NetworkError("/api/home", "down")
        session = HomeSession(service, HistoryNavigator(), today=today)

        state = await session.start()

        assert state.has_error
        assert len(session.goals) == 2
        assert session.toggles == {}

    @pytest.mark.asyncio
    async def test_empty_dashboard_has_no_toggles(self, today):
        """Test no main goal means no toggle controllers."""
        session = HomeSession(FakeHomeService({None: None}), HistoryNavigator(), today=today)

        state = await session.start()

        assert state.is_empty
        assert session.toggles == {}

    @pytest.mark.asyncio
    async def test_malformed_checked_date_is_dashboard_error(self, today):
        """Test a bad date anywhere in the snapshot fails the load as a whole."""
        data = home_payload(
            1,
            [
                action_payload(10, ["2024-01-01"]),
                action_payload(11, ["not-a-date"]),
                action_payload(12, ["2024-01-02"]),
            ],
        )

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/home/main-goals":
                return httpx.Response(200, json={"data": [goal_payload(1)]})
            return httpx.Response(200, json={"data": data})

        async with HomeApiClient("http://test", transport=httpx.MockTransport(handler)) as client:
            session = HomeSession(client, HistoryNavigator(), today=today)
            state = await session.start()

        assert state.has_error
        assert state.snapshot is None
        assert isinstance(state.error.__cause__, ParseError)
        assert session.toggles == {}

    def test_today_anchor_from_config(self):
        """Test the calendar anchor setting picks the today anchor."""
        live = HomeSession(FakeHomeService(), HistoryNavigator())
        assert live.today is live_today

        config = GoalboardConfig.model_validate({"calendar": {"anchor": "session"}})
        frozen = HomeSession(FakeHomeService(), HistoryNavigator(), config=config)
        assert isinstance(frozen.today, FrozenToday)


class TestToggle:
    """Tests for toggling through the session."""

    @pytest.mark.asyncio
    async def test_toggle_saves_and_reconciles(self):
        """Test Wednesday check-in: optimistic set, saved dates, refetched state."""
        service = two_goal_service()
        session = HomeSession(service, HistoryNavigator(), today=FrozenToday(WEDNESDAY))
        await session.start()

        # The server also holds a Friday check-in made elsewhere
        service.normalize = lambda dates: dates | {"2024-01-05"}

        task = session.toggle(10, 2)
        assert session.toggles[10].checked_days == {0, 2}
        result = await task

        assert result.ok
        assert service.saved == [(10, frozenset({"2024-01-01", "2024-01-03"}))]
        assert service.home_calls == [None, None]
        assert session.toggles[10].checked_days == {0, 2, 4}
        assert session.state.snapshot.find_action(10).checked_dates == {
            "2024-01-01",
            "2024-01-03",
            "2024-01-05",
        }

    @pytest.mark.asyncio
    async def test_toggle_without_refetch(self, today):
        """Test refetch_after_persist=False skips the refetch."""
        service = two_goal_service()
        config = GoalboardConfig(toggle=ToggleConfig(refetch_after_persist=False))
        session = HomeSession(service, HistoryNavigator(), config=config, today=today)
        await session.start()

        result = await session.toggle(10, 4)

        assert result.ok
        assert service.home_calls == [None]
        assert session.toggles[10].checked_days == {0, 4}

    @pytest.mark.asyncio
    async def test_failed_save_keeps_optimistic_state(self, today):
        """Test the default keep policy after a failed save."""
        service = two_goal_service()
        service.save_error = NetworkError("/api/daily-actions/10/checked-dates", "HTTP 500")
        session = HomeSession(service, HistoryNavigator(), today=today)
        await session.start()

        result = await session.toggle(10, 2)

        assert not result.ok
        assert isinstance(result.error, PersistenceError)
        assert result.error.action_id == 10
        assert str(result.error).startswith("Saving checked dates failed")
        assert "HTTP 500" in str(result.error)
        assert isinstance(result.error.__cause__, NetworkError)
        assert session.toggles[10].checked_days == {0, 2}
        assert service.home_calls == [None]

    @pytest.mark.asyncio
    async def test_failed_save_reverts_with_revert_policy(self, today):
        """Test the revert policy restores the pre-toggle set."""
        service = two_goal_service()
        service.save_error = NetworkError("/api/daily-actions/10/checked-dates", "HTTP 500")
        config = GoalboardConfig(toggle=ToggleConfig(on_persist_failure="revert"))
        session = HomeSession(service, HistoryNavigator(), config=config, today=today)
        await session.start()

        await session.toggle(10, 2)

        assert session.toggles[10].checked_days == {0}

    @pytest.mark.asyncio
    async def test_unknown_action(self, today):
        """Test toggling a sub-goal that isn't on the dashboard."""
        session = HomeSession(two_goal_service(), HistoryNavigator(), today=today)
        await session.start()

        with pytest.raises(ValueError, match="Unknown recurring action: 99"):
            session.toggle(99, 0)


class TestSelectGoal:
    """Tests for goal selection through the session."""

    @pytest.mark.asyncio
    async def test_select_goal_replaces_toggles(self, today):
        """Test selecting another goal rebuilds toggles for its sub-goals."""
        nav = HistoryNavigator()
        session = HomeSession(two_goal_service(), nav, today=today)
        await session.start()

        state = await session.select_goal(2)

        assert state.selection == Specific(2)
        assert set(session.toggles) == {20, 21}
        assert session.toggles[21].checked_days == {4}
        assert nav.length == 2

    @pytest.mark.asyncio
    async def test_back_restores_previous_goal(self, today):
        """Test navigating back loads the earlier selection."""
        nav = HistoryNavigator()
        session = HomeSession(two_goal_service(), nav, today=today)
        await session.start()
        await session.select_goal(2)

        nav.back()
        state = await session.dashboard.wait_idle()

        assert state.selection == REPRESENTATIVE
        assert set(session.toggles) == {10}

    @pytest.mark.asyncio
    async def test_unknown_goal_falls_back_to_representative(self, today):
        """Test an unknown goal id is corrected and the representative goal shown."""
        nav = HistoryNavigator()
        session = HomeSession(two_goal_service(), nav, today=today)
        await session.start()

        state = await session.select_goal(999)

        assert nav.query == {}
        assert state.selection == REPRESENTATIVE
        assert state.snapshot.main_goal.id == 1

    @pytest.mark.asyncio
    async def test_aclose_stops_following_navigation(self, today):
        """Test navigation after aclose() doesn't fetch."""
        service = two_goal_service()
        nav = HistoryNavigator()
        session = HomeSession(service, nav, today=today)
        await session.start()

        await session.aclose()
        nav.push({"mainGoalId": "2"})
        await session.dashboard.wait_idle()

        assert service.home_calls == [None]
