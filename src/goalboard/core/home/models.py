"""
Home service data models.

Pydantic models for the read model served by the home service: selectable
main goals, the recurring actions (sub-goals) under a goal, and the
dashboard snapshot that combines them. The service speaks camelCase; the
models expose snake_case attributes and accept both the short wire keys and
the older ``dailyAction*`` keys for recurring actions.
"""

from datetime import date
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from goalboard.core.recurrence import parse_iso_date


class Goal(BaseModel):
    """
    A main goal the user tracks.

    Identity is ``id``. Achievement values are the completion rates the
    service computed for last week and this week.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int = Field(description="Main goal identifier")
    name: str = Field(description="Display name")
    last_achievement: float = Field(
        default=0.0,
        alias="lastAchievement",
        description="Completion rate for last week",
    )
    this_achievement: float = Field(
        default=0.0,
        alias="thisAchievement",
        description="Completion rate for this week",
    )

    @field_validator("last_achievement", "this_achievement", mode="before")
    @classmethod
    def default_missing_achievement(cls, v: Any) -> Any:
        """The service sends null before a goal has any history."""
        return 0.0 if v is None else v


class RecurringAction(BaseModel):
    """
    A weekly recurring action under a main goal.

    ``checked_dates`` holds the ISO calendar dates (``YYYY-MM-DD``) on which
    the action was performed. Duplicates collapse; there is no ordering.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(
        validation_alias=AliasChoices("id", "dailyActionId"),
        description="Recurring action identifier",
    )
    title: str = Field(
        default="",
        validation_alias=AliasChoices("title", "dailyActionTitle"),
    )
    target_count: int = Field(
        default=0,
        validation_alias=AliasChoices(
            "target_count", "targetCount", "targetNum", "dailyActionTargetNum"
        ),
        description="How many times per week the action should happen",
    )
    content: str = Field(
        default="",
        validation_alias=AliasChoices("content", "dailyActionContent"),
    )
    checked_dates: frozenset[str] = Field(
        default_factory=frozenset,
        validation_alias=AliasChoices(
            "checked_dates", "checkedDates", "checkedDate"
        ),
    )
    color_tag: str = Field(
        default="",
        validation_alias=AliasChoices("color_tag", "colorTag", "color"),
        description="Presentation color tag for checked days",
    )

    @field_validator("checked_dates", mode="before")
    @classmethod
    def normalize_checked_dates(cls, v: Any) -> Any:
        """Accept null, and store every entry as a plain ``YYYY-MM-DD`` date."""
        if v is None:
            return frozenset()
        if not isinstance(v, (list, tuple, set, frozenset)):
            return v
        normalized = set()
        for item in v:
            if not isinstance(item, (str, date)):
                raise ValueError(f"Checked date must be a string, got {type(item).__name__}")
            try:
                normalized.add(parse_iso_date(item).isoformat())
            except ValueError:
                raise ValueError(f"Invalid checked date: {item!r}") from None
        return frozenset(normalized)

    @field_validator("title", "content", "color_tag", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("target_count", mode="before")
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v


class DashboardSnapshot(BaseModel):
    """
    Everything the home screen renders for one main goal.

    ``progress`` is the calendar progress payload; it is passed through
    untouched.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    main_goal: Goal = Field(alias="mainGoal")
    sub_goals: tuple[RecurringAction, ...] = Field(default=(), alias="subGoals")
    progress: Any = Field(default=None)

    @field_validator("sub_goals", mode="before")
    @classmethod
    def none_to_empty_tuple(cls, v: Any) -> Any:
        return () if v is None else v

    def find_action(self, action_id: int) -> RecurringAction | None:
        """Return the sub-goal with the given id, if present."""
        for action in self.sub_goals:
            if action.id == action_id:
                return action
        return None


def parse_snapshot(data: dict[str, Any]) -> DashboardSnapshot | None:
    """
    Build a snapshot from the ``data`` object of a home response.

    Returns None when the service has no main goal for the request.

    Raises:
        pydantic.ValidationError: If the payload doesn't match the models
    """
    if not data.get("mainGoal"):
        return None
    return DashboardSnapshot.model_validate(data)


__all__ = [
    "DashboardSnapshot",
    "Goal",
    "RecurringAction",
    "parse_snapshot",
]
