"""
Configuration data models for goalboard.

These models define the structure of .goalboard.json and
~/.config/goalboard/config.json files, with validation and type safety
via Pydantic.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EndpointsConfig(BaseModel):
    """
    Paths of the home service endpoints, relative to ``api.base_url``.

    ``checked_dates`` is a format string receiving ``action_id``.
    """
    main_goals: str = Field(
        default="/api/home/main-goals",
        description="List of selectable main goals"
    )
    home: str = Field(
        default="/api/home",
        description="Dashboard snapshot for one main goal (or the representative one)"
    )
    checked_dates: str = Field(
        default="/api/daily-actions/{action_id}/checked-dates",
        description="Replace the checked dates of one recurring action"
    )

    @field_validator("checked_dates")
    @classmethod
    def validate_checked_dates(cls, v: str) -> str:
        """Require the action id placeholder."""
        if "{action_id}" not in v:
            raise ValueError("checked_dates endpoint must contain '{action_id}'")
        return v


class ApiConfig(BaseModel):
    """
    Remote home service connection settings.
    """
    base_url: str = Field(
        default="http://localhost:8080",
        description="Base URL of the home service"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        description="Per-request timeout in seconds"
    )
    token_env_var: str | None = Field(
        default="GOALBOARD_API_TOKEN",
        description="Environment variable holding a bearer token (None disables auth)"
    )
    goal_query_param: str = Field(
        default="mainGoalId",
        min_length=1,
        description="Query parameter carrying the selected main goal id"
    )
    endpoints: EndpointsConfig = Field(
        default_factory=EndpointsConfig,
        description="Endpoint paths"
    )


class CalendarConfig(BaseModel):
    """
    How "today" is anchored when weekday checks are turned into dates.

    ``live`` reads the local date on every toggle; ``session`` freezes the
    date when the session starts so a session spanning midnight keeps
    writing into the same week.
    """
    anchor: str = Field(
        default="live",
        pattern="^(live|session)$",
        description="Today anchor: 'live' or 'session'"
    )


class ToggleConfig(BaseModel):
    """
    Weekday toggle behavior.
    """
    on_persist_failure: str = Field(
        default="keep",
        pattern="^(keep|revert)$",
        description="What to do with the optimistic weekday set when saving fails"
    )
    refetch_after_persist: bool = Field(
        default=True,
        description="Refetch the dashboard after a successful save"
    )


class GoalboardConfig(BaseModel):
    """
    Top-level goalboard configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = GoalboardConfig(
        ...     api=ApiConfig(base_url="https://goals.example.com"),
        ...     toggle=ToggleConfig(on_persist_failure="revert"),
        ... )
        >>> config.calendar.anchor
        'live'
    """
    api: ApiConfig = Field(
        default_factory=ApiConfig,
        description="Home service connection"
    )
    calendar: CalendarConfig = Field(
        default_factory=CalendarConfig,
        description="Today anchoring"
    )
    toggle: ToggleConfig = Field(
        default_factory=ToggleConfig,
        description="Weekday toggle behavior"
    )

    model_config = ConfigDict(
        extra="allow",  # Allow extra fields for forward compatibility
        validate_assignment=True,
    )
