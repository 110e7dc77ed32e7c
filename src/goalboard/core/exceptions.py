"""
Custom exceptions for goalboard.

Exception Hierarchy:
    GoalboardError (base)
    ├── ApiError (home service errors, scoped to an endpoint)
    │   ├── NetworkError (transport failures and non-2xx responses)
    │   └── ParseError (response bodies that don't decode)
    ├── GoalListLoadError (goal list could not be loaded)
    ├── DashboardLoadError (dashboard snapshot could not be loaded)
    └── PersistenceError (checked dates could not be saved)

The load errors are not raised to presentation code: the goal loader and the
dashboard controller catch the underlying ApiError and store one of these in
their state. The original exception is kept in ``__cause__``.

Example:
    >>> from goalboard.core.exceptions import NetworkError
    >>> try:
    ...     raise NetworkError("/api/home", "Connection refused")
    ... except NetworkError as e:
    ...     print(e)
    [/api/home] Connection refused
"""


class GoalboardError(Exception):
    """
    Base exception for all goalboard errors.

    Attributes:
        message: Human-readable error message
        context: Dictionary of additional context
    """

    def __init__(self, message: str, **context: object) -> None:
        """
        Initialize an error with message and context.

        Args:
            message: Human-readable error message
            **context: Additional context as keyword arguments
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message


class ApiError(GoalboardError):
    """
    Base exception for home service errors.

    Attributes:
        endpoint: Path of the endpoint that failed (e.g., "/api/home")
    """

    def __init__(self, endpoint: str, message: str, **context: object) -> None:
        super().__init__(message, endpoint=endpoint, **context)
        self.endpoint = endpoint

    def __str__(self) -> str:
        """Return string representation with the endpoint."""
        return f"[{self.endpoint}] {self.message}"


class NetworkError(ApiError):
    """
    Transport failure or non-2xx response from the home service.

    The HTTP status code, when there was a response, is in
    ``context["status_code"]``.
    """

    @property
    def status_code(self) -> int | None:
        value = self.context.get("status_code")
        return value if isinstance(value, int) else None


class ParseError(ApiError):
    """Response body was not valid JSON or didn't match the expected shape."""


class GoalListLoadError(GoalboardError):
    """The list of selectable goals could not be loaded."""

    def __init__(self, message: str = "Failed to load the goal list.", **context: object) -> None:
        super().__init__(message, **context)


class DashboardLoadError(GoalboardError):
    """
    The dashboard snapshot could not be loaded.

    Attributes:
        goal_id: The requested goal id, or None for the representative goal
    """

    def __init__(
        self,
        message: str = "Failed to load dashboard data.",
        goal_id: int | None = None,
        **context: object,
    ) -> None:
        super().__init__(message, goal_id=goal_id, **context)
        self.goal_id = goal_id


class PersistenceError(GoalboardError):
    """
    Checked dates for a recurring action could not be saved.

    Attributes:
        action_id: The recurring action whose dates were being saved
    """

    def __init__(self, action_id: int, message: str, **context: object) -> None:
        super().__init__(message, action_id=action_id, **context)
        self.action_id = action_id


__all__ = [
    "GoalboardError",
    "ApiError",
    "NetworkError",
    "ParseError",
    "GoalListLoadError",
    "DashboardLoadError",
    "PersistenceError",
]
