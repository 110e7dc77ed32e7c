"""
HTTP client for the home service.

Wraps ``httpx.AsyncClient`` and turns every failure into the goalboard
exception hierarchy:
- Timeouts and connection problems -> NetworkError
- Non-2xx responses -> NetworkError (status code in context)
- Bodies that aren't JSON, lack the ``data`` envelope, or fail model
  validation -> ParseError

Responses are wrapped as ``{"data": ...}``.

Example:
    >>> async with HomeApiClient(base_url="http://localhost:8080") as client:
    ...     goals = await client.list_main_goals()
    ...     snapshot = await client.get_home(goals[0].id)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from types import TracebackType
from typing import Any

import httpx
from pydantic import ValidationError

from goalboard.core.config.models import ApiConfig, EndpointsConfig
from goalboard.core.exceptions import NetworkError, ParseError
from goalboard.core.home.models import DashboardSnapshot, Goal, parse_snapshot

logger = logging.getLogger(__name__)


class HomeApiClient:
    """
    Async client for the home service endpoints.

    Owns its ``httpx.AsyncClient`` unless one is passed in. Use as an async
    context manager or call ``aclose()`` when done.
    """

    def __init__(
        self,
        base_url: str,
        *,
        endpoints: EndpointsConfig | None = None,
        goal_query_param: str = "mainGoalId",
        timeout: float = 10.0,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Base URL of the home service
            endpoints: Endpoint paths (defaults to EndpointsConfig())
            goal_query_param: Query parameter carrying the main goal id
            timeout: Per-request timeout in seconds
            token: Bearer token sent in the Authorization header
            transport: Custom transport (e.g. httpx.MockTransport in tests)
            http_client: Pre-built client; takes precedence over the above
        """
        self.endpoints = endpoints or EndpointsConfig()
        self.goal_query_param = goal_query_param

        if http_client is not None:
            self._client = http_client
            self._owns_client = False
        else:
            headers = {"Accept": "application/json"}
            if token:
                headers["Authorization"] = f"Bearer {token}"
            self._client = httpx.AsyncClient(
                base_url=base_url.rstrip("/"),
                headers=headers,
                timeout=timeout,
                transport=transport,
            )
            self._owns_client = True

    @classmethod
    def from_config(
        cls,
        config: ApiConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> HomeApiClient:
        """
        Create a client from the ``api`` config section.

        The bearer token is read from the environment variable named by
        ``config.token_env_var``; a missing variable means no auth header.
        """
        token = os.environ.get(config.token_env_var) if config.token_env_var else None
        return cls(
            config.base_url,
            endpoints=config.endpoints,
            goal_query_param=config.goal_query_param,
            timeout=config.timeout_seconds,
            token=token or None,
            transport=transport,
        )

    async def __aenter__(self) -> HomeApiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def list_main_goals(self) -> list[Goal]:
        """
        Fetch the selectable main goals.

        Raises:
            NetworkError: If the request fails
            ParseError: If the response doesn't decode into goals
        """
        endpoint = self.endpoints.main_goals
        data = await self._request("GET", endpoint)
        if data is None:
            return []
        if not isinstance(data, list):
            raise ParseError(endpoint, "Expected a list of goals", got=type(data).__name__)
        try:
            return [Goal.model_validate(item) for item in data]
        except ValidationError as e:
            raise ParseError(endpoint, f"Invalid goal in response: {e}") from e

    async def get_home(self, goal_id: int | None = None) -> DashboardSnapshot | None:
        """
        Fetch the dashboard snapshot for a main goal.

        Args:
            goal_id: Main goal id, or None for the representative goal

        Returns:
            The snapshot, or None when the service reports no main goal

        Raises:
            NetworkError: If the request fails
            ParseError: If the response doesn't decode into a snapshot
        """
        endpoint = self.endpoints.home
        params = {self.goal_query_param: str(goal_id)} if goal_id is not None else None
        data = await self._request("GET", endpoint, params=params)
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ParseError(endpoint, "Expected a dashboard object", got=type(data).__name__)
        try:
            return parse_snapshot(data)
        except ValidationError as e:
            raise ParseError(endpoint, f"Invalid dashboard snapshot: {e}") from e

    async def update_checked_dates(self, action_id: int, dates: Iterable[str]) -> None:
        """
        Replace the checked dates of a recurring action.

        Dates are sent sorted so the request body is deterministic.

        Raises:
            NetworkError: If the request fails or the service rejects it
        """
        endpoint = self.endpoints.checked_dates.format(action_id=action_id)
        await self._request(
            "PATCH",
            endpoint,
            json={"checkedDate": sorted(dates)},
            expect_body=False,
        )

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        expect_body: bool = True,
    ) -> Any:
        """
        Send a request and return the ``data`` member of the response.

        Returns None when ``expect_body`` is False.
        """
        logger.debug("%s %s params=%s", method, endpoint, params)
        try:
            response = await self._client.request(method, endpoint, params=params, json=json)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise NetworkError(endpoint, f"Request timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            raise NetworkError(
                endpoint, f"HTTP {status_code}", status_code=status_code
            ) from e
        except httpx.RequestError as e:
            raise NetworkError(endpoint, f"Network error: {e}") from e

        if not expect_body:
            return None

        try:
            payload = response.json()
        except ValueError as e:
            raise ParseError(endpoint, "Invalid JSON in response") from e

        if not isinstance(payload, dict) or "data" not in payload:
            raise ParseError(endpoint, "Response is missing the 'data' envelope")
        return payload["data"]


__all__ = ["HomeApiClient"]
