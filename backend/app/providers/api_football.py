"""
backend/app/providers/api_football.py

Purpose:
    Async adapter for API-Football v3 (api-sports.io). Returns the raw
    ``response`` arrays of the provider envelope and raises ProviderError on
    transport failures, HTTP error statuses and non-empty ``errors`` blocks.
    Normalization lives in app.services.football_transform.

Dependencies:
    - httpx
    - app.providers.http_client
    - app.providers.errors
    - app.config
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.config import settings
from app.monitoring.football_metrics import METRIC_PROVIDER_FAILURES
from app.providers.errors import ProviderConfigError, ProviderError, UnknownLeagueError
from app.providers.http_client import CircuitBreaker, ResilientClient

logger = logging.getLogger("footdata.api_football")

PROVIDER_NAME = "api_football"

# Legacy football-data.org competition codes still used by older callers.
LEAGUE_CODE_MAPPING = {
    "FL1": "61",
    "PL": "39",
    "PD": "140",
    "SA": "135",
    "BL1": "78",
    "CL": "2",
}

_LOW_QUOTA_WARN = 10


def normalize_league_code(code: str | int) -> int:
    """Map a legacy competition code or numeric string to an API-Football league id."""
    raw = str(code).strip()
    mapped = LEAGUE_CODE_MAPPING.get(raw.upper(), raw)
    if not (mapped.isascii() and mapped.isdigit()) or int(mapped) < 1:
        raise UnknownLeagueError(raw)
    return int(mapped)


class ApiFootballProvider:
    """API-Football v3 client for fixtures, standings, players and teams."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        client: ResilientClient | None = None,
    ) -> None:
        self._api_key = settings.API_FOOTBALL_KEY if api_key is None else api_key
        self._base_url = (base_url or settings.API_FOOTBALL_BASE_URL).rstrip("/")
        self._client = client or ResilientClient(
            PROVIDER_NAME,
            timeout=settings.API_FOOTBALL_TIMEOUT_SECONDS,
            max_retries=settings.API_FOOTBALL_MAX_RETRIES,
            base_delay=settings.API_FOOTBALL_BASE_DELAY_SECONDS,
            circuit=CircuitBreaker(
                failure_threshold=settings.API_FOOTBALL_CIRCUIT_THRESHOLD,
                recovery_timeout=settings.API_FOOTBALL_CIRCUIT_RECOVERY_SECONDS,
            ),
        )
        self.remaining_requests: int | None = None

    @property
    def circuit_open(self) -> bool:
        circuit = getattr(self._client, "circuit", None)
        return bool(circuit and circuit.is_open)

    def _headers(self) -> dict[str, str]:
        api_key = str(self._api_key or "").strip()
        if not api_key:
            raise ProviderConfigError("API_FOOTBALL_KEY is missing.")
        return {"x-apisports-key": api_key}

    @staticmethod
    def _to_int(value: Any) -> int | None:
        try:
            if value is None:
                return None
            return int(value)
        except (TypeError, ValueError):
            return None

    def _track_quota(self, headers: Any) -> None:
        remaining = self._to_int(headers.get("x-ratelimit-requests-remaining"))
        if remaining is None:
            return
        self.remaining_requests = remaining
        if remaining <= _LOW_QUOTA_WARN:
            logger.warning("API-Football daily quota nearly exhausted: %d requests left", remaining)

    def _fail(self, message: str, *, endpoint: str, reason: str, status_code: int | None = None) -> ProviderError:
        METRIC_PROVIDER_FAILURES.labels(provider=PROVIDER_NAME, endpoint=endpoint, reason=reason).inc()
        logger.error("API-Football %s failed: %s", endpoint, message)
        return ProviderError(message, endpoint=endpoint, status_code=status_code)

    async def _get(self, endpoint: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        headers = self._headers()
        try:
            resp = await self._client.get(f"{self._base_url}{endpoint}", params=params, headers=headers)
        except httpx.HTTPError as exc:
            raise self._fail(f"network error: {exc}", endpoint=endpoint, reason="network") from exc

        if resp.status_code >= 400:
            raise self._fail(
                f"HTTP {resp.status_code}",
                endpoint=endpoint,
                reason="http_status",
                status_code=resp.status_code,
            )

        self._track_quota(resp.headers)
        payload = resp.json()
        if not isinstance(payload, dict):
            raise self._fail("unexpected payload type", endpoint=endpoint, reason="payload")

        errors = payload.get("errors")
        if errors:
            raise self._fail(f"API errors: {errors}", endpoint=endpoint, reason="api_errors")

        response = payload.get("response")
        if response is None:
            return []
        if not isinstance(response, list):
            raise self._fail("response is not a list", endpoint=endpoint, reason="payload")
        logger.debug("API-Football %s %s -> %d rows", endpoint, params, len(response))
        return response

    async def get_fixtures(self, **params: Any) -> list[dict[str, Any]]:
        """``/fixtures`` with any of: id, league, season, next, last, date, from, to, live, team."""
        return await self._get("/fixtures", {k: v for k, v in params.items() if v is not None})

    async def get_head_to_head(self, team1_id: int, team2_id: int, last: int = 10) -> list[dict[str, Any]]:
        return await self._get("/fixtures/headtohead", {"h2h": f"{int(team1_id)}-{int(team2_id)}", "last": int(last)})

    async def get_fixture_events(self, fixture_id: int) -> list[dict[str, Any]]:
        return await self._get("/fixtures/events", {"fixture": int(fixture_id)})

    async def get_fixture_statistics(self, fixture_id: int) -> list[dict[str, Any]]:
        return await self._get("/fixtures/statistics", {"fixture": int(fixture_id)})

    async def get_standings(self, league_id: int, season: int) -> list[dict[str, Any]]:
        return await self._get("/standings", {"league": int(league_id), "season": int(season)})

    async def get_team(self, team_id: int) -> list[dict[str, Any]]:
        return await self._get("/teams", {"id": int(team_id)})

    async def get_top_scorers(self, league_id: int, season: int) -> list[dict[str, Any]]:
        return await self._get("/players/topscorers", {"league": int(league_id), "season": int(season)})

    async def get_top_assists(self, league_id: int, season: int) -> list[dict[str, Any]]:
        return await self._get("/players/topassists", {"league": int(league_id), "season": int(season)})

    async def get_player(self, player_id: int, season: int) -> list[dict[str, Any]]:
        return await self._get("/players", {"id": int(player_id), "season": int(season)})

    async def aclose(self) -> None:
        await self._client.aclose()
