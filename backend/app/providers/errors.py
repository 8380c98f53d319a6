"""
backend/app/providers/errors.py

Purpose:
    Typed failures raised at the upstream boundary. Callers decide whether to
    substitute fallback data; the data layer never does.
"""

from __future__ import annotations


class FootballDataError(Exception):
    """Base class for football-data layer failures."""


class ProviderConfigError(FootballDataError):
    """The provider cannot be called with the current settings (e.g. missing key)."""


class ProviderError(FootballDataError):
    """Upstream call failed: transport error, HTTP error status or API error envelope."""

    def __init__(self, message: str, *, endpoint: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code


class PlayerNotFoundError(FootballDataError):
    def __init__(self, player_id: int) -> None:
        super().__init__(f"No statistics found for player {player_id}")
        self.player_id = player_id


class UnknownLeagueError(FootballDataError):
    """League reference is neither a known competition code nor a numeric id."""

    def __init__(self, league: str) -> None:
        super().__init__(f"Unknown league {league!r}")
        self.league = league
