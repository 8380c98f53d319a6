"""
backend/app/models/api_football.py

Purpose:
    Input contracts for API-Football v3 payloads. Transformers validate raw
    JSON against these models so a provider shape change fails at the
    boundary instead of leaking half-filled records downstream.

Dependencies:
    - pydantic
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _RawModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RawTeamRef(_RawModel):
    id: int
    name: str
    logo: str | None = None


class RawNamedRef(_RawModel):
    id: int | None = None
    name: str | None = None


# ---------------------------------------------------------------------------
# /fixtures
# ---------------------------------------------------------------------------


class RawFixtureStatus(_RawModel):
    short: str
    elapsed: int | None = None


class RawVenueRef(_RawModel):
    name: str | None = None
    address: str | None = None


class RawFixtureInfo(_RawModel):
    id: int
    date: str
    status: RawFixtureStatus
    venue: RawVenueRef | None = None
    referee: str | None = None


class RawLeagueRef(_RawModel):
    id: int
    name: str
    logo: str | None = None
    round: str | None = None


class RawFixtureTeams(_RawModel):
    home: RawTeamRef
    away: RawTeamRef


class RawGoals(_RawModel):
    home: int | None = None
    away: int | None = None


class RawScoreBreakdown(_RawModel):
    halftime: RawGoals | None = None


class RawFixture(_RawModel):
    fixture: RawFixtureInfo
    league: RawLeagueRef
    teams: RawFixtureTeams
    goals: RawGoals = Field(default_factory=RawGoals)
    score: RawScoreBreakdown = Field(default_factory=RawScoreBreakdown)


# ---------------------------------------------------------------------------
# /standings
# ---------------------------------------------------------------------------


class RawGoalsForAgainst(_RawModel):
    for_: int = Field(0, alias="for")
    against: int = 0


class RawStandingRecord(_RawModel):
    played: int = 0
    win: int = 0
    draw: int = 0
    lose: int = 0
    goals: RawGoalsForAgainst = Field(default_factory=RawGoalsForAgainst)


class RawStandingRow(_RawModel):
    rank: int
    team: RawTeamRef
    all: RawStandingRecord = Field(default_factory=RawStandingRecord)
    points: int = 0
    goals_diff: int = Field(0, alias="goalsDiff")
    form: str | None = None
    group: str | None = None


# ---------------------------------------------------------------------------
# /players/topscorers, /players/topassists, /players
# ---------------------------------------------------------------------------


class RawPlayer(_RawModel):
    id: int
    name: str
    firstname: str | None = None
    lastname: str | None = None
    nationality: str | None = None
    photo: str | None = None


class RawPlayerTeamRef(_RawModel):
    id: int | None = None
    name: str | None = None
    logo: str | None = None


class RawPlayerGames(_RawModel):
    appearences: int | None = None
    minutes: int | None = None
    rating: str | float | None = None


class RawPlayerGoals(_RawModel):
    total: int | None = None
    assists: int | None = None


class RawPlayerStatisticsBlock(_RawModel):
    team: RawPlayerTeamRef | None = None
    league: dict[str, Any] | None = None
    games: RawPlayerGames | None = None
    goals: RawPlayerGoals | None = None


class RawPlayerEntry(_RawModel):
    player: RawPlayer
    statistics: list[RawPlayerStatisticsBlock] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# /fixtures/events
# ---------------------------------------------------------------------------


class RawEventTime(_RawModel):
    elapsed: int | None = None
    extra: int | None = None


class RawEvent(_RawModel):
    time: RawEventTime
    team: RawTeamRef
    player: RawNamedRef | None = None
    assist: RawNamedRef | None = None
    type: str
    detail: str | None = None
    comments: str | None = None


# ---------------------------------------------------------------------------
# /teams
# ---------------------------------------------------------------------------


class RawTeamProfile(_RawModel):
    id: int
    name: str
    logo: str | None = None
    code: str | None = None
    founded: int | None = None
    country: str | None = None


class RawTeamEntry(_RawModel):
    team: RawTeamProfile
    venue: RawVenueRef | None = None


# ---------------------------------------------------------------------------
# /fixtures/statistics
# ---------------------------------------------------------------------------


class RawStatEntry(_RawModel):
    type: str
    value: int | float | str | None = None


class RawTeamStatistics(_RawModel):
    team: RawTeamRef
    statistics: list[RawStatEntry] = Field(default_factory=list)
