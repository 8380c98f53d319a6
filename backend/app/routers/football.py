"""
backend/app/routers/football.py

Purpose:
    Public /api/football endpoints over FootballDataService. This is the
    caller that owns the fallback policy: an upstream failure degrades to an
    empty list (or null) for display widgets, while the head-to-head compare
    surfaces the error.

Dependencies:
    - app.services.football_data_service
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request

from app.models.football import (
    ComparisonCandidate,
    Match,
    MatchEvent,
    MatchStatistics,
    PlayerHeadToHead,
    RankedPlayer,
    RankingKind,
    Scorer,
    Standing,
    StandingGroup,
    Team,
)
from app.providers.errors import PlayerNotFoundError, ProviderError
from app.services.football_data_service import FootballDataService

logger = logging.getLogger("footdata.router")

router = APIRouter(prefix="/api/football", tags=["football"])


def get_football_service(request: Request) -> FootballDataService:
    return request.app.state.football_service


def _fallback(what: str, exc: Exception, default):
    logger.warning("Serving fallback for %s: %s", what, exc)
    return default


@router.get("/standings/{league}", response_model=list[Standing], response_model_by_alias=True)
async def standings(
    league: str = Path(..., max_length=10),
    season: int | None = Query(None, ge=1990, le=2100),
    service: FootballDataService = Depends(get_football_service),
):
    """League table (first group for multi-group competitions)."""
    try:
        return await service.get_standings(league, season)
    except ProviderError as exc:
        return _fallback(f"standings {league}", exc, [])


@router.get("/standings/{league}/groups", response_model=list[StandingGroup], response_model_by_alias=True)
async def group_standings(
    league: str = Path(..., max_length=10),
    season: int | None = Query(None, ge=1990, le=2100),
    service: FootballDataService = Depends(get_football_service),
):
    try:
        return await service.get_group_standings(league, season)
    except ProviderError as exc:
        return _fallback(f"group standings {league}", exc, [])


@router.get("/teams/{team_id}", response_model=Team | None, response_model_by_alias=True)
async def team(
    team_id: int,
    service: FootballDataService = Depends(get_football_service),
):
    try:
        return await service.get_team(team_id)
    except ProviderError as exc:
        return _fallback(f"team {team_id}", exc, None)


@router.get("/fixtures/{league}/next", response_model=list[Match], response_model_by_alias=True)
async def next_fixtures(
    league: str = Path(..., max_length=10),
    count: int = Query(10, ge=1, le=50),
    service: FootballDataService = Depends(get_football_service),
):
    try:
        return await service.get_next_fixtures(league, count)
    except ProviderError as exc:
        return _fallback(f"next fixtures {league}", exc, [])


@router.get("/fixtures/{league}/last", response_model=list[Match], response_model_by_alias=True)
async def last_results(
    league: str = Path(..., max_length=10),
    count: int = Query(10, ge=1, le=50),
    service: FootballDataService = Depends(get_football_service),
):
    try:
        return await service.get_last_results(league, count)
    except ProviderError as exc:
        return _fallback(f"last results {league}", exc, [])


@router.get("/fixtures/{league}/matchday/{matchday}", response_model=list[Match], response_model_by_alias=True)
async def matchday_fixtures(
    league: str = Path(..., max_length=10),
    matchday: int = Path(..., ge=1),
    service: FootballDataService = Depends(get_football_service),
):
    try:
        return await service.get_matches_by_matchday(league, matchday)
    except ProviderError as exc:
        return _fallback(f"matchday {matchday} of {league}", exc, [])


@router.get("/live", response_model=list[Match], response_model_by_alias=True)
async def live_matches(service: FootballDataService = Depends(get_football_service)):
    try:
        return await service.get_live_matches()
    except ProviderError as exc:
        return _fallback("live matches", exc, [])


@router.get("/matches/{fixture_id}", response_model=Match | None, response_model_by_alias=True)
async def match_detail(
    fixture_id: int,
    service: FootballDataService = Depends(get_football_service),
):
    try:
        return await service.get_match(fixture_id)
    except ProviderError as exc:
        return _fallback(f"match {fixture_id}", exc, None)


@router.get("/matches/{fixture_id}/events", response_model=list[MatchEvent], response_model_by_alias=True)
async def match_events(
    fixture_id: int,
    live: bool = Query(False),
    service: FootballDataService = Depends(get_football_service),
):
    try:
        return await service.get_match_events(fixture_id, live=live)
    except ProviderError as exc:
        return _fallback(f"events of {fixture_id}", exc, [])


@router.get("/matches/{fixture_id}/statistics", response_model=MatchStatistics | None, response_model_by_alias=True)
async def match_statistics(
    fixture_id: int,
    live: bool = Query(False),
    service: FootballDataService = Depends(get_football_service),
):
    try:
        return await service.get_match_statistics(fixture_id, live=live)
    except ProviderError as exc:
        return _fallback(f"statistics of {fixture_id}", exc, None)


@router.get("/head-to-head/{team1_id}/{team2_id}", response_model=list[Match], response_model_by_alias=True)
async def head_to_head(
    team1_id: int,
    team2_id: int,
    last: int = Query(10, ge=1, le=50),
    service: FootballDataService = Depends(get_football_service),
):
    try:
        return await service.get_head_to_head(team1_id, team2_id, last)
    except ProviderError as exc:
        return _fallback(f"head-to-head {team1_id}-{team2_id}", exc, [])


@router.get("/scorers/{league}", response_model=list[Scorer], response_model_by_alias=True)
async def top_scorers(
    league: str = Path(..., max_length=10),
    service: FootballDataService = Depends(get_football_service),
):
    try:
        return await service.get_top_scorers(league)
    except ProviderError as exc:
        return _fallback(f"top scorers {league}", exc, [])


@router.get("/assists/{league}", response_model=list[Scorer], response_model_by_alias=True)
async def top_assists(
    league: str = Path(..., max_length=10),
    service: FootballDataService = Depends(get_football_service),
):
    try:
        return await service.get_top_assists(league)
    except ProviderError as exc:
        return _fallback(f"top assists {league}", exc, [])


@router.get("/players/candidates", response_model=list[ComparisonCandidate], response_model_by_alias=True)
async def comparison_candidates(service: FootballDataService = Depends(get_football_service)):
    """Players offered in the comparison picker; empty when any league call fails."""
    try:
        return await service.get_comparison_candidates()
    except ProviderError as exc:
        return _fallback("comparison candidates", exc, [])


@router.get("/rankings/{kind}", response_model=list[RankedPlayer], response_model_by_alias=True)
async def european_rankings(
    kind: RankingKind,
    season: int | None = Query(None, ge=1990, le=2100),
    service: FootballDataService = Depends(get_football_service),
):
    """Cross-competition player ranking over the comparison leagues."""
    try:
        return await service.get_european_rankings(kind, season)
    except ProviderError as exc:
        return _fallback(f"{kind.value} ranking", exc, [])


@router.get("/players/compare", response_model=PlayerHeadToHead, response_model_by_alias=True)
async def compare_players(
    player1: int = Query(..., ge=1),
    player2: int = Query(..., ge=1),
    season: int | None = Query(None, ge=1990, le=2100),
    service: FootballDataService = Depends(get_football_service),
):
    try:
        return await service.compare(player1, player2, season)
    except PlayerNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
