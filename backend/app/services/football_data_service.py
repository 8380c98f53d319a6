"""
backend/app/services/football_data_service.py

Purpose:
    Cached accessors over API-Football: each accessor fetches raw payloads
    through the injected provider, normalizes them with
    app.services.football_transform and memoizes the canonical records in
    the injected TTLCache. Upstream failures propagate as ProviderError;
    fallback data is the caller's decision.

Dependencies:
    - app.providers.api_football
    - app.services.football_transform
    - app.services.player_stats_aggregator
    - app.services.ttl_cache
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

from app.models.football import (
    ComparisonCandidate,
    Match,
    MatchEvent,
    MatchStatistics,
    PlayerAggregateStats,
    PlayerHeadToHead,
    RankedPlayer,
    RankingKind,
    Scorer,
    Standing,
    StandingGroup,
    Team,
)
from app.providers.api_football import ApiFootballProvider, normalize_league_code
from app.providers.errors import PlayerNotFoundError, ProviderError
from app.services.football_transform import (
    is_live_status,
    transform_event,
    transform_match,
    transform_match_statistics,
    transform_scorer,
    transform_standing_groups,
    transform_team,
)
from app.services.player_stats_aggregator import aggregate_player_statistics, compare_players
from app.services.ttl_cache import CacheDurations, TTLCache
from app.utils import current_season

logger = logging.getLogger("footdata.service")

# Cross-competition rankings
RANKING_CANDIDATES_PER_LIST = 20
RANKING_LIMIT = 50
RANKING_MIN_RATED_MATCHES = 5
RANKING_CONCURRENCY = 5

_RANKING_SORT_KEYS = {
    RankingKind.scorers: lambda row: row.goals,
    RankingKind.assists: lambda row: row.assists,
    RankingKind.contributors: lambda row: row.total,
    RankingKind.ratings: lambda row: row.rating or 0.0,
}


class FootballDataService:
    """Provider-agnostic football data accessors backed by a TTL cache."""

    def __init__(
        self,
        provider: ApiFootballProvider,
        cache: TTLCache,
        *,
        season: int | None = None,
        comparison_leagues: Sequence[int] = (),
    ) -> None:
        self._provider = provider
        self._cache = cache
        self._season = season
        self._comparison_leagues = tuple(comparison_leagues)

    def season(self, season: int | None = None) -> int:
        if season is not None:
            return int(season)
        return self._season if self._season is not None else current_season()

    # ------------------------------------------------------------------
    # Standings
    # ------------------------------------------------------------------

    async def get_group_standings(self, league: str | int, season: int | None = None) -> list[StandingGroup]:
        league_id = normalize_league_code(league)
        year = self.season(season)

        async def _fetch() -> list[StandingGroup]:
            rows = await self._provider.get_standings(league_id, year)
            if not rows:
                return []
            return transform_standing_groups((rows[0] or {}).get("league") or {})

        return await self._cache.get(f"standings:{league_id}:{year}", _fetch, ttl=CacheDurations.STANDINGS)

    async def get_standings(self, league: str | int, season: int | None = None) -> list[Standing]:
        """First table of the competition (the whole league for single-table leagues)."""
        groups = await self.get_group_standings(league, season)
        return list(groups[0].standings) if groups else []

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    async def get_team(self, team_id: int) -> Team | None:
        async def _fetch() -> Team | None:
            rows = await self._provider.get_team(team_id)
            return transform_team(rows[0]) if rows else None

        return await self._cache.get(f"team:{int(team_id)}", _fetch, ttl=CacheDurations.TEAM_DETAILS)

    # ------------------------------------------------------------------
    # Fixtures
    # ------------------------------------------------------------------

    async def get_next_fixtures(self, league: str | int, count: int = 10, season: int | None = None) -> list[Match]:
        league_id = normalize_league_code(league)
        year = self.season(season)

        async def _fetch() -> list[Match]:
            rows = await self._provider.get_fixtures(league=league_id, season=year, next=int(count))
            return [transform_match(r) for r in rows]

        return await self._cache.get(
            f"fixtures:next:{league_id}:{year}:{int(count)}", _fetch, ttl=CacheDurations.NEXT_MATCHES
        )

    async def get_last_results(self, league: str | int, count: int = 10, season: int | None = None) -> list[Match]:
        league_id = normalize_league_code(league)
        year = self.season(season)

        async def _fetch() -> list[Match]:
            rows = await self._provider.get_fixtures(league=league_id, season=year, last=int(count))
            return [transform_match(r) for r in rows]

        return await self._cache.get(
            f"fixtures:last:{league_id}:{year}:{int(count)}", _fetch, ttl=CacheDurations.LAST_RESULTS
        )

    async def get_matches_by_matchday(
        self, league: str | int, matchday: int, season: int | None = None
    ) -> list[Match]:
        league_id = normalize_league_code(league)
        year = self.season(season)

        async def _fetch() -> list[Match]:
            rows = await self._provider.get_fixtures(league=league_id, season=year)
            return [transform_match(r) for r in rows]

        matches = await self._cache.get(f"fixtures:season:{league_id}:{year}", _fetch, ttl=CacheDurations.DEFAULT)
        return [m for m in matches if m.matchday == int(matchday)]

    async def get_match(self, fixture_id: int) -> Match | None:
        """Single fixture; a live fixture is evicted right away so the next read refetches."""
        key = f"match:{int(fixture_id)}"

        async def _fetch() -> Match | None:
            rows = await self._provider.get_fixtures(id=int(fixture_id))
            return transform_match(rows[0]) if rows else None

        match = await self._cache.get(key, _fetch, ttl=CacheDurations.MATCH_DETAILS)
        if match is not None and is_live_status(match.status):
            self._cache.invalidate(key)
        return match

    async def get_live_matches(self) -> list[Match]:
        async def _fetch() -> list[Match]:
            rows = await self._provider.get_fixtures(live="all")
            return [transform_match(r) for r in rows]

        return await self._cache.get("fixtures:live", _fetch, ttl=CacheDurations.LIVE_MATCHES)

    async def get_match_events(self, fixture_id: int, live: bool = False) -> list[MatchEvent]:
        async def _fetch() -> list[MatchEvent]:
            rows = await self._provider.get_fixture_events(fixture_id)
            return [transform_event(r) for r in rows]

        if live:
            return await _fetch()
        return await self._cache.get(f"match:events:{int(fixture_id)}", _fetch)

    async def get_match_statistics(self, fixture_id: int, live: bool = False) -> MatchStatistics | None:
        async def _fetch() -> MatchStatistics | None:
            rows = await self._provider.get_fixture_statistics(fixture_id)
            return transform_match_statistics(rows)

        if live:
            return await _fetch()
        return await self._cache.get(f"match:stats:{int(fixture_id)}", _fetch)

    async def get_head_to_head(self, team1_id: int, team2_id: int, last: int = 10) -> list[Match]:
        async def _fetch() -> list[Match]:
            rows = await self._provider.get_head_to_head(team1_id, team2_id, last)
            return [transform_match(r) for r in rows]

        return await self._cache.get(f"h2h:{int(team1_id)}:{int(team2_id)}:{int(last)}", _fetch)

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------

    async def get_top_scorers(self, league: str | int, season: int | None = None) -> list[Scorer]:
        league_id = normalize_league_code(league)
        year = self.season(season)

        async def _fetch() -> list[Scorer]:
            rows = await self._provider.get_top_scorers(league_id, year)
            return [transform_scorer(r) for r in rows]

        return await self._cache.get(f"scorers:{league_id}:{year}", _fetch, ttl=CacheDurations.TOP_SCORERS)

    async def get_top_assists(self, league: str | int, season: int | None = None) -> list[Scorer]:
        league_id = normalize_league_code(league)
        year = self.season(season)

        async def _fetch() -> list[Scorer]:
            rows = await self._provider.get_top_assists(league_id, year)
            return [transform_scorer(r) for r in rows]

        return await self._cache.get(f"assists:{league_id}:{year}", _fetch, ttl=CacheDurations.TOP_SCORERS)

    async def get_player_statistics(self, player_id: int, season: int | None = None) -> PlayerAggregateStats | None:
        """Cross-competition totals for one player, or None when the provider knows no statistics."""
        year = self.season(season)

        async def _fetch() -> PlayerAggregateStats | None:
            rows = await self._provider.get_player(player_id, year)
            if not rows:
                return None
            blocks: list[dict[str, Any]] = rows[0].get("statistics") or []
            if not blocks:
                return None
            return aggregate_player_statistics(blocks)

        return await self._cache.get(f"player:{int(player_id)}:{year}", _fetch, ttl=CacheDurations.PLAYER_INFO)

    async def get_comparison_candidates(
        self,
        league_ids: Sequence[int | str] | None = None,
        season: int | None = None,
    ) -> list[ComparisonCandidate]:
        """Players offered in the comparison picker.

        Top scorers and top assists of every league are fetched concurrently;
        a single failed call fails the whole list. Players are deduplicated
        by id (first occurrence wins, scorers before assists) and players
        with neither goals nor assists are dropped.
        """
        leagues = [normalize_league_code(code) for code in (league_ids or self._comparison_leagues)]
        year = self.season(season)

        calls = [self.get_top_scorers(league_id, year) for league_id in leagues]
        calls += [self.get_top_assists(league_id, year) for league_id in leagues]
        results = await asyncio.gather(*calls)
        sources = leagues + leagues

        candidates: dict[int, ComparisonCandidate] = {}
        for league_id, scorers in zip(sources, results):
            for scorer in scorers:
                if scorer.player.id in candidates:
                    continue
                candidates[scorer.player.id] = ComparisonCandidate(
                    id=scorer.player.id,
                    name=scorer.player.name,
                    photo=scorer.player.photo,
                    team=scorer.team,
                    league_id=league_id,
                    goals=scorer.goals,
                    assists=scorer.assists,
                )

        selected = [c for c in candidates.values() if c.goals > 0 or c.assists > 0]
        logger.info(
            "Comparison candidates: %d players from %d leagues (%d without goals or assists dropped)",
            len(selected), len(leagues), len(candidates) - len(selected),
        )
        return selected

    async def get_european_rankings(
        self,
        kind: RankingKind | str,
        season: int | None = None,
        league_ids: Sequence[int | str] | None = None,
    ) -> list[RankedPlayer]:
        """Best players of the comparison leagues by all-competition totals.

        Candidates are the leading entries of each league's top-scorer list
        (scorers), top-assist list (assists) or both (contributors, ratings).
        Each candidate's season statistics blocks are aggregated over every
        competition, so cup and European goals count too. The ratings
        ranking keeps only players with an average rating and at least
        RANKING_MIN_RATED_MATCHES appearances.

        A failed league list fails the whole ranking. A failed player lookup
        drops that player, unless every lookup failed.
        """
        kind = RankingKind(kind)
        leagues = [normalize_league_code(code) for code in (league_ids or self._comparison_leagues)]
        year = self.season(season)
        key = f"rankings:{kind.value}:{year}:{','.join(str(league_id) for league_id in leagues)}"

        async def _fetch() -> list[RankedPlayer]:
            candidates = await self._ranking_candidates(kind, leagues, year)
            rows = await self._ranked_players(candidates, year)
            if kind is RankingKind.ratings:
                rows = [
                    r for r in rows
                    if r.rating is not None and r.played_matches >= RANKING_MIN_RATED_MATCHES
                ]
            rows.sort(key=_RANKING_SORT_KEYS[kind], reverse=True)
            logger.info(
                "European %s ranking %s: %d ranked from %d candidates",
                kind.value, year, len(rows), len(candidates),
            )
            return rows[:RANKING_LIMIT]

        return await self._cache.get(key, _fetch, ttl=CacheDurations.TOP_SCORERS)

    async def _ranking_candidates(
        self, kind: RankingKind, leagues: Sequence[int], year: int
    ) -> list[tuple[int, Scorer]]:
        calls = []
        sources: list[int] = []
        if kind is not RankingKind.assists:
            calls += [self.get_top_scorers(league_id, year) for league_id in leagues]
            sources += leagues
        if kind is not RankingKind.scorers:
            calls += [self.get_top_assists(league_id, year) for league_id in leagues]
            sources += leagues
        results = await asyncio.gather(*calls)

        seen: set[int] = set()
        candidates: list[tuple[int, Scorer]] = []
        for league_id, scorers in zip(sources, results):
            for scorer in scorers[:RANKING_CANDIDATES_PER_LIST]:
                if scorer.player.id in seen:
                    continue
                seen.add(scorer.player.id)
                candidates.append((league_id, scorer))
        return candidates

    async def _ranked_players(self, candidates: Sequence[tuple[int, Scorer]], year: int) -> list[RankedPlayer]:
        sem = asyncio.Semaphore(RANKING_CONCURRENCY)

        async def _lookup(player_id: int) -> PlayerAggregateStats | None:
            async with sem:
                return await self.get_player_statistics(player_id, year)

        results = await asyncio.gather(
            *(_lookup(scorer.player.id) for _, scorer in candidates),
            return_exceptions=True,
        )

        rows: list[RankedPlayer] = []
        failures: list[ProviderError] = []
        for (league_id, scorer), stats in zip(candidates, results):
            if isinstance(stats, ProviderError):
                logger.warning("Ranking: statistics of player %s unavailable: %s", scorer.player.id, stats)
                failures.append(stats)
                continue
            if isinstance(stats, BaseException):
                raise stats
            if stats is None:
                continue
            rows.append(
                RankedPlayer(
                    player=scorer.player,
                    team=scorer.team,
                    league_id=league_id,
                    goals=stats.goals,
                    assists=stats.assists,
                    total=stats.goals + stats.assists,
                    played_matches=stats.appearances,
                    rating=stats.rating,
                )
            )
        if candidates and len(failures) == len(candidates):
            raise failures[0]
        return rows

    async def compare(self, player1_id: int, player2_id: int, season: int | None = None) -> PlayerHeadToHead:
        first, second = await asyncio.gather(
            self.get_player_statistics(player1_id, season),
            self.get_player_statistics(player2_id, season),
        )
        if first is None:
            raise PlayerNotFoundError(player1_id)
        if second is None:
            raise PlayerNotFoundError(player2_id)
        return PlayerHeadToHead(
            player1_id=int(player1_id),
            player2_id=int(player2_id),
            player1=first,
            player2=second,
            verdict=compare_players(first, second),
        )

    def invalidate(self, key: str | None = None) -> None:
        self._cache.invalidate(key)
