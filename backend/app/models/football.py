"""
backend/app/models/football.py

Purpose:
    Canonical, provider-agnostic football records returned by the data layer.
    Records are frozen; attribute names are snake_case and serialize to the
    camelCase wire schema with ``model_dump(by_alias=True)``.

Dependencies:
    - pydantic
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class MatchState(str, Enum):
    scheduled = "SCHEDULED"
    in_play = "IN_PLAY"
    finished = "FINISHED"
    suspended = "SUSPENDED"
    interrupted = "INTERRUPTED"
    postponed = "POSTPONED"
    cancelled = "CANCELLED"
    abandoned = "ABANDONED"
    awarded = "AWARDED"
    walkover = "WALKOVER"


class CanonicalModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TeamRef(CanonicalModel):
    """Team-lite embedded in matches and standings."""
    id: int
    name: str
    short_name: str
    tla: str
    crest: str | None = None


class ScoreLine(CanonicalModel):
    home: int | None = None
    away: int | None = None


class Score(CanonicalModel):
    full_time: ScoreLine
    half_time: ScoreLine


class CompetitionRef(CanonicalModel):
    id: int
    name: str
    emblem: str | None = None


class Match(CanonicalModel):
    id: int
    utc_date: str
    status: str                  # MatchState value, or the raw code when unmapped
    status_short: str
    minute: int | None = None
    matchday: int
    round: str
    home_team: TeamRef
    away_team: TeamRef
    score: Score
    competition: CompetitionRef
    venue: str | None = None
    referee: str | None = None


class Standing(CanonicalModel):
    position: int
    team: TeamRef
    played_games: int
    won: int
    draw: int
    lost: int
    points: int
    goals_for: int
    goals_against: int
    goal_difference: int
    form: str | None = None


class StandingGroup(CanonicalModel):
    name: str | None = None
    standings: list[Standing]


class PlayerRef(CanonicalModel):
    id: int
    name: str
    first_name: str | None = None
    last_name: str | None = None
    nationality: str | None = None
    photo: str | None = None


class ScorerTeam(CanonicalModel):
    id: int | None = None
    name: str | None = None
    crest: str | None = None


class Scorer(CanonicalModel):
    player: PlayerRef
    team: ScorerTeam
    goals: int = 0
    assists: int = 0
    played_matches: int = 0


class EventTime(CanonicalModel):
    elapsed: int | None = None
    extra: int | None = None


class EventTeam(CanonicalModel):
    id: int
    name: str
    logo: str | None = None


class EventActor(CanonicalModel):
    id: int | None = None
    name: str | None = None


class MatchEvent(CanonicalModel):
    time: EventTime
    team: EventTeam
    player: EventActor | None = None
    assist: EventActor | None = None
    type: str
    detail: str | None = None
    comments: str | None = None


class Team(CanonicalModel):
    id: int
    name: str
    short_name: str
    tla: str
    crest: str | None = None
    venue: str | None = None
    founded: int | None = None
    country: str | None = None


class TeamMatchStatistics(CanonicalModel):
    team: EventTeam | None = None
    possession: int | float = 0
    shots: int | float = 0
    shots_on_target: int | float = 0
    corners: int | float = 0
    fouls: int | float = 0
    yellow_cards: int | float = 0
    red_cards: int | float = 0
    offsides: int | float = 0
    passes: int | float = 0
    pass_accuracy: int | float = 0


class MatchStatistics(CanonicalModel):
    home: TeamMatchStatistics
    away: TeamMatchStatistics
    partial: bool = False


class PlayerAggregateStats(CanonicalModel):
    """Per-player sums across every competition statistics block."""
    appearances: int = 0
    goals: int = 0
    assists: int = 0
    minutes: int = 0
    passes_total: int = 0
    passes_key: int = 0
    dribbles_attempts: int = 0
    dribbles_success: int = 0
    tackles_total: int = 0
    interceptions: int = 0
    duels_won: int = 0
    duels_total: int = 0
    fouls_drawn: int = 0
    fouls_committed: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    rating: float | None = None


class PlayerComparison(CanonicalModel):
    player1_wins: int
    player2_wins: int
    winner: int                  # 1, 2, or 0 when the win counts are equal


class PlayerHeadToHead(CanonicalModel):
    player1_id: int
    player2_id: int
    player1: PlayerAggregateStats
    player2: PlayerAggregateStats
    verdict: PlayerComparison


class ComparisonCandidate(CanonicalModel):
    id: int
    name: str
    photo: str | None = None
    team: ScorerTeam
    league_id: int
    goals: int = 0
    assists: int = 0


class RankingKind(str, Enum):
    """Sort key of a cross-competition player ranking."""
    scorers = "scorers"
    assists = "assists"
    contributors = "contributors"
    ratings = "ratings"


class RankedPlayer(CanonicalModel):
    """One row of a cross-competition ranking; counters cover every competition of the season."""
    player: PlayerRef
    team: ScorerTeam
    league_id: int
    goals: int = 0
    assists: int = 0
    total: int = 0               # goals + assists
    played_matches: int = 0
    rating: float | None = None
