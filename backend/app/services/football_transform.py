"""
backend/app/services/football_transform.py

Purpose:
    Pure normalization of API-Football v3 payloads into the canonical records
    of app.models.football. No I/O; every function is total over its input
    contract and only raises when a required field is missing.

Dependencies:
    - app.models.api_football
    - app.models.football
    - app.monitoring.football_metrics
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Sequence

from app.models.api_football import (
    RawEvent,
    RawFixture,
    RawGoals,
    RawPlayerEntry,
    RawStandingRow,
    RawTeamEntry,
    RawTeamStatistics,
)
from app.models.football import (
    CompetitionRef,
    EventActor,
    EventTeam,
    EventTime,
    Match,
    MatchEvent,
    MatchState,
    MatchStatistics,
    PlayerRef,
    Score,
    ScoreLine,
    Scorer,
    ScorerTeam,
    Standing,
    StandingGroup,
    Team,
    TeamMatchStatistics,
    TeamRef,
)
from app.monitoring.football_metrics import METRIC_ROUND_DEFAULT, METRIC_STATUS_PASSTHROUGH

logger = logging.getLogger("footdata.transform")

STATUS_MAPPING: dict[str, MatchState] = {
    "TBD": MatchState.scheduled,
    "NS": MatchState.scheduled,
    "1H": MatchState.in_play,
    "HT": MatchState.in_play,
    "2H": MatchState.in_play,
    "ET": MatchState.in_play,
    "BT": MatchState.in_play,
    "P": MatchState.in_play,
    "LIVE": MatchState.in_play,
    "FT": MatchState.finished,
    "AET": MatchState.finished,
    "PEN": MatchState.finished,
    "SUSP": MatchState.suspended,
    "INT": MatchState.interrupted,
    "PST": MatchState.postponed,
    "CANC": MatchState.cancelled,
    "ABD": MatchState.abandoned,
    "AWD": MatchState.awarded,
    "WO": MatchState.walkover,
}

_DIGITS_RE = re.compile(r"\d+")
_LEADING_INT_RE = re.compile(r"^\s*(\d+)")
_NUMBER_RE = re.compile(r"^\s*-?\d+(\.\d+)?\s*$")

# Provider stat labels used for the match statistics panel.
_MATCH_STAT_TYPES = {
    "possession": "Ball Possession",
    "shots": "Total Shots",
    "shots_on_target": "Shots on Goal",
    "corners": "Corner Kicks",
    "fouls": "Fouls",
    "yellow_cards": "Yellow Cards",
    "red_cards": "Red Cards",
    "offsides": "Offsides",
    "passes": "Total passes",
    "pass_accuracy": "Passes %",
}


def map_status(raw_status: str) -> str:
    """Translate a provider short status code into the canonical match state.

    Unknown codes are returned unchanged so new provider codes surface
    instead of breaking the pipeline.
    """
    state = STATUS_MAPPING.get(raw_status)
    if state is None:
        METRIC_STATUS_PASSTHROUGH.labels(code=str(raw_status)).inc()
        logger.debug("Unmapped fixture status code passed through: %r", raw_status)
        return raw_status
    return state.value


def is_live_status(status: str | None) -> bool:
    """True for the canonical IN_PLAY state or any raw in-play short code."""
    if not status:
        return False
    state = STATUS_MAPPING.get(status)
    if state is not None:
        return state is MatchState.in_play
    return status == MatchState.in_play.value


def extract_matchday(round_label: str | None) -> int:
    """First run of digits in a round label; 1 when there is none or it is 0."""
    match = _DIGITS_RE.search(round_label or "")
    if match is None:
        METRIC_ROUND_DEFAULT.inc()
        return 1
    matchday = int(match.group(0))
    if matchday < 1:
        METRIC_ROUND_DEFAULT.inc()
        return 1
    return matchday


def parse_stat_value(stats: Sequence[Mapping[str, Any]], stat_type: str) -> int | float:
    """Numeric value of the first ``{type, value}`` entry matching ``stat_type``.

    Missing entries and null values read as 0; percentage strings keep
    their leading integer ("65%" -> 65).
    """
    entry = next((s for s in stats if (s or {}).get("type") == stat_type), None)
    if entry is None:
        return 0
    value = entry.get("value")
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, str):
        if "%" in value:
            leading = _LEADING_INT_RE.match(value)
            return int(leading.group(1)) if leading else 0
        if not _NUMBER_RE.match(value):
            return 0
        number = float(value)
        value = int(number) if number.is_integer() else number
    if isinstance(value, (int, float)):
        if value != value or value < 0:  # NaN or negative
            return 0
        return value
    return 0


def _tla_letters(text: str) -> str:
    return "".join(ch for ch in text if ch.isascii() and ch.isalpha()).upper()


def derive_tla(name: str, code: str | None = None) -> str:
    """Three uppercase ASCII letters: provider code when usable, else the
    first three letters of the name ("AC Milan" -> "ACM").

    Names with fewer than three letters are right-padded with "X".
    """
    letters = _tla_letters(code or "")
    if len(letters) < 3:
        letters = _tla_letters(name)
    return letters[:3].ljust(3, "X")


def _team_ref(team_id: int, name: str, crest: str | None) -> TeamRef:
    return TeamRef(id=team_id, name=name, short_name=name, tla=derive_tla(name), crest=crest)


def _score_line(goals: RawGoals | None) -> ScoreLine:
    if goals is None:
        return ScoreLine()
    return ScoreLine(home=goals.home, away=goals.away)


def transform_match(fixture: Mapping[str, Any] | RawFixture) -> Match:
    raw = fixture if isinstance(fixture, RawFixture) else RawFixture.model_validate(fixture)
    info = raw.fixture
    round_label = raw.league.round or ""
    return Match(
        id=info.id,
        utc_date=info.date,
        status=map_status(info.status.short),
        status_short=info.status.short,
        minute=info.status.elapsed,
        matchday=extract_matchday(round_label),
        round=round_label,
        home_team=_team_ref(raw.teams.home.id, raw.teams.home.name, raw.teams.home.logo),
        away_team=_team_ref(raw.teams.away.id, raw.teams.away.name, raw.teams.away.logo),
        score=Score(
            full_time=_score_line(raw.goals),
            half_time=_score_line(raw.score.halftime),
        ),
        competition=CompetitionRef(id=raw.league.id, name=raw.league.name, emblem=raw.league.logo),
        venue=info.venue.name if info.venue else None,
        referee=info.referee,
    )


def canonical_fields(match: Match) -> tuple[str, int]:
    """Re-derive (status, matchday) from the raw values preserved on a Match."""
    return map_status(match.status_short), extract_matchday(match.round)


def transform_standing(row: Mapping[str, Any] | RawStandingRow) -> Standing:
    raw = row if isinstance(row, RawStandingRow) else RawStandingRow.model_validate(row)
    record = raw.all
    return Standing(
        position=raw.rank,
        team=_team_ref(raw.team.id, raw.team.name, raw.team.logo),
        played_games=record.played,
        won=record.win,
        draw=record.draw,
        lost=record.lose,
        points=raw.points,
        goals_for=record.goals.for_,
        goals_against=record.goals.against,
        goal_difference=raw.goals_diff,
        form=raw.form,
    )


def transform_standing_groups(league: Mapping[str, Any]) -> list[StandingGroup]:
    """Every group table of a ``league`` standings payload (cups and tournaments)."""
    groups: list[StandingGroup] = []
    for table in league.get("standings") or []:
        rows = [RawStandingRow.model_validate(r) for r in table or []]
        if not rows:
            continue
        groups.append(
            StandingGroup(
                name=rows[0].group,
                standings=[transform_standing(r) for r in rows],
            )
        )
    return groups


def transform_scorer(item: Mapping[str, Any] | RawPlayerEntry) -> Scorer:
    """Top scorer/assist entry; team and counters come from the first block only."""
    raw = item if isinstance(item, RawPlayerEntry) else RawPlayerEntry.model_validate(item)
    primary = raw.statistics[0] if raw.statistics else None
    team = primary.team if primary else None
    goals = primary.goals if primary else None
    games = primary.games if primary else None
    return Scorer(
        player=PlayerRef(
            id=raw.player.id,
            name=raw.player.name,
            first_name=raw.player.firstname,
            last_name=raw.player.lastname,
            nationality=raw.player.nationality,
            photo=raw.player.photo,
        ),
        team=ScorerTeam(
            id=team.id if team else None,
            name=team.name if team else None,
            crest=team.logo if team else None,
        ),
        goals=(goals.total if goals else None) or 0,
        assists=(goals.assists if goals else None) or 0,
        played_matches=(games.appearences if games else None) or 0,
    )


def transform_event(event: Mapping[str, Any] | RawEvent) -> MatchEvent:
    raw = event if isinstance(event, RawEvent) else RawEvent.model_validate(event)
    return MatchEvent(
        time=EventTime(elapsed=raw.time.elapsed, extra=raw.time.extra),
        team=EventTeam(id=raw.team.id, name=raw.team.name, logo=raw.team.logo),
        player=EventActor(id=raw.player.id, name=raw.player.name) if raw.player else None,
        assist=EventActor(id=raw.assist.id, name=raw.assist.name) if raw.assist else None,
        type=raw.type,
        detail=raw.detail,
        comments=raw.comments,
    )


def transform_team(item: Mapping[str, Any] | RawTeamEntry) -> Team:
    raw = item if isinstance(item, RawTeamEntry) else RawTeamEntry.model_validate(item)
    team = raw.team
    return Team(
        id=team.id,
        name=team.name,
        short_name=team.name,
        tla=derive_tla(team.name, team.code),
        crest=team.logo,
        venue=raw.venue.name if raw.venue else None,
        founded=team.founded,
        country=team.country,
    )


def _team_match_statistics(raw: RawTeamStatistics | None) -> TeamMatchStatistics:
    if raw is None:
        return TeamMatchStatistics()
    stats = [entry.model_dump() for entry in raw.statistics]
    values = {field: parse_stat_value(stats, label) for field, label in _MATCH_STAT_TYPES.items()}
    return TeamMatchStatistics(
        team=EventTeam(id=raw.team.id, name=raw.team.name, logo=raw.team.logo),
        **values,
    )


def transform_match_statistics(response: Sequence[Mapping[str, Any]]) -> MatchStatistics | None:
    """Home/away statistics panel from a ``/fixtures/statistics`` response.

    Returns None when the provider has no statistics yet; a one-sided
    response is returned with ``partial=True`` and a zero-filled away side.
    """
    rows = [RawTeamStatistics.model_validate(r) for r in response or []]
    if not rows:
        return None
    home = rows[0]
    away = rows[1] if len(rows) > 1 else None
    return MatchStatistics(
        home=_team_match_statistics(home),
        away=_team_match_statistics(away),
        partial=away is None,
    )
