"""
backend/tests/test_football_transform.py

Purpose:
    Normalization of API-Football payloads into canonical records: status
    and round mapping, stat value parsing, and each record transformer.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.models.football import MatchState
from app.services.football_transform import (
    STATUS_MAPPING,
    canonical_fields,
    derive_tla,
    extract_matchday,
    is_live_status,
    map_status,
    parse_stat_value,
    transform_event,
    transform_match,
    transform_match_statistics,
    transform_scorer,
    transform_standing,
    transform_standing_groups,
    transform_team,
)


def _fixture(**overrides) -> dict:
    payload = {
        "fixture": {
            "id": 1035037,
            "referee": "C. Turpin",
            "date": "2024-08-16T18:45:00+00:00",
            "venue": {"id": 600, "name": "Stade Pierre-Mauroy", "city": "Lille"},
            "status": {"long": "Match Finished", "short": "FT", "elapsed": 90},
        },
        "league": {
            "id": 61,
            "name": "Ligue 1",
            "logo": "https://media.api-sports.io/football/leagues/61.png",
            "round": "Regular Season - 1",
        },
        "teams": {
            "home": {"id": 79, "name": "Lille", "logo": "https://media.api-sports.io/football/teams/79.png"},
            "away": {"id": 94, "name": "Rennes", "logo": "https://media.api-sports.io/football/teams/94.png"},
        },
        "goals": {"home": 2, "away": 0},
        "score": {"halftime": {"home": 1, "away": 0}, "fulltime": {"home": 2, "away": 0}},
    }
    for section, values in overrides.items():
        payload[section] = {**payload[section], **values}
    return payload


@pytest.mark.parametrize(
    "code,expected",
    [
        ("TBD", "SCHEDULED"),
        ("NS", "SCHEDULED"),
        ("1H", "IN_PLAY"),
        ("HT", "IN_PLAY"),
        ("2H", "IN_PLAY"),
        ("ET", "IN_PLAY"),
        ("BT", "IN_PLAY"),
        ("P", "IN_PLAY"),
        ("LIVE", "IN_PLAY"),
        ("FT", "FINISHED"),
        ("AET", "FINISHED"),
        ("PEN", "FINISHED"),
        ("SUSP", "SUSPENDED"),
        ("INT", "INTERRUPTED"),
        ("PST", "POSTPONED"),
        ("CANC", "CANCELLED"),
        ("ABD", "ABANDONED"),
        ("AWD", "AWARDED"),
        ("WO", "WALKOVER"),
    ],
)
def test_map_status_known_codes(code, expected):
    assert map_status(code) == expected


def test_status_table_covers_every_canonical_state():
    assert {state for state in STATUS_MAPPING.values()} == set(MatchState)


def test_map_status_passes_unknown_code_through():
    assert map_status("XYZ") == "XYZ"
    assert map_status("") == ""


def test_is_live_status_accepts_raw_and_canonical_codes():
    assert is_live_status("IN_PLAY") is True
    assert is_live_status("2H") is True
    assert is_live_status("FINISHED") is False
    assert is_live_status("FT") is False
    assert is_live_status(None) is False


@pytest.mark.parametrize(
    "label,expected",
    [
        ("Regular Season - 15", 15),
        ("Group Stage - 3", 3),
        ("Round 7", 7),
        ("Final", 1),
        ("", 1),
        (None, 1),
        ("Quarter-finals 2nd leg 12", 2),
        ("Round 0", 1),
        ("Preliminary Round - 00", 1),
    ],
)
def test_extract_matchday(label, expected):
    assert extract_matchday(label) == expected


def test_parse_stat_value_variants():
    stats = [
        {"type": "Ball Possession", "value": "65%"},
        {"type": "Total Shots", "value": 14},
        {"type": "Passes %", "value": "83%"},
        {"type": "Corner Kicks", "value": None},
        {"type": "expected_goals", "value": "1.37"},
        {"type": "Fouls", "value": "n/a"},
        {"type": "Offsides", "value": -2},
        {"type": "Saves", "value": "7"},
    ]
    assert parse_stat_value(stats, "Ball Possession") == 65
    assert parse_stat_value(stats, "Total Shots") == 14
    assert parse_stat_value(stats, "Passes %") == 83
    assert parse_stat_value(stats, "Corner Kicks") == 0
    assert parse_stat_value(stats, "expected_goals") == pytest.approx(1.37)
    assert parse_stat_value(stats, "Fouls") == 0
    assert parse_stat_value(stats, "Offsides") == 0
    assert parse_stat_value(stats, "Saves") == 7
    assert parse_stat_value(stats, "Missing") == 0
    assert parse_stat_value([], "Total Shots") == 0


def test_parse_stat_value_uses_first_matching_entry():
    stats = [{"type": "Fouls", "value": 9}, {"type": "Fouls", "value": 3}]
    assert parse_stat_value(stats, "Fouls") == 9


def test_derive_tla_prefers_provider_code():
    assert derive_tla("Paris Saint Germain", "PSG") == "PSG"
    assert derive_tla("  lille ") == "LIL"
    assert derive_tla("Lyon", "   ") == "LYO"
    assert derive_tla("AC") == "ACX"


@pytest.mark.parametrize(
    "name,expected",
    [
        ("AC Milan", "ACM"),
        ("FC Porto", "FCP"),
        ("1. FC Koln", "FCK"),
        ("1. FC Köln", "FCK"),
        ("PSV", "PSV"),
    ],
)
def test_derive_tla_skips_non_letters(name, expected):
    assert derive_tla(name) == expected


def test_derive_tla_falls_back_to_name_when_code_has_no_letters():
    assert derive_tla("Real Madrid", "1.") == "REA"
    assert derive_tla("Real Madrid", "rma") == "RMA"


def test_transform_match_team_codes_are_three_letters():
    payload = _fixture()
    payload["teams"]["home"]["name"] = "1. FC Union Berlin"
    match = transform_match(payload)
    assert match.home_team.tla == "FCU"
    assert len(match.away_team.tla) == 3


def test_transform_match_finished_fixture():
    match = transform_match(_fixture())

    assert match.id == 1035037
    assert match.utc_date == "2024-08-16T18:45:00+00:00"
    assert match.status == "FINISHED"
    assert match.status_short == "FT"
    assert match.minute == 90
    assert match.matchday == 1
    assert match.round == "Regular Season - 1"
    assert match.home_team.name == "Lille"
    assert match.home_team.short_name == "Lille"
    assert match.home_team.tla == "LIL"
    assert match.away_team.tla == "REN"
    assert match.score.full_time.home == 2
    assert match.score.full_time.away == 0
    assert match.score.half_time.home == 1
    assert match.competition.id == 61
    assert match.venue == "Stade Pierre-Mauroy"
    assert match.referee == "C. Turpin"


def test_transform_match_scheduled_fixture_keeps_null_scores():
    match = transform_match(
        _fixture(
            fixture={"status": {"short": "NS", "elapsed": None}, "venue": None, "referee": None},
            goals={"home": None, "away": None},
            score={"halftime": {"home": None, "away": None}},
        )
    )
    assert match.status == "SCHEDULED"
    assert match.minute is None
    assert match.venue is None
    assert match.score.full_time.home is None
    assert match.score.half_time.away is None


def test_transform_match_serializes_camel_case():
    body = transform_match(_fixture()).model_dump(by_alias=True)
    assert body["utcDate"] == "2024-08-16T18:45:00+00:00"
    assert body["homeTeam"]["shortName"] == "Lille"
    assert body["score"]["fullTime"] == {"home": 2, "away": 0}
    assert body["score"]["halfTime"] == {"home": 1, "away": 0}
    assert body["statusShort"] == "FT"


def test_transform_match_unknown_status_and_round():
    match = transform_match(
        _fixture(fixture={"status": {"short": "XYZ", "elapsed": None}}, league={"round": "Final"})
    )
    assert match.status == "XYZ"
    assert match.matchday == 1


def test_transform_match_missing_round_defaults_to_matchday_one():
    payload = _fixture()
    del payload["league"]["round"]
    match = transform_match(payload)
    assert match.round == ""
    assert match.matchday == 1


def test_canonical_fields_round_trip():
    match = transform_match(_fixture(league={"round": "Regular Season - 22"}))
    assert canonical_fields(match) == (match.status, match.matchday) == ("FINISHED", 22)


def test_transform_match_missing_required_field_raises():
    payload = _fixture()
    del payload["teams"]["home"]["id"]
    with pytest.raises(ValidationError):
        transform_match(payload)


def test_transform_standing():
    row = {
        "rank": 1,
        "team": {"id": 85, "name": "Paris Saint Germain", "logo": "psg.png"},
        "points": 76,
        "goalsDiff": 48,
        "group": "Ligue 1",
        "form": "WWDWW",
        "all": {"played": 34, "win": 22, "draw": 10, "lose": 2, "goals": {"for": 81, "against": 33}},
    }
    standing = transform_standing(row)

    assert standing.position == 1
    assert standing.team.tla == "PAR"
    assert standing.played_games == 34
    assert standing.won == 22
    assert standing.draw == 10
    assert standing.lost == 2
    assert standing.points == 76
    assert standing.goals_for == 81
    assert standing.goals_against == 33
    assert standing.goal_difference == 48
    assert standing.form == "WWDWW"
    assert standing.model_dump(by_alias=True)["goalDifference"] == 48


def test_transform_standing_groups_keeps_every_group():
    def _row(rank: int, team_id: int, group: str) -> dict:
        return {"rank": rank, "team": {"id": team_id, "name": f"Team {team_id}"}, "points": 3, "group": group}

    league = {
        "id": 2,
        "standings": [
            [_row(1, 10, "Group A"), _row(2, 11, "Group A")],
            [],
            [_row(1, 20, "Group B")],
        ],
    }
    groups = transform_standing_groups(league)

    assert [g.name for g in groups] == ["Group A", "Group B"]
    assert [s.team.id for s in groups[0].standings] == [10, 11]
    assert groups[1].standings[0].played_games == 0
    assert transform_standing_groups({}) == []


def test_transform_scorer_uses_first_statistics_block():
    item = {
        "player": {
            "id": 278,
            "name": "K. Mbappé",
            "firstname": "Kylian",
            "lastname": "Mbappé Lottin",
            "nationality": "France",
            "photo": "278.png",
        },
        "statistics": [
            {
                "team": {"id": 85, "name": "Paris Saint Germain", "logo": "85.png"},
                "games": {"appearences": 29, "minutes": 2400, "rating": "7.9"},
                "goals": {"total": 27, "assists": 7},
            },
            {
                "team": {"id": 2, "name": "France"},
                "games": {"appearences": 5},
                "goals": {"total": 4, "assists": 1},
            },
        ],
    }
    scorer = transform_scorer(item)

    assert scorer.player.id == 278
    assert scorer.player.first_name == "Kylian"
    assert scorer.team.id == 85
    assert scorer.team.crest == "85.png"
    assert scorer.goals == 27
    assert scorer.assists == 7
    assert scorer.played_matches == 29


def test_transform_scorer_defaults_missing_counters_to_zero():
    scorer = transform_scorer(
        {"player": {"id": 9, "name": "X"}, "statistics": [{"goals": {"total": None, "assists": None}}]}
    )
    assert (scorer.goals, scorer.assists, scorer.played_matches) == (0, 0, 0)
    assert scorer.team.id is None

    bare = transform_scorer({"player": {"id": 10, "name": "Y"}, "statistics": []})
    assert bare.goals == 0
    assert bare.team.name is None


def test_transform_event_with_and_without_actors():
    goal = transform_event(
        {
            "time": {"elapsed": 45, "extra": 2},
            "team": {"id": 79, "name": "Lille", "logo": "79.png"},
            "player": {"id": 1, "name": "J. David"},
            "assist": {"id": 2, "name": "E. Zhegrova"},
            "type": "Goal",
            "detail": "Normal Goal",
            "comments": None,
        }
    )
    assert goal.time.elapsed == 45
    assert goal.time.extra == 2
    assert goal.player.name == "J. David"
    assert goal.assist.id == 2
    assert goal.type == "Goal"

    sub = transform_event(
        {
            "time": {"elapsed": 70, "extra": None},
            "team": {"id": 94, "name": "Rennes"},
            "player": None,
            "assist": {"id": None, "name": None},
            "type": "subst",
            "detail": "Substitution 1",
        }
    )
    assert sub.player is None
    assert sub.assist.id is None
    assert sub.comments is None


def test_transform_team_uses_provider_code_for_tla():
    team = transform_team(
        {
            "team": {"id": 85, "name": "Paris Saint Germain", "code": "PAR", "country": "France", "founded": 1970, "logo": "85.png"},
            "venue": {"id": 671, "name": "Parc des Princes", "city": "Paris"},
        }
    )
    assert team.tla == "PAR"
    assert team.short_name == "Paris Saint Germain"
    assert team.venue == "Parc des Princes"
    assert team.founded == 1970
    assert team.country == "France"


def test_transform_match_statistics_both_sides():
    response = [
        {
            "team": {"id": 79, "name": "Lille", "logo": "79.png"},
            "statistics": [
                {"type": "Ball Possession", "value": "58%"},
                {"type": "Total Shots", "value": 15},
                {"type": "Shots on Goal", "value": 6},
                {"type": "Corner Kicks", "value": 7},
                {"type": "Yellow Cards", "value": None},
                {"type": "Passes %", "value": "87%"},
            ],
        },
        {
            "team": {"id": 94, "name": "Rennes"},
            "statistics": [{"type": "Ball Possession", "value": "42%"}, {"type": "Red Cards", "value": 1}],
        },
    ]
    stats = transform_match_statistics(response)

    assert stats.partial is False
    assert stats.home.team.id == 79
    assert stats.home.possession == 58
    assert stats.home.shots == 15
    assert stats.home.shots_on_target == 6
    assert stats.home.corners == 7
    assert stats.home.yellow_cards == 0
    assert stats.home.pass_accuracy == 87
    assert stats.away.possession == 42
    assert stats.away.red_cards == 1
    assert stats.away.fouls == 0


def test_transform_match_statistics_partial_and_empty():
    one_side = transform_match_statistics(
        [{"team": {"id": 79, "name": "Lille"}, "statistics": [{"type": "Fouls", "value": 11}]}]
    )
    assert one_side.partial is True
    assert one_side.home.fouls == 11
    assert one_side.away.team is None
    assert one_side.away.fouls == 0

    assert transform_match_statistics([]) is None


def test_transform_match_regular_season_round_and_score():
    match = transform_match(
        _fixture(league={"round": "Regular Season - 18"}, goals={"home": 3, "away": 1})
    )
    assert match.matchday == 18
    assert match.status == "FINISHED"
    assert match.score.full_time.model_dump() == {"home": 3, "away": 1}


def test_transform_team_without_code_derives_tla_from_name():
    team = transform_team({"team": {"id": 40, "name": "Liverpool"}})
    assert team.tla == "LIV"
    assert team.venue is None


def test_transform_scorer_block_without_goals_or_games():
    scorer = transform_scorer(
        {"player": {"id": 11, "name": "Z"}, "statistics": [{"team": {"id": 40, "name": "Liverpool"}}]}
    )
    assert (scorer.goals, scorer.assists, scorer.played_matches) == (0, 0, 0)
    assert scorer.team.name == "Liverpool"


def test_transform_scorer_accepts_numeric_rating():
    scorer = transform_scorer(
        {
            "player": {"id": 12, "name": "N"},
            "statistics": [{"games": {"appearences": 4, "rating": 7.2}, "goals": {"total": 2}}],
        }
    )
    assert scorer.goals == 2
    assert scorer.played_matches == 4
