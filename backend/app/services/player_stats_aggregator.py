"""
backend/app/services/player_stats_aggregator.py

Purpose:
    Merge a player's per-competition statistics blocks into one
    cross-competition summary and compute the head-to-head verdict between
    two aggregated players.

Dependencies:
    - app.models.football
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping

from app.models.football import PlayerAggregateStats, PlayerComparison

logger = logging.getLogger("footdata.player_stats")

# aggregate field -> (block section, section key)
_COUNTER_PATHS: dict[str, tuple[str, str]] = {
    "appearances": ("games", "appearences"),
    "goals": ("goals", "total"),
    "assists": ("goals", "assists"),
    "minutes": ("games", "minutes"),
    "passes_total": ("passes", "total"),
    "passes_key": ("passes", "key"),
    "dribbles_attempts": ("dribbles", "attempts"),
    "dribbles_success": ("dribbles", "success"),
    "tackles_total": ("tackles", "total"),
    "interceptions": ("tackles", "interceptions"),
    "duels_won": ("duels", "won"),
    "duels_total": ("duels", "total"),
    "fouls_drawn": ("fouls", "drawn"),
    "fouls_committed": ("fouls", "committed"),
    "yellow_cards": ("cards", "yellow"),
    "red_cards": ("cards", "red"),
}

_VERDICT_METRICS = ("goals", "assists", "appearances", "rating", "dribbles_success")


def _counter(block: Mapping[str, Any], section: str, key: str) -> int:
    value = (block.get(section) or {}).get(key)
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _rating(block: Mapping[str, Any]) -> float | None:
    raw = (block.get("games") or {}).get("rating")
    if raw in (None, ""):
        return None
    try:
        rating = float(raw)
    except (TypeError, ValueError):
        logger.debug("Ignoring unparsable rating %r", raw)
        return None
    return rating if math.isfinite(rating) else None


def aggregate_player_statistics(blocks: Iterable[Mapping[str, Any]]) -> PlayerAggregateStats:
    """Sum every counter across statistics blocks.

    The rating is averaged only over blocks that reported one, so
    competitions without a rating do not dilute it; it stays None when no
    block reported a rating.
    """
    totals = {field: 0 for field in _COUNTER_PATHS}
    rating_sum = 0.0
    rating_count = 0

    for block in blocks:
        block = block or {}
        for field, (section, key) in _COUNTER_PATHS.items():
            totals[field] += _counter(block, section, key)
        rating = _rating(block)
        if rating is not None:
            rating_sum += rating
            rating_count += 1

    return PlayerAggregateStats(
        **totals,
        rating=rating_sum / rating_count if rating_count > 0 else None,
    )


def compare_players(first: PlayerAggregateStats, second: PlayerAggregateStats) -> PlayerComparison:
    """Count strict metric wins per player; the side with more wins takes the verdict."""
    first_wins = 0
    second_wins = 0
    for metric in _VERDICT_METRICS:
        v1 = getattr(first, metric) or 0
        v2 = getattr(second, metric) or 0
        if v1 > v2:
            first_wins += 1
        elif v2 > v1:
            second_wins += 1

    if first_wins > second_wins:
        winner = 1
    elif second_wins > first_wins:
        winner = 2
    else:
        winner = 0
    return PlayerComparison(player1_wins=first_wins, player2_wins=second_wins, winner=winner)
