# corrector/sports.py
"""
Per-sport context extensions.

Each function receives the raw match mapping and returns the variables
that sport adds on top of the baseline context. Absent numbers count as 0.

Detail shapes read here:
- football:   score.details.halftime.{home,away}, sportSpecific.elapsed
- basketball: score.details.{home,away}.quarter_1..quarter_4, overtime
- rugby/handball: score.details.{home,away}.first_half, second_half, overtime
- hockey:     score.details.{home,away}.first_period..third_period,
              overtime, penalties
- baseball:   score.details.{home,away}.hits, errors, at_bats
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping

from corrector.registry import sport_context


# =============================================================================
# Helpers
# =============================================================================


def as_number(value: Any) -> float | int:
    """Coerce a raw value to a number; absent or unusable data is 0."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return 0 if math.isnan(value) else value
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0
        if math.isnan(number):
            return 0
        return int(number) if number.is_integer() else number
    return 0


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def score_of(match: Mapping[str, Any]) -> Mapping[str, Any]:
    return _mapping(match.get("score"))


def details_of(match: Mapping[str, Any]) -> Mapping[str, Any]:
    return _mapping(score_of(match).get("details"))


def side_stat(details: Mapping[str, Any], side: str, key: str) -> float | int:
    return as_number(_mapping(details.get(side)).get(key))


def final_scores(match: Mapping[str, Any]) -> tuple[float | int, float | int]:
    score = score_of(match)
    return as_number(score.get("home")), as_number(score.get("away"))


# =============================================================================
# Extensions
# =============================================================================


@sport_context("football")
def football_context(match: Mapping[str, Any]) -> Dict[str, Any]:
    home, away = final_scores(match)
    halftime = _mapping(details_of(match).get("halftime"))
    ht_home = as_number(halftime.get("home"))
    ht_away = as_number(halftime.get("away"))

    total_ht = ht_home + ht_away
    total = home + away
    return {
        "totalGoalsHT": total_ht,
        "secondHalfGoals": total - total_ht,
        "secondHalfGoalsHome": home - ht_home,
        "secondHalfGoalsAway": away - ht_away,
        "noGoals": total == 0,
        "bothTeamsScoreHT": ht_home > 0 and ht_away > 0,
        "elapsed": as_number(_mapping(match.get("sportSpecific")).get("elapsed")),
    }


@sport_context("basketball")
def basketball_context(match: Mapping[str, Any]) -> Dict[str, Any]:
    home, away = final_scores(match)
    details = details_of(match)

    def quarters(side: str, *numbers: int) -> float | int:
        return sum(side_stat(details, side, f"quarter_{n}") for n in numbers)

    return {
        "firstHalfHome": quarters("home", 1, 2),
        "firstHalfAway": quarters("away", 1, 2),
        "secondHalfHome": quarters("home", 3, 4),
        "secondHalfAway": quarters("away", 3, 4),
        "hasOvertime": side_stat(details, "home", "overtime") > 0
        or side_stat(details, "away", "overtime") > 0,
        "totalPoints": home + away,
    }


@sport_context("volleyball")
def volleyball_context(match: Mapping[str, Any]) -> Dict[str, Any]:
    home, away = final_scores(match)
    return {
        "setsWonHome": home,
        "setsWonAway": away,
        "totalSets": home + away,
        "wentToFive": home + away == 5,
        "straightSets": (home == 3 and away == 0) or (away == 3 and home == 0),
    }


@sport_context("tennis")
def tennis_context(match: Mapping[str, Any]) -> Dict[str, Any]:
    home, away = final_scores(match)
    return {
        "setsWonHome": home,
        "setsWonAway": away,
        "totalSets": home + away,
        "straightSets": (home >= 2 and away == 0) or (away >= 2 and home == 0),
    }


@sport_context("rugby")
def rugby_context(match: Mapping[str, Any]) -> Dict[str, Any]:
    home, away = final_scores(match)
    details = details_of(match)
    return {
        "firstHalfTotal": side_stat(details, "home", "first_half") + side_stat(details, "away", "first_half"),
        "secondHalfTotal": side_stat(details, "home", "second_half") + side_stat(details, "away", "second_half"),
        "hasOvertime": side_stat(details, "home", "overtime") > 0
        or side_stat(details, "away", "overtime") > 0,
        "totalPoints": home + away,
    }


@sport_context("handball")
def handball_context(match: Mapping[str, Any]) -> Dict[str, Any]:
    home, away = final_scores(match)
    details = details_of(match)
    return {
        "firstHalfTotal": side_stat(details, "home", "first_half") + side_stat(details, "away", "first_half"),
        "secondHalfTotal": side_stat(details, "home", "second_half") + side_stat(details, "away", "second_half"),
        "totalGoals": home + away,
    }


@sport_context("hockey")
def hockey_context(match: Mapping[str, Any]) -> Dict[str, Any]:
    home, away = final_scores(match)
    details = details_of(match)

    def regulation(side: str) -> float | int:
        return sum(side_stat(details, side, p) for p in ("first_period", "second_period", "third_period"))

    return {
        "regulationGoalsHome": regulation("home"),
        "regulationGoalsAway": regulation("away"),
        "hasOvertime": side_stat(details, "home", "overtime") > 0
        or side_stat(details, "away", "overtime") > 0,
        "hasPenalties": side_stat(details, "home", "penalties") > 0
        or side_stat(details, "away", "penalties") > 0,
        "totalGoals": home + away,
    }


@sport_context("baseball")
def baseball_context(match: Mapping[str, Any]) -> Dict[str, Any]:
    home, away = final_scores(match)
    details = details_of(match)
    # at_bats of 0 or absent counts as 1
    at_bats = side_stat(details, "home", "at_bats") or 1
    return {
        "totalRuns": home + away,
        "totalHits": side_stat(details, "home", "hits") + side_stat(details, "away", "hits"),
        "totalErrors": side_stat(details, "home", "errors") + side_stat(details, "away", "errors"),
        "hitRatio": side_stat(details, "home", "hits") / max(1, at_bats),
    }
