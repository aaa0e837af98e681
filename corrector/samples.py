# corrector/samples.py
"""
Built-in sample matches used by test_expression for diagnostics.

One finished match per supported sport. Unknown sports use football.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

FALLBACK_SPORT = "football"

SAMPLE_MATCHES: Mapping[str, Mapping[str, Any]] = MappingProxyType({
    "football": {
        "id": "test",
        "status": "FINISHED",
        "score": {
            "home": 2,
            "away": 1,
            "details": {"halftime": {"home": 1, "away": 0}},
        },
    },
    "basketball": {
        "id": "test",
        "status": "FINISHED",
        "score": {
            "home": 85,
            "away": 78,
            "details": {
                "home": {"quarter_1": 20, "quarter_2": 25, "quarter_3": 22, "quarter_4": 18},
                "away": {"quarter_1": 18, "quarter_2": 20, "quarter_3": 20, "quarter_4": 20},
            },
        },
    },
    "volleyball": {
        "id": "test",
        "status": "FINISHED",
        "score": {"home": 3, "away": 1},
    },
    "tennis": {
        "id": "test",
        "status": "FINISHED",
        "score": {"home": 2, "away": 0},
    },
    "rugby": {
        "id": "test",
        "status": "FINISHED",
        "score": {
            "home": 24,
            "away": 17,
            "details": {
                "home": {"first_half": 10, "second_half": 14},
                "away": {"first_half": 7, "second_half": 10},
            },
        },
    },
    "handball": {
        "id": "test",
        "status": "FINISHED",
        "score": {
            "home": 28,
            "away": 25,
            "details": {
                "home": {"first_half": 15, "second_half": 13},
                "away": {"first_half": 12, "second_half": 13},
            },
        },
    },
    "hockey": {
        "id": "test",
        "status": "FINISHED",
        "score": {
            "home": 3,
            "away": 2,
            "details": {
                "home": {"first_period": 1, "second_period": 1, "third_period": 0, "overtime": 1},
                "away": {"first_period": 0, "second_period": 2, "third_period": 0},
            },
        },
    },
    "baseball": {
        "id": "test",
        "status": "FINISHED",
        "score": {
            "home": 5,
            "away": 3,
            "details": {
                "home": {"hits": 9, "errors": 1, "at_bats": 34},
                "away": {"hits": 7, "errors": 2, "at_bats": 31},
            },
        },
    },
})


def sample_match(sport: str) -> Mapping[str, Any]:
    """Sample match for a sport; football when the sport has none."""
    key = (sport or "").strip().lower()
    return SAMPLE_MATCHES.get(key, SAMPLE_MATCHES[FALLBACK_SPORT])
