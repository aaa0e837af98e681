# corrector/context.py
"""
Context Builder - derive named variables from final match data.

The context is the only environment an expression can see. It is built
fresh per evaluation, frozen on construction and never shared.

Baseline variables (every sport):
    score.home, score.away, score.details, totalGoals,
    homeWins, awayWins, draw, bothTeamsScore, status

Sport-specific variables come from the registry (see corrector/sports.py).
Unknown sports get the baseline only.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, Optional

from corrector.registry import DEFAULT_REGISTRY, SportContextRegistry
# Importing corrector.sports registers the built-in sports
from corrector.sports import as_number, details_of, final_scores
from events.errors import UnresolvedIdentifier


def _freeze(value: Any) -> Any:
    """Recursively convert dicts/lists to read-only equivalents."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


@dataclass(frozen=True)
class EvaluationContext(Mapping):
    """
    Immutable variable mapping for one (event, sport, match) evaluation.

    Names may be dotted. `resolve` looks up the full name first, then
    walks nested mappings from the longest known prefix, so
    `score.details.halftime.home` reaches into the details structure.
    """

    sport: str
    variables: Mapping[str, Any]

    def __post_init__(self) -> None:
        object.__setattr__(self, "variables", _freeze(self.variables))

    def __getitem__(self, name: str) -> Any:
        return self.variables[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.variables)

    def __len__(self) -> int:
        return len(self.variables)

    def resolve(self, name: str) -> Any:
        """
        Raises:
            UnresolvedIdentifier: If no variable matches the name
        """
        if name in self.variables:
            return self.variables[name]

        parts = name.split(".")
        for cut in range(len(parts) - 1, 0, -1):
            prefix = ".".join(parts[:cut])
            if prefix not in self.variables:
                continue
            value = self.variables[prefix]
            for part in parts[cut:]:
                if not isinstance(value, Mapping) or part not in value:
                    raise UnresolvedIdentifier(name)
                value = value[part]
            return value

        raise UnresolvedIdentifier(name)


def baseline_variables(match: Mapping[str, Any]) -> Dict[str, Any]:
    """Variables shared by every sport."""
    home, away = final_scores(match)
    return {
        "score.home": home,
        "score.away": away,
        "score.details": details_of(match),
        "totalGoals": home + away,
        "homeWins": home > away,
        "awayWins": away > home,
        "draw": home == away,
        "bothTeamsScore": home > 0 and away > 0,
        "status": match.get("status"),
    }


class ContextBuilder:
    """Builds EvaluationContext objects; pure function of its inputs."""

    def __init__(self, registry: Optional[SportContextRegistry] = None):
        self._registry = registry or DEFAULT_REGISTRY.copy()

    @property
    def supported_sports(self) -> frozenset[str]:
        return self._registry.sports()

    def build(self, match: Mapping[str, Any], sport: str) -> EvaluationContext:
        key = sport.strip().lower()
        variables = baseline_variables(match)

        extension = self._registry.get(key)
        if extension is not None:
            variables.update(extension(match))

        return EvaluationContext(sport=key, variables=variables)


def has_details(match: Mapping[str, Any]) -> bool:
    """True when the match carries a non-empty score breakdown."""
    return len(details_of(match)) > 0


__all__ = [
    "ContextBuilder",
    "EvaluationContext",
    "as_number",
    "baseline_variables",
    "has_details",
]
