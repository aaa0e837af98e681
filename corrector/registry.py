# corrector/registry.py
"""
Sport context registry.

Maps a sport identifier to the function that derives its extra context
variables. Adding a sport is a registration, not an edit of the builder.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

ContextExtension = Callable[[Mapping[str, Any]], Dict[str, Any]]


class SportContextRegistry:
    """Sport id (lowercase) -> context extension function."""

    def __init__(self, extensions: Optional[Mapping[str, ContextExtension]] = None):
        self._extensions: Dict[str, ContextExtension] = {}
        for sport, extension in (extensions or {}).items():
            self.register(sport, extension)

    def register(self, sport: str, extension: ContextExtension) -> None:
        key = sport.strip().lower()
        if key in self._extensions:
            raise ValueError(f"Context extension already registered for {key}")
        self._extensions[key] = extension

    def get(self, sport: str) -> Optional[ContextExtension]:
        return self._extensions.get(sport.strip().lower())

    def sports(self) -> frozenset[str]:
        return frozenset(self._extensions)

    def copy(self) -> "SportContextRegistry":
        return SportContextRegistry(self._extensions)


DEFAULT_REGISTRY = SportContextRegistry()


def sport_context(sport: str) -> Callable[[ContextExtension], ContextExtension]:
    """Decorator registering an extension in the default registry."""

    def decorator(func: ContextExtension) -> ContextExtension:
        DEFAULT_REGISTRY.register(sport, func)
        return func

    return decorator
