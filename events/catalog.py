# events/catalog.py
"""
Event Catalog - per-sport store of event definitions.

Each sport is held as an immutable CatalogSnapshot. The catalog keeps one
read-only mapping of sport -> snapshot; loads and reloads build a new
mapping and swap the reference, so a reader always sees either the old
complete set or the new complete set for a sport.

Readers never take the lock. Writers serialize on it so two concurrent
reloads cannot lose each other's update.

Layout on disk:
    <sports_dir>/<sport>/events.json
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from events.errors import CatalogLoadError, ConfigError
from events.models import EventDefinition, LocalizedText, SportEvents


_logger = logging.getLogger(__name__)

EVENTS_FILENAME = "events.json"

# Sample catalog shipped with the package
BUNDLED_SPORTS_DIR = Path(__file__).parent / "sports"


def normalize_sport(sport: str) -> str:
    """Sport identifiers are case-insensitive and stored lowercase."""
    return sport.strip().lower()


@dataclass(frozen=True)
class CatalogSnapshot:
    """Immutable, complete event set of one sport."""

    sport: str
    events: SportEvents
    source: Optional[str] = None
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        index = {event.id: event for event in self.events.all_events()}
        object.__setattr__(self, "_index", MappingProxyType(index))

    def lookup(self, event_id: str) -> Optional[EventDefinition]:
        return self._index.get(event_id)

    @property
    def categories(self) -> Mapping[str, LocalizedText]:
        return MappingProxyType(self.events.categories)

    @property
    def static_events(self) -> tuple[EventDefinition, ...]:
        return self.events.static_events

    @property
    def parametric_events(self) -> tuple[EventDefinition, ...]:
        return self.events.parametric_events

    @property
    def event_count(self) -> int:
        return len(self._index)


def read_sport_file(sport: str, path: Path) -> SportEvents:
    """
    Parse and validate one sport's definition file.

    Raises:
        CatalogLoadError: If the file is missing, unreadable or invalid
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogLoadError(sport, f"cannot read {path}: {e}") from e

    try:
        return SportEvents.model_validate_json(raw)
    except ValidationError as e:
        raise CatalogLoadError(sport, f"invalid definitions in {path}: {e}") from e


class EventCatalog:
    """
    Read-mostly catalog of event definitions keyed by sport.

    Usage:
        catalog = EventCatalog(sports_dir)
        catalog.load_all()
        definition = catalog.lookup("football", "total_goals")
    """

    def __init__(self, sports_dir: Optional[Path] = None):
        """
        Initialize an empty catalog.

        Args:
            sports_dir: Directory holding one sub-directory per sport.
                        None means in-memory only (see register()).
        """
        self._sports_dir = Path(sports_dir) if sports_dir is not None else None
        self._snapshots: Mapping[str, CatalogSnapshot] = MappingProxyType({})
        self._write_lock = threading.Lock()

    @classmethod
    def from_directory(cls, sports_dir: Path) -> "EventCatalog":
        """Create a catalog and load every sport found in sports_dir."""
        catalog = cls(sports_dir)
        catalog.load_all()
        return catalog

    @property
    def sports_dir(self) -> Optional[Path]:
        return self._sports_dir

    # -------------------------------------------------------------------------
    # Writers
    # -------------------------------------------------------------------------

    def _swap(self, sport: str, snapshot: CatalogSnapshot) -> None:
        with self._write_lock:
            updated = dict(self._snapshots)
            updated[sport] = snapshot
            self._snapshots = MappingProxyType(updated)

    def register(self, sport: str, events: SportEvents, source: Optional[str] = None) -> CatalogSnapshot:
        """Install an already-parsed event set for a sport."""
        key = normalize_sport(sport)
        snapshot = CatalogSnapshot(sport=key, events=events, source=source)
        self._swap(key, snapshot)
        _logger.info(
            "Loaded %s events: static=%d parametric=%d categories=%d",
            key,
            len(events.static_events),
            len(events.parametric_events),
            len(events.categories),
        )
        return snapshot

    def register_dict(self, sport: str, data: Mapping[str, Any]) -> CatalogSnapshot:
        """
        Validate and install a raw definition mapping.

        Raises:
            CatalogLoadError: If the mapping is not a valid definition set
        """
        key = normalize_sport(sport)
        try:
            events = SportEvents.model_validate(data)
        except ValidationError as e:
            raise CatalogLoadError(key, str(e)) from e
        return self.register(key, events, source="memory")

    def _sport_file(self, sport: str) -> Optional[Path]:
        if self._sports_dir is None:
            return None
        return self._sports_dir / sport / EVENTS_FILENAME

    def load_sport(self, sport: str) -> bool:
        """
        Load one sport from disk.

        Returns False (and keeps any previous snapshot) when the file is
        missing or invalid.
        """
        key = normalize_sport(sport)
        path = self._sport_file(key)
        if path is None:
            _logger.warning("Cannot load %s: catalog has no sports directory", key)
            return False
        if not path.is_file():
            _logger.warning("Events file not found for %s: %s", key, path)
            return False

        try:
            events = read_sport_file(key, path)
        except CatalogLoadError as e:
            _logger.error(e.message)
            return False

        self.register(key, events, source=str(path))
        return True

    def load_all(self) -> list[str]:
        """
        Load every sport directory under sports_dir.

        Returns:
            Sorted list of sports loaded successfully
        """
        if self._sports_dir is None or not self._sports_dir.is_dir():
            _logger.warning("Sports directory not available: %s", self._sports_dir)
            return []

        candidates = sorted(p.name for p in self._sports_dir.iterdir() if p.is_dir())
        _logger.debug("Found sport directories: %s", candidates)

        loaded = [sport for sport in candidates if self.load_sport(sport)]
        _logger.info("Catalog ready with %d sports: %s", len(loaded), loaded)
        return loaded

    def reload(self, sport: str) -> bool:
        """
        Re-read a sport from disk and swap it in atomically.

        On failure the previous snapshot stays visible.
        """
        key = normalize_sport(sport)
        _logger.info("Reloading events for %s", key)
        return self.load_sport(key)

    # -------------------------------------------------------------------------
    # Readers
    # -------------------------------------------------------------------------

    def is_sport_configured(self, sport: str) -> bool:
        return normalize_sport(sport) in self._snapshots

    def list_configured_sports(self) -> frozenset[str]:
        return frozenset(self._snapshots)

    def get_snapshot(self, sport: str) -> CatalogSnapshot:
        """
        Get the current snapshot for a sport.

        Raises:
            ConfigError: If the sport is not configured
        """
        snapshot = self._snapshots.get(normalize_sport(sport))
        if snapshot is None:
            raise ConfigError(sport)
        return snapshot

    def lookup(self, sport: str, event_id: str) -> Optional[EventDefinition]:
        """Find an event definition, or None when sport or id is unknown."""
        snapshot = self._snapshots.get(normalize_sport(sport))
        if snapshot is None:
            return None
        return snapshot.lookup(event_id)

    def debug_info(self) -> dict:
        snapshots = self._snapshots
        return {
            "configured_sports": sorted(snapshots),
            "sports_dir": str(self._sports_dir) if self._sports_dir else None,
            "cache_size": len(snapshots),
            "sports": {
                sport: {
                    "events": snap.event_count,
                    "source": snap.source,
                    "loaded_at": snap.loaded_at.isoformat(),
                }
                for sport, snap in snapshots.items()
            },
        }
