# events/manager.py
"""
Event Manager - lookup, listing and building of events.

Read-only facade over an EventCatalog:
- get_events / get_events_by_category: render definitions for display
- build_event: static events as-is, parametric events via TemplateResolver
- validate_event: existence check without building
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from events.catalog import EventCatalog, normalize_sport
from events.errors import ConfigError, NotFoundError
from events.models import (
    DEFAULT_LOCALE,
    SUPPORTED_LOCALES,
    EventDefinition,
    LocalizedText,
    MaterializedEvent,
    ParamField,
)
from events.resolver import TemplateResolver


_logger = logging.getLogger(__name__)


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class BuildResult:
    """A materialized event plus the non-fatal warnings raised on the way."""
    event: MaterializedEvent
    warnings: tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.event.to_dict(), "warnings": list(self.warnings)}


@dataclass(frozen=True)
class EventInfo:
    """Summary of an existing event."""
    id: str
    parametric: bool
    category: Optional[str] = None
    priority: Optional[Union[int, str]] = None


@dataclass(frozen=True)
class EventValidation:
    """Result of validate_event. `error` is set when valid is False."""
    valid: bool
    exists: bool
    event_info: Optional[EventInfo] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"valid": self.valid, "exists": self.exists}
        if self.event_info is not None:
            data["event_info"] = {
                "id": self.event_info.id,
                "parametric": self.event_info.parametric,
                "category": self.event_info.category,
                "priority": self.event_info.priority,
            }
        if self.error is not None:
            data["error"] = self.error
        return data


# =============================================================================
# Rendering
# =============================================================================


def _render_text(text: Optional[LocalizedText], locale: str) -> Optional[Dict[str, str]]:
    return text.render(locale) if text is not None else None


def _render_field(param_field: ParamField, locale: str) -> Dict[str, Any]:
    rendered = param_field.model_dump(exclude_none=True, exclude={"label", "options"})
    rendered["type"] = param_field.type.value
    rendered["label"] = _render_text(param_field.label, locale)
    if param_field.options:
        rendered["options"] = [
            {"value": option.value, "label": _render_text(option.label, locale)}
            for option in param_field.options
        ]
    return rendered


def render_static_event(event: EventDefinition, locale: str = DEFAULT_LOCALE) -> Dict[str, Any]:
    return {
        "id": event.id,
        "position": event.position,
        "priority": event.priority,
        "label": _render_text(event.label, locale),
        "expression": event.expression,
        "category": event.category,
        "description": event.description.render(locale),
        "parametric": False,
    }


def render_parametric_template(event: EventDefinition, locale: str = DEFAULT_LOCALE) -> Dict[str, Any]:
    return {
        "id": event.id,
        "position": event.position,
        "priority": event.priority,
        "label_template": _render_text(event.label_template, locale),
        "expression_template": event.expression_template,
        "category": event.category,
        "description": event.description.render(locale),
        "param_fields": [_render_field(f, locale) for f in event.param_fields],
        "parametric": True,
    }


def materialize_static(event: EventDefinition, locale: str = DEFAULT_LOCALE) -> MaterializedEvent:
    labels = {loc: event.label.get(loc) for loc in SUPPORTED_LOCALES}
    return MaterializedEvent(
        id=event.id,
        label=event.label.get(locale),
        labels=labels,
        expression=event.expression,
        parametric=False,
        category=event.category,
        position=event.position,
        priority=event.priority,
        description=event.description.get(locale),
    )


# =============================================================================
# Manager
# =============================================================================


class EventManager:
    """Facade for listing, validating and building events of a catalog."""

    def __init__(
        self,
        catalog: EventCatalog,
        resolver: Optional[TemplateResolver] = None,
        default_locale: str = DEFAULT_LOCALE,
    ):
        self._catalog = catalog
        self._resolver = resolver or TemplateResolver()
        self._default_locale = default_locale

    @property
    def catalog(self) -> EventCatalog:
        return self._catalog

    @property
    def resolver(self) -> TemplateResolver:
        return self._resolver

    def _locale(self, locale: Optional[str]) -> str:
        return locale if locale in SUPPORTED_LOCALES else self._default_locale

    def get_events(self, sport: str, locale: Optional[str] = None) -> Dict[str, Any]:
        """All events of a sport, rendered for display."""
        loc = self._locale(locale)
        if not self._catalog.is_sport_configured(sport):
            return {
                "configured": False,
                "message": f"Sport {sport} is not configured",
                "data": {"static": [], "parametric": []},
                "meta": {"total_events": 0, "total_static": 0, "total_parametric": 0, "locale": loc},
            }

        snapshot = self._catalog.get_snapshot(sport)
        static = [render_static_event(e, loc) for e in snapshot.static_events]
        parametric = [render_parametric_template(e, loc) for e in snapshot.parametric_events]
        return {
            "configured": True,
            "message": None,
            "data": {"static": static, "parametric": parametric},
            "meta": {
                "total_events": len(static) + len(parametric),
                "total_static": len(static),
                "total_parametric": len(parametric),
                "locale": loc,
            },
        }

    def get_events_by_category(self, sport: str, locale: Optional[str] = None) -> Dict[str, Any]:
        """Events grouped under the sport's declared categories."""
        loc = self._locale(locale)
        if not self._catalog.is_sport_configured(sport):
            return {
                "configured": False,
                "message": f"Sport {sport} is not configured",
                "data": {},
                "categories": {},
            }

        snapshot = self._catalog.get_snapshot(sport)
        rendered = [render_static_event(e, loc) for e in snapshot.static_events]
        rendered += [render_parametric_template(e, loc) for e in snapshot.parametric_events]

        grouped: Dict[str, Any] = {}
        for key, name in snapshot.categories.items():
            grouped[key] = {
                "name": name.render(loc),
                "events": sorted(
                    (e for e in rendered if e["category"] == key),
                    key=lambda e: e["position"],
                ),
            }

        return {
            "configured": True,
            "message": None,
            "data": grouped,
            "categories": {key: name.render(loc) for key, name in snapshot.categories.items()},
        }

    def get_definition(self, sport: str, event_id: str) -> EventDefinition:
        """
        Raises:
            ConfigError: Sport not configured
            NotFoundError: Unknown event id
        """
        snapshot = self._catalog.get_snapshot(sport)
        definition = snapshot.lookup(event_id)
        if definition is None:
            raise NotFoundError(normalize_sport(sport), event_id)
        return definition

    def build_event(
        self,
        sport: str,
        event_id: str,
        params: Optional[Mapping[str, Any]] = None,
        locale: Optional[str] = None,
    ) -> BuildResult:
        """
        Build a concrete event.

        Raises:
            ConfigError, NotFoundError, ParameterValidationError, TemplateError
        """
        loc = self._locale(locale)
        definition = self.get_definition(sport, event_id)

        if not definition.parametric:
            return BuildResult(event=materialize_static(definition, loc))

        event = self._resolver.materialize(definition, params or {}, loc)
        _logger.debug("Built %s/%s -> %s", sport, event_id, event.expression)
        return BuildResult(event=event, warnings=event.warnings)

    def validate_event(self, sport: str, event_id: str) -> EventValidation:
        """Check that an event exists without building it."""
        try:
            definition = self.get_definition(sport, event_id)
        except (ConfigError, NotFoundError) as e:
            return EventValidation(valid=False, exists=False, error=e.message, error_code=e.code)

        return EventValidation(
            valid=True,
            exists=True,
            event_info=EventInfo(
                id=definition.id,
                parametric=definition.parametric,
                category=definition.category,
                priority=definition.priority,
            ),
        )
