# app/service.py
"""
Event Service - in-process entry point for callers.

Wires the catalog, resolver, context builder, evaluator and correction
engine from an AppConfig and exposes the public operations:

    build_event, validate_event, correct_prediction, correct_multiple,
    test_expression, get_events, get_events_by_category

Request shape is checked here. Malformed requests raise
InvalidRequestError; business outcomes (unfinished match, bad parameter,
unsafe expression) come back inside the returned results.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Dict, Optional

from app.config import AppConfig, load_config
from corrector.context import ContextBuilder
from corrector.engine import BatchResult, CorrectionEngine, CorrectionResult
from corrector.expression.evaluator import EvaluationResult, ExpressionEvaluator
from events.catalog import EventCatalog
from events.errors import InvalidRequestError
from events.manager import BuildResult, EventManager, EventValidation
from events.resolver import TemplateResolver


_logger = logging.getLogger(__name__)


def _require_text(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequestError(f"{name} is required")
    return value


def _require_mapping(value: Any, name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise InvalidRequestError(f"{name} must be an object")
    return value


class EventService:
    """Facade over the event manager and the correction engine."""

    def __init__(
        self,
        catalog: EventCatalog,
        config: Optional[AppConfig] = None,
    ):
        self._config = config or AppConfig()
        self._catalog = catalog
        self._manager = EventManager(catalog, TemplateResolver(), self._config.default_locale)
        self._engine = CorrectionEngine(
            catalog,
            events=self._manager,
            context_builder=ContextBuilder(),
            evaluator=ExpressionEvaluator(max_length=self._config.max_expression_length),
            finished_statuses=self._config.finished_statuses,
            locale=self._config.default_locale,
        )

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def catalog(self) -> EventCatalog:
        return self._catalog

    @property
    def manager(self) -> EventManager:
        return self._manager

    @property
    def engine(self) -> CorrectionEngine:
        return self._engine

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def get_events(self, sport: str, locale: Optional[str] = None) -> Dict[str, Any]:
        return self._manager.get_events(_require_text(sport, "sport"), locale)

    def get_events_by_category(self, sport: str, locale: Optional[str] = None) -> Dict[str, Any]:
        return self._manager.get_events_by_category(_require_text(sport, "sport"), locale)

    def build_event(
        self,
        sport: str,
        event_id: str,
        params: Optional[Mapping[str, Any]] = None,
        locale: Optional[str] = None,
    ) -> BuildResult:
        """
        Raises:
            InvalidRequestError: Malformed request
            ConfigError, NotFoundError: Unknown sport or event
            ParameterValidationError, TemplateError: Parameters rejected
        """
        _require_text(sport, "sport")
        _require_text(event_id, "eventId")
        if params is not None:
            _require_mapping(params, "params")
        return self._manager.build_event(sport, event_id, params, locale)

    def validate_event(self, sport: str, event_id: str) -> EventValidation:
        return self._manager.validate_event(
            _require_text(sport, "sport"), _require_text(event_id, "eventId")
        )

    # -------------------------------------------------------------------------
    # Correction
    # -------------------------------------------------------------------------

    def correct_prediction(
        self,
        prediction: Mapping[str, Any],
        match: Mapping[str, Any],
        sport: str = "football",
        locale: Optional[str] = None,
    ) -> CorrectionResult:
        """
        Raises:
            InvalidRequestError: No event id in the prediction, or no match
        """
        prediction = _require_mapping(prediction, "prediction")
        event = prediction.get("event")
        if not isinstance(event, Mapping) or not event.get("id"):
            raise InvalidRequestError("prediction.event.id is required")
        _require_mapping(match, "matchData")
        return self._engine.correct_prediction(prediction, match, _require_text(sport, "sport"), locale)

    def correct_multiple(
        self,
        predictions: Sequence[Mapping[str, Any]],
        match: Mapping[str, Any],
        sport: str = "football",
        locale: Optional[str] = None,
    ) -> BatchResult:
        """
        Raises:
            InvalidRequestError: predictions is not a list, or no match
        """
        if isinstance(predictions, (str, bytes)) or not isinstance(predictions, Sequence):
            raise InvalidRequestError("predictions must be a list")
        _require_mapping(match, "matchData")
        return self._engine.correct_multiple(predictions, match, _require_text(sport, "sport"), locale)

    def test_expression(self, expression: str, sport: str = "football") -> EvaluationResult:
        """Evaluate an expression against the sport's sample match."""
        if expression is None:
            raise InvalidRequestError("expression is required")
        return self._engine.test_expression(expression, sport or "football")

    # -------------------------------------------------------------------------
    # Catalog administration
    # -------------------------------------------------------------------------

    def configured_sports(self) -> list[str]:
        return sorted(self._catalog.list_configured_sports())

    def reload_sport(self, sport: str) -> bool:
        return self._catalog.reload(_require_text(sport, "sport"))

    def debug_info(self) -> Dict[str, Any]:
        return {
            "service": self._config.service_name,
            "version": self._config.service_version,
            "environment": self._config.environment,
            "catalog": self._catalog.debug_info(),
            "context_sports": sorted(self._engine.supported_sports),
        }


def create_service(config: Optional[AppConfig] = None) -> EventService:
    """Build a service with its catalog loaded from config.catalog_dir."""
    config = config or load_config(fail_fast=False)
    catalog = EventCatalog.from_directory(config.catalog_dir)
    _logger.info(
        "Event service ready: %d sport(s) from %s",
        len(catalog.list_configured_sports()),
        config.catalog_dir,
    )
    return EventService(catalog, config)
