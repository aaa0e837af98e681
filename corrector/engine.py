# corrector/engine.py
"""
Correction Engine - decide whether a prediction's event came true.

Per prediction, stopping at the first unmet precondition:

1. Input check: event id present, match present, status finished,
   both scores defined.
2. Event resolution: an expression carried by the prediction is used as
   is; otherwise the event is looked up in the catalog (static events use
   their expression, parametric ones are materialized with the
   prediction's params).
3. Context build from the match and sport.
4. Evaluation of the expression against the context.
5. Classification: result value, confidence and a readable reason.

Expected failures at any step become a CorrectionResult with
can_correct=False and a reason; they are never raised to the caller.
Batches run every item independently.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Sequence

from corrector.context import ContextBuilder, has_details
from corrector.expression.evaluator import EvaluationResult, ExpressionEvaluator, truthy
from corrector.samples import sample_match
from corrector.sports import final_scores
from events.catalog import EventCatalog, normalize_sport
from events.errors import EventError, InvalidRequestError, MatchNotReady
from events.manager import EventManager
from events.models import DEFAULT_LOCALE, SUPPORTED_LOCALES
from events.resolver import TemplateResolver, format_value


_logger = logging.getLogger(__name__)

FINISHED_STATUSES = frozenset({"FINISHED", "FT"})

INTERNAL_ERROR = "INTERNAL_ERROR"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"


REASONS = {
    "fr": {
        "missing_event": "Événement manquant ou sans ID",
        "missing_match": "Données de match manquantes",
        "not_finished": "Match non terminé (statut: {status})",
        "missing_score": "Score du match manquant",
        "build_error": "Erreur construction: {error}",
        "evaluation_error": "Erreur évaluation: {error}",
        "internal_error": "Erreur interne: {error}",
        "passed": "Prédiction réussie",
        "failed": "Prédiction échouée",
        "final_score": "Score final",
        "no_predictions": "Aucune prédiction fournie",
    },
    "en": {
        "missing_event": "Event missing or without ID",
        "missing_match": "Match data missing",
        "not_finished": "Match not finished (status: {status})",
        "missing_score": "Match score missing",
        "build_error": "Build error: {error}",
        "evaluation_error": "Evaluation error: {error}",
        "internal_error": "Internal error: {error}",
        "passed": "Prediction won",
        "failed": "Prediction lost",
        "final_score": "Final score",
        "no_predictions": "No predictions supplied",
    },
}


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class CorrectionResult:
    """Outcome of correcting one prediction."""
    success: bool
    can_correct: bool
    sport: str
    result: Any = None
    confidence: Confidence = Confidence.UNKNOWN
    reason: Optional[str] = None
    expression: Optional[str] = None
    error_code: Optional[str] = None
    prediction_id: Any = None
    event_id: Optional[str] = None
    match_id: Any = None
    evaluation: Optional[EvaluationResult] = None
    warnings: tuple[str, ...] = ()
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "prediction": {"id": self.prediction_id, "event_id": self.event_id},
            "match": {"id": self.match_id, "sport": self.sport},
            "correction": {
                "can_correct": self.can_correct,
                "result": self.result,
                "confidence": self.confidence.value,
                "reason": self.reason,
                "expression": self.expression,
                "error_code": self.error_code,
            },
            "evaluation": self.evaluation.to_dict() if self.evaluation else None,
            "warnings": list(self.warnings),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class BatchItem:
    index: int
    prediction_id: Any
    result: CorrectionResult

    @property
    def corrected(self) -> bool:
        return self.result.success and self.result.can_correct

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "prediction_id": self.prediction_id, **self.result.to_dict()}


@dataclass(frozen=True)
class BatchSummary:
    sport: str
    match_id: Any = None
    match_status: Any = "unknown"
    success_rate: float = 0.0
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "sport": self.sport,
            "match_id": self.match_id,
            "match_status": self.match_status,
            "success_rate": self.success_rate,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class BatchResult:
    """Per-item results plus counts; success + failed always equals total."""
    total: int
    success: int
    failed: int
    results: tuple[BatchItem, ...]
    summary: BatchSummary

    def __post_init__(self) -> None:
        if self.success + self.failed != self.total or len(self.results) != self.total:
            raise ValueError(
                f"Inconsistent batch counts: {self.success} + {self.failed} != {self.total}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "success": self.success,
            "failed": self.failed,
            "results": [item.to_dict() for item in self.results],
            "summary": self.summary.to_dict(),
        }


# =============================================================================
# Helpers
# =============================================================================


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _label_text(label: Any, locale: str) -> Optional[str]:
    """Label carried by a prediction: plain string or {current|fr|en}."""
    if isinstance(label, str):
        return label
    if isinstance(label, Mapping):
        for key in ("current", locale, DEFAULT_LOCALE):
            if isinstance(label.get(key), str):
                return label[key]
    return None


@dataclass(frozen=True)
class _ResolvedEvent:
    event_id: str
    expression: str
    label: Optional[str]
    warnings: tuple[str, ...] = ()


# =============================================================================
# Engine
# =============================================================================


class CorrectionEngine:
    """
    Corrects predictions against final match data.

    Holds a read-only catalog reference; every call is independent and
    nothing is mutated during a correction.
    """

    def __init__(
        self,
        catalog: EventCatalog,
        resolver: Optional[TemplateResolver] = None,
        context_builder: Optional[ContextBuilder] = None,
        evaluator: Optional[ExpressionEvaluator] = None,
        finished_statuses: Iterable[str] = FINISHED_STATUSES,
        locale: str = DEFAULT_LOCALE,
        events: Optional[EventManager] = None,
    ):
        self._locale = locale if locale in SUPPORTED_LOCALES else DEFAULT_LOCALE
        self._events = events or EventManager(catalog, resolver, self._locale)
        self._context_builder = context_builder or ContextBuilder()
        self._evaluator = evaluator or ExpressionEvaluator()
        self._finished_statuses = frozenset(s.strip().upper() for s in finished_statuses)

    @property
    def events(self) -> EventManager:
        return self._events

    @property
    def finished_statuses(self) -> frozenset[str]:
        return self._finished_statuses

    @property
    def supported_sports(self) -> frozenset[str]:
        """Sports with a context extension beyond the baseline."""
        return self._context_builder.supported_sports

    def _reasons(self, locale: Optional[str]) -> Dict[str, str]:
        return REASONS.get(locale or self._locale, REASONS[self._locale])

    def is_finished(self, status: Any) -> bool:
        return isinstance(status, str) and status.strip().upper() in self._finished_statuses

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def _check_ready(self, prediction: Any, match: Any, reasons: Dict[str, str]) -> None:
        """
        Raises:
            InvalidRequestError: No event id or no match data
            MatchNotReady: Match not finished or score missing
        """
        event = _as_mapping(_as_mapping(prediction).get("event"))
        if not event.get("id"):
            raise InvalidRequestError(reasons["missing_event"])

        if not isinstance(match, Mapping):
            raise InvalidRequestError(reasons["missing_match"])

        status = match.get("status")
        if not self.is_finished(status):
            raise MatchNotReady(reasons["not_finished"].format(status=status))

        score = _as_mapping(match.get("score"))
        if score.get("home") is None or score.get("away") is None:
            raise MatchNotReady(reasons["missing_score"])

    def _resolve_event(self, event: Mapping[str, Any], sport: str, locale: str) -> _ResolvedEvent:
        """
        Raises:
            ConfigError, NotFoundError, ParameterValidationError, TemplateError
        """
        event_id = event["id"]
        expression = event.get("expression")
        if isinstance(expression, str) and expression.strip():
            return _ResolvedEvent(event_id, expression, _label_text(event.get("label"), locale))

        built = self._events.build_event(sport, event_id, _as_mapping(event.get("params")), locale)
        return _ResolvedEvent(event_id, built.event.expression, built.event.label, built.warnings)

    def classify_confidence(self, match: Mapping[str, Any]) -> Confidence:
        """high: finished with details; medium: finished; low otherwise."""
        if not self.is_finished(match.get("status")):
            return Confidence.LOW
        return Confidence.HIGH if has_details(match) else Confidence.MEDIUM

    def generate_reason(
        self,
        label: Optional[str],
        value: Any,
        match: Mapping[str, Any],
        locale: Optional[str] = None,
    ) -> str:
        reasons = self._reasons(locale)
        home, away = final_scores(match)
        reason = reasons["passed"] if truthy(value) else reasons["failed"]
        if label:
            reason += f' - "{label}"'
        reason += f" ({reasons['final_score']}: {format_value(home)}-{format_value(away)})"
        return reason

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def evaluate_expression(self, expression: Any, match: Mapping[str, Any], sport: str) -> EvaluationResult:
        """Gate, build the context and evaluate; never raises for bad input."""
        context = self._context_builder.build(match, sport)
        return self._evaluator.evaluate_safely(expression, context)

    def test_expression(self, expression: Any, sport: str = "football") -> EvaluationResult:
        """Evaluate against the built-in sample match of a sport."""
        return self.evaluate_expression(expression, sample_match(sport), sport)

    def correct_prediction(
        self,
        prediction: Mapping[str, Any],
        match: Mapping[str, Any],
        sport: str = "football",
        locale: Optional[str] = None,
    ) -> CorrectionResult:
        """Correct one prediction. Expected failures come back as results."""
        loc = locale if locale in SUPPORTED_LOCALES else self._locale
        reasons = self._reasons(loc)
        sport_key = normalize_sport(sport)
        event = _as_mapping(_as_mapping(prediction).get("event"))
        base = {
            "sport": sport_key,
            "prediction_id": _as_mapping(prediction).get("id"),
            "event_id": event.get("id"),
            "match_id": _as_mapping(match).get("id"),
        }

        try:
            self._check_ready(prediction, match, reasons)
        except (InvalidRequestError, MatchNotReady) as e:
            _logger.debug("Prediction %s not correctable: %s", base["prediction_id"], e.message)
            return CorrectionResult(
                success=False, can_correct=False, reason=e.message, error_code=e.code, **base
            )

        try:
            resolved = self._resolve_event(event, sport_key, loc)
        except EventError as e:
            _logger.info("Event %s/%s could not be built: %s", sport_key, base["event_id"], e.message)
            return CorrectionResult(
                success=False,
                can_correct=False,
                reason=reasons["build_error"].format(error=e.message),
                error_code=e.code,
                **base,
            )

        evaluation = self.evaluate_expression(resolved.expression, match, sport_key)
        if not evaluation.success:
            _logger.info(
                "Evaluation failed for %s/%s: %s", sport_key, resolved.event_id, evaluation.error
            )
            return CorrectionResult(
                success=False,
                can_correct=False,
                reason=reasons["evaluation_error"].format(error=evaluation.error),
                expression=resolved.expression,
                error_code=evaluation.error_code,
                evaluation=evaluation,
                warnings=resolved.warnings,
                **base,
            )

        return CorrectionResult(
            success=True,
            can_correct=True,
            result=evaluation.value,
            confidence=self.classify_confidence(match),
            reason=self.generate_reason(resolved.label, evaluation.value, match, loc),
            expression=resolved.expression,
            evaluation=evaluation,
            warnings=resolved.warnings,
            **base,
        )

    def correct_multiple(
        self,
        predictions: Sequence[Mapping[str, Any]],
        match: Mapping[str, Any],
        sport: str = "football",
        locale: Optional[str] = None,
    ) -> BatchResult:
        """Correct every prediction independently; one failure never stops the rest."""
        loc = locale if locale in SUPPORTED_LOCALES else self._locale
        sport_key = normalize_sport(sport)
        match_map = _as_mapping(match)
        match_id = match_map.get("id")
        match_status = match_map.get("status") or "unknown"

        if not predictions:
            return BatchResult(
                total=0,
                success=0,
                failed=0,
                results=(),
                summary=BatchSummary(
                    sport=sport_key,
                    match_id=match_id,
                    match_status=match_status,
                    error=self._reasons(loc)["no_predictions"],
                ),
            )

        items: list[BatchItem] = []
        for index, prediction in enumerate(predictions):
            try:
                result = self.correct_prediction(prediction, match, sport_key, loc)
            except Exception as e:
                _logger.exception("Unexpected error correcting batch item %d", index)
                result = CorrectionResult(
                    success=False,
                    can_correct=False,
                    sport=sport_key,
                    reason=self._reasons(loc)["internal_error"].format(error=e),
                    error_code=INTERNAL_ERROR,
                    prediction_id=_as_mapping(prediction).get("id"),
                    match_id=match_id,
                )
            items.append(BatchItem(index, _as_mapping(prediction).get("id"), result))

        success = sum(1 for item in items if item.corrected)
        total = len(items)
        _logger.info("Batch for match %s: %d/%d corrected", match_id, success, total)
        return BatchResult(
            total=total,
            success=success,
            failed=total - success,
            results=tuple(items),
            summary=BatchSummary(
                sport=sport_key,
                match_id=match_id,
                match_status=match_status,
                success_rate=round(success / total * 100, 1),
            ),
        )
