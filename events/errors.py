# events/errors.py
"""
Error taxonomy shared by the event and correction layers.

Every error carries a human-readable message and a stable machine code,
so callers can branch on `code` without parsing text.

Expected business conditions (bad parameter, unsafe expression, match not
finished) are raised here but converted into structured results by the
correction engine. Only boundary errors reach the caller as exceptions.
"""
from __future__ import annotations

from typing import Any, Optional, Sequence


class EventError(Exception):
    """Base exception for event and correction errors."""

    def __init__(self, message: str, code: str):
        self.message = message
        self.code = code
        super().__init__(message)


# =============================================================================
# Catalog
# =============================================================================


class ConfigError(EventError):
    """Raised when a sport has no configured event set."""

    def __init__(self, sport: str):
        super().__init__(
            message=f"Sport {sport} is not configured",
            code="SPORT_NOT_CONFIGURED",
        )
        self.sport = sport


class CatalogLoadError(EventError):
    """Raised when a sport definition file cannot be read or validated."""

    def __init__(self, sport: str, detail: str):
        super().__init__(
            message=f"Failed to load events for {sport}: {detail}",
            code="CATALOG_LOAD_FAILED",
        )
        self.sport = sport
        self.detail = detail


class NotFoundError(EventError):
    """Raised when an event id is unknown for a sport."""

    def __init__(self, sport: str, event_id: str):
        super().__init__(
            message=f"Event {event_id} not found for {sport}",
            code="EVENT_NOT_FOUND",
        )
        self.sport = sport
        self.event_id = event_id


# =============================================================================
# Parameters / templates
# =============================================================================


class ParameterError(EventError):
    """Base class for a single parameter violation."""

    def __init__(self, message: str, code: str, field_name: str):
        super().__init__(message=message, code=code)
        self.field_name = field_name


class MissingParameter(ParameterError):
    """A required parameter has no value and no default."""

    def __init__(self, field_name: str):
        super().__init__(
            message=f"Missing required parameter: {field_name}",
            code="MISSING_PARAMETER",
            field_name=field_name,
        )


class InvalidParameter(ParameterError):
    """A parameter value violates its field constraint."""

    def __init__(
        self,
        field_name: str,
        constraint: str,
        value: Any = None,
        valid_options: Optional[Sequence[Any]] = None,
    ):
        super().__init__(
            message=f"{field_name} {constraint}",
            code="INVALID_PARAMETER",
            field_name=field_name,
        )
        self.constraint = constraint
        self.value = value
        self.valid_options = tuple(valid_options) if valid_options is not None else None


class ParameterValidationError(EventError):
    """
    Aggregate of every parameter violation found for one template.

    Validation never stops at the first bad field; `errors` holds all of
    them in field declaration order.
    """

    def __init__(self, event_id: str, errors: Sequence[ParameterError]):
        self.event_id = event_id
        self.errors = tuple(errors)
        details = ", ".join(e.message for e in self.errors)
        super().__init__(
            message=f"Invalid parameters: {details}",
            code="INVALID_PARAMETERS",
        )


class TemplateError(EventError):
    """A materialized label or expression still contains placeholders."""

    def __init__(self, event_id: str, placeholders: Sequence[str]):
        names = ", ".join(placeholders)
        super().__init__(
            message=f"Unresolved placeholders in {event_id}: {names}",
            code="UNRESOLVED_PLACEHOLDER",
        )
        self.event_id = event_id
        self.placeholders = tuple(placeholders)


# =============================================================================
# Expressions
# =============================================================================


class UnsafeExpression(EventError):
    """Expression failed the character allowlist or keyword denylist."""

    def __init__(self, expression: Any, reason: str):
        super().__init__(
            message=f"Expression not allowed: {reason}",
            code="UNSAFE_EXPRESSION",
        )
        self.expression = expression
        self.reason = reason


class EvaluationError(EventError):
    """Runtime failure while evaluating an expression."""

    def __init__(self, message: str, code: str = "EVALUATION_ERROR"):
        super().__init__(message=message, code=code)


class ExpressionSyntaxError(EvaluationError):
    """Expression text is not part of the restricted grammar."""

    def __init__(self, detail: str, position: Optional[int] = None):
        where = f" at position {position}" if position is not None else ""
        super().__init__(
            message=f"Syntax error{where}: {detail}",
            code="SYNTAX_ERROR",
        )
        self.detail = detail
        self.position = position


class UnresolvedIdentifier(EvaluationError):
    """Expression references a name the context does not define."""

    def __init__(self, name: str):
        super().__init__(
            message=f"{name} is not defined",
            code="UNRESOLVED_IDENTIFIER",
        )
        self.name = name


# =============================================================================
# Correction
# =============================================================================


class MatchNotReady(EventError):
    """Match is not finished or has no final score."""

    def __init__(self, reason: str):
        super().__init__(message=reason, code="MATCH_NOT_READY")


class InvalidRequestError(EventError):
    """Malformed request at the service boundary."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_REQUEST")
