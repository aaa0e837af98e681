# events/__init__.py
"""
Event definitions, catalog and template materialization.

Module Structure:
- models.py: EventDefinition / ParamField schemas (pydantic, frozen)
- catalog.py: EventCatalog with atomic per-sport snapshots
- resolver.py: TemplateResolver (parameters -> concrete label/expression)
- manager.py: EventManager facade (list, validate, build)
- errors.py: shared error taxonomy
"""

from events.catalog import BUNDLED_SPORTS_DIR, CatalogSnapshot, EventCatalog
from events.errors import (
    CatalogLoadError,
    ConfigError,
    EvaluationError,
    EventError,
    ExpressionSyntaxError,
    InvalidParameter,
    InvalidRequestError,
    MatchNotReady,
    MissingParameter,
    NotFoundError,
    ParameterValidationError,
    TemplateError,
    UnresolvedIdentifier,
    UnsafeExpression,
)
from events.manager import BuildResult, EventInfo, EventManager, EventValidation
from events.models import (
    EventDefinition,
    LocalizedText,
    MaterializedEvent,
    ParamField,
    ParamOption,
    ParamType,
    SportEvents,
)
from events.resolver import TemplateResolver

__all__ = [
    # Catalog
    "BUNDLED_SPORTS_DIR",
    "CatalogSnapshot",
    "EventCatalog",
    # Models
    "EventDefinition",
    "LocalizedText",
    "MaterializedEvent",
    "ParamField",
    "ParamOption",
    "ParamType",
    "SportEvents",
    # Building
    "BuildResult",
    "EventInfo",
    "EventManager",
    "EventValidation",
    "TemplateResolver",
    # Errors
    "CatalogLoadError",
    "ConfigError",
    "EvaluationError",
    "EventError",
    "ExpressionSyntaxError",
    "InvalidParameter",
    "InvalidRequestError",
    "MatchNotReady",
    "MissingParameter",
    "NotFoundError",
    "ParameterValidationError",
    "TemplateError",
    "UnresolvedIdentifier",
    "UnsafeExpression",
]
