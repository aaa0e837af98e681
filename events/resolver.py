# events/resolver.py
"""
Template Resolver - materializes parametric events.

Turns a parametric EventDefinition plus caller parameters into a concrete
label and expression:

1. Validate every declared field (all errors collected, none skipped).
2. Fill missing values from defaults, recording a warning for each.
3. Label: semantic placeholders first ({{direction}}, {{team}} mapped to
   locale phrases), then every remaining {{name}} with its literal value.
4. Expression: every {{name}} with its literal value, then {{operator}}
   from the direction -> operator table.
5. Refuse any result that still contains a {{...}} token.

Only declared fields are ever substituted; undeclared caller keys are
dropped with a warning.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from events.errors import (
    InvalidParameter,
    MissingParameter,
    ParameterError,
    ParameterValidationError,
    TemplateError,
)
from events.models import (
    DEFAULT_LOCALE,
    SUPPORTED_LOCALES,
    EventDefinition,
    MaterializedEvent,
    ParamField,
    ParamType,
)


# =============================================================================
# Constants
# =============================================================================

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")

DIRECTION_PARAM = "direction"
TEAM_PARAM = "team"
OPERATOR_PLACEHOLDER = "operator"

DIRECTION_OPERATORS = {
    "over": ">",
    "under": "<",
    "equal": "===",
    "not_equal": "!==",
    "greater": ">",
    "less": "<",
    "greater_equal": ">=",
    "less_equal": "<=",
}

DIRECTION_LABELS = {
    "fr": {
        "over": "Plus",
        "under": "Moins",
        "equal": "Exactement",
        "not_equal": "Différent de",
        "greater": "Plus",
        "less": "Moins",
        "greater_equal": "Au moins",
        "less_equal": "Au plus",
    },
    "en": {
        "over": "Over",
        "under": "Under",
        "equal": "Exactly",
        "not_equal": "Not",
        "greater": "More than",
        "less": "Less than",
        "greater_equal": "At least",
        "less_equal": "At most",
    },
}

TEAM_LABELS = {
    "fr": {"home": "Domicile", "away": "Extérieur"},
    "en": {"home": "Home", "away": "Away"},
}

SEMANTIC_PARAMS = (DIRECTION_PARAM, TEAM_PARAM)


# =============================================================================
# Helpers
# =============================================================================


def find_placeholders(text: str) -> list[str]:
    """Names of every {{...}} token left in text, in order of appearance."""
    return PLACEHOLDER_PATTERN.findall(text)


def format_value(value: Any) -> str:
    """Render a parameter as it should appear in a label or expression."""
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        if math.isfinite(value):
            # Plain decimal; expressions have no exponent syntax.
            return format(Decimal(repr(value)), "f")
    return str(value)


def _option_kind(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    return type(value).__name__


def _is_option(value: Any, options: tuple) -> bool:
    """Membership where True never matches 1 and "1" never matches 1."""
    kind = _option_kind(value)
    return any(_option_kind(option) == kind and option == value for option in options)


def _parse_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _substitute(text: str, values: Mapping[str, Any]) -> str:
    """Replace {{name}} for every name present in values; leave others."""

    def replace(match: re.Match) -> str:
        name = match.group(1)
        if name in values:
            return format_value(values[name])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(replace, text)


# =============================================================================
# Validation result
# =============================================================================


@dataclass(frozen=True)
class ParameterCheck:
    """Outcome of validating caller parameters against a template."""
    resolved: Mapping[str, Any] = field(default_factory=dict)
    errors: tuple[ParameterError, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return len(self.errors) == 0


# =============================================================================
# Resolver
# =============================================================================


class TemplateResolver:
    """
    Stateless materializer for parametric events.

    Phrase tables can be overridden per instance; the defaults cover
    French and English.
    """

    def __init__(
        self,
        direction_labels: Optional[Mapping[str, Mapping[str, str]]] = None,
        team_labels: Optional[Mapping[str, Mapping[str, str]]] = None,
        operators: Optional[Mapping[str, str]] = None,
    ):
        self._direction_labels = direction_labels or DIRECTION_LABELS
        self._team_labels = team_labels or TEAM_LABELS
        self._operators = operators or DIRECTION_OPERATORS

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def _check_field(self, param_field: ParamField, value: Any) -> tuple[Any, Optional[ParameterError]]:
        if param_field.type == ParamType.NUMBER:
            number = _parse_number(value)
            if number is None:
                return None, InvalidParameter(param_field.name, "must be a number", value=value)
            if param_field.min is not None and number < param_field.min:
                return None, InvalidParameter(
                    param_field.name, f"must be >= {format_value(param_field.min)}", value=value
                )
            if param_field.max is not None and number > param_field.max:
                return None, InvalidParameter(
                    param_field.name, f"must be <= {format_value(param_field.max)}", value=value
                )
            return (int(number) if number.is_integer() else number), None

        valid_options = param_field.option_values
        if not _is_option(value, valid_options):
            listed = ", ".join(format_value(o) for o in valid_options)
            return None, InvalidParameter(
                param_field.name,
                f"must be one of: {listed}",
                value=value,
                valid_options=valid_options,
            )
        return value, None

    def validate_parameters(self, template: EventDefinition, params: Mapping[str, Any]) -> ParameterCheck:
        """
        Validate params against every field of the template.

        Missing values fall back to defaults (with a warning). All field
        errors are collected before returning.
        """
        resolved: Dict[str, Any] = {}
        errors: list[ParameterError] = []
        warnings: list[str] = []

        for param_field in template.param_fields:
            value = params.get(param_field.name)

            if value is None:
                if param_field.has_default:
                    default, error = self._check_field(param_field, param_field.default)
                    if error is not None:
                        errors.append(error)
                        continue
                    resolved[param_field.name] = default
                    warnings.append(
                        f"Parameter {param_field.name} missing, default used: "
                        f"{format_value(param_field.default)}"
                    )
                else:
                    errors.append(MissingParameter(param_field.name))
                continue

            checked, error = self._check_field(param_field, value)
            if error is not None:
                errors.append(error)
            else:
                resolved[param_field.name] = checked

        declared = {f.name for f in template.param_fields}
        for name in params:
            if name not in declared:
                warnings.append(f"Parameter {name} is not declared by {template.id}, ignored")

        return ParameterCheck(
            resolved=resolved,
            errors=tuple(errors),
            warnings=tuple(warnings),
        )

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def build_label(self, label_template: str, params: Mapping[str, Any], locale: str = DEFAULT_LOCALE) -> str:
        """Render a label; semantic placeholders are resolved first."""
        label = label_template

        direction = params.get(DIRECTION_PARAM)
        if direction is not None:
            phrases = self._direction_labels.get(locale, {})
            text = phrases.get(direction, format_value(direction))
            label = _substitute(label, {DIRECTION_PARAM: text})

        team = params.get(TEAM_PARAM)
        if team is not None:
            phrases = self._team_labels.get(locale, {})
            text = phrases.get(team, format_value(team))
            label = _substitute(label, {TEAM_PARAM: text})

        generic = {k: v for k, v in params.items() if k not in SEMANTIC_PARAMS}
        return _substitute(label, generic)

    def build_expression(self, expression_template: str, params: Mapping[str, Any]) -> str:
        """Render an expression; {{operator}} comes from the direction."""
        expression = _substitute(expression_template, params)

        direction = params.get(DIRECTION_PARAM)
        if direction is not None:
            operator = self._operators.get(direction)
            if operator is not None:
                expression = _substitute(expression, {OPERATOR_PLACEHOLDER: operator})

        return expression

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    def materialize(
        self,
        template: EventDefinition,
        params: Optional[Mapping[str, Any]] = None,
        locale: str = DEFAULT_LOCALE,
    ) -> MaterializedEvent:
        """
        Materialize a parametric event.

        Raises:
            ParameterValidationError: One or more fields missing or invalid
            TemplateError: A placeholder survived substitution
        """
        check = self.validate_parameters(template, params or {})
        if not check.valid:
            raise ParameterValidationError(template.id, check.errors)

        labels = {
            loc: self.build_label(template.label_template.get(loc), check.resolved, loc)
            for loc in SUPPORTED_LOCALES
        }
        expression = self.build_expression(template.expression_template, check.resolved)

        leftover = find_placeholders(expression)
        for text in labels.values():
            leftover.extend(find_placeholders(text))
        if leftover:
            raise TemplateError(template.id, sorted(set(leftover)))

        return MaterializedEvent(
            id=template.id,
            label=labels.get(locale, labels[DEFAULT_LOCALE]),
            labels=labels,
            expression=expression,
            parametric=True,
            params=check.resolved,
            warnings=check.warnings,
            category=template.category,
            position=template.position,
            priority=template.priority,
            description=template.description.get(locale),
        )
