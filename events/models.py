# events/models.py
"""
Event definition models.

Definitions are loaded from per-sport JSON files and are immutable for the
lifetime of a catalog snapshot. JSON keys are camelCase (labelTemplate,
expressionTemplate, paramFields); Python attributes are snake_case.

Two kinds of event:
- Static: fixed `expression` and `label`.
- Parametric: `labelTemplate` + `expressionTemplate` + `paramFields`,
  materialized per request by the TemplateResolver.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator, model_validator


DEFAULT_LOCALE = "fr"
SUPPORTED_LOCALES = ("fr", "en")


# =============================================================================
# Localized text
# =============================================================================


class LocalizedText(BaseModel):
    """Bilingual text. Missing translations fall back to French."""
    fr: str = ""
    en: str = ""

    class Config:
        frozen = True

    def get(self, locale: str = DEFAULT_LOCALE) -> str:
        value = getattr(self, locale, None) if locale in SUPPORTED_LOCALES else None
        return value or self.fr

    def render(self, locale: str = DEFAULT_LOCALE) -> Dict[str, str]:
        return {"fr": self.fr, "en": self.en, "current": self.get(locale)}


# =============================================================================
# Parameter fields
# =============================================================================


class ParamType(str, Enum):
    """Supported parameter field types."""
    NUMBER = "number"
    ENUM = "enum"


class ParamOption(BaseModel):
    """One allowed value of an enum field."""
    value: Union[str, int, float]
    label: Optional[LocalizedText] = None

    class Config:
        frozen = True


class ParamField(BaseModel):
    """
    Schema of one template parameter.

    Number fields may bound their value with inclusive `min`/`max`.
    Enum fields list their accepted `options`.
    """
    name: str = Field(..., min_length=1)
    type: ParamType
    label: Optional[LocalizedText] = None
    default: Optional[Any] = None
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    options: Tuple[ParamOption, ...] = ()

    class Config:
        frozen = True

    @model_validator(mode="after")
    def _check_constraints(self) -> "ParamField":
        if self.type == ParamType.ENUM and not self.options:
            raise ValueError(f"enum field '{self.name}' must declare options")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"field '{self.name}' has min > max")
        return self

    @property
    def has_default(self) -> bool:
        return self.default is not None

    @property
    def option_values(self) -> Tuple[Any, ...]:
        return tuple(option.value for option in self.options)


# =============================================================================
# Event definitions
# =============================================================================


class EventDefinition(BaseModel):
    """A single static or parametric event of one sport."""
    id: str = Field(..., min_length=1)
    position: int = 0
    priority: Optional[Union[int, str]] = None
    category: Optional[str] = None
    label: Optional[LocalizedText] = None
    description: LocalizedText = Field(default_factory=LocalizedText)
    expression: Optional[str] = None
    label_template: Optional[LocalizedText] = Field(default=None, alias="labelTemplate")
    expression_template: Optional[str] = Field(default=None, alias="expressionTemplate")
    param_fields: Tuple[ParamField, ...] = Field(default=(), alias="paramFields")

    class Config:
        frozen = True
        populate_by_name = True

    @model_validator(mode="after")
    def _check_shape(self) -> "EventDefinition":
        if self.expression_template is not None:
            if not self.param_fields:
                raise ValueError(f"parametric event '{self.id}' has no paramFields")
            if self.label_template is None:
                raise ValueError(f"parametric event '{self.id}' has no labelTemplate")
            names = [f.name for f in self.param_fields]
            duplicates = sorted({n for n in names if names.count(n) > 1})
            if duplicates:
                raise ValueError(
                    f"parametric event '{self.id}' repeats fields: {', '.join(duplicates)}"
                )
        else:
            if not self.expression:
                raise ValueError(f"static event '{self.id}' has no expression")
            if self.label is None:
                raise ValueError(f"static event '{self.id}' has no label")
        return self

    @property
    def parametric(self) -> bool:
        return self.expression_template is not None

    def get_field(self, name: str) -> Optional[ParamField]:
        for param_field in self.param_fields:
            if param_field.name == name:
                return param_field
        return None


class SportEvents(BaseModel):
    """
    Contents of one sport's events.json.

    Events are sorted by position on load and ids must be unique across
    both lists.
    """
    categories: Dict[str, LocalizedText] = Field(default_factory=dict)
    static_events: Tuple[EventDefinition, ...] = Field(default=(), alias="staticEvents")
    parametric_events: Tuple[EventDefinition, ...] = Field(default=(), alias="parametricEvents")

    class Config:
        frozen = True
        populate_by_name = True

    @field_validator("static_events", "parametric_events")
    @classmethod
    def _sort_by_position(cls, events: Tuple[EventDefinition, ...]) -> Tuple[EventDefinition, ...]:
        return tuple(sorted(events, key=lambda e: e.position))

    @model_validator(mode="after")
    def _check_lists(self) -> "SportEvents":
        for event in self.static_events:
            if event.parametric:
                raise ValueError(f"'{event.id}' is parametric but listed in staticEvents")
        for event in self.parametric_events:
            if not event.parametric:
                raise ValueError(f"'{event.id}' is static but listed in parametricEvents")

        seen: set[str] = set()
        for event in self.all_events():
            if event.id in seen:
                raise ValueError(f"duplicate event id '{event.id}'")
            seen.add(event.id)
        return self

    def all_events(self) -> List[EventDefinition]:
        return [*self.static_events, *self.parametric_events]


# =============================================================================
# Materialized event
# =============================================================================


@dataclass(frozen=True)
class MaterializedEvent:
    """
    Concrete, placeholder-free event ready for evaluation.

    Static events materialize to themselves with empty params.
    `labels` holds the rendering for every supported locale and `label`
    the one requested.
    """
    id: str
    label: str
    expression: str
    parametric: bool
    labels: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, Any] = field(default_factory=dict)
    warnings: tuple[str, ...] = ()
    category: Optional[str] = None
    position: int = 0
    priority: Optional[Union[int, str]] = None
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": dict(self.labels, current=self.label),
            "expression": self.expression,
            "parametric": self.parametric,
            "params": dict(self.params),
            "warnings": list(self.warnings),
            "category": self.category,
            "position": self.position,
            "priority": self.priority,
            "description": self.description,
        }
