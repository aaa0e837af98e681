"""
Prediction correction.

Module Structure:
- registry.py: sport -> context extension registry
- sports.py: built-in per-sport context extensions
- context.py: ContextBuilder / EvaluationContext
- expression/: safety gate, parser and tree evaluator
- samples.py: sample matches for expression diagnostics
- engine.py: CorrectionEngine (single and batch corrections)
"""

from corrector.context import ContextBuilder, EvaluationContext, baseline_variables
from corrector.engine import (
    FINISHED_STATUSES,
    BatchItem,
    BatchResult,
    BatchSummary,
    Confidence,
    CorrectionEngine,
    CorrectionResult,
)
from corrector.expression import EvaluationResult, ExpressionEvaluator
from corrector.registry import DEFAULT_REGISTRY, SportContextRegistry, sport_context
from corrector.samples import SAMPLE_MATCHES, sample_match

__all__ = [
    # Context
    "ContextBuilder",
    "EvaluationContext",
    "baseline_variables",
    "DEFAULT_REGISTRY",
    "SportContextRegistry",
    "sport_context",
    # Expressions
    "EvaluationResult",
    "ExpressionEvaluator",
    # Engine
    "FINISHED_STATUSES",
    "BatchItem",
    "BatchResult",
    "BatchSummary",
    "Confidence",
    "CorrectionEngine",
    "CorrectionResult",
    # Samples
    "SAMPLE_MATCHES",
    "sample_match",
]
