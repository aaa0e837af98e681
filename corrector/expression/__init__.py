"""
Restricted expression engine.

gate -> lexer -> parser -> evaluator. Nothing here executes code; the
evaluator walks a parsed tree over a closed grammar.
"""

from corrector.expression.evaluator import (
    EvaluationResult,
    ExpressionEvaluator,
    compile_expression,
    evaluate_node,
)
from corrector.expression.gate import (
    DEFAULT_MAX_EXPRESSION_LENGTH,
    FORBIDDEN_KEYWORDS,
    check_expression,
    is_safe_expression,
)
from corrector.expression.parser import parse

__all__ = [
    "DEFAULT_MAX_EXPRESSION_LENGTH",
    "FORBIDDEN_KEYWORDS",
    "EvaluationResult",
    "ExpressionEvaluator",
    "check_expression",
    "compile_expression",
    "evaluate_node",
    "is_safe_expression",
    "parse",
]
