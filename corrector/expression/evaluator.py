# corrector/expression/evaluator.py
"""
Expression Evaluator - gate, parse and evaluate against a context.

Evaluation walks the parsed tree; nothing is compiled or executed.
It performs no I/O, binds no names and is deterministic: the same
(expression, context) always produces the same value.

Value semantics:
- Booleans take part in arithmetic and ordering as 0/1.
- '==' / '!=' compare booleans and numbers numerically;
  '===' / '!==' additionally require both sides to be the same kind.
- '&&' / '||' short-circuit and yield the deciding operand.
- Division by zero is an EvaluationError (code DIVISION_BY_ZERO).
- Arithmetic outside the float range is an EvaluationError (code
  NUMERIC_OVERFLOW). Comparisons are exact, even for huge integers.
- The final value must be a boolean or a number.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional, Union

from corrector.context import EvaluationContext
from corrector.expression.gate import DEFAULT_MAX_EXPRESSION_LENGTH, check_expression
from corrector.expression.parser import (
    BinaryOp,
    BooleanLiteral,
    Identifier,
    LogicalOp,
    Node,
    NumberLiteral,
    UnaryOp,
    parse,
)
from events.errors import EvaluationError, EventError


_logger = logging.getLogger(__name__)

Value = Union[bool, int, float]


# =============================================================================
# Result
# =============================================================================


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of evaluating one expression. Never raises."""
    success: bool
    expression: Any
    value: Optional[Value] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "value": self.value,
            "error": self.error,
            "error_code": self.error_code,
            "expression": self.expression,
        }


# =============================================================================
# Operand helpers
# =============================================================================


def _kind(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if value is None:
        return "null"
    return "object"


def _is_scalar_number(value: Any) -> bool:
    return _kind(value) in ("boolean", "number")


def _numeric(value: Any, operator: str) -> Union[int, float]:
    if not _is_scalar_number(value):
        raise EvaluationError(f"Operator '{operator}' needs numbers, got {_kind(value)}")
    return int(value) if isinstance(value, bool) else value


def truthy(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, float) and value != value:
        return False
    if isinstance(value, (bool, int, float, str)):
        return bool(value)
    return True


def _loose_equal(left: Any, right: Any) -> bool:
    if _is_scalar_number(left) and _is_scalar_number(right):
        return _numeric(left, "==") == _numeric(right, "==")
    if _kind(left) != _kind(right):
        return False
    return left == right


def _strict_equal(left: Any, right: Any) -> bool:
    if _kind(left) != _kind(right):
        return False
    return left == right


def _compare(operator: str, left: Any, right: Any) -> bool:
    if _is_scalar_number(left) and _is_scalar_number(right):
        a, b = _numeric(left, operator), _numeric(right, operator)
    elif isinstance(left, str) and isinstance(right, str):
        a, b = left, right
    else:
        raise EvaluationError(
            f"Cannot compare {_kind(left)} with {_kind(right)} using '{operator}'"
        )
    if operator == "<":
        return a < b
    if operator == ">":
        return a > b
    if operator == "<=":
        return a <= b
    return a >= b


def _arithmetic(operator: str, left: Any, right: Any) -> Union[int, float]:
    a = _numeric(left, operator)
    b = _numeric(right, operator)
    if operator == "/" and b == 0:
        raise EvaluationError("Division by zero", code="DIVISION_BY_ZERO")
    try:
        if operator == "+":
            return a + b
        if operator == "-":
            return a - b
        if operator == "*":
            return a * b
        return a / b
    except OverflowError as e:
        raise EvaluationError(
            f"Result of '{operator}' is out of range", code="NUMERIC_OVERFLOW"
        ) from e


# =============================================================================
# Tree walk
# =============================================================================


def evaluate_node(node: Node, context: EvaluationContext) -> Any:
    """Evaluate a parsed tree against a context."""
    if isinstance(node, NumberLiteral):
        return node.value

    if isinstance(node, BooleanLiteral):
        return node.value

    if isinstance(node, Identifier):
        value = context.resolve(node.name)
        if isinstance(value, Mapping):
            raise EvaluationError(f"{node.name} is a structure, not a value")
        return value

    if isinstance(node, UnaryOp):
        operand = evaluate_node(node.operand, context)
        if node.operator == "!":
            return not truthy(operand)
        number = _numeric(operand, node.operator)
        return -number if node.operator == "-" else +number

    if isinstance(node, LogicalOp):
        left = evaluate_node(node.left, context)
        if node.operator == "&&":
            return evaluate_node(node.right, context) if truthy(left) else left
        return left if truthy(left) else evaluate_node(node.right, context)

    if isinstance(node, BinaryOp):
        left = evaluate_node(node.left, context)
        right = evaluate_node(node.right, context)
        operator = node.operator
        if operator == "==":
            return _loose_equal(left, right)
        if operator == "!=":
            return not _loose_equal(left, right)
        if operator == "===":
            return _strict_equal(left, right)
        if operator == "!==":
            return not _strict_equal(left, right)
        if operator in ("<", ">", "<=", ">="):
            return _compare(operator, left, right)
        return _arithmetic(operator, left, right)

    raise EvaluationError(f"Unsupported node {type(node).__name__}")


@lru_cache(maxsize=512)
def compile_expression(expression: str) -> Node:
    """Parse an already-gated expression. Cached by text."""
    return parse(expression)


# =============================================================================
# Evaluator
# =============================================================================


class ExpressionEvaluator:
    """
    Safe evaluator for the restricted grammar.

    Usage:
        evaluator = ExpressionEvaluator()
        value = evaluator.evaluate("totalGoals > 2.5", context)
    """

    def __init__(self, max_length: Optional[int] = DEFAULT_MAX_EXPRESSION_LENGTH):
        self._max_length = max_length

    def compile(self, expression: Any) -> Node:
        """
        Gate and parse an expression.

        Raises:
            UnsafeExpression: Failed the allowlist or denylist
            ExpressionSyntaxError: Not in the grammar
        """
        checked = check_expression(expression, self._max_length)
        return compile_expression(checked)

    def evaluate(self, expression: Any, context: EvaluationContext) -> Value:
        """
        Evaluate an expression to a boolean or number.

        Raises:
            UnsafeExpression, ExpressionSyntaxError,
            UnresolvedIdentifier, EvaluationError
        """
        tree = self.compile(expression)
        value = evaluate_node(tree, context)
        if not _is_scalar_number(value):
            raise EvaluationError(
                f"Expression must produce a boolean or number, got {_kind(value)}"
            )
        return value

    def evaluate_safely(self, expression: Any, context: EvaluationContext) -> EvaluationResult:
        """Like evaluate(), but failures come back as an EvaluationResult."""
        try:
            value = self.evaluate(expression, context)
        except EventError as e:
            _logger.debug("Evaluation of %r failed: %s", expression, e.message)
            return EvaluationResult(
                success=False,
                expression=expression,
                error=e.message,
                error_code=e.code,
            )
        return EvaluationResult(success=True, expression=expression, value=value)
