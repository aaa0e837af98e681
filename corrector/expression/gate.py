# corrector/expression/gate.py
"""
Expression safety gate.

Two checks, both required before an expression is parsed:
1. Lexical allowlist: ASCII letters, digits, whitespace, '.', '_',
   comparison/arithmetic operators, parentheses, '|' and '&'.
2. Keyword denylist: names of executable or privileged constructs.

The parser only understands a closed grammar anyway; the gate rejects
hostile input before it gets that far.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from events.errors import UnsafeExpression


_logger = logging.getLogger(__name__)

DEFAULT_MAX_EXPRESSION_LENGTH = 500

ALLOWED_PATTERN = re.compile(r"[a-zA-Z0-9\s.<>=!+\-*/()|&_]+", re.ASCII)

FORBIDDEN_KEYWORDS = (
    "eval",
    "exec",
    "function",
    "constructor",
    "prototype",
    "import",
    "require",
    "process",
    "global",
    "window",
    "document",
    "__",
)


def _disallowed_characters(expression: str) -> list[str]:
    return sorted({ch for ch in expression if not ALLOWED_PATTERN.fullmatch(ch)})


def check_expression(expression: Any, max_length: Optional[int] = DEFAULT_MAX_EXPRESSION_LENGTH) -> str:
    """
    Run both gates on an expression.

    Returns:
        The expression, unchanged

    Raises:
        UnsafeExpression: If any check fails
    """
    if not isinstance(expression, str) or not expression.strip():
        raise UnsafeExpression(expression, "expression must be a non-empty string")

    if max_length is not None and len(expression) > max_length:
        raise UnsafeExpression(expression, f"expression exceeds {max_length} characters")

    if not ALLOWED_PATTERN.fullmatch(expression):
        bad = "".join(_disallowed_characters(expression))
        _logger.info("Expression rejected by character allowlist: %r", bad)
        raise UnsafeExpression(expression, f"disallowed characters {bad!r}")

    lowered = expression.lower()
    for keyword in FORBIDDEN_KEYWORDS:
        if keyword in lowered:
            _logger.warning("Expression rejected for forbidden keyword %r", keyword)
            raise UnsafeExpression(expression, f"forbidden keyword '{keyword}'")

    return expression


def is_safe_expression(expression: Any, max_length: Optional[int] = DEFAULT_MAX_EXPRESSION_LENGTH) -> bool:
    try:
        check_expression(expression, max_length)
    except UnsafeExpression:
        return False
    return True
