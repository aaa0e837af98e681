# corrector/expression/parser.py
"""
Recursive-descent parser for the restricted expression grammar.

Precedence, lowest to highest:
    ||
    &&
    ==  !=  ===  !==
    <  >  <=  >=
    +  -
    *  /
    unary !  -  +
    number | true | false | identifier | ( expression )

Binary operators are left-associative. The tree is made of frozen nodes
and carries no behaviour; evaluation lives in evaluator.py.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from corrector.expression.lexer import Token, TokenKind, tokenize
from events.errors import ExpressionSyntaxError


MAX_NESTING_DEPTH = 64

BOOLEAN_KEYWORDS = {"true": True, "false": False}

EQUALITY_OPERATORS = ("==", "!=", "===", "!==")
RELATIONAL_OPERATORS = ("<", ">", "<=", ">=")
ADDITIVE_OPERATORS = ("+", "-")
MULTIPLICATIVE_OPERATORS = ("*", "/")
UNARY_OPERATORS = ("!", "-", "+")


# =============================================================================
# Tree nodes
# =============================================================================


@dataclass(frozen=True)
class NumberLiteral:
    value: Union[int, float]


@dataclass(frozen=True)
class BooleanLiteral:
    value: bool


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class UnaryOp:
    operator: str
    operand: "Node"


@dataclass(frozen=True)
class BinaryOp:
    operator: str
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class LogicalOp:
    """Short-circuit && / ||."""
    operator: str
    left: "Node"
    right: "Node"


Node = Union[NumberLiteral, BooleanLiteral, Identifier, UnaryOp, BinaryOp, LogicalOp]


# =============================================================================
# Parser
# =============================================================================


class Parser:
    """Single-use parser over a token list."""

    def __init__(self, tokens: list[Token]):
        self._tokens = tokens
        self._index = 0
        self._depth = 0

    @property
    def _current(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        if token.kind != TokenKind.END:
            self._index += 1
        return token

    def _match_operator(self, operators: tuple[str, ...]) -> str | None:
        token = self._current
        if token.kind == TokenKind.OPERATOR and token.text in operators:
            self._advance()
            return token.text
        return None

    def _enter(self) -> None:
        self._depth += 1
        if self._depth > MAX_NESTING_DEPTH:
            raise ExpressionSyntaxError("expression is nested too deeply", self._current.position)

    def _leave(self) -> None:
        self._depth -= 1

    def parse(self) -> Node:
        if self._current.kind == TokenKind.END:
            raise ExpressionSyntaxError("empty expression", 0)
        node = self._parse_or()
        if self._current.kind != TokenKind.END:
            token = self._current
            raise ExpressionSyntaxError(f"unexpected '{token.text}'", token.position)
        return node

    def _parse_or(self) -> Node:
        node = self._parse_and()
        while self._match_operator(("||",)):
            node = LogicalOp("||", node, self._parse_and())
        return node

    def _parse_and(self) -> Node:
        node = self._parse_binary_level(EQUALITY_OPERATORS)
        while self._match_operator(("&&",)):
            node = LogicalOp("&&", node, self._parse_binary_level(EQUALITY_OPERATORS))
        return node

    def _parse_binary_level(self, operators: tuple[str, ...]) -> Node:
        next_level = _NEXT_LEVEL[operators]
        node = self._parse_binary_level(next_level) if next_level else self._parse_unary()
        while True:
            operator = self._match_operator(operators)
            if operator is None:
                return node
            right = self._parse_binary_level(next_level) if next_level else self._parse_unary()
            node = BinaryOp(operator, node, right)

    def _parse_unary(self) -> Node:
        operator = self._match_operator(UNARY_OPERATORS)
        if operator is None:
            return self._parse_primary()
        self._enter()
        try:
            return UnaryOp(operator, self._parse_unary())
        finally:
            self._leave()

    def _parse_primary(self) -> Node:
        token = self._current

        if token.kind == TokenKind.NUMBER:
            self._advance()
            return NumberLiteral(token.value)

        if token.kind == TokenKind.IDENTIFIER:
            self._advance()
            if token.text in BOOLEAN_KEYWORDS:
                return BooleanLiteral(BOOLEAN_KEYWORDS[token.text])
            return Identifier(token.text)

        if token.kind == TokenKind.LPAREN:
            self._advance()
            self._enter()
            try:
                node = self._parse_or()
            finally:
                self._leave()
            if self._current.kind != TokenKind.RPAREN:
                raise ExpressionSyntaxError("missing ')'", self._current.position)
            self._advance()
            return node

        if token.kind == TokenKind.END:
            raise ExpressionSyntaxError("unexpected end of expression", token.position)
        raise ExpressionSyntaxError(f"unexpected '{token.text}'", token.position)


# Each binary level delegates to the next tighter one; multiplicative
# delegates to unary (empty tuple).
_NEXT_LEVEL: dict[tuple[str, ...], tuple[str, ...]] = {
    EQUALITY_OPERATORS: RELATIONAL_OPERATORS,
    RELATIONAL_OPERATORS: ADDITIVE_OPERATORS,
    ADDITIVE_OPERATORS: MULTIPLICATIVE_OPERATORS,
    MULTIPLICATIVE_OPERATORS: (),
}


def parse(text: str) -> Node:
    """
    Tokenize and parse an expression.

    Raises:
        ExpressionSyntaxError: If the text is not in the grammar
    """
    return Parser(tokenize(text)).parse()
