# corrector/expression/lexer.py
"""Tokenizer for the restricted expression grammar."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Union

from events.errors import ExpressionSyntaxError


class TokenKind(str, Enum):
    NUMBER = "number"
    IDENTIFIER = "identifier"
    OPERATOR = "operator"
    LPAREN = "lparen"
    RPAREN = "rparen"
    END = "end"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    position: int
    value: Union[int, float, None] = None


# Longest first so '===' wins over '==' and '>=' over '>'
OPERATORS = ("===", "!==", "==", "!=", ">=", "<=", "&&", "||", ">", "<", "!", "+", "-", "*", "/")

_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*")


def _number_value(text: str) -> Union[int, float]:
    return float(text) if "." in text else int(text)


def tokenize(text: str) -> list[Token]:
    """
    Split an expression into tokens, ending with an END token.

    Raises:
        ExpressionSyntaxError: On a character sequence outside the grammar
    """
    tokens: list[Token] = []
    pos = 0
    length = len(text)

    while pos < length:
        ch = text[pos]

        if ch.isspace():
            pos += 1
            continue

        if ch == "(":
            tokens.append(Token(TokenKind.LPAREN, ch, pos))
            pos += 1
            continue

        if ch == ")":
            tokens.append(Token(TokenKind.RPAREN, ch, pos))
            pos += 1
            continue

        match = _NUMBER.match(text, pos)
        if match:
            end = match.end()
            if end < length and (text[end].isalpha() or text[end] == "_"):
                raise ExpressionSyntaxError(f"invalid number '{text[pos:end + 1]}'", pos)
            literal = match.group(0)
            tokens.append(Token(TokenKind.NUMBER, literal, pos, _number_value(literal)))
            pos = end
            continue

        match = _IDENTIFIER.match(text, pos)
        if match:
            tokens.append(Token(TokenKind.IDENTIFIER, match.group(0), pos))
            pos = match.end()
            continue

        for operator in OPERATORS:
            if text.startswith(operator, pos):
                tokens.append(Token(TokenKind.OPERATOR, operator, pos))
                pos += len(operator)
                break
        else:
            if ch == "=":
                raise ExpressionSyntaxError("assignment is not supported", pos)
            if ch in "&|":
                raise ExpressionSyntaxError(f"bitwise operator '{ch}' is not supported", pos)
            raise ExpressionSyntaxError(f"unexpected character '{ch}'", pos)

    tokens.append(Token(TokenKind.END, "", length))
    return tokens
