# corrector/tests/test_expression_parser.py
"""Tests for the expression tokenizer and parser."""

import pytest

from corrector.expression.lexer import TokenKind, tokenize
from corrector.expression.parser import (
    MAX_NESTING_DEPTH,
    BinaryOp,
    BooleanLiteral,
    Identifier,
    LogicalOp,
    NumberLiteral,
    UnaryOp,
    parse,
)
from events.errors import ExpressionSyntaxError


class TestTokenize:
    """Tests for tokenize."""

    def test_kinds(self):
        tokens = tokenize("score.home >= 2.5 && (x)")
        assert [t.kind for t in tokens] == [
            TokenKind.IDENTIFIER,
            TokenKind.OPERATOR,
            TokenKind.NUMBER,
            TokenKind.OPERATOR,
            TokenKind.LPAREN,
            TokenKind.IDENTIFIER,
            TokenKind.RPAREN,
            TokenKind.END,
        ]
        assert tokens[0].text == "score.home"
        assert tokens[2].value == 2.5

    def test_longest_operator_wins(self):
        tokens = tokenize("a === b !== c")
        assert [t.text for t in tokens if t.kind == TokenKind.OPERATOR] == ["===", "!=="]

    def test_number_forms(self):
        values = [t.value for t in tokenize("2 2.5 .5 3.") if t.kind == TokenKind.NUMBER]
        assert values == [2, 2.5, 0.5, 3.0]
        assert isinstance(values[0], int)

    def test_assignment_rejected(self):
        with pytest.raises(ExpressionSyntaxError) as exc_info:
            tokenize("totalGoals = 3")
        assert "assignment" in exc_info.value.message

    def test_bitwise_rejected(self):
        for text in ("a & b", "a | b"):
            with pytest.raises(ExpressionSyntaxError) as exc_info:
                tokenize(text)
            assert "bitwise" in exc_info.value.message

    def test_number_followed_by_letters(self):
        with pytest.raises(ExpressionSyntaxError):
            tokenize("2abc > 1")


class TestParse:
    """Tests for parse."""

    def test_precedence_arithmetic(self):
        tree = parse("1 + 2 * 3")
        assert tree == BinaryOp("+", NumberLiteral(1), BinaryOp("*", NumberLiteral(2), NumberLiteral(3)))

    def test_left_associative(self):
        tree = parse("8 - 3 - 2")
        assert tree == BinaryOp("-", BinaryOp("-", NumberLiteral(8), NumberLiteral(3)), NumberLiteral(2))

    def test_comparison_below_arithmetic(self):
        tree = parse("firstHalfHome + firstHalfAway > 80.5")
        assert tree == BinaryOp(
            ">",
            BinaryOp("+", Identifier("firstHalfHome"), Identifier("firstHalfAway")),
            NumberLiteral(80.5),
        )

    def test_and_binds_tighter_than_or(self):
        tree = parse("a || b && c")
        assert tree == LogicalOp("||", Identifier("a"), LogicalOp("&&", Identifier("b"), Identifier("c")))

    def test_equality_below_relational(self):
        tree = parse("a > 1 == true")
        assert tree == BinaryOp("==", BinaryOp(">", Identifier("a"), NumberLiteral(1)), BooleanLiteral(True))

    def test_parentheses(self):
        tree = parse("(1 + 2) * 3")
        assert tree == BinaryOp("*", BinaryOp("+", NumberLiteral(1), NumberLiteral(2)), NumberLiteral(3))

    def test_unary(self):
        assert parse("!draw") == UnaryOp("!", Identifier("draw"))
        assert parse("-2") == UnaryOp("-", NumberLiteral(2))
        assert parse("!!draw") == UnaryOp("!", UnaryOp("!", Identifier("draw")))

    def test_booleans(self):
        assert parse("false") == BooleanLiteral(False)

    def test_errors(self):
        for text in ("", "a >", "(a", "a)", "a b", "> 1", "()", "1 + + "):
            with pytest.raises(ExpressionSyntaxError):
                parse(text)

    def test_error_position(self):
        with pytest.raises(ExpressionSyntaxError) as exc_info:
            parse("a > 1 )")
        assert exc_info.value.position == 6
        assert exc_info.value.code == "SYNTAX_ERROR"

    def test_nesting_limit(self):
        depth = MAX_NESTING_DEPTH + 1
        with pytest.raises(ExpressionSyntaxError) as exc_info:
            parse("(" * depth + "1" + ")" * depth)
        assert "nested too deeply" in exc_info.value.message

    def test_nesting_within_limit(self):
        depth = MAX_NESTING_DEPTH
        assert parse("(" * depth + "1" + ")" * depth) == NumberLiteral(1)
