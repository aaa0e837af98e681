# corrector/tests/test_evaluator.py
"""Tests for ExpressionEvaluator."""

import pytest

from corrector.context import ContextBuilder, EvaluationContext
from corrector.expression.evaluator import ExpressionEvaluator
from events.errors import (
    EvaluationError,
    ExpressionSyntaxError,
    UnresolvedIdentifier,
    UnsafeExpression,
)


def football(home=2, away=1, details=None, status="FINISHED"):
    score = {"home": home, "away": away}
    if details is not None:
        score["details"] = details
    return ContextBuilder().build({"id": "m1", "status": status, "score": score}, "football")


@pytest.fixture
def evaluator():
    return ExpressionEvaluator()


class TestArithmeticAndComparison:
    """Tests for numeric evaluation."""

    def test_total_goals(self, evaluator):
        assert evaluator.evaluate("totalGoals > 2.5", football(2, 1)) is True
        assert evaluator.evaluate("totalGoals < 2.5", football(2, 1)) is False

    def test_second_half_goals(self, evaluator):
        context = football(2, 1, details={"halftime": {"home": 1, "away": 0}})
        assert evaluator.evaluate("secondHalfGoals", context) == 2
        assert evaluator.evaluate("secondHalfGoals == 1", context) is False

    def test_arithmetic(self, evaluator):
        context = football(2, 1)
        assert evaluator.evaluate("score.home - score.away", context) == 1
        assert evaluator.evaluate("(score.home + score.away) * 2", context) == 6
        assert evaluator.evaluate("totalGoals / 2", context) == 1.5
        assert evaluator.evaluate("-score.away + 4", context) == 3

    def test_division_by_zero(self, evaluator):
        with pytest.raises(EvaluationError) as exc_info:
            evaluator.evaluate("totalGoals / (score.home - 2)", football(2, 1))
        assert exc_info.value.code == "DIVISION_BY_ZERO"

    def test_huge_integer_comparison_is_exact(self, evaluator):
        huge = "9" * 400
        assert evaluator.evaluate(f"totalGoals < {huge}", football(2, 1)) is True
        assert evaluator.evaluate(f"{huge} == {huge}", football(2, 1)) is True
        assert evaluator.evaluate(f"{huge} > 1.5", football(2, 1)) is True

    def test_division_overflow(self, evaluator):
        with pytest.raises(EvaluationError) as exc_info:
            evaluator.evaluate("9" * 400 + " / 3 > 1", football(2, 1))
        assert exc_info.value.code == "NUMERIC_OVERFLOW"

    def test_mixed_arithmetic_overflow(self, evaluator):
        with pytest.raises(EvaluationError) as exc_info:
            evaluator.evaluate("9" * 400 + " + 0.5", football(2, 1))
        assert exc_info.value.code == "NUMERIC_OVERFLOW"

    def test_nested_detail_lookup(self, evaluator):
        context = football(2, 1, details={"halftime": {"home": 1, "away": 0}})
        assert evaluator.evaluate("score.details.halftime.home === 1", context) is True


class TestEquality:
    """Tests for loose and strict equality."""

    def test_strict_equality(self, evaluator):
        context = football(2, 1)
        assert evaluator.evaluate("score.home === 2 && score.away === 1", context) is True
        assert evaluator.evaluate("score.home !== 2", context) is False

    def test_int_and_float_are_equal(self, evaluator):
        assert evaluator.evaluate("totalGoals === 3.0", football(2, 1)) is True

    def test_loose_boolean_number(self, evaluator):
        context = football(2, 1)
        assert evaluator.evaluate("homeWins == 1", context) is True
        assert evaluator.evaluate("homeWins === 1", context) is False
        assert evaluator.evaluate("homeWins === true", context) is True

    def test_booleans_in_arithmetic(self, evaluator):
        context = football(1, 1)
        assert evaluator.evaluate("draw + bothTeamsScore", context) == 2


class TestLogical:
    """Tests for && / || / !."""

    def test_or(self, evaluator):
        assert evaluator.evaluate("homeWins || draw", football(1, 1)) is True
        assert evaluator.evaluate("homeWins || draw", football(0, 1)) is False

    def test_short_circuit_skips_unresolved(self, evaluator):
        assert evaluator.evaluate("homeWins || undefinedName", football(2, 1)) is True
        assert evaluator.evaluate("awayWins && undefinedName", football(2, 1)) is False

    def test_operand_is_returned(self, evaluator):
        assert evaluator.evaluate("draw || totalGoals", football(2, 1)) == 3

    def test_not(self, evaluator):
        assert evaluator.evaluate("!draw", football(2, 1)) is True
        assert evaluator.evaluate("!totalGoals", football(0, 0)) is True


class TestFailures:
    """Tests for rejected or failing expressions."""

    def test_unresolved_identifier(self, evaluator):
        with pytest.raises(UnresolvedIdentifier) as exc_info:
            evaluator.evaluate("totalPoints > 100", football())
        assert exc_info.value.name == "totalPoints"

    def test_unsafe_expression_not_parsed(self, evaluator):
        with pytest.raises(UnsafeExpression):
            evaluator.evaluate("process.exit && 1", football())

    def test_syntax_error(self, evaluator):
        with pytest.raises(ExpressionSyntaxError):
            evaluator.evaluate("totalGoals >", football())

    def test_structure_is_not_a_value(self, evaluator):
        context = football(details={"halftime": {"home": 1, "away": 0}})
        with pytest.raises(EvaluationError):
            evaluator.evaluate("score.details", context)

    def test_string_result_rejected(self, evaluator):
        with pytest.raises(EvaluationError) as exc_info:
            evaluator.evaluate("status", football())
        assert "boolean or number" in exc_info.value.message

    def test_string_arithmetic_rejected(self, evaluator):
        with pytest.raises(EvaluationError):
            evaluator.evaluate("status + 1", football())

    def test_configured_max_length(self):
        evaluator = ExpressionEvaluator(max_length=10)
        with pytest.raises(UnsafeExpression):
            evaluator.evaluate("totalGoals > 2.5", football())

    def test_evaluate_safely(self, evaluator):
        result = evaluator.evaluate_safely("totalPoints > 1", football())
        assert result.success is False
        assert result.error_code == "UNRESOLVED_IDENTIFIER"
        assert result.error == "totalPoints is not defined"
        assert result.value is None

        ok = evaluator.evaluate_safely("totalGoals > 2.5", football())
        assert ok.to_dict() == {
            "success": True,
            "value": True,
            "error": None,
            "error_code": None,
            "expression": "totalGoals > 2.5",
        }


class TestDeterminism:
    """Evaluation depends only on its arguments."""

    def test_repeated_calls_identical(self, evaluator):
        context = football(3, 2, details={"halftime": {"home": 1, "away": 1}})
        expressions = [
            "totalGoals > 2.5",
            "secondHalfGoals / 3",
            "homeWins && bothTeamsScore",
            "score.home === 3",
        ]
        for expression in expressions:
            first = evaluator.evaluate(expression, context)
            for _ in range(5):
                assert evaluator.evaluate(expression, context) == first

    def test_context_not_mutated(self, evaluator):
        context = EvaluationContext(sport="football", variables={"totalGoals": 3})
        evaluator.evaluate("totalGoals > 1", context)
        assert dict(context.variables) == {"totalGoals": 3}
