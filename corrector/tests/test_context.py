# corrector/tests/test_context.py
"""Tests for ContextBuilder and the sport registry."""

import pytest

from corrector.context import ContextBuilder, EvaluationContext, baseline_variables, has_details
from corrector.registry import DEFAULT_REGISTRY, SportContextRegistry
from corrector.sports import as_number
from events.errors import UnresolvedIdentifier


BASELINE_NAMES = {
    "score.home",
    "score.away",
    "score.details",
    "totalGoals",
    "homeWins",
    "awayWins",
    "draw",
    "bothTeamsScore",
    "status",
}

SPORT_NAMES = {
    "football": {"totalGoalsHT", "secondHalfGoals", "secondHalfGoalsHome", "secondHalfGoalsAway",
                 "noGoals", "bothTeamsScoreHT", "elapsed"},
    "basketball": {"firstHalfHome", "firstHalfAway", "secondHalfHome", "secondHalfAway",
                   "hasOvertime", "totalPoints"},
    "volleyball": {"setsWonHome", "setsWonAway", "totalSets", "wentToFive", "straightSets"},
    "tennis": {"setsWonHome", "setsWonAway", "totalSets", "straightSets"},
    "rugby": {"firstHalfTotal", "secondHalfTotal", "hasOvertime", "totalPoints"},
    "handball": {"firstHalfTotal", "secondHalfTotal", "totalGoals"},
    "hockey": {"regulationGoalsHome", "regulationGoalsAway", "hasOvertime", "hasPenalties", "totalGoals"},
    "baseball": {"totalRuns", "totalHits", "totalErrors", "hitRatio"},
}


def match(home=2, away=1, details=None, status="FINISHED", **extra):
    score = {"home": home, "away": away}
    if details is not None:
        score["details"] = details
    data = {"id": "m1", "status": status, "score": score}
    data.update(extra)
    return data


@pytest.fixture
def builder():
    return ContextBuilder()


class TestAsNumber:
    """Tests for absent-data-as-zero coercion."""

    def test_values(self):
        assert as_number(None) == 0
        assert as_number(3) == 3
        assert as_number(2.5) == 2.5
        assert as_number(True) == 1
        assert as_number("4") == 4
        assert as_number("x") == 0
        assert as_number({"a": 1}) == 0
        assert as_number(float("nan")) == 0


class TestBaseline:
    """Tests for variables shared by every sport."""

    def test_names(self):
        assert set(baseline_variables(match())) == BASELINE_NAMES

    def test_values(self):
        variables = baseline_variables(match(2, 1))
        assert variables["totalGoals"] == 3
        assert variables["homeWins"] is True
        assert variables["awayWins"] is False
        assert variables["draw"] is False
        assert variables["bothTeamsScore"] is True
        assert variables["status"] == "FINISHED"

    def test_missing_scores_are_zero(self):
        variables = baseline_variables({"status": "FINISHED"})
        assert variables["score.home"] == 0
        assert variables["totalGoals"] == 0
        assert variables["draw"] is True


class TestSportExtensions:
    """Tests for per-sport variables."""

    def test_every_sport_has_documented_names(self, builder):
        for sport, names in SPORT_NAMES.items():
            context = builder.build(match(), sport)
            assert set(context) == BASELINE_NAMES | names, sport

    def test_unknown_sport_gets_baseline_only(self, builder):
        context = builder.build(match(), "curling")
        assert set(context) == BASELINE_NAMES

    def test_sport_is_case_insensitive(self, builder):
        context = builder.build(match(), " Football ")
        assert context.sport == "football"
        assert "totalGoalsHT" in context

    def test_football(self, builder):
        context = builder.build(
            match(3, 1, details={"halftime": {"home": 1, "away": 1}}, sportSpecific={"elapsed": 90}),
            "football",
        )
        assert context["totalGoalsHT"] == 2
        assert context["secondHalfGoals"] == 2
        assert context["secondHalfGoalsHome"] == 2
        assert context["secondHalfGoalsAway"] == 0
        assert context["bothTeamsScoreHT"] is True
        assert context["noGoals"] is False
        assert context["elapsed"] == 90

    def test_football_without_details(self, builder):
        context = builder.build(match(2, 1), "football")
        assert context["totalGoalsHT"] == 0
        assert context["secondHalfGoals"] == 3
        assert context["elapsed"] == 0

    def test_basketball(self, builder):
        details = {
            "home": {"quarter_1": 20, "quarter_2": 25, "quarter_3": 22, "quarter_4": 18},
            "away": {"quarter_1": 18, "quarter_2": 20, "quarter_3": 20, "quarter_4": 20, "overtime": 5},
        }
        context = builder.build(match(85, 83, details=details), "basketball")
        assert context["firstHalfHome"] == 45
        assert context["firstHalfAway"] == 38
        assert context["secondHalfHome"] == 40
        assert context["secondHalfAway"] == 40
        assert context["hasOvertime"] is True
        assert context["totalPoints"] == 168

    def test_volleyball(self, builder):
        assert builder.build(match(3, 2), "volleyball")["wentToFive"] is True
        assert builder.build(match(0, 3), "volleyball")["straightSets"] is True
        assert builder.build(match(3, 1), "volleyball")["straightSets"] is False

    def test_tennis(self, builder):
        context = builder.build(match(2, 0), "tennis")
        assert context["straightSets"] is True
        assert context["totalSets"] == 2

    def test_rugby_and_handball(self, builder):
        details = {"home": {"first_half": 10, "second_half": 14}, "away": {"first_half": 7, "second_half": 10}}
        rugby = builder.build(match(24, 17, details=details), "rugby")
        handball = builder.build(match(24, 17, details=details), "handball")
        assert rugby["firstHalfTotal"] == 17
        assert rugby["secondHalfTotal"] == 24
        assert rugby["hasOvertime"] is False
        assert handball["totalGoals"] == 41

    def test_hockey(self, builder):
        details = {
            "home": {"first_period": 1, "second_period": 1, "third_period": 0, "overtime": 1},
            "away": {"first_period": 0, "second_period": 2, "third_period": 0},
        }
        context = builder.build(match(3, 2, details=details), "hockey")
        assert context["regulationGoalsHome"] == 2
        assert context["regulationGoalsAway"] == 2
        assert context["hasOvertime"] is True
        assert context["hasPenalties"] is False

    def test_baseball_hit_ratio(self, builder):
        details = {"home": {"hits": 9, "errors": 1, "at_bats": 36}, "away": {"hits": 7, "errors": 2}}
        context = builder.build(match(5, 3, details=details), "baseball")
        assert context["totalRuns"] == 8
        assert context["totalHits"] == 16
        assert context["totalErrors"] == 3
        assert context["hitRatio"] == 0.25

    def test_baseball_zero_at_bats_never_divides_by_zero(self, builder):
        details = {"home": {"hits": 4, "at_bats": 0}}
        context = builder.build(match(1, 0, details=details), "baseball")
        assert context["hitRatio"] == 4

    def test_build_is_pure(self, builder):
        data = match(2, 1, details={"halftime": {"home": 1, "away": 0}})
        assert builder.build(data, "football") == builder.build(data, "football")


class TestEvaluationContext:
    """Tests for the immutable context mapping."""

    def test_read_only(self, builder):
        context = builder.build(match(), "football")
        with pytest.raises(TypeError):
            context.variables["totalGoals"] = 10

    def test_nested_details_frozen(self, builder):
        details = {"halftime": {"home": 1, "away": 0}}
        context = builder.build(match(details=details), "football")
        details["halftime"]["home"] = 5
        assert context.resolve("score.details.halftime.home") == 1

    def test_resolve_dotted_names(self):
        context = EvaluationContext(
            sport="football",
            variables={"score.home": 2, "score.details": {"halftime": {"home": 1}}},
        )
        assert context.resolve("score.home") == 2
        assert context.resolve("score.details.halftime.home") == 1

    def test_resolve_unknown(self):
        context = EvaluationContext(sport="football", variables={"score.home": 2})
        with pytest.raises(UnresolvedIdentifier) as exc_info:
            context.resolve("score.details.halftime.home")
        assert exc_info.value.code == "UNRESOLVED_IDENTIFIER"

    def test_has_details(self):
        assert has_details(match(details={"halftime": {"home": 1, "away": 0}}))
        assert not has_details(match())
        assert not has_details(match(details={}))


class TestRegistry:
    """Tests for SportContextRegistry."""

    def test_default_registry_sports(self):
        assert DEFAULT_REGISTRY.sports() == frozenset(SPORT_NAMES)

    def test_register_new_sport(self):
        registry = SportContextRegistry()
        registry.register("Cricket", lambda m: {"totalRuns": 0})
        builder = ContextBuilder(registry)

        context = builder.build(match(), "cricket")
        assert context["totalRuns"] == 0
        assert builder.supported_sports == frozenset({"cricket"})

    def test_duplicate_registration_rejected(self):
        registry = SportContextRegistry()
        registry.register("cricket", lambda m: {})
        with pytest.raises(ValueError):
            registry.register("CRICKET", lambda m: {})

    def test_copy_is_independent(self):
        registry = DEFAULT_REGISTRY.copy()
        registry.register("cricket", lambda m: {})
        assert "cricket" not in DEFAULT_REGISTRY.sports()
