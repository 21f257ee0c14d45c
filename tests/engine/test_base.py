"""
Greed Console - Base Classes Tests

Tests for dataclasses, enums, errors and validation utilities.
"""

import pytest
from src.engine.base import (
    ActionKind,
    DiceSet,
    ScoreResult,
    ScoringCategory,
    ScoringCombination,
    TurnPhase,
)
from src.engine.errors import (
    ConfigurationError,
    GreedError,
    Rule,
    RuleViolation,
    SessionBusy,
    UnsupportedVersion,
    ValidationError,
)
from src.engine.validators import (
    MAX_NAME_LENGTH,
    validate_dice_values,
    validate_die_count,
    validate_face_points,
    validate_player_name,
    validate_player_names,
    validate_score,
    validate_straights,
    validate_target_score,
)


class TestEnums:
    """Tests for engine enums."""

    def test_scoring_category_values(self):
        assert ScoringCategory.SINGLE.value == "single"
        assert ScoringCategory.SET.value == "set"
        assert ScoringCategory.STRAIGHT.value == "straight"

    def test_action_kind_values(self):
        assert ActionKind("roll") is ActionKind.ROLL
        assert ActionKind("pass") is ActionKind.PASS

    @pytest.mark.parametrize("phase", [
        TurnPhase.BANKED, TurnPhase.BUSTED, TurnPhase.ABANDONED,
    ])
    def test_terminal_phases(self, phase):
        assert phase.is_terminal is True

    @pytest.mark.parametrize("phase", [
        TurnPhase.NOT_STARTED, TurnPhase.SCORED, TurnPhase.BANK_DECISION,
    ])
    def test_open_phases(self, phase):
        assert phase.is_terminal is False


class TestDiceSet:
    """Tests for DiceSet dataclass."""

    def test_create_valid_set(self):
        dice = DiceSet(values=(1, 2, 3, 4, 5))
        assert len(dice) == 5
        assert dice.values == (1, 2, 3, 4, 5)

    def test_invalid_value_raises(self):
        with pytest.raises(ValueError, match="Invalid die value 7"):
            DiceSet(values=(1, 2, 7))

    def test_zero_value_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            DiceSet(values=(0, 1))
        assert exc_info.value.field == "dice"

    def test_non_integer_raises(self):
        with pytest.raises(ConfigurationError):
            DiceSet(values=(1, "5"))

    def test_bool_rejected(self):
        with pytest.raises(ConfigurationError):
            DiceSet(values=(True, 2))

    def test_from_sequence_list(self):
        assert DiceSet.from_sequence([1, 2, 3]).values == (1, 2, 3)

    def test_list_values_normalised(self):
        dice = DiceSet(values=[1, 5, 5, 5, 5])
        assert dice.values == (1, 5, 5, 5, 5)
        assert dice == DiceSet(values=(1, 5, 5, 5, 5))
        assert hash(dice) == hash(DiceSet(values=(1, 5, 5, 5, 5)))

    def test_indexing_and_iteration(self):
        dice = DiceSet(values=(6, 2, 3))
        assert dice[0] == 6
        assert list(dice) == [6, 2, 3]

    def test_counts(self):
        dice = DiceSet(values=(5, 5, 1, 6, 5))
        assert dice.counts == (1, 0, 0, 0, 3, 1)

    def test_is_hashable(self):
        assert DiceSet((1, 2)) == DiceSet((1, 2))
        assert len({DiceSet((1, 2)), DiceSet((1, 2))}) == 1


class TestScoringCombination:
    """Tests for ScoringCombination descriptions."""

    def test_single(self):
        combo = ScoringCombination(ScoringCategory.SINGLE, (5,), 50)
        assert combo.size == 1
        assert combo.description == "Single 5"

    def test_set(self):
        combo = ScoringCombination(ScoringCategory.SET, (4, 4, 4), 400)
        assert combo.size == 3
        assert combo.description == "Three 4s"

    def test_large_set(self):
        combo = ScoringCombination(ScoringCategory.SET, (2,) * 5, 800)
        assert combo.description == "Five 2s"

    def test_straight(self):
        combo = ScoringCombination(ScoringCategory.STRAIGHT, (1, 2, 3, 4, 5), 1500)
        assert combo.description == "Straight (1-2-3-4-5)"


class TestScoreResult:
    """Tests for ScoreResult dataclass."""

    def test_scoring_count(self):
        result = ScoreResult(
            points=150,
            combinations=(),
            scoring_indices=frozenset({0, 3}),
        )
        assert result.scoring_count == 2

    def test_bust_str(self):
        result = ScoreResult(
            points=0, combinations=(), scoring_indices=frozenset(), is_bust=True
        )
        assert str(result) == "BUST! No scoring dice."

    def test_str_lists_combinations(self):
        result = ScoreResult(
            points=600,
            combinations=(
                ScoringCombination(ScoringCategory.SET, (5, 5, 5), 500),
                ScoringCombination(ScoringCategory.SINGLE, (1,), 100),
            ),
            scoring_indices=frozenset({0, 1, 2, 3}),
        )
        text = str(result)
        assert "Total: 600 points" in text
        assert "Three 5s: 500" in text
        assert "Single 1: 100" in text


class TestErrors:
    """Tests for the error taxonomy."""

    def test_hierarchy(self):
        assert issubclass(ConfigurationError, GreedError)
        assert issubclass(RuleViolation, GreedError)
        assert issubclass(SessionBusy, GreedError)
        assert issubclass(UnsupportedVersion, ValidationError)

    def test_rule_violation_carries_details(self):
        error = RuleViolation(Rule.BELOW_MINIMUM, "too low", minimum=300, unbanked=100)
        assert error.rule is Rule.BELOW_MINIMUM
        assert error.details == {"minimum": 300, "unbanked": 100}
        assert str(error) == "too low"

    def test_unsupported_version(self):
        error = UnsupportedVersion(7, frozenset({1}))
        assert error.version == 7
        assert error.field == "version"
        assert "7" in error.message


class TestValidators:
    """Tests for validation utilities."""

    def test_valid_dice(self):
        assert validate_dice_values([1, 5, 6]) == (1, 5, 6)

    def test_too_few_dice(self):
        with pytest.raises(ConfigurationError, match="At least 1"):
            validate_dice_values([])

    def test_too_many_dice(self):
        with pytest.raises(ConfigurationError, match="At most 2"):
            validate_dice_values([1, 2, 3], max_count=2)

    def test_bad_die_value(self):
        with pytest.raises(ConfigurationError, match="index 1"):
            validate_dice_values([1, 9])

    @pytest.mark.parametrize("count", [0, 11, -1])
    def test_die_count_out_of_range(self, count):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_die_count(count, 10)
        assert exc_info.value.field == "die_count"

    def test_negative_score(self):
        with pytest.raises(ConfigurationError, match="cannot be negative"):
            validate_score(-10)

    def test_negative_allowed(self):
        assert validate_score(-10, allow_negative=True) == -10

    def test_target_must_be_positive(self):
        with pytest.raises(ConfigurationError):
            validate_target_score(0)

    def test_face_points_sorted(self):
        assert list(validate_face_points({5: 50, 1: 100}, "singles")) == [1, 5]

    def test_face_points_reject_zero(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_face_points({1: 0}, "singles")
        assert exc_info.value.field == "scoring.singles"

    def test_straights_normalised(self):
        assert validate_straights([([5, 4, 3, 2, 1], 1500)]) == (((1, 2, 3, 4, 5), 1500),)

    def test_straight_repeating_face(self):
        with pytest.raises(ConfigurationError, match="repeats"):
            validate_straights([((1, 1, 2), 100)])

    def test_straight_defined_twice(self):
        with pytest.raises(ConfigurationError, match="twice"):
            validate_straights([((1, 2, 3), 100), ((3, 2, 1), 200)])

    def test_player_name_stripped(self):
        assert validate_player_name("  Alice ") == "Alice"

    @pytest.mark.parametrize("name", ["", "   ", "x" * (MAX_NAME_LENGTH + 1)])
    def test_bad_player_name(self, name):
        with pytest.raises(ConfigurationError):
            validate_player_name(name)

    def test_player_names_unique_ignoring_case(self):
        with pytest.raises(ConfigurationError, match="unique"):
            validate_player_names(["Alice", "alice"], 2, 8)

    def test_player_count_range(self):
        with pytest.raises(ConfigurationError, match="2-8"):
            validate_player_names(["Alice"], 2, 8)

    def test_bare_string_rejected(self):
        with pytest.raises(ConfigurationError):
            validate_player_names("Alice", 1, 8)
