"""
Greed Console - Dice Model Tests

Tests for dice rollers and scoring-group enumeration.
"""

from itertools import product

import pytest
from src.engine.base import DiceSet, ScoringCategory, ScoringCombination
from src.engine.dice import (
    RandomDiceRoller,
    ScriptedDiceRoller,
    legal_combinations,
    roll,
)
from src.engine.errors import ConfigurationError
from src.engine.ruleset import Ruleset, ScoringTable
from src.engine.scoring import ScoringEngine


class TestRandomDiceRoller:
    """Tests for RandomDiceRoller."""

    def test_roll_count(self, ruleset):
        dice = RandomDiceRoller(seed=1).roll(5, ruleset)
        assert isinstance(dice, DiceSet)
        assert len(dice) == 5

    def test_values_in_range(self, ruleset):
        roller = RandomDiceRoller(seed=2)
        for _ in range(100):
            assert all(1 <= v <= 6 for v in roller.roll(5, ruleset))

    def test_seed_is_reproducible(self, ruleset):
        first = RandomDiceRoller(seed=42)
        second = RandomDiceRoller(seed=42)
        for _ in range(10):
            assert first.roll(5, ruleset) == second.roll(5, ruleset)

    @pytest.mark.parametrize("count", [0, 6, -1])
    def test_count_outside_pool(self, ruleset, count):
        with pytest.raises(ConfigurationError) as exc_info:
            RandomDiceRoller(seed=1).roll(count, ruleset)
        assert exc_info.value.field == "count"

    def test_module_roll_uses_given_roller(self, ruleset):
        roller = ScriptedDiceRoller([(1, 2, 3)])
        assert roll(3, ruleset, roller).values == (1, 2, 3)

    def test_module_roll_default(self, ruleset):
        assert len(roll(2, ruleset)) == 2


class TestScriptedDiceRoller:
    """Tests for ScriptedDiceRoller."""

    def test_plays_back_in_order(self, ruleset):
        roller = ScriptedDiceRoller([(1, 1, 1, 1, 1), (2, 3)])
        assert roller.roll(5, ruleset).values == (1, 1, 1, 1, 1)
        assert roller.roll(2, ruleset).values == (2, 3)
        assert roller.remaining == 0

    def test_queue(self, ruleset):
        roller = ScriptedDiceRoller()
        roller.queue((6,), (5,))
        assert roller.remaining == 2
        assert roller.roll(1, ruleset).values == (6,)

    def test_exhausted(self, ruleset):
        with pytest.raises(ConfigurationError, match="exhausted"):
            ScriptedDiceRoller().roll(1, ruleset)

    def test_count_mismatch(self, ruleset):
        roller = ScriptedDiceRoller([(1, 2)])
        with pytest.raises(ConfigurationError, match="2 dice"):
            roller.roll(3, ruleset)
        assert roller.remaining == 1

    def test_invalid_script(self):
        with pytest.raises(ConfigurationError):
            ScriptedDiceRoller([(1, 7)])


class TestLegalCombinations:
    """Tests for legal_combinations."""

    def test_candidates_for_mixed_roll(self, ruleset):
        groups = legal_combinations((1, 5, 5, 5, 5), ruleset)
        assert groups == frozenset({
            ScoringCombination(ScoringCategory.SET, (5, 5, 5), 500),
            ScoringCombination(ScoringCategory.SINGLE, (1,), 100),
            ScoringCombination(ScoringCategory.SINGLE, (5,), 50),
        })

    def test_bust_has_no_candidates(self, ruleset):
        assert legal_combinations((2, 3, 4, 6, 6), ruleset) == frozenset()

    def test_straights_recognised(self):
        table = ScoringTable(straights=(((1, 2, 3, 4, 5), 1500),))
        ruleset = Ruleset(scoring=table)
        groups = legal_combinations((5, 4, 3, 2, 1), ruleset)
        assert ScoringCombination(ScoringCategory.STRAIGHT, (1, 2, 3, 4, 5), 1500) in groups

    def test_doubling_sets_offer_each_size(self):
        ruleset = Ruleset(scoring=ScoringTable(doubling_sets=True))
        sets = {
            g.size for g in legal_combinations((2, 2, 2, 2, 2), ruleset)
            if g.category is ScoringCategory.SET
        }
        assert sets == {3, 4, 5}

    def test_accepts_dice_set_and_is_deterministic(self, ruleset):
        dice = DiceSet((1, 1, 1, 4, 5))
        assert legal_combinations(dice, ruleset) == legal_combinations(dice, ruleset)
        assert dice.values == (1, 1, 1, 4, 5)

    @pytest.mark.parametrize("count", [1, 2, 3, 4, 5])
    def test_empty_exactly_when_bust(self, ruleset, count):
        for values in product(range(1, 7), repeat=count):
            assert (not legal_combinations(values, ruleset)) == ScoringEngine.is_bust(values, ruleset)
