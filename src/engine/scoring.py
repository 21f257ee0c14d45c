"""
Greed Console - Scoring Engine

Turns a throw into points. All methods are stateless class methods that
operate on immutable inputs.

Selection:
    - Optimal (default): every non-overlapping partition of the dice into
      scoring groups is considered and the most valuable one wins. Ties go
      to the partition that scores more dice, then to the one that spends
      more dice on preferred categories.
    - Greedy: groups are taken category by category in preference order,
      most valuable first.
"""

from itertools import combinations_with_replacement
from typing import Sequence

from src.engine.base import (
    DIE_FACES,
    DiceSet,
    ScoreResult,
    ScoringCombination,
)
from src.engine.dice import combinations_for_counts
from src.engine.errors import ConfigurationError
from src.engine.ruleset import Ruleset

_Counts = tuple[int, ...]
_Rank = tuple


class ScoringEngine:
    """
    Stateless scoring engine.

    All methods are class methods operating on immutable data.
    """

    @classmethod
    def score(cls, dice: DiceSet | Sequence[int], ruleset: Ruleset) -> ScoreResult:
        """
        Score a throw.

        Args:
            dice: Dice values to score (sequence or DiceSet)
            ruleset: Ruleset providing the scoring table and selection mode

        Returns:
            ScoreResult with total points, selected groups and scoring indices

        Raises:
            ConfigurationError: If the throw contains no dice
        """
        if not isinstance(dice, DiceSet):
            dice = DiceSet.from_sequence(dice)
        if len(dice) == 0:
            raise ConfigurationError("Cannot score an empty dice set.", field="dice")

        groups = cls.select(dice.counts, ruleset)
        indices = cls._assign_indices(dice.values, groups)
        points = sum(group.points for group in groups)

        return ScoreResult(
            points=points,
            combinations=groups,
            scoring_indices=indices,
            is_bust=not indices,
            is_hot_dice=len(indices) == len(dice),
        )

    @classmethod
    def select(cls, counts: _Counts, ruleset: Ruleset) -> tuple[ScoringCombination, ...]:
        """
        Choose the scoring groups for the given face counts.

        Returns:
            Non-overlapping groups ordered by preference rank, then faces
        """
        if ruleset.optimal_selection:
            groups = cls._optimal(tuple(counts), ruleset)
        else:
            groups = cls._greedy(tuple(counts), ruleset)
        return tuple(sorted(
            groups,
            key=lambda g: (ruleset.preference_rank(g.category), g.faces),
        ))

    @classmethod
    def _rank(cls, groups: Sequence[ScoringCombination], ruleset: Ruleset) -> _Rank:
        by_category = tuple(
            sum(g.size for g in groups if g.category is category)
            for category in ruleset.preference
        )
        return (
            sum(g.points for g in groups),
            sum(g.size for g in groups),
            by_category,
        )

    @classmethod
    def _optimal(cls, counts: _Counts, ruleset: Ruleset) -> tuple[ScoringCombination, ...]:
        memo: dict[_Counts, tuple[ScoringCombination, ...]] = {}

        def best(remaining: _Counts) -> tuple[ScoringCombination, ...]:
            if remaining in memo:
                return memo[remaining]
            chosen: tuple[ScoringCombination, ...] = ()
            chosen_rank = cls._rank(chosen, ruleset)
            for group in combinations_for_counts(remaining, ruleset.scoring):
                candidate = (group,) + best(cls._subtract(remaining, group))
                rank = cls._rank(candidate, ruleset)
                if rank > chosen_rank:
                    chosen, chosen_rank = candidate, rank
            memo[remaining] = chosen
            return chosen

        return best(counts)

    @classmethod
    def _greedy(cls, counts: _Counts, ruleset: Ruleset) -> tuple[ScoringCombination, ...]:
        chosen: list[ScoringCombination] = []
        remaining = counts
        for category in ruleset.preference:
            while True:
                candidates = [
                    g for g in combinations_for_counts(remaining, ruleset.scoring)
                    if g.category is category
                ]
                if not candidates:
                    break
                group = max(candidates, key=lambda g: (g.points, g.size))
                chosen.append(group)
                remaining = cls._subtract(remaining, group)
        return tuple(chosen)

    @staticmethod
    def _subtract(counts: _Counts, group: ScoringCombination) -> _Counts:
        remaining = list(counts)
        for face in group.faces:
            remaining[face - 1] -= 1
        return tuple(remaining)

    @staticmethod
    def _assign_indices(
        values: tuple[int, ...],
        groups: Sequence[ScoringCombination]
    ) -> frozenset[int]:
        """Map each group's faces onto the earliest unused dice showing them."""
        used: set[int] = set()
        for group in groups:
            for face in group.faces:
                for i, value in enumerate(values):
                    if value == face and i not in used:
                        used.add(i)
                        break
        return frozenset(used)

    @classmethod
    def is_bust(cls, dice: DiceSet | Sequence[int], ruleset: Ruleset) -> bool:
        """True if no die in the throw scores."""
        return cls.score(dice, ruleset).is_bust

    @classmethod
    def is_hot_dice(cls, dice: DiceSet | Sequence[int], ruleset: Ruleset) -> bool:
        """True if every die in the throw scores."""
        return cls.score(dice, ruleset).is_hot_dice

    @classmethod
    def max_score(cls, die_count: int, ruleset: Ruleset) -> int:
        """
        Highest score any throw of `die_count` dice can produce.

        Raises:
            ConfigurationError: If die_count is not positive
        """
        if die_count < 1:
            raise ConfigurationError(
                f"Die count must be positive, got {die_count}.", field="die_count"
            )
        best = 0
        for faces in combinations_with_replacement(range(1, DIE_FACES + 1), die_count):
            counts = [0] * DIE_FACES
            for face in faces:
                counts[face - 1] += 1
            groups = cls.select(tuple(counts), ruleset)
            best = max(best, sum(g.points for g in groups))
        return best

    @classmethod
    def describe(cls, result: ScoreResult) -> list[str]:
        """Human-readable breakdown lines, e.g. ['Three 5s: 500', 'Single 1: 100']."""
        if result.is_bust:
            return ["Bust"]
        return [f"{g.description}: {g.points}" for g in result.combinations]


def score(dice: DiceSet | Sequence[int], ruleset: Ruleset) -> ScoreResult:
    """Score a throw under a ruleset. See ScoringEngine.score."""
    return ScoringEngine.score(dice, ruleset)
