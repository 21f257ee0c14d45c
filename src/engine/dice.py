"""
Greed Console - Dice Model

Produces throws of dice and enumerates the scoring groups a throw contains.
Randomness is confined to DiceRoller implementations so that everything
downstream can be driven with fixed dice.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from collections import deque
from typing import Iterable, Sequence

from src.engine.base import DIE_FACES, DiceSet, ScoringCategory, ScoringCombination
from src.engine.errors import ConfigurationError
from src.engine.ruleset import Ruleset, ScoringTable
from src.engine.validators import validate_dice_values


class DiceRoller(ABC):
    """Source of die faces. Subclasses decide where the faces come from."""

    @abstractmethod
    def faces(self, count: int) -> tuple[int, ...]:
        """Return `count` die faces."""

    def roll(self, count: int, ruleset: Ruleset) -> DiceSet:
        """
        Roll `count` dice under a ruleset.

        Raises:
            ConfigurationError: If count is outside 1..ruleset.die_count
        """
        if isinstance(count, bool) or not isinstance(count, int) or not (
            1 <= count <= ruleset.die_count
        ):
            raise ConfigurationError(
                f"Cannot roll {count!r} dice; the pool holds 1 to {ruleset.die_count}.",
                field="count",
            )
        return DiceSet(values=self.faces(count))


class RandomDiceRoller(DiceRoller):
    """
    Uniform dice from a private random source.

    The source is seeded once, at construction, and never reseeded.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._random = random.Random(seed)

    def faces(self, count: int) -> tuple[int, ...]:
        return tuple(self._random.randint(1, DIE_FACES) for _ in range(count))


class ScriptedDiceRoller(DiceRoller):
    """Plays back predetermined throws in order. Used for tests and demos."""

    def __init__(self, throws: Iterable[Sequence[int]] = ()) -> None:
        self._throws: deque[tuple[int, ...]] = deque(
            validate_dice_values(throw) for throw in throws
        )

    def queue(self, *throws: Sequence[int]) -> None:
        """Append more throws to the script."""
        for throw in throws:
            self._throws.append(validate_dice_values(throw))

    @property
    def remaining(self) -> int:
        return len(self._throws)

    def faces(self, count: int) -> tuple[int, ...]:
        if not self._throws:
            raise ConfigurationError("Scripted dice exhausted.", field="dice")
        if len(self._throws[0]) != count:
            raise ConfigurationError(
                f"Next scripted throw has {len(self._throws[0])} dice, "
                f"but {count} were requested.",
                field="dice",
            )
        return self._throws.popleft()


_default_roller = RandomDiceRoller()


def roll(count: int, ruleset: Ruleset, roller: DiceRoller | None = None) -> DiceSet:
    """
    Roll `count` dice with the given roller, or the process-wide one.

    Raises:
        ConfigurationError: If count is outside 1..ruleset.die_count
    """
    return (roller or _default_roller).roll(count, ruleset)


def combinations_for_counts(
    counts: Sequence[int],
    table: ScoringTable
) -> list[ScoringCombination]:
    """
    Every scoring group that fits within the given face counts.

    Args:
        counts: Dice showing each face, index 0 for face 1
        table: Scoring table to recognise groups with

    Returns:
        Candidate groups in a stable order: straights, sets, then singles
    """
    groups: list[ScoringCombination] = []

    for faces, points in table.straights:
        if all(counts[face - 1] >= 1 for face in faces):
            groups.append(ScoringCombination(ScoringCategory.STRAIGHT, faces, points))

    for face in range(1, DIE_FACES + 1):
        count = counts[face - 1]
        largest = count if table.doubling_sets else min(count, 3)
        for size in range(3, largest + 1):
            points = table.set_points(face, size)
            if points is not None:
                groups.append(
                    ScoringCombination(ScoringCategory.SET, (face,) * size, points)
                )

    for face, points in table.singles.items():
        if counts[face - 1] >= 1:
            groups.append(ScoringCombination(ScoringCategory.SINGLE, (face,), points))

    return groups


def legal_combinations(
    dice: DiceSet | Sequence[int],
    ruleset: Ruleset
) -> frozenset[ScoringCombination]:
    """
    Enumerate every scoring group the ruleset recognises in a throw.

    Groups may overlap one another; picking a non-overlapping selection is
    the scoring engine's job. The dice are not modified.

    Returns:
        Frozen set of candidate groups; empty if and only if the throw busts
    """
    if not isinstance(dice, DiceSet):
        dice = DiceSet.from_sequence(dice)
    return frozenset(combinations_for_counts(dice.counts, ruleset.scoring))
