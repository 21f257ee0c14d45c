"""
Greed Console - Ruleset Configuration

Greed is played with many house tables, so nothing about scoring is
hard-coded in the engine. A Ruleset is built once at session start and
passed to every engine call.

Standard table (``standard_greed``):
    - Single 1: 100 points
    - Single 5: 50 points
    - Three 1s: 1,000 points
    - Three of X (2-6): X x 100 points
    - 300 points needed in one turn to get on the board
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from src.engine.base import ScoringCategory
from src.engine.validators import (
    validate_die_count,
    validate_face_points,
    validate_score,
    validate_straights,
    validate_target_score,
)
from src.engine.errors import ConfigurationError

MAX_DICE = 10


class TiebreakPolicy(Enum):
    """How to pick a winner among players tied on the highest score."""
    EARLIEST_SEAT = "earliest_seat"
    LATEST_SEAT = "latest_seat"
    FIRST_TO_REACH = "first_to_reach"


def _standard_triples() -> dict[int, int]:
    triples = {face: face * 100 for face in range(2, 7)}
    triples[1] = 1000
    return triples


@dataclass(frozen=True)
class ScoringTable:
    """
    Point values for each kind of scoring group.

    Attributes:
        singles: Points for a lone die of a face (faces absent never score alone)
        triples: Points for three of a kind of a face
        straights: (faces, points) pairs for runs that score as a unit
        doubling_sets: Four or more of a kind double the triple value per
            extra die; otherwise extra dice score as singles or further sets
    """
    singles: Mapping[int, int] = field(default_factory=lambda: {1: 100, 5: 50}, hash=False)
    triples: Mapping[int, int] = field(default_factory=_standard_triples, hash=False)
    straights: tuple[tuple[tuple[int, ...], int], ...] = ()
    doubling_sets: bool = False

    def __post_init__(self) -> None:
        for name in ("singles", "triples"):
            table = validate_face_points(getattr(self, name), name)
            object.__setattr__(self, name, MappingProxyType(table))
        object.__setattr__(self, "straights", validate_straights(self.straights))

    def set_points(self, face: int, size: int) -> int | None:
        """Points for `size` of a kind of `face`, or None if it does not score."""
        base = self.triples.get(face)
        if base is None or size < 3:
            return None
        if size == 3:
            return base
        if not self.doubling_sets:
            return None
        return base * 2 ** (size - 3)


@dataclass(frozen=True)
class Ruleset:
    """
    Immutable configuration for a game session.

    Attributes:
        die_count: Size of the full die pool
        scoring: Point table
        target_score: Score that ends the game at the close of a round
        minimum_to_bank: Smallest turn total that may be banked
        opening_minimum_only: Minimum only applies until a player has banked
        tiebreak: Winner selection among equal top scores
        hot_dice_reroll: All-scoring rolls restore the full pool
        hot_dice_forces_roll: Hot dice must be rolled, not banked
        optimal_selection: Score the best partition rather than the greedy one
        preference: Category order used for greedy scoring and tie-breaking
        min_players: Fewest seated players a session may have
        max_players: Most players a session may start with
    """
    die_count: int = 5
    scoring: ScoringTable = field(default_factory=ScoringTable)
    target_score: int = 3000
    minimum_to_bank: int = 0
    opening_minimum_only: bool = False
    tiebreak: TiebreakPolicy = TiebreakPolicy.EARLIEST_SEAT
    hot_dice_reroll: bool = True
    hot_dice_forces_roll: bool = False
    optimal_selection: bool = True
    preference: tuple[ScoringCategory, ...] = (
        ScoringCategory.STRAIGHT,
        ScoringCategory.SET,
        ScoringCategory.SINGLE,
    )
    min_players: int = 2
    max_players: int = 8

    def __post_init__(self) -> None:
        """Validate configuration."""
        validate_die_count(self.die_count, MAX_DICE)
        validate_target_score(self.target_score)
        validate_score(self.minimum_to_bank, name="minimum_to_bank")

        if not isinstance(self.tiebreak, TiebreakPolicy):
            raise ConfigurationError(
                f"Unknown tiebreak policy {self.tiebreak!r}.", field="tiebreak"
            )

        try:
            preference = tuple(ScoringCategory(c) for c in self.preference)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"Preference {self.preference!r} holds an unknown scoring category.",
                field="preference",
            ) from exc
        if sorted(c.value for c in preference) != sorted(c.value for c in ScoringCategory):
            raise ConfigurationError(
                "Preference must list every scoring category exactly once.",
                field="preference",
            )
        object.__setattr__(self, "preference", preference)

        if self.hot_dice_forces_roll and not self.hot_dice_reroll:
            raise ConfigurationError(
                "Hot dice cannot force a roll when hot dice rerolls are disabled.",
                field="hot_dice_forces_roll",
            )

        for faces, _ in self.scoring.straights:
            if len(faces) > self.die_count:
                raise ConfigurationError(
                    f"Straight {faces} needs more dice than the pool of {self.die_count}.",
                    field="scoring.straights",
                )

        if not (1 <= self.min_players <= self.max_players):
            raise ConfigurationError(
                f"Player limits must satisfy 1 <= min ({self.min_players}) "
                f"<= max ({self.max_players}).",
                field="min_players",
            )

    def preference_rank(self, category: ScoringCategory) -> int:
        """Position of a category in the preference order (0 = most preferred)."""
        return self.preference.index(category)

    def minimum_applies(self, banked: int) -> bool:
        """Whether the minimum-to-bank check applies to a player with `banked` points."""
        if self.minimum_to_bank <= 0:
            return False
        return not self.opening_minimum_only or banked == 0

    def with_changes(self, **changes) -> "Ruleset":
        """Copy of this ruleset with some fields replaced (and re-validated)."""
        return replace(self, **changes)


def standard_greed(target_score: int = 3000, **overrides) -> Ruleset:
    """The classic five-die Greed ruleset."""
    options = {
        "die_count": 5,
        "scoring": ScoringTable(),
        "target_score": target_score,
        "minimum_to_bank": 300,
        "opening_minimum_only": True,
    }
    options.update(overrides)
    return Ruleset(**options)
