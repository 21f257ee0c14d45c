"""
Greed Console - Game Engine Base Classes

This module defines the foundational data structures and enums used throughout
the game engine. All classes are immutable (frozen dataclasses) so that turn
and session states can be shared freely between history entries.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Sequence

from src.engine.errors import ConfigurationError

DIE_FACES = 6

_COUNT_WORDS = {
    3: "Three", 4: "Four", 5: "Five", 6: "Six",
    7: "Seven", 8: "Eight", 9: "Nine", 10: "Ten",
}


class ScoringCategory(Enum):
    """Categories of scoring combinations."""
    SINGLE = "single"        # A lone 1 or 5 (per scoring table)
    SET = "set"              # Three or more of a kind
    STRAIGHT = "straight"    # Run of consecutive faces


class ActionKind(Enum):
    """Actions a front end can submit against a session."""
    ROLL = "roll"
    BANK = "bank"
    PASS = "pass"
    RENAME = "rename"
    REMOVE = "remove"
    END = "end"


class TurnPhase(Enum):
    """Phases of a single player's turn."""
    NOT_STARTED = auto()
    SCORED = auto()          # Hot dice: the full pool may be rolled again
    BANK_DECISION = auto()   # Bank, or roll the dice that did not score
    BANKED = auto()
    BUSTED = auto()
    ABANDONED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (TurnPhase.BANKED, TurnPhase.BUSTED, TurnPhase.ABANDONED)


@dataclass(frozen=True)
class ScoringCombination:
    """
    A single scoring group within a roll.

    Attributes:
        category: The type of scoring combination
        faces: The die faces consumed by this group, in ascending order
        points: Points awarded for this combination
    """
    category: ScoringCategory
    faces: tuple[int, ...]
    points: int

    @property
    def size(self) -> int:
        return len(self.faces)

    @property
    def description(self) -> str:
        """Human-readable description, e.g. 'Three 5s'."""
        if self.category is ScoringCategory.SINGLE:
            return f"Single {self.faces[0]}"
        if self.category is ScoringCategory.SET:
            word = _COUNT_WORDS.get(self.size, str(self.size))
            return f"{word} {self.faces[0]}s"
        return f"Straight ({'-'.join(str(f) for f in self.faces)})"


@dataclass(frozen=True)
class ScoreResult:
    """
    Complete scoring result for a dice set.

    Attributes:
        points: Total points scored
        combinations: Scoring groups selected, in preference order
        scoring_indices: Indices of dice that belong to some group
        is_bust: Whether no dice scored
        is_hot_dice: Whether every die scored
    """
    points: int
    combinations: tuple[ScoringCombination, ...]
    scoring_indices: frozenset[int]
    is_bust: bool = False
    is_hot_dice: bool = False

    @property
    def scoring_count(self) -> int:
        """Number of dice that contributed to the score."""
        return len(self.scoring_indices)

    def __str__(self) -> str:
        if self.is_bust:
            return "BUST! No scoring dice."
        lines = [f"Total: {self.points} points"]
        for item in self.combinations:
            lines.append(f"  - {item.description}: {item.points}")
        return "\n".join(lines)


@dataclass(frozen=True)
class DiceSet:
    """
    Immutable representation of one throw of dice.

    Attributes:
        values: Tuple of die face values, in the order they were thrown
    """
    values: tuple[int, ...]

    def __post_init__(self) -> None:
        """Validate dice values are within valid range."""
        object.__setattr__(self, "values", tuple(self.values))
        for value in self.values:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(
                    f"Die value {value!r} must be an integer.", field="dice"
                )
            if not (1 <= value <= DIE_FACES):
                raise ConfigurationError(
                    f"Invalid die value {value}. Must be between 1 and {DIE_FACES}.",
                    field="dice",
                )

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index: int) -> int:
        return self.values[index]

    def __iter__(self):
        return iter(self.values)

    @property
    def counts(self) -> tuple[int, ...]:
        """Number of dice showing each face, indexed 0 for face 1."""
        tally = [0] * DIE_FACES
        for value in self.values:
            tally[value - 1] += 1
        return tuple(tally)

    @classmethod
    def from_sequence(cls, values: Sequence[int]) -> "DiceSet":
        """Create a DiceSet from any sequence type."""
        return cls(values=tuple(values))
