"""
Greed Console Game Engine.

Pure Python game logic with zero UI/storage dependencies.
Handles dice rolling, scoring, bust detection, hot dice and turn transitions.
"""

from src.engine.base import (
    ActionKind,
    DiceSet,
    ScoreResult,
    ScoringCategory,
    ScoringCombination,
    TurnPhase,
)
from src.engine.dice import (
    DiceRoller,
    RandomDiceRoller,
    ScriptedDiceRoller,
    legal_combinations,
    roll,
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
from src.engine.ruleset import Ruleset, ScoringTable, TiebreakPolicy, standard_greed
from src.engine.scoring import ScoringEngine, score
from src.engine.turn import Roll, Turn, TurnEngine

__all__ = [
    # Data Classes
    "DiceSet",
    "Roll",
    "ScoreResult",
    "ScoringCombination",
    "Turn",
    # Enums
    "ActionKind",
    "Rule",
    "ScoringCategory",
    "TiebreakPolicy",
    "TurnPhase",
    # Configuration
    "Ruleset",
    "ScoringTable",
    "standard_greed",
    # Dice
    "DiceRoller",
    "RandomDiceRoller",
    "ScriptedDiceRoller",
    "legal_combinations",
    "roll",
    # Engines
    "ScoringEngine",
    "TurnEngine",
    "score",
    # Errors
    "ConfigurationError",
    "GreedError",
    "RuleViolation",
    "SessionBusy",
    "UnsupportedVersion",
    "ValidationError",
]
