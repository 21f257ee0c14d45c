"""
Greed Console - Error Taxonomy

Every failure the core reports derives from GreedError. Each exception
carries structured detail (rule code, field name) so a front end can build
its own message without parsing strings.
"""

from enum import Enum
from typing import Any


class Rule(Enum):
    """Rules a player action can break."""
    TURN_CLOSED = "turn_closed"
    NOT_ROLLED = "not_rolled"
    NOTHING_TO_BANK = "nothing_to_bank"
    BELOW_MINIMUM = "below_minimum"
    MUST_ROLL = "must_roll"
    NO_DICE_LEFT = "no_dice_left"
    WRONG_DICE_COUNT = "wrong_dice_count"
    MISSING_DICE = "missing_dice"
    NOT_YOUR_TURN = "not_your_turn"
    UNKNOWN_PLAYER = "unknown_player"
    TOO_FEW_PLAYERS = "too_few_players"
    INVALID_NAME = "invalid_name"
    SESSION_OVER = "session_over"
    NO_SESSION = "no_session"
    NOTHING_TO_UNDO = "nothing_to_undo"
    NOTHING_TO_REDO = "nothing_to_redo"


class GreedError(Exception):
    """Base class for all errors raised by the game core."""


class ConfigurationError(GreedError, ValueError):
    """Invalid ruleset or player setup. Fatal to session creation."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class RuleViolation(GreedError):
    """An illegal player action. The session is left untouched."""

    def __init__(
        self,
        rule: Rule,
        message: str,
        **details: Any,
    ) -> None:
        super().__init__(message)
        self.rule = rule
        self.message = message
        self.details = details


class SessionBusy(GreedError):
    """Another action is still being applied to the session."""

    def __init__(self, message: str = "Session is busy applying another action.") -> None:
        super().__init__(message)
        self.message = message


class ValidationError(GreedError, ValueError):
    """A persisted document is corrupt or internally inconsistent."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class UnsupportedVersion(ValidationError):
    """A persisted document uses a format version this build cannot read."""

    def __init__(self, version: Any, supported: frozenset[int]) -> None:
        super().__init__(
            f"Unsupported save format version {version!r}; "
            f"supported versions are {sorted(supported)}.",
            field="version",
        )
        self.version = version
        self.supported = supported
