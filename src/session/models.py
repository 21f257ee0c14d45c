"""
Greed Console - Session Models

Immutable values describing players, actions and the state of the table,
plus the Session aggregate that ties them to a ruleset and a history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from src.engine.base import ActionKind, DiceSet
from src.engine.ruleset import Ruleset
from src.engine.turn import Turn
from src.session.history import History


class PlayerStatus(Enum):
    """Standing of a player within a session."""
    ACTIVE = "active"
    ELIMINATED = "eliminated"   # Removed mid-session; keeps its seat for history
    WINNER = "winner"


class SessionStatus(Enum):
    """Lifecycle of a session."""
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"       # Someone won
    CLOSED = "closed"           # Ended early without a winner


@dataclass(frozen=True)
class Player:
    """
    A seated player.

    Attributes:
        player_id: Stable identifier assigned at creation
        name: Display name
        banked: Permanent score
        status: Standing in the session
    """
    player_id: str
    name: str
    banked: int = 0
    status: PlayerStatus = PlayerStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status is PlayerStatus.ACTIVE


@dataclass(frozen=True)
class Action:
    """
    A request submitted to the session.

    For ROLL, BANK and PASS, `player_id` optionally names the acting player.
    For RENAME and REMOVE it names the target. ROLL may carry the dice; when
    it does not, the session manager rolls them.
    """
    kind: ActionKind
    player_id: str | None = None
    dice: DiceSet | None = None
    name: str | None = None

    @classmethod
    def roll(cls, dice=None, player_id: str | None = None) -> Action:
        if dice is not None and not isinstance(dice, DiceSet):
            dice = DiceSet.from_sequence(dice)
        return cls(ActionKind.ROLL, player_id=player_id, dice=dice)

    @classmethod
    def bank(cls, player_id: str | None = None) -> Action:
        return cls(ActionKind.BANK, player_id=player_id)

    @classmethod
    def pass_turn(cls, player_id: str | None = None) -> Action:
        return cls(ActionKind.PASS, player_id=player_id)

    @classmethod
    def rename(cls, player_id: str, name: str) -> Action:
        return cls(ActionKind.RENAME, player_id=player_id, name=name)

    @classmethod
    def remove(cls, player_id: str) -> Action:
        return cls(ActionKind.REMOVE, player_id=player_id)

    @classmethod
    def end(cls) -> Action:
        return cls(ActionKind.END)


@dataclass(frozen=True)
class GameState:
    """
    Complete state of the table at one point in time.

    Attributes:
        players: Roster in seating order (seat order is turn order)
        turn_index: Seat of the player whose turn is open (or last closed)
        round: Round counter, starting at 1
        current_turn: The open turn, or None once the session is over
        turns: Closed turns, oldest first
        status: Session lifecycle status
        winner_id: Winning player, once finished
    """
    players: tuple[Player, ...]
    turn_index: int = 0
    round: int = 1
    current_turn: Turn | None = None
    turns: tuple[Turn, ...] = ()
    status: SessionStatus = SessionStatus.IN_PROGRESS
    winner_id: str | None = None

    @property
    def is_over(self) -> bool:
        return self.status is not SessionStatus.IN_PROGRESS

    @property
    def active_players(self) -> tuple[Player, ...]:
        return tuple(p for p in self.players if p.is_active or p.status is PlayerStatus.WINNER)

    @property
    def current_player(self) -> Player | None:
        if self.current_turn is None:
            return None
        return self.players[self.turn_index]

    def player(self, player_id: str) -> Player | None:
        for candidate in self.players:
            if candidate.player_id == player_id:
                return candidate
        return None

    def seat_of(self, player_id: str) -> int | None:
        for seat, candidate in enumerate(self.players):
            if candidate.player_id == player_id:
                return seat
        return None


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Session:
    """
    The aggregate root: one game from "New Game" to close.

    The session is owned by a SessionManager and only ever changed through it.
    """
    session_id: str
    ruleset: Ruleset
    history: History
    created_at: datetime = field(default_factory=_now)

    @property
    def state(self) -> GameState:
        """State at the history cursor."""
        return self.history.current

    @property
    def players(self) -> tuple[Player, ...]:
        return self.state.players

    @property
    def status(self) -> SessionStatus:
        return self.state.status
