"""
Greed Console - Session Snapshots

Read-only views handed to the front end after every call, so it can render
the table without re-deriving any game rule.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.engine.base import ActionKind, TurnPhase
from src.engine.turn import TurnEngine
from src.session.models import PlayerStatus, Session, SessionStatus


@dataclass(frozen=True)
class PlayerView:
    player_id: str
    name: str
    seat: int
    banked: int
    status: PlayerStatus
    is_current: bool


@dataclass(frozen=True)
class TurnView:
    """
    Live view of the open turn.

    Attributes:
        player_id: Player taking the turn
        phase: Current turn phase
        unbanked: Points at stake this turn
        dice_remaining: Dice the next roll will use
        roll_count: Throws made so far
        last_dice: Faces of the most recent throw
        last_points: Points scored by the most recent throw
        scoring_indices: Dice of the most recent throw that scored
        hot_dice: Whether the full pool is available again
    """
    player_id: str
    phase: TurnPhase
    unbanked: int
    dice_remaining: int
    roll_count: int
    last_dice: tuple[int, ...] = ()
    last_points: int = 0
    scoring_indices: frozenset[int] = frozenset()
    hot_dice: bool = False


@dataclass(frozen=True)
class SessionSnapshot:
    """Everything a front end needs to draw the table."""
    session_id: str
    status: SessionStatus
    round: int
    target_score: int
    minimum_to_bank: int
    players: tuple[PlayerView, ...]
    current_player_id: str | None
    turn: TurnView | None
    legal_actions: frozenset[ActionKind]
    can_undo: bool
    can_redo: bool
    winner_id: str | None

    @property
    def current_player(self) -> PlayerView | None:
        for player in self.players:
            if player.is_current:
                return player
        return None

    def player(self, player_id: str) -> PlayerView | None:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None


def build_snapshot(session: Session) -> SessionSnapshot:
    """Derive the read-only view of a session at its history cursor."""
    state = session.state
    ruleset = session.ruleset
    current = state.current_player

    players = tuple(
        PlayerView(
            player_id=p.player_id,
            name=p.name,
            seat=seat,
            banked=p.banked,
            status=p.status,
            is_current=current is not None and p.player_id == current.player_id,
        )
        for seat, p in enumerate(state.players)
    )

    turn_view = None
    legal: set[ActionKind] = {ActionKind.RENAME}
    turn = state.current_turn
    if turn is not None and current is not None:
        last = turn.last_roll
        turn_view = TurnView(
            player_id=turn.player_id,
            phase=turn.phase,
            unbanked=turn.unbanked,
            dice_remaining=turn.dice_remaining,
            roll_count=len(turn.rolls),
            last_dice=last.dice.values if last else (),
            last_points=last.result.points if last else 0,
            scoring_indices=last.result.scoring_indices if last else frozenset(),
            hot_dice=turn.is_hot_dice,
        )
        legal |= TurnEngine.legal_actions(turn, current.banked, ruleset)

    if not state.is_over:
        legal.add(ActionKind.END)
        if len(state.active_players) > ruleset.min_players:
            legal.add(ActionKind.REMOVE)

    return SessionSnapshot(
        session_id=session.session_id,
        status=state.status,
        round=state.round,
        target_score=ruleset.target_score,
        minimum_to_bank=ruleset.minimum_to_bank,
        players=players,
        current_player_id=current.player_id if current else None,
        turn=turn_view,
        legal_actions=frozenset(legal),
        can_undo=session.history.can_undo,
        can_redo=session.history.can_redo,
        winner_id=state.winner_id,
    )
