"""
Greed Console - Session Event Definitions

Event types and payloads for session state changes, so a front end (toasts,
sounds, autosave) can react without diffing snapshots itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from src.engine.base import ActionKind, TurnPhase
from src.session.models import Action, GameState, SessionStatus


class SessionEvent(Enum):
    """Events that can occur during a session."""

    SESSION_STARTED = auto()
    SESSION_LOADED = auto()
    DICE_ROLLED = auto()
    HOT_DICE = auto()
    TURN_BANKED = auto()
    PLAYER_BUST = auto()
    TURN_PASSED = auto()
    TURN_ADVANCED = auto()
    ROUND_STARTED = auto()
    PLAYER_RENAMED = auto()
    PLAYER_REMOVED = auto()
    GAME_WON = auto()
    SESSION_ENDED = auto()
    UNDONE = auto()
    REDONE = auto()


# Events after which the table has reached a natural resting point.
AUTOSAVE_EVENTS: frozenset[SessionEvent] = frozenset({
    SessionEvent.SESSION_STARTED,
    SessionEvent.TURN_BANKED,
    SessionEvent.PLAYER_BUST,
    SessionEvent.TURN_PASSED,
    SessionEvent.PLAYER_REMOVED,
    SessionEvent.PLAYER_RENAMED,
    SessionEvent.GAME_WON,
    SessionEvent.SESSION_ENDED,
    SessionEvent.UNDONE,
    SessionEvent.REDONE,
})


@dataclass
class EventPayload:
    """Wrapper for session event data."""

    event: SessionEvent
    session_id: str
    player_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


_ACTION_EVENT_MAP: dict[ActionKind, SessionEvent] = {
    ActionKind.BANK: SessionEvent.TURN_BANKED,
    ActionKind.PASS: SessionEvent.TURN_PASSED,
    ActionKind.RENAME: SessionEvent.PLAYER_RENAMED,
    ActionKind.REMOVE: SessionEvent.PLAYER_REMOVED,
    ActionKind.END: SessionEvent.SESSION_ENDED,
}


def classify_transition(
    session_id: str,
    action: Action,
    before: GameState,
    after: GameState,
) -> list[EventPayload]:
    """Determine the events produced by applying `action` to `before`."""
    events: list[EventPayload] = []
    actor = before.current_turn.player_id if before.current_turn else None
    closed = after.turns[-1] if len(after.turns) > len(before.turns) else None

    if action.kind is ActionKind.ROLL:
        turn = closed if closed is not None else after.current_turn
        last = turn.last_roll if turn is not None else None
        events.append(EventPayload(
            SessionEvent.DICE_ROLLED,
            session_id,
            actor,
            {
                "dice": list(last.dice.values) if last else [],
                "points": last.result.points if last else 0,
            },
        ))
        if closed is not None and closed.phase is TurnPhase.BUSTED:
            events.append(EventPayload(
                SessionEvent.PLAYER_BUST, session_id, actor, {"forfeited": closed.forfeited}
            ))
        elif last is not None and last.result.is_hot_dice:
            events.append(EventPayload(SessionEvent.HOT_DICE, session_id, actor))

    elif action.kind in _ACTION_EVENT_MAP:
        player_id = action.player_id if action.kind in (
            ActionKind.RENAME, ActionKind.REMOVE
        ) else actor
        data: dict[str, Any] = {}
        if action.kind is ActionKind.BANK and closed is not None:
            player = after.player(closed.player_id)
            data = {"points": closed.points_banked, "total": player.banked if player else 0}
        elif action.kind is ActionKind.RENAME:
            data = {"name": action.name}
        events.append(EventPayload(_ACTION_EVENT_MAP[action.kind], session_id, player_id, data))

    if after.status is SessionStatus.FINISHED and before.status is not SessionStatus.FINISHED:
        winner = after.player(after.winner_id) if after.winner_id else None
        events.append(EventPayload(
            SessionEvent.GAME_WON,
            session_id,
            after.winner_id,
            {"score": winner.banked if winner else 0},
        ))
        return events

    if after.round > before.round:
        events.append(EventPayload(
            SessionEvent.ROUND_STARTED, session_id, data={"round": after.round}
        ))
    if (
        after.current_turn is not None
        and after.current_turn.player_id != actor
    ):
        events.append(EventPayload(
            SessionEvent.TURN_ADVANCED, session_id, after.current_turn.player_id
        ))

    return events
