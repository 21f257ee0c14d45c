"""
Greed Console Session Layer.

Players, turn order, rounds, win detection and undo/redo history on top of
the game engine.
"""

from src.session.events import AUTOSAVE_EVENTS, EventPayload, SessionEvent
from src.session.history import History, HistoryEntry
from src.session.manager import SessionManager
from src.session.models import (
    Action,
    GameState,
    Player,
    PlayerStatus,
    Session,
    SessionStatus,
)
from src.session.reducer import apply_action, initial_state
from src.session.snapshot import PlayerView, SessionSnapshot, TurnView, build_snapshot

__all__ = [
    "AUTOSAVE_EVENTS",
    "Action",
    "EventPayload",
    "GameState",
    "History",
    "HistoryEntry",
    "Player",
    "PlayerStatus",
    "PlayerView",
    "Session",
    "SessionEvent",
    "SessionManager",
    "SessionSnapshot",
    "SessionStatus",
    "TurnView",
    "apply_action",
    "build_snapshot",
    "initial_state",
]
