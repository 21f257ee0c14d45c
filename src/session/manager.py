"""
Greed Console - Session Manager

Owns the active Session and is the only way to change it. Every mutating
call applies at most one action, records it in history, notifies
subscribers and returns a fresh SessionSnapshot.

Calls are serialized with a non-blocking lock: an action that arrives while
another is being applied fails with SessionBusy instead of waiting.
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import replace
from typing import Callable, Iterator, Sequence

from src.engine.base import ActionKind
from src.engine.dice import DiceRoller, RandomDiceRoller
from src.engine.errors import Rule, RuleViolation, SessionBusy
from src.engine.ruleset import Ruleset
from src.engine.turn import TurnEngine
from src.session.events import EventPayload, SessionEvent, classify_transition
from src.session.history import History
from src.session.models import Action, GameState, Session
from src.session.reducer import apply_action, initial_state, require_open_turn
from src.session.snapshot import SessionSnapshot, build_snapshot

logger = logging.getLogger(__name__)

Listener = Callable[[EventPayload], None]


class SessionManager:
    """Coordinates one session: actions, undo/redo and event delivery.

    Args:
        roller: Dice source for ROLL actions that arrive without dice.
    """

    def __init__(self, roller: DiceRoller | None = None) -> None:
        self._roller = roller or RandomDiceRoller()
        self._session: Session | None = None
        self._lock = threading.Lock()
        self._listeners: list[Listener] = []

    @property
    def session(self) -> Session | None:
        """The active session, if any."""
        return self._session

    # -- Subscriptions ---------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for session events.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, events: Sequence[EventPayload]) -> None:
        for payload in events:
            logger.debug("Session %s: %s", payload.session_id, payload.event.name)
            for listener in list(self._listeners):
                try:
                    listener(payload)
                except Exception:
                    logger.exception("Listener failed handling %s", payload.event.name)

    # -- Lifecycle -------------------------------------------------------

    def start_session(
        self,
        players: Sequence[str],
        ruleset: Ruleset,
        session_id: str | None = None,
    ) -> SessionSnapshot:
        """Seat the players and open the first turn.

        Any previous session is discarded.

        Raises:
            ConfigurationError: If the roster does not fit the ruleset.
            SessionBusy: If another call is in progress.
        """
        with self._exclusive():
            state = initial_state(players, ruleset)
            session = Session(
                session_id=session_id or uuid.uuid4().hex,
                ruleset=ruleset,
                history=History(state),
            )
            self._session = session
            logger.info(
                "Started session %s with %d players (target %d)",
                session.session_id,
                len(state.players),
                ruleset.target_score,
            )
            snapshot = build_snapshot(session)
        self._emit([EventPayload(
            SessionEvent.SESSION_STARTED,
            session.session_id,
            data={"players": [p.name for p in state.players]},
        )])
        return snapshot

    def attach(self, session: Session) -> SessionSnapshot:
        """Adopt an existing session, typically one just loaded from a save."""
        with self._exclusive():
            self._session = session
            logger.info(
                "Attached session %s at history entry %d of %d",
                session.session_id,
                session.history.cursor,
                len(session.history),
            )
            snapshot = build_snapshot(session)
        self._emit([EventPayload(SessionEvent.SESSION_LOADED, session.session_id)])
        return snapshot

    def close_session(self) -> Session | None:
        """Discard the active session and return it (for a final save)."""
        with self._exclusive():
            session, self._session = self._session, None
        if session is not None:
            logger.info("Closed session %s", session.session_id)
        return session

    def snapshot(self) -> SessionSnapshot:
        """Current read-only view.

        Raises:
            RuleViolation: If no session is active.
        """
        return build_snapshot(self._require_session())

    # -- Actions ---------------------------------------------------------

    def submit_action(self, action: Action) -> SessionSnapshot:
        """Apply one action to the session.

        Raises:
            RuleViolation: If the action is illegal; the session is unchanged.
            SessionBusy: If another call is in progress.
        """
        with self._exclusive():
            session = self._require_session()
            before = session.state
            action = self._with_dice(before, action, session.ruleset)
            after = apply_action(before, action, session.ruleset)
            session.history.record(action, after)
            logger.debug(
                "Session %s applied %s (entry %d)",
                session.session_id,
                action.kind.value,
                session.history.cursor,
            )
            if after.winner_id is not None and before.winner_id is None:
                winner = after.player(after.winner_id)
                logger.info(
                    "Session %s won by %s with %d points",
                    session.session_id,
                    winner.name if winner else after.winner_id,
                    winner.banked if winner else 0,
                )
            snapshot = build_snapshot(session)
            events = classify_transition(session.session_id, action, before, after)
        self._emit(events)
        return snapshot

    def end_session(self) -> SessionSnapshot:
        """End the game early: the open turn is abandoned and no one wins."""
        return self.submit_action(Action.end())

    def undo(self) -> SessionSnapshot:
        """Step back one action.

        Raises:
            RuleViolation: If there is nothing to undo.
        """
        return self._move_cursor(SessionEvent.UNDONE)

    def redo(self) -> SessionSnapshot:
        """Re-apply the most recently undone action.

        Raises:
            RuleViolation: If there is nothing to redo.
        """
        return self._move_cursor(SessionEvent.REDONE)

    # -- Internals -------------------------------------------------------

    def _move_cursor(self, event: SessionEvent) -> SessionSnapshot:
        with self._exclusive():
            session = self._require_session()
            if event is SessionEvent.UNDONE:
                session.history.undo()
            else:
                session.history.redo()
            logger.info(
                "Session %s %s to entry %d",
                session.session_id,
                event.name.lower(),
                session.history.cursor,
            )
            snapshot = build_snapshot(session)
        self._emit([EventPayload(
            event, session.session_id, data={"cursor": session.history.cursor}
        )])
        return snapshot

    def _with_dice(self, state: GameState, action: Action, ruleset: Ruleset) -> Action:
        """Attach rolled dice to a ROLL action that arrived without any."""
        if action.kind is not ActionKind.ROLL or action.dice is not None:
            return action
        turn = require_open_turn(state, action)
        TurnEngine.check_roll(turn)
        dice = self._roller.roll(TurnEngine.dice_to_roll(turn), ruleset)
        return replace(action, dice=dice)

    def _require_session(self) -> Session:
        if self._session is None:
            raise RuleViolation(Rule.NO_SESSION, "No session is active.")
        return self._session

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise SessionBusy()
        try:
            yield
        finally:
            self._lock.release()
