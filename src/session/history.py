"""
Greed Console - Session History

An append-only log of (action, resulting state) entries plus a cursor.
Undo and redo only move the cursor. Recording a new action while the cursor
sits behind the end of the log discards the entries past it: history is
linear, not a tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from src.engine.errors import Rule, RuleViolation

if TYPE_CHECKING:
    from src.session.models import Action, GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    """One applied action and the state it produced."""
    action: Action
    state: GameState


class History:
    """Linear undo/redo log over immutable game states."""

    def __init__(
        self,
        initial: GameState,
        entries: Iterable[HistoryEntry] = (),
        cursor: int | None = None,
    ) -> None:
        self._initial = initial
        self._entries: list[HistoryEntry] = list(entries)
        if cursor is None:
            cursor = len(self._entries)
        if not (0 <= cursor <= len(self._entries)):
            raise ValueError(
                f"Cursor {cursor} is outside the history of {len(self._entries)} entries."
            )
        self._cursor = cursor

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, History):
            return NotImplemented
        return (
            self._initial == other._initial
            and self._entries == other._entries
            and self._cursor == other._cursor
        )

    def __repr__(self) -> str:
        return f"History(entries={len(self._entries)}, cursor={self._cursor})"

    @property
    def initial(self) -> GameState:
        return self._initial

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        """Every entry, including any redo branch past the cursor."""
        return tuple(self._entries)

    @property
    def cursor(self) -> int:
        """Number of entries currently applied."""
        return self._cursor

    @property
    def current(self) -> GameState:
        if self._cursor == 0:
            return self._initial
        return self._entries[self._cursor - 1].state

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries)

    @property
    def redo_depth(self) -> int:
        """Entries that redo could re-apply."""
        return len(self._entries) - self._cursor

    def record(self, action: Action, state: GameState) -> HistoryEntry:
        """Append an entry at the cursor, discarding any redo branch first."""
        if self.can_redo:
            logger.info("Discarding %d undone history entries", self.redo_depth)
            del self._entries[self._cursor:]
        entry = HistoryEntry(action=action, state=state)
        self._entries.append(entry)
        self._cursor = len(self._entries)
        return entry

    def undo(self) -> GameState:
        """
        Step the cursor back one entry.

        Raises:
            RuleViolation: If nothing has been applied yet
        """
        if not self.can_undo:
            raise RuleViolation(Rule.NOTHING_TO_UNDO, "Nothing to undo.")
        self._cursor -= 1
        return self.current

    def redo(self) -> GameState:
        """
        Step the cursor forward one entry.

        Raises:
            RuleViolation: If the cursor is already at the end of the log
        """
        if not self.can_redo:
            raise RuleViolation(Rule.NOTHING_TO_REDO, "Nothing to redo.")
        self._cursor += 1
        return self.current
