"""
Greed Console - Persistence Gateway

Converts a Session to a versioned SessionDocument and back.

A document stores the ruleset, the starting roster and every action in the
history (including undone ones), with the dice each roll actually produced.
Loading replays those actions through the reducer, so a loaded session is
rebuilt by the same rules that created it. Anything that does not replay
cleanly, or disagrees with the recorded summary, fails validation: no
partially loaded Session is ever returned.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from src.engine.base import DiceSet
from src.engine.errors import (
    ConfigurationError,
    RuleViolation,
    UnsupportedVersion,
    ValidationError,
)
from src.engine.ruleset import Ruleset, ScoringTable
from src.persistence.models import (
    ActionRecord,
    PlayerRecord,
    PlayerSummary,
    RulesetRecord,
    ScoringTableRecord,
    SessionDocument,
    StraightRecord,
    SummaryRecord,
)
from src.session.history import History, HistoryEntry
from src.session.models import (
    Action,
    GameState,
    PlayerStatus,
    Session,
    SessionStatus,
)
from src.session.reducer import apply_action, initial_state

logger = logging.getLogger(__name__)

CURRENT_VERSION = 1
SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})


# -- Session -> document -----------------------------------------------------

def _ruleset_record(ruleset: Ruleset) -> RulesetRecord:
    table = ruleset.scoring
    return RulesetRecord(
        die_count=ruleset.die_count,
        scoring=ScoringTableRecord(
            singles=dict(table.singles),
            triples=dict(table.triples),
            straights=[
                StraightRecord(faces=list(faces), points=points)
                for faces, points in table.straights
            ],
            doubling_sets=table.doubling_sets,
        ),
        target_score=ruleset.target_score,
        minimum_to_bank=ruleset.minimum_to_bank,
        opening_minimum_only=ruleset.opening_minimum_only,
        tiebreak=ruleset.tiebreak,
        hot_dice_reroll=ruleset.hot_dice_reroll,
        hot_dice_forces_roll=ruleset.hot_dice_forces_roll,
        optimal_selection=ruleset.optimal_selection,
        preference=list(ruleset.preference),
        min_players=ruleset.min_players,
        max_players=ruleset.max_players,
    )


def _action_record(action: Action) -> ActionRecord:
    return ActionRecord(
        kind=action.kind,
        player_id=action.player_id,
        dice=list(action.dice.values) if action.dice is not None else None,
        name=action.name,
    )


def _summary(state: GameState) -> SummaryRecord:
    return SummaryRecord(
        round=state.round,
        turn_index=state.turn_index,
        status=state.status,
        winner_id=state.winner_id,
        players=[
            PlayerSummary(id=p.player_id, name=p.name, banked=p.banked, status=p.status)
            for p in state.players
        ],
    )


def save(session: Session) -> SessionDocument:
    """Build the save document for a session."""
    history = session.history
    return SessionDocument(
        version=CURRENT_VERSION,
        session_id=session.session_id,
        created_at=session.created_at,
        saved_at=datetime.now(timezone.utc),
        ruleset=_ruleset_record(session.ruleset),
        players=[
            PlayerRecord(id=p.player_id, name=p.name) for p in history.initial.players
        ],
        history=[_action_record(entry.action) for entry in history.entries],
        cursor=history.cursor,
        summary=_summary(session.state),
    )


def dumps(session: Session, indent: int | None = 2) -> str:
    """Serialize a session to JSON text."""
    return save(session).model_dump_json(indent=indent)


# -- Document -> session -----------------------------------------------------

def _check_version(version: Any) -> None:
    if isinstance(version, bool) or version not in SUPPORTED_VERSIONS:
        raise UnsupportedVersion(version, SUPPORTED_VERSIONS)


def _field_path(exc: PydanticValidationError) -> str | None:
    errors = exc.errors()
    if not errors:
        return None
    return ".".join(str(part) for part in errors[0]["loc"]) or None


def _parse(document: SessionDocument | Mapping[str, Any] | str | bytes) -> SessionDocument:
    if isinstance(document, SessionDocument):
        _check_version(document.version)
        return document

    if isinstance(document, (str, bytes)):
        try:
            document = json.loads(document)
        except ValueError as exc:
            raise ValidationError(f"Save file is not valid JSON: {exc}") from exc

    if not isinstance(document, Mapping):
        raise ValidationError("Save document must be a JSON object.")

    _check_version(document.get("version"))
    try:
        return SessionDocument.model_validate(document)
    except PydanticValidationError as exc:
        raise ValidationError(
            f"Save document failed validation: {exc.errors()[0]['msg']}",
            field=_field_path(exc),
        ) from exc


def _ruleset_from_record(record: RulesetRecord) -> Ruleset:
    try:
        return Ruleset(
            die_count=record.die_count,
            scoring=ScoringTable(
                singles=record.scoring.singles,
                triples=record.scoring.triples,
                straights=tuple(
                    (tuple(s.faces), s.points) for s in record.scoring.straights
                ),
                doubling_sets=record.scoring.doubling_sets,
            ),
            target_score=record.target_score,
            minimum_to_bank=record.minimum_to_bank,
            opening_minimum_only=record.opening_minimum_only,
            tiebreak=record.tiebreak,
            hot_dice_reroll=record.hot_dice_reroll,
            hot_dice_forces_roll=record.hot_dice_forces_roll,
            optimal_selection=record.optimal_selection,
            preference=tuple(record.preference),
            min_players=record.min_players,
            max_players=record.max_players,
        )
    except ConfigurationError as exc:
        raise ValidationError(
            f"Ruleset is invalid: {exc.message}",
            field=f"ruleset.{exc.field}" if exc.field else "ruleset",
        ) from exc


def _check_summary(summary: SummaryRecord, ruleset: Ruleset) -> None:
    """Reject summaries that no legal game could have produced."""
    ids = [p.id for p in summary.players]
    if summary.turn_index >= len(summary.players):
        raise ValidationError(
            f"Turn index {summary.turn_index} has no matching seat.",
            field="summary.turn_index",
        )

    if summary.status is SessionStatus.FINISHED:
        if summary.winner_id not in ids:
            raise ValidationError(
                "Finished session does not name a seated winner.", field="summary.winner_id"
            )
        winner = summary.players[ids.index(summary.winner_id)]
        if winner.banked < ruleset.target_score:
            raise ValidationError(
                f"Winner has {winner.banked} points, below the target of "
                f"{ruleset.target_score}.",
                field="summary.winner_id",
            )
        return

    if summary.winner_id is not None:
        raise ValidationError(
            f"A {summary.status.value} session cannot have a winner.",
            field="summary.winner_id",
        )

    if summary.status is SessionStatus.IN_PROGRESS:
        seats = [i for i, p in enumerate(summary.players) if p.status is PlayerStatus.ACTIVE]
        at_round_start = bool(seats) and summary.turn_index == seats[0]
        over_target = [
            p.name for p in summary.players
            if p.status is PlayerStatus.ACTIVE and p.banked >= ruleset.target_score
        ]
        if at_round_start and over_target:
            raise ValidationError(
                f"{', '.join(over_target)} reached the target of {ruleset.target_score} "
                "before a completed round, but no win was recorded.",
                field="summary.players",
            )


def _action_from_record(record: ActionRecord, index: int) -> Action:
    try:
        dice = DiceSet.from_sequence(record.dice) if record.dice is not None else None
    except ConfigurationError as exc:
        raise ValidationError(exc.message, field=f"history.{index}.dice") from exc
    return Action(kind=record.kind, player_id=record.player_id, dice=dice, name=record.name)


def _replay(
    document: SessionDocument, ruleset: Ruleset
) -> tuple[GameState, list[HistoryEntry]]:
    try:
        state = initial_state(
            [p.name for p in document.players],
            ruleset,
            player_ids=[p.id for p in document.players],
        )
    except ConfigurationError as exc:
        raise ValidationError(f"Player list is invalid: {exc.message}", field="players") from exc

    initial = state
    entries: list[HistoryEntry] = []
    for index, record in enumerate(document.history):
        action = _action_from_record(record, index)
        try:
            state = apply_action(state, action, ruleset)
        except (RuleViolation, ConfigurationError) as exc:
            raise ValidationError(
                f"History entry {index} ({record.kind.value}) cannot be replayed: {exc}",
                field=f"history.{index}",
            ) from exc
        entries.append(HistoryEntry(action=action, state=state))
    return initial, entries


def load(document: SessionDocument | Mapping[str, Any] | str | bytes) -> Session:
    """
    Rebuild a Session from a save document.

    Args:
        document: A SessionDocument, its JSON-compatible dict, or JSON text

    Raises:
        UnsupportedVersion: If the document format version is unknown
        ValidationError: If the document is malformed or inconsistent
    """
    parsed = _parse(document)
    ruleset = _ruleset_from_record(parsed.ruleset)
    _check_summary(parsed.summary, ruleset)

    if parsed.cursor > len(parsed.history):
        raise ValidationError(
            f"Cursor {parsed.cursor} is past the {len(parsed.history)} history entries.",
            field="cursor",
        )

    initial, entries = _replay(parsed, ruleset)
    history = History(initial, entries, parsed.cursor)

    if _summary(history.current) != parsed.summary:
        raise ValidationError(
            "Recorded summary does not match the replayed history.", field="summary"
        )

    logger.info(
        "Loaded session %s (%d history entries, cursor %d)",
        parsed.session_id,
        len(entries),
        parsed.cursor,
    )
    return Session(
        session_id=parsed.session_id,
        ruleset=ruleset,
        history=history,
        created_at=parsed.created_at,
    )


def loads(text: str | bytes) -> Session:
    """Rebuild a Session from JSON text. See `load`."""
    return load(text)
