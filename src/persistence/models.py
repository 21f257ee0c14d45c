"""
Greed Console - Save Document Models

Pydantic models that mirror the on-disk save document.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.engine.base import ActionKind, ScoringCategory
from src.engine.ruleset import TiebreakPolicy
from src.engine.validators import MAX_NAME_LENGTH
from src.session.models import PlayerStatus, SessionStatus


class StraightRecord(BaseModel):
    """One straight definition in the scoring table."""

    faces: list[int]
    points: int


class ScoringTableRecord(BaseModel):
    """Mirrors `ScoringTable`."""

    singles: dict[int, int]
    triples: dict[int, int]
    straights: list[StraightRecord] = Field(default_factory=list)
    doubling_sets: bool = False


class RulesetRecord(BaseModel):
    """Mirrors `Ruleset`."""

    die_count: int
    scoring: ScoringTableRecord
    target_score: int
    minimum_to_bank: int = 0
    opening_minimum_only: bool = False
    tiebreak: TiebreakPolicy = TiebreakPolicy.EARLIEST_SEAT
    hot_dice_reroll: bool = True
    hot_dice_forces_roll: bool = False
    optimal_selection: bool = True
    preference: list[ScoringCategory]
    min_players: int = 2
    max_players: int = 8


class PlayerRecord(BaseModel):
    """A player as seated when the session started."""

    id: str = Field(min_length=1)
    name: str = Field(max_length=MAX_NAME_LENGTH)


class ActionRecord(BaseModel):
    """One history entry. Rolls keep the dice that were actually thrown."""

    kind: ActionKind
    player_id: str | None = None
    dice: list[int] | None = None
    name: str | None = None


class PlayerSummary(BaseModel):
    """A player's standing at the history cursor."""

    id: str
    name: str
    banked: int = Field(ge=0)
    status: PlayerStatus


class SummaryRecord(BaseModel):
    """Table state at the history cursor, cross-checked on load."""

    round: int = Field(ge=1)
    turn_index: int = Field(ge=0)
    status: SessionStatus
    winner_id: str | None = None
    players: list[PlayerSummary]


class SessionDocument(BaseModel):
    """Top-level save document."""

    version: int
    session_id: str = Field(min_length=1)
    created_at: datetime
    saved_at: datetime
    ruleset: RulesetRecord
    players: list[PlayerRecord]
    history: list[ActionRecord] = Field(default_factory=list)
    cursor: int = Field(ge=0)
    summary: SummaryRecord
