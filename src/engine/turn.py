"""
Greed Console - Turn State Machine

Governs one player's turn. Turns are immutable: every transition returns a
new Turn and the old one stays valid, which is what lets the session keep
its history as plain values.

    NOT_STARTED --roll--> SCORED         (hot dice, full pool again)
                       -> BANK_DECISION  (roll what is left, or bank)
                       -> BUSTED
    SCORED / BANK_DECISION --bank--> BANKED
    any open phase --pass--> ABANDONED

Illegal transitions raise RuleViolation and never produce a new Turn.
"""

from dataclasses import dataclass, replace
from typing import Sequence

from src.engine.base import ActionKind, DiceSet, ScoreResult, TurnPhase
from src.engine.errors import Rule, RuleViolation
from src.engine.ruleset import Ruleset
from src.engine.scoring import ScoringEngine


@dataclass(frozen=True)
class Roll:
    """A committed throw and its score."""
    dice: DiceSet
    result: ScoreResult


@dataclass(frozen=True)
class Turn:
    """
    State of a single player's turn.

    Attributes:
        player_id: Player taking the turn
        dice_remaining: Dice available for the next roll
        phase: Current phase
        rolls: Throws made so far, in order
        unbanked: Points accrued this turn and not yet banked
        forfeited: Points lost when the turn busted or was abandoned
    """
    player_id: str
    dice_remaining: int
    phase: TurnPhase = TurnPhase.NOT_STARTED
    rolls: tuple[Roll, ...] = ()
    unbanked: int = 0
    forfeited: int = 0

    @property
    def is_closed(self) -> bool:
        return self.phase.is_terminal

    @property
    def last_roll(self) -> Roll | None:
        return self.rolls[-1] if self.rolls else None

    @property
    def is_hot_dice(self) -> bool:
        return self.phase is TurnPhase.SCORED

    @property
    def points_banked(self) -> int:
        """Points this turn added to the player's score."""
        return self.unbanked if self.phase is TurnPhase.BANKED else 0


class TurnEngine:
    """
    Stateless engine for turn transitions.

    All methods are class methods operating on immutable data.
    State is passed in and returned, never stored.
    """

    @classmethod
    def start(cls, player_id: str, ruleset: Ruleset) -> Turn:
        """Open a fresh turn with the full die pool."""
        return Turn(player_id=player_id, dice_remaining=ruleset.die_count)

    @classmethod
    def dice_to_roll(cls, turn: Turn) -> int:
        """Number of dice the next roll must contain."""
        return turn.dice_remaining

    @classmethod
    def roll(
        cls,
        turn: Turn,
        dice: DiceSet | Sequence[int],
        ruleset: Ruleset
    ) -> Turn:
        """
        Apply a throw to the turn.

        Args:
            turn: Current turn
            dice: The throw, sized to `dice_to_roll(turn)`
            ruleset: Active ruleset

        Returns:
            The turn after scoring the throw

        Raises:
            RuleViolation: If the turn cannot roll or the throw is the wrong size
        """
        cls.check_roll(turn)
        if not isinstance(dice, DiceSet):
            dice = DiceSet.from_sequence(dice)
        if len(dice) != turn.dice_remaining:
            raise RuleViolation(
                Rule.WRONG_DICE_COUNT,
                f"Expected {turn.dice_remaining} dice, got {len(dice)}.",
                expected=turn.dice_remaining,
                actual=len(dice),
            )

        result = ScoringEngine.score(dice, ruleset)
        rolls = turn.rolls + (Roll(dice=dice, result=result),)

        if result.is_bust:
            return replace(
                turn,
                phase=TurnPhase.BUSTED,
                rolls=rolls,
                unbanked=0,
                forfeited=turn.unbanked,
                dice_remaining=0,
            )

        unbanked = turn.unbanked + result.points
        if result.is_hot_dice and ruleset.hot_dice_reroll:
            return replace(
                turn,
                phase=TurnPhase.SCORED,
                rolls=rolls,
                unbanked=unbanked,
                dice_remaining=ruleset.die_count,
            )

        return replace(
            turn,
            phase=TurnPhase.BANK_DECISION,
            rolls=rolls,
            unbanked=unbanked,
            dice_remaining=len(dice) - result.scoring_count,
        )

    @classmethod
    def bank(cls, turn: Turn, banked: int, ruleset: Ruleset) -> Turn:
        """
        Close the turn by banking its unbanked total.

        Args:
            turn: Current turn
            banked: The player's banked score before this turn
            ruleset: Active ruleset

        Raises:
            RuleViolation: If banking is not allowed right now
        """
        cls.check_bank(turn, banked, ruleset)
        return replace(turn, phase=TurnPhase.BANKED, dice_remaining=0)

    @classmethod
    def abandon(cls, turn: Turn) -> Turn:
        """Close the turn without banking (player passed or session ended)."""
        cls._check_open(turn)
        return replace(
            turn,
            phase=TurnPhase.ABANDONED,
            unbanked=0,
            forfeited=turn.unbanked,
            dice_remaining=0,
        )

    @classmethod
    def legal_actions(
        cls,
        turn: Turn,
        banked: int,
        ruleset: Ruleset
    ) -> frozenset[ActionKind]:
        """Turn actions the current player may take."""
        if turn.is_closed:
            return frozenset()
        actions = {ActionKind.PASS}
        try:
            cls.check_roll(turn)
            actions.add(ActionKind.ROLL)
        except RuleViolation:
            pass
        try:
            cls.check_bank(turn, banked, ruleset)
            actions.add(ActionKind.BANK)
        except RuleViolation:
            pass
        return frozenset(actions)

    @classmethod
    def _check_open(cls, turn: Turn) -> None:
        if turn.is_closed:
            raise RuleViolation(
                Rule.TURN_CLOSED,
                f"Turn is already over ({turn.phase.name.lower()}).",
                phase=turn.phase.name,
            )

    @classmethod
    def check_roll(cls, turn: Turn) -> None:
        """Raise RuleViolation unless the turn can roll now."""
        cls._check_open(turn)
        if turn.dice_remaining <= 0:
            raise RuleViolation(Rule.NO_DICE_LEFT, "No dice left to roll; bank or pass.")

    @classmethod
    def check_bank(cls, turn: Turn, banked: int, ruleset: Ruleset) -> None:
        """Raise RuleViolation unless the turn can bank now."""
        cls._check_open(turn)
        if turn.phase is TurnPhase.NOT_STARTED:
            raise RuleViolation(Rule.NOT_ROLLED, "Roll at least once before banking.")
        if turn.unbanked <= 0:
            raise RuleViolation(Rule.NOTHING_TO_BANK, "Nothing to bank this turn.")
        if turn.phase is TurnPhase.SCORED and ruleset.hot_dice_forces_roll:
            raise RuleViolation(Rule.MUST_ROLL, "Hot dice must be rolled again.")
        if ruleset.minimum_applies(banked) and turn.unbanked < ruleset.minimum_to_bank:
            raise RuleViolation(
                Rule.BELOW_MINIMUM,
                f"Need at least {ruleset.minimum_to_bank} points to bank, "
                f"have {turn.unbanked}.",
                minimum=ruleset.minimum_to_bank,
                unbanked=turn.unbanked,
            )
