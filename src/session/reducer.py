"""
Greed Console - Session Reducer

The single point of state change for a session:

    apply_action(state, action, ruleset) -> new state

The reducer is pure. It validates before applying, delegates turn rules to
the TurnEngine, and raises RuleViolation without producing a state when the
action is illegal. Dice for ROLL actions must already be attached.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Callable, Sequence

from src.engine.base import ActionKind
from src.engine.errors import ConfigurationError, Rule, RuleViolation
from src.engine.ruleset import Ruleset, TiebreakPolicy
from src.engine.turn import Turn, TurnEngine
from src.engine.validators import validate_player_name, validate_player_names
from src.session.models import (
    Action,
    GameState,
    Player,
    PlayerStatus,
    SessionStatus,
)

_Handler = Callable[[GameState, Action, Ruleset], GameState]


def new_player_id() -> str:
    """Generate a stable player identifier."""
    return uuid.uuid4().hex[:12]


def initial_state(
    names: Sequence[str],
    ruleset: Ruleset,
    player_ids: Sequence[str] | None = None,
) -> GameState:
    """
    Seat the players and open the first turn.

    Args:
        names: Display names in turn order
        ruleset: Active ruleset (player limits, die pool)
        player_ids: Identifiers to reuse (loading a save); generated if omitted

    Raises:
        ConfigurationError: If the roster is invalid
    """
    names = validate_player_names(names, ruleset.min_players, ruleset.max_players)
    if player_ids is None:
        player_ids = [new_player_id() for _ in names]
    elif len(player_ids) != len(names) or len(set(player_ids)) != len(player_ids):
        raise ConfigurationError("Player ids must be unique, one per player.", field="players")

    players = tuple(
        Player(player_id=pid, name=name) for pid, name in zip(player_ids, names)
    )
    return GameState(
        players=players,
        current_turn=TurnEngine.start(players[0].player_id, ruleset),
    )


def apply_action(state: GameState, action: Action, ruleset: Ruleset) -> GameState:
    """
    Apply an action to the game state.

    Raises:
        RuleViolation: If the action is not legal in this state
    """
    handler = _HANDLERS[action.kind]
    return handler(state, action, ruleset)


# -- Turn actions ------------------------------------------------------------

def require_open_turn(state: GameState, action: Action) -> Turn:
    """The open turn, checked against the acting player named by the action."""
    if state.is_over or state.current_turn is None:
        raise RuleViolation(
            Rule.SESSION_OVER,
            f"Session is {state.status.value}; no turn is open.",
            status=state.status.value,
        )
    turn = state.current_turn
    if action.player_id is not None and action.player_id != turn.player_id:
        raise RuleViolation(
            Rule.NOT_YOUR_TURN,
            "It is not that player's turn.",
            player_id=action.player_id,
            current_player_id=turn.player_id,
        )
    return turn


def _roll(state: GameState, action: Action, ruleset: Ruleset) -> GameState:
    turn = require_open_turn(state, action)
    TurnEngine.check_roll(turn)
    if action.dice is None:
        raise RuleViolation(Rule.MISSING_DICE, "Roll action carries no dice.")
    turn = TurnEngine.roll(turn, action.dice, ruleset)
    if turn.is_closed:
        return _close_turn(state, turn, state.players, ruleset)
    return replace(state, current_turn=turn)


def _bank(state: GameState, action: Action, ruleset: Ruleset) -> GameState:
    turn = require_open_turn(state, action)
    seat = state.turn_index
    player = state.players[seat]
    turn = TurnEngine.bank(turn, player.banked, ruleset)
    players = _replace_at(state.players, seat, replace(player, banked=player.banked + turn.unbanked))
    return _close_turn(state, turn, players, ruleset)


def _pass(state: GameState, action: Action, ruleset: Ruleset) -> GameState:
    turn = require_open_turn(state, action)
    return _close_turn(state, TurnEngine.abandon(turn), state.players, ruleset)


# -- Roster actions ----------------------------------------------------------

def _find_seat(state: GameState, player_id: str | None) -> int:
    seat = state.seat_of(player_id) if player_id is not None else None
    if seat is None:
        raise RuleViolation(
            Rule.UNKNOWN_PLAYER, f"No player with id {player_id!r}.", player_id=player_id
        )
    return seat


def _rename(state: GameState, action: Action, ruleset: Ruleset) -> GameState:
    seat = _find_seat(state, action.player_id)
    try:
        name = validate_player_name(action.name)
    except ConfigurationError as exc:
        raise RuleViolation(Rule.INVALID_NAME, exc.message, name=action.name) from exc

    for other_seat, other in enumerate(state.players):
        if other_seat != seat and other.name.casefold() == name.casefold():
            raise RuleViolation(
                Rule.INVALID_NAME, f"Name {name!r} is already taken.", name=name
            )

    player = state.players[seat]
    return replace(state, players=_replace_at(state.players, seat, replace(player, name=name)))


def _remove(state: GameState, action: Action, ruleset: Ruleset) -> GameState:
    if state.is_over:
        raise RuleViolation(
            Rule.SESSION_OVER, f"Session is {state.status.value}.", status=state.status.value
        )
    seat = _find_seat(state, action.player_id)
    player = state.players[seat]
    if not player.is_active:
        raise RuleViolation(
            Rule.UNKNOWN_PLAYER,
            f"Player {player.name!r} has already left.",
            player_id=player.player_id,
        )
    remaining = len(state.active_players) - 1
    if remaining < ruleset.min_players:
        raise RuleViolation(
            Rule.TOO_FEW_PLAYERS,
            f"At least {ruleset.min_players} players must remain.",
            minimum=ruleset.min_players,
        )

    players = _replace_at(
        state.players, seat, replace(player, status=PlayerStatus.ELIMINATED)
    )
    if seat == state.turn_index and state.current_turn is not None:
        return _close_turn(state, TurnEngine.abandon(state.current_turn), players, ruleset)
    return replace(state, players=players)


def _end(state: GameState, action: Action, ruleset: Ruleset) -> GameState:
    if state.is_over:
        raise RuleViolation(
            Rule.SESSION_OVER, f"Session is {state.status.value}.", status=state.status.value
        )
    turns = state.turns
    if state.current_turn is not None:
        turns = turns + (TurnEngine.abandon(state.current_turn),)
    return replace(
        state,
        turns=turns,
        current_turn=None,
        status=SessionStatus.CLOSED,
    )


# -- Turn progression --------------------------------------------------------

def _replace_at(players: tuple[Player, ...], seat: int, player: Player) -> tuple[Player, ...]:
    return players[:seat] + (player,) + players[seat + 1:]


def _close_turn(
    state: GameState,
    closed: Turn,
    players: tuple[Player, ...],
    ruleset: Ruleset,
) -> GameState:
    """Record a closed turn, advance the seat and settle the round if it wrapped."""
    turns = state.turns + (closed,)
    seats = [seat for seat, p in enumerate(players) if p.is_active]
    later = [seat for seat in seats if seat > state.turn_index]
    next_seat = later[0] if later else seats[0]

    if later:
        return replace(
            state,
            players=players,
            turns=turns,
            turn_index=next_seat,
            current_turn=TurnEngine.start(players[next_seat].player_id, ruleset),
        )

    # Seat wrapped: the round is over.
    contenders = [
        seat for seat in seats if players[seat].banked >= ruleset.target_score
    ]
    if contenders:
        winner_seat = pick_winner(players, contenders, turns, ruleset)
        winner = players[winner_seat]
        players = _replace_at(players, winner_seat, replace(winner, status=PlayerStatus.WINNER))
        return replace(
            state,
            players=players,
            turns=turns,
            turn_index=next_seat,
            current_turn=None,
            status=SessionStatus.FINISHED,
            winner_id=winner.player_id,
        )

    return replace(
        state,
        players=players,
        turns=turns,
        turn_index=next_seat,
        round=state.round + 1,
        current_turn=TurnEngine.start(players[next_seat].player_id, ruleset),
    )


def pick_winner(
    players: tuple[Player, ...],
    seats: Sequence[int],
    turns: Sequence[Turn],
    ruleset: Ruleset,
) -> int:
    """
    Choose the winning seat among players who reached the target.

    The highest banked score wins; ties are settled by the ruleset's policy.
    """
    top = max(players[seat].banked for seat in seats)
    tied = [seat for seat in seats if players[seat].banked == top]
    if len(tied) == 1:
        return tied[0]

    if ruleset.tiebreak is TiebreakPolicy.LATEST_SEAT:
        return max(tied)

    if ruleset.tiebreak is TiebreakPolicy.FIRST_TO_REACH:
        seat_by_id = {players[seat].player_id: seat for seat in tied}
        totals: dict[str, int] = {}
        for turn in turns:
            total = totals.get(turn.player_id, 0) + turn.points_banked
            totals[turn.player_id] = total
            if turn.player_id in seat_by_id and total >= ruleset.target_score:
                return seat_by_id[turn.player_id]

    return min(tied)


_HANDLERS: dict[ActionKind, _Handler] = {
    ActionKind.ROLL: _roll,
    ActionKind.BANK: _bank,
    ActionKind.PASS: _pass,
    ActionKind.RENAME: _rename,
    ActionKind.REMOVE: _remove,
    ActionKind.END: _end,
}
