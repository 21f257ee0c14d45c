"""
Greed Console - Test Configuration and Fixtures

Common fixtures and test data for all test modules.
"""

import pytest

from src.engine.dice import ScriptedDiceRoller
from src.engine.ruleset import Ruleset, standard_greed
from src.session.manager import SessionManager


# =============================================================================
# SCORING TEST DATA (standard Greed table)
# =============================================================================

@pytest.fixture
def greed_scoring_rolls() -> dict[str, tuple[tuple[int, ...], int, str]]:
    """
    Common roll patterns with expected scores under the standard table.

    Returns:
        Dict mapping name to (dice_values, expected_points, description)
    """
    return {
        # Singles
        "single_one": ((1,), 100, "Single 1"),
        "single_five": ((5,), 50, "Single 5"),
        "two_ones": ((1, 1), 200, "Two 1s"),
        "one_and_five": ((1, 5), 150, "One 1 and one 5"),

        # Three of a kind
        "three_ones": ((1, 1, 1), 1000, "Three 1s"),
        "three_twos": ((2, 2, 2), 200, "Three 2s"),
        "three_sixes": ((6, 6, 6), 600, "Three 6s"),

        # Extra dice beyond a set score on their own
        "four_fives": ((5, 5, 5, 5), 550, "Three 5s + single 5"),
        "four_ones": ((1, 1, 1, 1), 1100, "Three 1s + single 1"),
        "five_ones": ((1, 1, 1, 1, 1), 1200, "Three 1s + two single 1s"),
        "four_twos": ((2, 2, 2, 2), 200, "Three 2s, fourth 2 scores nothing"),

        # Mixed combinations
        "one_and_four_fives": ((1, 5, 5, 5, 5), 650, "Three 5s + single 5 + single 1"),
        "twos_with_five": ((2, 5, 2, 2, 3), 250, "Three 2s + single 5"),
        "ones_with_five": ((1, 1, 1, 5, 1), 1150, "Three 1s + single 1 + single 5"),
        "threes_with_five": ((3, 4, 5, 3, 3), 350, "Three 3s + single 5"),
        "ones_and_five": ((1, 5, 1, 2, 4), 250, "Two 1s + single 5"),

        # Bust
        "bust_roll": ((2, 3, 4, 6, 6), 0, "Bust roll"),
    }


@pytest.fixture
def greed_bust_rolls() -> list[tuple[int, ...]]:
    """Rolls that should result in a bust."""
    return [
        (2,),
        (3, 4),
        (2, 2, 3),
        (2, 3, 4, 6),
        (2, 3, 4, 6, 6),
        (6, 6, 4, 4, 2),
    ]


@pytest.fixture
def greed_hot_dice_rolls() -> list[tuple[int, ...]]:
    """Rolls where all dice score (hot dice)."""
    return [
        (1, 5, 5, 5, 5),
        (1, 1, 1, 5, 5),
        (2, 2, 2, 1, 5),
        (5, 5, 5, 5, 5),
    ]


# =============================================================================
# RULESETS AND SESSIONS
# =============================================================================

@pytest.fixture
def ruleset() -> Ruleset:
    """Standard five-die Greed, short game to 500."""
    return standard_greed(target_score=500)


@pytest.fixture
def open_ruleset() -> Ruleset:
    """Standard table with no minimum to bank."""
    return Ruleset(die_count=5, target_score=500)


@pytest.fixture
def roller() -> ScriptedDiceRoller:
    return ScriptedDiceRoller()


@pytest.fixture
def manager(roller: ScriptedDiceRoller) -> SessionManager:
    return SessionManager(roller=roller)


@pytest.fixture
def two_player_manager(manager: SessionManager, ruleset: Ruleset) -> SessionManager:
    """Manager with Alice and Bob seated under the standard ruleset."""
    manager.start_session(["Alice", "Bob"], ruleset)
    return manager
