"""
Greed Console - Input Validation Utilities

Provides validation functions for game engine inputs. All validators
either return validated data or raise descriptive ConfigurationError
exceptions.
"""

from typing import Mapping, Sequence

from src.engine.base import DIE_FACES
from src.engine.errors import ConfigurationError

MAX_NAME_LENGTH = 30


def _require_int(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(
            f"{name} must be an integer, got {type(value).__name__}.", field=name
        )
    return value


def validate_dice_values(
    values: Sequence[int],
    min_count: int = 1,
    max_count: int | None = None
) -> tuple[int, ...]:
    """
    Validate and normalize dice values.

    Args:
        values: Sequence of dice values to validate
        min_count: Minimum number of dice required
        max_count: Maximum number of dice allowed (None = no limit)

    Returns:
        Validated values as a tuple

    Raises:
        ConfigurationError: If validation fails
    """
    values_tuple = tuple(values)
    count = len(values_tuple)

    if count < min_count:
        raise ConfigurationError(
            f"At least {min_count} dice required, got {count}.", field="dice"
        )

    if max_count is not None and count > max_count:
        raise ConfigurationError(
            f"At most {max_count} dice allowed, got {count}.", field="dice"
        )

    for i, value in enumerate(values_tuple):
        _require_int(value, "dice")
        if not (1 <= value <= DIE_FACES):
            raise ConfigurationError(
                f"Die value at index {i} is {value}, must be between 1 and {DIE_FACES}.",
                field="dice",
            )

    return values_tuple


def validate_die_count(count: int, max_count: int) -> int:
    """
    Validate the size of a die pool.

    Raises:
        ConfigurationError: If count is not between 1 and max_count
    """
    _require_int(count, "die_count")
    if not (1 <= count <= max_count):
        raise ConfigurationError(
            f"Die count must be between 1 and {max_count}, got {count}.",
            field="die_count",
        )
    return count


def validate_score(score: int, allow_negative: bool = False, name: str = "score") -> int:
    """
    Validate a score value.

    Args:
        score: Score to validate
        allow_negative: Whether negative scores are allowed
        name: Field name reported on failure

    Returns:
        Validated score

    Raises:
        ConfigurationError: If score is invalid
    """
    _require_int(score, name)

    if not allow_negative and score < 0:
        raise ConfigurationError(f"{name} cannot be negative, got {score}.", field=name)

    return score


def validate_target_score(score: int) -> int:
    """
    Validate target score for a game.

    Raises:
        ConfigurationError: If score is not a positive integer
    """
    _require_int(score, "target_score")

    if score <= 0:
        raise ConfigurationError(
            f"Target score must be positive, got {score}.", field="target_score"
        )

    return score


def validate_face_points(table: Mapping[int, int], name: str) -> dict[int, int]:
    """
    Validate a face -> points table.

    Returns:
        A plain dict copy with integer keys, sorted by face

    Raises:
        ConfigurationError: If a face is out of range or points are not positive
    """
    result: dict[int, int] = {}
    for face, points in sorted(dict(table).items()):
        _require_int(face, f"scoring.{name}")
        _require_int(points, f"scoring.{name}")
        if not (1 <= face <= DIE_FACES):
            raise ConfigurationError(
                f"Face {face} in {name} table must be between 1 and {DIE_FACES}.",
                field=f"scoring.{name}",
            )
        if points <= 0:
            raise ConfigurationError(
                f"Points for face {face} in {name} table must be positive, got {points}.",
                field=f"scoring.{name}",
            )
        result[face] = points
    return result


def validate_straights(
    straights: Sequence[tuple[Sequence[int], int]]
) -> tuple[tuple[tuple[int, ...], int], ...]:
    """
    Validate straight definitions.

    Each straight is a run of distinct faces worth a fixed number of points.

    Returns:
        Normalised ((faces...), points) pairs with faces sorted ascending

    Raises:
        ConfigurationError: If a straight repeats faces, is too short or is
            worth nothing
    """
    result = []
    seen: set[tuple[int, ...]] = set()
    for faces, points in straights:
        faces_tuple = tuple(sorted(validate_dice_values(faces, min_count=2)))
        if len(set(faces_tuple)) != len(faces_tuple):
            raise ConfigurationError(
                f"Straight {faces_tuple} repeats a face.", field="scoring.straights"
            )
        if faces_tuple in seen:
            raise ConfigurationError(
                f"Straight {faces_tuple} is defined twice.", field="scoring.straights"
            )
        _require_int(points, "scoring.straights")
        if points <= 0:
            raise ConfigurationError(
                f"Straight {faces_tuple} must be worth a positive score, got {points}.",
                field="scoring.straights",
            )
        seen.add(faces_tuple)
        result.append((faces_tuple, points))
    return tuple(result)


def validate_player_name(name: str) -> str:
    """
    Validate and normalise a display name.

    Raises:
        ConfigurationError: If the name is empty or too long
    """
    if not isinstance(name, str):
        raise ConfigurationError(
            f"Player name must be a string, got {type(name).__name__}.", field="players"
        )
    stripped = name.strip()
    if not stripped:
        raise ConfigurationError("Player name cannot be empty.", field="players")
    if len(stripped) > MAX_NAME_LENGTH:
        raise ConfigurationError(
            f"Player name must be at most {MAX_NAME_LENGTH} characters, got {len(stripped)}.",
            field="players",
        )
    return stripped


def validate_player_names(
    names: Sequence[str],
    min_players: int,
    max_players: int
) -> tuple[str, ...]:
    """
    Validate the starting roster.

    Args:
        names: Display names in seating order
        min_players: Fewest players allowed
        max_players: Most players allowed

    Returns:
        Normalised names as a tuple

    Raises:
        ConfigurationError: If the count is out of range or a name is invalid
            or duplicated
    """
    if isinstance(names, str):
        raise ConfigurationError("Players must be a sequence of names.", field="players")

    normalised = tuple(validate_player_name(name) for name in names)
    count = len(normalised)

    if not (min_players <= count <= max_players):
        raise ConfigurationError(
            f"Player count must be {min_players}-{max_players}, got {count}.",
            field="players",
        )

    lowered = [name.casefold() for name in normalised]
    if len(set(lowered)) != len(lowered):
        raise ConfigurationError("Player names must be unique.", field="players")

    return normalised
