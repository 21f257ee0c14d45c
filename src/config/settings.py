"""
Greed Console - Application Settings

Loads configuration from environment variables (prefixed ``GREED_``) and an
optional ``.env`` file using Pydantic Settings. The game core never reads
settings itself: the host builds a Ruleset from them and passes it in.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.engine.dice import RandomDiceRoller
from src.engine.ruleset import Ruleset, TiebreakPolicy, standard_greed
from src.persistence.save_file import Autosaver
from src.session.manager import SessionManager

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # Default ruleset
    die_count: int = Field(default=5, ge=1)
    target_score: int = Field(default=3000, gt=0)
    minimum_to_bank: int = Field(default=300, ge=0)
    opening_minimum_only: bool = True
    hot_dice_reroll: bool = True
    tiebreak: TiebreakPolicy = TiebreakPolicy.EARLIEST_SEAT

    # Dice
    random_seed: int | None = None

    # Persistence
    autosave_path: Path | None = None

    model_config = SettingsConfigDict(
        env_prefix="GREED_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def ruleset(self) -> Ruleset:
        """Build the session ruleset these settings describe."""
        return standard_greed(
            target_score=self.target_score,
            die_count=self.die_count,
            minimum_to_bank=self.minimum_to_bank,
            opening_minimum_only=self.opening_minimum_only,
            hot_dice_reroll=self.hot_dice_reroll,
            tiebreak=self.tiebreak,
        )

    def dice_roller(self) -> RandomDiceRoller:
        """Dice source seeded with `random_seed` (unseeded when None)."""
        return RandomDiceRoller(seed=self.random_seed)

    def autosaver(self, manager: SessionManager) -> Autosaver | None:
        """Autosave listener for `manager`, or None when no path is configured."""
        if self.autosave_path is None:
            return None
        return Autosaver(manager, self.autosave_path)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached singleton settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Apply the configured log level to the root logger."""
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
