"""
Greed Console - Save Files

A session bound to an optional location on disk. Writes land in a uniquely
named sibling temporary file first and then replace the target, so a crash mid-save never
leaves a truncated save behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from src.persistence.gateway import load, save
from src.persistence.models import SessionDocument
from src.session.events import AUTOSAVE_EVENTS, EventPayload
from src.session.manager import SessionManager
from src.session.models import Session

logger = logging.getLogger(__name__)

_VOLATILE_FIELDS = {"saved_at"}


def write_atomic(path: Path, text: str) -> None:
    """Write text to `path` through a temporary file and an atomic rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    ) as handle:
        tmp_path = Path(handle.name)
        try:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        except BaseException:
            handle.close()
            tmp_path.unlink(missing_ok=True)
            raise
    try:
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


class SaveFile:
    """A session plus the path it was loaded from or will be saved to."""

    def __init__(self, session: Session, path: str | os.PathLike | None = None) -> None:
        self.session = session
        self._path = Path(path) if path is not None else None

    @classmethod
    def from_path(cls, path: str | os.PathLike) -> "SaveFile":
        """
        Load a save from disk.

        Raises:
            OSError: If the file cannot be read
            ValidationError: If the document is corrupt or inconsistent
        """
        path = Path(path)
        session = load(path.read_text(encoding="utf-8"))
        logger.info("Read save %s", path)
        return cls(session, path)

    @property
    def path(self) -> Path | None:
        return self._path

    def set_path(self, path: str | os.PathLike) -> Path | None:
        """Point the save at a new location, returning the previous one."""
        previous = self._path
        self._path = Path(path)
        return previous

    def save(self) -> Path | None:
        """Write to the bound path. Returns None if no path is set."""
        if self._path is None:
            return None
        return self.save_to(self._path)

    def save_to(self, path: str | os.PathLike) -> Path:
        """Write to an explicit path without rebinding."""
        path = Path(path)
        write_atomic(path, save(self.session).model_dump_json(indent=2))
        logger.info("Saved session %s to %s", self.session.session_id, path)
        return path

    def is_dirty(self) -> bool:
        """True if the session differs from what is on disk (or was never saved)."""
        if self._path is None:
            return True

        try:
            on_disk = SessionDocument.model_validate_json(
                self._path.read_text(encoding="utf-8")
            )
        except (OSError, PydanticValidationError) as exc:
            logger.error("Unable to read save at %s: %s", self._path, exc)
            return True

        current = save(self.session)
        return (
            on_disk.model_dump(exclude=_VOLATILE_FIELDS)
            != current.model_dump(exclude=_VOLATILE_FIELDS)
        )


class Autosaver:
    """
    Session listener that writes the active session after resting-point events.

    Subscribe it with ``manager.subscribe(Autosaver(manager, path))``.
    """

    def __init__(self, manager: SessionManager, path: str | os.PathLike) -> None:
        self._manager = manager
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def __call__(self, payload: EventPayload) -> None:
        if payload.event not in AUTOSAVE_EVENTS:
            return
        session = self._manager.session
        if session is None:
            return
        SaveFile(session, self._path).save()
