"""
Greed Console Persistence.

Versioned JSON save documents, load-time validation and save files.
"""

from src.persistence.gateway import (
    CURRENT_VERSION,
    SUPPORTED_VERSIONS,
    dumps,
    load,
    loads,
    save,
)
from src.persistence.models import SessionDocument
from src.persistence.save_file import Autosaver, SaveFile

__all__ = [
    "Autosaver",
    "CURRENT_VERSION",
    "SUPPORTED_VERSIONS",
    "SaveFile",
    "SessionDocument",
    "dumps",
    "load",
    "loads",
    "save",
]
