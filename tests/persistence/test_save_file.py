"""
Greed Console - Save File Tests
"""

import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from src.engine.errors import ValidationError
from src.persistence.save_file import Autosaver, SaveFile, write_atomic
from src.session.models import Action


class TestWriteAtomic:
    """Tests for write_atomic."""

    def test_writes_and_leaves_no_temp_file(self, tmp_path):
        target = tmp_path / "saves" / "game.json"
        write_atomic(target, "{}")
        assert target.read_text(encoding="utf-8") == "{}"
        assert sorted(p.name for p in target.parent.iterdir()) == ["game.json"]

    def test_replaces_existing(self, tmp_path):
        target = tmp_path / "game.json"
        target.write_text("old", encoding="utf-8")
        write_atomic(target, "new")
        assert target.read_text(encoding="utf-8") == "new"

    def test_cleans_up_when_replace_fails(self, tmp_path):
        target = tmp_path / "game.json"
        target.write_text("old", encoding="utf-8")
        with patch("src.persistence.save_file.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                write_atomic(target, "new")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["game.json"]
        assert target.read_text(encoding="utf-8") == "old"

    def test_cleans_up_when_write_fails(self, tmp_path):
        target = tmp_path / "game.json"
        with patch("src.persistence.save_file.os.fsync", side_effect=OSError("io error")):
            with pytest.raises(OSError):
                write_atomic(target, "new")
        assert list(tmp_path.iterdir()) == []

    def test_concurrent_writers_use_separate_temp_files(self, tmp_path):
        target = tmp_path / "game.json"
        seen = []
        real_replace = os.replace

        def record(src, dst):
            seen.append(Path(src).name)
            real_replace(src, dst)

        with patch("src.persistence.save_file.os.replace", side_effect=record):
            write_atomic(target, "first")
            write_atomic(target, "second")
        assert len(set(seen)) == 2
        assert all(name.startswith(".game.json.") for name in seen)
        assert target.read_text(encoding="utf-8") == "second"


class TestSaveFile:
    """Tests for SaveFile."""

    def test_unsaved_is_dirty(self, two_player_manager):
        save_file = SaveFile(two_player_manager.session)
        assert save_file.path is None
        assert save_file.save() is None
        assert save_file.is_dirty()

    def test_save_and_reload(self, two_player_manager, roller, tmp_path):
        roller.queue((1, 5, 5, 5, 5))
        two_player_manager.submit_action(Action.roll())
        path = tmp_path / "game.json"
        save_file = SaveFile(two_player_manager.session, path)
        assert save_file.save() == path

        reloaded = SaveFile.from_path(path)
        assert reloaded.path == path
        assert reloaded.session == two_player_manager.session
        assert not reloaded.is_dirty()

    def test_dirty_after_action(self, two_player_manager, roller, tmp_path):
        save_file = SaveFile(two_player_manager.session, tmp_path / "game.json")
        save_file.save()
        assert not save_file.is_dirty()
        roller.queue((2, 3, 4, 6, 6))
        two_player_manager.submit_action(Action.roll())
        assert save_file.is_dirty()
        save_file.save()
        assert not save_file.is_dirty()

    def test_set_path(self, two_player_manager, tmp_path):
        save_file = SaveFile(two_player_manager.session, tmp_path / "a.json")
        previous = save_file.set_path(tmp_path / "b.json")
        assert previous == tmp_path / "a.json"
        assert save_file.path == tmp_path / "b.json"

    def test_save_to_does_not_rebind(self, two_player_manager, tmp_path):
        save_file = SaveFile(two_player_manager.session, tmp_path / "a.json")
        save_file.save_to(tmp_path / "copy.json")
        assert save_file.path == tmp_path / "a.json"
        assert (tmp_path / "copy.json").exists()

    def test_corrupt_file_is_dirty(self, two_player_manager, tmp_path, caplog):
        path = tmp_path / "game.json"
        path.write_text("garbage", encoding="utf-8")
        save_file = SaveFile(two_player_manager.session, path)
        with caplog.at_level(logging.ERROR, logger="src.persistence.save_file"):
            assert save_file.is_dirty()
        assert "Unable to read save" in caplog.text

    def test_unreadable_file_is_dirty(self, two_player_manager, tmp_path):
        save_file = SaveFile(two_player_manager.session, tmp_path / "game.json")
        save_file.save()
        with patch.object(Path, "read_text", side_effect=PermissionError("denied")):
            assert save_file.is_dirty()

    def test_missing_file_is_dirty(self, two_player_manager, tmp_path):
        save_file = SaveFile(two_player_manager.session, tmp_path / "missing.json")
        assert save_file.is_dirty()

    def test_from_path_corrupt(self, tmp_path):
        path = tmp_path / "game.json"
        path.write_text('{"version": 1}', encoding="utf-8")
        with pytest.raises(ValidationError):
            SaveFile.from_path(path)

    def test_from_path_missing(self, tmp_path):
        with pytest.raises(OSError):
            SaveFile.from_path(tmp_path / "missing.json")


class TestAutosaver:
    """Tests for the autosave listener."""

    def test_saves_on_resting_events(self, manager, ruleset, roller, tmp_path):
        path = tmp_path / "auto.json"
        manager.subscribe(Autosaver(manager, path))
        manager.start_session(["Alice", "Bob"], ruleset)
        assert path.exists()

        roller.queue((1, 5, 5, 5, 5))
        manager.submit_action(Action.roll())
        assert SaveFile(manager.session, path).is_dirty()

        manager.submit_action(Action.bank())
        assert not SaveFile(manager.session, path).is_dirty()
        assert SaveFile.from_path(path).session == manager.session

    def test_saves_after_undo_and_redo(self, manager, ruleset, roller, tmp_path):
        path = tmp_path / "auto.json"
        manager.subscribe(Autosaver(manager, path))
        manager.start_session(["Alice", "Bob"], ruleset)
        roller.queue((1, 5, 5, 5, 5))
        manager.submit_action(Action.roll())
        manager.submit_action(Action.bank())

        manager.undo()
        restored = SaveFile.from_path(path).session
        assert restored.history.cursor == manager.session.history.cursor == 1
        assert restored == manager.session

        manager.redo()
        assert SaveFile.from_path(path).session.history.cursor == 2

    def test_saves_after_rename(self, two_player_manager, tmp_path):
        path = tmp_path / "auto.json"
        two_player_manager.subscribe(Autosaver(two_player_manager, path))
        bob = two_player_manager.snapshot().players[1]
        two_player_manager.submit_action(Action.rename(bob.player_id, "Robert"))
        assert not SaveFile(two_player_manager.session, path).is_dirty()
