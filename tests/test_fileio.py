"""Tests for agentconf.utils.fileio module."""

import os
from unittest.mock import patch

import pytest

from agentconf.utils.fileio import atomic_write_bytes, atomic_write_text


class TestAtomicWrite:
    def test_creates_parent_directories(self, tmp_path):
        target = tmp_path / "a" / "b" / "file.json"

        atomic_write_bytes(target, b"{}")

        assert target.read_bytes() == b"{}"
        assert os.stat(target).st_mode & 0o777 == 0o600

    def test_replaces_existing_file(self, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("old")

        atomic_write_text(target, "new ✓")

        assert target.read_text(encoding="utf-8") == "new ✓"

    def test_failure_leaves_target_and_no_temp_file(self, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("old")

        with patch("agentconf.utils.fileio.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                atomic_write_bytes(target, b"new")

        assert target.read_text() == "old"
        assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]

    def test_custom_mode(self, tmp_path):
        target = tmp_path / "file.txt"

        atomic_write_bytes(target, b"x", mode=0o644)

        assert os.stat(target).st_mode & 0o777 == 0o644

    def test_existing_file_keeps_its_mode(self, tmp_path):
        target = tmp_path / "settings.json"
        target.write_text("{}")
        os.chmod(target, 0o644)

        atomic_write_text(target, '{"a": 1}')

        assert os.stat(target).st_mode & 0o777 == 0o644

    def test_symlink_is_kept_and_its_target_updated(self, tmp_path):
        real = tmp_path / "dotfiles" / "settings.json"
        real.parent.mkdir()
        real.write_text("old")
        link = tmp_path / "home" / ".claude" / "settings.json"
        link.parent.mkdir(parents=True)
        link.symlink_to(real)

        atomic_write_text(link, "new")

        assert link.is_symlink()
        assert real.read_text() == "new"
        assert link.read_text() == "new"
        assert sorted(p.name for p in link.parent.iterdir()) == ["settings.json"]
