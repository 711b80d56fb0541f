"""Tests for agentconf.lifecycle.backup."""

import os
from datetime import datetime, timedelta, timezone

import pytest

from agentconf.integrations.agents import AgentKind
from agentconf.lifecycle.backup import (
    BackupManager,
    parse_snapshot_name,
    snapshot_name,
)
from agentconf.models import ConfigSnapshot
from agentconf.utils.errors import ReadFailed, RestoreFailed, WriteFailed


def _write_live(home, kind, data: bytes):
    path = kind.config_path(home)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


@pytest.fixture
def manager(home, backup_dir):
    return BackupManager(backup_dir, home=home, retention=3)


class TestSnapshotNames:
    def test_name_format(self):
        captured_at = datetime(2026, 10, 19, 10, 11, 12, 123456, tzinfo=timezone.utc)

        name = snapshot_name(AgentKind.CLAUDE_CODE, captured_at)

        assert name == "claude-code--20261019T101112.123456Z.bak"

    def test_counter_suffix(self):
        captured_at = datetime(2026, 1, 2, 3, 4, 5, 6, tzinfo=timezone.utc)

        assert snapshot_name(AgentKind.CODEX, captured_at, 2) == "codex--20260102T030405.000006Z-2.bak"

    def test_parse_round_trip(self):
        captured_at = datetime(2026, 10, 19, 10, 11, 12, 123456, tzinfo=timezone.utc)

        parsed = parse_snapshot_name(snapshot_name(AgentKind.FACTORY_DROID, captured_at, 4))

        assert parsed == (AgentKind.FACTORY_DROID, captured_at, 4)

    @pytest.mark.parametrize(
        "name",
        [
            "notes.txt",
            "claude-code--20261019T101112Z.bak",
            "unknown-agent--20261019T101112.123456Z.bak",
            "claude-code--20261399T101112.123456Z.bak",
            ".snapshot-abc123",
        ],
    )
    def test_parse_rejects_foreign_names(self, name):
        assert parse_snapshot_name(name) is None


class TestSnapshot:
    def test_missing_live_file_returns_none(self, manager):
        assert manager.snapshot(AgentKind.CODEX) is None
        assert manager.list(AgentKind.CODEX) == []

    def test_snapshot_is_byte_identical(self, manager, home):
        data = b'{"a": 1}\r\n\xff\xfe not utf-8 \x00'
        source = _write_live(home, AgentKind.CLAUDE_CODE, data)

        snapshot = manager.snapshot(AgentKind.CLAUDE_CODE)

        assert snapshot.storage_path.read_bytes() == data
        assert snapshot.size_bytes == len(data)
        assert snapshot.source_path == source
        assert snapshot.storage_path.parent == manager.kind_dir(AgentKind.CLAUDE_CODE)

    def test_snapshot_file_is_private(self, manager, home):
        _write_live(home, AgentKind.CODEX, b"model = 'x'\n")

        snapshot = manager.snapshot(AgentKind.CODEX)

        assert os.stat(snapshot.storage_path).st_mode & 0o777 == 0o600

    def test_capture_times_strictly_increase(self, manager, home):
        _write_live(home, AgentKind.AMP, b"{}")

        snapshots = [manager.snapshot(AgentKind.AMP) for _ in range(3)]

        times = [s.captured_at for s in snapshots]
        assert times == sorted(times)
        assert len(set(times)) == 3

    def test_capture_time_follows_newest_existing(self, manager, home):
        _write_live(home, AgentKind.AMP, b"{}")
        future = datetime.now(timezone.utc) + timedelta(days=1)
        directory = manager.kind_dir(AgentKind.AMP)
        directory.mkdir(parents=True)
        (directory / snapshot_name(AgentKind.AMP, future)).write_bytes(b"{}")

        snapshot = manager.snapshot(AgentKind.AMP)

        assert snapshot.captured_at == future + timedelta(microseconds=1)
        assert manager.list(AgentKind.AMP)[0] == snapshot

    def test_unreadable_live_file_raises_read_failed(self, manager, home):
        AgentKind.CODEX.config_path(home).mkdir(parents=True)

        with pytest.raises(ReadFailed):
            manager.snapshot(AgentKind.CODEX)

    def test_unwritable_storage_raises_write_failed(self, manager, home, backup_dir):
        _write_live(home, AgentKind.CODEX, b"x = 1\n")
        backup_dir.mkdir()
        # A file where the per-kind directory should be
        manager.kind_dir(AgentKind.CODEX).write_text("in the way")

        with pytest.raises(WriteFailed):
            manager.snapshot(AgentKind.CODEX)

    def test_invalid_retention(self, backup_dir):
        with pytest.raises(ValueError):
            BackupManager(backup_dir, retention=0)


class TestRetention:
    def test_five_writes_cap_three_keeps_most_recent(self, manager, home):
        contents = [f"version {i}\n".encode() for i in range(5)]
        taken = []
        for data in contents:
            _write_live(home, AgentKind.GEMINI_CLI, data)
            taken.append(manager.snapshot(AgentKind.GEMINI_CLI))

        remaining = manager.list(AgentKind.GEMINI_CLI)

        assert len(remaining) == 3
        assert [s.storage_path for s in remaining] == [s.storage_path for s in reversed(taken[2:])]
        assert [s.storage_path.read_bytes() for s in remaining] == list(reversed(contents[2:]))

    def test_prune_returns_deleted(self, home, backup_dir):
        wide = BackupManager(backup_dir, home=home, retention=5)
        _write_live(home, AgentKind.OPENCODE, b"{}")
        for _ in range(4):
            wide.snapshot(AgentKind.OPENCODE)

        narrow = BackupManager(backup_dir, home=home, retention=1)
        deleted = narrow.prune(AgentKind.OPENCODE)

        assert len(deleted) == 3
        assert all(not s.storage_path.exists() for s in deleted)
        assert len(narrow.list(AgentKind.OPENCODE)) == 1

    def test_prune_keeps_protected_snapshot_within_cap(self, manager, home):
        _write_live(home, AgentKind.AMP, b"{}")
        taken = [manager.snapshot(AgentKind.AMP) for _ in range(3)]
        manager.snapshot(AgentKind.AMP, keep=taken[0])

        remaining = [s.storage_path for s in manager.list(AgentKind.AMP)]

        assert len(remaining) == 3
        assert taken[0].storage_path in remaining
        assert taken[1].storage_path not in remaining

    def test_kinds_are_pruned_independently(self, manager, home):
        _write_live(home, AgentKind.AMP, b"{}")
        _write_live(home, AgentKind.CODEX, b"")
        for _ in range(4):
            manager.snapshot(AgentKind.AMP)
        manager.snapshot(AgentKind.CODEX)

        assert len(manager.list(AgentKind.AMP)) == 3
        assert len(manager.list(AgentKind.CODEX)) == 1

    def test_list_ignores_foreign_files(self, manager, home):
        _write_live(home, AgentKind.AMP, b"{}")
        manager.snapshot(AgentKind.AMP)
        (manager.kind_dir(AgentKind.AMP) / "README").write_text("notes")

        assert len(manager.list(AgentKind.AMP)) == 1


class TestRestore:
    def test_restore_is_byte_identical(self, manager, home):
        original = b"# original\n\xe2\x9c\x93 keep me\n"
        live = _write_live(home, AgentKind.GEMINI_CLI, original)
        snapshot = manager.snapshot(AgentKind.GEMINI_CLI)
        live.write_bytes(b"GEMINI_MODEL=changed\n")

        previous = manager.restore(snapshot)

        assert live.read_bytes() == original
        assert previous.storage_path.read_bytes() == b"GEMINI_MODEL=changed\n"

    def test_restore_when_live_file_was_deleted(self, manager, home):
        live = _write_live(home, AgentKind.AMP, b'{"amp.url": "x"}')
        snapshot = manager.snapshot(AgentKind.AMP)
        live.unlink()

        previous = manager.restore(snapshot)

        assert previous is None
        assert live.read_bytes() == b'{"amp.url": "x"}'

    def test_missing_snapshot_raises_and_leaves_live_file(self, manager, home):
        live = _write_live(home, AgentKind.CLAUDE_CODE, b'{"v": 1}')
        snapshot = manager.snapshot(AgentKind.CLAUDE_CODE)
        live.write_bytes(b'{"v": 2}')
        snapshot.storage_path.unlink()

        with pytest.raises(RestoreFailed, match="no longer exists"):
            manager.restore(snapshot)

        assert live.read_bytes() == b'{"v": 2}'

    def test_truncated_snapshot_raises(self, manager, home):
        live = _write_live(home, AgentKind.CLAUDE_CODE, b'{"v": 1}')
        snapshot = manager.snapshot(AgentKind.CLAUDE_CODE)
        snapshot.storage_path.write_bytes(b'{"v"')
        live.write_bytes(b'{"v": 2}')

        with pytest.raises(RestoreFailed, match="expected 8"):
            manager.restore(snapshot)

        assert live.read_bytes() == b'{"v": 2}'

    def test_restoring_oldest_with_full_cap_keeps_it_listed(self, manager, home):
        taken = []
        for i in range(3):
            _write_live(home, AgentKind.CODEX, f"v{i}\n".encode())
            taken.append(manager.snapshot(AgentKind.CODEX))
        live = _write_live(home, AgentKind.CODEX, b"current\n")

        previous = manager.restore(taken[0])

        remaining = [s.storage_path for s in manager.list(AgentKind.CODEX)]
        assert live.read_bytes() == b"v0\n"
        assert len(remaining) == 3
        assert taken[0].storage_path in remaining
        assert previous.storage_path in remaining
        assert taken[1].storage_path not in remaining

    def test_restore_through_symlink_updates_link_target(self, manager, home, tmp_path):
        real = tmp_path / "dotfiles" / "settings.json"
        real.parent.mkdir()
        real.write_bytes(b'{"v": 1}')
        os.chmod(real, 0o644)
        link = AgentKind.CLAUDE_CODE.config_path(home)
        link.parent.mkdir(parents=True)
        link.symlink_to(real)
        snapshot = manager.snapshot(AgentKind.CLAUDE_CODE)
        real.write_bytes(b'{"v": 2}')

        manager.restore(snapshot)

        assert link.is_symlink()
        assert real.read_bytes() == b'{"v": 1}'
        assert os.stat(real).st_mode & 0o777 == 0o644

    def test_restore_error_carries_exit_code(self, manager, tmp_path):
        ghost = ConfigSnapshot(
            agent_kind=AgentKind.AMP,
            source_path=tmp_path / "settings.json",
            captured_at=datetime.now(timezone.utc),
            storage_path=tmp_path / "gone.bak",
            size_bytes=3,
        )

        with pytest.raises(RestoreFailed) as exc_info:
            manager.restore(ghost)

        assert exc_info.value.exit_code == 5
        assert exc_info.value.path == tmp_path / "gone.bak"


class TestDelete:
    def test_delete_is_idempotent(self, manager, home):
        _write_live(home, AgentKind.AMP, b"{}")
        snapshot = manager.snapshot(AgentKind.AMP)

        manager.delete(snapshot)
        manager.delete(snapshot)

        assert manager.list(AgentKind.AMP) == []
