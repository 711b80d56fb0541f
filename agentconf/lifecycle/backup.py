"""Snapshots of agent configuration files.

Every generative write is preceded by a byte-identical copy of the live
file. Snapshots live under ``<backup_dir>/<kind>/`` and are named after
their capture time, so listing needs no index file:

    <backup_dir>/claude-code/claude-code--20261019T101112.123456Z.bak

Capture times are strictly increasing per agent. A ``-N`` counter before
the extension resolves any remaining name clash.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path

from agentconf.config.settings import DEFAULT_BACKUP_RETENTION
from agentconf.integrations.agents import AgentKind
from agentconf.models import ConfigSnapshot
from agentconf.utils.errors import ReadFailed, RestoreFailed, WriteFailed
from agentconf.utils.fileio import SECURE_FILE_MODE, atomic_write_bytes
from agentconf.utils.logging import log_file_operation

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = ".bak"
_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S.%f"
_SNAPSHOT_NAME_RE = re.compile(
    r"^(?P<kind>[a-z][a-z-]*)--(?P<stamp>\d{8}T\d{6}\.\d{6})Z(?:-(?P<counter>\d+))?\.bak$"
)


def snapshot_name(kind: AgentKind, captured_at: datetime, counter: int = 0) -> str:
    stamp = captured_at.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)
    suffix = f"-{counter}" if counter else ""
    return f"{kind.value}--{stamp}Z{suffix}{SNAPSHOT_SUFFIX}"


def parse_snapshot_name(name: str) -> tuple[AgentKind, datetime, int] | None:
    """Parse a snapshot file name into (kind, capture time, counter)."""
    match = _SNAPSHOT_NAME_RE.match(name)
    if not match:
        return None
    try:
        kind = AgentKind(match.group("kind"))
        captured_at = datetime.strptime(match.group("stamp"), _TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None
    return kind, captured_at, int(match.group("counter") or 0)


class BackupManager:
    """Create, list, restore and prune configuration snapshots.

    Attributes:
        backup_dir: Root directory for snapshot storage
        home: Directory the live agent config paths are resolved under
        retention: Maximum snapshots kept per agent kind
    """

    def __init__(
        self,
        backup_dir: Path,
        home: Path | None = None,
        retention: int = DEFAULT_BACKUP_RETENTION,
    ) -> None:
        if retention < 1:
            raise ValueError(f"retention must be >= 1, got {retention}")
        self.backup_dir = backup_dir
        self.home = home or Path.home()
        self.retention = retention

    def kind_dir(self, kind: AgentKind) -> Path:
        return self.backup_dir / kind.value

    def snapshot(self, kind: AgentKind, *, keep: ConfigSnapshot | None = None) -> ConfigSnapshot | None:
        """Copy the live config file into snapshot storage, then prune.

        Args:
            kind: Agent whose live file to copy
            keep: Existing snapshot the prune must not delete

        Returns:
            The new snapshot, or None if the live file does not exist yet

        Raises:
            ReadFailed: If the live file cannot be read
            WriteFailed: If the snapshot cannot be stored
        """
        source_path = kind.config_path(self.home)
        try:
            data = source_path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise ReadFailed(f"Cannot snapshot {source_path}: {e}", path=source_path) from e

        existing = self.list(kind)
        captured_at = datetime.now(timezone.utc)
        if existing and captured_at <= existing[0].captured_at:
            captured_at = existing[0].captured_at + timedelta(microseconds=1)

        directory = self.kind_dir(kind)
        counter = 0
        storage_path = directory / snapshot_name(kind, captured_at)
        while storage_path.exists():
            counter += 1
            storage_path = directory / snapshot_name(kind, captured_at, counter)

        try:
            atomic_write_bytes(storage_path, data, mode=SECURE_FILE_MODE, prefix=".snapshot-")
        except OSError as e:
            raise WriteFailed(f"Cannot store snapshot {storage_path}: {e}", path=storage_path) from e

        log_file_operation("snapshot", source_path, f"{len(data)} bytes -> {storage_path.name}")
        snapshot = ConfigSnapshot(
            agent_kind=kind,
            source_path=source_path,
            captured_at=captured_at,
            storage_path=storage_path,
            size_bytes=len(data),
        )

        # Retention runs in the same step so the count never exceeds the cap
        self.prune(kind, keep=keep)
        return snapshot

    def list(self, kind: AgentKind) -> list[ConfigSnapshot]:
        """Snapshots for ``kind``, newest first."""
        directory = self.kind_dir(kind)
        if not directory.is_dir():
            return []

        source_path = kind.config_path(self.home)
        found: list[tuple[datetime, int, ConfigSnapshot]] = []
        for entry in directory.iterdir():
            parsed = parse_snapshot_name(entry.name)
            if parsed is None or parsed[0] is not kind:
                continue
            try:
                size_bytes = entry.stat().st_size
            except OSError:
                # Removed between iterdir() and stat()
                continue
            _, captured_at, counter = parsed
            found.append(
                (
                    captured_at,
                    counter,
                    ConfigSnapshot(
                        agent_kind=kind,
                        source_path=source_path,
                        captured_at=captured_at,
                        storage_path=entry,
                        size_bytes=size_bytes,
                    ),
                )
            )

        found.sort(key=lambda item: (item[0], item[1]), reverse=True)
        return [snapshot for _, _, snapshot in found]

    def restore(self, snapshot: ConfigSnapshot) -> ConfigSnapshot | None:
        """Write a snapshot's bytes back to the live path atomically.

        The current live file is snapshotted first, so a restore can itself
        be undone.

        Returns:
            The snapshot of the live file taken before restoring, if any

        Raises:
            RestoreFailed: If the snapshot is missing, truncated or unreadable,
                or the live file cannot be replaced. The live file is left
                untouched in every case.
        """
        storage_path = snapshot.storage_path
        try:
            data = storage_path.read_bytes()
        except FileNotFoundError as e:
            raise RestoreFailed(f"Snapshot no longer exists: {storage_path}", path=storage_path) from e
        except OSError as e:
            raise RestoreFailed(f"Cannot read snapshot {storage_path}: {e}", path=storage_path) from e

        if len(data) != snapshot.size_bytes:
            raise RestoreFailed(
                f"Snapshot {storage_path} is {len(data)} bytes, expected {snapshot.size_bytes}",
                path=storage_path,
            )

        kind = snapshot.agent_kind
        try:
            # The snapshot being restored must survive this prune
            previous = self.snapshot(kind, keep=snapshot)
        except (ReadFailed, WriteFailed) as e:
            raise RestoreFailed(f"Cannot snapshot live file before restore: {e}", path=e.path) from e

        target = kind.config_path(self.home)
        try:
            atomic_write_bytes(target, data)
        except OSError as e:
            raise RestoreFailed(f"Cannot restore {target}: {e}", path=target) from e

        log_file_operation("restore", target, f"from {storage_path.name}")
        return previous

    def prune(self, kind: AgentKind, *, keep: ConfigSnapshot | None = None) -> list[ConfigSnapshot]:
        """Delete the oldest snapshots beyond the retention cap.

        ``keep`` is never deleted while the cap leaves room for it next to the
        newest snapshot; an older one goes in its place.

        Returns:
            The deleted snapshots, oldest last
        """
        snapshots = self.list(kind)
        protected = [s for s in snapshots if keep is not None and s.storage_path == keep.storage_path]
        if protected and self.retention > 1:
            others = [s for s in snapshots if s.storage_path != keep.storage_path]
            excess = others[self.retention - 1 :]
        else:
            excess = snapshots[self.retention :]
        for snapshot in excess:
            self.delete(snapshot)
        if excess:
            logger.debug(f"Pruned {len(excess)} {kind.value} snapshots")
        return excess

    def delete(self, snapshot: ConfigSnapshot) -> None:
        """Remove one snapshot. Already-missing snapshots are ignored.

        Raises:
            WriteFailed: If the snapshot file exists but cannot be removed
        """
        try:
            snapshot.storage_path.unlink(missing_ok=True)
        except OSError as e:
            raise WriteFailed(
                f"Cannot delete snapshot {snapshot.storage_path}: {e}", path=snapshot.storage_path
            ) from e
        log_file_operation("delete", snapshot.storage_path)


__all__ = [
    "BackupManager",
    "SNAPSHOT_SUFFIX",
    "snapshot_name",
    "parse_snapshot_name",
]
