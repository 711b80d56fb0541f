"""Atomic file replacement shared by config saves, generated writes and restores."""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

# Agent config files carry API keys
SECURE_FILE_MODE = 0o600


def _existing_mode(path: Path) -> int | None:
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        return None


def atomic_write_bytes(
    target_path: Path,
    data: bytes,
    *,
    mode: int | None = None,
    prefix: str = ".agentconf-",
) -> None:
    """Atomically replace ``target_path`` with ``data``.

    The content is written to a temp file in the same directory and moved
    into place with ``os.replace``, so readers observe either the old or the
    new content, never a partial file.

    A symlinked target is resolved first, so the link survives and the file
    it points to is the one replaced.

    Args:
        target_path: File to create or replace
        data: Exact bytes to store
        mode: Permission bits for the new file. By default an existing
            file keeps its mode and a new one gets SECURE_FILE_MODE.
        prefix: Temp file name prefix

    Raises:
        OSError: If the directory cannot be created or any write step fails.
            The temp file is removed and the target is left untouched.
    """
    target_path = Path(target_path).resolve()
    target_path.parent.mkdir(parents=True, exist_ok=True)

    if mode is None:
        mode = _existing_mode(target_path)
        if mode is None:
            mode = SECURE_FILE_MODE

    fd, temp_path = tempfile.mkstemp(dir=target_path.parent, prefix=prefix)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        os.chmod(temp_path, mode)

        os.replace(temp_path, target_path)
    except BaseException:
        # Clean up temp file on error
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def atomic_write_text(
    target_path: Path,
    text: str,
    *,
    mode: int | None = None,
    prefix: str = ".agentconf-",
) -> None:
    """Text variant of :func:`atomic_write_bytes` (UTF-8)."""
    atomic_write_bytes(target_path, text.encode("utf-8"), mode=mode, prefix=prefix)


__all__ = ["SECURE_FILE_MODE", "atomic_write_bytes", "atomic_write_text"]
