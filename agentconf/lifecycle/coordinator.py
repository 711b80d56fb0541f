"""Public async facade over the configuration lifecycle.

All operations against one agent kind are serialized through a per-kind
``asyncio.Lock`` (waiters are woken in arrival order). Different kinds run
fully concurrently. Blocking file I/O is moved off the event loop with
``asyncio.to_thread``.

States per kind::

    idle -> reading -> idle
    idle -> snapshotting -> generating -> testing -> idle
    idle -> restoring -> idle

Every operation returns its kind to ``idle`` on success and on failure.
Once a snapshot or write has started, cancelling the caller does not
interrupt it: the kind stays locked until the file work is finished and the
cancellation is delivered afterwards.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import TypeVar

from agentconf.config.settings import Settings
from agentconf.integrations.agents import AgentKind, OperatingMode
from agentconf.integrations.connectivity import ConnectivityTester
from agentconf.integrations.model_catalog import ModelCatalogFetcher
from agentconf.lifecycle.backup import BackupManager
from agentconf.lifecycle.generator import ConfigGenerator, validate_settings
from agentconf.lifecycle.reader import ConfigReader
from agentconf.models import (
    CanonicalSettings,
    CatalogResult,
    ConfigSnapshot,
    GenerateOutcome,
    NotConfigured,
    ParsedAgentConfig,
    ProbeResult,
)
from agentconf.utils.errors import WriteFailed
from agentconf.utils.fileio import atomic_write_text
from agentconf.utils.logging import log_file_operation, log_message

T = TypeVar("T")


class LifecycleState(Enum):
    IDLE = "idle"
    READING = "reading"
    SNAPSHOTTING = "snapshotting"
    GENERATING = "generating"
    TESTING = "testing"
    RESTORING = "restoring"


class LifecycleCoordinator:
    """Serialize reads, writes, restores and probes per agent kind.

    Components are built from the application settings unless injected.

    Attributes:
        app_settings: agentconf's own settings
        reader: Config reader
        generator: Config generator
        backups: Snapshot manager
        tester: Connectivity prober
        catalog: Model lister
    """

    def __init__(
        self,
        app_settings: Settings | None = None,
        *,
        reader: ConfigReader | None = None,
        generator: ConfigGenerator | None = None,
        backups: BackupManager | None = None,
        tester: ConnectivityTester | None = None,
        catalog: ModelCatalogFetcher | None = None,
    ) -> None:
        self.app_settings = app_settings or Settings()
        home = self.app_settings.home_path

        self.reader = reader or ConfigReader(home)
        self.generator = generator or ConfigGenerator(self.reader, self.app_settings)
        self.backups = backups or BackupManager(
            self.app_settings.backup_path,
            home=home,
            retention=self.app_settings.backup_retention,
        )
        self.tester = tester or ConnectivityTester(self.app_settings.probe_timeout_seconds)
        self.catalog = catalog or ModelCatalogFetcher(self.app_settings.catalog_timeout_seconds)

        self._locks: dict[AgentKind, asyncio.Lock] = {}
        self._states: dict[AgentKind, LifecycleState] = {}

    def state(self, kind: AgentKind) -> LifecycleState:
        return self._states.get(kind, LifecycleState.IDLE)

    def path_for(self, kind: AgentKind) -> Path:
        return self.reader.path_for(kind)

    def _lock_for(self, kind: AgentKind) -> asyncio.Lock:
        lock = self._locks.get(kind)
        if lock is None:
            lock = self._locks[kind] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def _operation(self, kind: AgentKind, state: LifecycleState) -> AsyncIterator[None]:
        async with self._lock_for(kind):
            self._states[kind] = state
            try:
                yield
            finally:
                self._states[kind] = LifecycleState.IDLE

    def _enter(self, kind: AgentKind, state: LifecycleState) -> None:
        self._states[kind] = state

    async def _run_to_completion(self, work: Awaitable[T]) -> T:
        """Await ``work`` so that cancelling the caller cannot interrupt it.

        Must be called while holding the kind's lock. On cancellation the
        lock stays held until ``work`` finishes, then CancelledError is
        re-raised.
        """
        task = asyncio.ensure_future(work)
        cancelled = False
        while True:
            try:
                result = await asyncio.shield(task)
                break
            except asyncio.CancelledError:
                if task.done():
                    raise
                cancelled = True
        if cancelled:
            raise asyncio.CancelledError
        return result

    async def read(self, kind: AgentKind) -> ParsedAgentConfig | NotConfigured:
        """Read the agent's current configuration.

        Raises:
            ReadFailed: If the file exists but cannot be read
        """
        async with self._operation(kind, LifecycleState.READING):
            return await asyncio.to_thread(self.reader.read, kind)

    async def preview(
        self,
        kind: AgentKind,
        settings: CanonicalSettings,
        selected_model: str | None = None,
    ) -> str:
        """Render what ``generate`` would write, without touching the file."""
        async with self._operation(kind, LifecycleState.GENERATING):
            return await asyncio.to_thread(self.generator.generate, kind, settings, selected_model)

    async def generate(
        self,
        kind: AgentKind,
        settings: CanonicalSettings,
        selected_model: str | None = None,
        *,
        probe: bool | None = None,
    ) -> GenerateOutcome:
        """Snapshot, render and write the agent's config, then probe it.

        The write is kept even if the probe fails; the probe result is part
        of the outcome.

        Args:
            kind: Target agent
            settings: Canonical settings to write
            selected_model: Overrides ``settings.selected_model`` when given
            probe: Run the connectivity probe (default: PROBE_AFTER_WRITE)

        Raises:
            ConfigValidationError: Before anything is snapshotted or written
            ReadFailed: If the live file cannot be read
            WriteFailed: If the snapshot or the config cannot be written
        """
        if selected_model:
            settings = replace(settings, selected_model=selected_model)
        validate_settings(kind, settings)
        should_probe = self.app_settings.probe_after_write if probe is None else probe

        async def commit() -> tuple[ConfigSnapshot | None, Path]:
            snapshot = await asyncio.to_thread(self.backups.snapshot, kind)
            self._enter(kind, LifecycleState.GENERATING)
            text = await asyncio.to_thread(self.generator.generate, kind, settings)
            return snapshot, await asyncio.to_thread(self._write, kind, text)

        async with self._operation(kind, LifecycleState.SNAPSHOTTING):
            snapshot, path = await self._run_to_completion(commit())

            probe_result = None
            if should_probe:
                self._enter(kind, LifecycleState.TESTING)
                probe_result = await self.tester.probe(kind, settings)

        return GenerateOutcome(agent_kind=kind, path=path, snapshot=snapshot, probe=probe_result)

    async def generate_default(
        self,
        kind: AgentKind,
        mode: OperatingMode,
        *,
        api_key: str = "",
        probe: bool | None = None,
    ) -> GenerateOutcome:
        """Scaffold a first-run config from the application defaults."""
        settings = self.generator.default_settings(kind, mode, api_key)
        return await self.generate(kind, settings, probe=probe)

    async def reset(self, kind: AgentKind) -> GenerateOutcome:
        """Remove every managed field from the agent's config.

        A missing file is left missing.
        """
        async def commit() -> ConfigSnapshot | None:
            snapshot = await asyncio.to_thread(self.backups.snapshot, kind)
            if snapshot is None:
                return None
            self._enter(kind, LifecycleState.GENERATING)
            text = await asyncio.to_thread(self.generator.strip, kind)
            if text is not None:
                await asyncio.to_thread(self._write, kind, text)
            return snapshot

        async with self._operation(kind, LifecycleState.SNAPSHOTTING):
            snapshot = await self._run_to_completion(commit())

        return GenerateOutcome(agent_kind=kind, path=self.path_for(kind), snapshot=snapshot)

    async def list_backups(self, kind: AgentKind) -> list[ConfigSnapshot]:
        async with self._operation(kind, LifecycleState.READING):
            return await asyncio.to_thread(self.backups.list, kind)

    async def restore(self, snapshot: ConfigSnapshot) -> ConfigSnapshot | None:
        """Restore a snapshot over the live file.

        Returns:
            The snapshot of the live file taken just before restoring

        Raises:
            RestoreFailed: If the snapshot is gone or the write fails
        """
        async with self._operation(snapshot.agent_kind, LifecycleState.RESTORING):
            return await self._run_to_completion(asyncio.to_thread(self.backups.restore, snapshot))

    async def probe(self, kind: AgentKind, settings: CanonicalSettings) -> ProbeResult:
        async with self._operation(kind, LifecycleState.TESTING):
            return await self.tester.probe(kind, settings)

    async def fetch_models(
        self,
        kind: AgentKind,
        endpoint_url: str,
        api_key: str,
        *,
        cursor: str | None = None,
    ) -> CatalogResult:
        """List models from an endpoint using the agent's provider protocol."""
        async with self._operation(kind, LifecycleState.TESTING):
            return await self.catalog.fetch_models(
                endpoint_url, api_key, style=kind.probe_style, cursor=cursor
            )

    def _write(self, kind: AgentKind, text: str) -> Path:
        path = self.path_for(kind)
        try:
            atomic_write_text(path, text)
        except OSError as e:
            raise WriteFailed(f"Cannot write {kind.display_name} config at {path}: {e}", path=path) from e
        log_file_operation("write", path, f"{len(text.encode('utf-8'))} bytes")
        log_message(f"Wrote {kind.display_name} configuration")
        return path


__all__ = ["LifecycleCoordinator", "LifecycleState"]
