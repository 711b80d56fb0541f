"""Typer application for agentconf.

Each command maps onto one LifecycleCoordinator operation. API keys are
accepted through ``--api-key`` or ``AGENTCONF_API_KEY`` and never printed.
"""

import asyncio
from collections.abc import Coroutine, Iterator
from contextlib import contextmanager
from dataclasses import replace
from typing import Annotated, Any, TypeVar

import typer
from rich.table import Table

from agentconf.config.manager import ConfigManager
from agentconf.integrations.agents import AgentKind, parse_agent_kind, parse_operating_mode
from agentconf.lifecycle.coordinator import LifecycleCoordinator
from agentconf.models import (
    CanonicalSettings,
    ConfigSnapshot,
    GenerateOutcome,
    NotConfigured,
    ParsedAgentConfig,
    ProbeResult,
)
from agentconf.utils.console import (
    console,
    print_error,
    print_header,
    print_info,
    print_step,
    print_success,
    print_warning,
    show_version,
)
from agentconf.utils.errors import AgentConfError, ConfigValidationError, ExitCode, RestoreFailed
from agentconf.utils.logging import setup_logging
from agentconf.utils.redaction import redact

T = TypeVar("T")

app = typer.Typer(
    name="agentconf",
    help="agentconf - Manage CLI coding agent configurations",
    add_completion=False,
    no_args_is_help=True,
)
config_app = typer.Typer(help="Show or change agentconf's own settings")
app.add_typer(config_app, name="config")

AgentArg = Annotated[
    str,
    typer.Argument(help=f"Agent: {', '.join(k.value for k in AgentKind)}"),
]
EndpointOpt = Annotated[str | None, typer.Option("--endpoint", "-e", help="Provider or proxy endpoint URL")]
ApiKeyOpt = Annotated[
    str,
    typer.Option("--api-key", "-k", envvar="AGENTCONF_API_KEY", help="API or management key"),
]
ModelOpt = Annotated[str | None, typer.Option("--model", "-m", help="Model to select")]
ModeOpt = Annotated[str, typer.Option("--mode", help="Operating mode: local or remote")]
ExtensionOpt = Annotated[
    list[str] | None,
    typer.Option("--ext", help="Per-agent extension as key=value (repeatable)"),
]
AvailableModelOpt = Annotated[
    list[str] | None,
    typer.Option("--available-model", "-a", help="Extra model to publish (repeatable)"),
]
NoProbeOpt = Annotated[bool, typer.Option("--no-probe", help="Skip the connectivity probe after writing")]


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        show_version()
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version information",
        ),
    ] = None,
) -> None:
    """agentconf - Manage CLI coding agent configurations.

    Reads, writes, backs up, restores and tests the configuration files of
    Claude Code, Codex, Gemini CLI, Amp, OpenCode and Factory Droid.
    """
    setup_logging()


@contextmanager
def _handle_errors() -> Iterator[None]:
    try:
        yield
    except AgentConfError as e:
        print_error(str(e))
        raise typer.Exit(e.exit_code) from e
    except KeyboardInterrupt as e:
        print_info("\nOperation cancelled by user")
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e


def _load_config() -> ConfigManager:
    config = ConfigManager()
    config.load()
    return config


def _coordinator() -> LifecycleCoordinator:
    return LifecycleCoordinator(_load_config().settings)


def _run(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


def _parse_extensions(values: list[str] | None) -> dict[str, str]:
    extensions: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ConfigValidationError(f"Extension must be key=value, got '{item}'")
        extensions[key.strip()] = value.strip()
    return extensions


def _build_settings(
    endpoint: str | None,
    api_key: str,
    model: str | None,
    mode: str,
    extensions: list[str] | None = None,
    available_models: list[str] | None = None,
) -> CanonicalSettings:
    if not endpoint:
        raise ConfigValidationError("--endpoint is required")
    return CanonicalSettings(
        endpoint_url=endpoint,
        api_key=api_key,
        selected_model=model or "",
        operating_mode=parse_operating_mode(mode),
        extensions=_parse_extensions(extensions),
        available_models=tuple(available_models or ()),
    )


def _print_probe(result: ProbeResult) -> None:
    if result.success:
        detail = f" ({result.model_responded})" if result.model_responded else ""
        print_success(f"Connection OK in {result.latency_ms}ms{detail}")
    else:
        print_error(f"Connection failed: {result.failure_category.value}")
        if result.raw_message:
            print_info(result.raw_message)


def _print_outcome(outcome: GenerateOutcome, action: str) -> None:
    print_success(f"{action} {outcome.agent_kind.display_name} config at {outcome.path}")
    if outcome.snapshot:
        print_step(f"Previous content saved to {outcome.snapshot.storage_path}")
    if outcome.probe is not None:
        _print_probe(outcome.probe)


def _note_unmanaged_key(kind: AgentKind) -> None:
    if kind is AgentKind.AMP:
        print_warning(
            "Amp keeps its API key in its own secret store (~/.local/share/amp/secrets.json); "
            "only amp.url was written. Sign in to Amp with the same key if it cannot authenticate."
        )


@app.command()
def show(agent: AgentArg) -> None:
    """Show an agent's current configuration."""
    with _handle_errors():
        kind = parse_agent_kind(agent)
        result = _run(_coordinator().read(kind))

        if isinstance(result, NotConfigured):
            print_info(f"{kind.display_name} is not configured ({result.path})")
            return
        _print_parsed(result)


def _print_parsed(parsed: ParsedAgentConfig) -> None:
    table = Table(title=f"{parsed.agent_kind.display_name} ({parsed.source_path})")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Endpoint", parsed.endpoint_url or "-")
    table.add_row("API key", redact(parsed.api_key) if parsed.api_key else "-")
    table.add_row("Model", parsed.selected_model or "-")
    table.add_row("Mode", parsed.operating_mode.value if parsed.operating_mode else "-")
    table.add_row("Local proxy", "yes" if parsed.points_to_local_proxy else "no")
    for key, value in parsed.extensions.items():
        table.add_row(key, value)
    console.print(table)


@app.command()
def apply(
    agent: AgentArg,
    endpoint: EndpointOpt = None,
    api_key: ApiKeyOpt = "",
    model: ModelOpt = None,
    mode: ModeOpt = "local",
    ext: ExtensionOpt = None,
    available_model: AvailableModelOpt = None,
    no_probe: NoProbeOpt = False,
) -> None:
    """Write an agent's configuration (snapshotting the current file first)."""
    with _handle_errors():
        kind = parse_agent_kind(agent)
        settings = _build_settings(endpoint, api_key, model, mode, ext, available_model)
        probe = False if no_probe else None
        outcome = _run(_coordinator().generate(kind, settings, probe=probe))
        _print_outcome(outcome, "Wrote")
        _note_unmanaged_key(kind)
        if outcome.probe is not None and not outcome.probe.success:
            raise typer.Exit(ExitCode.PROBE_FAILED)


@app.command()
def preview(
    agent: AgentArg,
    endpoint: EndpointOpt = None,
    api_key: ApiKeyOpt = "",
    model: ModelOpt = None,
    mode: ModeOpt = "local",
    ext: ExtensionOpt = None,
    available_model: AvailableModelOpt = None,
) -> None:
    """Print the configuration that apply would write, without writing it."""
    with _handle_errors():
        kind = parse_agent_kind(agent)
        settings = _build_settings(endpoint, api_key, model, mode, ext, available_model)
        if settings.api_key:
            # Render with the masked key so no escaping of the real one can leak
            settings = replace(settings, api_key=redact(settings.api_key))
        coordinator = _coordinator()
        text = _run(coordinator.preview(kind, settings))
        print_header(f"{kind.display_name}: {coordinator.path_for(kind)}")
        console.print(text, markup=False, highlight=False, end="")


@app.command()
def scaffold(
    agent: AgentArg,
    mode: ModeOpt = "local",
    api_key: ApiKeyOpt = "",
    no_probe: NoProbeOpt = False,
) -> None:
    """Write a first-run configuration from agentconf's defaults."""
    with _handle_errors():
        kind = parse_agent_kind(agent)
        operating_mode = parse_operating_mode(mode)
        probe = False if no_probe else None
        outcome = _run(_coordinator().generate_default(kind, operating_mode, api_key=api_key, probe=probe))
        _print_outcome(outcome, "Scaffolded")
        _note_unmanaged_key(kind)


@app.command()
def reset(agent: AgentArg) -> None:
    """Remove agentconf's settings from an agent's configuration."""
    with _handle_errors():
        kind = parse_agent_kind(agent)
        outcome = _run(_coordinator().reset(kind))
        if outcome.snapshot is None:
            print_info(f"{kind.display_name} is not configured, nothing to reset")
            return
        _print_outcome(outcome, "Reset")


@app.command()
def backups(agent: AgentArg) -> None:
    """List an agent's configuration snapshots, newest first."""
    with _handle_errors():
        kind = parse_agent_kind(agent)
        snapshots = _run(_coordinator().list_backups(kind))
        if not snapshots:
            print_info(f"No snapshots for {kind.display_name}")
            return

        table = Table(title=f"{kind.display_name} snapshots")
        table.add_column("#", justify="right")
        table.add_column("Captured (UTC)")
        table.add_column("Size", justify="right")
        table.add_column("File", style="dim")
        for index, snapshot in enumerate(snapshots, start=1):
            table.add_row(
                str(index),
                snapshot.captured_at.strftime("%Y-%m-%d %H:%M:%S.%f"),
                f"{snapshot.size_bytes} B",
                snapshot.storage_path.name,
            )
        console.print(table)


@app.command()
def restore(
    agent: AgentArg,
    index: Annotated[int, typer.Argument(help="Snapshot number from 'backups' (1 = newest)")] = 1,
) -> None:
    """Restore an agent's configuration from a snapshot."""
    with _handle_errors():
        kind = parse_agent_kind(agent)
        coordinator = _coordinator()

        async def _restore_nth() -> tuple[ConfigSnapshot, ConfigSnapshot | None]:
            snapshots = await coordinator.list_backups(kind)
            if not 1 <= index <= len(snapshots):
                raise RestoreFailed(f"No snapshot #{index} for {kind.display_name} ({len(snapshots)} available)")
            chosen = snapshots[index - 1]
            return chosen, await coordinator.restore(chosen)

        chosen, previous = _run(_restore_nth())
        print_success(f"Restored {kind.display_name} config from {chosen.storage_path.name}")
        if previous:
            print_step(f"Replaced content saved to {previous.storage_path}")


@app.command("test")
def test_connection(
    agent: AgentArg,
    endpoint: EndpointOpt = None,
    api_key: ApiKeyOpt = "",
) -> None:
    """Probe an endpoint, defaulting to the one in the agent's current config."""
    with _handle_errors():
        kind = parse_agent_kind(agent)
        coordinator = _coordinator()

        async def _probe() -> ProbeResult:
            url, key = endpoint, api_key
            if not url or not key:
                current = await coordinator.read(kind)
                if isinstance(current, ParsedAgentConfig):
                    url = url or current.endpoint_url
                    key = key or current.api_key or ""
            if not url:
                raise ConfigValidationError(
                    f"No endpoint given and none found in the {kind.display_name} config"
                )
            settings = CanonicalSettings(endpoint_url=url, api_key=key, selected_model="")
            return await coordinator.probe(kind, settings)

        result = _run(_probe())
        _print_probe(result)
        if not result.success:
            raise typer.Exit(ExitCode.PROBE_FAILED)


@app.command()
def models(
    agent: AgentArg,
    endpoint: EndpointOpt = None,
    api_key: ApiKeyOpt = "",
    cursor: Annotated[str | None, typer.Option("--cursor", help="Continue from a previous page")] = None,
) -> None:
    """List the models an endpoint offers."""
    with _handle_errors():
        kind = parse_agent_kind(agent)
        if not endpoint:
            raise ConfigValidationError("--endpoint is required")

        result = _run(_coordinator().fetch_models(kind, endpoint, api_key, cursor=cursor))
        if not result.success:
            print_error(f"Model listing failed: {result.failure_category.value}")
            if result.raw_message:
                print_info(result.raw_message)
            raise typer.Exit(ExitCode.PROBE_FAILED)

        table = Table(title=f"Models at {endpoint}")
        table.add_column("ID", style="bold")
        table.add_column("Name")
        table.add_column("Tags", style="dim")
        for model in result.models:
            table.add_row(model.id, model.display_name, ", ".join(model.capability_tags))
        console.print(table)
        if result.next_cursor:
            print_info(f"More models available: --cursor {result.next_cursor}")


@config_app.command("show")
def config_show() -> None:
    """Show agentconf's effective settings."""
    with _handle_errors():
        _load_config().show()


@config_app.command("set")
def config_set(
    key: Annotated[str, typer.Argument(help="Setting name, e.g. BACKUP_RETENTION")],
    value: Annotated[str, typer.Argument(help="New value")],
) -> None:
    """Persist one of agentconf's settings."""
    with _handle_errors():
        config = _load_config()
        if config.settings.get_attribute_for_key(key) is None:
            print_warning(f"Unknown setting {key}; it will be stored but ignored")
        config.save(key, value)
        print_success(f"Saved {key}")


__all__ = ["app"]
