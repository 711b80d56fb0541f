"""Shared pytest fixtures for agentconf tests."""

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from agentconf.config.settings import Settings
from agentconf.integrations.agents import OperatingMode
from agentconf.models import CanonicalSettings


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Empty home directory for agent config files."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def backup_dir(tmp_path: Path) -> Path:
    return tmp_path / "backups"


@pytest.fixture
def app_settings(home: Path, backup_dir: Path) -> Settings:
    """Application settings pointing at temporary directories, probing disabled."""
    return Settings(
        home_dir=str(home),
        backup_dir=str(backup_dir),
        backup_retention=3,
        probe_after_write=False,
    )


@pytest.fixture
def remote_settings() -> CanonicalSettings:
    return CanonicalSettings(
        endpoint_url="https://proxy.local:8317",
        api_key="sk-test",
        selected_model="claude-3-opus",
        operating_mode=OperatingMode.REMOTE,
    )


@pytest.fixture
def local_settings() -> CanonicalSettings:
    return CanonicalSettings(
        endpoint_url="http://127.0.0.1:8317/v1/",
        api_key="sk-local-management-key",
        selected_model="gemini-2.5-pro",
        operating_mode=OperatingMode.LOCAL,
    )


@pytest.fixture
def temp_config_file(tmp_path: Path) -> Path:
    """Create a temporary agentconf config file with sample values."""
    config_file = tmp_path / ".agentconf-config"
    config_file.write_text(
        """# agentconf configuration
BACKUP_RETENTION="5"
PROBE_TIMEOUT_SECONDS="3.5"
REMOTE_PROXY_URL="https://proxy.example.com"
DEFAULT_MODEL="claude-sonnet-4-5"
PROBE_AFTER_WRITE="false"
"""
    )
    return config_file


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Build an AsyncClient whose requests are answered by ``handler``."""

    def _build(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _build
