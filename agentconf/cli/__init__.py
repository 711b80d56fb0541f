"""Command-line interface for agentconf."""

from agentconf.cli.app import app

__all__ = ["app"]
