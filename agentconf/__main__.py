"""Allow running agentconf as ``python -m agentconf``."""

from agentconf.cli import app

if __name__ == "__main__":
    app()
