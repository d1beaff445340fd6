"""testsieve CLI - Command-line interface for testsieve."""

from testsieve.cli.main import app, run_cli

__all__ = ["app", "run_cli"]
