"""The ``jiwa`` command line tool."""

from jiwa_cli.cli import app

__all__ = ["app"]
