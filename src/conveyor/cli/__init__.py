"""Conveyor command-line interface."""

from conveyor.cli.typer_app import app

__all__ = ["app"]
