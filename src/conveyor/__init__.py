"""Conveyor - bounded producer/consumer pipeline with graceful shutdown."""

__version__ = "0.1.0"
