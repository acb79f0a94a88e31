"""Shared utilities for Conveyor: errors, logging helpers and constants."""
