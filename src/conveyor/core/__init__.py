"""Core pipeline logic for Conveyor."""
