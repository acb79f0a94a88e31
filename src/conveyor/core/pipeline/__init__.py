"""Bounded producer/consumer pipeline.

This package contains the concurrency core of Conveyor:
- run_pipeline / Coordinator: Orchestrate one run end to end
- BoundedChannel: Thread-safe channel with back-pressure
- Producer / Consumer: Worker threads on the shared channel

Recommended imports:
    from conveyor.core.pipeline import run_pipeline
    from conveyor.core.pipeline.domain import Coordinator
    from conveyor.core.pipeline.components import Producer, Consumer
"""

from conveyor.core.pipeline.domain.coordinator import Coordinator, RunResult, run_pipeline

__all__ = ["Coordinator", "RunResult", "run_pipeline"]
