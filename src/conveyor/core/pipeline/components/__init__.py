"""Pipeline worker components.

- PipelineWorker / WorkerState: Thread base class and its state machine
- Producer: Pushes a private item sequence into the channel
- Consumer: Drains the channel into the sink until the marker arrives
"""

from __future__ import annotations

from conveyor.core.pipeline.components.consumer import Consumer
from conveyor.core.pipeline.components.producer import Producer
from conveyor.core.pipeline.components.worker import PipelineWorker, WorkerState

__all__ = [
    "Consumer",
    "PipelineWorker",
    "Producer",
    "WorkerState",
]
