"""
Pipeline Module
===============

Fixed-cadence orchestration of capture, quantization and transmission.

Components:
    - FramePipeline: tick loop with single-slot backpressure
    - PipelineState: IDLE / RUNNING
    - TickOutcome: per-tick result
    - PipelineMetrics: tick and frame counters
"""

from antimirror.pipeline.pipeline import (
    FramePipeline,
    PipelineMetrics,
    PipelineState,
    TickOutcome,
)

__all__ = [
    "FramePipeline",
    "PipelineMetrics",
    "PipelineState",
    "TickOutcome",
]
