"""Pipeline orchestration: bounded fan-out over adapters, merge, and sinks."""

from .models import AdapterRunStats, AdapterStatus, FetchBatch, PipelineRunResult
from .orchestrator import FetchOrchestrator
from .runner import IngestPipeline, sort_notices

__all__ = [
    "AdapterRunStats",
    "AdapterStatus",
    "FetchBatch",
    "FetchOrchestrator",
    "IngestPipeline",
    "PipelineRunResult",
    "sort_notices",
]
