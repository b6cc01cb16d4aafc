"""Periodic execution of the ingest pipeline."""

from .service import SchedulerService

__all__ = [
    "SchedulerService",
]
