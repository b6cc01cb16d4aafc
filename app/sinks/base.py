"""Base class for run-result sinks."""

from abc import ABC, abstractmethod

from app.pipeline.models import PipelineRunResult


class NoticeSink(ABC):
    """Destination for the notices of a completed run.

    Sinks may raise; the pipeline records the failure and moves on to the
    next sink.
    """

    name: str = "sink"

    @abstractmethod
    def write(self, result: PipelineRunResult) -> None:
        """Persist the run's notices and metadata."""
        pass
