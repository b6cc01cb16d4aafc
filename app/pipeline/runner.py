"""Pipeline orchestration for WARN notice ingestion and export."""

import threading
from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence
from uuid import uuid4

from app.adapters.registry import list_adapters
from app.adapters.state import StateAdapter
from app.config.environment import EnvironmentConfig
from app.config.models import AppConfig
from app.dedup import deduplicate
from app.domain.models import NormalizedNotice
from app.logging import get_logger, log_context
from app.utils.timestamps import utc_now

from .models import PipelineRunResult
from .orchestrator import FetchOrchestrator

logger = get_logger(__name__, component="pipeline")

AdapterFactory = Callable[[AppConfig, Optional[List[str]]], List[StateAdapter]]


def sort_notices(notices: Iterable[NormalizedNotice]) -> List[NormalizedNotice]:
    """Order notices by impact score (desc), then notice date (newest first).

    Notices without a score or a date sort after those with one.
    """

    def key(notice: NormalizedNotice):
        score = notice.impact.score if notice.impact is not None else -1
        ordinal = notice.notice_date.toordinal() if notice.notice_date else date.min.toordinal()
        return (-score, -ordinal, notice.jurisdiction, notice.employer_name)

    return sorted(notices, key=key)


class IngestPipeline:
    """
    Orchestrates a single fetch across all registered jurisdictions.

    The pipeline fans out over jurisdiction adapters, merges notices that
    several providers reported, orders them for export, and hands the run to
    each configured sink.
    """

    def __init__(
        self,
        app_config: AppConfig,
        env_config: Optional[EnvironmentConfig] = None,
        sinks: Optional[Sequence] = None,
        orchestrator: Optional[FetchOrchestrator] = None,
        states: Optional[List[str]] = None,
        adapter_factory: AdapterFactory = list_adapters,
    ):
        """
        Initialize the ingest pipeline.

        Args:
            app_config: Application configuration
            env_config: Environment configuration (STATES narrows the run)
            sinks: Objects with a write(result) method, called in order
            orchestrator: Fan-out runner (built from app_config when omitted)
            states: Restrict runs to these jurisdictions (takes precedence over env)
            adapter_factory: Builds adapters from config and a state filter
        """
        self.app_config = app_config
        self.env_config = env_config
        self.sinks = list(sinks or [])
        self.orchestrator = orchestrator or FetchOrchestrator(
            max_workers=app_config.orchestrator.max_workers,
            adapter_timeout_seconds=app_config.orchestrator.adapter_timeout_seconds,
        )
        self.states = states or (env_config.states if env_config and env_config.states else None)
        self.adapter_factory = adapter_factory
        self._lock = threading.Lock()

    def run_once(self) -> PipelineRunResult:
        """
        Execute a complete fetch of all enabled jurisdictions.

        This method:
        1. Acquires a lock to prevent concurrent runs
        2. Builds the jurisdiction adapters
        3. Fetches them through the orchestrator
        4. Merges notices sharing an identity and orders them
        5. Writes the result to every sink

        Returns:
            PipelineRunResult with notices, per-adapter manifest and sink errors

        Raises:
            AdapterConfigurationError: If a configured provider cannot be built.
            Adapter and sink failures are captured in the result.
        """
        run_started_at = utc_now()
        run_id = uuid4().hex

        if not self._lock.acquire(blocking=False):
            with log_context(run_id=run_id):
                logger.warning(
                    "Pipeline run skipped: previous run still in progress",
                    extra={
                        "event": "pipeline.run.skipped",
                        "reason": "lock_held",
                    },
                )
            return PipelineRunResult(
                run_id=run_id,
                run_started_at=run_started_at,
                run_finished_at=utc_now(),
                skipped=True,
            )

        try:
            with log_context(run_id=run_id):
                adapters = self.adapter_factory(self.app_config, self.states)
                logger.info(
                    "Pipeline run started",
                    extra={
                        "event": "pipeline.run.started",
                        "adapter_count": len(adapters),
                        "states": self.states or "all",
                    },
                )

                batch = self.orchestrator.run(adapters, run_id=run_id)
                fetched = batch.notices
                notices = sort_notices(deduplicate(fetched))

                result = PipelineRunResult(
                    run_id=run_id,
                    run_started_at=run_started_at,
                    run_finished_at=utc_now(),
                    notices=notices,
                    adapter_stats=batch.manifest,
                    total_fetched=len(fetched),
                )

                self._write_sinks(result)
                result.run_finished_at = utc_now()

                logger.info(
                    "Pipeline run completed",
                    extra={
                        "event": "pipeline.run.completed",
                        "duration_ms": int(result.total_duration_seconds * 1000),
                        "total_fetched": result.total_fetched,
                        "total_notices": result.total_notices,
                        "states_with_data": len(result.counts_by_jurisdiction()),
                        "states_failed": result.failed_jurisdictions,
                        "sink_errors": len(result.sink_errors),
                        "had_errors": result.had_errors,
                    },
                )
                return result
        finally:
            self._lock.release()

    def _write_sinks(self, result: PipelineRunResult) -> None:
        """Hand the result to every sink; one failing sink does not stop the rest."""
        for sink in self.sinks:
            sink_name = getattr(sink, "name", type(sink).__name__)
            try:
                sink.write(result)
            except Exception as e:
                result.sink_errors.append(f"{sink_name}: {e}")
                logger.error(
                    f"Sink {sink_name} failed: {e}",
                    extra={
                        "event": "pipeline.sink.failed",
                        "sink": sink_name,
                        "error_type": type(e).__name__,
                    },
                    exc_info=True,
                )
