"""Bounded-concurrency fan-out over jurisdiction adapters.

At most `max_workers` adapters run at once, including adapters that overran
their wall-clock budget: a worker stays occupied until its adapter thread ends.
The budget is also passed to the adapter as a deadline so it starts no further
providers once it has passed. An adapter that overruns or raises is recorded in
the manifest and its siblings carry on. Retries happen inside providers, never
here.
"""

import contextvars
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, Optional, Sequence, Tuple
from uuid import uuid4

from app.adapters.state import StateAdapter
from app.domain.models import AdapterFetchResult
from app.logging import get_logger, log_context
from app.utils.timestamps import utc_now

from .models import AdapterRunStats, AdapterStatus, FetchBatch

logger = get_logger(__name__, component="orchestrator")


class FetchOrchestrator:
    """Runs adapters on a fixed-size worker pool with a per-adapter timeout.

    Attributes:
        max_workers: Adapters in flight at once
        adapter_timeout_seconds: Wall-clock budget per adapter
    """

    def __init__(self, max_workers: int = 4, adapter_timeout_seconds: float = 45.0) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got: {max_workers}")
        if adapter_timeout_seconds <= 0:
            raise ValueError(f"adapter_timeout_seconds must be positive, got: {adapter_timeout_seconds}")
        self.max_workers = max_workers
        self.adapter_timeout_seconds = adapter_timeout_seconds

    def run(self, adapters: Sequence[StateAdapter], run_id: Optional[str] = None) -> FetchBatch:
        """Fetch every adapter and collect results plus a manifest.

        Never raises for adapter failures. Result order follows completion,
        not input order.
        """
        run_id = run_id or uuid4().hex
        started_at = utc_now()
        batch = FetchBatch(run_id=run_id, started_at=started_at, finished_at=started_at)

        logger.info(
            f"Fetching {len(adapters)} adapter(s) with {self.max_workers} worker(s)",
            extra={
                "event": "orchestrator.run.started",
                "run_id": run_id,
                "adapter_count": len(adapters),
                "max_workers": self.max_workers,
                "adapter_timeout_seconds": self.adapter_timeout_seconds,
            },
        )

        if adapters:
            with ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="warn-adapter"
            ) as pool:
                futures = {
                    pool.submit(self._run_adapter, adapter, run_id): adapter for adapter in adapters
                }
                for future in as_completed(futures):
                    result, stats = future.result()
                    if result is not None:
                        batch.results.append(result)
                    batch.manifest.append(stats)

        batch.finished_at = utc_now()
        logger.info(
            f"Fetched {len(batch.notices)} notice(s); {len(batch.failed_jurisdictions)} adapter(s) failed",
            extra={
                "event": "orchestrator.run.completed",
                "run_id": run_id,
                "notice_count": len(batch.notices),
                "failed": batch.failed_jurisdictions,
                "duration_seconds": round(batch.duration_seconds, 3),
            },
        )
        return batch

    def _run_adapter(
        self, adapter: StateAdapter, run_id: str
    ) -> Tuple[Optional[AdapterFetchResult], AdapterRunStats]:
        """Run one adapter under the timeout. Always returns a manifest entry."""
        start = time.monotonic()
        with log_context(run_id=run_id, jurisdiction=adapter.jurisdiction):
            outcome: Dict[str, Any] = {}
            deadline = start + self.adapter_timeout_seconds
            context = contextvars.copy_context()
            runner = threading.Thread(
                target=context.run,
                args=(self._call_adapter, adapter, deadline, outcome),
                name=f"adapter-{adapter.jurisdiction}",
                daemon=True,
            )
            runner.start()
            runner.join(self.adapter_timeout_seconds)
            duration = time.monotonic() - start

            if runner.is_alive():
                logger.error(
                    f"{adapter.jurisdiction} timed out after {self.adapter_timeout_seconds}s",
                    extra={
                        "event": "orchestrator.adapter.timed_out",
                        "timeout_seconds": self.adapter_timeout_seconds,
                    },
                )
                # Hold this worker until the adapter stops; the late result is dropped
                runner.join()
                logger.debug(
                    f"{adapter.jurisdiction} finished after its timeout; result discarded",
                    extra={
                        "event": "orchestrator.adapter.late_result_discarded",
                        "overrun_seconds": round(time.monotonic() - start - self.adapter_timeout_seconds, 3),
                    },
                )
                return None, AdapterRunStats(
                    jurisdiction=adapter.jurisdiction,
                    status=AdapterStatus.TIMEOUT,
                    duration_seconds=duration,
                    error_message=f"Timed out after {self.adapter_timeout_seconds}s",
                )

            if "error" in outcome:
                error = outcome["error"]
                logger.error(
                    f"{adapter.jurisdiction} adapter failed: {error}",
                    exc_info=(type(error), error, error.__traceback__),
                    extra={
                        "event": "orchestrator.adapter.failed",
                        "error_type": type(error).__name__,
                    },
                )
                return None, AdapterRunStats(
                    jurisdiction=adapter.jurisdiction,
                    status=AdapterStatus.ERROR,
                    duration_seconds=duration,
                    error_message=f"{type(error).__name__}: {error}",
                )

            result: AdapterFetchResult = outcome["result"]
            stats = AdapterRunStats.from_result(result, duration)
            logger.info(
                f"{adapter.jurisdiction}: {stats.notice_count} notice(s) in {duration:.1f}s",
                extra={
                    "event": "orchestrator.adapter.completed",
                    "status": stats.status.value,
                    "notice_count": stats.notice_count,
                    "provider_used": stats.provider_used,
                    "duration_seconds": round(duration, 3),
                },
            )
            return result, stats

    @staticmethod
    def _call_adapter(adapter: StateAdapter, deadline: float, outcome: Dict[str, Any]) -> None:
        try:
            outcome["result"] = adapter.fetch_latest(deadline=deadline)
        except Exception as e:
            outcome["error"] = e
