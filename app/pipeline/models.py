"""Data models for fetch runs: per-adapter manifest entries and run results."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from app.domain.models import AdapterFetchResult, NormalizedNotice


class AdapterStatus(str, Enum):
    """How an adapter's run ended."""

    OK = "ok"
    EMPTY = "empty"  # every provider answered, none had notices
    EXHAUSTED = "exhausted"  # every provider failed
    ERROR = "error"  # the adapter itself raised
    TIMEOUT = "timeout"


FAILED_STATUSES = frozenset({AdapterStatus.EXHAUSTED, AdapterStatus.ERROR, AdapterStatus.TIMEOUT})


@dataclass
class AdapterRunStats:
    """
    Manifest entry for one jurisdiction adapter within a run.

    Attributes:
        jurisdiction: Two-letter code
        status: How the run ended
        notice_count: Notices returned by the adapter
        provider_used: Provider whose result set was kept
        providers_attempted: Providers tried, in order
        provider_errors: "provider: message" entries
        duration_seconds: Wall-clock time spent on the adapter
        error_message: Adapter-level error or timeout description
    """

    jurisdiction: str
    status: AdapterStatus = AdapterStatus.OK
    notice_count: int = 0
    provider_used: Optional[str] = None
    providers_attempted: List[str] = field(default_factory=list)
    provider_errors: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    error_message: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status in FAILED_STATUSES

    @classmethod
    def from_result(cls, result: AdapterFetchResult, duration_seconds: float) -> "AdapterRunStats":
        """Build the manifest entry for an adapter that returned normally."""
        if result.notices:
            status = AdapterStatus.OK
        elif result.exhausted:
            status = AdapterStatus.EXHAUSTED
        else:
            status = AdapterStatus.EMPTY
        return cls(
            jurisdiction=result.jurisdiction,
            status=status,
            notice_count=len(result.notices),
            provider_used=result.provider_used,
            providers_attempted=list(result.providers_attempted),
            provider_errors=list(result.provider_errors),
            duration_seconds=duration_seconds,
        )


@dataclass
class FetchBatch:
    """Everything the orchestrator gathered in one run.

    Attributes:
        run_id: Run identifier shared by every log line of the run
        started_at: UTC timestamp when fan-out began
        finished_at: UTC timestamp when the last adapter finished or timed out
        results: Fetch results of adapters that returned, in completion order
        manifest: One entry per adapter, including failed ones
    """

    run_id: str
    started_at: datetime
    finished_at: datetime
    results: List[AdapterFetchResult] = field(default_factory=list)
    manifest: List[AdapterRunStats] = field(default_factory=list)

    @property
    def notices(self) -> List[NormalizedNotice]:
        """Concatenation of every adapter's notices."""
        return [notice for result in self.results for notice in result.notices]

    @property
    def failed_jurisdictions(self) -> List[str]:
        return sorted(stats.jurisdiction for stats in self.manifest if stats.failed)

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


@dataclass
class PipelineRunResult:
    """
    Aggregate results from a complete pipeline execution.

    Attributes:
        run_id: Run identifier
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        notices: Deduplicated notices, highest score first, then newest notice date
        adapter_stats: Per-adapter manifest
        total_fetched: Notices returned by adapters before cross-adapter dedup
        sink_errors: "sink: message" entries for sinks that failed
        skipped: Whether the run was skipped (lock already held)
    """

    run_id: str
    run_started_at: datetime
    run_finished_at: datetime
    notices: List[NormalizedNotice] = field(default_factory=list)
    adapter_stats: List[AdapterRunStats] = field(default_factory=list)
    total_fetched: int = 0
    sink_errors: List[str] = field(default_factory=list)
    skipped: bool = False

    @property
    def total_notices(self) -> int:
        return len(self.notices)

    @property
    def total_duration_seconds(self) -> float:
        return (self.run_finished_at - self.run_started_at).total_seconds()

    @property
    def failed_jurisdictions(self) -> List[str]:
        return sorted(stats.jurisdiction for stats in self.adapter_stats if stats.failed)

    @property
    def had_errors(self) -> bool:
        return bool(self.failed_jurisdictions or self.sink_errors)

    def counts_by_jurisdiction(self) -> Dict[str, int]:
        """Notice count per jurisdiction, sorted by code."""
        counts: Dict[str, int] = {}
        for notice in self.notices:
            counts[notice.jurisdiction] = counts.get(notice.jurisdiction, 0) + 1
        return dict(sorted(counts.items()))
