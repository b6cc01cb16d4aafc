"""Per-jurisdiction adapter with ordered provider fallback.

A StateAdapter walks its provider chain in priority order. After each provider
it checks whether the best result set so far is good enough under the
adapter's fallback policy:

- first_non_empty: stop at the first provider that returns any notice
- minimum_count: keep escalating while the best count is below min_results

The best (largest) result set seen is kept, not necessarily the last one.
Provider failures are recorded as outcomes and never propagate.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from app.config.models import FallbackPolicy
from app.domain.models import AdapterFetchResult, NormalizedNotice
from app.logging import get_logger, log_context
from app.utils.timestamps import utc_now

from .base import BaseProvider
from .exceptions import AdapterError

logger = get_logger(__name__, component="adapter")


@dataclass
class ProviderOutcome:
    """Result of one provider attempt: success with a count, or failure."""

    provider: str
    notices: List[NormalizedNotice] = field(default_factory=list)
    error: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def count(self) -> int:
        return len(self.notices)


class StateAdapter:
    """Fetches one jurisdiction's notices through an ordered provider chain.

    Attributes:
        jurisdiction: Two-letter code
        name: Display name of the jurisdiction's source
        source_url: Official listing URL (informational)
        providers: Providers in priority order
        policy: Escalation policy
        min_results: Count that stops escalation under minimum_count
    """

    def __init__(
        self,
        jurisdiction: str,
        name: str,
        providers: Sequence[BaseProvider],
        policy: FallbackPolicy = FallbackPolicy.FIRST_NON_EMPTY,
        min_results: int = 1,
        source_url: Optional[str] = None,
    ) -> None:
        if not providers:
            raise ValueError(f"Adapter for {jurisdiction} needs at least one provider")
        if min_results < 1:
            raise ValueError(f"min_results must be at least 1, got: {min_results}")

        self.jurisdiction = jurisdiction.upper()
        self.name = name
        self.source_url = source_url
        self.providers = list(providers)
        self.policy = FallbackPolicy(policy)
        self.min_results = min_results

    def __repr__(self) -> str:
        return (
            f"StateAdapter(jurisdiction={self.jurisdiction!r}, providers={len(self.providers)}, "
            f"policy={self.policy.value!r})"
        )

    def is_sufficient(self, count: int) -> bool:
        """Whether a result count stops escalation under this adapter's policy."""
        if self.policy == FallbackPolicy.MINIMUM_COUNT:
            return count >= self.min_results
        return count >= 1

    def fetch_latest(self, deadline: Optional[float] = None) -> AdapterFetchResult:
        """Run the provider chain and return the best result set.

        Never raises. Every provider failure appears in provider_errors.

        Args:
            deadline: `time.monotonic()` value after which no further provider is
                started; the best result so far is returned
        """
        fetched_at = utc_now()
        outcomes: List[ProviderOutcome] = []
        best: Optional[ProviderOutcome] = None

        for index, provider in enumerate(self.providers):
            if deadline is not None and time.monotonic() >= deadline:
                logger.warning(
                    f"{self.jurisdiction}: deadline reached before {provider.name}, "
                    f"skipping {len(self.providers) - index} provider(s)",
                    extra={
                        "event": "adapter.deadline.reached",
                        "jurisdiction": self.jurisdiction,
                        "skipped_providers": [p.name for p in self.providers[index:]],
                    },
                )
                break

            with log_context(jurisdiction=self.jurisdiction, provider=provider.name):
                outcome = self._try_provider(provider, fetched_at)
            outcomes.append(outcome)

            if outcome.succeeded and (best is None or outcome.count > best.count):
                best = outcome
            best_count = best.count if best else 0
            if self.is_sufficient(best_count):
                break

            remaining = self.providers[index + 1 :]
            if remaining:
                logger.info(
                    f"{self.jurisdiction}: {best_count} notice(s) after {provider.name}, "
                    f"escalating to {remaining[0].name}",
                    extra={
                        "event": "adapter.fallback.escalated",
                        "jurisdiction": self.jurisdiction,
                        "policy": self.policy.value,
                        "best_count": best_count,
                        "min_results": self.min_results,
                        "next_provider": remaining[0].name,
                    },
                )

        result = AdapterFetchResult(
            jurisdiction=self.jurisdiction,
            fetched_at=fetched_at,
            notices=best.notices if best else [],
            provider_used=best.provider if best and best.count else None,
            providers_attempted=[outcome.provider for outcome in outcomes],
            provider_errors=[
                f"{outcome.provider}: {outcome.error}" for outcome in outcomes if not outcome.succeeded
            ],
        )

        if result.exhausted:
            logger.warning(
                f"{self.jurisdiction}: all {len(outcomes)} provider(s) failed",
                extra={
                    "event": "adapter.providers.exhausted",
                    "jurisdiction": self.jurisdiction,
                    "errors": result.provider_errors,
                },
            )
        else:
            logger.info(
                f"{self.jurisdiction}: kept {len(result.notices)} notice(s) from {result.provider_used or 'no provider'}",
                extra={
                    "event": "adapter.fetch.completed",
                    "jurisdiction": self.jurisdiction,
                    "provider_used": result.provider_used,
                    "providers_attempted": len(outcomes),
                    "notice_count": len(result.notices),
                },
            )
        return result

    def _try_provider(self, provider: BaseProvider, fetched_at) -> ProviderOutcome:
        start = time.monotonic()
        try:
            notices = provider.fetch_notices(fetched_at)
        except AdapterError as e:
            duration = time.monotonic() - start
            logger.warning(
                f"Provider {provider.name} failed: {e}",
                extra={
                    "event": "adapter.provider.failed",
                    "jurisdiction": self.jurisdiction,
                    "provider": provider.name,
                    "error_type": type(e).__name__,
                    "duration_seconds": round(duration, 3),
                },
            )
            return ProviderOutcome(provider=provider.name, error=str(e), duration_seconds=duration)
        except Exception as e:
            # Parser bugs on unexpected markup must not take the adapter down
            duration = time.monotonic() - start
            logger.error(
                f"Unexpected error in provider {provider.name}: {e}",
                exc_info=True,
                extra={
                    "event": "adapter.provider.crashed",
                    "jurisdiction": self.jurisdiction,
                    "provider": provider.name,
                    "error_type": type(e).__name__,
                },
            )
            return ProviderOutcome(
                provider=provider.name,
                error=f"{type(e).__name__}: {e}",
                duration_seconds=duration,
            )

        duration = time.monotonic() - start
        logger.debug(
            f"Provider {provider.name} returned {len(notices)} notice(s)",
            extra={
                "event": "adapter.provider.succeeded",
                "jurisdiction": self.jurisdiction,
                "provider": provider.name,
                "notice_count": len(notices),
                "duration_seconds": round(duration, 3),
            },
        )
        return ProviderOutcome(provider=provider.name, notices=notices, duration_seconds=duration)
