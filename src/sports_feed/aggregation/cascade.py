from __future__ import annotations

import logging
import time
from collections import Counter
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime

from sports_feed.classification.classifier import classify
from sports_feed.core.config import Settings
from sports_feed.core.dates import utc_now
from sports_feed.domain.enums import FetchErrorKind, SportEnum
from sports_feed.domain.event import Event
from sports_feed.providers.base.adapter import SourceAdapter
from sports_feed.providers.base.errors import FetchError
from sports_feed.providers.base.types import FetchQuery, FetchResult

from .dedupe import dedupe
from .errors import AggregationCycleFailure, AggregatorConfigError
from .normalize import Classifier, normalize_batch
from .synthetic import SyntheticGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CascadePolicy:
    adapter_timeout_s: float = 6.0
    cycle_deadline_s: float = 10.0
    min_events_all: int = 10
    min_events_single: int = 3
    synthetic_target_per_sport: int = 8
    max_workers: int = 8

    @classmethod
    def from_settings(cls, settings: Settings) -> CascadePolicy:
        return cls(
            adapter_timeout_s=settings.adapter_timeout_s,
            cycle_deadline_s=settings.cycle_deadline_s,
            min_events_all=settings.min_events_all,
            min_events_single=settings.min_events_single,
            synthetic_target_per_sport=settings.synthetic_target_per_sport,
            max_workers=settings.max_workers,
        )

    def validate(self) -> None:
        if not 0 < self.adapter_timeout_s < self.cycle_deadline_s:
            raise AggregatorConfigError(
                f"adapter_timeout_s ({self.adapter_timeout_s}) must be positive and below "
                f"cycle_deadline_s ({self.cycle_deadline_s})"
            )
        if self.min_events_all < 0 or self.min_events_single < 0:
            raise AggregatorConfigError("quality thresholds must not be negative")
        if self.synthetic_target_per_sport < 0:
            raise AggregatorConfigError("synthetic_target_per_sport must not be negative")
        if self.max_workers < 1:
            raise AggregatorConfigError("max_workers must be at least 1")

    def threshold_for(self, query: FetchQuery) -> int:
        return self.min_events_all if query.sport is None else self.min_events_single


@dataclass(frozen=True)
class CycleResult:
    cycle_id: int
    query: FetchQuery
    events: list[Event]
    authentic_count: int
    synthetic_count: int
    failures: list[FetchError] = field(default_factory=list)
    started_at: datetime | None = None
    elapsed_s: float = 0.0


class CascadeController:
    """
    One aggregation cycle: fan out to every adapter, normalize, gate on
    quality, pad with synthetic events if needed, dedupe.

    Adapters run in a thread pool. Results are merged in adapter order, so the
    output never depends on which adapter answered first. Adapters still
    running after `adapter_timeout_s` (or at the cycle deadline, if sooner) are
    abandoned and reported as timeouts.
    """

    def __init__(
        self,
        adapters: Sequence[SourceAdapter],
        *,
        policy: CascadePolicy,
        synthetic: SyntheticGenerator,
        classifier: Classifier = classify,
        monotonic: Callable[[], float] = time.monotonic,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        policy.validate()
        keys = [a.provider_key for a in adapters]
        if len(set(keys)) != len(keys):
            raise AggregatorConfigError(f"duplicate adapter provider keys: {keys}")

        self._adapters = list(adapters)
        self._policy = policy
        self._synthetic = synthetic
        self._classifier = classifier
        self._monotonic = monotonic
        self._clock = clock

    @property
    def adapters(self) -> list[SourceAdapter]:
        return list(self._adapters)

    @property
    def policy(self) -> CascadePolicy:
        return self._policy

    def run(self, query: FetchQuery, *, cycle_id: int) -> CycleResult:
        started_at = self._clock()
        t0 = self._monotonic()
        try:
            return self._run(query, cycle_id=cycle_id, started_at=started_at, t0=t0)
        except AggregationCycleFailure:
            raise
        except Exception as exc:
            raise AggregationCycleFailure(
                f"cycle {cycle_id} failed for {query.describe()}: {type(exc).__name__}: {exc}"
            ) from exc

    def _run(
        self, query: FetchQuery, *, cycle_id: int, started_at: datetime, t0: float
    ) -> CycleResult:
        results = self._fan_out(query, t0=t0)

        events: list[Event] = []
        failures: list[FetchError] = []
        for adapter, result in zip(self._adapters, results):
            if result.error is not None:
                failures.append(result.error)
                logger.warning(
                    "adapter %s failed for %s: kind=%s %s",
                    adapter.provider_key,
                    query.describe(),
                    result.error.kind.value,
                    result.error.message,
                )
                continue
            events.extend(
                normalize_batch(
                    result.events,
                    trust_tier=adapter.trust_tier,
                    query=query,
                    classifier=self._classifier,
                )
            )

        authentic = dedupe(events)
        threshold = self._policy.threshold_for(query)

        padding: list[Event] = []
        if len(authentic) < threshold:
            padding = self._synthesize(query, authentic)
            logger.info(
                "synthesis fallback for %s: %d authentic < %d, added %d synthetic",
                query.describe(),
                len(authentic),
                threshold,
                len(padding),
            )

        merged = dedupe([*authentic, *padding]) if padding else authentic
        synthetic_count = sum(1 for e in merged if e.synthetic)

        return CycleResult(
            cycle_id=cycle_id,
            query=query,
            events=merged,
            authentic_count=len(merged) - synthetic_count,
            synthetic_count=synthetic_count,
            failures=failures,
            started_at=started_at,
            elapsed_s=self._monotonic() - t0,
        )

    # -----------------------------
    # Fan-out
    # -----------------------------

    def _fan_out(self, query: FetchQuery, *, t0: float) -> list[FetchResult]:
        """One FetchResult per adapter, in adapter order."""

        if not self._adapters:
            return []

        # Adapters start together, so one wait bounds each of them; the cycle
        # deadline caps it.
        remaining = self._policy.cycle_deadline_s - (self._monotonic() - t0)
        wait_s = max(0.0, min(self._policy.adapter_timeout_s, remaining))

        results: dict[int, FetchResult] = {}
        executor = ThreadPoolExecutor(
            max_workers=min(self._policy.max_workers, len(self._adapters)),
            thread_name_prefix="sports-feed-adapter",
        )
        futures: dict[Future[FetchResult], int] = {
            executor.submit(self._call_adapter, adapter, query): i
            for i, adapter in enumerate(self._adapters)
        }
        try:
            done, _ = wait(futures, timeout=wait_s)
            for future, i in futures.items():
                if future in done:
                    results[i] = future.result()
                    continue
                future.cancel()
                adapter = self._adapters[i]
                logger.warning(
                    "abandoning adapter %s after %.1fs for %s",
                    adapter.provider_key,
                    wait_s,
                    query.describe(),
                )
                results[i] = FetchResult(
                    provider_key=adapter.provider_key,
                    error=FetchError(
                        provider_key=adapter.provider_key,
                        kind=FetchErrorKind.TIMEOUT,
                        message=f"no result within {wait_s:.2f}s",
                    ),
                )
        finally:
            # Do not wait for abandoned adapters; their late results are discarded.
            executor.shutdown(wait=False, cancel_futures=True)

        return [results[i] for i in range(len(self._adapters))]

    def _call_adapter(self, adapter: SourceAdapter, query: FetchQuery) -> FetchResult:
        try:
            return adapter.fetch(query)
        except Exception as exc:
            logger.exception("adapter %s raised for %s", adapter.provider_key, query.describe())
            return FetchResult(
                provider_key=adapter.provider_key,
                error=FetchError(
                    provider_key=adapter.provider_key,
                    kind=FetchErrorKind.MALFORMED_RESPONSE,
                    message=f"{type(exc).__name__}: {exc}",
                ),
            )

    # -----------------------------
    # Synthetic padding
    # -----------------------------

    def _synthesize(self, query: FetchQuery, authentic: Sequence[Event]) -> list[Event]:
        target = self._policy.synthetic_target_per_sport
        sports = [query.sport] if query.sport is not None else list(SportEnum)
        have = Counter(e.sport for e in authentic)
        needed = {s: target - have[s] for s in sports if target - have[s] > 0}
        if not needed:
            return []

        result = self._synthetic.fetch(
            query,
            per_sport=needed,
            taken={e.dedupe_key for e in authentic},
        )
        return normalize_batch(
            result.events,
            trust_tier=self._synthetic.trust_tier,
            query=query,
            classifier=self._classifier,
        )
