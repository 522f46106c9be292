"""Per-model usage ledger for routing observability.

The UsageLedger records the outcome of every call made with a routed model:
call count, running average latency and running average error rate. It is
write-only from the router's point of view: the scoring engine never reads
it, so recording usage does not change routing decisions.

Concurrency: each model id has its own lock guarding the
(count, avg_latency, error_rate) triple, so concurrent recordings for the
same model cannot lose updates while recordings for different models do
not contend. Lock creation itself is serialised by a registry lock.
"""

from __future__ import annotations

import math
import threading
from dataclasses import asdict, dataclass

import structlog

log = structlog.get_logger(__name__)


@dataclass
class UsageRecord:
    """Aggregated call outcomes for one model.

    Attributes:
        model_id: Catalog id of the model
        call_count: Number of recorded calls
        avg_latency_ms: Running average latency in milliseconds
        error_rate: Running share of failed calls (0.0-1.0)
    """

    model_id: str
    call_count: int = 0
    avg_latency_ms: float = 0.0
    error_rate: float = 0.0

    def to_dict(self) -> dict[str, str | int | float]:
        return asdict(self)


class UsageLedger:
    """Thread-safe in-memory ledger keyed by model id.

    Lives for the process lifetime; nothing is persisted.

    Lock order: a per-model lock may be held while taking the registry
    lock, never the reverse. A record is only inserted, updated or removed
    while its model lock is held, so readers never see a zero-count entry.
    Per-model locks are never discarded, so a writer that fetched its lock
    before a reset still serialises with every later writer.
    """

    def __init__(self) -> None:
        """Initialize empty ledger."""
        self._records: dict[str, UsageRecord] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

        log.info("usage_ledger.initialized")

    def _lock_for(self, model_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(model_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[model_id] = lock
            return lock

    def record_usage(self, model_id: str, latency_ms: float, success: bool) -> UsageRecord:
        """Record one call outcome and update the model's running averages.

        Args:
            model_id: Catalog id of the model that served the call
            latency_ms: Observed latency in milliseconds
            success: Whether the call succeeded

        Returns:
            Copy of the updated record

        Raises:
            ValueError: If model_id is empty or latency_ms is negative or not finite
        """
        if not model_id:
            raise ValueError("model_id must be non-empty")
        if not math.isfinite(latency_ms):
            raise ValueError(f"latency_ms must be finite, got {latency_ms}")
        if latency_ms < 0:
            raise ValueError(f"latency_ms cannot be negative, got {latency_ms}")

        with self._lock_for(model_id):
            record = self._records.get(model_id)
            if record is None:
                record = UsageRecord(model_id=model_id)
                with self._registry_lock:
                    self._records[model_id] = record

            count = record.call_count + 1
            failure = 0.0 if success else 1.0

            record.avg_latency_ms = (record.avg_latency_ms * (count - 1) + latency_ms) / count
            record.error_rate = (record.error_rate * (count - 1) + failure) / count
            record.call_count = count
            snapshot = UsageRecord(**asdict(record))

        log.info(
            "usage_ledger.recorded",
            model_id=model_id,
            latency_ms=latency_ms,
            success=success,
            call_count=snapshot.call_count,
            avg_latency_ms=round(snapshot.avg_latency_ms, 3),
            error_rate=round(snapshot.error_rate, 4),
        )

        return snapshot

    def get_model_stats(self, model_id: str) -> UsageRecord | None:
        """Return a copy of one model's record, or None if never recorded."""
        with self._registry_lock:
            lock = self._locks.get(model_id)
        if lock is None:
            return None
        with lock:
            record = self._records.get(model_id)
            return UsageRecord(**asdict(record)) if record is not None else None

    def get_usage_stats(self) -> dict[str, UsageRecord]:
        """Return a snapshot of the whole ledger.

        Each record is copied under its own lock, so every entry is
        internally consistent; the snapshot as a whole is not atomic
        across models.
        """
        with self._registry_lock:
            items = [(model_id, self._locks[model_id]) for model_id in self._records]

        snapshot: dict[str, UsageRecord] = {}
        for model_id, lock in items:
            with lock:
                record = self._records.get(model_id)
                if record is not None:
                    snapshot[model_id] = UsageRecord(**asdict(record))

        log.debug("usage_ledger.snapshot", model_count=len(snapshot))
        return snapshot

    def reset(self) -> None:
        """Clear all records. Used for testing."""
        with self._registry_lock:
            items = list(self._locks.items())

        for model_id, lock in items:
            with lock, self._registry_lock:
                self._records.pop(model_id, None)
        log.debug("usage_ledger.reset")
