from __future__ import annotations

import time
from collections import Counter
from dataclasses import asdict, dataclass
from threading import RLock
from typing import Any, Dict, Optional

from .state import Stats


@dataclass(frozen=True)
class MetricsSnapshot:
    udp_received_total: int
    queue_dropped_total: int
    decoded_total: int
    invalid_encoding_total: int
    malformed_total: int
    rejected_total: int
    persisted_total: int
    persist_failed_total: int
    unexpected_errors_total: int
    last_packet_ts: float | None
    kind_counts: Dict[str, int]

    @property
    def dropped_total(self) -> int:
        return (
            self.queue_dropped_total
            + self.invalid_encoding_total
            + self.malformed_total
            + self.persist_failed_total
            + self.unexpected_errors_total
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["dropped_total"] = self.dropped_total
        return data


class MetricsProvider:
    """Thread-safe wrapper around the per-outcome ingestion counters."""

    def __init__(self, *, stats: Stats | None = None) -> None:
        self._stats = stats or Stats()
        self._lock = RLock()

    # --- mutation helpers ---
    def note_received(self) -> None:
        with self._lock:
            self._stats.note_received()

    def note_queue_dropped(self) -> None:
        with self._lock:
            self._stats.note_queue_dropped()

    def note_decoded(self) -> None:
        with self._lock:
            self._stats.note_decoded()

    def note_decode_failure(self, reason: str) -> None:
        with self._lock:
            self._stats.note_decode_failure(reason)

    def note_rejected(self) -> None:
        with self._lock:
            self._stats.note_rejected()

    def note_persisted(self, kind: str) -> None:
        with self._lock:
            self._stats.note_persisted(kind)

    def note_persist_failed(self) -> None:
        with self._lock:
            self._stats.note_persist_failed()

    def note_unexpected_error(self) -> None:
        with self._lock:
            self._stats.note_unexpected_error()

    # --- observation helpers ---
    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            return MetricsSnapshot(
                udp_received_total=self._stats.udp_received_total,
                queue_dropped_total=self._stats.queue_dropped_total,
                decoded_total=self._stats.decoded_total,
                invalid_encoding_total=self._stats.invalid_encoding_total,
                malformed_total=self._stats.malformed_total,
                rejected_total=self._stats.rejected_total,
                persisted_total=self._stats.persisted_total,
                persist_failed_total=self._stats.persist_failed_total,
                unexpected_errors_total=self._stats.unexpected_errors_total,
                last_packet_ts=self._stats.last_packet_ts,
                kind_counts=dict(self._stats.kind_counts),
            )

    def eps(self, window_s: int = 10) -> float:
        with self._lock:
            return self._stats.eps(window_s)

    def last_packet_age(self, *, now: Optional[float] = None) -> Optional[float]:
        with self._lock:
            ts = self._stats.last_packet_ts
        if ts is None:
            return None
        current = now if now is not None else time.time()
        return max(0.0, round(current - ts, 2))

    # --- lifecycle helpers ---
    def restore(self, snapshot: MetricsSnapshot) -> None:
        with self._lock:
            self._stats.udp_received_total = snapshot.udp_received_total
            self._stats.queue_dropped_total = snapshot.queue_dropped_total
            self._stats.decoded_total = snapshot.decoded_total
            self._stats.invalid_encoding_total = snapshot.invalid_encoding_total
            self._stats.malformed_total = snapshot.malformed_total
            self._stats.rejected_total = snapshot.rejected_total
            self._stats.persisted_total = snapshot.persisted_total
            self._stats.persist_failed_total = snapshot.persist_failed_total
            self._stats.unexpected_errors_total = snapshot.unexpected_errors_total
            self._stats.last_packet_ts = snapshot.last_packet_ts
            self._stats.kind_counts = Counter(snapshot.kind_counts)
            self._stats._persisted_ts.clear()

    def reset(self) -> None:
        self.restore(
            MetricsSnapshot(
                udp_received_total=0,
                queue_dropped_total=0,
                decoded_total=0,
                invalid_encoding_total=0,
                malformed_total=0,
                rejected_total=0,
                persisted_total=0,
                persist_failed_total=0,
                unexpected_errors_total=0,
                last_packet_ts=None,
                kind_counts={},
            )
        )


metrics = MetricsProvider()


__all__ = ['MetricsProvider', 'MetricsSnapshot', 'metrics']
