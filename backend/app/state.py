from __future__ import annotations

import time
from collections import Counter, deque
from typing import Optional


class Stats:
    def __init__(self) -> None:
        self.udp_received_total = 0
        self.queue_dropped_total = 0
        self.decoded_total = 0
        self.invalid_encoding_total = 0
        self.malformed_total = 0
        self.rejected_total = 0
        self.persisted_total = 0
        self.persist_failed_total = 0
        self.unexpected_errors_total = 0
        self.kind_counts: Counter[str] = Counter()
        self.last_packet_ts: Optional[float] = None
        self._persisted_ts = deque(maxlen=600)

    def note_received(self) -> None:
        self.udp_received_total += 1
        self.last_packet_ts = time.time()

    def note_queue_dropped(self) -> None:
        self.queue_dropped_total += 1

    def note_decoded(self) -> None:
        self.decoded_total += 1

    def note_decode_failure(self, reason: str) -> None:
        if reason == "invalid_encoding":
            self.invalid_encoding_total += 1
        else:
            self.malformed_total += 1

    def note_rejected(self) -> None:
        self.rejected_total += 1

    def note_persisted(self, kind: str) -> None:
        self.persisted_total += 1
        self.kind_counts[kind] += 1
        self._persisted_ts.append(time.time())

    def note_persist_failed(self) -> None:
        self.persist_failed_total += 1

    def note_unexpected_error(self) -> None:
        self.unexpected_errors_total += 1

    def eps(self, window_s: int = 10) -> float:
        if not self._persisted_ts:
            return 0.0
        now = time.time()
        cutoff = now - window_s
        count = sum(1 for ts in self._persisted_ts if ts >= cutoff)
        return round(count / max(1, window_s), 2)
