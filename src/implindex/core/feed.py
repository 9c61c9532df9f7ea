from __future__ import annotations

import threading
from dataclasses import dataclass

from .records import Batch


@dataclass(frozen=True)
class Delivery:
    seq: int
    batch: Batch


class DeliveryFeed:
    """Consumer that keeps every delivered batch for a polling renderer.

    Attach it with `PageContext.attach_consumer(feed)`; a renderer then reads
    `since(last_seq)` to pick up new batches.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._deliveries: list[Delivery] = []
        self._seq = 0

    def __call__(self, batch: Batch) -> None:
        with self._lock:
            self._seq += 1
            self._deliveries.append(Delivery(seq=self._seq, batch=batch))

    def latest_seq(self) -> int:
        with self._lock:
            return self._seq

    def since(self, seq: int = 0) -> list[Delivery]:
        with self._lock:
            return [d for d in self._deliveries if d.seq > int(seq)]

    def clear(self) -> None:
        with self._lock:
            # Sequence numbers keep growing so pollers never re-read a stale cursor.
            self._deliveries.clear()
