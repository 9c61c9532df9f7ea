from __future__ import annotations

import logging
import threading
from enum import Enum

from .records import Batch, Consumer

logger = logging.getLogger(__name__)


class ChannelState(str, Enum):
    AWAITING_CONSUMER = "awaiting-consumer"
    CONSUMER_ATTACHED = "consumer-attached"


class HandoffChannel:
    """Single-slot hand-off between batch contributors and one renderer.

    Batches delivered before a consumer attaches are queued and flushed, in
    arrival order, the moment one does. After that every batch goes straight to
    the consumer, synchronously. Attaching again swaps the consumer.

    Notes:
    - A batch contributed while the backlog is being flushed (e.g. from inside
      the consumer) is queued behind the backlog, never ahead of it.
    - Consumer exceptions are logged; the batch still counts as delivered.
    """

    def __init__(self, lock: threading.RLock | None = None) -> None:
        self._lock = lock if lock is not None else threading.RLock()
        self._consumer: Consumer | None = None
        self._pending: list[Batch] = []
        self._flushing = False
        self._delivered = 0

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def state(self) -> ChannelState:
        with self._lock:
            if self._consumer is None:
                return ChannelState.AWAITING_CONSUMER
            return ChannelState.CONSUMER_ATTACHED

    @property
    def has_consumer(self) -> bool:
        return self.state is ChannelState.CONSUMER_ATTACHED

    @property
    def consumer(self) -> Consumer | None:
        with self._lock:
            return self._consumer

    def delivered_count(self) -> int:
        with self._lock:
            return self._delivered

    def pending(self) -> list[Batch]:
        with self._lock:
            return list(self._pending)

    def attach_consumer(self, fn: Consumer) -> None:
        if not callable(fn):
            raise ValueError("consumer must be callable")

        with self._lock:
            if self._consumer is not None:
                logger.debug("Replacing handoff consumer")
            self._consumer = fn
            if self._flushing:
                # The running flush picks up the new consumer for the rest of the backlog.
                return
            if self._pending:
                logger.debug("Flushing %d pending batch(es) to new consumer", len(self._pending))
            self._flushing = True
            try:
                while self._pending and self._consumer is not None:
                    self._call_consumer(self._consumer, self._pending.pop(0))
            finally:
                self._flushing = False

    def deliver(self, batch: Batch) -> None:
        with self._lock:
            if self._consumer is None or self._flushing:
                self._pending.append(batch)
                return
            self._call_consumer(self._consumer, batch)

    def close(self) -> None:
        """Drop the consumer and anything still queued."""

        with self._lock:
            if self._pending:
                logger.debug("Discarding %d undelivered batch(es)", len(self._pending))
            self._consumer = None
            self._pending = []
            self._delivered = 0

    def _call_consumer(self, fn: Consumer, batch: Batch) -> None:
        self._delivered += 1
        try:
            fn(batch)
        except Exception:
            logger.exception("Implementors consumer failed on batch for traits %s", list(batch))
