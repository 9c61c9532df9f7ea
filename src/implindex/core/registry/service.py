from __future__ import annotations

import logging
import threading
from typing import Any

from ..channel import HandoffChannel
from ..records import Batch, ImplementorRecord, TraitId, coerce_batch

logger = logging.getLogger(__name__)


class ImplementorRegistry:
    """Append-only trait -> implementors table for one page.

    Every contribution is appended after whatever the trait already holds, so
    the table is the union of all batches in arrival order. Nothing is
    deduplicated.
    """

    def __init__(self, channel: HandoffChannel | None = None) -> None:
        # Share the channel's lock: a consumer may contribute from inside its callback.
        self._lock = channel.lock if channel is not None else threading.RLock()
        self._table: dict[TraitId, list[ImplementorRecord]] = {}
        self._global_revision = 0
        self._channel = channel

    @property
    def channel(self) -> HandoffChannel | None:
        return self._channel

    def contribute(self, batch: Any) -> Batch:
        merged = coerce_batch(batch)

        with self._lock:
            for trait_id, records in merged.items():
                self._table.setdefault(trait_id, []).extend(records)
            self._global_revision += 1
            logger.debug(
                "Merged batch %d: %s",
                self._global_revision,
                {tid: len(recs) for tid, recs in merged.items()},
            )

            # Delivery stays under the lock so consumers see batches in merge order.
            if self._channel is not None:
                self._channel.deliver({tid: list(recs) for tid, recs in merged.items()})

        return merged

    def get(self, trait_id: TraitId) -> list[ImplementorRecord]:
        with self._lock:
            return list(self._table.get(str(trait_id), []))

    def has_trait(self, trait_id: TraitId) -> bool:
        with self._lock:
            return str(trait_id) in self._table

    def traits(self) -> list[TraitId]:
        with self._lock:
            return list(self._table.keys())

    def snapshot(self) -> Batch:
        with self._lock:
            return {tid: list(recs) for tid, recs in self._table.items()}

    def record_count(self) -> int:
        with self._lock:
            return sum(len(recs) for recs in self._table.values())

    def global_revision(self) -> int:
        with self._lock:
            return self._global_revision

    def reset(self) -> None:
        with self._lock:
            self._table.clear()
            self._global_revision += 1
