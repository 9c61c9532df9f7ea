from __future__ import annotations

import logging
from typing import Any

from .channel import ChannelState, HandoffChannel
from .records import Batch, Consumer
from .registry import ImplementorRegistry

logger = logging.getLogger(__name__)


class PageContext:
    """Owns the implementors table and its hand-off channel for one page.

    Fragments call `contribute()`; the renderer calls `attach_consumer()` whenever
    it is ready. Either may happen first.
    """

    def __init__(self) -> None:
        self.channel = HandoffChannel()
        self.registry = ImplementorRegistry(channel=self.channel)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def state(self) -> ChannelState:
        return self.channel.state

    def contribute(self, batch: Any) -> Batch:
        with self.channel.lock:
            if self._closed:
                raise RuntimeError("Cannot contribute to a closed page")
            return self.registry.contribute(batch)

    def attach_consumer(self, fn: Consumer) -> None:
        with self.channel.lock:
            if self._closed:
                raise RuntimeError("Cannot attach a consumer to a closed page")
            self.channel.attach_consumer(fn)

    def reset(self) -> None:
        """Start over with an empty table, keeping the page open."""

        with self.channel.lock:
            self.registry.reset()
            self.channel.close()

    def close(self) -> None:
        with self.channel.lock:
            if self._closed:
                return
            logger.debug(
                "Closing page with %d trait(s), %d record(s)",
                len(self.registry.traits()),
                self.registry.record_count(),
            )
            self.registry.reset()
            self.channel.close()
            self._closed = True

    def __enter__(self) -> "PageContext":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def contribute(page: PageContext, batch: Any) -> Batch:
    """Entry point for one generated fragment: merge `batch` and hand it off."""

    return page.contribute(batch)
