from __future__ import annotations

from .core import (
    Batch,
    ChannelState,
    DeliveryFeed,
    HandoffChannel,
    ImplementorRecord,
    ImplementorRegistry,
    PageContext,
    contribute,
)
from .io import load_batches, load_fragment, parse_fragment, trait_id_from_path
from .runtime.server import ImplIndexServer, run
from .sdk.client import ImplIndexClient

__all__ = [
    "run",
    "ImplIndexServer",
    "ImplIndexClient",
    "PageContext",
    "contribute",
    "Batch",
    "ImplementorRecord",
    "ImplementorRegistry",
    "HandoffChannel",
    "ChannelState",
    "DeliveryFeed",
    "parse_fragment",
    "load_fragment",
    "load_batches",
    "trait_id_from_path",
]
