from __future__ import annotations

from .channel import ChannelState, HandoffChannel
from .feed import Delivery, DeliveryFeed
from .page import PageContext, contribute
from .records import Batch, Consumer, ImplementorRecord, TraitId, coerce_batch, coerce_record
from .registry import ImplementorRegistry

__all__ = [
    "TraitId",
    "Batch",
    "Consumer",
    "ImplementorRecord",
    "coerce_record",
    "coerce_batch",
    "ChannelState",
    "HandoffChannel",
    "ImplementorRegistry",
    "PageContext",
    "contribute",
    "Delivery",
    "DeliveryFeed",
]
