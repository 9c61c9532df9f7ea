from __future__ import annotations

from .records import batch_to_dict, delivery_to_item, record_to_item

__all__ = ["record_to_item", "batch_to_dict", "delivery_to_item"]
