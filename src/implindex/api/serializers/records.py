from __future__ import annotations

from typing import Any

from ...core.feed import Delivery
from ...core.records import Batch, ImplementorRecord


def record_to_item(r: ImplementorRecord) -> dict[str, Any]:
    return {
        "displayText": r.display_text,
        "isSynthetic": bool(r.is_synthetic),
        "typePath": r.type_path,
        "crate": r.crate,
    }


def batch_to_dict(batch: Batch) -> dict[str, list[dict[str, Any]]]:
    return {tid: [record_to_item(r) for r in recs] for tid, recs in batch.items()}


def delivery_to_item(d: Delivery) -> dict[str, Any]:
    return {"seq": int(d.seq), "batch": batch_to_dict(d.batch)}
