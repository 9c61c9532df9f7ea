from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

TraitId = str


@dataclass(frozen=True)
class ImplementorRecord:
    """One type implementing a trait.

    `display_text` is the formatted signature emitted by the doc generator. It may
    contain markup and is never parsed here.
    """

    display_text: str = ""
    is_synthetic: bool = False
    type_path: str = ""
    crate: str = ""


Batch = dict[TraitId, list[ImplementorRecord]]
Consumer = Callable[[Batch], object]

_DISPLAY_TEXT_KEYS = ("displayText", "display_text", "text")
_SYNTHETIC_KEYS = ("isSynthetic", "is_synthetic", "synthetic")
_TYPE_PATH_KEYS = ("typePath", "type_path", "types")


def _first_present(raw: Mapping[str, Any], keys: tuple[str, ...]) -> tuple[str | None, Any]:
    for k in keys:
        if k in raw:
            return k, raw[k]
    return None, None


def coerce_record(raw: Any, *, crate: str = "") -> ImplementorRecord:
    """Build a record from a loosely-typed mapping.

    Missing or wrong-typed fields fall back to defaults instead of failing, so a
    single bad entry never drops the rest of a batch.
    """

    if isinstance(raw, ImplementorRecord):
        return raw
    if not isinstance(raw, Mapping):
        logger.warning("Implementor entry is not an object (%s); using an empty record", type(raw).__name__)
        return ImplementorRecord(crate=crate)

    key, value = _first_present(raw, _DISPLAY_TEXT_KEYS)
    display_text = ""
    if isinstance(value, str):
        display_text = value
    else:
        logger.warning("Implementor entry has no usable %s; defaulting to empty text", key or "displayText")

    _, value = _first_present(raw, _SYNTHETIC_KEYS)
    is_synthetic = value if isinstance(value, bool) else False

    key, value = _first_present(raw, _TYPE_PATH_KEYS)
    type_path = ""
    if isinstance(value, str):
        type_path = value
    elif key == "types" and isinstance(value, (list, tuple)) and value and isinstance(value[0], str):
        # Generated fragments list every path the impl covers; the first is canonical.
        type_path = value[0]

    raw_crate = raw.get("crate")
    if isinstance(raw_crate, str) and raw_crate:
        crate = raw_crate

    return ImplementorRecord(
        display_text=display_text,
        is_synthetic=is_synthetic,
        type_path=type_path,
        crate=crate,
    )


def coerce_batch(raw: Any) -> Batch:
    """Normalize a trait -> implementors mapping.

    Entry order is kept for every trait. A trait whose value is not a list
    contributes nothing; a value that is not a mapping yields an empty batch.
    """

    if not isinstance(raw, Mapping):
        logger.warning("Batch is not a mapping (%s); nothing contributed", type(raw).__name__)
        return {}

    out: Batch = {}
    for trait_id, entries in raw.items():
        tid = str(trait_id)
        if not isinstance(entries, (list, tuple)):
            logger.warning("Implementors for %r are not a list; skipped", tid)
            continue
        # Keys such as 1 and "1" collapse to one trait; keep both lists.
        out.setdefault(tid, []).extend(coerce_record(e) for e in entries)
    return out
