from __future__ import annotations

from .fragment import (
    iter_fragment_paths,
    js_literal_to_json,
    load_batch_json,
    load_batches,
    load_fragment,
    parse_fragment,
    trait_id_from_path,
)

__all__ = [
    "trait_id_from_path",
    "js_literal_to_json",
    "parse_fragment",
    "load_fragment",
    "iter_fragment_paths",
    "load_batch_json",
    "load_batches",
]
