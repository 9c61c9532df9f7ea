from __future__ import annotations

from .cursor import parse_bool, parse_since, parse_trait_id

__all__ = ["parse_bool", "parse_since", "parse_trait_id"]
