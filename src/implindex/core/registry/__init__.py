from __future__ import annotations

from .service import ImplementorRegistry

__all__ = ["ImplementorRegistry"]
