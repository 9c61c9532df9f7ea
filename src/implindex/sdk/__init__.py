from __future__ import annotations

from .client import ImplIndexClient

__all__ = ["ImplIndexClient"]
