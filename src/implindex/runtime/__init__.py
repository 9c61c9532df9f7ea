from __future__ import annotations

from .app import create_app
from .server import ImplIndexServer, run

__all__ = ["create_app", "ImplIndexServer", "run"]
