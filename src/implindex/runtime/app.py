from __future__ import annotations

from fastapi import FastAPI

from ..api import create_api_app
from ..core.page import PageContext


def create_app(page: PageContext | None = None) -> FastAPI:
    """Create the app serving one page context."""

    return create_api_app(page)
