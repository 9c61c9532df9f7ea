from __future__ import annotations

import contextlib
import logging
import os
import socket
import threading
import time
import webbrowser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import uvicorn

from ..core.page import PageContext
from ..core.records import Batch
from ..io.fragment import load_batches, load_fragment
from ..sdk.client import ImplIndexClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImplIndexServer:
    host: str
    port: int
    url: str
    page: PageContext = field(repr=False)

    def contribute(self, batch: Any) -> Batch:
        """Contribute a batch straight into the served page."""
        return self.page.contribute(batch)

    def load_fragment(self, path: str | Path, trait_id: str | None = None) -> int:
        """Load a generated fragment file into the served page."""

        merged = self.page.contribute(load_fragment(path, trait_id))
        return sum(len(recs) for recs in merged.values())

    def load_path(self, path: str | Path) -> int:
        """Load a fragment, a directory of fragments or a JSON batch."""

        count = 0
        for batch in load_batches(path):
            merged = self.page.contribute(batch)
            count += sum(len(recs) for recs in merged.values())
        return count

    def as_client(self) -> ImplIndexClient:
        return ImplIndexClient(self.url.rstrip("/"))


def _find_free_port(host: str) -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind((host, 0))
        return int(s.getsockname()[1])


def _normalize_base_url(url: str) -> str:
    url = url.strip()
    if not url:
        return ""
    # Allow passing just host:port.
    if "://" not in url:
        url = "http://" + url
    return url.rstrip("/")


def _is_server_alive(base_url: str, *, timeout_s: float = 0.2) -> bool:
    """Best-effort probe to determine if an implindex server is reachable."""

    import httpx

    try:
        with httpx.Client(base_url=base_url, timeout=timeout_s) as client:
            r = client.get("/healthz")
            if r.status_code != 200:
                return False
            data = r.json()
            return bool(data.get("ok"))
    except (httpx.HTTPError, ValueError):
        return False


def run(
    *,
    host: str = "127.0.0.1",
    port: int = 0,
    open_browser: bool = False,
    log_level: str = "info",
    access_log: bool = False,
    new_server: bool = False,
    connect_timeout_s: float = 0.2,
    page: PageContext | None = None,
) -> ImplIndexServer | ImplIndexClient:
    """Serve a page context over HTTP with a single Python call.

    Behavior:
    - If IMPLINDEX_URL is set, we *attach* to that existing server (client mode) unless
      `new_server=True`.
    - Otherwise, if `port != 0` and a server is already reachable at http://{host}:{port},
      we attach to it (client mode) unless `new_server=True`.
    - Otherwise we start a new local server (server mode) and return an `ImplIndexServer`.

    Notes:
    - `port=0` means "pick a free port", so there's nothing to attach to.
    - Uvicorn's per-request access log is off by default because renderers poll
      `/api/deliveries` frequently.
    """

    env_url = _normalize_base_url(os.getenv("IMPLINDEX_URL", ""))

    # 1) Try attaching to an explicitly provided server.
    if env_url and not new_server:
        if _is_server_alive(env_url, timeout_s=connect_timeout_s):
            logger.info("Attaching to implindex server at %s", env_url)
            if open_browser:
                webbrowser.open(env_url + "/")
            return ImplIndexClient(env_url)

    # 2) Try attaching to host/port if they are explicitly chosen.
    if port != 0 and not new_server:
        default_url = _normalize_base_url(f"http://{host}:{port}")
        if _is_server_alive(default_url, timeout_s=connect_timeout_s):
            logger.info("Attaching to implindex server at %s", default_url)
            if open_browser:
                webbrowser.open(default_url + "/")
            return ImplIndexClient(default_url)

    # 3) Start a fresh server.
    if port == 0:
        port = _find_free_port(host)

    from .app import create_app

    page = page if page is not None else PageContext()
    app = create_app(page)

    config = uvicorn.Config(app, host=host, port=port, log_level=log_level, access_log=access_log)
    server = uvicorn.Server(config)

    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    # Give it a moment so a subsequent client probe doesn't race with startup.
    time.sleep(0.05)

    url = f"http://{host}:{port}/"
    logger.info("Serving implementors at %s", url)
    if open_browser:
        webbrowser.open(url)

    return ImplIndexServer(host=host, port=port, url=url, page=page)
