from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from ..core.feed import DeliveryFeed
from ..core.page import PageContext
from ..core.records import ImplementorRecord
from ..io.fragment import parse_fragment
from .parsing import parse_bool, parse_since, parse_trait_id
from .serializers import delivery_to_item, record_to_item

logger = logging.getLogger(__name__)


def _page(request: Request) -> PageContext:
    return request.app.state.page


def _feed(request: Request) -> DeliveryFeed:
    return request.app.state.feed


def create_api_app(page: PageContext | None = None) -> FastAPI:
    """Build the HTTP surface for one page context.

    A browser-side renderer attaches by polling `/api/deliveries`; the first poll
    makes the app's delivery feed the page's consumer.
    """

    app = FastAPI(title="implindex", version="0.1.0")
    app.state.page = page if page is not None else PageContext()
    app.state.feed = DeliveryFeed()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/healthz")
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/api/events")
    def events(request: Request) -> dict:
        # Minimal polling endpoint.
        page = _page(request)
        return {
            "globalRevision": page.registry.global_revision(),
            "channelState": page.state.value,
            "pendingBatches": len(page.channel.pending()),
            "latestDelivery": _feed(request).latest_seq(),
        }

    @app.get("/api/traits")
    def list_traits(request: Request) -> list[dict]:
        snapshot = _page(request).registry.snapshot()
        return [{"traitId": tid, "implementorCount": len(recs)} for tid, recs in snapshot.items()]

    @app.get("/api/implementors")
    def get_implementors(request: Request, trait: str | None = None, synthetic: str | None = None):
        page = _page(request)
        try:
            synthetic_v = parse_bool(synthetic, field="synthetic") if synthetic is not None else None
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        def _keep(r: ImplementorRecord) -> bool:
            return synthetic_v is None or r.is_synthetic == synthetic_v

        if trait is None:
            table = page.registry.snapshot()
            return {tid: [record_to_item(r) for r in recs if _keep(r)] for tid, recs in table.items()}

        try:
            tid = parse_trait_id(trait)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not page.registry.has_trait(tid):
            raise HTTPException(status_code=404, detail=f"Unknown trait: {tid}")
        return [record_to_item(r) for r in page.registry.get(tid) if _keep(r)]

    @app.post("/api/batches")
    def contribute_batch(request: Request, body: dict) -> dict:
        page = _page(request)
        try:
            merged = page.contribute(body)
        except RuntimeError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return {
            "ok": True,
            "traits": list(merged.keys()),
            "globalRevision": page.registry.global_revision(),
        }

    @app.post("/api/fragments")
    def contribute_fragment(request: Request, body: dict) -> dict:
        source = body.get("source")
        if not isinstance(source, str):
            raise HTTPException(status_code=400, detail="source is required")
        try:
            tid = parse_trait_id(body.get("traitId"), field="traitId")
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        page = _page(request)
        try:
            merged = page.contribute(parse_fragment(source, tid))
        except RuntimeError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return {
            "ok": True,
            "traitId": tid,
            "implementorCount": len(merged.get(tid, [])),
            "globalRevision": page.registry.global_revision(),
        }

    @app.get("/api/deliveries")
    def get_deliveries(request: Request, since: str | None = None) -> dict:
        try:
            seq = parse_since(since)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        page = _page(request)
        feed = _feed(request)
        if page.channel.consumer is not feed:
            logger.info("Renderer attached; delivering %d pending batch(es)", len(page.channel.pending()))
            try:
                page.attach_consumer(feed)
            except RuntimeError as e:
                raise HTTPException(status_code=409, detail=str(e))

        return {
            "latest": feed.latest_seq(),
            "deliveries": [delivery_to_item(d) for d in feed.since(seq)],
        }

    @app.post("/api/reset")
    def reset_page(request: Request) -> dict[str, bool]:
        _page(request).reset()
        _feed(request).clear()
        return {"ok": True}

    return app
