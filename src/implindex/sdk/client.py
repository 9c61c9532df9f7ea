from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from ..core.records import ImplementorRecord


def _record_to_body(r: Any) -> Any:
    if isinstance(r, ImplementorRecord):
        return {
            "displayText": r.display_text,
            "isSynthetic": r.is_synthetic,
            "typePath": r.type_path,
            "crate": r.crate,
        }
    return r


def _batch_to_body(batch: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for tid, entries in batch.items():
        if isinstance(entries, (list, tuple)):
            out[str(tid)] = [_record_to_body(r) for r in entries]
        else:
            # Let the server normalize (and log) malformed entries.
            out[str(tid)] = entries
    return out


class ImplIndexClient:
    """HTTP client for a running implindex server.

    The remote companion to `implindex.run()` / `ImplIndexServer.contribute()`.
    """

    def __init__(self, base_url: str = "http://127.0.0.1:8000") -> None:
        self.base_url = base_url.rstrip("/")

    def contribute(self, batch: Mapping[str, Any], *, timeout_s: float = 10.0) -> list[str]:
        """Contribute one batch; returns the trait ids it touched."""

        import httpx

        with httpx.Client(base_url=self.base_url, timeout=timeout_s) as client:
            res = client.post("/api/batches", json=_batch_to_body(batch))
            if res.status_code != 200:
                raise RuntimeError(f"Failed to contribute batch: {res.status_code} {res.text}")
            return list(res.json().get("traits", []))

    def contribute_fragment(self, source: str, trait_id: str, *, timeout_s: float = 10.0) -> int:
        """Send a generated fragment's source; returns how many implementors it held."""

        import httpx

        tid = str(trait_id).strip()
        if not tid:
            raise ValueError("trait_id cannot be empty")

        with httpx.Client(base_url=self.base_url, timeout=timeout_s) as client:
            res = client.post("/api/fragments", json={"traitId": tid, "source": source})
            if res.status_code != 200:
                raise RuntimeError(f"Failed to contribute fragment: {res.status_code} {res.text}")
            return int(res.json().get("implementorCount", 0))

    def load_fragment(self, path: str | Path, trait_id: str | None = None, *, timeout_s: float = 10.0) -> int:
        from ..io.fragment import trait_id_from_path

        p = Path(path)
        tid = trait_id if trait_id is not None else trait_id_from_path(p)
        return self.contribute_fragment(p.read_text(encoding="utf-8"), tid, timeout_s=timeout_s)

    def list_traits(self, *, timeout_s: float = 10.0) -> list[dict[str, Any]]:
        import httpx

        with httpx.Client(base_url=self.base_url, timeout=timeout_s) as client:
            res = client.get("/api/traits")
            if res.status_code != 200:
                raise RuntimeError(f"Failed to list traits: {res.status_code} {res.text}")
            return list(res.json())

    def get_implementors(
        self,
        trait_id: str,
        *,
        synthetic: bool | None = None,
        timeout_s: float = 10.0,
    ) -> list[dict[str, Any]]:
        import httpx

        params: dict[str, str] = {"trait": str(trait_id)}
        if synthetic is not None:
            params["synthetic"] = "true" if synthetic else "false"

        with httpx.Client(base_url=self.base_url, timeout=timeout_s) as client:
            res = client.get("/api/implementors", params=params)
            if res.status_code != 200:
                raise RuntimeError(f"Failed to get implementors: {res.status_code} {res.text}")
            return list(res.json())

    def get_deliveries(self, since: int = 0, *, timeout_s: float = 10.0) -> dict[str, Any]:
        """Poll the delivery feed (attaching it as the page's renderer on first use)."""

        import httpx

        with httpx.Client(base_url=self.base_url, timeout=timeout_s) as client:
            res = client.get("/api/deliveries", params={"since": int(since)})
            if res.status_code != 200:
                raise RuntimeError(f"Failed to get deliveries: {res.status_code} {res.text}")
            return res.json()

    def reset(self, *, timeout_s: float = 10.0) -> None:
        import httpx

        with httpx.Client(base_url=self.base_url, timeout=timeout_s) as client:
            res = client.post("/api/reset")
            if res.status_code != 200:
                raise RuntimeError(f"Failed to reset page: {res.status_code} {res.text}")
