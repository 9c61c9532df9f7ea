from __future__ import annotations

from typing import Any


def parse_bool(value: Any, *, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        raise ValueError(f"Missing {field}")
    s = str(value).strip().lower()
    if s in {"1", "true", "yes", "on"}:
        return True
    if s in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid {field}")


def parse_since(value: Any) -> int:
    if value is None or value == "":
        return 0
    try:
        seq = int(value)
    except Exception as ex:
        raise ValueError("Invalid since") from ex
    if seq < 0:
        raise ValueError("since must be >= 0")
    return seq


def parse_trait_id(value: Any, *, field: str = "trait") -> str:
    if value is None:
        raise ValueError(f"Missing {field}")
    tid = str(value).strip()
    if not tid:
        raise ValueError(f"{field} cannot be empty")
    return tid
