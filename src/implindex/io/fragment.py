from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from ..core.records import Batch, ImplementorRecord, TraitId, coerce_batch, coerce_record

logger = logging.getLogger(__name__)

# implementors["crate_name"] = [ ... ];
_ASSIGNMENT_RE = re.compile(r"""implementors\[\s*("(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')\s*\]\s*=\s*""")
_IDENT_START = re.compile(r"[A-Za-z_$]")
_IDENT_CHAR = re.compile(r"[A-Za-z0-9_$]")


def trait_id_from_path(path: str | Path) -> TraitId:
    """Derive the trait id from a generated fragment's location.

    `implementors/core/ops/drop/trait.Drop.js` -> `core::ops::drop::Drop`.
    Without an `implementors` directory in the path only the trait name is used.
    """

    p = Path(path)
    name = p.name
    if name.endswith(".js"):
        name = name[: -len(".js")]
    if name.startswith("trait."):
        name = name[len("trait.") :]
    if not name:
        raise ValueError(f"Cannot derive a trait name from {str(path)!r}")

    parents = list(p.parts[:-1])
    modules: list[str] = []
    if "implementors" in parents:
        idx = len(parents) - 1 - parents[::-1].index("implementors")
        modules = parents[idx + 1 :]
    return "::".join([*modules, name])


def _read_js_string(source: str, i: int) -> tuple[str, int]:
    """Return (json-encoded string, index after closing quote) for the literal at `i`."""

    quote = source[i]
    chars: list[str] = []
    j = i + 1
    while j < len(source):
        c = source[j]
        if c == "\\" and j + 1 < len(source):
            nxt = source[j + 1]
            # JSON has no \' escape.
            if nxt == "'":
                chars.append(nxt)
            else:
                chars.append(c + nxt)
            j += 2
            continue
        if c == quote:
            return '"' + "".join(chars) + '"', j + 1
        if c == '"':
            chars.append('\\"')
        else:
            chars.append(c)
        j += 1
    raise ValueError("Unterminated string literal")


def _scan_literal(source: str, start: int) -> int:
    """Return the index just past the bracketed literal starting at `start`."""

    opener = source[start]
    if opener not in "[{":
        raise ValueError(f"Expected '[' or '{{' at offset {start}")

    depth = 0
    i = start
    while i < len(source):
        c = source[i]
        if c in "\"'":
            _, i = _read_js_string(source, i)
            continue
        if c in "[{":
            depth += 1
        elif c in "]}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    raise ValueError("Unbalanced brackets in fragment")


def js_literal_to_json(literal: str) -> str:
    """Rewrite a JavaScript object/array literal as JSON.

    Handles what the doc generator emits: unquoted keys, single-quoted strings and
    trailing commas. String contents are copied verbatim.
    """

    out: list[str] = []
    i = 0
    n = len(literal)
    while i < n:
        c = literal[i]
        if c in "\"'":
            s, i = _read_js_string(literal, i)
            out.append(s)
            continue
        if _IDENT_START.match(c):
            j = i + 1
            while j < n and _IDENT_CHAR.match(literal[j]):
                j += 1
            word = literal[i:j]
            k = j
            while k < n and literal[k].isspace():
                k += 1
            if k < n and literal[k] == ":":
                out.append(json.dumps(word))
            else:
                out.append(word)
            i = j
            continue
        if c == ",":
            k = i + 1
            while k < n and literal[k].isspace():
                k += 1
            if k < n and literal[k] in "]}":
                i += 1
                continue
        out.append(c)
        i += 1
    return "".join(out)


def parse_fragment(source: str, trait_id: TraitId) -> Batch:
    """Parse one generated implementors fragment into a single-trait batch.

    Each `implementors["<crate>"] = [...]` assignment contributes its records, in
    file order, tagged with the crate name. A crate list that cannot be parsed is
    skipped; the other crates still count.
    """

    tid = str(trait_id).strip()
    if not tid:
        raise ValueError("trait_id cannot be empty")

    records: list[ImplementorRecord] = []
    for m in _ASSIGNMENT_RE.finditer(source):
        crate = m.group(1)
        start = m.end()
        try:
            crate_literal, _ = _read_js_string(m.group(1), 0)
            crate = json.loads(crate_literal)
            end = _scan_literal(source, start)
            entries = json.loads(js_literal_to_json(source[start:end]), strict=False)
        except ValueError as ex:
            logger.warning("Skipping implementors for crate %r in %s: %s", crate, tid, ex)
            continue
        if not isinstance(entries, list):
            logger.warning("Implementors for crate %r in %s are not a list; skipped", crate, tid)
            continue
        records.extend(coerce_record(e, crate=crate) for e in entries)

    return {tid: records}


def load_fragment(path: str | Path, trait_id: TraitId | None = None) -> Batch:
    """Load a generated `trait.<Name>.js` fragment from disk."""

    p = Path(path)
    source = p.read_text(encoding="utf-8")
    return parse_fragment(source, trait_id if trait_id is not None else trait_id_from_path(p))


def iter_fragment_paths(root: str | Path) -> list[Path]:
    """Every `*.js` fragment below `root`, in sorted order."""

    r = Path(root)
    if not r.is_dir():
        raise FileNotFoundError(str(r))
    return sorted(p for p in r.rglob("*.js") if p.is_file())


def load_batch_json(path: str | Path) -> Batch:
    """Load a plain JSON `{traitId: [record, ...]}` batch."""

    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        data = json.load(f)
    return coerce_batch(data)


def load_batches(path: str | Path) -> list[Batch]:
    """Load whatever lives at `path`: a fragment, a directory of fragments or a JSON batch."""

    p = Path(path)
    if p.is_dir():
        batches: list[Batch] = []
        for fp in iter_fragment_paths(p):
            try:
                batches.append(load_fragment(fp))
            except UnicodeDecodeError as ex:
                logger.warning("Skipping fragment %s: not valid UTF-8 (%s)", fp, ex)
        return batches
    if p.suffix.lower() == ".json":
        return [load_batch_json(p)]
    return [load_fragment(p)]
