from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from .api.serializers import batch_to_dict
from .core.page import PageContext
from .io.fragment import load_batches
from .runtime.server import run

logger = logging.getLogger("implindex")


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="implindex", description="implindex: per-trait implementors index")
    p.add_argument("paths", nargs="*", help="fragment files, fragment directories or JSON batches")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8000)
    p.add_argument("--no-browser", action="store_true")
    p.add_argument("--dump", action="store_true", help="print the merged table as JSON and exit")
    p.add_argument("--log-level", default=os.getenv("IMPLINDEX_LOG_LEVEL", "warning"))
    args = p.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    page = PageContext()
    for path in args.paths:
        try:
            batches = load_batches(path)
        except (OSError, ValueError) as e:
            logger.error("Could not load %s: %s", path, e)
            return 1
        for batch in batches:
            page.contribute(batch)

    if args.dump:
        json.dump(batch_to_dict(page.registry.snapshot()), sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0

    srv = run(
        host=args.host,
        port=args.port,
        open_browser=not args.no_browser,
        log_level=str(args.log_level).lower(),
        new_server=True,
        page=page,
    )
    print(srv.url)

    # Block forever (so it behaves like a normal CLI server)
    import time

    try:
        while True:
            time.sleep(3600)
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
