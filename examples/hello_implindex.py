import logging
import time
from pathlib import Path

import implindex


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    server = implindex.run(port=57794, new_server=True)

    # Fragments may land before any renderer is listening; they wait in the channel.
    fixtures = Path(__file__).resolve().parents[1] / "tests" / "fixtures"
    server.load_path(fixtures / "implementors")
    server.contribute(
        {
            "core::clone::Clone": [
                {"displayText": "impl Clone for Bar", "typePath": "demo::Bar"},
                {"displayText": "impl Clone for Baz", "typePath": "demo::Baz"},
            ]
        }
    )

    # A renderer attaching late still receives every batch, in order.
    client = server.as_client()
    feed = client.get_deliveries()
    for d in feed["deliveries"]:
        for trait_id, records in d["batch"].items():
            print(f"#{d['seq']} {trait_id}: {len(records)} implementor(s)")

    try:
        while True:
            time.sleep(3600)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
