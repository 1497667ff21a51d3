"""Replay records written by the NDJSON sink back to the daemon as UDP datagrams."""

from __future__ import annotations

import argparse
import socket
import sys
import time
from pathlib import Path

from pydantic import ValidationError

from backend.app.config import get_settings
from schemas.frames import frame_from_document
from tools.recorder import iter_records


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Replay NDJSON records over UDP")
    parser.add_argument("--records-dir", default=str(settings.records_dir))
    parser.add_argument("--host", default=settings.simulator_target_host())
    parser.add_argument("--port", type=int, default=settings.udp_port)
    parser.add_argument("--speed", type=float, default=1.0)  # 2.0 = 2x faster
    parser.add_argument("--interval", type=float, default=0.05)  # fallback if no timestamps
    parser.add_argument("--limit", type=int, default=0)  # 0 = unlimited
    parser.add_argument("--loop", action="store_true")
    args = parser.parse_args()

    if not Path(args.records_dir).is_dir():
        print(f"No records directory: {args.records_dir}", file=sys.stderr)
        sys.exit(1)

    kinds = {
        settings.sightings_collection: "sighting",
        settings.heartbeats_collection: "heartbeat",
    }
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

    def run_once() -> None:
        sent = 0
        last_ts: int | None = None
        for collection, document in iter_records(args.records_dir):
            kind = kinds.get(collection)
            if kind is None:
                continue
            try:
                frame = frame_from_document(document, kind)
            except ValidationError as exc:
                print(f"skipping record in {collection}: {exc}", file=sys.stderr)
                continue

            delay = args.interval
            ts = frame.observed_at_millis
            if last_ts is not None and ts >= last_ts:
                delay = max(0.0, (ts - last_ts) / 1000 / max(args.speed, 0.0001))
            last_ts = ts

            sock.sendto(frame.to_wire(), (args.host, args.port))
            sent += 1
            if args.limit and sent >= args.limit:
                break
            if delay > 0:
                time.sleep(delay)

    if args.loop:
        while True:
            run_once()
    else:
        run_once()


if __name__ == "__main__":
    main()
