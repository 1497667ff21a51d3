"""CLI utility to query the daemon's health endpoint and judge its drop rate."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict

import requests

DEFAULT_BASE_URL = "http://127.0.0.1:8000"
DEFAULT_ENDPOINT = "/api/v1/healthz"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Call the ingest health endpoint and report the result.",
    )
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    parser.add_argument("--endpoint", default=DEFAULT_ENDPOINT)
    parser.add_argument("--timeout", type=float, default=5.0)
    parser.add_argument(
        "--output",
        choices=("pretty", "json", "summary"),
        default="summary",
        help="Output format: full pretty JSON, compact JSON, or a one-line summary.",
    )
    parser.add_argument(
        "--max-failed-ratio",
        type=float,
        default=None,
        help="Fail when persist failures exceed this share of decoded frames (0-1).",
    )
    return parser.parse_args(argv)


def build_url(base_url: str, endpoint: str) -> str:
    return base_url.rstrip("/") + "/" + endpoint.lstrip("/")


def fetch_health(url: str, timeout: float) -> Dict[str, Any]:
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.json()


def failed_ratio(data: Dict[str, Any]) -> float:
    decoded = int(data.get("decoded_total") or 0)
    if decoded == 0:
        return 0.0
    return int(data.get("persist_failed_total") or 0) / decoded


def format_output(data: Dict[str, Any], mode: str) -> str:
    if mode == "json":
        return json.dumps(data)
    if mode == "pretty":
        return json.dumps(data, indent=2, sort_keys=True)
    return (
        f"status={data.get('status')} received={data.get('udp_received_total')} "
        f"persisted={data.get('persisted_total')} rejected={data.get('rejected_total')} "
        f"malformed={data.get('malformed_total')} invalid_encoding={data.get('invalid_encoding_total')} "
        f"persist_failed={data.get('persist_failed_total')}"
    )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    url = build_url(args.base_url, args.endpoint)

    try:
        payload = fetch_health(url, timeout=args.timeout)
    except requests.RequestException as exc:
        print(f"Health check request failed: {exc}", file=sys.stderr)
        return 2

    if payload.get("status") != "ok":
        print(f"Unexpected status value: {payload.get('status')!r}", file=sys.stderr)
        return 3

    print(format_output(payload, args.output))
    if args.max_failed_ratio is not None and failed_ratio(payload) > args.max_failed_ratio:
        print(
            f"Persist failure ratio {failed_ratio(payload):.3f} exceeds {args.max_failed_ratio}",
            file=sys.stderr,
        )
        return 4
    return 0


if __name__ == "__main__":
    sys.exit(main())
