from __future__ import annotations

"""NDJSON file sink with hourly rollover and optional retention trimming.

Records land in ``<base_dir>/<collection>/<YYYYmmdd_HH>.ndjson``, one JSON
document per line. Used in place of MongoDB for offline runs and replays.
"""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import IO, Any, Dict, Iterator, Mapping, Tuple

import structlog

from backend.app.errors import PersistenceFailure

log = structlog.get_logger("sentinel.recorder")


class NDJSONSink:
    name = "ndjson"

    def __init__(self, base_dir: str | Path = "data/records", max_age_hours: float | None = None):
        self.base_dir = Path(base_dir)
        self._handles: Dict[str, IO[str]] = {}
        self._hour_keys: Dict[str, str] = {}
        self.total_written = 0
        self.max_age = max_age_hours if max_age_hours and max_age_hours > 0 else None

    async def start(self) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)

    async def close(self) -> None:
        for fh in self._handles.values():
            fh.flush()
            fh.close()
        self._handles.clear()
        self._hour_keys.clear()

    async def insert(self, collection: str, document: Mapping[str, Any]) -> None:
        line = json.dumps(dict(document), separators=(",", ":"), ensure_ascii=False)
        try:
            await asyncio.to_thread(self._write, collection, line, datetime.now(timezone.utc))
        except OSError as exc:
            raise PersistenceFailure(str(exc), collection=collection) from exc
        self.total_written += 1

    def _write(self, collection: str, line: str, now: datetime) -> None:
        fh = self._rollover_if_needed(collection, now)
        fh.write(line + "\n")

    def _rollover_if_needed(self, collection: str, now: datetime) -> IO[str]:
        key = now.strftime("%Y%m%d_%H")
        fh = self._handles.get(collection)
        if key != self._hour_keys.get(collection) or fh is None:
            if fh is not None:
                fh.flush()
                fh.close()
            directory = self.base_dir / collection
            directory.mkdir(parents=True, exist_ok=True)
            fh = (directory / f"{key}.ndjson").open("a", encoding="utf-8", buffering=1)
            self._handles[collection] = fh
            self._hour_keys[collection] = key
            if self.max_age:
                self._prune_old_files(now)
        return fh

    def _prune_old_files(self, now: datetime) -> None:
        cutoff = now - timedelta(hours=self.max_age)
        for path in self.base_dir.glob("*/*.ndjson"):
            try:
                if datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc) < cutoff:
                    path.unlink()
                    log.info(
                        "Removed record file older than retention",
                        file=str(path.relative_to(self.base_dir)),
                        retention_hours=self.max_age,
                    )
            except OSError:
                log.exception("Failed pruning record file", path=str(path))


def iter_records(base_dir: str | Path) -> Iterator[Tuple[str, Dict[str, Any]]]:
    """Yield ``(collection, document)`` pairs from every record file, oldest file first."""

    base = Path(base_dir)
    for path in sorted(base.glob("*/*.ndjson"), key=lambda p: (p.name, p.parent.name)):
        collection = path.parent.name
        with path.open("r", encoding="utf-8") as handle:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    yield collection, json.loads(stripped)
                except json.JSONDecodeError:
                    log.warning("Skipping unreadable record line", file=str(path))
                    continue


__all__ = ["NDJSONSink", "iter_records"]
