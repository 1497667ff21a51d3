from __future__ import annotations

from typing import Any, Mapping

import pytest

from backend.app.admission import ALLOW_ALL, AdmissionPolicy
from backend.app.metrics import MetricsProvider
from backend.app.services import Services


class RecordingSink:
    name = "memory"

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    async def insert(self, collection: str, document: Mapping[str, Any]) -> None:
        self.calls.append((collection, dict(document)))

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_services(recording_sink):
    def _make(
        policy: AdmissionPolicy = ALLOW_ALL,
        *,
        sink=recording_sink,
        insert_timeout_s: float | None = None,
    ) -> Services:
        return Services(
            metrics=MetricsProvider(),
            policy=policy,
            sink=sink,
            sightings_collection="bluetooth_frames",
            heartbeats_collection="heartbeats",
            insert_timeout_s=insert_timeout_s,
        )

    return _make
