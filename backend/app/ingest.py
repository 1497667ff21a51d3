from __future__ import annotations

import asyncio
import time
from enum import Enum

import structlog

from schemas.frames import Frame, FrameDecodeError, decode_frame

from .admission import admit
from .errors import PersistenceFailure
from .services import Services, get_services

log = structlog.get_logger("sentinel.ingest")


class IngestOutcome(str, Enum):
    PERSISTED = "persisted"
    REJECTED = "rejected"
    INVALID_ENCODING = "invalid_encoding"
    MALFORMED = "malformed"
    PERSIST_FAILED = "persist_failed"


def resolve_services(services: Services | None = None) -> Services:
    """Return the provided service bundle or fall back to the defaults."""

    return services if services is not None else get_services()


def now_millis() -> int:
    return time.time_ns() // 1_000_000


def decode_datagram(data: bytes, services: Services | None = None) -> Frame:
    svc = resolve_services(services)
    frame = decode_frame(data)
    svc.metrics.note_decoded()
    return frame


async def _insert(svc: Services, collection: str, frame: Frame, received_at_millis: int) -> None:
    if svc.sink is None:
        raise RuntimeError("persistence sink is not attached")
    document = {**frame.to_document(), "received_at_millis": received_at_millis}
    pending = svc.sink.insert(collection, document)
    if svc.insert_timeout_s is None:
        await pending
    else:
        await asyncio.wait_for(pending, timeout=svc.insert_timeout_s)


async def persist_frame(
    frame: Frame,
    *,
    services: Services | None = None,
    received_at_millis: int | None = None,
) -> IngestOutcome:
    """Insert one admitted frame, once. Failures are logged with the frame and dropped.

    The stored record also carries the daemon's receipt time as
    ``received_at_millis``, independent of the sensor clock.
    """

    svc = resolve_services(services)
    if received_at_millis is None:
        received_at_millis = now_millis()
    collection = svc.collection_for(frame.kind)
    try:
        await _insert(svc, collection, frame, received_at_millis)
    except PersistenceFailure as exc:
        svc.metrics.note_persist_failed()
        log.error(
            "failed to save frame",
            collection=collection,
            frame=frame.model_dump(),
            error=str(exc),
        )
        return IngestOutcome.PERSIST_FAILED
    except asyncio.TimeoutError:
        svc.metrics.note_persist_failed()
        log.error(
            "insert timed out; frame dropped",
            collection=collection,
            frame=frame.model_dump(),
            timeout_s=svc.insert_timeout_s,
        )
        return IngestOutcome.PERSIST_FAILED

    svc.metrics.note_persisted(frame.kind)
    log.info("saved frame", collection=collection, kind=frame.kind, sensor=frame.sensor_address)
    return IngestOutcome.PERSISTED


async def ingest_datagram(data: bytes, *, services: Services | None = None) -> IngestOutcome:
    """Run one datagram through decode, admission and persistence."""

    svc = resolve_services(services)
    received_at_millis = now_millis()
    try:
        frame = decode_datagram(data, services=svc)
    except FrameDecodeError as exc:
        svc.metrics.note_decode_failure(exc.reason)
        log.warning("invalid message received", reason=exc.reason, error=str(exc), snippet=exc.snippet())
        if exc.reason == "invalid_encoding":
            return IngestOutcome.INVALID_ENCODING
        return IngestOutcome.MALFORMED

    if not admit(frame, svc.policy):
        svc.metrics.note_rejected()
        log.info("frame rejected by admission policy", kind=frame.kind, frame=frame.model_dump())
        return IngestOutcome.REJECTED

    return await persist_frame(frame, services=svc, received_at_millis=received_at_millis)


__all__ = [
    "IngestOutcome",
    "decode_datagram",
    "ingest_datagram",
    "persist_frame",
    "resolve_services",
]
