from __future__ import annotations

import asyncio

import structlog

from .config import UDP_RECV_SIZE
from .errors import StartupFailure
from .ingest import ingest_datagram, resolve_services
from .metrics import MetricsProvider
from .services import Services

log = structlog.get_logger("sentinel.udp")


class UDPProtocol(asyncio.DatagramProtocol):
    """Hands raw datagrams to the consumer queue in receipt order.

    The queue stands in for the socket receive buffer: when it is full the
    datagram is dropped, exactly as the kernel would drop it.
    """

    def __init__(
        self,
        queue: asyncio.Queue,
        *,
        metrics: MetricsProvider | None = None,
        recv_size: int = UDP_RECV_SIZE,
    ) -> None:
        self.queue = queue
        self.metrics = metrics if metrics is not None else resolve_services().metrics
        self.recv_size = recv_size

    def datagram_received(self, data: bytes, addr) -> None:  # type: ignore[override]
        self.metrics.note_received()
        try:
            self.queue.put_nowait(data[: self.recv_size])
        except asyncio.QueueFull:
            self.metrics.note_queue_dropped()
            log.warning("UDP queue full; dropping datagram", client=addr)

    def error_received(self, exc: Exception) -> None:
        log.warning("UDP socket error", error=str(exc))


async def open_udp_endpoint(
    queue: asyncio.Queue,
    host: str,
    port: int,
    *,
    services: Services | None = None,
    recv_size: int = UDP_RECV_SIZE,
) -> asyncio.DatagramTransport:
    svc = resolve_services(services)
    loop = asyncio.get_running_loop()
    try:
        transport, _ = await loop.create_datagram_endpoint(
            lambda: UDPProtocol(queue, metrics=svc.metrics, recv_size=recv_size),
            local_addr=(host, port),
        )
    except OSError as exc:
        raise StartupFailure(f"could not bind UDP socket on {host}:{port}: {exc}") from exc
    log.info("listening for sniffer datagrams", host=host, port=port, recv_size=recv_size)
    return transport


async def udp_consumer(queue: asyncio.Queue, services: Services | None = None) -> None:
    """Process queued datagrams one at a time until cancelled."""

    svc = resolve_services(services)
    while True:
        raw = await queue.get()
        try:
            await ingest_datagram(raw, services=svc)
        except Exception:
            svc.metrics.note_unexpected_error()
            log.exception("Failed to process UDP datagram", snippet=repr(raw[:200]))
        finally:
            queue.task_done()


__all__ = ["UDPProtocol", "open_udp_endpoint", "udp_consumer"]
