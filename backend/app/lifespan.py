from __future__ import annotations

import asyncio
import contextlib
from typing import AsyncIterator

import structlog
from fastapi import FastAPI

from .config import UDP_HOST, UDP_PORT, UDP_QUEUE_MAX, UDP_RECV_SIZE, settings
from .services import get_services
from .sink import open_sink
from .udp import open_udp_endpoint, udp_consumer

log = structlog.get_logger("sentinel.lifespan")


@contextlib.asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncIterator[None]:
    services = get_services()
    # StartupFailure from either step aborts application startup
    services.sink = await open_sink(settings)
    queue: asyncio.Queue = asyncio.Queue(maxsize=UDP_QUEUE_MAX)
    app.state.udp_queue = queue

    try:
        transport = await open_udp_endpoint(
            queue, UDP_HOST, UDP_PORT, services=services, recv_size=UDP_RECV_SIZE
        )
    except Exception:
        await services.sink.close()
        services.sink = None
        raise
    app.state.udp_transport = transport
    app.state.udp_consumer_task = asyncio.create_task(udp_consumer(queue, services))

    log.info(
        "ingestion ready",
        sink=services.sink.name,
        admission=services.policy.describe(),
        sightings_collection=services.sightings_collection,
        heartbeats_collection=services.heartbeats_collection,
    )

    try:
        yield
    finally:
        transport = getattr(app.state, 'udp_transport', None)
        if transport:
            transport.close()
        task = getattr(app.state, 'udp_consumer_task', None)
        if task:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception:
                log.exception("UDP consumer task shutdown failed")
        if services.sink is not None:
            await services.sink.close()
            services.sink = None


__all__ = ['app_lifespan']
