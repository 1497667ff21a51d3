from __future__ import annotations

from typing import Dict

from fastapi import APIRouter, Depends

from ..admission import AdmissionPolicy
from ..config import APP_TITLE, ENVIRONMENT, UDP_HOST, UDP_PORT
from ..dependencies import MetricsDep, get_policy, get_sink_name

status_router = APIRouter(prefix='/status', tags=['status'])
health_router = APIRouter(prefix='/healthz', tags=['status'])


@status_router.get('')
def api_status(
    metrics: MetricsDep,
    sink_name: str | None = Depends(get_sink_name),
) -> Dict[str, object]:
    snapshot = metrics.snapshot()
    return {
        'status': f'{APP_TITLE} running',
        'udp': f'{UDP_HOST}:{UDP_PORT}',
        'sink': sink_name,
        'udp_received_total': snapshot.udp_received_total,
        'persisted_total': snapshot.persisted_total,
        'kind_counts': snapshot.kind_counts,
    }


@health_router.get('')
async def healthz(
    metrics: MetricsDep,
    policy: AdmissionPolicy = Depends(get_policy),
    sink_name: str | None = Depends(get_sink_name),
) -> Dict[str, object]:
    snapshot = metrics.snapshot()
    return {
        'status': 'ok' if sink_name is not None else 'starting',
        **snapshot.to_dict(),
        'eps_1s': metrics.eps(1),
        'eps_10s': metrics.eps(10),
        'last_packet_age_s': metrics.last_packet_age(),
        'sink': sink_name,
        'admission': policy.describe(),
        'environment': ENVIRONMENT,
    }


__all__ = ['status_router', 'health_router']
