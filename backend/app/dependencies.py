from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from .admission import AdmissionPolicy
from .metrics import MetricsProvider
from .services import Services, get_services


ServicesDep = Annotated[Services, Depends(get_services)]


def get_metrics(services: ServicesDep) -> MetricsProvider:
    return services.metrics


MetricsDep = Annotated[MetricsProvider, Depends(get_metrics)]


def get_policy(services: ServicesDep) -> AdmissionPolicy:
    return services.policy


def get_sink_name(services: ServicesDep) -> str | None:
    return services.sink.name if services.sink is not None else None


__all__ = [
    'MetricsDep',
    'ServicesDep',
    'get_metrics',
    'get_policy',
    'get_sink_name',
]
