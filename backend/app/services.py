from __future__ import annotations

from dataclasses import dataclass

from .admission import AdmissionPolicy
from .config import settings
from .metrics import MetricsProvider, metrics
from .sink import FrameSink


@dataclass
class Services:
    metrics: MetricsProvider
    policy: AdmissionPolicy
    sink: FrameSink | None = None
    sightings_collection: str = settings.sightings_collection
    heartbeats_collection: str = settings.heartbeats_collection
    insert_timeout_s: float | None = settings.insert_timeout_s

    def collection_for(self, kind: str) -> str:
        if kind == "heartbeat":
            return self.heartbeats_collection
        return self.sightings_collection


_default = Services(metrics=metrics, policy=AdmissionPolicy.from_settings(settings))


def get_services() -> Services:
    """Return the process-wide service bundle; the lifespan attaches the sink."""

    return _default


__all__ = ['Services', 'get_services']
