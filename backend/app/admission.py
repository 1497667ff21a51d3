from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from schemas.frames import BeaconSighting, Frame

from .config import Settings


def _normalize(prefixes: Iterable[str]) -> frozenset[str]:
    return frozenset(p.strip().lower() for p in prefixes if p and p.strip())


@dataclass(frozen=True)
class AdmissionPolicy:
    """Allow-list of sensor/beacon address fragments.

    Not a security boundary: matching is plain case-insensitive substring
    containment against addresses the sender chose to put in the payload.
    """

    allow_all: bool = True
    sensor_prefixes: frozenset[str] = frozenset()
    beacon_prefixes: frozenset[str] = frozenset()

    @classmethod
    def allow_everything(cls) -> "AdmissionPolicy":
        return cls()

    @classmethod
    def restricted(cls, sensors: Iterable[str], beacons: Iterable[str]) -> "AdmissionPolicy":
        return cls(
            allow_all=False,
            sensor_prefixes=_normalize(sensors),
            beacon_prefixes=_normalize(beacons),
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "AdmissionPolicy":
        if not settings.admission_enabled:
            return cls.allow_everything()
        return cls.restricted(settings.sensor_prefixes, settings.beacon_prefixes)

    def describe(self) -> dict[str, object]:
        if self.allow_all:
            return {"mode": "allow_all"}
        return {
            "mode": "restricted",
            "sensor_prefixes": sorted(self.sensor_prefixes),
            "beacon_prefixes": sorted(self.beacon_prefixes),
        }


ALLOW_ALL = AdmissionPolicy.allow_everything()


def _matches(address: str, prefixes: frozenset[str]) -> bool:
    lowered = address.lower()
    return any(prefix in lowered for prefix in prefixes)


def admit(frame: Frame, policy: AdmissionPolicy) -> bool:
    """Return True when ``frame`` should be persisted under ``policy``."""

    if policy.allow_all:
        return True
    if not _matches(frame.sensor_address, policy.sensor_prefixes):
        return False
    if isinstance(frame, BeaconSighting):
        return _matches(frame.beacon_address, policy.beacon_prefixes)
    return True


__all__ = ["ALLOW_ALL", "AdmissionPolicy", "admit"]
