from __future__ import annotations

from schemas.frames import FrameDecodeError, InvalidEncoding, MalformedFrame


class PersistenceFailure(RuntimeError):
    """The sink refused or failed an insert for an admitted frame."""

    def __init__(self, message: str, *, collection: str | None = None) -> None:
        super().__init__(message)
        self.collection = collection


class StartupFailure(RuntimeError):
    """Socket bind or database connectivity failed before ingestion started."""


__all__ = [
    "FrameDecodeError",
    "InvalidEncoding",
    "MalformedFrame",
    "PersistenceFailure",
    "StartupFailure",
]
