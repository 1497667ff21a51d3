"""Wire grammar for sniffer datagrams.

Two layouts share one socket and are told apart by the first field:

    heartbeat|<sensor_address>|<observed_at_millis>
    <sensor_address>|<observed_at_millis>|<beacon_address>|<signal_strength>

There is no escaping or quoting, so a ``|`` inside an address cannot be sent.
A new frame kind needs a new first-field sentinel like ``heartbeat``.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

HEARTBEAT_TOKEN = "heartbeat"
FIELD_DELIMITER = "|"

U64_MAX = 2**64 - 1
I64_MIN = -(2**63)
I64_MAX = 2**63 - 1

_UNSIGNED_RE = re.compile(r"\+?[0-9]+")
_SIGNED_RE = re.compile(r"[+-]?[0-9]+")


class FrameDecodeError(ValueError):
    """A datagram could not be turned into a frame. Terminal for that datagram."""

    reason = "decode_error"

    def __init__(self, message: str, *, payload: bytes | str | None = None) -> None:
        super().__init__(message)
        self.payload = payload

    def snippet(self, limit: int = 200) -> str:
        if self.payload is None:
            return ""
        text = self.payload if isinstance(self.payload, str) else repr(self.payload)
        return text[:limit]


class InvalidEncoding(FrameDecodeError):
    reason = "invalid_encoding"


class MalformedFrame(FrameDecodeError):
    reason = "malformed_frame"


class _FrameBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    sensor_address: str = Field(min_length=1)
    observed_at_millis: int = Field(ge=0, le=U64_MAX)

    def to_document(self) -> Dict[str, Any]:
        """Record handed to the persistence sink."""
        return self.model_dump(exclude={"kind"})


class BeaconSighting(_FrameBase):
    kind: Literal["sighting"] = "sighting"
    beacon_address: str = Field(min_length=1)
    signal_strength: int = Field(ge=I64_MIN, le=I64_MAX)

    def to_wire(self) -> bytes:
        fields = (
            self.sensor_address,
            str(self.observed_at_millis),
            self.beacon_address,
            str(self.signal_strength),
        )
        return FIELD_DELIMITER.join(fields).encode("utf-8")


class Heartbeat(_FrameBase):
    kind: Literal["heartbeat"] = "heartbeat"

    def to_wire(self) -> bytes:
        fields = (HEARTBEAT_TOKEN, self.sensor_address, str(self.observed_at_millis))
        return FIELD_DELIMITER.join(fields).encode("utf-8")


Frame = Annotated[Union[BeaconSighting, Heartbeat], Field(discriminator="kind")]

_frame_adapter: TypeAdapter[Frame] = TypeAdapter(Frame)


def frame_from_document(document: Dict[str, Any], kind: str) -> Frame:
    """Rebuild a frame from a stored record (the inverse of ``to_document``)."""
    return _frame_adapter.validate_python({**document, "kind": kind})


def _unsigned(value: str, name: str, text: str) -> int:
    if not _UNSIGNED_RE.fullmatch(value):
        raise MalformedFrame(f"{name} is not an unsigned integer: {value!r}", payload=text)
    number = int(value)
    if number > U64_MAX:
        raise MalformedFrame(f"{name} does not fit in 64 bits: {value!r}", payload=text)
    return number


def _signed(value: str, name: str, text: str) -> int:
    if not _SIGNED_RE.fullmatch(value):
        raise MalformedFrame(f"{name} is not an integer: {value!r}", payload=text)
    number = int(value)
    if not I64_MIN <= number <= I64_MAX:
        raise MalformedFrame(f"{name} does not fit in 64 bits: {value!r}", payload=text)
    return number


def _decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidEncoding(f"payload is not valid UTF-8: {exc.reason}", payload=data) from None


def decode_frame(data: bytes) -> Frame:
    """Decode one datagram into a ``BeaconSighting`` or ``Heartbeat``.

    Raises ``InvalidEncoding`` when the bytes are not UTF-8 (before any
    splitting) and ``MalformedFrame`` for a short field list, an empty address
    or an unparseable number. Fields past the layout's count are ignored.
    """

    text = _decode_text(data).strip()
    fields = text.split(FIELD_DELIMITER)

    if fields[0] == HEARTBEAT_TOKEN:
        if len(fields) < 3:
            raise MalformedFrame(
                f"heartbeat needs 3 fields, got {len(fields)}", payload=text
            )
        candidate: Dict[str, Any] = {
            "kind": "heartbeat",
            "sensor_address": fields[1],
            "observed_at_millis": _unsigned(fields[2], "observed_at_millis", text),
        }
    else:
        if len(fields) < 4:
            raise MalformedFrame(
                f"sighting needs 4 fields, got {len(fields)}", payload=text
            )
        candidate = {
            "kind": "sighting",
            "sensor_address": fields[0],
            "observed_at_millis": _unsigned(fields[1], "observed_at_millis", text),
            "beacon_address": fields[2],
            "signal_strength": _signed(fields[3], "signal_strength", text),
        }

    try:
        return _frame_adapter.validate_python(candidate)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'][1:])}: {err['msg']}" for err in exc.errors()
        )
        raise MalformedFrame(problems, payload=text) from None


__all__ = [
    "BeaconSighting",
    "FIELD_DELIMITER",
    "Frame",
    "FrameDecodeError",
    "HEARTBEAT_TOKEN",
    "Heartbeat",
    "InvalidEncoding",
    "MalformedFrame",
    "U64_MAX",
    "decode_frame",
    "frame_from_document",
]
