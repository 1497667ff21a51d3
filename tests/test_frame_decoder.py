import pytest
from pydantic import ValidationError

from schemas.frames import (
    U64_MAX,
    BeaconSighting,
    Heartbeat,
    InvalidEncoding,
    MalformedFrame,
    decode_frame,
    frame_from_document,
)


def test_heartbeat_decodes():
    frame = decode_frame(b"heartbeat|aa:bb:cc:dd:ee:ff|1700000000000")
    assert frame == Heartbeat(sensor_address="aa:bb:cc:dd:ee:ff", observed_at_millis=1700000000000)


def test_heartbeat_accepts_full_u64_range():
    frame = decode_frame(f"heartbeat|s|{U64_MAX}".encode())
    assert frame.observed_at_millis == U64_MAX


def test_sighting_decodes():
    frame = decode_frame(b"ca:fe:69:c5:11:00|1700000000123|be:ef:34:25:69:01|-72")
    assert isinstance(frame, BeaconSighting)
    assert frame.sensor_address == "ca:fe:69:c5:11:00"
    assert frame.observed_at_millis == 1700000000123
    assert frame.beacon_address == "be:ef:34:25:69:01"
    assert frame.signal_strength == -72


def test_addresses_are_kept_as_received():
    frame = decode_frame(b"CA:FE:69:C5:11:00|1|BE:EF:34:25:69:01|+3")
    assert frame.sensor_address == "CA:FE:69:C5:11:00"
    assert frame.signal_strength == 3


def test_trailing_newline_is_ignored():
    frame = decode_frame(b"heartbeat|aa:bb|42\n")
    assert frame.observed_at_millis == 42


def test_extra_fields_are_ignored():
    frame = decode_frame(b"heartbeat|aa:bb|42|unexpected")
    assert frame == Heartbeat(sensor_address="aa:bb", observed_at_millis=42)


@pytest.mark.parametrize(
    "payload",
    [
        b"heartbeat",
        b"heartbeat|aa:bb",
        b"heartbeat|aa:bb|",
        b"heartbeat|aa:bb|soon",
        b"heartbeat|aa:bb|-1",
        b"heartbeat|aa:bb|18446744073709551616",
        b"heartbeat|aa:bb|1_000",
        b"heartbeat|aa:bb| 42",
        b"heartbeat||42",
    ],
)
def test_bad_heartbeat_is_malformed(payload):
    with pytest.raises(MalformedFrame):
        decode_frame(payload)


@pytest.mark.parametrize(
    "payload",
    [
        b"garbage",
        b"",
        b"aa:bb|1700000000123|be:ef",
        b"aa:bb|yesterday|be:ef|-70",
        b"aa:bb|1700000000123|be:ef|-72.5",
        b"aa:bb|1700000000123|be:ef|strong",
        b"aa:bb|1700000000123||-70",
        b"|1700000000123|be:ef|-70",
        b"HEARTBEAT|aa:bb|42",
    ],
)
def test_bad_sighting_is_malformed(payload):
    with pytest.raises(MalformedFrame):
        decode_frame(payload)


@pytest.mark.parametrize(
    "payload",
    [
        b"\xff\xfe\xfd",
        b"heartbeat|\xc3\x28|42",
        b"aa:bb|1|be:ef|-70\x80",
    ],
)
def test_invalid_utf8_is_reported_before_splitting(payload):
    with pytest.raises(InvalidEncoding) as excinfo:
        decode_frame(payload)
    assert excinfo.value.reason == "invalid_encoding"
    assert excinfo.value.payload == payload


def test_error_reasons_are_distinct():
    with pytest.raises(MalformedFrame) as excinfo:
        decode_frame(b"garbage")
    assert excinfo.value.reason == "malformed_frame"
    assert excinfo.value.snippet() == "garbage"


def test_frames_are_immutable():
    frame = decode_frame(b"heartbeat|aa:bb|42")
    with pytest.raises(ValidationError):
        frame.observed_at_millis = 43


def test_document_form_drops_the_discriminator():
    frame = decode_frame(b"ca:fe|5|be:ef|-60")
    assert frame.to_document() == {
        "sensor_address": "ca:fe",
        "observed_at_millis": 5,
        "beacon_address": "be:ef",
        "signal_strength": -60,
    }
    assert frame_from_document(frame.to_document(), "sighting") == frame


def test_wire_form_decodes_to_the_same_frame():
    heartbeat = Heartbeat(sensor_address="aa:bb", observed_at_millis=7)
    assert heartbeat.to_wire() == b"heartbeat|aa:bb|7"
    assert decode_frame(heartbeat.to_wire()) == heartbeat
