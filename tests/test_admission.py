import pytest

from backend.app.admission import ALLOW_ALL, AdmissionPolicy, admit
from backend.app.config import Settings
from schemas.frames import BeaconSighting, Heartbeat


def sighting(sensor: str = "ca:fe:69:c5:11:00", beacon: str = "be:ef:34:25:69:01") -> BeaconSighting:
    return BeaconSighting(
        sensor_address=sensor,
        observed_at_millis=1700000000123,
        beacon_address=beacon,
        signal_strength=-72,
    )


def heartbeat(sensor: str = "ca:fe:69:c5:11:00") -> Heartbeat:
    return Heartbeat(sensor_address=sensor, observed_at_millis=1700000000000)


@pytest.fixture
def policy() -> AdmissionPolicy:
    return AdmissionPolicy.restricted(["ca:fe"], ["be:ef"])


def test_allow_all_admits_anything():
    assert admit(sighting("de:ad", "00:00"), ALLOW_ALL) is True
    assert admit(heartbeat("de:ad"), ALLOW_ALL) is True


def test_sighting_needs_both_matches(policy):
    assert admit(sighting(), policy) is True
    assert admit(sighting(sensor="de:ad:00:00:00:00"), policy) is False
    assert admit(sighting(beacon="00:11:22:33:44:55"), policy) is False


def test_heartbeat_needs_only_the_sensor(policy):
    assert admit(heartbeat(), policy) is True
    assert admit(heartbeat("de:ad:00:00:00:00"), policy) is False


def test_match_is_substring_not_anchored():
    policy = AdmissionPolicy.restricted(["69:c5"], ["25:69"])
    assert admit(sighting(), policy) is True


@pytest.mark.parametrize("sensor", ["CA:FE:69:C5:11:00", "ca:fe:69:c5:11:00", "Ca:Fe:69:c5:11:00"])
def test_case_insensitive_on_address(policy, sensor):
    assert admit(heartbeat(sensor), policy) is True


def test_case_insensitive_on_prefix():
    policy = AdmissionPolicy.restricted(["CA:FE"], ["BE:EF"])
    assert policy.sensor_prefixes == frozenset({"ca:fe"})
    assert admit(sighting(), policy) is True


def test_empty_prefix_sets_match_nothing():
    policy = AdmissionPolicy.restricted([], [])
    assert admit(heartbeat(), policy) is False
    assert admit(sighting(), policy) is False


def test_decision_is_repeatable(policy):
    frame = sighting()
    decisions = {admit(frame, policy) for _ in range(5)}
    assert decisions == {True}


def test_policy_from_settings():
    disabled = Settings(_env_file=None, ADMISSION_ENABLED=False, SENSOR_PREFIXES="ca:fe")
    assert AdmissionPolicy.from_settings(disabled) == ALLOW_ALL

    enabled = Settings(
        _env_file=None,
        ADMISSION_ENABLED=True,
        SENSOR_PREFIXES="CA:FE, ab:cd",
        BEACON_PREFIXES="be:ef",
    )
    policy = AdmissionPolicy.from_settings(enabled)
    assert policy.allow_all is False
    assert policy.sensor_prefixes == frozenset({"ca:fe", "ab:cd"})
    assert policy.beacon_prefixes == frozenset({"be:ef"})
    assert policy.describe()["mode"] == "restricted"
