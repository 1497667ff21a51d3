import pytest
from pydantic import ValidationError

from backend.app.config import Settings


def test_defaults_match_the_legacy_daemon():
    settings = Settings(_env_file=None)
    assert settings.udp_port == 8080
    assert settings.udp_recv_size == 1024
    assert settings.mongo_database == "develop"
    assert settings.sightings_collection == "bluetooth_frames"
    assert settings.admission_enabled is False
    assert settings.insert_timeout_s is None


def test_prefix_lists_are_read_from_csv_env(monkeypatch):
    monkeypatch.setenv("SENSOR_PREFIXES", "ca:fe, ab:cd ,")
    monkeypatch.setenv("BEACON_PREFIXES", "")
    settings = Settings(_env_file=None)
    assert settings.sensor_prefixes == ["ca:fe", "ab:cd"]
    assert settings.beacon_prefixes == []


def test_env_file_is_honoured(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("MONGO_URL=mongodb://db:27017\nADMISSION_ENABLED=true\n", encoding="utf-8")
    settings = Settings(_env_file=env_file)
    assert settings.mongo_url == "mongodb://db:27017"
    assert settings.admission_enabled is True


@pytest.mark.parametrize("value", ["0", "-1", "soon"])
def test_insert_timeout_must_be_positive(value):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, INSERT_TIMEOUT_S=value)


def test_blank_insert_timeout_disables_it():
    assert Settings(_env_file=None, INSERT_TIMEOUT_S="").insert_timeout_s is None


def test_unknown_sink_backend_is_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, SINK_BACKEND="redis")


def test_variables_are_read_by_their_plain_names(monkeypatch):
    monkeypatch.setenv("SENTINEL_MONGO_URL", "mongodb://prefixed:27017")
    monkeypatch.setenv("MONGO_DATABASE", "sightings")
    settings = Settings(_env_file=None)
    assert settings.mongo_database == "sightings"
    assert settings.mongo_url != "mongodb://prefixed:27017"
