import pytest
from pydantic import ValidationError

from auto_messenger.config import Settings, parse_duration


@pytest.mark.parametrize(
    "value, seconds",
    [
        (5, 5.0),
        (1.5, 1.5),
        ("90", 90.0),
        ("30s", 30.0),
        ("2m", 120.0),
        ("1h30m", 5400.0),
        ("500ms", 0.5),
        ("1m30s", 90.0),
    ],
)
def test_parse_duration(value, seconds):
    assert parse_duration(value) == seconds


@pytest.mark.parametrize("value", ["", "abc", "2x", "m2", "2m junk"])
def test_parse_duration_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_duration(value)


def test_defaults():
    s = Settings(_env_file=None)
    assert s.MSG_BATCH_SIZE == 2
    assert s.MSG_SEND_INTERVAL == 120.0
    assert s.HTTP_PORT == 6060


def test_interval_from_env(monkeypatch):
    monkeypatch.setenv("MSG_SEND_INTERVAL", "2m")
    monkeypatch.setenv("MSG_MAX_RETRY", "3")
    s = Settings(_env_file=None)
    assert s.MSG_SEND_INTERVAL == 120.0
    assert s.MSG_MAX_RETRY == 3


def test_env_alias(monkeypatch):
    monkeypatch.setenv("ENV", "prod")
    monkeypatch.setenv("WEBHOOK_URL", "https://hooks.example.com/in")
    assert Settings(_env_file=None).is_production


def test_production_requires_webhook_url(monkeypatch):
    monkeypatch.setenv("ENV", "prod")
    monkeypatch.delenv("WEBHOOK_URL", raising=False)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


@pytest.mark.parametrize(
    "kwargs",
    [{"MSG_BATCH_SIZE": 0}, {"MSG_SEND_INTERVAL": "soon"}, {"MSG_MAX_RETRY": 0}],
)
def test_invalid_settings(kwargs):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **kwargs)


@pytest.mark.parametrize("url", ["http://[::1", "not a url", "ftp://hooks.example.com/in", "/webhook"])
def test_webhook_url_must_be_http(url):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, WEBHOOK_URL=url)
