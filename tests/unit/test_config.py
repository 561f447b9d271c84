import pytest
from pydantic import ValidationError

from config import Settings, parse_duration

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "value,seconds",
    [("45", 45), ("30s", 30), ("30m", 1800), ("1h", 3600), ("7d", 604800), (" 2H ", 7200)],
)
def test_parse_duration(value, seconds):
    assert parse_duration(value) == seconds


@pytest.mark.parametrize("value", ["", "abc", "1w", "0", "-5m"])
def test_parse_duration_rejects_invalid(value):
    with pytest.raises(ValueError):
        parse_duration(value)


def test_token_ttl_from_expires_in():
    assert Settings(jwt_expires_in="15m").token_ttl_seconds == 900


def test_invalid_expires_in_fails_validation():
    with pytest.raises(ValidationError):
        Settings(jwt_expires_in="soon")


def test_production_rejects_default_secret():
    with pytest.raises(ValidationError):
        Settings(app_env="production")


def test_production_accepts_explicit_secret():
    settings = Settings(app_env="production", jwt_secret="s3cr3t")
    assert settings.is_production()


def test_allowed_origins_split():
    settings = Settings(allowed_origins="http://a.test, http://b.test,")
    assert settings.get_allowed_origins() == ["http://a.test", "http://b.test"]
