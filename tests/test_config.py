import pytest
from pydantic import ValidationError

from yletv.config import CustomSettings


def test_defaults():
    settings = CustomSettings(_env_file=None)
    assert settings.yle_api_base_url == "https://external.api.yle.fi/v1"
    assert settings.primary_locale == "fi"
    assert settings.secondary_locale == "sv"
    assert settings.fetch_timeout_sec > 0


def test_base_url_trailing_slash_is_stripped():
    settings = CustomSettings(_env_file=None, yle_api_base_url="https://api.example/v1/")
    assert settings.yle_api_base_url == "https://api.example/v1"


@pytest.mark.parametrize("overrides", [
    {"yle_secret": "too-short"},
    {"yle_api_base_url": "ftp://api.example"},
    {"fetch_timeout_sec": 0},
    {"catalog_refresh_cron": "not a cron"},
    {"log_level": "chatty"},
    {"primary_locale": "sv", "secondary_locale": "sv"},
])
def test_invalid_settings(overrides):
    with pytest.raises(ValidationError):
        CustomSettings(_env_file=None, **overrides)


def test_valid_secret_lengths():
    for secret in ("a" * 16, "b" * 24, "c" * 32):
        assert CustomSettings(_env_file=None, yle_secret=secret).yle_secret == secret
