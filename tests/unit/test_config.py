"""Tests for exporter settings."""

import pytest
from pydantic import ValidationError

from ocpush.core.config import ExporterSettings, get_settings, join_endpoint, reset_settings


class TestExporterSettings:
    """Tests for ExporterSettings."""

    def test_defaults(self):
        """Settings have usable defaults."""
        settings = ExporterSettings()

        assert settings.NAMESPACE == "ocpush"
        assert settings.endpoint == "http://localhost:9091"
        assert settings.BODY_FORMAT == "text"
        assert settings.PUSH_INTERVAL_SECONDS == 10.0

    def test_environment_overrides(self, monkeypatch):
        """OCPUSH_ variables override the defaults."""
        monkeypatch.setenv("OCPUSH_PUSH_ADDR", "https://gateway.internal/")
        monkeypatch.setenv("OCPUSH_PUSH_PORT", ":443")
        monkeypatch.setenv("OCPUSH_push_timeout_seconds", "1.5")
        monkeypatch.setenv("OCPUSH_DEBUG", "true")

        settings = ExporterSettings()

        assert settings.endpoint == "https://gateway.internal:443"
        assert settings.PUSH_TIMEOUT_SECONDS == 1.5
        assert settings.DEBUG is True

    def test_invalid_body_format(self, monkeypatch):
        """An unknown body format fails validation."""
        monkeypatch.setenv("OCPUSH_BODY_FORMAT", "xml")

        with pytest.raises(ValidationError):
            ExporterSettings()

    def test_interval_must_be_positive(self):
        """A zero push interval fails validation."""
        with pytest.raises(ValidationError):
            ExporterSettings(PUSH_INTERVAL_SECONDS=0)


class TestGetSettings:
    """Tests for the settings cache."""

    def test_cached(self):
        """get_settings() returns the cached instance."""
        assert get_settings() is get_settings()

    def test_reset(self, monkeypatch):
        """reset_settings() makes the environment be read again."""
        first = get_settings()
        monkeypatch.setenv("OCPUSH_NAMESPACE", "changed")

        reset_settings()

        assert get_settings() is not first
        assert get_settings().NAMESPACE == "changed"


def test_join_endpoint():
    """Address and port are joined with a single colon."""
    assert join_endpoint("http://gw", "9091") == "http://gw:9091"
    assert join_endpoint("http://gw/", ":9091") == "http://gw:9091"
    assert join_endpoint("http://gw:9091") == "http://gw:9091"
