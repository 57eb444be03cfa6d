"""Tests for runtime settings."""

import pytest

from pc_reconciler.config import (
    DEFAULT_EXCLUDED_PREFIXES,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_POLL_INTERVAL,
    ReconcilerSettings,
)


class TestReconcilerSettings:
    def test_defaults(self):
        settings = ReconcilerSettings()
        assert settings.poll_interval == DEFAULT_POLL_INTERVAL == 10.0
        assert settings.max_attempts == DEFAULT_MAX_ATTEMPTS == 30
        assert settings.excluded_prefixes == DEFAULT_EXCLUDED_PREFIXES

    def test_worker_count_defaults_to_cpu_count(self, monkeypatch):
        monkeypatch.setattr("pc_reconciler.config.os.cpu_count", lambda: 6)
        assert ReconcilerSettings().worker_count == 6

    def test_worker_count_without_cpu_info(self, monkeypatch):
        monkeypatch.setattr("pc_reconciler.config.os.cpu_count", lambda: None)
        assert ReconcilerSettings().worker_count == 1

    def test_explicit_worker_count(self):
        assert ReconcilerSettings(max_workers=3).worker_count == 3

    def test_is_excluded(self):
        settings = ReconcilerSettings()
        assert settings.is_excluded("warmUpPluginDefault")
        assert not settings.is_excluded("api")

    @pytest.mark.parametrize(
        "kwargs", [{"max_workers": -1}, {"poll_interval": -1}, {"max_attempts": 0}]
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            ReconcilerSettings(**kwargs)

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("AWS_REGION", "eu-west-1")
        monkeypatch.setenv("AWS_ENDPOINT_URL", "http://localhost:4566")
        monkeypatch.setenv("PC_MAX_WORKERS", "2")
        monkeypatch.setenv("PC_POLL_INTERVAL", "0.5")
        monkeypatch.setenv("PC_MAX_ATTEMPTS", "4")
        monkeypatch.setenv("PC_EXCLUDED_PREFIXES", "warmer, keepAlive")
        settings = ReconcilerSettings.from_environment()
        assert settings.region == "eu-west-1"
        assert settings.endpoint_url == "http://localhost:4566"
        assert settings.max_workers == 2
        assert settings.poll_interval == 0.5
        assert settings.max_attempts == 4
        assert settings.excluded_prefixes == ("warmer", "keepAlive")

    def test_from_environment_defaults(self, monkeypatch):
        for var in (
            "AWS_REGION",
            "AWS_DEFAULT_REGION",
            "AWS_ENDPOINT_URL",
            "PC_MAX_WORKERS",
            "PC_POLL_INTERVAL",
            "PC_MAX_ATTEMPTS",
            "PC_EXCLUDED_PREFIXES",
            "PC_PROGRESS_REFRESH",
        ):
            monkeypatch.delenv(var, raising=False)
        assert ReconcilerSettings.from_environment() == ReconcilerSettings()
