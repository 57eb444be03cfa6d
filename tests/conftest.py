"""Pytest fixtures for pc-reconciler tests."""

import pytest

from pc_reconciler.config import ReconcilerSettings
from pc_reconciler.manifest import DeploymentManifest
from tests.fixtures.fake_lambda import FakeLambda
from tests.fixtures.recorders import RecordingProgress, RecordingReporter


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mock AWS credentials so boto3 never reaches for real ones."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)


@pytest.fixture
def fake_lambda():
    return FakeLambda()


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def progress():
    return RecordingProgress()


@pytest.fixture
def fast_settings():
    """Settings that never sleep: zero poll interval and no progress ticker."""
    return ReconcilerSettings(max_workers=4, poll_interval=0, max_attempts=5, progress_refresh=0)


@pytest.fixture
def manifest_data():
    return {
        "service": "orders",
        "provider": {"stage": "prod"},
        "custom": {"provisionedConcurrency": {"maxPercent": 80}},
        "functions": {
            "api": {"reservedConcurrency": 100, "concurrency": {"provisioned": 10}},
            "worker": {"provisionedConcurrency": 5, "provisionedConcurrencyVersion": "2"},
            "cleanup": {"concurrency": {}},
            "plain": {"handler": "plain.handler"},
        },
    }


@pytest.fixture
def manifest(manifest_data):
    return DeploymentManifest.from_dict(manifest_data)
