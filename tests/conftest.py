import os

import httpx
import pytest

from ocpush.core import config


# List of environment variables that may be modified by tests
_ENV_VARS_TO_ISOLATE = [
    "OCPUSH_NAMESPACE",
    "OCPUSH_PUSH_ADDR",
    "OCPUSH_PUSH_PORT",
    "OCPUSH_JOB_NAME",
    "OCPUSH_INSTANCE_NAME",
    "OCPUSH_PUSH_INTERVAL_SECONDS",
    "OCPUSH_PUSH_TIMEOUT_SECONDS",
    "OCPUSH_BODY_FORMAT",
    "OCPUSH_LOG_LEVEL",
    "OCPUSH_DEBUG",
]


@pytest.fixture(autouse=True)
def env_isolation():
    """Isolate environment variables and cached settings between tests."""
    backup = {k: os.environ.get(k) for k in _ENV_VARS_TO_ISOLATE}
    config.reset_settings()
    try:
        yield
    finally:
        for k, v in backup.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v
        config.reset_settings()


class RecordingCollector:
    """Fake collector that stores every request it receives."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, request=request)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


@pytest.fixture
def collector() -> RecordingCollector:
    return RecordingCollector()
