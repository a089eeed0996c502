"""
Unit Test Fixtures.

Fixtures for unit tests. The network is replaced by httpx.MockTransport,
so requests are inspected without any server.
"""

from collections.abc import Callable

import httpx
import pytest

from hello_versioning.core.config_schema import VersioningSchema


class RecordingHandler:
    """httpx.MockTransport handler that records requests and replies from a callback."""

    def __init__(self, reply: Callable[[httpx.Request], httpx.Response]) -> None:
        self.reply = reply
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.reply(request)


def echo_version(request: httpx.Request) -> httpx.Response:
    """Reply with the version header and the last path segment."""
    version = request.headers.get("X-API-VERSION", "none")
    name = request.url.path.rsplit("/", 1)[-1]
    return httpx.Response(200, text=f"v{version}:{name}")


@pytest.fixture
def recorder() -> RecordingHandler:
    """Recording handler that echoes the version back."""
    return RecordingHandler(echo_version)


@pytest.fixture
def make_recorder() -> Callable[[Callable[[httpx.Request], httpx.Response]], RecordingHandler]:
    """
    Factory for handlers with a custom reply.

    Usage:
        def test_404(make_recorder):
            handler = make_recorder(lambda request: httpx.Response(404))
    """
    return RecordingHandler


@pytest.fixture
def header_versioning() -> VersioningSchema:
    return VersioningSchema(strategy="header", header_name="X-API-VERSION")


@pytest.fixture
def parameter_versioning() -> VersioningSchema:
    return VersioningSchema(strategy="parameter", parameter_name="api-version")
