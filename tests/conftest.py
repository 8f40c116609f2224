"""
Shared pytest configuration and fixtures for Outline CLI tests.

This module provides common fixtures used across all test modules including:
- Sample server endpoints and fingerprints
- A temporary server registry
- An httpx mock transport standing in for an Outline server
"""

import json
from typing import Any
from unittest.mock import Mock

import httpx
import pytest

from outline_cli.core.client import OutlineClient
from outline_cli.core.registry import ServerRegistry

TEST_API_URL = "https://203.0.113.7:4321/AbCdEfSecret"
TEST_CERT_SHA256 = "1234567890ABCDEF1234567890ABCDEF1234567890ABCDEF1234567890ABCDEF"


# ========== Registry Fixtures ==========


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    """Point the registry at a temporary file that does not exist yet."""
    path = tmp_path / "outline-cli" / "config.yaml"
    monkeypatch.setenv("OUTLINE_CLI_CONFIG", str(path))
    return path


@pytest.fixture
def registry(config_file) -> ServerRegistry:
    """Provide a registry with one server named 'myserver'."""
    reg = ServerRegistry(config_file, logger=Mock())
    reg.add("myserver", TEST_API_URL, TEST_CERT_SHA256)
    return reg


# ========== HTTP Mock Transport ==========


class MockTransport(httpx.MockTransport):
    """Mock transport answering configured (method, path) routes.

    Routes map ``"METHOD /path"`` (path relative to the API secret) to either
    ``(status_code, body)`` or a callable taking the request. Unknown routes
    answer 404.
    """

    def __init__(self, routes: dict[str, Any] = None, prefix: str = "/AbCdEfSecret"):
        self.routes = routes or {}
        self.prefix = prefix
        self.requests_made: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []
        super().__init__(self._handle_request)

    def _handle_request(self, request: httpx.Request) -> httpx.Response:
        self.requests_made.append(request)

        raw_path = request.url.raw_path.decode().split("?")[0]
        path = raw_path[len(self.prefix):] if raw_path.startswith(self.prefix) else raw_path
        route = self.routes.get(f"{request.method} {path}")

        if route is None:
            response = httpx.Response(404, text="not found", request=request)
        elif callable(route):
            response = route(request)
        else:
            status_code, body = route
            if body is None:
                response = httpx.Response(status_code, request=request)
            elif isinstance(body, (dict, list)):
                response = httpx.Response(status_code, json=body, request=request)
            else:
                response = httpx.Response(status_code, text=body, request=request)

        self.responses.append(response)
        return response

    def calls(self, method: str) -> list[httpx.Request]:
        return [r for r in self.requests_made if r.method == method]


def request_json(request: httpx.Request) -> dict[str, Any]:
    """Decode the JSON body of a recorded request."""
    return json.loads(request.content)


@pytest.fixture
def make_client():
    """Build an OutlineClient wired to a MockTransport."""

    def _make(routes: dict[str, Any] = None) -> tuple[OutlineClient, MockTransport]:
        transport = MockTransport(routes)
        client = OutlineClient(TEST_API_URL, TEST_CERT_SHA256, logger=Mock(), transport=transport)
        return client, transport

    return _make


@pytest.fixture
def cli_server(monkeypatch):
    """Route every client the CLI builds to a MockTransport."""

    def _install(routes: dict[str, Any] = None) -> MockTransport:
        transport = MockTransport(routes)

        def factory(url, cert_sha256, logger=None):
            return OutlineClient(url, cert_sha256, logger=logger, transport=transport)

        monkeypatch.setattr("outline_cli.cli.context.OutlineClient", factory)
        return transport

    return _install


# ========== Sample API Payloads ==========


@pytest.fixture
def sample_access_key() -> dict[str, Any]:
    return {
        "id": "k1",
        "name": "Test",
        "password": "p",
        "port": 1234,
        "method": "aes-256-gcm",
        "accessUrl": "ss://Y2hhY2hhMjA@203.0.113.7:1234/?outline=1",
    }


@pytest.fixture
def sample_server_info() -> dict[str, Any]:
    return {
        "name": "Test Server",
        "serverId": "test-server-id",
        "metricsEnabled": True,
        "createdTimestampMs": 1640995200000,
        "version": "1.0.0",
        "portForNewAccessKeys": 12345,
        "hostnameForAccessKeys": "test.example.com",
    }


# ========== Pytest Configuration ==========


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


@pytest.fixture(autouse=True)
def _restore_cli_logger():
    """Restore the ``outline-cli`` logger after each test.

    ``configure_logging`` binds a handler to the current ``sys.stderr``; under
    CliRunner that stream is closed once the invocation ends, so a handler
    leaking into later tests would write to a closed file.
    """
    import logging

    from outline_cli.shared.constants import LOGGER_NAME

    logger = logging.getLogger(LOGGER_NAME)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]
