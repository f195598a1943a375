"""Pytest configuration and fixtures."""

import os

# Set DEBUG=true and disable the OTEL SDK for all tests BEFORE any package imports
# This must be done before pipeline_geo.core.config loads settings
os.environ["DEBUG"] = "true"
os.environ["OTEL_SDK_DISABLED"] = "true"

from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest
from pipeline_geo.services.api_client import InfrastructureApiClient

pytest_plugins = ["tests.fixtures.otel"]

BASE_URL = "http://network.test/api"

Handler = Callable[[httpx.Request], httpx.Response]


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:  # noqa: ANN401
    """Build a JSON response for a mock transport handler."""
    return httpx.Response(status_code, json=payload)


@pytest.fixture
def make_api_client() -> Callable[[Handler], InfrastructureApiClient]:
    """
    Factory for API clients backed by ``httpx.MockTransport``.

    Returns:
        Callable taking a request handler and returning an InfrastructureApiClient
        that never touches the network.
    """

    def _make(handler: Handler) -> InfrastructureApiClient:
        http_client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
        return InfrastructureApiClient(http_client=http_client)

    return _make


@pytest.fixture
async def recording_api() -> AsyncGenerator[tuple[InfrastructureApiClient, dict[str, Any], list[httpx.Request]]]:
    """
    API client serving canned JSON by path, recording every request.

    Yields:
        Tuple of (client, routes, requests). Tests fill ``routes`` with
        ``{path: payload}``; a payload may be an ``httpx.Response`` or a
        callable taking the request. Unknown paths answer 404.
    """
    routes: dict[str, Any] = {}
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        path = request.url.path.removeprefix("/api")
        if path not in routes:
            return httpx.Response(404, json={"message": "not found"})
        payload = routes[path]
        if callable(payload):
            payload = payload(request)
        if isinstance(payload, httpx.Response):
            return payload
        return json_response(payload)

    http_client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    client = InfrastructureApiClient(http_client=http_client)
    yield client, routes, requests
    await http_client.aclose()
