"""
Shared fixtures: simulated miners behind an httpx.MockTransport.
"""
from typing import Callable, Dict, List

import httpx
import pytest

from app.services.prober import ClientConfig


class FakeNetwork:
    """
    Routes requests by host to per-device handlers and records every call.

    Hosts without a handler behave like empty addresses (connection refused).
    """

    def __init__(self):
        self.devices: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def add_device(self, host: str, handler: Callable[[httpx.Request], httpx.Response]):
        self.devices[host] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.devices.get(request.url.host)
        if handler is None:
            raise httpx.ConnectError("Connection refused", request=request)
        return handler(request)

    @property
    def hosts(self) -> List[str]:
        return [request.url.host for request in self.requests]

    def config(self, timeout: float = 1.5, max_connections=None) -> ClientConfig:
        return ClientConfig(
            timeout=timeout,
            max_connections=max_connections,
            transport=httpx.MockTransport(self),
        )


@pytest.fixture
def network():
    """An empty fake network."""
    return FakeNetwork()


def axeos_device(payload, path: str = "/api/system/info"):
    """Handler for a device that only answers ``path`` with ``payload``."""
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == path:
            return httpx.Response(200, json=payload)
        return httpx.Response(404, text="Not Found")
    return handler
