"""Pytest configuration and fixtures for pveclient tests.

This module provides common fixtures for testing the client and the CLI,
including auth strategies, an in-memory transport, and sample API payloads.
"""

import json
import threading
from typing import Any, List, Optional, Tuple

import pytest
from pytest_httpx import HTTPXMock

from pveclient.client.auth import LoginAuth, TokenAuth
from pveclient.client.base import ProxmoxClient
from pveclient.client.context import CallContext
from pveclient.client.transport import Request

BASE_URL = "https://pve.local:8006"
API_URL = f"{BASE_URL}/api2/json"


# Sample API responses for testing
MOCK_VERSION = {
    "data": {
        "version": "8.1",
        "release": "8.1",
        "repoid": "b46aac3b42da5d15",
    }
}

MOCK_NODE_LIST = {
    "data": [
        {
            "node": "pve1",
            "type": "node",
            "id": "node/pve1",
            "status": "online",
            "cpu": 0.0312,
            "maxcpu": 16,
            "mem": 8589934592,
            "maxmem": 68719476736,
            "disk": 10737418240,
            "maxdisk": 107374182400,
            "uptime": 90061,
            "level": "",
            "ssl_fingerprint": "AA:BB:CC",
        }
    ]
}

MOCK_DISK_LIST = {
    "data": [
        {
            "devpath": "/dev/nvme0n1",
            "type": "nvme",
            "model": "Samsung SSD 980 PRO 1TB",
            "vendor": "unknown",
            "serial": "S5GXNF0R000000",
            "size": 1000204886016,
            "health": "PASSED",
            "wearout": 97,
            "osdid": -1,
            "osdid-list": None,
            "gpt": 1,
            "rpm": 0,
            "used": "LVM",
            "wwn": "eui.0025385b11b00000",
            "by_id_link": "/dev/disk/by-id/nvme-Samsung_SSD_980_PRO_1TB",
        },
        {
            "devpath": "/dev/sda",
            "type": "hdd",
            "model": "ST4000VN008",
            "vendor": "ATA",
            "serial": "ZDH00000",
            "size": 4000787030016,
            "health": "PASSED",
            "wearout": "N/A",
            "osdid": "3",
            "osdid-list": [3],
            "gpt": 0,
            "rpm": 5980,
        },
    ]
}

MOCK_TICKET = {
    "data": {
        "ticket": "PVE:root@pam:65A1B2C3::signature",
        "CSRFPreventionToken": "65A1B2C3:csrftoken",
        "username": "root@pam",
        "cap": {"nodes": {"Sys.Audit": 1}},
    }
}


class FakeTransport:
    """In-memory transport answering every request with the same response.

    Attributes:
        requests: Requests seen, in order
        gate: When set to an Event, execute() blocks until it is set
    """

    def __init__(self, status_code: int = 200, payload: Any = None, body: Optional[bytes] = None):
        self.status_code = status_code
        self.body = body if body is not None else json.dumps(payload).encode()
        self.requests: List[Request] = []
        self.gate: Optional[threading.Event] = None
        self._lock = threading.Lock()

    @property
    def calls(self) -> int:
        return len(self.requests)

    def execute(self, request: Request, ctx: Optional[CallContext] = None) -> Tuple[int, bytes]:
        with self._lock:
            self.requests.append(request)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        return self.status_code, self.body


@pytest.fixture
def token_auth() -> TokenAuth:
    """Create a token auth strategy with test credentials."""
    return TokenAuth("pam", "root", "ci", "00000000-1111-2222-3333-444444444444")


@pytest.fixture
def login_auth() -> LoginAuth:
    """Create a login auth strategy with test credentials."""
    return LoginAuth("pam", "root", "secret")


@pytest.fixture
def client(token_auth: TokenAuth):
    """Create a token-authenticated client on a real HTTPTransport.

    Requests are intercepted by pytest-httpx in tests that use httpx_mock.
    """
    with ProxmoxClient(BASE_URL, token_auth) as pve:
        yield pve


@pytest.fixture
def httpx_mock_with_data(httpx_mock: HTTPXMock) -> HTTPXMock:
    """Configure HTTPXMock with the common read-only API responses.

    Args:
        httpx_mock: pytest-httpx mock fixture

    Returns:
        Configured HTTPXMock instance
    """
    httpx_mock.add_response(url=f"{API_URL}/version", json=MOCK_VERSION)
    httpx_mock.add_response(url=f"{API_URL}/nodes", json=MOCK_NODE_LIST)
    return httpx_mock


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration between tests."""
    import logging

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(logging.WARNING)

    yield

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
