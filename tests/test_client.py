"""Tests for the Proxmox VE API client."""

from urllib.parse import parse_qs

import pytest
from pytest_httpx import HTTPXMock

from pveclient.client.base import ProxmoxClient
from pveclient.client.decoders import WearIndicator
from pveclient.client.exceptions import (
    ConfigurationError,
    MalformedField,
    MalformedResponse,
    UnexpectedStatus,
)
from pveclient.client.transport import HTTPTransport
from pveclient.config import ProxmoxConfig

from conftest import (
    API_URL,
    BASE_URL,
    MOCK_DISK_LIST,
    MOCK_NODE_LIST,
    MOCK_TICKET,
    MOCK_VERSION,
    FakeTransport,
)


class TestConstruction:
    """Client construction and URL handling."""

    def test_no_network_io(self, login_auth):
        """Building a client never talks to the server."""
        transport = FakeTransport(payload=MOCK_TICKET)

        ProxmoxClient(BASE_URL, login_auth, transport)

        assert transport.calls == 0
        assert login_auth.authenticated is False

    @pytest.mark.parametrize(
        "base_url",
        ["https://pve.local:8006", "https://pve.local:8006/", "https://pve.local:8006//"],
    )
    def test_url_building_no_double_slash(self, token_auth, base_url):
        """Trailing slashes on the base URL never produce '//'."""
        client = ProxmoxClient(base_url, token_auth, FakeTransport())

        assert client._build_url("/version") == f"{API_URL}/version"
        assert client._build_url("nodes") == f"{API_URL}/nodes"

    def test_url_building_keeps_base_path(self, token_auth):
        """A base URL behind a reverse-proxy path keeps that path."""
        client = ProxmoxClient("https://proxy.local/pve/", token_auth, FakeTransport())

        assert client._build_url("/version") == "https://proxy.local/pve/api2/json/version"

    def test_path_parameters_escaped(self, token_auth):
        """Node names are escaped as a single path segment."""
        client = ProxmoxClient(BASE_URL, token_auth, FakeTransport())

        url = client._build_url("/nodes/{node}/disks/list", node="pve 1/../x")

        assert url == f"{API_URL}/nodes/pve%201%2F..%2Fx/disks/list"

    def test_empty_path_parameter_rejected(self, token_auth):
        client = ProxmoxClient(BASE_URL, token_auth, FakeTransport())

        with pytest.raises(ValueError):
            client.list_disks("")

    @pytest.mark.parametrize(
        "base_url",
        ["pve.local:8006", "ftp://pve.local", "https://", "https://pve.local/?x=1", ""],
    )
    def test_invalid_base_url(self, token_auth, base_url):
        """Malformed base URLs are rejected at construction."""
        with pytest.raises(ConfigurationError):
            ProxmoxClient(base_url, token_auth, FakeTransport())

    def test_from_config(self):
        """Configuration selects auth and transport settings."""
        config = ProxmoxConfig(
            url=BASE_URL,
            username="root",
            token_id="ci",
            token_secret="abc",
            insecure_skip_tls=True,
            timeout=10,
        )

        with ProxmoxClient.from_config(config) as client:
            assert client.base_url == BASE_URL
            assert isinstance(client.transport, HTTPTransport)
            assert client.transport.verify_ssl is False
            assert client.transport.timeout == 10


class TestOperationsWithFakeTransport:
    """Decoding contracts against an in-memory transport."""

    def test_version(self, token_auth):
        """A version envelope decodes to VersionInfo."""
        transport = FakeTransport(payload=MOCK_VERSION)
        client = ProxmoxClient(BASE_URL, token_auth, transport)

        info = client.version()

        assert info.version == "8.1"
        assert info.repoid == "b46aac3b42da5d15"
        request = transport.requests[0]
        assert request.method == "GET"
        assert request.url == f"{API_URL}/version"
        assert request.headers["Authorization"] == token_auth.header_value

    def test_unexpected_status(self, token_auth):
        """Any non-200 status is an error carrying the code."""
        transport = FakeTransport(status_code=401, body=b'{"data":null}')
        client = ProxmoxClient(BASE_URL, token_auth, transport)

        with pytest.raises(UnexpectedStatus) as exc_info:
            client.version()

        assert exc_info.value.status_code == 401
        assert exc_info.value.url == f"{API_URL}/version"

    def test_list_nodes(self, token_auth):
        """Node listing decodes the data array."""
        client = ProxmoxClient(BASE_URL, token_auth, FakeTransport(payload=MOCK_NODE_LIST))

        nodes = client.list_nodes()

        assert len(nodes) == 1
        assert nodes[0].node == "pve1"
        assert nodes[0].type == "node"
        assert nodes[0].maxcpu == 16

    def test_node_with_wrong_type_is_malformed(self, token_auth):
        """An index entry whose type is not 'node' is rejected."""
        payload = {"data": [{"node": "pve1", "status": "online", "type": "qemu"}]}
        client = ProxmoxClient(BASE_URL, token_auth, FakeTransport(payload=payload))

        with pytest.raises(MalformedResponse):
            client.list_nodes()

    def test_list_disks(self, token_auth):
        """Disk listing applies the tolerant decoders."""
        transport = FakeTransport(payload=MOCK_DISK_LIST)
        client = ProxmoxClient(BASE_URL, token_auth, transport)

        disks = client.list_disks("pve1")

        assert transport.requests[0].url == f"{API_URL}/nodes/pve1/disks/list"
        nvme, hdd = disks
        assert nvme.osdid == -1
        assert nvme.wearout == WearIndicator(present=True, value=97)
        assert nvme.gpt is True
        assert hdd.osdid == 3
        assert hdd.osdid_list == [3]
        assert hdd.wearout.present is False

    def test_list_disks_malformed_field(self, token_auth):
        """A tolerant-field shape error surfaces as MalformedField."""
        payload = {"data": [{"devpath": "/dev/sda", "osdid": True}]}
        client = ProxmoxClient(BASE_URL, token_auth, FakeTransport(payload=payload))

        with pytest.raises(MalformedField) as exc_info:
            client.list_disks("pve1")

        assert exc_info.value.field == "osdid"

    @pytest.mark.parametrize(
        "body",
        [b"not json", b"{}", b'{"data": {"release": "8.1"}}', b'{"data": []}', b""],
    )
    def test_malformed_envelope(self, token_auth, body):
        """A 200 with an undecodable body is a failure, not a partial result."""
        client = ProxmoxClient(BASE_URL, token_auth, FakeTransport(body=body))

        with pytest.raises(MalformedResponse) as exc_info:
            client.version()

        assert exc_info.value.__cause__ is not None

    def test_issue_ticket(self, token_auth):
        """The ticket request is an unsigned form POST."""
        transport = FakeTransport(payload=MOCK_TICKET)
        client = ProxmoxClient(BASE_URL, token_auth, transport)

        ticket = client.issue_ticket("pam", "root", "p&ss=word")

        assert ticket.csrf_prevention_token == "65A1B2C3:csrftoken"
        assert ticket.cap == {"nodes": {"Sys.Audit": 1}}
        request = transport.requests[0]
        assert request.method == "POST"
        assert request.url == f"{API_URL}/access/ticket"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert "Authorization" not in request.headers
        assert parse_qs(request.content.decode()) == {
            "username": ["root@pam"],
            "password": ["p&ss=word"],
        }

    def test_lazy_login_handshake(self, login_auth):
        """LoginAuth logs in once, on the first protected call."""
        transport = FakeTransport(payload=MOCK_TICKET)
        client = ProxmoxClient(BASE_URL, login_auth, transport)

        client.authenticate()
        transport.body = FakeTransport(payload=MOCK_VERSION).body
        client.version()
        client.version()

        assert [r.url for r in transport.requests] == [
            f"{API_URL}/access/ticket",
            f"{API_URL}/version",
            f"{API_URL}/version",
        ]
        signed = transport.requests[1].headers
        assert signed["Cookie"] == "PVEAuthCookie=PVE:root@pam:65A1B2C3::signature"
        assert signed["CSRFPreventionToken"] == "65A1B2C3:csrftoken"


class TestOperationsOverHTTP:
    """End-to-end calls through HTTPTransport, intercepted by pytest-httpx."""

    def test_version(self, client, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=f"{API_URL}/version", json=MOCK_VERSION)

        assert client.version().version == "8.1"

        request = httpx_mock.get_request()
        assert request.headers["Authorization"] == client.auth.header_value
        assert request.headers["Accept"] == "application/json"

    def test_authentication_error(self, client, httpx_mock: HTTPXMock):
        """A 401 becomes UnexpectedStatus(401) with the body attached."""
        httpx_mock.add_response(
            url=f"{API_URL}/version",
            status_code=401,
            text="authentication failure",
        )

        with pytest.raises(UnexpectedStatus) as exc_info:
            client.version()

        assert exc_info.value.status_code == 401
        assert exc_info.value.response_body == "authentication failure"

    def test_server_error(self, client, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=f"{API_URL}/nodes", status_code=500, json={"data": None})

        with pytest.raises(UnexpectedStatus) as exc_info:
            client.list_nodes()

        assert exc_info.value.status_code == 500

    def test_read_only_calls(self, client, httpx_mock_with_data: HTTPXMock):
        """Version and node listing against the shared fixture data."""
        assert client.version().release == "8.1"
        assert [node.node for node in client.list_nodes()] == ["pve1"]

    def test_login_flow(self, login_auth, httpx_mock: HTTPXMock):
        """Password login followed by a signed request."""
        httpx_mock.add_response(url=f"{API_URL}/access/ticket", method="POST", json=MOCK_TICKET)
        httpx_mock.add_response(url=f"{API_URL}/nodes/pve1/disks/list", json=MOCK_DISK_LIST)

        with ProxmoxClient(BASE_URL, login_auth) as client:
            disks = client.list_disks("pve1")

        assert len(disks) == 2
        ticket_request, disks_request = httpx_mock.get_requests()
        assert ticket_request.method == "POST"
        assert disks_request.headers["Cookie"] == "PVEAuthCookie=PVE:root@pam:65A1B2C3::signature"
        assert disks_request.headers["CSRFPreventionToken"] == "65A1B2C3:csrftoken"
