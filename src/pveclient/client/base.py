"""Base Proxmox VE API client.

This module provides the client that binds a transport and an
authentication strategy to a base URL and exposes typed operations.
Every operation follows the same protocol: build the URL, build headers
and let the strategy sign them, execute, insist on status 200, decode the
``{"data": ...}`` envelope.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar
from urllib.parse import quote, urlencode

import httpx
from pydantic import ValidationError

from pveclient.client.auth import Auth, auth_from_config
from pveclient.client.context import CallContext
from pveclient.client.exceptions import (
    ConfigurationError,
    MalformedResponse,
    UnexpectedStatus,
)
from pveclient.client.models import DiskInfo, Envelope, NodeInfo, TicketInfo, VersionInfo
from pveclient.client.transport import DEFAULT_TIMEOUT, HTTPTransport, Request, Transport
from pveclient.config import ProxmoxConfig

T = TypeVar("T")

API_PREFIX = "/api2/json"
STATUS_OK = 200


def _validate_base_url(base_url: str) -> str:
    """Check a base URL once and normalize it (no trailing slash)."""
    try:
        url = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError) as e:
        raise ConfigurationError(f"Invalid base URL {base_url!r}: {e}") from e

    if url.scheme not in ("http", "https"):
        raise ConfigurationError(
            f"Invalid base URL {base_url!r}: must start with http:// or https://"
        )
    if not url.host:
        raise ConfigurationError(f"Invalid base URL {base_url!r}: missing host")
    if url.query or url.fragment:
        raise ConfigurationError(
            f"Invalid base URL {base_url!r}: query and fragment are not allowed"
        )

    return str(url).rstrip("/")


class ProxmoxClient:
    """Client for the Proxmox VE API.

    The client performs no network I/O at construction. Authentication is
    lazy: each protected operation first runs the strategy's handshake,
    which is a no-op for tokens and happens once for ticket logins.
    Call authenticate() to do it up front instead.

    Attributes:
        base_url: Validated base URL without trailing slash
        auth: Authentication strategy
        transport: Transport executing the requests
    """

    def __init__(
        self,
        base_url: str,
        auth: Auth,
        transport: Optional[Transport] = None,
        *,
        insecure_skip_tls: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the client.

        Args:
            base_url: Server URL, e.g. https://pve.local:8006
            auth: Authentication strategy
            transport: Transport to use; an HTTPTransport is created if omitted
            insecure_skip_tls: Skip certificate verification for the created transport
            timeout: Request timeout for the created transport

        Raises:
            ConfigurationError: If the base URL is malformed
        """
        self.base_url = _validate_base_url(base_url)
        self.auth = auth
        self._owns_transport = transport is None
        self.transport: Transport = transport or HTTPTransport(
            insecure_skip_tls=insecure_skip_tls, timeout=timeout
        )

    @classmethod
    def from_config(
        cls, config: ProxmoxConfig, transport: Optional[Transport] = None
    ) -> "ProxmoxClient":
        """Build a client from a resolved configuration.

        Args:
            config: Resolved configuration
            transport: Optional transport override

        Returns:
            Configured client
        """
        return cls(
            config.url,
            auth_from_config(config),
            transport,
            insecure_skip_tls=config.insecure_skip_tls,
            timeout=config.timeout,
        )

    def __enter__(self) -> "ProxmoxClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport and isinstance(self.transport, HTTPTransport):
            self.transport.close()

    def _build_url(self, path: str, **params: Any) -> str:
        """Build full API URL from a path template.

        Args:
            path: Path below /api2/json, e.g. '/nodes/{node}/disks/list'
            **params: Path parameters; each one is escaped as a single segment

        Returns:
            Full URL
        """
        for name, value in params.items():
            if value is None or str(value) == "":
                raise ValueError(f"{name} must not be empty")

        escaped = {name: quote(str(value), safe="") for name, value in params.items()}
        return f"{self.base_url}{API_PREFIX}/{path.lstrip('/').format(**escaped)}"

    def _call(
        self,
        method: str,
        path: str,
        ctx: Optional[CallContext] = None,
        *,
        form: Optional[Dict[str, str]] = None,
        authenticated: bool = True,
        **params: Any,
    ) -> bytes:
        """Execute one API call and return the body of a 200 response.

        Args:
            method: HTTP method
            path: Path template below /api2/json
            ctx: Call context for cancellation
            form: Form fields for a URL-encoded POST body
            authenticated: Whether to run the handshake and sign the request
            **params: Path parameters

        Returns:
            Raw response body

        Raises:
            UnexpectedStatus: For any status other than 200
            TransportError: For network errors
            Cancelled: If the context fired
        """
        url = self._build_url(path, **params)

        headers = httpx.Headers({"Accept": "application/json"})
        content = None
        if form is not None:
            headers["Content-Type"] = "application/x-www-form-urlencoded"
            content = urlencode(form).encode("utf-8")

        if authenticated:
            self.auth.handshake(self, ctx)
            headers = self.auth.contribute_headers(headers)

        status_code, body = self.transport.execute(
            Request(method=method, url=url, headers=headers, content=content), ctx
        )

        if status_code != STATUS_OK:
            raise UnexpectedStatus(
                status_code,
                url=url,
                response_body=body.decode("utf-8", errors="replace"),
            )

        return body

    def _decode(self, body: bytes, payload_type: Type[T], what: str) -> T:
        """Decode a ``{"data": ...}`` envelope.

        Raises:
            MalformedResponse: If the body is not the expected envelope
            MalformedField: If a tolerant field has an unknown shape
        """
        try:
            envelope = Envelope[payload_type].model_validate_json(body)  # type: ignore[valid-type]
        except ValidationError as e:
            raise MalformedResponse(f"Failed to decode {what} response: {e}") from e

        return envelope.data

    def authenticate(self, ctx: Optional[CallContext] = None) -> None:
        """Run the authentication handshake now rather than on first use."""
        self.auth.handshake(self, ctx)

    def version(self, ctx: Optional[CallContext] = None) -> VersionInfo:
        """Get API version information.

        Returns:
            Version information
        """
        body = self._call("GET", "/version", ctx)
        return self._decode(body, VersionInfo, "version")

    def list_nodes(self, ctx: Optional[CallContext] = None) -> List[NodeInfo]:
        """Get all cluster nodes.

        Returns:
            List of nodes
        """
        body = self._call("GET", "/nodes", ctx)
        return self._decode(body, List[NodeInfo], "node list")

    def list_disks(self, node: str, ctx: Optional[CallContext] = None) -> List[DiskInfo]:
        """Get physical disks of a node.

        Args:
            node: Node name; escaped as a single path segment

        Returns:
            List of disks
        """
        body = self._call("GET", "/nodes/{node}/disks/list", ctx, node=node)
        return self._decode(body, List[DiskInfo], "disk list")

    def issue_ticket(
        self,
        realm: str,
        username: str,
        password: str,
        ctx: Optional[CallContext] = None,
    ) -> TicketInfo:
        """Request a session ticket.

        This is the primitive LoginAuth's handshake uses, exposed for callers
        that want a raw ticket. The request itself is not signed.

        Args:
            realm: Authentication realm (pam, pve, ...)
            username: User name without realm
            password: Password

        Returns:
            Ticket information
        """
        body = self._call(
            "POST",
            "/access/ticket",
            ctx,
            form={"username": f"{username}@{realm}", "password": password},
            authenticated=False,
        )
        return self._decode(body, TicketInfo, "ticket")
