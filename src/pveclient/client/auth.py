"""Authentication strategies for the Proxmox VE API.

PVE accepts two schemes with different state lifecycles:

- API tokens: stateless, a single ``Authorization`` header per request.
- Username/password: a ticket handshake against ``/access/ticket``, after
  which every request carries the ticket cookie and a CSRF token.

Both are exposed through the Auth interface so the client never branches
on the scheme in use.
"""

import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

import httpx

from pveclient.client.context import CallContext
from pveclient.client.exceptions import ConfigurationError, InvalidCredentials
from pveclient.client.models import TicketInfo

if TYPE_CHECKING:
    from pveclient.client.base import ProxmoxClient
    from pveclient.config import ProxmoxConfig


class Auth(ABC):
    """Capability set every authentication scheme provides."""

    @abstractmethod
    def handshake(
        self, client: "ProxmoxClient", ctx: Optional[CallContext] = None
    ) -> None:
        """Obtain credentials from the server, if the scheme needs any.

        Args:
            client: Client used for the round trip (not owned by the strategy)
            ctx: Call context for cancellation
        """

    @abstractmethod
    def contribute_headers(self, headers: httpx.Headers) -> httpx.Headers:
        """Add or overwrite auth headers on an outgoing request.

        Args:
            headers: Headers built so far for the request

        Returns:
            The same headers object, updated
        """


class TokenAuth(Auth):
    """API token authentication.

    Immutable after construction, so one instance can be shared by any
    number of threads.
    """

    def __init__(self, realm: str, username: str, token_id: str, token_secret: str):
        if not (realm and username and token_id and token_secret):
            raise InvalidCredentials(
                "realm, username, token_id, and token_secret are required"
            )

        self._realm = realm
        self._username = username
        self._token_id = token_id
        self._token_secret = token_secret

    def __repr__(self) -> str:
        return f"TokenAuth({self._username}@{self._realm}!{self._token_id})"

    @property
    def header_value(self) -> str:
        return (
            f"PVEAPIToken={self._username}@{self._realm}"
            f"!{self._token_id}={self._token_secret}"
        )

    def handshake(
        self, client: "ProxmoxClient", ctx: Optional[CallContext] = None
    ) -> None:
        # Tokens need no round trip.
        return None

    def contribute_headers(self, headers: httpx.Headers) -> httpx.Headers:
        headers["Authorization"] = self.header_value
        return headers


class LoginAuth(Auth):
    """Ticket-based authentication with username and password.

    The ticket is fetched once and reused for the lifetime of the instance.
    Concurrent handshakes are serialized: only the first one talks to the
    server, the others wait and then see the same ticket.

    Before a successful handshake, contribute_headers() sends empty cookie
    and CSRF values; the server rejects such requests with 401.
    """

    def __init__(self, realm: str, username: str, password: str):
        if not (realm and username and password):
            raise InvalidCredentials("realm, username, and password are required")

        self._realm = realm
        self._username = username
        self._password = password
        self._ticket: Optional[TicketInfo] = None
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        state = "authenticated" if self.authenticated else "pending"
        return f"LoginAuth({self._username}@{self._realm}, {state})"

    @property
    def authenticated(self) -> bool:
        return self._ticket is not None

    @property
    def ticket(self) -> Optional[TicketInfo]:
        """Ticket obtained by the handshake, if any."""
        return self._ticket

    def handshake(
        self, client: "ProxmoxClient", ctx: Optional[CallContext] = None
    ) -> None:
        """Issue a ticket request unless a ticket is already held.

        Errors from the client propagate unchanged and leave the strategy
        unauthenticated, so a later call retries the handshake.
        """
        if self._ticket is not None:
            return

        with self._lock:
            if self._ticket is not None:
                return
            self._ticket = client.issue_ticket(
                self._realm, self._username, self._password, ctx=ctx
            )

    def contribute_headers(self, headers: httpx.Headers) -> httpx.Headers:
        ticket = self._ticket
        cookie = ticket.ticket if ticket else ""
        csrf = ticket.csrf_prevention_token if ticket else ""

        headers["Cookie"] = f"PVEAuthCookie={cookie}"
        headers["CSRFPreventionToken"] = csrf
        return headers


def auth_from_config(config: "ProxmoxConfig") -> Auth:
    """Build the strategy selected by a resolved configuration.

    Args:
        config: Resolved configuration

    Returns:
        TokenAuth or LoginAuth

    Raises:
        InvalidCredentials: If the selected scheme is missing a field
        ConfigurationError: For an unknown auth method
    """
    if config.auth_method == "token":
        return TokenAuth(
            config.realm,
            config.username or "",
            config.token_id or "",
            config.token_secret or "",
        )
    if config.auth_method == "password":
        return LoginAuth(config.realm, config.username or "", config.password or "")

    raise ConfigurationError(f"Unknown auth method: {config.auth_method}")
