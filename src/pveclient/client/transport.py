"""HTTP transport for the Proxmox VE client.

The transport executes one fully-formed request and hands back the status
code and the raw body. It never looks at the payload; status handling and
decoding belong to the client.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Tuple

import httpx

from pveclient.client.context import CallContext
from pveclient.client.exceptions import Cancelled, TransportError

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Request:
    """A fully-formed HTTP request.

    Attributes:
        method: HTTP method (GET, POST)
        url: Absolute request URL
        headers: Headers to send, already including auth headers
        content: Encoded request body, if any
    """

    method: str
    url: str
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: Optional[bytes] = None


class Transport(Protocol):
    """Anything able to execute a Request."""

    def execute(
        self, request: Request, ctx: Optional[CallContext] = None
    ) -> Tuple[int, bytes]:
        ...


class HTTPTransport:
    """httpx-backed transport sharing one connection pool.

    The underlying ``httpx.Client`` is safe for concurrent use, so a single
    HTTPTransport can serve every thread talking to the same server.

    Attributes:
        verify_ssl: Whether server certificates are validated
        timeout: Default per-request timeout in seconds
    """

    def __init__(
        self,
        insecure_skip_tls: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize transport.

        Args:
            insecure_skip_tls: Accept any server certificate (self-signed homelab setups)
            timeout: Default request timeout in seconds
        """
        self.verify_ssl = not insecure_skip_tls
        self.timeout = timeout
        self._client = httpx.Client(verify=self.verify_ssl, timeout=timeout)
        self._executor = ThreadPoolExecutor(thread_name_prefix="pveclient-transport")

    def __enter__(self) -> "HTTPTransport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Release pooled connections and worker threads."""
        self._executor.shutdown(wait=False)
        self._client.close()

    def _timeout_for(self, ctx: CallContext) -> float:
        remaining = ctx.remaining()
        if remaining is None:
            return self.timeout
        return min(self.timeout, remaining)

    def _fetch(self, request: Request, ctx: CallContext) -> Tuple[int, bytes]:
        """Send the request and drain the body; runs on a worker thread."""
        with self._client.stream(
            request.method,
            request.url,
            headers=request.headers,
            content=request.content,
            timeout=self._timeout_for(ctx),
        ) as response:
            # Runs immediately when the caller already gave up on this call
            unregister = ctx.on_cancel(response.close)
            try:
                chunks: List[bytes] = []
                for chunk in response.iter_bytes():
                    ctx.raise_if_cancelled()
                    chunks.append(chunk)
            finally:
                unregister()
            return response.status_code, b"".join(chunks)

    def execute(
        self, request: Request, ctx: Optional[CallContext] = None
    ) -> Tuple[int, bytes]:
        """Execute a request and return its status code and body.

        The exchange runs on a worker thread while the caller waits for
        either its completion or the context firing. A deadline arms a timer
        that cancels the context, so connect, the wait for headers and the
        body read are all bounded by it. An abandoned exchange is closed as
        soon as its response arrives.

        Args:
            request: Request to send
            ctx: Call context carrying deadline and cancel signal

        Returns:
            Tuple of (status_code, body)

        Raises:
            Cancelled: If the context fired before or during the call
            TransportError: For connection, timeout and read failures
        """
        ctx = ctx or CallContext.background()
        ctx.raise_if_cancelled()

        wake = threading.Event()
        future = self._executor.submit(self._fetch, request, ctx)
        future.add_done_callback(lambda _: wake.set())
        unregister = ctx.on_cancel(wake.set)

        timer = None
        remaining = ctx.remaining()
        if remaining is not None:
            timer = threading.Timer(remaining, ctx.cancel)
            timer.daemon = True
            timer.start()

        try:
            wake.wait()
        finally:
            unregister()
            if timer is not None:
                timer.cancel()

        if not future.done():
            reason = "deadline exceeded" if ctx.expired else "cancelled"
            raise Cancelled(f"{request.method} {request.url}: {reason}")

        try:
            return future.result()

        except httpx.TimeoutException as e:
            if ctx.cancelled:
                raise Cancelled(f"{request.method} {request.url}: deadline exceeded") from e
            raise TransportError(
                f"Request timed out: {request.method} {request.url}: {e}"
            ) from e

        except (httpx.HTTPError, httpx.StreamError) as e:
            if ctx.cancelled:
                raise Cancelled(f"{request.method} {request.url}: cancelled") from e
            raise TransportError(
                f"Request failed: {request.method} {request.url}: {e}"
            ) from e
