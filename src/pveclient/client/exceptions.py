"""Custom exceptions for the Proxmox VE client.

This module defines a hierarchy of exceptions for different error conditions.
Every failure raised by the client carries enough context (status code,
field name, or the wrapped cause) to diagnose it without re-running the call.
"""

from typing import Any, Optional


class ProxmoxError(Exception):
    """Base exception for all Proxmox client errors.

    All custom exceptions in the package inherit from this base class,
    making it easy to catch all client-related errors if needed.
    """

    pass


class ConfigurationError(ProxmoxError):
    """Exception raised for configuration-related errors.

    This includes:
    - Missing required configuration values
    - Malformed base URLs
    - Configuration validation errors

    Exit code: 3
    """

    pass


class InvalidCredentials(ConfigurationError):
    """Exception raised when an auth strategy is built with missing fields.

    Raised at construction time, before any request is made.

    Exit code: 3
    """

    pass


class TransportError(ProxmoxError):
    """Exception raised for network-related errors.

    This includes:
    - Connection refused / DNS resolution failures
    - Connection timeouts
    - SSL/TLS errors
    - Failures while reading the response body

    A non-2xx status code is never a TransportError.
    """

    pass


class Cancelled(ProxmoxError):
    """Exception raised when a call's deadline passes or it is cancelled.

    Exit code: 130
    """

    pass


class UnexpectedStatus(ProxmoxError):
    """Exception raised when the API answers with anything other than 200.

    Attributes:
        status_code: HTTP status code returned by the server
        url: Request URL
        response_body: Response body, decoded leniently
    """

    def __init__(
        self,
        status_code: int,
        url: Optional[str] = None,
        response_body: Optional[str] = None,
    ):
        """Initialize status error.

        Args:
            status_code: HTTP status code
            url: Request URL
            response_body: Response body content
        """
        message = f"unexpected status code {status_code}"
        if url:
            message = f"{message} from {url}"
        super().__init__(message)
        self.status_code = status_code
        self.url = url
        self.response_body = response_body


class MalformedResponse(ProxmoxError):
    """Exception raised when a 200 response cannot be decoded.

    The underlying parse or validation error is chained as ``__cause__``.
    """

    pass


class MalformedField(MalformedResponse):
    """Exception raised when a tolerant field decoder sees an unknown shape.

    Attributes:
        field: Name of the field being decoded
        value: Raw JSON value that was rejected
    """

    def __init__(self, field: str, value: Any):
        """Initialize field error.

        Args:
            field: Field name
            value: Rejected raw value
        """
        super().__init__(f"field '{field}' has unsupported value {value!r}")
        self.field = field
        self.value = value
