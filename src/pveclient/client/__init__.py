"""Proxmox VE API client package.

This package provides the HTTP client for interacting with the Proxmox VE API,
including authentication strategies, models, exceptions, and the transport.
"""

# ProxmoxClient imports pveclient.config, which imports these exceptions;
# import it directly from pveclient.client.base to avoid a cycle.
from pveclient.client.auth import Auth, LoginAuth, TokenAuth, auth_from_config
from pveclient.client.context import CallContext
from pveclient.client.decoders import WearIndicator, decode_optional_int, decode_wear_indicator
from pveclient.client.exceptions import (
    Cancelled,
    ConfigurationError,
    InvalidCredentials,
    MalformedField,
    MalformedResponse,
    ProxmoxError,
    TransportError,
    UnexpectedStatus,
)
from pveclient.client.models import DiskInfo, NodeInfo, TicketInfo, VersionInfo
from pveclient.client.transport import HTTPTransport, Request, Transport

__all__ = [
    "Auth",
    "TokenAuth",
    "LoginAuth",
    "auth_from_config",
    "CallContext",
    "WearIndicator",
    "decode_optional_int",
    "decode_wear_indicator",
    "ProxmoxError",
    "ConfigurationError",
    "InvalidCredentials",
    "TransportError",
    "Cancelled",
    "UnexpectedStatus",
    "MalformedResponse",
    "MalformedField",
    "VersionInfo",
    "NodeInfo",
    "DiskInfo",
    "TicketInfo",
    "HTTPTransport",
    "Request",
    "Transport",
]
