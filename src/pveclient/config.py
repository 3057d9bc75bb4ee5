"""Configuration management for the Proxmox VE client.

This module resolves connection settings from the process environment and
an optional ``.env`` file into a validated ProxmoxConfig. Only the CLI layer
calls load_config(); the client itself receives the resolved object.
"""

import logging
import os
from pathlib import Path
from typing import Literal, Mapping, Optional, Union

from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from pveclient.client.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "PROXMOX_"
TOKEN_PREFIX = "PVEAPIToken="
_TRUTHY = {"1", "true", "yes", "on"}


class ProxmoxConfig(BaseModel):
    """Resolved connection settings.

    Attributes:
        url: Base URL of the PVE API (e.g., https://pve.local:8006)
        auth_method: "token" or "password"
        realm: Authentication realm
        username: User name without realm
        token_id: API token id (token auth)
        token_secret: API token secret (token auth)
        password: Password (password auth)
        insecure_skip_tls: Skip TLS certificate verification
        timeout: Request timeout in seconds
    """

    url: str = Field(..., description="Proxmox VE base URL")
    auth_method: Literal["token", "password"] = Field("token", description="Auth method")
    realm: str = Field("pam", description="Authentication realm")
    username: Optional[str] = Field(None, description="User name")
    token_id: Optional[str] = Field(None, description="API token id")
    token_secret: Optional[str] = Field(None, description="API token secret")
    password: Optional[str] = Field(None, description="Password")
    insecure_skip_tls: bool = Field(False, description="Skip TLS verification")
    timeout: float = Field(30, ge=1, le=300, description="Request timeout in seconds")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensure URL doesn't end with trailing slash and uses http(s)."""
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v

    def __repr__(self) -> str:
        return (
            f"ProxmoxConfig(url={self.url!r}, auth_method={self.auth_method!r}, "
            f"realm={self.realm!r}, username={self.username!r}, "
            f"insecure_skip_tls={self.insecure_skip_tls})"
        )


def parse_api_token(token: str) -> dict:
    """Split a combined API token into its parts.

    Args:
        token: ``user@realm!tokenid=secret``, optionally prefixed with ``PVEAPIToken=``

    Returns:
        Dictionary with username, realm, token_id and token_secret

    Raises:
        ConfigurationError: If the token does not have the expected shape

    Examples:
        >>> parse_api_token("root@pam!ci=abc")["token_id"]
        'ci'
    """
    value = token.strip()
    if value.startswith(TOKEN_PREFIX):
        value = value[len(TOKEN_PREFIX):]

    identity, sep, secret = value.partition("=")
    user_realm, bang, token_id = identity.partition("!")
    username, at, realm = user_realm.rpartition("@")

    if not (sep and bang and at and secret and token_id and username and realm):
        raise ConfigurationError(
            "PROXMOX_API_TOKEN must look like user@realm!tokenid=secret"
        )

    return {
        "username": username,
        "realm": realm,
        "token_id": token_id,
        "token_secret": secret,
    }


def _read_env_file(env_file: Optional[Union[str, Path]]) -> Mapping[str, Optional[str]]:
    path = str(env_file) if env_file else find_dotenv(usecwd=True)

    if not path:
        logger.info("No .env file found, proceeding with system environment variables...")
        return {}

    if not Path(path).is_file():
        logger.warning(f"Could not load .env file: {path}")
        logger.info("Proceeding with system environment variables...")
        return {}

    logger.info(f"Loaded environment variables from {path}")
    return dotenv_values(path)


def load_config(
    env_file: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ProxmoxConfig:
    """Resolve configuration from the environment and a .env file.

    Values already present in the environment win over the .env file.

    Args:
        env_file: Explicit .env path; searched upwards from the cwd if None
        environ: Environment mapping; defaults to os.environ

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If PROXMOX_URL is missing or a value is invalid
    """
    values = {k: v for k, v in _read_env_file(env_file).items() if v is not None}
    values.update(os.environ if environ is None else environ)

    def get(name: str) -> Optional[str]:
        value = values.get(f"{ENV_PREFIX}{name}")
        return value if value else None

    url = get("URL")
    if url is None:
        raise ConfigurationError("PROXMOX_URL: environment variable is not set")

    data = {
        "url": url,
        "auth_method": (get("AUTH_METHOD") or "token").lower(),
        "realm": get("REALM") or "pam",
        "username": get("USERNAME"),
        "token_id": get("TOKEN_ID"),
        "token_secret": get("TOKEN_SECRET"),
        "password": get("PASSWORD"),
        "insecure_skip_tls": (get("INSECURE") or "").lower() in _TRUTHY,
    }

    api_token = get("API_TOKEN")
    if api_token:
        data.update(parse_api_token(api_token))

    timeout = get("TIMEOUT")
    if timeout is not None:
        data["timeout"] = timeout

    try:
        return ProxmoxConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
