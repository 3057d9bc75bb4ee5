"""Pydantic models for Proxmox VE API responses.

This module contains type-safe models for the responses the client decodes.
Every PVE response wraps its payload in a ``{"data": ...}`` envelope.
"""

from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from pveclient.client.decoders import OptionalInt, Wearout

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Generic API response wrapper."""

    data: T = Field(..., description="Response payload")


class VersionInfo(BaseModel):
    """API version information."""

    model_config = ConfigDict(extra="allow")

    version: str = Field(..., description="Version string (e.g. 8.1)")
    release: Optional[str] = Field(None, description="Release string")
    repoid: Optional[str] = Field(None, description="Repository identifier")


class NodeInfo(BaseModel):
    """Cluster node as reported by the node index.

    Capacity and usage fields are missing for offline nodes, so all of
    them are optional.
    """

    model_config = ConfigDict(extra="allow")

    node: str = Field(..., description="Node name")
    status: str = Field(..., description="Node status (online, offline, unknown)")
    type: Literal["node"] = Field("node", description="Resource type, always 'node'")
    id: Optional[str] = Field(None, description="Resource identifier (node/<name>)")
    cpu: Optional[float] = Field(None, description="CPU utilization (0..1)")
    maxcpu: Optional[int] = Field(None, description="Number of CPUs")
    mem: Optional[int] = Field(None, description="Used memory in bytes")
    maxmem: Optional[int] = Field(None, description="Total memory in bytes")
    disk: Optional[int] = Field(None, description="Used root disk space in bytes")
    maxdisk: Optional[int] = Field(None, description="Root disk size in bytes")
    uptime: Optional[int] = Field(None, description="Uptime in seconds")
    level: Optional[str] = Field(None, description="Support subscription level")
    ssl_fingerprint: Optional[str] = Field(None, description="TLS certificate fingerprint")


class DiskInfo(BaseModel):
    """Physical disk attached to a node.

    ``osdid`` and ``wearout`` go through the tolerant decoders because
    their JSON encoding differs between PVE versions.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    devpath: str = Field(..., description="Device path (e.g. /dev/sda)")
    size: Optional[int] = Field(None, description="Disk size in bytes")
    serial: Optional[str] = Field(None, description="Serial number")
    model: Optional[str] = Field(None, description="Model name")
    vendor: Optional[str] = Field(None, description="Vendor name")
    health: Optional[str] = Field(None, description="SMART health (PASSED, OK, ...)")
    type: Optional[str] = Field(None, description="Disk type (hdd, ssd, nvme, usb, unknown)")
    wwn: Optional[str] = Field(None, description="World wide name")
    used: Optional[str] = Field(None, description="What the disk is used for")
    gpt: Optional[bool] = Field(None, description="Disk has a GPT partition table")
    rpm: Optional[int] = Field(None, description="Rotational speed")
    by_id_link: Optional[str] = Field(None, description="/dev/disk/by-id link")
    osdid_list: Optional[List[int]] = Field(
        None, alias="osdid-list", description="Ceph OSD ids on this disk"
    )
    osdid: Optional[OptionalInt] = Field(None, description="Ceph OSD id, -1 when not an OSD")
    wearout: Optional[Wearout] = Field(None, description="SSD wear-out percentage")


class TicketInfo(BaseModel):
    """Session ticket issued by the access/ticket endpoint."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    ticket: str = Field(..., description="Session ticket (PVEAuthCookie value)")
    csrf_prevention_token: str = Field(
        ..., alias="CSRFPreventionToken", description="Anti-forgery token"
    )
    username: str = Field(..., description="Authenticated user (user@realm)")
    cap: Dict[str, Any] = Field(default_factory=dict, description="Capability map")
