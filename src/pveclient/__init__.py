"""Client library and CLI for the Proxmox VE management API."""

__version__ = "0.1.0"
