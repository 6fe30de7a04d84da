"""Local host address lookups."""

from __future__ import annotations

import ipaddress
import socket
from typing import Optional, Union

import psutil

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def get_local_outbound_address() -> Optional[IPAddress]:
    """Return the local address used for outbound traffic, or None."""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    except OSError:
        return None
    try:
        sock.connect(("8.8.8.8", 80))
        address = sock.getsockname()[0]
    except OSError:
        return None
    finally:
        sock.close()
    try:
        return ipaddress.ip_address(address)
    except ValueError:
        return None


def _address_text(address: str, netmask: Optional[str]) -> str:
    if not netmask:
        return address
    try:
        return ipaddress.ip_interface(f"{address}/{netmask}").with_prefixlen
    except ValueError:
        return address


def get_mac_address(ip: str) -> str:
    """Return the hardware address of the interface holding ``ip``, or ""."""
    try:
        interfaces = psutil.net_if_addrs()
    except (OSError, psutil.Error):
        return ""
    for addresses in interfaces.values():
        mac = next((a.address for a in addresses if a.family == psutil.AF_LINK), "")
        for addr in addresses:
            if addr.family == psutil.AF_LINK:
                continue
            if ip in _address_text(addr.address, addr.netmask):
                return mac.replace("-", ":").lower()
    return ""