"""
Client address helpers: privacy hashing, private range detection and
proxy-aware client IP extraction.
"""

from __future__ import annotations

import hashlib
import ipaddress
from typing import Mapping, Optional

# Headers checked in order before X-Forwarded-For
CLIENT_IP_HEADERS = ("cf-connecting-ip", "true-client-ip", "x-real-ip")


def hash_ip(ip: str, salt: Optional[str] = None) -> str:
    """Hash an address for storage.

    SHA-256 over ``ip + salt``, truncated to 32 hex characters. The same address
    always yields the same hash for a given salt, so unique visitors can be
    counted without keeping the address itself.

    Args:
        ip: Client address
        salt: Server-side salt, defaults to the configured ``IP_HASH_SALT``

    Returns:
        32-character hex digest
    """
    if salt is None:
        from fauxdash.server.core.config import settings

        salt = settings.geoip.ip_hash_salt
    return hashlib.sha256(f"{ip}{salt}".encode("utf-8")).hexdigest()[:32]


def is_private_ip(ip: str) -> bool:
    """Whether an address must not be sent to a geolocation provider.

    Private, loopback, link-local, reserved and unspecified addresses count as
    private, as do ``localhost`` and anything that does not parse as an address.
    """
    if not ip:
        return True
    candidate = ip.strip()
    if candidate.lower() == "localhost":
        return True
    try:
        address = ipaddress.ip_address(candidate.split("%", 1)[0])
    except ValueError:
        return True
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        address = address.ipv4_mapped
    return (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_reserved
        or address.is_unspecified
        or address.is_multicast
    )


def get_client_ip(headers: Mapping[str, str], fallback: Optional[str] = None) -> str:
    """Pick the visitor address from proxy headers.

    Precedence: CF-Connecting-IP, True-Client-IP, X-Real-IP (each only when
    public), then the first public entry of X-Forwarded-For, or its first entry
    when every hop is private. Falls back to ``fallback`` or ``0.0.0.0``.

    Args:
        headers: Request headers (case-insensitive mapping, or lower-cased keys)
        fallback: Address of the direct peer

    Returns:
        Best guess at the client address
    """
    for name in CLIENT_IP_HEADERS:
        value = (headers.get(name) or "").strip()
        if value and not is_private_ip(value):
            return value

    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        hops = [hop.strip() for hop in forwarded_for.split(",")]
        for hop in hops:
            if hop and not is_private_ip(hop):
                return hop
        if hops[0]:
            return hops[0]

    return fallback or "0.0.0.0"
