"""IP helpers for client address extraction and classification."""

from __future__ import annotations

import ipaddress
from typing import Mapping

DEFAULT_CLIENT_IP = "::1"


def to_ip_address(value: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    """Convert a host value to an ``ipaddress`` object when possible."""
    if not value:
        return None

    host = value.strip().lower()
    if host == "localhost":
        return ipaddress.ip_address("127.0.0.1")

    try:
        return ipaddress.ip_address(host)
    except ValueError:
        return None


def is_loopback_or_localhost(value: str) -> bool:
    """Return ``True`` when ``value`` points to loopback localhost space."""
    ip_obj = to_ip_address(value)
    return bool(ip_obj and ip_obj.is_loopback)


def is_local_or_private(value: str) -> bool:
    """Return ``True`` for loopback, private, link-local and reserved addresses."""
    ip_obj = to_ip_address(value)
    if ip_obj is None:
        return False
    return ip_obj.is_loopback or ip_obj.is_private or ip_obj.is_link_local or ip_obj.is_reserved


def _header(headers: Mapping[str, str], name: str) -> str:
    wanted = name.lower()
    for key, value in headers.items():
        if str(key).lower() == wanted:
            return str(value or "").strip()
    return ""


def client_ip_from_headers(headers: Mapping[str, str], remote_addr: str | None = None) -> str:
    """Pick the client address the way a reverse-proxied app sees it.

    ``X-Forwarded-For`` wins (its first hop), then ``X-Real-IP``, then the
    socket peer address, then ``::1``.
    """
    forwarded_for = _header(headers, "X-Forwarded-For")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = _header(headers, "X-Real-IP")
    if real_ip:
        return real_ip

    if remote_addr and remote_addr.strip():
        return remote_addr.strip()
    return DEFAULT_CLIENT_IP


def ip_matches(ip: str, rule: str) -> bool:
    """Return ``True`` when ``ip`` equals ``rule`` or sits inside a CIDR ``rule``."""
    candidate = (ip or "").strip()
    pattern = (rule or "").strip()
    if not candidate or not pattern:
        return False
    if candidate == pattern:
        return True

    ip_obj = to_ip_address(candidate)
    if ip_obj is None:
        return False

    if "/" not in pattern:
        return ip_obj == to_ip_address(pattern)

    try:
        network = ipaddress.ip_network(pattern, strict=False)
    except ValueError:
        return False
    return network.version == ip_obj.version and ip_obj in network
