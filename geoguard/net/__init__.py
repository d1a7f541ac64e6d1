"""Network address helpers."""

from .ip_utils import (
    client_ip_from_headers,
    ip_matches,
    is_local_or_private,
    is_loopback_or_localhost,
    to_ip_address,
)

__all__ = [
    "client_ip_from_headers",
    "ip_matches",
    "is_local_or_private",
    "is_loopback_or_localhost",
    "to_ip_address",
]
