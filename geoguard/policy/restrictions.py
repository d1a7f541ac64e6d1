"""Per-user login restrictions: IP allowlists and allowed countries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from ..net.ip_utils import ip_matches, is_loopback_or_localhost


@dataclass(slots=True)
class AccessPolicy:
    ip_restrictions_enabled: bool = False
    allowed_ips: list[str] = field(default_factory=list)
    geo_restrictions_enabled: bool = False
    allowed_countries: list[str] = field(default_factory=list)

    def check_ip(self, ip: str) -> bool:
        """Return ``True`` when ``ip`` passes the allowlist (exact or CIDR)."""
        if not self.ip_restrictions_enabled:
            return True
        return any(ip_matches(ip, rule) for rule in self.allowed_ips)

    def check_country(self, country: str | None) -> bool:
        if not self.geo_restrictions_enabled:
            return True
        return bool(country) and country in self.allowed_countries


def is_unrecognized_address(address: str, known_addresses: Iterable[str]) -> bool:
    """Return ``True`` for an address the user has not logged in from before.

    The first address a user ever presents is treated as recognized, and so
    is loopback.
    """
    known = {str(item) for item in known_addresses}
    if not known:
        return False
    if address in known:
        return False
    return not is_loopback_or_localhost(address)
