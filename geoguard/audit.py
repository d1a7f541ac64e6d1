"""Login audit: the path a login request takes through geoguard."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any, Callable, Mapping

from .export.activity import DEFAULT_RETENTION_DAYS, log_activity
from .intel.geo import get_geo_location
from .intel.models import GeoLocation, RiskVerdict
from .intel.risk import check_ip_security
from .net.ip_utils import client_ip_from_headers
from .policy.restrictions import AccessPolicy, is_unrecognized_address
from .storage.sessions import known_addresses, record_session

logger = logging.getLogger(__name__)

UNKNOWN_DEVICE = "Unknown"


@dataclass(slots=True)
class LoginAudit:
    address: str
    device_info: str
    location: GeoLocation
    verdict: RiskVerdict
    ip_allowed: bool = True
    country_allowed: bool = True
    new_address: bool = False

    @property
    def blocked(self) -> bool:
        return not (self.ip_allowed and self.country_allowed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "device_info": self.device_info,
            "location": self.location.to_dict(),
            "verdict": self.verdict.to_dict(),
            "ip_allowed": self.ip_allowed,
            "country_allowed": self.country_allowed,
            "new_address": self.new_address,
            "blocked": self.blocked,
        }


def _device_info(headers: Mapping[str, str]) -> str:
    for key, value in headers.items():
        if str(key).lower() == "user-agent" and str(value or "").strip():
            return str(value).strip()
    return UNKNOWN_DEVICE


def audit_login(
    user_id: str,
    headers: Mapping[str, str],
    *,
    remote_addr: str | None = None,
    policy: AccessPolicy | None = None,
    record: bool = True,
    db_path: str | Path | None = None,
    activity_log: str | Path | None = None,
    retention_days: int | None = DEFAULT_RETENTION_DAYS,
    resolver: Callable[[str], GeoLocation] = get_geo_location,
) -> LoginAudit:
    """Evaluate a login attempt for ``user_id``.

    The risk verdict is informational; only ``policy`` restrictions mark the
    attempt as blocked. Session history is always read to flag new
    addresses. With ``record`` the attempt is written to the activity log
    (``login``, ``suspicious_login``, ``login_blocked``) and, unless blocked,
    to the session store.
    """
    address = client_ip_from_headers(headers, remote_addr)
    device_info = _device_info(headers)
    location = resolver(address)
    verdict = check_ip_security(location)

    active_policy = policy or AccessPolicy()
    audit = LoginAudit(
        address=address,
        device_info=device_info,
        location=location,
        verdict=verdict,
        ip_allowed=active_policy.check_ip(address),
        country_allowed=active_policy.check_country(location.country),
        new_address=is_unrecognized_address(address, known_addresses(user_id, db_path=db_path)),
    )

    def _log(event: str, details: dict[str, Any]) -> None:
        if record:
            log_activity(
                event,
                address,
                device_info,
                location,
                details,
                user_id=user_id,
                path=activity_log,
                retention_days=retention_days,
            )

    if audit.blocked:
        logger.info(
            "Login for %s from %s blocked (ip_allowed=%s, country_allowed=%s)",
            user_id,
            address,
            audit.ip_allowed,
            audit.country_allowed,
        )
        _log("login_blocked", {"ip_allowed": audit.ip_allowed, "country_allowed": audit.country_allowed})
        return audit

    _log("login", {"risk_level": verdict.risk_level, "new_address": audit.new_address})
    if verdict.is_suspicious:
        logger.info("Suspicious login for %s from %s: %s", user_id, address, "; ".join(verdict.reasons))
        _log("suspicious_login", {"risk_level": verdict.risk_level, "reasons": list(verdict.reasons)})

    if record:
        record_session(user_id, address, device_info, location, verdict, db_path=db_path)
    return audit
