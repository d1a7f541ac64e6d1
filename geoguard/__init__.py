"""geoguard: geolocation-based risk scoring for login IP addresses."""

from .audit import LoginAudit, audit_login
from .intel import GeoLocation, RiskVerdict, check_ip_security, get_geo_location, resolve_and_score

__version__ = "0.1.0"

__all__ = [
    "GeoLocation",
    "LoginAudit",
    "RiskVerdict",
    "audit_login",
    "check_ip_security",
    "get_geo_location",
    "resolve_and_score",
]
