"""Intel package: geo lookup and risk scoring."""

from .geo import GeoLookupError, get_geo_location, resolve_and_score
from .models import HIGH_RISK, LOW_RISK, MEDIUM_RISK, GeoLocation, RiskVerdict
from .risk import check_ip_security, is_in_ocean

__all__ = [
    "GeoLocation",
    "GeoLookupError",
    "HIGH_RISK",
    "LOW_RISK",
    "MEDIUM_RISK",
    "RiskVerdict",
    "check_ip_security",
    "get_geo_location",
    "is_in_ocean",
    "resolve_and_score",
]
