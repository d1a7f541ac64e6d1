"""Geo lookup and normalization for login IP intelligence."""

from __future__ import annotations

import logging
import os
from typing import Any

import requests

from ..net.ip_utils import is_local_or_private
from .models import GeoLocation, RiskVerdict
from .risk import check_ip_security

logger = logging.getLogger(__name__)

IPAPI_ENDPOINT = "https://ipapi.co/{ip}/json/"
DEFAULT_TIMEOUT_SECONDS = 5.0

ENDPOINT_ENV = "GEOGUARD_GEO_ENDPOINT"
TIMEOUT_ENV = "GEOGUARD_GEO_TIMEOUT"

LOCAL_LABEL = "Local"


class GeoLookupError(Exception):
    """The lookup service answered, but not with usable data."""


def _resolve_endpoint(endpoint: str | None) -> str:
    return endpoint or os.getenv(ENDPOINT_ENV) or IPAPI_ENDPOINT


def _resolve_timeout(timeout_seconds: float | None) -> float:
    if timeout_seconds is not None:
        return float(timeout_seconds)
    raw = os.getenv(TIMEOUT_ENV, "").strip()
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r", TIMEOUT_ENV, raw)
        return DEFAULT_TIMEOUT_SECONDS


def _text(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _coordinate(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _normalize_asn(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return f"AS{value}"
    text = _text(value)
    if text is None:
        return None
    token = text.split()[0]
    if token.isdigit():
        return f"AS{token}"
    if token[:2].upper() == "AS" and token[2:].isdigit():
        return f"AS{token[2:]}"
    return token


def _local_location() -> GeoLocation:
    return GeoLocation(
        country=LOCAL_LABEL,
        city=LOCAL_LABEL,
        region=LOCAL_LABEL,
        timezone=LOCAL_LABEL,
        isp=LOCAL_LABEL,
        org=LOCAL_LABEL,
        asn=LOCAL_LABEL,
    )


def _normalize_payload(data: dict[str, Any]) -> GeoLocation:
    org = _text(data.get("org"))
    return GeoLocation(
        country=_text(data.get("country_name")),
        country_code=_text(data.get("country_code")),
        city=_text(data.get("city")),
        region=_text(data.get("region")),
        timezone=_text(data.get("timezone")),
        isp=org,
        org=org,
        asn=_normalize_asn(data.get("asn")),
        latitude=_coordinate(data.get("latitude")),
        longitude=_coordinate(data.get("longitude")),
        postal=_text(data.get("postal")),
        currency=_text(data.get("currency")),
    )


def _fetch_geo_metadata(ip: str, endpoint: str, timeout_seconds: float) -> dict[str, Any]:
    response = requests.get(
        endpoint.format(ip=ip),
        headers={"Accept": "application/json"},
        timeout=timeout_seconds,
    )
    response.raise_for_status()
    data = response.json()
    if not isinstance(data, dict):
        raise GeoLookupError(f"unexpected payload type {type(data).__name__}")
    if data.get("error"):
        raise GeoLookupError(str(data.get("reason") or "lookup error"))
    return data


def get_geo_location(
    ip: str,
    *,
    timeout_seconds: float | None = None,
    endpoint: str | None = None,
) -> GeoLocation:
    """Resolve coarse location attributes for an IP address.

    Never raises: any transport, status or payload problem is logged and
    turned into ``GeoLocation.unavailable()``. Local and private addresses
    are answered without a network call.
    """
    address = (ip or "").strip()
    if not address:
        logger.warning("Geo lookup skipped: empty IP address")
        return GeoLocation.unavailable()

    if is_local_or_private(address):
        return _local_location()

    target = _resolve_endpoint(endpoint)
    timeout = _resolve_timeout(timeout_seconds)
    logger.debug("Geo lookup for %s via %s", address, target)
    try:
        metadata = _fetch_geo_metadata(address, target, timeout)
    except (requests.RequestException, ValueError, KeyError, IndexError, GeoLookupError) as exc:
        logger.warning("Geo lookup failed for %s: %s", address, exc)
        return GeoLocation.unavailable()
    return _normalize_payload(metadata)


def resolve_and_score(
    ip: str,
    *,
    timeout_seconds: float | None = None,
    endpoint: str | None = None,
) -> RiskVerdict:
    """Resolve ``ip`` and score the result. Always returns a verdict."""
    location = get_geo_location(ip, timeout_seconds=timeout_seconds, endpoint=endpoint)
    return check_ip_security(location)
