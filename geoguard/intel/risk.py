"""Risk scoring helpers for login IP intelligence."""

from __future__ import annotations

from .models import HIGH_RISK, LOW_RISK, MEDIUM_RISK, RISK_LEVELS, GeoLocation, RiskVerdict

HIGH_RISK_COUNTRIES = (
    "North Korea",
    "Iran",
    "Syria",
    "Cuba",
    "Sudan",
)

CLOUD_PROVIDER_KEYWORDS = (
    "amazon",
    "aws",
    "google",
    "microsoft",
    "azure",
    "digitalocean",
    "linode",
    "vultr",
    "ovh",
    "hetzner",
    "alibaba",
    "tencent",
)

VPN_PROVIDER_KEYWORDS = (
    "nordvpn",
    "expressvpn",
    "cyberghost",
    "protonvpn",
    "surfshark",
    "private internet access",
    "ipvanish",
)

PROXY_KEYWORDS = (
    "proxy",
    "proxies",
    "vpn",
    "tor",
    "tunnel",
    "gateway",
)

HOSTING_KEYWORDS = (
    "hosting",
    "server",
    "datacenter",
    "colo",
    "rack",
    "cloud",
)

SUSPICIOUS_ORG_KEYWORDS = (
    CLOUD_PROVIDER_KEYWORDS + VPN_PROVIDER_KEYWORDS + PROXY_KEYWORDS + HOSTING_KEYWORDS
)

SUSPICIOUS_ASNS = (
    "AS16509",  # Amazon
    "AS15169",  # Google
    "AS8075",  # Microsoft
    "AS14061",  # DigitalOcean
    "AS63949",  # Linode
    "AS20473",  # Choopa (Vultr)
    "AS16276",  # OVH
    "AS24940",  # Hetzner
    "AS37963",  # Alibaba
    "AS45090",  # Tencent
)

# (min_lat, max_lat, min_lon, max_lon), inclusive
OCEAN_REGIONS = (
    (-60.0, 60.0, -180.0, -120.0),  # Pacific, west
    (-60.0, 60.0, 120.0, 180.0),  # Pacific, east
    (-60.0, 60.0, -60.0, 20.0),  # Atlantic
    (-60.0, 0.0, 20.0, 120.0),  # Indian
)

LOCATION_UNAVAILABLE_REASON = "Не удалось получить информацию о местоположении"
OCEAN_REASON = "IP расположен в океане (возможно дата-центр)"


def is_in_ocean(latitude: float, longitude: float) -> bool:
    """Return True when a coordinate falls inside one of the ocean boxes.

    The boxes are very coarse; landmasses such as West Africa and Brazil are
    partly covered by them.
    """
    return any(
        min_lat <= latitude <= max_lat and min_lon <= longitude <= max_lon
        for min_lat, max_lat, min_lon, max_lon in OCEAN_REGIONS
    )


def _escalate(current: str, target: str) -> str:
    if RISK_LEVELS.index(target) > RISK_LEVELS.index(current):
        return target
    return current


def _first_suspicious_keyword(org: str) -> str | None:
    lowered = org.lower()
    return next((keyword for keyword in SUSPICIOUS_ORG_KEYWORDS if keyword in lowered), None)


def check_ip_security(location: GeoLocation | None) -> RiskVerdict:
    """Classify a resolved location into a risk verdict.

    Rules run in a fixed order and the level only ever goes up. A missing or
    unavailable location short-circuits to ``high``.
    """
    if location is None or not location.available:
        return RiskVerdict(
            is_suspicious=True,
            reasons=[LOCATION_UNAVAILABLE_REASON],
            risk_level=HIGH_RISK,
        )

    reasons: list[str] = []
    risk_level = LOW_RISK

    if location.country and location.country in HIGH_RISK_COUNTRIES:
        reasons.append(f"IP из страны с высоким риском: {location.country}")
        risk_level = HIGH_RISK

    if location.org and _first_suspicious_keyword(location.org) is not None:
        reasons.append(f"Подозрительная организация: {location.org}")
        risk_level = _escalate(risk_level, MEDIUM_RISK)

    if location.asn and location.asn in SUSPICIOUS_ASNS:
        reasons.append(f"Подозрительный ASN: {location.asn}")
        risk_level = _escalate(risk_level, MEDIUM_RISK)

    if location.latitude is not None and location.longitude is not None:
        if is_in_ocean(location.latitude, location.longitude):
            reasons.append(OCEAN_REASON)
            risk_level = _escalate(risk_level, MEDIUM_RISK)

    return RiskVerdict(
        is_suspicious=bool(reasons),
        reasons=reasons,
        risk_level=risk_level,
    )
