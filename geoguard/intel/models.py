"""Value types shared by the resolver and the risk scorer."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

LOW_RISK = "low"
MEDIUM_RISK = "medium"
HIGH_RISK = "high"

RISK_LEVELS = (LOW_RISK, MEDIUM_RISK, HIGH_RISK)


@dataclass(slots=True)
class GeoLocation:
    """Coarse attributes resolved for one IP address.

    Every attribute may be ``None``. ``available`` is ``False`` only when the
    lookup itself failed, which is different from a lookup that succeeded but
    returned no fields.
    """

    country: str | None = None
    country_code: str | None = None
    city: str | None = None
    region: str | None = None
    timezone: str | None = None
    isp: str | None = None
    org: str | None = None
    asn: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    postal: str | None = None
    currency: str | None = None
    available: bool = True

    @classmethod
    def unavailable(cls) -> GeoLocation:
        return cls(available=False)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class RiskVerdict:
    is_suspicious: bool = False
    reasons: list[str] = field(default_factory=list)
    risk_level: str = LOW_RISK

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_suspicious": self.is_suspicious,
            "reasons": list(self.reasons),
            "risk_level": self.risk_level,
        }
