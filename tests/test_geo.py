import pytest
import requests

from geoguard.intel.geo import IPAPI_ENDPOINT, get_geo_location, resolve_and_score
from geoguard.intel.models import GeoLocation
from geoguard.intel.risk import LOCATION_UNAVAILABLE_REASON

from .conftest import FakeResponse

IPAPI_SAMPLE = {
    "ip": "8.8.8.8",
    "city": "Mountain View",
    "region": "California",
    "country_code": "US",
    "country_name": "United States",
    "postal": "94043",
    "latitude": 37.42301,
    "longitude": -122.083352,
    "timezone": "America/Los_Angeles",
    "currency": "USD",
    "asn": "AS15169",
    "org": "GOOGLE",
}


def test_payload_is_normalized(fake_geo_service) -> None:
    calls = fake_geo_service(FakeResponse(IPAPI_SAMPLE))

    location = get_geo_location("8.8.8.8")

    assert location == GeoLocation(
        country="United States",
        country_code="US",
        city="Mountain View",
        region="California",
        timezone="America/Los_Angeles",
        isp="GOOGLE",
        org="GOOGLE",
        asn="AS15169",
        latitude=37.42301,
        longitude=-122.083352,
        postal="94043",
        currency="USD",
    )
    assert calls[0]["url"] == IPAPI_ENDPOINT.format(ip="8.8.8.8")
    assert calls[0]["timeout"] == 5.0


def test_one_call_per_lookup_without_cache(fake_geo_service) -> None:
    calls = fake_geo_service(FakeResponse(IPAPI_SAMPLE))
    get_geo_location("8.8.8.8")
    get_geo_location("8.8.8.8")
    assert len(calls) == 2


def test_missing_fields_stay_none(fake_geo_service) -> None:
    fake_geo_service(FakeResponse({"ip": "1.1.1.1", "city": "", "latitude": "n/a"}))
    location = get_geo_location("1.1.1.1")
    assert location == GeoLocation()
    assert location.available is True


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(15169, "AS15169"), ("15169", "AS15169"), ("as15169", "AS15169"), ("AS15169 Google LLC", "AS15169")],
)
def test_asn_is_normalized(fake_geo_service, raw, expected: str) -> None:
    fake_geo_service(FakeResponse({"asn": raw}))
    assert get_geo_location("1.1.1.1").asn == expected


@pytest.mark.parametrize(
    "failure",
    [
        requests.ConnectionError("unreachable"),
        requests.Timeout("slow"),
    ],
)
def test_transport_errors_become_unavailable(fake_geo_service, failure: Exception) -> None:
    fake_geo_service(failure)
    assert get_geo_location("1.1.1.1") == GeoLocation.unavailable()


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse({"error": True, "reason": "RateLimited"}, status_code=429),
        FakeResponse({"error": True, "reason": "Invalid IP Address"}),
        FakeResponse(invalid_json=True),
        FakeResponse(["not", "an", "object"]),
    ],
)
def test_bad_answers_become_unavailable(fake_geo_service, response: FakeResponse) -> None:
    fake_geo_service(response)
    assert get_geo_location("1.1.1.1").available is False


def test_local_addresses_skip_the_network(fake_geo_service) -> None:
    calls = fake_geo_service(FakeResponse(IPAPI_SAMPLE))

    for address in ("127.0.0.1", "::1", "192.168.1.10", "localhost"):
        location = get_geo_location(address)
        assert location.country == "Local"
        assert location.latitude is None

    assert calls == []


def test_blank_ip_is_unavailable(fake_geo_service) -> None:
    calls = fake_geo_service(FakeResponse(IPAPI_SAMPLE))
    assert get_geo_location("  ").available is False
    assert calls == []


def test_endpoint_and_timeout_from_environment(fake_geo_service, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = fake_geo_service(FakeResponse(IPAPI_SAMPLE))
    monkeypatch.setenv("GEOGUARD_GEO_ENDPOINT", "https://geo.example.test/{ip}")
    monkeypatch.setenv("GEOGUARD_GEO_TIMEOUT", "1.5")

    get_geo_location("8.8.4.4")

    assert calls[0]["url"] == "https://geo.example.test/8.8.4.4"
    assert calls[0]["timeout"] == 1.5


def test_arguments_override_environment(fake_geo_service, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = fake_geo_service(FakeResponse(IPAPI_SAMPLE))
    monkeypatch.setenv("GEOGUARD_GEO_TIMEOUT", "9")

    get_geo_location("8.8.4.4", timeout_seconds=2, endpoint="https://other.test/{ip}/json")

    assert calls[0]["url"] == "https://other.test/8.8.4.4/json"
    assert calls[0]["timeout"] == 2.0


def test_resolve_and_score_for_cloud_ip(fake_geo_service) -> None:
    fake_geo_service(FakeResponse(IPAPI_SAMPLE))
    verdict = resolve_and_score("8.8.8.8")
    # Mountain View sits inside the west Pacific box as well.
    assert verdict.risk_level == "medium"
    assert verdict.reasons[0] == "Подозрительная организация: GOOGLE"
    assert "Подозрительный ASN: AS15169" in verdict.reasons


def test_resolve_and_score_when_service_is_down(fake_geo_service) -> None:
    fake_geo_service(requests.ConnectionError("unreachable"))
    verdict = resolve_and_score("1.1.1.1")
    assert verdict.is_suspicious is True
    assert verdict.risk_level == "high"
    assert verdict.reasons == [LOCATION_UNAVAILABLE_REASON]


def test_resolve_and_score_for_localhost_is_low(fake_geo_service) -> None:
    fake_geo_service(requests.ConnectionError("must not be called"))
    assert resolve_and_score("127.0.0.1").risk_level == "low"
