from __future__ import annotations

from typing import Any

import pytest
import requests


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, invalid_json: bool = False) -> None:
        self._payload = payload
        self.status_code = status_code
        self._invalid_json = invalid_json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self) -> Any:
        if self._invalid_json:
            raise requests.JSONDecodeError("Expecting value", "<html>", 0)
        return self._payload


@pytest.fixture
def fake_geo_service(monkeypatch: pytest.MonkeyPatch):
    """Route ``requests.get`` in the resolver to a canned response and record calls."""
    calls: list[dict[str, Any]] = []

    def _install(response: FakeResponse | Exception) -> list[dict[str, Any]]:
        def _fake_get(url: str, **kwargs: Any) -> FakeResponse:
            calls.append({"url": url, **kwargs})
            if isinstance(response, Exception):
                raise response
            return response

        monkeypatch.setattr("geoguard.intel.geo.requests.get", _fake_get)
        return calls

    return _install


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for name in ("GEOGUARD_GEO_ENDPOINT", "GEOGUARD_GEO_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GEOGUARD_DB_PATH", str(tmp_path / "geoguard.db"))
    monkeypatch.setenv("GEOGUARD_ACTIVITY_LOG", str(tmp_path / "activity.jsonl"))
