"""Tests for the HTTP API — /health, /config and /analyze."""

from dataclasses import asdict

import pytest
from fastapi.testclient import TestClient

from openrange.api.routers import configure_routers
from openrange.config import AnalysisConfig, Config
from openrange.main import app
from openrange.strategy.models import Bar

client = TestClient(app)

DAY1 = 1740994200  # 2025-03-03 09:30 UTC
DAY2 = DAY1 + 86400


# ── Fixtures ─────────────────────────────────────────────────────────────

def two_session_bars() -> list[Bar]:
    """Same two sessions as the pipeline tests: A1 holds three times."""
    day1 = [
        (100.0, 105.0, 95.0, 100.0),
        (100.0, 110.0, 99.0, 109.0),
        (109.0, 115.05, 108.0, 113.0),
        (113.0, 113.5, 111.0, 112.0),
        (112.0, 115.0, 111.5, 114.0),
        (114.0, 114.5, 110.0, 111.0),
    ]
    day2 = [
        (100.0, 105.0, 95.0, 100.0),
        (100.0, 112.0, 99.0, 111.0),
        (111.0, 115.02, 110.5, 114.5),
        (114.5, 114.6, 112.0, 112.5),
    ]
    return (
        [Bar(DAY1 + i * 300, *row) for i, row in enumerate(day1)]
        + [Bar(DAY2 + i * 300, *row) for i, row in enumerate(day2)]
    )


@pytest.fixture(autouse=True)
def _reset_routers():
    configure_routers(None)
    yield
    configure_routers(None)


def _payload(**overrides) -> dict:
    body = {"timezone": "UTC", "bars": [asdict(b) for b in two_session_bars()]}
    body.update(overrides)
    return body


class TestHealth:
    def test_health(self):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestConfigEndpoint:
    def test_defaults(self):
        data = client.get("/config").json()
        assert data["timezone"] == "America/New_York"
        assert data["analysis"]["multipliers"] == [1.0, 2.0, 3.0, 4.0]

    def test_configured(self):
        configure_routers(Config(
            timezone="Europe/London",
            log_level="INFO",
            api_port=8080,
            analysis=AnalysisConfig(rr_ratio=3.0),
        ))
        data = client.get("/config").json()
        assert data["timezone"] == "Europe/London"
        assert data["analysis"]["rr_ratio"] == 3.0


class TestAnalyzeEndpoint:
    def test_full_result(self):
        resp = client.post("/analyze", json=_payload())
        assert resp.status_code == 200
        data = resp.json()
        assert data["session_date"] == "2025-03-04"
        assert data["levels"]["A1"] == pytest.approx(115.0)
        a1 = data["stats"][0]
        assert (a1["touches"], a1["bounces"], a1["breaks"]) == (3, 3, 0)
        assert [s["type"] for s in data["signals"]] == ["sell", "sell"]

    def test_uses_configured_analysis_settings(self):
        configure_routers(Config(
            timezone="UTC",
            log_level="INFO",
            api_port=8080,
            analysis=AnalysisConfig(window_bars=3),
        ))
        data = client.post("/analyze", json=_payload(timezone=None)).json()
        assert len(data["signals"]) == 1

    def test_empty_bars(self):
        data = client.post("/analyze", json=_payload(bars=[])).json()
        assert data["levels"] is None
        assert data["signals"] == []
        assert len(data["stats"]) == 8

    def test_bars_must_be_list(self):
        resp = client.post("/analyze", json={"timezone": "UTC"})
        assert resp.status_code == 422

    def test_missing_column(self):
        resp = client.post("/analyze", json=_payload(bars=[{"time": 0, "open": 1}]))
        assert resp.status_code == 422
        assert "Missing bar column" in resp.json()["detail"]

    def test_unknown_timezone(self):
        resp = client.post("/analyze", json=_payload(timezone="Nowhere/Atlantis"))
        assert resp.status_code == 422
