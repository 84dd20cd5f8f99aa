import json
from datetime import date, datetime

import httpx
import pytest
from pytz import timezone

from solarday import compute
from solarday.compute import (
    GeocodingError,
    build_report,
    compute_year_chart,
    context_at,
    event_rows,
    format_duration,
    geocode_address,
    resolve_context,
    run,
    seasons_for,
)
from solarday.models import EventType, QueryInput, SeasonInstants
from solarday.seasons import write_table

HOUR_MS = 3_600_000
LA = "America/Los_Angeles"


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


@pytest.fixture
def santa_barbara(monkeypatch):
    calls = []

    def fake_get(url, params=None, headers=None, timeout=None):
        calls.append((url, params, headers))
        return FakeResponse(
            [{"lat": "34.4208", "lon": "-119.6982", "display_name": "Santa Barbara, California"}]
        )

    monkeypatch.setattr(compute.httpx, "get", fake_get)
    return calls


def test_geocode_address(santa_barbara, monkeypatch):
    monkeypatch.setenv("SOLARDAY_USER_AGENT", "solarday-tests")
    lat, lng, name = geocode_address("Santa Barbara")
    assert (lat, lng) == (34.4208, -119.6982)
    assert name == "Santa Barbara, California"
    url, params, headers = santa_barbara[0]
    assert params["q"] == "Santa Barbara"
    assert headers["User-Agent"] == "solarday-tests"


def test_geocode_address_not_found(monkeypatch):
    monkeypatch.setattr(compute.httpx, "get", lambda *a, **kw: FakeResponse([]))
    with pytest.raises(GeocodingError, match="not found"):
        geocode_address("Nowhere at all")


def test_geocode_address_http_failure(monkeypatch):
    def boom(*args, **kwargs):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(compute.httpx, "get", boom)
    with pytest.raises(GeocodingError, match="request failed"):
        geocode_address("Santa Barbara")


def test_resolve_context_rejects_bad_date(santa_barbara):
    with pytest.raises(GeocodingError, match="Invalid date"):
        resolve_context("Santa Barbara", "21/06/2025")
    assert santa_barbara == []


def test_run_past_date_reports_local_noon(santa_barbara):
    report = run(QueryInput(address="Santa Barbara", when="2025-06-21"))
    assert report.context.zone == LA
    assert report.context.day == date(2025, 6, 21)
    assert (report.now.hour, report.now.minute) == (12, 0)
    assert 14 * HOUR_MS < report.day_length_ms < 15 * HOUR_MS
    assert report.position.elevation > 70
    assert 145e6 < report.distance_km < 155e6


def test_build_report_at_given_instant():
    context = context_at(34.42, -119.85, date(2025, 6, 21), LA)
    when = timezone(LA).localize(datetime(2025, 6, 21, 23, 30))
    report = build_report(context, when)
    assert report.now == when
    assert report.position.elevation < -18

    rows = event_rows(report)
    assert len(rows) == len(report.events)
    assert rows[0]["event"] == EventType.SOLAR_MIDNIGHT.value
    noon = next(r for r in rows if r["event"] == "Solar Noon")
    assert noon["time"].startswith("13:0")
    assert set(noon) == {"event", "time", "elevation", "azimuth"}


def test_context_at_looks_up_zone():
    context = context_at(34.42, -119.85, date(2025, 1, 1))
    assert context.zone == LA
    assert context.address_display == "34.4200, -119.8500"


def test_format_duration():
    assert format_duration(3_723_000) == "1:02:03"
    assert format_duration(0) == "0:00:00"
    assert format_duration(14 * HOUR_MS + 999) == "14:00:00"


def test_seasons_for_prefers_table(tmp_path, monkeypatch):
    row = SeasonInstants(2024, 1.0, 2.0, 3.0, 4.0)
    path = tmp_path / "seasons.json"
    write_table(path, [row], iso=False)
    monkeypatch.setenv("SOLARDAY_SEASONS_TABLE", str(path))
    assert seasons_for(2024) == row
    # Years outside the table are computed
    assert seasons_for(2025).mar_equinox > 1.7e12


def test_seasons_table_file_is_json(tmp_path):
    path = tmp_path / "seasons.json"
    write_table(path, [SeasonInstants(2024, 1.0, 2.0, 3.0, 4.0)], iso=False)
    assert json.loads(path.read_text())[0]["year"] == 2024


def test_unknown_chart_kind():
    context = context_at(34.42, -119.85, date(2025, 1, 1), LA)
    with pytest.raises(ValueError):
        compute_year_chart(context, 2025, "polar")


def test_year_chart_rise_set(monkeypatch):
    monkeypatch.delenv("SOLARDAY_SEASONS_TABLE", raising=False)
    context = context_at(34.42, -119.85, date(2025, 1, 1), LA, "Santa Barbara")
    chart = compute_year_chart(context, 2025, "rise-set")
    assert chart.days == 365
    assert len(chart.bands) == 4
    assert all(len(rings) >= 1 for rings in chart.bands)
    for rings in chart.bands:
        for ring in rings:
            assert all(0 <= x <= 365 for x, _ in ring)
            assert all(0 <= y <= 86_400_000 for _, y in ring)
    # DST shifts solar noon by an hour twice a year
    assert len(chart.noon_lines) == 3
    assert sum(len(line) for line in chart.noon_lines) == 365
    assert len(chart.season_days) == 4
    assert 78 < chart.season_days[0] < 80


def test_seasons_for_ignores_missing_table(tmp_path, monkeypatch, caplog):
    monkeypatch.setenv("SOLARDAY_SEASONS_TABLE", str(tmp_path / "nonexistent.json"))
    seasons = seasons_for(2024)
    assert seasons.year == 2024
    assert abs(seasons.mar_equinox - 1_710_903_977_000) < 120_000
    assert "computing seasons" in caplog.text


def test_context_at_uses_normalized_longitude():
    context = context_at(10.0, -180, date(2025, 1, 1), "UTC")
    assert context.lng == 180.0
    assert context.address_display == "10.0000, 180.0000"
