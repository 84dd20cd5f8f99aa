import json
from datetime import datetime

import pytest
from pytz import utc

from solarday.errors import LookupTableError
from solarday.models import SeasonInstants
from solarday.seasons import (
    dec_solstice,
    jun_solstice,
    load_table,
    lookup,
    mar_equinox,
    season_instants,
    sep_equinox,
    write_table,
)
from solarday.timeutil import to_ms

TOLERANCE_MS = 120_000


def _ms(*args) -> float:
    return to_ms(datetime(*args, tzinfo=utc))


@pytest.mark.parametrize(
    "finder, expected",
    [
        (mar_equinox, (2024, 3, 20, 3, 6, 17)),
        (jun_solstice, (2024, 6, 20, 20, 50, 58)),
        (sep_equinox, (2024, 9, 22, 12, 43, 37)),
        (dec_solstice, (2024, 12, 21, 9, 20, 9)),
    ],
)
def test_seasons_2024(finder, expected):
    assert abs(finder(2024) - _ms(*expected)) < TOLERANCE_MS


def test_season_instants_are_ordered():
    seasons = season_instants(2031)
    assert seasons.year == 2031
    instants = seasons.as_tuple()
    assert list(instants) == sorted(instants)
    assert _ms(2031, 1, 1) < instants[0] and instants[-1] < _ms(2032, 1, 1)


def _sample_table():
    return [
        SeasonInstants(2024, 1710904000123, 1718916658000, 1727009017000, 1734772809000),
        SeasonInstants(2025, 1742433640000, 1750446000000, 1758539000000, 1766301000000),
    ]


@pytest.mark.parametrize("iso", [True, False])
def test_table_round_trip(tmp_path, iso):
    path = tmp_path / "seasons.json"
    write_table(path, _sample_table(), iso=iso)
    loaded = load_table(path)
    assert [row.year for row in loaded] == [2024, 2025]
    for got, want in zip(loaded, _sample_table()):
        assert got.as_tuple() == pytest.approx(want.as_tuple(), abs=0.5)


def test_iso_table_uses_utc_strings(tmp_path):
    path = tmp_path / "seasons.json"
    write_table(path, _sample_table()[:1])
    row = json.loads(path.read_text())[0]
    assert row["marEquinox"] == "2024-03-20T03:06:40.123Z"
    assert set(row) == {"year", "marEquinox", "junSolstice", "sepEquinox", "decSolstice"}


def test_load_table_sorts_and_rejects_missing_fields(tmp_path):
    path = tmp_path / "seasons.json"
    rows = [
        {"year": 2025, "marEquinox": 1, "junSolstice": 2, "sepEquinox": 3, "decSolstice": 4},
        {"year": 2024, "marEquinox": 1, "junSolstice": 2, "sepEquinox": 3, "decSolstice": 4},
    ]
    path.write_text(json.dumps(rows))
    assert [row.year for row in load_table(path)] == [2024, 2025]

    path.write_text(json.dumps([{"year": 2024, "marEquinox": 1}]))
    with pytest.raises(LookupTableError):
        load_table(path)


def test_lookup():
    table = _sample_table()
    assert lookup(2025, table).year == 2025
    assert season_instants(2024, table) == table[0]
    with pytest.raises(LookupTableError):
        lookup(2030, table)
    with pytest.raises(LookupTableError):
        lookup(2024, [])


def test_load_table_wraps_unreadable_files(tmp_path):
    with pytest.raises(LookupTableError, match="Cannot read"):
        load_table(tmp_path / "missing.json")

    path = tmp_path / "seasons.json"
    path.write_text("{not json")
    with pytest.raises(LookupTableError, match="Cannot read"):
        load_table(path)

    path.write_text(json.dumps([{"year": 2024, "marEquinox": "yesterday", "junSolstice": 2,
                                 "sepEquinox": 3, "decSolstice": 4}]))
    with pytest.raises(LookupTableError, match="malformed"):
        load_table(path)
