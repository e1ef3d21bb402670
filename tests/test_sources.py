"""Tests for the in-memory event source, filters and configuration."""

import asyncio
import json

import pytest

from nostr_calendar.config import AppConfig, QueryConfig
from nostr_calendar.models.raw import Filter
from nostr_calendar.readers.memory_reader import InMemoryEventSource
from nostr_calendar.utils.exceptions import ConfigurationError, EventQueryError


def test_filter_wire_format():
    wire = Filter(kinds=[31922], tags={"t": ["music"]}, limit=5, until=100).to_wire()
    assert wire == {"kinds": [31922], "#t": ["music"], "limit": 5, "until": 100}


def test_query_applies_limit_newest_first(make_calendar_event):
    events = [make_calendar_event(title=f"e{i}", created_at=100 + i) for i in range(5)]
    source = InMemoryEventSource(events)

    result = asyncio.run(source.query([Filter(kinds=[31923], limit=2)]))

    assert [e.created_at for e in result] == [104, 103]


def test_query_ors_filters(make_event):
    events = [
        make_event(kind=31922, id="a"),
        make_event(kind=31923, id="b"),
        make_event(kind=31925, id="c"),
    ]
    source = InMemoryEventSource(events)

    result = asyncio.run(source.query([Filter(kinds=[31922]), Filter(ids=["c"])]))

    assert sorted(e.id for e in result) == ["a", "c"]


def test_query_until_and_authors(make_event):
    events = [
        make_event(id="old", pubkey="alice", created_at=10),
        make_event(id="new", pubkey="alice", created_at=20),
        make_event(id="bob", pubkey="bob", created_at=5),
    ]
    source = InMemoryEventSource(events)

    result = asyncio.run(source.query([Filter(authors=["alice"], until=15)]))

    assert [e.id for e in result] == ["old"]


def test_from_file_json_array(tmp_path):
    path = tmp_path / "events.json"
    path.write_text(
        json.dumps(
            [
                {"id": "a", "pubkey": "p", "kind": 31922, "created_at": 1, "content": "", "tags": [["d", "x"]]},
                {"id": "broken", "kind": "not a number"},
            ]
        )
    )
    source = InMemoryEventSource.from_file(path)

    assert len(source) == 1
    assert source.all_events()[0].tags == (("d", "x"),)


def test_from_file_json_lines(tmp_path):
    path = tmp_path / "events.jsonl"
    lines = [
        json.dumps({"id": str(i), "pubkey": "p", "kind": 31923, "created_at": i, "tags": []})
        for i in range(3)
    ]
    path.write_text("\n".join(lines) + "\n")

    assert len(InMemoryEventSource.from_file(path)) == 3


def test_from_file_errors(tmp_path):
    with pytest.raises(EventQueryError):
        InMemoryEventSource.from_file(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("[not json")
    with pytest.raises(EventQueryError):
        InMemoryEventSource.from_file(bad)


def test_query_config_from_yaml(tmp_path):
    path = tmp_path / "calendar_config.yaml"
    path.write_text("queries:\n  recent_limit: 5\n  search_min_scan: 250\n")
    limits = QueryConfig(config_path=path)

    assert limits.recent_limit == 5
    assert limits.search_min_scan == 250
    assert limits.upcoming_limit == 20


@pytest.mark.parametrize("values", [{"recent_limit": 0}, {"recent_limit": "ten"}, {"bogus": 3}])
def test_query_config_rejects_bad_values(tmp_path, values):
    limits = QueryConfig(config_path=tmp_path / "missing.yaml")
    with pytest.raises(ConfigurationError):
        limits.update(values)


def test_app_config_from_environment(monkeypatch):
    monkeypatch.setenv("NOSTR_CALENDAR_QUERY_TIMEOUT", "2.5")
    monkeypatch.setenv("NOSTR_CALENDAR_TIMEZONE", "Europe/Zurich")
    settings = AppConfig()

    assert settings.query_timeout == 2.5
    assert settings.timezone == "Europe/Zurich"


def test_app_config_rejects_unknown_timezone(monkeypatch):
    monkeypatch.setenv("NOSTR_CALENDAR_TIMEZONE", "Atlantis/Capital")
    with pytest.raises(ValueError):
        AppConfig()
