import json
import os
import time

import pytest

from xcli.errors import ConfigError, WoeidUnavailableError
from xcli.woeid import (
    CACHE_MAX_AGE_SECONDS,
    FileWoeidCache,
    WoeidRecord,
    load_woeid_index,
    normalize_text,
    parse_woeid_rows,
    resolve_default_cache_path,
    resolve_woeid,
    search_woeid,
)

INDEX = [
    WoeidRecord(placeName="São Paulo", country="Brazil", woeid=455827, placeType="Town", countryCode="BR"),
    WoeidRecord(placeName="Sao Paulo de Olivenca", country="Brazil", woeid=1, placeType="Town"),
    WoeidRecord(placeName="London", country="United Kingdom", woeid=44418, placeType="Town", countryCode="GB"),
    WoeidRecord(placeName="New London", country="United States", woeid=2459269, placeType="Town"),
]


class MemoryCache:
    def __init__(self, fresh=None, stale=None):
        self.fresh = fresh
        self.stale = stale
        self.written = None

    def read(self, max_age):
        return self.fresh if max_age is not None else self.stale

    def write(self, records):
        self.written = records


def test_normalize_text_strips_diacritics_and_punctuation():
    assert normalize_text("  São-Paulo!! ") == "sao paulo"


def test_exact_match_with_diacritics_outranks_substring():
    matches = search_woeid("sao paulo", index=INDEX)
    assert matches[0].woeid == 455827
    assert matches[0].score >= 200
    assert matches[1].placeName == "Sao Paulo de Olivenca"
    assert matches[0].score > matches[1].score


def test_zero_scores_are_excluded_and_limit_applies():
    matches = search_woeid("london", index=INDEX, limit=1)
    assert [m.woeid for m in matches] == [44418]
    assert search_woeid("tokyo", index=INDEX) == []
    assert search_woeid("!!!", index=INDEX) == []


def test_ties_break_on_place_name():
    index = [
        WoeidRecord(placeName="Springfield B", country="", woeid=2, placeType="Town"),
        WoeidRecord(placeName="Springfield A", country="", woeid=1, placeType="Town"),
    ]
    assert [m.woeid for m in search_woeid("springfield", index=index)] == [1, 2]


def test_resolve_woeid_reports_multiple_candidates():
    resolved = resolve_woeid("london", index=INDEX)
    assert resolved.woeid == 44418
    assert resolved.displayName == "London, United Kingdom"
    assert resolved.hadMultiple


def test_resolve_woeid_without_match():
    with pytest.raises(ConfigError) as excinfo:
        resolve_woeid("atlantis", index=INDEX)
    assert "xcli trends search atlantis" in str(excinfo.value)


def test_fresh_cache_skips_network():
    calls = []

    def fetch():
        calls.append(1)
        return INDEX

    assert load_woeid_index(MemoryCache(fresh=INDEX), fetch) == INDEX
    assert calls == []


def test_network_result_is_written_to_cache():
    cache = MemoryCache()
    assert load_woeid_index(cache, lambda: INDEX) == INDEX
    assert cache.written == INDEX


def test_stale_cache_used_when_fetch_fails():
    def fetch():
        raise RuntimeError("offline")

    assert load_woeid_index(MemoryCache(stale=INDEX[:1]), fetch) == INDEX[:1]


def test_no_cache_and_no_network_fails():
    def fetch():
        raise RuntimeError("offline")

    with pytest.raises(WoeidUnavailableError):
        load_woeid_index(MemoryCache(), fetch)


def test_file_cache_round_trip_and_age(tmp_path):
    path = tmp_path / "nested" / "woeid.json"
    cache = FileWoeidCache(path)
    assert cache.read(CACHE_MAX_AGE_SECONDS) is None

    cache.write(INDEX)
    assert json.loads(path.read_text())[0]["place_name"] == "São Paulo"
    assert cache.read(CACHE_MAX_AGE_SECONDS) == INDEX

    old = time.time() - CACHE_MAX_AGE_SECONDS - 60
    os.utime(path, (old, old))
    assert cache.read(CACHE_MAX_AGE_SECONDS) is None
    assert cache.read(None) == INDEX


def test_malformed_cache_is_ignored(tmp_path):
    path = tmp_path / "woeid.json"
    path.write_text("{not json")
    assert FileWoeidCache(path).read(None) is None


def test_parse_rows_accepts_string_woeids_and_skips_junk():
    records = parse_woeid_rows(
        [
            {"place_name": "Paris", "country": "France", "woeid": "615702", "type": "Town"},
            {"place_name": "", "woeid": 1},
            "junk",
        ]
    )
    assert records == [WoeidRecord(placeName="Paris", country="France", woeid=615702, placeType="Town")]
    with pytest.raises(ValueError):
        parse_woeid_rows({"place_name": "Paris"})


def test_cache_path_precedence(monkeypatch, tmp_path):
    monkeypatch.delenv("XCLI_WOEID_CACHE_PATH", raising=False)
    assert resolve_default_cache_path(str(tmp_path / "cfg.json")) == tmp_path / "cfg.json"
    monkeypatch.setenv("XCLI_WOEID_CACHE_PATH", str(tmp_path / "env.json"))
    assert resolve_default_cache_path(str(tmp_path / "cfg.json")) == tmp_path / "env.json"
