"""Unit tests for stats_store.py."""

import json

from stats_store import JsonStatsStore, KanaLifetimeStats


def test_missing_file_gives_defaults(stats_path):
    store = JsonStatsStore(stats_path)
    assert store.stats == KanaLifetimeStats()
    assert not stats_path.exists()


def test_corrupt_file_gives_defaults(stats_path):
    stats_path.parent.mkdir(parents=True)
    stats_path.write_text("{not json", encoding="utf-8")
    assert JsonStatsStore(stats_path).stats == KanaLifetimeStats()


def test_wrong_shape_gives_defaults(stats_path):
    stats_path.parent.mkdir(parents=True)
    stats_path.write_text("[1, 2, 3]", encoding="utf-8")
    assert JsonStatsStore(stats_path).stats == KanaLifetimeStats()


def test_record_persists(stats_path):
    store = JsonStatsStore(stats_path)
    store.record("あ", True)
    store.record("い", False)
    store.record("い", False)

    reloaded = JsonStatsStore(stats_path).stats
    assert reloaded.correct == 1
    assert reloaded.incorrect == 2
    assert reloaded.weak_symbols == {"い": 2}


def test_file_uses_camel_case_keys(stats_path):
    JsonStatsStore(stats_path).record("ア", False)
    data = json.loads(stats_path.read_text(encoding="utf-8"))
    assert data == {"correct": 0, "incorrect": 1, "weakSymbols": {"ア": 1}}


def test_weakest_ordering_and_preview(stats_path):
    store = JsonStatsStore(stats_path)
    assert store.weakest_preview() == "No weak symbols yet"

    for glyph, misses in [("あ", 1), ("い", 3), ("う", 2), ("え", 1)]:
        for _ in range(misses):
            store.record(glyph, False)

    assert store.weakest(3) == [("い", 3), ("う", 2), ("あ", 1)]
    assert store.weakest_preview(2) == "い (3), う (2)"


def test_clear_removes_progress(stats_path):
    store = JsonStatsStore(stats_path)
    store.record("あ", False)
    store.clear()

    assert store.stats == KanaLifetimeStats()
    assert not stats_path.exists()
    assert JsonStatsStore(stats_path).stats == KanaLifetimeStats()
