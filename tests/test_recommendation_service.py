from __future__ import annotations

import random

import pytest

from lotto_analyzer.errors import ValidationError
from lotto_analyzer.models.partition import COLUMNS, column_index
from lotto_analyzer.services.frequency_analysis_service import FrequencyAnalyzer
from lotto_analyzer.services.recommendation_service import (
    DEFAULT_BATCH,
    STRATEGIES,
    RecommendationEngine,
    compute_metrics,
)
from tests.helpers import make_dataset


def assert_valid(numbers):
    assert len(numbers) == 6
    assert len(set(numbers)) == 6
    assert all(1 <= n <= 45 for n in numbers)
    assert list(numbers) == sorted(numbers)


@pytest.mark.parametrize("name", list(STRATEGIES))
def test_every_strategy_yields_six_distinct_sorted(name, snapshot):
    engine = RecommendationEngine()
    for seed in range(25):
        result = engine.generate(name, snapshot, random.Random(seed))
        assert result.strategy == name
        assert_valid(result.numbers)


def test_hot_focused_takes_four_hot_two_medium(snapshot):
    result = RecommendationEngine().generate("hot-focused", snapshot, random.Random(1))
    assert result.metrics.frequency_class == {"hot": 4, "cold": 0, "medium": 2}


def test_cold_focused_takes_four_cold_two_hot(snapshot):
    result = RecommendationEngine().generate("cold-focused", snapshot, random.Random(1))
    assert result.metrics.frequency_class == {"hot": 2, "cold": 4, "medium": 0}


def test_mixed_strategies(snapshot):
    engine = RecommendationEngine()
    m1 = engine.generate("mixed-1", snapshot, random.Random(2))
    m2 = engine.generate("mixed-2", snapshot, random.Random(2))
    assert m1.metrics.frequency_class == {"hot": 2, "cold": 2, "medium": 2}
    assert m2.metrics.frequency_class == {"hot": 3, "cold": 1, "medium": 2}


def test_column_balanced_uses_six_different_bands(snapshot):
    engine = RecommendationEngine()
    for seed in range(50):
        result = engine.generate("column-balanced", snapshot, random.Random(seed))
        bands = [column_index(n) for n in result.numbers]
        assert sorted(bands) == [0, 1, 2, 3, 4, 5]
        assert result.metrics.column_distribution == (1, 1, 1, 1, 1, 1, 0)


def test_range_and_parity_balance(snapshot):
    engine = RecommendationEngine()
    for seed in range(20):
        ranged = engine.generate("range-balanced", snapshot, random.Random(seed))
        assert ranged.metrics.range_buckets == {"low": 2, "mid": 2, "high": 2}
        parity = engine.generate("odd-even-balanced", snapshot, random.Random(seed))
        assert (parity.metrics.odd_count, parity.metrics.even_count) == (3, 3)


def test_short_pool_is_backfilled():
    # A single round: every count is 0 or 1, so every number is cold.
    snap = FrequencyAnalyzer().analyze(make_dataset((1, 2, 3, 4, 5, 6)))
    assert snap.hot == () and snap.medium == ()

    for name in ("hot-focused", "medium-focused", "mixed-2"):
        assert_valid(RecommendationEngine().generate(name, snap, random.Random(9)).numbers)


def test_same_seed_same_result(snapshot):
    engine = RecommendationEngine()
    a = engine.generate_batch(snapshot, random.Random(42))
    b = engine.generate_batch(snapshot, random.Random(42))
    assert [r.numbers for r in a] == [r.numbers for r in b]


def test_default_batch_covers_all_strategies_in_order(snapshot):
    results = RecommendationEngine().generate_batch(snapshot, random.Random(5))
    assert [r.strategy for r in results] == list(DEFAULT_BATCH)
    assert len({frozenset(r.numbers) for r in results}) == len(results)


def test_batch_retries_then_accepts_duplicate():
    # 1..6 seen twice (medium), 7..42 three times (hot), 43..45 never (cold):
    # medium-focused can only ever produce 1..6.
    sets = [(1, 2, 3, 4, 5, 6)] * 2 + [(7, 8, 9, 10, 11, 12)] * 3
    sets += [(13, 14, 15, 16, 17, 18), (19, 20, 21, 22, 23, 24), (25, 26, 27, 28, 29, 30)]
    sets += [(31, 32, 33, 34, 35, 36), (37, 38, 39, 40, 41, 42)]
    sets += [(13, 14, 15, 16, 17, 18), (19, 20, 21, 22, 23, 24), (25, 26, 27, 28, 29, 30)]
    sets += [(31, 32, 33, 34, 35, 36), (37, 38, 39, 40, 41, 42)]
    sets += [(13, 14, 15, 16, 17, 18), (19, 20, 21, 22, 23, 24), (25, 26, 27, 28, 29, 30)]
    sets += [(31, 32, 33, 34, 35, 36), (37, 38, 39, 40, 41, 42)]
    snap = FrequencyAnalyzer().analyze(make_dataset(*sets))
    assert snap.medium == (1, 2, 3, 4, 5, 6)

    calls = []
    engine = RecommendationEngine(duplicate_attempts=4)
    original = engine.generate

    def counting(name, snapshot, rng=None):
        calls.append(name)
        return original(name, snapshot, rng)

    engine.generate = counting  # type: ignore[method-assign]
    results = engine.generate_batch(snap, random.Random(0), strategies=["medium-focused", "medium-focused"])

    assert [r.numbers for r in results] == [(1, 2, 3, 4, 5, 6)] * 2
    assert len(calls) == 1 + 4


def test_unknown_strategy_rejected(snapshot):
    with pytest.raises(ValidationError):
        RecommendationEngine().generate("lucky-dip", snapshot, random.Random(0))
    with pytest.raises(ValidationError):
        RecommendationEngine().generate_batch(snapshot, random.Random(0), strategies=["hot-focused", "nope"])


def test_metrics(snapshot):
    m = compute_metrics([1, 8, 16, 22, 31, 45], snapshot)

    assert (m.odd_count, m.even_count, m.sum) == (3, 3, 123)
    assert m.range_buckets == {"low": 2, "mid": 2, "high": 2}
    assert m.column_distribution == (1, 1, 1, 1, 1, 0, 1)
    assert m.frequency_class == {"hot": 1, "cold": 3, "medium": 2}
    assert len(COLUMNS) == len(m.column_distribution)
