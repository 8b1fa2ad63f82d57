"""Strategy-driven number recommendations from an analysis snapshot."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Iterable, Sequence

from lotto_analyzer.errors import ValidationError
from lotto_analyzer.models.draw import NUMBERS_PER_DRAW
from lotto_analyzer.models.partition import (
    ALL_NUMBERS,
    COLUMNS,
    EVEN_NUMBERS,
    ODD_NUMBERS,
    RANGES,
    column_index,
    range_bucket,
    range_numbers,
)
from lotto_analyzer.services.frequency_analysis_service import AnalysisSnapshot


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Strategy:
    name: str
    label: str
    # (pool name, how many to take), applied in order.
    picks: tuple[tuple[str, int], ...]


STRATEGIES: dict[str, Strategy] = {
    s.name: s
    for s in (
        Strategy("hot-focused", "Hot numbers first", (("hot", 4), ("medium", 2))),
        Strategy("cold-focused", "Cold numbers first", (("cold", 4), ("hot", 2))),
        Strategy(
            "column-balanced",
            "One per ticket column",
            tuple((f"column:{i}", 1) for i in range(6)),
        ),
        Strategy("mixed-1", "Mixed 2 hot / 2 cold / 2 medium", (("hot", 2), ("cold", 2), ("medium", 2))),
        Strategy("mixed-2", "Mixed 3 hot / 1 cold / 2 medium", (("hot", 3), ("cold", 1), ("medium", 2))),
        Strategy("medium-focused", "Medium frequency", (("medium", 6),)),
        Strategy("range-balanced", "Two per number range", (("range:low", 2), ("range:mid", 2), ("range:high", 2))),
        Strategy("odd-even-balanced", "Three odd, three even", (("odd", 3), ("even", 3))),
        Strategy("random-1", "Pure random", (("all", 6),)),
        Strategy("random-2", "Pure random", (("all", 6),)),
    )
}

DEFAULT_BATCH: tuple[str, ...] = tuple(STRATEGIES)


@dataclass(frozen=True)
class SetMetrics:
    odd_count: int
    even_count: int
    sum: int
    range_buckets: dict[str, int]
    column_distribution: tuple[int, ...]
    frequency_class: dict[str, int]


@dataclass(frozen=True)
class StrategyResult:
    strategy: str
    label: str
    numbers: tuple[int, ...]
    metrics: SetMetrics


def _pool(name: str, snapshot: AnalysisSnapshot) -> Sequence[int]:
    if name == "hot":
        return snapshot.hot
    if name == "cold":
        return snapshot.cold
    if name == "medium":
        return snapshot.medium
    if name == "odd":
        return ODD_NUMBERS
    if name == "even":
        return EVEN_NUMBERS
    if name == "all":
        return ALL_NUMBERS
    if name.startswith("column:"):
        return COLUMNS[int(name.split(":", 1)[1])]
    if name.startswith("range:"):
        return range_numbers(name.split(":", 1)[1])
    raise ValueError(f"Unknown pool: {name}")


def compute_metrics(numbers: Iterable[int], snapshot: AnalysisSnapshot) -> SetMetrics:
    nums = sorted(numbers)
    odd = sum(1 for n in nums if n % 2 == 1)

    ranges = {name: 0 for name in RANGES}
    columns = [0] * len(COLUMNS)
    classes = {"hot": 0, "cold": 0, "medium": 0}
    for n in nums:
        ranges[range_bucket(n)] += 1
        columns[column_index(n)] += 1
        classes[snapshot.frequency_class(n)] += 1

    return SetMetrics(
        odd_count=odd,
        even_count=len(nums) - odd,
        sum=sum(nums),
        range_buckets=ranges,
        column_distribution=tuple(columns),
        frequency_class=classes,
    )


class RecommendationEngine:
    """Generate 6-number sets per strategy with an injectable random source."""

    def __init__(self, duplicate_attempts: int = 10) -> None:
        self._duplicate_attempts = max(1, int(duplicate_attempts))

    @staticmethod
    def strategy(name: str) -> Strategy:
        try:
            return STRATEGIES[name]
        except KeyError as exc:
            raise ValidationError(
                message="Unknown strategy",
                details={"strategy": [f"Must be one of {', '.join(STRATEGIES)}"]},
            ) from exc

    @staticmethod
    def _sample(rng: random.Random, pool: Iterable[int], k: int, chosen: set[int]) -> list[int]:
        available = [n for n in pool if n not in chosen]
        if k <= 0 or not available:
            return []
        return rng.sample(available, min(k, len(available)))

    def pick_numbers(self, strategy: Strategy, snapshot: AnalysisSnapshot, rng: random.Random) -> list[int]:
        chosen: list[int] = []
        for pool_name, target in strategy.picks:
            taken = self._sample(rng, _pool(pool_name, snapshot), target, set(chosen))
            chosen.extend(taken)
            shortfall = target - len(taken)
            if shortfall > 0:
                # Pool ran dry; top up from everything not yet chosen.
                chosen.extend(self._sample(rng, ALL_NUMBERS, shortfall, set(chosen)))

        while len(chosen) < NUMBERS_PER_DRAW:
            extra = self._sample(rng, ALL_NUMBERS, 1, set(chosen))
            if not extra:
                break
            chosen.extend(extra)

        return sorted(chosen[:NUMBERS_PER_DRAW])

    def generate(
        self,
        strategy_name: str,
        snapshot: AnalysisSnapshot,
        rng: random.Random | None = None,
    ) -> StrategyResult:
        strategy = self.strategy(strategy_name)
        rng = rng or random.Random()
        numbers = self.pick_numbers(strategy, snapshot, rng)
        return StrategyResult(
            strategy=strategy.name,
            label=strategy.label,
            numbers=tuple(numbers),
            metrics=compute_metrics(numbers, snapshot),
        )

    def generate_batch(
        self,
        snapshot: AnalysisSnapshot,
        rng: random.Random | None = None,
        strategies: Sequence[str] | None = None,
    ) -> list[StrategyResult]:
        """One result per strategy, avoiding repeats within the batch on a best-effort basis."""

        names = list(strategies) if strategies else list(DEFAULT_BATCH)
        for name in names:
            self.strategy(name)
        rng = rng or random.Random()

        seen: set[frozenset[int]] = set()
        results: list[StrategyResult] = []
        for name in names:
            result = self.generate(name, snapshot, rng)
            attempts = 1
            while frozenset(result.numbers) in seen and attempts < self._duplicate_attempts:
                result = self.generate(name, snapshot, rng)
                attempts += 1
            if frozenset(result.numbers) in seen:
                logger.info("Strategy %s kept a duplicate after %s attempts", name, attempts)
            seen.add(frozenset(result.numbers))
            results.append(result)
        return results
