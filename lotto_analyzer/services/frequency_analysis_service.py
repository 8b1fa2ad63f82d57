"""Frequency statistics over a collected dataset (heatmap, hot/cold, summary)."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from lotto_analyzer.models.draw import DataSet, NUMBERS_PER_DRAW
from lotto_analyzer.models.partition import ALL_NUMBERS, COLUMNS, column_index


SUM_BUCKETS = ("<=120", "121-150", ">150")


@dataclass(frozen=True)
class ColumnStat:
    index: int
    numbers: tuple[int, ...]
    total: int
    avg_per_round: float
    avg_per_number: float


@dataclass(frozen=True)
class RoundColumns:
    round: int
    date: str
    numbers: tuple[int, ...]
    column_distribution: tuple[int, ...]


@dataclass(frozen=True)
class SummaryStats:
    total_numbers: int
    most_frequent: tuple[int, int]
    least_frequent: tuple[int, int]
    average_frequency: float
    consecutive_rounds: int
    sum_ranges: Mapping[str, int]
    odd_even: Mapping[str, int]


@dataclass(frozen=True)
class AnalysisSnapshot:
    total_rounds: int
    hot_threshold: int
    cold_threshold: int
    frequency: Mapping[int, int]
    hot: tuple[int, ...]
    cold: tuple[int, ...]
    medium: tuple[int, ...]
    columns: tuple[ColumnStat, ...]
    column_by_round: tuple[RoundColumns, ...]
    summary: SummaryStats

    @property
    def column_totals(self) -> tuple[int, ...]:
        return tuple(c.total for c in self.columns)

    def frequency_class(self, n: int) -> str:
        if n in self.hot:
            return "hot"
        if n in self.cold:
            return "cold"
        return "medium"


def _has_consecutive_pair(numbers: tuple[int, ...]) -> bool:
    return any(b - a == 1 for a, b in zip(numbers, numbers[1:]))


def _sum_bucket(total: int) -> str:
    if total <= 120:
        return "<=120"
    if total <= 150:
        return "121-150"
    return ">150"


class FrequencyAnalyzer:
    """Compute number frequency across a dataset. Pure: same dataset, same snapshot."""

    def __init__(self, hot_threshold: int = 3, cold_threshold: int = 1) -> None:
        if cold_threshold >= hot_threshold:
            raise ValueError("cold_threshold must be below hot_threshold")
        self.hot_threshold = hot_threshold
        self.cold_threshold = cold_threshold

    def analyze(self, dataset: DataSet) -> AnalysisSnapshot:
        counts: dict[int, int] = {n: 0 for n in ALL_NUMBERS}
        column_totals = [0] * len(COLUMNS)
        by_round: list[RoundColumns] = []
        consecutive_rounds = 0
        sum_ranges = {k: 0 for k in SUM_BUCKETS}
        odd_even = {f"{odd}:{NUMBERS_PER_DRAW - odd}": 0 for odd in range(NUMBERS_PER_DRAW, -1, -1)}

        for d in dataset:
            round_columns = [0] * len(COLUMNS)
            for n in d.numbers:
                counts[n] += 1
                idx = column_index(n)
                column_totals[idx] += 1
                round_columns[idx] += 1

            by_round.append(
                RoundColumns(
                    round=d.round,
                    date=d.date,
                    numbers=d.numbers,
                    column_distribution=tuple(round_columns),
                )
            )
            if _has_consecutive_pair(d.numbers):
                consecutive_rounds += 1
            sum_ranges[_sum_bucket(sum(d.numbers))] += 1
            odd = sum(1 for n in d.numbers if n % 2 == 1)
            odd_even[f"{odd}:{NUMBERS_PER_DRAW - odd}"] += 1

        total_rounds = len(dataset)

        # Ties keep ascending number order.
        ordered = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        hot = tuple(n for n, c in ordered if c >= self.hot_threshold)
        cold = tuple(n for n, c in ordered if c <= self.cold_threshold)
        hot_cold = set(hot) | set(cold)
        medium = tuple(n for n in ALL_NUMBERS if n not in hot_cold)

        most = ordered[0]
        least = min(counts.items(), key=lambda kv: (kv[1], kv[0]))
        total_numbers = sum(counts.values())

        columns = tuple(
            ColumnStat(
                index=i,
                numbers=band,
                total=column_totals[i],
                avg_per_round=round(column_totals[i] / total_rounds, 2) if total_rounds else 0.0,
                avg_per_number=round(column_totals[i] / len(band), 2),
            )
            for i, band in enumerate(COLUMNS)
        )

        summary = SummaryStats(
            total_numbers=total_numbers,
            most_frequent=(most[0], most[1]),
            least_frequent=(least[0], least[1]),
            average_frequency=round(total_numbers / len(ALL_NUMBERS), 2),
            consecutive_rounds=consecutive_rounds,
            sum_ranges=MappingProxyType(sum_ranges),
            odd_even=MappingProxyType(odd_even),
        )

        return AnalysisSnapshot(
            total_rounds=total_rounds,
            hot_threshold=self.hot_threshold,
            cold_threshold=self.cold_threshold,
            frequency=MappingProxyType(counts),
            hot=hot,
            cold=cold,
            medium=medium,
            columns=columns,
            column_by_round=tuple(by_round),
            summary=summary,
        )
