"""Validated draw records and the dataset built from them.

A Draw is only ever constructed from a payload that passed validation, so
every instance satisfies: six distinct numbers in 1..45 (kept sorted) and a
bonus number in 1..45.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field


MIN_NUMBER = 1
MAX_NUMBER = 45
NUMBERS_PER_DRAW = 6

NumberTuple6 = tuple[int, int, int, int, int, int]


def in_range(n: int) -> bool:
    return MIN_NUMBER <= n <= MAX_NUMBER


@dataclass(frozen=True)
class Draw:
    round: int
    date: str
    numbers: NumberTuple6
    bonus: int

    def __post_init__(self) -> None:
        if self.round < 1:
            raise ValueError(f"round must be >= 1: {self.round}")
        if len(self.numbers) != NUMBERS_PER_DRAW or len(set(self.numbers)) != NUMBERS_PER_DRAW:
            raise ValueError(f"Draw {self.round} needs 6 distinct numbers: {self.numbers}")
        if not all(in_range(n) for n in self.numbers):
            raise ValueError(f"Draw {self.round} has numbers outside 1..45: {self.numbers}")
        if not in_range(self.bonus):
            raise ValueError(f"Draw {self.round} has bonus outside 1..45: {self.bonus}")
        object.__setattr__(self, "numbers", tuple(sorted(int(n) for n in self.numbers)))

    def to_dict(self) -> dict[str, object]:
        return {
            "round": self.round,
            "date": self.date,
            "numbers": list(self.numbers),
            "bonus": self.bonus,
        }


@dataclass(frozen=True)
class DataSet:
    """Draws ascending by round, one per round."""

    draws: tuple[Draw, ...]
    requested: int
    failed_rounds: tuple[int, ...] = field(default_factory=tuple)

    @classmethod
    def from_draws(
        cls,
        draws: Iterable[Draw],
        *,
        requested: int | None = None,
        failed_rounds: Iterable[int] = (),
    ) -> "DataSet":
        by_round: dict[int, Draw] = {}
        for d in draws:
            by_round.setdefault(d.round, d)
        ordered = tuple(by_round[r] for r in sorted(by_round))
        return cls(
            draws=ordered,
            requested=len(ordered) if requested is None else int(requested),
            failed_rounds=tuple(sorted(set(failed_rounds))),
        )

    @property
    def partial(self) -> bool:
        return len(self.draws) < self.requested

    @property
    def rounds(self) -> list[int]:
        return [d.round for d in self.draws]

    def __len__(self) -> int:
        return len(self.draws)

    def __iter__(self) -> Iterator[Draw]:
        return iter(self.draws)
