"""Static groupings of 1..45 used by analysis and recommendation."""

from __future__ import annotations


# Seven bands laid out like the columns of a paper ticket.
COLUMNS: tuple[tuple[int, ...], ...] = (
    tuple(range(1, 8)),
    tuple(range(8, 15)),
    tuple(range(15, 22)),
    tuple(range(22, 29)),
    tuple(range(29, 36)),
    tuple(range(36, 43)),
    tuple(range(43, 46)),
)

RANGES: dict[str, tuple[int, int]] = {
    "low": (1, 15),
    "mid": (16, 30),
    "high": (31, 45),
}

ALL_NUMBERS: tuple[int, ...] = tuple(range(1, 46))
ODD_NUMBERS: tuple[int, ...] = tuple(n for n in ALL_NUMBERS if n % 2 == 1)
EVEN_NUMBERS: tuple[int, ...] = tuple(n for n in ALL_NUMBERS if n % 2 == 0)


def column_index(n: int) -> int:
    """Return the 0-based column band of n."""

    if not 1 <= n <= 45:
        raise ValueError(f"number outside 1..45: {n}")
    return (n - 1) // 7


def range_bucket(n: int) -> str:
    for name, (lo, hi) in RANGES.items():
        if lo <= n <= hi:
            return name
    raise ValueError(f"number outside 1..45: {n}")


def range_numbers(name: str) -> tuple[int, ...]:
    lo, hi = RANGES[name]
    return tuple(range(lo, hi + 1))
