"""Collect a range of rounds from an unreliable source.

One sweep over the range, then up to `max_retries` retry waves that only
touch the rounds still missing, each preceded by a longer wait than the
last. Individual round failures never abort the sweep; only ending below
the minimum quota is fatal.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Callable

from lotto_analyzer.clients.round_fetcher import RoundFetcher
from lotto_analyzer.errors import InsufficientDataError
from lotto_analyzer.models.draw import DataSet, Draw
from lotto_analyzer.services.pipeline_state import PipelineRun, PipelineState
from lotto_analyzer.utils.progress import ProgressReporter


logger = logging.getLogger(__name__)

FIRST_DRAW_DATE = date(2002, 12, 7)


def estimate_latest_round(today: date | None = None) -> int:
    """Weekly draws since the first one; round 1 was on FIRST_DRAW_DATE."""

    today = today or date.today()
    weeks = (today - FIRST_DRAW_DATE).days // 7
    return max(1, weeks + 1)


class CollectionOrchestrator:
    def __init__(
        self,
        fetcher: RoundFetcher,
        *,
        reporter: ProgressReporter | None = None,
        sleep: Callable[[float], None] = time.sleep,
        pacing_delay: float = 0.4,
        retry_pacing_delay: float = 0.5,
        retry_delay: float = 2.0,
        max_retries: int = 3,
        wave_size: int = 1,
        latest_round_lookback: int = 30,
    ) -> None:
        if wave_size < 1:
            raise ValueError("wave_size must be >= 1")
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self._fetcher = fetcher
        self._reporter = reporter or ProgressReporter()
        self._sleep = sleep
        self._pacing_delay = pacing_delay
        self._retry_pacing_delay = retry_pacing_delay
        self._retry_delay = retry_delay
        self._max_retries = max_retries
        self._wave_size = wave_size
        self._lookback = latest_round_lookback

    def retry_wait(self, retry_index: int) -> float:
        """Delay before retry wave `retry_index` (1-based); grows linearly."""

        return self._retry_delay * retry_index

    def _fetch_wave(self, rounds: Sequence[int]) -> list[tuple[int, Draw | None]]:
        if len(rounds) == 1:
            return [(rounds[0], self._fetcher.fetch(rounds[0]))]

        # Fetches run side by side; results are only gathered here, in order.
        with ThreadPoolExecutor(max_workers=len(rounds)) as pool:
            futures = [(r, pool.submit(self._fetcher.fetch, r)) for r in rounds]
            return [(r, f.result()) for r, f in futures]

    def _sweep(
        self,
        rounds: Sequence[int],
        collected: dict[int, Draw],
        *,
        pacing: float,
        label: str,
    ) -> list[int]:
        """Fetch `rounds` in waves; store successes and return the rounds that failed."""

        failed: list[int] = []
        total = len(rounds)
        done = 0
        for i in range(0, total, self._wave_size):
            wave = rounds[i : i + self._wave_size]
            for round_no, draw in self._fetch_wave(wave):
                done += 1
                if draw is None:
                    failed.append(round_no)
                    logger.warning("%s: round %s failed", label, round_no)
                else:
                    collected[round_no] = draw
                    logger.debug("%s: round %s -> %s", label, round_no, list(draw.numbers))
            self._reporter.report(
                f"{label}... {round(done * 100 / total)}% (round {wave[-1]})",
                completed=done,
                total=total,
                round_no=wave[-1],
            )
            if i + self._wave_size < total:
                self._sleep(pacing)
        return failed

    def collect(
        self,
        start_round: int,
        end_round: int,
        minimum_count: int,
        run: PipelineRun | None = None,
    ) -> DataSet:
        if start_round < 1:
            raise ValueError("start_round must be >= 1")
        if end_round < start_round:
            raise ValueError(f"end_round ({end_round}) must be >= start_round ({start_round})")

        rounds = list(range(int(start_round), int(end_round) + 1))
        requested = len(rounds)
        collected: dict[int, Draw] = {}

        if run is not None:
            run.transition(PipelineState.FETCHING)
        self._reporter.report(f"Collecting rounds {start_round}..{end_round}", completed=0, total=requested)
        failed = self._sweep(rounds, collected, pacing=self._pacing_delay, label="Collecting")

        retry_index = 0
        while failed and retry_index < self._max_retries:
            retry_index += 1
            if run is not None and run.state is not PipelineState.RETRYING_FAILED:
                run.transition(PipelineState.RETRYING_FAILED)
            wait = self.retry_wait(retry_index)
            self._reporter.report(
                f"Retrying {len(failed)} failed rounds in {wait:g}s ({retry_index}/{self._max_retries})"
            )
            self._sleep(wait)
            still_failed = self._sweep(
                failed, collected, pacing=self._retry_pacing_delay, label=f"Retry {retry_index}"
            )
            recovered = len(failed) - len(still_failed)
            if recovered:
                logger.info("Retry %s recovered %s rounds", retry_index, recovered)
            failed = still_failed

        if len(collected) < minimum_count:
            logger.error(
                "Insufficient data: %s/%s rounds (minimum %s); failed=%s",
                len(collected),
                requested,
                minimum_count,
                failed,
            )
            raise InsufficientDataError(collected=len(collected), requested=requested, minimum=minimum_count)

        dataset = DataSet.from_draws(collected.values(), requested=requested, failed_rounds=failed)
        if dataset.partial:
            self._reporter.report(f"Partial collection: {len(dataset)}/{requested} rounds")
            logger.warning("Partial collection, missing rounds %s", list(dataset.failed_rounds))
        return dataset

    def find_latest_round(self, today: date | None = None) -> int:
        """Walk down from the date-based estimate to the newest round the source has."""

        estimate = estimate_latest_round(today)
        logger.info("Estimated latest round: %s", estimate)
        lowest = max(1, estimate - self._lookback + 1)
        for round_no in range(estimate, lowest - 1, -1):
            if self._fetcher.fetch(round_no) is not None:
                logger.info("Latest round found: %s", round_no)
                return round_no
            self._sleep(0.3)

        fallback = max(1, estimate - 5)
        logger.warning("No round found in lookback window; assuming %s", fallback)
        return fallback
