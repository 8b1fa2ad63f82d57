"""Top-level triggers: run an analysis, then ask for recommendations."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Mapping
from datetime import date
from threading import Lock
from typing import Any, Callable, Sequence

from lotto_analyzer.clients.relay_router import RelayRouter
from lotto_analyzer.clients.round_fetcher import RoundFetcher, build_http_session
from lotto_analyzer.errors import (
    AnalysisInProgressError,
    AppError,
    SourceUnavailableError,
    StaleStateError,
    ValidationError,
)
from lotto_analyzer.models.draw import DataSet
from lotto_analyzer.services.collection_service import CollectionOrchestrator
from lotto_analyzer.services.frequency_analysis_service import AnalysisSnapshot, FrequencyAnalyzer
from lotto_analyzer.services.pipeline_state import PipelineRun, PipelineState
from lotto_analyzer.services.recommendation_service import RecommendationEngine, StrategyResult
from lotto_analyzer.utils.progress import ProgressReporter


logger = logging.getLogger(__name__)


class AnalysisPipeline:
    def __init__(
        self,
        fetcher: RoundFetcher,
        collector: CollectionOrchestrator,
        analyzer: FrequencyAnalyzer,
        recommender: RecommendationEngine,
        *,
        reporter: ProgressReporter | None = None,
        sleep: Callable[[float], None] = time.sleep,
        round_window: int = 20,
        minimum_rounds: int = 15,
        max_attempts: int = 3,
        backoff_seconds: float = 3.0,
        probe_connection: bool = True,
    ) -> None:
        self._fetcher = fetcher
        self._collector = collector
        self._analyzer = analyzer
        self._recommender = recommender
        self._reporter = reporter or ProgressReporter()
        self._sleep = sleep
        self._round_window = round_window
        self._minimum_rounds = minimum_rounds
        self._max_attempts = max(1, max_attempts)
        self._backoff = backoff_seconds
        self._probe_connection = probe_connection

        self._guard = Lock()
        self._current: PipelineRun = PipelineRun()
        self._latest: PipelineRun | None = None

    @property
    def reporter(self) -> ProgressReporter:
        return self._reporter

    @property
    def current_run(self) -> PipelineRun:
        return self._current

    @property
    def busy(self) -> bool:
        return self._guard.locked()

    @property
    def snapshot(self) -> AnalysisSnapshot | None:
        return self._latest.snapshot if self._latest else None

    @property
    def dataset(self) -> DataSet | None:
        return self._latest.dataset if self._latest else None

    def status(self) -> dict[str, Any]:
        run = self._current
        return {
            "state": run.state.value,
            "busy": self.busy,
            "attempt": run.attempt,
            "max_attempts": self._max_attempts,
            "message": self._reporter.last_message,
            "has_snapshot": self.snapshot is not None,
            "error": str(run.error) if run.error else None,
        }

    def _resolve_range(self, start_round: int | None, end_round: int | None, today: date | None) -> tuple[int, int]:
        if end_round is None:
            self._reporter.report("Checking latest round...")
            end_round = self._collector.find_latest_round(today)
        if start_round is None:
            start_round = max(1, end_round - self._round_window + 1)
        if start_round < 1 or end_round < start_round:
            raise ValidationError(
                message="Invalid round range",
                details={"rounds": [f"Need 1 <= start_round <= end_round, got {start_round}..{end_round}"]},
            )
        return start_round, end_round

    @staticmethod
    def _fail(run: PipelineRun, exc: Exception) -> None:
        run.error = exc
        if run.state is not PipelineState.FAILED:
            run.transition(PipelineState.FAILED)

    def _attempt(
        self,
        run: PipelineRun,
        start_round: int | None,
        end_round: int | None,
        minimum_count: int | None,
        today: date | None,
    ) -> AnalysisSnapshot:
        if self._probe_connection:
            self._reporter.report("Checking connection...")
            if not self._fetcher.probe():
                raise SourceUnavailableError(message="Connection test failed")

        start, end = self._resolve_range(start_round, end_round, today)
        requested = end - start + 1
        # The configured quota is capped at the range size; a caller-given one must fit the range.
        minimum = min(self._minimum_rounds, requested) if minimum_count is None else minimum_count
        if not 1 <= minimum <= requested:
            raise ValidationError(
                message="Unreachable minimum count",
                details={"minimum_count": [f"Need 1 <= minimum_count <= {requested} for rounds {start}..{end}"]},
            )
        self._reporter.report(f"Collecting {requested} rounds ({start}..{end})")
        run.dataset = self._collector.collect(start, end, minimum, run=run)

        run.transition(PipelineState.ANALYZING)
        self._reporter.report("Analyzing...")
        run.snapshot = self._analyzer.analyze(run.dataset)
        run.transition(PipelineState.DONE)
        return run.snapshot

    def request_analysis(
        self,
        start_round: int | None = None,
        end_round: int | None = None,
        minimum_count: int | None = None,
        *,
        today: date | None = None,
    ) -> AnalysisSnapshot:
        """Collect and analyze; overlapping calls are rejected, not queued."""

        if not self._guard.acquire(blocking=False):
            raise AnalysisInProgressError()

        try:
            run = PipelineRun()
            self._current = run

            while True:
                run.attempt += 1
                logger.info("Analysis attempt %s/%s", run.attempt, self._max_attempts)
                try:
                    snapshot = self._attempt(run, start_round, end_round, minimum_count, today)
                except ValidationError as exc:
                    self._fail(run, exc)
                    raise
                except AppError as exc:
                    self._fail(run, exc)
                    if run.attempt >= self._max_attempts:
                        details = dict(exc.details) if isinstance(exc.details, Mapping) else {}
                        details["attempts"] = run.attempt
                        exc.details = details
                        self._reporter.report(
                            f"Analysis failed: {exc.message} (after {run.attempt} attempts)"
                        )
                        raise
                    wait = self._backoff * run.attempt
                    self._reporter.report(
                        f"{exc.message}; retrying in {wait:g}s ({run.attempt}/{self._max_attempts})"
                    )
                    self._sleep(wait)
                    continue
                except Exception as exc:
                    logger.exception("Analysis attempt %s crashed", run.attempt)
                    self._fail(run, exc)
                    raise

                self._latest = run
                dataset = run.dataset
                self._reporter.report(
                    f"Analysis complete: {len(dataset) if dataset else 0} rounds analyzed"
                )
                return snapshot
        finally:
            self._guard.release()

    def request_recommendations(
        self,
        strategies: Sequence[str] | None = None,
        rng: random.Random | None = None,
    ) -> list[StrategyResult]:
        snapshot = self.snapshot
        if snapshot is None:
            raise StaleStateError()
        return self._recommender.generate_batch(snapshot, rng=rng, strategies=strategies)


def build_pipeline(config: Mapping[str, Any], *, reporter: ProgressReporter | None = None) -> AnalysisPipeline:
    """Wire the pipeline from Flask-style uppercase config keys."""

    reporter = reporter or ProgressReporter()
    http = build_http_session(
        retries=int(config.get("HTTP_RETRIES", 0)),
        backoff_factor=float(config.get("HTTP_BACKOFF_FACTOR", 0.3)),
    )
    router = RelayRouter(source_url=str(config["SOURCE_URL"])) if config.get("SOURCE_URL") else RelayRouter()
    fetcher = RoundFetcher(
        router=router,
        http=http,
        timeout_seconds=float(config.get("REQUEST_TIMEOUT_SECONDS", 10.0)),
    )
    collector = CollectionOrchestrator(
        fetcher,
        reporter=reporter,
        pacing_delay=float(config.get("PACING_DELAY_SECONDS", 0.4)),
        retry_pacing_delay=float(config.get("RETRY_PACING_DELAY_SECONDS", 0.5)),
        retry_delay=float(config.get("RETRY_DELAY_SECONDS", 2.0)),
        max_retries=int(config.get("MAX_BATCH_RETRIES", 3)),
        wave_size=int(config.get("WAVE_SIZE", 1)),
        latest_round_lookback=int(config.get("LATEST_ROUND_LOOKBACK", 30)),
    )
    return AnalysisPipeline(
        fetcher,
        collector,
        FrequencyAnalyzer(
            hot_threshold=int(config.get("HOT_THRESHOLD", 3)),
            cold_threshold=int(config.get("COLD_THRESHOLD", 1)),
        ),
        RecommendationEngine(duplicate_attempts=int(config.get("DUPLICATE_ATTEMPTS", 10))),
        reporter=reporter,
        round_window=int(config.get("ROUND_WINDOW", 20)),
        minimum_rounds=int(config.get("MINIMUM_ROUNDS", 15)),
        max_attempts=int(config.get("ANALYSIS_MAX_ATTEMPTS", 3)),
        backoff_seconds=float(config.get("ANALYSIS_BACKOFF_SECONDS", 3.0)),
    )
