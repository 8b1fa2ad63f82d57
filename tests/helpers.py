"""Test doubles: an in-memory HTTP session, payload builders, a recording sleep, a wired pipeline."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from typing import Any

from lotto_analyzer.clients.relay_router import RelayRouter, RelayTemplate
from lotto_analyzer.clients.round_fetcher import RoundFetcher
from lotto_analyzer.models.draw import DataSet, Draw
from lotto_analyzer.services.collection_service import CollectionOrchestrator
from lotto_analyzer.services.frequency_analysis_service import FrequencyAnalyzer
from lotto_analyzer.services.pipeline import AnalysisPipeline
from lotto_analyzer.services.recommendation_service import RecommendationEngine
from lotto_analyzer.utils.progress import ProgressReporter


SOURCE = "https://source.test/lotto?drwNo="


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._body = body
        self._text = text

    def json(self) -> Any:
        if self._text is not None:
            return json.loads(self._text)
        if self._body is None:
            raise ValueError("no body")
        return self._body


Handler = Callable[[str], FakeResponse]


class FakeSession:
    """Answers GETs from a handler; records every URL requested."""

    def __init__(self, handler: Handler) -> None:
        self._handler = handler
        self.calls: list[str] = []

    def get(self, url: str, timeout: float | None = None, **kwargs: Any) -> FakeResponse:
        self.calls.append(url)
        return self._handler(url)


def payload(round_no: int, numbers: Iterable[int] = (3, 11, 19, 27, 35, 43), bonus: int = 7) -> dict[str, Any]:
    nums = list(numbers)
    body: dict[str, Any] = {
        "returnValue": "success",
        "drwNo": round_no,
        "drwNoDate": "2024-01-06",
        "bnusNo": bonus,
    }
    for i, n in enumerate(nums, start=1):
        body[f"drwtNo{i}"] = n
    return body


def round_of(url: str) -> int:
    # Works for both raw and percent-encoded targets.
    tail = url.rsplit("drwNo", 1)[1]
    if tail.startswith("%3D"):
        tail = tail[3:]
    elif tail.startswith("="):
        tail = tail[1:]
    return int(tail)


def direct_router() -> RelayRouter:
    """Single unwrapped relay, so one fake response serves a round."""

    return RelayRouter(
        relays=(RelayTemplate("direct", "", encode_target=False),),
        source_url=SOURCE,
    )


def fetcher_for(handler: Handler, router: RelayRouter | None = None) -> tuple[RoundFetcher, FakeSession]:
    session = FakeSession(handler)
    fetcher = RoundFetcher(router=router or direct_router(), http=session, timeout_seconds=1.0)  # type: ignore[arg-type]
    return fetcher, session


def make_dataset(*number_sets: Iterable[int], first_round: int = 1) -> DataSet:
    draws = [
        Draw(round=first_round + i, date="2024-01-06", numbers=tuple(nums), bonus=45 if 45 not in nums else 44)  # type: ignore[arg-type]
        for i, nums in enumerate(number_sets)
    ]
    return DataSet.from_draws(draws)


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def numbers_for(r: int) -> tuple[int, ...]:
    base = (r * 5) % 38 + 1
    return tuple(base + i for i in (0, 1, 3, 4, 6, 7))


def source(permanent: Iterable[int] = (), down_calls: int = 0, latest: int | None = None) -> Handler:
    """Fake remote: `down_calls` leading 503s, then a distinct draw per round.

    Rounds in `permanent` or above `latest` answer returnValue=fail.
    """

    missing = set(permanent)
    state = {"down": down_calls}

    def handler(url: str) -> FakeResponse:
        if state["down"] > 0:
            state["down"] -= 1
            return FakeResponse(status_code=503)
        r = round_of(url)
        if r in missing or (latest is not None and r > latest):
            return FakeResponse(body={"returnValue": "fail"})
        return FakeResponse(body=payload(r, numbers_for(r)))

    return handler


def make_pipeline(
    handler: Handler,
    sleep: Callable[[float], None],
    *,
    probe: bool = False,
    reporter: ProgressReporter | None = None,
) -> tuple[AnalysisPipeline, FakeSession]:
    fetcher, session = fetcher_for(handler)
    reporter = reporter or ProgressReporter()
    collector = CollectionOrchestrator(fetcher, reporter=reporter, sleep=sleep)
    pipeline = AnalysisPipeline(
        fetcher,
        collector,
        FrequencyAnalyzer(),
        RecommendationEngine(),
        reporter=reporter,
        sleep=sleep,
        probe_connection=probe,
    )
    return pipeline, session
