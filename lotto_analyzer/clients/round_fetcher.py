"""Fetch and validate one round, falling through relays in order."""

from __future__ import annotations

import json
import logging
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from lotto_analyzer.clients.relay_router import RelayRouter, RequestDescriptor
from lotto_analyzer.errors import MalformedResponseError, RoundUnavailable, TransportError
from lotto_analyzer.models.draw import Draw, in_range


logger = logging.getLogger(__name__)

NUMBER_FIELDS = ("drwtNo1", "drwtNo2", "drwtNo3", "drwtNo4", "drwtNo5", "drwtNo6")
BONUS_FIELD = "bnusNo"
DATE_FIELD = "drwNoDate"
SUCCESS_FIELD = "returnValue"

# A round published long ago; used to check the source is reachable at all.
PROBE_ROUND = 1000


def build_http_session(retries: int = 0, backoff_factor: float = 0.3) -> requests.Session:
    """Create a requests session; `retries` applies per relay before moving on."""

    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=backoff_factor,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=10)

    session = requests.Session()
    session.headers.update({"User-Agent": "Mozilla/5.0", "Accept": "application/json"})
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def _as_number(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdecimal()):
            return None
        try:
            return int(text)
        except ValueError:
            return None
    return None


def parse_draw(payload: Any, round_no: int) -> Draw:
    """Turn a decoded source payload into a Draw or raise MalformedResponseError."""

    if not isinstance(payload, dict):
        raise MalformedResponseError(f"round {round_no}: payload is not an object")
    if payload.get(SUCCESS_FIELD) != "success":
        raise MalformedResponseError(f"round {round_no}: {SUCCESS_FIELD}={payload.get(SUCCESS_FIELD)!r}")

    numbers: list[int] = []
    for name in NUMBER_FIELDS:
        n = _as_number(payload.get(name))
        if n is None or not in_range(n):
            raise MalformedResponseError(f"round {round_no}: bad {name}={payload.get(name)!r}")
        numbers.append(n)
    if len(set(numbers)) != len(numbers):
        raise MalformedResponseError(f"round {round_no}: duplicate numbers {numbers}")

    bonus = _as_number(payload.get(BONUS_FIELD))
    if bonus is None or not in_range(bonus):
        raise MalformedResponseError(f"round {round_no}: bad {BONUS_FIELD}={payload.get(BONUS_FIELD)!r}")

    date = payload.get(DATE_FIELD)
    return Draw(
        round=int(round_no),
        date=str(date) if date is not None else "",
        numbers=tuple(numbers),  # type: ignore[arg-type]
        bonus=bonus,
    )


class RoundFetcher:
    """Try each relay once; the first well-formed draw wins."""

    def __init__(
        self,
        router: RelayRouter | None = None,
        http: requests.Session | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._router = router or RelayRouter()
        self._http = http or build_http_session()
        self._timeout = float(timeout_seconds)

    def _request(self, candidate: RequestDescriptor) -> Any:
        try:
            resp = self._http.get(candidate.url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise TransportError(f"{candidate.relay}: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            raise TransportError(f"{candidate.relay}: HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise MalformedResponseError(f"{candidate.relay}: body is not JSON") from exc

        if not candidate.wrapped:
            return body

        inner = body.get(candidate.envelope_field) if isinstance(body, dict) else None
        if not isinstance(inner, str) or not inner:
            raise MalformedResponseError(f"{candidate.relay}: missing {candidate.envelope_field!r} envelope")
        try:
            return json.loads(inner)
        except ValueError as exc:
            raise MalformedResponseError(f"{candidate.relay}: envelope is not JSON") from exc

    def fetch(self, round_no: int) -> Draw | None:
        """Return the validated draw for a round, or None when every relay failed."""

        for candidate in self._router.candidates(round_no):
            logger.debug("Round %s: trying %s", round_no, candidate.relay)
            try:
                payload = self._request(candidate)
                return parse_draw(payload, round_no)
            except (TransportError, MalformedResponseError) as exc:
                logger.warning("Round %s: %s failed (%s)", round_no, candidate.relay, exc)
                continue

        return None

    def require(self, round_no: int) -> Draw:
        draw = self.fetch(round_no)
        if draw is None:
            raise RoundUnavailable(round_no)
        return draw

    def probe(self, round_no: int = PROBE_ROUND) -> bool:
        """Return True if a known round can be fetched through any relay."""

        try:
            self.require(round_no)
        except RoundUnavailable:
            logger.error("Connection probe failed for round %s", round_no)
            return False
        return True
