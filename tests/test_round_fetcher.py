from __future__ import annotations

import json

import pytest
import requests

from lotto_analyzer.clients.relay_router import RelayRouter, RelayTemplate
from lotto_analyzer.clients.round_fetcher import parse_draw
from lotto_analyzer.errors import MalformedResponseError, RoundUnavailable
from tests.helpers import SOURCE, FakeResponse, fetcher_for, payload


def three_relays() -> RelayRouter:
    return RelayRouter(
        relays=(
            RelayTemplate("wrapped", "https://wrap.test/get?url=", envelope_field="contents"),
            RelayTemplate("raw", "https://raw.test/", encode_target=False),
            RelayTemplate("last", "https://last.test/?url="),
        ),
        source_url=SOURCE,
    )


def test_well_formed_payload_becomes_draw():
    fetcher, _ = fetcher_for(lambda url: FakeResponse(body=payload(1100, (40, 2, 17, 9, 33, 21), bonus=5)))

    draw = fetcher.fetch(1100)

    assert draw is not None
    assert draw.round == 1100
    assert draw.numbers == (2, 9, 17, 21, 33, 40)
    assert draw.bonus == 5
    assert draw.date == "2024-01-06"


def test_envelope_is_decoded_twice():
    def handler(url: str) -> FakeResponse:
        return FakeResponse(body={"contents": json.dumps(payload(900)), "status": {"http_code": 200}})

    fetcher, session = fetcher_for(handler, router=three_relays())
    draw = fetcher.fetch(900)

    assert draw is not None and draw.round == 900
    assert len(session.calls) == 1


@pytest.mark.parametrize(
    "broken",
    [
        {"drwtNo3": None},
        {"drwtNo6": 46},
        {"drwtNo1": 0},
        {"drwtNo2": 3},  # duplicates drwtNo1
        {"returnValue": "fail"},
        {"bnusNo": 99},
        {"drwtNo1": "\u00b3"},  # superscript three: isdigit() but not int()
    ],
)
def test_invalid_payload_is_absent(broken):
    body = payload(10, (3, 8, 13, 21, 34, 44))
    body.update(broken)
    fetcher, _ = fetcher_for(lambda url: FakeResponse(body=body))

    assert fetcher.fetch(10) is None


def test_missing_number_field_is_absent():
    body = payload(10)
    del body["drwtNo4"]
    fetcher, _ = fetcher_for(lambda url: FakeResponse(body=body))

    assert fetcher.fetch(10) is None


def test_falls_through_relays_until_one_is_valid():
    def handler(url: str) -> FakeResponse:
        if url.startswith("https://wrap.test"):
            raise requests.ConnectionError("refused")
        if url.startswith("https://raw.test"):
            return FakeResponse(status_code=502)
        return FakeResponse(body=payload(77))

    fetcher, session = fetcher_for(handler, router=three_relays())
    draw = fetcher.fetch(77)

    assert draw is not None and draw.round == 77
    assert [u.split("/")[2] for u in session.calls] == ["wrap.test", "raw.test", "last.test"]


def test_stops_at_first_valid_relay():
    fetcher, session = fetcher_for(
        lambda url: FakeResponse(body={"contents": json.dumps(payload(5))}), router=three_relays()
    )
    fetcher.fetch(5)
    assert len(session.calls) == 1


def test_each_relay_tried_once_then_absent():
    def handler(url: str) -> FakeResponse:
        if url.startswith("https://wrap.test"):
            return FakeResponse(body={"contents": "<html>rate limited</html>"})
        if url.startswith("https://raw.test"):
            return FakeResponse(text="not json")
        raise requests.Timeout("slow")

    fetcher, session = fetcher_for(handler, router=three_relays())

    assert fetcher.fetch(3) is None
    assert len(session.calls) == 3


def test_require_raises_round_unavailable():
    fetcher, _ = fetcher_for(lambda url: FakeResponse(status_code=404))

    with pytest.raises(RoundUnavailable) as exc_info:
        fetcher.require(12)
    assert exc_info.value.round_no == 12


def test_probe_reports_reachability():
    up, _ = fetcher_for(lambda url: FakeResponse(body=payload(1000)))
    down, _ = fetcher_for(lambda url: FakeResponse(status_code=503))

    assert up.probe() is True
    assert down.probe() is False


def test_numeric_strings_are_accepted():
    body = payload(4, ("1", "2", "3", "4", "5", "6"), bonus=7)
    assert parse_draw(body, 4).numbers == (1, 2, 3, 4, 5, 6)


def test_parse_draw_rejects_non_object():
    with pytest.raises(MalformedResponseError):
        parse_draw(["success"], 1)


def test_undecodable_digit_moves_on_to_next_relay():
    def handler(url: str) -> FakeResponse:
        if url.startswith("https://wrap.test"):
            body = payload(31)
            body["drwtNo1"] = "³"
            return FakeResponse(body={"contents": json.dumps(body)})
        return FakeResponse(body=payload(31, (4, 9, 15, 22, 30, 41)))

    fetcher, session = fetcher_for(handler, router=three_relays())
    draw = fetcher.fetch(31)

    assert draw is not None
    assert draw.numbers == (4, 9, 15, 22, 30, 41)
    assert len(session.calls) == 2
