"""Ordered relay templates used to reach the per-round results endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable
from urllib.parse import quote

from lotto_analyzer.config import DEFAULT_SOURCE_URL


@dataclass(frozen=True)
class RelayTemplate:
    name: str
    prefix: str
    # Relays that take the target as a query parameter need it percent-encoded.
    encode_target: bool = True
    # Some relays return {"contents": "<json string>"} instead of the payload.
    envelope_field: str | None = None

    def build(self, target_url: str) -> str:
        target = quote(target_url, safe="") if self.encode_target else target_url
        return f"{self.prefix}{target}"


@dataclass(frozen=True)
class RequestDescriptor:
    relay: str
    url: str
    envelope_field: str | None = None

    @property
    def wrapped(self) -> bool:
        return self.envelope_field is not None


DEFAULT_RELAYS: tuple[RelayTemplate, ...] = (
    RelayTemplate("allorigins", "https://api.allorigins.win/get?url=", envelope_field="contents"),
    RelayTemplate("thingproxy", "https://thingproxy.freeboard.io/fetch/", encode_target=False),
    RelayTemplate("cors-proxy", "https://cors-proxy.htmldriven.com/?url="),
)


class RelayRouter:
    """Enumerate request targets for a round. Performs no I/O."""

    def __init__(
        self,
        relays: Iterable[RelayTemplate] | None = None,
        source_url: str = DEFAULT_SOURCE_URL,
    ) -> None:
        self._relays = tuple(relays) if relays is not None else DEFAULT_RELAYS
        if not self._relays:
            raise ValueError("at least one relay is required")
        self._source_url = source_url

    def target_url(self, round_no: int) -> str:
        return f"{self._source_url}{int(round_no)}"

    def candidates(self, round_no: int) -> list[RequestDescriptor]:
        target = self.target_url(round_no)
        return [
            RequestDescriptor(relay=r.name, url=r.build(target), envelope_field=r.envelope_field)
            for r in self._relays
        ]
