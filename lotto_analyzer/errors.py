"""Custom exceptions for centralized error handling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class AppError(Exception):
    """Base application error."""

    code: str
    message: str
    status_code: int
    details: Any | None = None

    def __str__(self) -> str:
        return self.message


class ValidationError(AppError):
    """Input validation error."""

    def __init__(self, message: str = "Validation error", details: Any | None = None) -> None:
        super().__init__(code="validation_error", message=message, status_code=400, details=details)


class InsufficientDataError(AppError):
    """Fewer valid rounds were collected than the minimum quota."""

    def __init__(self, collected: int, requested: int, minimum: int) -> None:
        super().__init__(
            code="insufficient_data",
            message=f"Collected {collected}/{requested} rounds (at least {minimum} required)",
            status_code=503,
            details={"collected": collected, "requested": requested, "minimum": minimum},
        )
        self.collected = collected
        self.requested = requested
        self.minimum = minimum


class StaleStateError(AppError):
    """Recommendations requested before any successful analysis."""

    def __init__(self, message: str = "Run an analysis first, then request recommendations") -> None:
        super().__init__(code="stale_state", message=message, status_code=409)


class AnalysisInProgressError(AppError):
    """Another analysis run holds the pipeline."""

    def __init__(self, message: str = "An analysis is already in progress") -> None:
        super().__init__(code="analysis_in_progress", message=message, status_code=409)


class SourceUnavailableError(AppError):
    """The remote source could not be reached through any relay."""

    def __init__(self, message: str = "Remote lotto source is unreachable", details: Any | None = None) -> None:
        super().__init__(code="source_unavailable", message=message, status_code=503, details=details)


# Fetch-level failures below never leave the collection layer.


class FetchError(Exception):
    """Base for a failed attempt to obtain one round."""


class TransportError(FetchError):
    """Network failure, timeout or non-success HTTP status on one relay."""


class MalformedResponseError(FetchError):
    """Body could not be decoded or did not describe a valid draw."""


class RoundUnavailable(FetchError):
    """Every relay candidate failed for a round."""

    def __init__(self, round_no: int) -> None:
        super().__init__(f"Round {round_no} unavailable from every relay")
        self.round_no = round_no


class InvalidTransitionError(RuntimeError):
    """Pipeline state machine asked to move along an edge it does not have."""
