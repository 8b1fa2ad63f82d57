"""JSON envelope helpers: every endpoint answers {success, data, error[, meta]}."""

from __future__ import annotations

from typing import Any

from flask import Response, jsonify


def _envelope(success: bool, data: Any, error: dict[str, Any] | None, meta: dict[str, Any] | None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": success, "data": data, "error": error}
    if meta:
        body["meta"] = meta
    return body


def ok(data: Any, status_code: int = 200, meta: dict[str, Any] | None = None) -> tuple[Response, int]:
    """Success envelope. `meta` carries side information such as partial-collection flags."""

    return jsonify(_envelope(True, data, None, meta)), status_code


def fail(code: str, message: str, status_code: int, details: Any | None = None) -> tuple[Response, int]:
    """Failure envelope."""

    error = {"code": code, "message": message, "details": details}
    return jsonify(_envelope(False, None, error, None)), status_code
