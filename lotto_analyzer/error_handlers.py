"""Centralized error handlers: every failure leaves as the JSON envelope."""

from __future__ import annotations

import logging

from flask import Flask
from marshmallow import ValidationError as MarshmallowValidationError
from werkzeug.exceptions import HTTPException

from lotto_analyzer.errors import AppError, ValidationError
from lotto_analyzer.utils.responses import fail

logger = logging.getLogger(__name__)

_HTTP_CODES = {404: "not_found", 405: "method_not_allowed", 415: "unsupported_media_type"}


def _respond(err: AppError):
    return fail(err.code, err.message, err.status_code, err.details)


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        # 503s mean the remote source let us down, worth seeing in the logs.
        if exc.status_code >= 500:
            logger.warning("%s: %s (%s)", exc.code, exc.message, exc.details)
        return _respond(exc)

    @app.errorhandler(MarshmallowValidationError)
    def _handle_schema_error(exc: MarshmallowValidationError):
        return _respond(ValidationError(message="Invalid request body", details=exc.messages))

    @app.errorhandler(HTTPException)
    def _handle_http_exception(exc: HTTPException):
        status = int(exc.code or 500)
        code = _HTTP_CODES.get(status, "http_error")
        if status == 404:
            return fail(code, "Not found", status)
        return fail(code, exc.description or "HTTP error", status, details={"name": exc.name})

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        logger.exception("Unhandled exception")
        return fail("internal_error", "Internal server error", 500)
