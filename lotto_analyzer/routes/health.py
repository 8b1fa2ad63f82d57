"""Health check routes."""

from __future__ import annotations

from flask import Blueprint

from lotto_analyzer import get_pipeline
from lotto_analyzer.utils.responses import ok

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health_check():
    """Liveness plus whether an analysis is running or available."""

    pipeline = get_pipeline()
    return ok({"status": "ok", "busy": pipeline.busy, "has_snapshot": pipeline.snapshot is not None})
