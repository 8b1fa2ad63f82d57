"""Analysis routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, request

from lotto_analyzer import get_pipeline
from lotto_analyzer.errors import StaleStateError
from lotto_analyzer.schemas.analysis import (
    AnalysisRequestSchema,
    AnalysisSnapshotSchema,
    PipelineStatusSchema,
)
from lotto_analyzer.utils.responses import ok

analysis_bp = Blueprint("analysis", __name__)

_request_schema = AnalysisRequestSchema()
_snapshot_schema = AnalysisSnapshotSchema()
_status_schema = PipelineStatusSchema()


def _dataset_meta(pipeline) -> dict[str, object]:  # type: ignore[no-untyped-def]
    dataset = pipeline.dataset
    if dataset is None:
        return {}
    return {
        "requested": dataset.requested,
        "collected": len(dataset),
        "partial": dataset.partial,
        "failed_rounds": list(dataset.failed_rounds),
        "rounds": [dataset.rounds[0], dataset.rounds[-1]] if len(dataset) else [],
    }


@analysis_bp.post("/analysis")
def run_analysis():
    """Collect the requested rounds and analyze them.

    Body (all optional): start_round, end_round, minimum_count. Without a
    range the latest window of rounds is used.
    """

    payload = request.get_json(silent=True) or {}
    data = _request_schema.load(payload)

    pipeline = get_pipeline()
    snapshot = pipeline.request_analysis(
        start_round=data.get("start_round"),
        end_round=data.get("end_round"),
        minimum_count=data.get("minimum_count"),
    )
    return ok(_snapshot_schema.dump(snapshot), meta=_dataset_meta(pipeline))


@analysis_bp.get("/analysis")
def get_analysis():
    pipeline = get_pipeline()
    snapshot = pipeline.snapshot
    if snapshot is None:
        raise StaleStateError(message="No analysis yet; POST /analysis first")
    return ok(_snapshot_schema.dump(snapshot), meta=_dataset_meta(pipeline))


@analysis_bp.get("/analysis/status")
def get_status():
    return ok(_status_schema.dump(get_pipeline().status()))
