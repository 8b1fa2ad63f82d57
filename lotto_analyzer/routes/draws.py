"""Collected draws API."""

from __future__ import annotations

from flask import Blueprint

from lotto_analyzer import get_pipeline
from lotto_analyzer.errors import StaleStateError
from lotto_analyzer.schemas.draw import DataSetSchema
from lotto_analyzer.utils.responses import ok


draws_bp = Blueprint("draws", __name__)

_schema = DataSetSchema()


@draws_bp.get("/draws")
def list_draws():
    dataset = get_pipeline().dataset
    if dataset is None:
        raise StaleStateError(message="No draws collected yet; POST /analysis first")
    return ok(_schema.dump(dataset))
