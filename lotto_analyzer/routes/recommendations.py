"""Recommendation routes (controllers). No business logic here."""

from __future__ import annotations

import random

from flask import Blueprint, request

from lotto_analyzer import get_pipeline
from lotto_analyzer.schemas.recommendation import RecommendationRequestSchema, StrategyResultSchema
from lotto_analyzer.utils.responses import ok


recommendations_bp = Blueprint("recommendations", __name__)

_request_schema = RecommendationRequestSchema()
_results_schema = StrategyResultSchema(many=True)


@recommendations_bp.post("/recommendations")
def recommend():
    payload = request.get_json(silent=True) or {}
    data = _request_schema.load(payload)

    seed = data.get("seed")
    rng = random.Random(seed) if seed is not None else None

    results = get_pipeline().request_recommendations(strategies=data.get("strategies"), rng=rng)
    return ok(_results_schema.dump(results), meta={"count": len(results), "seed": seed})
