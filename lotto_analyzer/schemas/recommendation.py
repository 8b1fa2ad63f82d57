"""Schemas for the recommendation API."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from lotto_analyzer.services.recommendation_service import STRATEGIES


class RecommendationRequestSchema(Schema):
    strategies = fields.List(
        fields.String(validate=validate.OneOf(list(STRATEGIES))),
        required=False,
        load_default=None,
        validate=validate.Length(min=1, max=50),
    )

    # Same seed, same snapshot -> same recommendations.
    seed = fields.Integer(required=False, load_default=None)


class SetMetricsSchema(Schema):
    odd_count = fields.Integer()
    even_count = fields.Integer()
    odd_even = fields.Method("_odd_even")
    sum = fields.Integer()
    range_buckets = fields.Dict(keys=fields.String(), values=fields.Integer())
    column_distribution = fields.List(fields.Integer())
    frequency_class = fields.Dict(keys=fields.String(), values=fields.Integer())

    def _odd_even(self, obj) -> str:  # type: ignore[no-untyped-def]
        return f"{obj.odd_count}:{obj.even_count}"


class StrategyResultSchema(Schema):
    strategy = fields.String(required=True)
    label = fields.String()
    numbers = fields.List(fields.Integer(), required=True)
    metrics = fields.Nested(SetMetricsSchema)
