"""Schemas for the analysis API."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema


class AnalysisRequestSchema(Schema):
    start_round = fields.Integer(required=False, load_default=None, validate=validate.Range(min=1))
    end_round = fields.Integer(required=False, load_default=None, validate=validate.Range(min=1))
    minimum_count = fields.Integer(required=False, load_default=None, validate=validate.Range(min=1, max=500))

    @validates_schema
    def _validate_range(self, data, **kwargs):  # type: ignore[no-untyped-def]
        start = data.get("start_round")
        end = data.get("end_round")
        if start is not None and end is None:
            raise ValidationError({"end_round": ["end_round is required when start_round is given"]})
        if start is not None and end is not None and start > end:
            raise ValidationError({"start_round": ["start_round must be <= end_round"]})
        minimum = data.get("minimum_count")
        if minimum is not None and start is not None and end is not None and minimum > end - start + 1:
            raise ValidationError({"minimum_count": ["minimum_count cannot exceed the number of requested rounds"]})


class ColumnStatSchema(Schema):
    index = fields.Integer()
    label = fields.Method("_label")
    numbers = fields.List(fields.Integer())
    total = fields.Integer()
    avg_per_round = fields.Float()
    avg_per_number = fields.Float()

    def _label(self, obj) -> str:  # type: ignore[no-untyped-def]
        return f"{obj.numbers[0]}-{obj.numbers[-1]}"


class RoundColumnsSchema(Schema):
    round = fields.Integer()
    date = fields.String()
    numbers = fields.List(fields.Integer())
    column_distribution = fields.List(fields.Integer())


class SummaryStatsSchema(Schema):
    total_numbers = fields.Integer()
    most_frequent = fields.Method("_most")
    least_frequent = fields.Method("_least")
    average_frequency = fields.Float()
    consecutive_rounds = fields.Integer()
    sum_ranges = fields.Dict(keys=fields.String(), values=fields.Integer())
    odd_even = fields.Dict(keys=fields.String(), values=fields.Integer())

    def _most(self, obj) -> dict[str, int]:  # type: ignore[no-untyped-def]
        number, count = obj.most_frequent
        return {"number": number, "count": count}

    def _least(self, obj) -> dict[str, int]:  # type: ignore[no-untyped-def]
        number, count = obj.least_frequent
        return {"number": number, "count": count}


class AnalysisSnapshotSchema(Schema):
    total_rounds = fields.Integer()
    hot_threshold = fields.Integer()
    cold_threshold = fields.Integer()
    # JSON object keys are strings; keep them numeric-looking ("1".."45").
    frequency = fields.Dict(keys=fields.String(), values=fields.Integer())
    hot = fields.Method("_hot")
    cold = fields.Method("_cold")
    medium = fields.List(fields.Integer())
    columns = fields.List(fields.Nested(ColumnStatSchema))
    column_totals = fields.List(fields.Integer())
    column_by_round = fields.List(fields.Nested(RoundColumnsSchema))
    summary = fields.Nested(SummaryStatsSchema)

    @staticmethod
    def _ranked(obj, numbers) -> list[dict[str, object]]:  # type: ignore[no-untyped-def]
        total = obj.total_rounds or 1
        return [
            {
                "number": n,
                "frequency": obj.frequency[n],
                "percentage": round(obj.frequency[n] * 100 / total, 1),
            }
            for n in numbers
        ]

    def _hot(self, obj) -> list[dict[str, object]]:  # type: ignore[no-untyped-def]
        return self._ranked(obj, obj.hot)

    def _cold(self, obj) -> list[dict[str, object]]:  # type: ignore[no-untyped-def]
        return self._ranked(obj, obj.cold)


class PipelineStatusSchema(Schema):
    state = fields.String()
    busy = fields.Boolean()
    attempt = fields.Integer()
    max_attempts = fields.Integer()
    message = fields.String(allow_none=True)
    has_snapshot = fields.Boolean()
    error = fields.String(allow_none=True)
