from marshmallow import Schema, fields


class DrawSchema(Schema):
    round = fields.Int()
    date = fields.Str()
    numbers = fields.List(fields.Int())
    bonus = fields.Int()


class DataSetSchema(Schema):
    draws = fields.List(fields.Nested(DrawSchema))
    requested = fields.Int()
    collected = fields.Method("_collected")
    partial = fields.Bool()
    failed_rounds = fields.List(fields.Int())

    def _collected(self, obj):
        return len(obj)
