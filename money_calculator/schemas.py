"""Schemas for API requests and responses."""

from __future__ import annotations

from marshmallow import Schema, fields


class HealthStatusSchema(Schema):
    status = fields.String(required=True)
    app = fields.String()


class HealthCacheSchema(Schema):
    status = fields.String(required=True)
    provider = fields.String(allow_none=True)
    size = fields.Integer(allow_none=True)
    validity_minutes = fields.Integer(allow_none=True)
    last_sweep = fields.String(allow_none=True)
    last_removed = fields.Integer(allow_none=True)


class CurrencySchema(Schema):
    code = fields.String(required=True)
    name = fields.String(required=True)


class CurrencyListSchema(Schema):
    items = fields.List(fields.Nested(CurrencySchema), required=True)
    total = fields.Integer(required=True)


class CurrencyValidationRequestSchema(Schema):
    code = fields.String(load_default=None)


class CurrencyValidationResponseSchema(Schema):
    code = fields.String(required=True)
    message = fields.String(required=True)


class ExchangeRateSchema(Schema):
    from_currency = fields.String(required=True, data_key="from")
    to_currency = fields.String(required=True, data_key="to")
    rate = fields.Decimal(required=True, as_string=True)
    date = fields.Date(required=True)


class CacheStatsSchema(Schema):
    size = fields.Integer(required=True)
    validity_minutes = fields.Integer(required=True)
    message = fields.String(required=True)


class CacheSweepSchema(Schema):
    removed = fields.Integer(required=True)


class ConversionRequestSchema(Schema):
    amount = fields.Raw(load_default=None)
    from_currency = fields.String(load_default=None, data_key="from")
    to_currency = fields.String(load_default=None, data_key="to")


class ConversionResponseSchema(Schema):
    amount = fields.Decimal(required=True, as_string=True)
    from_currency = fields.String(required=True, data_key="from")
    to_currency = fields.String(required=True, data_key="to")
    converted = fields.Decimal(required=True, as_string=True)
    rate = fields.Decimal(required=True, as_string=True)
    date = fields.Date(required=True)


class MessageSchema(Schema):
    message = fields.String(required=True)


class ErrorMessageSchema(Schema):
    message = fields.String(required=True)
