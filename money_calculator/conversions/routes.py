"""Route handlers for money conversions."""

from __future__ import annotations

from flask.views import MethodView

from money_calculator.currencies.routes import ensure_registry_loaded
from money_calculator.errors import ValidationError
from money_calculator.rates.routes import get_rate_cache
from money_calculator.schemas import (
    ConversionRequestSchema,
    ConversionResponseSchema,
    ErrorMessageSchema,
)
from money_calculator.services.fx_conversion import ExchangeService, Money
from money_calculator.validation import validate_amount, validate_currency_code

from . import blp


@blp.route("")
class Conversions(MethodView):
    @blp.arguments(ConversionRequestSchema)
    @blp.response(200, ConversionResponseSchema())
    @blp.alt_response(502, schema=ErrorMessageSchema)
    def post(self, data):
        ensure_registry_loaded()
        amount = validate_amount(data.get("amount"))
        source = validate_currency_code(data.get("from_currency"), field="from")
        target = validate_currency_code(data.get("to_currency"), field="to")
        if source == target:
            raise ValidationError(
                "Source and target currencies must be different.", payload={"field": "to"}
            )

        result = ExchangeService(get_rate_cache()).exchange(Money(amount, source), target)
        return {
            "amount": result.source.amount,
            "from_currency": result.source.currency.code,
            "to_currency": result.converted.currency.code,
            "converted": result.converted.amount,
            "rate": result.rate.rate,
            "date": result.rate.date,
        }
