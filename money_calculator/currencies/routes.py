"""Routes for currency listing and validation."""

from __future__ import annotations

from flask import current_app
from flask.views import MethodView

from money_calculator.providers.base import BaseCurrencySource
from money_calculator.schemas import (
    CurrencyListSchema,
    CurrencySchema,
    CurrencyValidationRequestSchema,
    CurrencyValidationResponseSchema,
    ErrorMessageSchema,
)
from money_calculator.services.currency_registry import registry
from money_calculator.validation import validate_currency_code

from . import blp


def ensure_registry_loaded() -> None:
    """Populate the registry from the configured provider if startup left it empty."""

    source = current_app.extensions.get("rate_provider")
    registry.ensure_loaded(source if isinstance(source, BaseCurrencySource) else None)


@blp.route("")
class CurrencyList(MethodView):
    @blp.response(200, CurrencyListSchema())
    def get(self):
        ensure_registry_loaded()
        currencies = registry.all()
        return {
            "items": [{"code": item.code, "name": item.name} for item in currencies],
            "total": len(currencies),
        }


@blp.route("/validate")
class CurrencyValidation(MethodView):
    @blp.arguments(CurrencyValidationRequestSchema)
    @blp.response(200, CurrencyValidationResponseSchema())
    def post(self, data):
        ensure_registry_loaded()
        validated = validate_currency_code(data.get("code"), field="code")
        return {
            "code": validated,
            "message": "Currency code is valid.",
        }


@blp.route("/<string(length=3):code>")
class CurrencyDetail(MethodView):
    @blp.response(200, CurrencySchema())
    @blp.alt_response(404, schema=ErrorMessageSchema)
    def get(self, code: str):
        ensure_registry_loaded()
        currency = registry.find_by_code(code)
        return {"code": currency.code, "name": currency.name}
