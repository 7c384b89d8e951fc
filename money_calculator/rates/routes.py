"""Routes for exchange rate lookups and rate cache maintenance."""

from __future__ import annotations

from flask import current_app
from flask.views import MethodView

from money_calculator.currencies.routes import ensure_registry_loaded
from money_calculator.errors import APIError, ValidationError
from money_calculator.schemas import (
    CacheStatsSchema,
    CacheSweepSchema,
    ErrorMessageSchema,
    ExchangeRateSchema,
    MessageSchema,
)
from money_calculator.services.rate_cache import CACHE_EXT_KEY, CachedRateProvider
from money_calculator.services.scheduler import run_sweep
from money_calculator.validation import validate_currency_code

from . import blp


def get_rate_cache() -> CachedRateProvider:
    cache: CachedRateProvider | None = current_app.extensions.get(CACHE_EXT_KEY)
    if cache is None:
        raise APIError("Rate cache unavailable.", status_code=503)
    return cache


@blp.route("/<string(length=3):from_code>/<string(length=3):to_code>")
class PairRate(MethodView):
    @blp.response(200, ExchangeRateSchema())
    @blp.alt_response(502, schema=ErrorMessageSchema)
    def get(self, from_code: str, to_code: str):
        ensure_registry_loaded()
        source = validate_currency_code(from_code, field="from")
        target = validate_currency_code(to_code, field="to")
        if source == target:
            raise ValidationError(
                "Source and target currencies must be different.", payload={"field": "to"}
            )
        rate = get_rate_cache().get_rate(source, target)
        return {
            "from_currency": rate.from_currency.code,
            "to_currency": rate.to_currency.code,
            "rate": rate.rate,
            "date": rate.date,
        }


@blp.route("/cache")
class RateCache(MethodView):
    @blp.response(200, CacheStatsSchema())
    def get(self):
        stats = get_rate_cache().stats()
        return {
            "size": stats.size,
            "validity_minutes": stats.validity_minutes,
            "message": stats.describe(),
        }

    @blp.response(200, MessageSchema())
    def delete(self):
        get_rate_cache().invalidate_all()
        return {"message": "Rate cache cleared."}


@blp.route("/cache/sweep")
class RateCacheSweep(MethodView):
    @blp.response(200, CacheSweepSchema())
    def post(self):
        get_rate_cache()
        removed = run_sweep(current_app._get_current_object())  # type: ignore[attr-defined]
        return {"removed": removed or 0}
