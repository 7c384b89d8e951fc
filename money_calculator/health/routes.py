"""Route handlers for health checks."""

from __future__ import annotations

from datetime import datetime

from flask import current_app
from flask.views import MethodView

from money_calculator.schemas import HealthCacheSchema, HealthStatusSchema
from money_calculator.services.rate_cache import CACHE_EXT_KEY, CachedRateProvider
from money_calculator.services.scheduler import ensure_sweep_state

from . import blp


@blp.route("")
class HealthStatus(MethodView):
    @blp.response(200, HealthStatusSchema())
    def get(self):
        return {
            "status": "ok",
            "app": current_app.config.get("APP_NAME", "money-calculator"),
        }


@blp.route("/cache")
class HealthCache(MethodView):
    @blp.response(200, HealthCacheSchema())
    def get(self):
        cache: CachedRateProvider | None = current_app.extensions.get(CACHE_EXT_KEY)
        if cache is None:
            return {
                "status": "uninitialized",
                "provider": None,
                "size": None,
                "validity_minutes": None,
                "last_sweep": None,
                "last_removed": None,
            }

        stats = cache.stats()
        state = ensure_sweep_state(current_app)
        last_sweep = state.get("last_sweep")
        return {
            "status": "ok",
            "provider": cache.name,
            "size": stats.size,
            "validity_minutes": stats.validity_minutes,
            "last_sweep": last_sweep.isoformat() if isinstance(last_sweep, datetime) else None,
            "last_removed": state.get("last_removed"),
        }
