"""Rates blueprint serving cached exchange rates and cache maintenance."""

from __future__ import annotations

from flask_smorest import Blueprint

blp = Blueprint("Rates", __name__, description="Exchange rate lookups and cache maintenance")

from . import routes  # noqa: E402,F401
