"""Conversions blueprint exchanging an amount between two currencies."""

from __future__ import annotations

from flask_smorest import Blueprint

blp = Blueprint("Conversions", __name__, description="Money conversion endpoints")

from . import routes  # noqa: E402,F401
