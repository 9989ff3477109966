"""
Subscribe blueprint bootstrap.

Route definitions live in subscribe/routes.py; importing here keeps them colocated.
"""

from __future__ import annotations
from flask import Blueprint

bp = Blueprint("subscribe", __name__)

from . import routes  # noqa: E402,F401
