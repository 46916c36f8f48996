"""FastAPI dependencies resolving per-application services.

Services are created once by the app factory and stored on ``app.state``;
routes receive them through these providers so tests can override them.
"""

from __future__ import annotations

from fastapi import Request

from rental_api.services.accounts import AccountDirectory
from rental_api.services.property_views import PropertyViewCounter


def get_account_directory(request: Request) -> AccountDirectory:
    return request.app.state.accounts


def get_view_counter(request: Request) -> PropertyViewCounter:
    return request.app.state.property_views
