from __future__ import annotations

from rental_api.api.routes.auth import router as auth_router
from rental_api.api.routes.health import router as health_router
from rental_api.api.routes.properties import router as properties_router

__all__ = ["auth_router", "health_router", "properties_router"]
