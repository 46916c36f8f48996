from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request, Response

from rental_api.api.dependencies import get_view_counter
from rental_api.core.rate_limit import (
    RATE_LIMITS,
    add_rate_limit_headers,
    check_rate_limit,
    get_client_ip,
)
from rental_api.schemas.properties import PropertyViewResponse
from rental_api.services.property_views import PropertyViewCounter

router = APIRouter(prefix="/properties", tags=["Properties"])


@router.post("/{property_id}/view", response_model=PropertyViewResponse)
async def record_property_view(
    request: Request,
    response: Response,
    views: Annotated[PropertyViewCounter, Depends(get_view_counter)],
    property_id: str = Path(..., min_length=1, max_length=128),
) -> PropertyViewResponse:
    """Count a view of a property.

    Each client IP counts at most once per property per window; repeat views
    inside the window are answered with 429 and not counted.
    """
    result = check_rate_limit(
        request,
        f"property-view:{get_client_ip(request)}:{property_id}",
        RATE_LIMITS.property_view,
    )

    total = views.increment(property_id)
    add_rate_limit_headers(response, result)
    return PropertyViewResponse(views=total)
