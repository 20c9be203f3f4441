"""Dependency definitions for the Grocer API server."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from grocer.config import get_settings
from grocer.notifications import RecentNotices
from grocer.shopping.service import ShoppingListService
from grocer.shopping.storage import MealPlanStorage


def get_shopping_list_service(request: Request) -> ShoppingListService:
    """Return the service bound to this application instance."""

    return request.app.state.shopping_service


def get_meal_plan_storage(request: Request) -> MealPlanStorage:
    return request.app.state.meal_plan_storage


def get_recent_notices(request: Request) -> RecentNotices:
    return request.app.state.notices


def require_api_token(
    request: Request,
    settings=Depends(get_settings),
) -> None:
    """Ensure requests carry the configured API token when required."""

    token = settings.api_token
    if not token:
        return

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.split("Bearer ")[-1].strip() == token:
        return

    if request.headers.get("X-API-Key") == token:
        return

    if request.query_params.get("api_token") == token:
        return

    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
