"""ASGI application for Grocer."""
# mypy: ignore-errors

from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Optional
from uuid import uuid4

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field

from grocer import __version__, metrics
from grocer.config import Settings, get_settings
from grocer.db.kv_store import DatabaseKeyValueStore
from grocer.logging_utils import configure_logging as configure_app_logging
from grocer.models.actions import Notice, UndoAction
from grocer.models.grocery import GroceryCategory, GroceryItem, NewGroceryItem
from grocer.models.meal import Meal
from grocer.notifications import RecentNotices
from grocer.server import deps
from grocer.shopping.grouping import SortKey, group_items, sort_items
from grocer.shopping.service import ShoppingListService
from grocer.shopping.storage import MealPlanStorage

logger = logging.getLogger(__name__)


class ShoppingListView(BaseModel):
    active: list[GroceryItem]
    archived: list[GroceryItem]
    stores: list[str]
    revision: int
    can_undo: bool
    can_redo: bool


class ItemUpdateRequest(BaseModel):
    """Partial item update; omitted fields keep their current values."""

    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[GroceryCategory] = Field(default=None)
    quantity: Optional[str] = Field(default=None)
    checked: Optional[bool] = Field(default=None)
    meal: Optional[str] = Field(default=None)
    store: Optional[str] = Field(default=None)
    department: Optional[str] = Field(default=None)


class BulkUpdateRequest(BaseModel):
    ids: list[str] = Field(min_length=1)
    changes: dict[str, Any]


class StoresRequest(BaseModel):
    stores: list[str]


class CategoryLabelRequest(BaseModel):
    label: Optional[str] = Field(default=None)


class ResetResponse(BaseModel):
    already_empty: bool
    archived: list[GroceryItem]


class HistoryResponse(BaseModel):
    action: Optional[UndoAction]
    applied: bool


class SyncResponse(BaseModel):
    changed: bool
    added: list[GroceryItem]
    retired: list[GroceryItem]


def _configure_logging(settings: Settings) -> None:
    configure_app_logging(settings.log_level, settings.log_format, [settings.api_token or ""])


def _not_found(item_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Item {item_id} not found")


def _sync_from_storage(service: ShoppingListService, meal_plan: MealPlanStorage) -> SyncResponse:
    result = service.sync(meal_plan.load_meals(), meal_plan.load_pantry())
    if result is None:
        return SyncResponse(changed=False, added=[], retired=[])
    return SyncResponse(changed=result.changed, added=result.added, retired=result.dropped)


def create_app() -> FastAPI:
    """Create and configure a FastAPI application instance."""

    settings = get_settings()
    _configure_logging(settings)

    application = FastAPI(title="Grocer Shopping List", version=__version__)

    store = DatabaseKeyValueStore()
    notices = RecentNotices()
    service = ShoppingListService.from_settings(store, settings, notifier=notices)
    meal_plan = MealPlanStorage(store)
    _sync_from_storage(service, meal_plan)

    application.state.shopping_service = service
    application.state.meal_plan_storage = meal_plan
    application.state.notices = notices
    logger.debug("Application created with log level %s", settings.log_level)

    if settings.log_requests:
        access_logger = logging.getLogger("grocer.access")

        @application.middleware("http")
        async def log_request_response(request: Request, call_next):
            """Log request/response details without leaking sensitive data."""

            request_id = request.headers.get("X-Request-ID") or uuid4().hex
            request.state.request_id = request_id
            start = perf_counter()
            path = request.url.path
            method = request.method
            try:
                response: Response = await call_next(request)
            except Exception:
                duration_ms = (perf_counter() - start) * 1000
                access_logger.exception(
                    "HTTP %s %s status=500 duration_ms=%.2f",
                    method,
                    path,
                    duration_ms,
                    extra={"request_id": request_id},
                )
                metrics.REQUEST_COUNT.labels(method=method, path=path, status="500").inc()
                metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000.0)
                raise

            duration_ms = (perf_counter() - start) * 1000
            response.headers.setdefault("X-Request-ID", request_id)
            access_logger.info(
                "HTTP %s %s status=%s duration_ms=%.2f",
                method,
                path,
                response.status_code,
                duration_ms,
                extra={"request_id": request_id},
            )
            metrics.REQUEST_COUNT.labels(method=method, path=path, status=str(response.status_code)).inc()
            metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000.0)
            return response

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        log_kwargs: dict[str, Any] = {}
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            log_kwargs["extra"] = {"request_id": request_id}

        logger.warning(
            "Validation error on %s %s: %s",
            request.method,
            request.url.path,
            exc.errors(),
            **log_kwargs,
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": jsonable_errors(exc.errors())},
        )

    @application.get(
        "/shopping-list",
        response_model=ShoppingListView,
        summary="Current shopping list state",
    )
    def shopping_list_view(
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> ShoppingListView:
        return ShoppingListView(
            active=sort_items(service.active_items),
            archived=service.archived_items,
            stores=service.available_stores,
            revision=service.revision,
            can_undo=service.history.can_undo,
            can_redo=service.history.can_redo,
        )

    @application.get(
        "/shopping-list/grouped",
        summary="Active items grouped for display",
    )
    def shopping_list_grouped(
        by_store: bool = Query(True),
        sort_by: SortKey = Query("category"),
        search: str = Query(""),
        store: Optional[str] = Query(None),
        archived: bool = Query(False, description="Group archived items instead of active ones."),
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> dict[str, Any]:
        items = service.archived_items if archived else service.active_items
        groups = group_items(
            items,
            by_store=by_store,
            sort_by=sort_by,
            search=search,
            store=store,
            labels=service.category_labels,
        )
        return {"groups": jsonable_groups(groups)}

    @application.post(
        "/shopping-list/items",
        response_model=GroceryItem,
        status_code=status.HTTP_201_CREATED,
        summary="Add a manual shopping list item",
    )
    def shopping_list_add(
        payload: NewGroceryItem = Body(...),
        auth: None = Depends(deps.require_api_token),
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> GroceryItem:
        return service.add_item(payload)

    @application.patch(
        "/shopping-list/items",
        response_model=list[GroceryItem],
        summary="Apply the same changes to several items",
    )
    def shopping_list_bulk_update(
        payload: BulkUpdateRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> list[GroceryItem]:
        if not payload.changes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No fields provided for update",
            )
        try:
            return service.update_items(payload.ids, payload.changes)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    @application.put(
        "/shopping-list/items/{item_id}",
        response_model=GroceryItem,
        summary="Update a shopping list item",
    )
    def shopping_list_update(
        item_id: str,
        payload: ItemUpdateRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> GroceryItem:
        current = service.items.get_item(item_id)
        if current is None:
            raise _not_found(item_id)
        changes = payload.model_dump(exclude_unset=True)
        for key in ("name", "category", "quantity", "checked"):
            if key in changes and changes[key] is None:
                changes.pop(key)
        item = current.model_copy(update=changes)
        updated = service.update_item(item)
        if updated is None:
            raise _not_found(item_id)
        return updated

    @application.post(
        "/shopping-list/items/{item_id}/toggle",
        response_model=GroceryItem,
        summary="Check or uncheck an item",
    )
    def shopping_list_toggle(
        item_id: str,
        auth: None = Depends(deps.require_api_token),
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> GroceryItem:
        toggled = service.toggle_item(item_id)
        if toggled is None:
            raise _not_found(item_id)
        return toggled

    @application.post(
        "/shopping-list/items/{item_id}/archive",
        response_model=GroceryItem,
        summary="Move an item to the archive",
    )
    def shopping_list_archive(
        item_id: str,
        auth: None = Depends(deps.require_api_token),
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> GroceryItem:
        archived = service.archive_item(item_id)
        if archived is None:
            raise _not_found(item_id)
        return archived

    @application.post(
        "/shopping-list/items/{item_id}/restore",
        response_model=GroceryItem,
        summary="Bring an archived item back",
    )
    def shopping_list_restore(
        item_id: str,
        auth: None = Depends(deps.require_api_token),
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> GroceryItem:
        restored = service.restore_item(item_id)
        if restored is None:
            raise _not_found(item_id)
        return restored

    @application.put(
        "/shopping-list/stores",
        response_model=list[str],
        summary="Replace the store catalog",
    )
    def shopping_list_stores(
        payload: StoresRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> list[str]:
        service.update_stores(payload.stores)
        return service.available_stores

    @application.get(
        "/shopping-list/categories",
        response_model=dict[str, str],
        summary="Category display names",
    )
    def shopping_list_categories(
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> dict[str, str]:
        return service.category_labels

    @application.put(
        "/shopping-list/categories/{category}",
        response_model=dict[str, str],
        summary="Rename a category; an empty label restores the default",
    )
    def shopping_list_rename_category(
        category: GroceryCategory,
        payload: CategoryLabelRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> dict[str, str]:
        service.rename_category(category, payload.label)
        return service.category_labels

    @application.post(
        "/shopping-list/reset",
        response_model=ResetResponse,
        summary="Archive every item on the list",
    )
    def shopping_list_reset(
        auth: None = Depends(deps.require_api_token),
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> ResetResponse:
        outcome = service.reset_list()
        return ResetResponse(already_empty=outcome.already_empty, archived=outcome.archived)

    @application.delete(
        "/shopping-list/archive",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Remove all archived items",
    )
    def shopping_list_clear_archive(
        auth: None = Depends(deps.require_api_token),
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> None:
        service.clear_archive()

    @application.post("/shopping-list/undo", response_model=HistoryResponse, summary="Undo last action")
    def shopping_list_undo(
        auth: None = Depends(deps.require_api_token),
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> HistoryResponse:
        outcome = service.undo()
        return HistoryResponse(action=outcome.action, applied=outcome.applied)

    @application.post("/shopping-list/redo", response_model=HistoryResponse, summary="Redo last undone action")
    def shopping_list_redo(
        auth: None = Depends(deps.require_api_token),
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> HistoryResponse:
        outcome = service.redo()
        return HistoryResponse(action=outcome.action, applied=outcome.applied)

    @application.get("/notices", response_model=list[Notice], summary="Drain pending notices")
    def notices_drain(recent: RecentNotices = Depends(deps.get_recent_notices)) -> list[Notice]:
        return recent.drain()

    @application.get("/meal-plan/meals", response_model=list[Meal], summary="Planned meals")
    def meal_plan_meals(meal_plan: MealPlanStorage = Depends(deps.get_meal_plan_storage)) -> list[Meal]:
        return meal_plan.load_meals()

    @application.put(
        "/meal-plan/meals",
        response_model=SyncResponse,
        summary="Replace planned meals and regenerate the list",
    )
    def meal_plan_meals_update(
        meals: list[Meal] = Body(...),
        auth: None = Depends(deps.require_api_token),
        meal_plan: MealPlanStorage = Depends(deps.get_meal_plan_storage),
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> SyncResponse:
        meal_plan.save_meals(meals)
        return _sync_from_storage(service, meal_plan)

    @application.get("/meal-plan/pantry", response_model=list[str], summary="Pantry inventory")
    def meal_plan_pantry(meal_plan: MealPlanStorage = Depends(deps.get_meal_plan_storage)) -> list[str]:
        return meal_plan.load_pantry()

    @application.put(
        "/meal-plan/pantry",
        response_model=SyncResponse,
        summary="Replace pantry inventory and regenerate the list",
    )
    def meal_plan_pantry_update(
        pantry: list[str] = Body(...),
        auth: None = Depends(deps.require_api_token),
        meal_plan: MealPlanStorage = Depends(deps.get_meal_plan_storage),
        service: ShoppingListService = Depends(deps.get_shopping_list_service),
    ) -> SyncResponse:
        meal_plan.save_pantry(pantry)
        return _sync_from_storage(service, meal_plan)

    @application.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @application.get("/healthz", summary="Liveness probe")
    def healthz() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return application


def jsonable_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Ensure validation error payloads can be serialized to JSON."""

    def _safe(value: Any) -> Any:
        if isinstance(value, (str, int, float, bool)) or value is None:
            return value
        if isinstance(value, (list, tuple)):
            return [_safe(entry) for entry in value]
        if isinstance(value, dict):
            return {key: _safe(sub_value) for key, sub_value in value.items()}
        return repr(value)

    return [{key: _safe(value) for key, value in error.items()} for error in errors]


def jsonable_groups(groups: dict[str, Any]) -> dict[str, Any]:
    def _dump(value: Any) -> Any:
        if isinstance(value, dict):
            return {key: _dump(sub_value) for key, sub_value in value.items()}
        return [item.model_dump(mode="json") for item in value]

    return _dump(groups)


__all__ = ["create_app"]
