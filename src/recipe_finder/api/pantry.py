"""Pantry endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from recipe_finder.api.identity import require_caller
from recipe_finder.api.requests import PantryCreateRequest, PantryUpdateRequest
from recipe_finder.api.serializers import serialize_ingredient, serialize_pantry_item
from recipe_finder.api.validation import InvalidRequestError
from recipe_finder.domain.auth import Caller
from recipe_finder.services.pantry import (
    PantryItemExistsError,
    PantryItemNotFoundError,
)

if TYPE_CHECKING:
    from recipe_finder.containers import AppContainer

router = APIRouter(
    prefix="/api/pantry", tags=["pantry"], dependencies=[Depends(require_caller)]
)


@router.get("")
async def list_pantry_items(
    request: Request, caller: Caller = Depends(require_caller)
) -> dict[str, object]:
    """Return the caller's pantry items."""
    container: AppContainer = request.app.state.container
    items = container.pantry_service.get_pantry_items(caller.user_id)
    return {"items": [serialize_pantry_item(item) for item in items]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_pantry_item(
    body: PantryCreateRequest,
    request: Request,
    caller: Caller = Depends(require_caller),
) -> JSONResponse:
    """Add an ingredient to the caller's pantry."""
    container: AppContainer = request.app.state.container
    try:
        item = container.pantry_service.add_pantry_item(
            caller.user_id, body.ingredient_name
        )
    except PantryItemExistsError as exc:
        return _error(status.HTTP_409_CONFLICT, str(exc))
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"item": serialize_pantry_item(item)},
    )


@router.patch("/{item_id}")
async def update_pantry_item(
    item_id: str,
    body: PantryUpdateRequest,
    request: Request,
    caller: Caller = Depends(require_caller),
) -> JSONResponse:
    """Update the ingredient, quantity or unit of one of the caller's items."""
    container: AppContainer = request.app.state.container
    try:
        item = container.pantry_service.update_pantry_item(
            item_id,
            caller.user_id,
            ingredient_name=body.ingredient_name,
            quantity=body.quantity,
            unit=body.unit,
        )
    except PantryItemNotFoundError as exc:
        return _error(status.HTTP_404_NOT_FOUND, str(exc))
    except PantryItemExistsError as exc:
        return _error(status.HTTP_409_CONFLICT, str(exc))
    except ValueError as exc:
        raise InvalidRequestError(str(exc)) from exc
    return JSONResponse({"item": serialize_pantry_item(item)})


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_pantry_item(
    item_id: str, request: Request, caller: Caller = Depends(require_caller)
) -> Response:
    """Remove one of the caller's pantry items."""
    container: AppContainer = request.app.state.container
    try:
        container.pantry_service.remove_pantry_item(item_id, caller.user_id)
    except PantryItemNotFoundError as exc:
        return _error(status.HTTP_404_NOT_FOUND, str(exc))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/ingredients")
async def search_ingredients(request: Request, q: str = "") -> dict[str, object]:
    """Search known ingredient names."""
    container: AppContainer = request.app.state.container
    ingredients = container.pantry_service.search_ingredients_by_name(q)
    return {"ingredients": [serialize_ingredient(item) for item in ingredients]}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})
