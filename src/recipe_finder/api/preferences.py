"""Favorite and rating endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from recipe_finder.api.identity import require_caller
from recipe_finder.api.requests import PreferencesRequest, RatingRequest
from recipe_finder.api.serializers import serialize_stored_recipe
from recipe_finder.domain.auth import Caller

if TYPE_CHECKING:
    from recipe_finder.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["preferences"])


@router.post("/recipes/{recipe_id}/favorite")
async def toggle_favorite(
    recipe_id: str, request: Request, caller: Caller = Depends(require_caller)
) -> JSONResponse:
    """Add or remove a recipe from the caller's favorites."""
    container: AppContainer = request.app.state.container
    try:
        result = container.preferences_service.toggle_recipe_favorite(
            recipe_id, caller
        )
    except Exception as exc:
        logger.exception("Failed to toggle favorite", extra={"recipe_id": recipe_id})
        return _server_error(exc, "Failed to toggle favorite")
    return JSONResponse(
        {
            "recipeId": result.recipe_id,
            "isFavorite": result.is_favorite,
            "action": result.action,
        }
    )


@router.put("/recipes/{recipe_id}/rating")
async def set_rating(
    recipe_id: str,
    body: RatingRequest,
    request: Request,
    caller: Caller = Depends(require_caller),
) -> JSONResponse:
    """Set the caller's rating for a recipe."""
    container: AppContainer = request.app.state.container
    try:
        stored = container.preferences_service.set_recipe_rating(
            recipe_id, body.rating, caller
        )
    except Exception as exc:
        logger.exception("Failed to set rating", extra={"recipe_id": recipe_id})
        return _server_error(exc, "Failed to set rating")
    return JSONResponse({"recipeId": recipe_id, "rating": stored})


@router.delete("/recipes/{recipe_id}/rating")
async def remove_rating(
    recipe_id: str, request: Request, caller: Caller = Depends(require_caller)
) -> JSONResponse:
    """Remove the caller's rating for a recipe."""
    container: AppContainer = request.app.state.container
    try:
        container.preferences_service.remove_recipe_rating(recipe_id, caller)
    except Exception as exc:
        logger.exception("Failed to remove rating", extra={"recipe_id": recipe_id})
        return _server_error(exc, "Failed to remove rating")
    return JSONResponse({"recipeId": recipe_id, "removed": True})


@router.post("/preferences")
async def get_preferences(
    body: PreferencesRequest,
    request: Request,
    caller: Caller = Depends(require_caller),
) -> JSONResponse:
    """Return the caller's favorites and ratings for a set of recipes."""
    container: AppContainer = request.app.state.container
    try:
        preferences = container.preferences_service.get_user_recipe_preferences(
            body.recipe_ids, caller
        )
    except Exception as exc:
        logger.exception(
            "Failed to load preferences", extra={"user_id": caller.user_id}
        )
        return _server_error(exc, "Failed to get user preferences")
    return JSONResponse(
        {"favorites": preferences.favorites, "ratings": preferences.ratings}
    )


@router.get("/favorites")
async def list_favorites(
    request: Request, caller: Caller = Depends(require_caller)
) -> JSONResponse:
    """Return the caller's favorite recipes."""
    container: AppContainer = request.app.state.container
    try:
        recipes = container.preferences_service.get_user_favorite_recipes(caller)
    except Exception as exc:
        logger.exception("Failed to list favorites", extra={"user_id": caller.user_id})
        return _server_error(exc, "Failed to get favorite recipes")
    return JSONResponse(
        {"recipes": [serialize_stored_recipe(recipe) for recipe in recipes]}
    )


def _server_error(exc: Exception, fallback: str) -> JSONResponse:
    message = str(exc).strip() or fallback
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": message}
    )
