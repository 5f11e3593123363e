"""FastAPI application factory."""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from recipe_finder.api.pantry import router as pantry_router
from recipe_finder.api.preferences import router as preferences_router
from recipe_finder.api.requests import RefineRequest, validation_error_message
from recipe_finder.api.serializers import serialize_stored_recipe
from recipe_finder.api.validation import (
    InvalidRequestError,
    parse_ingredients,
    parse_meal_type,
    read_json_body,
)
from recipe_finder.app_logging import configure_logging
from recipe_finder.config import parse_allowed_origins
from recipe_finder.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_allowed_origins(container.settings.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InvalidRequestError)
    async def invalid_request(_: Request, exc: InvalidRequestError) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(RequestValidationError)
    async def invalid_body(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info(
            "Rejected request body",
            extra={
                "path": request.url.path,
                "fields": [error.get("loc") for error in exc.errors()],
            },
        )
        return _error_response(
            status.HTTP_400_BAD_REQUEST, validation_error_message(exc.errors())
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            _error_message(exc, "Internal server error"),
        )

    app.include_router(preferences_router)
    app.include_router(pantry_router)

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/recipes")
    async def generate_recipes(request: Request) -> JSONResponse:
        """Generate recipes from ingredients and store them best-effort."""
        state_container: AppContainer = request.app.state.container
        payload = await read_json_body(request)
        ingredients = parse_ingredients(payload)
        meal_type = parse_meal_type(payload)
        try:
            recipes = await state_container.recipe_generator.generate_recipes(
                ingredients, meal_type
            )
        except Exception as exc:
            logger.exception(
                "Failed to generate recipes", extra={"ingredients": ingredients}
            )
            return _error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                _error_message(exc, "Failed to generate recipes"),
            )
        await state_container.recipe_service.store_generated_recipes(
            recipes, ingredients, meal_type
        )
        return JSONResponse({"recipes": [recipe.to_payload() for recipe in recipes]})

    @app.post("/api/recipes/refine")
    async def refine_recipe(request: Request, body: RefineRequest) -> JSONResponse:
        """Refine a recipe following a user instruction."""
        state_container: AppContainer = request.app.state.container
        recipe, instruction = body.recipe.to_recipe(), body.instruction
        try:
            refined = await state_container.recipe_generator.refine_recipe(
                recipe, instruction
            )
        except Exception as exc:
            logger.exception("Failed to refine recipe", extra={"recipe_id": recipe.id})
            return _error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                _error_message(exc, "Failed to refine recipe"),
            )
        try:
            state_container.recipe_service.update_recipe(
                refined.id, refined, instruction
            )
        except Exception:
            logger.exception(
                "Failed to persist refined recipe", extra={"recipe_id": refined.id}
            )
        return JSONResponse({"refinedRecipe": refined.to_payload()})

    @app.post("/api/recipes/search")
    async def search_recipes(request: Request) -> JSONResponse:
        """Search stored recipes by ingredient names."""
        state_container: AppContainer = request.app.state.container
        payload = await read_json_body(request)
        ingredients = parse_ingredients(payload)
        try:
            recipes = state_container.recipe_service.search_recipes_by_ingredients(
                ingredients
            )
        except Exception as exc:
            logger.exception("Failed to search recipes")
            return _error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                _error_message(exc, "Failed to search recipes"),
            )
        return JSONResponse(
            {"recipes": [serialize_stored_recipe(recipe) for recipe in recipes]}
        )

    @app.get("/api/recipes")
    async def list_recipes(
        request: Request, meal_type: str | None = Query(default=None, alias="mealType")
    ) -> JSONResponse:
        """Return stored recipes, optionally filtered by meal type."""
        state_container: AppContainer = request.app.state.container
        try:
            recipes = state_container.recipe_service.get_all_recipes(meal_type)
        except Exception as exc:
            logger.exception("Failed to list recipes")
            return _error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                _error_message(exc, "Failed to fetch recipes"),
            )
        return JSONResponse(
            {"recipes": [serialize_stored_recipe(recipe) for recipe in recipes]}
        )

    @app.get("/api/recipes/{recipe_id}")
    async def get_recipe(recipe_id: str, request: Request) -> JSONResponse:
        """Return a stored recipe by id."""
        state_container: AppContainer = request.app.state.container
        try:
            recipe = state_container.recipe_service.get_recipe_by_id(recipe_id)
        except Exception as exc:
            logger.exception("Failed to fetch recipe", extra={"recipe_id": recipe_id})
            return _error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                _error_message(exc, "Failed to fetch recipe"),
            )
        if recipe is None:
            return _error_response(status.HTTP_404_NOT_FOUND, "Recipe not found")
        return JSONResponse({"recipe": serialize_stored_recipe(recipe)})

    @app.get("/api/recipes/{recipe_id}/refinements")
    async def get_refinements(recipe_id: str, request: Request) -> JSONResponse:
        """Return recipes refined from the given recipe."""
        state_container: AppContainer = request.app.state.container
        try:
            recipes = state_container.recipe_service.get_recipe_refinements(recipe_id)
        except Exception as exc:
            logger.exception(
                "Failed to fetch refinements", extra={"recipe_id": recipe_id}
            )
            return _error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                _error_message(exc, "Failed to fetch recipe refinements"),
            )
        return JSONResponse(
            {"recipes": [serialize_stored_recipe(recipe) for recipe in recipes]}
        )

    @app.post("/api/debug/recipes")
    async def debug_generate_recipes(request: Request) -> JSONResponse:
        """Generate recipes and report timing and diagnostics."""
        state_container: AppContainer = request.app.state.container
        started = time.perf_counter()
        payload = await read_json_body(request)
        raw_input = payload.get("ingredients")
        debug: dict[str, object] = {"timestamp": _timestamp(), "input": raw_input}
        try:
            ingredients = parse_ingredients(payload)
        except InvalidRequestError as exc:
            if isinstance(raw_input, list):
                debug["filteredIngredients"] = []
            debug["validationFailed"] = True
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": str(exc), "debug": debug},
            )
        meal_type = parse_meal_type(payload)
        debug["filteredIngredients"] = ingredients
        try:
            recipes = await state_container.recipe_generator.generate_recipes(
                ingredients, meal_type
            )
        except Exception as exc:
            logger.exception("Debug recipe generation failed")
            debug.update(
                {
                    "errorType": type(exc).__name__,
                    "errorMessage": str(exc),
                    "durationMs": _elapsed_ms(started),
                    "success": False,
                }
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": _error_message(exc, "Failed to generate recipes"),
                    "debug": debug,
                },
            )
        debug.update(
            {
                "durationMs": _elapsed_ms(started),
                "recipesCount": len(recipes),
                "success": True,
            }
        )
        return JSONResponse(
            {"recipes": [recipe.to_payload() for recipe in recipes], "debug": debug}
        )

    return app


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _error_message(exc: Exception, fallback: str) -> str:
    """Return the exception message, or the fallback when it is empty."""
    message = str(exc).strip()
    return message or fallback


def _timestamp() -> str:
    return datetime.now(tz=UTC).isoformat()


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
