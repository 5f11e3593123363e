"""HTTP client for the recipe finder REST API."""

import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from recipe_finder.domain.preferences import RecipePreferences
from recipe_finder.domain.recipes import Recipe


class RecipeFinderApiError(RuntimeError):
    """Raised when the API answers with an error status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class RecipeFinderClient:
    """Async client for the recipe, preference and pantry endpoints."""

    base_url: str
    http_client: httpx.AsyncClient
    access_token: str | None = None
    clock: Callable[[], float] = time.time

    @classmethod
    def create(
        cls, base_url: str, access_token: str | None = None
    ) -> "RecipeFinderClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            access_token=access_token,
        )

    async def health(self) -> dict[str, object]:
        """Return the API health payload."""
        return await self._request("GET", "/api/health")

    async def generate_recipes(
        self, ingredients: list[str], meal_type: str | None = None
    ) -> list[Recipe]:
        """Generate recipes, giving each a display-unique id."""
        payload: dict[str, object] = {"ingredients": ingredients}
        if meal_type:
            payload["mealType"] = meal_type
        data = await self._request("POST", "/api/recipes", json=payload)
        recipes = [Recipe.model_validate(item) for item in data["recipes"]]
        return with_unique_ids(recipes, self.clock())

    async def refine_recipe(self, recipe: Recipe, instruction: str) -> Recipe:
        """Refine a recipe; the returned recipe keeps the same id."""
        data = await self._request(
            "POST",
            "/api/recipes/refine",
            json={"recipe": recipe.to_payload(), "instruction": instruction},
        )
        return Recipe.model_validate(data["refinedRecipe"])

    async def get_recipe(self, recipe_id: str) -> dict[str, object] | None:
        """Return a stored recipe payload, or None when it does not exist."""
        try:
            data = await self._request("GET", f"/api/recipes/{recipe_id}")
        except RecipeFinderApiError as exc:
            if exc.status_code == httpx.codes.NOT_FOUND:
                return None
            raise
        return data["recipe"]

    async def list_recipes(
        self, meal_type: str | None = None
    ) -> list[dict[str, object]]:
        """Return stored recipe payloads."""
        params = {"mealType": meal_type} if meal_type else None
        data = await self._request("GET", "/api/recipes", params=params)
        return data["recipes"]

    async def search_recipes(self, ingredients: list[str]) -> list[dict[str, object]]:
        """Return stored recipe payloads ranked by ingredient matches."""
        data = await self._request(
            "POST", "/api/recipes/search", json={"ingredients": ingredients}
        )
        return data["recipes"]

    async def toggle_favorite(self, recipe_id: str) -> bool:
        """Toggle a favorite and return whether the recipe is now a favorite."""
        data = await self._request("POST", f"/api/recipes/{recipe_id}/favorite")
        return bool(data["isFavorite"])

    async def set_rating(self, recipe_id: str, rating: int) -> int:
        """Set a rating and return the stored value."""
        data = await self._request(
            "PUT", f"/api/recipes/{recipe_id}/rating", json={"rating": rating}
        )
        return int(data["rating"])

    async def remove_rating(self, recipe_id: str) -> None:
        """Remove a rating."""
        await self._request("DELETE", f"/api/recipes/{recipe_id}/rating")

    async def get_preferences(self, recipe_ids: list[str]) -> RecipePreferences:
        """Return favorites and ratings for the given recipes."""
        data = await self._request(
            "POST", "/api/preferences", json={"recipeIds": recipe_ids}
        )
        return RecipePreferences(
            favorites=list(data.get("favorites") or []),
            ratings=dict(data.get("ratings") or {}),
        )

    async def get_favorite_recipes(self) -> list[Recipe]:
        """Return the caller's favorite recipes."""
        data = await self._request("GET", "/api/favorites")
        return [
            Recipe.model_validate(item).model_copy(update={"is_favorite": True})
            for item in data["recipes"]
        ]

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(self, method: str, path: str, **kwargs: object) -> dict:
        headers = (
            {"Authorization": f"Bearer {self.access_token}"}
            if self.access_token
            else None
        )
        response = await self.http_client.request(
            method, f"{self.base_url}{path}", headers=headers, timeout=60, **kwargs
        )
        if response.is_error:
            raise RecipeFinderApiError(response.status_code, _error_message(response))
        return response.json()


def with_unique_ids(recipes: list[Recipe], timestamp: float) -> list[Recipe]:
    """Suffix recipe ids with a timestamp and index to keep them distinct."""
    stamp = int(timestamp * 1000)
    return [
        recipe.model_copy(update={"id": f"{recipe.id}-{stamp}-{index}"})
        for index, recipe in enumerate(recipes)
    ]


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.reason_phrase
