"""Favorite and rating stores used by the client state."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from recipe_finder.client.api_client import RecipeFinderClient
from recipe_finder.domain.preferences import RecipePreferences
from recipe_finder.domain.recipes import Recipe


class PreferenceStore(Protocol):
    """Where favorites and ratings live for a client."""

    async def load(self, recipe_ids: list[str]) -> RecipePreferences:
        """Return favorites and ratings, restricted to recipe_ids when given."""

    async def toggle_favorite(self, recipe: Recipe) -> bool:
        """Toggle a favorite and return whether it is now set."""

    async def set_rating(self, recipe_id: str, rating: int) -> int:
        """Store a rating and return the stored value."""

    async def remove_rating(self, recipe_id: str) -> None:
        """Remove a rating."""

    async def favorite_recipes(self) -> list[Recipe]:
        """Return the favorite recipes."""


@dataclass
class LocalRecipeStorage(PreferenceStore):
    """JSON file store, the offline counterpart of the remote preferences."""

    path: Path

    async def load(self, recipe_ids: list[str]) -> RecipePreferences:
        """Return stored favorites and ratings."""
        data = self._read()
        favorites = list(data["favorites"])
        ratings = dict(data["ratings"])
        if recipe_ids:
            wanted = set(recipe_ids)
            favorites = [recipe_id for recipe_id in favorites if recipe_id in wanted]
            ratings = {key: value for key, value in ratings.items() if key in wanted}
        return RecipePreferences(favorites=favorites, ratings=ratings)

    async def toggle_favorite(self, recipe: Recipe) -> bool:
        """Toggle a favorite, saving the recipe body when it is added."""
        data = self._read()
        if recipe.id in data["favorites"]:
            data["favorites"].remove(recipe.id)
            self._write(data)
            return False
        data["recipes"][recipe.id] = recipe.to_payload()
        data["favorites"].append(recipe.id)
        self._write(data)
        return True

    async def set_rating(self, recipe_id: str, rating: int) -> int:
        """Store a rating."""
        data = self._read()
        data["ratings"][recipe_id] = rating
        self._write(data)
        return rating

    async def remove_rating(self, recipe_id: str) -> None:
        """Remove a rating."""
        data = self._read()
        data["ratings"].pop(recipe_id, None)
        self._write(data)

    async def favorite_recipes(self) -> list[Recipe]:
        """Return favorites whose recipe bodies were saved."""
        data = self._read()
        return [
            Recipe.model_validate(data["recipes"][recipe_id]).model_copy(
                update={
                    "is_favorite": True,
                    "rating": data["ratings"].get(recipe_id),
                }
            )
            for recipe_id in data["favorites"]
            if recipe_id in data["recipes"]
        ]

    def _read(self) -> dict:
        if not self.path.exists():
            return {"favorites": [], "ratings": {}, "recipes": {}}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        data.setdefault("favorites", [])
        data.setdefault("ratings", {})
        data.setdefault("recipes", {})
        return data

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")


@dataclass
class RemotePreferenceStore(PreferenceStore):
    """Preference store backed by the API's favorite and rating endpoints."""

    client: RecipeFinderClient

    async def load(self, recipe_ids: list[str]) -> RecipePreferences:
        """Return favorites and ratings for the given recipes."""
        if recipe_ids:
            return await self.client.get_preferences(recipe_ids)
        favorites = await self.client.get_favorite_recipes()
        return RecipePreferences(favorites=[recipe.id for recipe in favorites])

    async def toggle_favorite(self, recipe: Recipe) -> bool:
        """Toggle a favorite on the server."""
        return await self.client.toggle_favorite(recipe.id)

    async def set_rating(self, recipe_id: str, rating: int) -> int:
        """Set a rating on the server."""
        return await self.client.set_rating(recipe_id, rating)

    async def remove_rating(self, recipe_id: str) -> None:
        """Remove a rating on the server."""
        await self.client.remove_rating(recipe_id)

    async def favorite_recipes(self) -> list[Recipe]:
        """Return favorite recipes from the server."""
        return await self.client.get_favorite_recipes()
