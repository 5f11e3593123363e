"""Favorites and ratings backed by stored procedures."""

import logging
from dataclasses import dataclass
from typing import Protocol

from recipe_finder.domain.auth import Caller
from recipe_finder.domain.preferences import FavoriteToggle, RecipePreferences
from recipe_finder.domain.recipes import StoredRecipe

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class PreferencesRepository(Protocol):
    """Persistence interface for favorites and ratings.

    The procedures resolve the user from the access token they run with.
    """

    def toggle_favorite(self, recipe_id: str, access_token: str) -> dict[str, object]:
        """Call the toggle_favorite procedure and return its result."""

    def set_rating(
        self, recipe_id: str, rating: int, access_token: str
    ) -> dict[str, object]:
        """Call the set_recipe_rating procedure and return its result."""

    def remove_rating(self, recipe_id: str, access_token: str) -> dict[str, object]:
        """Call the remove_recipe_rating procedure and return its result."""

    def get_preferences(
        self, recipe_ids: list[str], access_token: str
    ) -> dict[str, object]:
        """Call the get_user_recipe_preferences procedure."""

    def list_favorite_recipes(self, user_id: str) -> list[StoredRecipe]:
        """Return the recipes a user marked as favorite, newest first."""


@dataclass
class PreferencesService:
    """Application service for recipe favorites and ratings."""

    repository: PreferencesRepository

    def toggle_recipe_favorite(self, recipe_id: str, caller: Caller) -> FavoriteToggle:
        """Add or remove a recipe from the caller's favorites."""
        result = _checked(
            self.repository.toggle_favorite(recipe_id, caller.access_token),
            "Failed to toggle favorite",
        )
        logger.info(
            "Toggled favorite",
            extra={"recipe_id": recipe_id, "user_id": caller.user_id},
        )
        return FavoriteToggle(
            recipe_id=recipe_id,
            is_favorite=bool(result.get("is_favorite")),
            action=str(result.get("action", "")),
        )

    def set_recipe_rating(self, recipe_id: str, rating: int, caller: Caller) -> int:
        """Set or replace the caller's rating for a recipe."""
        if rating < MIN_RATING or rating > MAX_RATING:
            raise ValueError("Rating must be between 1 and 5")
        result = _checked(
            self.repository.set_rating(recipe_id, rating, caller.access_token),
            "Failed to set rating",
        )
        logger.info(
            "Set rating",
            extra={"recipe_id": recipe_id, "user_id": caller.user_id, "rating": rating},
        )
        return int(result.get("rating", rating))

    def remove_recipe_rating(self, recipe_id: str, caller: Caller) -> None:
        """Delete the caller's rating for a recipe."""
        _checked(
            self.repository.remove_rating(recipe_id, caller.access_token),
            "Failed to remove rating",
        )
        logger.info(
            "Removed rating", extra={"recipe_id": recipe_id, "user_id": caller.user_id}
        )

    def get_user_recipe_preferences(
        self, recipe_ids: list[str], caller: Caller
    ) -> RecipePreferences:
        """Return the caller's favorites and ratings for the given recipes."""
        if not recipe_ids:
            return RecipePreferences()
        result = _checked(
            self.repository.get_preferences(recipe_ids, caller.access_token),
            "Failed to get user preferences",
        )
        ratings = result.get("ratings") or {}
        return RecipePreferences(
            favorites=[str(value) for value in result.get("favorites") or []],
            ratings={str(key): int(value) for key, value in dict(ratings).items()},
        )

    def get_user_favorite_recipes(self, caller: Caller) -> list[StoredRecipe]:
        """Return the caller's favorite recipes."""
        return self.repository.list_favorite_recipes(caller.user_id)


def _checked(result: dict[str, object] | None, fallback: str) -> dict[str, object]:
    """Raise when a procedure reports failure, otherwise return its result."""
    if not result or not result.get("success"):
        message = result.get("error") if result else None
        raise RuntimeError(str(message or fallback))
    return result
