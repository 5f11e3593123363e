"""Client-side projections of favorites, ratings and the pantry."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from recipe_finder.client.storage import PreferenceStore
from recipe_finder.domain.pantry import PantryItem
from recipe_finder.domain.recipes import Recipe
from recipe_finder.services.pantry import PantryService
from recipe_finder.services.preferences import MAX_RATING, MIN_RATING

logger = logging.getLogger(__name__)


@dataclass
class RecipePreferencesState:
    """Favorites and ratings as last confirmed by the preference store.

    Local state only changes after the store call resolves, so a failed call
    leaves the projection untouched and records the message in ``error``.
    """

    store: PreferenceStore
    favorites: set[str] = field(default_factory=set)
    ratings: dict[str, int] = field(default_factory=dict)
    error: str | None = None

    async def refresh(self, recipe_ids: list[str] | None = None) -> None:
        """Replace the projection with what the store holds."""
        try:
            preferences = await self.store.load(list(recipe_ids or []))
        except Exception as exc:
            logger.exception("Failed to load recipe preferences")
            self.error = str(exc)
            return
        self.favorites = set(preferences.favorites)
        self.ratings = dict(preferences.ratings)
        self.error = None

    async def toggle_favorite(self, recipe: Recipe) -> None:
        """Toggle a favorite once the store confirms the new value."""
        try:
            is_favorite = await self.store.toggle_favorite(recipe)
        except Exception as exc:
            logger.exception(
                "Failed to toggle favorite", extra={"recipe_id": recipe.id}
            )
            self.error = str(exc)
            return
        if is_favorite:
            self.favorites.add(recipe.id)
        else:
            self.favorites.discard(recipe.id)
        self.error = None

    async def set_rating(self, recipe_id: str, rating: int) -> None:
        """Set a rating once the store confirms it."""
        if rating < MIN_RATING or rating > MAX_RATING:
            raise ValueError("Rating must be between 1 and 5")
        try:
            stored = await self.store.set_rating(recipe_id, rating)
        except Exception as exc:
            logger.exception("Failed to set rating", extra={"recipe_id": recipe_id})
            self.error = str(exc)
            return
        self.ratings[recipe_id] = stored
        self.error = None

    async def remove_rating(self, recipe_id: str) -> None:
        """Remove a rating once the store confirms it."""
        try:
            await self.store.remove_rating(recipe_id)
        except Exception as exc:
            logger.exception("Failed to remove rating", extra={"recipe_id": recipe_id})
            self.error = str(exc)
            return
        self.ratings.pop(recipe_id, None)
        self.error = None

    def is_favorite(self, recipe_id: str) -> bool:
        return recipe_id in self.favorites

    def get_rating(self, recipe_id: str) -> int | None:
        return self.ratings.get(recipe_id)

    def enhance_recipes(self, recipes: list[Recipe]) -> list[Recipe]:
        """Return copies of recipes annotated with favorite and rating."""
        return [
            recipe.model_copy(
                update={
                    "is_favorite": self.is_favorite(recipe.id),
                    "rating": self.get_rating(recipe.id),
                }
            )
            for recipe in recipes
        ]


def _added_at(item: PantryItem) -> datetime:
    return item.added_at or datetime.min.replace(tzinfo=UTC)


@dataclass
class PantryState:
    """A user's pantry, reloaded whenever the pantry cache is invalidated."""

    service: PantryService
    user_id: str
    items: list[PantryItem] = field(default_factory=list)
    error: str | None = None
    _unsubscribe: Callable[[], None] | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self._unsubscribe = self.service.cache.subscribe(self.refresh)

    def close(self) -> None:
        """Stop listening for cache invalidations."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def refresh(self) -> None:
        """Reload items from the pantry service."""
        try:
            self.items = self.service.get_pantry_items(self.user_id)
        except Exception as exc:
            logger.exception("Failed to load pantry", extra={"user_id": self.user_id})
            self.error = str(exc)
            self.items = []
            return
        self.error = None

    def add_item(self, ingredient_name: str) -> PantryItem | None:
        """Add an ingredient and merge the new item into the local list."""
        if not ingredient_name.strip():
            self.error = "Ingredient name cannot be empty."
            return None
        try:
            item = self.service.add_pantry_item(self.user_id, ingredient_name)
        except Exception as exc:
            logger.warning("Failed to add pantry item: %s", exc)
            self.error = str(exc)
            return None
        self._upsert(item)
        self.error = None
        return item

    def update_item(
        self,
        item_id: str,
        *,
        ingredient_name: str | None = None,
        quantity: float | None = None,
        unit: str | None = None,
    ) -> PantryItem | None:
        """Update an item and merge the result into the local list."""
        try:
            item = self.service.update_pantry_item(
                item_id,
                self.user_id,
                ingredient_name=ingredient_name,
                quantity=quantity,
                unit=unit,
            )
        except Exception as exc:
            logger.warning("Failed to update pantry item: %s", exc)
            self.error = str(exc)
            return None
        self._upsert(item)
        self.error = None
        return item

    def remove_item(self, item_id: str) -> None:
        """Remove an item locally once the service confirms the delete."""
        try:
            self.service.remove_pantry_item(item_id, self.user_id)
        except Exception as exc:
            logger.warning("Failed to remove pantry item: %s", exc)
            self.error = str(exc)
            return
        self.items = [item for item in self.items if item.id != item_id]
        self.error = None

    def _upsert(self, item: PantryItem) -> None:
        merged = [existing for existing in self.items if existing.id != item.id]
        merged.append(item)
        self.items = sorted(merged, key=_added_at, reverse=True)
