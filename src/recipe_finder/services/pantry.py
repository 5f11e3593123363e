"""Services for managing the user pantry."""

import logging
from dataclasses import dataclass
from typing import Protocol

from recipe_finder.domain.pantry import PantryIngredient, PantryItem
from recipe_finder.services.cache import Cache

logger = logging.getLogger(__name__)

PANTRY_CACHE_TTL_SECONDS = 30
MIN_SEARCH_LENGTH = 3
SEARCH_LIMIT = 50


class DuplicateEntryError(RuntimeError):
    """Raised by repositories when a unique constraint is violated."""


class PantryItemExistsError(RuntimeError):
    """Raised when a user already has an ingredient in the pantry."""


class PantryItemNotFoundError(LookupError):
    """Raised when a pantry item does not exist for the calling user."""


class PantryRepository(Protocol):
    """Persistence interface for pantry items and ingredients."""

    def get_ingredient_by_name(self, name: str) -> PantryIngredient | None:
        """Return the ingredient with an exact name, if present."""

    def create_ingredient(self, name: str) -> PantryIngredient:
        """Create an ingredient; raise DuplicateEntryError if it exists."""

    def search_ingredients(self, query: str, limit: int) -> list[PantryIngredient]:
        """Return ingredients whose names contain the query."""

    def list_items(self, user_id: str) -> list[PantryItem]:
        """Return a user's pantry items, most recently added first."""

    def get_item(self, item_id: str, user_id: str) -> PantryItem | None:
        """Return a pantry item owned by the user, if present."""

    def insert_item(self, user_id: str, ingredient: PantryIngredient) -> PantryItem:
        """Add an ingredient to a pantry; raise DuplicateEntryError if present."""

    def update_item(
        self, item_id: str, user_id: str, payload: dict[str, object]
    ) -> PantryItem | None:
        """Update a pantry item owned by the user and return it."""

    def delete_item(self, item_id: str, user_id: str) -> None:
        """Delete a pantry item owned by the user."""


@dataclass
class PantryService:
    """Application service for pantry operations with a short-lived cache."""

    repository: PantryRepository
    cache: Cache

    def get_pantry_items(self, user_id: str) -> list[PantryItem]:
        """Return pantry items for a user, served from cache when fresh."""
        if not user_id:
            logger.warning("Pantry items requested without a user id")
            return []
        key = _cache_key(user_id)
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)
        items = self.repository.list_items(user_id)
        self.cache.set(key, items, PANTRY_CACHE_TTL_SECONDS)
        return list(items)

    def add_pantry_item(self, user_id: str, ingredient_name: str) -> PantryItem:
        """Add an ingredient by name to the user's pantry."""
        if not user_id or not ingredient_name or not ingredient_name.strip():
            raise ValueError(
                "User ID and ingredient name are required to add a pantry item."
            )
        ingredient = self.get_or_create_ingredient(ingredient_name)
        try:
            item = self.repository.insert_item(user_id, ingredient)
        except DuplicateEntryError:
            raise PantryItemExistsError(
                f"Pantry item '{ingredient_name}' already exists for this user."
            ) from None
        self.cache.invalidate()
        logger.info("Added pantry item", extra={"item_id": item.id})
        return item

    def update_pantry_item(
        self,
        item_id: str,
        user_id: str,
        *,
        ingredient_name: str | None = None,
        quantity: float | None = None,
        unit: str | None = None,
    ) -> PantryItem:
        """Update one of the user's pantry items, resolving a new ingredient name."""
        if not item_id:
            raise ValueError("Item ID is required to update a pantry item.")
        existing = self._owned_item(item_id, user_id)
        payload: dict[str, object] = {}
        if quantity is not None:
            payload["quantity"] = quantity
        if unit is not None:
            payload["unit"] = unit
        if ingredient_name is not None:
            if not ingredient_name.strip():
                raise ValueError("Ingredient name cannot be empty when updating.")
            payload["pantry_ingredient_id"] = self.get_or_create_ingredient(
                ingredient_name
            ).id
        if not payload:
            logger.warning("Pantry update without changes", extra={"item_id": item_id})
            return existing
        try:
            item = self.repository.update_item(item_id, user_id, payload)
        except DuplicateEntryError:
            raise PantryItemExistsError(
                "Another pantry item with the new ingredient "
                f"'{ingredient_name or 'specified'}' already exists."
            ) from None
        self.cache.invalidate()
        if item is None:
            raise PantryItemNotFoundError("Pantry item not found")
        return item

    def remove_pantry_item(self, item_id: str, user_id: str) -> None:
        """Remove one of the user's pantry items."""
        if not item_id:
            raise ValueError("Item ID is required to remove a pantry item.")
        self._owned_item(item_id, user_id)
        self.repository.delete_item(item_id, user_id)
        self.cache.invalidate()
        logger.info("Removed pantry item", extra={"item_id": item_id})

    def search_ingredients_by_name(self, query: str) -> list[PantryIngredient]:
        """Search ingredient names; short queries return nothing."""
        normalized = query.strip().lower()
        if len(normalized) < MIN_SEARCH_LENGTH:
            return []
        return self.repository.search_ingredients(normalized, SEARCH_LIMIT)

    def get_or_create_ingredient(self, name: str) -> PantryIngredient:
        """Return the ingredient with this name, creating it when missing."""
        normalized = name.strip().lower()
        if not normalized:
            raise ValueError("Ingredient name cannot be empty.")
        existing = self.repository.get_ingredient_by_name(normalized)
        if existing:
            return existing
        try:
            return self.repository.create_ingredient(normalized)
        except DuplicateEntryError:
            # Another writer created it between the lookup and the insert.
            created = self.repository.get_ingredient_by_name(normalized)
            if created is None:
                raise
            return created

    def _owned_item(self, item_id: str, user_id: str) -> PantryItem:
        item = self.repository.get_item(item_id, user_id)
        if item is None:
            logger.warning(
                "Pantry item not found for user",
                extra={"item_id": item_id, "user_id": user_id},
            )
            raise PantryItemNotFoundError("Pantry item not found")
        return item


def _cache_key(user_id: str) -> str:
    return f"pantry:{user_id}"
