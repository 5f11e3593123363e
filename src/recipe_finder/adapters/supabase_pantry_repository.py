"""Supabase implementation for the user pantry."""

from dataclasses import dataclass
from datetime import datetime

from postgrest.exceptions import APIError
from supabase import Client

from recipe_finder.domain.pantry import PantryIngredient, PantryItem
from recipe_finder.services.pantry import DuplicateEntryError, PantryRepository

UNIQUE_VIOLATION = "23505"
_ITEM_COLUMNS = "*, pantry_ingredients (name)"


@dataclass
class SupabasePantryRepository(PantryRepository):
    """Supabase-backed repository for pantry items and ingredients."""

    client: Client

    def get_ingredient_by_name(self, name: str) -> PantryIngredient | None:
        """Return the ingredient with an exact name, if present."""
        response = (
            self.client.table("pantry_ingredients")
            .select("id, name, created_at")
            .eq("name", name)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_ingredient(response.data[0])

    def create_ingredient(self, name: str) -> PantryIngredient:
        """Create an ingredient row."""
        try:
            response = (
                self.client.table("pantry_ingredients").insert({"name": name}).execute()
            )
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                raise DuplicateEntryError(str(exc.message)) from exc
            raise
        if not response.data:
            raise RuntimeError("Failed to create ingredient")
        return _parse_ingredient(response.data[0])

    def search_ingredients(self, query: str, limit: int) -> list[PantryIngredient]:
        """Return ingredients whose names contain the query."""
        response = (
            self.client.table("pantry_ingredients")
            .select("id, name, created_at")
            .ilike("name", f"%{query}%")
            .limit(limit)
            .execute()
        )
        return [_parse_ingredient(row) for row in response.data or []]

    def list_items(self, user_id: str) -> list[PantryItem]:
        """Return a user's pantry items, most recently added first."""
        response = (
            self.client.table("user_pantry_items")
            .select(_ITEM_COLUMNS)
            .eq("user_id", user_id)
            .order("added_at", desc=True)
            .execute()
        )
        return [_parse_item(row) for row in response.data or []]

    def get_item(self, item_id: str, user_id: str) -> PantryItem | None:
        """Return a pantry item owned by the user, if present."""
        response = (
            self.client.table("user_pantry_items")
            .select(_ITEM_COLUMNS)
            .eq("id", item_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_item(response.data[0])

    def insert_item(self, user_id: str, ingredient: PantryIngredient) -> PantryItem:
        """Add an ingredient to a user's pantry."""
        try:
            response = (
                self.client.table("user_pantry_items")
                .insert({"user_id": user_id, "pantry_ingredient_id": ingredient.id})
                .execute()
            )
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                raise DuplicateEntryError(str(exc.message)) from exc
            raise
        if not response.data:
            raise RuntimeError("Failed to add pantry item")
        return _parse_item(response.data[0], ingredient_name=ingredient.name)

    def update_item(
        self, item_id: str, user_id: str, payload: dict[str, object]
    ) -> PantryItem | None:
        """Update a user's pantry item and return it with its ingredient name."""
        try:
            (
                self.client.table("user_pantry_items")
                .update(payload)
                .eq("id", item_id)
                .eq("user_id", user_id)
                .execute()
            )
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                raise DuplicateEntryError(str(exc.message)) from exc
            raise
        return self.get_item(item_id, user_id)

    def delete_item(self, item_id: str, user_id: str) -> None:
        """Delete a user's pantry item."""
        (
            self.client.table("user_pantry_items")
            .delete()
            .eq("id", item_id)
            .eq("user_id", user_id)
            .execute()
        )


def _parse_datetime(raw: object) -> datetime | None:
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None


def _parse_ingredient(row: dict[str, object]) -> PantryIngredient:
    return PantryIngredient(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        created_at=_parse_datetime(row.get("created_at")),
    )


def _parse_item(
    row: dict[str, object], ingredient_name: str | None = None
) -> PantryItem:
    """Parse a pantry row, flattening the joined ingredient name."""
    joined = row.get("pantry_ingredients")
    if ingredient_name is None:
        ingredient_name = (
            str(joined.get("name"))
            if isinstance(joined, dict) and joined.get("name")
            else "Unknown Ingredient"
        )
    quantity = row.get("quantity")
    return PantryItem(
        id=str(row["id"]),
        user_id=str(row.get("user_id", "")),
        pantry_ingredient_id=str(row.get("pantry_ingredient_id", "")),
        ingredient_name=ingredient_name,
        added_at=_parse_datetime(row.get("added_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
        quantity=float(quantity) if quantity is not None else None,
        unit=row.get("unit"),
    )
