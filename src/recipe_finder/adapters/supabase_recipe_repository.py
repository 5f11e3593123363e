"""Supabase implementation for recipe storage."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from recipe_finder.domain.recipes import StoredRecipe
from recipe_finder.services.recipes import RecipeRepository


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase-backed repository for the recipes table."""

    client: Client

    def insert_recipe(self, payload: dict[str, object]) -> StoredRecipe:
        """Insert a recipe row and return it."""
        response = self.client.table("recipes").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to insert recipe")
        return parse_recipe_row(response.data[0])

    def update_recipe(self, recipe_id: str, payload: dict[str, object]) -> StoredRecipe:
        """Update a recipe row and return it."""
        response = (
            self.client.table("recipes").update(payload).eq("id", recipe_id).execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update recipe")
        return parse_recipe_row(response.data[0])

    def get_recipe(self, recipe_id: str) -> StoredRecipe | None:
        """Return a recipe by id, if present."""
        response = (
            self.client.table("recipes")
            .select("*")
            .eq("id", recipe_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_recipe_row(response.data[0])

    def list_recipes(self, meal_type: str | None) -> list[StoredRecipe]:
        """Return recipes newest first, optionally filtered by meal type."""
        query = self.client.table("recipes").select("*")
        if meal_type:
            query = query.eq("meal_type", meal_type)
        response = query.order("created_at", desc=True).execute()
        return [parse_recipe_row(row) for row in response.data or []]

    def list_refinements(self, parent_recipe_id: str) -> list[StoredRecipe]:
        """Return recipes refined from a parent, newest first."""
        response = (
            self.client.table("recipes")
            .select("*")
            .eq("parent_recipe_id", parent_recipe_id)
            .order("created_at", desc=True)
            .execute()
        )
        return [parse_recipe_row(row) for row in response.data or []]


def parse_recipe_row(row: dict[str, object]) -> StoredRecipe:
    """Parse a recipes row into a domain model."""
    created_raw = row.get("created_at")
    created_at = (
        datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else None
    )
    return StoredRecipe(
        id=str(row["id"]),
        title=str(row.get("title", "")),
        ingredients=[str(value) for value in row.get("ingredients") or []],
        steps=[str(value) for value in row.get("steps") or []],
        meal_type=str(row.get("meal_type") or "any"),
        original_prompt_ingredients=[
            str(value) for value in row.get("original_prompt_ingredients") or []
        ],
        parent_recipe_id=row.get("parent_recipe_id"),
        refinement_instruction=row.get("refinement_instruction"),
        ai_model_used=row.get("ai_model_used"),
        created_at=created_at,
    )
