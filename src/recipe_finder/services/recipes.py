"""Services for storing and querying recipes."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from recipe_finder.domain.recipes import Recipe, StoredRecipe

logger = logging.getLogger(__name__)

DEFAULT_MEAL_TYPE = "any"


class RecipeRepository(Protocol):
    """Persistence interface for recipes."""

    def insert_recipe(self, payload: dict[str, object]) -> StoredRecipe:
        """Insert a recipe row and return it."""

    def update_recipe(self, recipe_id: str, payload: dict[str, object]) -> StoredRecipe:
        """Update a recipe row and return it."""

    def get_recipe(self, recipe_id: str) -> StoredRecipe | None:
        """Return a recipe by id, if present."""

    def list_recipes(self, meal_type: str | None) -> list[StoredRecipe]:
        """Return recipes newest first, optionally filtered by meal type."""

    def list_refinements(self, parent_recipe_id: str) -> list[StoredRecipe]:
        """Return recipes refined from a parent recipe, newest first."""


@dataclass
class RecipeService:
    """Application service for recipe persistence."""

    repository: RecipeRepository
    ai_model: str

    def store_recipe(
        self,
        recipe: Recipe,
        original_ingredients: list[str],
        meal_type: str | None = None,
        parent_recipe_id: str | None = None,
        refinement_instruction: str | None = None,
    ) -> StoredRecipe:
        """Store a new recipe along with the request that produced it."""
        _ensure_complete(recipe)
        stored = self.repository.insert_recipe(
            {
                "id": recipe.id,
                "title": recipe.title,
                "ingredients": recipe.ingredients,
                "steps": recipe.steps,
                "meal_type": meal_type or recipe.meal_type or DEFAULT_MEAL_TYPE,
                "original_prompt_ingredients": original_ingredients,
                "parent_recipe_id": parent_recipe_id,
                "refinement_instruction": refinement_instruction,
                "ai_model_used": self.ai_model,
            }
        )
        logger.info("Stored recipe", extra={"recipe_id": stored.id})
        return stored

    def update_recipe(
        self, recipe_id: str, recipe: Recipe, refinement_instruction: str
    ) -> StoredRecipe:
        """Replace the content of a stored recipe after a refinement."""
        _ensure_complete(recipe)
        updated = self.repository.update_recipe(
            recipe_id,
            {
                "title": recipe.title,
                "ingredients": recipe.ingredients,
                "steps": recipe.steps,
                "refinement_instruction": refinement_instruction,
            },
        )
        logger.info("Updated recipe", extra={"recipe_id": recipe_id})
        return updated

    def get_recipe_by_id(self, recipe_id: str) -> StoredRecipe | None:
        """Return a stored recipe, or None when it does not exist."""
        return self.repository.get_recipe(recipe_id)

    def get_all_recipes(self, meal_type: str | None = None) -> list[StoredRecipe]:
        """Return all recipes, filtered unless the meal type is 'any'."""
        if meal_type == DEFAULT_MEAL_TYPE:
            meal_type = None
        return self.repository.list_recipes(meal_type or None)

    def search_recipes_by_ingredients(
        self, ingredient_names: list[str]
    ) -> list[StoredRecipe]:
        """Return recipes matching any ingredient, most matches first."""
        terms = [name.strip().lower() for name in ingredient_names if name.strip()]
        if not terms:
            return []
        recipes = self.repository.list_recipes(None)
        return rank_by_ingredients(recipes, terms)

    def get_recipe_refinements(self, parent_recipe_id: str) -> list[StoredRecipe]:
        """Return recipes refined from the given parent."""
        return self.repository.list_refinements(parent_recipe_id)

    async def store_generated_recipes(
        self,
        recipes: list[Recipe],
        original_ingredients: list[str],
        meal_type: str | None = None,
    ) -> list[StoredRecipe | None]:
        """Store generated recipes in parallel, mapping failures to None."""

        async def _store(recipe: Recipe) -> StoredRecipe | None:
            try:
                return await asyncio.to_thread(
                    self.store_recipe, recipe, original_ingredients, meal_type
                )
            except Exception:
                logger.exception(
                    "Failed to store generated recipe",
                    extra={"recipe_id": recipe.id},
                )
                return None

        return list(await asyncio.gather(*(_store(recipe) for recipe in recipes)))


def rank_by_ingredients(
    recipes: list[StoredRecipe], terms: list[str]
) -> list[StoredRecipe]:
    """Keep recipes matching any term and sort them by distinct match count.

    Terms match case-insensitively as substrings of an ingredient. The sort is
    stable, so recipes with equal counts keep the store order.
    """
    distinct_terms = list(dict.fromkeys(term.lower() for term in terms))
    scored: list[tuple[int, StoredRecipe]] = []
    for recipe in recipes:
        lowered = [ingredient.lower() for ingredient in recipe.ingredients]
        matches = sum(
            1
            for term in distinct_terms
            if any(term in ingredient for ingredient in lowered)
        )
        if matches:
            scored.append((matches, recipe))
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [recipe for _, recipe in scored]


def _ensure_complete(recipe: Recipe) -> None:
    if not recipe.ingredients or not recipe.steps:
        raise ValueError("Recipe must have non-empty ingredients and steps")
