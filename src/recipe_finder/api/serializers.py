"""JSON serialization of stored records."""

from recipe_finder.domain.pantry import PantryIngredient, PantryItem
from recipe_finder.domain.recipes import StoredRecipe


def serialize_stored_recipe(recipe: StoredRecipe) -> dict[str, object]:
    """Return the camelCase payload for a stored recipe."""
    return {
        "id": recipe.id,
        "title": recipe.title,
        "ingredients": recipe.ingredients,
        "steps": recipe.steps,
        "mealType": recipe.meal_type,
        "originalPromptIngredients": recipe.original_prompt_ingredients,
        "parentRecipeId": recipe.parent_recipe_id,
        "refinementInstruction": recipe.refinement_instruction,
        "aiModelUsed": recipe.ai_model_used,
        "createdAt": recipe.created_at.isoformat() if recipe.created_at else None,
    }


def serialize_pantry_item(item: PantryItem) -> dict[str, object]:
    """Return the camelCase payload for a pantry item."""
    return {
        "id": item.id,
        "userId": item.user_id,
        "pantryIngredientId": item.pantry_ingredient_id,
        "ingredientName": item.ingredient_name,
        "addedAt": item.added_at.isoformat() if item.added_at else None,
        "updatedAt": item.updated_at.isoformat() if item.updated_at else None,
        "quantity": item.quantity,
        "unit": item.unit,
    }


def serialize_ingredient(ingredient: PantryIngredient) -> dict[str, object]:
    return {"id": ingredient.id, "name": ingredient.name}
