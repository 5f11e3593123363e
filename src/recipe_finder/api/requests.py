"""Pydantic models for JSON request bodies."""

from collections.abc import Sequence
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    StringConstraints,
    field_validator,
)

from recipe_finder.domain.recipes import Recipe
from recipe_finder.services.preferences import MAX_RATING, MIN_RATING

NonBlankStr = Annotated[
    StrictStr, StringConstraints(strip_whitespace=True, min_length=1)
]

INVALID_BODY_MESSAGE = "Invalid request body"

# Client-facing messages keyed by the body field that failed validation.
FIELD_ERRORS = {
    "recipe": "Valid recipe object is required",
    "instruction": "Refinement instruction is required",
    "rating": "Rating must be between 1 and 5",
    "recipeIds": "recipeIds must be an array of strings",
    "ingredientName": "Ingredient name cannot be empty.",
    "quantity": "quantity must be a number",
    "unit": "unit must be a string",
}
TYPE_ERRORS = {
    ("ingredientName", "string_type"): "ingredientName must be a string",
}


class RefinementRecipe(BaseModel):
    """Recipe fields accepted for refinement."""

    model_config = ConfigDict(populate_by_name=True)

    id: NonBlankStr
    title: NonBlankStr
    ingredients: list[StrictStr] = Field(min_length=1)
    steps: list[StrictStr] = Field(min_length=1)
    meal_type: str | None = Field(default=None, alias="mealType")

    @field_validator("meal_type", mode="before")
    @classmethod
    def _drop_non_string_meal_type(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    def to_recipe(self) -> Recipe:
        return Recipe(
            id=self.id,
            title=self.title,
            ingredients=self.ingredients,
            steps=self.steps,
            meal_type=self.meal_type,
        )


class RefineRequest(BaseModel):
    """Body of POST /api/recipes/refine."""

    recipe: RefinementRecipe
    instruction: NonBlankStr


class RatingRequest(BaseModel):
    """Body of PUT /api/recipes/{id}/rating."""

    rating: StrictInt = Field(ge=MIN_RATING, le=MAX_RATING)


class PreferencesRequest(BaseModel):
    """Body of POST /api/preferences."""

    model_config = ConfigDict(populate_by_name=True)

    recipe_ids: list[StrictStr] = Field(alias="recipeIds")


class PantryCreateRequest(BaseModel):
    """Body of POST /api/pantry."""

    model_config = ConfigDict(populate_by_name=True)

    ingredient_name: NonBlankStr = Field(alias="ingredientName")


class PantryUpdateRequest(BaseModel):
    """Body of PATCH /api/pantry/{id}."""

    model_config = ConfigDict(populate_by_name=True)

    ingredient_name: StrictStr | None = Field(default=None, alias="ingredientName")
    quantity: StrictInt | StrictFloat | None = None
    unit: StrictStr | None = None


def validation_error_message(errors: Sequence[dict[str, Any]]) -> str:
    """Map the first body validation error to a client-facing message."""
    for error in errors:
        loc = error.get("loc", ())
        if len(loc) < 2 or loc[0] != "body":
            continue
        field_name = loc[1]
        message = TYPE_ERRORS.get((field_name, error.get("type")))
        if message or field_name in FIELD_ERRORS:
            return message or FIELD_ERRORS[field_name]
    return INVALID_BODY_MESSAGE
