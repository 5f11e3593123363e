"""Domain models for recipes."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Recipe(BaseModel):
    """A recipe as exchanged with clients and the language model."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    ingredients: list[str] = Field(min_length=1)
    steps: list[str] = Field(min_length=1)
    meal_type: str | None = Field(default=None, alias="mealType")
    rating: int | None = Field(default=None, ge=1, le=5)
    is_favorite: bool | None = Field(default=None, alias="isFavorite")

    def to_payload(self) -> dict[str, object]:
        """Return the camelCase JSON payload used on the wire."""
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class StoredRecipe:
    """Represents a recipe row persisted in the database."""

    id: str
    title: str
    ingredients: list[str]
    steps: list[str]
    meal_type: str
    original_prompt_ingredients: list[str]
    parent_recipe_id: str | None
    refinement_instruction: str | None
    ai_model_used: str | None
    created_at: datetime | None
