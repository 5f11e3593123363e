"""Domain models for the user pantry."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PantryIngredient:
    """Shared ingredient name referenced by pantry items."""

    id: str
    name: str
    created_at: datetime | None


@dataclass(frozen=True)
class PantryItem:
    """An ingredient a user has on hand."""

    id: str
    user_id: str
    pantry_ingredient_id: str
    ingredient_name: str
    added_at: datetime | None
    updated_at: datetime | None = None
    quantity: float | None = None
    unit: str | None = None
