"""Domain models for favorites and ratings."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FavoriteToggle:
    """Outcome of toggling a favorite."""

    recipe_id: str
    is_favorite: bool
    action: str


@dataclass(frozen=True)
class RecipePreferences:
    """Favorites and ratings of a user for a set of recipes."""

    favorites: list[str] = field(default_factory=list)
    ratings: dict[str, int] = field(default_factory=dict)
