"""Shared test fixtures."""

import json
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from recipe_finder.config import Settings
from recipe_finder.containers import AppContainer
from recipe_finder.domain.completions import ChatCompletionResult, ToolCall
from recipe_finder.domain.pantry import PantryIngredient, PantryItem
from recipe_finder.domain.recipes import StoredRecipe
from recipe_finder.services.auth import AuthService, TokenVerifier
from recipe_finder.services.cache import InMemoryCache
from recipe_finder.services.pantry import (
    DuplicateEntryError,
    PantryRepository,
    PantryService,
)
from recipe_finder.services.preferences import (
    PreferencesRepository,
    PreferencesService,
)
from recipe_finder.services.recipe_generator import (
    ChatCompletionClient,
    RecipeGenerator,
)
from recipe_finder.services.recipes import RecipeRepository, RecipeService

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

ACCESS_TOKENS = {"token-user-1": "user-1", "token-user-2": "user-2"}


def auth_headers(user_id: str = "user-1") -> dict[str, str]:
    return {"Authorization": f"Bearer token-{user_id}"}


def sample_recipes(count: int = 3) -> list[dict[str, object]]:
    return [
        {
            "id": str(index),
            "title": f"Recipe {index}",
            "ingredients": ["carrot", "pasta", "olive oil"],
            "steps": ["Boil pasta", "Add carrot", "Serve"],
        }
        for index in range(1, count + 1)
    ]


def tool_result(name: str, arguments: object) -> ChatCompletionResult:
    """Build a completion carrying one tool call."""
    raw = arguments if isinstance(arguments, str) else json.dumps(arguments)
    return ChatCompletionResult(
        id="gen-1",
        model="openai/gpt-4.1-nano",
        finish_reason="tool_calls",
        content=None,
        tool_calls=[ToolCall(id="call_1", name=name, arguments=raw)],
    )


def generation_result(recipes: list[dict[str, object]]) -> ChatCompletionResult:
    return tool_result("generate_recipes", {"recipes": recipes})


def refinement_result(recipe: dict[str, object]) -> ChatCompletionResult:
    return tool_result("refine_recipe", {"recipe": recipe})


@dataclass
class FakeChatClient(ChatCompletionClient):
    """Chat client replaying queued results and recording requests."""

    results: list[ChatCompletionResult | Exception] = field(default_factory=list)
    requests: list[dict[str, object]] = field(default_factory=list)

    def queue(self, result: ChatCompletionResult | Exception) -> None:
        self.results.append(result)

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        messages: list[dict[str, object]],
        tools: list[dict[str, object]],
        tool_choice: dict[str, object],
        headers: dict[str, str],
    ) -> ChatCompletionResult:
        self.requests.append(
            {
                "model": model,
                "messages": messages,
                "tools": tools,
                "tool_choice": tool_choice,
                "headers": headers,
            }
        )
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@dataclass
class InMemoryRecipeRepository(RecipeRepository):
    """In-memory recipe repository for tests."""

    recipes: dict[str, StoredRecipe] = field(default_factory=dict)
    failing_ids: set[str] = field(default_factory=set)

    def insert_recipe(self, payload: dict[str, object]) -> StoredRecipe:
        recipe_id = str(payload["id"])
        if recipe_id in self.failing_ids or recipe_id in self.recipes:
            raise RuntimeError(f"duplicate key value for recipe {recipe_id}")
        stored = StoredRecipe(
            id=recipe_id,
            title=str(payload["title"]),
            ingredients=list(payload["ingredients"]),
            steps=list(payload["steps"]),
            meal_type=str(payload["meal_type"]),
            original_prompt_ingredients=list(payload["original_prompt_ingredients"]),
            parent_recipe_id=payload.get("parent_recipe_id"),
            refinement_instruction=payload.get("refinement_instruction"),
            ai_model_used=payload.get("ai_model_used"),
            created_at=BASE_TIME + timedelta(minutes=len(self.recipes)),
        )
        self.recipes[recipe_id] = stored
        return stored

    def update_recipe(self, recipe_id: str, payload: dict[str, object]) -> StoredRecipe:
        if recipe_id not in self.recipes:
            raise RuntimeError("Failed to update recipe")
        updated = replace(self.recipes[recipe_id], **payload)
        self.recipes[recipe_id] = updated
        return updated

    def get_recipe(self, recipe_id: str) -> StoredRecipe | None:
        return self.recipes.get(recipe_id)

    def list_recipes(self, meal_type: str | None) -> list[StoredRecipe]:
        recipes = list(reversed(self.recipes.values()))
        if meal_type:
            recipes = [recipe for recipe in recipes if recipe.meal_type == meal_type]
        return recipes

    def list_refinements(self, parent_recipe_id: str) -> list[StoredRecipe]:
        return [
            recipe
            for recipe in reversed(self.recipes.values())
            if recipe.parent_recipe_id == parent_recipe_id
        ]


@dataclass
class FakeTokenVerifier(TokenVerifier):
    """Resolves the fixed test tokens."""

    tokens: dict[str, str] = field(default_factory=lambda: dict(ACCESS_TOKENS))

    def get_user_id(self, access_token: str) -> str | None:
        return self.tokens.get(access_token)


@dataclass
class InMemoryPreferencesRepository(PreferencesRepository):
    """In-memory stand-in for the preference procedures, scoped by token."""

    recipes: InMemoryRecipeRepository
    favorites: dict[str, list[str]] = field(default_factory=dict)
    ratings: dict[str, dict[str, int]] = field(default_factory=dict)

    def toggle_favorite(self, recipe_id: str, access_token: str) -> dict[str, object]:
        favorites = self.favorites.setdefault(_user_for(access_token), [])
        if recipe_id in favorites:
            favorites.remove(recipe_id)
            return {"success": True, "is_favorite": False, "action": "removed"}
        favorites.append(recipe_id)
        return {"success": True, "is_favorite": True, "action": "added"}

    def set_rating(
        self, recipe_id: str, rating: int, access_token: str
    ) -> dict[str, object]:
        self.ratings.setdefault(_user_for(access_token), {})[recipe_id] = rating
        return {"success": True, "rating": rating}

    def remove_rating(self, recipe_id: str, access_token: str) -> dict[str, object]:
        ratings = self.ratings.get(_user_for(access_token), {})
        if recipe_id not in ratings:
            return {"success": False, "error": "Rating not found"}
        del ratings[recipe_id]
        return {"success": True}

    def get_preferences(
        self, recipe_ids: list[str], access_token: str
    ) -> dict[str, object]:
        user_id = _user_for(access_token)
        return {
            "success": True,
            "favorites": [
                recipe_id
                for recipe_id in self.favorites.get(user_id, [])
                if recipe_id in recipe_ids
            ],
            "ratings": {
                recipe_id: rating
                for recipe_id, rating in self.ratings.get(user_id, {}).items()
                if recipe_id in recipe_ids
            },
        }

    def list_favorite_recipes(self, user_id: str) -> list[StoredRecipe]:
        return [
            self.recipes.recipes[recipe_id]
            for recipe_id in reversed(self.favorites.get(user_id, []))
            if recipe_id in self.recipes.recipes
        ]


def _user_for(access_token: str) -> str:
    return ACCESS_TOKENS[access_token]


@dataclass
class InMemoryPantryRepository(PantryRepository):
    """In-memory pantry repository for tests."""

    ingredients: dict[str, PantryIngredient] = field(default_factory=dict)
    items: dict[str, PantryItem] = field(default_factory=dict)
    list_calls: int = 0

    def get_ingredient_by_name(self, name: str) -> PantryIngredient | None:
        return self.ingredients.get(name)

    def create_ingredient(self, name: str) -> PantryIngredient:
        if name in self.ingredients:
            raise DuplicateEntryError(name)
        ingredient = PantryIngredient(id=str(uuid4()), name=name, created_at=BASE_TIME)
        self.ingredients[name] = ingredient
        return ingredient

    def search_ingredients(self, query: str, limit: int) -> list[PantryIngredient]:
        return [
            ingredient
            for name, ingredient in self.ingredients.items()
            if query in name
        ][:limit]

    def list_items(self, user_id: str) -> list[PantryItem]:
        self.list_calls += 1
        items = [item for item in self.items.values() if item.user_id == user_id]
        return sorted(items, key=lambda item: item.added_at, reverse=True)

    def get_item(self, item_id: str, user_id: str) -> PantryItem | None:
        item = self.items.get(item_id)
        return item if item is not None and item.user_id == user_id else None

    def insert_item(self, user_id: str, ingredient: PantryIngredient) -> PantryItem:
        for item in self.items.values():
            if item.user_id == user_id and item.pantry_ingredient_id == ingredient.id:
                raise DuplicateEntryError(ingredient.name)
        item = PantryItem(
            id=str(uuid4()),
            user_id=user_id,
            pantry_ingredient_id=ingredient.id,
            ingredient_name=ingredient.name,
            added_at=BASE_TIME + timedelta(minutes=len(self.items)),
        )
        self.items[item.id] = item
        return item

    def update_item(
        self, item_id: str, user_id: str, payload: dict[str, object]
    ) -> PantryItem | None:
        item = self.get_item(item_id, user_id)
        if item is None:
            return None
        changes = dict(payload)
        ingredient_id = changes.get("pantry_ingredient_id")
        if ingredient_id is not None:
            for other in self.items.values():
                if (
                    other.id != item_id
                    and other.user_id == item.user_id
                    and other.pantry_ingredient_id == ingredient_id
                ):
                    raise DuplicateEntryError(str(ingredient_id))
            changes["ingredient_name"] = next(
                ingredient.name
                for ingredient in self.ingredients.values()
                if ingredient.id == ingredient_id
            )
        updated = replace(item, updated_at=BASE_TIME, **changes)
        self.items[item_id] = updated
        return updated

    def delete_item(self, item_id: str, user_id: str) -> None:
        if self.get_item(item_id, user_id) is not None:
            del self.items[item_id]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openrouter_api_key="test-key",
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
    )


@pytest.fixture
def chat_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture
def recipe_repository() -> InMemoryRecipeRepository:
    return InMemoryRecipeRepository()


@pytest.fixture
def preferences_repository(
    recipe_repository: InMemoryRecipeRepository,
) -> InMemoryPreferencesRepository:
    return InMemoryPreferencesRepository(recipes=recipe_repository)


@pytest.fixture
def pantry_repository() -> InMemoryPantryRepository:
    return InMemoryPantryRepository()


@pytest.fixture
def container(
    settings: Settings,
    chat_client: FakeChatClient,
    recipe_repository: InMemoryRecipeRepository,
    preferences_repository: InMemoryPreferencesRepository,
    pantry_repository: InMemoryPantryRepository,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        auth_service=AuthService(FakeTokenVerifier()),
        recipe_generator=RecipeGenerator(
            client=chat_client,
            model=settings.openrouter_model,
            app_referer=settings.app_referer,
            app_title=settings.app_title,
        ),
        recipe_service=RecipeService(
            repository=recipe_repository, ai_model=settings.openrouter_model
        ),
        preferences_service=PreferencesService(preferences_repository),
        pantry_service=PantryService(
            repository=pantry_repository, cache=InMemoryCache()
        ),
        close_resources=close_resources,
    )
