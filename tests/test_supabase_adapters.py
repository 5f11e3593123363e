"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field

import pytest
from postgrest import SyncPostgrestClient
from postgrest.exceptions import APIError
from supabase import AuthApiError

from recipe_finder.adapters.supabase_auth_verifier import SupabaseTokenVerifier

from recipe_finder.adapters.supabase_pantry_repository import SupabasePantryRepository
from recipe_finder.adapters.supabase_preferences_repository import (
    SupabasePreferencesRepository,
    user_rest_client_factory,
)
from recipe_finder.adapters.supabase_recipe_repository import SupabaseRecipeRepository
from recipe_finder.domain.pantry import PantryIngredient
from recipe_finder.services.pantry import DuplicateEntryError


@dataclass
class FakeResponse:
    data: object


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": [], "delete": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    error: APIError | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def ilike(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        if self.error is not None:
            error, self.error = self.error, None
            raise error
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeRpc:
    data: object

    def execute(self) -> FakeResponse:
        return FakeResponse(data=self.data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)
    rpc_results: dict[str, object] = field(default_factory=dict)
    rpc_calls: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    closed: bool = False

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]

    def rpc(self, name: str, params: dict[str, object]) -> FakeRpc:
        self.rpc_calls.append((name, params))
        return FakeRpc(self.rpc_results.get(name))

    def __enter__(self) -> "FakeSupabaseClient":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.closed = True


def _recipe_row(recipe_id: str = "r-1", **overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "id": recipe_id,
        "title": "Carrot Pasta",
        "ingredients": ["carrot", "pasta"],
        "steps": ["Boil", "Serve"],
        "meal_type": "dinner",
        "original_prompt_ingredients": ["carrot"],
        "parent_recipe_id": None,
        "refinement_instruction": None,
        "ai_model_used": "openai/gpt-4.1-nano",
        "created_at": "2024-05-01T12:00:00+00:00",
    }
    row.update(overrides)
    return row


def _unique_violation() -> APIError:
    return APIError(
        {
            "message": "duplicate key value",
            "code": "23505",
            "hint": None,
            "details": None,
        }
    )


def test_supabase_recipe_repository_roundtrip() -> None:
    client = FakeSupabaseClient()
    recipes_table = client.table("recipes")
    recipes_table.queue("insert", [_recipe_row()])
    recipes_table.queue("select", [_recipe_row()])

    repository = SupabaseRecipeRepository(client)
    created = repository.insert_recipe({"id": "r-1", "title": "Carrot Pasta"})
    fetched = repository.get_recipe("r-1")

    assert created.id == "r-1"
    assert fetched is not None
    assert fetched.ingredients == ["carrot", "pasta"]
    assert fetched.created_at is not None
    assert ("id", "r-1") in recipes_table.last_filters


def test_supabase_recipe_repository_missing_and_failed_writes() -> None:
    client = FakeSupabaseClient()
    repository = SupabaseRecipeRepository(client)

    assert repository.get_recipe("missing") is None
    with pytest.raises(RuntimeError, match="Failed to insert recipe"):
        repository.insert_recipe({"id": "r-1"})
    with pytest.raises(RuntimeError, match="Failed to update recipe"):
        repository.update_recipe("r-1", {"title": "New"})


def test_supabase_recipe_repository_filters_meal_type() -> None:
    client = FakeSupabaseClient()
    recipes_table = client.table("recipes")
    recipes_table.queue("select", [_recipe_row(meal_type=None)])

    repository = SupabaseRecipeRepository(client)
    recipes = repository.list_recipes("breakfast")

    assert recipes[0].meal_type == "any"
    assert recipes_table.last_filters == [("meal_type", "breakfast")]


def test_supabase_preferences_repository_calls_procedures_as_user() -> None:
    user_client = FakeSupabaseClient(
        rpc_results={
            "toggle_favorite": [{"success": True, "is_favorite": True}],
            "set_recipe_rating": {"success": True, "rating": 4},
        }
    )
    tokens: list[str] = []

    def user_client_factory(access_token: str) -> FakeSupabaseClient:
        tokens.append(access_token)
        return user_client

    service_client = FakeSupabaseClient()
    repository = SupabasePreferencesRepository(
        client=service_client, user_client=user_client_factory
    )

    toggled = repository.toggle_favorite("r-1", "token-a")
    rated = repository.set_rating("r-1", 4, "token-a")
    removed = repository.remove_rating("r-1", "token-a")
    repository.get_preferences(["r-1"], "token-b")

    assert toggled == {"success": True, "is_favorite": True}
    assert rated["rating"] == 4
    assert removed == {}
    assert tokens == ["token-a", "token-a", "token-a", "token-b"]
    assert user_client.closed is True
    assert service_client.rpc_calls == []
    assert user_client.rpc_calls == [
        ("toggle_favorite", {"recipe_uuid": "r-1"}),
        ("set_recipe_rating", {"recipe_uuid": "r-1", "rating_value": 4}),
        ("remove_recipe_rating", {"recipe_uuid": "r-1"}),
        ("get_user_recipe_preferences", {"recipe_uuids": ["r-1"]}),
    ]


def test_user_rest_client_factory_sends_user_token() -> None:
    build = user_rest_client_factory("https://example.supabase.co/", "service-key")

    rest = build("user-token")

    assert isinstance(rest, SyncPostgrestClient)
    assert rest.session.headers["Authorization"] == "Bearer user-token"
    assert rest.session.headers["apikey"] == "service-key"
    assert str(rest.session.base_url).startswith("https://example.supabase.co/rest/v1")


def test_supabase_preferences_repository_lists_favorites() -> None:
    client = FakeSupabaseClient()
    client.table("user_favorites").queue(
        "select",
        [
            {"recipe_id": "r-1", "recipes": _recipe_row()},
            {"recipe_id": "r-2", "recipes": None},
        ],
    )

    repository = SupabasePreferencesRepository(
        client=client, user_client=lambda _token: FakeSupabaseClient()
    )

    favorites = repository.list_favorite_recipes("user-1")

    assert [recipe.id for recipe in favorites] == ["r-1"]
    assert client.table("user_favorites").last_filters == [("user_id", "user-1")]


def test_supabase_pantry_repository_items() -> None:
    client = FakeSupabaseClient()
    items_table = client.table("user_pantry_items")
    items_table.queue(
        "select",
        [
            {
                "id": "item-1",
                "user_id": "user-1",
                "pantry_ingredient_id": "ing-1",
                "added_at": "2024-05-01T12:00:00+00:00",
                "quantity": "2",
                "unit": "bunch",
                "pantry_ingredients": {"name": "basil"},
            },
            {
                "id": "item-2",
                "user_id": "user-1",
                "pantry_ingredient_id": "ing-2",
                "pantry_ingredients": None,
            },
        ],
    )

    items = SupabasePantryRepository(client).list_items("user-1")

    assert [item.ingredient_name for item in items] == ["basil", "Unknown Ingredient"]
    assert items[0].quantity == 2.0
    assert items[1].added_at is None


def test_supabase_pantry_repository_maps_unique_violations() -> None:
    client = FakeSupabaseClient()
    client.table("pantry_ingredients").error = _unique_violation()
    client.table("user_pantry_items").error = _unique_violation()
    repository = SupabasePantryRepository(client)

    with pytest.raises(DuplicateEntryError):
        repository.create_ingredient("basil")
    with pytest.raises(DuplicateEntryError):
        repository.insert_item(
            "user-1", PantryIngredient(id="ing-1", name="basil", created_at=None)
        )


def test_supabase_pantry_repository_insert_uses_ingredient_name() -> None:
    client = FakeSupabaseClient()
    items_table = client.table("user_pantry_items")
    items_table.queue(
        "insert",
        [{"id": "item-1", "user_id": "user-1", "pantry_ingredient_id": "ing-1"}],
    )

    item = SupabasePantryRepository(client).insert_item(
        "user-1", PantryIngredient(id="ing-1", name="basil", created_at=None)
    )

    assert item.ingredient_name == "basil"
    assert items_table.last_payload == {
        "user_id": "user-1",
        "pantry_ingredient_id": "ing-1",
    }


def test_supabase_pantry_repository_search() -> None:
    client = FakeSupabaseClient()
    ingredients_table = client.table("pantry_ingredients")
    ingredients_table.queue("select", [{"id": "ing-1", "name": "basil"}])

    results = SupabasePantryRepository(client).search_ingredients("bas", 50)

    assert [ingredient.name for ingredient in results] == ["basil"]
    assert ingredients_table.last_filters == [("name", "%bas%")]


def test_supabase_pantry_repository_scopes_items_to_owner() -> None:
    client = FakeSupabaseClient()
    items_table = client.table("user_pantry_items")
    items_table.queue(
        "select",
        [{"id": "item-1", "user_id": "user-1", "pantry_ingredient_id": "ing-1"}],
    )
    repository = SupabasePantryRepository(client)

    updated = repository.update_item("item-1", "user-1", {"quantity": 2})
    update_filters = list(items_table.last_filters)
    items_table.last_filters.clear()
    missing = repository.get_item("item-1", "user-2")
    items_table.last_filters.clear()
    repository.delete_item("item-1", "user-2")

    assert updated is not None
    assert items_table.last_payload == {"quantity": 2}
    assert update_filters == [
        ("id", "item-1"),
        ("user_id", "user-1"),
        ("id", "item-1"),
        ("user_id", "user-1"),
    ]
    assert missing is None
    assert items_table.last_filters == [("id", "item-1"), ("user_id", "user-2")]


def test_supabase_pantry_repository_maps_update_conflicts() -> None:
    client = FakeSupabaseClient()
    client.table("user_pantry_items").error = _unique_violation()

    with pytest.raises(DuplicateEntryError):
        SupabasePantryRepository(client).update_item(
            "item-1", "user-1", {"pantry_ingredient_id": "ing-2"}
        )


@dataclass
class FakeUser:
    id: str


@dataclass
class FakeUserResponse:
    user: FakeUser | None


@dataclass
class FakeAuth:
    users: dict[str, str]

    def get_user(self, jwt: str) -> FakeUserResponse:
        if jwt not in self.users:
            raise AuthApiError("invalid JWT", 401, "bad_jwt")
        return FakeUserResponse(user=FakeUser(id=self.users[jwt]))


@dataclass
class FakeAuthClient:
    auth: FakeAuth


def test_supabase_token_verifier_resolves_users() -> None:
    verifier = SupabaseTokenVerifier(
        FakeAuthClient(auth=FakeAuth(users={"good-token": "user-1"}))
    )

    assert verifier.get_user_id("good-token") == "user-1"
    assert verifier.get_user_id("forged-token") is None
