"""Supabase stored procedures for favorites and ratings."""

from collections.abc import Callable
from dataclasses import dataclass

from postgrest import SyncPostgrestClient
from postgrest.constants import DEFAULT_POSTGREST_CLIENT_HEADERS
from supabase import Client

from recipe_finder.adapters.supabase_recipe_repository import parse_recipe_row
from recipe_finder.domain.recipes import StoredRecipe
from recipe_finder.services.preferences import PreferencesRepository

UserClientFactory = Callable[[str], SyncPostgrestClient]


def user_rest_client_factory(supabase_url: str, api_key: str) -> UserClientFactory:
    """Return a factory for PostgREST clients acting as the token's user."""
    rest_url = f"{supabase_url.rstrip('/')}/rest/v1"

    def build(access_token: str) -> SyncPostgrestClient:
        return SyncPostgrestClient(
            rest_url,
            headers={
                **DEFAULT_POSTGREST_CLIENT_HEADERS,
                "apikey": api_key,
                "Authorization": f"Bearer {access_token}",
            },
        )

    return build


@dataclass
class SupabasePreferencesRepository(PreferencesRepository):
    """Supabase implementation calling the preference procedures.

    Procedures run with the caller's token so `auth.uid()` names the caller.
    """

    client: Client
    user_client: UserClientFactory

    def toggle_favorite(self, recipe_id: str, access_token: str) -> dict[str, object]:
        """Call toggle_favorite for a recipe."""
        return self._rpc("toggle_favorite", {"recipe_uuid": recipe_id}, access_token)

    def set_rating(
        self, recipe_id: str, rating: int, access_token: str
    ) -> dict[str, object]:
        """Call set_recipe_rating for a recipe."""
        return self._rpc(
            "set_recipe_rating",
            {"recipe_uuid": recipe_id, "rating_value": rating},
            access_token,
        )

    def remove_rating(self, recipe_id: str, access_token: str) -> dict[str, object]:
        """Call remove_recipe_rating for a recipe."""
        return self._rpc(
            "remove_recipe_rating", {"recipe_uuid": recipe_id}, access_token
        )

    def get_preferences(
        self, recipe_ids: list[str], access_token: str
    ) -> dict[str, object]:
        """Call get_user_recipe_preferences for a set of recipes."""
        return self._rpc(
            "get_user_recipe_preferences", {"recipe_uuids": recipe_ids}, access_token
        )

    def list_favorite_recipes(self, user_id: str) -> list[StoredRecipe]:
        """Return favorite recipes joined from the recipes table."""
        response = (
            self.client.table("user_favorites")
            .select(
                "recipe_id, recipes (id, title, ingredients, steps, meal_type, "
                "created_at)"
            )
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return [
            parse_recipe_row(row["recipes"])
            for row in response.data or []
            if row.get("recipes")
        ]

    def _rpc(
        self, name: str, params: dict[str, object], access_token: str
    ) -> dict[str, object]:
        with self.user_client(access_token) as rest:
            response = rest.rpc(name, params).execute()
        data = response.data
        if isinstance(data, list):
            data = data[0] if data else None
        return data or {}
