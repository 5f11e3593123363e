"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from recipe_finder.adapters.openrouter_client import OpenRouterChatClient
from recipe_finder.adapters.supabase_auth_verifier import SupabaseTokenVerifier
from recipe_finder.adapters.supabase_pantry_repository import SupabasePantryRepository
from recipe_finder.adapters.supabase_preferences_repository import (
    SupabasePreferencesRepository,
    user_rest_client_factory,
)
from recipe_finder.adapters.supabase_recipe_repository import SupabaseRecipeRepository
from recipe_finder.config import Settings
from recipe_finder.services.auth import AuthService
from recipe_finder.services.cache import InMemoryCache
from recipe_finder.services.pantry import PantryService
from recipe_finder.services.preferences import PreferencesService
from recipe_finder.services.prompts import get_generation_template
from recipe_finder.services.recipe_generator import RecipeGenerator
from recipe_finder.services.recipes import RecipeService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    recipe_generator: RecipeGenerator
    recipe_service: RecipeService
    preferences_service: PreferencesService
    pantry_service: PantryService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    chat_client = OpenRouterChatClient.create(
        api_key=resolved_settings.openrouter_api_key,
        base_url=resolved_settings.openrouter_base_url,
    )
    recipe_generator = RecipeGenerator(
        client=chat_client,
        model=resolved_settings.openrouter_model,
        app_referer=resolved_settings.app_referer,
        app_title=resolved_settings.app_title,
        generation_template=get_generation_template(
            resolved_settings.generation_prompt_version
        ),
    )
    recipe_service = RecipeService(
        repository=SupabaseRecipeRepository(supabase_client),
        ai_model=resolved_settings.openrouter_model,
    )
    preferences_service = PreferencesService(
        SupabasePreferencesRepository(
            client=supabase_client,
            user_client=user_rest_client_factory(
                resolved_settings.supabase_url, resolved_settings.supabase_service_key
            ),
        )
    )
    pantry_service = PantryService(
        repository=SupabasePantryRepository(supabase_client),
        cache=InMemoryCache(),
    )

    async def close_resources() -> None:
        await chat_client.close()

    return AppContainer(
        settings=resolved_settings,
        auth_service=AuthService(SupabaseTokenVerifier(supabase_client)),
        recipe_generator=recipe_generator,
        recipe_service=recipe_service,
        preferences_service=preferences_service,
        pantry_service=pantry_service,
        close_resources=close_resources,
    )
