"""Recipe generation and refinement through an LLM tool-call contract."""

import json
import logging
from dataclasses import dataclass, field
from typing import Protocol

from recipe_finder.domain.completions import ChatCompletionResult
from recipe_finder.domain.recipes import Recipe
from recipe_finder.services.prompts import (
    GENERATE_RECIPES_V2,
    RECIPE_COUNT,
    REFINE_RECIPE_V1,
    PromptTemplate,
)

logger = logging.getLogger(__name__)


class RecipeResponseError(RuntimeError):
    """Raised when the model response breaks the recipe tool contract."""


class ChatCompletionClient(Protocol):
    """Interface for an OpenAI-compatible chat completion endpoint."""

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        messages: list[dict[str, object]],
        tools: list[dict[str, object]],
        tool_choice: dict[str, object],
        headers: dict[str, str],
    ) -> ChatCompletionResult:
        """Send one chat completion request and return the parsed result."""


@dataclass
class RecipeGenerator:
    """Builds recipe prompts, calls the model and validates its tool calls."""

    client: ChatCompletionClient
    model: str
    app_referer: str
    app_title: str
    generation_template: PromptTemplate = field(default=GENERATE_RECIPES_V2)
    refinement_template: PromptTemplate = field(default=REFINE_RECIPE_V1)

    async def generate_recipes(
        self, ingredients: list[str], meal_type: str | None = None
    ) -> list[Recipe]:
        """Generate exactly three recipes from the given ingredients."""
        template = self.generation_template
        messages = template.build_messages(
            ingredients=", ".join(ingredients),
            meal_type=_meal_type_clause(meal_type),
        )
        logger.info(
            "Requesting recipes",
            extra={
                "model": self.model,
                "prompt_version": template.version,
                "message_count": len(messages),
            },
        )
        try:
            result = await self.client.complete(
                model=self.model,
                messages=messages,
                tools=[template.tool()],
                tool_choice=template.tool_choice(),
                headers=self._headers(self.app_title),
            )
            _log_completion(result)
            arguments = _tool_arguments(
                result,
                template.name,
                missing="No tool calls received from OpenRouter",
                unexpected="Unexpected tool call received",
            )
            raw_recipes = (
                arguments.get("recipes") if isinstance(arguments, dict) else None
            )
            return _validate_recipes(raw_recipes, meal_type)
        except json.JSONDecodeError as exc:
            logger.exception(
                "Recipe response was not valid JSON",
                extra={"ingredients": ingredients},
            )
            raise RecipeResponseError(
                "Failed to parse recipe response from AI"
            ) from exc
        except Exception:
            logger.exception(
                "Recipe generation failed", extra={"ingredients": ingredients}
            )
            raise

    async def refine_recipe(self, recipe: Recipe, instruction: str) -> Recipe:
        """Refine a recipe, always keeping the original recipe id."""
        template = self.refinement_template
        messages = template.build_messages(
            title=recipe.title,
            ingredients=", ".join(recipe.ingredients),
            steps=" | ".join(recipe.steps),
            instruction=instruction,
            recipe_id=recipe.id,
        )
        logger.info(
            "Requesting recipe refinement",
            extra={"recipe_id": recipe.id, "model": self.model},
        )
        try:
            result = await self.client.complete(
                model=self.model,
                messages=messages,
                tools=[template.tool()],
                tool_choice=template.tool_choice(),
                headers=self._headers(f"{self.app_title} - Recipe Refinement"),
            )
            _log_completion(result)
            arguments = _tool_arguments(
                result,
                template.name,
                missing="No tool calls received from OpenRouter for recipe refinement",
                unexpected="Unexpected tool call received for recipe refinement",
            )
            raw = arguments.get("recipe") if isinstance(arguments, dict) else None
            return _validate_refined(raw, recipe)
        except json.JSONDecodeError as exc:
            logger.exception(
                "Refinement response was not valid JSON",
                extra={"recipe_id": recipe.id, "instruction": instruction},
            )
            raise RecipeResponseError(
                "Failed to parse refined recipe response from AI"
            ) from exc
        except Exception:
            logger.exception(
                "Recipe refinement failed",
                extra={"recipe_id": recipe.id, "instruction": instruction},
            )
            raise

    def _headers(self, title: str) -> dict[str, str]:
        return {"HTTP-Referer": self.app_referer, "X-Title": title}


def _meal_type_clause(meal_type: str | None) -> str:
    """Return the user prompt suffix for a requested meal type."""
    if not meal_type or meal_type == "any":
        return ""
    return f". The recipes should be suitable for {meal_type}."


def _log_completion(result: ChatCompletionResult) -> None:
    logger.info(
        "Received completion",
        extra={
            "response_id": result.id,
            "response_model": result.model,
            "finish_reason": result.finish_reason,
            "tool_call_count": len(result.tool_calls),
            "usage": result.usage,
        },
    )


def _tool_arguments(
    result: ChatCompletionResult, name: str, *, missing: str, unexpected: str
) -> object:
    """Return the decoded arguments of the first tool call."""
    if not result.tool_calls:
        logger.error("Model returned no tool call", extra={"content": result.content})
        raise RecipeResponseError(missing)
    tool_call = result.tool_calls[0]
    if tool_call.name != name:
        raise RecipeResponseError(unexpected)
    return json.loads(tool_call.arguments)


def _has_required_fields(raw: object) -> bool:
    return (
        isinstance(raw, dict)
        and bool(raw.get("id"))
        and bool(raw.get("title"))
        and isinstance(raw.get("ingredients"), list)
        and isinstance(raw.get("steps"), list)
    )


def _meal_type(raw: dict[str, object]) -> str | None:
    """Return the model-supplied meal type, ignoring blank or non-string values."""
    value = raw.get("mealType")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _validate_recipes(raw: object, meal_type: str | None) -> list[Recipe]:
    """Validate the generated recipe list and convert it to domain models."""
    if not isinstance(raw, list) or len(raw) != RECIPE_COUNT:
        raise RecipeResponseError(
            "Invalid response format: expected array of 3 recipes"
        )
    fallback_meal_type = meal_type if meal_type and meal_type != "any" else None
    recipes: list[Recipe] = []
    for index, item in enumerate(raw):
        if not _has_required_fields(item):
            raise RecipeResponseError(f"Invalid recipe structure at index {index}")
        if not item["ingredients"] or not item["steps"]:
            raise RecipeResponseError(
                f"Recipe at index {index} has empty ingredients or steps"
            )
        recipes.append(
            Recipe(
                id=str(item["id"]),
                title=str(item["title"]),
                ingredients=[str(value) for value in item["ingredients"]],
                steps=[str(value) for value in item["steps"]],
                meal_type=_meal_type(item) or fallback_meal_type,
            )
        )
    return recipes


def _validate_refined(raw: object, original: Recipe) -> Recipe:
    """Validate a refined recipe and pin it to the original id."""
    if not isinstance(raw, dict):
        raise RecipeResponseError(
            "Invalid refinement response format: expected recipe object"
        )
    if not _has_required_fields(raw):
        raise RecipeResponseError(
            "Invalid refined recipe structure: missing required fields"
        )
    if not raw["ingredients"] or not raw["steps"]:
        raise RecipeResponseError("Refined recipe has empty ingredients or steps")
    if str(raw["id"]) != original.id:
        logger.warning(
            "Recipe ID mismatch, correcting to original ID",
            extra={"returned_id": raw["id"], "recipe_id": original.id},
        )
    return Recipe(
        id=original.id,
        title=str(raw["title"]),
        ingredients=[str(value) for value in raw["ingredients"]],
        steps=[str(value) for value in raw["steps"]],
        meal_type=_meal_type(raw) or original.meal_type,
    )
