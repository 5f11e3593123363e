"""Request body validation for the recipe API."""

import json

from fastapi import Request


class InvalidRequestError(ValueError):
    """Raised when a request body fails validation."""


async def read_json_body(request: Request) -> dict[str, object]:
    """Return the JSON object body, or an empty dict for anything else."""
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return payload if isinstance(payload, dict) else {}


def parse_ingredients(payload: dict[str, object]) -> list[str]:
    """Return the non-blank ingredients of a request body."""
    raw = payload.get("ingredients")
    if not isinstance(raw, list) or not raw:
        raise InvalidRequestError("Ingredients array is required")
    valid = [item.strip() for item in raw if isinstance(item, str) and item.strip()]
    if not valid:
        raise InvalidRequestError("At least one valid ingredient is required")
    return valid


def parse_meal_type(payload: dict[str, object]) -> str | None:
    """Return the requested meal type, if any."""
    raw = payload.get("mealType")
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return None

