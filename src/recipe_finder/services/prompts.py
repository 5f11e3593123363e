"""Versioned prompt templates and tool schemas for the recipe model."""

import json
from dataclasses import dataclass

RECIPE_COUNT = 3


@dataclass(frozen=True)
class FewShotExample:
    """A sample exchange replayed before the real request."""

    request: str
    arguments: dict[str, object]
    tool_result: str
    call_id: str = "call_example"


@dataclass(frozen=True)
class PromptTemplate:
    """Prompt text plus the tool schema the model is forced to call."""

    name: str
    version: str
    description: str
    parameters: dict[str, object]
    system_prompt: str
    user_template: str
    example: FewShotExample | None = None

    def tool(self) -> dict[str, object]:
        """Return the tool declaration for the chat completion request."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def tool_choice(self) -> dict[str, object]:
        """Return a tool choice forcing a call to this template's tool."""
        return {"type": "function", "function": {"name": self.name}}

    def build_messages(self, **values: str) -> list[dict[str, object]]:
        """Build the message sequence with the user template filled in."""
        messages: list[dict[str, object]] = [
            {"role": "system", "content": self.system_prompt}
        ]
        if self.example is not None:
            messages.extend(
                [
                    {"role": "user", "content": self.example.request},
                    {
                        "role": "assistant",
                        "content": None,
                        "tool_calls": [
                            {
                                "id": self.example.call_id,
                                "type": "function",
                                "function": {
                                    "name": self.name,
                                    "arguments": json.dumps(self.example.arguments),
                                },
                            }
                        ],
                    },
                    {
                        "role": "tool",
                        "tool_call_id": self.example.call_id,
                        "content": self.example.tool_result,
                    },
                ]
            )
        messages.append(
            {"role": "user", "content": self.user_template.format(**values)}
        )
        return messages


def _recipe_properties(*, with_meal_type: bool) -> dict[str, object]:
    properties: dict[str, object] = {
        "id": {
            "type": "string",
            "description": "Unique identifier for the recipe (1, 2, or 3)",
        },
        "title": {"type": "string", "description": "Descriptive name of the recipe"},
        "ingredients": {
            "type": "array",
            "items": {"type": "string"},
            "description": "List of all ingredients needed for the recipe",
        },
        "steps": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Step-by-step cooking instructions",
        },
    }
    if with_meal_type:
        properties["mealType"] = {
            "type": "string",
            "description": "Meal the recipe suits: breakfast, lunch, dinner or snack",
        }
    return properties


def _generation_parameters(*, with_meal_type: bool) -> dict[str, object]:
    return {
        "type": "object",
        "properties": {
            "recipes": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": _recipe_properties(with_meal_type=with_meal_type),
                    "required": ["id", "title", "ingredients", "steps"],
                },
                "minItems": RECIPE_COUNT,
                "maxItems": RECIPE_COUNT,
                "description": "Array of exactly 3 unique recipes",
            }
        },
        "required": ["recipes"],
    }


_GENERATION_SYSTEM_PROMPT = """You are an expert chef and recipe creator. \
Your task is to generate creative, practical, and delicious recipes based on \
provided ingredients.

Guidelines:
- Each recipe must use all of the provided ingredients
- Include additional common pantry ingredients as needed
- Provide clear, step-by-step instructions that are easy to follow
- Prefer simple recipes over complex ones, best taste with minimum effort
- Make recipes suitable for home cooking with standard kitchen equipment
- Ensure recipes are from different cuisines or cooking styles for variety
- Use proper cooking terminology and techniques"""

_EXAMPLE_RECIPES: list[dict[str, object]] = [
    {
        "id": "1",
        "title": "Mediterranean Chicken Skillet",
        "ingredients": [
            "chicken breast",
            "tomatoes",
            "onions",
            "olive oil",
            "garlic",
            "oregano",
            "feta cheese",
            "salt",
            "pepper",
        ],
        "steps": [
            "Heat olive oil in a large skillet over medium-high heat",
            "Season chicken breast with salt and pepper, then cook for 6-7 minutes "
            "per side until golden",
            "Remove chicken and set aside, add sliced onions to the same pan",
            "Cook onions for 3-4 minutes until softened, add minced garlic",
            "Add diced tomatoes and oregano, simmer for 5 minutes",
            "Return chicken to pan, top with crumbled feta cheese",
            "Cover and cook for 2-3 minutes until cheese is slightly melted",
        ],
    },
    {
        "id": "2",
        "title": "Hearty Chicken and Tomato Soup",
        "ingredients": [
            "chicken thighs",
            "tomatoes",
            "onions",
            "chicken broth",
            "carrots",
            "celery",
            "bay leaves",
            "thyme",
            "salt",
            "pepper",
        ],
        "steps": [
            "In a large pot, brown chicken thighs on all sides, then set aside",
            "Add diced onions, carrots, and celery to the pot, cook until softened",
            "Add diced tomatoes and cook for 3 minutes",
            "Return chicken to pot, add chicken broth, bay leaves, and thyme",
            "Bring to a boil, then reduce heat and simmer for 25-30 minutes",
            "Remove chicken, shred the meat, and return to pot",
            "Season with salt and pepper, simmer for 5 more minutes",
        ],
    },
    {
        "id": "3",
        "title": "Baked Chicken with Tomato-Onion Topping",
        "ingredients": [
            "chicken drumsticks",
            "tomatoes",
            "onions",
            "balsamic vinegar",
            "honey",
            "rosemary",
            "garlic powder",
            "olive oil",
            "salt",
            "pepper",
        ],
        "steps": [
            "Preheat oven to 400°F (200°C)",
            "Season chicken drumsticks with salt, pepper, and garlic powder",
            "Place chicken in a baking dish and drizzle with olive oil",
            "In a bowl, mix sliced tomatoes and onions with balsamic vinegar "
            "and honey",
            "Top chicken with the tomato-onion mixture and fresh rosemary",
            "Bake for 35-40 minutes until chicken is cooked through",
            "Let rest for 5 minutes before serving",
        ],
    },
]

_GENERATION_EXAMPLE = FewShotExample(
    request="Generate 3 recipes using: chicken, tomatoes, onions",
    arguments={"recipes": _EXAMPLE_RECIPES},
    tool_result=(
        "Successfully generated 3 diverse chicken recipes using the provided "
        "ingredients."
    ),
)

GENERATE_RECIPES_V1 = PromptTemplate(
    name="generate_recipes",
    version="1",
    description="Generate exactly 3 unique recipes using the provided ingredients",
    parameters=_generation_parameters(with_meal_type=False),
    system_prompt=_GENERATION_SYSTEM_PROMPT,
    user_template="Generate 3 recipes using these ingredients: {ingredients}",
    example=_GENERATION_EXAMPLE,
)

GENERATE_RECIPES_V2 = PromptTemplate(
    name="generate_recipes",
    version="2",
    description=(
        "Generate exactly 3 unique recipes using the provided ingredients, "
        "tagged with the meal they suit"
    ),
    parameters=_generation_parameters(with_meal_type=True),
    system_prompt=_GENERATION_SYSTEM_PROMPT,
    user_template=(
        "Generate 3 recipes using these ingredients: {ingredients}{meal_type}"
    ),
    example=_GENERATION_EXAMPLE,
)

REFINE_RECIPE_V1 = PromptTemplate(
    name="refine_recipe",
    version="1",
    description="Refine an existing recipe based on user instructions",
    parameters={
        "type": "object",
        "properties": {
            "recipe": {
                "type": "object",
                "properties": {
                    "id": {
                        "type": "string",
                        "description": "Keep the same ID as the original recipe",
                    },
                    "title": {
                        "type": "string",
                        "description": "Updated title that reflects the refinement",
                    },
                    "ingredients": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": (
                            "Updated list of ingredients based on the refinement "
                            "instruction"
                        ),
                    },
                    "steps": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Updated step-by-step cooking instructions",
                    },
                },
                "required": ["id", "title", "ingredients", "steps"],
            }
        },
        "required": ["recipe"],
    },
    system_prompt="""You are an expert chef and recipe creator. Your task is to \
refine existing recipes based on user instructions while maintaining the essence \
and quality of the original recipe.

Guidelines:
- Carefully follow the user's refinement instruction
- Maintain the cooking style and complexity level unless specifically asked to \
change it
- Ensure the refined recipe is practical and achievable with standard kitchen \
equipment
- Keep ingredient substitutions reasonable and accessible
- Preserve the original recipe ID
- Update the title to reflect any significant changes
- Provide clear, step-by-step instructions that incorporate the refinement""",
    user_template="""Please refine this recipe based on the following instruction:

Original Recipe:
Title: {title}
Ingredients: {ingredients}
Steps: {steps}

Refinement Instruction: {instruction}

Please provide the refined recipe with the same ID ({recipe_id}) but updated \
according to the instruction.""",
)

GENERATION_TEMPLATES: dict[str, PromptTemplate] = {
    template.version: template
    for template in (GENERATE_RECIPES_V1, GENERATE_RECIPES_V2)
}


def get_generation_template(version: str) -> PromptTemplate:
    """Return the generation template registered for a version."""
    try:
        return GENERATION_TEMPLATES[version]
    except KeyError:
        raise ValueError(f"Unknown generation prompt version: {version}") from None
