"""Models for chat completion results returned by the LLM gateway."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ToolCall:
    """A function call requested by the model."""

    id: str
    name: str
    arguments: str


@dataclass(frozen=True)
class ChatCompletionResult:
    """The parts of a chat completion the recipe services rely on."""

    id: str | None
    model: str | None
    finish_reason: str | None
    content: str | None
    tool_calls: list[ToolCall] = field(default_factory=list)
    usage: dict[str, object] | None = None
