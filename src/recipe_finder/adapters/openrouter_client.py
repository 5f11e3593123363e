"""OpenRouter chat completions client for recipe tool calls."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from recipe_finder.domain.completions import ChatCompletionResult, ToolCall
from recipe_finder.services.recipe_generator import ChatCompletionClient


@dataclass
class OpenRouterChatClient(ChatCompletionClient):
    """Chat completion client backed by the OpenAI SDK pointed at OpenRouter."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "OpenRouterChatClient":
        """Create a client that makes a single attempt per request."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)
        )

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        messages: list[dict[str, object]],
        tools: list[dict[str, object]],
        tool_choice: dict[str, object],
        headers: dict[str, str],
    ) -> ChatCompletionResult:
        """Call the chat completions endpoint with a forced tool choice."""
        completion = await self.client.chat.completions.create(
            model=model,
            messages=messages,
            tools=tools,
            tool_choice=tool_choice,
            extra_headers=headers,
        )
        choice = completion.choices[0] if completion.choices else None
        message = choice.message if choice else None
        tool_calls = [
            ToolCall(
                id=call.id,
                name=call.function.name,
                arguments=call.function.arguments,
            )
            for call in ((message.tool_calls or []) if message else [])
            if getattr(call, "function", None) is not None
        ]
        usage = completion.usage.model_dump() if completion.usage else None
        return ChatCompletionResult(
            id=completion.id,
            model=completion.model,
            finish_reason=choice.finish_reason if choice else None,
            content=message.content if message else None,
            tool_calls=tool_calls,
            usage=usage,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
