"""OpenAI access for plant name generation."""

import logging
from typing import Any

import httpx
from openai import AsyncOpenAI
from pydantic_ai.providers.openai import OpenAIProvider

from plantnamer.config import OpenAISettings, Settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are PlantNamer, an AI that creates a single funny/punny name for a houseplant "
    "based on a short description. Your output must be concise, wholesome, "
    "family-friendly, and internet-friendly."
)


def extract_part_text(part: Any) -> str:
    """Return the text of one content part, or "" for non-text parts.

    Parts arrive either as plain strings, as dicts from raw JSON, or as SDK
    objects with a ``text`` attribute.
    """
    if isinstance(part, str):
        return part
    if isinstance(part, dict):
        text = part.get("text")
    else:
        text = getattr(part, "text", None)
    return text if isinstance(text, str) else ""


def extract_message_text(completion: Any) -> str | None:
    """Extract the first choice's message content from a chat completion.

    Args:
        completion: A chat completion response.

    Returns:
        The content string; text parts joined by newlines when the content is
        a list of parts; None when there is no usable content.
    """
    choices = getattr(completion, "choices", None)
    if not choices:
        return None

    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)

    if isinstance(content, str):
        return content

    if isinstance(content, list):
        return "\n".join(extract_part_text(part) for part in content).strip()

    return None


def build_openai_client(settings: OpenAISettings) -> AsyncOpenAI:
    """Client from pydantic-ai's OpenAIProvider, the only part of pydantic-ai in use."""
    provider = OpenAIProvider(
        base_url=settings.base_url,
        api_key=settings.api_key,
        http_client=httpx.AsyncClient(timeout=settings.timeout_seconds),
    )
    return provider.client


class ModelAgent:
    """Thin wrapper around the OpenAI client.

    Prefers the Responses API and drops to Chat Completions when it is
    disabled in settings or the installed client does not offer it.
    """

    def __init__(self, settings: OpenAISettings, client: AsyncOpenAI | None = None):
        """Initialize the agent.

        Args:
            settings: OpenAI provider settings.
            client: Optional pre-built client (tests inject fakes here).
        """
        self.settings = settings
        self.client = client if client is not None else build_openai_client(settings)

    @property
    def supports_responses(self) -> bool:
        responses = getattr(self.client, "responses", None)
        return responses is not None and callable(getattr(responses, "create", None))

    def _messages(self, prompt: str) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

    async def complete(self, prompt: str) -> str | None:
        """Send the system prompt and ``prompt`` to the model.

        Args:
            prompt: The user prompt.

        Returns:
            Raw model text, or None if the response carried no text.

        Raises:
            openai.OpenAIError: On network, auth or provider failures.
        """
        if self.settings.use_responses_api and self.supports_responses:
            logger.debug(f"Calling Responses API (model={self.settings.responses_model})")
            response = await self.client.responses.create(
                model=self.settings.responses_model,
                input=self._messages(prompt),
            )
            return response.output_text

        logger.debug(f"Calling Chat Completions API (model={self.settings.chat_model})")
        completion = await self.client.chat.completions.create(
            model=self.settings.chat_model,
            messages=self._messages(prompt),
        )
        return extract_message_text(completion)


_cached_agent: ModelAgent | None = None


def get_model_agent(settings: Settings) -> ModelAgent:
    """Return the process-wide model agent, creating it on first use.

    Args:
        settings: Application settings; only read on the first call.

    Returns:
        The shared ModelAgent.
    """
    global _cached_agent

    if _cached_agent is None:
        settings.validate_required()
        _cached_agent = ModelAgent(settings.openai)
        logger.info(
            "Created OpenAI client",
            extra={"base_url": settings.openai.base_url},
        )

    return _cached_agent


def reset_model_agent() -> None:
    """Forget the cached agent so the next call builds a fresh one."""
    global _cached_agent
    _cached_agent = None
