"""Tests for the name generation pipeline."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from plantnamer.config import GenerationSettings
from plantnamer.core.generator import FORMAT_REMINDER, USER_PROMPT, NameGenerator
from plantnamer.models.name import FALLBACK_RESULT, NameResult
from plantnamer.utils.errors import ErrorCode, UpstreamFailure

GOOD_OUTPUT = "Name: Fernie Sanders\nWhy: Runs on sunlight and strong opinions."
BAD_OUTPUT = "I can't help with that."


def connection_error() -> openai.APIConnectionError:
    return openai.APIConnectionError(
        request=httpx.Request("POST", "https://api.openai.com/v1/responses")
    )


@pytest.fixture
def mock_agent():
    """Create a mock model agent."""
    agent = MagicMock()
    agent.complete = AsyncMock()
    return agent


class TestPrompts:
    """Tests for prompt construction."""

    def test_template_placeholders(self):
        assert "{description}" in USER_PROMPT
        assert "{why_max_words}" in USER_PROMPT

    def test_first_prompt_embeds_description(self, mock_agent):
        prompts = NameGenerator(mock_agent).build_prompts("tiny succulent that sunbathes")
        assert 'Plant description: "tiny succulent that sunbathes"' in prompts[0]
        assert "Name:" in prompts[0]
        assert "Why:" in prompts[0]
        assert "max 14 words" in prompts[0]

    def test_second_prompt_adds_reminder(self, mock_agent):
        first, second = NameGenerator(mock_agent).build_prompts("spider plant sprinting")
        assert FORMAT_REMINDER not in first
        assert second == f"{first}\n\n{FORMAT_REMINDER}"

    def test_description_braces_are_not_formatted(self, mock_agent):
        prompts = NameGenerator(mock_agent).build_prompts("fern {with} braces")
        assert "fern {with} braces" in prompts[0]


class TestGenerate:
    """Tests for NameGenerator.generate."""

    @pytest.mark.asyncio
    async def test_first_attempt_success(self, mock_agent):
        mock_agent.complete.return_value = GOOD_OUTPUT

        result = await NameGenerator(mock_agent).generate("opinionated fern")

        assert result == NameResult(
            name="Fernie Sanders", why="Runs on sunlight and strong opinions."
        )
        assert mock_agent.complete.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_with_reminder_after_parse_failure(self, mock_agent):
        mock_agent.complete.side_effect = [BAD_OUTPUT, GOOD_OUTPUT]

        result = await NameGenerator(mock_agent).generate("opinionated fern")

        assert result.name == "Fernie Sanders"
        assert mock_agent.complete.await_count == 2
        second_prompt = mock_agent.complete.await_args_list[1].args[0]
        assert second_prompt.endswith(FORMAT_REMINDER)

    @pytest.mark.asyncio
    async def test_fallback_after_two_parse_failures(self, mock_agent):
        mock_agent.complete.side_effect = [BAD_OUTPUT, BAD_OUTPUT]

        result = await NameGenerator(mock_agent).generate("opinionated fern")

        assert result == FALLBACK_RESULT
        assert result.name == "Leafy McLeaface"
        assert result.why == "Cheerful, punny, and easy to like."
        assert mock_agent.complete.await_count == 2

    @pytest.mark.asyncio
    async def test_none_output_counts_as_parse_failure(self, mock_agent):
        mock_agent.complete.side_effect = [None, None]

        result = await NameGenerator(mock_agent).generate("opinionated fern")

        assert result == FALLBACK_RESULT

    @pytest.mark.asyncio
    async def test_name_too_long_triggers_retry(self, mock_agent):
        mock_agent.complete.side_effect = [
            "Name: The Extraordinarily Verbose Fern Of Doom\nWhy: Too much.",
            GOOD_OUTPUT,
        ]

        result = await NameGenerator(mock_agent).generate("verbose fern")

        assert result.name == "Fernie Sanders"

    @pytest.mark.asyncio
    async def test_generation_limits_are_applied(self, mock_agent):
        mock_agent.complete.side_effect = [GOOD_OUTPUT, GOOD_OUTPUT]
        generator = NameGenerator(mock_agent, GenerationSettings(name_max_length=5))

        result = await generator.generate("opinionated fern")

        assert result == FALLBACK_RESULT

    @pytest.mark.asyncio
    async def test_upstream_error_raises_by_default(self, mock_agent):
        error = connection_error()
        mock_agent.complete.side_effect = error

        with pytest.raises(UpstreamFailure) as exc_info:
            await NameGenerator(mock_agent).generate("opinionated fern")

        assert exc_info.value.original_error is error
        assert exc_info.value.upstream_code == ErrorCode.UPSTREAM_UNAVAILABLE
        assert exc_info.value.message == "Something went wrong"
        assert mock_agent.complete.await_count == 1

    @pytest.mark.asyncio
    async def test_upstream_error_on_second_attempt_raises(self, mock_agent):
        mock_agent.complete.side_effect = [BAD_OUTPUT, connection_error()]

        with pytest.raises(UpstreamFailure):
            await NameGenerator(mock_agent).generate("opinionated fern")

    @pytest.mark.asyncio
    async def test_upstream_error_with_fallback_policy(self, mock_agent):
        mock_agent.complete.side_effect = [connection_error(), connection_error()]
        generator = NameGenerator(
            mock_agent, GenerationSettings(upstream_failure_policy="fallback")
        )

        result = await generator.generate("opinionated fern")

        assert result == FALLBACK_RESULT
        assert mock_agent.complete.await_count == 2

    @pytest.mark.asyncio
    async def test_fallback_policy_still_uses_second_attempt(self, mock_agent):
        mock_agent.complete.side_effect = [connection_error(), GOOD_OUTPUT]
        generator = NameGenerator(
            mock_agent, GenerationSettings(upstream_failure_policy="fallback")
        )

        result = await generator.generate("opinionated fern")

        assert result.name == "Fernie Sanders"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("policy", ["raise", "fallback"])
    async def test_cancellation_is_not_swallowed(self, mock_agent, policy):
        mock_agent.complete.side_effect = [asyncio.CancelledError(), GOOD_OUTPUT]
        generator = NameGenerator(mock_agent, GenerationSettings(upstream_failure_policy=policy))

        with pytest.raises(asyncio.CancelledError):
            await generator.generate("opinionated fern")

        assert mock_agent.complete.await_count == 1
