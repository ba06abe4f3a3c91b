"""Name generation pipeline: prompt, call the model, parse, retry, fall back."""

import logging

from plantnamer.config import GenerationSettings
from plantnamer.core.agent import ModelAgent
from plantnamer.core.parsing import parse_model_output
from plantnamer.models.name import FALLBACK_RESULT, NameResult
from plantnamer.utils.errors import ParseFailure, UpstreamFailure, classify_exception

logger = logging.getLogger(__name__)

USER_PROMPT = """Task: Create ONE funny/punny name for a houseplant described below, plus ONE short rationale (max {why_max_words} words).

Plant description: "{description}"

Constraints:
- Output EXACTLY two lines:
  1) Name: <the best plant name only, 2-4 words, capitalize sensibly>
  2) Why: <one witty reason, max {why_max_words} words, no emojis>
- Keep it family-friendly and light.
- Avoid repeating the plant species in the name unless it improves the pun.
- Don't include quotes around the name."""

FORMAT_REMINDER = "Reminder: Follow the EXACT two-line format (Name:/Why:)."


class NameGenerator:
    """Turns a validated description into a NameResult.

    The model gets two tries: the plain prompt, then the same prompt with a
    format reminder. If neither reply parses, the fallback name is returned.
    Whether a failing model call aborts the request or also falls back is
    governed by ``GenerationSettings.upstream_failure_policy``.
    """

    def __init__(self, agent: ModelAgent, settings: GenerationSettings | None = None):
        self.agent = agent
        self.settings = settings or GenerationSettings()

    def build_prompts(self, description: str) -> list[str]:
        """Return the prompt for each attempt, in order."""
        prompt = USER_PROMPT.format(
            description=description,
            why_max_words=self.settings.why_max_words,
        )
        return [prompt, f"{prompt}\n\n{FORMAT_REMINDER}"]

    async def _attempt(self, prompt: str) -> NameResult:
        raw_output = await self.agent.complete(prompt)
        result = parse_model_output(
            raw_output,
            name_max_length=self.settings.name_max_length,
            why_max_words=self.settings.why_max_words,
        )
        if result is None:
            raise ParseFailure(f"Unparseable model output: {raw_output!r}")
        return result

    async def generate(self, description: str) -> NameResult:
        """Generate a plant name for ``description``.

        Args:
            description: Validated, trimmed plant description.

        Returns:
            The parsed result, or FALLBACK_RESULT when no attempt parsed.

        Raises:
            UpstreamFailure: If a model call fails and the policy is "raise".
        """
        prompts = self.build_prompts(description)
        last_error: Exception | None = None

        for attempt, prompt in enumerate(prompts, start=1):
            try:
                result = await self._attempt(prompt)
            except ParseFailure as e:
                logger.warning(
                    f"Attempt {attempt}/{len(prompts)} returned unparseable output",
                    extra={"attempt": attempt, "error_type": type(e).__name__},
                )
                logger.debug(e.detail)
                continue
            except Exception as e:
                if self.settings.upstream_failure_policy == "raise":
                    raise UpstreamFailure(e) from e
                last_error = e
                logger.warning(
                    f"Attempt {attempt}/{len(prompts)} failed calling the model: "
                    f"{type(e).__name__}: {e}",
                    extra={
                        "attempt": attempt,
                        "error_type": type(e).__name__,
                        "error_code": classify_exception(e).value,
                    },
                )
                continue

            logger.info(
                f"Generated plant name on attempt {attempt}: {result.name!r}",
                extra={"attempt": attempt},
            )
            return result

        if last_error is not None:
            logger.error(
                f"Model call failed, answering with fallback name: {last_error}",
                extra={"error_type": type(last_error).__name__},
            )
        else:
            logger.warning("No attempt produced a parseable name, using fallback")

        return FALLBACK_RESULT
