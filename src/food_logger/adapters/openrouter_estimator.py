"""OpenRouter chat-completions estimator."""

from dataclasses import dataclass

from openai import AsyncOpenAI, OpenAIError

from food_logger.domain.estimates import MacroEstimate
from food_logger.services.estimators import (
    EstimationFailed,
    Estimator,
    build_prompt,
    parse_estimate,
)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


@dataclass
class OpenRouterEstimator(Estimator):
    """Estimator using OpenRouter's OpenAI-compatible chat API.

    Reasoning models served here may wrap their answer in <think> markup or
    code fences, so the JSON object is extracted from the raw text.
    """

    client: AsyncOpenAI
    model: str
    max_tokens: int = 1000

    @classmethod
    def create(
        cls, api_key: str, model: str, base_url: str = OPENROUTER_BASE_URL
    ) -> "OpenRouterEstimator":
        """Create an OpenRouter estimator."""
        return cls(client=AsyncOpenAI(api_key=api_key, base_url=base_url), model=model)

    def build_prompt(self, food_text: str) -> str:
        """Return the chat prompt for a food description."""
        return build_prompt(
            food_text,
            extra_instructions=(
                "Do NOT include any thinking tags or reasoning. "
                "Return ONLY the JSON object."
            ),
        )

    async def estimate(self, food_text: str) -> MacroEstimate:
        """Request a completion and parse the embedded JSON estimate."""
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": self.build_prompt(food_text)}],
                temperature=0.2,
                max_tokens=self.max_tokens,
                extra_body={"provider": {"data_collection": "deny"}},
            )
        except OpenAIError as exc:
            raise EstimationFailed(f"OpenRouter error: {exc}") from exc
        content = response.choices[0].message.content if response.choices else None
        return parse_estimate(content, "OpenRouter")

    async def close(self) -> None:
        """Close the underlying OpenAI client."""
        await self.client.close()
