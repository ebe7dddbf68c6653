"""OpenAI Responses API estimator with structured outputs."""

from dataclasses import dataclass

from openai import AsyncOpenAI, OpenAIError

from food_logger.domain.estimates import MacroEstimate
from food_logger.services.estimators import (
    ESTIMATE_SCHEMA,
    EstimationFailed,
    Estimator,
    build_prompt,
    parse_estimate,
)


@dataclass
class OpenAIEstimator(Estimator):
    """Estimator backed by the OpenAI Responses API."""

    client: AsyncOpenAI
    model: str
    reasoning_effort: str | None = None
    store: bool = False

    @classmethod
    def create(
        cls,
        api_key: str,
        model: str,
        reasoning_effort: str | None = None,
        store: bool = False,
    ) -> "OpenAIEstimator":
        """Create an OpenAI estimator."""
        return cls(
            client=AsyncOpenAI(api_key=api_key),
            model=model,
            reasoning_effort=reasoning_effort,
            store=store,
        )

    def build_prompt(self, food_text: str) -> str:
        """Return the prompt for a food description."""
        return build_prompt(food_text)

    async def estimate(self, food_text: str) -> MacroEstimate:
        """Call the Responses API with a strict JSON schema."""
        request_payload: dict[str, object] = {
            "model": self.model,
            "input": self.build_prompt(food_text),
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "macro_estimate",
                    "strict": True,
                    "schema": ESTIMATE_SCHEMA,
                }
            },
            "store": self.store,
        }
        if self.reasoning_effort:
            request_payload["reasoning"] = {"effort": self.reasoning_effort}

        try:
            response = await self.client.responses.create(**request_payload)
        except OpenAIError as exc:
            raise EstimationFailed(f"OpenAI error: {exc}") from exc
        return parse_estimate(response.output_text, "OpenAI")

    async def close(self) -> None:
        """Close the underlying OpenAI client."""
        await self.client.close()
