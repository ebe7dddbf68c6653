"""Ollama-backed nutrition estimator."""

from dataclasses import dataclass

import httpx

from food_logger.domain.estimates import MacroEstimate
from food_logger.services.estimators import (
    ESTIMATE_SCHEMA,
    EstimationFailed,
    Estimator,
    build_prompt,
    parse_estimate,
)


@dataclass
class OllamaEstimator(Estimator):
    """Estimator calling a local Ollama server's generate API."""

    url: str
    model: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 60.0

    @classmethod
    def create(cls, url: str, model: str) -> "OllamaEstimator":
        """Create an Ollama estimator with a managed httpx session."""
        return cls(url=url, model=model, http_client=httpx.AsyncClient())

    def build_prompt(self, food_text: str) -> str:
        """Return the generate prompt for a food description."""
        return build_prompt(food_text)

    async def estimate(self, food_text: str) -> MacroEstimate:
        """Estimate macros with JSON-schema constrained generation."""
        try:
            response = await self.http_client.post(
                self.url,
                json={
                    "model": self.model,
                    "prompt": self.build_prompt(food_text),
                    "stream": False,
                    "format": ESTIMATE_SCHEMA,
                    "options": {"temperature": 0.2, "num_predict": 220},
                },
                timeout=self.timeout_seconds,
            )
        except httpx.HTTPError as exc:
            raise EstimationFailed(f"Ollama request failed: {exc}") from exc
        if response.is_error:
            raise EstimationFailed(
                f"Ollama error {response.status_code}: {response.text}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise EstimationFailed(f"Ollama returned non-JSON: {response.text}") from exc
        return parse_estimate(str(payload.get("response") or ""), "Ollama")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
