"""Nutrition estimation providers: shared contract and response parsing."""

import json
import re
from typing import Protocol

from pydantic import ValidationError

from food_logger.domain.estimates import MacroEstimate

ESTIMATE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "kcal": {"type": "number", "minimum": 0},
        "protein_g": {"type": "number", "minimum": 0},
        "carbs_g": {"type": "number", "minimum": 0},
        "fat_g": {"type": "number", "minimum": 0},
        "fiber_g": {"anyOf": [{"type": "number", "minimum": 0}, {"type": "null"}]},
        "confidence": {"type": "number", "minimum": 0, "maximum": 1},
        "assumptions": {"anyOf": [{"type": "string"}, {"type": "null"}]},
    },
    "required": [
        "name",
        "kcal",
        "protein_g",
        "carbs_g",
        "fat_g",
        "fiber_g",
        "confidence",
        "assumptions",
    ],
    "additionalProperties": False,
}

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)


class EstimationFailed(RuntimeError):
    """Raised when a provider cannot produce a valid macro estimate."""


class ConfigurationError(RuntimeError):
    """Raised when the selected provider is missing required settings."""


class Estimator(Protocol):
    """Interface for text-to-nutrition estimation providers."""

    model: str

    def build_prompt(self, food_text: str) -> str:
        """Return the prompt sent to the provider for a food description."""

    async def estimate(self, food_text: str) -> MacroEstimate:
        """Return macros for the exact quantity described in the text."""


def build_prompt(food_text: str, *, extra_instructions: str = "") -> str:
    """Build the estimation prompt shared by all providers."""
    prompt = (
        "You estimate nutrition for food logs.\n"
        "Return ONLY JSON that matches this JSON schema:\n"
        f"{json.dumps(ESTIMATE_SCHEMA)}\n\n"
        "If the text specifies a quantity or weight (like \"200g chicken\"), "
        "provide nutrition for that exact amount, not per 100g. "
        "Otherwise assume one typical serving.\n"
        "If details are missing (brand, portion), make a reasonable generic "
        "estimate and lower the confidence.\n"
    )
    if extra_instructions:
        prompt += f"{extra_instructions}\n"
    return f"{prompt}\nFood: {food_text}"


def parse_estimate(text: str | None, provider: str) -> MacroEstimate:
    """Parse and validate a provider's text response into an estimate."""
    cleaned = strip_reasoning(text or "")
    if not cleaned:
        raise EstimationFailed(f"{provider} returned empty response")
    payload = extract_json_object(cleaned)
    if payload is None:
        raise EstimationFailed(f"{provider} returned non-JSON: {cleaned}")
    try:
        return MacroEstimate.model_validate(payload)
    except ValidationError as exc:
        raise EstimationFailed(
            f"{provider} returned an invalid estimate: {exc}"
        ) from exc


def strip_reasoning(text: str) -> str:
    """Remove <think> reasoning blocks some models prepend to answers."""
    return _THINK_BLOCK.sub("", text).strip()


def extract_json_object(text: str) -> dict[str, object] | None:
    """Return the first well-formed JSON object embedded in text."""
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)
    return None
