"""Scent descriptions generated from food photos."""

from __future__ import annotations

import base64
from typing import Protocol

import openai
from loguru import logger

from .errors import DescriptionGenerationError

__all__ = [
    "DescriptionGenerator",
    "OpenAIDescriptionGenerator",
    "SCENT_PROMPT",
]

SCENT_PROMPT = (
    "Describe the aromas and smells of this food in vivid, sensory detail. "
    "Write 2-3 sentences that evoke the scent memory. "
    "Be warm, nostalgic, and emotionally evocative. "
    "Focus on specific scent notes like herbs, spices, cooking methods (roasted, simmered, etc.), "
    "and the feelings these aromas bring. "
    "Write as if you're helping someone remember home."
)

SUGGESTION_PROMPT = (
    'Based on this scent description: "{description}"\n\n'
    "Suggest 3-4 candles or incense products that might recreate similar aromas.\n"
    "Format: Just the product names, one per line.\n"
    'Be specific with scent notes (e.g., "Cinnamon & Vanilla Spice Candle" not just "Spice Candle")'
)


class DescriptionGenerator(Protocol):
    async def generate(self, image_bytes: bytes) -> str: ...


class OpenAIDescriptionGenerator:
    """Vision chat completion that turns a food photo into a scent memory."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str = "gpt-4o",
        suggestion_model: str = "gpt-4o-mini",
        client: openai.AsyncOpenAI | None = None,
    ) -> None:
        self.client = client or openai.AsyncOpenAI(api_key=api_key)
        self.model = model
        self.suggestion_model = suggestion_model

    async def generate(self, image_bytes: bytes) -> str:
        image_b64 = base64.b64encode(image_bytes).decode("ascii")
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": SCENT_PROMPT},
                            {
                                "type": "image_url",
                                "image_url": {"url": f"data:image/jpeg;base64,{image_b64}"},
                            },
                        ],
                    }
                ],
                max_tokens=300,
            )
        except openai.OpenAIError as e:
            logger.error(f"Error generating scent description: {e}")
            raise DescriptionGenerationError(
                "Failed to generate scent description. Please check your API key and try again."
            ) from e

        content = (response.choices[0].message.content or "").strip()
        if not content:
            raise DescriptionGenerationError("The model returned an empty scent description")
        return content

    async def suggest_scent_products(self, description: str) -> list[str]:
        """Candle or incense names that could recreate the scent; empty on failure."""
        try:
            response = await self.client.chat.completions.create(
                model=self.suggestion_model,
                messages=[
                    {"role": "user", "content": SUGGESTION_PROMPT.format(description=description)}
                ],
                max_tokens=150,
            )
        except openai.OpenAIError as e:
            logger.error(f"Error suggesting scent products: {e}")
            return []

        text = response.choices[0].message.content or ""
        return [line.strip() for line in text.strip().splitlines() if line.strip()]

    async def close(self) -> None:
        await self.client.close()
