"""
Product description generation for uploads without descriptions.

Optional: NullDescriptionGenerator is used unless AI descriptions are
enabled and an Anthropic key is configured. Generation problems never
fail an upload; affected products simply keep an empty description.
"""

from abc import ABC, abstractmethod
import json
import re
from typing import Optional
import structlog

import anthropic

from config import settings
from parsers.row_parser import MAX_DESCRIPTION_LENGTH

logger = structlog.get_logger(__name__)


class DescriptionGenerator(ABC):
    """Interface: one description (or None) per product name, same order."""

    available: bool = False

    @abstractmethod
    def generate_descriptions(self, names: list[str]) -> list[Optional[str]]:
        ...


class NullDescriptionGenerator(DescriptionGenerator):
    """Default generator: produces nothing."""

    available = False

    def generate_descriptions(self, names: list[str]) -> list[Optional[str]]:
        return [None] * len(names)


class ClaudeDescriptionGenerator(DescriptionGenerator):
    """Write short menu descriptions with Claude, in the product name's language."""

    available = True

    MAX_TOKENS = 4096

    # Names per request
    BATCH_SIZE = 25

    SYSTEM_PROMPT = """You write short, enticing restaurant menu descriptions.

IMPORTANT: Return ONLY valid JSON, no markdown, no explanation, no code blocks.

Rules:
- One or two sentences per product, friendly and natural tone.
- Write in the language of the product name (Romanian names get Romanian descriptions).
- Never invent prices, allergens or portion sizes.
- Maximum 300 characters per description.

Return a JSON object mapping each product name exactly as given to its description:
{"Margherita Pizza": "Fresh mozzarella, tomato sauce and basil on a thin crust."}"""

    def __init__(self, client: Optional[anthropic.Anthropic] = None, model: Optional[str] = None):
        self.client = client or anthropic.Anthropic(api_key=settings.anthropic_api_key)
        self.model = model or settings.anthropic_model

    def generate_descriptions(self, names: list[str]) -> list[Optional[str]]:
        """
        Generate descriptions for product names.

        Returns:
            List aligned with `names`; None where nothing was generated
        """
        generated: dict[str, str] = {}
        unique_names = list(dict.fromkeys(n.strip() for n in names if n and n.strip()))

        for start in range(0, len(unique_names), self.BATCH_SIZE):
            batch = unique_names[start:start + self.BATCH_SIZE]
            generated.update(self._generate_batch(batch))

        logger.info(
            "descriptions_generated",
            requested=len(unique_names),
            generated=len(generated)
        )

        return [generated.get(name.strip()) if name else None for name in names]

    def _generate_batch(self, names: list[str]) -> dict[str, str]:
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.MAX_TOKENS,
                system=self.SYSTEM_PROMPT,
                messages=[{
                    "role": "user",
                    "content": f"Products:\n{json.dumps(names, ensure_ascii=False)}"
                }]
            )
        except anthropic.APIError as e:
            logger.warning("claude_description_api_error", error=str(e), batch=len(names))
            return {}

        cleaned = response.content[0].text.strip()
        if cleaned.startswith("```"):
            cleaned = re.sub(r'^```(?:json)?\s*', '', cleaned)
            cleaned = re.sub(r'\s*```$', '', cleaned)

        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.warning("claude_description_json_failed", error=str(e))
            return {}

        if not isinstance(data, dict):
            return {}

        descriptions: dict[str, str] = {}
        for name in names:
            text = data.get(name)
            if isinstance(text, str) and text.strip():
                descriptions[name] = text.strip()[:MAX_DESCRIPTION_LENGTH]
        return descriptions


def get_description_generator() -> DescriptionGenerator:
    """Pick the generator for the current configuration."""
    if settings.ai_descriptions_enabled and settings.claude_configured:
        try:
            return ClaudeDescriptionGenerator()
        except Exception as e:
            logger.warning("claude_description_generator_unavailable", error=str(e))
    return NullDescriptionGenerator()
