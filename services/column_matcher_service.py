"""
Semantic column matching for headers the synonym lists cannot resolve.

The matcher is picked once, at construction time:

- ClaudeColumnMatcher when an Anthropic key is configured and AI matching
  is enabled
- NullColumnMatcher otherwise (resolves nothing)
"""

from abc import ABC, abstractmethod
import json
import re
from typing import Optional
import structlog

import anthropic

from config import settings
from exceptions import ExternalServiceError
from parsers.column_synonyms import CANONICAL_FIELDS

logger = structlog.get_logger(__name__)

FIELD_DESCRIPTIONS = {
    "name": "Name of the product or dish",
    "category": "Menu category or food section",
    "description": "Details about the product, ingredients, or taste",
    "price": "Price of the product in RON or other currency",
}


class ColumnMatcher(ABC):
    """
    Interface for semantic header matchers.

    match_columns returns header -> canonical field (or None) for every
    header it was given. Implementations may raise; the detection service
    treats any exception as "no suggestions".
    """

    available: bool = False

    @abstractmethod
    def match_columns(self, headers: list[str]) -> dict[str, Optional[str]]:
        ...


class NullColumnMatcher(ColumnMatcher):
    """Default matcher: never resolves anything."""

    available = False

    def match_columns(self, headers: list[str]) -> dict[str, Optional[str]]:
        return {str(header): None for header in headers}


class ClaudeColumnMatcher(ColumnMatcher):
    """
    Match menu spreadsheet headers using Claude.

    Handles typos, abbreviations and languages the keyword lists do not
    cover. Each canonical field is assigned to at most one header.
    """

    available = True

    MAX_TOKENS = 1024

    SYSTEM_PROMPT = """You map restaurant menu spreadsheet column headers to menu fields.

IMPORTANT: Return ONLY valid JSON, no markdown, no explanation, no code blocks.

Valid fields:
{fields}

Rules:
- Headers may be in English, Romanian or any other language, and may contain typos or abbreviations.
- Map each header to exactly one valid field name, or null if it is not one of them.
- Use each field at most once. Prefer the header that fits best.
- Identifier, SKU, stock, barcode and date columns are always null.

Example output:
{{"Denumire": "name", "Grupa": "category", "Cod": null, "Pret vanzare": "price"}}"""

    def __init__(self, client: Optional[anthropic.Anthropic] = None, model: Optional[str] = None):
        self.client = client or anthropic.Anthropic(api_key=settings.anthropic_api_key)
        self.model = model or settings.anthropic_model

    def _build_system_prompt(self) -> str:
        fields = "\n".join(
            f'- "{name}": {description}' for name, description in FIELD_DESCRIPTIONS.items()
        )
        return self.SYSTEM_PROMPT.format(fields=fields)

    def match_columns(self, headers: list[str]) -> dict[str, Optional[str]]:
        """
        Ask Claude which header holds which field.

        Args:
            headers: Full header row

        Returns:
            header -> field or None for every header

        Raises:
            ExternalServiceError: If the API call fails
        """
        headers = [str(header) for header in headers]
        if not headers:
            return {}

        logger.info("claude_column_matching_started", headers=headers)

        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.MAX_TOKENS,
                system=self._build_system_prompt(),
                messages=[{
                    "role": "user",
                    "content": f"Column headers:\n{json.dumps(headers, ensure_ascii=False)}"
                }]
            )
        except anthropic.APIError as e:
            logger.error("claude_api_error", error=str(e))
            raise ExternalServiceError("claude", f"Claude API error: {str(e)}")

        matches = self._parse_response(response.content[0].text, headers)

        logger.info("claude_column_matching_completed", matches=matches)
        return matches

    def _parse_response(self, response_text: str, headers: list[str]) -> dict[str, Optional[str]]:
        """
        Turn Claude's JSON answer into a validated header -> field dict.

        Unknown fields and repeated fields are dropped to None.
        """
        # Remove markdown code blocks if present
        cleaned = response_text.strip()
        if cleaned.startswith("```"):
            cleaned = re.sub(r'^```(?:json)?\s*', '', cleaned)
            cleaned = re.sub(r'\s*```$', '', cleaned)

        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.warning("claude_json_parse_failed", response_preview=response_text[:300], error=str(e))
            return {header: None for header in headers}

        if not isinstance(data, dict):
            logger.warning("claude_response_not_object", type=type(data).__name__)
            return {header: None for header in headers}

        matches: dict[str, Optional[str]] = {}
        used_fields: set[str] = set()

        for header in headers:
            value = data.get(header)
            if isinstance(value, str):
                value = value.strip().lower()
            if value in CANONICAL_FIELDS and value not in used_fields:
                matches[header] = value
                used_fields.add(value)
            else:
                matches[header] = None

        return matches


def get_column_matcher() -> ColumnMatcher:
    """Pick the matcher for the current configuration."""
    if settings.ai_column_matching_enabled and settings.claude_configured:
        try:
            return ClaudeColumnMatcher()
        except Exception as e:
            logger.warning("claude_column_matcher_unavailable", error=str(e))
    return NullColumnMatcher()
