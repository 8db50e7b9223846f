"""
Text utilities for handling English and Romanian spreadsheet text.

Used for header matching and category name comparison.
"""

import unicodedata
from typing import Any, Optional


def strip_accents(text: str) -> str:
    """
    Remove diacritics while keeping the base characters.

    - "Preț" → "Pret"
    - "Descriére" → "Descriere"
    """
    # NFD decomposition separates base chars from accents
    normalized = unicodedata.normalize('NFD', text)
    return ''.join(
        c for c in normalized
        if unicodedata.category(c) != 'Mn'
    )


def normalize_header(header: Optional[Any]) -> str:
    """
    Normalize a spreadsheet header for keyword matching.

    Lowercases, trims and strips diacritics:
    - "  Preț  " → "pret"
    - "Nume Produs" → "nume produs"

    Args:
        header: Raw header cell (may be None or a number)

    Returns:
        Normalized header, empty string for empty input
    """
    if header is None:
        return ''

    return strip_accents(str(header)).lower().strip()


def normalize_category_name(name: Optional[str]) -> Optional[str]:
    """
    Key used to compare category names within a restaurant.

    - "  Desserts " → "desserts"
    - "PIZZA" → "pizza"

    Returns:
        Lowercased trimmed name, or None if input is empty
    """
    if not name:
        return None

    key = name.strip().lower()
    return key or None


def clean_text(value: Optional[str], max_length: Optional[int] = None) -> Optional[str]:
    """
    Clean free text for storage.

    - Strips whitespace
    - Truncates to max length when given
    - Returns None for empty/whitespace-only strings
    """
    if not value:
        return None

    value = value.strip()

    if not value:
        return None

    if max_length is not None and len(value) > max_length:
        value = value[:max_length]

    return value
