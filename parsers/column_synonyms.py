"""
Synonym-based column detection for menu spreadsheets.

Maps raw header strings to the four canonical menu fields using static
English + Romanian keyword lists. Pure functions, no I/O.
"""

from dataclasses import dataclass, field
from typing import Optional
import structlog

from utils.text_utils import normalize_header

logger = structlog.get_logger(__name__)


# Canonical field order. Also the tie-break order for ambiguous headers.
CANONICAL_FIELDS = ("name", "category", "description", "price")

# Header row produced by the downloadable template
TEMPLATE_HEADERS = ["Product Name", "Category", "Description", "Price"]

COLUMN_SYNONYMS: dict[str, list[str]] = {
    "name": [
        # English
        "product", "name", "dish", "item", "title", "product name", "dish name", "item name",
        # Romanian
        "produs", "nume", "fel", "articol", "titlu", "nume produs", "nume fel", "nume articol",
        "denumire", "denumirea", "produsul", "felul", "articolul",
    ],
    "category": [
        # English
        "category", "type", "section", "group", "classification", "menu section",
        # Romanian
        "categorie", "tip", "sectiune", "grup", "clasificare", "sectiune meniu",
        "categoria", "tipul", "sectiunea", "grupa", "clasificarea",
    ],
    "description": [
        # English
        "description", "details", "ingredients", "notes", "info", "summary", "about",
        # Romanian
        "descriere", "detalii", "ingrediente", "note", "informatii", "sumar",
        "descrierea", "detaliile", "ingredientele", "notele", "informatia",
    ],
    "price": [
        # English
        "price", "cost", "amount", "value", "rate", "cost price", "menu price",
        # Romanian
        "pret", "suma", "valoare", "rata", "pret cost", "pret meniu",
        "pretul", "costul", "valoarea", "pretul cost", "pretul meniu",
    ],
}

# Irrelevant columns (identifiers, stock, timestamps, row counters)
IGNORED_COLUMNS = [
    "id", "sku", "code", "stock", "barcode", "ean", "upc", "reference",
    "created", "updated", "modified", "date", "timestamp",
    "row", "index", "number", "seq", "sequence",
    # Romanian equivalents
    "identificator", "cod", "stoc", "cod_bare", "referinta",
    "creat", "actualizat", "modificat", "data", "marca_timp",
    "rand", "indice", "numar", "secventa",
]


@dataclass
class ColumnMapping:
    """Zero-based column index per canonical field, None when unresolved."""
    name: Optional[int] = None
    category: Optional[int] = None
    description: Optional[int] = None
    price: Optional[int] = None

    def get_field(self, field_name: str) -> Optional[int]:
        return getattr(self, field_name)

    def set_field(self, field_name: str, index: Optional[int]) -> None:
        if field_name not in CANONICAL_FIELDS:
            raise KeyError(field_name)
        setattr(self, field_name, index)

    @property
    def missing_fields(self) -> list[str]:
        """Unresolved fields in canonical order."""
        return [f for f in CANONICAL_FIELDS if self.get_field(f) is None]

    @property
    def resolved_count(self) -> int:
        return len(CANONICAL_FIELDS) - len(self.missing_fields)

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields

    def claimed_columns(self) -> set[int]:
        return {self.get_field(f) for f in CANONICAL_FIELDS if self.get_field(f) is not None}

    def copy(self) -> "ColumnMapping":
        return ColumnMapping(**self.to_dict())

    def to_dict(self) -> dict[str, Optional[int]]:
        return {f: self.get_field(f) for f in CANONICAL_FIELDS}


@dataclass
class SynonymMatchResult:
    """Mapping plus the per-header trace used for diagnostics."""
    mapping: ColumnMapping = field(default_factory=ColumnMapping)
    matches: dict[str, Optional[str]] = field(default_factory=dict)


def should_ignore_column(header: str) -> bool:
    """True if the header names an irrelevant column (id, sku, stock, dates...)."""
    normalized = normalize_header(header)
    return any(ignored in normalized for ignored in IGNORED_COLUMNS)


def match_header(header: str) -> Optional[str]:
    """
    Find the canonical field a single header refers to.

    A header can contain keywords of several fields ("Sumar" holds both
    "sumar" and "suma"). The field with the longest matching keyword wins;
    equal lengths resolve in CANONICAL_FIELDS order.

    Returns:
        Field name, or None if the header is ignored or matches nothing
    """
    if should_ignore_column(header):
        return None

    normalized = normalize_header(header)
    if not normalized:
        return None

    best_field: Optional[str] = None
    best_length = 0

    for field_name in CANONICAL_FIELDS:
        for synonym in COLUMN_SYNONYMS[field_name]:
            if synonym in normalized and len(synonym) > best_length:
                best_field = field_name
                best_length = len(synonym)

    return best_field


def match_columns_by_synonym(headers: list[str]) -> SynonymMatchResult:
    """
    Resolve canonical fields from headers with the keyword lists.

    When two headers resolve to the same field, the left-most column keeps
    it and the later header is traced as unmatched.

    Args:
        headers: Header row in column order

    Returns:
        SynonymMatchResult with mapping and header -> field trace
    """
    result = SynonymMatchResult()

    for index, header in enumerate(headers):
        key = str(header)

        if should_ignore_column(key):
            logger.debug("column_ignored", header=key)
            result.matches[key] = None
            continue

        field_name = match_header(key)

        if field_name is None:
            logger.debug("column_not_matched", header=key)
            result.matches[key] = None
            continue

        if result.mapping.get_field(field_name) is not None:
            logger.debug(
                "column_duplicate_match",
                header=key,
                field=field_name,
                kept_index=result.mapping.get_field(field_name)
            )
            result.matches[key] = None
            continue

        result.mapping.set_field(field_name, index)
        result.matches[key] = field_name
        logger.debug("column_matched", header=key, field=field_name, index=index)

    logger.info(
        "synonym_detection_complete",
        matched=result.mapping.resolved_count,
        total=len(CANONICAL_FIELDS),
        missing=result.mapping.missing_fields
    )

    return result


def get_skipped_columns(headers: list[str], mapping: ColumnMapping) -> list[str]:
    """Headers that are neither mapped to a field nor ignored."""
    claimed = mapping.claimed_columns()
    return [
        str(header)
        for index, header in enumerate(headers)
        if index not in claimed and not should_ignore_column(str(header))
    ]
