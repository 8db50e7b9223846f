"""
Menu upload service: category upsert and bulk product insert.

Persists validated spreadsheet rows for one restaurant in two phases:

1. Category resolution - reuse existing categories (case-insensitive),
   create the missing ones.
2. Product insertion - one batch insert, insert-only. Re-uploading a
   product name creates a new product row.

Any database error aborts the batch with CategoryWriteError or
ProductWriteError.
"""

from dataclasses import dataclass, field
from typing import Optional
import structlog

from supabase import Client

from config import get_supabase_client
from exceptions import CategoryWriteError, ProductWriteError
from parsers.row_parser import ParsedRow
from utils.text_utils import clean_text, normalize_category_name

logger = structlog.get_logger(__name__)

INSERT_FAILED_MESSAGE = "Failed to insert product"


@dataclass
class FailedRow:
    """One row that did not make it into the database."""
    row: int
    error: str
    data: ParsedRow

    def to_dict(self) -> dict:
        return {"row": self.row, "error": self.error, "data": self.data.to_dict()}


@dataclass
class UploadResult:
    """Success / failure counts for one upload."""
    success: int = 0
    failed: int = 0
    failed_rows: list[FailedRow] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "failed": self.failed,
            "failedRows": [row.to_dict() for row in self.failed_rows],
        }


@dataclass
class CategoryRecord:
    """Category row as stored for a restaurant."""
    id: str
    name: str
    restaurant_id: Optional[str] = None


class MenuUploadService:
    """
    Persist parsed menu rows for a single restaurant.

    Usage:
        service = MenuUploadService(restaurant_id)
        result = service.upload_menu(valid_rows)
    """

    def __init__(self, restaurant_id: str, client: Optional[Client] = None):
        self.restaurant_id = restaurant_id
        self.db = client if client is not None else get_supabase_client()
        self.categories_table = "categories"
        self.products_table = "products"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_categories(self) -> list[CategoryRecord]:
        """
        Get every category owned by the restaurant.

        Raises:
            CategoryWriteError: If the query fails
        """
        logger.debug("getting_categories", restaurant_id=self.restaurant_id)

        try:
            result = (
                self.db.table(self.categories_table)
                .select("id, name, restaurant_id")
                .eq("restaurant_id", self.restaurant_id)
                .order("name")
                .execute()
            )
        except Exception as e:
            logger.error(
                "get_categories_failed",
                restaurant_id=self.restaurant_id,
                error=str(e)
            )
            raise CategoryWriteError("select", str(e), self.restaurant_id)

        return [
            CategoryRecord(
                id=str(row["id"]),
                name=row["name"],
                restaurant_id=row.get("restaurant_id")
            )
            for row in (result.data or [])
        ]

    # ===================
    # WRITE OPERATIONS
    # ===================

    def upload_menu(
        self,
        rows: list[ParsedRow],
        row_numbers: Optional[list[int]] = None,
    ) -> UploadResult:
        """
        Upsert categories, then insert every row as a product.

        Args:
            rows: Validated parsed rows
            row_numbers: Spreadsheet row number per row for failure reports
                         (defaults to 1-based position in `rows`)

        Returns:
            UploadResult

        Raises:
            CategoryWriteError: Category fetch/insert failed
            ProductWriteError: Product insert failed
        """
        if not rows:
            return UploadResult()

        if row_numbers is None:
            row_numbers = list(range(1, len(rows) + 1))

        logger.info(
            "menu_upload_started",
            restaurant_id=self.restaurant_id,
            rows=len(rows)
        )

        category_names = self._collect_category_names(rows)
        category_map = self.upsert_categories(category_names)

        payload = [self._to_product_payload(row, category_map) for row in rows]

        try:
            result = (
                self.db.table(self.products_table)
                .insert(payload)
                .execute()
            )
        except Exception as e:
            logger.error(
                "product_insert_failed",
                restaurant_id=self.restaurant_id,
                rows=len(payload),
                error=str(e)
            )
            raise ProductWriteError(str(e), self.restaurant_id, len(payload))

        inserted = result.data or []
        upload_result = UploadResult(success=len(inserted))

        if len(inserted) < len(rows):
            # Bulk insert does not report per-row causes; reconcile by name
            inserted_names = {item.get("name") for item in inserted}
            for row, row_number in zip(rows, row_numbers):
                if row.name.strip() not in inserted_names:
                    upload_result.failed_rows.append(FailedRow(
                        row=row_number,
                        error=INSERT_FAILED_MESSAGE,
                        data=row
                    ))

        upload_result.failed = len(upload_result.failed_rows)

        logger.info(
            "menu_upload_complete",
            restaurant_id=self.restaurant_id,
            success=upload_result.success,
            failed=upload_result.failed,
            categories=len(category_map)
        )

        return upload_result

    def upsert_categories(self, names: list[str]) -> dict[str, str]:
        """
        Resolve category names to ids, creating the missing ones.

        Existing categories match case-insensitively. New categories are
        written with an upsert that skips (name, restaurant_id) conflicts;
        names still unresolved afterwards (created by a concurrent upload)
        are re-fetched.

        Args:
            names: Distinct trimmed category names, display casing

        Returns:
            Normalized category name -> category id

        Raises:
            CategoryWriteError: If fetching or inserting fails
        """
        category_map: dict[str, str] = {}
        if not names:
            return category_map

        for category in self.get_categories():
            key = normalize_category_name(category.name)
            if key and key not in category_map:
                category_map[key] = category.id

        new_names = [
            name for name in names
            if normalize_category_name(name) not in category_map
        ]

        logger.info(
            "categories_resolved",
            restaurant_id=self.restaurant_id,
            existing=len(names) - len(new_names),
            new=len(new_names)
        )

        if not new_names:
            return category_map

        payload = [
            {"name": name, "restaurant_id": self.restaurant_id}
            for name in new_names
        ]

        try:
            result = (
                self.db.table(self.categories_table)
                .upsert(payload, on_conflict="name,restaurant_id", ignore_duplicates=True)
                .execute()
            )
        except Exception as e:
            logger.error(
                "category_insert_failed",
                restaurant_id=self.restaurant_id,
                names=new_names,
                error=str(e)
            )
            raise CategoryWriteError("insert", str(e), self.restaurant_id)

        for row in result.data or []:
            key = normalize_category_name(row.get("name"))
            if key:
                category_map[key] = str(row["id"])

        unresolved = [
            name for name in new_names
            if normalize_category_name(name) not in category_map
        ]
        if unresolved:
            logger.warning(
                "categories_created_concurrently",
                restaurant_id=self.restaurant_id,
                names=unresolved
            )
            for category in self.get_categories():
                key = normalize_category_name(category.name)
                if key and key not in category_map:
                    category_map[key] = category.id

        logger.info(
            "categories_created",
            restaurant_id=self.restaurant_id,
            count=len(result.data or [])
        )

        return category_map

    # ===================
    # HELPER METHODS
    # ===================

    @staticmethod
    def _collect_category_names(rows: list[ParsedRow]) -> list[str]:
        """Distinct non-empty names, first-seen casing kept, in row order."""
        names: list[str] = []
        seen: set[str] = set()
        for row in rows:
            name = row.category.strip()
            key = normalize_category_name(name)
            if key and key not in seen:
                seen.add(key)
                names.append(name)
        return names

    def _to_product_payload(self, row: ParsedRow, category_map: dict[str, str]) -> dict:
        key = normalize_category_name(row.category)
        return {
            "name": row.name.strip(),
            "description": clean_text(row.description),
            "price": row.price,
            "category_id": category_map.get(key) if key else None,
            "restaurant_id": self.restaurant_id,
        }
