"""Category domain service."""

import logging
from typing import Any, Optional

from pennywise.database.base import CATEGORIES
from pennywise.database.mappers import category_to_domain, to_record
from pennywise.domain.entities import Category as CategoryEntity, TransactionType
from pennywise.domain.errors import (
    ConflictError,
    ProtectedEntityError,
    category_protected,
    duplicate_category,
)
from pennywise.domain.repository import Repository
from pennywise.domain.validation import (
    check_choice,
    check_color,
    check_text,
    raise_if_errors,
    reject_unknown_fields,
)

logger = logging.getLogger(__name__)

UNKNOWN_CATEGORY = "Unknown"
DEFAULT_ICON = "Circle"
DEFAULT_COLOR = "#64748b"

# (name, type, color, icon)
DEFAULT_CATEGORIES = [
    ("Salary", TransactionType.INCOME, "#10b981", "Briefcase"),
    ("Other Income", TransactionType.INCOME, "#22c55e", "PlusCircle"),
    ("Food", TransactionType.EXPENSE, "#f59e0b", "UtensilsCrossed"),
    ("Transport", TransactionType.EXPENSE, "#3b82f6", "Car"),
    ("Bills", TransactionType.EXPENSE, "#8b5cf6", "Receipt"),
    ("Entertainment", TransactionType.EXPENSE, "#ec4899", "Film"),
    ("Shopping", TransactionType.EXPENSE, "#f97316", "ShoppingBag"),
    ("Healthcare", TransactionType.EXPENSE, "#ef4444", "HeartPulse"),
    ("Education", TransactionType.EXPENSE, "#0891b2", "GraduationCap"),
    ("Savings", TransactionType.EXPENSE, "#14b8a6", "PiggyBank"),
    ("Investments", TransactionType.EXPENSE, "#6366f1", "TrendingUp"),
    ("Other Expense", TransactionType.EXPENSE, "#64748b", "MoreHorizontal"),
]

CATEGORY_COLORS = {name: color for name, _, color, _ in DEFAULT_CATEGORIES}

UPDATABLE_FIELDS = ("name", "type", "color", "icon")


def category_color(name: str) -> str:
    """Chart colour for a category name, grey when it has none."""
    return CATEGORY_COLORS.get(name, DEFAULT_COLOR)


class CategoryService(Repository[CategoryEntity]):
    """Service for managing categories."""

    collection = CATEGORIES
    entity_name = "Category"
    to_domain = staticmethod(category_to_domain)

    def _check_unique_name(
        self, name: str, category_type: TransactionType, exclude_id: Optional[int] = None
    ) -> None:
        existing = self.get_by_name(name, category_type)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(duplicate_category(name, category_type.value))

    def create_category(
        self,
        name: str,
        type: TransactionType | str,
        color: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> CategoryEntity:
        """Create a user category.

        Args:
            name: Category name, unique within its type
            type: "income" or "expense"
            color: Optional hex colour (defaults to the palette colour for the name)
            icon: Optional icon identifier

        Returns:
            The stored category (never marked default)

        Raises:
            ValidationError: If a field is invalid
            ConflictError: If the name is taken for this type
        """
        errors: dict[str, str] = {}
        clean_name = check_text(errors, "name", name)
        category_type = check_choice(errors, "type", type, TransactionType)
        clean_color = check_color(errors, "color", color) if color is not None else None
        raise_if_errors(errors)

        self._check_unique_name(clean_name, category_type)
        return self._create(
            to_record(
                {
                    "name": clean_name,
                    "type": category_type,
                    "color": clean_color or category_color(clean_name),
                    "icon": icon or DEFAULT_ICON,
                    "is_default": False,
                }
            )
        )

    def get_category(self, category_id: int) -> CategoryEntity:
        """Get category by ID.

        Raises:
            NotFoundError: If the category doesn't exist
        """
        return self._get(category_id)

    def find_category(self, category_id: int) -> Optional[CategoryEntity]:
        """Get category by ID, or None if it doesn't exist."""
        return self._find(category_id)

    def list_categories(self) -> list[CategoryEntity]:
        """List all categories."""
        return self._list()

    def list_by_type(self, category_type: TransactionType | str) -> list[CategoryEntity]:
        """List categories of one type.

        Raises:
            ValidationError: If the type is unknown
        """
        errors: dict[str, str] = {}
        category_type = check_choice(errors, "type", category_type, TransactionType)
        raise_if_errors(errors)
        return self._list(filters={"type": category_type.value})

    def get_by_name(
        self, name: str, category_type: Optional[TransactionType | str] = None
    ) -> Optional[CategoryEntity]:
        """Find a category by name, optionally restricted to a type."""
        filters: dict[str, Any] = {"name": name}
        if category_type is not None:
            filters["type"] = TransactionType(category_type).value
        matches = self._list(filters=filters)
        return matches[0] if matches else None

    def update_category(self, category_id: int, fields: dict[str, Any]) -> CategoryEntity:
        """Merge a partial update into a category.

        Raises:
            NotFoundError: If the category doesn't exist
            ValidationError: If a field is invalid or cannot be updated
            ConflictError: If the new name is taken for the type
        """
        fields = reject_unknown_fields(fields, UPDATABLE_FIELDS, ignored=("id", "version"))
        current = self._get(category_id)

        errors: dict[str, str] = {}
        cleaned: dict[str, Any] = {}
        if "name" in fields:
            cleaned["name"] = check_text(errors, "name", fields["name"])
        if "type" in fields:
            cleaned["type"] = check_choice(errors, "type", fields["type"], TransactionType)
        if "color" in fields:
            cleaned["color"] = check_color(errors, "color", fields["color"])
        if "icon" in fields:
            cleaned["icon"] = check_text(errors, "icon", fields["icon"])
        raise_if_errors(errors)

        if "name" in cleaned or "type" in cleaned:
            self._check_unique_name(
                cleaned.get("name", current.name),
                cleaned.get("type", current.type),
                exclude_id=category_id,
            )
        return self._update(category_id, to_record(cleaned))

    def delete_category(self, category_id: int) -> bool:
        """Delete a user category.

        Raises:
            NotFoundError: If the category doesn't exist
            ProtectedEntityError: If the category is a default category
        """
        category = self._get(category_id)
        if category.is_default:
            raise ProtectedEntityError(category_protected(category.name))
        return self._delete(category_id)

    def seed_defaults(self) -> int:
        """Create any missing default categories.

        Returns:
            Number of categories created
        """
        created = 0
        for name, category_type, color, icon in DEFAULT_CATEGORIES:
            if self.get_by_name(name, category_type) is not None:
                continue
            self._create(
                to_record(
                    {
                        "name": name,
                        "type": category_type,
                        "color": color,
                        "icon": icon,
                        "is_default": True,
                    }
                )
            )
            created += 1
        logger.info("Seeded %d default categories", created)
        return created
