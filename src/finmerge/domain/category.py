"""Category domain service."""

import re
from datetime import datetime, UTC
from typing import Any, Optional

import structlog

from finmerge.database.base import Database
from finmerge.domain.constants import (
    CATEGORY_TYPES,
    DEFAULT_CATEGORY_COLOR,
    DEFAULT_CATEGORY_TYPE,
    validate_icon,
)
from finmerge.domain.entities import Category
from finmerge.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    category_not_found,
    invalid_category_type,
)
from finmerge.utils import new_id

logger = structlog.get_logger(__name__)

HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


class CategoryService:
    """Service for managing a user's local categories."""

    def __init__(self, db: Database, user_id: str):
        """Initialize category service.

        Args:
            db: Database instance
            user_id: Owner of the categories
        """
        self.db = db
        self.user_id = user_id

    def create_category(
        self,
        name: str,
        parent_id: Optional[str] = None,
        category_type: Optional[str] = None,
        icon: Optional[str] = None,
        color: Optional[str] = None,
    ) -> str:
        """Create a category.

        Args:
            name: Category name
            parent_id: Optional parent category ID
            category_type: expense, income or investment; a child inherits
                its parent's type when none is given
            icon: Icon name; unknown names fall back to the default icon
            color: Hex colour such as "#6366f1"

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is empty, the type is unknown or the
                colour is not a hex colour
            NotFoundError: If the parent category doesn't exist
            ConflictError: If a sibling with the same name already exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name cannot be empty")
        if category_type is not None and category_type not in CATEGORY_TYPES:
            raise ValidationError(invalid_category_type(category_type))
        if color is not None and not HEX_COLOR.match(color):
            raise ValidationError(f"Invalid colour '{color}'. Expected #rrggbb")

        parent = None
        if parent_id is not None:
            parent = self.db.get_category(parent_id)
            if parent is None or parent.user_id != self.user_id:
                raise NotFoundError(category_not_found(parent_id))

        for sibling in self.db.list_categories(self.user_id):
            if sibling.parent_id == parent_id and sibling.name.lower() == name.lower():
                raise ConflictError(f"Category '{name}' already exists")

        if category_type is None:
            category_type = parent.type if parent is not None else DEFAULT_CATEGORY_TYPE

        category_id = self.db.create_category(
            Category(
                id=new_id(),
                user_id=self.user_id,
                name=name,
                icon=validate_icon(icon),
                color=color or DEFAULT_CATEGORY_COLOR,
                type=category_type,
                parent_id=parent_id,
                created_at=datetime.now(UTC),
            )
        )
        logger.info("category_created", category_id=category_id, name=name)
        return category_id

    def get_category(self, category_id: str) -> Optional[Category]:
        """Get category by ID.

        Args:
            category_id: Category ID

        Returns:
            Category or None if not found
        """
        return self.db.get_category(category_id)

    def list_categories(self) -> list[Category]:
        """List the user's categories ordered by name."""
        return self.db.list_categories(self.user_id)

    def get_category_tree(self) -> list[dict[str, Any]]:
        """Get full category tree.

        Returns:
            List of root categories with nested children
        """
        return self.db.get_category_tree(self.user_id)

    def format_category_path(self, category_id: str) -> str:
        """Get full path for a category.

        Args:
            category_id: Category ID

        Returns:
            Full category path (e.g., "Food & Dining > Groceries")
        """
        cat = self.get_category(category_id)
        if cat is None:
            return ""

        path_parts = [cat.name]
        seen = {cat.id}
        current_parent_id = cat.parent_id

        while current_parent_id is not None and current_parent_id not in seen:
            parent = self.get_category(current_parent_id)
            if parent is None:
                break
            path_parts.append(parent.name)
            seen.add(parent.id)
            current_parent_id = parent.parent_id

        return " > ".join(reversed(path_parts))
