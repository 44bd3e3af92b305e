"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any

# Import entities directly to avoid circular import through domain/__init__.py
from finmerge.domain.entities import (
    Category,
    CategoryBudget,
    Context,
    ImportBatch,
    ImportRule,
    RecurringTransaction,
    Transaction,
)


class Database(ABC):
    """Abstract database interface for finmerge."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema and seed the Uncategorized sentinel."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, category: Category) -> str:
        """Insert a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: str) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def list_categories(self, user_id: str, include_deleted: bool = False) -> list[Category]:
        """List a user's categories ordered by case-insensitive name, then ID.

        The local-only sentinel has no owner and is never included.
        """
        pass

    @abstractmethod
    def get_category_tree(self, user_id: str) -> list[dict[str, Any]]:
        """Get a user's category tree with nested 'children' lists."""
        pass

    # Context operations
    @abstractmethod
    def list_contexts(self, user_id: str, include_deleted: bool = False) -> list[Context]:
        """List a user's contexts."""
        pass

    # Transaction operations
    @abstractmethod
    def list_transactions(
        self, user_id: str, category_id: Optional[str] = None
    ) -> list[Transaction]:
        """List a user's non-deleted transactions, optionally by category."""
        pass

    # Recurring operations
    @abstractmethod
    def list_recurring(self, user_id: str) -> list[RecurringTransaction]:
        """List a user's non-deleted recurring transactions."""
        pass

    # Budget operations
    @abstractmethod
    def list_budgets(self, user_id: str) -> list[CategoryBudget]:
        """List a user's non-deleted category budgets."""
        pass

    @abstractmethod
    def budget_exists(self, category_id: str, period: str) -> bool:
        """Check if a non-deleted budget exists for category and period."""
        pass

    # Import rule operations
    @abstractmethod
    def list_import_rules(self, user_id: str, active_only: bool = True) -> list[ImportRule]:
        """List a user's non-deleted rules in the order they were created."""
        pass

    @abstractmethod
    def create_import_rule(self, rule: ImportRule) -> ImportRule:
        """Persist a rule. Returns the stored rule."""
        pass

    # Import commit
    @abstractmethod
    def commit_import(self, batch: ImportBatch) -> None:
        """Write every record of the batch in one transaction.

        Records are upserted by ID. Either all tables are written or, on any
        failure, none are and ImportCommitError is raised.
        """
        pass
