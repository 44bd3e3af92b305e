"""Domain model entities for finmerge.

These are pure data classes representing the local dataset, independent of
database schema. The import engine builds them before anything is written so a
whole run can be handed to the store as one batch.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


@dataclass(frozen=True)
class Category:
    """Category domain entity with hierarchical structure."""

    id: str
    user_id: Optional[str]
    name: str
    icon: str
    color: str
    type: str
    parent_id: Optional[str] = None
    active: bool = True
    deleted_at: Optional[datetime] = None
    pending_sync: bool = True
    local_only: bool = False
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Context:
    """Context (trip, project, event) that transactions can be tagged with."""

    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    active: bool = True
    deleted_at: Optional[datetime] = None
    pending_sync: bool = True


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: str
    user_id: str
    category_id: str
    type: str
    amount: Decimal
    date: date
    year_month: str
    description: str
    context_id: Optional[str] = None
    group_id: Optional[str] = None
    paid_by_member_id: Optional[str] = None
    deleted_at: Optional[datetime] = None
    pending_sync: bool = True


@dataclass(frozen=True)
class RecurringTransaction:
    """Recurring obligation domain entity."""

    id: str
    user_id: str
    category_id: str
    type: str
    amount: Decimal
    description: str
    frequency: str
    start_date: date
    end_date: Optional[date] = None
    context_id: Optional[str] = None
    active: bool = True
    deleted_at: Optional[datetime] = None
    pending_sync: bool = True


@dataclass(frozen=True)
class CategoryBudget:
    """Spending limit for a category over a period."""

    id: str
    user_id: str
    category_id: str
    amount: Decimal
    period: str
    deleted_at: Optional[datetime] = None
    pending_sync: bool = True


@dataclass(frozen=True)
class ImportRule:
    """User-defined classification rule applied to imported descriptions."""

    id: str
    user_id: str
    match_string: str
    match_type: str
    category_id: str
    active: bool = True
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class RuleMatch(Enum):
    """Outcome of evaluating one rule against one description."""

    MATCH = "match"
    NO_MATCH = "no_match"
    INVALID = "invalid"


@dataclass(frozen=True)
class PotentialMerge:
    """Imported category that closely resembles an existing one."""

    imported: Any
    existing: Category
    score: int


@dataclass(frozen=True)
class RecurringConflict:
    """Imported recurring obligation that duplicates an existing one."""

    imported: Any
    existing: RecurringTransaction
    score: int


@dataclass(frozen=True)
class GroupAnalysis:
    """How many imported transactions belonged to shared groups."""

    has_groups: bool
    group_transaction_count: int


@dataclass
class ImportBatch:
    """Insertion lists accumulated by one import run, committed together."""

    contexts: list[Context] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    recurring: list[RecurringTransaction] = field(default_factory=list)
    budgets: list[CategoryBudget] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.contexts
            or self.categories
            or self.transactions
            or self.recurring
            or self.budgets
        )


@dataclass(frozen=True)
class ImportResult:
    """Counts reported back to the caller after a committed import."""

    categories: int
    transactions: int
    recurring: int
    orphan_count: int
    contexts: int = 0
    budgets: int = 0
    skipped_transactions: int = 0
