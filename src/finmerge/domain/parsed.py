"""Already-parsed import data handed to the engine by format parsers.

Parsers own file formats; this module only defines the bundle they produce.
Records are mutable because the rules engine assigns categories in place
before the bundle is committed.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class ImportSource(str, Enum):
    """Where a bundle came from; selects the import strategy."""

    FULL_BACKUP = "full_backup"
    LEGACY_MIGRATION = "legacy_migration"
    GENERIC_CSV = "generic_csv"
    BANK_SPECIFIC = "bank_specific"


GROUP_MARKER_KEYS = ("group_id", "groupId")


def raw_group_marker(raw: Optional[dict[str, Any]]) -> Optional[str]:
    """Return the group association carried in a parser's raw payload, if any.

    This is the only place the engine looks inside raw payloads.
    """
    if not isinstance(raw, dict):
        return None
    for key in GROUP_MARKER_KEYS:
        value = raw.get(key)
        if value:
            return str(value)
    return None


@dataclass
class ParsedTransaction:
    """One imported transaction.

    ``amount`` is signed as the source reported it. ``date``, ``amount`` and
    ``description`` are required; records missing any of them are skipped at
    commit time rather than rejected by the parser.
    """

    date: Optional[date]
    amount: Optional[Decimal]
    description: Optional[str]
    id: Optional[str] = None
    category_id: Optional[str] = None
    context_id: Optional[str] = None
    type: Optional[str] = None
    group_id: Optional[str] = None
    user_id: Optional[str] = None
    raw: Optional[dict[str, Any]] = None
    # True when category_id already names a local category (set by rules)
    category_is_local: bool = False

    def is_well_formed(self) -> bool:
        return (
            self.date is not None
            and self.amount is not None
            and bool(self.description and self.description.strip())
        )


@dataclass
class ParsedCategory:
    """One imported category, identified by its id in the source system."""

    id: str
    name: str
    type: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    parent_id: Optional[str] = None
    active: Optional[bool] = None
    budget: Optional[Decimal] = None


@dataclass
class ParsedContext:
    id: Optional[str]
    name: str
    description: Optional[str] = None


@dataclass
class ParsedRecurring:
    id: Optional[str]
    amount: Optional[Decimal]
    description: Optional[str]
    start_date: Optional[date] = None
    frequency: Optional[str] = None
    category_id: Optional[str] = None
    context_id: Optional[str] = None
    type: Optional[str] = None
    end_date: Optional[date] = None
    active: bool = True


@dataclass
class ParsedBudget:
    category_id: str
    amount: Decimal
    period: str = "monthly"


@dataclass
class ParsedGroup:
    id: str
    name: str


@dataclass
class ParsedGroupMember:
    group_id: str
    share: Optional[Decimal]
    user_id: Optional[str] = None


@dataclass
class ParsedData:
    """Bundle produced by a parser: the whole contract with the engine."""

    source: ImportSource
    transactions: list[ParsedTransaction] = field(default_factory=list)
    categories: list[ParsedCategory] = field(default_factory=list)
    contexts: list[ParsedContext] = field(default_factory=list)
    recurring: list[ParsedRecurring] = field(default_factory=list)
    budgets: list[ParsedBudget] = field(default_factory=list)
    groups: list[ParsedGroup] = field(default_factory=list)
    group_members: list[ParsedGroupMember] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def member_share(self, group_id: str, user_id: Optional[str]) -> Optional[Decimal]:
        """Share percentage of ``user_id`` in ``group_id``, or None if unknown."""
        for member in self.group_members:
            if member.group_id == group_id and member.user_id == user_id:
                return member.share
        return None
