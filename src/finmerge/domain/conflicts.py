"""Conflict analysis for imported categories and recurring obligations.

Nothing here writes to the store. The analyzer proposes near-duplicates for a
person to confirm; exact name matches are never proposed because the import
processor merges those on its own.
"""

from decimal import Decimal
from typing import Optional

import structlog

from finmerge.database.base import Database
from finmerge.domain.constants import ROOT_CATEGORY_TYPES
from finmerge.domain.entities import (
    GroupAnalysis,
    PotentialMerge,
    RecurringConflict,
    RecurringTransaction,
)
from finmerge.domain.errors import ValidationError, recurring_not_loaded
from finmerge.domain.parsed import ParsedData, raw_group_marker
from finmerge.utils.strings import (
    category_name_threshold,
    description_threshold,
    find_best_match,
    normalize_string,
)

logger = structlog.get_logger(__name__)

AMOUNT_TOLERANCE = Decimal("0.01")


class ConflictAnalyzer:
    """Finds imported records that probably duplicate existing ones."""

    def __init__(self, db: Database, user_id: str):
        """Initialize conflict analyzer.

        Args:
            db: Database instance
            user_id: Owner of the local dataset being merged into
        """
        self.db = db
        self.user_id = user_id
        self._existing_recurring: Optional[list[RecurringTransaction]] = None

    def analyze_category_conflicts(self, data: ParsedData) -> list[PotentialMerge]:
        """Pair imported categories with similarly named existing ones.

        A pair is reported when the normalized names differ but
        their edit distance is at most 1 for names up to six characters, or 2
        for longer names. When several existing categories are equally close,
        the first in store order (case-insensitive name, then ID) wins.

        Args:
            data: Parsed import bundle

        Returns:
            List of PotentialMerge, in the order categories were imported
        """
        if not data.categories:
            return []

        existing = self.db.list_categories(self.user_id)
        existing_names = [c.name for c in existing]
        existing_normalized = {normalize_string(c.name) for c in existing}

        logger.debug(
            "analyzing_category_conflicts",
            imported=len(data.categories),
            existing=len(existing),
        )

        conflicts: list[PotentialMerge] = []
        for imported in data.categories:
            name = imported.name
            if not name or imported.id in ROOT_CATEGORY_TYPES:
                continue
            if normalize_string(name) in existing_normalized:
                continue

            best = find_best_match(name, existing_names)
            if best is None or best.distance == 0:
                continue
            if best.distance <= category_name_threshold(name):
                conflicts.append(
                    PotentialMerge(
                        imported=imported,
                        existing=existing[best.index],
                        score=best.distance,
                    )
                )

        logger.info("category_conflicts_found", count=len(conflicts))
        return conflicts

    def load_existing_recurring(self) -> None:
        """Fetch the user's recurring obligations for repeated analysis."""
        self._existing_recurring = self.db.list_recurring(self.user_id)

    def analyze_recurring_conflicts(self, data: ParsedData) -> list[RecurringConflict]:
        """Pair imported recurring obligations with existing duplicates.

        Two obligations are duplicates when their amounts differ by at most
        0.01 and their descriptions are equal or within
        ``max(2, 20% of the longer description)`` edits.

        Raises:
            ValidationError: If load_existing_recurring() was not called first
        """
        if self._existing_recurring is None:
            raise ValidationError(recurring_not_loaded())
        if not data.recurring or not self._existing_recurring:
            return []

        conflicts: list[RecurringConflict] = []
        for imported in data.recurring:
            if imported.amount is None or not imported.description:
                continue
            imported_desc = normalize_string(imported.description)
            imported_amount = abs(imported.amount)

            for existing in self._existing_recurring:
                if abs(imported_amount - abs(existing.amount)) > AMOUNT_TOLERANCE:
                    continue

                existing_desc = normalize_string(existing.description)
                if imported_desc == existing_desc:
                    score = 0
                else:
                    best = find_best_match(imported_desc, [existing_desc])
                    score = best.distance
                    if score > description_threshold(imported_desc, existing_desc):
                        continue

                conflicts.append(
                    RecurringConflict(imported=imported, existing=existing, score=score)
                )
                break

        logger.info("recurring_conflicts_found", count=len(conflicts))
        return conflicts

    def analyze_group_data(self, data: ParsedData) -> GroupAnalysis:
        """Count imported transactions that were tied to a shared group.

        Group membership does not survive the import, so callers use this to
        warn before committing.
        """
        count = sum(1 for tx in data.transactions if raw_group_marker(tx.raw))
        return GroupAnalysis(has_groups=count > 0, group_transaction_count=count)
