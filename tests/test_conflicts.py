"""Tests for category and recurring conflict analysis."""

import pytest
from datetime import date, datetime, UTC
from decimal import Decimal

from finmerge.domain.entities import Category
from finmerge.domain.errors import ValidationError
from finmerge.domain.parsed import (
    ImportSource,
    ParsedCategory,
    ParsedData,
    ParsedRecurring,
    ParsedTransaction,
)

EXPENSE_ROOT = "533d4482-df54-47e5-b8d8-000000000001"


def bundle(**kwargs) -> ParsedData:
    return ParsedData(source=ImportSource.FULL_BACKUP, **kwargs)


class TestCategoryConflicts:
    """Tests for near-duplicate category detection."""

    def test_short_name_within_one_edit(self, conflict_analyzer, sample_categories):
        """Test that Good is proposed as a merge into Food."""
        data = bundle(categories=[ParsedCategory(id="src-1", name="Good")])

        conflicts = conflict_analyzer.analyze_category_conflicts(data)

        assert len(conflicts) == 1
        assert conflicts[0].imported.id == "src-1"
        assert conflicts[0].existing.id == sample_categories["Food"]
        assert conflicts[0].score == 1

    def test_long_name_within_two_edits(self, conflict_analyzer, sample_categories):
        data = bundle(categories=[ParsedCategory(id="src-1", name="Trasportation")])

        conflicts = conflict_analyzer.analyze_category_conflicts(data)

        assert len(conflicts) == 1
        assert conflicts[0].existing.name == "Transportation"

    def test_distant_name_not_proposed(self, conflict_analyzer, sample_categories):
        """Test that Fuel is not close enough to Food."""
        data = bundle(categories=[ParsedCategory(id="src-1", name="Fuel")])

        assert conflict_analyzer.analyze_category_conflicts(data) == []

    def test_threshold_boundary_at_six_characters(self, conflict_analyzer, category_service):
        category_service.create_category(name="Travel")
        category_service.create_category(name="Groceries")
        data = bundle(
            categories=[
                # six characters, two edits away: too far
                ParsedCategory(id="src-1", name="Travle"),
                # eight characters, two edits away: close enough
                ParsedCategory(id="src-2", name="Grocerys"),
            ]
        )

        conflicts = conflict_analyzer.analyze_category_conflicts(data)

        assert [c.imported.id for c in conflicts] == ["src-2"]
        assert conflicts[0].score == 2

    def test_exact_match_ignoring_case_not_proposed(self, conflict_analyzer, sample_categories):
        data = bundle(categories=[ParsedCategory(id="src-1", name="fOOD")])

        assert conflict_analyzer.analyze_category_conflicts(data) == []

    def test_root_markers_and_unnamed_ignored(self, conflict_analyzer, sample_categories):
        data = bundle(
            categories=[
                ParsedCategory(id=EXPENSE_ROOT, name="Good"),
                ParsedCategory(id="src-1", name=""),
            ]
        )

        assert conflict_analyzer.analyze_category_conflicts(data) == []

    def test_tie_break_follows_store_order(self, conflict_analyzer, category_service):
        """Test that equally close names resolve to the alphabetically first one."""
        category_service.create_category(name="Hat")
        category_service.create_category(name="Cat")
        data = bundle(categories=[ParsedCategory(id="src-1", name="Bat")])

        conflicts = conflict_analyzer.analyze_category_conflicts(data)

        assert conflicts[0].existing.name == "Cat"

    def test_no_categories(self, conflict_analyzer, sample_categories):
        assert conflict_analyzer.analyze_category_conflicts(bundle()) == []

    def test_deleted_categories_not_candidates(self, conflict_analyzer, temp_db, user_id):
        temp_db.create_category(
            Category(
                id="deleted-food",
                user_id=user_id,
                name="Food",
                icon="Utensils",
                color="#ffffff",
                type="expense",
                deleted_at=datetime.now(UTC),
            )
        )
        data = bundle(categories=[ParsedCategory(id="src-1", name="Good")])

        assert conflict_analyzer.analyze_category_conflicts(data) == []


class TestRecurringConflicts:
    """Tests for duplicate recurring detection."""

    def test_requires_loading_first(self, conflict_analyzer):
        with pytest.raises(ValidationError):
            conflict_analyzer.analyze_recurring_conflicts(bundle())

    def test_duplicate_within_tolerance(self, conflict_analyzer, sample_recurring):
        data = bundle(
            recurring=[
                ParsedRecurring(
                    id="r-1",
                    amount=Decimal("-16.00"),
                    description="netflix  subscriptions",
                    start_date=date(2024, 2, 1),
                )
            ]
        )
        conflict_analyzer.load_existing_recurring()

        conflicts = conflict_analyzer.analyze_recurring_conflicts(data)

        assert len(conflicts) == 1
        assert conflicts[0].existing.id == "existing-netflix"
        assert conflicts[0].score == 1

    def test_exact_description_scores_zero(self, conflict_analyzer, sample_recurring):
        data = bundle(
            recurring=[
                ParsedRecurring(id="r-1", amount=Decimal("15.99"), description="Netflix Subscription")
            ]
        )
        conflict_analyzer.load_existing_recurring()

        conflicts = conflict_analyzer.analyze_recurring_conflicts(data)

        assert conflicts[0].score == 0

    def test_amount_outside_tolerance(self, conflict_analyzer, sample_recurring):
        data = bundle(
            recurring=[
                ParsedRecurring(id="r-1", amount=Decimal("16.01"), description="Netflix Subscription")
            ]
        )
        conflict_analyzer.load_existing_recurring()

        assert conflict_analyzer.analyze_recurring_conflicts(data) == []

    def test_different_description(self, conflict_analyzer, sample_recurring):
        data = bundle(
            recurring=[ParsedRecurring(id="r-1", amount=Decimal("15.99"), description="Gym membership")]
        )
        conflict_analyzer.load_existing_recurring()

        assert conflict_analyzer.analyze_recurring_conflicts(data) == []

    def test_nothing_existing(self, conflict_analyzer):
        data = bundle(
            recurring=[ParsedRecurring(id="r-1", amount=Decimal("15.99"), description="Netflix")]
        )
        conflict_analyzer.load_existing_recurring()

        assert conflict_analyzer.analyze_recurring_conflicts(data) == []


class TestGroupAnalysis:
    """Tests for shared-group detection."""

    def test_counts_group_markers_in_raw_payload(self, conflict_analyzer):
        data = bundle(
            transactions=[
                ParsedTransaction(date(2024, 1, 1), Decimal("10"), "Dinner", raw={"groupId": "g-1"}),
                ParsedTransaction(date(2024, 1, 2), Decimal("10"), "Taxi", raw={"group_id": "g-1"}),
                ParsedTransaction(date(2024, 1, 3), Decimal("10"), "Coffee", raw={"note": "x"}),
                ParsedTransaction(date(2024, 1, 4), Decimal("10"), "Lunch"),
            ]
        )

        result = conflict_analyzer.analyze_group_data(data)

        assert result.has_groups is True
        assert result.group_transaction_count == 2

    def test_no_groups(self, conflict_analyzer):
        result = conflict_analyzer.analyze_group_data(bundle())

        assert result.has_groups is False
        assert result.group_transaction_count == 0
