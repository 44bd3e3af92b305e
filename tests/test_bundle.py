"""Tests for loading import bundles from JSON."""

import pytest
from datetime import date
from decimal import Decimal

from finmerge.domain.bundle import load_parsed_data, parse_bundle
from finmerge.domain.errors import NotFoundError, ValidationError
from finmerge.domain.parsed import ImportSource


def test_load_sample_bundle(fixtures_dir):
    data = load_parsed_data(fixtures_dir / "sample_bundle.json")

    assert data.source is ImportSource.FULL_BACKUP
    assert data.metadata["version"] == 2
    assert len(data.categories) == 3
    assert len(data.transactions) == 4
    assert len(data.contexts) == 1
    assert len(data.recurring) == 1
    assert len(data.budgets) == 1


def test_camel_case_fields(fixtures_dir):
    data = load_parsed_data(fixtures_dir / "sample_bundle.json")

    groceries = data.categories[1]
    assert groceries.parent_id == "c-food"
    first = data.transactions[0]
    assert first.category_id == "c-groc"
    assert first.context_id == "ctx-1"
    assert data.recurring[0].start_date == date(2024, 1, 1)
    assert data.budgets[0].category_id == "c-food"


def test_amounts_and_dates_coerced(fixtures_dir):
    data = load_parsed_data(fixtures_dir / "sample_bundle.json")

    assert data.transactions[0].amount == Decimal("-54.20")
    assert data.transactions[0].date == date(2024, 3, 2)
    assert data.transactions[1].amount == Decimal("2500")
    assert data.transactions[1].date == date(2024, 3, 15)
    assert data.budgets[0].amount == Decimal("400")


def test_malformed_fields_become_none(fixtures_dir):
    data = load_parsed_data(fixtures_dir / "sample_bundle.json")

    broken = data.transactions[3]
    assert broken.date is None
    assert broken.is_well_formed() is False


def test_group_members():
    data = parse_bundle(
        {
            "source": "generic_csv",
            "groups": [{"id": "g-1", "name": "Flat"}],
            "groupMembers": [{"groupId": "g-1", "userId": "local", "share": "50"}],
        }
    )

    assert data.groups[0].name == "Flat"
    assert data.member_share("g-1", "local") == Decimal("50")
    assert data.member_share("g-1", "someone") is None


def test_budget_without_amount_dropped():
    data = parse_bundle(
        {"source": "full_backup", "budgets": [{"categoryId": "c-1"}, {"categoryId": "c-2", "amount": 5}]}
    )

    assert [b.category_id for b in data.budgets] == ["c-2"]
    assert data.budgets[0].period == "monthly"


def test_unknown_source():
    with pytest.raises(ValidationError):
        parse_bundle({"source": "spreadsheet"})


def test_record_list_must_be_list():
    with pytest.raises(ValidationError):
        parse_bundle({"source": "full_backup", "transactions": {"id": "t-1"}})


def test_missing_file(tmp_path):
    with pytest.raises(NotFoundError):
        load_parsed_data(tmp_path / "missing.json")


def test_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValidationError):
        load_parsed_data(path)


def test_records_without_ids_skipped():
    data = parse_bundle(
        {
            "source": "full_backup",
            "categories": [{"id": None, "name": "Ghost"}, {"id": "c-1", "name": "Food"}],
            "groups": [{"id": None, "name": "Nobody"}, {"id": "g-1", "name": "Flat"}],
            "groupMembers": [{"groupId": None, "share": "50"}, {"groupId": "g-1", "share": "25"}],
        }
    )

    assert [c.id for c in data.categories] == ["c-1"]
    assert [g.id for g in data.groups] == ["g-1"]
    assert [m.group_id for m in data.group_members] == ["g-1"]
    assert all(c.id != "None" for c in data.categories)
