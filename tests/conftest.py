"""Shared pytest fixtures for finmerge tests."""

import tempfile
import os
import json
from datetime import date
from decimal import Decimal
from pathlib import Path
import pytest
import structlog

from finmerge.database.factories import create_sqlite_database
from finmerge.domain.category import CategoryService
from finmerge.domain.conflicts import ConflictAnalyzer
from finmerge.domain.entities import ImportBatch, RecurringTransaction
from finmerge.domain.import_processor import ImportProcessor
from finmerge.domain.rules import RulesEngine


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo logging configured by CLI invocations."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def user_id():
    """Owner of the test dataset; matches the CLI default."""
    return "local"


@pytest.fixture
def category_service(temp_db, user_id):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db, user_id)


@pytest.fixture
def conflict_analyzer(temp_db, user_id):
    """Create a ConflictAnalyzer with a temporary database."""
    return ConflictAnalyzer(temp_db, user_id)


@pytest.fixture
def rules_engine(temp_db, user_id):
    """Create a RulesEngine with a temporary database."""
    return RulesEngine(temp_db, user_id)


@pytest.fixture
def import_processor(temp_db, user_id):
    """Create an ImportProcessor with a temporary database."""
    return ImportProcessor(temp_db, user_id)


@pytest.fixture
def sample_categories(category_service):
    """Create a small local category tree and return IDs by name."""
    category_ids = {}
    category_ids["Food"] = category_service.create_category(name="Food")
    category_ids["Groceries"] = category_service.create_category(
        name="Groceries", parent_id=category_ids["Food"]
    )
    category_ids["Transportation"] = category_service.create_category(name="Transportation")
    category_ids["Salary"] = category_service.create_category(
        name="Salary", category_type="income"
    )
    return category_ids


@pytest.fixture
def sample_recurring(temp_db, user_id, sample_categories):
    """Persist one existing recurring obligation (Netflix, 15.99 monthly)."""
    recurring = RecurringTransaction(
        id="existing-netflix",
        user_id=user_id,
        category_id=sample_categories["Food"],
        type="expense",
        amount=Decimal("15.99"),
        description="Netflix Subscription",
        frequency="monthly",
        start_date=date(2024, 1, 1),
    )
    temp_db.commit_import(ImportBatch(recurring=[recurring]))
    return recurring


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def write_bundle(tmp_path):
    """Write a bundle dict as JSON and return its path."""

    def _write(payload: dict, name: str = "bundle.json") -> str:
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)

    return _write
