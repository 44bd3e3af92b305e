"""Tests for the finmerge command line."""

from decimal import Decimal

from finmerge.cli.main import cli


def invoke(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


def test_help_does_not_open_database(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "analyze" in result.output
    assert "import" in result.output


class TestCategoryCommands:
    """Tests for category commands."""

    def test_category_list_empty(self, cli_runner, temp_db):
        result = invoke(cli_runner, temp_db, "category", "list")

        assert result.exit_code == 0
        assert "No categories found" in result.output

    def test_category_create_and_list(self, cli_runner, temp_db):
        result = invoke(cli_runner, temp_db, "category", "create", "Food", "--icon", "Utensils")
        assert result.exit_code == 0
        assert "Created category 'Food'" in result.output

        parent_id = temp_db.list_categories("local")[0].id
        result = invoke(cli_runner, temp_db, "category", "create", "Groceries", "--parent", parent_id)
        assert result.exit_code == 0
        assert "under 'Food'" in result.output

        result = invoke(cli_runner, temp_db, "category", "list")
        assert result.exit_code == 0
        assert "Food [expense]" in result.output
        assert "  Groceries [expense]" in result.output

    def test_category_create_invalid_parent(self, cli_runner, temp_db):
        result = invoke(cli_runner, temp_db, "category", "create", "Orphan", "--parent", "missing")

        assert result.exit_code == 1
        assert "Error: Category missing not found" in result.output

    def test_user_id_scopes_categories(self, cli_runner, temp_db):
        invoke(cli_runner, temp_db, "--user-id", "alice", "category", "create", "Books")

        assert [c.name for c in temp_db.list_categories("alice")] == ["Books"]
        assert temp_db.list_categories("local") == []


class TestRuleCommands:
    """Tests for rule commands."""

    def test_rule_add_list_check(self, cli_runner, temp_db, sample_categories):
        result = invoke(cli_runner, temp_db, "rule", "add", "uber", sample_categories["Transportation"])
        assert result.exit_code == 0
        assert "Created rule" in result.output

        result = invoke(cli_runner, temp_db, "rule", "add", "^ATM", "SKIP", "--type", "regex")
        assert result.exit_code == 0

        result = invoke(cli_runner, temp_db, "rule", "list")
        assert result.exit_code == 0
        assert "1. contains 'uber' -> Transportation" in result.output
        assert "2. regex '^ATM' -> SKIP" in result.output

        result = invoke(cli_runner, temp_db, "rule", "check", "UBER TRIP 42")
        assert result.exit_code == 0
        assert "Matched contains 'uber' -> Transportation" in result.output

        result = invoke(cli_runner, temp_db, "rule", "check", "Bakery")
        assert "No rule matches." in result.output

    def test_rule_list_empty(self, cli_runner, temp_db):
        result = invoke(cli_runner, temp_db, "rule", "list")

        assert result.exit_code == 0
        assert "No import rules found." in result.output

    def test_rule_add_invalid_regex(self, cli_runner, temp_db):
        result = invoke(cli_runner, temp_db, "rule", "add", "([broken", "SKIP", "--type", "regex")

        assert result.exit_code == 1
        assert "Error: Invalid regular expression" in result.output

    def test_rule_add_unknown_category(self, cli_runner, temp_db):
        result = invoke(cli_runner, temp_db, "rule", "add", "uber", "missing")

        assert result.exit_code == 1
        assert "Error: Category missing not found" in result.output


class TestAnalyzeCommand:
    """Tests for the analyze command."""

    def test_reports_similar_categories(self, cli_runner, temp_db, sample_categories, sample_recurring, write_bundle):
        path = write_bundle(
            {
                "source": "full_backup",
                "categories": [{"id": "c-good", "name": "Good"}],
                "recurring": [
                    {"id": "r-1", "amount": "15.99", "description": "Netflix subscription", "startDate": "2024-01-01"}
                ],
                "transactions": [
                    {"date": "2024-01-01", "amount": "10", "description": "Dinner", "raw": {"groupId": "g-1"}}
                ],
            }
        )

        result = invoke(cli_runner, temp_db, "analyze", path)

        assert result.exit_code == 0
        assert "'Good' -> 'Food'" in result.output
        assert f"--merge c-good={sample_categories['Food']}" in result.output
        assert "--skip-recurring r-1" in result.output
        assert "1 transactions belong to shared groups" in result.output

    def test_nothing_to_report(self, cli_runner, temp_db, fixtures_dir):
        result = invoke(cli_runner, temp_db, "analyze", str(fixtures_dir / "sample_bundle.json"))

        assert result.exit_code == 0
        assert "Similar categories:\n  None" in result.output

    def test_invalid_bundle(self, cli_runner, temp_db, write_bundle):
        path = write_bundle({"source": "spreadsheet"})

        result = invoke(cli_runner, temp_db, "analyze", path)

        assert result.exit_code == 1
        assert "Error: Unknown bundle source" in result.output


class TestImportCommand:
    """Tests for the import command."""

    def test_import_sample_bundle(self, cli_runner, temp_db, fixtures_dir):
        result = invoke(cli_runner, temp_db, "import", str(fixtures_dir / "sample_bundle.json"))

        assert result.exit_code == 0
        assert "Import complete:" in result.output
        assert "Categories: 3" in result.output
        assert "Contexts: 1" in result.output
        assert "Transactions: 3" in result.output
        assert "Recurring: 1" in result.output
        assert "Budgets: 1" in result.output
        assert "Skipped: 1 transactions" in result.output
        assert "1 transactions had no matching category" in result.output
        assert "Saving import" in result.output

        assert len(temp_db.list_transactions("local")) == 3
        by_name = {c.name: c for c in temp_db.list_categories("local")}
        assert by_name["Groceries"].parent_id == by_name["Food"].id
        assert by_name["Paycheck"].icon == "DollarSign"

    def test_import_with_merge(self, cli_runner, temp_db, sample_categories, write_bundle):
        path = write_bundle(
            {
                "source": "generic_csv",
                "categories": [{"id": "c-good", "name": "Good"}],
                "transactions": [
                    {"date": "2024-01-05", "amount": "-12.5", "description": "Lunch", "categoryId": "c-good"}
                ],
            }
        )

        result = invoke(
            cli_runner, temp_db, "import", path, "--merge", f"c-good={sample_categories['Food']}"
        )

        assert result.exit_code == 0
        assert "Categories: 0" in result.output
        stored = temp_db.list_transactions("local", category_id=sample_categories["Food"])
        assert [t.amount for t in stored] == [Decimal("12.50")]

    def test_import_accept_suggestions(self, cli_runner, temp_db, sample_categories, write_bundle):
        path = write_bundle(
            {
                "source": "generic_csv",
                "categories": [{"id": "c-good", "name": "Good"}],
                "transactions": [
                    {"date": "2024-01-05", "amount": "-12.5", "description": "Lunch", "categoryId": "c-good"}
                ],
            }
        )

        result = invoke(cli_runner, temp_db, "import", path, "--accept-suggestions")

        assert result.exit_code == 0
        assert "Categories: 0" in result.output
        assert "Good" not in [c.name for c in temp_db.list_categories("local")]

    def test_import_skip_duplicate_recurring(self, cli_runner, temp_db, sample_recurring, write_bundle):
        path = write_bundle(
            {
                "source": "full_backup",
                "recurring": [
                    {"id": "r-1", "amount": "15.99", "description": "Netflix Subscription", "startDate": "2024-01-01"},
                    {"id": "r-2", "amount": "30", "description": "Gym", "startDate": "2024-01-01"},
                ],
            }
        )

        result = invoke(cli_runner, temp_db, "import", path, "--skip-duplicate-recurring")

        assert result.exit_code == 0
        assert "Recurring: 1" in result.output
        assert sorted(r.description for r in temp_db.list_recurring("local")) == [
            "Gym",
            "Netflix Subscription",
        ]

    def test_import_skip_recurring_by_id(self, cli_runner, temp_db, write_bundle):
        path = write_bundle(
            {
                "source": "full_backup",
                "recurring": [
                    {"id": "r-1", "amount": "15.99", "description": "Netflix", "startDate": "2024-01-01"},
                ],
            }
        )

        result = invoke(cli_runner, temp_db, "import", path, "--skip-recurring", "r-1")

        assert result.exit_code == 0
        assert temp_db.list_recurring("local") == []

    def test_import_invalid_merge_option(self, cli_runner, temp_db, fixtures_dir):
        result = invoke(
            cli_runner, temp_db, "import", str(fixtures_dir / "sample_bundle.json"), "--merge", "no-equals"
        )

        assert result.exit_code == 1
        assert "Error: Invalid merge 'no-equals'" in result.output
        assert temp_db.list_transactions("local") == []

    def test_import_with_rules(self, cli_runner, temp_db, sample_categories, rules_engine, write_bundle):
        rules_engine.create_rule("bakery", sample_categories["Food"])
        path = write_bundle(
            {
                "source": "bank_specific",
                "transactions": [{"date": "2024-02-01", "amount": "-3.20", "description": "Local Bakery"}],
            }
        )

        with_rules = invoke(cli_runner, temp_db, "import", path)
        without_rules = invoke(cli_runner, temp_db, "import", path, "--no-rules")

        assert "no matching category" not in with_rules.output
        assert "1 transactions had no matching category" in without_rules.output
