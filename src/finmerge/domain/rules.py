"""Rule-based classification of imported transactions."""

import re
from datetime import datetime, UTC
from typing import Iterable, Optional

import structlog

from finmerge.database.base import Database
from finmerge.domain.constants import MATCH_TYPES, SKIP_CATEGORY_ID
from finmerge.domain.entities import ImportRule, RuleMatch
from finmerge.domain.errors import (
    NotFoundError,
    ValidationError,
    category_not_found,
    invalid_match_type,
    invalid_regex,
)
from finmerge.domain.parsed import ParsedTransaction
from finmerge.utils import new_id

logger = structlog.get_logger(__name__)


def evaluate(rule: ImportRule, description: Optional[str]) -> RuleMatch:
    """Evaluate one rule against a transaction description.

    exact and contains compare lower-cased text; regex searches the original
    description case-insensitively. A pattern that does not compile yields
    RuleMatch.INVALID instead of raising.
    """
    if not description:
        return RuleMatch.NO_MATCH

    desc = description.lower()
    pattern = rule.match_string.lower()

    if rule.match_type == "exact":
        matched = desc == pattern
    elif rule.match_type == "contains":
        matched = pattern in desc
    elif rule.match_type == "regex":
        try:
            matched = re.search(rule.match_string, description, re.IGNORECASE) is not None
        except re.error as e:
            logger.warning("invalid_regex_rule", rule_id=rule.id, pattern=rule.match_string, error=str(e))
            return RuleMatch.INVALID
    else:
        return RuleMatch.INVALID

    return RuleMatch.MATCH if matched else RuleMatch.NO_MATCH


class RulesEngine:
    """Applies a user's import rules, first match wins."""

    def __init__(self, db: Database, user_id: str):
        """Initialize rules engine.

        Args:
            db: Database instance
            user_id: Owner of the rules
        """
        self.db = db
        self.user_id = user_id
        self.rules: list[ImportRule] = []
        self.loaded = False

    def load_rules(self) -> list[ImportRule]:
        """Load the user's active rules once and keep them for this run."""
        self.rules = self.db.list_import_rules(self.user_id, active_only=True)
        self.loaded = True
        logger.debug("import_rules_loaded", count=len(self.rules))
        return self.rules

    def match(self, description: Optional[str]) -> Optional[ImportRule]:
        """Return the first loaded rule matching description, if any."""
        for rule in self.rules:
            if evaluate(rule, description) is RuleMatch.MATCH:
                return rule
        return None

    def apply_rules(self, transactions: Iterable[ParsedTransaction]) -> int:
        """Assign categories to uncategorized transactions in place.

        Transactions matched by a SKIP rule get the SKIP sentinel as category;
        callers drop those with filter_skipped() before committing.

        Returns:
            Number of transactions newly categorized
        """
        matched = 0
        for tx in transactions:
            if tx.category_id:
                continue
            rule = self.match(tx.description)
            if rule is None:
                continue
            tx.category_id = rule.category_id
            tx.category_is_local = rule.category_id != SKIP_CATEGORY_ID
            matched += 1
        return matched

    def create_rule(
        self, match_string: str, category_id: str, match_type: str = "contains"
    ) -> ImportRule:
        """Create a rule, persist it and make it effective immediately.

        Args:
            match_string: Text or pattern to match against descriptions
            category_id: Target category ID, or SKIP to ignore matches
            match_type: exact, contains or regex

        Returns:
            The created rule

        Raises:
            ValidationError: If the match string is empty, the match type is
                unknown or a regex pattern does not compile
            NotFoundError: If the target category does not exist
        """
        if not match_string or not match_string.strip():
            raise ValidationError("Match string cannot be empty")
        if match_type not in MATCH_TYPES:
            raise ValidationError(invalid_match_type(match_type))
        if match_type == "regex":
            try:
                re.compile(match_string)
            except re.error as e:
                raise ValidationError(invalid_regex(match_string, str(e)))
        if category_id != SKIP_CATEGORY_ID and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        rule = self.db.create_import_rule(
            ImportRule(
                id=new_id(),
                user_id=self.user_id,
                match_string=match_string,
                match_type=match_type,
                category_id=category_id,
                active=True,
                created_at=datetime.now(UTC),
            )
        )
        self.rules.append(rule)
        logger.info("import_rule_created", rule_id=rule.id, match_type=match_type)
        return rule

    def invalid_rules(self) -> list[ImportRule]:
        """Loaded rules that can never match because their pattern is broken."""
        return [
            rule
            for rule in self.rules
            if rule.match_type not in MATCH_TYPES
            or (rule.match_type == "regex" and _regex_error(rule.match_string))
        ]

    @staticmethod
    def filter_skipped(
        transactions: list[ParsedTransaction],
    ) -> tuple[list[ParsedTransaction], int]:
        """Split off transactions assigned to SKIP.

        Returns:
            Tuple of (kept transactions, number skipped)
        """
        kept = [tx for tx in transactions if tx.category_id != SKIP_CATEGORY_ID]
        return kept, len(transactions) - len(kept)


def _regex_error(pattern: str) -> Optional[str]:
    try:
        re.compile(pattern)
    except re.error as e:
        return str(e)
    return None
