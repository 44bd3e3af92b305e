"""Import processor: merges a parsed bundle into the local dataset.

One processor is built per user and per import run. It owns the run's caches
(loaded rules, existing recurring obligations) and drives the pipeline

    contexts -> categories -> transactions -> recurring -> budgets -> commit

collecting every insertion into one ImportBatch that the store writes
atomically. Legacy migrations differ from other sources only in how category
types and colours are chosen, which is captured by ImportStrategy.
"""

from collections import Counter
from dataclasses import dataclass, replace
from datetime import datetime, UTC
from decimal import Decimal
from typing import Callable, Optional

import structlog

from finmerge.database.base import Database
from finmerge.domain.conflicts import ConflictAnalyzer
from finmerge.domain.constants import (
    BUDGET_PERIODS,
    CATEGORY_TYPES,
    DEFAULT_CATEGORY_COLOR,
    DEFAULT_CATEGORY_TYPE,
    DEFAULT_FREQUENCY,
    FREQUENCY_TYPES,
    UNCATEGORIZED_CATEGORY_ID,
    validate_icon,
)
from finmerge.domain.entities import (
    Category,
    CategoryBudget,
    Context,
    GroupAnalysis,
    ImportBatch,
    ImportResult,
    PotentialMerge,
    RecurringConflict,
    RecurringTransaction,
    Transaction,
)
from finmerge.domain.hierarchy import CategoryHierarchyResolver
from finmerge.domain.parsed import (
    ImportSource,
    ParsedCategory,
    ParsedContext,
    ParsedData,
    ParsedRecurring,
    ParsedTransaction,
)
from finmerge.domain.rules import RulesEngine
from finmerge.utils import generate_semantic_color, new_id, normalize_string, round_cents

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[int, int, str], None]


@dataclass(frozen=True)
class ImportOptions:
    """Per-run switches.

    Attributes:
        regenerate_colors: Legacy migrations only; replace imported colours
            with a generated palette per category type
        apply_rules: Run the user's import rules over uncategorized
            transactions and drop the ones ruled SKIP
        progress_every: Report transaction and recurring progress once per
            this many records
    """

    regenerate_colors: bool = False
    apply_rules: bool = True
    progress_every: int = 50


class ImportStrategy:
    """How a source decides category types and colours.

    The default behaviour is the standard strategy used for backups and bank
    exports, which carry their own types and colours.
    """

    name = "standard"

    def category_type(self, cat: ParsedCategory, resolver: CategoryHierarchyResolver) -> str:
        if cat.type in CATEGORY_TYPES:
            return cat.type
        return resolver.resolve_category_type(cat.id)

    def category_color(self, cat: ParsedCategory, category_type: str) -> str:
        return cat.color or DEFAULT_CATEGORY_COLOR

    def default_type(self, source_category_id: Optional[str], resolver: CategoryHierarchyResolver) -> str:
        """Type for a transaction or recurring entry that declares none."""
        return DEFAULT_CATEGORY_TYPE

    def category_budget(self, cat: ParsedCategory) -> Optional[Decimal]:
        """Monthly budget carried on the category itself, if the source has one."""
        return None

    def category_active(self, cat: ParsedCategory) -> bool:
        """Categories without an active flag are imported as active."""
        return True if cat.active is None else bool(cat.active)


class StandardImportStrategy(ImportStrategy):
    pass


class LegacyMigrationStrategy(ImportStrategy):
    """Legacy exports: types come from the root marker each hierarchy hangs from."""

    name = "legacy_migration"

    def __init__(self, regenerate_colors: bool = False):
        self.regenerate_colors = regenerate_colors
        self._color_index: Counter[str] = Counter()

    def category_type(self, cat: ParsedCategory, resolver: CategoryHierarchyResolver) -> str:
        return resolver.resolve_category_type(cat.id)

    def category_color(self, cat: ParsedCategory, category_type: str) -> str:
        if not self.regenerate_colors:
            return cat.color or DEFAULT_CATEGORY_COLOR
        index = self._color_index[category_type]
        self._color_index[category_type] += 1
        return generate_semantic_color(category_type, index)

    def default_type(self, source_category_id: Optional[str], resolver: CategoryHierarchyResolver) -> str:
        return resolver.resolve_category_type(source_category_id)

    def category_budget(self, cat: ParsedCategory) -> Optional[Decimal]:
        if cat.budget is not None and cat.budget > 0:
            return cat.budget
        return None

    def category_active(self, cat: ParsedCategory) -> bool:
        """Legacy exports only mark active categories; a missing flag means inactive."""
        return bool(cat.active)


def select_strategy(source: ImportSource, options: ImportOptions) -> ImportStrategy:
    """Pick the strategy for a bundle's source."""
    if source == ImportSource.LEGACY_MIGRATION:
        return LegacyMigrationStrategy(regenerate_colors=options.regenerate_colors)
    return StandardImportStrategy()


class _Progress:
    """Monotonic progress reporting, throttled for bulk steps."""

    def __init__(self, callback: Optional[ProgressCallback], total: int, every: int):
        self.callback = callback
        self.total = total
        self.every = max(1, every)
        self.current = 0

    def step(self, message: str, throttle: bool = False) -> None:
        self.current = min(self.current + 1, self.total)
        if self.callback is None:
            return
        if throttle and self.current % self.every != 0 and self.current != self.total:
            return
        self.callback(self.current, self.total, message)

    def report(self, message: str) -> None:
        if self.callback is not None:
            self.callback(self.current, self.total, message)


@dataclass
class _RunState:
    """Working state of one process() call."""

    data: ParsedData
    strategy: ImportStrategy
    resolver: CategoryHierarchyResolver
    progress: _Progress
    batch: ImportBatch
    context_map: dict[str, str]
    known_category_ids: set[str]
    orphan_count: int = 0
    skipped_transactions: int = 0


class ImportProcessor:
    """Merges parsed bundles into one user's local dataset."""

    def __init__(self, db: Database, user_id: str):
        """Initialize import processor.

        Args:
            db: Database instance
            user_id: Owner of the local dataset being merged into
        """
        self.db = db
        self.user_id = user_id
        self.analyzer = ConflictAnalyzer(db, user_id)
        self.rules_engine = RulesEngine(db, user_id)

    # Conflict analysis
    def analyze_category_conflicts(self, data: ParsedData) -> list[PotentialMerge]:
        """See ConflictAnalyzer.analyze_category_conflicts."""
        return self.analyzer.analyze_category_conflicts(data)

    def load_existing_recurring(self) -> None:
        """See ConflictAnalyzer.load_existing_recurring."""
        self.analyzer.load_existing_recurring()

    def analyze_recurring_conflicts(self, data: ParsedData) -> list[RecurringConflict]:
        """See ConflictAnalyzer.analyze_recurring_conflicts."""
        return self.analyzer.analyze_recurring_conflicts(data)

    def analyze_group_data(self, data: ParsedData) -> GroupAnalysis:
        """See ConflictAnalyzer.analyze_group_data."""
        return self.analyzer.analyze_group_data(data)

    # Import
    def process(
        self,
        data: ParsedData,
        on_progress: Optional[ProgressCallback] = None,
        merge_decisions: Optional[dict[str, str]] = None,
        skip_recurring_ids: Optional[set[str]] = None,
        options: Optional[ImportOptions] = None,
    ) -> ImportResult:
        """Merge a parsed bundle and commit it in one transaction.

        Args:
            data: Parsed import bundle
            on_progress: Called as on_progress(current, total, message)
            merge_decisions: Approved imported category id -> local category id
            skip_recurring_ids: Imported recurring ids the user chose to drop
            options: Per-run switches

        Returns:
            ImportResult with created record counts and the number of
            transactions that fell back to Uncategorized

        Raises:
            ImportCommitError: If the batch could not be written; nothing
                from this run is persisted in that case
        """
        options = options or ImportOptions()
        skip_recurring_ids = skip_recurring_ids or set()
        strategy = select_strategy(data.source, options)

        # Rules assign categories in place; work on copies of the caller's records
        transactions = [replace(tx) for tx in data.transactions]
        if options.apply_rules:
            if not self.rules_engine.loaded:
                self.rules_engine.load_rules()
            matched = self.rules_engine.apply_rules(transactions)
            logger.debug("import_rules_applied", matched=matched)
        transactions, ruled_out = RulesEngine.filter_skipped(transactions)

        total = (
            len(data.contexts)
            + len(data.categories)
            + len(transactions)
            + len(data.recurring)
            + len(data.budgets)
        )
        resolver = CategoryHierarchyResolver(
            self.db.list_categories(self.user_id), merge_decisions
        )
        state = _RunState(
            data=data,
            strategy=strategy,
            resolver=resolver,
            progress=_Progress(on_progress, total, options.progress_every),
            batch=ImportBatch(),
            context_map={},
            known_category_ids=set(resolver.existing_by_id) | {UNCATEGORIZED_CATEGORY_ID},
            skipped_transactions=ruled_out,
        )

        logger.info(
            "import_started",
            source=data.source.value,
            strategy=strategy.name,
            transactions=len(transactions),
            categories=len(data.categories),
        )

        self._stage_contexts(state, data.contexts)
        self._stage_categories(state, data.categories)
        self._stage_transactions(state, transactions)
        self._stage_recurring(state, data.recurring, skip_recurring_ids)
        self._stage_budgets(state)

        state.progress.report("Saving import")
        if not state.batch.is_empty():
            self.db.commit_import(state.batch)

        result = ImportResult(
            categories=len(state.batch.categories),
            transactions=len(state.batch.transactions),
            recurring=len(state.batch.recurring),
            orphan_count=state.orphan_count,
            contexts=len(state.batch.contexts),
            budgets=len(state.batch.budgets),
            skipped_transactions=state.skipped_transactions,
        )
        logger.info(
            "import_committed",
            categories=result.categories,
            transactions=result.transactions,
            recurring=result.recurring,
            orphans=result.orphan_count,
            skipped=result.skipped_transactions,
        )
        return result

    def _stage_contexts(self, state: _RunState, contexts: list[ParsedContext]) -> None:
        by_name = {}
        for existing in self.db.list_contexts(self.user_id):
            by_name.setdefault(normalize_string(existing.name), existing.id)

        for ctx in contexts:
            state.progress.step(f"Importing context: {ctx.name}")
            if not ctx.name:
                continue
            key = normalize_string(ctx.name)
            local_id = by_name.get(key)
            if local_id is None:
                local_id = new_id()
                by_name[key] = local_id
                state.batch.contexts.append(
                    Context(
                        id=local_id,
                        user_id=self.user_id,
                        name=ctx.name,
                        description=ctx.description,
                    )
                )
            if ctx.id:
                state.context_map[ctx.id] = local_id

    def _stage_categories(self, state: _RunState, categories: list[ParsedCategory]) -> None:
        resolver = state.resolver
        strategy = state.strategy
        now = datetime.now(UTC)

        resolver.resolve_ids(categories)

        def build(cat: ParsedCategory, local_id: str, parent_id: Optional[str]) -> Category:
            category_type = strategy.category_type(cat, resolver)
            budget = strategy.category_budget(cat)
            if budget is not None:
                state.batch.budgets.append(
                    CategoryBudget(
                        id=new_id(),
                        user_id=self.user_id,
                        category_id=local_id,
                        amount=round_cents(budget),
                        period="monthly",
                    )
                )
            return Category(
                id=local_id,
                user_id=self.user_id,
                name=cat.name,
                icon=validate_icon(cat.icon),
                color=strategy.category_color(cat, category_type),
                type=category_type,
                parent_id=parent_id,
                active=strategy.category_active(cat),
                created_at=now,
            )

        new_categories = resolver.materialize(categories, build)
        state.batch.categories.extend(new_categories)
        state.known_category_ids.update(c.id for c in new_categories)

        for cat in categories:
            state.progress.step(f"Importing category: {cat.name}")

    def _resolve_category(
        self, state: _RunState, source_id: Optional[str], is_local: bool = False
    ) -> Optional[str]:
        """Local category for a record, or None when it cannot be resolved."""
        if not source_id:
            return None
        if is_local:
            return source_id if source_id in state.known_category_ids else None
        return state.resolver.resolve_local_id(source_id)

    def _record_type(
        self,
        state: _RunState,
        declared: Optional[str],
        source_category_id: Optional[str],
        local_category_id: Optional[str],
        is_local: bool,
    ) -> str:
        if declared in CATEGORY_TYPES:
            return declared
        if is_local and local_category_id in state.resolver.existing_by_id:
            return state.resolver.existing_by_id[local_category_id].type
        return state.strategy.default_type(source_category_id, state.resolver)

    def _scaled_amount(self, state: _RunState, tx: ParsedTransaction) -> Decimal:
        """Absolute amount, reduced to this user's share for group expenses."""
        amount = abs(tx.amount)
        if tx.group_id and state.data.group_members:
            share = state.data.member_share(tx.group_id, tx.user_id or self.user_id)
            if share is not None:
                amount = amount * Decimal(share) / Decimal(100)
        return round_cents(amount)

    def _stage_transactions(self, state: _RunState, transactions: list[ParsedTransaction]) -> None:
        for tx in transactions:
            state.progress.step("Importing transactions", throttle=True)

            if not tx.is_well_formed():
                logger.debug("malformed_transaction_skipped", source_id=tx.id)
                state.skipped_transactions += 1
                continue

            category_id = self._resolve_category(state, tx.category_id, tx.category_is_local)
            if category_id is None:
                category_id = UNCATEGORIZED_CATEGORY_ID
                state.orphan_count += 1

            state.batch.transactions.append(
                Transaction(
                    id=new_id(),
                    user_id=self.user_id,
                    category_id=category_id,
                    type=self._record_type(
                        state, tx.type, tx.category_id, category_id, tx.category_is_local
                    ),
                    amount=self._scaled_amount(state, tx),
                    date=tx.date,
                    year_month=tx.date.strftime("%Y-%m"),
                    description=tx.description,
                    context_id=state.context_map.get(tx.context_id) if tx.context_id else None,
                    # Group membership does not survive an import
                    group_id=None,
                    paid_by_member_id=None,
                )
            )

    def _stage_recurring(
        self,
        state: _RunState,
        recurring: list[ParsedRecurring],
        skip_ids: set[str],
    ) -> None:
        for rec in recurring:
            state.progress.step("Importing recurring transactions", throttle=True)

            if rec.id and rec.id in skip_ids:
                continue
            if rec.amount is None or rec.start_date is None or not rec.description:
                logger.debug("malformed_recurring_skipped", source_id=rec.id)
                continue

            category_id = self._resolve_category(state, rec.category_id)
            if category_id is None:
                category_id = UNCATEGORIZED_CATEGORY_ID

            frequency = (rec.frequency or "").lower()
            if frequency not in FREQUENCY_TYPES:
                frequency = DEFAULT_FREQUENCY

            state.batch.recurring.append(
                RecurringTransaction(
                    id=new_id(),
                    user_id=self.user_id,
                    category_id=category_id,
                    type=self._record_type(state, rec.type, rec.category_id, category_id, False),
                    amount=round_cents(abs(rec.amount)),
                    description=rec.description,
                    frequency=frequency,
                    start_date=rec.start_date,
                    end_date=rec.end_date,
                    context_id=state.context_map.get(rec.context_id) if rec.context_id else None,
                    active=rec.active,
                )
            )

    def _stage_budgets(self, state: _RunState) -> None:
        staged = {(b.category_id, b.period) for b in state.batch.budgets}

        for budget in state.data.budgets:
            state.progress.step(f"Importing budget for category {budget.category_id}")

            category_id = self._resolve_category(state, budget.category_id)
            if category_id is None or category_id not in state.known_category_ids:
                continue
            period = (budget.period or "").lower()
            if period not in BUDGET_PERIODS:
                continue

            key = (category_id, period)
            if key in staged or self.db.budget_exists(category_id, period):
                continue
            staged.add(key)
            state.batch.budgets.append(
                CategoryBudget(
                    id=new_id(),
                    user_id=self.user_id,
                    category_id=category_id,
                    amount=round_cents(abs(budget.amount)),
                    period=period,
                )
            )
