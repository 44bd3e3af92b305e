"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic so the engine never sees ORM objects
and the schema can change without touching the import code.
"""

from finmerge.domain import entities as domain
from finmerge.database.models import (
    Category as ORMCategory,
    Context as ORMContext,
    Transaction as ORMTransaction,
    RecurringTransaction as ORMRecurringTransaction,
    CategoryBudget as ORMCategoryBudget,
    ImportRule as ORMImportRule,
)


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        user_id=orm_category.user_id,
        name=orm_category.name,
        icon=orm_category.icon,
        color=orm_category.color,
        type=orm_category.type,
        parent_id=orm_category.parent_id,
        active=orm_category.active,
        deleted_at=orm_category.deleted_at,
        pending_sync=orm_category.pending_sync,
        local_only=orm_category.local_only,
        created_at=orm_category.created_at,
    )


def category_to_orm(category: domain.Category) -> ORMCategory:
    """Convert domain Category entity to SQLAlchemy Category model."""
    orm_category = ORMCategory(
        id=category.id,
        user_id=category.user_id,
        name=category.name,
        icon=category.icon,
        color=category.color,
        type=category.type,
        parent_id=category.parent_id,
        active=category.active,
        deleted_at=category.deleted_at,
        pending_sync=category.pending_sync,
        local_only=category.local_only,
    )
    if category.created_at is not None:
        orm_category.created_at = category.created_at
    return orm_category


def context_to_domain(orm_context: ORMContext) -> domain.Context:
    """Convert SQLAlchemy Context model to domain Context entity."""
    return domain.Context(
        id=orm_context.id,
        user_id=orm_context.user_id,
        name=orm_context.name,
        description=orm_context.description,
        active=orm_context.active,
        deleted_at=orm_context.deleted_at,
        pending_sync=orm_context.pending_sync,
    )


def context_to_orm(context: domain.Context) -> ORMContext:
    return ORMContext(
        id=context.id,
        user_id=context.user_id,
        name=context.name,
        description=context.description,
        active=context.active,
        deleted_at=context.deleted_at,
        pending_sync=context.pending_sync,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        category_id=orm_transaction.category_id,
        type=orm_transaction.type,
        amount=orm_transaction.amount,
        date=orm_transaction.date,
        year_month=orm_transaction.year_month,
        description=orm_transaction.description,
        context_id=orm_transaction.context_id,
        group_id=orm_transaction.group_id,
        paid_by_member_id=orm_transaction.paid_by_member_id,
        deleted_at=orm_transaction.deleted_at,
        pending_sync=orm_transaction.pending_sync,
    )


def transaction_to_orm(transaction: domain.Transaction) -> ORMTransaction:
    return ORMTransaction(
        id=transaction.id,
        user_id=transaction.user_id,
        category_id=transaction.category_id,
        context_id=transaction.context_id,
        type=transaction.type,
        amount=transaction.amount,
        date=transaction.date,
        year_month=transaction.year_month,
        description=transaction.description,
        group_id=transaction.group_id,
        paid_by_member_id=transaction.paid_by_member_id,
        deleted_at=transaction.deleted_at,
        pending_sync=transaction.pending_sync,
    )


def recurring_to_domain(
    orm_recurring: ORMRecurringTransaction,
) -> domain.RecurringTransaction:
    """Convert SQLAlchemy RecurringTransaction model to domain entity."""
    return domain.RecurringTransaction(
        id=orm_recurring.id,
        user_id=orm_recurring.user_id,
        category_id=orm_recurring.category_id,
        type=orm_recurring.type,
        amount=orm_recurring.amount,
        description=orm_recurring.description,
        frequency=orm_recurring.frequency,
        start_date=orm_recurring.start_date,
        end_date=orm_recurring.end_date,
        context_id=orm_recurring.context_id,
        active=orm_recurring.active,
        deleted_at=orm_recurring.deleted_at,
        pending_sync=orm_recurring.pending_sync,
    )


def recurring_to_orm(recurring: domain.RecurringTransaction) -> ORMRecurringTransaction:
    return ORMRecurringTransaction(
        id=recurring.id,
        user_id=recurring.user_id,
        category_id=recurring.category_id,
        context_id=recurring.context_id,
        type=recurring.type,
        amount=recurring.amount,
        description=recurring.description,
        frequency=recurring.frequency,
        start_date=recurring.start_date,
        end_date=recurring.end_date,
        active=recurring.active,
        deleted_at=recurring.deleted_at,
        pending_sync=recurring.pending_sync,
    )


def budget_to_domain(orm_budget: ORMCategoryBudget) -> domain.CategoryBudget:
    """Convert SQLAlchemy CategoryBudget model to domain entity."""
    return domain.CategoryBudget(
        id=orm_budget.id,
        user_id=orm_budget.user_id,
        category_id=orm_budget.category_id,
        amount=orm_budget.amount,
        period=orm_budget.period,
        deleted_at=orm_budget.deleted_at,
        pending_sync=orm_budget.pending_sync,
    )


def budget_to_orm(budget: domain.CategoryBudget) -> ORMCategoryBudget:
    return ORMCategoryBudget(
        id=budget.id,
        user_id=budget.user_id,
        category_id=budget.category_id,
        amount=budget.amount,
        period=budget.period,
        deleted_at=budget.deleted_at,
        pending_sync=budget.pending_sync,
    )


def import_rule_to_domain(orm_rule: ORMImportRule) -> domain.ImportRule:
    """Convert SQLAlchemy ImportRule model to domain ImportRule entity."""
    return domain.ImportRule(
        id=orm_rule.id,
        user_id=orm_rule.user_id,
        match_string=orm_rule.match_string,
        match_type=orm_rule.match_type,
        category_id=orm_rule.category_id,
        active=orm_rule.active,
        deleted_at=orm_rule.deleted_at,
        created_at=orm_rule.created_at,
    )


def import_rule_to_orm(rule: domain.ImportRule) -> ORMImportRule:
    orm_rule = ORMImportRule(
        id=rule.id,
        user_id=rule.user_id,
        match_string=rule.match_string,
        match_type=rule.match_type,
        category_id=rule.category_id,
        active=rule.active,
        deleted_at=rule.deleted_at,
    )
    if rule.created_at is not None:
        orm_rule.created_at = rule.created_at
    return orm_rule
