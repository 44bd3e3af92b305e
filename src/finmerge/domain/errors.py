"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity or path does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ImportCommitError(DomainError):
    """The import batch could not be persisted; nothing was written."""


def category_not_found(category_id: str) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def invalid_category_type(category_type: str) -> str:
    """Return message for an unknown category type."""
    return f"Invalid category type '{category_type}'. Expected expense, income or investment"


def invalid_match_type(match_type: str) -> str:
    """Return message for an unknown rule match type."""
    return f"Invalid match type '{match_type}'. Expected exact, contains or regex"


def invalid_regex(pattern: str, reason: str) -> str:
    """Return message for a rule pattern that does not compile."""
    return f"Invalid regular expression '{pattern}': {reason}"


def recurring_not_loaded() -> str:
    """Return message when recurring analysis runs before loading."""
    return (
        "Existing recurring transactions are not loaded. "
        "Call load_existing_recurring() before analyzing recurring conflicts."
    )


def commit_failed(reason: str) -> str:
    """Return message when the atomic import write fails."""
    return f"Import could not be saved, no changes were made: {reason}"
