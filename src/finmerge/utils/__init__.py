"""Utility functions for finmerge."""

from uuid import uuid4

from finmerge.utils.date_parser import parse_date
from finmerge.utils.amount_parser import parse_amount, round_cents
from finmerge.utils.strings import normalize_string, edit_distance, find_best_match
from finmerge.utils.colors import generate_semantic_color


def new_id() -> str:
    """Mint a new record id."""
    return str(uuid4())


__all__ = [
    "parse_date",
    "parse_amount",
    "round_cents",
    "normalize_string",
    "edit_distance",
    "find_best_match",
    "generate_semantic_color",
    "new_id",
]
