"""Load a parsed import bundle from a JSON file.

A bundle is ParsedData written to disk by a format parser: a JSON object with
``source`` and one list per record kind. Field names are accepted in
snake_case or camelCase. Malformed record fields are loaded as None so the
import processor can skip and count them; only a malformed bundle as a whole
raises.
"""

import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from finmerge.domain.errors import NotFoundError, ValidationError
from finmerge.domain.parsed import (
    ImportSource,
    ParsedBudget,
    ParsedCategory,
    ParsedContext,
    ParsedData,
    ParsedGroup,
    ParsedGroupMember,
    ParsedRecurring,
    ParsedTransaction,
)
from finmerge.utils import parse_amount, parse_date

logger = structlog.get_logger(__name__)


def _field(record: dict, name: str, default: Any = None) -> Any:
    """Read a snake_case field, falling back to its camelCase spelling."""
    if name in record:
        return record[name]
    head, *rest = name.split("_")
    camel = head + "".join(part.capitalize() for part in rest)
    return record.get(camel, default)


def _str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value)
    return value if value.strip() else None


def _amount(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError:
        return None


def _date(value: Any):
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError:
        return None


def _records(payload: dict, key: str) -> list[dict]:
    records = _field(payload, key) or []
    if not isinstance(records, list):
        raise ValidationError(f"Bundle field '{key}' must be a list")
    return [r for r in records if isinstance(r, dict)]


def _with_ids(kind: str, records: list, id_attr: str) -> list:
    """Drop records that cannot be referenced because they have no id."""
    kept = [r for r in records if getattr(r, id_attr) is not None]
    if len(kept) != len(records):
        logger.debug("records_without_id_skipped", kind=kind, count=len(records) - len(kept))
    return kept


def _transaction(record: dict) -> ParsedTransaction:
    raw = _field(record, "raw")
    return ParsedTransaction(
        date=_date(_field(record, "date")),
        amount=_amount(_field(record, "amount")),
        description=_str(_field(record, "description")),
        id=_str(_field(record, "id")),
        category_id=_str(_field(record, "category_id")),
        context_id=_str(_field(record, "context_id")),
        type=_str(_field(record, "type")),
        group_id=_str(_field(record, "group_id")),
        user_id=_str(_field(record, "user_id")),
        raw=raw if isinstance(raw, dict) else None,
    )


def _category(record: dict) -> ParsedCategory:
    active = _field(record, "active")
    return ParsedCategory(
        id=_str(_field(record, "id")),
        name=str(_field(record, "name") or "").strip(),
        type=_str(_field(record, "type")),
        icon=_str(_field(record, "icon")),
        color=_str(_field(record, "color")),
        parent_id=_str(_field(record, "parent_id")),
        active=None if active is None else bool(active),
        budget=_amount(_field(record, "budget")),
    )


def _recurring(record: dict) -> ParsedRecurring:
    return ParsedRecurring(
        id=_str(_field(record, "id")),
        amount=_amount(_field(record, "amount")),
        description=_str(_field(record, "description")),
        start_date=_date(_field(record, "start_date")),
        frequency=_str(_field(record, "frequency")),
        category_id=_str(_field(record, "category_id")),
        context_id=_str(_field(record, "context_id")),
        type=_str(_field(record, "type")),
        end_date=_date(_field(record, "end_date")),
        active=bool(_field(record, "active", True)),
    )


def parse_bundle(payload: dict) -> ParsedData:
    """Build ParsedData from a decoded bundle object.

    Raises:
        ValidationError: If the source tag is missing or unknown, or a record
            list is not a list
    """
    if not isinstance(payload, dict):
        raise ValidationError("Bundle must be a JSON object")

    source_value = payload.get("source")
    try:
        source = ImportSource(source_value)
    except (ValueError, TypeError):
        valid = ", ".join(s.value for s in ImportSource)
        raise ValidationError(f"Unknown bundle source '{source_value}'. Expected one of: {valid}")

    budgets = []
    for record in _records(payload, "budgets"):
        amount = _amount(_field(record, "amount"))
        category_id = _str(_field(record, "category_id"))
        if amount is None or category_id is None:
            logger.debug("malformed_budget_skipped", record=record)
            continue
        budgets.append(
            ParsedBudget(
                category_id=category_id,
                amount=amount,
                period=_str(_field(record, "period")) or "monthly",
            )
        )

    data = ParsedData(
        source=source,
        transactions=[_transaction(r) for r in _records(payload, "transactions")],
        categories=_with_ids(
            "category", [_category(r) for r in _records(payload, "categories")], "id"
        ),
        contexts=[
            ParsedContext(
                id=_str(_field(r, "id")),
                name=str(_field(r, "name") or "").strip(),
                description=_str(_field(r, "description")),
            )
            for r in _records(payload, "contexts")
        ],
        recurring=[_recurring(r) for r in _records(payload, "recurring")],
        budgets=budgets,
        groups=_with_ids(
            "group",
            [
                ParsedGroup(id=_str(_field(r, "id")), name=str(_field(r, "name") or ""))
                for r in _records(payload, "groups")
            ],
            "id",
        ),
        group_members=_with_ids(
            "group_member",
            [
                ParsedGroupMember(
                    group_id=_str(_field(r, "group_id")),
                    share=_amount(_field(r, "share")),
                    user_id=_str(_field(r, "user_id")),
                )
                for r in _records(payload, "group_members")
            ],
            "group_id",
        ),
        metadata=payload.get("metadata") or {},
    )
    logger.debug(
        "bundle_parsed",
        source=source.value,
        transactions=len(data.transactions),
        categories=len(data.categories),
    )
    return data


def load_parsed_data(path: Union[str, Path]) -> ParsedData:
    """Read a bundle file.

    Args:
        path: Path to the JSON bundle

    Returns:
        ParsedData ready for analysis and import

    Raises:
        NotFoundError: If the file does not exist
        ValidationError: If the file is not valid JSON or not a bundle
    """
    bundle_path = Path(path)
    if not bundle_path.exists():
        raise NotFoundError(f"Bundle file not found: {bundle_path}")

    try:
        with open(bundle_path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Bundle is not valid JSON: {e}")

    return parse_bundle(payload)
