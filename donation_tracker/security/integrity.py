"""
Daily transaction digest.

Each transaction becomes one line "id|amount|timestamp|campaign_id";
lines are joined with "\n" in the order given and hashed once with
SHA-256. The digest is published per calendar date so a third
party can recompute it from exported data.

The digest certifies sequence as well as content: the same set of
transactions in a different order produces a different hash. The
caller must supply a stable order (ascending id). If the store does
not return rows in a stable order, verification fails spuriously.
"""

import hashlib
import hmac
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Mapping

FIELD_SEPARATOR = "|"
LINE_SEPARATOR = "\n"
FIELDS = ("id", "amount", "timestamp", "campaign_id")


def _field(transaction: Any, name: str) -> Any:
    if isinstance(transaction, Mapping):
        return transaction[name]
    return getattr(transaction, name)


def format_value(value: Any) -> str:
    """Render a field the same way on every machine."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def canonical_line(transaction: Any) -> str:
    return FIELD_SEPARATOR.join(
        format_value(_field(transaction, name)) for name in FIELDS
    )


def canonical_payload(transactions: Iterable[Any]) -> str:
    return LINE_SEPARATOR.join(canonical_line(t) for t in transactions)


def generate_daily_hash(transactions: Iterable[Any]) -> str | None:
    """Return the hex SHA-256 digest, or None when there is nothing to hash."""
    transactions = list(transactions or [])
    if not transactions:
        return None
    payload = canonical_payload(transactions)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def verify_daily_hash(transactions: Iterable[Any], expected_hash: str | None) -> bool:
    """Recompute the digest and compare it to the published one."""
    calculated = generate_daily_hash(transactions)
    if calculated is None or not expected_hash:
        return False
    return hmac.compare_digest(calculated, expected_hash.lower())
