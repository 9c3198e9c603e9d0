"""
Common utility functions shared across the application.
"""

import json
from datetime import datetime
from typing import Any, List, Optional

import pytz

# Stores operate on Brasília time; promotion dates are entered in it
DEFAULT_TIMEZONE = pytz.timezone('America/Sao_Paulo')


def localize(value: datetime) -> datetime:
    """Attach the store timezone to naive datetimes."""
    if value.tzinfo is None:
        return DEFAULT_TIMEZONE.localize(value)
    return value


def now_local() -> datetime:
    return datetime.now(DEFAULT_TIMEZONE)


def is_promotion_active(is_promotion: bool, end_date: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """
    A promotion is active when flagged and its end date (if any) has not passed.
    """
    if not is_promotion:
        return False
    if end_date is None:
        return True
    return localize(end_date) >= (now or now_local())


def parse_array_field(value: Any) -> List[Any]:
    """
    Normalize an array-ish form or document field into a list.

    Multipart forms send arrays either as repeated fields or as a single
    JSON-encoded string; older documents may hold a Postgres-style "{a,b}"
    literal. Items that are themselves JSON arrays are flattened in place.

    Args:
        value: Raw field value (list, str or None)

    Returns:
        list: The parsed items, order preserved
    """
    if value is None:
        return []

    if isinstance(value, (list, tuple)):
        items = []
        for item in value:
            if isinstance(item, str) and item.strip().startswith(("[", "{")):
                items.extend(parse_array_field(item))
            else:
                items.append(item)
        return items

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        try:
            parsed = json.loads(text)
        except ValueError:
            if text.startswith("{"):
                return [part for part in text.strip("{}").split(",") if part]
            return [text]
        if isinstance(parsed, list):
            return parsed
        return [parsed]

    return [value]

