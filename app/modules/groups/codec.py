"""
Serialization boundary between GiftGroup and the gift_groups row.

The row carries legacy and new names for the same facts. Writes fill both,
reads prefer the new name and fall back to the legacy one.
"""

from datetime import date, datetime, time, timezone
from typing import Any, Dict, Iterable, List, Optional

from app.modules.groups.schemas import GiftGroup

# canonical (new) column -> legacy column
LEGACY_COLUMNS = {
    "name": "title",
    "description": "occasion",
    "amount": "price",
    "image_url": "product_image_url",
}

PLAIN_COLUMNS = ("user_id", "currency", "product_url", "comments", "color", "participants")


def _timestamp(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min, tzinfo=timezone.utc)
    return value.isoformat()


def to_row(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Serialize the canonical fields that are present into a row payload."""
    row: Dict[str, Any] = {}
    for column, legacy in LEGACY_COLUMNS.items():
        if column in fields:
            row[column] = fields[column]
            row[legacy] = fields[column]
    for column in PLAIN_COLUMNS:
        if column in fields:
            row[column] = fields[column]
    if "date" in fields:
        row["date"] = _timestamp(fields["date"])
    return row


def _read(row: Dict[str, Any], column: str) -> Any:
    value = row.get(column)
    if value is None and column in LEGACY_COLUMNS:
        value = row.get(LEGACY_COLUMNS[column])
    return value


def from_row(row: Dict[str, Any], participants: Optional[Iterable[str]] = None) -> GiftGroup:
    """Deserialize a row; participants overrides the legacy email array when given."""
    emails: List[str] = list(participants) if participants is not None else list(row.get("participants") or [])
    return GiftGroup(
        id=row["id"],
        user_id=row["user_id"],
        name=_read(row, "name") or "",
        description=_read(row, "description"),
        amount=_read(row, "amount") or 0,
        currency=row.get("currency"),
        image_url=_read(row, "image_url"),
        product_url=row.get("product_url"),
        date=row.get("date"),
        comments=row.get("comments"),
        color=row.get("color"),
        participants=emails,
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )
