"""Field-level diffing for privileged report edits.

Each editable field has a kind with its own normalization and equality, so
nested values (the nationality map, the ticket blocks) compare by structure
rather than by identity or key order. The diff holds JSON-ready values and is
stored verbatim; it is never recomputed from a stored entry.
"""

from enum import Enum
from typing import Iterable, Mapping

from reports.domain import ticket_blocks
from reports.domain.errors import InvalidInputError
from reports.domain.models import DailyReport, TicketBlock, TicketBlocks
from reports.domain.value_objects import Count, Money, TicketCategory

Changes = dict[str, dict[str, object]]


def normalize_notes(value: str | None) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def normalize_countries(value: Mapping[str, int] | None) -> dict[str, int]:
    if not value:
        return {}
    return {str(code).upper(): Count(count).value for code, count in value.items()}


def normalize_ticket_blocks(value) -> TicketBlocks:
    """Accept per-category blocks or the stored flat list."""
    if not value:
        return {}
    if isinstance(value, Mapping):
        grouped = {
            TicketCategory(category): tuple(
                block if isinstance(block, TicketBlock) else ticket_blocks.block_from_dict(block)
                for block in blocks
            )
            for category, blocks in value.items()
        }
    else:
        grouped = ticket_blocks.group_flat_blocks(value)
    return ticket_blocks.normalize_category_blocks(grouped)


def _block_key(blocks: TicketBlocks) -> dict[TicketCategory, tuple[tuple[str, str, str], ...]]:
    return {
        category: tuple((b.block_no, b.start_no, b.end_no) for b in rows)
        for category, rows in blocks.items()
        if rows
    }


class FieldKind(Enum):
    """How an editable field is normalized, compared and serialized."""

    COUNT = "count"
    OPTIONAL_COUNT = "optional_count"
    AMOUNT = "amount"
    TEXT = "text"
    COUNTRY_MAP = "country_map"
    TICKET_BLOCKS = "ticket_blocks"

    def normalize(self, value):
        if self is FieldKind.COUNT:
            return Count(value).value
        if self is FieldKind.OPTIONAL_COUNT:
            return None if value is None else Count(value).value
        if self is FieldKind.AMOUNT:
            return Money(value).amount
        if self is FieldKind.TEXT:
            return normalize_notes(value)
        if self is FieldKind.COUNTRY_MAP:
            return normalize_countries(value)
        return normalize_ticket_blocks(value)

    def equal(self, old, new) -> bool:
        if self is FieldKind.COUNTRY_MAP:
            return dict(old) == dict(new)
        if self is FieldKind.TICKET_BLOCKS:
            return _block_key(old) == _block_key(new)
        return old == new

    def serialize(self, value):
        if self is FieldKind.COUNTRY_MAP:
            return dict(sorted(value.items()))
        if self is FieldKind.TICKET_BLOCKS:
            return ticket_blocks.flatten_category_blocks(value)
        return value


EDITABLE_FIELDS: dict[str, FieldKind] = {
    "anak_count": FieldKind.COUNT,
    "dewasa_count": FieldKind.COUNT,
    "wna_count": FieldKind.COUNT,
    "dewasa_male": FieldKind.COUNT,
    "dewasa_female": FieldKind.COUNT,
    "anak_male": FieldKind.OPTIONAL_COUNT,
    "anak_female": FieldKind.OPTIONAL_COUNT,
    "wna_countries": FieldKind.COUNTRY_MAP,
    "cash_amount": FieldKind.AMOUNT,
    "qris_amount": FieldKind.AMOUNT,
    "notes": FieldKind.TEXT,
    "ticket_blocks": FieldKind.TICKET_BLOCKS,
}


def check_editable(fields: Iterable[str]) -> None:
    unknown = sorted(set(fields) - set(EDITABLE_FIELDS))
    if unknown:
        raise InvalidInputError(f"Fields cannot be edited: {', '.join(unknown)}")


def normalize_fields(new_fields: Mapping[str, object]) -> dict[str, object]:
    """Normalize raw edit values into their domain form."""
    check_editable(new_fields)
    try:
        return {key: EDITABLE_FIELDS[key].normalize(value) for key, value in new_fields.items()}
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(str(exc)) from exc


def diff(old_record: DailyReport, new_fields: Mapping[str, object]) -> Changes:
    """Return {field: {"old": ..., "new": ...}} for every field whose value changed."""
    normalized = normalize_fields(new_fields)
    changes: Changes = {}
    for key, new_value in normalized.items():
        kind = EDITABLE_FIELDS[key]
        old_value = kind.normalize(getattr(old_record, key))
        if not kind.equal(old_value, new_value):
            changes[key] = {
                "old": kind.serialize(old_value),
                "new": kind.serialize(new_value),
            }
    return changes
