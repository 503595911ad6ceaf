"""Ticket block ledger.

Turns operator-entered stub ranges into visitor counts. Malformed ranges are
never an error here: they count as zero so a half-filled form still saves.
"""

from typing import Iterable, Mapping

from reports.domain.models import DailyReport, TicketBlock, TicketBlocks, TicketUsage
from reports.domain.value_objects import TicketCategory


def _parse_stub(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def derive_count(block: TicketBlock) -> int:
    """Return end - start + 1, or 0 when the range is unparsable or reversed."""
    start = _parse_stub(block.start_no)
    end = _parse_stub(block.end_no)
    if start is None or end is None or end < start:
        return 0
    return end - start + 1


def sum_category(blocks: Iterable[TicketBlock]) -> int:
    return sum(derive_count(block) for block in blocks)


def normalize_blocks(blocks: Iterable[TicketBlock]) -> tuple[TicketBlock, ...]:
    """Trim stub text and drop rows left without a start or end stub."""
    normalized = []
    for block in blocks:
        start = (block.start_no or "").strip()
        end = (block.end_no or "").strip()
        if start and end:
            normalized.append(TicketBlock((block.block_no or "").strip(), start, end))
    return tuple(normalized)


def normalize_category_blocks(
    blocks: Mapping[TicketCategory, Iterable[TicketBlock]],
) -> TicketBlocks:
    """Normalize every category, keeping only categories with filled rows."""
    normalized = {}
    for category in TicketCategory:
        rows = normalize_blocks(blocks.get(category, ()))
        if rows:
            normalized[category] = rows
    return normalized


def block_to_dict(block: TicketBlock) -> dict:
    return {
        "block_no": block.block_no,
        "start_no": block.start_no,
        "end_no": block.end_no,
        "count": derive_count(block),
    }


def block_from_dict(data: Mapping) -> TicketBlock:
    return TicketBlock(
        block_no=str(data.get("block_no") or ""),
        start_no=str(data.get("start_no") or ""),
        end_no=str(data.get("end_no") or ""),
    )


def flatten_category_blocks(blocks: TicketBlocks) -> list[dict]:
    """Serialize per-category blocks into the stored flat list, categories in order."""
    rows = []
    for category in TicketCategory:
        for block in blocks.get(category, ()):
            rows.append({"category": category.value, **block_to_dict(block)})
    return rows


def group_flat_blocks(rows: Iterable[Mapping]) -> TicketBlocks:
    """Inverse of flatten_category_blocks. Rows without a category count as dewasa."""
    grouped: dict[TicketCategory, list[TicketBlock]] = {}
    for row in rows:
        category = TicketCategory(row.get("category") or TicketCategory.DEWASA.value)
        grouped.setdefault(category, []).append(block_from_dict(row))
    return {category: tuple(items) for category, items in grouped.items()}


def ticket_usage(reports: Iterable[DailyReport]) -> list[TicketUsage]:
    """Flatten every report's ticket blocks into one usage listing."""
    usage = []
    for report in reports:
        for category in TicketCategory:
            for block in report.blocks_for(category):
                usage.append(
                    TicketUsage(
                        report_id=report.id,
                        report_date=report.report_date,
                        site_id=report.site_id,
                        category=category,
                        block_no=block.block_no,
                        start_no=block.start_no,
                        end_no=block.end_no,
                        count=derive_count(block),
                    )
                )
    return usage
