"""Conversion of operator attraction input into stored sub-reports."""

from dataclasses import dataclass

from reports.domain import ticket_blocks
from reports.domain.models import AttractionDefinition, AttractionSubReport, TicketBlock
from reports.domain.value_objects import AttractionId, Count, Money


@dataclass(frozen=True)
class AttractionInput:
    """What the operator entered for one attraction."""

    attraction_id: AttractionId
    visitor_count: int = 0
    ticket_blocks: tuple[TicketBlock, ...] = ()


def to_storage_form(
    data: AttractionInput,
    unit_price: int,
    requires_ticket_block: bool,
) -> AttractionSubReport:
    """Block-based attractions take their count from the stubs, others from input."""
    blocks = ticket_blocks.normalize_blocks(data.ticket_blocks)
    if requires_ticket_block:
        visitor_count = ticket_blocks.sum_category(blocks)
    else:
        visitor_count = Count(data.visitor_count).value
    return AttractionSubReport(
        attraction_id=data.attraction_id,
        visitor_count=visitor_count,
        revenue=(Money(unit_price) * Count(visitor_count)).amount,
        ticket_blocks=blocks if requires_ticket_block else (),
    )


def build_sub_reports(
    inputs: list[AttractionInput],
    definitions: dict[AttractionId, AttractionDefinition],
) -> tuple[AttractionSubReport, ...]:
    """Convert all inputs. The caller has already resolved every definition."""
    return tuple(
        to_storage_form(
            data,
            definitions[data.attraction_id].unit_price,
            definitions[data.attraction_id].requires_ticket_block,
        )
        for data in inputs
    )
