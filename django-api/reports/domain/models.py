"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in reports/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Mapping

from reports.domain.value_objects import (
    AttractionId,
    ReportId,
    ReportStatus,
    Role,
    SiteId,
    TicketCategory,
    UserId,
)


@dataclass(frozen=True)
class Site:
    """Domain representation of a tourism Site."""

    id: SiteId
    code: str
    name: str
    location: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Caller:
    """Resolved identity of whoever invokes an operation."""

    id: UserId
    role: Role
    site_id: SiteId | None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


@dataclass(frozen=True)
class TicketBlock:
    """One physical ticket-stub range.

    Stub numbers stay strings: operators type them with leading zeros.
    """

    block_no: str
    start_no: str
    end_no: str


TicketBlocks = Mapping[TicketCategory, tuple[TicketBlock, ...]]


@dataclass(frozen=True)
class AttractionDefinition:
    """An optional paid add-on offered at a Site."""

    id: AttractionId
    site_id: SiteId
    name: str
    unit_price: int
    requires_ticket_block: bool
    is_active: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class AttractionSubReport:
    """One attraction's results for one DailyReport."""

    attraction_id: AttractionId
    visitor_count: int
    revenue: int
    ticket_blocks: tuple[TicketBlock, ...] = ()


@dataclass(frozen=True)
class DailyReport:
    """The day's record for one Site."""

    id: ReportId
    site_id: SiteId
    report_date: date
    anak_count: int
    dewasa_count: int
    wna_count: int
    dewasa_male: int
    dewasa_female: int
    anak_male: int | None
    anak_female: int | None
    wna_countries: Mapping[str, int]
    anak_revenue: int
    dewasa_revenue: int
    wna_revenue: int
    attraction_revenue: int
    cash_amount: int
    qris_amount: int
    notes: str | None
    ticket_blocks: TicketBlocks
    status: ReportStatus
    created_by: UserId | None
    submitted_by: UserId | None
    submitted_at: datetime | None
    created_at: datetime
    updated_at: datetime
    attractions: tuple[AttractionSubReport, ...] = ()

    @property
    def is_submitted(self) -> bool:
        return self.status is ReportStatus.SUBMITTED

    @property
    def total_visitors(self) -> int:
        return self.anak_count + self.dewasa_count + self.wna_count

    @property
    def total_revenue(self) -> int:
        """Stored revenue total. Reconciliation never trusts this value."""
        return (
            self.anak_revenue
            + self.dewasa_revenue
            + self.wna_revenue
            + self.attraction_revenue
        )

    def count_for(self, category: TicketCategory) -> int:
        return getattr(self, category.count_field)

    def blocks_for(self, category: TicketCategory) -> tuple[TicketBlock, ...]:
        return tuple(self.ticket_blocks.get(category, ()))


@dataclass(frozen=True)
class EditLogEntry:
    """One privileged edit of a DailyReport. Append-only."""

    report_id: ReportId
    edited_by: UserId
    changes: Mapping[str, Mapping[str, object]]
    reason: str | None
    edited_at: datetime


@dataclass(frozen=True)
class ActivityRecord:
    """Lifecycle activity on a report that is not a field-level edit."""

    action: str
    user_id: UserId | None
    site_id: SiteId | None
    details: Mapping[str, object] = field(default_factory=dict)
    created_at: datetime | None = None


@dataclass(frozen=True)
class TicketUsage:
    """A ticket block flattened out of a report for auditing stub usage."""

    report_id: ReportId
    report_date: date
    site_id: SiteId
    category: TicketCategory
    block_no: str
    start_no: str
    end_no: str
    count: int
