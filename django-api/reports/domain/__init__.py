from reports.domain.models import (
    ActivityRecord,
    AttractionDefinition,
    AttractionSubReport,
    Caller,
    DailyReport,
    EditLogEntry,
    Site,
    TicketBlock,
    TicketUsage,
)
from reports.domain.value_objects import (
    AttractionId,
    Count,
    DailyStatus,
    Money,
    PriceTable,
    ReportId,
    ReportStatus,
    Role,
    SiteId,
    TicketCategory,
    UserId,
)

__all__ = [
    "ActivityRecord",
    "AttractionDefinition",
    "AttractionSubReport",
    "Caller",
    "DailyReport",
    "EditLogEntry",
    "Site",
    "TicketBlock",
    "TicketUsage",
    "AttractionId",
    "Count",
    "DailyStatus",
    "Money",
    "PriceTable",
    "ReportId",
    "ReportStatus",
    "Role",
    "SiteId",
    "TicketCategory",
    "UserId",
]
