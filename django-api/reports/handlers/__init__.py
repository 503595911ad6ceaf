from reports.handlers.views import (
    AttractionDetailView,
    ManualReportView,
    ReportCollectionView,
    ReportDetailView,
    ReportEditHistoryView,
    ReportEditView,
    ReportSubmitView,
    SiteAttractionsView,
    SiteCollectionView,
    SiteDailyStatusView,
    SiteDetailView,
    TicketUsageView,
)

__all__ = [
    "AttractionDetailView",
    "ManualReportView",
    "ReportCollectionView",
    "ReportDetailView",
    "ReportEditHistoryView",
    "ReportEditView",
    "ReportSubmitView",
    "SiteAttractionsView",
    "SiteCollectionView",
    "SiteDailyStatusView",
    "SiteDetailView",
    "TicketUsageView",
]
