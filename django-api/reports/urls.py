from django.urls import path

from reports.handlers import (
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

urlpatterns = [
    path("reports", ReportCollectionView.as_view(), name="report-list"),
    path("reports/manual", ManualReportView.as_view(), name="report-manual"),
    path("reports/<str:report_id>", ReportDetailView.as_view(), name="report-detail"),
    path(
        "reports/<str:report_id>/submit",
        ReportSubmitView.as_view(),
        name="report-submit",
    ),
    path("reports/<str:report_id>/edit", ReportEditView.as_view(), name="report-edit"),
    path(
        "reports/<str:report_id>/edits",
        ReportEditHistoryView.as_view(),
        name="report-edit-history",
    ),
    path("tickets/usage", TicketUsageView.as_view(), name="ticket-usage"),
    path("sites", SiteCollectionView.as_view(), name="site-list"),
    path("sites/<str:site_id>", SiteDetailView.as_view(), name="site-detail"),
    path(
        "sites/<str:site_id>/status",
        SiteDailyStatusView.as_view(),
        name="site-daily-status",
    ),
    path(
        "sites/<str:site_id>/attractions",
        SiteAttractionsView.as_view(),
        name="site-attractions",
    ),
    path(
        "attractions/<str:attraction_id>",
        AttractionDetailView.as_view(),
        name="attraction-detail",
    ),
]
