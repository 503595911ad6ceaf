"""Read-side report operations: lookups, listings, history and ticket usage."""

from dataclasses import dataclass
from datetime import date, datetime

from reports.domain import (
    Caller,
    DailyReport,
    DailyStatus,
    EditLogEntry,
    ReportId,
    ReportStatus,
    SiteId,
    TicketUsage,
)
from reports.domain import permissions, ticket_blocks
from reports.domain.errors import ForbiddenError, ReportNotFoundError, SiteNotFoundError
from reports.services.common import parse_id, resolve_caller
from reports.services.results import OperationResult, returns_result
from reports.stores.interfaces import CatalogStore, IdentityResolver, ReportStore

MAX_LIST_LIMIT = 100


@dataclass(frozen=True)
class SiteDayStatus:
    """Whether a site has reported for a day, and the headline numbers if so."""

    site_id: SiteId
    code: str
    name: str
    report_date: date
    daily_status: DailyStatus
    report_id: ReportId | None = None
    total_visitors: int | None = None
    total_revenue: int | None = None
    submitted_at: datetime | None = None


class ReportQueryService:
    """Service for reading reports within the caller's reach."""

    def __init__(
        self, store: ReportStore, catalog: CatalogStore, identity: IdentityResolver
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._identity = identity

    @returns_result
    def get_report(self, caller_id, report_id) -> OperationResult[DailyReport]:
        caller = resolve_caller(self._identity, caller_id)
        return OperationResult.success(self._visible_report(caller, report_id))

    @returns_result
    def get_report_for_date(
        self, caller_id, site_id, report_date: date
    ) -> OperationResult[DailyReport | None]:
        caller = resolve_caller(self._identity, caller_id)
        site_id = self._visible_site(caller, site_id)
        return OperationResult.success(self._store.get_report_for_date(site_id, report_date))

    @returns_result
    def list_reports(
        self,
        caller_id,
        *,
        site_id=None,
        date_from: date | None = None,
        date_to: date | None = None,
        status: ReportStatus | None = None,
        limit: int = MAX_LIST_LIMIT,
    ) -> OperationResult[list[DailyReport]]:
        """Newest first. Non-admins only ever see their own site."""
        caller = resolve_caller(self._identity, caller_id)
        if caller.is_admin:
            site_filter = parse_id(SiteId, site_id, "site id") if site_id else None
        elif caller.site_id is None:
            raise ForbiddenError("Account is not assigned to a site")
        else:
            site_filter = self._visible_site(caller, site_id or caller.site_id)
        reports = self._store.list_reports(
            site_id=site_filter,
            date_from=date_from,
            date_to=date_to,
            status=status,
            limit=max(1, min(limit, MAX_LIST_LIMIT)),
        )
        return OperationResult.success(reports)

    @returns_result
    def edit_history(self, caller_id, report_id) -> OperationResult[list[EditLogEntry]]:
        caller = resolve_caller(self._identity, caller_id)
        report = self._visible_report(caller, report_id)
        return OperationResult.success(self._store.list_edit_log(report.id))

    @returns_result
    def daily_status(self, caller_id, site_id, report_date: date) -> OperationResult[SiteDayStatus]:
        caller = resolve_caller(self._identity, caller_id)
        site_id = self._visible_site(caller, site_id)
        site = self._catalog.get_site(site_id)
        if site is None:
            raise SiteNotFoundError(str(site_id))
        report = self._store.get_report_for_date(site_id, report_date)
        if report is None:
            status = SiteDayStatus(site.id, site.code, site.name, report_date, DailyStatus.PENDING)
        else:
            status = SiteDayStatus(
                site_id=site.id,
                code=site.code,
                name=site.name,
                report_date=report_date,
                daily_status=DailyStatus(report.status.value),
                report_id=report.id,
                total_visitors=report.total_visitors,
                total_revenue=report.total_revenue,
                submitted_at=report.submitted_at,
            )
        return OperationResult.success(status)

    @returns_result
    def ticket_usage(
        self,
        caller_id,
        *,
        site_id=None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> OperationResult[list[TicketUsage]]:
        caller = resolve_caller(self._identity, caller_id)
        permissions.require(caller.is_admin, "Only an admin can audit ticket usage")
        reports = self._store.list_reports(
            site_id=parse_id(SiteId, site_id, "site id") if site_id else None,
            date_from=date_from,
            date_to=date_to,
            limit=None,
        )
        return OperationResult.success(ticket_blocks.ticket_usage(reports))

    def _visible_site(self, caller: Caller, site_id) -> SiteId:
        site_id = parse_id(SiteId, site_id, "site id")
        permissions.require(
            permissions.can_access_site(caller, site_id), "Site belongs to another account"
        )
        return site_id

    def _visible_report(self, caller: Caller, report_id) -> DailyReport:
        report_id = parse_id(ReportId, report_id, "report id")
        report = self._store.get_report(report_id)
        if report is None:
            raise ReportNotFoundError(str(report_id))
        permissions.require(
            permissions.can_access_site(caller, report.site_id), "Report belongs to another site"
        )
        return report
