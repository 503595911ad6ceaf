"""In-process implementations of the store interfaces.

Used by unit tests and local tooling. Nothing is persisted across processes.
"""

import copy
from dataclasses import replace
from datetime import date

from reports.domain import (
    ActivityRecord,
    AttractionDefinition,
    AttractionId,
    AttractionSubReport,
    Caller,
    DailyReport,
    EditLogEntry,
    ReportId,
    ReportStatus,
    Role,
    Site,
    SiteId,
    UserId,
)
from reports.domain.errors import ForbiddenError, ReportExistsError, UserNotFoundError
from reports.stores.interfaces import CatalogStore, IdentityResolver, ReportStore


class InMemoryReportStore(ReportStore):
    """Dict-backed report store."""

    def __init__(self) -> None:
        self.reports: dict[ReportId, DailyReport] = {}
        self.sub_reports: dict[ReportId, tuple[AttractionSubReport, ...]] = {}
        self.edit_log: list[EditLogEntry] = []
        self.activity: list[ActivityRecord] = []

    def _with_attractions(self, report: DailyReport) -> DailyReport:
        return replace(report, attractions=self.sub_reports.get(report.id, ()))

    def get_report(self, report_id: ReportId) -> DailyReport | None:
        report = self.reports.get(report_id)
        return self._with_attractions(report) if report else None

    def get_report_for_date(self, site_id: SiteId, report_date: date) -> DailyReport | None:
        for report in self.reports.values():
            if report.site_id == site_id and report.report_date == report_date:
                return self._with_attractions(report)
        return None

    def list_reports(
        self,
        *,
        site_id: SiteId | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        status: ReportStatus | None = None,
        limit: int | None = 100,
    ) -> list[DailyReport]:
        matches = [
            report
            for report in self.reports.values()
            if (site_id is None or report.site_id == site_id)
            and (date_from is None or report.report_date >= date_from)
            and (date_to is None or report.report_date <= date_to)
            and (status is None or report.status is status)
        ]
        matches.sort(key=lambda report: report.report_date, reverse=True)
        return [self._with_attractions(report) for report in matches[:limit]]

    def insert_report(self, report: DailyReport) -> DailyReport:
        if self.get_report_for_date(report.site_id, report.report_date) is not None:
            raise ReportExistsError(str(report.site_id), report.report_date.isoformat())
        self.reports[report.id] = replace(report, attractions=())
        return self._with_attractions(report)

    def replace_report(self, report: DailyReport) -> DailyReport:
        self.reports[report.id] = replace(report, attractions=())
        return self._with_attractions(report)

    def delete_report(self, report_id: ReportId) -> None:
        self.reports.pop(report_id, None)
        self.sub_reports.pop(report_id, None)

    def replace_attraction_sub_reports(
        self, report_id: ReportId, sub_reports: tuple[AttractionSubReport, ...]
    ) -> None:
        self.sub_reports[report_id] = tuple(sub_reports)

    def attraction_has_reports(self, attraction_id: AttractionId) -> bool:
        return any(
            sub_report.attraction_id == attraction_id
            for sub_reports in self.sub_reports.values()
            for sub_report in sub_reports
        )

    def list_edit_log(self, report_id: ReportId) -> list[EditLogEntry]:
        entries = [entry for entry in self.edit_log if entry.report_id == report_id]
        return sorted(entries, key=lambda entry: entry.edited_at, reverse=True)

    def append_edit_log(self, entry: EditLogEntry) -> None:
        self.edit_log.append(replace(entry, changes=copy.deepcopy(dict(entry.changes))))

    def append_activity(self, record: ActivityRecord) -> None:
        self.activity.append(record)


class InMemoryCatalogStore(CatalogStore):
    """Dict-backed site and attraction store."""

    def __init__(self) -> None:
        self.sites: dict[SiteId, Site] = {}
        self.attractions: dict[AttractionId, AttractionDefinition] = {}

    def get_site(self, site_id: SiteId) -> Site | None:
        return self.sites.get(site_id)

    def list_sites(self) -> list[Site]:
        return sorted(self.sites.values(), key=lambda site: site.name)

    def site_code_exists(self, code: str) -> bool:
        return any(site.code == code for site in self.sites.values())

    def insert_site(self, site: Site) -> Site:
        self.sites[site.id] = site
        return site

    def update_site(self, site: Site) -> Site:
        self.sites[site.id] = site
        return site

    def get_attraction(self, attraction_id: AttractionId) -> AttractionDefinition | None:
        return self.attractions.get(attraction_id)

    def list_attractions(
        self, site_id: SiteId, *, active_only: bool = True
    ) -> list[AttractionDefinition]:
        rows = [
            attraction
            for attraction in self.attractions.values()
            if attraction.site_id == site_id and (attraction.is_active or not active_only)
        ]
        return sorted(rows, key=lambda attraction: (attraction.sort_order, attraction.name))

    def insert_attraction(self, attraction: AttractionDefinition) -> AttractionDefinition:
        self.attractions[attraction.id] = attraction
        return attraction

    def update_attraction(self, attraction: AttractionDefinition) -> AttractionDefinition:
        self.attractions[attraction.id] = attraction
        return attraction

    def delete_attraction(self, attraction_id: AttractionId) -> None:
        self.attractions.pop(attraction_id, None)


class StaticIdentityResolver(IdentityResolver):
    """Resolves callers from a fixed table of (role, site, active) entries."""

    def __init__(self) -> None:
        self._users: dict[UserId, tuple[Role, SiteId | None, bool]] = {}

    def add(
        self,
        user_id: UserId,
        role: Role,
        site_id: SiteId | None = None,
        *,
        is_active: bool = True,
    ) -> Caller:
        self._users[user_id] = (role, site_id, is_active)
        return Caller(id=user_id, role=role, site_id=site_id)

    def resolve(self, user_id: UserId) -> Caller:
        entry = self._users.get(user_id)
        if entry is None:
            raise UserNotFoundError(str(user_id))
        role, site_id, is_active = entry
        if not is_active:
            raise ForbiddenError("Account is inactive")
        return Caller(id=user_id, role=role, site_id=site_id)
