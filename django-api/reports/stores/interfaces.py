"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager, nullcontext
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
    Site,
    SiteId,
    UserId,
)


class ReportStore(ABC):
    """Interface for daily report persistence operations."""

    def atomic(self) -> AbstractContextManager:
        """Group several writes so they apply all together or not at all."""
        return nullcontext()

    @abstractmethod
    def get_report(self, report_id: ReportId) -> DailyReport | None:
        """Return a report with its attraction sub-reports, or None if not found."""
        ...

    @abstractmethod
    def get_report_for_date(self, site_id: SiteId, report_date: date) -> DailyReport | None:
        """Return the site's report for a date, or None if there is none yet."""
        ...

    @abstractmethod
    def list_reports(
        self,
        *,
        site_id: SiteId | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        status: ReportStatus | None = None,
        limit: int | None = 100,
    ) -> list[DailyReport]:
        """Return matching reports ordered by report_date descending.

        A limit of None returns every match.
        """
        ...

    @abstractmethod
    def insert_report(self, report: DailyReport) -> DailyReport:
        """Insert a new report.

        Raises:
            ReportExistsError: If the site already has a report for that date.
        """
        ...

    @abstractmethod
    def replace_report(self, report: DailyReport) -> DailyReport:
        """Overwrite every stored field of an existing report."""
        ...

    @abstractmethod
    def delete_report(self, report_id: ReportId) -> None:
        """Delete a report and, by cascade, its attraction sub-reports."""
        ...

    @abstractmethod
    def replace_attraction_sub_reports(
        self, report_id: ReportId, sub_reports: tuple[AttractionSubReport, ...]
    ) -> None:
        """Swap the report's whole sub-report set for a new one in a single step."""
        ...

    @abstractmethod
    def attraction_has_reports(self, attraction_id: AttractionId) -> bool:
        """Check if any sub-report references the attraction."""
        ...

    @abstractmethod
    def list_edit_log(self, report_id: ReportId) -> list[EditLogEntry]:
        """Return edit log entries for a report, newest first."""
        ...

    @abstractmethod
    def append_edit_log(self, entry: EditLogEntry) -> None:
        """Append an edit log entry. Entries are never updated."""
        ...

    @abstractmethod
    def append_activity(self, record: ActivityRecord) -> None:
        """Append a lifecycle activity record."""
        ...


class CatalogStore(ABC):
    """Interface for site and attraction persistence operations."""

    @abstractmethod
    def get_site(self, site_id: SiteId) -> Site | None:
        ...

    @abstractmethod
    def list_sites(self) -> list[Site]:
        """Return all sites ordered by name."""
        ...

    @abstractmethod
    def site_code_exists(self, code: str) -> bool:
        ...

    @abstractmethod
    def insert_site(self, site: Site) -> Site:
        ...

    @abstractmethod
    def update_site(self, site: Site) -> Site:
        ...

    @abstractmethod
    def get_attraction(self, attraction_id: AttractionId) -> AttractionDefinition | None:
        ...

    @abstractmethod
    def list_attractions(
        self, site_id: SiteId, *, active_only: bool = True
    ) -> list[AttractionDefinition]:
        """Return a site's attractions ordered by sort_order."""
        ...

    @abstractmethod
    def insert_attraction(self, attraction: AttractionDefinition) -> AttractionDefinition:
        ...

    @abstractmethod
    def update_attraction(self, attraction: AttractionDefinition) -> AttractionDefinition:
        ...

    @abstractmethod
    def delete_attraction(self, attraction_id: AttractionId) -> None:
        ...


class IdentityResolver(ABC):
    """Interface for resolving a caller id to a role and site."""

    @abstractmethod
    def resolve(self, user_id: UserId) -> Caller:
        """Return the caller's identity.

        Raises:
            UserNotFoundError: If no staff account has that id.
            ForbiddenError: If the account is deactivated.
        """
        ...
