"""Read-through caching for the ORM report store.

Entries are dropped by the signal handlers in reports/signals.py whenever a
report, its sub-reports or its edit log change.
"""

from contextlib import contextmanager

from django.core.cache import cache

from reports import cache as report_cache
from reports.domain import AttractionSubReport, DailyReport, EditLogEntry, ReportId
from reports.stores.django_store import DjangoReportStore


class CachedReportStore(DjangoReportStore):
    """DjangoReportStore that caches report lookups and edit histories by id."""

    def __init__(self) -> None:
        self._depth = 0
        self._written: set[ReportId] = set()

    @contextmanager
    def atomic(self):
        self._depth += 1
        try:
            with super().atomic():
                yield
        except Exception:
            # Reports read back inside the block were cached before the rollback.
            for report_id in self._written:
                report_cache.invalidate_report(report_id)
                report_cache.invalidate_edit_log(report_id)
            raise
        finally:
            self._depth -= 1
            if not self._depth:
                self._written.clear()

    def get_report(self, report_id: ReportId) -> DailyReport | None:
        key = report_cache.report_key(report_id)
        report = cache.get(key)
        if report is None:
            report = super().get_report(report_id)
            if report is not None:
                cache.set(key, report, report_cache.timeout())
        return report

    def list_edit_log(self, report_id: ReportId) -> list[EditLogEntry]:
        key = report_cache.edit_log_key(report_id)
        entries = cache.get(key)
        if entries is None:
            entries = super().list_edit_log(report_id)
            cache.set(key, entries, report_cache.timeout())
        return entries

    def insert_report(self, report: DailyReport) -> DailyReport:
        self._track(report.id)
        return super().insert_report(report)

    def replace_report(self, report: DailyReport) -> DailyReport:
        self._track(report.id)
        return super().replace_report(report)

    def delete_report(self, report_id: ReportId) -> None:
        self._track(report_id)
        super().delete_report(report_id)

    def append_edit_log(self, entry: EditLogEntry) -> None:
        self._track(entry.report_id)
        super().append_edit_log(entry)

    def replace_attraction_sub_reports(
        self, report_id: ReportId, sub_reports: tuple[AttractionSubReport, ...]
    ) -> None:
        self._track(report_id)
        super().replace_attraction_sub_reports(report_id, sub_reports)
        # bulk_create sends no post_save, so the signal handlers never see new rows.
        report_cache.invalidate_report(report_id)

    def _track(self, report_id: ReportId) -> None:
        if self._depth:
            self._written.add(report_id)
