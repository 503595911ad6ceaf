"""Tests for the Django ORM stores.

Run with: pytest tests/test_stores.py -v
"""

import uuid
from dataclasses import replace
from datetime import date, datetime, timezone

import pytest
from django.contrib import admin

from reports.domain import (
    ActivityRecord,
    AttractionId,
    AttractionSubReport,
    EditLogEntry,
    ReportStatus,
    Role,
    SiteId,
    TicketBlock,
    TicketCategory,
    UserId,
)
from reports.domain.errors import ForbiddenError, ReportExistsError, UserNotFoundError
from reports.models import (
    ActivityLog,
    AppendOnlyError,
    Attraction,
    DailyReport,
    ReportEditLog,
    Site,
    Staff,
)
from reports.stores.django_store import (
    DjangoCatalogStore,
    DjangoIdentityResolver,
    DjangoReportStore,
)

from conftest import build_report

EDITED_AT = datetime(2024, 6, 2, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def site(db) -> Site:
    return Site.objects.create(code="CRN", name="Curug Nangka")


@pytest.fixture
def store() -> DjangoReportStore:
    return DjangoReportStore()


@pytest.mark.django_db
class TestDjangoReportStore:
    """Tests for DjangoReportStore."""

    def test_insert_and_read_back(self, store, site):
        """A stored report reads back with its blocks regrouped."""
        report = build_report(
            site_id=SiteId(site.id),
            ticket_blocks={TicketCategory.DEWASA: (TicketBlock("A", "1", "10"),)},
        )
        store.insert_report(report)
        loaded = store.get_report(report.id)
        assert loaded.dewasa_count == 10
        assert loaded.wna_countries == {"JP": 1}
        assert loaded.blocks_for(TicketCategory.DEWASA) == (TicketBlock("A", "1", "10"),)
        assert loaded.status is ReportStatus.DRAFT

    def test_second_report_for_same_day_is_rejected(self, store, site):
        """One report per site and date."""
        store.insert_report(build_report(site_id=SiteId(site.id)))
        with pytest.raises(ReportExistsError):
            store.insert_report(build_report(site_id=SiteId(site.id)))

    def test_replace_keeps_identity(self, store, site):
        """Replacing updates fields in place."""
        report = store.insert_report(build_report(site_id=SiteId(site.id)))
        store.replace_report(replace(report, notes="ramai", status=ReportStatus.SUBMITTED))
        loaded = store.get_report(report.id)
        assert loaded.notes == "ramai"
        assert loaded.is_submitted

    def test_sub_reports_are_replaced_together(self, store, site):
        """Replacing sub-reports drops the previous set."""
        report = store.insert_report(build_report(site_id=SiteId(site.id)))
        first = Attraction.objects.create(site=site, name="Flying Fox", price=20000)
        second = Attraction.objects.create(site=site, name="Perahu", price=10000)

        store.replace_attraction_sub_reports(
            report.id, (AttractionSubReport(AttractionId(first.id), 2, 40000),)
        )
        store.replace_attraction_sub_reports(
            report.id, (AttractionSubReport(AttractionId(second.id), 1, 10000),)
        )
        (sub,) = store.get_report(report.id).attractions
        assert sub.attraction_id == AttractionId(second.id)
        assert store.attraction_has_reports(AttractionId(second.id))
        assert not store.attraction_has_reports(AttractionId(first.id))

    def test_list_reports_newest_first_with_filters(self, store, site):
        """Listing sorts by date descending and honors filters."""
        older = store.insert_report(
            build_report(site_id=SiteId(site.id), report_date=date(2024, 5, 30))
        )
        newer = store.insert_report(
            build_report(
                site_id=SiteId(site.id),
                report_date=date(2024, 6, 1),
                status=ReportStatus.SUBMITTED,
            )
        )
        assert [r.id for r in store.list_reports()] == [newer.id, older.id]
        assert [r.id for r in store.list_reports(status=ReportStatus.DRAFT)] == [older.id]
        assert [r.id for r in store.list_reports(date_to=date(2024, 5, 31))] == [older.id]
        assert len(store.list_reports(limit=1)) == 1

    def test_edit_log_survives_report_deletion(self, store, site):
        """Audit entries are not tied to the report row."""
        report = store.insert_report(build_report(site_id=SiteId(site.id)))
        store.append_edit_log(
            EditLogEntry(
                report_id=report.id,
                edited_by=UserId(uuid.uuid4()),
                changes={"wna_count": {"old": 1, "new": 8}},
                reason="recount",
                edited_at=EDITED_AT,
            )
        )
        store.delete_report(report.id)
        assert store.get_report(report.id) is None
        (entry,) = store.list_edit_log(report.id)
        assert entry.changes == {"wna_count": {"old": 1, "new": 8}}

    def test_activity_is_recorded(self, store, site):
        """Activity records land in the activity log."""
        store.append_activity(
            ActivityRecord(action="submit", user_id=None, site_id=SiteId(site.id), details={"x": 1})
        )
        assert ActivityLog.objects.get().details == {"x": 1}


@pytest.mark.django_db
class TestAppendOnlyModels:
    """Tests for the append-only audit models."""

    def test_edit_log_cannot_be_changed(self):
        """Saving an existing entry raises."""
        entry = ReportEditLog.objects.create(
            report_id=uuid.uuid4(), edited_by=uuid.uuid4(), edited_at=EDITED_AT, changes={}
        )
        entry.reason = "rewritten"
        with pytest.raises(AppendOnlyError):
            entry.save()

    def test_activity_cannot_be_deleted(self):
        """Deleting an entry raises."""
        record = ActivityLog.objects.create(action="submit")
        with pytest.raises(AppendOnlyError):
            record.delete()


@pytest.mark.django_db
class TestReportAdmin:
    """Tests for the Django admin over reports and audit tables."""

    @pytest.mark.parametrize("model", [DailyReport, ReportEditLog, ActivityLog])
    def test_rows_are_read_only(self, rf, admin_user, model):
        """Even a superuser cannot add, change or delete these rows in the admin."""
        request = rf.get("/admin/")
        request.user = admin_user
        model_admin = admin.site._registry[model]
        assert not model_admin.has_add_permission(request)
        assert not model_admin.has_change_permission(request)
        assert not model_admin.has_delete_permission(request)

    def test_sub_report_inline_is_read_only(self, rf, admin_user):
        """Attraction sub-reports cannot be edited inline on a report."""
        request = rf.get("/admin/")
        request.user = admin_user
        (inline,) = admin.site._registry[DailyReport].get_inline_instances(request)
        assert not inline.has_add_permission(request, None)
        assert not inline.has_change_permission(request)
        assert not inline.has_delete_permission(request)

    def test_sites_stay_editable(self, rf, admin_user):
        """Catalog rows are still managed through the admin."""
        request = rf.get("/admin/")
        request.user = admin_user
        assert admin.site._registry[Site].has_change_permission(request)


@pytest.mark.django_db
class TestCatalogAndIdentity:
    """Tests for DjangoCatalogStore and DjangoIdentityResolver."""

    def test_list_attractions_active_only(self, site):
        """Inactive attractions are hidden unless asked for."""
        Attraction.objects.create(site=site, name="A", price=1)
        Attraction.objects.create(site=site, name="B", price=1, is_active=False)
        catalog = DjangoCatalogStore()
        assert [a.name for a in catalog.list_attractions(SiteId(site.id))] == ["A"]
        assert len(catalog.list_attractions(SiteId(site.id), active_only=False)) == 2

    def test_site_code_exists(self, site):
        """Codes are looked up exactly."""
        assert DjangoCatalogStore().site_code_exists("CRN")
        assert not DjangoCatalogStore().site_code_exists("XYZ")

    def test_resolve_staff(self, site):
        """Staff rows resolve to callers with role and site."""
        staff = Staff.objects.create(name="Euis", role="koordinator", site=site)
        caller = DjangoIdentityResolver().resolve(UserId(staff.id))
        assert caller.role is Role.KOORDINATOR
        assert caller.site_id == SiteId(site.id)

    def test_resolve_unknown(self, db):
        """Unknown ids raise UserNotFoundError."""
        with pytest.raises(UserNotFoundError):
            DjangoIdentityResolver().resolve(UserId(uuid.uuid4()))

    def test_resolve_inactive(self, site):
        """Inactive staff are forbidden."""
        staff = Staff.objects.create(name="Old", role="petugas", site=site, is_active=False)
        with pytest.raises(ForbiddenError):
            DjangoIdentityResolver().resolve(UserId(staff.id))
