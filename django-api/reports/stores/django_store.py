"""Django ORM implementation of the store interfaces."""

from datetime import date

from django.db import IntegrityError, transaction

from reports import models
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
from reports.domain import ticket_blocks
from reports.domain.errors import (
    ForbiddenError,
    ReportExistsError,
    ReportNotFoundError,
    UserNotFoundError,
)
from reports.stores.interfaces import CatalogStore, IdentityResolver, ReportStore


def _user_id(value) -> UserId | None:
    return UserId(value) if value else None


def _sub_report_to_domain(row: models.AttractionReport) -> AttractionSubReport:
    return AttractionSubReport(
        attraction_id=AttractionId(row.attraction_id),
        visitor_count=row.visitor_count,
        revenue=row.revenue,
        ticket_blocks=tuple(ticket_blocks.block_from_dict(b) for b in row.ticket_blocks or []),
    )


def _report_to_domain(row: models.DailyReport) -> DailyReport:
    return DailyReport(
        id=ReportId(row.id),
        site_id=SiteId(row.site_id),
        report_date=row.report_date,
        anak_count=row.anak_count,
        dewasa_count=row.dewasa_count,
        wna_count=row.wna_count,
        dewasa_male=row.dewasa_male,
        dewasa_female=row.dewasa_female,
        anak_male=row.anak_male,
        anak_female=row.anak_female,
        wna_countries=dict(row.wna_countries or {}),
        anak_revenue=row.anak_revenue,
        dewasa_revenue=row.dewasa_revenue,
        wna_revenue=row.wna_revenue,
        attraction_revenue=row.attraction_revenue,
        cash_amount=row.cash_amount,
        qris_amount=row.qris_amount,
        notes=row.notes,
        ticket_blocks=ticket_blocks.group_flat_blocks(row.ticket_blocks or []),
        status=ReportStatus(row.status),
        created_by=_user_id(row.created_by_id),
        submitted_by=_user_id(row.submitted_by_id),
        submitted_at=row.submitted_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
        attractions=tuple(_sub_report_to_domain(sub) for sub in row.attraction_reports.all()),
    )


def _report_fields(report: DailyReport) -> dict:
    return {
        "site_id": report.site_id.value,
        "report_date": report.report_date,
        "anak_count": report.anak_count,
        "dewasa_count": report.dewasa_count,
        "wna_count": report.wna_count,
        "dewasa_male": report.dewasa_male,
        "dewasa_female": report.dewasa_female,
        "anak_male": report.anak_male,
        "anak_female": report.anak_female,
        "wna_countries": dict(report.wna_countries),
        "anak_revenue": report.anak_revenue,
        "dewasa_revenue": report.dewasa_revenue,
        "wna_revenue": report.wna_revenue,
        "attraction_revenue": report.attraction_revenue,
        "cash_amount": report.cash_amount,
        "qris_amount": report.qris_amount,
        "notes": report.notes,
        "ticket_blocks": ticket_blocks.flatten_category_blocks(report.ticket_blocks),
        "status": report.status.value,
        "created_by_id": report.created_by.value if report.created_by else None,
        "submitted_by_id": report.submitted_by.value if report.submitted_by else None,
        "submitted_at": report.submitted_at,
        "created_at": report.created_at,
        "updated_at": report.updated_at,
    }


def _site_to_domain(row: models.Site) -> Site:
    return Site(
        id=SiteId(row.id),
        code=row.code,
        name=row.name,
        location=row.location,
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _attraction_to_domain(row: models.Attraction) -> AttractionDefinition:
    return AttractionDefinition(
        id=AttractionId(row.id),
        site_id=SiteId(row.site_id),
        name=row.name,
        unit_price=row.price,
        requires_ticket_block=row.requires_ticket_block,
        is_active=row.is_active,
        sort_order=row.sort_order,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class DjangoReportStore(ReportStore):
    """Report store backed by the Django ORM."""

    def _reports(self):
        return models.DailyReport.objects.prefetch_related("attraction_reports")

    def atomic(self):
        return transaction.atomic()

    def get_report(self, report_id: ReportId) -> DailyReport | None:
        row = self._reports().filter(pk=report_id.value).first()
        return _report_to_domain(row) if row else None

    def get_report_for_date(self, site_id: SiteId, report_date: date) -> DailyReport | None:
        row = self._reports().filter(site_id=site_id.value, report_date=report_date).first()
        return _report_to_domain(row) if row else None

    def list_reports(
        self,
        *,
        site_id: SiteId | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        status: ReportStatus | None = None,
        limit: int | None = 100,
    ) -> list[DailyReport]:
        queryset = self._reports().order_by("-report_date", "site__name")
        if site_id is not None:
            queryset = queryset.filter(site_id=site_id.value)
        if date_from is not None:
            queryset = queryset.filter(report_date__gte=date_from)
        if date_to is not None:
            queryset = queryset.filter(report_date__lte=date_to)
        if status is not None:
            queryset = queryset.filter(status=status.value)
        return [_report_to_domain(row) for row in queryset[:limit]]

    def insert_report(self, report: DailyReport) -> DailyReport:
        try:
            with transaction.atomic():
                models.DailyReport.objects.create(id=report.id.value, **_report_fields(report))
        except IntegrityError as exc:
            raise ReportExistsError(
                str(report.site_id), report.report_date.isoformat()
            ) from exc
        return self.get_report(report.id)

    def replace_report(self, report: DailyReport) -> DailyReport:
        row = models.DailyReport.objects.filter(pk=report.id.value).first()
        if row is None:
            raise ReportNotFoundError(str(report.id))
        for name, value in _report_fields(report).items():
            setattr(row, name, value)
        row.save()
        return self.get_report(report.id)

    def delete_report(self, report_id: ReportId) -> None:
        models.DailyReport.objects.filter(pk=report_id.value).delete()

    def replace_attraction_sub_reports(
        self, report_id: ReportId, sub_reports: tuple[AttractionSubReport, ...]
    ) -> None:
        with transaction.atomic():
            models.AttractionReport.objects.filter(report_id=report_id.value).delete()
            models.AttractionReport.objects.bulk_create(
                [
                    models.AttractionReport(
                        report_id=report_id.value,
                        attraction_id=sub.attraction_id.value,
                        visitor_count=sub.visitor_count,
                        ticket_blocks=[ticket_blocks.block_to_dict(b) for b in sub.ticket_blocks],
                        revenue=sub.revenue,
                    )
                    for sub in sub_reports
                ]
            )

    def attraction_has_reports(self, attraction_id: AttractionId) -> bool:
        return models.AttractionReport.objects.filter(attraction_id=attraction_id.value).exists()

    def list_edit_log(self, report_id: ReportId) -> list[EditLogEntry]:
        rows = models.ReportEditLog.objects.filter(report_id=report_id.value).order_by("-edited_at")
        return [
            EditLogEntry(
                report_id=ReportId(row.report_id),
                edited_by=UserId(row.edited_by),
                changes=row.changes,
                reason=row.reason,
                edited_at=row.edited_at,
            )
            for row in rows
        ]

    def append_edit_log(self, entry: EditLogEntry) -> None:
        models.ReportEditLog.objects.create(
            report_id=entry.report_id.value,
            edited_by=entry.edited_by.value,
            edited_at=entry.edited_at,
            changes=dict(entry.changes),
            reason=entry.reason,
        )

    def append_activity(self, record: ActivityRecord) -> None:
        models.ActivityLog.objects.create(
            user_id=record.user_id.value if record.user_id else None,
            site_id=record.site_id.value if record.site_id else None,
            action=record.action,
            details=dict(record.details),
        )


class DjangoCatalogStore(CatalogStore):
    """Site and attraction store backed by the Django ORM."""

    def get_site(self, site_id: SiteId) -> Site | None:
        row = models.Site.objects.filter(pk=site_id.value).first()
        return _site_to_domain(row) if row else None

    def list_sites(self) -> list[Site]:
        return [_site_to_domain(row) for row in models.Site.objects.order_by("name")]

    def site_code_exists(self, code: str) -> bool:
        return models.Site.objects.filter(code=code).exists()

    def insert_site(self, site: Site) -> Site:
        row = models.Site.objects.create(
            id=site.id.value,
            code=site.code,
            name=site.name,
            location=site.location,
            is_active=site.is_active,
        )
        return _site_to_domain(row)

    def update_site(self, site: Site) -> Site:
        row = models.Site.objects.get(pk=site.id.value)
        row.name = site.name
        row.location = site.location
        row.is_active = site.is_active
        row.save(update_fields=["name", "location", "is_active", "updated_at"])
        return _site_to_domain(row)

    def get_attraction(self, attraction_id: AttractionId) -> AttractionDefinition | None:
        row = models.Attraction.objects.filter(pk=attraction_id.value).first()
        return _attraction_to_domain(row) if row else None

    def list_attractions(
        self, site_id: SiteId, *, active_only: bool = True
    ) -> list[AttractionDefinition]:
        queryset = models.Attraction.objects.filter(site_id=site_id.value)
        if active_only:
            queryset = queryset.filter(is_active=True)
        return [_attraction_to_domain(row) for row in queryset.order_by("sort_order", "name")]

    def insert_attraction(self, attraction: AttractionDefinition) -> AttractionDefinition:
        row = models.Attraction.objects.create(
            id=attraction.id.value,
            site_id=attraction.site_id.value,
            name=attraction.name,
            price=attraction.unit_price,
            requires_ticket_block=attraction.requires_ticket_block,
            is_active=attraction.is_active,
            sort_order=attraction.sort_order,
        )
        return _attraction_to_domain(row)

    def update_attraction(self, attraction: AttractionDefinition) -> AttractionDefinition:
        row = models.Attraction.objects.get(pk=attraction.id.value)
        row.name = attraction.name
        row.price = attraction.unit_price
        row.requires_ticket_block = attraction.requires_ticket_block
        row.is_active = attraction.is_active
        row.sort_order = attraction.sort_order
        row.save()
        return _attraction_to_domain(row)

    def delete_attraction(self, attraction_id: AttractionId) -> None:
        models.Attraction.objects.filter(pk=attraction_id.value).delete()


class DjangoIdentityResolver(IdentityResolver):
    """Resolves callers from the Staff table."""

    def resolve(self, user_id: UserId) -> Caller:
        row = models.Staff.objects.filter(pk=user_id.value).first()
        if row is None:
            raise UserNotFoundError(str(user_id))
        if not row.is_active:
            raise ForbiddenError("Account is inactive")
        return Caller(
            id=user_id,
            role=Role(row.role),
            site_id=SiteId(row.site_id) if row.site_id else None,
        )
