"""Report lifecycle service - all report business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

A report moves absent -> draft -> submitted. Ordinary saves only ever touch
drafts; once submitted, a report changes solely through the admin-only
privileged edit, which writes an EditLogEntry for every edit that changes
something.
"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Callable, Mapping, Sequence

from reports.domain import (
    ActivityRecord,
    AttractionDefinition,
    AttractionId,
    Caller,
    Count,
    DailyReport,
    EditLogEntry,
    Money,
    PriceTable,
    ReportId,
    ReportStatus,
    SiteId,
    TicketBlock,
    TicketCategory,
)
from reports.domain import audit, permissions, ticket_blocks
from reports.domain.attractions import AttractionInput, build_sub_reports
from reports.domain.errors import (
    AlreadySubmittedError,
    AttractionNotFoundError,
    ForbiddenError,
    InvalidInputError,
    NoReasonGivenError,
    ReportExistsError,
    ReportNotFoundError,
    SiteNotFoundError,
    ValidationFailedError,
)
from reports.domain.reconciliation import Reconciliation, ReconciliationEngine
from reports.services.common import parse_id, resolve_caller, utcnow
from reports.services.results import OperationResult, returns_result
from reports.stores.interfaces import CatalogStore, IdentityResolver, ReportStore

logger = logging.getLogger(__name__)

MANUAL_NOTE_PREFIX = "[Input Manual]"
MANUAL_NOTE_DEFAULT = "[Input Manual oleh Admin]"


@dataclass(frozen=True)
class ReportInput:
    """A full set of report fields as entered for one site and date."""

    report_date: date
    site_id: SiteId | None = None
    anak_count: int = 0
    dewasa_count: int = 0
    wna_count: int = 0
    dewasa_male: int = 0
    dewasa_female: int = 0
    anak_male: int | None = None
    anak_female: int | None = None
    wna_countries: Mapping[str, int] = field(default_factory=dict)
    cash_amount: int = 0
    qris_amount: int = 0
    notes: str | None = None
    ticket_blocks: Mapping[TicketCategory, Sequence[TicketBlock]] = field(default_factory=dict)
    attractions: Sequence[AttractionInput] = ()


class ReportLifecycle:
    """Service for creating, submitting, editing and deleting daily reports."""

    def __init__(
        self,
        store: ReportStore,
        catalog: CatalogStore,
        identity: IdentityResolver,
        prices: PriceTable,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._identity = identity
        self._engine = ReconciliationEngine(prices)
        self._clock = clock

    @property
    def engine(self) -> ReconciliationEngine:
        return self._engine

    @returns_result
    def save_draft(self, caller_id, data: ReportInput) -> OperationResult[DailyReport]:
        """Create or fully replace the draft for the caller's site and date.

        Ticket-block mismatches come back as warnings; they never block a save.
        """
        caller = resolve_caller(self._identity, caller_id)
        site_id = self._target_site(caller, data.site_id)
        existing = self._store.get_report_for_date(site_id, data.report_date)
        if existing is not None and existing.is_submitted:
            raise AlreadySubmittedError(str(existing.id))
        self._require_site(site_id)

        definitions = self._resolve_attractions(site_id, data.attractions)
        now = self._clock()
        report = self._build_report(
            data,
            site_id=site_id,
            definitions=definitions,
            report_id=existing.id if existing else ReportId(uuid.uuid4()),
            status=ReportStatus.DRAFT,
            created_by=existing.created_by if existing else caller.id,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )

        with self._store.atomic():
            if existing is None:
                self._store.insert_report(report)
            else:
                self._store.replace_report(report)
            self._store.replace_attraction_sub_reports(report.id, report.attractions)
        saved = self._store.get_report(report.id)

        action = "create_draft" if existing is None else "update_draft"
        logger.info("report %s %s by %s", saved.id, action, caller.id)
        self._record_activity(action, caller, saved, {"report_id": str(saved.id)})

        reconciliation = self._reconcile(saved)
        return OperationResult.success(
            saved, warnings=reconciliation.warnings, message="Report saved"
        )

    @returns_result
    def submit(self, caller_id, report_id) -> OperationResult[DailyReport]:
        """Lock a draft after the blocking reconciliation checks pass."""
        caller = resolve_caller(self._identity, caller_id)
        permissions.require(
            permissions.can_submit(caller.role), "Only a koordinator can submit reports"
        )
        report = self._get_report(report_id)
        permissions.require(
            permissions.can_access_site(caller, report.site_id),
            "Report belongs to another site",
        )
        if report.is_submitted:
            raise AlreadySubmittedError(str(report.id))

        reconciliation = self._reconcile(report)
        self._raise_blocking(reconciliation)

        now = self._clock()
        saved = self._store.replace_report(
            replace(
                report,
                status=ReportStatus.SUBMITTED,
                submitted_by=caller.id,
                submitted_at=now,
                updated_at=now,
            )
        )
        logger.info("report %s submitted by %s", saved.id, caller.id)
        self._record_activity("submit", caller, saved, {"report_id": str(saved.id)})
        return OperationResult.success(
            saved, warnings=reconciliation.advisory_warnings, message="Report submitted"
        )

    @returns_result
    def privileged_edit(
        self, caller_id, report_id, updates: Mapping[str, object], reason: str | None
    ) -> OperationResult[DailyReport]:
        """Apply an admin's partial update and log exactly what changed.

        Only fields whose value differs from the stored one are applied. A
        changed count also rewrites that category's revenue from the price
        table. An update that changes nothing writes no log entry.
        """
        caller = resolve_caller(self._identity, caller_id)
        permissions.require(
            permissions.can_privileged_edit(caller.role), "Only an admin can edit reports"
        )
        report = self._get_report(report_id)
        reason = audit.normalize_notes(reason)
        if not reason:
            raise NoReasonGivenError()

        normalized = audit.normalize_fields(updates)
        changes = audit.diff(report, normalized)
        if not changes:
            return OperationResult.success(report, message="No changes")

        applied = {key: normalized[key] for key in changes}
        for category in TicketCategory:
            if category.count_field in applied:
                applied[category.revenue_field] = self._engine.category_revenue(
                    category, applied[category.count_field]
                )

        now = self._clock()
        saved = self._store.replace_report(replace(report, **applied, updated_at=now))
        logger.info(
            "report %s edited by %s: %s", saved.id, caller.id, ", ".join(sorted(changes))
        )
        entry = EditLogEntry(
            report_id=saved.id,
            edited_by=caller.id,
            changes=changes,
            reason=reason,
            edited_at=now,
        )
        self._best_effort("edit log", self._store.append_edit_log, entry)

        reconciliation = self._reconcile(saved)
        return OperationResult.success(
            saved,
            warnings=reconciliation.warnings,
            message=f"Report updated ({len(changes)} fields changed)",
        )

    @returns_result
    def delete(self, caller_id, report_id, reason: str | None = None) -> OperationResult[None]:
        """Delete a report. Submitted reports only go through an admin."""
        caller = resolve_caller(self._identity, caller_id)
        report = self._get_report(report_id)
        if report.is_submitted:
            message = "Only an admin can delete a submitted report"
        else:
            message = "Report belongs to another site"
        permissions.require(permissions.can_delete(caller, report), message)

        self._store.delete_report(report.id)
        logger.info("report %s (%s) deleted by %s", report.id, report.status.value, caller.id)
        self._record_activity(
            "delete_report",
            caller,
            report,
            {
                "report_id": str(report.id),
                "report_date": report.report_date.isoformat(),
                "status": report.status.value,
                "reason": audit.normalize_notes(reason),
            },
        )
        return OperationResult.success(None, message="Report deleted")

    @returns_result
    def create_manual_report(self, caller_id, data: ReportInput) -> OperationResult[DailyReport]:
        """Let an admin enter a past or missed day directly as submitted."""
        caller = resolve_caller(self._identity, caller_id)
        permissions.require(
            permissions.can_privileged_edit(caller.role), "Only an admin can add manual reports"
        )
        if data.site_id is None:
            raise InvalidInputError("site_id is required")
        site_id = parse_id(SiteId, data.site_id, "site id")
        self._require_site(site_id)
        if self._store.get_report_for_date(site_id, data.report_date) is not None:
            raise ReportExistsError(str(site_id), data.report_date.isoformat())

        notes = audit.normalize_notes(data.notes)
        notes = f"{MANUAL_NOTE_PREFIX} {notes}" if notes else MANUAL_NOTE_DEFAULT
        definitions = self._resolve_attractions(site_id, data.attractions)
        now = self._clock()
        report = self._build_report(
            replace(data, notes=notes),
            site_id=site_id,
            definitions=definitions,
            report_id=ReportId(uuid.uuid4()),
            status=ReportStatus.SUBMITTED,
            created_by=caller.id,
            created_at=now,
            updated_at=now,
            submitted_by=caller.id,
            submitted_at=now,
        )
        reconciliation = self._reconcile(report)
        self._raise_blocking(reconciliation)

        with self._store.atomic():
            self._store.insert_report(report)
            self._store.replace_attraction_sub_reports(report.id, report.attractions)
        saved = self._store.get_report(report.id)
        logger.info("manual report %s created by %s", saved.id, caller.id)
        self._record_activity("manual_create", caller, saved, {"report_id": str(saved.id)})
        return OperationResult.success(
            saved, warnings=reconciliation.advisory_warnings, message="Report added"
        )

    def _target_site(self, caller: Caller, requested) -> SiteId:
        """Non-admins always write to their own site, whatever they asked for."""
        if caller.is_admin:
            if requested is None:
                raise InvalidInputError("site_id is required")
            return parse_id(SiteId, requested, "site id")
        if caller.site_id is None:
            raise ForbiddenError("Account is not assigned to a site")
        return caller.site_id

    def _require_site(self, site_id: SiteId) -> None:
        if self._catalog.get_site(site_id) is None:
            raise SiteNotFoundError(str(site_id))

    def _get_report(self, report_id) -> DailyReport:
        report_id = parse_id(ReportId, report_id, "report id")
        report = self._store.get_report(report_id)
        if report is None:
            raise ReportNotFoundError(str(report_id))
        return report

    def _resolve_attractions(
        self, site_id: SiteId, inputs: Sequence[AttractionInput]
    ) -> dict[AttractionId, AttractionDefinition]:
        available = {a.id: a for a in self._catalog.list_attractions(site_id)}
        resolved = {}
        for item in inputs:
            if item.attraction_id in resolved:
                raise InvalidInputError("Each attraction may only be reported once")
            definition = available.get(item.attraction_id)
            if definition is None:
                raise AttractionNotFoundError(str(item.attraction_id))
            resolved[item.attraction_id] = definition
        return resolved

    def _build_report(
        self,
        data: ReportInput,
        *,
        site_id: SiteId,
        definitions: dict[AttractionId, AttractionDefinition],
        report_id: ReportId,
        status: ReportStatus,
        created_by,
        created_at: datetime,
        updated_at: datetime,
        submitted_by=None,
        submitted_at: datetime | None = None,
    ) -> DailyReport:
        try:
            counts = {
                category: Count(getattr(data, category.count_field)).value
                for category in TicketCategory
            }
            split = {
                name: Count(getattr(data, name)).value
                for name in ("dewasa_male", "dewasa_female")
            }
            child_split = {
                name: None if getattr(data, name) is None else Count(getattr(data, name)).value
                for name in ("anak_male", "anak_female")
            }
            cash = Money(data.cash_amount).amount
            qris = Money(data.qris_amount).amount
            countries = audit.normalize_countries(data.wna_countries)
            sub_reports = build_sub_reports(list(data.attractions), definitions)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(str(exc)) from exc

        return DailyReport(
            id=report_id,
            site_id=site_id,
            report_date=data.report_date,
            anak_count=counts[TicketCategory.ANAK],
            dewasa_count=counts[TicketCategory.DEWASA],
            wna_count=counts[TicketCategory.WNA],
            **split,
            **child_split,
            wna_countries=countries,
            **self._engine.derive_category_revenue(counts),
            attraction_revenue=sum(sub.revenue for sub in sub_reports),
            cash_amount=cash,
            qris_amount=qris,
            notes=audit.normalize_notes(data.notes),
            ticket_blocks=ticket_blocks.normalize_category_blocks(data.ticket_blocks),
            status=status,
            created_by=created_by,
            submitted_by=submitted_by,
            submitted_at=submitted_at,
            created_at=created_at,
            updated_at=updated_at,
            attractions=sub_reports,
        )

    def _reconcile(self, report: DailyReport) -> Reconciliation:
        definitions = {
            a.id: a for a in self._catalog.list_attractions(report.site_id, active_only=False)
        }
        return self._engine.reconcile(report, definitions)

    def _raise_blocking(self, reconciliation: Reconciliation) -> None:
        if reconciliation.blocking_failures:
            failed = reconciliation.blocking_failures[0]
            raise ValidationFailedError(failed.check, failed.message)

    def _record_activity(
        self, action: str, caller: Caller, report: DailyReport, details: dict
    ) -> None:
        record = ActivityRecord(
            action=action,
            user_id=caller.id,
            site_id=report.site_id,
            details=details,
            created_at=self._clock(),
        )
        self._best_effort("activity record", self._store.append_activity, record)

    def _best_effort(self, what: str, write: Callable, item) -> None:
        """Audit writes must not undo or fail the operation that produced them."""
        try:
            write(item)
        except Exception:
            logger.exception("failed to write %s", what)
