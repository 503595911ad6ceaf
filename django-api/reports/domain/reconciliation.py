"""Reconciliation engine.

Pure checks over a candidate DailyReport and its attraction sub-reports.
Revenue is always recomputed from counts and the injected price table; the
revenue fields stored on a report are never trusted for reconciliation.
"""

from dataclasses import dataclass
from typing import Iterable, Mapping

from reports.domain import ticket_blocks
from reports.domain.models import AttractionDefinition, AttractionSubReport, DailyReport
from reports.domain.value_objects import AttractionId, PriceTable, TicketCategory

GENDER = "gender"
NATIONALITY = "nationality"
PAYMENT = "payment"
TICKET_BLOCKS = "ticket_blocks"

BLOCKING_CHECKS = frozenset({GENDER, NATIONALITY, PAYMENT})


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one reconciliation check."""

    check: str
    passed: bool
    message: str | None = None
    category: TicketCategory | None = None

    @property
    def blocking(self) -> bool:
        return self.check in BLOCKING_CHECKS

    def __bool__(self) -> bool:
        return self.passed


@dataclass(frozen=True)
class Reconciliation:
    """All check outcomes for one report, in evaluation order."""

    results: tuple[CheckResult, ...]

    @property
    def failures(self) -> tuple[CheckResult, ...]:
        return tuple(result for result in self.results if not result.passed)

    @property
    def blocking_failures(self) -> tuple[CheckResult, ...]:
        return tuple(result for result in self.failures if result.blocking)

    @property
    def warnings(self) -> tuple[str, ...]:
        return tuple(result.message for result in self.failures if result.message)

    @property
    def advisory_warnings(self) -> tuple[str, ...]:
        return tuple(
            result.message
            for result in self.failures
            if not result.blocking and result.message
        )

    @property
    def ok(self) -> bool:
        return not self.blocking_failures


class ReconciliationEngine:
    """Derives revenue and checks cross-field invariants."""

    def __init__(self, prices: PriceTable) -> None:
        self._prices = prices

    @property
    def prices(self) -> PriceTable:
        return self._prices

    def category_revenue(self, category: TicketCategory, count: int) -> int:
        return self._prices.revenue_for(category, count)

    def derive_category_revenue(self, counts: Mapping[TicketCategory, int]) -> dict[str, int]:
        """Map each category's revenue field to count x unit price."""
        return {
            category.revenue_field: self.category_revenue(category, counts.get(category, 0))
            for category in TicketCategory
        }

    def attraction_revenue(
        self,
        sub_reports: Iterable[AttractionSubReport],
        definitions: Mapping[AttractionId, AttractionDefinition] | None = None,
    ) -> int:
        definitions = definitions or {}
        total = 0
        for sub_report in sub_reports:
            definition = definitions.get(sub_report.attraction_id)
            if definition is None:
                total += sub_report.revenue
            else:
                total += sub_report.visitor_count * definition.unit_price
        return total

    def total_revenue(
        self,
        report: DailyReport,
        definitions: Mapping[AttractionId, AttractionDefinition] | None = None,
    ) -> int:
        category_total = sum(
            self.category_revenue(category, report.count_for(category))
            for category in TicketCategory
        )
        return category_total + self.attraction_revenue(report.attractions, definitions)

    def gender_valid(self, report: DailyReport, category: TicketCategory) -> CheckResult:
        """male + female == count. Child is exempt when its split is not tracked."""
        if not category.has_gender_split:
            raise ValueError(f"{category.value} has no gender split")
        male = getattr(report, f"{category.value}_male")
        female = getattr(report, f"{category.value}_female")
        total = report.count_for(category)
        if male is None and female is None:
            return CheckResult(GENDER, True, category=category)
        male = male or 0
        female = female or 0
        if male + female == total:
            return CheckResult(GENDER, True, category=category)
        return CheckResult(
            GENDER,
            False,
            f"{category.value}: male ({male}) + female ({female}) = {male + female}, "
            f"but {category.value}_count is {total}",
            category=category,
        )

    def nationality_valid(self, report: DailyReport) -> CheckResult:
        if report.wna_count == 0:
            return CheckResult(NATIONALITY, True, category=TicketCategory.WNA)
        total = sum(report.wna_countries.values())
        if total == report.wna_count:
            return CheckResult(NATIONALITY, True, category=TicketCategory.WNA)
        return CheckResult(
            NATIONALITY,
            False,
            f"Nationality total ({total}) does not match wna_count ({report.wna_count})",
            category=TicketCategory.WNA,
        )

    def payment_valid(
        self,
        report: DailyReport,
        definitions: Mapping[AttractionId, AttractionDefinition] | None = None,
    ) -> CheckResult:
        expected = self.total_revenue(report, definitions)
        paid = report.cash_amount + report.qris_amount
        if paid == expected:
            return CheckResult(PAYMENT, True)
        return CheckResult(
            PAYMENT,
            False,
            f"Cash ({report.cash_amount}) + QRIS ({report.qris_amount}) = {paid}, "
            f"but total revenue is {expected}",
        )

    def ticket_block_valid(self, report: DailyReport, category: TicketCategory) -> CheckResult:
        """Advisory: stub ranges should add up to the category count."""
        blocks_total = ticket_blocks.sum_category(report.blocks_for(category))
        count = report.count_for(category)
        if blocks_total == count:
            return CheckResult(TICKET_BLOCKS, True, category=category)
        return CheckResult(
            TICKET_BLOCKS,
            False,
            f"{category.value}: ticket blocks cover {blocks_total} visitors, "
            f"but {category.value}_count is {count}",
            category=category,
        )

    def reconcile(
        self,
        report: DailyReport,
        definitions: Mapping[AttractionId, AttractionDefinition] | None = None,
    ) -> Reconciliation:
        """Run every check. Blocking checks come first, in submission order."""
        results = [
            self.gender_valid(report, TicketCategory.DEWASA),
            self.gender_valid(report, TicketCategory.ANAK),
            self.nationality_valid(report),
            self.payment_valid(report, definitions),
        ]
        results.extend(self.ticket_block_valid(report, category) for category in TicketCategory)
        return Reconciliation(tuple(results))
