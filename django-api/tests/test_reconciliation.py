"""Unit tests for ReconciliationEngine.

Run with: pytest tests/test_reconciliation.py -v
"""

import uuid
from datetime import datetime, timezone

import pytest

from reports.domain import (
    AttractionDefinition,
    AttractionId,
    AttractionSubReport,
    PriceTable,
    SiteId,
    TicketBlock,
    TicketCategory,
)
from reports.domain.reconciliation import (
    GENDER,
    NATIONALITY,
    PAYMENT,
    TICKET_BLOCKS,
    ReconciliationEngine,
)

from conftest import build_report


@pytest.fixture
def engine() -> ReconciliationEngine:
    return ReconciliationEngine(PriceTable())


def _definition(unit_price: int) -> AttractionDefinition:
    now = datetime(2024, 6, 1, tzinfo=timezone.utc)
    return AttractionDefinition(
        id=AttractionId(uuid.uuid4()),
        site_id=SiteId(uuid.uuid4()),
        name="Flying Fox",
        unit_price=unit_price,
        requires_ticket_block=False,
        is_active=True,
        sort_order=0,
        created_at=now,
        updated_at=now,
    )


class TestRevenue:
    """Tests for revenue derivation."""

    def test_category_revenue_uses_price_table(self, engine):
        """10 dewasa at 15000 is 150000."""
        assert engine.category_revenue(TicketCategory.DEWASA, 10) == 150000

    def test_derive_category_revenue_fills_every_field(self, engine):
        """Missing categories derive zero revenue."""
        revenue = engine.derive_category_revenue({TicketCategory.WNA: 2})
        assert revenue == {"anak_revenue": 0, "dewasa_revenue": 0, "wna_revenue": 100000}

    def test_total_revenue_ignores_stored_revenue(self, engine):
        """Stored revenue fields never feed the total."""
        report = build_report(dewasa_revenue=1, anak_revenue=1, wna_revenue=1)
        assert engine.total_revenue(report) == 210000

    def test_attraction_revenue_recomputed_from_unit_price(self, engine):
        """Known attractions use visitor_count x unit_price, not the stored revenue."""
        definition = _definition(20000)
        sub = AttractionSubReport(definition.id, visitor_count=3, revenue=1)
        assert engine.attraction_revenue([sub], {definition.id: definition}) == 60000

    def test_attraction_revenue_falls_back_to_stored(self, engine):
        """Unknown attractions contribute their stored revenue."""
        sub = AttractionSubReport(AttractionId(uuid.uuid4()), visitor_count=3, revenue=45000)
        assert engine.attraction_revenue([sub]) == 45000


class TestGenderCheck:
    """Tests for gender_valid."""

    def test_dewasa_split_matches(self, engine):
        """6 + 4 == 10 passes."""
        assert engine.gender_valid(build_report(), TicketCategory.DEWASA).passed

    def test_dewasa_split_mismatch_fails(self, engine):
        """6 + 3 != 10 fails with a message naming the numbers."""
        result = engine.gender_valid(build_report(dewasa_female=3), TicketCategory.DEWASA)
        assert not result.passed
        assert result.check == GENDER
        assert "= 9" in result.message

    def test_anak_without_split_is_exempt(self, engine):
        """A child count with no split recorded passes."""
        assert engine.gender_valid(build_report(), TicketCategory.ANAK).passed

    def test_anak_partial_split_is_checked(self, engine):
        """Once either child split is given, it must add up."""
        result = engine.gender_valid(build_report(anak_male=1), TicketCategory.ANAK)
        assert not result.passed

    def test_wna_has_no_gender_split(self, engine):
        """Asking for a WNA gender check is a programming error."""
        with pytest.raises(ValueError):
            engine.gender_valid(build_report(), TicketCategory.WNA)


class TestNationalityCheck:
    """Tests for nationality_valid."""

    def test_zero_wna_passes_vacuously(self, engine):
        """No foreign visitors means nothing to break down."""
        report = build_report(wna_count=0, wna_countries={})
        assert engine.nationality_valid(report).passed

    def test_country_totals_must_match(self, engine):
        """Country counts summing short of wna_count fail."""
        report = build_report(wna_count=3, wna_countries={"JP": 1, "US": 1})
        result = engine.nationality_valid(report)
        assert not result.passed
        assert result.check == NATIONALITY


class TestPaymentCheck:
    """Tests for payment_valid."""

    def test_cash_plus_qris_equals_total(self, engine):
        """Consistent payment passes."""
        assert engine.payment_valid(build_report()).passed

    def test_short_payment_fails(self, engine):
        """A payment gap is reported with both sides."""
        result = engine.payment_valid(build_report(cash_amount=100000))
        assert not result.passed
        assert result.check == PAYMENT
        assert "200000" in result.message and "210000" in result.message

    def test_attraction_revenue_counts_toward_total(self, engine):
        """Attraction takings must be paid for too."""
        definition = _definition(20000)
        report = build_report(
            attractions=(AttractionSubReport(definition.id, visitor_count=2, revenue=40000),),
            attraction_revenue=40000,
            cash_amount=150000,
        )
        assert engine.payment_valid(report, {definition.id: definition}).passed


class TestTicketBlockCheck:
    """Tests for the advisory ticket block check."""

    def test_blocks_matching_count_pass(self, engine):
        """Stub ranges covering the count pass."""
        report = build_report(
            ticket_blocks={TicketCategory.DEWASA: (TicketBlock("A", "1", "10"),)}
        )
        assert engine.ticket_block_valid(report, TicketCategory.DEWASA).passed

    def test_mismatch_is_advisory(self, engine):
        """A block mismatch is a warning, never a blocking failure."""
        report = build_report(
            ticket_blocks={TicketCategory.DEWASA: (TicketBlock("A", "1", "8"),)}
        )
        reconciliation = engine.reconcile(report)
        assert reconciliation.ok
        assert any("ticket blocks cover 8" in w for w in reconciliation.advisory_warnings)
        assert all(not f.blocking for f in reconciliation.failures)
        assert {f.check for f in reconciliation.failures} == {TICKET_BLOCKS}


class TestReconcile:
    """Tests for the combined reconciliation."""

    def test_consistent_report_has_only_block_warnings(self, engine):
        """Without stubs, only the advisory block checks fail."""
        reconciliation = engine.reconcile(build_report())
        assert reconciliation.ok
        assert {f.check for f in reconciliation.failures} == {TICKET_BLOCKS}

    def test_blocking_failures_keep_check_order(self, engine):
        """Gender comes before nationality before payment."""
        report = build_report(dewasa_female=3, wna_countries={}, cash_amount=0)
        reconciliation = engine.reconcile(report)
        assert not reconciliation.ok
        assert [f.check for f in reconciliation.blocking_failures] == [
            GENDER,
            NATIONALITY,
            PAYMENT,
        ]

    def test_reconcile_is_pure(self, engine):
        """Reconciling twice gives the same outcome and leaves the report untouched."""
        report = build_report(dewasa_female=3)
        assert engine.reconcile(report) == engine.reconcile(report)
        assert report.dewasa_female == 3

    def test_adult_only_cash_scenario(self, engine):
        """10 adults paying 150000 cash reconcile exactly."""
        report = build_report(
            anak_count=0,
            wna_count=0,
            wna_countries={},
            cash_amount=150000,
            qris_amount=0,
        )
        assert engine.payment_valid(report).passed
        assert engine.total_revenue(report) == 150000
