"""Pytest configuration and shared fixtures."""

import uuid
from datetime import date, datetime, timedelta, timezone

import pytest
from rest_framework.test import APIClient

from reports.domain import (
    AttractionDefinition,
    AttractionId,
    DailyReport,
    PriceTable,
    ReportId,
    ReportStatus,
    Role,
    Site,
    SiteId,
    UserId,
)
from reports.services.catalog_service import CatalogService
from reports.services.query_service import ReportQueryService
from reports.services.report_service import ReportLifecycle
from reports.stores.memory_store import (
    InMemoryCatalogStore,
    InMemoryReportStore,
    StaticIdentityResolver,
)

REPORT_DATE = date(2024, 6, 1)
T0 = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


class FakeClock:
    """Clock that moves forward one minute per reading."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def prices() -> PriceTable:
    return PriceTable()


@pytest.fixture
def report_store() -> InMemoryReportStore:
    return InMemoryReportStore()


@pytest.fixture
def catalog() -> InMemoryCatalogStore:
    return InMemoryCatalogStore()


@pytest.fixture
def identity() -> StaticIdentityResolver:
    return StaticIdentityResolver()


@pytest.fixture
def site(catalog) -> Site:
    return catalog.insert_site(
        Site(
            id=SiteId(uuid.uuid4()),
            code="CRN",
            name="Curug Nangka",
            location="Bogor",
            is_active=True,
            created_at=T0,
            updated_at=T0,
        )
    )


@pytest.fixture
def other_site(catalog) -> Site:
    return catalog.insert_site(
        Site(
            id=SiteId(uuid.uuid4()),
            code="TLG",
            name="Telaga Warna",
            location="Puncak",
            is_active=True,
            created_at=T0,
            updated_at=T0,
        )
    )


@pytest.fixture
def petugas(identity, site):
    return identity.add(UserId(uuid.uuid4()), Role.PETUGAS, site.id)


@pytest.fixture
def koordinator(identity, site):
    return identity.add(UserId(uuid.uuid4()), Role.KOORDINATOR, site.id)


@pytest.fixture
def admin(identity):
    return identity.add(UserId(uuid.uuid4()), Role.ADMIN)


@pytest.fixture
def lifecycle(report_store, catalog, identity, prices, clock) -> ReportLifecycle:
    return ReportLifecycle(
        store=report_store, catalog=catalog, identity=identity, prices=prices, clock=clock
    )


@pytest.fixture
def query_service(report_store, catalog, identity) -> ReportQueryService:
    return ReportQueryService(store=report_store, catalog=catalog, identity=identity)


@pytest.fixture
def catalog_service(catalog, report_store, identity, clock) -> CatalogService:
    return CatalogService(catalog=catalog, reports=report_store, identity=identity, clock=clock)


@pytest.fixture
def make_attraction(catalog):
    def _make(site_id, name="Flying Fox", unit_price=20000, requires_ticket_block=False, **extra):
        return catalog.insert_attraction(
            AttractionDefinition(
                id=AttractionId(uuid.uuid4()),
                site_id=site_id,
                name=name,
                unit_price=unit_price,
                requires_ticket_block=requires_ticket_block,
                is_active=extra.get("is_active", True),
                sort_order=extra.get("sort_order", 0),
                created_at=T0,
                updated_at=T0,
            )
        )

    return _make


def build_report(**overrides) -> DailyReport:
    """A consistent report: 10 dewasa (6M/4F), 2 anak, 1 wna from JP, fully paid."""
    fields = dict(
        id=ReportId(uuid.uuid4()),
        site_id=SiteId(uuid.uuid4()),
        report_date=REPORT_DATE,
        anak_count=2,
        dewasa_count=10,
        wna_count=1,
        dewasa_male=6,
        dewasa_female=4,
        anak_male=None,
        anak_female=None,
        wna_countries={"JP": 1},
        anak_revenue=10000,
        dewasa_revenue=150000,
        wna_revenue=50000,
        attraction_revenue=0,
        cash_amount=110000,
        qris_amount=100000,
        notes=None,
        ticket_blocks={},
        status=ReportStatus.DRAFT,
        created_by=None,
        submitted_by=None,
        submitted_at=None,
        created_at=T0,
        updated_at=T0,
    )
    fields.update(overrides)
    return DailyReport(**fields)
