"""Wiring of services to their Django-backed stores."""

from django.conf import settings

from reports.domain import PriceTable
from reports.services.catalog_service import CatalogService
from reports.services.query_service import ReportQueryService
from reports.services.report_service import ReportLifecycle
from reports.stores.cached_store import CachedReportStore
from reports.stores.django_store import DjangoCatalogStore, DjangoIdentityResolver

CALLER_HEADER = "X-User-Id"


def get_price_table() -> PriceTable:
    return PriceTable.from_mapping(settings.REPORTS_TICKET_PRICES)


def get_lifecycle() -> ReportLifecycle:
    return ReportLifecycle(
        store=CachedReportStore(),
        catalog=DjangoCatalogStore(),
        identity=DjangoIdentityResolver(),
        prices=get_price_table(),
    )


def get_query_service() -> ReportQueryService:
    return ReportQueryService(
        store=CachedReportStore(),
        catalog=DjangoCatalogStore(),
        identity=DjangoIdentityResolver(),
    )


def get_catalog_service() -> CatalogService:
    return CatalogService(
        catalog=DjangoCatalogStore(),
        reports=CachedReportStore(),
        identity=DjangoIdentityResolver(),
    )


def caller_id(request) -> str | None:
    return request.headers.get(CALLER_HEADER)
