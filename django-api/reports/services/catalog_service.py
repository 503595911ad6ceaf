"""Site and attraction administration."""

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable

from reports.domain import (
    AttractionDefinition,
    AttractionId,
    Money,
    Site,
    SiteId,
)
from reports.domain import permissions
from reports.domain.errors import (
    AttractionNotFoundError,
    InvalidInputError,
    SiteCodeTakenError,
    SiteNotFoundError,
)
from reports.services.common import parse_id, resolve_caller, utcnow
from reports.services.results import OperationResult, returns_result
from reports.stores.interfaces import CatalogStore, IdentityResolver, ReportStore

logger = logging.getLogger(__name__)

SITE_FIELDS = frozenset({"name", "location", "is_active"})
ATTRACTION_FIELDS = frozenset(
    {"name", "unit_price", "requires_ticket_block", "is_active", "sort_order"}
)


class CatalogService:
    """Service for managing sites and their attractions."""

    def __init__(
        self,
        catalog: CatalogStore,
        reports: ReportStore,
        identity: IdentityResolver,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._catalog = catalog
        self._reports = reports
        self._identity = identity
        self._clock = clock

    @returns_result
    def list_sites(self, caller_id) -> OperationResult[list[Site]]:
        resolve_caller(self._identity, caller_id)
        return OperationResult.success(self._catalog.list_sites())

    @returns_result
    def list_attractions(
        self, caller_id, site_id, *, include_inactive: bool = False
    ) -> OperationResult[list[AttractionDefinition]]:
        """Return a site's attractions in display order."""
        resolve_caller(self._identity, caller_id)
        site = self._get_site(site_id)
        return OperationResult.success(
            self._catalog.list_attractions(site.id, active_only=not include_inactive)
        )

    @returns_result
    def create_site(
        self, caller_id, *, code: str, name: str, location: str | None = None
    ) -> OperationResult[Site]:
        self._require_admin(caller_id)
        code = (code or "").strip().upper()
        if not code or not (name or "").strip():
            raise InvalidInputError("Site code and name are required")
        if self._catalog.site_code_exists(code):
            raise SiteCodeTakenError(code)
        now = self._clock()
        site = self._catalog.insert_site(
            Site(
                id=SiteId(uuid.uuid4()),
                code=code,
                name=name.strip(),
                location=(location or "").strip() or None,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("site %s (%s) created", site.id, site.code)
        return OperationResult.success(site, message="Site added")

    @returns_result
    def update_site(self, caller_id, site_id, **changes) -> OperationResult[Site]:
        """Update name, location or active flag. A site's code never changes."""
        self._require_admin(caller_id)
        unknown = set(changes) - SITE_FIELDS
        if unknown:
            raise InvalidInputError(f"Fields cannot be changed: {', '.join(sorted(unknown))}")
        site = self._get_site(site_id)
        updated = self._catalog.update_site(replace(site, **changes, updated_at=self._clock()))
        logger.info("site %s updated: %s", updated.id, ", ".join(sorted(changes)))
        return OperationResult.success(updated, message="Site updated")

    @returns_result
    def create_attraction(
        self,
        caller_id,
        site_id,
        *,
        name: str,
        unit_price: int,
        requires_ticket_block: bool = False,
        sort_order: int = 0,
    ) -> OperationResult[AttractionDefinition]:
        self._require_admin(caller_id)
        site = self._get_site(site_id)
        if not (name or "").strip():
            raise InvalidInputError("Attraction name is required")
        now = self._clock()
        attraction = self._catalog.insert_attraction(
            AttractionDefinition(
                id=AttractionId(uuid.uuid4()),
                site_id=site.id,
                name=name.strip(),
                unit_price=self._price(unit_price),
                requires_ticket_block=requires_ticket_block,
                is_active=True,
                sort_order=sort_order,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("attraction %s created at site %s", attraction.id, site.id)
        return OperationResult.success(attraction, message="Attraction added")

    @returns_result
    def update_attraction(
        self, caller_id, attraction_id, **changes
    ) -> OperationResult[AttractionDefinition]:
        self._require_admin(caller_id)
        unknown = set(changes) - ATTRACTION_FIELDS
        if unknown:
            raise InvalidInputError(f"Fields cannot be changed: {', '.join(sorted(unknown))}")
        if "unit_price" in changes:
            changes["unit_price"] = self._price(changes["unit_price"])
        attraction = self._get_attraction(attraction_id)
        updated = self._catalog.update_attraction(
            replace(attraction, **changes, updated_at=self._clock())
        )
        return OperationResult.success(updated, message="Attraction updated")

    @returns_result
    def remove_attraction(self, caller_id, attraction_id) -> OperationResult[AttractionDefinition | None]:
        """Delete an unused attraction; one with reporting history is only disabled."""
        self._require_admin(caller_id)
        attraction = self._get_attraction(attraction_id)
        if self._reports.attraction_has_reports(attraction.id):
            disabled = self._catalog.update_attraction(
                replace(attraction, is_active=False, updated_at=self._clock())
            )
            logger.info("attraction %s disabled (has history)", attraction.id)
            return OperationResult.success(disabled, message="Attraction disabled")
        self._catalog.delete_attraction(attraction.id)
        logger.info("attraction %s deleted", attraction.id)
        return OperationResult.success(None, message="Attraction deleted")

    def _require_admin(self, caller_id) -> None:
        caller = resolve_caller(self._identity, caller_id)
        permissions.require(
            permissions.can_manage_catalog(caller.role), "Only an admin can manage sites"
        )

    def _get_site(self, site_id) -> Site:
        site_id = parse_id(SiteId, site_id, "site id")
        site = self._catalog.get_site(site_id)
        if site is None:
            raise SiteNotFoundError(str(site_id))
        return site

    def _get_attraction(self, attraction_id) -> AttractionDefinition:
        attraction_id = parse_id(AttractionId, attraction_id, "attraction id")
        attraction = self._catalog.get_attraction(attraction_id)
        if attraction is None:
            raise AttractionNotFoundError(str(attraction_id))
        return attraction

    @staticmethod
    def _price(value) -> int:
        try:
            return Money(value).amount
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc
