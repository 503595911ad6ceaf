"""Role capabilities for report lifecycle transitions."""

from reports.domain.errors import ForbiddenError
from reports.domain.models import Caller, DailyReport
from reports.domain.value_objects import Role, SiteId


def can_submit(role: Role) -> bool:
    return role in (Role.KOORDINATOR, Role.ADMIN)


def can_privileged_edit(role: Role) -> bool:
    return role is Role.ADMIN


def can_manage_catalog(role: Role) -> bool:
    return role is Role.ADMIN


def can_access_site(caller: Caller, site_id: SiteId) -> bool:
    """Admins see every site; everyone else only the site they are pinned to."""
    return caller.is_admin or caller.site_id == site_id


def can_delete(caller: Caller, report: DailyReport) -> bool:
    """Submitted reports need the privileged path; drafts also their own site's staff."""
    if caller.is_admin:
        return True
    if report.is_submitted:
        return False
    return can_access_site(caller, report.site_id)


def require(allowed: bool, message: str) -> None:
    if not allowed:
        raise ForbiddenError(message)
