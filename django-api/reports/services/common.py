"""Helpers shared by the services."""

from datetime import datetime, timezone
from typing import TypeVar

from reports.domain import Caller, UserId
from reports.domain.errors import InvalidInputError
from reports.stores.interfaces import IdentityResolver

IdT = TypeVar("IdT")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_id(id_type: type[IdT], value, label: str) -> IdT:
    """Build a typed id from a string or pass an already-typed id through.

    Raises:
        InvalidInputError: If the value is not a valid UUID.
    """
    if isinstance(value, id_type):
        return value
    if value is None or value == "":
        raise InvalidInputError(f"{label} is required")
    try:
        return id_type.from_string(value)
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidInputError(f"Invalid {label} format") from exc


def resolve_caller(identity: IdentityResolver, caller_id) -> Caller:
    """Resolve the caller or raise UserNotFoundError / ForbiddenError."""
    return identity.resolve(parse_id(UserId, caller_id, "user id"))
