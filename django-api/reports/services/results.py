"""Structured operation results.

Lifecycle operations never let a DomainError escape: it is caught at the
operation boundary and handed back as a failed OperationResult.
"""

import functools
import logging
from dataclasses import dataclass
from typing import Generic, TypeVar

from reports.domain.errors import DomainError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of one service operation."""

    ok: bool
    data: T | None = None
    error: DomainError | None = None
    warnings: tuple[str, ...] = ()
    message: str | None = None

    @classmethod
    def success(
        cls, data: T | None = None, *, warnings=(), message: str | None = None
    ) -> "OperationResult[T]":
        return cls(ok=True, data=data, warnings=tuple(warnings), message=message)

    @classmethod
    def failure(cls, error: DomainError) -> "OperationResult[T]":
        return cls(ok=False, error=error, message=error.message)


def returns_result(func):
    """Run a service operation, turning domain errors into a failed result."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> OperationResult:
        try:
            return func(*args, **kwargs)
        except DomainError as exc:
            logger.info("%s refused: %s", func.__name__, exc.code.value)
            return OperationResult.failure(exc)

    return wrapper
