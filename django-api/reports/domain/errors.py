"""Domain error codes for the reports module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    REPORT_NOT_FOUND = "REPORT_NOT_FOUND"
    SITE_NOT_FOUND = "SITE_NOT_FOUND"
    ATTRACTION_NOT_FOUND = "ATTRACTION_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    ALREADY_SUBMITTED = "ALREADY_SUBMITTED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NO_REASON_GIVEN = "NO_REASON_GIVEN"
    INVALID_INPUT = "INVALID_INPUT"
    REPORT_EXISTS = "REPORT_EXISTS"
    SITE_CODE_TAKEN = "SITE_CODE_TAKEN"


NOT_FOUND_CODES = frozenset(
    {
        ErrorCode.REPORT_NOT_FOUND,
        ErrorCode.SITE_NOT_FOUND,
        ErrorCode.ATTRACTION_NOT_FOUND,
        ErrorCode.USER_NOT_FOUND,
    }
)


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    @property
    def is_not_found(self) -> bool:
        return self.code in NOT_FOUND_CODES

    def to_dict(self) -> dict:
        return {"code": self.code.value, "message": self.message}


class ReportNotFoundError(DomainError):
    """Raised when a report does not exist."""

    def __init__(self, report_id: str) -> None:
        super().__init__(
            code=ErrorCode.REPORT_NOT_FOUND,
            message="Report not found",
        )
        self.report_id = report_id


class SiteNotFoundError(DomainError):
    """Raised when a site does not exist."""

    def __init__(self, site_id: str) -> None:
        super().__init__(
            code=ErrorCode.SITE_NOT_FOUND,
            message="Site not found",
        )
        self.site_id = site_id


class AttractionNotFoundError(DomainError):
    """Raised when an attraction is absent, inactive, or belongs to another site."""

    def __init__(self, attraction_id: str) -> None:
        super().__init__(
            code=ErrorCode.ATTRACTION_NOT_FOUND,
            message="Attraction not found",
        )
        self.attraction_id = attraction_id


class UserNotFoundError(DomainError):
    """Raised when the caller cannot be resolved to a staff account."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            code=ErrorCode.USER_NOT_FOUND,
            message="User not found",
        )
        self.user_id = user_id


class ForbiddenError(DomainError):
    """Raised on a role or site-ownership mismatch."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(code=ErrorCode.FORBIDDEN, message=message)


class AlreadySubmittedError(DomainError):
    """Raised when saving or submitting a report that is already submitted."""

    def __init__(self, report_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_SUBMITTED,
            message="Report has already been submitted",
        )
        self.report_id = report_id


class ValidationFailedError(DomainError):
    """Raised when a blocking reconciliation check fails."""

    def __init__(self, check: str, message: str) -> None:
        super().__init__(code=ErrorCode.VALIDATION_FAILED, message=message)
        self.check = check

    def to_dict(self) -> dict:
        return {**super().to_dict(), "check": self.check}


class NoReasonGivenError(DomainError):
    """Raised when a privileged edit arrives without a reason."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NO_REASON_GIVEN,
            message="A reason is required to edit a report",
        )


class InvalidInputError(DomainError):
    """Raised when an identifier or field is malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_INPUT, message=message)


class ReportExistsError(DomainError):
    """Raised when a report already exists for the site and date."""

    def __init__(self, site_id: str, report_date: str) -> None:
        super().__init__(
            code=ErrorCode.REPORT_EXISTS,
            message="A report already exists for this site and date",
        )
        self.site_id = site_id
        self.report_date = report_date


class SiteCodeTakenError(DomainError):
    """Raised when creating a site with a code already in use."""

    def __init__(self, code: str) -> None:
        super().__init__(
            code=ErrorCode.SITE_CODE_TAKEN,
            message="Site code is already in use",
        )
        self.site_code = code
