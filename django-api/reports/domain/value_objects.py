"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Self
from uuid import UUID


class TicketCategory(str, Enum):
    """Visitor categories, each sold at a fixed unit price."""

    ANAK = "anak"
    DEWASA = "dewasa"
    WNA = "wna"

    @property
    def count_field(self) -> str:
        return f"{self.value}_count"

    @property
    def revenue_field(self) -> str:
        return f"{self.value}_revenue"

    @property
    def has_gender_split(self) -> bool:
        return self is not TicketCategory.WNA


class Role(str, Enum):
    """Staff roles, lowest privilege first."""

    PETUGAS = "petugas"
    KOORDINATOR = "koordinator"
    ADMIN = "admin"


class ReportStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"


class DailyStatus(str, Enum):
    """Status of a site's report for one day, including the absent state."""

    PENDING = "pending"
    DRAFT = "draft"
    SUBMITTED = "submitted"


@dataclass(frozen=True)
class _UUIDValue:
    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ReportId(_UUIDValue):
    """Unique identifier for a DailyReport."""


@dataclass(frozen=True)
class SiteId(_UUIDValue):
    """Unique identifier for a Site."""


@dataclass(frozen=True)
class AttractionId(_UUIDValue):
    """Unique identifier for an AttractionDefinition."""


@dataclass(frozen=True)
class UserId(_UUIDValue):
    """Unique identifier for a staff account."""


@dataclass(frozen=True)
class Count:
    """Non-negative visitor count."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError("Count must be an integer")
        if self.value < 0:
            raise ValueError("Count cannot be negative")


@dataclass(frozen=True)
class Money:
    """Rupiah amount. Whole units only, never negative."""

    amount: int

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise ValueError("Money amount must be a whole number")
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __mul__(self, count: Count) -> "Money":
        return Money(self.amount * count.value)

    def __str__(self) -> str:
        return f"Rp {self.amount:,}".replace(",", ".")


DEFAULT_TICKET_PRICES = {
    TicketCategory.ANAK: 5000,
    TicketCategory.DEWASA: 15000,
    TicketCategory.WNA: 50000,
}


@dataclass(frozen=True)
class PriceTable:
    """Fixed unit price per visitor category.

    Built once from settings and handed to the engine and lifecycle, so the
    prices are never looked up from module globals.
    """

    prices: Mapping[TicketCategory, int] = field(
        default_factory=lambda: dict(DEFAULT_TICKET_PRICES)
    )

    def __post_init__(self) -> None:
        normalized = {}
        for category in TicketCategory:
            if category not in self.prices and category.value not in self.prices:
                raise ValueError(f"Missing ticket price for {category.value}")
            raw = self.prices.get(category, self.prices.get(category.value))
            normalized[category] = Money(raw).amount
        object.__setattr__(self, "prices", MappingProxyType(normalized))

    @classmethod
    def from_mapping(cls, prices: Mapping[str, int]) -> Self:
        return cls(prices={TicketCategory(key): value for key, value in prices.items()})

    def unit_price(self, category: TicketCategory) -> int:
        return self.prices[category]

    def revenue_for(self, category: TicketCategory, count: int) -> int:
        return (Money(self.unit_price(category)) * Count(count)).amount
