"""Filter specification restricting which transactions enter a report."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from ledger_analytics.exceptions import InvalidFilterRangeError
from ledger_analytics.utils.date_utils import parse_date
from ledger_analytics.utils.decimal_utils import safe_decimal


class KindFilter(Enum):
    """Transaction kind axis of a filter."""

    ALL = "all"
    EXPENSE = "expense"
    INCOME = "income"

    @classmethod
    def parse(cls, value: object) -> "KindFilter":
        """Parse a kind filter value, treating empty values as ALL.

        Raises:
            ValueError: If the value names an unknown kind.
        """
        if isinstance(value, cls):
            return value
        if value is None or value == "":
            return cls.ALL
        return cls(str(value).lower())


def _names(values: Optional[Iterable[object]]) -> tuple[str, ...]:
    if not values:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(str(v) for v in values)


def _optional_date(value: object) -> Optional[date]:
    if value is None or value == "":
        return None
    return parse_date(value)


@dataclass(frozen=True)
class FilterSpec:
    """Multi-axis transaction filter.

    Axes are AND-combined; the values of a multi-value axis are OR-combined.
    An unset axis, including an empty allow-list, does not restrict.

    Attributes:
        start_date: Inclusive lower date bound.
        end_date: Inclusive upper date bound.
        kind: Restrict to expenses or income.
        categories: Category name allow-list.
        users: User name allow-list.
        departments: Department name allow-list.
        min_amount: Inclusive lower amount bound.
        max_amount: Inclusive upper amount bound.
    """

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    kind: KindFilter = KindFilter.ALL
    categories: tuple[str, ...] = field(default_factory=tuple)
    users: tuple[str, ...] = field(default_factory=tuple)
    departments: tuple[str, ...] = field(default_factory=tuple)
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None

    def __post_init__(self) -> None:
        # Empty or non-numeric amount bounds, NaN included, do not restrict
        object.__setattr__(self, "min_amount", safe_decimal(self.min_amount))
        object.__setattr__(self, "max_amount", safe_decimal(self.max_amount))

    def validate(self) -> None:
        """Check that every range has its lower bound at or below its upper bound.

        Raises:
            InvalidFilterRangeError: If a range is inverted.
        """
        if (
            self.start_date is not None
            and self.end_date is not None
            and self.start_date > self.end_date
        ):
            raise InvalidFilterRangeError("date", self.start_date, self.end_date)
        if (
            self.min_amount is not None
            and self.max_amount is not None
            and self.min_amount > self.max_amount
        ):
            raise InvalidFilterRangeError("amount", self.min_amount, self.max_amount)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, object]]) -> "FilterSpec":
        """Create a FilterSpec from a dictionary.

        Accepts the nested shape used by the filter panel
        (``dateRange``, ``transactionType``, ``amountRange``) as well as
        flat snake_case keys. Amount bounds that are empty or not numeric
        are left unset.

        Args:
            data: Dictionary of filter values, or None for no filter.

        Returns:
            A new FilterSpec.
        """
        if not data:
            return cls()

        date_range = data.get("dateRange") or data.get("date_range") or {}
        amount_range = data.get("amountRange") or data.get("amount_range") or {}

        start = date_range.get("startDate", date_range.get("start")) if date_range else None  # type: ignore[union-attr]
        end = date_range.get("endDate", date_range.get("end")) if date_range else None  # type: ignore[union-attr]
        low = amount_range.get("min") if amount_range else None  # type: ignore[union-attr]
        high = amount_range.get("max") if amount_range else None  # type: ignore[union-attr]

        return cls(
            start_date=_optional_date(data.get("start_date", start)),
            end_date=_optional_date(data.get("end_date", end)),
            kind=KindFilter.parse(data.get("transactionType", data.get("kind"))),
            categories=_names(data.get("categories")),  # type: ignore[arg-type]
            users=_names(data.get("users")),  # type: ignore[arg-type]
            departments=_names(data.get("departments")),  # type: ignore[arg-type]
            min_amount=data.get("min_amount", low),  # type: ignore[arg-type]
            max_amount=data.get("max_amount", high),  # type: ignore[arg-type]
        )

    def to_dict(self) -> dict[str, object]:
        """Plain dictionary form, used by the JSON export."""
        return {
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "kind": self.kind.value,
            "categories": list(self.categories),
            "users": list(self.users),
            "departments": list(self.departments),
            "min_amount": self.min_amount,
            "max_amount": self.max_amount,
        }
