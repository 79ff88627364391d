"""Record shapes supplied by the transaction store.

These mirror what the store persists and are deliberately loose: dates and
amounts arrive as whatever the store holds and are only parsed by the
normalizer.
"""

from dataclasses import dataclass
from typing import Optional


def _optional_str(value: object) -> Optional[str]:
    return None if value is None else str(value)


@dataclass
class ExpenseRecord:
    """Expense row as stored.

    Attributes:
        id: Store identifier, unique among expenses.
        date: Stored date (date, datetime or string).
        amount: Stored amount (number or string).
        category_id: Reference to a CategoryRecord.
        user_id: Reference to a UserRecord.
        description: Free text.
        status: Workflow status (pending, approved, rejected).
        kind: Kind declared by the record itself, if any.
    """

    id: object
    date: object
    amount: object
    category_id: Optional[str] = None
    user_id: Optional[str] = None
    description: str = ""
    status: Optional[str] = None
    kind: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "ExpenseRecord":
        """Create from a store dictionary (camelCase or snake_case keys)."""
        return cls(
            id=data.get("id"),
            date=data.get("date"),
            amount=data.get("amount"),
            category_id=_optional_str(data.get("categoryId", data.get("category_id"))),
            user_id=_optional_str(data.get("userId", data.get("user_id"))),
            description=str(data.get("description") or ""),
            status=_optional_str(data.get("status")),
            kind=_optional_str(data.get("kind", data.get("type"))),
        )


@dataclass
class IncomeRecord:
    """Income row as stored; unlike expenses it may name a source."""

    id: object
    date: object
    amount: object
    category_id: Optional[str] = None
    user_id: Optional[str] = None
    description: str = ""
    status: Optional[str] = None
    kind: Optional[str] = None
    source: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "IncomeRecord":
        """Create from a store dictionary (camelCase or snake_case keys)."""
        return cls(
            id=data.get("id"),
            date=data.get("date"),
            amount=data.get("amount"),
            category_id=_optional_str(data.get("categoryId", data.get("category_id"))),
            user_id=_optional_str(data.get("userId", data.get("user_id"))),
            description=str(data.get("description") or ""),
            status=_optional_str(data.get("status")),
            kind=_optional_str(data.get("kind", data.get("type"))),
            source=_optional_str(data.get("source")),
        )


@dataclass
class CategoryRecord:
    """Category as stored: id, display name and the kind it applies to."""

    id: str
    name: str
    type: str = "expense"

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "CategoryRecord":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            type=str(data.get("type", "expense")),
        )


@dataclass
class UserRecord:
    """User as stored."""

    id: str
    name: str
    department: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "UserRecord":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            department=_optional_str(data.get("department")),
        )
