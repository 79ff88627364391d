"""Unified transaction model produced by normalization."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

# Display value used when a category, user or department reference is missing
UNKNOWN = "Unknown"


class TransactionKind(Enum):
    """Direction of a transaction. Amounts are never negative; kind carries the sign."""

    EXPENSE = "expense"  # Money out
    INCOME = "income"  # Money in


@dataclass(frozen=True)
class Transaction:
    """Normalized expense or income record.

    Instances are immutable and rebuilt from the store on every request.

    Attributes:
        id: Store identifier, unique within its kind.
        kind: Expense or income.
        amount: Non-negative Decimal amount.
        occurred_on: Calendar date of the transaction.
        category_name: Resolved category name or UNKNOWN.
        user_name: Resolved user name or UNKNOWN.
        department_name: Resolved department name or UNKNOWN.
        description: Free text, may be empty.
        source: Income source as stored (income only).
        status: Store workflow status, carried for display.
    """

    id: str
    kind: TransactionKind
    amount: Decimal
    occurred_on: date
    category_name: str = UNKNOWN
    user_name: str = UNKNOWN
    department_name: str = UNKNOWN
    description: str = ""
    source: str | None = None
    status: str | None = None

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"Transaction amount must be non-negative, got {self.amount}")

    @property
    def is_expense(self) -> bool:
        return self.kind is TransactionKind.EXPENSE

    @property
    def is_income(self) -> bool:
        return self.kind is TransactionKind.INCOME

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the direction applied (negative for expenses)."""
        return -self.amount if self.is_expense else self.amount

    @property
    def month_key(self) -> tuple[int, int]:
        """(year, month) of the transaction date."""
        return (self.occurred_on.year, self.occurred_on.month)

    def __repr__(self) -> str:
        return (
            f"Transaction(id={self.id!r}, kind={self.kind.value}, "
            f"amount={self.amount}, date={self.occurred_on}, "
            f"category={self.category_name!r})"
        )
