"""Record normalizer converting stored expense/income rows into Transactions."""

from typing import Iterable, Mapping, Optional, Union

from ledger_analytics.config import AnalyticsConfig
from ledger_analytics.exceptions import KindInvalidError, RecordError
from ledger_analytics.models.records import (
    CategoryRecord,
    ExpenseRecord,
    IncomeRecord,
    UserRecord,
)
from ledger_analytics.models.transaction import Transaction, TransactionKind
from ledger_analytics.utils.date_utils import parse_date
from ledger_analytics.utils.decimal_utils import parse_amount
from ledger_analytics.utils.logging_config import get_logger

logger = get_logger(__name__)

StoreRecord = Union[ExpenseRecord, IncomeRecord]


class Normalizer:
    """Normalizes store records into the unified Transaction shape.

    The normalizer:
    - Resolves category and user references to display names
    - Falls back to the unknown label for missing references
    - Parses dates and amounts into date and Decimal
    - Skips and logs records that cannot be normalized

    Attributes:
        skipped: Records excluded by the last call to normalize().
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        """Initialize normalizer.

        Args:
            config: Analytics configuration (defaults apply when None).
        """
        self.config = config or AnalyticsConfig()
        self.skipped: list[RecordError] = []

    def normalize(
        self,
        expense_records: Iterable[ExpenseRecord],
        income_records: Iterable[IncomeRecord],
        category_index: Mapping[str, CategoryRecord],
        user_index: Mapping[str, UserRecord],
    ) -> list[Transaction]:
        """Normalize expense and income records.

        Expenses come first, then income, each in store order.

        Args:
            expense_records: Stored expense rows.
            income_records: Stored income rows.
            category_index: Categories keyed by id.
            user_index: Users keyed by id.

        Returns:
            List of Transactions. Records raising RecordError are left out
            and collected in self.skipped.
        """
        self.skipped = []
        transactions: list[Transaction] = []
        total = 0

        sources = (
            (TransactionKind.EXPENSE, expense_records),
            (TransactionKind.INCOME, income_records),
        )
        for kind, records in sources:
            for record in records:
                total += 1
                try:
                    transactions.append(
                        self._normalize_record(record, kind, category_index, user_index)
                    )
                except RecordError as e:
                    logger.warning(f"Skipping {kind.value} record {e.record_id!r}: {e}")
                    self.skipped.append(e)

        logger.info(f"Normalized {len(transactions)}/{total} records")
        return transactions

    def _normalize_record(
        self,
        record: StoreRecord,
        kind: TransactionKind,
        category_index: Mapping[str, CategoryRecord],
        user_index: Mapping[str, UserRecord],
    ) -> Transaction:
        """Normalize a single record.

        Args:
            record: Stored row.
            kind: Kind implied by the list the record came from.
            category_index: Categories keyed by id.
            user_index: Users keyed by id.

        Returns:
            Normalized Transaction.

        Raises:
            KindInvalidError: If the record declares a kind that is unknown
                or disagrees with the list it came from.
            RecordError: If the date or amount cannot be used.
        """
        record_id = "" if record.id is None else str(record.id)
        resolved_kind = self._resolve_kind(record, kind, record_id)

        try:
            amount = parse_amount(record.amount)
        except ValueError as e:
            raise RecordError(str(e), record_id) from e
        if amount < 0:
            raise RecordError(f"Negative amount {amount}", record_id)

        try:
            occurred_on = parse_date(record.date)
        except ValueError as e:
            raise RecordError(str(e), record_id) from e

        unknown = self.config.unknown_label
        category = category_index.get(record.category_id) if record.category_id else None
        user = user_index.get(record.user_id) if record.user_id else None

        return Transaction(
            id=record_id,
            kind=resolved_kind,
            amount=amount,
            occurred_on=occurred_on,
            category_name=category.name if category and category.name else unknown,
            user_name=user.name if user and user.name else unknown,
            department_name=user.department if user and user.department else unknown,
            description=record.description or "",
            source=getattr(record, "source", None),
            status=record.status,
        )

    @staticmethod
    def _resolve_kind(
        record: StoreRecord,
        list_kind: TransactionKind,
        record_id: str,
    ) -> TransactionKind:
        """Determine the kind of a record.

        Records normally carry no kind and take it from their list. A
        declared kind must name a known kind and agree with the list.
        """
        if record.kind is None or record.kind == "":
            return list_kind
        try:
            declared = TransactionKind(record.kind.lower())
        except ValueError:
            raise KindInvalidError(f"Unknown kind '{record.kind}'", record_id) from None
        if declared is not list_kind:
            raise KindInvalidError(
                f"Record declares kind '{declared.value}' but is listed as {list_kind.value}",
                record_id,
            )
        return declared


def normalize_records(
    expense_records: Iterable[ExpenseRecord],
    income_records: Iterable[IncomeRecord],
    category_index: Mapping[str, CategoryRecord],
    user_index: Mapping[str, UserRecord],
    config: Optional[AnalyticsConfig] = None,
) -> list[Transaction]:
    """Convenience function to normalize store records.

    Args:
        expense_records: Stored expense rows.
        income_records: Stored income rows.
        category_index: Categories keyed by id.
        user_index: Users keyed by id.
        config: Analytics configuration.

    Returns:
        List of normalized Transactions.
    """
    return Normalizer(config).normalize(expense_records, income_records, category_index, user_index)
