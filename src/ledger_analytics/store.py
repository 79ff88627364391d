"""Transaction store interface and the consumer-facing analytics service."""

import json
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol, TypeVar, runtime_checkable

import yaml

from ledger_analytics.config import Config
from ledger_analytics.models.filters import FilterSpec
from ledger_analytics.models.records import (
    CategoryRecord,
    ExpenseRecord,
    IncomeRecord,
    UserRecord,
)
from ledger_analytics.models.report import Report
from ledger_analytics.models.transaction import Transaction
from ledger_analytics.output.serializer import serialize
from ledger_analytics.processing.normalizer import Normalizer
from ledger_analytics.processing.report_generator import build_report
from ledger_analytics.utils.logging_config import get_logger

logger = get_logger(__name__)

R = TypeVar("R")


class StoreError(Exception):
    """Exception raised when a store snapshot cannot be read."""

    pass


@runtime_checkable
class TransactionStore(Protocol):
    """What the engine needs from the durable record store."""

    def list_expenses(self) -> list[ExpenseRecord]: ...

    def list_income(self) -> list[IncomeRecord]: ...

    def list_categories(self) -> list[CategoryRecord]: ...

    def list_users(self) -> list[UserRecord]: ...


def build_category_index(categories: Iterable[CategoryRecord]) -> dict[str, CategoryRecord]:
    """Key categories by id."""
    return {c.id: c for c in categories}


def build_user_index(users: Iterable[UserRecord]) -> dict[str, UserRecord]:
    """Key users by id."""
    return {u.id: u for u in users}


class SnapshotStore:
    """Read-only store backed by a JSON or YAML snapshot file.

    The file holds a mapping with the lists ``expenses``, ``income``,
    ``categories`` and ``users``; missing lists are empty. The file is read
    again whenever its modification time changes.
    """

    def __init__(self, path: Path):
        """Initialize snapshot store.

        Args:
            path: Snapshot file (.json, .yaml or .yml).
        """
        self.path = Path(path)
        self._data: dict[str, list[dict[str, object]]] = {}
        self._loaded_mtime: Optional[float] = None

    def revision(self) -> Optional[float]:
        """Modification time of the snapshot; unchanged means no new data."""
        try:
            return self.path.stat().st_mtime
        except OSError:
            return None

    def _load(self) -> dict[str, list[dict[str, object]]]:
        mtime = self.revision()
        if mtime is None:
            raise StoreError(f"Snapshot file not found: {self.path}")
        if self._loaded_mtime == mtime:
            return self._data

        try:
            with open(self.path, encoding="utf-8") as f:
                if self.path.suffix.lower() in (".yaml", ".yml"):
                    content = yaml.safe_load(f)
                else:
                    content = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise StoreError(f"Invalid snapshot {self.path}: {e}") from e

        content = content or {}
        if not isinstance(content, dict):
            raise StoreError(f"{self.path} must contain a mapping, got {type(content).__name__}")

        data: dict[str, list[dict[str, object]]] = {}
        for key in ("expenses", "income", "categories", "users"):
            rows = content.get(key) or []
            if not isinstance(rows, list):
                raise StoreError(f"'{key}' in {self.path} must be a list")
            data[key] = rows

        self._data = data
        self._loaded_mtime = mtime
        logger.info(
            f"Loaded snapshot {self.path}: {len(data['expenses'])} expenses, "
            f"{len(data['income'])} income, {len(data['categories'])} categories, "
            f"{len(data['users'])} users"
        )
        return data

    def _rows(self, key: str, factory: Callable[[dict[str, object]], R]) -> list[R]:
        try:
            return [factory(row) for row in self._load()[key]]
        except (KeyError, TypeError, AttributeError) as e:
            raise StoreError(f"Malformed {key} entry in {self.path}: {e}") from e

    def list_expenses(self) -> list[ExpenseRecord]:
        return self._rows("expenses", ExpenseRecord.from_dict)

    def list_income(self) -> list[IncomeRecord]:
        return self._rows("income", IncomeRecord.from_dict)

    def list_categories(self) -> list[CategoryRecord]:
        return self._rows("categories", CategoryRecord.from_dict)

    def list_users(self) -> list[UserRecord]:
        return self._rows("users", UserRecord.from_dict)


class AnalyticsService:
    """Builds reports from a store snapshot.

    Transactions are normalized afresh for each request. When the store
    exposes ``revision()`` and it has not changed since the previous
    request, the previous transactions are reused.
    """

    def __init__(self, store: TransactionStore, config: Optional[Config] = None):
        """Initialize the service.

        Args:
            store: Record store to read from.
            config: Application configuration.
        """
        self.store = store
        self.config = config or Config()
        self._cached_revision: object = None
        self._cached: Optional[tuple[tuple[Transaction, ...], dict[str, UserRecord]]] = None
        self.skipped_records = 0

    def _snapshot(self) -> tuple[tuple[Transaction, ...], dict[str, UserRecord]]:
        revision_fn = getattr(self.store, "revision", None)
        revision = revision_fn() if callable(revision_fn) else None

        if revision is not None and self._cached is not None and revision == self._cached_revision:
            logger.debug(f"Store revision {revision} unchanged, reusing transactions")
            return self._cached

        category_index = build_category_index(self.store.list_categories())
        user_index = build_user_index(self.store.list_users())
        normalizer = Normalizer(self.config.analytics)
        transactions = tuple(
            normalizer.normalize(
                self.store.list_expenses(),
                self.store.list_income(),
                category_index,
                user_index,
            )
        )
        self.skipped_records = len(normalizer.skipped)

        snapshot = (transactions, user_index)
        if revision is not None:
            self._cached_revision = revision
            self._cached = snapshot
        return snapshot

    def build_report(self, spec: Optional[FilterSpec] = None, now: Optional[datetime] = None) -> Report:
        """Build a report for a filter from the current store contents.

        Args:
            spec: Filter to apply.
            now: Evaluation instant (default: current time).

        Returns:
            The Report.

        Raises:
            InvalidFilterRangeError: If the filter has an inverted range.
        """
        spec = spec or FilterSpec()
        spec.validate()
        transactions, user_index = self._snapshot()
        return build_report(
            transactions,
            spec,
            now=now,
            config=self.config.analytics,
            user_index=user_index,
        )

    def serialize(self, report: Report, fmt: str = "json") -> str:
        """Serialize a report as "json" or "csv"."""
        return serialize(report, fmt, self.config.output)
