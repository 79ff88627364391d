"""Exceptions raised by the analytics engine."""

from typing import Optional


class AnalyticsError(Exception):
    """Base class for analytics engine errors."""

    pass


class RecordError(AnalyticsError):
    """Exception raised when a stored record cannot be normalized.

    Record errors are recovered by the normalizer: the record is logged,
    skipped, and the report is still produced.
    """

    def __init__(self, message: str, record_id: Optional[object] = None):
        """Initialize RecordError.

        Args:
            message: Error message.
            record_id: Identifier of the offending record, if known.
        """
        self.record_id = record_id
        super().__init__(message)


class KindInvalidError(RecordError):
    """Exception raised when a record cannot be classified as expense or income."""

    pass


class InvalidFilterRangeError(AnalyticsError):
    """Exception raised when a filter range has its lower bound above its upper bound.

    Raised before any aggregation runs; no partial report is produced.
    """

    def __init__(self, axis: str, low: object, high: object):
        """Initialize InvalidFilterRangeError.

        Args:
            axis: Name of the filter axis ("amount" or "date").
            low: The lower bound supplied.
            high: The upper bound supplied.
        """
        self.axis = axis
        self.low = low
        self.high = high
        super().__init__(f"Invalid {axis} range: minimum {low} is greater than maximum {high}")
