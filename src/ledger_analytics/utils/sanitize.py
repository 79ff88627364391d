"""Formula neutralization for text written to CSV files and workbooks."""

from typing import Iterable, Optional

# Leading characters that make spreadsheet tools treat a cell as a formula
# or a DDE call
FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r", "\n", "|")


def sanitize_for_csv(value: Optional[str]) -> Optional[str]:
    """Quote-prefix a name so spreadsheets display it instead of evaluating it.

    Only text that starts with one of FORMULA_PREFIXES changes; None and
    empty strings are returned as given.
    """
    if value and value.startswith(FORMULA_PREFIXES):
        return "'" + value
    return value


def sanitize_row(values: Iterable[object]) -> list[object]:
    """Apply sanitize_for_csv to the text cells of a row.

    Numbers and dates pass through unchanged, so a negative amount keeps
    its sign and stays numeric.
    """
    return [sanitize_for_csv(v) if isinstance(v, str) else v for v in values]
