import math
import numbers
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from app.models.financials import FinancialData
from app.services.column_matcher import match_columns
from app.utils.logger import logger

# Characters removed from textual amounts before parsing.
_STRIP_PATTERN = re.compile(r"[€$£¥₹,\s()]")
# Leading numeric prefix, read the way a lenient float parser does ("12abc" -> 12).
_NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

# A value more than this many times larger (in magnitude) than the last one
# replaces it. Observed heuristic, not validated business logic.
OUTLIER_FACTOR = 2


def parse_cell(value: Any) -> Optional[float]:
    """Coerce one spreadsheet cell to a float, or None if it holds no number."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, numbers.Real):
        number = float(value)
        return number if math.isfinite(number) else None

    if isinstance(value, str):
        match = _NUMBER_PREFIX.match(_STRIP_PATTERN.sub("", value))
        if not match:
            return None
        number = float(match.group(0))
        if not math.isfinite(number):
            return None
        # Accounting convention: (500) is -500
        if "(" in value and ")" in value:
            number = -number
        return number

    return None


def extract_value(rows: Sequence[Mapping[str, Any]], column: str) -> Optional[float]:
    """
    Pick one representative number from a column.

    The last parseable value is taken as the most recent one, unless another
    value's magnitude exceeds OUTLIER_FACTOR times the last value's, in which
    case the largest-magnitude value wins.
    """
    values: List[float] = []
    for row in rows:
        number = parse_cell(row.get(column))
        if number is not None:
            values.append(number)

    if not values:
        return None
    if len(values) == 1:
        return values[0]

    last_value = values[-1]
    max_abs_value = max(values, key=abs)
    if abs(max_abs_value) > abs(last_value) * OUTLIER_FACTOR:
        return max_abs_value
    return last_value


def match_and_extract(headers: Sequence[str], rows: Sequence[Mapping[str, Any]]) -> FinancialData:
    """Match headers to canonical fields and extract one value per matched field."""
    metrics: Dict[str, Optional[float]] = {}
    for field, column in match_columns(headers).items():
        if column is None:
            metrics[field] = None
            continue
        metrics[field] = extract_value(rows, column)
        logger.info(f"💰 Metric match: {field} -> {column} = {metrics[field]}")
    return FinancialData(**metrics)
