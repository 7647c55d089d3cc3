"""
CSV export service.

Serializes table rows to delimited text with pandas. Quoting is minimal: a
field is wrapped in double quotes only when it contains a quote, a comma, a
carriage return or a line feed, and embedded quotes are doubled. Lines end
with CRLF as in RFC 4180. Row order is never changed.

File naming: {dataset}_{start}_to_{end}.csv
Media type: text/csv;charset=utf-8
"""

import csv
import logging
from datetime import date
from typing import Any, Mapping, Sequence, Union

import pandas as pd

from response_metrics.models.enums import ExportDataset
from response_metrics.services.formatter import Column, display_value


logger = logging.getLogger(__name__)


CSV_MEDIA_TYPE: str = "text/csv;charset=utf-8"

# fields containing CR or LF are quoted because both are in the terminator
LINE_TERMINATOR: str = "\r\n"


def to_delimited_text(rows: Sequence[Mapping[str, Any]], columns: Sequence[Column]) -> str:
    """
    Serialize rows to CSV text.

    Args:
        rows: Table rows keyed by column key. Missing keys export as empty.
        columns: (key, header label) pairs in output order.

    Returns:
        Header line plus one line per row, each terminated by CRLF. An
        empty string when there are no rows, so callers can skip the download
        instead of writing a header-only file.

    Example:
        >>> to_delimited_text([{'a': 'x,y'}], [('a', 'A')])
        'A\\r\\n"x,y"\\r\\n'
    """
    if not rows:
        return ""

    keys = [key for key, _ in columns]
    labels = [label for _, label in columns]
    records = [[display_value(row.get(key)) for key in keys] for row in rows]

    frame = pd.DataFrame(records, columns=labels, dtype=object)
    return frame.to_csv(
        index=False,
        lineterminator=LINE_TERMINATOR,
        quoting=csv.QUOTE_MINIMAL,
        doublequote=True,
    )


def export_filename(dataset: Union[ExportDataset, str], start: date, end: date) -> str:
    """
    Download filename for an export.

    Example:
        >>> export_filename(ExportDataset.EMPLOYEES, date(2024, 1, 1), date(2024, 1, 30))
        'employees_2024-01-01_to_2024-01-30.csv'
    """
    name = dataset.value if isinstance(dataset, ExportDataset) else str(dataset)
    return f"{name}_{start.isoformat()}_to_{end.isoformat()}.csv"
