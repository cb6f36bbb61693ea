# app/utils/csv_export.py
import csv
import io
import datetime
from typing import Iterable, Optional, Sequence


def format_timestamp(value: Optional[datetime.datetime]) -> str:
    return value.isoformat() if value else ""


def rows_to_csv(rows: Iterable[Sequence]) -> str:
    """Every field is quoted and embedded quotes are doubled; None becomes an empty field."""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow(["" if value is None else value for value in row])
    return output.getvalue()
