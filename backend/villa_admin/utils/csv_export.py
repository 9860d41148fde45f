import csv
import io
from datetime import date, datetime
from typing import Iterable, List


def _cell(value):
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def to_csv(headers: List[str], rows: Iterable[Iterable]) -> str:
    """Render rows as CSV text; values with commas, quotes or newlines are quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_cell(value) for value in row])
    return buffer.getvalue()


def export_filename(prefix: str, day: date = None) -> str:
    return f"{prefix}-{(day or date.today()).isoformat()}.csv"
