"""CSV export/import for the daily sheet.

Export writes the computed daily rows; import reads back only the raw
columns (date through ads cost) and leaves derived columns to be recomputed.
"""
import csv
import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, NamedTuple, Optional, Union

from utils.coerce import clean_date, to_count, to_number
from models.records import RecordStore, generate_id

LOG = logging.getLogger(__name__)

HEADERS = [
    "Date", "New Customers", "Revenue", "Returning Customers", "Repeat Revenue",
    "Ads Cost", "Net Profit", "Cumulative Profit", "Progress %",
]


class ImportFormatError(ValueError):
    pass


class ImportResult(NamedTuple):
    records: List[Dict]
    dropped: int


def _count(value) -> str:
    num = to_number(value)
    return str(int(num)) if num == int(num) else str(num)

def fixed(value, places: int) -> str:
    """Fixed-point text with exact ties rounded away from zero (10.125 -> '10.13')."""
    num = to_number(value) or 0.0
    return str(Decimal(num).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))

def export_row(r: Dict) -> List[str]:
    return [
        r["date"],
        _count(r["new_customers"]),
        fixed(r["revenue"], 2),
        _count(r["returning_customers"]),
        fixed(r["repeat_revenue"], 2),
        fixed(r["ads_cost"], 2),
        fixed(r["net_profit"], 2),
        fixed(r["cumulative_profit"], 2),
        fixed(r["progress_percent"], 1) + "%",
    ]

def export_csv(computed: List[Dict]) -> str:
    lines = [",".join(HEADERS)]
    lines.extend(",".join(export_row(r)) for r in computed)
    return "\n".join(lines)

def export_filename(today: Optional[date] = None, prefix: str = "financial-tracker") -> str:
    today = today or date.today()
    return f"{prefix}-{today.isoformat()}.csv"

def _column(cols: List[str], i: int):
    return cols[i] if i < len(cols) else None

def parse_csv(text: Union[str, bytes]) -> ImportResult:
    """Parse a CSV document into raw records; the first line is the header.

    Rows without a date are dropped. Any structural problem fails the whole
    document with ImportFormatError.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ImportFormatError(f"File is not UTF-8 text: {e}") from e
    if not isinstance(text, str):
        raise ImportFormatError("Expected CSV text.")
    text = text.lstrip("\ufeff")

    lines = text.strip().split("\n")[1:]
    records, dropped = [], 0
    try:
        for line in lines:
            # one reader per line so a stray quote cannot swallow later rows
            cols = next(csv.reader([line.rstrip("\r")]), [])
            row_date = clean_date(_column(cols, 0))
            if not row_date:
                dropped += 1
                continue
            records.append({
                "id": generate_id("import-"),
                "date": row_date,
                "new_customers": to_count(_column(cols, 1)),
                "revenue": to_number(_column(cols, 2)),
                "returning_customers": to_count(_column(cols, 3)),
                "repeat_revenue": to_number(_column(cols, 4)),
                "ads_cost": to_number(_column(cols, 5)),
            })
    except csv.Error as e:
        raise ImportFormatError(f"Malformed CSV: {e}") from e
    return ImportResult(records, dropped)

def import_csv(store: RecordStore, text: Union[str, bytes]) -> ImportResult:
    """Append parsed rows to the store; the store is untouched on failure."""
    result = parse_csv(text)
    if result.records:
        store.extend(result.records)
    if result.dropped:
        LOG.info("Dropped %d CSV rows without a date", result.dropped)
    LOG.info("Imported %d records from CSV", len(result.records))
    return result
