import logging
import uuid
from datetime import date
from typing import Dict, List, Optional

from utils.coerce import clean_date, to_count, to_number
from utils.file_manager import RECORDS_KEY, goal_amount, load_records, save_records
from models.aggregation import compute_daily, compute_monthly, compute_weekly

LOG = logging.getLogger(__name__)

COUNT_FIELDS = ("new_customers", "returning_customers")
AMOUNT_FIELDS = ("revenue", "repeat_revenue", "ads_cost")
EDITABLE_FIELDS = ("date",) + COUNT_FIELDS + AMOUNT_FIELDS


class RecordNotFound(KeyError):
    pass


def generate_id(prefix: str = "") -> str:
    return f"{prefix}{uuid.uuid4().hex}"

def _coerce_field(field: str, value):
    if field in COUNT_FIELDS:
        return to_count(value)
    if field in AMOUNT_FIELDS:
        return to_number(value)
    return clean_date(value)

def normalize_record(data: Dict, record_id: Optional[str] = None) -> Dict:
    """Build a raw daily record from loose input; bad numbers become 0."""
    rec = {"id": record_id or data.get("id") or generate_id()}
    for field in EDITABLE_FIELDS:
        rec[field] = _coerce_field(field, data.get(field))
    return rec


class RecordStore:
    """Owns the raw daily records; every mutation is saved immediately."""

    def __init__(self, key: str = RECORDS_KEY, records: Optional[List[Dict]] = None):
        self.key = key
        loaded = load_records(key) if records is None else records
        self._records = [normalize_record(r) for r in loaded]

    def __len__(self):
        return len(self._records)

    def _save(self):
        save_records(self._records, self.key)

    def _index(self, record_id: str) -> int:
        for i, r in enumerate(self._records):
            if r["id"] == record_id:
                return i
        raise RecordNotFound(record_id)

    def all(self) -> List[Dict]:
        return [dict(r) for r in self._records]

    def get(self, record_id: str) -> Dict:
        return dict(self._records[self._index(record_id)])

    def add(self, data: Dict) -> Dict:
        if not isinstance(data, dict):
            raise ValueError("A record must be an object of fields.")
        data = dict(data)
        if "date" not in data or data["date"] is None:
            data["date"] = date.today().isoformat()
        rec = normalize_record(data, record_id=generate_id())
        if not rec["date"]:
            raise ValueError("Provide a date for the record.")
        self._records.append(rec)
        self._save()
        return dict(rec)

    def update(self, record_id: str, changes: Dict) -> Dict:
        i = self._index(record_id)
        if not isinstance(changes, dict):
            raise ValueError("Changes must be an object of fields.")
        for field in changes:
            if field not in EDITABLE_FIELDS:
                raise ValueError(f"Field cannot be edited: {field}")
        updated = dict(self._records[i])
        for field, value in changes.items():
            updated[field] = _coerce_field(field, value)
        if not updated["date"]:
            raise ValueError("Provide a date for the record.")
        self._records[i] = updated
        self._save()
        return dict(updated)

    def delete(self, record_id: str) -> Dict:
        rec = self._records.pop(self._index(record_id))
        self._save()
        return rec

    def extend(self, records: List[Dict]) -> int:
        new = [normalize_record(r) for r in records]
        self._records.extend(new)
        self._save()
        LOG.info("Appended %d records (%d total)", len(new), len(self._records))
        return len(new)

    def replace_all(self, records: List[Dict]):
        self._records = [normalize_record(r) for r in records]
        self._save()
        LOG.info("Replaced records with %d entries", len(self._records))

    def clear(self):
        self.replace_all([])

    # -------- Derived views (recomputed on every call) --------
    def computed(self, goal: Optional[float] = None) -> List[Dict]:
        return compute_daily(self._records, goal if goal is not None else goal_amount())

    def weekly(self, goal: Optional[float] = None) -> List[Dict]:
        return compute_weekly(self.computed(goal))

    def monthly(self, goal: Optional[float] = None) -> List[Dict]:
        return compute_monthly(self.weekly(goal))
