import logging
import random
from datetime import date, timedelta
from typing import Dict, List, Optional

from utils.file_manager import get_config
from models.records import RecordStore, generate_id

LOG = logging.getLogger(__name__)

def _sample_day(rng: random.Random, day: date) -> Dict:
    return {
        "id": generate_id("sample-"),
        "date": day.isoformat(),
        "new_customers": rng.randint(2, 16),
        "revenue": round(rng.uniform(20, 100), 2),
        "returning_customers": rng.randint(0, 7),
        "repeat_revenue": round(rng.uniform(0, 40), 2),
        "ads_cost": round(rng.uniform(10, 60), 2),
    }

def generate_sample(days: int = 30, end: Optional[date] = None, rng: Optional[random.Random] = None) -> List[Dict]:
    """Consecutive days of plausible metrics ending at `end` (today by default)."""
    rng = rng or random.Random()
    end = end or date.today()
    start = end - timedelta(days=days - 1)
    return [_sample_day(rng, start + timedelta(days=i)) for i in range(days)]

def load_sample(store: RecordStore, days: Optional[int] = None, rng: Optional[random.Random] = None) -> int:
    """Replace everything in the store with freshly generated sample data."""
    if days is None:
        days = int(get_config()["sample_data"].get("days", 30))
    if days < 1 or days > 366:
        raise ValueError("days must be between 1 and 366")
    records = generate_sample(days, rng=rng)
    store.replace_all(records)
    LOG.info("Loaded %d days of sample data", days)
    return len(records)
