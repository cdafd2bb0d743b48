from datetime import datetime
from typing import Dict, List, Optional

WEEK_SIZE = 7
MONTH_SIZE = 4
PROGRESS_CAP = 999.0
DEFAULT_GOAL = 1000.0

SUM_FIELDS = ("new_customers", "revenue", "returning_customers", "repeat_revenue", "ads_cost", "net_profit")
COUNT_FIELDS = ("new_customers", "returning_customers")

def net_profit(record: Dict) -> float:
    return (record.get("revenue") or 0) + (record.get("repeat_revenue") or 0) - (record.get("ads_cost") or 0)

def compute_daily(records: List[Dict], goal: Optional[float] = None) -> List[Dict]:
    """Sort records by date and attach net, cumulative profit and goal progress.

    Records sharing a date keep their input order (sorted() is stable).
    """
    goal = float(goal or DEFAULT_GOAL)
    cumulative = 0.0
    out = []
    for r in sorted(records, key=lambda r: r.get("date") or ""):
        net = net_profit(r)
        cumulative += net
        row = dict(r)
        row["net_profit"] = net
        row["cumulative_profit"] = cumulative
        row["progress_percent"] = min(cumulative / goal * 100, PROGRESS_CAP)
        out.append(row)
    return out

def _chunks(seq: List, size: int):
    for i in range(0, len(seq), size):
        yield i // size, seq[i:i + size]

def _sum_fields(rows: List[Dict]) -> Dict:
    totals = {}
    for f in SUM_FIELDS:
        totals[f] = sum((r.get(f) or 0) for r in rows)
        if f in COUNT_FIELDS:
            totals[f] = int(totals[f])
    return totals

def format_date_short(date_iso: str) -> str:
    """'2024-01-05' -> 'Jan 5'; unparseable dates are returned unchanged."""
    try:
        d = datetime.strptime(date_iso, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return date_iso or ""
    return f"{d.strftime('%b')} {d.day}"

def compute_weekly(computed: List[Dict]) -> List[Dict]:
    weeks = []
    for i, chunk in _chunks(computed, WEEK_SIZE):
        week = {"week_number": i + 1}
        week.update(_sum_fields(chunk))
        week["date_range"] = f"{format_date_short(chunk[0].get('date'))} – {format_date_short(chunk[-1].get('date'))}"
        weeks.append(week)
    return weeks

def compute_monthly(weeks: List[Dict]) -> List[Dict]:
    # sums of weekly sums, so a month always equals its weeks
    months = []
    for i, chunk in _chunks(weeks, MONTH_SIZE):
        month = {"month": f"Month {i + 1}", "month_number": i + 1}
        month.update(_sum_fields(chunk))
        months.append(month)
    return months

def sum_periods(summaries: List[Dict]) -> Dict:
    """Totals row across weekly or monthly summaries."""
    return _sum_fields(summaries)

# -------- Dashboard --------
def goal_progress(profit: float, goal: Optional[float] = None) -> float:
    goal = float(goal or DEFAULT_GOAL)
    return max(min(profit / goal * 100, 100.0), 0.0)

def progress_status(percent: float) -> str:
    # display bucket only, independent of PROGRESS_CAP
    if percent >= 100:
        return "met"
    if percent >= 50:
        return "on_track"
    return "behind"

def summarize(computed: List[Dict], goal: Optional[float] = None) -> Dict:
    goal = float(goal or DEFAULT_GOAL)
    days = len(computed)
    total_revenue = sum(r["revenue"] + r["repeat_revenue"] for r in computed)
    total_ads = sum(r["ads_cost"] for r in computed)
    profit = computed[-1]["cumulative_profit"] if computed else 0.0
    customers = sum(int(r["new_customers"]) + int(r["returning_customers"]) for r in computed)
    progress = goal_progress(profit, goal)
    return {
        "days_tracked": days,
        "total_revenue": total_revenue,
        "total_ads_cost": total_ads,
        "net_profit": profit,
        "total_customers": customers,
        "roas": total_revenue / total_ads if total_ads > 0 else None,
        "margin_percent": profit / total_revenue * 100 if total_revenue > 0 else 0.0,
        "avg_customers_per_day": customers / days if days else 0.0,
        "goal_amount": goal,
        "goal_progress_percent": progress,
        "goal_status": progress_status(progress),
    }
