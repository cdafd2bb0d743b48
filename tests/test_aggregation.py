import math
import pytest
from models.aggregation import (
    compute_daily, compute_weekly, compute_monthly, format_date_short,
    goal_progress, progress_status, sum_periods, summarize, PROGRESS_CAP,
)

def _rec(date_iso, revenue=0.0, repeat=0.0, ads=0.0, new=0, ret=0, rid=None):
    return {
        "id": rid or date_iso,
        "date": date_iso,
        "new_customers": new,
        "revenue": revenue,
        "returning_customers": ret,
        "repeat_revenue": repeat,
        "ads_cost": ads,
    }

def _days(n):
    return [_rec(f"2024-01-{i + 1:02d}", revenue=10.0 + i, repeat=1.5, ads=4.25, new=i, ret=1) for i in range(n)]

def test_daily_orders_and_accumulates():
    out = compute_daily([
        _rec("2024-01-02", revenue=100, ads=40),
        _rec("2024-01-01", revenue=50, ads=10),
    ], goal=1000)
    assert [r["date"] for r in out] == ["2024-01-01", "2024-01-02"]
    assert [r["net_profit"] for r in out] == [40, 60]
    assert [r["cumulative_profit"] for r in out] == [40, 100]
    assert [r["progress_percent"] for r in out] == pytest.approx([4.0, 10.0])

def test_daily_ties_keep_input_order():
    recs = [_rec("2024-01-02", rid="a"), _rec("2024-01-01", rid="b"), _rec("2024-01-02", rid="c"), _rec("2024-01-01", rid="d")]
    out = compute_daily(recs)
    assert [r["id"] for r in out] == ["b", "d", "a", "c"]

def test_daily_prefix_sums_and_negative_profit():
    recs = [_rec("2024-01-01", revenue=10, ads=30), _rec("2024-01-02", revenue=5, repeat=2, ads=1), _rec("2024-01-03", ads=7)]
    out = compute_daily(recs)
    assert out[0]["net_profit"] == -20
    running = 0
    for r in out:
        assert r["net_profit"] == r["revenue"] + r["repeat_revenue"] - r["ads_cost"]
        running += r["net_profit"]
        assert r["cumulative_profit"] == pytest.approx(running)
    assert out[-1]["progress_percent"] < 0

def test_progress_capped_at_999_but_not_100():
    out = compute_daily([_rec("2024-01-01", revenue=5000), _rec("2024-01-02", revenue=50000)], goal=1000)
    assert out[0]["progress_percent"] == pytest.approx(500.0)
    assert out[1]["progress_percent"] == PROGRESS_CAP

def test_daily_does_not_mutate_input():
    recs = [_rec("2024-01-01", revenue=1)]
    compute_daily(recs)
    assert "net_profit" not in recs[0]

def test_empty_input_gives_empty_levels():
    daily = compute_daily([])
    weeks = compute_weekly(daily)
    assert daily == [] and weeks == [] and compute_monthly(weeks) == []

def test_ten_days_make_two_weeks_one_month():
    weeks = compute_weekly(compute_daily(_days(10)))
    assert [w["week_number"] for w in weeks] == [1, 2]
    assert weeks[0]["date_range"] == "Jan 1 – Jan 7"
    assert weeks[1]["date_range"] == "Jan 8 – Jan 10"
    assert weeks[0]["new_customers"] == sum(range(7))
    assert weeks[1]["returning_customers"] == 3
    months = compute_monthly(weeks)
    assert len(months) == 1
    assert months[0]["month"] == "Month 1" and months[0]["month_number"] == 1

@pytest.mark.parametrize("n", [1, 6, 7, 8, 27, 28, 29, 57])
def test_chunk_counts_and_sums(n):
    daily = compute_daily(_days(n))
    weeks = compute_weekly(daily)
    months = compute_monthly(weeks)
    assert len(weeks) == math.ceil(n / 7)
    assert len(months) == math.ceil(len(weeks) / 4)
    total = sum(r["net_profit"] for r in daily)
    assert sum(w["net_profit"] for w in weeks) == pytest.approx(total)
    assert sum(m["net_profit"] for m in months) == pytest.approx(total)

def test_month_equals_sum_of_its_weeks():
    weeks = compute_weekly(compute_daily(_days(35)))
    months = compute_monthly(weeks)
    for field in ("revenue", "ads_cost", "net_profit", "new_customers"):
        assert months[0][field] == sum(w[field] for w in weeks[:4])
        assert months[1][field] == weeks[4][field]

def test_single_record_week_range():
    weeks = compute_weekly(compute_daily([_rec("2024-03-05")]))
    assert weeks[0]["date_range"] == "Mar 5 – Mar 5"

def test_format_date_short_falls_back_to_raw():
    assert format_date_short("2024-12-25") == "Dec 25"
    assert format_date_short("not-a-date") == "not-a-date"

def test_sum_periods():
    weeks = compute_weekly(compute_daily(_days(9)))
    totals = sum_periods(weeks)
    assert totals["new_customers"] == sum(range(9))
    assert totals["revenue"] == pytest.approx(sum(10.0 + i for i in range(9)))

def test_progress_status_buckets():
    assert progress_status(100) == "met"
    assert progress_status(250) == "met"
    assert progress_status(50) == "on_track"
    assert progress_status(49.9) == "behind"
    assert goal_progress(1500, 1000) == 100.0
    assert goal_progress(-10, 1000) == 0.0

def test_summarize():
    daily = compute_daily([_rec("2024-01-01", revenue=100, repeat=20, ads=40, new=3, ret=1),
                           _rec("2024-01-02", revenue=200, ads=0, new=5)], goal=1000)
    s = summarize(daily, 1000)
    assert s["days_tracked"] == 2
    assert s["total_revenue"] == 320
    assert s["total_ads_cost"] == 40
    assert s["net_profit"] == 280
    assert s["total_customers"] == 9
    assert s["roas"] == pytest.approx(8.0)
    assert s["margin_percent"] == pytest.approx(87.5)
    assert s["avg_customers_per_day"] == 4.5
    assert s["goal_progress_percent"] == pytest.approx(28.0)
    assert s["goal_status"] == "behind"

def test_summarize_empty():
    s = summarize([])
    assert s["net_profit"] == 0 and s["roas"] is None and s["margin_percent"] == 0
