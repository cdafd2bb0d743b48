"""
Local MCP server for the financial tracker.

This exposes the tracker's record store and its daily, weekly and monthly
roll-ups as Model Context Protocol tools using FastMCP. The tools read and
write the same JSON files in `data/` as the Flask app.
"""
import json
import logging
from typing import Any, Dict

from fastmcp import FastMCP

from utils.file_manager import ensure_defaults, goal_amount, log_level
from models.records import RecordStore
from models.aggregation import sum_periods, summarize
from models.csv_codec import ImportFormatError, export_csv, import_csv
from sample_data import load_sample

LOG = logging.getLogger(__name__)

server_instructions = """
This MCP server provides access to a small business financial tracker. It can
list daily records with running profit and goal progress, weekly and monthly
roll-ups, overall KPIs, and can add records or import/export CSV.
"""

def _text(payload: Any) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": json.dumps(payload)}]}

def _parse_arg(arg: str) -> Dict[str, Any]:
    data = json.loads(arg) if arg and arg.strip() else {}
    if not isinstance(data, dict):
        raise ValueError("Argument must be a JSON object")
    return data

def create_server(store: RecordStore = None) -> FastMCP:
    ensure_defaults()
    store = store if store is not None else RecordStore()
    mcp = FastMCP(name="Financial Tracker Local MCP", instructions=server_instructions)

    @mcp.tool()
    async def daily_records() -> Dict[str, Any]:
        """
        Return every daily record in date order with derived fields.

        Each record carries `net_profit`, `cumulative_profit` and
        `progress_percent` (capped at 999) computed from the current goal.

        Returns:
            MCP content array with JSON: {"daily": [...]}
        """
        return _text({"daily": store.computed()})

    @mcp.tool()
    async def weekly_summaries() -> Dict[str, Any]:
        """
        Return 7-record weekly roll-ups and a totals row.

        Weeks are consecutive chunks of seven records in date order, not
        calendar weeks; the last week may be shorter.
        """
        weeks = store.weekly()
        return _text({"weekly": weeks, "totals": sum_periods(weeks)})

    @mcp.tool()
    async def monthly_summaries() -> Dict[str, Any]:
        """Return 4-week monthly roll-ups and a totals row."""
        months = store.monthly()
        return _text({"monthly": months, "totals": sum_periods(months)})

    @mcp.tool()
    async def summary() -> Dict[str, Any]:
        """
        Return dashboard KPIs: revenue, ad spend, profit, customers, ROAS,
        margin and progress toward the profit goal.
        """
        goal = goal_amount()
        return _text({"summary": summarize(store.computed(goal), goal)})

    @mcp.tool()
    async def add_record(arg: str) -> Dict[str, Any]:
        """
        Add one daily record.

        The `arg` parameter is a JSON object such as
        {"date": "2024-01-01", "new_customers": 5, "revenue": 120,
         "returning_customers": 2, "repeat_revenue": 30, "ads_cost": 40}.
        Missing or non-numeric amounts are stored as 0; a missing date
        means today.

        Returns:
            MCP content array with {"record": {...}} or {"error": "..."}.
        """
        try:
            rec = store.add(_parse_arg(arg))
        except ValueError as e:
            return _text({"error": str(e)})
        return _text({"record": rec})

    @mcp.tool()
    async def export_csv_tool() -> Dict[str, Any]:
        """Return the daily sheet as CSV text under the `csv` key."""
        return _text({"csv": export_csv(store.computed())})

    @mcp.tool()
    async def import_csv_tool(text: str) -> Dict[str, Any]:
        """
        Append records parsed from CSV text (header row first).

        Only the date and the five raw metric columns are read; rows without a
        date are skipped. A malformed document imports nothing.

        Returns:
            MCP content array with {"imported": N, "dropped": M} or {"error": "..."}.
        """
        try:
            result = import_csv(store, text)
        except ImportFormatError as e:
            return _text({"error": str(e)})
        return _text({"imported": len(result.records), "dropped": result.dropped})

    @mcp.tool()
    async def load_sample_data(arg: str = None) -> Dict[str, Any]:
        """
        Replace all records with generated sample data.

        The `arg` may be empty or a JSON object like {"days": 30}.
        """
        try:
            data = _parse_arg(arg)
            days = int(data["days"]) if "days" in data else None
            count = load_sample(store, days)
        except (TypeError, ValueError) as e:
            return _text({"error": str(e)})
        return _text({"loaded": count})

    @mcp.tool()
    async def clear_records() -> Dict[str, Any]:
        """Delete every record."""
        store.clear()
        return _text({"ok": True})

    return mcp


def main():
    logging.basicConfig(level=log_level())
    server = create_server()
    LOG.info("Starting local MCP server on 0.0.0.0:8000 (HTTP)")
    server.run(transport="http", host="0.0.0.0", port=8000, path="/mcp")


if __name__ == "__main__":
    main()
