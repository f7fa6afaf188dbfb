"""OT Calc MCP Server - FastMCP implementation for overtime entry tools."""

import json
import logging
from datetime import date
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from otcalc.sdk import (
    FY_END,
    FY_START,
    PAY_PERIODS,
    Entry,
    dashboard,
    default_store,
    find_period_index,
    graph_series,
    load_rate_config,
    monthly_breakdown,
    save_entry,
    valuate,
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("ot-calc")


# --- Tools ---

@mcp.tool()
async def list_entries(
    fy_only: bool = Field(default=False, description="Only entries dated inside the fiscal year"),
    limit: int = Field(default=100, description="Maximum number of entries to return (default 100)"),
) -> dict[str, Any]:
    """List overtime/allowance entries, oldest first, each with its gross and net pay."""
    try:
        config = load_rate_config()
        entries = default_store().list()
        if fy_only:
            entries = [e for e in entries if FY_START <= e.date <= FY_END]

        total_count = len(entries)
        formatted = []
        for entry in entries[:limit]:
            valuation = valuate(entry, config.rates, config.effective_tax_rate)
            formatted.append({
                **entry.model_dump(mode="json"),
                "period_index": find_period_index(entry.date),
                "gross": valuation.total_gross,
                "net": valuation.total_net,
            })

        return {
            "entries": formatted,
            "count": len(formatted),
            "total_available": total_count,
        }

    except Exception as e:
        logger.error(f"Error listing entries: {e}")
        return {"error": str(e), "entries": [], "count": 0}


@mcp.tool()
async def add_entry(
    entry_date: str = Field(description="Duty date (YYYY-MM-DD)"),
    reason: str = Field(default="", description="Reason / duty description"),
    hours_133: float = Field(default=0, description="Hours paid at 1.33x"),
    hours_150: float = Field(default=0, description="Hours paid at 1.5x"),
    hours_200: float = Field(default=0, description="Hours paid at 2.0x"),
    allowance: str = Field(default="None", description="Allowance code: None, PA1, PA2 or PA3"),
    comments: str = Field(default="", description="Additional details"),
) -> dict[str, Any]:
    """Record a new entry. Entries with no hours, allowance, reason or comments are not saved."""
    try:
        entry = Entry.model_validate({
            "date": entry_date,
            "reason": reason,
            "hours_133": hours_133,
            "hours_150": hours_150,
            "hours_200": hours_200,
            "allowance": allowance,
            "comments": comments,
        })
        entry_id = save_entry(default_store(), entry)
        if entry_id is None:
            return {"saved": False, "id": None, "reason": "entry is empty"}

        return {
            "saved": True,
            "id": entry_id,
            "entry": entry.model_dump(mode="json", exclude={"id"}),
            "in_fiscal_year": FY_START <= entry.date <= FY_END,
        }

    except Exception as e:
        logger.error(f"Error adding entry: {e}")
        return {"error": str(e), "saved": False}


@mcp.tool()
async def delete_entry(
    entry_id: str = Field(description="The 8-character entry ID (from list_entries)"),
) -> dict[str, Any]:
    """Delete an entry by ID."""
    try:
        deleted = default_store().delete(entry_id)
        if not deleted:
            return {"error": f"Entry not found: {entry_id}", "deleted": False}
        return {"deleted": True, "id": entry_id}

    except Exception as e:
        logger.error(f"Error deleting entry {entry_id}: {e}")
        return {"error": str(e), "deleted": False}


@mcp.tool()
async def get_dashboard(
    today: str | None = Field(default=None, description="Reference date (YYYY-MM-DD); defaults to today"),
) -> dict[str, Any]:
    """Fiscal-year totals plus gross/net for the previous, current and next pay months."""
    try:
        ref = date.fromisoformat(today) if today else date.today()
        data = dashboard(default_store().list(), load_rate_config(), ref)
        return data.model_dump(mode="json")

    except Exception as e:
        logger.error(f"Error building dashboard: {e}")
        return {"error": str(e)}


@mcp.tool()
async def get_breakdown(
    include_entries: bool = Field(default=False, description="Include the entry lines under each pay month"),
) -> dict[str, Any]:
    """Per-pay-month hours by tier, allowance counts, and gross/net pay for all twelve months."""
    try:
        periods = monthly_breakdown(default_store().list(), load_rate_config())
        exclude = None if include_entries else {"entries"}
        return {"periods": [p.model_dump(mode="json", exclude=exclude) for p in periods]}

    except Exception as e:
        logger.error(f"Error building breakdown: {e}")
        return {"error": str(e), "periods": []}


@mcp.tool()
async def get_graph() -> dict[str, Any]:
    """Overtime-only gross vs net per pay month (allowances excluded)."""
    try:
        points = graph_series(default_store().list(), load_rate_config())
        return {"points": [p.model_dump(mode="json") for p in points]}

    except Exception as e:
        logger.error(f"Error building graph series: {e}")
        return {"error": str(e), "points": []}


# --- Resources (optional, for browsing) ---

@mcp.resource("otcalc://periods")
async def list_periods_resource() -> str:
    """Pay months of the fiscal year with their date ranges."""
    try:
        periods = [p.model_dump(mode="json") for p in PAY_PERIODS]
        return json.dumps({"fiscal_year": {"start": str(FY_START), "end": str(FY_END)}, "periods": periods}, indent=2)
    except Exception as e:
        return json.dumps({"error": str(e)})


# --- Server Entry Point ---

def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
