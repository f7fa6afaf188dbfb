"""Tests for the MCP tools (requires the 'mcp' extra)."""

import asyncio
import json

import pytest

pytest.importorskip("mcp")

from otcalc.mcp import server  # noqa: E402
from otcalc.sdk.config import save_rate_config  # noqa: E402
from otcalc.sdk.rate_config import set_rank  # noqa: E402
from otcalc.sdk.schemas import Rank, RateConfig  # noqa: E402


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Isolated config and data directories with a Sergeant profile."""
    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"
    config_dir.mkdir()

    monkeypatch.setenv("OT_CALC_CONFIG_PATH", str(config_dir))
    (config_dir / "settings.json").write_text(json.dumps({"data_dir": str(data_dir)}))
    save_rate_config(set_rank(RateConfig(), Rank.SERGEANT, "Sgt - Point 1"))

    return {"config_dir": config_dir, "data_dir": data_dir}


def add(entry_date, reason="", hours_133=0, hours_150=0, hours_200=0, allowance="None", comments=""):
    return asyncio.run(server.add_entry(
        entry_date=entry_date,
        reason=reason,
        hours_133=hours_133,
        hours_150=hours_150,
        hours_200=hours_200,
        allowance=allowance,
        comments=comments,
    ))


class TestEntryTools:
    """add_entry / list_entries / delete_entry"""

    def test_add_and_list(self, isolated_env):
        result = add("2026-02-09", reason="Arrest", hours_133=4)
        assert result["saved"] is True
        assert result["in_fiscal_year"] is True

        listed = asyncio.run(server.list_entries(fy_only=False, limit=100))
        assert listed["count"] == 1
        assert listed["entries"][0]["id"] == result["id"]
        assert listed["entries"][0]["gross"] == pytest.approx(131.784)
        assert listed["entries"][0]["net"] == pytest.approx(79.0704)

    def test_add_empty_not_saved(self, isolated_env):
        result = add("2026-02-09")
        assert result["saved"] is False
        assert asyncio.run(server.list_entries(fy_only=False, limit=100))["count"] == 0

    def test_add_bad_date_returns_error(self, isolated_env):
        result = add("not-a-date", hours_133=1)
        assert "error" in result
        assert result["saved"] is False

    def test_list_limit_and_fy_filter(self, isolated_env):
        add("2026-04-01", hours_133=1)
        add("2026-04-02", hours_133=1)
        add("2025-01-01", hours_133=1)

        limited = asyncio.run(server.list_entries(fy_only=False, limit=1))
        assert limited["count"] == 1
        assert limited["total_available"] == 3

        in_fy = asyncio.run(server.list_entries(fy_only=True, limit=100))
        assert in_fy["count"] == 2

    def test_delete(self, isolated_env):
        entry_id = add("2026-04-01", reason="Court")["id"]
        assert asyncio.run(server.delete_entry(entry_id=entry_id)) == {"deleted": True, "id": entry_id}

        missing = asyncio.run(server.delete_entry(entry_id=entry_id))
        assert missing["deleted"] is False
        assert "Entry not found" in missing["error"]


class TestReportTools:
    """get_dashboard / get_breakdown / get_graph"""

    def test_dashboard(self, isolated_env):
        add("2026-02-09", hours_133=4)
        data = asyncio.run(server.get_dashboard(today="2026-02-09"))
        assert data["totals"]["gross_overtime"] == pytest.approx(131.784)
        assert data["window"]["previous"] is None
        assert data["window"]["current"]["label"] == "April 2026"

    def test_dashboard_bad_date(self, isolated_env):
        assert "error" in asyncio.run(server.get_dashboard(today="soon"))

    def test_breakdown_excludes_entries_by_default(self, isolated_env):
        add("2026-02-09", hours_133=4, allowance="PA1")
        periods = asyncio.run(server.get_breakdown(include_entries=False))["periods"]
        assert len(periods) == 12
        assert "entries" not in periods[0]
        assert periods[0]["allowance_counts"]["PA1"] == 1

        detailed = asyncio.run(server.get_breakdown(include_entries=True))["periods"]
        assert len(detailed[0]["entries"]) == 1

    def test_graph(self, isolated_env):
        add("2026-02-09", hours_133=4, allowance="PA3")
        points = asyncio.run(server.get_graph())["points"]
        assert points[0]["gross_overtime"] == pytest.approx(131.784)
