"""Tests for LiveReport: views stay equal to a fresh aggregation after every change."""

from datetime import date

import pytest

from otcalc.sdk.aggregator import dashboard, graph_series, monthly_breakdown
from otcalc.sdk.entries import MemoryEntryStore
from otcalc.sdk.live import LiveReport
from otcalc.sdk.rate_config import set_rank, set_tax_rate
from otcalc.sdk.schemas import Entry, Rank, RateConfig

TODAY = date(2026, 3, 15)


@pytest.fixture
def config():
    return set_rank(RateConfig(), Rank.SERGEANT, "Sgt - Point 1")


def assert_matches_fresh(report, store):
    entries = store.list()
    assert report.dashboard == dashboard(entries, report.config, report.today)
    assert report.breakdown == monthly_breakdown(entries, report.config)
    assert report.graph == graph_series(entries, report.config)


class TestLiveReport:
    """Incremental store changes fold into the snapshot."""

    def test_initial_snapshot(self, config):
        store = MemoryEntryStore([Entry(date=date(2026, 2, 9), hours_133=4)])
        report = LiveReport(store, config, TODAY)
        assert report.breakdown[0].overtime_gross == pytest.approx(131.784)
        assert_matches_fresh(report, store)

    def test_tracks_add_edit_delete(self, config):
        store = MemoryEntryStore()
        report = LiveReport(store, config, TODAY)

        first = store.create(Entry(date=date(2026, 3, 10), hours_150=2))
        assert_matches_fresh(report, store)

        store.create(Entry(date=date(2026, 2, 20), allowance="PA2"))
        assert_matches_fresh(report, store)

        store.update(first, Entry(date=date(2026, 7, 1), hours_200=1))
        assert_matches_fresh(report, store)
        assert report.breakdown[1].hours_150 == 0

        store.delete(first)
        assert_matches_fresh(report, store)
        assert len(report.entries) == 1

    def test_set_config_and_today(self, config):
        store = MemoryEntryStore([Entry(date=date(2026, 6, 1), hours_133=1, allowance="PA1")])
        report = LiveReport(store, config, TODAY)

        report.set_config(set_tax_rate(config, 20))
        assert report.dashboard.tax_rate == 20
        assert_matches_fresh(report, store)

        report.set_today(date(2026, 6, 1))
        assert report.dashboard.window.current.label == "July 2026"
        assert_matches_fresh(report, store)

    def test_on_refresh_called(self, config):
        calls = []
        store = MemoryEntryStore()
        LiveReport(store, config, TODAY, on_refresh=calls.append)
        store.create(Entry(date=date(2026, 4, 1), reason="Court"))
        assert len(calls) == 2

    def test_close_stops_updates(self, config):
        store = MemoryEntryStore()
        report = LiveReport(store, config, TODAY)
        report.close()
        store.create(Entry(date=date(2026, 4, 1), hours_133=3))
        assert report.entries == []
        assert report.dashboard.totals.total_hours == 0
