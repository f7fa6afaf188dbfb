"""Keep report views current as a store changes.

LiveReport holds its own copy of the entries, applies each EntryChange the
store pushes, and rebuilds every view from that snapshot. It never diffs
views; rebuilding everything is cheap for one fiscal year of entries.
"""

from datetime import date
from typing import Callable, Dict, List, Optional

from .aggregator import dashboard, graph_series, monthly_breakdown
from .entries import EntryChange, EntryStore
from .schemas import Dashboard, Entry, GraphPoint, PeriodBreakdown, RateConfig


class LiveReport:
    """Dashboard, breakdown and graph views bound to a store.

    Args:
        store: Store to snapshot and subscribe to
        config: Rate settings used for valuation
        today: Reference date for the current-period window
        on_refresh: Optional callback invoked after every rebuild
    """

    def __init__(
        self,
        store: EntryStore,
        config: RateConfig,
        today: date,
        on_refresh: Optional[Callable[["LiveReport"], None]] = None,
    ):
        self.config = config
        self.today = today
        self.on_refresh = on_refresh
        self.dashboard: Optional[Dashboard] = None
        self.breakdown: List[PeriodBreakdown] = []
        self.graph: List[GraphPoint] = []

        self._snapshot: Dict[str, Entry] = {e.id: e for e in store.list()}
        self._unsubscribe = store.subscribe(self.apply)
        self.refresh()

    @property
    def entries(self) -> List[Entry]:
        return list(self._snapshot.values())

    def apply(self, change: EntryChange) -> None:
        """Fold one store change into the snapshot and rebuild."""
        if change.type == "removed":
            self._snapshot.pop(change.entry_id, None)
        else:
            self._snapshot[change.entry_id] = change.entry
        self.refresh()

    def set_config(self, config: RateConfig) -> None:
        self.config = config
        self.refresh()

    def set_today(self, today: date) -> None:
        self.today = today
        self.refresh()

    def refresh(self) -> None:
        """Rebuild all views from the current snapshot."""
        entries = self.entries
        self.dashboard = dashboard(entries, self.config, self.today)
        self.breakdown = monthly_breakdown(entries, self.config)
        self.graph = graph_series(entries, self.config)
        if self.on_refresh:
            self.on_refresh(self)

    def close(self) -> None:
        """Stop listening to the store."""
        self._unsubscribe()
