"""
Entry storage for overtime/allowance entries.

CLI and MCP tools should be thin wrappers that call these functions.

Two stores share one interface:

- FileEntryStore: one JSON file per entry under <data_dir>/entries/.
  Synchronous; the default for the CLI.
- MemoryEntryStore: in-process store. Used by tests and as the stand-in
  for a remote document store that pushes change notifications.

Both push an EntryChange (added / modified / removed) to subscribers after
every successful write, so a caller can replace its entry snapshot and
re-run aggregation (see live.py). Stores never compute pay.

Empty entries (no hours, no allowance, blank reason and comments) are not
saved: save_entry() returns None without touching the store.
"""

import json
import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Literal, Optional

from pydantic import ValidationError

from .config import get_data_path
from .schemas import Entry

# Configure logging based on LOG_LEVEL environment variable
_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.INFO),
    format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
    datefmt="%H:%M:%S"
)
logger = logging.getLogger(__name__)

ChangeType = Literal["added", "modified", "removed"]


class EntryStoreError(Exception):
    """Raised when the store cannot read or write entries."""
    pass


class EntryNotFoundError(EntryStoreError):
    """Raised when updating an entry id that does not exist."""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Entry not found: {entry_id}")


@dataclass
class EntryChange:
    """One delta pushed to store subscribers."""

    type: ChangeType
    entry_id: str
    entry: Optional[Entry]  # None for "removed"


Subscriber = Callable[[EntryChange], None]


def _new_entry_id() -> str:
    return uuid.uuid4().hex[:8]


class EntryStore:
    """Base class: CRUD over entries plus change subscriptions."""

    def __init__(self):
        self._subscribers: List[Subscriber] = []

    def list(self) -> List[Entry]:
        raise NotImplementedError

    def get(self, entry_id: str) -> Optional[Entry]:
        raise NotImplementedError

    def create(self, entry: Entry) -> str:
        raise NotImplementedError

    def update(self, entry_id: str, entry: Entry) -> bool:
        raise NotImplementedError

    def delete(self, entry_id: str) -> bool:
        raise NotImplementedError

    def clear(self) -> int:
        """Delete every entry.

        Returns:
            Number of entries deleted
        """
        count = 0
        for entry in self.list():
            if self.delete(entry.id):
                count += 1
        return count

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register callback for change notifications.

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, change: EntryChange) -> None:
        for callback in list(self._subscribers):
            callback(change)


class MemoryEntryStore(EntryStore):
    """Entries held in a dict, in creation order."""

    def __init__(self, entries: Optional[List[Entry]] = None):
        super().__init__()
        self._entries: Dict[str, Entry] = {}
        for entry in entries or []:
            entry_id = entry.id or self._unused_id()
            self._entries[entry_id] = entry.model_copy(update={"id": entry_id})

    def _unused_id(self) -> str:
        entry_id = _new_entry_id()
        while entry_id in self._entries:
            entry_id = _new_entry_id()
        return entry_id

    def list(self) -> List[Entry]:
        return list(self._entries.values())

    def get(self, entry_id: str) -> Optional[Entry]:
        return self._entries.get(entry_id)

    def create(self, entry: Entry) -> str:
        entry_id = self._unused_id()
        stored = entry.model_copy(update={"id": entry_id})
        self._entries[entry_id] = stored
        self._notify(EntryChange("added", entry_id, stored))
        return entry_id

    def update(self, entry_id: str, entry: Entry) -> bool:
        if entry_id not in self._entries:
            return False
        stored = entry.model_copy(update={"id": entry_id})
        self._entries[entry_id] = stored
        self._notify(EntryChange("modified", entry_id, stored))
        return True

    def delete(self, entry_id: str) -> bool:
        if self._entries.pop(entry_id, None) is None:
            return False
        self._notify(EntryChange("removed", entry_id, None))
        return True


class FileEntryStore(EntryStore):
    """One JSON file per entry: {"meta": {...}, "data": {...}}.

    The file stem is the entry id. Files that fail to parse are skipped
    with a warning rather than breaking list().
    """

    def __init__(self, root: Path):
        super().__init__()
        self.root = Path(root)

    def _path(self, entry_id: str) -> Path:
        return self.root / f"{entry_id}.json"

    def _read(self, path: Path) -> Optional[Dict]:
        try:
            with open(path) as f:
                record = json.load(f)
            entry = Entry.model_validate({**(record.get("data") or {}), "id": path.stem})
        except (json.JSONDecodeError, OSError, ValidationError, AttributeError) as e:
            logger.warning(f"Skipping unreadable entry file {path.name}: {e}")
            return None
        return {"meta": record.get("meta") or {}, "entry": entry}

    def _write(self, entry_id: str, entry: Entry, meta: Dict) -> None:
        path = self._path(entry_id)
        record = {"meta": meta, "data": entry.to_record()}
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                json.dump(record, f, indent=2)
        except OSError as e:
            raise EntryStoreError(f"Cannot write entry {entry_id}: {e}") from e

    def list(self) -> List[Entry]:
        if not self.root.exists():
            return []

        loaded = []
        for json_file in self.root.glob("*.json"):
            item = self._read(json_file)
            if item:
                loaded.append(item)

        # Sort by entry date, then creation time, for a stable listing
        loaded.sort(key=lambda item: (item["entry"].date, str(item["meta"].get("created_at", "")), item["entry"].id))
        return [item["entry"] for item in loaded]

    def get(self, entry_id: str) -> Optional[Entry]:
        path = self._path(entry_id)
        if not path.exists():
            return None
        item = self._read(path)
        return item["entry"] if item else None

    def create(self, entry: Entry) -> str:
        entry_id = _new_entry_id()
        while self._path(entry_id).exists():
            entry_id = _new_entry_id()

        self._write(entry_id, entry, {"created_at": datetime.now().isoformat()})
        stored = entry.model_copy(update={"id": entry_id})
        logger.debug(f"created entry {entry_id} ({entry.date})")
        self._notify(EntryChange("added", entry_id, stored))
        return entry_id

    def update(self, entry_id: str, entry: Entry) -> bool:
        path = self._path(entry_id)
        if not path.exists():
            return False

        existing = self._read(path)
        meta = dict(existing["meta"]) if existing else {}
        meta["updated_at"] = datetime.now().isoformat()

        self._write(entry_id, entry, meta)
        stored = entry.model_copy(update={"id": entry_id})
        logger.debug(f"updated entry {entry_id}")
        self._notify(EntryChange("modified", entry_id, stored))
        return True

    def delete(self, entry_id: str) -> bool:
        path = self._path(entry_id)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise EntryStoreError(f"Cannot delete entry {entry_id}: {e}") from e

        logger.debug(f"deleted entry {entry_id}")
        self._notify(EntryChange("removed", entry_id, None))
        return True


def get_entries_dir() -> Path:
    """Entries directory under the configured data path."""
    return get_data_path() / "entries"


def default_store() -> FileEntryStore:
    """File store at the configured data directory."""
    return FileEntryStore(get_entries_dir())


def save_entry(store: EntryStore, entry: Entry) -> Optional[str]:
    """Create or update an entry, skipping empty ones.

    Args:
        store: Target store
        entry: Entry to save; id None creates, otherwise updates in place

    Returns:
        The entry id, or None if the entry was empty and nothing was saved

    Raises:
        EntryNotFoundError: If entry.id is set but not in the store
        EntryStoreError: If the store cannot write
    """
    if entry.is_empty:
        logger.debug(f"not saving empty entry for {entry.date}")
        return None

    if entry.id is None:
        return store.create(entry)

    if not store.update(entry.id, entry):
        raise EntryNotFoundError(entry.id)
    return entry.id
