"""Observable key-value store shared by the engine and the reporting views.

Collections are keyed by record id and every write replaces the full record
(last write wins). Singleton values such as the ``currentSession`` pointer live
under plain keys. Readers receive deep copies, so a dashboard can never observe
a half-updated session.
"""

from __future__ import annotations

from collections.abc import Callable
import copy
import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[[str, Any], None]


class KeyValueStore:
    """In-memory store with change subscriptions and an optional JSON snapshot."""

    def __init__(self, data_file: Path | None = None) -> None:
        self._lock = Lock()
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._values: dict[str, Any] = {}
        self._listeners: dict[str, list[Listener]] = {}
        self._data_file = data_file

    # --- Singleton values ---

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            if key not in self._values:
                return default
            return copy.deepcopy(self._values[key])

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            if value is None:
                self._values.pop(key, None)
            else:
                self._values[key] = copy.deepcopy(value)
        self._notify(key, value)

    # --- Collections ---

    def get_record(self, collection: str, record_id: str) -> dict[str, Any] | None:
        with self._lock:
            record = self._collections.get(collection, {}).get(record_id)
            return None if record is None else copy.deepcopy(record)

    def put_record(self, collection: str, record_id: str, record: dict[str, Any]) -> None:
        """Replace the whole record stored under ``record_id``."""
        with self._lock:
            self._collections.setdefault(collection, {})[record_id] = copy.deepcopy(record)
        self._notify(collection, record)

    def delete_record(self, collection: str, record_id: str) -> None:
        with self._lock:
            removed = self._collections.get(collection, {}).pop(record_id, None)
        if removed is not None:
            self._notify(collection, None)

    def list_records(self, collection: str) -> list[dict[str, Any]]:
        with self._lock:
            return [copy.deepcopy(record) for record in self._collections.get(collection, {}).values()]

    # --- Subscriptions ---

    def subscribe(self, key: str, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for changes to a key or collection; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.setdefault(key, []).append(listener)

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(key, [])
                if listener in listeners:
                    listeners.remove(listener)

        return unsubscribe

    def _notify(self, key: str, value: Any) -> None:
        with self._lock:
            listeners = list(self._listeners.get(key, []))
        for listener in listeners:
            listener(key, copy.deepcopy(value))

    # --- Snapshot file ---

    def load(self) -> None:
        if self._data_file is None or not self._data_file.exists():
            return
        payload = json.loads(self._data_file.read_text(encoding="utf-8"))
        with self._lock:
            self._collections = {
                name: {str(record_id): record for record_id, record in records.items()}
                for name, records in payload.get("collections", {}).items()
            }
            self._values = dict(payload.get("values", {}))
        logger.info("Loaded store snapshot from %s", self._data_file)

    def save(self) -> None:
        if self._data_file is None:
            return
        with self._lock:
            payload = {"collections": self._collections, "values": self._values}
            document = json.dumps(payload, indent=2, ensure_ascii=False)
        self._data_file.parent.mkdir(parents=True, exist_ok=True)
        self._data_file.write_text(document, encoding="utf-8")
