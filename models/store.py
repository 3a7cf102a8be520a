"""
Flat-file JSON record store.

Each collection (users, sessions, transactions) lives in its own
``<DATA_DIR>/<name>.json`` file holding a JSON list. Writes replace the whole
file atomically (temp file + ``os.replace``), so a crash never leaves a
truncated collection behind.

Mutations go through ``store.transaction(...)``, which holds a per-collection
lock for the whole read-modify-write sequence. The store assumes a single
running process; there is no cross-process coordination.
"""
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path

from flask import current_app

logger = logging.getLogger(__name__)

COLLECTIONS = ("users", "sessions", "transactions")


class RecordStore:
    """
    Flask extension owning the collection files and their locks.

    Like other Flask extensions it is created once and bound with
    ``init_app``; the data directory is looked up from the current app.
    """

    def __init__(self, app=None):
        self._locks = {}
        self._locks_guard = threading.Lock()
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        data_dir = Path(app.config["DATA_DIR"])
        data_dir.mkdir(parents=True, exist_ok=True)
        app.extensions["record_store"] = self
        for name in COLLECTIONS:
            path = data_dir / f"{name}.json"
            if not path.exists():
                self._write_file(path, [])

    def _path(self, name):
        if "record_store" not in current_app.extensions:
            raise RuntimeError("RecordStore not initialized. Call init_app() first.")
        return Path(current_app.config["DATA_DIR"]) / f"{name}.json"

    def _lock(self, name):
        key = str(self._path(name))
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def read(self, name):
        """Return the records of a collection. Corrupt files are reset to empty."""
        path = self._path(name)
        try:
            with open(path, "r", encoding="utf-8") as fh:
                records = json.load(fh)
        except FileNotFoundError:
            return []
        except (ValueError, UnicodeDecodeError) as e:
            logger.warning("Failed to parse %s, resetting collection: %s", path, e)
            self.write(name, [])
            return []
        if not isinstance(records, list):
            logger.warning("Collection file %s does not hold a list, resetting", path)
            self.write(name, [])
            return []
        return records

    def write(self, name, records):
        """Replace the whole collection atomically."""
        self._write_file(self._path(name), records)

    @staticmethod
    def _write_file(path, records):
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    @contextmanager
    def transaction(self, *names):
        """
        Serialized read-modify-write over one or more collections.

        Yields a dict of collection name -> list of records. The lists are
        written back, in the order the names were given, when the block exits
        cleanly; nothing is written if it raises. Locks are taken in sorted
        order.
        """
        names = list(dict.fromkeys(names))
        locks = [self._lock(name) for name in sorted(names)]
        for lock in locks:
            lock.acquire()
        try:
            data = {name: self.read(name) for name in names}
            yield data
            for name in names:
                self.write(name, data[name])
        finally:
            for lock in reversed(locks):
                lock.release()
