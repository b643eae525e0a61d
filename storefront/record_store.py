import json
import logging
import os
import tempfile
import threading
import time

from storefront.errors import NotFound, StorageError, ValidationError

log = logging.getLogger(__name__)

_locks = {}
_locks_guard = threading.Lock()


def _lock_for(path):
    key = os.path.realpath(path)
    with _locks_guard:
        if key not in _locks:
            _locks[key] = threading.RLock()
        return _locks[key]


class CorruptFile(Exception):
    pass


class RecordStore:
    """A JSON array of records kept in a single file.

    Every read-modify-write runs under a lock shared by all stores on the
    same path, and writes land through a temp file + ``os.replace``.
    ``list`` is lenient about a corrupt file; mutations refuse to touch it.
    """

    def __init__(self, path, entity="Record", file_field=None, release_file=None):
        self.path = path
        self.entity = entity
        self.file_field = file_field
        self.release_file = release_file
        self._lock = _lock_for(path)
        self._last_id = 0
        with self._lock:
            self._ensure_file()

    def _ensure_file(self):
        directory = os.path.dirname(self.path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            if not os.path.exists(self.path):
                self._write([])
        except OSError as e:
            raise StorageError(f"cannot initialise {self.path}: {e}") from e

    def _read(self):
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                text = f.read().strip()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"cannot read {self.path}: {e}") from e
        if not text:
            return []
        try:
            data = json.loads(text)
        except ValueError as e:
            raise CorruptFile(str(e)) from e
        if not isinstance(data, list):
            raise CorruptFile(f"expected a JSON array, got {type(data).__name__}")
        return [self._normalize(r) for r in data]

    def _write(self, records):
        directory = os.path.dirname(self.path) or "."
        tmp = None
        try:
            fd, tmp = tempfile.mkstemp(dir=directory, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
            tmp = None
        except OSError as e:
            raise StorageError(f"cannot write {self.path}: {e}") from e
        finally:
            if tmp and os.path.exists(tmp):
                os.remove(tmp)

    def _load_strict(self):
        try:
            return self._read()
        except CorruptFile as e:
            raise StorageError(f"refusing to modify corrupt {self.path}: {e}") from e

    @staticmethod
    def _normalize(record):
        if isinstance(record, dict) and record.get("id") is not None:
            record["id"] = str(record["id"])
        return record

    @staticmethod
    def _index_of(records, record_id):
        wanted = str(record_id)
        for i, r in enumerate(records):
            if isinstance(r, dict) and str(r.get("id")) == wanted:
                return i
        return -1

    def _next_id(self, records):
        taken = {str(r.get("id")) for r in records if isinstance(r, dict)}
        candidate = max(int(time.time() * 1000), self._last_id + 1)
        while str(candidate) in taken:
            candidate += 1
        self._last_id = candidate
        return str(candidate)

    def _release(self, ref):
        if not ref or self.release_file is None:
            return
        try:
            self.release_file(ref)
        except Exception:
            log.exception("could not release %s for %s", ref, self.entity)

    def list(self):
        with self._lock:
            try:
                return self._read()
            except CorruptFile as e:
                log.warning("%s is corrupt, serving empty list: %s", self.path, e)
                return []

    def get(self, record_id):
        records = self.list()
        i = self._index_of(records, record_id)
        if i == -1:
            raise NotFound(f"{self.entity} not found")
        return records[i]

    def append(self, record):
        with self._lock:
            records = self._load_strict()
            record = dict(record)
            if record.get("id") in (None, ""):
                record["id"] = self._next_id(records)
            else:
                record["id"] = str(record["id"])
                if self._index_of(records, record["id"]) != -1:
                    raise ValidationError(f"{self.entity} {record['id']} already exists")
            records.append(record)
            self._write(records)
        log.info("%s %s added", self.entity, record["id"])
        return record

    def update(self, record_id, patch):
        with self._lock:
            records = self._load_strict()
            i = self._index_of(records, record_id)
            if i == -1:
                raise NotFound(f"{self.entity} not found")
            previous = records[i]
            updated = dict(previous)
            updated.update({k: v for k, v in patch.items() if k != "id"})
            records[i] = updated
            self._write(records)
        log.info("%s %s updated (%s)", self.entity, updated["id"], ", ".join(sorted(patch)))
        if self.file_field:
            old_ref = previous.get(self.file_field)
            if old_ref and old_ref != updated.get(self.file_field):
                self._release(old_ref)
        return updated

    def delete(self, record_id):
        with self._lock:
            records = self._load_strict()
            i = self._index_of(records, record_id)
            if i == -1:
                raise NotFound(f"{self.entity} not found")
            removed = records.pop(i)
            self._write(records)
        log.info("%s %s deleted", self.entity, removed.get("id"))
        if self.file_field:
            self._release(removed.get(self.file_field))
        return removed
