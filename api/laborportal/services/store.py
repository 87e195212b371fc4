from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Any

from laborportal.schemas.jobs import Applicant, Job
from laborportal.schemas.sessions import Laborer, RecruiterCredential

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "lp_session"


class StoreError(Exception):
    """Base storage error."""


class StoreUnavailableError(StoreError):
    """Raised when the backend is unavailable or not configured."""


@dataclass(slots=True)
class JobQuery:
    created_by: str | None = None
    applicant: str | None = None
    open_only: bool = False


class KeyValueStore(ABC):
    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...

    def read_json(self, key: str, fallback: Any) -> Any:
        raw = self.get(key)
        if not raw:
            return fallback
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("discarding malformed value for key=%s", key)
            return fallback

    def write_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value, default=str))


class MemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """Key/value pairs kept as one JSON object on disk, replaced atomically on write."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        values = self._load()
        values[key] = value
        self._dump(values)

    def delete(self, key: str) -> None:
        values = self._load()
        if values.pop(key, None) is not None:
            self._dump(values)

    def _load(self) -> dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StoreUnavailableError(f"cannot read {self.path}: {exc}") from exc
        try:
            values = json.loads(raw) if raw.strip() else {}
        except ValueError:
            logger.warning("key/value file %s is malformed; starting empty", self.path)
            return {}
        return values if isinstance(values, dict) else {}

    def _dump(self, values: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(values, handle)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            raise StoreUnavailableError(f"cannot write {self.path}: {exc}") from exc


class Store(ABC):
    """Persistence contract shared by the local and relational backends.

    Records returned by ``get_job`` and ``query_jobs`` are raw mappings; callers
    normalize them before use. Sessions live in a key/value store for both
    backends.
    """

    def __init__(self, session_kv: KeyValueStore) -> None:
        self.session_kv = session_kv

    async def get_session(self, session_key: str) -> dict[str, Any] | None:
        value = self.session_kv.read_json(_session_storage_key(session_key), None)
        return value if isinstance(value, dict) else None

    async def set_session(self, session_key: str, session: dict[str, Any]) -> None:
        self.session_kv.write_json(_session_storage_key(session_key), session)

    async def clear_session(self, session_key: str) -> None:
        self.session_kv.delete(_session_storage_key(session_key))

    @abstractmethod
    async def get_recruiter_credential(self) -> RecruiterCredential | None: ...

    @abstractmethod
    async def create_recruiter_credential(self, credential: RecruiterCredential) -> bool:
        """Store the credential only if none exists. Returns whether it was stored."""

    @abstractmethod
    async def get_laborer(self, contact: str) -> Laborer | None: ...

    @abstractmethod
    async def insert_laborer(self, laborer: Laborer) -> Laborer:
        """Insert unless the contact exists; returns the record now stored."""

    @abstractmethod
    async def insert_job(self, job: Job) -> None: ...

    @abstractmethod
    async def get_job(self, job_id: str) -> dict[str, Any] | None: ...

    @abstractmethod
    async def delete_job(self, job_id: str, created_by: str) -> bool:
        """Delete the job and its applicants if owned by ``created_by``."""

    @abstractmethod
    async def query_jobs(self, query: JobQuery) -> list[dict[str, Any]]:
        """Return raw jobs. Backends may pre-filter on ``created_by`` only."""

    @abstractmethod
    async def add_applicant(self, job_id: str, applicant: Applicant) -> bool:
        """Append unless the job is full or already holds the contact."""

    @abstractmethod
    async def remove_applicants(self, job_id: str, contact: str) -> None: ...

    async def close(self) -> None:
        return None


def _session_storage_key(session_key: str) -> str:
    return f"{SESSION_KEY_PREFIX}:{session_key}"
