"""Session storage.

A session groups up to three datasets (clients, workers, tasks) uploaded together,
plus the last validation snapshot and any user-defined business rules.

Two stores are provided:

- InMemorySessionStore: dict-backed, for tests and one-shot runs
- FileSessionStore: one ``session_<id>/session.json`` per session under a root
  directory, so sessions survive process restarts

Stores hand out independent copies. Mutating a record returned by ``get`` has no
effect until it is passed back to ``save``.
"""

from __future__ import annotations

import json
import logging
import re
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from data_alchemist.core.dataset import Dataset
from data_alchemist.core.enums import DataType
from data_alchemist.errors import RequestError

logger = logging.getLogger(__name__)

SESSION_FILENAME = "session.json"
SESSION_STATUSES = ("uploaded", "processing", "completed", "error")

_SESSION_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def check_session_id(session_id: str) -> str:
    """Reject ids that are empty or unsafe as a directory name.

    Raises:
        RequestError: If the id has characters outside ``[A-Za-z0-9_-]``.
    """
    if not isinstance(session_id, str) or not _SESSION_ID_RE.match(session_id):
        raise RequestError(f"Invalid session id: {session_id!r}")
    return session_id


@dataclass
class SessionRecord:
    """Everything stored for one session.

    Attributes:
        session_id: Unique id, also used as the directory name on disk.
        clients: Clients dataset, if uploaded.
        workers: Workers dataset, if uploaded.
        tasks: Tasks dataset, if uploaded.
        validation_summary: Snapshot of the last ``ValidationSummary.to_dict()``.
            Cleared whenever the data changes.
        rules: User-defined business rules. Stored as given, never interpreted.
        status: One of ``uploaded``, ``processing``, ``completed``, ``error``.
        created: Creation time, epoch milliseconds.
        last_modified: Last change, epoch milliseconds.
    """

    session_id: str
    clients: Optional[Dataset] = None
    workers: Optional[Dataset] = None
    tasks: Optional[Dataset] = None
    validation_summary: Optional[Dict[str, Any]] = None
    rules: List[Dict[str, Any]] = field(default_factory=list)
    status: str = "uploaded"
    created: int = field(default_factory=now_ms)
    last_modified: int = field(default_factory=now_ms)

    def __post_init__(self) -> None:
        check_session_id(self.session_id)
        if self.status not in SESSION_STATUSES:
            raise ValueError(
                f"Invalid status: {self.status}. Must be one of {', '.join(SESSION_STATUSES)}."
            )

    def dataset(self, data_type: DataType) -> Optional[Dataset]:
        return getattr(self, DataType(data_type).value)

    def set_dataset(self, dataset: Dataset) -> None:
        """Attach ``dataset`` in the slot matching its data type."""
        setattr(self, dataset.data_type.value, dataset)

    def datasets(self) -> Dict[DataType, Optional[Dataset]]:
        return {dt: self.dataset(dt) for dt in DataType}

    def touch(self) -> None:
        self.last_modified = now_ms()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "sessionId": self.session_id,
            "created": self.created,
            "lastModified": self.last_modified,
            "status": self.status,
        }
        for data_type in DataType:
            dataset = self.dataset(data_type)
            if dataset is not None:
                data[data_type.value] = dataset.to_dict()
        if self.validation_summary is not None:
            data["validationSummary"] = self.validation_summary
        if self.rules:
            data["rules"] = list(self.rules)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        """Rebuild a record from its stored form.

        Raises:
            ValueError: If the session id is absent or a dataset is malformed.
        """
        session_id = data.get("sessionId")
        if not session_id:
            raise ValueError("Session data has no sessionId")
        created = int(data.get("created") or now_ms())
        record = cls(
            session_id=str(session_id),
            validation_summary=data.get("validationSummary"),
            rules=list(data.get("rules") or []),
            status=str(data.get("status") or "uploaded"),
            created=created,
            last_modified=int(data.get("lastModified") or created),
        )
        for data_type in DataType:
            raw = data.get(data_type.value)
            if raw is not None:
                record.set_dataset(Dataset.from_dict(data_type, raw))
        return record


class SessionStore(Protocol):
    """Persistence for session records."""

    def get(self, session_id: str) -> Optional[SessionRecord]:
        """Return a copy of the record, or None if it does not exist."""
        ...

    def save(self, record: SessionRecord) -> None:
        """Create or replace the record."""
        ...

    def delete(self, session_id: str) -> None:
        """Remove the record. Deleting an unknown id is a no-op."""
        ...

    def list_ids(self) -> List[str]:
        """Ids of all stored sessions, sorted."""
        ...


class InMemorySessionStore:
    """Session store backed by a dict of serialized records."""

    def __init__(self) -> None:
        self._records: Dict[str, Dict[str, Any]] = {}

    def get(self, session_id: str) -> Optional[SessionRecord]:
        data = self._records.get(session_id)
        if data is None:
            return None
        # Round-trip through JSON so callers never share row dicts with the store
        return SessionRecord.from_dict(json.loads(json.dumps(data)))

    def save(self, record: SessionRecord) -> None:
        self._records[record.session_id] = json.loads(json.dumps(record.to_dict()))

    def delete(self, session_id: str) -> None:
        self._records.pop(session_id, None)

    def list_ids(self) -> List[str]:
        return sorted(self._records)


class FileSessionStore:
    """Session store writing ``<root>/session_<id>/session.json``.

    Args:
        root: Directory holding one subdirectory per session. Created on first save.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _session_dir(self, session_id: str) -> Path:
        return self.root / f"session_{check_session_id(session_id)}"

    def _session_path(self, session_id: str) -> Path:
        return self._session_dir(session_id) / SESSION_FILENAME

    def get(self, session_id: str) -> Optional[SessionRecord]:
        """Load a session.

        Raises:
            ValueError: If the session file exists but cannot be parsed.
        """
        path = self._session_path(session_id)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Corrupt session file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Session file {path} must contain an object")
        return SessionRecord.from_dict(data)

    def save(self, record: SessionRecord) -> None:
        path = self._session_path(record.session_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".part")
        try:
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(record.to_dict(), f, ensure_ascii=False, indent=2)
            tmp_path.replace(path)
        finally:
            tmp_path.unlink(missing_ok=True)
        logger.debug("Saved session %s to %s", record.session_id, path)

    def delete(self, session_id: str) -> None:
        session_dir = self._session_dir(session_id)
        if session_dir.exists():
            shutil.rmtree(session_dir)
            logger.debug("Deleted session %s", session_id)

    def list_ids(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(
            entry.name[len("session_"):]
            for entry in self.root.iterdir()
            if entry.is_dir()
            and entry.name.startswith("session_")
            and (entry / SESSION_FILENAME).exists()
        )
