"""Data quality service.

Binds the validation and remediation engine to a session store. The engine itself
takes no locks; this layer serializes every call that reads and writes a session
with a per-session lock, so two fixes on the same session never interleave.

Findings may be passed either as ``ValidationFinding`` objects or as their
serialized dict form (``ValidationFinding.to_dict``). Malformed input raises
``RequestError`` before any data is touched.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Union
from uuid import uuid4

from data_alchemist.core.dataset import CellValue, Dataset
from data_alchemist.core.enums import DataType
from data_alchemist.errors import RequestError, SessionNotFoundError
from data_alchemist.remediation import (
    ApplyFixResult,
    AutoFixReport,
    Classifier,
    FixRecommendations,
    apply_fixes,
    apply_single_fix,
)
from data_alchemist.sessions.store import SessionRecord, SessionStore
from data_alchemist.validation import (
    ValidationFinding,
    ValidationSettings,
    ValidationSummary,
    run_validation,
)
from data_alchemist.validation.registry import DATASET_ORDER

logger = logging.getLogger(__name__)

FindingInput = Union[ValidationFinding, Dict[str, Any]]


def parse_finding(item: FindingInput) -> ValidationFinding:
    """Accept a finding object or its serialized dict.

    Raises:
        RequestError: If ``item`` is neither, or the dict is malformed.
    """
    if isinstance(item, ValidationFinding):
        return item
    if isinstance(item, dict):
        return ValidationFinding.from_dict(item)
    raise RequestError(f"Finding must be an object, got {type(item).__name__}")


class DataQualityService:
    """Validate and fix the datasets of stored sessions.

    Args:
        store: Where session records live.
        settings: Business-rule thresholds used by ``validate``.
        today: Reference date for past-deadline checks. Defaults to the
            current date at each call.
    """

    def __init__(
        self,
        store: SessionStore,
        settings: Optional[ValidationSettings] = None,
        today: Optional[date] = None,
    ) -> None:
        self.store = store
        self.settings = settings or ValidationSettings()
        self.today = today
        # session id -> [lock, number of callers holding or waiting on it]
        self._locks: Dict[str, List[Any]] = {}
        self._guard = threading.Lock()

    @contextmanager
    def _lock_for(self, session_id: str) -> Iterator[None]:
        """Hold the session's lock. The entry lives only while someone uses it."""
        with self._guard:
            entry = self._locks.get(session_id)
            if entry is None:
                entry = self._locks[session_id] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[session_id]

    def _load(self, session_id: str) -> SessionRecord:
        record = self.store.get(session_id)
        if record is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        return record

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(self, session_id: Optional[str] = None) -> SessionRecord:
        """Create an empty session.

        Raises:
            RequestError: If ``session_id`` is invalid or already taken.
        """
        session_id = session_id or uuid4().hex
        with self._lock_for(session_id):
            if self.store.get(session_id) is not None:
                raise RequestError(f"Session already exists: {session_id}")
            record = SessionRecord(session_id=session_id)
            self.store.save(record)
        logger.info("Created session %s", session_id)
        return record

    def get_session(self, session_id: str) -> SessionRecord:
        """Raises SessionNotFoundError if the session does not exist."""
        return self._load(session_id)

    def list_sessions(self) -> List[str]:
        return self.store.list_ids()

    def delete_session(self, session_id: str) -> None:
        with self._lock_for(session_id):
            self.store.delete(session_id)

    def add_dataset(self, session_id: str, dataset: Dataset) -> SessionRecord:
        """Attach or replace one dataset of a session.

        Any cached validation summary is dropped since it no longer matches the data.
        """
        with self._lock_for(session_id):
            record = self._load(session_id)
            record.set_dataset(dataset)
            record.validation_summary = None
            record.status = "uploaded"
            record.touch()
            self.store.save(record)
        logger.info(
            "Added %s dataset to session %s (%d rows)",
            dataset.data_type.value,
            session_id,
            dataset.row_count,
        )
        return record

    # ------------------------------------------------------------------
    # Business rules
    # ------------------------------------------------------------------

    def list_rules(self, session_id: str) -> List[Dict[str, Any]]:
        """User-defined rules of a session, in insertion order ([] if none)."""
        return self._load(session_id).rules

    def add_rule(self, session_id: str, rule: Mapping[str, Any]) -> Dict[str, Any]:
        """Append a rule to a session.

        Rules are stored as given and never interpreted by validation. A rule
        without an ``id`` is assigned one so it can be deleted later.

        Returns:
            The stored rule, including its id.

        Raises:
            RequestError: If ``rule`` is not a mapping.
            SessionNotFoundError: If the session does not exist.
        """
        if not isinstance(rule, Mapping):
            raise RequestError(f"Rule must be an object, got {type(rule).__name__}")
        stored = dict(rule)
        stored.setdefault("id", uuid4().hex)
        with self._lock_for(session_id):
            record = self._load(session_id)
            record.rules.append(stored)
            record.touch()
            self.store.save(record)
        logger.info("Added rule %s to session %s", stored["id"], session_id)
        return stored

    def delete_rule(self, session_id: str, rule_id: str) -> bool:
        """Remove every rule whose ``id`` is ``rule_id``.

        Returns:
            True if a rule was removed.
        """
        with self._lock_for(session_id):
            record = self._load(session_id)
            kept = [
                r for r in record.rules if not (isinstance(r, Mapping) and r.get("id") == rule_id)
            ]
            if len(kept) == len(record.rules):
                return False
            record.rules = kept
            record.touch()
            self.store.save(record)
        logger.info("Deleted rule %s from session %s", rule_id, session_id)
        return True

    # ------------------------------------------------------------------
    # Validation and fixes
    # ------------------------------------------------------------------

    def validate(self, session_id: str) -> ValidationSummary:
        """Validate every dataset of a session and cache the summary on it."""
        with self._lock_for(session_id):
            record = self._load(session_id)
            summary = run_validation(
                clients=record.clients,
                workers=record.workers,
                tasks=record.tasks,
                settings=self.settings,
                today=self.today,
            )
            record.validation_summary = summary.to_dict()
            record.status = "completed"
            record.touch()
            self.store.save(record)
        return summary

    def fix_recommendations(self, session_id: str) -> FixRecommendations:
        """Validate a session and group its findings by remediation tier.

        Read-only: nothing is stored.
        """
        with self._lock_for(session_id):
            record = self._load(session_id)
            summary = run_validation(
                clients=record.clients,
                workers=record.workers,
                tasks=record.tasks,
                settings=self.settings,
                today=self.today,
            )
            return Classifier(record.datasets()).recommend(summary.all_errors)

    def auto_fix(
        self,
        session_id: str,
        findings: Sequence[FindingInput],
        apply_to_all: bool = False,
    ) -> AutoFixReport:
        """Apply every safe fix among ``findings`` to the session's datasets.

        Findings without a suggested value are classified first. Findings for a
        dataset the session does not have are skipped and appear in no total.

        Raises:
            RequestError: If ``findings`` is not a list or contains a malformed item.
            SessionNotFoundError: If the session does not exist.
        """
        if not isinstance(findings, list):
            raise RequestError(f"Findings must be a list, got {type(findings).__name__}")
        parsed = [parse_finding(item) for item in findings]

        by_type: Dict[DataType, List[ValidationFinding]] = defaultdict(list)
        for finding in parsed:
            by_type[finding.data_type].append(finding)

        report = AutoFixReport(total_attempted=len(parsed))
        with self._lock_for(session_id):
            record = self._load(session_id)
            classifier = Classifier(record.datasets())
            for data_type in DATASET_ORDER:
                group = by_type.get(data_type)
                if not group:
                    continue
                dataset = record.dataset(data_type)
                if dataset is None:
                    logger.warning(
                        "Session %s has no %s dataset; skipping %d findings",
                        session_id,
                        data_type.value,
                        len(group),
                    )
                    continue
                report.details[data_type] = apply_fixes(
                    dataset, classifier.classify_all(group), apply_to_all
                )

            if report.total_fixed > 0:
                record.validation_summary = None
                record.touch()
                self.store.save(record)

        logger.info("Session %s: %s", session_id, report.message)
        return report

    def apply_fix(
        self,
        session_id: str,
        finding: FindingInput,
        suggested_value: CellValue,
        apply_to_all: bool = False,
    ) -> ApplyFixResult:
        """Write a caller-chosen value for one finding.

        Raises:
            RequestError: If the finding is malformed, has no column, or targets
                a dataset the session does not have.
            SessionNotFoundError: If the session does not exist.
        """
        parsed = parse_finding(finding)
        with self._lock_for(session_id):
            record = self._load(session_id)
            dataset = record.dataset(parsed.data_type)
            if dataset is None:
                raise RequestError(
                    f"Session {session_id} has no {parsed.data_type.value} dataset"
                )
            result = apply_single_fix(dataset, parsed, suggested_value, apply_to_all)
            if result.affected_rows > 0:
                record.validation_summary = None
                record.touch()
                self.store.save(record)

        if not result.success:
            logger.warning(
                "Row %d no longer exists in %s of session %s",
                parsed.row,
                parsed.data_type.value,
                session_id,
            )
        return result
