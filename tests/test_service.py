"""Tests for DataQualityService: sessions, validation and fixes end to end."""

from __future__ import annotations

import threading
import time

import pytest

from data_alchemist.core.enums import Category, DataType, Severity
from data_alchemist.errors import RequestError, SessionNotFoundError
from data_alchemist.service import DataQualityService
from data_alchemist.validation.models import ValidationFinding


@pytest.fixture
def service(store, today):
    return DataQualityService(store, today=today)


@pytest.fixture
def dirty_session(service, make_dataset):  # pylint: disable=redefined-outer-name
    """A session whose workers have formatting problems the engine can fix."""
    service.create_session("s1")
    service.add_dataset(
        "s1",
        make_dataset(
            DataType.WORKERS,
            [
                {"workerId": "W1", "name": "Alice", "skills": "python", "availability": "100", "rate": "50USD", "active": "yes"},
                {"workerId": "W1", "name": "Bob", "skills": "python", "availability": "100", "rate": "50USD", "active": "yes"},
                {"workerId": "W3", "name": "Carol", "skills": "python", "availability": "", "rate": "55", "active": "maybe"},
            ],
        ),
    )
    return "s1"


class TestSessions:
    """Session lifecycle."""

    def test_create_and_get(self, service):  # pylint: disable=redefined-outer-name
        record = service.create_session("abc")
        assert service.get_session("abc").session_id == record.session_id
        assert service.list_sessions() == ["abc"]

    def test_create_generates_id(self, service):  # pylint: disable=redefined-outer-name
        record = service.create_session()
        assert len(record.session_id) == 32

    def test_create_duplicate(self, service):  # pylint: disable=redefined-outer-name
        service.create_session("abc")
        with pytest.raises(RequestError, match="already exists"):
            service.create_session("abc")

    def test_unknown_session(self, service):  # pylint: disable=redefined-outer-name
        with pytest.raises(SessionNotFoundError):
            service.get_session("missing")
        with pytest.raises(SessionNotFoundError):
            service.validate("missing")

    def test_delete(self, service):  # pylint: disable=redefined-outer-name
        service.create_session("abc")
        service.delete_session("abc")
        assert service.list_sessions() == []

    def test_add_dataset_clears_cached_summary(self, service, clean_clients):  # pylint: disable=redefined-outer-name
        service.create_session("abc")
        service.validate("abc")
        assert service.get_session("abc").validation_summary is not None

        service.add_dataset("abc", clean_clients)
        record = service.get_session("abc")
        assert record.validation_summary is None
        assert record.clients.row_count == 5


class TestValidate:
    """Validation through the service."""

    def test_caches_summary_on_session(self, service, dirty_session):  # pylint: disable=redefined-outer-name
        summary = service.validate(dirty_session)
        record = service.get_session(dirty_session)

        assert summary.total_errors > 0
        assert record.validation_summary["totalErrors"] == summary.total_errors
        assert record.status == "completed"

    def test_fix_recommendations(self, service, dirty_session):  # pylint: disable=redefined-outer-name
        recommendations = service.fix_recommendations(dirty_session)

        fixable = {(f.row, f.column) for f in recommendations.auto_fixable}
        manual = {(f.row, f.column) for f in recommendations.manual_review}
        assert (0, "rate") in fixable
        assert (1, "workerId") in fixable
        assert (2, "active") in manual
        assert (2, "availability") in manual


class TestAutoFix:
    """Batch auto-fix through the service."""

    def test_fixes_and_persists(self, service, dirty_session):  # pylint: disable=redefined-outer-name
        summary = service.validate(dirty_session)
        report = service.auto_fix(dirty_session, summary.all_errors)

        workers = service.get_session(dirty_session).workers
        assert workers.column_values("rate") == [50, 50, "55"]
        assert workers.column_values("active") == [True, True, "maybe"]
        assert workers.column_values("workerId") == ["W1", "W1_001", "W3"]
        assert report.total_attempted == len(summary.all_errors)
        assert report.details[DataType.WORKERS].total_fixed == report.total_fixed
        assert report.total_require_manual == 2  # availability and "maybe"
        assert "Successfully auto-fixed" in report.message

    def test_revalidation_after_fix_leaves_only_manual_findings(self, service, dirty_session):  # pylint: disable=redefined-outer-name
        service.auto_fix(dirty_session, service.validate(dirty_session).all_errors)
        remaining = service.validate(dirty_session).all_errors
        assert {(f.row, f.column) for f in remaining} == {(2, "availability"), (2, "active")}

    def test_accepts_serialized_findings(self, service, dirty_session):  # pylint: disable=redefined-outer-name
        findings = [f.to_dict() for f in service.validate(dirty_session).all_errors]
        report = service.auto_fix(dirty_session, findings, apply_to_all=True)
        assert report.total_fixed > 0

    def test_rejects_non_list(self, service, dirty_session):  # pylint: disable=redefined-outer-name
        with pytest.raises(RequestError, match="must be a list"):
            service.auto_fix(dirty_session, "all")  # type: ignore[arg-type]

    def test_malformed_finding_rejected_before_mutation(self, service, dirty_session):  # pylint: disable=redefined-outer-name
        good = service.validate(dirty_session).all_errors[0].to_dict()
        before = service.get_session(dirty_session).workers.rows
        with pytest.raises(RequestError):
            service.auto_fix(dirty_session, [good, {"category": "type"}])
        assert service.get_session(dirty_session).workers.rows == before

    def test_findings_for_absent_dataset_are_skipped(self, service, dirty_session):  # pylint: disable=redefined-outer-name
        finding = ValidationFinding(
            Category.REQUIRED, Severity.HIGH, DataType.TASKS, 0, "description", "m"
        )
        report = service.auto_fix(dirty_session, [finding])

        assert report.details == {}
        assert report.total_attempted == 1
        assert report.total_fixed == 0
        assert report.message.startswith("No issues could be automatically fixed")

    def test_nothing_fixed_does_not_save(self, service, dirty_session, store):  # pylint: disable=redefined-outer-name
        before = store.get(dirty_session).last_modified
        service.auto_fix(dirty_session, [])
        assert store.get(dirty_session).last_modified == before


class TestApplyFix:
    """Single caller-supplied corrections."""

    def test_apply_and_persist(self, service, dirty_session):  # pylint: disable=redefined-outer-name
        finding = ValidationFinding(
            Category.REQUIRED, Severity.HIGH, DataType.WORKERS, 2, "availability", "m"
        )
        result = service.apply_fix(dirty_session, finding, "80")

        assert result.success
        assert service.get_session(dirty_session).workers.rows[2]["availability"] == "80"

    def test_bulk(self, service, dirty_session):  # pylint: disable=redefined-outer-name
        finding = {"category": "type", "dataType": "workers", "row": 0, "column": "rate"}
        result = service.apply_fix(dirty_session, finding, 50, apply_to_all=True)
        assert result.affected_rows == 2

    def test_missing_dataset(self, service, dirty_session):  # pylint: disable=redefined-outer-name
        finding = {"category": "type", "dataType": "clients", "row": 0, "column": "budget"}
        with pytest.raises(RequestError, match="no clients dataset"):
            service.apply_fix(dirty_session, finding, 1)

    def test_stale_row(self, service, dirty_session):  # pylint: disable=redefined-outer-name
        finding = {"category": "type", "dataType": "workers", "row": 10, "column": "rate"}
        assert not service.apply_fix(dirty_session, finding, 1).success


def test_concurrent_fixes_on_one_session_do_not_lose_writes(service, make_dataset):  # pylint: disable=redefined-outer-name
    service.create_session("busy")
    service.add_dataset(
        "busy",
        make_dataset(DataType.CLIENTS, [{"clientId": f"C{i}", "budget": "x"} for i in range(20)]),
    )

    def fix(row):
        finding = {"category": "type", "dataType": "clients", "row": row, "column": "budget"}
        service.apply_fix("busy", finding, row)

    threads = [threading.Thread(target=fix, args=(i,)) for i in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert service.get_session("busy").clients.column_values("budget") == list(range(20))


class TestRules:
    """User-defined business rules stored on a session."""

    def test_no_rules(self, service):  # pylint: disable=redefined-outer-name
        service.create_session("abc")
        assert service.list_rules("abc") == []

    def test_add_and_list(self, service, store):  # pylint: disable=redefined-outer-name
        service.create_session("abc")
        before = store.get("abc").last_modified

        stored = service.add_rule("abc", {"id": "r1", "type": "coRun", "tasks": ["T1", "T2"]})
        generated = service.add_rule("abc", {"type": "loadLimit", "maxSlots": 3})

        assert stored["id"] == "r1"
        assert len(generated["id"]) == 32
        assert [r["id"] for r in service.list_rules("abc")] == ["r1", generated["id"]]
        assert store.get("abc").last_modified >= before

    def test_add_rejects_non_mapping(self, service):  # pylint: disable=redefined-outer-name
        service.create_session("abc")
        with pytest.raises(RequestError, match="Rule must be an object"):
            service.add_rule("abc", ["coRun"])  # type: ignore[arg-type]
        assert service.list_rules("abc") == []

    def test_delete(self, service):  # pylint: disable=redefined-outer-name
        service.create_session("abc")
        service.add_rule("abc", {"id": "r1", "type": "coRun"})
        service.add_rule("abc", {"id": "r2", "type": "coRun"})

        assert service.delete_rule("abc", "r1") is True
        assert service.delete_rule("abc", "r1") is False
        assert [r["id"] for r in service.list_rules("abc")] == ["r2"]

    def test_unknown_session(self, service):  # pylint: disable=redefined-outer-name
        with pytest.raises(SessionNotFoundError):
            service.add_rule("missing", {"id": "r1"})
        with pytest.raises(SessionNotFoundError):
            service.list_rules("missing")


class TestSessionLocks:
    """Per-session lock bookkeeping."""

    # pylint: disable=protected-access

    def test_entries_released_after_use(self, service):  # pylint: disable=redefined-outer-name
        with pytest.raises(SessionNotFoundError):
            service.validate("missing")
        with pytest.raises(SessionNotFoundError):
            service.apply_fix("missing", {"category": "type", "dataType": "clients", "row": 0, "column": "x"}, 1)
        service.create_session("abc")
        service.delete_session("abc")

        assert service._locks == {}

    def test_waiter_and_new_caller_share_one_lock(self, service):  # pylint: disable=redefined-outer-name
        service.create_session("abc")

        with service._lock_for("abc"):
            waiter = threading.Thread(target=service.delete_session, args=("abc",))
            waiter.start()
            for _ in range(200):
                with service._guard:
                    if service._locks["abc"][1] == 2:
                        break
                time.sleep(0.01)
            with service._guard:
                # The blocked delete still holds the entry, so a new caller reuses it
                assert service._locks["abc"][1] == 2
        waiter.join()

        assert service.list_sessions() == []
        assert service._locks == {}
