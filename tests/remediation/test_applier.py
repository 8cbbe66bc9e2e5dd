"""Tests for the auto-fix applier.

Covers single-row and bulk application, duplicate containment, idempotent
re-application and the guarantee that rows are never added, removed or reordered.
"""

import copy
import logging

import pytest

from data_alchemist.core.dataset import MISSING
from data_alchemist.core.enums import Category, DataType, Severity
from data_alchemist.errors import RequestError
from data_alchemist.remediation.applier import apply_fixes, apply_single_fix
from data_alchemist.validation.models import ValidationFinding


def _finding(category, row, column, suggested=None, data_type=DataType.CLIENTS, value=None):
    return ValidationFinding(
        category=category,
        severity=Severity.MEDIUM,
        data_type=data_type,
        row=row,
        column=column,
        message="test",
        value=value,
        suggested_value=suggested,
    )


@pytest.fixture
def priorities(make_dataset):
    """Rows 0, 2 and 4 share a null priority; rows 1 and 3 share "x"."""
    return make_dataset(
        DataType.CLIENTS,
        [
            {"clientId": "C0", "priority": None},
            {"clientId": "C1", "priority": "x"},
            {"clientId": "C2", "priority": None},
            {"clientId": "C3", "priority": "x"},
            {"clientId": "C4", "priority": None},
        ],
    )


def test_single_row_by_default(priorities):  # pylint: disable=redefined-outer-name
    summary = apply_fixes(priorities, [_finding(Category.REQUIRED, 0, "priority", "medium")])

    assert summary.total_fixed == 1
    assert priorities.column_values("priority") == ["medium", "x", None, "x", None]
    assert summary.fixes[0].row == 0
    assert summary.fixes[0].old_value is None
    assert summary.fixes[0].new_value == "medium"


def test_bulk_applies_to_rows_sharing_the_original_value(priorities):  # pylint: disable=redefined-outer-name
    summary = apply_fixes(
        priorities, [_finding(Category.REQUIRED, 0, "priority", "medium")], apply_to_all=True
    )

    assert summary.total_fixed == 3
    assert [f.row for f in summary.fixes] == [0, 2, 4]
    assert priorities.column_values("priority") == ["medium", "x", "medium", "x", "medium"]


def test_bulk_treats_missing_null_and_empty_as_equal(make_dataset):
    clients = make_dataset(
        DataType.CLIENTS,
        [{"priority": ""}, {"priority": None}, {}, {"priority": " "}, {"priority": "low"}],
    )
    summary = apply_fixes(
        clients, [_finding(Category.REQUIRED, 0, "priority", "medium")], apply_to_all=True
    )

    assert summary.total_fixed == 3
    assert clients.column_values("priority") == ["medium", "medium", "medium", " ", "low"]
    assert summary.fixes[2].old_value is MISSING


def test_bulk_uses_strict_type_equality(make_dataset):
    workers = make_dataset(
        DataType.WORKERS,
        [{"active": "1"}, {"active": 1}, {"active": True}, {"active": "1"}],
    )
    summary = apply_fixes(
        workers,
        [_finding(Category.BOOLEAN_FORMAT, 0, "active", True, data_type=DataType.WORKERS)],
        apply_to_all=True,
    )

    assert [f.row for f in summary.fixes] == [0, 3]
    assert workers.column_values("active") == [True, 1, True, True]


def test_duplicate_never_propagates(make_dataset):
    workers = make_dataset(
        DataType.WORKERS, [{"workerId": "W1"}, {"workerId": "W1"}, {"workerId": "W1"}]
    )
    finding = _finding(Category.DUPLICATE, 1, "workerId", "W1_001", data_type=DataType.WORKERS)

    summary = apply_fixes(workers, [finding], apply_to_all=True)

    assert summary.total_fixed == 1
    assert workers.column_values("workerId") == ["W1", "W1_001", "W1"]


def test_findings_without_suggestion_require_manual(priorities):  # pylint: disable=redefined-outer-name
    findings = [
        _finding(Category.REFERENCE, 0, "priority"),
        _finding(Category.REQUIRED, 1, None, "medium"),
        _finding(Category.REQUIRED, 2, "priority", "medium"),
    ]
    summary = apply_fixes(priorities, findings)

    assert summary.total_fixed == 1
    assert summary.total_require_manual == 2


def test_findings_for_another_dataset_require_manual(priorities):  # pylint: disable=redefined-outer-name
    finding = _finding(Category.TYPE, 0, "rate", 50, data_type=DataType.WORKERS)
    summary = apply_fixes(priorities, [finding])

    assert summary.total_fixed == 0
    assert summary.total_require_manual == 1


def test_stale_row_is_skipped_and_logged(priorities, caplog):  # pylint: disable=redefined-outer-name
    findings = [
        _finding(Category.REQUIRED, 10, "priority", "medium"),
        _finding(Category.REQUIRED, 0, "priority", "medium"),
    ]
    with caplog.at_level(logging.WARNING, logger="data_alchemist.remediation.applier"):
        summary = apply_fixes(priorities, findings)

    assert summary.total_require_manual == 1
    assert summary.total_fixed == 1
    assert "Row 10 not found" in caplog.text


def test_reapply_is_idempotent(priorities):  # pylint: disable=redefined-outer-name
    findings = [
        _finding(Category.REQUIRED, 0, "priority", "medium"),
        _finding(Category.REQUIRED, 2, "priority", "medium"),
    ]
    first = apply_fixes(priorities, findings, apply_to_all=True)
    after_first = copy.deepcopy(priorities.rows)
    second = apply_fixes(priorities, findings, apply_to_all=True)

    assert first.total_fixed == 3
    assert first.total_already_correct == 1
    assert second.total_fixed == 0
    assert second.total_already_correct == 2
    assert second.total_require_manual == 0
    assert priorities.rows == after_first


def test_writing_empty_over_null_is_a_change(make_dataset):
    clients = make_dataset(DataType.CLIENTS, [{"notes": None}])
    result = apply_single_fix(clients, _finding(Category.TYPE, 0, "notes"), "")
    assert result.affected_rows == 1
    assert clients.rows[0]["notes"] == ""


def test_row_count_and_order_never_change(priorities):  # pylint: disable=redefined-outer-name
    ids_before = priorities.column_values("clientId")
    findings = [
        _finding(Category.REQUIRED, 0, "priority", "medium"),
        _finding(Category.TYPE, 1, "priority", "high"),
        _finding(Category.REQUIRED, 99, "priority", "low"),
    ]
    apply_fixes(priorities, findings, apply_to_all=True)

    assert priorities.row_count == 5
    assert priorities.column_values("clientId") == ids_before
    assert priorities.headers == ["clientId", "priority"]


class TestApplySingleFix:
    """Caller-supplied values."""

    def test_applies_value(self, priorities):  # pylint: disable=redefined-outer-name
        result = apply_single_fix(priorities, _finding(Category.TYPE, 1, "priority"), "high")

        assert result.success
        assert result.affected_rows == 1
        assert priorities.rows[1]["priority"] == "high"

    def test_bulk(self, priorities):  # pylint: disable=redefined-outer-name
        result = apply_single_fix(
            priorities, _finding(Category.TYPE, 1, "priority"), "high", apply_to_all=True
        )
        assert result.affected_rows == 2
        assert [f.row for f in result.fixes] == [1, 3]

    def test_none_clears_the_cell(self, priorities):  # pylint: disable=redefined-outer-name
        result = apply_single_fix(priorities, _finding(Category.TYPE, 1, "priority"), None)
        assert result.affected_rows == 1
        assert priorities.rows[1]["priority"] is None

    def test_duplicate_stays_single_row(self, make_dataset):
        workers = make_dataset(DataType.WORKERS, [{"name": "Al"}, {"name": "Al"}])
        finding = _finding(Category.DUPLICATE, 1, "name", data_type=DataType.WORKERS)
        result = apply_single_fix(workers, finding, "Al B.", apply_to_all=True)

        assert result.affected_rows == 1
        assert workers.column_values("name") == ["Al", "Al B."]

    def test_stale_row(self, priorities):  # pylint: disable=redefined-outer-name
        result = apply_single_fix(priorities, _finding(Category.TYPE, 5, "priority"), "high")
        assert not result.success
        assert result.affected_rows == 0

    def test_missing_column_is_rejected(self, priorities):  # pylint: disable=redefined-outer-name
        with pytest.raises(RequestError):
            apply_single_fix(priorities, _finding(Category.TYPE, 0, None), "high")

    def test_other_dataset_is_rejected(self, priorities):  # pylint: disable=redefined-outer-name
        finding = _finding(Category.TYPE, 0, "rate", data_type=DataType.WORKERS)
        with pytest.raises(RequestError):
            apply_single_fix(priorities, finding, 50)
        assert priorities.rows[0] == {"clientId": "C0", "priority": None}
