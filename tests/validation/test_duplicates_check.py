"""Tests for the DuplicatesCheck validation."""

from data_alchemist.core.enums import Category, DataType, Severity
from data_alchemist.validation.checks import ValidationContext
from data_alchemist.validation.checks.duplicates import DuplicatesCheck


def _run(dataset):
    return list(DuplicatesCheck().validate(dataset, ValidationContext()))


def test_unique_values_pass(clean_clients, clean_workers, clean_tasks):
    for dataset in (clean_clients, clean_workers, clean_tasks):
        assert _run(dataset) == []


def test_only_later_rows_are_flagged(make_dataset):
    workers = make_dataset(
        DataType.WORKERS,
        [
            {"workerId": "W1", "name": "Alice"},
            {"workerId": "W2", "name": "Bob"},
            {"workerId": "w1 ", "name": "Carol"},
            {"workerId": "W1", "name": "Dan"},
        ],
    )
    findings = _run(workers)

    assert [f.row for f in findings] == [2, 3]
    assert all(f.category == Category.DUPLICATE for f in findings)
    assert all(f.column == "workerId" for f in findings)
    assert all(f.severity == Severity.MEDIUM for f in findings)
    assert "first seen in row 0" in findings[0].message


def test_duplicate_names_are_low_severity(make_dataset):
    clients = make_dataset(
        DataType.CLIENTS,
        [{"clientId": "C1", "clientName": "Acme"}, {"clientId": "C2", "clientName": "ACME"}],
    )
    findings = _run(clients)

    assert len(findings) == 1
    assert findings[0].column == "clientName"
    assert findings[0].severity == Severity.LOW


def test_blank_values_are_not_duplicates(make_dataset):
    tasks = make_dataset(
        DataType.TASKS,
        [{"taskId": ""}, {"taskId": ""}, {"taskId": None}, {}],
    )
    assert _run(tasks) == []


def test_integral_float_matches_int(make_dataset):
    tasks = make_dataset(DataType.TASKS, [{"taskId": 7}, {"taskId": 7.0}])
    assert [f.row for f in _run(tasks)] == [1]
