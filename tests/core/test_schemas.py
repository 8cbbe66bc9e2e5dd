"""Tests for the field definitions in data_alchemist.core.schemas."""

import pytest

from data_alchemist.core.enums import DataType
from data_alchemist.core.schemas import (
    get_id_field,
    get_reference_fields,
    get_required_fields,
    get_unique_fields,
    normalize_header,
)

ALL_DATA_TYPES = list(DataType)


@pytest.mark.parametrize("data_type", ALL_DATA_TYPES)
def test_id_field_is_required_and_unique(data_type):
    id_field = get_id_field(data_type)
    assert id_field in get_required_fields(data_type)
    assert (id_field, "id") in get_unique_fields(data_type)


def test_only_tasks_have_references():
    assert get_reference_fields(DataType.CLIENTS) == []
    assert get_reference_fields(DataType.WORKERS) == []
    assert ("clientId", DataType.CLIENTS) in get_reference_fields(DataType.TASKS)


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Client ID", "clientId"),
        ("client_id", "clientId"),
        ("ClientID", "clientId"),
        ("Hourly Rate", "rate"),
        ("Due Date", "deadline"),
        ("  Notes ", "Notes"),
    ],
)
def test_normalize_header(header, expected):
    assert normalize_header(header) == expected
