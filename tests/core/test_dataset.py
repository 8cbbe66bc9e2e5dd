"""Tests for the Dataset row store and cell equality rules."""

from __future__ import annotations

import pandas as pd
import pytest

from data_alchemist.core.dataset import MISSING, Dataset, cells_equal, is_blank, is_null_like
from data_alchemist.core.enums import DataType


@pytest.fixture
def ragged():
    """Rows with heterogeneous keys and all three absent states."""
    return Dataset(
        data_type=DataType.CLIENTS,
        rows=[
            {"clientId": "C1", "priority": None},
            {"clientId": "C2", "priority": ""},
            {"clientId": "C3", "budget": 100},
        ],
    )


def test_headers_collected_in_first_seen_order(ragged):  # pylint: disable=redefined-outer-name
    assert ragged.headers == ["clientId", "priority", "budget"]
    assert ragged.row_count == 3
    assert len(ragged) == 3


def test_get_cell_distinguishes_missing_null_and_empty(ragged):  # pylint: disable=redefined-outer-name
    assert ragged.get_cell(0, "priority") is None
    assert ragged.get_cell(1, "priority") == ""
    assert ragged.get_cell(2, "priority") is MISSING


def test_get_cell_out_of_range_raises(ragged):  # pylint: disable=redefined-outer-name
    with pytest.raises(IndexError):
        ragged.get_cell(3, "clientId")
    assert not ragged.has_row(3)
    assert not ragged.has_row(-1)


def test_set_cell_mutates_in_place_without_changing_row_count(ragged):  # pylint: disable=redefined-outer-name
    ragged.set_cell(2, "priority", "low")
    assert ragged.rows[2]["priority"] == "low"
    assert ragged.row_count == 3


def test_iter_rows_yields_read_only_views(ragged):  # pylint: disable=redefined-outer-name
    index, row = next(ragged.iter_rows())
    assert index == 0
    with pytest.raises(TypeError):
        row["clientId"] = "X"  # type: ignore[index]


def test_column_values_uses_missing_sentinel(ragged):  # pylint: disable=redefined-outer-name
    assert ragged.column_values("budget") == [MISSING, MISSING, 100]


def test_dict_round_trip_preserves_rows():
    dataset = Dataset(
        data_type=DataType.TASKS,
        rows=[{"taskId": "T1", "duration": 5}, {"taskId": "T2", "notes": None}],
        file_name="tasks.csv",
        file_size=42,
    )
    data = dataset.to_dict()
    assert data["rowCount"] == 2
    assert data["fileName"] == "tasks.csv"

    restored = Dataset.from_dict(DataType.TASKS, data)
    assert restored.rows == dataset.rows
    assert restored.headers == dataset.headers
    assert restored.file_size == 42


def test_from_dict_rejects_missing_rows():
    with pytest.raises(ValueError, match="list of rows"):
        Dataset.from_dict(DataType.TASKS, {"headers": ["taskId"]})


def test_from_dataframe_converts_nan_and_numpy_scalars():
    df = pd.DataFrame({"workerId": ["W1", "W2"], "rate": [50.0, None], "level": [1, 2]})
    dataset = Dataset.from_dataframe(DataType.WORKERS, df)

    assert dataset.rows[1]["rate"] is None
    assert type(dataset.rows[0]["rate"]) is float
    assert type(dataset.rows[0]["level"]) is int


def test_to_dataframe_keeps_header_order():
    dataset = Dataset(
        data_type=DataType.CLIENTS,
        rows=[{"b": 1}, {"a": 2}],
        headers=["a", "b"],
    )
    assert list(dataset.to_dataframe().columns) == ["a", "b"]


class TestCellsEqual:
    """Strict equality used by bulk fix propagation."""

    @pytest.mark.parametrize(
        "a,b",
        [
            (MISSING, None),
            (None, ""),
            ("", MISSING),
            (2, 2.0),
            ("x", "x"),
            (True, True),
        ],
    )
    def test_equal(self, a, b):
        assert cells_equal(a, b)
        assert cells_equal(b, a)

    @pytest.mark.parametrize(
        "a,b",
        [
            (True, 1),
            (False, 0),
            ("2", 2),
            ("", " "),
            (None, 0),
            ("x", "X"),
        ],
    )
    def test_not_equal(self, a, b):
        assert not cells_equal(a, b)
        assert not cells_equal(b, a)


def test_null_like_excludes_whitespace_but_blank_includes_it():
    assert is_null_like("")
    assert not is_null_like("  ")
    assert is_blank("  ")
    assert is_blank(MISSING)
    assert not is_blank(0)
