"""Row store for one uploaded dataset.

A dataset is an ordered list of rows, each a mapping of column name to a scalar
cell value. Rows may carry different keys, so every read distinguishes three
"absent" states:

- missing: the key is not in the row (``get_cell`` returns ``MISSING``)
- null: the key holds ``None``
- empty: the key holds ``""``

Validation checks read through ``iter_rows``/``get_cell`` and never mutate;
only the remediation applier calls ``set_cell``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from datetime import time as dt_time
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

import pandas as pd

from .enums import DataType

CellValue = Union[str, int, float, bool, None]
DataRow = Dict[str, CellValue]


class _Missing:
    """Sentinel for a column that is absent from a row."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def is_null_like(value: Any) -> bool:
    """True for missing, ``None`` and the empty string.

    This is the equivalence class used by bulk fix propagation: a null cell and
    an empty-string cell are treated as the same defect. Whitespace-only strings
    are not part of it.
    """
    return value is MISSING or value is None or value == ""


def is_blank(value: Any) -> bool:
    """True for missing, ``None``, and empty or whitespace-only strings."""
    if value is MISSING or value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


def cells_equal(a: Any, b: Any) -> bool:
    """Compare two cell values with strict equality.

    Rules:
        - missing, ``None`` and ``""`` are equal to each other (see ``is_null_like``)
        - booleans only equal booleans (``True`` never equals ``1``)
        - ints and floats compare numerically (``2 == 2.0``)
        - anything else must share its type and compare equal (``"2" != 2``)
    """
    if is_null_like(a) or is_null_like(b):
        return is_null_like(a) and is_null_like(b)
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    return type(a) is type(b) and a == b


@dataclass
class Dataset:
    """Ordered rows for one dataset type plus provenance metadata.

    Attributes:
        data_type: Which entity the rows describe.
        rows: Row mappings in upload order.
        headers: Column names, first-seen order. Defaults to the keys of row 0
            followed by any extra keys found in later rows.
        file_name: Name of the uploaded file.
        file_size: Size of the uploaded file in bytes.
    """

    data_type: DataType
    rows: List[DataRow] = field(default_factory=list)
    headers: List[str] = field(default_factory=list)
    file_name: str = ""
    file_size: int = 0

    def __post_init__(self) -> None:
        self.data_type = DataType(self.data_type)
        if not self.headers:
            self.headers = _collect_headers(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def row_count(self) -> int:
        """Number of rows. Always equal to ``len(rows)``."""
        return len(self.rows)

    def has_row(self, index: int) -> bool:
        """True if ``index`` addresses an existing row."""
        return 0 <= index < len(self.rows)

    def iter_rows(self) -> Iterator[Tuple[int, Mapping[str, CellValue]]]:
        """Yield ``(index, read-only row view)`` pairs in order."""
        for index, row in enumerate(self.rows):
            yield index, MappingProxyType(row)

    def get_cell(self, index: int, column: str) -> Any:
        """Read one cell, returning ``MISSING`` if the row lacks the column.

        Raises:
            IndexError: If ``index`` is out of range.
        """
        if not self.has_row(index):
            raise IndexError(f"Row {index} out of range for {self.row_count} rows")
        return self.rows[index].get(column, MISSING)

    def set_cell(self, index: int, column: str, value: CellValue) -> None:
        """Write one cell in place. Never adds or removes rows.

        Raises:
            IndexError: If ``index`` is out of range.
        """
        if not self.has_row(index):
            raise IndexError(f"Row {index} out of range for {self.row_count} rows")
        self.rows[index][column] = value

    def column_values(self, column: str) -> List[Any]:
        """Values of ``column`` across all rows, ``MISSING`` where absent."""
        return [row.get(column, MISSING) for row in self.rows]

    def has_column(self, column: str) -> bool:
        """True if any row carries ``column``."""
        return column in self.headers or any(column in row for row in self.rows)

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the session-store layout."""
        return {
            "headers": list(self.headers),
            "rows": [dict(row) for row in self.rows],
            "rowCount": self.row_count,
            "fileName": self.file_name,
            "fileSize": self.file_size,
        }

    @classmethod
    def from_dict(cls, data_type: DataType, data: Mapping[str, Any]) -> "Dataset":
        """Build a dataset from the session-store layout.

        Raises:
            ValueError: If ``rows`` is missing or not a list of mappings.
        """
        rows = data.get("rows")
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise ValueError(f"Dataset '{DataType(data_type).value}' must have a list of rows")
        return cls(
            data_type=data_type,
            rows=[dict(r) for r in rows],
            headers=list(data.get("headers") or []),
            file_name=str(data.get("fileName") or ""),
            file_size=int(data.get("fileSize") or 0),
        )

    @classmethod
    def from_dataframe(
        cls, data_type: DataType, df: pd.DataFrame, file_name: str = "", file_size: int = 0
    ) -> "Dataset":
        """Build a dataset from a DataFrame, turning NaN into ``None``.

        NumPy scalars are converted to plain Python values and date or time
        cells to ISO strings (``YYYY-MM-DD`` for midnight datetimes), so rows
        stay JSON-serializable.
        """
        clean = df.astype(object).where(df.notna(), None)
        rows = [
            {str(k): _to_python(v) for k, v in record.items()}
            for record in clean.to_dict(orient="records")
        ]
        return cls(
            data_type=data_type,
            rows=rows,
            headers=[str(c) for c in df.columns],
            file_name=file_name,
            file_size=file_size,
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Return rows as a DataFrame with ``headers`` as the column order."""
        return pd.DataFrame(self.rows, columns=_collect_headers(self.rows, self.headers))


def _collect_headers(rows: List[DataRow], seed: Optional[List[str]] = None) -> List[str]:
    headers: List[str] = list(seed or [])
    seen = set(headers)
    for row in rows:
        for key in row:
            if key not in seen:
                seen.add(key)
                headers.append(key)
    return headers


def _to_python(value: Any) -> CellValue:
    # Excel date cells arrive as Timestamps; store them as ISO text
    if isinstance(value, datetime):
        if value.tzinfo is None and value.time() == dt_time(0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, (date, dt_time)):
        return value.isoformat()
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        return value.item()
    return value


__all__ = [
    "CellValue",
    "DataRow",
    "Dataset",
    "MISSING",
    "cells_equal",
    "is_blank",
    "is_null_like",
]
