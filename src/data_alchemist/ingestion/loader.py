"""Read uploaded CSV/Excel files into datasets and write them back out.

CSV cells are read as text (empty cells become ``""``), which matches how
uploads arrive from a browser. Excel cells keep their native types, with empty
cells as ``None``. Headers are mapped to canonical field names via
``normalize_header``.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from data_alchemist.core.dataset import Dataset
from data_alchemist.core.enums import DataType
from data_alchemist.core.schemas import normalize_header

logger = logging.getLogger(__name__)

CSV_SUFFIXES = (".csv",)
EXCEL_SUFFIXES = (".xlsx", ".xls")


def load_dataset(path: Path, data_type: DataType) -> Dataset:
    """Load one file as a dataset of ``data_type``.

    Args:
        path: CSV or Excel file. Only the first sheet of a workbook is read.
        data_type: Which entity the file describes.

    Returns:
        Dataset with canonical headers and provenance filled in.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the file type is unsupported or the file cannot be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset file not found: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix in CSV_SUFFIXES:
            df = pd.read_csv(
                path,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                encoding="utf-8-sig",
            )
        elif suffix in EXCEL_SUFFIXES:
            df = pd.read_excel(path, sheet_name=0, dtype=object)
        else:
            raise ValueError(
                f"Unsupported file type '{suffix}' for {path}. "
                f"Expected one of: {', '.join(CSV_SUFFIXES + EXCEL_SUFFIXES)}"
            )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, OSError) as e:
        raise ValueError(f"Failed to load dataset from {path}: {e}") from e

    df.columns = _unique_headers([normalize_header(c) for c in df.columns])
    dataset = Dataset.from_dataframe(
        DataType(data_type), df, file_name=path.name, file_size=path.stat().st_size
    )
    logger.info(
        "Loaded %s from %s: %d rows, %d columns",
        dataset.data_type.value,
        path,
        dataset.row_count,
        len(dataset.headers),
    )
    return dataset


def export_dataset(dataset: Dataset, output_dir: Path) -> Path:
    """Write a dataset to ``<output_dir>/<data_type>.csv``.

    Returns:
        Path of the written file.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    out_path = output_dir / f"{dataset.data_type.value}.csv"
    dataset.to_dataframe().to_csv(out_path, index=False, encoding="utf-8-sig")
    logger.info("Exported %d %s rows to %s", dataset.row_count, dataset.data_type.value, out_path)
    return out_path


def _unique_headers(headers):
    # Two aliases of the same field ("Client", "Client Name") keep both columns
    seen = {}
    result = []
    for header in headers:
        count = seen.get(header, 0)
        seen[header] = count + 1
        result.append(header if count == 0 else f"{header}_{count}")
    return result
