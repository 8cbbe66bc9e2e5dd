"""Auto-fix applier.

Writes corrected values into a dataset's rows in place. Rules, in priority order:

1. Only findings carrying a ``suggested_value`` (and a column) are eligible.
2. Duplicate findings only ever touch their own row: copying a disambiguated
   value onto other rows would create new duplicates.
3. With ``apply_to_all``, the original value at the finding's cell is captured and
   every row whose cell equals it (``cells_equal``: strict, with missing/null/""
   treated as one value) receives the correction.
4. Otherwise only the finding's own cell changes.

A cell already holding the corrected value is left alone and not counted as
fixed, so applying the same findings twice is a no-op the second time. Rows are
never added, removed or reordered.

The applier takes no locks. Callers must ensure no other write to the same
dataset runs during a call.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from data_alchemist.core.dataset import MISSING, CellValue, Dataset, cells_equal, is_null_like
from data_alchemist.core.enums import Category
from data_alchemist.errors import RequestError
from data_alchemist.validation.models import ValidationFinding
from .models import ApplyFixResult, AutoFixSummary, FixRecord

logger = logging.getLogger(__name__)


def apply_fixes(
    dataset: Dataset,
    findings: Iterable[ValidationFinding],
    apply_to_all: bool = False,
) -> AutoFixSummary:
    """Apply the suggested values of ``findings`` to ``dataset``.

    Per-finding problems (no suggestion, stale row, other dataset) are tallied
    in ``total_require_manual`` and never stop the batch.

    Args:
        dataset: Row store to mutate.
        findings: Findings for this dataset, typically from ``Classifier.classify_all``.
        apply_to_all: Propagate each correction to every row sharing the
            original value (ignored for duplicates).

    Returns:
        AutoFixSummary for this dataset.
    """
    summary = AutoFixSummary()
    for finding in findings:
        if (
            finding.data_type != dataset.data_type
            or finding.column is None
            or not finding.has_suggestion
        ):
            summary.total_require_manual += 1
            continue

        records = _write(
            dataset,
            finding.row,
            finding.column,
            finding.suggested_value,
            bulk=apply_to_all and finding.category != Category.DUPLICATE,
        )
        if records is None:
            logger.warning(
                "Row %d not found in %s (%d rows); skipping stale finding",
                finding.row,
                dataset.data_type.value,
                dataset.row_count,
            )
            summary.total_require_manual += 1
        elif not records:
            summary.total_already_correct += 1
        else:
            for record in records:
                summary.record(record)

    logger.info(
        "Auto-fix on %s: %d fixed, %d require manual review",
        dataset.data_type.value,
        summary.total_fixed,
        summary.total_require_manual,
    )
    return summary


def apply_single_fix(
    dataset: Dataset,
    finding: ValidationFinding,
    suggested_value: CellValue,
    apply_to_all: bool = False,
) -> ApplyFixResult:
    """Apply a caller-supplied correction for one finding.

    The duplicate and equality rules of ``apply_fixes`` apply unchanged.

    Args:
        dataset: Row store to mutate.
        finding: Finding whose cell is being corrected.
        suggested_value: Value to write. May be None to clear the cell.
        apply_to_all: Propagate to every row sharing the original value.

    Returns:
        ApplyFixResult. ``success`` is False if the finding's row is gone.

    Raises:
        RequestError: If the finding has no column or belongs to another dataset.
    """
    if finding.column is None:
        raise RequestError("Cannot apply a fix to a finding without a column")
    if finding.data_type != dataset.data_type:
        raise RequestError(
            f"Finding is for {finding.data_type.value}, dataset is {dataset.data_type.value}"
        )

    records = _write(
        dataset,
        finding.row,
        finding.column,
        suggested_value,
        bulk=apply_to_all and finding.category != Category.DUPLICATE,
    )
    if records is None:
        return ApplyFixResult(success=False)
    return ApplyFixResult(success=True, affected_rows=len(records), fixes=records)


def _write(
    dataset: Dataset, row: int, column: str, value: CellValue, bulk: bool
) -> Optional[List[FixRecord]]:
    """Write ``value`` and return the mutations made, or None for a stale row."""
    if not dataset.has_row(row):
        return None

    if bulk:
        original = dataset.get_cell(row, column)
        targets = [
            index
            for index, current in enumerate(dataset.column_values(column))
            if cells_equal(current, original)
        ]
        logger.debug(
            "Propagating %r -> %r across %d rows of %s.%s",
            original,
            value,
            len(targets),
            dataset.data_type.value,
            column,
        )
    else:
        targets = [row]

    records: List[FixRecord] = []
    for index in targets:
        old = dataset.get_cell(index, column)
        if _already_holds(old, value):
            continue
        dataset.set_cell(index, column, value)
        records.append(FixRecord(row=index, column=column, old_value=old, new_value=value))
    return records


def _already_holds(current, value: CellValue) -> bool:
    # Null-like values only count as already correct when they are the same
    # value: writing "" over None is still a change.
    if is_null_like(current) or is_null_like(value):
        return current is not MISSING and type(current) is type(value) and current == value
    return cells_equal(current, value)
