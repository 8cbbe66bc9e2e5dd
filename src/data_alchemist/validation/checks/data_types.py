"""Data type validation check.

Numeric, boolean and date columns must hold values that parse cleanly. Values with
units or currency symbols ("90.5USD"), loose boolean words ("yes") and non-ISO dates
("2024/12/25") are reported so the classifier can normalize them. Client priority
must be a known level name or an integer level.

Blank cells are skipped here; required_fields reports them.
"""

from __future__ import annotations

from typing import Any, Iterator

from data_alchemist.core.dataset import MISSING, Dataset, is_blank
from data_alchemist.core.enums import Category, DataType
from data_alchemist.core.schemas import (
    PRIORITY_LEVEL_RANGE,
    VALID_PRIORITIES,
    get_boolean_fields,
    get_date_fields,
    get_numeric_fields,
)
from data_alchemist.core.utils import is_canonical_boolean, parse_iso_date, parse_number
from . import ValidationContext
from ..config import get_kind, get_severity
from ..models import ValidationFinding


class DataTypesCheck:
    """Validate that typed columns hold well-formed values."""

    check_id = "data_types"

    def validate(self, dataset: Dataset, context: ValidationContext) -> Iterator[ValidationFinding]:
        """Yield findings for malformed numeric, boolean, date and priority cells.

        Args:
            dataset: Dataset under test.
            context: Validation context (not used by this check).

        Yields:
            ``type``, ``booleanFormat`` and ``dateFormat`` findings in row order.
        """
        data_type = dataset.data_type
        numeric = get_numeric_fields(data_type)
        boolean = get_boolean_fields(data_type)
        dates = get_date_fields(data_type)

        for index, row in dataset.iter_rows():
            for field_name in numeric:
                value = row.get(field_name, MISSING)
                if not is_blank(value) and parse_number(value) is None:
                    yield self._finding(
                        dataset, index, field_name, value, Category.TYPE, "number",
                        f'Invalid number format in "{field_name}": "{value}"',
                        f"{field_name} should be a plain number (e.g., 25.50)",
                    )

            for field_name in boolean:
                value = row.get(field_name, MISSING)
                if not is_blank(value) and not is_canonical_boolean(value):
                    yield self._finding(
                        dataset, index, field_name, value, Category.BOOLEAN_FORMAT, "boolean",
                        f'Invalid boolean format in "{field_name}": "{value}"',
                        f"{field_name} should be true or false",
                    )

            for field_name in dates:
                value = row.get(field_name, MISSING)
                if not is_blank(value) and parse_iso_date(value) is None:
                    yield self._finding(
                        dataset, index, field_name, value, Category.DATE_FORMAT, "date",
                        f'Invalid date format in "{field_name}": "{value}"',
                        "Use format: YYYY-MM-DD",
                    )

            if data_type == DataType.CLIENTS:
                value = row.get("priority", MISSING)
                if not is_blank(value) and not _is_valid_priority(value):
                    yield self._finding(
                        dataset, index, "priority", value, Category.TYPE, "priority",
                        f'Invalid priority value: "{value}"',
                        "Priority must be one of: Low, Medium, High, Critical (or a level 1-5)",
                    )

    def applies_to_data_type(self, data_type: DataType) -> bool:
        """Check applies to all dataset types."""
        return True

    def _finding(
        self,
        dataset: Dataset,
        index: int,
        column: str,
        value: Any,
        category: Category,
        rule: str,
        message: str,
        hint: str,
    ) -> ValidationFinding:
        return ValidationFinding(
            category=category,
            severity=get_severity(self.check_id, rule),
            data_type=dataset.data_type,
            row=index,
            column=column,
            message=message,
            value=value,
            kind=get_kind(self.check_id, rule),
            check_id=self.check_id,
            hint=hint,
        )


def _is_valid_priority(value: Any) -> bool:
    if isinstance(value, str) and value.strip().lower() in VALID_PRIORITIES:
        return True
    number = parse_number(value)
    if number is None or not number.is_integer():
        return False
    low, high = PRIORITY_LEVEL_RANGE
    return low <= number <= high
