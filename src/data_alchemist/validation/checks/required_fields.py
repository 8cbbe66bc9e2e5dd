"""Required fields validation check.

Every row must carry a value for the columns its dataset type declares mandatory.
A column may be missing from a row entirely, hold null, or hold a blank string;
all three are reported, with the message saying which.
"""

from __future__ import annotations

from typing import Iterator

from data_alchemist.core.dataset import MISSING, Dataset, is_blank
from data_alchemist.core.enums import Category, DataType
from data_alchemist.core.schemas import get_required_fields
from . import ValidationContext
from ..config import get_kind, get_severity
from ..models import ValidationFinding


class RequiredFieldsCheck:
    """Validate that mandatory columns are filled on every row."""

    check_id = "required_fields"

    def validate(self, dataset: Dataset, context: ValidationContext) -> Iterator[ValidationFinding]:
        """Yield one finding per blank mandatory cell.

        Args:
            dataset: Dataset under test.
            context: Validation context (not used by this check).

        Yields:
            ``required`` findings, in row order then field order.
        """
        fields = get_required_fields(dataset.data_type)
        for index, row in dataset.iter_rows():
            for field_name in fields:
                value = row.get(field_name, MISSING)
                if not is_blank(value):
                    continue
                state = "missing" if value is MISSING else "empty"
                yield ValidationFinding(
                    category=Category.REQUIRED,
                    severity=get_severity(self.check_id, "missing"),
                    data_type=dataset.data_type,
                    row=index,
                    column=field_name,
                    message=f'Required field "{field_name}" is {state}',
                    value=value,
                    kind=get_kind(self.check_id, "missing"),
                    check_id=self.check_id,
                    hint=f"Please provide a value for {field_name}",
                )

    def applies_to_data_type(self, data_type: DataType) -> bool:
        """Check applies to all dataset types."""
        return True
