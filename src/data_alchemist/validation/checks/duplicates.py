"""Duplicate values validation check.

Identifiers and display names must be unique within a dataset. Values are compared
trimmed and case-insensitively. The first occurrence is treated as the original;
each later row that collides with it is reported.
"""

from __future__ import annotations

from typing import Dict, Iterator

from data_alchemist.core.dataset import MISSING, Dataset
from data_alchemist.core.enums import Category, DataType
from data_alchemist.core.schemas import get_unique_fields
from data_alchemist.core.utils import normalize_key
from . import ValidationContext
from ..config import get_kind, get_severity
from ..models import ValidationFinding


class DuplicatesCheck:
    """Validate uniqueness of identifier and name columns."""

    check_id = "duplicates"

    def validate(self, dataset: Dataset, context: ValidationContext) -> Iterator[ValidationFinding]:
        """Yield a ``duplicate`` finding for every row repeating an earlier value.

        Args:
            dataset: Dataset under test.
            context: Validation context (not used by this check).
        """
        unique_fields = get_unique_fields(dataset.data_type)
        first_seen: Dict[str, Dict[str, int]] = {name: {} for name, _ in unique_fields}

        for index, row in dataset.iter_rows():
            for field_name, rule in unique_fields:
                value = row.get(field_name, MISSING)
                key = normalize_key(value)
                if not key:
                    continue
                seen = first_seen[field_name]
                if key not in seen:
                    seen[key] = index
                    continue
                yield ValidationFinding(
                    category=Category.DUPLICATE,
                    severity=get_severity(self.check_id, rule),
                    data_type=dataset.data_type,
                    row=index,
                    column=field_name,
                    message=f'Duplicate {field_name} "{value}" (first seen in row {seen[key]})',
                    value=value,
                    kind=get_kind(self.check_id, rule),
                    check_id=self.check_id,
                    hint=f"Each {dataset.data_type.value[:-1]} must have a unique {field_name}",
                )

    def applies_to_data_type(self, data_type: DataType) -> bool:
        """Check applies to all dataset types."""
        return True
