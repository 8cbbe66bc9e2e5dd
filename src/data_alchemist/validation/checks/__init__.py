"""Validation checks base interface.

This module defines the protocol (interface) that all validation checks must implement,
plus the context object that gives a check read-only access to the other datasets.

To implement a new validation check:

1. Create a new file in this directory (e.g., `my_check.py`)
2. Define a class that implements the ValidationCheck protocol
3. Implement the required methods: `validate()` and `applies_to_data_type()`
4. Add the severity rules to config.py
5. Add the check to the ALL_CHECKS list in registry.py

Example:
    ```python
    # checks/my_check.py
    from typing import Iterator
    from data_alchemist.core.dataset import Dataset
    from data_alchemist.core.enums import DataType
    from . import ValidationContext
    from ..models import ValidationFinding

    class MyCheck:
        check_id = "my_check"

        def validate(
            self, dataset: Dataset, context: ValidationContext
        ) -> Iterator[ValidationFinding]:
            for index, row in dataset.iter_rows():
                ...
                yield ValidationFinding(...)

        def applies_to_data_type(self, data_type: DataType) -> bool:
            return data_type == DataType.TASKS
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterator, Optional, Protocol, Set

from data_alchemist.core.dataset import Dataset
from data_alchemist.core.enums import DataType
from data_alchemist.core.schemas import get_id_field
from data_alchemist.core.utils import normalize_key
from ..config import ValidationSettings
from ..models import ValidationFinding


@dataclass(frozen=True)
class ValidationContext:
    """Everything a check may consult besides the dataset under test.

    Attributes:
        clients: Clients dataset, if supplied.
        workers: Workers dataset, if supplied.
        tasks: Tasks dataset, if supplied.
        settings: Business-rule thresholds.
        today: Reference date for "deadline in the past".
    """

    clients: Optional[Dataset] = None
    workers: Optional[Dataset] = None
    tasks: Optional[Dataset] = None
    settings: ValidationSettings = field(default_factory=ValidationSettings)
    today: date = field(default_factory=date.today)

    def dataset(self, data_type: DataType) -> Optional[Dataset]:
        """Return the dataset of the given type, or None if not supplied."""
        return {
            DataType.CLIENTS: self.clients,
            DataType.WORKERS: self.workers,
            DataType.TASKS: self.tasks,
        }[data_type]

    def known_ids(self, data_type: DataType) -> Optional[Set[str]]:
        """Normalized identifiers present in a dataset.

        Returns:
            Set of normalized IDs, or None if the dataset was not supplied, so
            callers can tell "no IDs" apart from "nothing to compare against".
        """
        dataset = self.dataset(data_type)
        if dataset is None:
            return None
        keys = (normalize_key(v) for v in dataset.column_values(get_id_field(data_type)))
        return {k for k in keys if k}


class ValidationCheck(Protocol):
    """Protocol defining the interface for validation checks.

    All validation checks must implement this interface. Use duck typing
    (Protocol) for flexibility - no need to inherit from a base class.
    Checks are pure: they read the dataset and context and never mutate them.

    Methods:
        validate: Produce findings for one dataset.
        applies_to_data_type: Determine if check is applicable to a dataset type.
    """

    check_id: str

    def validate(self, dataset: Dataset, context: ValidationContext) -> Iterator[ValidationFinding]:
        """Run the validation check.

        Args:
            dataset: Dataset under test.
            context: Other datasets, thresholds and the reference date.

        Returns:
            Lazy iterator of findings. Yields nothing if the dataset is clean.
        """
        ...

    def applies_to_data_type(self, data_type: DataType) -> bool:
        """Check if this validation applies to a given dataset type.

        Some validations only apply to specific dataset types:
        - References: only tasks point at other entities
        - Dates: only tasks carry deadlines

        Returns:
            True if check should run for this dataset type, False to skip.
        """
        ...


__all__ = ["ValidationCheck", "ValidationContext"]
