"""Reference integrity validation check.

Tasks point at clients (``clientId``) and optionally at workers (``assignedWorker``).
Each non-blank reference must match an identifier in the other dataset. A reference
is only checked when the dataset it points at was supplied; blank references are
left to required_fields.
"""

from __future__ import annotations

from typing import Iterator

from data_alchemist.core.dataset import MISSING, Dataset
from data_alchemist.core.enums import Category, DataType
from data_alchemist.core.schemas import get_reference_fields
from data_alchemist.core.utils import normalize_key
from . import ValidationContext
from ..config import get_kind, get_severity
from ..models import ValidationFinding

# Rule names in config.REFERENCES_SEVERITY, keyed by the referenced dataset
_RULES = {DataType.CLIENTS: "client", DataType.WORKERS: "worker"}


class ReferencesCheck:
    """Validate that foreign-key-like columns point at existing entities."""

    check_id = "references"

    def validate(self, dataset: Dataset, context: ValidationContext) -> Iterator[ValidationFinding]:
        """Yield a ``reference`` finding for each dangling reference.

        Args:
            dataset: Dataset under test.
            context: Supplies the identifiers of the referenced datasets.
        """
        for field_name, target in get_reference_fields(dataset.data_type):
            known = context.known_ids(target)
            if known is None:
                continue
            rule = _RULES[target]
            for index, row in dataset.iter_rows():
                value = row.get(field_name, MISSING)
                key = normalize_key(value)
                if not key or key in known:
                    continue
                yield ValidationFinding(
                    category=Category.REFERENCE,
                    severity=get_severity(self.check_id, rule),
                    data_type=dataset.data_type,
                    row=index,
                    column=field_name,
                    message=f'Task references non-existent {rule} ID "{value}"',
                    value=value,
                    kind=get_kind(self.check_id, rule),
                    check_id=self.check_id,
                    hint=f"Ensure the {rule} ID exists in the {target.value} dataset",
                )

    def applies_to_data_type(self, data_type: DataType) -> bool:
        """Only tasks carry references."""
        return data_type == DataType.TASKS
