"""Remediation result models.

- FixRecord: One cell mutation, with enough detail to undo it
- AutoFixSummary: Outcome of applying a batch of findings to one dataset
- AutoFixReport: Per-dataset summaries plus overall totals
- ApplyFixResult: Outcome of applying one caller-supplied correction
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from data_alchemist.core.dataset import MISSING, CellValue
from data_alchemist.core.enums import DataType


@dataclass(frozen=True)
class FixRecord:
    """One cell changed by a fix.

    ``old_value`` is ``MISSING`` when the row did not carry the column before.
    """

    row: int
    column: str
    old_value: Any
    new_value: CellValue

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row": self.row,
            "column": self.column,
            "oldValue": None if self.old_value is MISSING else self.old_value,
            "oldValueMissing": self.old_value is MISSING,
            "newValue": self.new_value,
        }


@dataclass
class AutoFixSummary:
    """Outcome of applying findings to one dataset.

    Attributes:
        total_fixed: Cells actually mutated.
        total_require_manual: Findings not fixed, because they had no safe
            value, pointed at a stale row, or were otherwise ineligible.
        total_already_correct: Findings whose target cells already held the
            corrected value. Counted in neither of the other totals.
        fixes: Every mutation, in the order performed.
    """

    total_fixed: int = 0
    total_require_manual: int = 0
    total_already_correct: int = 0
    fixes: List[FixRecord] = field(default_factory=list)

    def record(self, fix: FixRecord) -> None:
        self.fixes.append(fix)
        self.total_fixed += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalFixed": self.total_fixed,
            "totalRequireManual": self.total_require_manual,
            "totalAlreadyCorrect": self.total_already_correct,
            "fixes": [f.to_dict() for f in self.fixes],
        }


@dataclass
class AutoFixReport:
    """Auto-fix results across datasets.

    Attributes:
        details: Summary per dataset type that had data and findings.
        total_attempted: Number of findings submitted.
    """

    details: Dict[DataType, AutoFixSummary] = field(default_factory=dict)
    total_attempted: int = 0

    @property
    def total_fixed(self) -> int:
        return sum(s.total_fixed for s in self.details.values())

    @property
    def total_require_manual(self) -> int:
        return sum(s.total_require_manual for s in self.details.values())

    @property
    def message(self) -> str:
        if self.total_fixed > 0:
            return (
                f"Successfully auto-fixed {self.total_fixed} issues. "
                f"{self.total_require_manual} require manual review."
            )
        return "No issues could be automatically fixed. Manual review required."

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "totalFixed": self.total_fixed,
                "totalRequireManual": self.total_require_manual,
                "totalAttempted": self.total_attempted,
            },
            "details": {dt.value: s.to_dict() for dt, s in self.details.items()},
            "message": self.message,
        }


@dataclass
class ApplyFixResult:
    """Outcome of applying a single correction.

    ``success`` is False only when the finding's row no longer exists.
    """

    success: bool
    affected_rows: int = 0
    fixes: List[FixRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "affectedRows": self.affected_rows,
            "fixes": [f.to_dict() for f in self.fixes],
        }
