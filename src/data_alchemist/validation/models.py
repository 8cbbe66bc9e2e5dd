"""Validation data models.

This module defines core data structures for validation results:
- ValidationFinding: One detected data-quality issue
- ValidationSummary: Aggregated findings across the clients, workers and tasks datasets
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from data_alchemist.core.dataset import MISSING, CellValue
from data_alchemist.core.enums import Category, DataType, Severity
from data_alchemist.errors import RequestError


@dataclass(frozen=True)
class ValidationFinding:
    """One data-quality issue found by a validation check.

    Findings are immutable. Correcting data means running validation again,
    not editing a finding.

    Attributes:
        category: What kind of problem this is (drives the remediation tier).
        severity: How serious the problem is.
        data_type: Dataset the finding belongs to.
        row: 0-based position of the row in the dataset. Positional only: it is
            invalidated by any row insertion or deletion.
        column: Offending column, or None for dataset-level findings.
        message: Human-readable description.
        value: The offending raw value (None when the cell is missing or null).
        suggested_value: Safe corrected value, set only by the classifier.
        kind: "error" or "warning".
        check_id: Identifier of the check that produced the finding.
        hint: Remediation hint for a person reviewing the finding.

    Examples:
        >>> ValidationFinding(
        ...     category=Category.REQUIRED,
        ...     severity=Severity.HIGH,
        ...     data_type=DataType.CLIENTS,
        ...     row=3,
        ...     column="priority",
        ...     message='Required field "priority" is empty',
        ... )
    """

    category: Category
    severity: Severity
    data_type: DataType
    row: int
    column: Optional[str]
    message: str
    value: CellValue = None
    suggested_value: CellValue = None
    kind: str = "error"  # "error" | "warning"
    check_id: str = ""
    hint: str = ""

    def __post_init__(self) -> None:
        """Validate field constraints."""
        if self.kind not in ("error", "warning"):
            raise ValueError(f"Invalid kind: {self.kind}. Must be 'error' or 'warning'.")
        if self.row < 0:
            raise ValueError(f"Row index must be non-negative, got {self.row}")
        if self.value is MISSING:
            object.__setattr__(self, "value", None)

    @property
    def has_suggestion(self) -> bool:
        """True if the classifier attached a corrected value."""
        return self.suggested_value is not None

    def with_suggestion(self, value: CellValue) -> "ValidationFinding":
        """Return a copy carrying ``value`` as the suggested correction."""
        return replace(self, suggested_value=value)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with camelCase keys for transport and session storage."""
        data: Dict[str, Any] = {
            "category": self.category.value,
            "severity": self.severity.value,
            "type": self.kind,
            "dataType": self.data_type.value,
            "row": self.row,
            "column": self.column,
            "message": self.message,
            "value": self.value,
        }
        if self.has_suggestion:
            data["suggestedValue"] = self.suggested_value
        if self.check_id:
            data["checkId"] = self.check_id
        if self.hint:
            data["suggestion"] = self.hint
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ValidationFinding":
        """Parse a finding from its serialized form.

        Raises:
            RequestError: If identifying fields are missing or invalid.
        """
        if not isinstance(data, Mapping):
            raise RequestError(f"Finding must be an object, got {type(data).__name__}")
        missing = [k for k in ("category", "dataType", "row") if data.get(k) is None]
        if missing:
            raise RequestError(f"Finding is missing required fields: {', '.join(missing)}")
        try:
            category = Category(data["category"])
            data_type = DataType(data["dataType"])
            severity = Severity(data.get("severity") or Severity.MEDIUM.value)
        except ValueError as e:
            raise RequestError(f"Invalid finding: {e}") from e
        row = data["row"]
        if isinstance(row, bool) or not isinstance(row, int) or row < 0:
            raise RequestError(f"Finding row must be a non-negative integer, got {row!r}")
        column = data.get("column")
        if column is not None and not isinstance(column, str):
            raise RequestError(f"Finding column must be a string, got {column!r}")
        return cls(
            category=category,
            severity=severity,
            data_type=data_type,
            row=row,
            column=column,
            message=str(data.get("message") or ""),
            value=data.get("value"),
            suggested_value=data.get("suggestedValue"),
            kind=data.get("type") if data.get("type") in ("error", "warning") else "error",
            check_id=str(data.get("checkId") or ""),
            hint=str(data.get("suggestion") or ""),
        )


def health_score(total_errors: int, total_warnings: int) -> int:
    """Compute a 0-100 data-quality score.

    Each error costs 10 points and each warning 3, saturating at 0. More
    findings never raise the score.

    Examples:
        >>> health_score(0, 0)
        100
        >>> health_score(3, 2)
        64
        >>> health_score(20, 0)
        0
    """
    if total_errors == 0 and total_warnings == 0:
        return 100
    return max(0, 100 - (total_errors * 10 + total_warnings * 3))


@dataclass
class ValidationSummary:
    """Aggregated validation results for up to three datasets.

    Attributes:
        all_errors: Every finding, clients first, then workers, then tasks, each
            in row order.
        validated: Dataset types that were present and checked.

    Examples:
        >>> summary = ValidationSummary(all_errors=findings)
        >>> summary.total_errors
        4
        >>> summary.health_score
        60
    """

    all_errors: List[ValidationFinding] = field(default_factory=list)
    validated: List[DataType] = field(default_factory=list)

    @property
    def total_errors(self) -> int:
        return sum(1 for f in self.all_errors if f.kind == "error")

    @property
    def total_warnings(self) -> int:
        return sum(1 for f in self.all_errors if f.kind == "warning")

    @property
    def critical_issues(self) -> int:
        """Count of findings with critical severity, across all categories."""
        return sum(1 for f in self.all_errors if f.severity == Severity.CRITICAL)

    @property
    def errors_by_category(self) -> Dict[Category, List[ValidationFinding]]:
        """Findings grouped by category, categories in first-seen order."""
        grouped: Dict[Category, List[ValidationFinding]] = {}
        for finding in self.all_errors:
            grouped.setdefault(finding.category, []).append(finding)
        return grouped

    @property
    def health_score(self) -> int:
        return health_score(self.total_errors, self.total_warnings)

    def has_errors(self, strict: bool = False) -> bool:
        """Check if validation failed.

        Args:
            strict: If True, treat warnings as errors. Default False.
        """
        if strict:
            return bool(self.all_errors)
        return self.total_errors > 0

    def for_data_type(self, data_type: DataType) -> List[ValidationFinding]:
        """Findings belonging to one dataset."""
        return [f for f in self.all_errors if f.data_type == data_type]

    def summary(self) -> str:
        """Generate a concise text summary of validation results.

        Examples:
            >>> print(summary.summary())
            Validation Summary:
              Datasets: clients, workers, tasks
              Issues: 4 errors, 2 warnings (1 critical)
              Health score: 54/100
        """
        datasets = ", ".join(dt.value for dt in self.validated) or "none"
        return (
            f"Validation Summary:\n"
            f"  Datasets: {datasets}\n"
            f"  Issues: {self.total_errors} errors, {self.total_warnings} warnings "
            f"({self.critical_issues} critical)\n"
            f"  Health score: {self.health_score}/100"
        )

    def to_console_summary(self) -> str:
        """Generate a summary plus a per-category breakdown for console output."""
        lines = [self.summary(), ""]

        if not self.all_errors:
            lines.append("✅ All validation checks passed!")
            return "\n".join(lines)

        lines.append("Issues by Category:")
        for category, findings in self.errors_by_category.items():
            errors = sum(1 for f in findings if f.kind == "error")
            icon = "❌" if errors else "⚠️"
            lines.append(f"{icon} {category.value}: {len(findings)} issues")
            lines.append(f"   - {_describe(findings[0])}")
        return "\n".join(lines)

    def to_markdown(self) -> str:
        """Generate detailed Markdown validation report.

        Returns:
            Formatted Markdown string with a summary section followed by one
            section per category listing every finding.
        """
        lines = [
            "# Validation Report",
            "",
            f"**Datasets:** {', '.join(dt.value for dt in self.validated) or 'none'}",
            f"**Generated:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            "",
            "## Summary",
            "",
            f"- **Health Score:** {self.health_score}/100",
            f"- **Errors:** {self.total_errors} ❌" if self.total_errors else "- **Errors:** 0",
            (
                f"- **Warnings:** {self.total_warnings} ⚠️"
                if self.total_warnings
                else "- **Warnings:** 0"
            ),
            f"- **Critical Issues:** {self.critical_issues}",
            "",
        ]

        if not self.all_errors:
            lines.append("## ✅ All Checks Passed")
            lines.append("")
            lines.append("No validation issues found.")
            lines.append("")
            return "\n".join(lines)

        for category, findings in self.errors_by_category.items():
            lines.append(f"## {category.value} ({len(findings)} issues)")
            lines.append("")
            for finding in findings:
                icon = "❌" if finding.kind == "error" else "⚠️"
                lines.append(f"- {icon} [{finding.severity.value}] {_describe(finding)}")
            lines.append("")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for caching on a session record."""
        return {
            "totalErrors": self.total_errors,
            "totalWarnings": self.total_warnings,
            "criticalIssues": self.critical_issues,
            "healthScore": self.health_score,
            "errorsByCategory": {
                category.value: [f.to_dict() for f in findings]
                for category, findings in self.errors_by_category.items()
            },
            "allErrors": [f.to_dict() for f in self.all_errors],
            "validated": [dt.value for dt in self.validated],
        }

    def to_json(self) -> str:
        """Generate detailed JSON validation report."""
        report = self.to_dict()
        report["generatedAt"] = datetime.now().isoformat()
        return json.dumps(report, indent=2, ensure_ascii=False, default=str)


def _describe(finding: ValidationFinding) -> str:
    location = f"{finding.data_type.value} row {finding.row}"
    if finding.column:
        location += f", {finding.column}"
    return f"{location}: {finding.message}"
