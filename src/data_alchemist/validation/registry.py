"""Validation check registry and runner.

This module orchestrates validation checks:
- ALL_CHECKS: List of all available validation check instances
- run_validation(): Executes applicable checks and returns ValidationSummary
- print_report(): Displays validation results to console
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from data_alchemist.core.dataset import Dataset
from data_alchemist.core.enums import DataType
from .checks import ValidationContext
from .checks.business_rules import BusinessRulesCheck
from .checks.data_types import DataTypesCheck
from .checks.duplicates import DuplicatesCheck
from .checks.references import ReferencesCheck
from .checks.required_fields import RequiredFieldsCheck
from .checks.skills import SkillsCheck
from .config import ValidationSettings
from .models import ValidationFinding, ValidationSummary

logger = logging.getLogger(__name__)

# Registry of all available validation checks.
# Within a row, findings are reported in this order.
ALL_CHECKS = [
    # Structural checks
    RequiredFieldsCheck(),
    DataTypesCheck(),
    DuplicatesCheck(),
    # Cross-dataset checks
    ReferencesCheck(),
    SkillsCheck(),
    # Plausibility checks
    BusinessRulesCheck(),
]

# Order of datasets in the summary
DATASET_ORDER = (DataType.CLIENTS, DataType.WORKERS, DataType.TASKS)


def run_validation(
    clients: Optional[Dataset] = None,
    workers: Optional[Dataset] = None,
    tasks: Optional[Dataset] = None,
    *,
    settings: Optional[ValidationSettings] = None,
    today: Optional[date] = None,
) -> ValidationSummary:
    """Run all applicable validation checks on the supplied datasets.

    Any dataset may be omitted; it simply contributes no findings. Cross-dataset
    checks (references, skills, capacity) consult the other datasets when present.

    Args:
        clients: Clients dataset.
        workers: Workers dataset.
        tasks: Tasks dataset.
        settings: Business-rule thresholds. Defaults to ``ValidationSettings()``.
        today: Reference date for past-deadline detection. Defaults to today.

    Returns:
        ValidationSummary with findings ordered clients, workers, tasks, and
        within each dataset by row.

    Raises:
        ValueError: If a dataset is passed in the wrong slot.

    Examples:
        >>> summary = run_validation(clients=clients, tasks=tasks)
        >>> print(summary.summary())
    """
    context = ValidationContext(
        clients=clients,
        workers=workers,
        tasks=tasks,
        settings=settings or ValidationSettings(),
        today=today or date.today(),
    )

    all_findings: List[ValidationFinding] = []
    validated: List[DataType] = []
    for data_type in DATASET_ORDER:
        dataset = context.dataset(data_type)
        if dataset is None:
            continue
        if dataset.data_type != data_type:
            raise ValueError(
                f"Expected a {data_type.value} dataset, got {dataset.data_type.value}"
            )

        findings: List[ValidationFinding] = []
        for check in ALL_CHECKS:
            if check.applies_to_data_type(data_type):
                findings.extend(check.validate(dataset, context))

        # Stable sort keeps check order for findings on the same row
        findings.sort(key=lambda f: f.row)
        all_findings.extend(findings)
        validated.append(data_type)
        logger.debug(
            "Validated %s: %d rows, %d findings", data_type.value, dataset.row_count, len(findings)
        )

    summary = ValidationSummary(all_errors=all_findings, validated=validated)
    logger.info(
        "Validation finished: %d errors, %d warnings, health score %d",
        summary.total_errors,
        summary.total_warnings,
        summary.health_score,
    )
    return summary


def print_report(summary: ValidationSummary) -> None:
    """Print validation summary to console.

    Displays the summary followed by every finding grouped by category.

    Args:
        summary: ValidationSummary to display.
    """
    print(summary.summary())
    print()

    if not summary.all_errors:
        print("✅ All validation checks passed!")
        return

    for category, findings in summary.errors_by_category.items():
        print(f"{category.value} ({len(findings)}):")
        for finding in findings:
            icon = "❌" if finding.kind == "error" else "⚠️"
            location = f"{finding.data_type.value} row {finding.row}"
            if finding.column:
                location += f", {finding.column}"
            print(f"{icon} [{finding.severity.value}] {location}: {finding.message}")
