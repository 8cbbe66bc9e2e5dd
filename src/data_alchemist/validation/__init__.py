"""Validation system for Data Alchemist Tools.

This module provides the validation framework for clients, workers and tasks data:

- **Models**: ValidationFinding, ValidationSummary - validation result data structures
- **Checks**: Individual validation check implementations (see validation/checks/)
- **Config**: Threshold constants and severity rules (import from .config)
- **Registry**: run_validation(), print_report() - check orchestration and execution

Public API:
    ValidationFinding: One detected issue with category, severity and location
    ValidationSummary: Aggregated findings with totals and health score
    ValidationSettings: Tunable business-rule thresholds
    run_validation: Run all applicable validation checks on up to three datasets
    print_report: Display validation results to console
    health_score: 0-100 score from error and warning counts

Usage:
    >>> from data_alchemist.validation import run_validation, print_report
    >>> summary = run_validation(clients=clients, workers=workers, tasks=tasks)
    >>> print_report(summary)

For implementation details:
    - See validation/checks/__init__.py for check interface conventions
    - See validation/config.py for threshold and severity configuration
    - See validation/registry.py for check orchestration
"""

from __future__ import annotations

from data_alchemist.core.enums import Category, DataType, Severity

from .config import ValidationSettings
from .models import ValidationFinding, ValidationSummary, health_score
from .registry import print_report, run_validation

__all__ = [
    # Data models
    "ValidationFinding",
    "ValidationSummary",
    "ValidationSettings",
    # Runner functions
    "run_validation",
    "print_report",
    "health_score",
    # Enums
    "Category",
    "DataType",
    "Severity",
]
