"""Core enumerations used across the package."""

from __future__ import annotations

from enum import Enum


class DataType(str, Enum):
    """Entity types handled by the engine.

    Values are strings to ease serialization and CLI interchange.
    """

    CLIENTS = "clients"
    WORKERS = "workers"
    TASKS = "tasks"


class Category(str, Enum):
    """Validation finding categories."""

    REQUIRED = "required"
    TYPE = "type"
    DUPLICATE = "duplicate"
    REFERENCE = "reference"
    BUSINESS = "business"
    SKILL = "skill"
    DATE_FORMAT = "dateFormat"
    BOOLEAN_FORMAT = "booleanFormat"


class Severity(str, Enum):
    """Finding severity, ordered from most to least severe."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Numeric rank where 0 is the most severe."""
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW]


class RemediationTier(str, Enum):
    """How a finding gets resolved."""

    AUTO_FIXABLE = "auto-fixable"
    MANUAL_REVIEW = "manual-review"
    BUSINESS_DECISION = "business-decision"


__all__ = ["DataType", "Category", "Severity", "RemediationTier"]
