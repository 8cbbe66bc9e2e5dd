"""Validation configuration constants.

This module centralizes all validation thresholds and severity rules.
Adjust these constants to tune validation behavior based on real data patterns.

Severity Levels (most to least severe):
    - "critical": The dataset cannot be scheduled as-is
    - "high": Data is wrong or missing in a way that blocks use of the row
    - "medium": Formatting problems and identifier collisions
    - "low": Cosmetic issues and informational findings

Kinds:
    - "error": Counted in the summary's total_errors
    - "warning": Counted in the summary's total_warnings; used for
      business-rule findings that may be legitimate
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Set

import yaml

from data_alchemist.core.enums import Severity

# ============================================================================
# THRESHOLD DEFAULTS
# ============================================================================

MAX_HOURLY_RATE = 1000.0          # Absolute ceiling for a worker's hourly rate
RATE_OUTLIER_FACTOR = 100.0       # Two orders of magnitude above the median rate
RATE_OUTLIER_MIN_SAMPLES = 3      # Need a few rates before a median means anything
MAX_TASK_DURATION_HOURS = 168.0   # One week
WEEKLY_HOURS = 40.0               # Full-time week used to turn availability % into hours
CAPACITY_BUFFER = 1.2             # Tolerate 20% overbooking before flagging
MAX_TASKS_PER_CLIENT = 10
MAX_CRITICAL_CLIENT_SHARE = 0.20  # Share of clients marked critical priority


# ============================================================================
# SEVERITY RULES
# ============================================================================
# Format: {check_id: {rule: severity}}

REQUIRED_FIELDS_SEVERITY = {
    "missing": Severity.HIGH,
}

DATA_TYPES_SEVERITY = {
    "number": Severity.MEDIUM,
    "boolean": Severity.MEDIUM,
    "date": Severity.MEDIUM,
    "priority": Severity.MEDIUM,
}

# Identifier collisions break references; name collisions only confuse people
DUPLICATES_SEVERITY = {
    "id": Severity.MEDIUM,
    "name": Severity.LOW,
}

REFERENCES_SEVERITY = {
    "client": Severity.HIGH,
    "worker": Severity.HIGH,
}

BUSINESS_RULES_SEVERITY = {
    "rate_outlier": Severity.HIGH,
    "negative_rate": Severity.HIGH,
    "availability_range": Severity.HIGH,
    "non_positive_duration": Severity.HIGH,
    "long_duration": Severity.HIGH,
    "past_deadline": Severity.HIGH,
    "capacity_shortfall": Severity.HIGH,
    "idle_critical_client": Severity.HIGH,
    "idle_high_client": Severity.MEDIUM,
    "client_overload": Severity.LOW,
    "critical_share": Severity.MEDIUM,
}

SKILLS_SEVERITY = {
    "uncovered": Severity.CRITICAL,
    "assignment_mismatch": Severity.CRITICAL,
    "unused": Severity.LOW,
}


# ============================================================================
# SEVERITY MAP (for get_severity helper)
# ============================================================================

_SEVERITY_MAP: Dict[str, Dict[str, Severity]] = {
    "required_fields": REQUIRED_FIELDS_SEVERITY,
    "data_types": DATA_TYPES_SEVERITY,
    "duplicates": DUPLICATES_SEVERITY,
    "references": REFERENCES_SEVERITY,
    "business_rules": BUSINESS_RULES_SEVERITY,
    "skills": SKILLS_SEVERITY,
}

# Rules whose findings count as warnings; everything else is an error
_WARNING_RULES: Dict[str, Set[str]] = {
    "business_rules": set(BUSINESS_RULES_SEVERITY),
    "skills": {"unused"},
}


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def get_severity(check_id: str, rule: str) -> Severity:
    """Get severity level for a specific check and rule.

    Args:
        check_id: Validation check identifier (e.g., "business_rules").
        rule: Rule within the check (e.g., "past_deadline").

    Returns:
        Severity of findings produced by that rule.

    Raises:
        ValueError: If check_id is unknown or rule is invalid.

    Examples:
        >>> get_severity("skills", "uncovered")
        <Severity.CRITICAL: 'critical'>
    """
    if check_id not in _SEVERITY_MAP:
        raise ValueError(f"Unknown check_id: {check_id}")

    severity_config = _SEVERITY_MAP[check_id]

    if rule not in severity_config:
        raise ValueError(
            f"Invalid rule '{rule}' for check '{check_id}'. "
            f"Valid rules: {sorted(severity_config)}"
        )

    return severity_config[rule]


def get_kind(check_id: str, rule: str) -> str:
    """Get whether a rule reports an "error" or a "warning".

    Raises:
        ValueError: If check_id is unknown or rule is invalid.
    """
    get_severity(check_id, rule)
    return "warning" if rule in _WARNING_RULES.get(check_id, set()) else "error"


@dataclass(frozen=True)
class ValidationSettings:
    """Tunable thresholds for the business-rule checks.

    Defaults come from the module constants. Use ``from_yaml`` to load
    overrides from a file such as::

        max_hourly_rate: 500
        capacity_buffer: 1.0
    """

    max_hourly_rate: float = MAX_HOURLY_RATE
    rate_outlier_factor: float = RATE_OUTLIER_FACTOR
    rate_outlier_min_samples: int = RATE_OUTLIER_MIN_SAMPLES
    max_task_duration_hours: float = MAX_TASK_DURATION_HOURS
    weekly_hours: float = WEEKLY_HOURS
    capacity_buffer: float = CAPACITY_BUFFER
    max_tasks_per_client: int = MAX_TASKS_PER_CLIENT
    max_critical_client_share: float = MAX_CRITICAL_CLIENT_SHARE

    @classmethod
    def from_yaml(cls, path: Path) -> "ValidationSettings":
        """Load settings from a YAML mapping, keeping defaults for absent keys.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file is not a mapping, has unknown keys, or a
                value cannot be converted to the expected type.
        """
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Failed to parse settings file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {path} must contain a mapping")

        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ValueError(f"Unknown settings in {path}: {', '.join(unknown)}")

        values = {}
        for key, raw in data.items():
            caster = int if known[key].type in ("int", int) else float
            try:
                values[key] = caster(raw)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Invalid value for '{key}' in {path}: {raw!r}") from e
        return cls(**values)
