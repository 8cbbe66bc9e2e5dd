"""Field definitions for the clients, workers and tasks datasets.

This module defines which columns each dataset type is expected to carry and how
they are typed. Used by validation checks, the classifier and the dataset loader
to ensure consistency.
"""

from __future__ import annotations

import re
from typing import Dict, List, Tuple

from .enums import DataType


def get_id_field(data_type: DataType) -> str:
    """Get the identifier column for a dataset type.

    Examples:
        >>> get_id_field(DataType.TASKS)
        'taskId'
    """
    return {
        DataType.CLIENTS: "clientId",
        DataType.WORKERS: "workerId",
        DataType.TASKS: "taskId",
    }[data_type]


def get_required_fields(data_type: DataType) -> List[str]:
    """Get mandatory columns for a dataset type.

    Args:
        data_type: Type of dataset.

    Returns:
        Column names that must hold a non-blank value on every row.

    Examples:
        >>> "priority" in get_required_fields(DataType.CLIENTS)
        True
    """
    if data_type == DataType.CLIENTS:
        return ["clientId", "clientName", "priority", "requirements"]
    if data_type == DataType.WORKERS:
        return ["workerId", "name", "skills", "availability", "rate"]
    return ["taskId", "clientId", "duration", "skills", "deadline"]


def get_numeric_fields(data_type: DataType) -> List[str]:
    """Get columns expected to hold numbers."""
    if data_type == DataType.CLIENTS:
        return ["budget"]
    if data_type == DataType.WORKERS:
        return ["rate", "availability", "experience"]
    return ["duration", "estimatedHours"]


def get_boolean_fields(data_type: DataType) -> List[str]:
    """Get columns expected to hold booleans."""
    if data_type == DataType.CLIENTS:
        return ["active"]
    if data_type == DataType.WORKERS:
        return ["active", "available"]
    return ["billable"]


def get_date_fields(data_type: DataType) -> List[str]:
    """Get columns expected to hold calendar dates."""
    if data_type == DataType.TASKS:
        return ["deadline"]
    return []


def get_unique_fields(data_type: DataType) -> List[Tuple[str, str]]:
    """Get uniqueness-constrained columns.

    Returns:
        List of (column_name, kind) tuples where kind is "id" or "name".
        Severity of a collision is looked up by kind in validation config.
    """
    fields = [(get_id_field(data_type), "id")]
    if data_type == DataType.CLIENTS:
        fields.append(("clientName", "name"))
    elif data_type == DataType.WORKERS:
        fields.append(("name", "name"))
    return fields


def get_reference_fields(data_type: DataType) -> List[Tuple[str, DataType]]:
    """Get foreign-key-like columns and the dataset type they point at."""
    if data_type == DataType.TASKS:
        return [("clientId", DataType.CLIENTS), ("assignedWorker", DataType.WORKERS)]
    return []


VALID_PRIORITIES = ("low", "medium", "high", "critical")
PRIORITY_LEVEL_RANGE = (1, 5)

# Header spellings seen in uploaded files, keyed by their normalized form
# (lowercase, no spaces, underscores or dashes).
FIELD_ALIASES: Dict[str, str] = {
    "clientid": "clientId",
    "clientname": "clientName",
    "client": "clientName",
    "priority": "priority",
    "prioritylevel": "priority",
    "requirements": "requirements",
    "requestedtaskids": "requirements",
    "budget": "budget",
    "workerid": "workerId",
    "workername": "name",
    "name": "name",
    "skills": "skills",
    "requiredskills": "skills",
    "availability": "availability",
    "availableslots": "availability",
    "rate": "rate",
    "hourlyrate": "rate",
    "experience": "experience",
    "taskid": "taskId",
    "taskname": "taskName",
    "duration": "duration",
    "deadline": "deadline",
    "duedate": "deadline",
    "assignedworker": "assignedWorker",
    "assignedto": "assignedWorker",
    "estimatedhours": "estimatedHours",
    "active": "active",
    "available": "available",
    "billable": "billable",
}

_ALIAS_STRIP = re.compile(r"[\s_\-]+")


def normalize_header(header: str) -> str:
    """Map an uploaded column header to its canonical field name.

    Unknown headers are returned stripped but otherwise unchanged.

    Examples:
        >>> normalize_header("Client ID")
        'clientId'
        >>> normalize_header("client_id")
        'clientId'
        >>> normalize_header("Notes")
        'Notes'
    """
    key = _ALIAS_STRIP.sub("", str(header)).lower()
    return FIELD_ALIASES.get(key, str(header).strip())
