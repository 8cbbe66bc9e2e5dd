"""Business rules validation check.

Values can be well-formed and still implausible: an hourly rate far above what the
rest of the team charges, a deadline that has already passed, more task hours than
the workforce can deliver. These findings are warnings that need a business decision;
they are never fixed automatically.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterator, List, Optional

import pandas as pd

from data_alchemist.core.dataset import MISSING, Dataset
from data_alchemist.core.enums import Category, DataType
from data_alchemist.core.utils import normalize_key, parse_iso_date, parse_number
from . import ValidationContext
from ..config import ValidationSettings, get_kind, get_severity
from ..models import ValidationFinding


class BusinessRulesCheck:
    """Validate that values are plausible for the scheduling domain."""

    check_id = "business_rules"

    def validate(self, dataset: Dataset, context: ValidationContext) -> Iterator[ValidationFinding]:
        """Yield ``business`` findings for implausible values.

        Rules by dataset type:
        1. Workers: negative or outlier hourly rates; availability outside 0-100%
        2. Tasks: non-positive or very long durations; past deadlines; total task
           hours exceeding worker capacity (needs workers)
        3. Clients: high/critical clients without tasks and overloaded clients
           (need tasks); too many critical clients

        Args:
            dataset: Dataset under test.
            context: Other datasets, thresholds and the reference date.
        """
        if dataset.row_count == 0:
            return
        if dataset.data_type == DataType.WORKERS:
            yield from self._check_workers(dataset, context.settings)
        elif dataset.data_type == DataType.TASKS:
            yield from self._check_tasks(dataset, context)
        else:
            yield from self._check_clients(dataset, context)

    def applies_to_data_type(self, data_type: DataType) -> bool:
        """Check applies to all dataset types."""
        return True

    # ------------------------------------------------------------------
    # Workers
    # ------------------------------------------------------------------

    def _check_workers(
        self, dataset: Dataset, settings: ValidationSettings
    ) -> Iterator[ValidationFinding]:
        rates: Dict[int, float] = {}
        for index, row in dataset.iter_rows():
            rate = parse_number(row.get("rate", MISSING))
            if rate is not None:
                rates[index] = rate

        valid_rates = pd.Series([r for r in rates.values() if r >= 0], dtype=float)
        median: Optional[float] = None
        if len(valid_rates) >= settings.rate_outlier_min_samples:
            median = float(valid_rates.median())

        for index, row in dataset.iter_rows():
            rate = rates.get(index)
            if rate is not None:
                if rate < 0:
                    yield self._finding(
                        dataset, index, "rate", row.get("rate"), "negative_rate",
                        f"Rate cannot be negative: {rate:g}",
                        "Rate should be a positive number",
                    )
                elif rate > settings.max_hourly_rate or (
                    median and rate > median * settings.rate_outlier_factor
                ):
                    yield self._finding(
                        dataset, index, "rate", row.get("rate"), "rate_outlier",
                        f"Unusually high rate: {rate:g}/hour"
                        + (f" (median {median:g}/hour)" if median else ""),
                        "Please verify this rate is correct",
                    )

            availability = parse_number(row.get("availability", MISSING))
            if availability is not None and not 0 <= availability <= 100:
                yield self._finding(
                    dataset, index, "availability", row.get("availability"), "availability_range",
                    f"Availability must be between 0-100%: {availability:g}",
                    "Over-allocated workers need their schedule reviewed",
                )

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def _check_tasks(self, dataset: Dataset, context: ValidationContext) -> Iterator[ValidationFinding]:
        settings = context.settings
        for index, row in dataset.iter_rows():
            duration = parse_number(row.get("duration", MISSING))
            if duration is not None:
                if duration <= 0:
                    yield self._finding(
                        dataset, index, "duration", row.get("duration"), "non_positive_duration",
                        f"Duration must be positive: {duration:g}",
                        "Enter duration as positive hours",
                    )
                elif duration > settings.max_task_duration_hours:
                    yield self._finding(
                        dataset, index, "duration", row.get("duration"), "long_duration",
                        f"Very long task duration: {duration:g} hours",
                        "Consider breaking down long tasks into smaller ones",
                    )

            deadline = parse_iso_date(row.get("deadline", MISSING))
            if deadline is not None and deadline < context.today:
                yield self._finding(
                    dataset, index, "deadline", row.get("deadline"), "past_deadline",
                    f"Task deadline is in the past: {deadline.isoformat()}",
                    "Update the deadline or mark the task as overdue",
                )

        if context.workers is not None:
            yield from self._check_capacity(dataset, context.workers, settings)

    def _check_capacity(
        self, tasks: Dataset, workers: Dataset, settings: ValidationSettings
    ) -> Iterator[ValidationFinding]:
        task_hours = _numeric_column(tasks, "duration").clip(lower=0).sum()
        availability = _numeric_column(workers, "availability").clip(lower=0, upper=100)
        capacity = float((availability * settings.weekly_hours / 100).sum())

        if task_hours > capacity * settings.capacity_buffer:
            yield self._finding(
                tasks, 0, None, float(task_hours), "capacity_shortfall",
                f"Total task duration ({task_hours:.1f}h) exceeds worker capacity "
                f"({capacity:.1f}h/week)",
                "Consider hiring more workers, reducing task scope, or extending deadlines",
            )

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    def _check_clients(
        self, dataset: Dataset, context: ValidationContext
    ) -> Iterator[ValidationFinding]:
        settings = context.settings
        task_counts: Optional[Counter] = None
        if context.tasks is not None:
            task_counts = Counter(
                key for key in map(normalize_key, context.tasks.column_values("clientId")) if key
            )

        critical = 0
        for index, row in dataset.iter_rows():
            priority = _priority_level(row.get("priority", MISSING))
            if priority == "critical":
                critical += 1
            if task_counts is None:
                continue

            client_key = normalize_key(row.get("clientId", MISSING))
            count = task_counts.get(client_key, 0) if client_key else 0
            name = row.get("clientName") or row.get("clientId")
            if priority in ("high", "critical") and client_key and count == 0:
                rule = "idle_critical_client" if priority == "critical" else "idle_high_client"
                yield self._finding(
                    dataset, index, "priority", row.get("priority"), rule,
                    f'{priority.capitalize()} priority client "{name}" has no assigned tasks',
                    "Assign tasks to high-priority clients or adjust their priority",
                )
            if count > settings.max_tasks_per_client:
                yield self._finding(
                    dataset, index, "clientId", row.get("clientId"), "client_overload",
                    f'Client "{name}" has {count} tasks assigned',
                    "Consider redistributing tasks or reviewing client scope",
                )

        share = critical / dataset.row_count
        if share > settings.max_critical_client_share:
            yield self._finding(
                dataset, 0, None, "critical", "critical_share",
                f"{share:.1%} of clients marked as critical priority",
                "Review client priorities; too many critical clients may indicate poor prioritization",
            )

    def _finding(
        self,
        dataset: Dataset,
        index: int,
        column: Optional[str],
        value,
        rule: str,
        message: str,
        hint: str,
    ) -> ValidationFinding:
        return ValidationFinding(
            category=Category.BUSINESS,
            severity=get_severity(self.check_id, rule),
            data_type=dataset.data_type,
            row=index,
            column=column,
            message=message,
            value=value,
            kind=get_kind(self.check_id, rule),
            check_id=self.check_id,
            hint=hint,
        )


def _numeric_column(dataset: Dataset, column: str) -> pd.Series:
    """Parse a column to floats, counting unparseable cells as 0."""
    values: List[float] = []
    for value in dataset.column_values(column):
        number = parse_number(value)
        values.append(number if number is not None else 0.0)
    return pd.Series(values, dtype=float)


# Integer priority levels map onto the named levels (5 is the most urgent)
_LEVEL_NAMES = {1: "low", 2: "low", 3: "medium", 4: "high", 5: "critical"}


def _priority_level(value) -> Optional[str]:
    if isinstance(value, str) and value.strip().lower() in _LEVEL_NAMES.values():
        return value.strip().lower()
    number = parse_number(value)
    if number is not None and number.is_integer():
        return _LEVEL_NAMES.get(int(number))
    return None
