"""Skill coverage validation check.

A task that needs a skill nobody in the worker pool has cannot be scheduled, and a
task assigned to a worker who lacks one of its skills is a mismatched pairing. Both
are critical. Workers whose skills no task needs are reported as low-severity
warnings.

Needs both workers and tasks; yields nothing if either is absent.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Set

from data_alchemist.core.dataset import MISSING, Dataset
from data_alchemist.core.enums import Category, DataType
from data_alchemist.core.utils import normalize_key, parse_skills
from . import ValidationContext
from ..config import get_kind, get_severity
from ..models import ValidationFinding


class SkillsCheck:
    """Validate that task skill requirements can be met by the worker pool."""

    check_id = "skills"

    def validate(self, dataset: Dataset, context: ValidationContext) -> Iterator[ValidationFinding]:
        """Yield ``skill`` findings for the tasks or workers dataset.

        Args:
            dataset: Tasks or workers dataset under test.
            context: Supplies the counterpart dataset.
        """
        if context.workers is None or context.tasks is None:
            return
        if dataset.data_type == DataType.TASKS:
            yield from self._check_tasks(dataset, context.workers)
        else:
            yield from self._check_workers(dataset, context.tasks)

    def applies_to_data_type(self, data_type: DataType) -> bool:
        """Clients carry no skills."""
        return data_type in (DataType.TASKS, DataType.WORKERS)

    def _check_tasks(self, tasks: Dataset, workers: Dataset) -> Iterator[ValidationFinding]:
        skills_by_worker: Dict[str, Set[str]] = {}
        pool: Set[str] = set()
        for _, worker in workers.iter_rows():
            skills = set(parse_skills(worker.get("skills", MISSING)))
            pool |= skills
            key = normalize_key(worker.get("workerId", MISSING))
            if key:
                skills_by_worker.setdefault(key, set()).update(skills)

        for index, task in tasks.iter_rows():
            required = parse_skills(task.get("skills", MISSING))
            uncovered = _ordered_difference(required, pool)
            if uncovered:
                yield self._finding(
                    tasks, index, task.get("skills"), "uncovered",
                    f"Task requires skills not available in worker pool: {', '.join(uncovered)}",
                    "Consider hiring workers with these skills or modifying task requirements",
                )
                continue

            assigned = normalize_key(task.get("assignedWorker", MISSING))
            if assigned and assigned in skills_by_worker:
                lacking = _ordered_difference(required, skills_by_worker[assigned])
                if lacking:
                    yield self._finding(
                        tasks, index, task.get("skills"), "assignment_mismatch",
                        f'Assigned worker "{task.get("assignedWorker")}" lacks required '
                        f"skills: {', '.join(lacking)}",
                        "Reassign the task to a worker who holds every required skill",
                    )

    def _check_workers(self, workers: Dataset, tasks: Dataset) -> Iterator[ValidationFinding]:
        demanded: Set[str] = set()
        for _, task in tasks.iter_rows():
            demanded.update(parse_skills(task.get("skills", MISSING)))

        for index, worker in workers.iter_rows():
            skills = parse_skills(worker.get("skills", MISSING))
            unused = _ordered_difference(skills, demanded)
            if unused:
                yield self._finding(
                    workers, index, worker.get("skills"), "unused",
                    f"Worker has skills not required by any task: {', '.join(unused)}",
                    "Consider assigning additional tasks or training in high-demand skills",
                )

    def _finding(self, dataset: Dataset, index: int, value, rule: str, message: str, hint: str):
        return ValidationFinding(
            category=Category.SKILL,
            severity=get_severity(self.check_id, rule),
            data_type=dataset.data_type,
            row=index,
            column="skills",
            message=message,
            value=value,
            kind=get_kind(self.check_id, rule),
            check_id=self.check_id,
            hint=hint,
        )


def _ordered_difference(items: List[str], available: Set[str]) -> List[str]:
    result: List[str] = []
    for item in items:
        if item not in available and item not in result:
            result.append(item)
    return result
