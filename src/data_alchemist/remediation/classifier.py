"""Finding classifier.

Decides how each finding gets resolved and, for auto-fixable findings, computes the
corrected value. Safety over coverage: when no deterministic value exists the
finding is demoted to manual review instead of receiving a guess.

The classifier reads datasets (for duplicate disambiguation) but never writes them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from data_alchemist.core.dataset import CellValue, Dataset, MISSING
from data_alchemist.core.enums import Category, DataType, RemediationTier
from data_alchemist.core.schemas import get_numeric_fields
from data_alchemist.core.utils import normalize_key
from data_alchemist.errors import ClassifierConfigError
from data_alchemist.validation.models import ValidationFinding
from .coercion import coerce_boolean, coerce_date, leading_number, next_unique_suffix
from .config import CATEGORY_TIERS, REQUIRED_FIELD_DEFAULTS

logger = logging.getLogger(__name__)


def _check_tier_table() -> None:
    unmapped = [c.value for c in Category if c not in CATEGORY_TIERS]
    if unmapped:
        raise ClassifierConfigError(f"No remediation tier configured for: {', '.join(unmapped)}")


_check_tier_table()


def tier_for_category(category: Category) -> RemediationTier:
    """Look up the remediation tier of a category.

    Raises:
        ClassifierConfigError: If the category has no tier.
    """
    try:
        return CATEGORY_TIERS[Category(category)]
    except (KeyError, ValueError) as e:
        raise ClassifierConfigError(f"No remediation tier configured for: {category}") from e


def effective_tier(finding: ValidationFinding) -> RemediationTier:
    """Tier after the safety rule: auto-fixable without a value means manual review."""
    tier = tier_for_category(finding.category)
    if tier == RemediationTier.AUTO_FIXABLE and not finding.has_suggestion:
        return RemediationTier.MANUAL_REVIEW
    return tier


def suggest_value(
    finding: ValidationFinding,
    dataset: Optional[Dataset] = None,
    reserved: Iterable[CellValue] = (),
) -> Optional[CellValue]:
    """Compute a safe corrected value for a finding.

    Args:
        finding: The finding to correct.
        dataset: Dataset the finding belongs to. Needed for duplicates, whose
            suffix must be unique within the column; also used to read the
            current cell when the finding carries no value.
        reserved: Values already promised to other findings in the same column.

    Returns:
        The corrected value, or None when no safe value exists or the category
        is not auto-fixable.
    """
    if tier_for_category(finding.category) != RemediationTier.AUTO_FIXABLE:
        return None
    if finding.column is None:
        return None

    value = finding.value
    if value is None and dataset is not None and dataset.has_row(finding.row):
        current = dataset.get_cell(finding.row, finding.column)
        value = None if current is MISSING else current

    if finding.category == Category.TYPE:
        # Enumerated columns such as priority have no numeric correction
        if finding.column not in get_numeric_fields(finding.data_type):
            return None
        return leading_number(value)
    if finding.category == Category.BOOLEAN_FORMAT:
        return coerce_boolean(value)
    if finding.category == Category.DATE_FORMAT:
        return coerce_date(value)
    if finding.category == Category.REQUIRED:
        return REQUIRED_FIELD_DEFAULTS.get(finding.column)
    if finding.category == Category.DUPLICATE:
        if value is None or dataset is None:
            return None
        existing = list(dataset.column_values(finding.column)) + list(reserved)
        return next_unique_suffix(value, existing)
    return None


@dataclass
class FixRecommendations:
    """Findings split by how they get resolved."""

    auto_fixable: List[ValidationFinding] = field(default_factory=list)
    manual_review: List[ValidationFinding] = field(default_factory=list)
    business_decisions: List[ValidationFinding] = field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        return {
            RemediationTier.AUTO_FIXABLE.value: len(self.auto_fixable),
            RemediationTier.MANUAL_REVIEW.value: len(self.manual_review),
            RemediationTier.BUSINESS_DECISION.value: len(self.business_decisions),
        }


class Classifier:
    """Attach corrected values to findings and sort them into tiers.

    Args:
        datasets: Datasets by type, read for duplicate disambiguation and for
            cells whose finding carries no value.
    """

    def __init__(self, datasets: Optional[Mapping[DataType, Optional[Dataset]]] = None) -> None:
        self.datasets: Dict[DataType, Optional[Dataset]] = dict(datasets or {})

    def classify_all(self, findings: Iterable[ValidationFinding]) -> List[ValidationFinding]:
        """Return findings with ``suggested_value`` filled where a safe fix exists.

        Findings that already carry a suggestion are kept unchanged. Duplicate
        suffixes handed out earlier in the batch are reserved so two findings
        never receive the same new value.
        """
        reserved: Dict[Tuple[DataType, str], Set[str]] = {}
        classified: List[ValidationFinding] = []
        for finding in findings:
            if finding.has_suggestion:
                classified.append(finding)
                continue
            dataset = self.datasets.get(finding.data_type)
            slot = (finding.data_type, finding.column or "")
            value = suggest_value(finding, dataset, reserved.get(slot, ()))
            if value is None:
                classified.append(finding)
                continue
            if finding.category == Category.DUPLICATE:
                reserved.setdefault(slot, set()).add(normalize_key(value))
            classified.append(finding.with_suggestion(value))

        fixable = sum(1 for f in classified if f.has_suggestion)
        logger.debug("Classified %d findings, %d with a safe fix", len(classified), fixable)
        return classified

    def recommend(self, findings: Iterable[ValidationFinding]) -> FixRecommendations:
        """Classify findings and group them by effective tier."""
        recommendations = FixRecommendations()
        for finding in self.classify_all(findings):
            tier = effective_tier(finding)
            if tier == RemediationTier.AUTO_FIXABLE:
                recommendations.auto_fixable.append(finding)
            elif tier == RemediationTier.MANUAL_REVIEW:
                recommendations.manual_review.append(finding)
            else:
                recommendations.business_decisions.append(finding)
        return recommendations
