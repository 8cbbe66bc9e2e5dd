"""Remediation: classify findings into tiers, compute safe fixes, and apply them.

Public API:
    Classifier: Attach suggested values and group findings by tier
    FixRecommendations: Findings split into auto-fixable, manual-review and
        business-decision lists
    tier_for_category: Central category -> tier lookup
    effective_tier: Tier after demoting auto-fixable findings without a safe value
    apply_fixes: Apply classified findings to a dataset
    apply_single_fix: Apply one caller-supplied correction
    next_unique_suffix: Disambiguate a duplicated value
"""

from __future__ import annotations

from .applier import apply_fixes, apply_single_fix
from .classifier import (
    Classifier,
    FixRecommendations,
    effective_tier,
    suggest_value,
    tier_for_category,
)
from .coercion import next_unique_suffix
from .models import ApplyFixResult, AutoFixReport, AutoFixSummary, FixRecord

__all__ = [
    "Classifier",
    "FixRecommendations",
    "effective_tier",
    "suggest_value",
    "tier_for_category",
    "apply_fixes",
    "apply_single_fix",
    "next_unique_suffix",
    "ApplyFixResult",
    "AutoFixReport",
    "AutoFixSummary",
    "FixRecord",
]
