"""Remediation configuration constants.

Tier Table:
    Every finding category maps to exactly one remediation tier. Adding a
    category to ``Category`` without adding it here is a configuration error
    detected at import time.

Safe Defaults:
    Values substituted for blank required fields. Only columns whose default
    cannot mislead a reader are listed. Identifiers, names, money, effort,
    dates, skills and availability have no default and go to manual review.
"""

from __future__ import annotations

from typing import Dict

from data_alchemist.core.dataset import CellValue
from data_alchemist.core.enums import Category, RemediationTier

# ============================================================================
# TIER TABLE
# ============================================================================

CATEGORY_TIERS: Dict[Category, RemediationTier] = {
    Category.TYPE: RemediationTier.AUTO_FIXABLE,
    Category.REQUIRED: RemediationTier.AUTO_FIXABLE,  # demoted when no safe default
    Category.DUPLICATE: RemediationTier.AUTO_FIXABLE,
    Category.DATE_FORMAT: RemediationTier.AUTO_FIXABLE,
    Category.BOOLEAN_FORMAT: RemediationTier.AUTO_FIXABLE,
    Category.REFERENCE: RemediationTier.MANUAL_REVIEW,
    Category.BUSINESS: RemediationTier.BUSINESS_DECISION,
    Category.SKILL: RemediationTier.BUSINESS_DECISION,
}


# ============================================================================
# SAFE DEFAULTS FOR REQUIRED FIELDS
# ============================================================================

REQUIRED_FIELD_DEFAULTS: Dict[str, CellValue] = {
    "priority": "medium",
    "status": "active",
    "requirements": "To be determined",
    "description": "No description provided",
    "location": "Remote",
    "department": "General",
    "company": "TBD",
    "active": True,
    "available": True,
}


# ============================================================================
# COERCION TOKENS
# ============================================================================

TRUTHY_TOKENS = frozenset({"yes", "y", "true", "t", "1", "on", "active", "available"})
FALSY_TOKENS = frozenset({"no", "n", "false", "f", "0", "off", "inactive", "unavailable"})

# Tried in order; the first that parses wins. Month-first is preferred over
# day-first for slash dates; dotted dates are read day-first.
DATE_INPUT_FORMATS = (
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%m/%d/%Y",
    "%d.%m.%Y",
    "%d-%m-%Y",
    "%Y%m%d",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
)

CANONICAL_DATE_FORMAT = "%Y-%m-%d"

# Width of the numeric suffix used to disambiguate duplicates ("John Doe_001")
DUPLICATE_SUFFIX_WIDTH = 3
