"""
Regulatory compliance checks over designs and data rows.

``validate_design`` runs the validator named by the design's
``compliance_standard`` (or an explicit ``standard``) over the template;
``validate_rows`` resolves every code element for each data row and
reports the values that would not encode.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..codes.builder import build_code_value
from ..models import BarcodeElement, Design, EvaluationContext, QrElement
from ..options import LabelOptions
from ..resolver import resolve_value
from .eu1169_validator import Eu1169Validator
from .fmd_validator import FmdValidator
from .gs1_validator import Gs1Validator
from .issue import SEVERITY_ORDER, Issue, Severity

logger = logging.getLogger(__name__)

VALIDATORS = {
    Gs1Validator.code: Gs1Validator(),
    FmdValidator.code: FmdValidator(),
    Eu1169Validator.code: Eu1169Validator(),
}


@dataclass
class ComplianceReport:
    """
    Attributes:
        standard: Code of the standard applied ("gs1", "fmd", "eu1169"), None if none
        standard_name: Display name of that standard
        issues: Findings, errors first
    """
    standard: Optional[str] = None
    standard_name: Optional[str] = None
    issues: List[Issue] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return has_errors(self.issues)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "standard": self.standard,
            "standard_name": self.standard_name,
            "counts": count_by_severity(self.issues),
            "issues": [issue.to_dict() for issue in self.issues],
        }


def available_standards() -> List[Dict[str, str]]:
    return sorted(
        ({"code": v.code, "name": v.name, "description": v.__doc__ or ""} for v in VALIDATORS.values()),
        key=lambda s: s["name"],
    )


def validate_design(design: Design, standard: Optional[str] = None) -> ComplianceReport:
    """
    Check a design against a compliance standard.

    Args:
        design: The label template
        standard: Standard code; defaults to ``design.compliance_standard``

    Returns:
        An empty report when no standard applies or the code is unknown
    """
    code = (standard or design.compliance_standard or "").strip().lower()
    if not code:
        return ComplianceReport()

    validator = VALIDATORS.get(code)
    if validator is None:
        logger.warning("Unknown compliance standard: %s", code)
        return ComplianceReport()

    return ComplianceReport(
        standard=validator.code,
        standard_name=validator.name,
        issues=sort_issues(validator.validate(design)),
    )


def validate_rows(
    design: Design,
    rows: Sequence[Mapping[str, Any]],
    mapping: Optional[Mapping[str, str]],
    now: datetime,
    options: Optional[LabelOptions] = None,
) -> List[Issue]:
    """
    Resolve and build every visible code element for each row.

    Each value that fails validation becomes one error issue carrying the
    row index; elements with no value are not reported.
    """
    options = options or LabelOptions()
    codes = [
        e for e in design.elements
        if e.visible and isinstance(e, (BarcodeElement, QrElement))
    ]
    issues: List[Issue] = []

    for index, row in enumerate(rows):
        context = EvaluationContext(now=now, row_index=index, batch_size=len(rows))
        for element in codes:
            value = resolve_value(element, row, mapping, context)
            if value is None:
                continue
            code = build_code_value(element, value, options.gs1_mode)
            if code.ok:
                continue
            issues.append(Issue.error(
                f"ROW_{code.error.code.value}",
                f"Row {index + 1}: {code.error.message}",
                element_id=element.id,
                row_index=index,
            ))

    return issues


def has_errors(issues: Iterable[Issue]) -> bool:
    return any(issue.severity == Severity.ERROR for issue in issues)


def count_by_severity(issues: Iterable[Issue]) -> Dict[str, int]:
    counts = {"errors": 0, "warnings": 0, "infos": 0}
    for issue in issues:
        counts[issue.severity.value + "s"] += 1
    return counts


def sort_issues(issues: Iterable[Issue]) -> List[Issue]:
    """Errors first, then warnings, then infos; stable within a severity."""
    return sorted(issues, key=lambda issue: SEVERITY_ORDER[issue.severity])


__all__ = [
    "Issue",
    "Severity",
    "ComplianceReport",
    "Gs1Validator",
    "FmdValidator",
    "Eu1169Validator",
    "available_standards",
    "validate_design",
    "validate_rows",
    "has_errors",
    "count_by_severity",
    "sort_issues",
]
