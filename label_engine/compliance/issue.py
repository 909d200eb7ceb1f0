"""Compliance findings."""

from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


SEVERITY_ORDER = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}


@dataclass(frozen=True)
class Issue:
    """
    One compliance finding.

    Attributes:
        severity: error, warning or info
        code: Stable machine-readable code, e.g. "GS1_EAN13_CHECKSUM"
        message: Human-readable description
        element_id: Offending element, None for design-level findings
        fix_hint: Suggested correction
        row_index: Data row the finding applies to, None for the template
    """
    severity: Severity
    code: str
    message: str
    element_id: Optional[str] = None
    fix_hint: Optional[str] = None
    row_index: Optional[int] = None

    @classmethod
    def error(cls, code: str, message: str, **kwargs: Any) -> "Issue":
        return cls(Severity.ERROR, code, message, **kwargs)

    @classmethod
    def warning(cls, code: str, message: str, **kwargs: Any) -> "Issue":
        return cls(Severity.WARNING, code, message, **kwargs)

    @classmethod
    def info(cls, code: str, message: str, **kwargs: Any) -> "Issue":
        return cls(Severity.INFO, code, message, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data
