"""
GS1 compliance checks for barcode elements.

Checks the static content of each GS1 barcode in a design:

- retail keys (EAN-13, EAN-8, UPC-A, ITF-14): digits only, exact length,
  check digit
- GS1-128: at least one Application Identifier, all of them known and
  well formed
- DataMatrix: content should be GS1 element data

Bound elements and ``{{...}}`` templates only get a value at print time;
they are reported as info and checked per row by ``validate_rows``.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from ..gs1 import (
    ErrorCode,
    ValidationResult,
    is_bracketed,
    looks_like_gs1,
    parse_gs1,
    validate_ai_values,
    validate_ean13,
    validate_ean8,
    validate_itf14,
    validate_upc,
)
from ..codes.builder import normalize_format
from ..models import BarcodeElement, BoundElement, Design
from .issue import Issue

GS1_BARCODE_FORMATS = frozenset({
    "EAN13", "EAN8", "UPC", "ITF14", "GS1_128",
    "GS1_DATABAR", "GS1_DATABAR_STACKED", "GS1_DATABAR_EXPANDED", "DATAMATRIX",
})

RETAIL_KEYS: Dict[str, Tuple[str, int, Callable[[str], ValidationResult]]] = {
    "EAN13": ("EAN-13", 13, validate_ean13),
    "EAN8": ("EAN-8", 8, validate_ean8),
    "UPC": ("UPC-A", 12, validate_upc),
    "ITF14": ("ITF-14", 14, validate_itf14),
}


def static_value(element: BoundElement) -> Optional[str]:
    """The value a compliance check sees: text content, else the binding as a template."""
    if element.text_content:
        return element.text_content
    if element.binding:
        return "{{" + element.binding + "}}"
    return None


def is_dynamic(value: Optional[str]) -> bool:
    return value is not None and "{{" in value


class Gs1Validator:
    """GS1 barcode standards (EAN-13, EAN-8, UPC-A, ITF-14, GS1-128, DataMatrix)."""

    code = "gs1"
    name = "GS1"

    def validate(self, design: Design) -> List[Issue]:
        barcodes = [
            e for e in design.elements
            if isinstance(e, BarcodeElement)
            and normalize_format(e.barcode_format) in GS1_BARCODE_FORMATS
        ]

        issues: List[Issue] = []
        if not barcodes:
            issues.append(Issue.warning(
                "GS1_NO_BARCODE",
                "The design contains no GS1 barcode",
                fix_hint="Add an EAN-13, EAN-8, UPC-A, ITF-14 or GS1-128 barcode",
            ))

        for element in barcodes:
            issues.extend(self.validate_element(element))
        return issues

    def validate_element(self, element: BarcodeElement) -> List[Issue]:
        value = static_value(element)
        if is_dynamic(value):
            return [Issue.info(
                "GS1_DYNAMIC_SKIP",
                "Element has dynamic data ({{...}}); its check digit is validated at print time",
                element_id=element.id,
            )]
        if not value:
            return []

        fmt = normalize_format(element.barcode_format)
        if fmt in RETAIL_KEYS:
            return self._retail_key(fmt, value, element.id)
        if fmt == "GS1_128":
            return self._gs1_128(value, element.id)
        if fmt == "DATAMATRIX":
            return self._datamatrix(value, element.id)
        return []

    def _retail_key(self, fmt: str, value: str, element_id: str) -> List[Issue]:
        label, length, validate = RETAIL_KEYS[fmt]
        result = validate(value)
        if result.valid:
            return []

        if result.error_code == ErrorCode.NOT_DIGITS:
            return [Issue.error(
                "GS1_DIGITS_ONLY",
                "The code must contain digits only (0-9)",
                element_id=element_id,
                fix_hint="Remove letters and special characters from the code",
            )]
        if result.error_code == ErrorCode.WRONG_LENGTH:
            return [Issue.error(
                f"GS1_{fmt}_LENGTH",
                f"{label} must be exactly {length} digits (got {len(value)})",
                element_id=element_id,
                fix_hint=f"Adjust the code to {length} digits",
            )]

        expected = result.expected_check_digit
        return [Issue.error(
            f"GS1_{fmt}_CHECKSUM",
            f"Invalid {label} check digit. Expected: {expected}",
            element_id=element_id,
            fix_hint=f"The last digit should be {expected}",
        )]

    def _gs1_128(self, value: str, element_id: str) -> List[Issue]:
        parsed = parse_gs1(value)

        if parsed.error is not None:
            if parsed.error.code == ErrorCode.UNKNOWN_AI:
                message = f'Invalid Application Identifier: "{parsed.error.fragment or ""}"'
            else:
                message = f"Could not parse the GS1-128 content: {parsed.error.message}"
            return [Issue.error(
                "GS1_128_AI_INVALID",
                message,
                element_id=element_id,
                fix_hint="Check that the AIs are valid GS1 codes (01, 10, 17, 21, ...)",
            )]

        if not parsed.elements:
            return [Issue.warning(
                "GS1_128_AI_MANDATORY",
                "GS1-128 content should contain at least one Application Identifier",
                element_id=element_id,
                fix_hint="Add data in GS1 AI format (e.g. 01 + GTIN-14)",
            )]

        return [
            Issue.error(
                "GS1_128_AI_INVALID",
                error.message,
                element_id=element_id,
                fix_hint="Correct the value of the Application Identifier",
            )
            for error in validate_ai_values(parsed.pairs())
        ]

    def _datamatrix(self, value: str, element_id: str) -> List[Issue]:
        if looks_like_gs1(value) or is_bracketed(value):
            return []
        return [Issue.warning(
            "GS1_DATAMATRIX_NO_GS1",
            "The DataMatrix does not appear to contain GS1 data",
            element_id=element_id,
            fix_hint="In a GS1 context the DataMatrix should encode AIs (e.g. 01+GTIN, 17+expiry, 10+lot)",
        )]
