"""
GS1 Check Digit Functions

Mod-10 check digit arithmetic shared by every GS1 identification key:
- GTIN-8, GTIN-12 (UPC-A), GTIN-13 (EAN-13), GTIN-14 (ITF-14)
- SSCC-18
- Any other key carrying a trailing mod-10 check digit (GLN, GSIN, ...)

Weights alternate 3, 1, 3, ... starting with weight 3 on the rightmost
data digit; the check digit is (10 - sum mod 10) mod 10.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union


class ErrorCode(str, Enum):
    """Error codes shared by the GS1 and code-value layers."""
    EMPTY_INPUT = "EMPTY_INPUT"
    NOT_DIGITS = "NOT_DIGITS"
    WRONG_LENGTH = "WRONG_LENGTH"
    CHECKSUM_MISMATCH = "CHECKSUM_MISMATCH"
    UNKNOWN_AI = "UNKNOWN_AI"
    INVALID_AI_VALUE = "INVALID_AI_VALUE"
    TRUNCATED_DATA = "TRUNCATED_DATA"
    EXTRA_SEPARATOR = "EXTRA_SEPARATOR"
    INVALID_CHARACTERS = "INVALID_CHARACTERS"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"


@dataclass
class ValidationResult:
    """Result of a check digit or key validation."""
    valid: bool
    error_code: Optional[ErrorCode] = None
    errors: List[str] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def expected_check_digit(self) -> Optional[int]:
        return self.meta.get("expected_check_digit")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "error_code": self.error_code.value if self.error_code else None,
            "errors": list(self.errors),
            "meta": dict(self.meta),
        }


def _fail(code: ErrorCode, message: str, **meta: Any) -> ValidationResult:
    return ValidationResult(valid=False, error_code=code, errors=[message], meta=meta)


def calculate_check_digit(digits: Union[str, Sequence[int]]) -> int:
    """
    Calculate the GS1 mod-10 check digit.

    Args:
        digits: Data digits without the check digit, either as a numeric
            string or a sequence of ints in 0-9.

    Returns:
        Check digit (0-9)

    Raises:
        ValueError: if the input is empty or holds anything but digits
    """
    if isinstance(digits, str):
        if not digits or not digits.isdigit() or not digits.isascii():
            raise ValueError("Input must be a non-empty numeric string")
        values = [int(d) for d in digits]
    else:
        values = list(digits)
        if not values or any(not isinstance(d, int) or not 0 <= d <= 9 for d in values):
            raise ValueError("Input must be a non-empty sequence of digits 0-9")

    total = 0
    for i, digit in enumerate(reversed(values)):
        total += digit * (3 if i % 2 == 0 else 1)

    return (10 - (total % 10)) % 10


def append_check_digit(digits: str) -> str:
    """Return ``digits`` with its mod-10 check digit appended."""
    return f"{digits}{calculate_check_digit(digits)}"


def _is_digits(code: str) -> bool:
    return bool(code) and code.isdigit() and code.isascii()


def verify_check_digit(code: str) -> ValidationResult:
    """
    Verify the trailing check digit of a complete numeric code.

    The last character is the asserted check digit; the rest are data.
    On mismatch the expected digit is carried in
    ``meta["expected_check_digit"]``.
    """
    if not _is_digits(code):
        return _fail(ErrorCode.NOT_DIGITS, "Value must contain digits only")

    if len(code) < 2:
        return _fail(ErrorCode.WRONG_LENGTH, "Value too short for check digit validation")

    provided = int(code[-1])
    expected = calculate_check_digit(code[:-1])
    meta = {"expected_check_digit": expected, "provided_check_digit": provided}

    if provided != expected:
        return _fail(
            ErrorCode.CHECKSUM_MISMATCH,
            f"Check digit mismatch: expected {expected}, got {provided}",
            **meta,
        )

    return ValidationResult(valid=True, meta=meta)


def _validate_key(code: str, length: int, label: str) -> ValidationResult:
    if not _is_digits(code):
        return _fail(ErrorCode.NOT_DIGITS, f"{label} must contain digits only")
    if len(code) != length:
        return _fail(
            ErrorCode.WRONG_LENGTH,
            f"{label} must be {length} digits, got {len(code)}",
            expected_length=length,
            actual_length=len(code),
        )
    result = verify_check_digit(code)
    if not result.valid:
        result.errors = [f"{label}: {result.errors[0]}"]
    return result


def validate_ean13(code: str) -> ValidationResult:
    return _validate_key(code, 13, "EAN-13")


def validate_ean8(code: str) -> ValidationResult:
    return _validate_key(code, 8, "EAN-8")


def validate_upc(code: str) -> ValidationResult:
    return _validate_key(code, 12, "UPC-A")


def validate_itf14(code: str) -> ValidationResult:
    return _validate_key(code, 14, "ITF-14")


def validate_sscc18(code: str) -> ValidationResult:
    return _validate_key(code, 18, "SSCC")


GTIN_LENGTHS = (8, 12, 13, 14)


def validate_gtin(code: str) -> ValidationResult:
    """Validate a GTIN of any standard length (8, 12, 13 or 14 digits)."""
    if not _is_digits(code):
        return _fail(ErrorCode.NOT_DIGITS, "GTIN must contain digits only")
    if len(code) not in GTIN_LENGTHS:
        return _fail(
            ErrorCode.WRONG_LENGTH,
            f"GTIN must be 8, 12, 13 or 14 digits, got {len(code)}",
            actual_length=len(code),
        )
    return _validate_key(code, len(code), f"GTIN-{len(code)}")
