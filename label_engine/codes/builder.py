"""
Code Value Builder

Turns a resolved element value into the exact payload handed to a
symbology encoder (preview) or a printer barcode command (print).

- Retail keys (EAN-13, EAN-8, UPC-A, ITF-14): check digit appended or
  verified according to ``Gs1Mode``
- GS1-128 / GS1 DataBar Expanded / GS1 DataMatrix: AI structure parsed,
  each AI value validated, payload recomposed with FNC1 separators and a
  bracketed human readable form
- Other linear symbologies: character set and length rules
- QR and other 2D symbologies: passed through

Problems are reported in ``CodeValue.error``; a failing value is never
passed on to the encoder.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..gs1 import (
    DEFAULT_AI_TABLE,
    GS,
    ErrorCode,
    ValidationResult,
    append_check_digit,
    compose_gs1_128,
    format_hri,
    is_bracketed,
    parse_gs1,
    validate_ai_values,
    validate_ean13,
    validate_ean8,
    validate_itf14,
    validate_upc,
)
from ..models import BarcodeElement, BoundElement, QrElement
from ..options import Gs1Mode

LINEAR_FORMATS = (
    "CODE128", "CODE39", "CODE93", "EAN13", "EAN8", "UPC", "ITF14",
    "CODABAR", "MSI", "PHARMACODE", "GS1_128", "GS1_DATABAR",
    "GS1_DATABAR_STACKED", "GS1_DATABAR_EXPANDED", "POSTNET", "PLANET",
    "ROYALMAIL",
)

MATRIX_FORMATS = ("DATAMATRIX", "PDF417", "AZTEC", "MAXICODE", "QR")

SUPPORTED_FORMATS = frozenset(LINEAR_FORMATS + MATRIX_FORMATS)

GS1_AI_FORMATS = frozenset({"GS1_128", "GS1_DATABAR_EXPANDED"})

FORMAT_ALIASES = {
    "EAN_13": "EAN13",
    "EAN_8": "EAN8",
    "UPCA": "UPC",
    "UPC_A": "UPC",
    "ITF_14": "ITF14",
    "CODE_128": "CODE128",
    "CODE_39": "CODE39",
    "CODE_93": "CODE93",
    "GS1128": "GS1_128",
    "EAN128": "GS1_128",
    "QRCODE": "QR",
    "DATA_MATRIX": "DATAMATRIX",
}

QR_ERROR_LEVELS = ("L", "M", "Q", "H")

ALPHANUMERIC_39 = re.compile(r"^[A-Z0-9 \-.$/+%]+$", re.IGNORECASE)
CODABAR_PATTERN = re.compile(r"^[A-D][0-9\-$:/.+]+[A-D]$", re.IGNORECASE)
ROYALMAIL_PATTERN = re.compile(r"^[A-Z0-9]+$", re.IGNORECASE)

GS1_MARKERS = (GS, "]d2", "]C1", "FNC1")


@dataclass
class CodeError:
    """Why a value cannot be encoded."""
    code: ErrorCode
    message: str
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = {"code": self.code.value, "message": self.message}
        if self.meta:
            data["meta"] = dict(self.meta)
        return data


@dataclass
class CodeValue:
    """
    Encoder-ready payload.

    Attributes:
        format: Normalised symbology name
        payload: Data to encode (None when ``error`` is set)
        hri: Human readable interpretation, "(01)...(10)..." for GS1 AI data
        ais: Parsed (AI, value) pairs for GS1 AI data
        gs1: True when the payload is GS1 AI data
        check_digit_added: True when a check digit was appended
        error: Reason the value cannot be encoded
    """
    format: str
    payload: Optional[str] = None
    hri: Optional[str] = None
    ais: List[Tuple[str, str]] = field(default_factory=list)
    gs1: bool = False
    check_digit_added: bool = False
    error: Optional[CodeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format,
            "payload": self.payload,
            "hri": self.hri,
            "ais": [list(pair) for pair in self.ais],
            "gs1": self.gs1,
            "check_digit_added": self.check_digit_added,
            "error": self.error.to_dict() if self.error else None,
        }


def normalize_format(name: Optional[str]) -> str:
    key = (name or "CODE128").strip().upper().replace("-", "_").replace(" ", "_")
    return FORMAT_ALIASES.get(key, key)


def normalize_error_level(level: Optional[str]) -> str:
    level = (level or "M").strip().upper()
    return level if level in QR_ERROR_LEVELS else "M"


def element_format(element: BoundElement) -> str:
    if isinstance(element, QrElement):
        return "QR"
    if isinstance(element, BarcodeElement):
        return normalize_format(element.barcode_format)
    return "CODE128"


def _failed(fmt: str, code: ErrorCode, message: str, **meta: Any) -> CodeValue:
    return CodeValue(format=fmt, error=CodeError(code, message, meta))


def _from_validation(fmt: str, result: ValidationResult) -> CodeValue:
    return _failed(fmt, result.error_code, result.errors[0], **result.meta)


def _retail_key(
    fmt: str,
    value: str,
    mode: Gs1Mode,
    length: int,
    validator: Callable[[str], ValidationResult],
    label: str,
) -> CodeValue:
    if mode is Gs1Mode.OFF:
        return CodeValue(format=fmt, payload=value, hri=value)

    if not (value.isdigit() and value.isascii()):
        return _failed(fmt, ErrorCode.NOT_DIGITS, f"{label} must contain digits only")

    if len(value) == length - 1:
        if mode is Gs1Mode.COMPLETE:
            payload = append_check_digit(value)
            return CodeValue(format=fmt, payload=payload, hri=payload, check_digit_added=True)
        return _failed(
            fmt,
            ErrorCode.WRONG_LENGTH,
            f"{label} must be {length} digits including the check digit, got {len(value)}",
        )

    if len(value) != length:
        return _failed(
            fmt,
            ErrorCode.WRONG_LENGTH,
            f"{label} requires {length - 1} or {length} digits, got {len(value)}",
        )

    result = validator(value)
    if not result.valid:
        return _from_validation(fmt, result)
    return CodeValue(format=fmt, payload=value, hri=value)


def _complete_ai_check_digits(pairs: List[Tuple[str, str]]) -> Tuple[List[Tuple[str, str]], bool]:
    """Append missing check digits to fixed-length keys such as (01) and (00)."""
    completed = []
    added = False
    for ai, value in pairs:
        entry = DEFAULT_AI_TABLE.get(ai)
        fixed = entry.fixed_length if entry else None
        if (
            fixed is not None
            and entry.check_digit_span == (0, fixed)
            and len(value) == fixed - 1
            and value.isdigit()
        ):
            value = append_check_digit(value)
            added = True
        completed.append((ai, value))
    return completed, added


def _gs1_ai_data(fmt: str, value: str, mode: Gs1Mode) -> CodeValue:
    parsed = parse_gs1(value)

    if mode is Gs1Mode.OFF:
        if parsed.ok and parsed.elements:
            pairs = parsed.pairs()
            return CodeValue(format=fmt, payload=value, hri=format_hri(pairs), ais=pairs, gs1=True)
        return CodeValue(format=fmt, payload=value, hri=value)

    if not parsed.ok:
        error = parsed.error
        meta = {"fragment": error.fragment} if error.fragment else {}
        return _failed(fmt, error.code, error.message, **meta)

    pairs = parsed.pairs()
    added = False
    if mode is Gs1Mode.COMPLETE and is_bracketed(value):
        pairs, added = _complete_ai_check_digits(pairs)

    errors = validate_ai_values(pairs)
    if errors:
        first = errors[0]
        return _failed(fmt, first.code, first.message, ai=first.ai, **first.meta)

    return CodeValue(
        format=fmt,
        payload=compose_gs1_128(pairs),
        hri=format_hri(pairs),
        ais=pairs,
        gs1=True,
        check_digit_added=added,
    )


def _databar_gtin(fmt: str, value: str, mode: Gs1Mode) -> CodeValue:
    if is_bracketed(value):
        parsed = parse_gs1(value)
        gtin = parsed.get("01") if parsed.ok else None
        if gtin is None or len(parsed.elements) != 1:
            return _failed(fmt, ErrorCode.INVALID_AI_VALUE, "GS1 DataBar encodes a single (01) GTIN")
        value = gtin

    key = _retail_key(fmt, value, mode, 14, validate_itf14, "GS1 DataBar GTIN")
    if key.ok and mode is not Gs1Mode.OFF:
        key.ais = [("01", key.payload)]
        key.hri = format_hri(key.ais)
        key.gs1 = True
    return key


def _is_flagged_gs1(value: str) -> bool:
    return is_bracketed(value) or value.startswith(GS1_MARKERS)


def _pattern_rule(fmt: str, value: str, pattern: re.Pattern, message: str) -> CodeValue:
    if not pattern.match(value):
        return _failed(fmt, ErrorCode.INVALID_CHARACTERS, message)
    return CodeValue(format=fmt, payload=value, hri=value)


def _digit_rule(fmt: str, value: str, lengths: Optional[Tuple[int, ...]], label: str) -> CodeValue:
    if not (value.isdigit() and value.isascii()):
        return _failed(fmt, ErrorCode.NOT_DIGITS, f"{label} must contain digits only")
    if lengths and len(value) not in lengths:
        allowed = ", ".join(str(n) for n in lengths)
        return _failed(fmt, ErrorCode.WRONG_LENGTH, f"{label} requires {allowed} digits, got {len(value)}")
    return CodeValue(format=fmt, payload=value, hri=value)


def build_code_value(
    element: BoundElement,
    value: Optional[str],
    mode: Gs1Mode = Gs1Mode.COMPLETE,
) -> CodeValue:
    """
    Build the encoder payload for a barcode or QR element.

    Args:
        element: The barcode or QR element (gives the symbology)
        value: The resolved element value
        mode: Check digit policy for GS1 formats

    Returns:
        CodeValue with ``payload`` set, or ``error`` describing the problem
    """
    return build_format_value(element_format(element), value, mode)


def build_format_value(fmt: str, value: Optional[str], mode: Gs1Mode = Gs1Mode.COMPLETE) -> CodeValue:
    """Same as ``build_code_value`` for a bare symbology name."""
    fmt = normalize_format(fmt)
    mode = Gs1Mode(mode)
    value = value if value is not None else ""

    if fmt not in SUPPORTED_FORMATS:
        return _failed(fmt, ErrorCode.UNSUPPORTED_FORMAT, f"Unsupported barcode format: {fmt}")
    if value == "":
        return _failed(fmt, ErrorCode.EMPTY_INPUT, "No data to encode")

    if fmt == "EAN13":
        return _retail_key(fmt, value, mode, 13, validate_ean13, "EAN-13")
    if fmt == "EAN8":
        return _retail_key(fmt, value, mode, 8, validate_ean8, "EAN-8")
    if fmt == "UPC":
        return _retail_key(fmt, value, mode, 12, validate_upc, "UPC-A")
    if fmt == "ITF14":
        return _retail_key(fmt, value, mode, 14, validate_itf14, "ITF-14")
    if fmt in GS1_AI_FORMATS:
        return _gs1_ai_data(fmt, value, mode)
    if fmt in ("GS1_DATABAR", "GS1_DATABAR_STACKED"):
        return _databar_gtin(fmt, value, mode)
    if fmt == "DATAMATRIX" and _is_flagged_gs1(value):
        return _gs1_ai_data(fmt, value, mode)

    if fmt in ("CODE39", "CODE93"):
        return _pattern_rule(fmt, value, ALPHANUMERIC_39, f"{fmt} allows A-Z, 0-9, space and - . $ / + %")
    if fmt == "CODABAR":
        return _pattern_rule(fmt, value, CODABAR_PATTERN, "Codabar requires digits between A-D start/stop characters")
    if fmt == "ROYALMAIL":
        return _pattern_rule(fmt, value, ROYALMAIL_PATTERN, "Royal Mail allows A-Z and 0-9 only")
    if fmt == "MSI":
        return _digit_rule(fmt, value, None, "MSI")
    if fmt == "POSTNET":
        return _digit_rule(fmt, value, (5, 9, 11), "POSTNET")
    if fmt == "PLANET":
        return _digit_rule(fmt, value, (11, 13), "PLANET")

    return CodeValue(format=fmt, payload=value, hri=value)
