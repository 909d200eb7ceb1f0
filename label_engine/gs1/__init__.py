"""
GS1 codec: check digits, Application Identifier table, GS1-128 parsing
and composition.
"""

from .checksum import (
    ErrorCode,
    ValidationResult,
    calculate_check_digit,
    append_check_digit,
    verify_check_digit,
    validate_ean13,
    validate_ean8,
    validate_upc,
    validate_itf14,
    validate_sscc18,
    validate_gtin,
)
from .ai_table import AIEntry, AITable, DEFAULT_AI_TABLE, load_ai_table
from .parser import (
    GS,
    AIElement,
    Gs1Error,
    Gs1ParseResult,
    parse_gs1_128,
    parse_bracketed,
    parse_gs1,
    looks_like_gs1,
    is_bracketed,
    compose_gs1_128,
    format_hri,
    validate_ai_value,
    validate_ai_values,
)

__all__ = [
    "ErrorCode",
    "ValidationResult",
    "calculate_check_digit",
    "append_check_digit",
    "verify_check_digit",
    "validate_ean13",
    "validate_ean8",
    "validate_upc",
    "validate_itf14",
    "validate_sscc18",
    "validate_gtin",
    "AIEntry",
    "AITable",
    "DEFAULT_AI_TABLE",
    "load_ai_table",
    "GS",
    "AIElement",
    "Gs1Error",
    "Gs1ParseResult",
    "parse_gs1_128",
    "parse_bracketed",
    "parse_gs1",
    "looks_like_gs1",
    "is_bracketed",
    "compose_gs1_128",
    "format_hri",
    "validate_ai_value",
    "validate_ai_values",
]
