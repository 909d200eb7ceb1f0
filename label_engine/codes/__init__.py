"""Code value building and preview encoding."""

from .builder import (
    CodeError,
    CodeValue,
    SUPPORTED_FORMATS,
    build_code_value,
    build_format_value,
    normalize_format,
    normalize_error_level,
)
from .encoders import PreviewResult, generate_codes

__all__ = [
    "CodeError",
    "CodeValue",
    "SUPPORTED_FORMATS",
    "build_code_value",
    "build_format_value",
    "normalize_format",
    "normalize_error_level",
    "PreviewResult",
    "generate_codes",
]
